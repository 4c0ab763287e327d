"""Configuration loading for tsdsprobe."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from tsdsprobe.core.errors import ConfigError, EnvVarError
from tsdsprobe.core.identity import check_prefix

CONFIG_FILE_NAMES = ("tsdsprobe.yml", "tsdsprobe.yaml")

ENV_URL = "TSDSPROBE_URL"
ENV_USERNAME = "TSDSPROBE_USERNAME"
ENV_PASSWORD = "TSDSPROBE_PASSWORD"
ENV_TIMEOUT = "TSDSPROBE_TIMEOUT"
ENV_KEEP_RESOURCES = "TSDSPROBE_KEEP_RESOURCES"

_TRUE_VALUES = {"1", "true", "yes", "on"}


class StoreConfig(BaseModel):
    """Connection settings for the document store."""

    url: str = "http://localhost:9200"
    username: Optional[str] = None
    password: Optional[str] = None
    timeout: float = Field(default=30.0, gt=0)
    verify_certs: bool = True


class ProbeConfig(BaseModel):
    """Top-level tsdsprobe configuration."""

    store: StoreConfig = Field(default_factory=StoreConfig)
    # Leave templates and datastreams in place after a run
    keep_resources: bool = False
    index_prefix: Optional[str] = None

    @field_validator("index_prefix")
    @classmethod
    def check_index_prefix(cls, v: Optional[str]) -> Optional[str]:
        return check_prefix(v) if v else v


class ConfigLoader:
    """Loads configuration from an optional YAML file, .env and the environment."""

    ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")

    def __init__(self, base_path: Optional[Path] = None) -> None:
        self.base_path = (base_path or Path.cwd()).resolve()

    def load(self, config_file: Optional[Path] = None) -> ProbeConfig:
        """Load configuration.

        An explicit ``config_file`` must exist. Without one, ``tsdsprobe.yml``
        is looked up in the base path and defaults are used when absent.
        """
        if config_file is not None:
            config_file = Path(config_file).resolve()
            if not config_file.exists():
                raise ConfigError(f"Config file not found: {config_file}")
            env_dir = config_file.parent
        else:
            config_file = self._find_config_file()
            env_dir = self.base_path

        env_file = env_dir / ".env"
        if env_file.exists():
            load_dotenv(env_file)

        data: dict[str, Any] = {}
        if config_file is not None:
            data = self._load_yaml(config_file)

        missing = self._check_env_vars(data)
        if missing:
            raise EnvVarError(
                f"Environment variable{'s' if len(missing) > 1 else ''} "
                f"not set: {', '.join(sorted(set(missing)))}"
            )
        data = self._resolve_env_vars(data)
        self._apply_env_overrides(data)

        try:
            return ProbeConfig(**data)
        except ValueError as e:
            raise ConfigError(f"Invalid configuration: {e}")

    def _find_config_file(self) -> Optional[Path]:
        for name in CONFIG_FILE_NAMES:
            candidate = self.base_path / name
            if candidate.exists():
                return candidate
        return None

    def _load_yaml(self, path: Path) -> dict[str, Any]:
        try:
            with open(path) as f:
                content = f.read()
            data = yaml.safe_load(content) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"YAML parse error in '{path}': {e}")
        if not isinstance(data, dict):
            raise ConfigError(f"Expected a mapping at the top of '{path}'")
        return data

    def _apply_env_overrides(self, data: dict[str, Any]) -> None:
        store = data.setdefault("store", {}) or {}
        data["store"] = store

        if os.environ.get(ENV_URL):
            store["url"] = os.environ[ENV_URL]
        if os.environ.get(ENV_USERNAME):
            store["username"] = os.environ[ENV_USERNAME]
        if os.environ.get(ENV_PASSWORD):
            store["password"] = os.environ[ENV_PASSWORD]
        if os.environ.get(ENV_TIMEOUT):
            store["timeout"] = os.environ[ENV_TIMEOUT]
        if os.environ.get(ENV_KEEP_RESOURCES):
            data["keep_resources"] = os.environ[ENV_KEEP_RESOURCES].lower() in _TRUE_VALUES

    def _resolve_env_vars(self, value: Any) -> Any:
        """Recursively resolve environment variables in a value."""
        if isinstance(value, str):
            return self.ENV_VAR_PATTERN.sub(lambda m: os.environ[m.group(1)], value)
        elif isinstance(value, dict):
            return {k: self._resolve_env_vars(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [self._resolve_env_vars(v) for v in value]
        return value

    def _check_env_vars(self, value: Any) -> list[str]:
        """Check which environment variables are used but not set."""
        missing = []
        if isinstance(value, str):
            for match in self.ENV_VAR_PATTERN.finditer(value):
                var_name = match.group(1)
                if os.environ.get(var_name) is None:
                    missing.append(var_name)
        elif isinstance(value, dict):
            for v in value.values():
                missing.extend(self._check_env_vars(v))
        elif isinstance(value, list):
            for v in value:
                missing.extend(self._check_env_vars(v))
        return missing


def load_config(config_file: Optional[Path] = None) -> ProbeConfig:
    """Load configuration relative to the current working directory."""
    return ConfigLoader().load(config_file)
