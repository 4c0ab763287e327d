"""Errors raised by tsdsprobe."""

from __future__ import annotations

from typing import Optional


class ProbeError(Exception):
    """Base class for errors surfaced while running a round-trip check."""

    pass


class ConfigError(ProbeError):
    """Error while loading configuration."""

    pass


class EnvVarError(ConfigError):
    """Error when environment variable is not set."""

    pass


class ProvisionError(ProbeError):
    """Schema setup failed at a named step."""

    def __init__(self, step: str, detail: str, status_code: Optional[int] = None) -> None:
        self.step = step
        self.detail = detail
        self.status_code = status_code
        super().__init__(f"Provisioning step '{step}' failed: {detail}")


class WriteError(ProbeError):
    """Document submission or refresh failed."""

    def __init__(self, operation: str, detail: str, status_code: Optional[int] = None) -> None:
        self.operation = operation
        self.detail = detail
        self.status_code = status_code
        super().__init__(f"{operation} failed: {detail}")


class QueryError(ProbeError):
    """Search failed or returned malformed data."""

    def __init__(self, detail: str, status_code: Optional[int] = None) -> None:
        self.detail = detail
        self.status_code = status_code
        super().__init__(f"Search failed: {detail}")
