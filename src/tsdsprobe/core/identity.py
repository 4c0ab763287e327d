"""Run identities that keep each round-trip check in its own namespace."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Optional

COMPONENT_MAPPING_SUFFIX = "-component-mapping"
COMPONENT_SETTING_SUFFIX = "-component-setting"
TEMPLATE_SUFFIX = "-template"
DATASTREAM_SUFFIX = "-datastream"

# Index and template names may not start with these characters
_FORBIDDEN_LEADING = ("-", "_", "+")
# Nor contain any of these
_FORBIDDEN_CHARS = ("*", "\\", "/", "?", '"', "<", ">", "|", " ", ",", "#", ":")


def check_prefix(prefix: str) -> str:
    """Validate a token prefix against the store's index naming rules."""
    if prefix != prefix.lower() or prefix.startswith(_FORBIDDEN_LEADING):
        raise ValueError(
            f"Invalid prefix '{prefix}': must be lowercase and must not start "
            f"with {', '.join(_FORBIDDEN_LEADING)}"
        )
    bad = sorted({c for c in prefix if c in _FORBIDDEN_CHARS})
    if bad:
        raise ValueError(
            f"Invalid prefix '{prefix}': contains forbidden character(s) "
            f"{' '.join(repr(c) for c in bad)}"
        )
    return prefix


@dataclass(frozen=True)
class RunIdentity:
    """Unique token plus the resource names derived from it."""

    token: str

    @property
    def component_mapping_name(self) -> str:
        return f"{self.token}{COMPONENT_MAPPING_SUFFIX}"

    @property
    def component_setting_name(self) -> str:
        return f"{self.token}{COMPONENT_SETTING_SUFFIX}"

    @property
    def template_name(self) -> str:
        return f"{self.token}{TEMPLATE_SUFFIX}"

    @property
    def datastream_name(self) -> str:
        return f"{self.token}{DATASTREAM_SUFFIX}"

    def names(self) -> dict[str, str]:
        """Return every derived name keyed by resource kind."""
        return {
            "component_mapping": self.component_mapping_name,
            "component_settings": self.component_setting_name,
            "index_template": self.template_name,
            "data_stream": self.datastream_name,
        }


def new_run_identity(prefix: Optional[str] = None) -> RunIdentity:
    """Create a fresh identity backed by a random UUID4.

    Args:
        prefix: Optional lowercase label prepended to the token, handy for
            spotting leftovers of a given suite in the store.
    """
    token = str(uuid.uuid4())
    if prefix:
        token = f"{check_prefix(prefix)}-{token}"
    return RunIdentity(token=token)
