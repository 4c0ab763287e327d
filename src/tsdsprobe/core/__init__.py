"""Core models and utilities for tsdsprobe."""

from tsdsprobe.core.config import ConfigLoader, ProbeConfig, StoreConfig, load_config
from tsdsprobe.core.errors import (
    ConfigError,
    EnvVarError,
    ProbeError,
    ProvisionError,
    QueryError,
    WriteError,
)
from tsdsprobe.core.identity import RunIdentity, new_run_identity
from tsdsprobe.core.models import (
    Document,
    FieldSpec,
    MappingSpec,
    SchemaDescriptor,
    SettingsSpec,
    list_field_schema,
)

__all__ = [
    "ConfigLoader",
    "ProbeConfig",
    "StoreConfig",
    "load_config",
    "ProbeError",
    "ConfigError",
    "EnvVarError",
    "ProvisionError",
    "WriteError",
    "QueryError",
    "RunIdentity",
    "new_run_identity",
    "Document",
    "FieldSpec",
    "MappingSpec",
    "SettingsSpec",
    "SchemaDescriptor",
    "list_field_schema",
]
