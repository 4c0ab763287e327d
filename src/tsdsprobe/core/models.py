"""Pydantic models for documents and time-series schemas."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

TIMESTAMP_FIELD = "@timestamp"
NANOS_DATE_FORMAT = "strict_date_optional_time_nanos"

# ============================================================================
# Enums
# ============================================================================


class FieldType(str, Enum):
    """Field types understood by the store's mapping API."""

    KEYWORD = "keyword"
    DOUBLE = "double"
    LONG = "long"
    DATE = "date"
    DATE_NANOS = "date_nanos"
    WILDCARD = "wildcard"
    TEXT = "text"


class TimeSeriesRole(str, Enum):
    """Role a field plays in a time-series index."""

    NONE = "none"
    DIMENSION = "dimension"
    METRIC = "metric"


class MetricType(str, Enum):
    """Time-series metric kinds."""

    GAUGE = "gauge"
    COUNTER = "counter"


class IndexMode(str, Enum):
    """Index modes."""

    STANDARD = "standard"
    TIME_SERIES = "time_series"


# ============================================================================
# Schema Descriptor
# ============================================================================


class FieldSpec(BaseModel):
    """A single field declaration: name, type and time-series role."""

    name: str
    type: FieldType
    role: TimeSeriesRole = TimeSeriesRole.NONE
    metric_type: Optional[MetricType] = None
    format: Optional[str] = None

    @model_validator(mode="after")
    def check_metric_type(self) -> "FieldSpec":
        if self.role == TimeSeriesRole.METRIC and self.metric_type is None:
            raise ValueError(f"Metric field '{self.name}' requires a metric_type")
        if self.role != TimeSeriesRole.METRIC and self.metric_type is not None:
            raise ValueError(f"Field '{self.name}' is not a metric but sets metric_type")
        return self

    def to_property(self) -> dict[str, Any]:
        prop: dict[str, Any] = {"type": self.type.value}
        if self.role == TimeSeriesRole.DIMENSION:
            prop["time_series_dimension"] = True
        elif self.role == TimeSeriesRole.METRIC:
            prop["time_series_metric"] = self.metric_type.value
        if self.format:
            prop["format"] = self.format
        return prop


class MappingSpec(BaseModel):
    """Field declarations of a component mapping template."""

    properties: list[FieldSpec]
    dynamic: bool = True

    @field_validator("properties")
    @classmethod
    def check_unique_names(cls, v: list[FieldSpec]) -> list[FieldSpec]:
        names = [f.name for f in v]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate field names: {', '.join(duplicates)}")
        return v

    def dimension_names(self) -> list[str]:
        return [f.name for f in self.properties if f.role == TimeSeriesRole.DIMENSION]

    def to_mappings(self) -> dict[str, Any]:
        return {
            "dynamic": self.dynamic,
            "properties": {f.name: f.to_property() for f in self.properties},
        }


class SettingsSpec(BaseModel):
    """Index settings of a component settings template."""

    codec: str = "best_compression"
    number_of_shards: int = Field(default=3, ge=1)
    index_mode: IndexMode = IndexMode.TIME_SERIES
    routing_path: list[str] = Field(default_factory=lambda: ["code"])

    def to_settings(self) -> dict[str, Any]:
        index: dict[str, Any] = {
            "codec": self.codec,
            "number_of_shards": self.number_of_shards,
            "mode": self.index_mode.value,
        }
        if self.routing_path:
            index["routing_path"] = list(self.routing_path)
        return {"index": index}


class SchemaDescriptor(BaseModel):
    """Mapping and settings pair provisioned for one run."""

    mapping: MappingSpec
    settings: SettingsSpec = Field(default_factory=SettingsSpec)

    @model_validator(mode="after")
    def check_routing_path(self) -> "SchemaDescriptor":
        if self.settings.index_mode != IndexMode.TIME_SERIES:
            return self
        if not self.settings.routing_path:
            raise ValueError("time_series mode requires a non-empty routing_path")
        dimensions = set(self.mapping.dimension_names())
        unknown = [p for p in self.settings.routing_path if p not in dimensions]
        if unknown:
            raise ValueError(
                f"routing_path entries must be dimension fields: {', '.join(unknown)}"
            )
        return self


def list_field_schema() -> SchemaDescriptor:
    """Schema used by the list-of-strings round-trip checks."""
    return SchemaDescriptor(
        mapping=MappingSpec(
            properties=[
                FieldSpec(name="code", type=FieldType.KEYWORD, role=TimeSeriesRole.DIMENSION),
                FieldSpec(
                    name="value",
                    type=FieldType.DOUBLE,
                    role=TimeSeriesRole.METRIC,
                    metric_type=MetricType.GAUGE,
                ),
                FieldSpec(
                    name=TIMESTAMP_FIELD,
                    type=FieldType.DATE_NANOS,
                    format=NANOS_DATE_FORMAT,
                ),
                FieldSpec(name="tags", type=FieldType.WILDCARD),
            ],
            dynamic=True,
        ),
        settings=SettingsSpec(
            codec="best_compression",
            number_of_shards=3,
            index_mode=IndexMode.TIME_SERIES,
            routing_path=["code"],
        ),
    )


# ============================================================================
# Documents
# ============================================================================


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Document(BaseModel):
    """A measurement carrying a list of string tags."""

    model_config = ConfigDict(populate_by_name=True)

    code: str
    timestamp: datetime = Field(default_factory=_utcnow, alias=TIMESTAMP_FIELD)
    value: float
    tags: list[str] = Field(default_factory=list)

    def to_source(self) -> dict[str, Any]:
        """Render the JSON body sent to the store."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_source(cls, source: dict[str, Any]) -> "Document":
        """Build a document from a search hit's ``_source``."""
        return cls.model_validate(source)
