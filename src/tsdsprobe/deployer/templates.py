"""Template artifacts rendered from a schema descriptor."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from tsdsprobe.core.identity import RunIdentity
from tsdsprobe.core.models import SchemaDescriptor


@dataclass
class ComponentTemplateArtifact:
    """Compiled component template."""

    name: str
    mappings: dict[str, Any] = field(default_factory=dict)
    settings: dict[str, Any] = field(default_factory=dict)

    def to_body(self) -> dict[str, Any]:
        template: dict[str, Any] = {}
        if self.mappings:
            template["mappings"] = self.mappings
        if self.settings:
            template["settings"] = self.settings
        return {"template": template}


@dataclass
class IndexTemplateArtifact:
    """Compiled composable index template."""

    name: str
    index_patterns: list[str]
    composed_of: list[str]
    data_stream: bool = True

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "index_patterns": list(self.index_patterns),
            "composed_of": list(self.composed_of),
        }
        if self.data_stream:
            body["data_stream"] = {}
        return body


@dataclass
class ProvisionPlan:
    """Everything the provisioner creates for one run, in creation order."""

    identity: RunIdentity
    component_mapping: ComponentTemplateArtifact
    component_settings: ComponentTemplateArtifact
    index_template: IndexTemplateArtifact
    data_stream: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "token": self.identity.token,
            "component_mapping": {
                "name": self.component_mapping.name,
                "body": self.component_mapping.to_body(),
            },
            "component_settings": {
                "name": self.component_settings.name,
                "body": self.component_settings.to_body(),
            },
            "index_template": {
                "name": self.index_template.name,
                "body": self.index_template.to_body(),
            },
            "data_stream": {"name": self.data_stream},
        }


def build_plan(identity: RunIdentity, schema: SchemaDescriptor) -> ProvisionPlan:
    """Render the artifacts for ``identity`` from ``schema``."""
    mapping = ComponentTemplateArtifact(
        name=identity.component_mapping_name,
        mappings=schema.mapping.to_mappings(),
    )
    settings = ComponentTemplateArtifact(
        name=identity.component_setting_name,
        settings=schema.settings.to_settings(),
    )
    index_template = IndexTemplateArtifact(
        name=identity.template_name,
        index_patterns=[identity.datastream_name],
        composed_of=[mapping.name, settings.name],
        data_stream=True,
    )
    return ProvisionPlan(
        identity=identity,
        component_mapping=mapping,
        component_settings=settings,
        index_template=index_template,
        data_stream=identity.datastream_name,
    )
