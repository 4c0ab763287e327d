"""Schema provisioning for time-series datastreams."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from tsdsprobe.core.errors import ProvisionError
from tsdsprobe.core.identity import RunIdentity
from tsdsprobe.core.models import SchemaDescriptor, list_field_schema
from tsdsprobe.deployer.client import StoreClient, StoreResult
from tsdsprobe.deployer.templates import ProvisionPlan, build_plan

logger = logging.getLogger(__name__)

STEP_COMPONENT_MAPPING = "component_mapping"
STEP_COMPONENT_SETTINGS = "component_settings"
STEP_INDEX_TEMPLATE = "index_template"
STEP_DATA_STREAM = "data_stream"


@dataclass
class ProvisionState:
    """Which resources of a run currently exist in the store."""

    component_mapping: bool
    component_settings: bool
    index_template: bool
    data_stream: bool

    @property
    def complete(self) -> bool:
        return all(
            [self.component_mapping, self.component_settings, self.index_template, self.data_stream]
        )

    @property
    def empty(self) -> bool:
        return not any(
            [self.component_mapping, self.component_settings, self.index_template, self.data_stream]
        )


class SchemaProvisioner:
    """Creates component templates, an index template and a datastream.

    Steps run in order and stop at the first failure. Nothing is rolled back:
    every run lives under its own identity, so leftovers never collide.
    """

    def __init__(self, client: StoreClient, schema: Optional[SchemaDescriptor] = None) -> None:
        self.client = client
        self.schema = schema or list_field_schema()

    def plan(self, identity: RunIdentity) -> ProvisionPlan:
        """Build the artifacts for ``identity`` without touching the store."""
        return build_plan(identity, self.schema)

    def provision(self, identity: RunIdentity) -> ProvisionPlan:
        """Create every resource for ``identity``.

        Raises:
            ProvisionError: naming the first step that failed.
        """
        plan = self.plan(identity)

        self._check(
            STEP_COMPONENT_MAPPING,
            self.client.put_component_template(
                plan.component_mapping.name, plan.component_mapping.to_body()
            ),
        )
        self._check(
            STEP_COMPONENT_SETTINGS,
            self.client.put_component_template(
                plan.component_settings.name, plan.component_settings.to_body()
            ),
        )
        self._check(
            STEP_INDEX_TEMPLATE,
            self.client.put_index_template(
                plan.index_template.name, plan.index_template.to_body()
            ),
        )
        self._check(STEP_DATA_STREAM, self.client.create_data_stream(plan.data_stream))

        logger.info(f"Provisioned datastream '{plan.data_stream}'")
        return plan

    def status(self, identity: RunIdentity) -> ProvisionState:
        """Report which resources of ``identity`` exist."""
        return ProvisionState(
            component_mapping=self._exists(
                self.client.get_component_template(identity.component_mapping_name)
            ),
            component_settings=self._exists(
                self.client.get_component_template(identity.component_setting_name)
            ),
            index_template=self._exists(self.client.get_index_template(identity.template_name)),
            data_stream=self._exists(self.client.get_data_stream(identity.datastream_name)),
        )

    def teardown(self, identity: RunIdentity) -> list[str]:
        """Delete the resources of ``identity`` in reverse creation order.

        Missing resources are skipped. Returns the names actually deleted.
        """
        deletions = [
            (STEP_DATA_STREAM, identity.datastream_name, self.client.delete_data_stream),
            (STEP_INDEX_TEMPLATE, identity.template_name, self.client.delete_index_template),
            (
                STEP_COMPONENT_SETTINGS,
                identity.component_setting_name,
                self.client.delete_component_template,
            ),
            (
                STEP_COMPONENT_MAPPING,
                identity.component_mapping_name,
                self.client.delete_component_template,
            ),
        ]

        deleted = []
        for step, name, delete in deletions:
            result = delete(name)
            if result.not_found:
                continue
            self._check(f"teardown:{step}", result)
            deleted.append(name)

        logger.info(f"Removed {len(deleted)} resource(s) of run '{identity.token}'")
        return deleted

    def _check(self, step: str, result: StoreResult) -> None:
        if not result.ok:
            raise ProvisionError(step, result.detail(), result.status_code)
        logger.info(f"Step '{step}' succeeded")

    def _exists(self, result: StoreResult) -> bool:
        if result.ok:
            return True
        if result.not_found:
            return False
        raise ProvisionError("status", result.detail(), result.status_code)
