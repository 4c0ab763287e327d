"""Round-trip runner for tsdsprobe cases."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from tsdsprobe.core.errors import ProbeError, ProvisionError, QueryError, WriteError
from tsdsprobe.core.identity import RunIdentity, check_prefix, new_run_identity
from tsdsprobe.core.models import Document, SchemaDescriptor
from tsdsprobe.deployer.client import StoreClient
from tsdsprobe.deployer.provisioner import SchemaProvisioner
from tsdsprobe.testing.verifier import Verifier
from tsdsprobe.testing.writer import DocumentWriter

logger = logging.getLogger(__name__)


@dataclass
class RoundTripCase:
    """Documents written to a freshly provisioned datastream and read back."""

    name: str
    documents: list[Document] = field(default_factory=list)


def default_cases() -> list[RoundTripCase]:
    """List-of-strings cases: a two-element and a single-element array."""
    return [
        RoundTripCase(
            name="list_of_strings",
            documents=[Document(code="1", value=1.0, tags=["one_tag", "second_tag"])],
        ),
        RoundTripCase(
            name="list_of_strings_with_a_single_element",
            documents=[Document(code="2", value=2.0, tags=["one_tag"])],
        ),
    ]


class RoundTripRunner:
    """Runs each case as provision, write, refresh, verify and teardown.

    Each case gets its own run identity so cases never share store state.
    """

    def __init__(
        self,
        client: StoreClient,
        schema: Optional[SchemaDescriptor] = None,
        keep_resources: bool = False,
        index_prefix: Optional[str] = None,
    ) -> None:
        self.client = client
        self.provisioner = SchemaProvisioner(client, schema)
        self.writer = DocumentWriter(client)
        self.verifier = Verifier(client)
        self.keep_resources = keep_resources
        self.index_prefix = check_prefix(index_prefix) if index_prefix else index_prefix

    def run(self, cases: list[RoundTripCase]) -> list[dict[str, Any]]:
        """Run a list of cases."""
        return [self.run_case(case) for case in cases]

    def run_case(self, case: RoundTripCase) -> dict[str, Any]:
        identity = new_run_identity(self.index_prefix)
        result: dict[str, Any] = {
            "name": case.name,
            "status": "failed",
            "datastream": identity.datastream_name,
            "errors": [],
        }

        try:
            self.provisioner.provision(identity)
            for doc in case.documents:
                self.writer.write(identity.datastream_name, doc)
            self.writer.refresh(identity.datastream_name)

            verification = self.verifier.verify(identity.datastream_name, case.documents)
            result["errors"].extend(verification.errors)
            result["status"] = "passed" if verification.passed else "failed"
        except ProvisionError as e:
            result["errors"].append(f"provision/{e.step}: {e.detail}")
        except WriteError as e:
            result["errors"].append(f"{e.operation}: {e.detail}")
        except QueryError as e:
            result["errors"].append(f"query: {e.detail}")
        finally:
            if not self.keep_resources:
                self._teardown(identity, result)

        return result

    def _teardown(self, identity: RunIdentity, result: dict[str, Any]) -> None:
        try:
            self.provisioner.teardown(identity)
        except ProbeError as e:
            logger.warning(f"Cleanup of '{identity.token}' failed: {e}")
            result.setdefault("warnings", []).append(str(e))
