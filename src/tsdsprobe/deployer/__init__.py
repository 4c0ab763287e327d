"""Store access and schema provisioning for tsdsprobe."""

from tsdsprobe.deployer.client import StoreClient, StoreResult
from tsdsprobe.deployer.provisioner import ProvisionState, SchemaProvisioner
from tsdsprobe.deployer.templates import ProvisionPlan, build_plan

__all__ = [
    "StoreClient",
    "StoreResult",
    "SchemaProvisioner",
    "ProvisionState",
    "ProvisionPlan",
    "build_plan",
]
