"""
Provisioning - builds tenant graphs from blueprints.

Provides:
- Blueprints: pydantic descriptions of a tenant graph
- StepRunner / FailurePolicy: per-step failure handling with savepoints
- ProvisioningOrchestrator: ordered, all-or-nothing creation
"""

from .blueprints import (
    ItemBlueprint,
    MenuBlueprint,
    PlatformAdminBlueprint,
    PriceBlueprint,
    RestaurantBlueprint,
    SectionBlueprint,
    TenantBlueprint,
    UserBlueprint,
)
from .orchestrator import ProvisioningOrchestrator
from .result import ProvisioningResult
from .steps import FailurePolicy, ProvisioningStep, StepRunner

__all__ = [
    # Blueprints
    "TenantBlueprint",
    "PlatformAdminBlueprint",
    "UserBlueprint",
    "RestaurantBlueprint",
    "MenuBlueprint",
    "SectionBlueprint",
    "ItemBlueprint",
    "PriceBlueprint",
    # Execution
    "ProvisioningOrchestrator",
    "ProvisioningResult",
    "ProvisioningStep",
    "StepRunner",
    "FailurePolicy",
]
