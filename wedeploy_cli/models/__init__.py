"""
WeDeploy CLI Domain Models

Clean dataclass-based models for type-safe data handling.
"""

from .results import (
    ExecutionResult,
    ServiceError,
    ServiceErrors,
    LinkErrors,
    FinalStates,
)
from .activity import (
    ActivityType,
    Activity,
    Activities,
    ActivityFilter,
    DEPLOYMENT_TYPES,
    STATE_DEFINING_TYPES,
    FINAL_TYPES,
)
from .descriptors import (
    Hooks,
    ServiceDescriptor,
    ProjectDescriptor,
)
from .remote import (
    Project,
    Service,
    EnvironmentVariable,
    CatalogItem,
)

__all__ = [
    "ExecutionResult",
    "ServiceError",
    "ServiceErrors",
    "LinkErrors",
    "FinalStates",
    "ActivityType",
    "Activity",
    "Activities",
    "ActivityFilter",
    "DEPLOYMENT_TYPES",
    "STATE_DEFINING_TYPES",
    "FINAL_TYPES",
    "Hooks",
    "ServiceDescriptor",
    "ProjectDescriptor",
    "Project",
    "Service",
    "EnvironmentVariable",
    "CatalogItem",
]
