"""
Activity Models

Remote event records describing build/deploy lifecycle and project changes.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional


class ActivityType(Enum):
    """Closed set of activity types known to the CLI."""

    BUILD_PENDING = "BUILD_PENDING"
    BUILD_STARTED = "BUILD_STARTED"
    BUILD_FAILED = "BUILD_FAILED"
    BUILD_PUSHED = "BUILD_PUSHED"
    BUILD_SUCCEEDED = "BUILD_SUCCEEDED"
    COLLABORATOR_DELETED = "COLLABORATOR_DELETED"
    COLLABORATOR_INVITATION_ACCEPTED = "COLLABORATOR_INVITATION_ACCEPTED"
    COLLABORATOR_INVITATION_DELETED = "COLLABORATOR_INVITATION_DELETED"
    COLLABORATOR_INVITATION_SENT = "COLLABORATOR_INVITATION_SENT"
    COLLABORATOR_LEFT = "COLLABORATOR_LEFT"
    CUSTOM_DOMAIN_UPDATED = "CUSTOM_DOMAIN_UPDATED"
    DEPLOY_PENDING = "DEPLOY_PENDING"
    DEPLOY_CREATED = "DEPLOY_CREATED"
    DEPLOY_STARTED = "DEPLOY_STARTED"
    DEPLOY_FAILED = "DEPLOY_FAILED"
    DEPLOY_CANCELED = "DEPLOY_CANCELED"
    DEPLOY_TIMEOUT = "DEPLOY_TIMEOUT"
    DEPLOY_ROLLBACK = "DEPLOY_ROLLBACK"
    DEPLOY_SUCCEEDED = "DEPLOY_SUCCEEDED"
    GITHUB_PROVIDER_CONNECTED = "GITHUB_PROVIDER_CONNECTED"
    GITHUB_PROVIDER_DISCONNECTED = "GITHUB_PROVIDER_DISCONNECTED"
    GITHUB_REPOSITORY_CONNECTED = "GITHUB_REPOSITORY_CONNECTED"
    GITHUB_REPOSITORY_DISCONNECTED = "GITHUB_REPOSITORY_DISCONNECTED"
    HOME_SERVICE_UPDATED = "HOME_SERVICE_UPDATED"
    PROJECT_CREATED = "PROJECT_CREATED"
    PROJECT_RESTARTED = "PROJECT_RESTARTED"
    PROJECT_TRANSFERRED = "PROJECT_TRANSFERRED"
    SERVICE_CREATED = "SERVICE_CREATED"
    SERVICE_DELETED = "SERVICE_DELETED"
    SERVICE_ENVIRONMENT_VARIABLES_UPDATED = "SERVICE_ENVIRONMENT_VARIABLES_UPDATED"
    SERVICE_RESTARTED = "SERVICE_RESTARTED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: str) -> "ActivityType":
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_build(self) -> bool:
        return self.value.startswith("BUILD_")

    @property
    def is_deploy(self) -> bool:
        return self.value.startswith("DEPLOY_")


# Types that drive the deploy watcher
DEPLOYMENT_TYPES = frozenset(
    {
        ActivityType.BUILD_PENDING,
        ActivityType.BUILD_STARTED,
        ActivityType.BUILD_FAILED,
        ActivityType.BUILD_SUCCEEDED,
        ActivityType.DEPLOY_PENDING,
        ActivityType.DEPLOY_STARTED,
        ActivityType.DEPLOY_FAILED,
        ActivityType.DEPLOY_SUCCEEDED,
    }
)

# Types recorded as the watched service state
STATE_DEFINING_TYPES = frozenset(
    {
        ActivityType.BUILD_SUCCEEDED,
        ActivityType.BUILD_FAILED,
        ActivityType.DEPLOY_FAILED,
        ActivityType.DEPLOY_SUCCEEDED,
    }
)

FINAL_TYPES = frozenset(
    {
        ActivityType.BUILD_FAILED,
        ActivityType.DEPLOY_FAILED,
        ActivityType.DEPLOY_SUCCEEDED,
    }
)

FRIENDLY_ACTIVITIES: Dict[ActivityType, str] = {
    ActivityType.BUILD_FAILED: "Build failed",
    ActivityType.BUILD_PENDING: "Build pending",
    ActivityType.BUILD_STARTED: "Build started",
    ActivityType.BUILD_PUSHED: "Build pushed",
    ActivityType.BUILD_SUCCEEDED: "Build succeeded",
    ActivityType.DEPLOY_FAILED: "Deployment failed",
    ActivityType.DEPLOY_CANCELED: "Deployment canceled",
    ActivityType.DEPLOY_TIMEOUT: "Deployment timed out",
    ActivityType.DEPLOY_ROLLBACK: "Deployment rollback",
    ActivityType.DEPLOY_CREATED: "Deployment created",
    ActivityType.DEPLOY_PENDING: "Deployment pending",
    ActivityType.DEPLOY_SUCCEEDED: "Deployment succeeded",
    ActivityType.DEPLOY_STARTED: "Deployment started",
}

ACTIVITY_TEMPLATES: Dict[ActivityType, str] = {
    ActivityType.BUILD_FAILED: "{service} build failed on project {project}",
    ActivityType.BUILD_PENDING: "{service} build pending on project {project}",
    ActivityType.BUILD_STARTED: "{service} build started on project {project}",
    ActivityType.BUILD_PUSHED: "{service} build pushed on project {project}",
    ActivityType.BUILD_SUCCEEDED: "{service} build succeeded on project {project}",
    ActivityType.COLLABORATOR_DELETED: "{project} project collaborator deleted",
    ActivityType.COLLABORATOR_INVITATION_ACCEPTED: "{project} project collaborator invitation accepted",
    ActivityType.COLLABORATOR_INVITATION_DELETED: "{project} project collaborator invitation deleted",
    ActivityType.COLLABORATOR_INVITATION_SENT: "{project} project collaborator invitation sent",
    ActivityType.COLLABORATOR_LEFT: "{project} project collaborator left",
    ActivityType.CUSTOM_DOMAIN_UPDATED: "{service} custom domain updated on project {project}",
    ActivityType.DEPLOY_FAILED: "{service} deployment failed on project {project}",
    ActivityType.DEPLOY_CANCELED: "{service} deployment canceled on project {project}",
    ActivityType.DEPLOY_TIMEOUT: "{service} deployment timed out on project {project}",
    ActivityType.DEPLOY_ROLLBACK: "{service} deployment rollback on project {project}",
    ActivityType.DEPLOY_PENDING: "{service} deployment pending on project {project}",
    ActivityType.DEPLOY_CREATED: "{service} deployment created on project {project}",
    ActivityType.DEPLOY_STARTED: "{service} deployment started on project {project}",
    ActivityType.DEPLOY_SUCCEEDED: "{service} deployment succeeded on project {project}",
    ActivityType.GITHUB_PROVIDER_CONNECTED: "GitHub provider connected",
    ActivityType.GITHUB_PROVIDER_DISCONNECTED: "GitHub provider disconnected",
    ActivityType.GITHUB_REPOSITORY_CONNECTED: "GitHub repository connected",
    ActivityType.GITHUB_REPOSITORY_DISCONNECTED: "GitHub repository disconnected",
    ActivityType.PROJECT_CREATED: "{project} project created",
    ActivityType.PROJECT_RESTARTED: "{project} project restarted",
    ActivityType.PROJECT_TRANSFERRED: "{project} project transferred",
    ActivityType.SERVICE_CREATED: "{service} service created on project {project}",
    ActivityType.SERVICE_DELETED: "{service} service deleted on project {project}",
    ActivityType.SERVICE_ENVIRONMENT_VARIABLES_UPDATED: "{service} service environment variables updated on project {project}",
    ActivityType.SERVICE_RESTARTED: "{service} service restarted on project {project}",
}


@dataclass(frozen=True)
class Activity:
    """Single activity record as returned by the API."""

    id: str
    created_at: int
    type: ActivityType
    project_id: str = ""
    project_uid: str = ""
    commit: str = ""
    metadata: Dict[str, str] = field(default_factory=dict)
    raw_type: str = ""

    @property
    def service_id(self) -> Optional[str]:
        return self.metadata.get("serviceId") or None

    @property
    def group_uid(self) -> str:
        return self.metadata.get("groupUid", "")

    @property
    def type_name(self) -> str:
        """Server-side type string (kept for types unknown to this client)."""
        return self.raw_type or self.type.value

    def message(self) -> str:
        """Human readable description of the activity."""
        template = ACTIVITY_TEMPLATES.get(self.type)
        if template is None:
            return self.type_name
        return template.format(service=self.service_id or "", project=self.project_id)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["type"] = self.type_name
        data.pop("raw_type")
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Activity":
        raw_type = data.get("type", "")
        metadata = {
            key: "" if value is None else str(value)
            for key, value in (data.get("metadata") or {}).items()
        }
        return cls(
            id=data.get("id", ""),
            created_at=int(data.get("createdAt") or 0),
            type=ActivityType.parse(raw_type),
            project_id=data.get("projectId", ""),
            project_uid=data.get("projectUid", ""),
            commit=data.get("commit", ""),
            metadata=metadata,
            raw_type=raw_type,
        )


class Activities:
    """Activities in server order (newest first)."""

    def __init__(self, items: Optional[List[Activity]] = None):
        self.items: List[Activity] = list(items or [])

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index):
        return self.items[index]

    def __eq__(self, other) -> bool:
        if not isinstance(other, Activities):
            return NotImplemented
        return self.items == other.items

    def reverse(self) -> "Activities":
        """Return a new collection in exactly the opposite order."""
        return Activities(self.items[::-1])


@dataclass
class ActivityFilter:
    """Query filter for listing activities."""

    commit: str = ""
    group_uid: str = ""
    limit: int = 0
    type: str = ""

    def to_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        if self.commit:
            params["commit"] = self.commit
        if self.group_uid:
            params["groupUid"] = self.group_uid
        if self.limit:
            params["limit"] = self.limit
        if self.type:
            params["type"] = self.type
        return params
