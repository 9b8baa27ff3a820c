"""Projects API client"""

from typing import List
from urllib.parse import quote

from wedeploy_cli.constants import LIST_TIMEOUT
from wedeploy_cli.exceptions import APIFault, InvalidProjectIDError
from wedeploy_cli.models.remote import Project, Service
from wedeploy_cli.services.api_client import APIClient

# Reasons meaning the project is already there
ALREADY_EXISTS_REASONS = ("projectAlreadyExists", "invalidDocumentValue")


class ProjectsClient:
    """Service for project operations."""

    def __init__(self, api: APIClient):
        self.api = api

    def list(self, timeout: float = LIST_TIMEOUT) -> List[Project]:
        data = self.api.get("/projects", timeout=timeout) or []
        return [Project.from_dict(p) for p in data]

    def list_with_services(self, timeout: float = LIST_TIMEOUT) -> List[Project]:
        """List projects along with their services."""
        projects = self.list(timeout=timeout)
        for project in projects:
            project.services = self._services(project.project_id, timeout)
        return projects

    def get(self, project_id: str) -> Project:
        _require(project_id)
        return Project.from_dict(self.api.get(f"/projects/{quote(project_id)}") or {})

    def get_with_services(self, project_id: str, timeout: float = LIST_TIMEOUT) -> Project:
        _require(project_id)
        project = Project.from_dict(
            self.api.get(f"/projects/{quote(project_id)}", timeout=timeout) or {}
        )
        project.services = self._services(project_id, timeout)
        return project

    def create(self, project_id: str = "") -> Project:
        """Create a project. An empty id lets the backend pick one."""
        body = {"id": project_id} if project_id else {}
        return Project.from_dict(self.api.post("/projects", json=body) or {})

    def validate_or_create(self, project_id: str) -> bool:
        """
        Create the project unless it already exists.

        Returns:
            True if the project was created, False if it already existed
        """
        _require(project_id)
        try:
            self.create(project_id)
        except APIFault as e:
            if any(e.has(reason) for reason in ALREADY_EXISTS_REASONS):
                return False
            raise
        return True

    def delete(self, project_id: str) -> None:
        _require(project_id)
        self.api.delete(f"/projects/{quote(project_id)}")

    def unlink(self, project_id: str) -> None:
        """Linked projects are removed like any other project."""
        self.delete(project_id)

    def restart(self, project_id: str) -> None:
        _require(project_id)
        self.api.post("/restart/project", params={"projectId": project_id})

    def _services(self, project_id: str, timeout: float):
        data = self.api.get(
            f"/projects/{quote(project_id)}/services", timeout=timeout
        ) or []
        return [Service.from_dict(s) for s in data]


def _require(project_id: str) -> None:
    if not project_id:
        raise InvalidProjectIDError(project_id)
