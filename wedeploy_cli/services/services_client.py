"""Services API client"""

from typing import Dict, List, Optional
from urllib.parse import quote

from wedeploy_cli.constants import (
    PACKAGE_SIZE_HEADER,
    PACKAGE_SHA1_HEADER,
    UPLOAD_FIELD,
    UPLOAD_TIMEOUT,
)
from wedeploy_cli.core.packager import Bundle
from wedeploy_cli.exceptions import APIFault, InvalidProjectIDError, InvalidServiceIDError
from wedeploy_cli.models.descriptors import ServiceDescriptor
from wedeploy_cli.models.remote import CatalogItem, EnvironmentVariable, Service
from wedeploy_cli.services.api_client import APIClient

ALREADY_EXISTS_REASONS = ("serviceAlreadyExists", "invalidDocumentValue")


class ServicesClient:
    """Service for service-level operations within a project."""

    def __init__(self, api: APIClient):
        self.api = api

    def _path(self, project_id: str, service_id: Optional[str] = None) -> str:
        if not project_id:
            raise InvalidProjectIDError(project_id)
        path = f"/projects/{quote(project_id)}/services"
        if service_id is not None:
            if not service_id:
                raise InvalidServiceIDError(service_id)
            path += f"/{quote(service_id)}"
        return path

    def list(self, project_id: str) -> List[Service]:
        return [Service.from_dict(s) for s in self.api.get(self._path(project_id)) or []]

    def get(self, project_id: str, service_id: str) -> Service:
        return Service.from_dict(self.api.get(self._path(project_id, service_id)) or {})

    def create(self, project_id: str, descriptor: ServiceDescriptor) -> Service:
        body = {"serviceId": descriptor.id}
        if descriptor.image:
            body["image"] = descriptor.image
        if descriptor.env:
            body["env"] = descriptor.env
        if descriptor.scale:
            body["scale"] = descriptor.scale
        return Service.from_dict(self.api.post(self._path(project_id), json=body) or {})

    def validate_or_create(self, project_id: str, descriptor: ServiceDescriptor) -> bool:
        """
        Create the service unless it already exists.

        Returns:
            True if the service was created, False if it already existed
        """
        try:
            self.create(project_id, descriptor)
        except APIFault as e:
            if any(e.has(reason) for reason in ALREADY_EXISTS_REASONS):
                return False
            raise
        return True

    def delete(self, project_id: str, service_id: str) -> None:
        self.api.delete(self._path(project_id, service_id))

    def restart(self, project_id: str, service_id: str) -> None:
        if not project_id:
            raise InvalidProjectIDError(project_id)
        if not service_id:
            raise InvalidServiceIDError(service_id)
        self.api.post(
            "/restart/service", params={"projectId": project_id, "serviceId": service_id}
        )

    def link(self, project_id: str, descriptor: ServiceDescriptor) -> None:
        """Register a local service directory with the infrastructure."""
        if not project_id:
            raise InvalidProjectIDError(project_id)
        self.api.put(
            "/deploy",
            params={
                "projectId": project_id,
                "serviceId": descriptor.id,
                "source": str(descriptor.path or ""),
            },
            json=descriptor.to_dict(),
        )

    def unlink(self, project_id: str, service_id: str) -> None:
        if not project_id:
            raise InvalidProjectIDError(project_id)
        if not service_id:
            raise InvalidServiceIDError(service_id)
        self.api.delete(f"/deploy/{quote(project_id)}/{quote(service_id)}")

    def upload_bundle(self, project_id: str, service_id: str, bundle: Bundle) -> Optional[str]:
        """
        Upload a packaged service.

        Returns:
            groupUid of the triggered deployment, if the API reports one
        """
        if not project_id:
            raise InvalidProjectIDError(project_id)
        if not service_id:
            raise InvalidServiceIDError(service_id)

        headers = {
            PACKAGE_SIZE_HEADER: str(bundle.size),
            PACKAGE_SHA1_HEADER: bundle.sha1,
        }
        with open(bundle.path, "rb") as f:
            response = self.api.request(
                "POST",
                f"/push/{quote(project_id)}/{quote(service_id)}",
                headers=headers,
                files={UPLOAD_FIELD: (f"{service_id}.pod", f, "application/zip")},
                timeout=UPLOAD_TIMEOUT,
            )

        try:
            data = response.json() if response.content else {}
        except ValueError:
            data = {}
        if isinstance(data, dict):
            return data.get("groupUid") or None
        return None

    def get_env(self, project_id: str, service_id: str) -> List[EnvironmentVariable]:
        path = self._path(project_id, service_id) + "/environment-variables"
        data = self.api.get(path) or []
        if isinstance(data, dict):
            return [EnvironmentVariable(name=k, value=str(v)) for k, v in sorted(data.items())]
        return [EnvironmentVariable.from_dict(e) for e in data]

    def set_env(self, project_id: str, service_id: str, name: str, value: str) -> None:
        path = self._path(project_id, service_id) + f"/environment-variables/{quote(name)}"
        self.api.put(path, json={"value": value})

    def replace_env(self, project_id: str, service_id: str, envs: Dict[str, str]) -> None:
        path = self._path(project_id, service_id) + "/environment-variables"
        self.api.put(path, json={"env": envs})

    def unset_env(self, project_id: str, service_id: str, name: str) -> None:
        path = self._path(project_id, service_id) + f"/environment-variables/{quote(name)}"
        self.api.delete(path)

    def catalog(self) -> List[CatalogItem]:
        """Service images offered by the remote, sorted by image."""
        data = self.api.get("/catalog/services") or {}
        items = data.values() if isinstance(data, dict) else data
        return sorted((CatalogItem.from_dict(i) for i in items), key=lambda i: i.image)
