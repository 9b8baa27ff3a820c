"""
Remote Resource Models

Projects, services and environment variables as returned by the WeDeploy API.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class Service:
    """Service running within a remote project."""

    service_id: str
    project_id: str = ""
    image: str = ""
    health: str = ""
    scale: int = 0
    custom_domains: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "serviceId": self.service_id,
            "projectId": self.project_id,
            "image": self.image,
            "health": self.health,
            "scale": self.scale,
            "customDomains": self.custom_domains,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Service":
        return cls(
            service_id=data.get("serviceId", ""),
            project_id=data.get("projectId", ""),
            image=data.get("image", ""),
            health=data.get("health", ""),
            scale=int(data.get("scale") or 0),
            custom_domains=list(data.get("customDomains") or []),
        )


@dataclass
class Project:
    """Remote project and (optionally) its services."""

    project_id: str
    health: str = "unknown"
    custom_domain: str = ""
    services: List[Service] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "projectId": self.project_id,
            "health": self.health,
            "customDomain": self.custom_domain,
            "services": [s.to_dict() for s in self.services],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Project":
        return cls(
            project_id=data.get("projectId", ""),
            health=data.get("health") or "unknown",
            custom_domain=data.get("customDomain", ""),
            services=[Service.from_dict(s) for s in data.get("services") or []],
        )

    def service(self, service_id: str):
        for s in self.services:
            if s.service_id == service_id:
                return s
        return None


@dataclass
class EnvironmentVariable:
    name: str
    value: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EnvironmentVariable":
        return cls(name=data.get("name", ""), value=str(data.get("value", "")))


@dataclass
class CatalogItem:
    """Entry of the services catalog offered by a remote."""

    image: str
    name: str = ""
    category: str = ""
    description: str = ""
    versions: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CatalogItem":
        return cls(
            image=data.get("image", ""),
            name=data.get("name", ""),
            category=data.get("category", ""),
            description=data.get("description", ""),
            versions=list(data.get("versions") or []),
        )
