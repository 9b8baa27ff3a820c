"""
Descriptor Models

Local project.json / service.json files describing what gets deployed.
"""

import json
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from wedeploy_cli.constants import (
    PROJECT_DESCRIPTOR,
    SERVICE_DESCRIPTOR,
    LEGACY_SERVICE_DESCRIPTOR,
)
from wedeploy_cli.exceptions import (
    DescriptorError,
    ProjectDescriptorNotFoundError,
    ServiceDescriptorNotFoundError,
    InvalidProjectIDError,
    InvalidServiceIDError,
)


@dataclass
class Hooks:
    """User commands run around the build and deploy steps."""

    before_build: str = ""
    build: str = ""
    after_build: str = ""
    before_deploy: str = ""
    deploy: str = ""
    after_deploy: str = ""

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Hooks":
        data = data or {}
        return cls(
            before_build=data.get("before_build", ""),
            build=data.get("build", ""),
            after_build=data.get("after_build", ""),
            before_deploy=data.get("before_deploy", ""),
            deploy=data.get("deploy", ""),
            after_deploy=data.get("after_deploy", ""),
        )


@dataclass
class ServiceDescriptor:
    """Contents of a service.json file."""

    id: str
    name: str = ""
    image: str = ""
    hooks: Hooks = field(default_factory=Hooks)
    env: Dict[str, str] = field(default_factory=dict)
    scale: int = 0
    deploy_ignore: List[str] = field(default_factory=list)
    path: Optional[Path] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "image": self.image,
            "hooks": {k: v for k, v in asdict(self.hooks).items() if v},
            "env": self.env,
            "scale": self.scale,
            "deployIgnore": self.deploy_ignore,
        }
        return {key: value for key, value in data.items() if value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any], path: Optional[Path] = None) -> "ServiceDescriptor":
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            image=data.get("image", ""),
            hooks=Hooks.from_dict(data.get("hooks")),
            env={k: str(v) for k, v in (data.get("env") or {}).items()},
            scale=int(data.get("scale") or 0),
            deploy_ignore=list(data.get("deployIgnore") or []),
            path=path,
        )


@dataclass
class ProjectDescriptor:
    """Contents of a project.json file."""

    id: str
    name: str = ""
    description: str = ""
    custom_domain: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "customDomain": self.custom_domain,
        }
        return {key: value for key, value in data.items() if value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProjectDescriptor":
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            description=data.get("description", ""),
            custom_domain=data.get("customDomain", ""),
        )


def _load_json(path: Path) -> Dict[str, Any]:
    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise DescriptorError(f"Invalid JSON in {path}", str(e))
    if not isinstance(data, dict):
        raise DescriptorError(f"Invalid descriptor {path}", "expected a JSON object")
    return data


def service_descriptor_path(directory: Union[str, Path]) -> Optional[Path]:
    """Return service.json (or legacy container.json) in directory, if any."""
    directory = Path(directory)
    for name in (SERVICE_DESCRIPTOR, LEGACY_SERVICE_DESCRIPTOR):
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def read_service(directory: Union[str, Path]) -> ServiceDescriptor:
    """
    Read the service descriptor from a service directory.

    Raises:
        ServiceDescriptorNotFoundError: No service.json or container.json
        InvalidServiceIDError: Descriptor has no id
        DescriptorError: File is not valid JSON
    """
    path = service_descriptor_path(directory)
    if path is None:
        raise ServiceDescriptorNotFoundError(str(Path(directory) / SERVICE_DESCRIPTOR))

    descriptor = ServiceDescriptor.from_dict(_load_json(path), path=Path(directory))
    if not descriptor.id:
        raise InvalidServiceIDError(descriptor.id)
    return descriptor


def read_project(directory: Union[str, Path]) -> ProjectDescriptor:
    """Read project.json from a project directory."""
    path = Path(directory) / PROJECT_DESCRIPTOR
    if not path.is_file():
        raise ProjectDescriptorNotFoundError(str(path))

    descriptor = ProjectDescriptor.from_dict(_load_json(path))
    if not descriptor.id:
        raise InvalidProjectIDError(descriptor.id)
    return descriptor
