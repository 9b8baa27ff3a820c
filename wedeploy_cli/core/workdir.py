"""Locate project and service directories on disk"""

import os
from pathlib import Path
from typing import Dict, List, Optional

from wedeploy_cli.constants import NO_SERVICE_MARKER, PROJECT_DESCRIPTOR
from wedeploy_cli.exceptions import ValidationError
from wedeploy_cli.models.descriptors import (
    ServiceDescriptor,
    read_service,
    service_descriptor_path,
)


def find_project_root(start: Optional[Path] = None) -> Optional[Path]:
    """Walk up from start looking for project.json."""
    current = Path(start or Path.cwd()).resolve()
    for directory in [current] + list(current.parents):
        if (directory / PROJECT_DESCRIPTOR).is_file():
            return directory
    return None


def find_service_root(start: Optional[Path] = None) -> Optional[Path]:
    """Walk up from start looking for a service descriptor, stopping at the project root."""
    current = Path(start or Path.cwd()).resolve()
    for directory in [current] + list(current.parents):
        if service_descriptor_path(directory) is not None:
            return directory
        if (directory / PROJECT_DESCRIPTOR).is_file():
            return None
    return None


def discover_services(project_root: Path) -> List[ServiceDescriptor]:
    """
    Find every service under a project directory.

    Directories holding a .noservice marker are skipped along with
    everything below them.

    Raises:
        ValidationError: Two services share the same id
    """
    project_root = Path(project_root)
    found: Dict[str, ServiceDescriptor] = {}

    for root, dirs, _files in os.walk(project_root):
        root_path = Path(root)
        dirs[:] = sorted(d for d in dirs if not d.startswith("."))

        if (root_path / NO_SERVICE_MARKER).exists():
            dirs[:] = []
            continue

        if service_descriptor_path(root_path) is None:
            continue

        descriptor = read_service(root_path)
        if descriptor.id in found:
            raise ValidationError(
                f'Can not list services: ID "{descriptor.id}" was found duplicated',
                f"{found[descriptor.id].path} and {root_path}",
            )
        found[descriptor.id] = descriptor
        # services do not nest
        dirs[:] = []

    return sorted(found.values(), key=lambda s: s.id)
