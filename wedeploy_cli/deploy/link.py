"""
Link Machine

Links local service directories to a (local) infrastructure without
packaging them, then watches the listing until the services are up.
"""

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from rich.console import Console

from wedeploy_cli.constants import LIST_POOLING_INTERVAL
from wedeploy_cli.core import error_messages
from wedeploy_cli.exceptions import ConfigurationError
from wedeploy_cli.listing.watcher import ListFilter, ListWatcher, ProjectsLister
from wedeploy_cli.logger import debug
from wedeploy_cli.models.descriptors import ServiceDescriptor, read_service
from wedeploy_cli.models.results import LinkErrors, ServiceError
from wedeploy_cli.services.projects_client import ProjectsClient
from wedeploy_cli.services.services_client import ServicesClient


@dataclass
class Link:
    """A service descriptor mounted from a directory."""

    descriptor: ServiceDescriptor
    path: str


class LinkMachine:
    def __init__(
        self,
        project_id: str,
        projects: ProjectsClient,
        services: ServicesClient,
        service_domain: str = "",
        console: Optional[Console] = None,
        pooling_interval: float = LIST_POOLING_INTERVAL,
    ):
        self.project_id = project_id
        self.projects = projects
        self.services = services
        self.service_domain = service_domain
        self.console = console or Console(stderr=True)
        self.pooling_interval = pooling_interval

        self.links: List[Link] = []
        self.errors = LinkErrors()
        self.watcher: Optional[ListWatcher] = None
        self.end = False

        self._errors_lock = threading.Lock()

    def setup(self, service_dirs: List[str]) -> None:
        """
        Mount each directory. Unreadable ones go to the error list.

        Raises:
            ConfigurationError: No project id to link to
        """
        if not self.project_id:
            raise ConfigurationError("Missing project ID for linking services")

        self.errors = LinkErrors()
        for path in service_dirs:
            self._mount(path)

    def _mount(self, path: str) -> None:
        try:
            descriptor = read_service(Path(path))
        except Exception as e:
            self._log_error(path, e)
            return

        debug(f"Service {descriptor.id} for directory {path}")
        self.links.append(Link(descriptor=descriptor, path=path))

    def run(self) -> None:
        """Link every mounted service. Failures are recorded per path."""
        # linked one at a time: the local infrastructure does not cope with
        # concurrent registrations
        for link in self.links:
            try:
                self.services.link(self.project_id, link.descriptor)
            except Exception as e:
                self._log_error(link.path, e)
                continue
            self.console.print(f"Service {link.descriptor.id} linked.", markup=False)

        self.end = True

    def _log_error(self, path: str, error: Exception) -> None:
        with self._errors_lock:
            self.errors.items.append(
                ServiceError(path=path, error=error_messages.handle("link", error))
            )

    def raise_errors(self) -> None:
        if self.errors.items:
            raise LinkErrors(self.errors.items)

    def watch(self, live: bool = True) -> None:
        """Show the listing until linking is finished and services are up."""
        lister = ProjectsLister(
            self.projects,
            ListFilter(
                project=self.project_id,
                services=[link.descriptor.id for link in self.links],
            ),
            service_domain=self.service_domain,
        )
        self.watcher = ListWatcher(
            lister,
            pooling_interval=self.pooling_interval,
            stop_condition=self.is_done,
            live=live,
        )
        self.watcher.start()

    def is_done(self) -> bool:
        if not self.end:
            return False

        if self.errors.items:
            self.console.print(
                'Killing linking watcher after linking errors (use "we list" to see what is up).',
                markup=False,
            )
            return True

        projects = self.watcher.snapshot() if self.watcher else []
        if not projects or projects[0].health != "up":
            return False

        project = projects[0]
        for link in self.links:
            service = project.service(link.descriptor.id)
            if service is None or service.health != "up":
                return False
        return True

    def unlink(self, service_id: Optional[str] = None) -> None:
        """Remove one linked service, or the whole project when no service is given."""
        if service_id:
            self.services.unlink(self.project_id, service_id)
        else:
            self.projects.unlink(self.project_id)
