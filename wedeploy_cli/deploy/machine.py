"""
Deploy Machine

Deploys a list of service directories concurrently. Every service runs
independently; failures are collected per path and reported together
once all services are done.
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from wedeploy_cli.constants import SUCCESS_READY, SUCCESS_PROJECT_CREATED
from wedeploy_cli.core.config_loader import Context
from wedeploy_cli.core.hooks import run_hook
from wedeploy_cli.core.packager import Bundle, pack
from wedeploy_cli.logger import DeployLogger, debug
from wedeploy_cli.models.descriptors import ServiceDescriptor, read_service
from wedeploy_cli.models.results import ServiceError, ServiceErrors
from wedeploy_cli.services.projects_client import ProjectsClient
from wedeploy_cli.services.services_client import ServicesClient


@dataclass
class DeployFlags:
    """Modifiers for a deployment."""

    hooks: bool = False


@dataclass
class Deployment:
    """Outcome of the upload phase, used to scope the activity watch."""

    success: List[str] = field(default_factory=list)
    service_ids: List[str] = field(default_factory=list)
    group_uids: Dict[str, str] = field(default_factory=dict)
    started_at: int = 0

    @property
    def group_uid(self) -> Optional[str]:
        """The group shared by every upload, if there is exactly one."""
        uids = set(self.group_uids.values())
        return uids.pop() if len(uids) == 1 else None


class DeployMachine:
    """
    Fan-out deployer.

    Provides:
    - One worker per service directory, joined before run() returns
    - Lock-guarded success lines and errors
    - No cancellation of siblings when a service fails
    """

    def __init__(
        self,
        context: Context,
        project_id: str,
        projects: ProjectsClient,
        services: ServicesClient,
        flags: Optional[DeployFlags] = None,
        base_dir: Optional[Path] = None,
        hook_runner: Callable[..., None] = run_hook,
        packer: Callable[..., Bundle] = pack,
        logger: Optional[DeployLogger] = None,
        max_workers: Optional[int] = None,
    ):
        self.context = context
        self.project_id = project_id
        self.projects = projects
        self.services = services
        self.flags = flags or DeployFlags()
        self.base_dir = Path(base_dir) if base_dir else Path.cwd()
        self.hook_runner = hook_runner
        self.packer = packer
        self.logger = logger
        self.max_workers = max_workers

        self.success: List[str] = []
        self.errors = ServiceErrors()
        self.group_uids: Dict[str, str] = {}
        self.started_at = 0
        self.service_ids: List[str] = []

        self._success_lock = threading.Lock()
        self._errors_lock = threading.Lock()
        self._project_lock = threading.Lock()
        self._project_ready = False

    def run(self, service_dirs: List[str]) -> None:
        """
        Deploy every service directory and wait for all of them.

        Raises:
            ServiceErrors: One entry per failed service, tagged by its path
        """
        self.errors = ServiceErrors()
        self.started_at = int(time.time() * 1000)

        if service_dirs:
            workers = self.max_workers or len(service_dirs)
            with ThreadPoolExecutor(max_workers=workers) as executor:
                for path in service_dirs:
                    executor.submit(self._start, path)

        if self.errors.items:
            raise ServiceErrors(self.errors.items)

    def _start(self, path: str) -> None:
        try:
            self._deploy(path)
        except Exception as e:
            debug(f"{path}: {e}")
            if self.logger:
                self.logger.log(f"{path}: {e}", "ERROR")
            with self._errors_lock:
                self.errors.items.append(ServiceError(path=path, error=e))

    def _deploy(self, path: str) -> None:
        directory = Path(path)
        if not directory.is_absolute():
            directory = self.base_dir / directory

        descriptor = read_service(directory)
        self._ensure_project()

        created = self.services.validate_or_create(self.project_id, descriptor)
        if created:
            self._log(f"Service {descriptor.id} created")

        hooks = descriptor.hooks
        if self.flags.hooks and hooks.before_deploy:
            self._log(f"Running before_deploy hook for {descriptor.id}")
            self.hook_runner(hooks.before_deploy, cwd=directory)

        self._upload(descriptor, directory)

        if self.flags.hooks and hooks.after_deploy:
            self._log(f"Running after_deploy hook for {descriptor.id}")
            self.hook_runner(hooks.after_deploy, cwd=directory)

        with self._success_lock:
            self.service_ids.append(descriptor.id)
            self.success.append(
                SUCCESS_READY.format(
                    service=descriptor.id,
                    project=self.project_id,
                    domain=self.context.service_domain,
                )
            )

    def _ensure_project(self) -> None:
        with self._project_lock:
            if self._project_ready:
                return
            if self.projects.validate_or_create(self.project_id):
                with self._success_lock:
                    self.success.append(
                        SUCCESS_PROJECT_CREATED.format(project=self.project_id)
                    )
            self._project_ready = True

    def _upload(self, descriptor: ServiceDescriptor, directory: Path) -> None:
        bundle = self.packer(directory, descriptor.deploy_ignore)
        try:
            self._log(
                f"Uploading {descriptor.id} ({bundle.size} bytes, sha1 {bundle.sha1})"
            )
            group_uid = self.services.upload_bundle(self.project_id, descriptor.id, bundle)
        finally:
            bundle.cleanup()

        if group_uid:
            with self._success_lock:
                self.group_uids[descriptor.id] = group_uid

    def _log(self, message: str) -> None:
        debug(message)
        if self.logger:
            self.logger.log(message)


def deploy_all(
    context: Context,
    project_id: str,
    service_dirs: List[str],
    projects: ProjectsClient,
    services: ServicesClient,
    flags: Optional[DeployFlags] = None,
    **kwargs,
) -> Deployment:
    """
    Deploy services and return what was uploaded.

    Raises:
        ServiceErrors: Some services failed; the others were still deployed
    """
    machine = DeployMachine(
        context, project_id, projects, services, flags=flags, **kwargs
    )
    machine.run(service_dirs)
    return Deployment(
        success=machine.success,
        service_ids=machine.service_ids,
        group_uids=dict(machine.group_uids),
        started_at=machine.started_at,
    )
