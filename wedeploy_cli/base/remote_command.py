"""
Remote Command Base Class

Base class for commands that talk to a WeDeploy remote.
Resolves flags, configuration and API clients.
"""

from pathlib import Path
from typing import Optional

from .base_command import BaseCommand
from wedeploy_cli.core.config_loader import Context, GlobalConfig
from wedeploy_cli.core.host_parser import HostFlags, HostParser
from wedeploy_cli.core.workdir import find_project_root, find_service_root
from wedeploy_cli.exceptions import ConfigurationError, DescriptorError
from wedeploy_cli.logger import debug
from wedeploy_cli.models.descriptors import read_project, read_service
from wedeploy_cli.services import (
    APIClient,
    ActivitiesClient,
    LogsClient,
    ProjectsClient,
    ServicesClient,
)


class RemoteCommand(BaseCommand):
    """
    Base class for remote commands.

    Provides:
    - --project/--service/--remote/host resolution
    - Context built from ~/.we and the environment
    - Lazily created API clients
    """

    def __init__(
        self,
        project: str = "",
        service: str = "",
        remote: str = "",
        host: str = "",
        verbose: bool = False,
        json_output: bool = False,
        config_path: Optional[Path] = None,
    ):
        super().__init__(verbose=verbose, json_output=json_output)
        self.flags_input = HostFlags(project=project, service=service, remote=remote)
        self.host = host
        self.config_path = config_path

        self.config: Optional[GlobalConfig] = None
        self.flags: Optional[HostFlags] = None
        self.context: Optional[Context] = None
        self._api: Optional[APIClient] = None

    def resolve(self) -> Context:
        """
        Load configuration and resolve the target remote.

        Raises:
            ConfigurationError: ~/.we can not be read
            HostParseError: Flags are used in an incompatible way
        """
        if self.context is not None:
            return self.context

        self.config = GlobalConfig.load(self.config_path)
        self.flags = HostParser(self.config.remotes).parse(
            project=self.flags_input.project,
            service=self.flags_input.service,
            remote=self.flags_input.remote,
            host=self.host,
        )

        context = self.config.context(self.flags.remote or None, verbose=self.verbose)
        self.context = context.with_roots(
            project_root=find_project_root(),
            service_root=find_service_root(),
        )
        debug(f"Using remote {self.context.remote} ({self.context.infrastructure})")
        return self.context

    @property
    def api(self) -> APIClient:
        if self._api is None:
            self._api = APIClient(self.resolve())
        return self._api

    @property
    def projects(self) -> ProjectsClient:
        return ProjectsClient(self.api)

    @property
    def services(self) -> ServicesClient:
        return ServicesClient(self.api)

    @property
    def activities(self) -> ActivitiesClient:
        return ActivitiesClient(self.api)

    @property
    def logs(self) -> LogsClient:
        return LogsClient(self.api)

    def project_id(self, required: bool = True) -> str:
        """
        Project from the flags, else from project.json in the working tree.

        Raises:
            ConfigurationError: No project could be found and required is set
        """
        self.resolve()
        if self.flags.project:
            return self.flags.project

        if self.context.project_root is not None:
            try:
                return read_project(self.context.project_root).id
            except DescriptorError as e:
                debug(str(e))

        if required:
            raise ConfigurationError(
                "Project not found",
                "Use --project or run this command inside a project directory",
            )
        return ""

    def service_id(self) -> str:
        """Service from the flags, else from the service descriptor in the working tree."""
        self.resolve()
        if self.flags.service:
            return self.flags.service
        if self.context.service_root is not None:
            try:
                return read_service(self.context.service_root).id
            except DescriptorError as e:
                debug(str(e))
        return ""

    def run(self, **kwargs) -> None:
        try:
            super().run(**kwargs)
        finally:
            if self._api is not None:
                self._api.close()
