"""Link and unlink commands - Run services on the local infrastructure"""

import threading
from dataclasses import dataclass, field
from typing import List

import click

from wedeploy_cli.base import RemoteCommand
from wedeploy_cli.commands.options import remote_options, is_verbose
from wedeploy_cli.constants import LOCAL_REMOTE
from wedeploy_cli.core.workdir import discover_services
from wedeploy_cli.deploy.link import LinkMachine
from wedeploy_cli.exceptions import ValidationError


@dataclass
class LinkOptions:
    """Options for link command."""

    paths: List[str] = field(default_factory=list)
    watch: bool = True


class LinkCommand(RemoteCommand):
    """
    Link local services to the local infrastructure.

    Services are registered from their directories without packaging, so
    changes on disk are picked up by the infrastructure.
    """

    command_name = "link"

    def __init__(self, options: LinkOptions, remote: str = "", host: str = "", **kwargs):
        super().__init__(remote=remote or ("" if host else LOCAL_REMOTE), host=host, **kwargs)
        self.options = options

    def service_dirs(self) -> List[str]:
        if self.options.paths:
            return list(self.options.paths)

        context = self.resolve()
        if context.service_root is not None:
            return [str(context.service_root)]
        if context.project_root is not None:
            return [str(s.path) for s in discover_services(context.project_root)]

        raise ValidationError(
            "No service found to link",
            "Run inside a project or service directory, or pass the service paths",
        )

    def execute(self) -> None:
        context = self.resolve()
        project_id = self.project_id()

        logger = self.init_logger(project_id, "link")
        self.show_header(title="Link", project=project_id, details={"Remote": context.remote})

        machine = LinkMachine(
            project_id,
            self.projects,
            self.services,
            service_domain=context.service_domain,
        )
        machine.setup(self.service_dirs())

        if logger:
            logger.step(f"Linking {len(machine.links)} service(s)")

        if self.options.watch and machine.links:
            # the listing renders while linking proceeds in the background
            linker = threading.Thread(target=machine.run, name="link", daemon=True)
            linker.start()
            machine.watch()
            linker.join()
        else:
            machine.run()

        machine.raise_errors()

        if logger:
            logger.success(f"Linked {len(machine.links)} service(s)")


class UnlinkCommand(RemoteCommand):
    """Remove a linked service, or every service of a linked project."""

    command_name = "unlink"

    def __init__(self, remote: str = "", host: str = "", **kwargs):
        super().__init__(remote=remote or ("" if host else LOCAL_REMOTE), host=host, **kwargs)

    def execute(self) -> None:
        context = self.resolve()
        project_id = self.project_id()
        service_id = self.service_id()

        machine = LinkMachine(
            project_id,
            self.projects,
            self.services,
            service_domain=context.service_domain,
        )
        machine.unlink(service_id or None)

        if service_id:
            self.print_success(f"Service {service_id} unlinked from project {project_id}")
        else:
            self.print_success(f"Project {project_id} unlinked")


@click.command()
@click.argument("paths", nargs=-1, type=click.Path(exists=True, file_okay=False))
@remote_options
@click.option("--no-watch", is_flag=True, help="Do not watch the services after linking")
@click.pass_context
def link(ctx, paths, project, service, remote, host, no_watch):
    """
    Link services to the local infrastructure

    \b
    Examples:
      we link                 # Current service or whole project
      we link web api         # Selected service directories
    """
    cmd = LinkCommand(
        LinkOptions(paths=list(paths), watch=not no_watch),
        project=project,
        service=service,
        remote=remote,
        host=host,
        verbose=is_verbose(ctx),
    )
    cmd.run()


@click.command()
@remote_options
@click.pass_context
def unlink(ctx, project, service, remote, host):
    """
    Unlink a service or project from the local infrastructure

    \b
    Examples:
      we unlink                  # Service of the current directory
      we unlink -p photos        # Whole project
      we unlink -p photos -s web # Single service
    """
    cmd = UnlinkCommand(
        project=project,
        service=service,
        remote=remote,
        host=host,
        verbose=is_verbose(ctx),
    )
    cmd.run()
