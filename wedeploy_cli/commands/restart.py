"""Restart command - Restart a project or a single service"""

import threading
from typing import Optional

import click

from wedeploy_cli.base import RemoteCommand
from wedeploy_cli.commands.options import remote_options, is_verbose
from wedeploy_cli.listing.watcher import ListFilter, ListWatcher, ProjectsLister


class RestartCommand(RemoteCommand):
    """
    Restart a project (every service) or one service.

    Unless quiet, the listing is shown until everything restarted is up again.
    """

    command_name = "restart"

    def __init__(self, quiet: bool = False, **kwargs):
        super().__init__(**kwargs)
        self.quiet = quiet
        self.end = threading.Event()
        self.error: Optional[Exception] = None
        self.watcher: Optional[ListWatcher] = None

    def execute(self) -> None:
        context = self.resolve()
        project_id = self.project_id()
        service_id = self.service_id()

        # fails early with a not found error
        if service_id:
            self.services.get(project_id, service_id)
        else:
            self.projects.get(project_id)

        if self.quiet:
            self.restart(project_id, service_id)
        else:
            lister = ProjectsLister(
                self.projects,
                ListFilter(project=project_id, services=[service_id] if service_id else []),
                service_domain=context.service_domain,
            )
            self.watcher = ListWatcher(lister, stop_condition=self.is_done, console=self.console)
            worker = threading.Thread(
                target=self.restart, args=(project_id, service_id), name="restart", daemon=True
            )
            worker.start()
            self.watcher.start()
            worker.join()

        if self.error is not None:
            raise self.error

        target = f"Service {service_id}" if service_id else f"Project {project_id}"
        self.print_success(f"{target} restarted")

    def restart(self, project_id: str, service_id: str) -> None:
        try:
            if service_id:
                self.services.restart(project_id, service_id)
            else:
                self.projects.restart(project_id)
        except Exception as e:
            self.error = e
        finally:
            self.end.set()

    def is_done(self) -> bool:
        if not self.end.is_set():
            return False
        if self.error is not None:
            return True

        projects = self.watcher.snapshot() if self.watcher else []
        if not projects or projects[0].health != "up":
            return False
        return all(service.health == "up" for service in projects[0].services)


@click.command()
@remote_options
@click.option("--quiet", "-q", is_flag=True, help="Restart without watching status")
@click.pass_context
def restart(ctx, project, service, remote, host, quiet):
    """
    Restart a project or service

    \b
    Examples:
      we restart -p photos
      we restart -p photos -s web
      we restart --url web-photos.wedeploy.io
    """
    cmd = RestartCommand(
        quiet=quiet,
        project=project,
        service=service,
        remote=remote,
        host=host,
        verbose=is_verbose(ctx),
    )
    cmd.run()
