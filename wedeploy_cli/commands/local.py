"""
Local infrastructure commands

run, stop and dev manage the wedeploy/local container on this machine.
"""

import click

from wedeploy_cli.base import RemoteCommand
from wedeploy_cli.commands.link import LinkCommand, LinkOptions
from wedeploy_cli.commands.options import is_verbose
from wedeploy_cli.constants import LOCAL_REMOTE
from wedeploy_cli.local.machine import DockerMachine, RunFlags


class LocalCommand(RemoteCommand):
    """Base for commands bound to the local remote."""

    def __init__(self, flags: RunFlags = None, **kwargs):
        super().__init__(remote=LOCAL_REMOTE, **kwargs)
        self.run_flags = flags or RunFlags()

    def machine(self) -> DockerMachine:
        return DockerMachine(
            self.projects,
            flags=self.run_flags,
            console=self.console,
            logger=self.logger,
        )


class RunCommand(LocalCommand):
    """
    Run the local infrastructure.

    Blocks until interrupted unless detached; a dry run only prints the
    docker command.
    """

    command_name = "run"

    def execute(self) -> None:
        self.resolve()
        if not self.run_flags.dry_run:
            self.init_logger("local", "run")

        self.show_header(
            title="Local Infrastructure",
            details={"Debug": "on"} if self.run_flags.debug else None,
        )
        self.machine().run()


class StopCommand(LocalCommand):
    command_name = "stop"

    def execute(self) -> None:
        self.resolve()
        self.init_logger("local", "stop")
        self.show_header(title="Local Infrastructure", subtitle="Stopping")
        self.machine().stop()


class DevCommand(LinkCommand):
    """Start the local infrastructure (detached) and link the current services."""

    command_name = "dev"

    def __init__(self, options: LinkOptions, flags: RunFlags = None, **kwargs):
        super().__init__(options, **kwargs)
        self.run_flags = flags or RunFlags()
        self.run_flags.detach = True

    def execute(self) -> None:
        self.resolve()
        DockerMachine(self.projects, flags=self.run_flags, console=self.console).run()
        super().execute()


@click.command()
@click.option("--debug", is_flag=True, help="Expose debug ports")
@click.option("--dry-run", is_flag=True, help="Print the docker command without running it")
@click.option("--detach", "-d", is_flag=True, help="Return once the infrastructure is ready")
@click.option("--view", "view_mode", is_flag=True, help="Attach without cleaning up on exit")
@click.option("--pull", is_flag=True, help="Pull the infrastructure image before starting")
@click.pass_context
def run(ctx, debug, dry_run, detach, view_mode, pull):
    """
    Run WeDeploy infrastructure for development locally

    \b
    Examples:
      we run              # Start and wait for Ctrl+C
      we run --detach     # Start in the background
      we run --dry-run    # Show the docker command
    """
    flags = RunFlags(debug=debug, dry_run=dry_run, detach=detach, view_mode=view_mode, pull=pull)
    cmd = RunCommand(flags, verbose=is_verbose(ctx))
    cmd.run()


@click.command()
@click.pass_context
def stop(ctx):
    """Stop the local infrastructure and unlink its projects"""
    cmd = StopCommand(verbose=is_verbose(ctx))
    cmd.run()


@click.command()
@click.argument("paths", nargs=-1, type=click.Path(exists=True, file_okay=False))
@click.option("--project", "-p", default="", help="Project ID")
@click.option("--debug", is_flag=True, help="Expose debug ports")
@click.option("--no-watch", is_flag=True, help="Do not watch the services after linking")
@click.pass_context
def dev(ctx, paths, project, debug, no_watch):
    """
    Start the local infrastructure and link services to it

    \b
    Examples:
      we dev              # Current service or whole project
      we dev web api      # Selected service directories
    """
    cmd = DevCommand(
        LinkOptions(paths=list(paths), watch=not no_watch),
        flags=RunFlags(debug=debug),
        project=project,
        verbose=is_verbose(ctx),
    )
    cmd.run()
