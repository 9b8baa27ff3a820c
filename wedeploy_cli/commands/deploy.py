"""Deploy command - Package, upload and watch services"""

import sys
from dataclasses import dataclass, field
from typing import List

import click

from wedeploy_cli.base import RemoteCommand
from wedeploy_cli.commands.options import remote_options, is_verbose
from wedeploy_cli.core.workdir import discover_services
from wedeploy_cli.deploy.machine import DeployFlags, deploy_all
from wedeploy_cli.deploy.watcher import DeployWatcher
from wedeploy_cli.exceptions import ValidationError
from wedeploy_cli.models.activity import ActivityFilter


@dataclass
class DeployOptions:
    """Options for deploy command."""

    paths: List[str] = field(default_factory=list)
    hooks: bool = False
    watch: bool = True
    quiet: bool = False


class DeployCommand(RemoteCommand):
    """
    Deploy services to a remote.

    Features:
    - Concurrent per-service upload with aggregated errors
    - Live activity feedback until every service is final
    - Automatic logging
    """

    command_name = "deploy"

    def __init__(self, options: DeployOptions, **kwargs):
        super().__init__(**kwargs)
        self.options = options

    def service_dirs(self) -> List[str]:
        """Paths given, else the current service, else every service of the project."""
        if self.options.paths:
            return list(self.options.paths)

        context = self.resolve()
        if context.service_root is not None:
            return [str(context.service_root)]
        if context.project_root is not None:
            return [str(s.path) for s in discover_services(context.project_root)]

        raise ValidationError(
            "No service found to deploy",
            "Run inside a project or service directory, or pass the service paths",
        )

    def execute(self) -> None:
        context = self.resolve()
        project_id = self.project_id()
        service_dirs = self.service_dirs()

        logger = self.init_logger(project_id, "deploy")

        self.show_header(
            title="Deploy",
            project=project_id,
            details={"Remote": f"{context.remote} ({context.infrastructure_domain})"},
        )

        if logger:
            logger.step(f"Uploading {len(service_dirs)} service(s)")

        deployment = deploy_all(
            context,
            project_id,
            service_dirs,
            self.projects,
            self.services,
            flags=DeployFlags(hooks=self.options.hooks),
            logger=logger,
        )

        for line in deployment.success:
            if logger:
                logger.success(line)
            else:
                self.console.print(line, highlight=False)

        if not self.options.watch or self.options.quiet:
            group_uid = deployment.group_uid
            label = f"Deployment {group_uid}" if group_uid else "Deployment"
            self.console.print(
                f"{label} is in progress on remote {context.infrastructure_domain}"
            )
            return

        watcher = DeployWatcher(
            context,
            project_id,
            deployment.service_ids,
            self.activities,
            ActivityFilter(group_uid=deployment.group_uid or ""),
            console=self.console,
            group_uids=deployment.group_uids,
            since=deployment.started_at,
        )
        states = watcher.run()

        if states.has_failures and sys.stdin.isatty():
            watcher.maybe_open_logs(states)

        watcher.verify_final_state(states)

        if logger:
            self.console.print(f"\n[dim]Logs saved to:[/dim] {logger.log_path}\n")


@click.command()
@click.argument("paths", nargs=-1, type=click.Path(exists=True, file_okay=False))
@remote_options
@click.option("--hooks", is_flag=True, help="Run before_deploy and after_deploy hooks")
@click.option("--no-watch", is_flag=True, help="Do not wait for the deployment to finish")
@click.option("--quiet", "-q", is_flag=True, help="Upload only, without live feedback")
@click.pass_context
def deploy(ctx, paths, project, service, remote, host, hooks, no_watch, quiet):
    """
    Deploy services

    Packages each service directory, uploads it and follows the build and
    deployment until every service is up (or failed).

    \b
    Examples:
      we deploy                       # Current service or whole project
      we deploy web api -p photos     # Selected service directories
      we deploy --hooks --no-watch    # Run hooks, do not wait
    """
    options = DeployOptions(
        paths=list(paths), hooks=hooks, watch=not no_watch, quiet=quiet
    )
    cmd = DeployCommand(
        options,
        project=project,
        service=service,
        remote=remote,
        host=host,
        verbose=is_verbose(ctx),
    )
    cmd.run()
