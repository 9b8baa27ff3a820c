"""List command - Show projects and services"""

import click

from wedeploy_cli.base import RemoteCommand
from wedeploy_cli.commands.options import remote_options, is_verbose
from wedeploy_cli.listing.watcher import ListFilter, ListWatcher, ProjectsLister


class ListCommand(RemoteCommand):
    """List projects and services, once or continuously."""

    command_name = "list"

    def __init__(self, watch: bool = False, detailed: bool = False, **kwargs):
        super().__init__(**kwargs)
        self.watch = watch
        self.detailed = detailed

    def execute(self) -> None:
        context = self.resolve()
        project_id = self.project_id(required=False)
        service_id = self.service_id() if project_id else ""

        lister = ProjectsLister(
            self.projects,
            ListFilter(project=project_id, services=[service_id] if service_id else []),
            service_domain=context.service_domain,
            detailed=self.detailed,
        )

        if self.json_output:
            self.output_json([p.to_dict() for p in lister.fetch()])
            return

        watcher = ListWatcher(lister, console=self.console)
        if self.watch:
            watcher.start()
            return

        error = watcher.once()
        if error is not None:
            raise error


@click.command(name="list")
@remote_options
@click.option("--watch", "-w", is_flag=True, help="Keep watching for changes")
@click.option("--detailed", "-d", is_flag=True, help="Show instances")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
@click.pass_context
def list_(ctx, project, service, remote, host, watch, detailed, json_output):
    """
    List projects and services

    \b
    Examples:
      we list                 # Every project
      we list -p photos -w    # Watch one project
    """
    cmd = ListCommand(
        watch=watch,
        detailed=detailed,
        project=project,
        service=service,
        remote=remote,
        host=host,
        verbose=is_verbose(ctx),
        json_output=json_output,
    )
    cmd.run()
