"""Activities command - Show what happened on a project"""

from datetime import datetime

import click
from rich.table import Table

from wedeploy_cli.base import RemoteCommand
from wedeploy_cli.commands.options import remote_options, is_verbose
from wedeploy_cli.models.activity import Activities, ActivityFilter


def format_created_at(created_at: int) -> str:
    """Milliseconds since epoch as local time."""
    if not created_at:
        return ""
    return datetime.fromtimestamp(created_at / 1000).strftime("%b %d %H:%M:%S")


class ActivitiesCommand(RemoteCommand):
    """List project activities, newest first."""

    command_name = "activities"

    def __init__(self, activity_filter: ActivityFilter, **kwargs):
        super().__init__(**kwargs)
        self.filter = activity_filter

    def execute(self) -> None:
        project_id = self.project_id()
        activities = self.activities.list(project_id, self.filter)

        if self.json_output:
            self.output_json([a.to_dict() for a in activities])
            return

        self.render(activities)

    def render(self, activities: Activities) -> None:
        if not len(activities):
            self.console.print("No activity found.")
            return

        table = Table(show_header=True, header_style="bold cyan", box=None)
        table.add_column("Time", style="dim", no_wrap=True)
        table.add_column("Activity")
        table.add_column("Commit", style="bright_black")

        for activity in activities:
            table.add_row(
                format_created_at(activity.created_at),
                activity.message(),
                activity.commit[:7],
            )

        self.console.print(table)


@click.command()
@remote_options
@click.option("--commit", default="", help="Filter by commit")
@click.option("--group", "group_uid", default="", help="Filter by deployment group")
@click.option("--type", "activity_type", default="", help="Filter by activity type")
@click.option("--limit", default=0, type=int, help="Maximum number of activities")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
@click.pass_context
def activities(ctx, project, service, remote, host, commit, group_uid, activity_type, limit, json_output):
    """
    Show project activities

    \b
    Examples:
      we activities -p photos
      we activities -p photos --type DEPLOY_FAILED --limit 10
    """
    cmd = ActivitiesCommand(
        ActivityFilter(commit=commit, group_uid=group_uid, limit=limit, type=activity_type),
        project=project,
        service=service,
        remote=remote,
        host=host,
        verbose=is_verbose(ctx),
        json_output=json_output,
    )
    cmd.run()
