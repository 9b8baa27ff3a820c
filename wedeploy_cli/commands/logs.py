"""Logs command - Show and follow service logs"""

import signal
import threading
from dataclasses import dataclass

import click

from wedeploy_cli.base import RemoteCommand
from wedeploy_cli.commands.options import remote_options, is_verbose
from wedeploy_cli.services.logs_client import (
    LogsFilter,
    LogsWatcher,
    parse_since,
    print_lines,
)


@dataclass
class LogsOptions:
    """Options for logs command."""

    level: str = ""
    since: str = ""
    instance: str = ""
    follow: bool = False


class LogsCommand(RemoteCommand):
    command_name = "logs"

    def __init__(self, options: LogsOptions, **kwargs):
        super().__init__(**kwargs)
        self.options = options

    def execute(self) -> None:
        project_id = self.project_id()
        service_id = self.service_id()

        logs_filter = LogsFilter(
            project=project_id,
            services=[service_id] if service_id else [],
            instance=self.options.instance,
            level=self.options.level,
            since=parse_since(self.options.since) if self.options.since else "",
        )

        if not self.options.follow:
            print_lines(self.logs.get_list(logs_filter), self.console)
            return

        watcher = LogsWatcher(self.logs, logs_filter)
        if threading.current_thread() is threading.main_thread():
            signal.signal(signal.SIGTERM, lambda signum, frame: watcher.stop())
        try:
            watcher.watch()
        except KeyboardInterrupt:
            watcher.stop()


@click.command()
@remote_options
@click.option("--instance", default="", help="Instance (container) ID prefix")
@click.option("--level", default="", help="Minimum log level")
@click.option("--since", default="", help="Show logs since (e.g. 30s, 5m, 2h, 1d or unix time)")
@click.option("--follow", "-f", is_flag=True, help="Keep watching for new logs")
@click.pass_context
def logs(ctx, project, service, remote, host, instance, level, since, follow):
    """
    Show logs of a project or service

    \b
    Examples:
      we logs -p photos
      we logs -p photos -s web --since 5m -f
    """
    cmd = LogsCommand(
        LogsOptions(level=level, since=since, instance=instance, follow=follow),
        project=project,
        service=service,
        remote=remote,
        host=host,
        verbose=is_verbose(ctx),
    )
    cmd.run()
