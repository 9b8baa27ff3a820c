#!/usr/bin/env python3
"""WeDeploy CLI - Main entry point"""

import functools
import os
import sys

from rich.console import Console

import rich_click as click
from click.exceptions import Abort, ClickException, UsageError

from wedeploy_cli import __version__
from wedeploy_cli.logger import set_verbose

# Configure rich-click help output
click.rich_click.USE_RICH_MARKUP = True
click.rich_click.USE_MARKDOWN = False
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
click.rich_click.MAX_WIDTH = 100

# COMMANDS: Bold cyan
click.rich_click.STYLE_COMMAND = "bold cyan"

# OPTIONS: Bold magenta
click.rich_click.STYLE_OPTION = "bold magenta"
click.rich_click.STYLE_SWITCH = "bold green"
click.rich_click.STYLE_ARGUMENT = "bold yellow"

# HEADERS: Bold cyan
click.rich_click.STYLE_HEADER_TEXT = "bold cyan"
click.rich_click.STYLE_USAGE = "bold yellow"
click.rich_click.STYLE_USAGE_COMMAND = "bold cyan"

# HELP TEXT
click.rich_click.STYLE_HELPTEXT_FIRST_LINE = "bold white"
click.rich_click.STYLE_HELPTEXT = ""
click.rich_click.STYLE_OPTION_HELP = ""

# METAVARS: Yellow
click.rich_click.STYLE_METAVAR = "bold yellow"
click.rich_click.STYLE_METAVAR_APPEND = "dim yellow"
click.rich_click.STYLE_METAVAR_SEPARATOR = "dim"

# REQUIRED: Red
click.rich_click.STYLE_REQUIRED_SHORT = "bold red"
click.rich_click.STYLE_REQUIRED_LONG = "bold red"

# DEFAULTS: Dim cyan
click.rich_click.STYLE_OPTION_DEFAULT = "dim cyan"
click.rich_click.STYLE_EPILOG_TEXT = "dim"
click.rich_click.STYLE_FOOTER_TEXT = "dim"

# PANEL BORDERS: Cyan
click.rich_click.STYLE_OPTIONS_PANEL_BORDER = "cyan"
click.rich_click.STYLE_COMMANDS_PANEL_BORDER = "cyan"

# ALIGNMENT
click.rich_click.ALIGN_OPTIONS_PANEL = "left"
click.rich_click.ALIGN_ERRORS_PANEL = "left"
click.rich_click.ERRORS_EPILOGUE = ""

from wedeploy_cli.commands import (  # noqa: E402
    activities,
    curl,
    delete,
    deploy,
    env_var,
    link,
    listing,
    local,
    logs,
    new,
    restart,
)

console = Console(stderr=True)


def handle_cli_errors(func):
    """Decorator to handle CLI errors gracefully."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except UsageError as e:
            console.print(f"\n[bold red]✗ Error:[/bold red] {e.format_message()}\n", highlight=False)
            if e.ctx and e.ctx.command:
                console.print(
                    f"[dim]Run[/dim] [cyan]{e.ctx.command_path} --help[/cyan] [dim]for usage information[/dim]\n"
                )
            sys.exit(e.exit_code)
        except ClickException as e:
            e.show()
            sys.exit(e.exit_code)
        except (Abort, KeyboardInterrupt):
            console.print("\n\n[yellow]⚠️  Operation cancelled by user[/yellow]")
            sys.exit(130)
        except Exception as e:
            console.print(f"\n[bold red]✗ Unexpected error:[/bold red] {e}\n")
            console.print("[dim]If this persists, please report this issue.[/dim]\n")

            if os.environ.get("WEDEPLOY_VERBOSE"):
                import traceback

                console.print("[dim]Traceback:[/dim]")
                traceback.print_exc()
            sys.exit(1)

    return wrapper


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Verbose output (requests, docker commands)")
@click.version_option(version=__version__, prog_name="we")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """
    WeDeploy CLI - Deploy and develop services locally or in the cloud.

    \b
    Quick Start:
      we run --detach     # Start the local infrastructure
      we link             # Run the current project locally
      we deploy           # Deploy to the cloud

    \b
    Daily Workflow:
      we list -w                  # Watch projects and services
      we logs -p photos -f        # Follow logs
      we activities -p photos     # Deployment history
      we env-var set KEY=VALUE    # Configure a service
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose or bool(os.environ.get("WEDEPLOY_VERBOSE"))
    set_verbose(ctx.obj["verbose"])


# Cloud
cli.add_command(deploy.deploy)
cli.add_command(listing.list_)
cli.add_command(activities.activities)
cli.add_command(logs.logs)
cli.add_command(env_var.env_var)
cli.add_command(new.new)
cli.add_command(curl.curl)
cli.add_command(restart.restart)
cli.add_command(delete.delete)
# Local infrastructure
cli.add_command(local.run)
cli.add_command(local.stop)
cli.add_command(local.dev)
cli.add_command(link.link)
cli.add_command(link.unlink)


@handle_cli_errors
def main():
    """Main entry point with error handling."""
    cli(standalone_mode=False)


if __name__ == "__main__":
    main()
