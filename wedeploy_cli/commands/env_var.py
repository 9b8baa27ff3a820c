"""Environment variables commands - Show, set and unset service variables"""

from pathlib import Path
from typing import Dict, List, Optional

import click
from dotenv import dotenv_values
from rich.table import Table

from wedeploy_cli.base import RemoteCommand
from wedeploy_cli.commands.options import remote_options, is_verbose
from wedeploy_cli.exceptions import ConfigurationError, ValidationError


def parse_assignments(items: List[str]) -> Dict[str, str]:
    """
    Parse KEY=VALUE items, or KEY VALUE pairs when no item has "=".

    Raises:
        ValidationError: Pairs are incomplete or a key is empty
    """
    envs: Dict[str, str] = {}

    if items and all("=" not in item for item in items):
        if len(items) % 2 != 0:
            raise ValidationError(
                "Invalid number of arguments",
                "Use KEY=VALUE or KEY VALUE pairs",
            )
        for key, value in zip(items[::2], items[1::2]):
            envs[key] = value
        return envs

    for item in items:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise ValidationError(f'Invalid environment variable "{item}"', "Use KEY=VALUE")
        envs[key] = value

    return envs


def read_env_file(path: Path) -> Dict[str, str]:
    if not path.is_file():
        raise ValidationError(f"Environment file not found: {path}")
    return {k: v or "" for k, v in dotenv_values(path).items()}


class EnvVarCommand(RemoteCommand):
    """Base for commands acting on one service's variables."""

    def target(self):
        project_id = self.project_id()
        service_id = self.service_id()
        if not service_id:
            raise ConfigurationError(
                "Service not found",
                "Use --service or run this command inside a service directory",
            )
        return project_id, service_id


class EnvVarShowCommand(EnvVarCommand):
    command_name = "env-var"

    def execute(self) -> None:
        project_id, service_id = self.target()
        envs = self.services.get_env(project_id, service_id)

        if self.json_output:
            self.output_json({e.name: e.value for e in envs})
            return

        if not envs:
            self.console.print(f"No environment variable found for {service_id}.")
            return

        table = Table(show_header=True, header_style="bold cyan", box=None)
        table.add_column("#", style="dim")
        table.add_column("Name", style="bold")
        table.add_column("Value")
        for index, env in enumerate(envs, 1):
            table.add_row(str(index), env.name, env.value)
        self.console.print(table)


class EnvVarSetCommand(EnvVarCommand):
    """
    Set variables on a service.

    With --replace the whole set is replaced in one request; otherwise
    each variable is set individually.
    """

    command_name = "env-var"

    def __init__(
        self,
        items: List[str],
        env_file: Optional[Path] = None,
        replace: bool = False,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.items = items
        self.env_file = env_file
        self.replace = replace

    def execute(self) -> None:
        envs: Dict[str, str] = {}
        if self.env_file is not None:
            envs.update(read_env_file(self.env_file))
        envs.update(parse_assignments(self.items))

        if not envs and not self.replace:
            raise ValidationError("No environment variable to set", "Use KEY=VALUE")

        project_id, service_id = self.target()

        if self.replace:
            self.services.replace_env(project_id, service_id, envs)
            self.print_success(f"Environment variables of {service_id} replaced ({len(envs)})")
            return

        for name, value in envs.items():
            self.services.set_env(project_id, service_id, name, value)
            self.print_success(f"Environment variable {name} set on {service_id}")

        self.print_dim("Restart the service to apply the changes")


class EnvVarUnsetCommand(EnvVarCommand):
    command_name = "env-var"

    def __init__(self, names: List[str], **kwargs):
        super().__init__(**kwargs)
        self.names = names

    def execute(self) -> None:
        if not self.names:
            raise ValidationError("No environment variable to unset", "Pass the variable names")

        project_id, service_id = self.target()
        for name in self.names:
            self.services.unset_env(project_id, service_id, name)
            self.print_success(f"Environment variable {name} unset on {service_id}")


@click.group(name="env-var")
def env_var():
    """Show and configure service environment variables"""


@env_var.command(name="show")
@remote_options
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
@click.pass_context
def env_var_show(ctx, project, service, remote, host, json_output):
    """
    Show environment variables of a service

    \b
    Examples:
      we env-var show -p photos -s web
    """
    cmd = EnvVarShowCommand(
        project=project,
        service=service,
        remote=remote,
        host=host,
        verbose=is_verbose(ctx),
        json_output=json_output,
    )
    cmd.run()


@env_var.command(name="set")
@click.argument("items", nargs=-1)
@remote_options
@click.option("--file", "-F", "env_file", type=click.Path(path_type=Path), help="Read variables from a .env file")
@click.option("--replace", is_flag=True, help="Replace every variable of the service")
@click.pass_context
def env_var_set(ctx, items, project, service, remote, host, env_file, replace):
    """
    Set environment variables of a service

    \b
    Examples:
      we env-var set DEBUG=true LEVEL=info
      we env-var set DEBUG true
      we env-var set --file .env.production --replace
    """
    cmd = EnvVarSetCommand(
        list(items),
        env_file=env_file,
        replace=replace,
        project=project,
        service=service,
        remote=remote,
        host=host,
        verbose=is_verbose(ctx),
    )
    cmd.run()


@env_var.command(name="unset")
@click.argument("names", nargs=-1)
@remote_options
@click.pass_context
def env_var_unset(ctx, names, project, service, remote, host):
    """
    Unset environment variables of a service

    \b
    Examples:
      we env-var unset DEBUG LEVEL
    """
    cmd = EnvVarUnsetCommand(
        list(names),
        project=project,
        service=service,
        remote=remote,
        host=host,
        verbose=is_verbose(ctx),
    )
    cmd.run()
