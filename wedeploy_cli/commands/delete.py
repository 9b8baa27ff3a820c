"""Delete command - Remove a project or service from a remote"""

import click

from wedeploy_cli.base import RemoteCommand
from wedeploy_cli.commands.options import remote_options, is_verbose
from wedeploy_cli.exceptions import ValidationError


class DeleteCommand(RemoteCommand):
    command_name = "delete"

    def __init__(self, force: bool = False, **kwargs):
        super().__init__(**kwargs)
        self.force = force

    def execute(self) -> None:
        context = self.resolve()
        project_id = self.project_id()
        service_id = self.service_id()

        if service_id:
            self.services.get(project_id, service_id)
            question = f'Do you really want to delete the service "{service_id}" on project "{project_id}"?'
        else:
            self.projects.get(project_id)
            question = f'Do you really want to delete the project "{project_id}"?'

        if not self.force and not self.confirm(question):
            raise ValidationError("Deletion canceled")

        if service_id:
            self.services.delete(project_id, service_id)
            self.print_success(
                f'Deleting service "{service_id}" on project "{project_id}" on {context.remote}'
            )
        else:
            self.projects.delete(project_id)
            self.print_success(f'Deleting project "{project_id}" on {context.remote}')


@click.command()
@remote_options
@click.option("--force", is_flag=True, help="Delete without confirmation")
@click.pass_context
def delete(ctx, project, service, remote, host, force):
    """
    Delete a project or service

    \b
    Examples:
      we delete -p photos
      we delete -p photos -s web --force
    """
    cmd = DeleteCommand(
        force=force,
        project=project,
        service=service,
        remote=remote,
        host=host,
        verbose=is_verbose(ctx),
    )
    cmd.run()
