"""New command - Create projects and services on a remote"""

from typing import List

import click
import inquirer
from rich.prompt import Prompt

from wedeploy_cli.base import RemoteCommand
from wedeploy_cli.commands.options import remote_options, is_verbose
from wedeploy_cli.exceptions import ValidationError
from wedeploy_cli.models.descriptors import ServiceDescriptor
from wedeploy_cli.models.remote import CatalogItem


def catalog_choices(catalog: List[CatalogItem]):
    """(label, image) pairs for an inquirer list."""
    return [(f"{item.name or item.image}  {item.image}", item.image) for item in catalog]


class NewProjectCommand(RemoteCommand):
    command_name = "new"

    def execute(self) -> None:
        context = self.resolve()
        project_id = self.project_id(required=False)

        if not project_id and not self.json_output:
            project_id = Prompt.ask(
                "[?] Choose a Project ID [dim](default: random)[/dim]",
                default="",
                show_default=False,
                console=self.console,
            ).strip()

        project = self.projects.create(project_id)

        if self.json_output:
            self.output_json(project.to_dict())
            return

        self.print_success(
            f'Project "{project.project_id}.{context.service_domain}" created on {context.remote}'
        )


class NewServiceCommand(RemoteCommand):
    """
    Create a service in a project.

    The image is picked from the remote catalog unless --image is given.
    """

    command_name = "new"

    def __init__(self, image: str = "", **kwargs):
        super().__init__(**kwargs)
        self.image = image

    def select_image(self) -> str:
        if self.image:
            return self.image

        catalog = self.services.catalog()
        if not catalog:
            raise ValidationError("No service image available on this remote", "Use --image")

        questions = [
            inquirer.List(
                "image",
                message="Select a Service Type",
                choices=catalog_choices(catalog),
                carousel=True,
            )
        ]
        answers = inquirer.prompt(questions, raise_keyboard_interrupt=True)
        if not answers:
            raise ValidationError("No service image selected")
        return answers["image"]

    def execute(self) -> None:
        context = self.resolve()
        project_id = self.project_id()
        service_id = self.service_id()

        if not service_id:
            service_id = Prompt.ask(
                "[?] Choose a Service ID [dim](default: random)[/dim]",
                default="",
                show_default=False,
                console=self.console,
            ).strip()

        image = self.select_image()
        service = self.services.create(
            project_id, ServiceDescriptor(id=service_id, image=image)
        )

        if self.json_output:
            self.output_json(service.to_dict())
            return

        self.print_success(
            f'Service "{service.service_id or service_id}-{project_id}.{context.service_domain}" created'
        )


@click.group()
def new():
    """Create a project or service"""


@new.command(name="project")
@remote_options
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
@click.pass_context
def new_project(ctx, project, service, remote, host, json_output):
    """
    Create a project

    \b
    Examples:
      we new project -p photos
      we new project -r local
    """
    cmd = NewProjectCommand(
        project=project,
        service=service,
        remote=remote,
        host=host,
        verbose=is_verbose(ctx),
        json_output=json_output,
    )
    cmd.run()


@new.command(name="service")
@remote_options
@click.option("--image", default="", help="Service image (e.g. wedeploy/data)")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
@click.pass_context
def new_service(ctx, project, service, remote, host, image, json_output):
    """
    Create a service

    \b
    Examples:
      we new service -p photos
      we new service -p photos -s db --image wedeploy/data
    """
    cmd = NewServiceCommand(
        image=image,
        project=project,
        service=service,
        remote=remote,
        host=host,
        verbose=is_verbose(ctx),
        json_output=json_output,
    )
    cmd.run()
