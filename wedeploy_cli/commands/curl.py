"""Curl command - Run curl against the remote API with credentials attached"""

import json
import shlex
import subprocess
from typing import List, Optional
from urllib.parse import urlsplit

import click

from wedeploy_cli.base import RemoteCommand
from wedeploy_cli.commands.options import is_verbose
from wedeploy_cli.core.config_loader import Context
from wedeploy_cli.exceptions import ValidationError
from wedeploy_cli.logger import debug


def expand_url(context: Context, path: str) -> str:
    """
    Expand /path to the infrastructure URL.

    Full URLs are only accepted on the infrastructure host, so credentials
    never leak to another server.

    Raises:
        ValidationError: URL points outside the infrastructure
    """
    if path.startswith("/"):
        return context.infrastructure.rstrip("/") + path

    target = urlsplit(path)
    infrastructure = urlsplit(context.infrastructure)
    if (target.scheme, target.netloc) != (infrastructure.scheme, infrastructure.netloc):
        raise ValidationError(f"refusing due to possibly unsafe URL value: {path}")
    return path


def build_curl_args(
    context: Context,
    method: str,
    path: str,
    data: Optional[str] = None,
    headers: Optional[List[str]] = None,
    verbose: bool = False,
) -> List[str]:
    args = ["-sS", "-X", method.upper(), expand_url(context, path)]

    for header in headers or []:
        args += ["-H", header]
    if data is not None:
        args += ["-d", data]
    if verbose:
        args.append("--verbose")

    if context.token:
        args += ["-H", f"Authorization: Bearer {context.token}"]
    elif context.username and context.password:
        args += ["-u", f"{context.username}:{context.password}"]

    return args


class CurlCommand(RemoteCommand):
    """Pipe a request to curl and pretty print JSON responses."""

    command_name = "curl"

    def __init__(
        self,
        method: str,
        path: str,
        data: Optional[str] = None,
        headers: Optional[List[str]] = None,
        print_only: bool = False,
        pretty: bool = True,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.method = method
        self.path = path
        self.data = data
        self.headers = headers or []
        self.print_only = print_only
        self.pretty = pretty

    def execute(self) -> None:
        context = self.resolve()
        args = build_curl_args(
            context, self.method, self.path, self.data, self.headers, verbose=self.verbose
        )

        if self.print_only:
            self.console.print(shlex.join(["curl"] + args), markup=False, highlight=False, soft_wrap=True)
            return

        debug(f"Running curl {shlex.join(args)}")

        if not self.pretty:
            result = subprocess.run(["curl"] + args)
            if result.returncode != 0:
                raise SystemExit(result.returncode)
            return

        result = subprocess.run(["curl"] + args, capture_output=True, text=True)
        if result.stderr:
            self.err_console.print(result.stderr.rstrip(), markup=False, highlight=False)
        if result.returncode != 0:
            raise SystemExit(result.returncode)

        self.print_body(result.stdout)

    def print_body(self, body: str) -> None:
        try:
            json.loads(body)
        except ValueError:
            self.console.print(body, end="", markup=False, highlight=False)
            return
        self.console.print_json(body)


@click.command()
@click.argument("method")
@click.argument("path")
@click.option("--data", "-d", default=None, help="Request body")
@click.option("--header", "-H", "headers", multiple=True, help="Extra request header")
@click.option("--remote", "-r", default="", help="Remote to use")
@click.option("--print", "print_only", is_flag=True, help="Print command instead of invoking")
@click.option("--no-pretty", is_flag=True, help="Don't pretty print JSON")
@click.pass_context
def curl(ctx, method, path, data, headers, remote, print_only, no_pretty):
    """
    Do requests with curl

    \b
    Examples:
      we curl GET /projects
      we curl POST /projects -d '{"projectId": "photos"}'
      we curl GET /projects --print
    """
    cmd = CurlCommand(
        method,
        path,
        data=data,
        headers=list(headers),
        print_only=print_only,
        pretty=not no_pretty,
        remote=remote,
        verbose=is_verbose(ctx),
    )
    cmd.run()
