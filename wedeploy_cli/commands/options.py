"""Shared click options for remote commands"""

import functools

import click


def remote_options(func):
    """Add --project, --service, --remote and --url to a command."""

    @click.option("--url", "-u", "host", default="", help="Service or project address (e.g. web-photos.wedeploy.io)")
    @click.option("--remote", "-r", default="", help="Remote to use")
    @click.option("--service", "-s", default="", help="Service ID")
    @click.option("--project", "-p", default="", help="Project ID")
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        return func(*args, **kwargs)

    return wrapper


def is_verbose(ctx: click.Context) -> bool:
    obj = ctx.find_root().obj or {}
    return bool(obj.get("verbose"))
