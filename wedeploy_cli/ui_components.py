"""
WeDeploy CLI - UI Components
Standardized headers, prompts and symbols
"""

from typing import Callable, Optional

from rich.console import Console

from wedeploy_cli.constants import YES_ANSWERS, NO_ANSWERS

LOGO = "we"

# Color scheme
BRAND_COLOR = "cyan"
SUCCESS_COLOR = "green"
WARNING_COLOR = "yellow"
ERROR_COLOR = "red"

SUCCESS_SYMBOL = "✓"
ERROR_SYMBOL = "✗"
WARNING_SYMBOL = "⚠"


def show_header(
    title: str,
    subtitle: str = None,
    project: str = None,
    service: str = None,
    details: dict = None,
    console: Console = None,
):
    """
    Display a standardized command header.

    Args:
        title: Main title (e.g., "Deploy", "Local Infrastructure")
        subtitle: Optional subtitle line
        project: Project id (if applicable)
        service: Service id (if applicable)
        details: Additional key-value pairs to display
        console: Rich Console instance (creates new if None)

    Example:
        show_header(
            title="Deploy",
            project="photos",
            details={"Remote": "wedeploy"}
        )
    """
    if console is None:
        console = Console()

    prefix = f" [bold color(214)]{LOGO}[/bold color(214)] [dim]›[/dim]"

    console.print(f"{prefix} [bold white]{title}[/bold white]")

    if subtitle:
        console.print(f"{prefix} [dim]{subtitle}[/dim]")
    if project:
        console.print(f"{prefix} Project: [cyan]{project}[/cyan]")
    if service:
        console.print(f"{prefix} Service: [cyan]{service}[/cyan]")
    if details:
        for key, value in details.items():
            console.print(f"{prefix} {key}: [cyan]{value}[/cyan]")

    console.print()


def prompt_yes_no(
    question: str,
    input_fn: Callable[[], str] = input,
    console: Optional[Console] = None,
) -> bool:
    """
    Ask a yes/no question until a recognizable answer is given.

    Accepts y/yes/yep/yeh/yeah and n/no/nah/nope (case-insensitive).
    """
    console = console or Console()

    while True:
        console.print(
            f"{question} [bold bright_white]\\[y/n][/bold bright_white]: ", end=""
        )
        answer = input_fn().strip().lower()

        if answer in YES_ANSWERS:
            return True
        if answer in NO_ANSWERS:
            return False
        if not answer:
            console.print("Select an option.")
            continue

        console.print(f'No valid answer was found for "{answer}"', markup=False)
