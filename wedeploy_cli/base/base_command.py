"""
Base Command Class

Abstract base for all WeDeploy CLI commands.
Provides common functionality and structure.
"""

from abc import ABC, abstractmethod
from typing import Optional, Any
import json
from rich.console import Console
from wedeploy_cli.core import error_messages
from wedeploy_cli.exceptions import WeDeployError
from wedeploy_cli.logger import DeployLogger
from wedeploy_cli.models.results import ServiceErrors
from wedeploy_cli.ui_components import show_header, prompt_yes_no


class BaseCommand(ABC):
    """
    Abstract base command class.

    Provides:
    - Logger initialization
    - Header display
    - Error handling with friendly API messages
    - JSON output support
    """

    command_name = "we"

    def __init__(self, verbose: bool = False, json_output: bool = False):
        self.verbose = verbose
        self.json_output = json_output
        self.console = Console()
        self.err_console = Console(stderr=True)
        self.logger: Optional[DeployLogger] = None

    def init_logger(
        self, project_name: str, command_name: str
    ) -> Optional[DeployLogger]:
        """
        Initialize command logger (skip in JSON mode).

        Args:
            project_name: Project id (use "local" for infrastructure commands)
            command_name: Command name
        """
        if self.json_output:
            return None
        self.logger = DeployLogger(project_name, command_name, verbose=self.verbose)
        return self.logger

    def output_json(self, data: Any) -> None:
        print(json.dumps(data, indent=2))

    def show_header(
        self,
        title: str,
        subtitle: Optional[str] = None,
        project: Optional[str] = None,
        service: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> None:
        """Show command header (skip in JSON or verbose mode)."""
        if not self.verbose and not self.json_output:
            show_header(
                title=title,
                subtitle=subtitle,
                project=project,
                service=service,
                details=details,
                console=self.console,
            )

    def print_success(self, message: str) -> None:
        if not self.json_output:
            self.console.print(f"[green]✓ {message}[/green]")

    def print_dim(self, message: str) -> None:
        if not self.json_output:
            self.console.print(f"[dim]{message}[/dim]")

    def confirm(self, question: str) -> bool:
        return prompt_yes_no(question, console=self.console)

    @abstractmethod
    def execute(self, **kwargs) -> None:
        """
        Execute command logic.

        Must be implemented by subclasses.
        """
        pass

    def _logs_hint(self) -> None:
        if self.logger:
            self.err_console.print(f"[dim]Logs saved to:[/dim] {self.logger.log_path}\n")

    def run(self, **kwargs) -> None:
        """
        Run command with error handling.

        Args:
            **kwargs: Command arguments
        """
        try:
            self.execute(**kwargs)
        except KeyboardInterrupt:
            self.err_console.print("\n[yellow]⚠️  Operation cancelled by user[/yellow]")
            self._logs_hint()
            raise SystemExit(130)
        except SystemExit:
            raise
        except ServiceErrors as e:
            self.err_console.print(f"\n{e}\n", markup=False, highlight=False)
            if self.logger:
                self.logger.log_error(str(e))
            self._logs_hint()
            raise SystemExit(1)
        except WeDeployError as e:
            friendly = error_messages.handle(self.command_name, e)
            self.err_console.print(f"\n[bold red]✗[/bold red] {friendly}\n", highlight=False)
            if self.logger:
                self.logger.log_error(str(friendly))
            self._logs_hint()
            raise SystemExit(1)
        except FileNotFoundError as e:
            self.err_console.print(f"\n[bold red]✗ File not found:[/bold red] {e}\n")
            if self.logger:
                self.logger.log_error(f"File not found: {e}")
            self._logs_hint()
            raise SystemExit(1)
        except PermissionError as e:
            self.err_console.print(f"\n[bold red]✗ Permission denied:[/bold red] {e}\n")
            self.err_console.print("[dim]Try running with appropriate permissions[/dim]\n")
            if self.logger:
                self.logger.log_error(f"Permission error: {e}")
            self._logs_hint()
            raise SystemExit(1)
        except ValueError as e:
            self.err_console.print(f"\n[bold red]✗ Invalid value:[/bold red] {e}\n")
            if self.logger:
                self.logger.log_error(f"Value error: {e}")
            self._logs_hint()
            raise SystemExit(1)
        except Exception as e:
            error_type = type(e).__name__
            self.err_console.print(f"\n[bold red]✗ {error_type}:[/bold red] {e}\n")
            if self.logger:
                self.logger.log_error(f"{error_type}: {e}")
            self._logs_hint()
            raise SystemExit(1)
        finally:
            if self.logger:
                self.logger.close()
