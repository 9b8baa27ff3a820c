"""
Logging system for WeDeploy CLI
Provides real-time logging to files with clean console output
"""

import os
import re
from pathlib import Path
from datetime import datetime
from typing import Optional, TextIO
from rich.console import Console

from wedeploy_cli.constants import LOGS_DIRNAME

console = Console()
err_console = Console(stderr=True)

ANSI_ESCAPE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")

_verbose = bool(os.environ.get("WEDEPLOY_VERBOSE"))


def set_verbose(enabled: bool) -> None:
    """Toggle process-wide verbose debug output."""
    global _verbose
    _verbose = enabled


def is_verbose() -> bool:
    return _verbose


def debug(message: str) -> None:
    """Print a debug line on stderr when verbose mode is on."""
    if _verbose:
        err_console.print(message, style="dim", markup=False, highlight=False)


def logs_root() -> Path:
    override = os.environ.get("WEDEPLOY_LOGS_DIR")
    if override:
        return Path(override).expanduser()
    return Path.home() / LOGS_DIRNAME


class DeployLogger:
    """
    Manages logging for long-running operations
    - Writes all output to log files in real-time
    - Shows clean progress UI in console (unless verbose)
    - Captures errors with context
    """

    def __init__(self, project_name: str, operation: str, verbose: bool = False):
        """
        Initialize logger

        Args:
            project_name: Project id (or 'local' for infrastructure operations)
            operation: Operation name (e.g., 'deploy', 'link', 'run')
            verbose: If True, show all output in console
        """
        self.project_name = project_name
        self.operation = operation
        self.verbose = verbose
        self.log_file: Optional[TextIO] = None
        self.log_path: Optional[Path] = None
        self.current_step = ""
        self.has_errors = False

        # Structure: ~/.we_logs/{project}/{date}/{time}_{operation}.log
        now = datetime.now()
        date_str = now.strftime("%Y-%m-%d")
        time_str = now.strftime("%H-%M-%S")

        project_logs_dir = logs_root() / project_name / date_str
        project_logs_dir.mkdir(parents=True, exist_ok=True)

        self.log_path = project_logs_dir / f"{time_str}_{operation}.log"

        # Line buffered for real-time
        self.log_file = open(self.log_path, "w", buffering=1)

        self._write_log_header()

    def _write_log_header(self):
        """Write log file header"""
        header = f"""
{"=" * 80}
WeDeploy CLI Log
{"=" * 80}
Project: {self.project_name}
Operation: {self.operation}
Started: {datetime.now().isoformat()}
{"=" * 80}

"""
        self.log_file.write(header)
        self.log_file.flush()

    def log(self, message: str, level: str = "INFO"):
        """
        Log a message to file and optionally console

        Args:
            message: Message to log
            level: Log level (INFO, WARNING, ERROR, DEBUG)
        """
        timestamp = datetime.now().strftime("%H:%M:%S")
        log_line = f"[{timestamp}] [{level}] {ANSI_ESCAPE.sub('', message)}\n"

        if self.log_file:
            self.log_file.write(log_line)
            self.log_file.flush()

        if self.verbose:
            if level == "ERROR":
                console.print(f"[red]{message}[/red]")
            elif level == "WARNING":
                console.print(f"[yellow]{message}[/yellow]")
            elif level == "DEBUG":
                console.print(f"[dim]{message}[/dim]")
            else:
                console.print(message)

    def log_command(self, command: str):
        """Log a command being executed"""
        self.log(f"Executing: {command}", "DEBUG")

    def log_output(self, output: str, stream: str = "stdout"):
        """
        Log command output

        Always written to the log file, shown in console only if verbose.

        Args:
            output: Command output (single line or multiline)
            stream: Stream name (stdout, stderr)
        """
        if not output:
            return

        clean_output = ANSI_ESCAPE.sub("", output)

        if self.log_file:
            for line in clean_output.splitlines():
                self.log_file.write(f"  [{stream}] {line}\n")
            self.log_file.flush()

        if self.verbose:
            console.print(output, markup=False)

    def log_error(self, error: str, context: Optional[str] = None):
        """
        Log an error with context

        Args:
            error: Error message
            context: Additional context (e.g., command that failed)
        """
        self.has_errors = True

        error_block = f"""
{"!" * 80}
ERROR OCCURRED
{"!" * 80}
{ANSI_ESCAPE.sub("", error)}
"""
        if context:
            error_block += f"\nContext: {context}\n"

        error_block += f"{'!' * 80}\n\n"

        if self.log_file:
            self.log_file.write(error_block)
            self.log_file.flush()

        if not self.verbose:
            console.print()

        console.print(f"[bold red]✗ {error}[/bold red]", highlight=False)
        if context:
            console.print(f"  [color(208)]{context}[/color(208)]")

    def step(self, step_name: str):
        """
        Start a new step

        Args:
            step_name: Name of the step
        """
        if self.current_step and not self.verbose:
            console.print()

        self.current_step = step_name
        self.log(f"Step: {step_name}", "INFO")

        if not self.verbose:
            console.print(f"[color(214)]▶[/color(214)] [white]{step_name}[/white]")

    def success(self, message: str):
        """Log a success message"""
        self.log(message, "INFO")

        if not self.verbose:
            console.print(f"  [dim]✓ {message}[/dim]")

    def warning(self, message: str):
        """Log a warning message"""
        self.log(message, "WARNING")

        if not self.verbose:
            console.print(f"  [yellow]⚠[/yellow] [dim]{message}[/dim]")

    def close(self):
        """Close log file"""
        if self.log_file:
            footer = f"""
{"=" * 80}
Completed: {datetime.now().isoformat()}
Status: {"FAILED" if self.has_errors else "SUCCESS"}
{"=" * 80}
"""
            self.log_file.write(footer)
            self.log_file.close()
            self.log_file = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, _exc_tb):
        if exc_type is not None and exc_type not in (SystemExit, KeyboardInterrupt):
            self.log_error(
                str(exc_val) if exc_val else "Operation failed",
                context=f"{exc_type.__name__}",
            )
        self.close()
        return False
