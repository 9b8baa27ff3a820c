"""
Result Models

Dataclass models for operation results and aggregated failures.
"""

from dataclasses import dataclass, field
from typing import List

from wedeploy_cli.constants import ERROR_LIST_BANNER, ERROR_LINK_BANNER


@dataclass
class ExecutionResult:
    """Result of a subprocess execution (docker, hooks)."""

    returncode: int
    stdout: str = ""
    stderr: str = ""
    command: str = ""

    @property
    def is_success(self) -> bool:
        """Check if execution succeeded."""
        return self.returncode == 0

    @property
    def is_failure(self) -> bool:
        """Check if execution failed."""
        return self.returncode != 0

    @property
    def output(self) -> str:
        """Get combined output (stdout + stderr)."""
        return f"{self.stdout}\n{self.stderr}".strip()

    def __repr__(self) -> str:
        return f"ExecutionResult(returncode={self.returncode}, command='{self.command[:50]}...')"


@dataclass
class ServiceError:
    """Failure of a single service, tagged with the path it was read from."""

    path: str
    error: Exception

    def __str__(self) -> str:
        return f"{self.path}: {self.error}"


class ServiceErrors(Exception):
    """
    Aggregated per-service failures of a fan-out operation.

    Every failing service is listed; nothing is dropped.
    """

    def __init__(self, items: List[ServiceError] = None, banner: str = ERROR_LIST_BANNER):
        self.items = list(items or [])
        self.banner = banner
        super().__init__(self.format_message())

    def format_message(self) -> str:
        lines = [str(item) for item in self.items]
        return "\n".join([self.banner] + lines)

    def __str__(self) -> str:
        return self.format_message()

    def __len__(self) -> int:
        return len(self.items)


class LinkErrors(ServiceErrors):
    """Aggregated linking failures."""

    def __init__(self, items: List[ServiceError] = None):
        super().__init__(items, banner=ERROR_LINK_BANNER)


@dataclass
class FinalStates:
    """Services partitioned by how their deployment ended."""

    build_failed: List[str] = field(default_factory=list)
    deploy_failed: List[str] = field(default_factory=list)
    succeeded: List[str] = field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        return bool(self.build_failed or self.deploy_failed)
