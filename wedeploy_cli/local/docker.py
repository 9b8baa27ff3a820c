"""
Docker CLI wrapper

Runs docker subcommands and returns ExecutionResult objects.
"""

import os
import shutil
import stat
import subprocess
from typing import List, Optional

from wedeploy_cli.constants import ERROR_NOT_SOCKET
from wedeploy_cli.exceptions import DockerError, InfrastructureError
from wedeploy_cli.logger import DeployLogger, debug
from wedeploy_cli.models.results import ExecutionResult


class DockerCLI:
    """
    Thin wrapper over the docker binary.

    Every call is logged; check=True turns a non-zero exit into DockerError.
    """

    def __init__(self, binary: str = "docker", logger: Optional[DeployLogger] = None):
        self.binary = binary
        self.logger = logger

    def available(self) -> bool:
        return shutil.which(self.binary) is not None

    def require(self) -> None:
        if not self.available():
            raise InfrastructureError(
                "docker is not installed or not on PATH",
                "Install Docker from https://www.docker.com/ and try again",
            )

    def command_line(self, args: List[str]) -> str:
        return " ".join([self.binary] + list(args))

    def run(self, args: List[str], check: bool = True) -> ExecutionResult:
        cmd = [self.binary] + list(args)
        cmd_string = self.command_line(args)

        debug(f"Running {cmd_string}")
        if self.logger:
            self.logger.log_command(cmd_string)

        try:
            result = subprocess.run(cmd, capture_output=True, text=True, check=False)
        except OSError as e:
            raise DockerError(cmd_string, -1, str(e))

        exec_result = ExecutionResult(
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            command=cmd_string,
        )

        if self.logger:
            self.logger.log_output(exec_result.stdout, "stdout")
            self.logger.log_output(exec_result.stderr, "stderr")

        if check and exec_result.is_failure:
            raise DockerError(cmd_string, exec_result.returncode, exec_result.stderr)

        return exec_result

    def lines(self, args: List[str]) -> List[str]:
        """Run and return the non-empty stdout lines."""
        return [line.strip() for line in self.run(args).stdout.splitlines() if line.strip()]

    def wait(self, container: str) -> int:
        """Block until the container exits and return its exit code."""
        result = self.run(["wait", container], check=False)
        try:
            return int(result.stdout.strip())
        except ValueError:
            return result.returncode


def check_docker_host(environ=None) -> None:
    """
    Raises:
        InfrastructureError: DOCKER_HOST points to something other than a socket
    """
    environ = os.environ if environ is None else environ
    host = environ.get("DOCKER_HOST")
    if not host:
        return

    path = host[len("unix://"):] if host.startswith("unix://") else host
    try:
        mode = os.stat(path).st_mode
    except OSError:
        raise InfrastructureError(ERROR_NOT_SOCKET.format(host=host))

    if not stat.S_ISSOCK(mode):
        raise InfrastructureError(ERROR_NOT_SOCKET.format(host=host))
