"""
Docker Machine

Starts, watches and stops the local WeDeploy infrastructure container.
"""

import os
import socket
import threading
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

import psutil
from rich.console import Console

from wedeploy_cli.constants import (
    DEBUG_PORTS,
    DOCKER_SOCKET,
    HOST_IP_ENV_VAR,
    LOCAL_CONTAINER_NAME,
    LOCAL_IMAGE,
    LOCAL_IMAGE_TAG,
    LOCAL_LABEL,
    LOCAL_LABEL_FILTER,
    LOCAL_NETWORK,
    LOCAL_NETWORK_ALIASES,
    LOCAL_PORTS,
    READINESS_INTERVAL,
    READINESS_MAX_ATTEMPTS,
    READINESS_TIMEOUT,
    SHUTDOWN_UNEXPECTED,
    SUCCESS_INFRA_READY,
    SUCCESS_INFRA_STOPPED,
    WARNING_CLEANUP_PARTIAL,
    WARNING_READINESS_UNVERIFIED,
)
from wedeploy_cli.exceptions import DockerError, PortsUnavailableError
from wedeploy_cli.livemsg import format_duration
from wedeploy_cli.local.docker import DockerCLI, check_docker_host
from wedeploy_cli.local.ports import is_port_available, unavailable_ports
from wedeploy_cli.local.shutdown import ShutdownListener
from wedeploy_cli.logger import DeployLogger, debug
from wedeploy_cli.services.projects_client import ProjectsClient

IMAGE_REF = f"{LOCAL_IMAGE}:{LOCAL_IMAGE_TAG}"


@dataclass
class RunFlags:
    """Modifiers for `we run`."""

    debug: bool = False
    dry_run: bool = False
    detach: bool = False
    view_mode: bool = False
    pull: bool = False


def host_ip() -> str:
    """First non-loopback IPv4 address of this host, or an empty string."""
    for _, addresses in sorted(psutil.net_if_addrs().items()):
        for address in addresses:
            if address.family == socket.AF_INET and not address.address.startswith("127."):
                return address.address
    return ""


class DockerMachine:
    """
    Local infrastructure lifecycle.

    States: not-running -> starting -> running -> stopping -> not-running.
    `started`, `ready` and `end` are one-shot events.
    """

    def __init__(
        self,
        projects: ProjectsClient,
        flags: Optional[RunFlags] = None,
        docker: Optional[DockerCLI] = None,
        port_check: Callable[[int], bool] = is_port_available,
        console: Optional[Console] = None,
        logger: Optional[DeployLogger] = None,
        environ=None,
    ):
        self.projects = projects
        self.flags = flags or RunFlags()
        self.docker = docker or DockerCLI(logger=logger)
        self.port_check = port_check
        self.console = console or Console()
        self.logger = logger
        self.environ = os.environ if environ is None else environ

        self.container = ""
        self.image = ""
        self.state = "not-running"
        self.started = threading.Event()
        self.ready = threading.Event()
        self.end = threading.Event()
        self._stopping = threading.Event()
        self._started_at = time.monotonic()

    # Discovery

    def load_docker_info(self) -> None:
        """Find an already running infrastructure container."""
        result = self.docker.run(
            [
                "ps",
                "--filter",
                f"ancestor={LOCAL_IMAGE}",
                "--format",
                "{{.ID}}\t{{.Image}}",
                "--no-trunc",
            ]
        )
        lines = [line for line in result.stdout.splitlines() if line.strip()]
        if not lines:
            debug("Running infrastructure not found on docker ps")
            self.container = ""
            return

        container, _, image = lines[0].partition("\t")
        self.container = container.strip()
        self.image = image.strip()
        self.state = "running"

    def has_image(self) -> bool:
        images = self.docker.lines(
            ["images", "--format", "{{.Repository}}:{{.Tag}}", LOCAL_IMAGE]
        )
        return IMAGE_REF in images

    def has_debug_ports(self) -> bool:
        result = self.docker.run(["port", self.container])
        return f"{DEBUG_PORTS[0]}/tcp" in result.stdout

    def ports(self) -> List[int]:
        ports = list(LOCAL_PORTS)
        if self.flags.debug:
            ports += DEBUG_PORTS
        return ports

    def run_args(self) -> List[str]:
        args = ["run"]
        for port in self.ports():
            args += ["--publish", f"{port}:{port}"]
        args += [
            "--volume",
            f"{DOCKER_SOCKET}:{DOCKER_SOCKET}",
            "--network",
            LOCAL_NETWORK,
            "--name",
            LOCAL_CONTAINER_NAME,
        ]
        for alias in LOCAL_NETWORK_ALIASES:
            args += ["--network-alias", alias]
        args += [
            "--env",
            f"{HOST_IP_ENV_VAR}={host_ip()}",
            "--label",
            LOCAL_LABEL,
            "--detach",
            IMAGE_REF,
        ]
        return args

    # Lifecycle

    def run(self) -> None:
        """Start (or attach to) the local infrastructure."""
        self.docker.require()
        self.load_docker_info()

        if self.container and not self.flags.dry_run:
            debug("Infrastructure is on.")
            if self.flags.debug and not self.has_debug_ports():
                self.console.print(
                    "[yellow]change to debug mode not allowed: already running infrastructure[/yellow]\n"
                    '[dim]Run "we stop", then "we run --debug".[/dim]'
                )
            self.started.set()
            self.wait_ready()
            if not self.flags.detach:
                self.flags.view_mode = True
                self.block()
            return

        if self.flags.view_mode:
            debug("No running infrastructure to view; starting a new one")
            self.flags.view_mode = False

        if not self.flags.dry_run:
            self.cleanup()

        self.start()
        if self.flags.dry_run:
            return

        self.wait_ready()
        if not self.flags.detach:
            self.block()

    def start(self) -> None:
        """
        Raises:
            PortsUnavailableError: Required ports are taken (nothing was started)
            InfrastructureError: DOCKER_HOST is not a socket
            DockerError: A docker command failed
        """
        args = self.run_args()
        command = self.docker.command_line(args)

        if self.flags.dry_run:
            self.console.print(command, markup=False, highlight=False, soft_wrap=True)
        else:
            debug(command)

        busy = unavailable_ports(self.ports(), self.port_check)
        if busy:
            raise PortsUnavailableError(busy)

        check_docker_host(self.environ)

        if self.flags.dry_run:
            return

        self.state = "starting"
        if self.flags.pull or not self.has_image():
            self.console.print(f"Pulling {IMAGE_REF}...", markup=False)
            self.docker.run(["pull", IMAGE_REF])

        self.ensure_network()
        self._started_at = time.monotonic()
        self.container = self.docker.run(args).stdout.strip()
        debug(f"Docker container ID: {self.container}")
        self.started.set()

    def ensure_network(self) -> None:
        if self.docker.run(["network", "inspect", LOCAL_NETWORK], check=False).is_success:
            return
        self.docker.run(["network", "create", LOCAL_NETWORK])

    def wait_ready(self) -> bool:
        """Poll GET /projects until the infrastructure answers."""
        self.console.print("WeDeploy is not running yet... Please wait.")

        for attempt in range(1, READINESS_MAX_ATTEMPTS + 1):
            debug(f"Trying #{attempt}")
            try:
                self.projects.list(timeout=READINESS_TIMEOUT)
            except Exception as e:
                debug(f"System not available: {e}")
                if self.end.wait(READINESS_INTERVAL):
                    return False
                continue

            self.state = "running"
            self.ready.set()
            elapsed = format_duration(time.monotonic() - self._started_at)
            self.console.print(f"[green]{SUCCESS_INFRA_READY.format(elapsed=elapsed)}[/green]")
            return True

        self.console.print(f"[yellow]{WARNING_READINESS_UNVERIFIED}[/yellow]")
        return False

    def block(self) -> None:
        """Wait for a shutdown signal or an unexpected container exit."""
        listener = ShutdownListener(
            on_shutdown=self._shutdown,
            on_detach=self.end.set,
            view_mode=self.flags.view_mode,
        )
        listener.install()

        threading.Thread(target=self._docker_wait, name="docker-wait", daemon=True).start()

        try:
            while not self.end.wait(0.5):
                pass
        finally:
            listener.restore()

    def _docker_wait(self) -> None:
        self.docker.wait(self.container)
        if not self._stopping.is_set() and not self.end.is_set():
            self.console.print(f"[red]{SHUTDOWN_UNEXPECTED}[/red]")
            self.state = "not-running"
            self.end.set()

    def _shutdown(self) -> None:
        self._stopping.set()
        self.state = "stopping"
        try:
            unlinked = self.unlink_projects()
            cleaned = self.cleanup()
            self._report_stopped(unlinked and cleaned)
        finally:
            self.state = "not-running"
            self.end.set()

    def stop(self) -> None:
        """Unlink projects and remove the infrastructure containers."""
        self.docker.require()
        self.load_docker_info()
        if not self.container:
            debug("No infrastructure container detected.")

        self._stopping.set()
        self.state = "stopping"
        unlinked = self.unlink_projects() if self.container else True
        cleaned = self.cleanup()
        self.state = "not-running"
        self._report_stopped(unlinked and cleaned)

    def unlink_projects(self) -> bool:
        """
        Remove every linked project, continuing past failures.

        Returns:
            True if every project was unlinked
        """
        try:
            projects = self.projects.list(timeout=READINESS_TIMEOUT * 5)
        except Exception as e:
            self._warn(f"Can not list linked projects: {e}")
            return False

        ok = True
        for project in projects:
            try:
                self.projects.unlink(project.project_id)
                debug(f"Unlinked project {project.project_id}")
            except Exception as e:
                self._warn(f"Can not unlink project {project.project_id}: {e}")
                ok = False
        return ok

    def cleanup(self) -> bool:
        """
        Stop and remove labeled containers and superseded infrastructure images.

        Every step runs even when an earlier one failed.

        Returns:
            True if every step succeeded
        """
        ok = True

        try:
            ids = self.docker.lines(["ps", "--all", "--filter", LOCAL_LABEL_FILTER, "--quiet"])
        except DockerError as e:
            self._warn(f"Can not list infrastructure containers: {e}")
            ids, ok = [], False

        if ids:
            for args in (["stop"] + ids, ["rm", "--force"] + ids):
                ok = self._cleanup_step(args) and ok

        try:
            images = self.docker.lines(
                ["images", "--format", "{{.ID}}\t{{.Repository}}:{{.Tag}}", LOCAL_IMAGE]
            )
        except DockerError as e:
            self._warn(f"Can not list infrastructure images: {e}")
            images, ok = [], False

        for line in images:
            image_id, _, ref = line.partition("\t")
            if ref.strip() == IMAGE_REF:
                continue
            ok = self._cleanup_step(["rmi", image_id.strip()]) and ok

        self.container = ""
        return ok

    def _cleanup_step(self, args: List[str]) -> bool:
        try:
            result = self.docker.run(args, check=False)
        except DockerError as e:
            self._warn(str(e))
            return False
        if result.is_failure:
            self._warn(result.stderr.strip() or f"{result.command} failed")
            return False
        return True

    def _report_stopped(self, clean: bool) -> None:
        if clean:
            self.console.print(SUCCESS_INFRA_STOPPED)
        else:
            self._warn(WARNING_CLEANUP_PARTIAL)

    def _warn(self, message: str) -> None:
        if self.logger:
            self.logger.warning(message)
        else:
            self.console.print(f"[yellow]{message}[/yellow]", highlight=False)
