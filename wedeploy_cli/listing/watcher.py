"""
List Watcher

Keeps a live listing of projects and their services. A fetch thread
refreshes a snapshot at most once per pooling interval; the render loop
redraws the listing on the same interval.
"""

import queue
import signal
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from rich.console import Console, Group
from rich.live import Live
from rich.table import Table
from rich.text import Text

from wedeploy_cli.constants import LIST_POOLING_INTERVAL, LIST_TIMEOUT
from wedeploy_cli.core import error_messages
from wedeploy_cli.core.rate_limit import RateLimiter
from wedeploy_cli.logger import debug
from wedeploy_cli.models.remote import Project
from wedeploy_cli.services.projects_client import ProjectsClient

HEALTH_COLORS = {
    "up": "bright_green",
    "warn": "bright_yellow",
    "down": "bright_red",
    "unknown": "white",
}


class FetchCanceled(Exception):
    """Raised by a fetch that was interrupted by stop()."""


@dataclass
class ListFilter:
    """Restricts the listing to one project and, optionally, some services."""

    project: str = ""
    services: List[str] = field(default_factory=list)


class ProjectsLister:
    """Fetches projects (with services) and renders them as a table."""

    def __init__(
        self,
        projects: ProjectsClient,
        list_filter: Optional[ListFilter] = None,
        service_domain: str = "",
        detailed: bool = False,
    ):
        self.projects = projects
        self.filter = list_filter or ListFilter()
        self.service_domain = service_domain
        self.detailed = detailed

    def fetch(self) -> List[Project]:
        if self.filter.project:
            return [self.projects.get_with_services(self.filter.project, timeout=LIST_TIMEOUT)]
        return self.projects.list_with_services(timeout=LIST_TIMEOUT)

    def render(self, projects: List[Project]):
        if not projects:
            return Text("No project found.")

        table = Table(show_header=True, header_style="bold cyan", box=None)
        table.add_column("Service", no_wrap=True)
        if self.detailed:
            table.add_column("Instances", style="dim")
        table.add_column("Image", style="bright_black")
        table.add_column("Health")

        for project in projects:
            row = [Text(project.project_id, style="bold")]
            if self.detailed:
                row.append("")
            row += ["", _health(project.health, upper=True)]
            table.add_row(*row)

            services = [
                s for s in project.services
                if not self.filter.services or s.service_id in self.filter.services
            ]
            if not project.services:
                table.add_row(Text(" (no service found)", style="bright_red"))
                continue

            for service in services:
                address = f"{service.service_id}-{project.project_id}"
                if self.service_domain:
                    address += f".{self.service_domain}"
                row = [Text.assemble((" ● ", HEALTH_COLORS.get(service.health, "blue")), address)]
                if self.detailed:
                    row.append(_instances(service.scale))
                row += [_image_type(service.image), _health(service.health)]
                table.add_row(*row)

        return table


def _health(health: str, upper: bool = False) -> Text:
    style = HEALTH_COLORS.get(health, "blue")
    return Text(health.upper() if upper else health, style=style)


def _instances(scale: int) -> str:
    return f"{scale} instance" if scale == 1 else f"{scale} instances"


def _image_type(image: str) -> str:
    """Image name without its tag."""
    if ":" in image and "/" not in image.rsplit(":", 1)[1]:
        return image.rsplit(":", 1)[0]
    return image


class ListWatcher:
    """
    Live listing driven by two threads.

    - fetch thread: rate limited, sole writer of the snapshot
    - render loop: wakes every pooling interval, drains the ready flag
    """

    def __init__(
        self,
        lister: ProjectsLister,
        pooling_interval: float = LIST_POOLING_INTERVAL,
        stop_condition: Optional[Callable[[], bool]] = None,
        console: Optional[Console] = None,
        live: bool = True,
    ):
        self.lister = lister
        self.pooling_interval = pooling_interval
        self.stop_condition = stop_condition
        self.console = console or Console()
        self.live = live

        self.projects: List[Project] = []
        self.last_error: Optional[Exception] = None
        self.retry = 0
        self.fetches = 0

        self._lock = threading.Lock()
        self._updated: "queue.Queue[bool]" = queue.Queue(maxsize=1)
        self._stop = threading.Event()
        self._live: Optional[Live] = None

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def snapshot(self) -> List[Project]:
        with self._lock:
            return list(self.projects)

    def stop(self) -> None:
        self._stop.set()

    def start(self) -> None:
        """Block until stop() is called, a signal arrives or stop_condition holds."""
        restore = self._install_signal_handlers()
        fetcher = threading.Thread(target=self._fetch_loop, name="list-fetch", daemon=True)

        try:
            if self.live:
                self._live = Live(console=self.console, refresh_per_second=4)
                self._live.start()
            fetcher.start()
            self._render_loop()
        finally:
            self.stop()
            fetcher.join(timeout=self.pooling_interval + LIST_TIMEOUT)
            if self._live is not None:
                self._live.stop()
                self._live = None
            restore()

    def once(self) -> Optional[Exception]:
        """Fetch and render a single time. Returns the fetch error, if any."""
        self._update()
        self._render()
        with self._lock:
            return self.last_error

    def _install_signal_handlers(self) -> Callable[[], None]:
        if threading.current_thread() is not threading.main_thread():
            return lambda: None

        previous = {
            sig: signal.signal(sig, lambda signum, frame: self.stop())
            for sig in (signal.SIGINT, signal.SIGTERM)
        }

        def restore():
            for sig, handler in previous.items():
                signal.signal(sig, handler)

        return restore

    def _fetch_loop(self) -> None:
        limiter = RateLimiter(self.pooling_interval)
        while limiter.wait(self._stop):
            self._update()

    def _update(self) -> None:
        try:
            self.fetches += 1
            projects = self.lister.fetch()
        except FetchCanceled:
            self._signal(False)
            return
        except Exception as e:
            if self.stopped:
                debug(f"List fetch interrupted: {e}")
                self._signal(False)
                return
            with self._lock:
                self.last_error = e
                self.retry += 1
            self._signal(False)
            return

        with self._lock:
            self.projects = projects
            self.last_error = None
            self.retry = 0
        self._signal(True)

    def _signal(self, updated: bool) -> None:
        # one slot; a newer flag replaces an unread one
        try:
            self._updated.get_nowait()
        except queue.Empty:
            pass
        try:
            self._updated.put_nowait(updated)
        except queue.Full:
            pass

    def _render_loop(self) -> None:
        while not self._stop.wait(self.pooling_interval):
            try:
                self._updated.get_nowait()
            except queue.Empty:
                pass

            self._render()

            if self.stop_condition is not None and self.stop_condition():
                self.stop()

    def _render(self) -> None:
        with self._lock:
            projects = list(self.projects)
            error = self.last_error
            retry = self.retry

        if error is not None:
            renderable = Text(f"{error_messages.handle('list', error)} #{retry}")
        else:
            renderable = self.lister.render(projects)

        if self._live is not None:
            self._live.update(Group(renderable), refresh=True)
        else:
            self.console.print(renderable)
