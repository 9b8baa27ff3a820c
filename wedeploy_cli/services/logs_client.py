"""
Logs API client and watcher

Fetch project/service logs and poll for new lines using the insertId
continuation the API provides.
"""

import re
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote

from rich.console import Console

from wedeploy_cli.constants import LOGS_LIMIT, LOGS_POLL_INTERVAL
from wedeploy_cli.core import error_messages
from wedeploy_cli.exceptions import InvalidProjectIDError, ValidationError
from wedeploy_cli.logger import debug
from wedeploy_cli.services.api_client import APIClient

console = Console()
err_console = Console(stderr=True)

FRACTION = re.compile(r"\.(\d+)")

LEVEL_STYLES = {
    "error": "bright_red",
    "critical": "bright_red",
    "warning": "bright_yellow",
    "warn": "bright_yellow",
    "info": "bright_cyan",
    "debug": "bright_black",
}


@dataclass
class LogLine:
    insert_id: str
    message: str
    timestamp: Optional[datetime] = None
    project_id: str = ""
    service_id: str = ""
    container_uid: str = ""
    build: bool = False
    build_group_uid: str = ""
    level: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LogLine":
        return cls(
            insert_id=data.get("insertId", ""),
            message=(data.get("message") or "").strip(),
            timestamp=_parse_timestamp(data.get("timestamp")),
            project_id=data.get("projectId", ""),
            service_id=data.get("serviceId", ""),
            container_uid=data.get("containerUid", ""),
            build=bool(data.get("build")),
            build_group_uid=data.get("buildGroupUid", ""),
            level=(data.get("level") or "").lower(),
        )

    def header(self) -> str:
        if not self.service_id:
            return f"[{self.project_id}]"
        if self.container_uid:
            return f"[{self.service_id}-{self.container_uid[:12]}]"
        if self.build:
            return f"build-{self.build_group_uid} {self.service_id}[building]"
        if self.build_group_uid:
            return f"build-{self.build_group_uid} [{self.project_id}]"
        return f"[{self.project_id}]"


@dataclass
class LogsFilter:
    project: str
    services: List[str] = field(default_factory=list)
    instance: str = ""
    level: str = ""
    since: str = ""
    after_insert_id: str = ""


def _parse_timestamp(value) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        # milliseconds since epoch
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    text = str(value).replace("Z", "+00:00")
    # fromisoformat handles at most microseconds
    match = FRACTION.search(text)
    if match:
        fraction = match.group(1)[:6].ljust(6, "0")
        text = text[: match.start()] + "." + fraction + text[match.end():]
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def parse_since(since: str, now: Optional[datetime] = None) -> str:
    """
    Convert a friendly --since value into a unix timestamp string.

    Accepts a raw unix timestamp or a duration such as 30s, 5m, 5min, 2h, 1d.
    """
    since = since.strip()
    if since.isdigit():
        return since

    units = {"s": 1, "m": 60, "h": 3600, "d": 86400}
    value = since.replace("min", "m")
    unit = value[-1:] if value else ""

    if unit not in units or not value[:-1].isdigit():
        raise ValidationError(f"Invalid --since value: {since}", "Use e.g. 30s, 5m, 2h or 1d")

    now = now or datetime.now(tz=timezone.utc)
    start = now - timedelta(seconds=int(value[:-1]) * units[unit])
    return str(int(start.timestamp()))


class LogsClient:
    def __init__(self, api: APIClient):
        self.api = api

    def get_list(self, logs_filter: LogsFilter, timeout: float = 10) -> List[LogLine]:
        if not logs_filter.project:
            raise InvalidProjectIDError(logs_filter.project)

        params: Dict[str, Any] = {"limit": LOGS_LIMIT}
        if len(logs_filter.services) == 1 and logs_filter.services[0]:
            params["serviceId"] = logs_filter.services[0]
        if logs_filter.level:
            params["level"] = logs_filter.level
        if logs_filter.after_insert_id:
            params["afterInsertId"] = logs_filter.after_insert_id
        if logs_filter.since:
            params["start"] = logs_filter.since

        data = self.api.get(
            f"/projects/{quote(logs_filter.project)}/logs", params=params, timeout=timeout
        ) or []
        lines = [LogLine.from_dict(item) for item in data]
        return _filter(lines, logs_filter.services, logs_filter.instance)


def _filter(lines: List[LogLine], services: List[str], instance: str) -> List[LogLine]:
    if not instance and len(services) <= 1:
        return lines
    return [
        line
        for line in lines
        if (not services or line.service_id in services)
        and (not instance or line.container_uid.startswith(instance))
    ]


def print_lines(lines: List[LogLine], out: Optional[Console] = None) -> None:
    out = out or console
    for line in lines:
        ts = line.timestamp.astimezone().strftime("%b %d %H:%M:%S.%f")[:-3] if line.timestamp else ""
        style = LEVEL_STYLES.get(line.level, "white")
        out.print(f"[dim]{ts}[/dim] [magenta]{line.header()}[/magenta]", end=" ", markup=True, highlight=False)
        out.print(line.message, style=style, markup=False, highlight=False)


class LogsWatcher:
    """Poll for new log lines every interval until stopped."""

    def __init__(
        self,
        client: LogsClient,
        logs_filter: LogsFilter,
        interval: float = LOGS_POLL_INTERVAL,
        printer: Callable[[List[LogLine]], None] = print_lines,
    ):
        self.client = client
        self.filter = logs_filter
        self.interval = interval
        self.printer = printer
        self.stop_event = threading.Event()
        self._filter_lock = threading.Lock()

    def stop(self) -> None:
        self.stop_event.set()

    def watch(self) -> None:
        console.print(
            f"[dim]Logs shown on your current timezone: {time.strftime('%z')}[/dim]"
        )
        while not self.stop_event.is_set():
            self.poll()
            if self.stop_event.wait(self.interval):
                break

    def poll(self) -> None:
        try:
            lines = self.client.get_list(self.filter)
        except Exception as e:
            if not self.stop_event.is_set():
                err_console.print(str(error_messages.handle("logs", e)), markup=False)
            return

        if not lines:
            debug(f"No new log since {self.filter.since}")
            return

        self.printer(lines)
        self._prepare_next(lines)

    def _prepare_next(self, lines: List[LogLine]) -> None:
        last = lines[-1]
        with self._filter_lock:
            self.filter.after_insert_id = last.insert_id
            if last.timestamp is not None:
                self.filter.since = str(int(last.timestamp.timestamp()))
        debug(f"Next logs after log insertId = {last.insert_id}")
