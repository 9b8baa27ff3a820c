"""Tests for the live projects listing"""

import io
import threading
import time
from unittest.mock import MagicMock

from rich.console import Console
from rich.table import Table
from rich.text import Text

from wedeploy_cli.exceptions import APIFault, APIFaultError
from wedeploy_cli.listing.watcher import (
    FetchCanceled,
    ListFilter,
    ListWatcher,
    ProjectsLister,
)
from wedeploy_cli.models.remote import Project, Service


def quiet_console():
    return Console(file=io.StringIO(), width=120)


def photos(health="up", services=("web",)):
    return Project(
        project_id="photos",
        health=health,
        services=[Service(service_id=s, health=health, image="wedeploy/hosting:latest") for s in services],
    )


class TestProjectsLister:
    def test_fetch_single_project(self):
        client = MagicMock()
        client.get_with_services.return_value = photos()
        lister = ProjectsLister(client, ListFilter(project="photos"))

        assert lister.fetch()[0].project_id == "photos"
        client.list_with_services.assert_not_called()

    def test_fetch_all(self):
        client = MagicMock()
        client.list_with_services.return_value = []

        assert ProjectsLister(client).fetch() == []

    def test_render_empty(self):
        rendered = ProjectsLister(MagicMock()).render([])

        assert isinstance(rendered, Text)
        assert rendered.plain == "No project found."

    def test_render_table(self):
        console = quiet_console()
        lister = ProjectsLister(MagicMock(), service_domain="wedeploy.me", detailed=True)

        rendered = lister.render([photos(), Project(project_id="empty")])
        console.print(rendered)
        output = console.file.getvalue()

        assert isinstance(rendered, Table)
        assert "web-photos.wedeploy.me" in output
        assert "wedeploy/hosting" in output
        assert "(no service found)" in output


class TestListWatcher:
    def test_once_success(self):
        client = MagicMock()
        client.list_with_services.return_value = [photos()]
        watcher = ListWatcher(ProjectsLister(client), console=quiet_console())

        assert watcher.once() is None
        assert watcher.snapshot()[0].project_id == "photos"

    def test_once_error_is_counted(self):
        client = MagicMock()
        client.list_with_services.side_effect = APIFault(
            status=401, errors=[APIFaultError(reason="unauthorized")]
        )
        console = quiet_console()
        watcher = ListWatcher(ProjectsLister(client), console=console)

        error = watcher.once()

        assert isinstance(error, APIFault)
        assert watcher.retry == 1
        assert "Access is denied due to invalid credentials #1" in console.file.getvalue()

    def test_success_resets_retry(self):
        client = MagicMock()
        client.list_with_services.side_effect = [ConnectionError("down"), [photos()]]
        watcher = ListWatcher(ProjectsLister(client), console=quiet_console())

        watcher.once()
        watcher.once()

        assert watcher.retry == 0
        assert watcher.last_error is None

    def test_canceled_fetch_is_silent(self):
        lister = MagicMock()
        lister.fetch.side_effect = FetchCanceled()
        watcher = ListWatcher(lister, console=quiet_console())

        watcher._update()

        assert watcher.last_error is None
        assert watcher.retry == 0

    def test_error_after_stop_is_silent(self):
        lister = MagicMock()
        watcher = ListWatcher(lister, console=quiet_console())

        def fetch():
            watcher.stop()
            raise ConnectionError("closed")

        lister.fetch.side_effect = fetch
        watcher._update()

        assert watcher.last_error is None

    def test_ready_flag_keeps_latest(self):
        watcher = ListWatcher(MagicMock(), console=quiet_console())

        watcher._signal(True)
        watcher._signal(False)

        assert watcher._updated.qsize() == 1
        assert watcher._updated.get_nowait() is False

    def test_stop_condition_ends_start(self):
        client = MagicMock()
        client.list_with_services.return_value = [photos()]
        done = threading.Event()
        watcher = ListWatcher(
            ProjectsLister(client),
            pooling_interval=0.05,
            stop_condition=lambda: len(watcher.snapshot()) > 0,
            console=quiet_console(),
            live=False,
        )

        def run():
            watcher.start()
            done.set()

        threading.Thread(target=run, daemon=True).start()

        assert done.wait(5)
        assert watcher.stopped

    def test_fetch_rate_limited_and_stops(self):
        client = MagicMock()
        client.list_with_services.return_value = []
        watcher = ListWatcher(
            ProjectsLister(client), pooling_interval=0.1, console=quiet_console(), live=False
        )

        thread = threading.Thread(target=watcher.start, daemon=True)
        thread.start()
        time.sleep(0.35)
        watcher.stop()
        thread.join(timeout=5)
        fetches = watcher.fetches
        time.sleep(0.25)

        assert not thread.is_alive()
        assert 1 <= fetches <= 5
        assert watcher.fetches == fetches
