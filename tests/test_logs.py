"""Tests for logs fetching and following"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from wedeploy_cli.exceptions import ValidationError
from wedeploy_cli.services.logs_client import (
    LogLine,
    LogsClient,
    LogsFilter,
    LogsWatcher,
    parse_since,
)

NOW = datetime(2017, 7, 1, 12, 0, 0, tzinfo=timezone.utc)


class TestParseSince:
    def test_unix_timestamp(self):
        assert parse_since("1498910400") == "1498910400"

    @pytest.mark.parametrize(
        "since,seconds",
        [("30s", 30), ("5m", 300), ("5min", 300), ("2h", 7200), ("1d", 86400)],
    )
    def test_durations(self, since, seconds):
        assert parse_since(since, now=NOW) == str(int(NOW.timestamp()) - seconds)

    def test_invalid(self):
        with pytest.raises(ValidationError):
            parse_since("yesterday", now=NOW)


class TestLogLine:
    def test_header_for_instance(self):
        line = LogLine.from_dict(
            {"insertId": "1", "serviceId": "web", "containerUid": "abcdef0123456789", "message": "hi\n"}
        )

        assert line.message == "hi"
        assert line.header() == "[web-abcdef012345]"

    def test_header_for_project(self):
        line = LogLine.from_dict({"insertId": "1", "projectId": "photos"})

        assert line.header() == "[photos]"

    def test_timestamp_nanoseconds(self):
        line = LogLine.from_dict({"insertId": "1", "timestamp": "2017-07-01T12:00:00.123456789Z"})

        assert line.timestamp == datetime(2017, 7, 1, 12, 0, 0, 123456, tzinfo=timezone.utc)


class TestLogsClient:
    def test_params(self):
        api = MagicMock()
        api.get.return_value = []

        LogsClient(api).get_list(
            LogsFilter(project="photos", services=["web"], level="error", since="100")
        )

        params = api.get.call_args.kwargs["params"]
        assert params["serviceId"] == "web"
        assert params["level"] == "error"
        assert params["start"] == "100"

    def test_instance_filter(self):
        api = MagicMock()
        api.get.return_value = [
            {"insertId": "1", "serviceId": "web", "containerUid": "aaa1"},
            {"insertId": "2", "serviceId": "web", "containerUid": "bbb2"},
        ]

        lines = LogsClient(api).get_list(LogsFilter(project="photos", instance="bbb"))

        assert [line.insert_id for line in lines] == ["2"]


class TestLogsWatcher:
    def test_poll_continues_after_last_line(self):
        client = MagicMock()
        client.get_list.return_value = [
            LogLine(insert_id="1", message="a"),
            LogLine(insert_id="2", message="b", timestamp=NOW),
        ]
        printed = []
        watcher = LogsWatcher(client, LogsFilter(project="photos"), printer=printed.extend)

        watcher.poll()

        assert [line.insert_id for line in printed] == ["1", "2"]
        assert watcher.filter.after_insert_id == "2"
        assert watcher.filter.since == str(int(NOW.timestamp()))

    def test_poll_survives_errors(self):
        client = MagicMock()
        client.get_list.side_effect = ConnectionError("down")
        printed = []
        watcher = LogsWatcher(client, LogsFilter(project="photos"), printer=printed.extend)

        watcher.poll()

        assert printed == []

    def test_watch_stops(self):
        client = MagicMock()
        client.get_list.return_value = []
        watcher = LogsWatcher(client, LogsFilter(project="photos"), interval=0.01)
        client.get_list.side_effect = lambda f: watcher.stop() or []

        watcher.watch()

        assert client.get_list.call_count == 1
