"""Tests for the click entry point and command helpers"""

from dataclasses import replace
from unittest.mock import MagicMock

import pytest
from click.testing import CliRunner

from wedeploy_cli import __version__
from wedeploy_cli.base import RemoteCommand
from wedeploy_cli.commands.curl import build_curl_args, expand_url
from wedeploy_cli.commands.env_var import parse_assignments, read_env_file
from wedeploy_cli.exceptions import ValidationError
from wedeploy_cli.livemsg import format_duration
from wedeploy_cli.main import cli
from wedeploy_cli.ui_components import prompt_yes_no


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def services_property(monkeypatch):
    client = MagicMock()
    monkeypatch.setattr(RemoteCommand, "services", property(lambda self: client))
    return client


class TestEntryPoint:
    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self, runner):
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for name in ("deploy", "list", "logs", "env-var", "curl", "run", "link"):
            assert name in result.output

    def test_curl_print(self, runner, monkeypatch):
        monkeypatch.setenv("WEDEPLOY_TOKEN", "secret-token")

        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["curl", "GET", "/projects", "--print"])

        assert result.exit_code == 0, result.output
        assert result.output.strip() == (
            "curl -sS -X GET https://api.wedeploy.io/projects "
            "-H 'Authorization: Bearer secret-token'"
        )

    def test_curl_refuses_foreign_host(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["curl", "GET", "https://example.com/x", "--print"])

        assert result.exit_code == 1
        assert "possibly unsafe URL" in result.output


class TestEnvVarSet:
    def test_odd_pairs(self, runner, services_property):
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["env-var", "set", "-p", "photos", "-s", "web", "DEBUG"])

        assert result.exit_code == 1
        assert "Invalid number of arguments" in result.output
        services_property.set_env.assert_not_called()

    def test_sets_each_variable(self, runner, services_property):
        with runner.isolated_filesystem():
            result = runner.invoke(
                cli, ["env-var", "set", "-p", "photos", "-s", "web", "DEBUG=true", "LEVEL=info"]
            )

        assert result.exit_code == 0, result.output
        assert [c.args for c in services_property.set_env.call_args_list] == [
            ("photos", "web", "DEBUG", "true"),
            ("photos", "web", "LEVEL", "info"),
        ]

    def test_missing_service(self, runner, services_property):
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["env-var", "set", "-p", "photos", "A=1"])

        assert result.exit_code == 1
        assert "Service not found" in result.output


class TestParseAssignments:
    def test_key_value_items(self):
        assert parse_assignments(["A=1", "B=x=y", "C="]) == {"A": "1", "B": "x=y", "C": ""}

    def test_pairs(self):
        assert parse_assignments(["A", "1", "B", "2"]) == {"A": "1", "B": "2"}

    def test_mixed_item_without_separator(self):
        with pytest.raises(ValidationError):
            parse_assignments(["A=1", "B"])

    def test_empty_key(self):
        with pytest.raises(ValidationError):
            parse_assignments(["=1"])

    def test_env_file(self, tmp_path):
        path = tmp_path / ".env"
        path.write_text("DEBUG=true\nEMPTY=\n")

        assert read_env_file(path) == {"DEBUG": "true", "EMPTY": ""}

    def test_env_file_missing(self, tmp_path):
        with pytest.raises(ValidationError):
            read_env_file(tmp_path / ".env")


class TestCurlArgs:
    def test_path_is_expanded(self, cloud_context):
        assert expand_url(cloud_context, "/projects") == "https://api.wedeploy.io/projects"

    def test_same_host_url(self, cloud_context):
        url = "https://api.wedeploy.io/projects/photos"

        assert expand_url(cloud_context, url) == url

    def test_other_scheme_refused(self, cloud_context):
        with pytest.raises(ValidationError):
            expand_url(cloud_context, "http://api.wedeploy.io/projects")

    def test_args_order(self, cloud_context):
        args = build_curl_args(
            cloud_context, "post", "/projects", data='{"projectId":"photos"}',
            headers=["X-A: 1"], verbose=True,
        )

        assert args == [
            "-sS", "-X", "POST", "https://api.wedeploy.io/projects",
            "-H", "X-A: 1",
            "-d", '{"projectId":"photos"}',
            "--verbose",
            "-H", "Authorization: Bearer secret-token",
        ]

    def test_basic_auth(self, context):
        context = replace(context, username="admin", password="pass")

        assert build_curl_args(context, "GET", "/projects")[-2:] == ["-u", "admin:pass"]


class TestPromptYesNo:
    def answers(self, *values):
        it = iter(values)
        return lambda: next(it)

    def test_retries_until_valid(self):
        console = MagicMock()

        assert prompt_yes_no("Open?", input_fn=self.answers("", "maybe", "Yeah"), console=console)

    def test_no(self):
        assert not prompt_yes_no("Open?", input_fn=self.answers("nope"), console=MagicMock())


@pytest.mark.parametrize(
    "seconds,expected",
    [(0.5, "500ms"), (12.4, "12s"), (125, "2m5s")],
)
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected
