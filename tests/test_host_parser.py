"""Tests for --project/--service/--remote and host parsing"""

import pytest

from wedeploy_cli.core.config_loader import RemoteEntry, default_remotes
from wedeploy_cli.core.host_parser import HostParser
from wedeploy_cli.exceptions import (
    HostParseError,
    MultipleRemotesError,
    RemoteAddressNotFoundError,
    RemoteNotFoundError,
)


@pytest.fixture
def parser():
    return HostParser(default_remotes())


class TestFlags:
    def test_plain_flags(self, parser):
        flags = parser.parse(project="Photos", service="Web", remote="local")

        assert (flags.project, flags.service, flags.remote) == ("photos", "web", "local")
        assert not flags.remote_from_host

    def test_unknown_remote(self, parser):
        with pytest.raises(RemoteNotFoundError):
            parser.parse(project="photos", remote="nowhere")

    def test_service_without_project(self, parser):
        with pytest.raises(HostParseError):
            parser.parse(service="web")


class TestHost:
    def test_service_project_and_remote(self, parser):
        flags = parser.parse(host="web-photos.wedeploy.me")

        assert flags.service == "web"
        assert flags.project == "photos"
        assert flags.remote == "local"
        assert flags.remote_from_host

    def test_project_only(self, parser):
        flags = parser.parse(host="photos.wedeploy.io")

        assert flags.project == "photos"
        assert flags.service == ""
        assert flags.remote == "wedeploy"

    def test_hyphenated_project(self, parser):
        flags = parser.parse(host="web-my-photos.wedeploy.io")

        assert flags.service == "web"
        assert flags.project == "my-photos"

    def test_bare_service_project(self, parser):
        flags = parser.parse(host="web-photos", remote="local")

        assert (flags.service, flags.project, flags.remote) == ("web", "photos", "local")

    def test_remote_address_only(self, parser):
        flags = parser.parse(host="wedeploy.me")

        assert flags.remote == "local"
        assert flags.project == ""

    def test_host_with_project_flag(self, parser):
        with pytest.raises(HostParseError):
            parser.parse(project="photos", host="web-photos.wedeploy.me")

    def test_host_with_remote_and_remote_flag(self, parser):
        with pytest.raises(HostParseError):
            parser.parse(remote="wedeploy", host="web-photos.wedeploy.me")

    def test_unknown_address(self, parser):
        with pytest.raises(RemoteAddressNotFoundError):
            parser.parse(host="web-photos.example.com")

    def test_multiple_remotes(self):
        remotes = default_remotes()
        remotes["mirror"] = RemoteEntry(infrastructure="mirror.io", service="wedeploy.io")

        with pytest.raises(MultipleRemotesError):
            HostParser(remotes).parse(host="web-photos.wedeploy.io")
