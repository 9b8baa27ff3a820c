"""Shared fixtures for the we CLI test suite"""

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from wedeploy_cli.core.config_loader import Context
from wedeploy_cli.logger import set_verbose


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep ~/.we, logs and .env lookups away from the real home directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("WEDEPLOY_CONFIG", str(home / ".we"))
    monkeypatch.setenv("WEDEPLOY_LOGS_DIR", str(home / ".we_logs"))
    for key in ("WEDEPLOY_REMOTE", "WEDEPLOY_TOKEN", "WEDEPLOY_USERNAME", "WEDEPLOY_PASSWORD", "WEDEPLOY_VERBOSE", "DOCKER_HOST"):
        monkeypatch.delenv(key, raising=False)
    set_verbose(False)
    yield home
    set_verbose(False)


@pytest.fixture
def context():
    return Context(
        remote="local",
        infrastructure="http://localhost",
        infrastructure_domain="localhost",
        service_domain="wedeploy.me",
    )


@pytest.fixture
def cloud_context():
    return Context(
        remote="wedeploy",
        infrastructure="https://api.wedeploy.io",
        infrastructure_domain="wedeploy.io",
        service_domain="wedeploy.io",
        token="secret-token",
    )


def write_json(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))
    return path


@pytest.fixture
def make_service(tmp_path):
    """Create a service directory with a service.json descriptor."""

    def _make(name: str, service_id: str = None, hooks=None, root: Path = None):
        directory = (root or tmp_path) / name
        directory.mkdir(parents=True, exist_ok=True)
        data = {"id": service_id or name}
        if hooks:
            data["hooks"] = hooks
        write_json(directory / "service.json", data)
        (directory / "index.html").write_text("<h1>hello</h1>")
        return directory

    return _make


@pytest.fixture
def project_dir(tmp_path, make_service):
    root = tmp_path / "photos"
    write_json(root / "project.json", {"id": "photos"})
    make_service("web", root=root)
    make_service("api", root=root)
    return root


@pytest.fixture
def projects_client():
    client = MagicMock()
    client.validate_or_create.return_value = False
    client.list.return_value = []
    return client


@pytest.fixture
def services_client():
    client = MagicMock()
    client.validate_or_create.return_value = False
    client.upload_bundle.return_value = "group-1"
    return client
