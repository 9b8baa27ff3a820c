"""Tests for ~/.we loading and context building"""

import pytest

from wedeploy_cli.core.config_loader import (
    GlobalConfig,
    RemoteEntry,
    infrastructure_domain,
    infrastructure_url,
    load_env_overrides,
)
from wedeploy_cli.exceptions import ConfigurationError, RemoteNotFoundError

CONFIG = """\
[default]
default_remote = staging

[remote "staging"]
infrastructure = staging.example.com
service = staging.example.com
token = abc
"""


class TestInfrastructureAddress:
    def test_cloud_address_gets_api_prefix(self):
        assert infrastructure_url("wedeploy.io") == "https://api.wedeploy.io"

    def test_localhost_stays_http(self):
        assert infrastructure_url("http://localhost") == "http://localhost"
        assert infrastructure_url("localhost:8080") == "http://localhost:8080"

    def test_explicit_scheme_is_kept(self):
        assert infrastructure_url("https://api.example.com/") == "https://api.example.com"

    def test_domain(self):
        assert infrastructure_domain("wedeploy.io") == "wedeploy.io"
        assert infrastructure_domain("https://api.example.com") == "example.com"
        assert infrastructure_domain("http://localhost:8080") == "localhost"


class TestGlobalConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        config = GlobalConfig.load(tmp_path / "missing")

        assert config.default_remote == "wedeploy"
        assert {"wedeploy", "local"} <= set(config.remotes)

    def test_load_remotes(self, tmp_path):
        path = tmp_path / ".we"
        path.write_text(CONFIG)

        config = GlobalConfig.load(path)

        assert config.default_remote == "staging"
        assert config.remotes["staging"].token == "abc"
        assert "local" in config.remotes

    def test_unknown_default_remote(self, tmp_path):
        path = tmp_path / ".we"
        path.write_text("[default]\ndefault_remote = nowhere\n")

        with pytest.raises(ConfigurationError):
            GlobalConfig.load(path)

    def test_save_round_trip(self, tmp_path):
        path = tmp_path / ".we"
        config = GlobalConfig.load(path)
        config.remotes["custom"] = RemoteEntry(infrastructure="custom.io", service="custom.io")
        config.save()

        loaded = GlobalConfig.load(path)

        assert loaded.remotes["custom"].service == "custom.io"

    def test_context_for_remote(self, tmp_path):
        path = tmp_path / ".we"
        path.write_text(CONFIG)

        context = GlobalConfig.load(path).context()

        assert context.remote == "staging"
        assert context.infrastructure == "https://api.staging.example.com"
        assert context.service_domain == "staging.example.com"
        assert context.token == "abc"

    def test_local_context(self, tmp_path):
        context = GlobalConfig.load(tmp_path / "missing").context("local")

        assert context.is_local
        assert context.service_domain == "wedeploy.me"

    def test_unknown_remote(self, tmp_path):
        with pytest.raises(RemoteNotFoundError):
            GlobalConfig.load(tmp_path / "missing").context("nowhere")

    def test_environment_overrides_token(self, tmp_path, monkeypatch):
        monkeypatch.setenv("WEDEPLOY_TOKEN", "from-env")

        context = GlobalConfig.load(tmp_path / "missing").context()

        assert context.token == "from-env"


class TestEnvOverrides:
    def test_dotenv_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("WEDEPLOY_REMOTE=local\nUNRELATED=1\n")

        assert load_env_overrides(env_file) == {"WEDEPLOY_REMOTE": "local"}

    def test_environment_wins(self, tmp_path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text("WEDEPLOY_REMOTE=local\n")
        monkeypatch.setenv("WEDEPLOY_REMOTE", "wedeploy")

        assert load_env_overrides(env_file)["WEDEPLOY_REMOTE"] == "wedeploy"
