"""Global configuration (~/.we) and per-command context"""

import configparser
import os
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Optional
from urllib.parse import urlparse

from dotenv import dotenv_values

from wedeploy_cli.constants import (
    DEFAULT_REMOTE,
    DEFAULT_INFRASTRUCTURE,
    DEFAULT_SERVICE_DOMAIN,
    LOCAL_REMOTE,
    LOCAL_INFRASTRUCTURE,
    LOCAL_SERVICE_DOMAIN,
    API_SUBDOMAIN_PREFIX,
    CONFIG_FILENAME,
    CONFIG_ENV_VAR,
)
from wedeploy_cli.exceptions import ConfigurationError, RemoteNotFoundError

MAIN_SECTION = "default"
REMOTE_SECTION = re.compile(r'^remote "(.*)"$')

# Environment keys that may override the selected remote and its credentials
ENV_OVERRIDES = [
    "WEDEPLOY_REMOTE",
    "WEDEPLOY_TOKEN",
    "WEDEPLOY_USERNAME",
    "WEDEPLOY_PASSWORD",
]


@dataclass
class RemoteEntry:
    """Single [remote "name"] section."""

    infrastructure: str
    service: str = ""
    username: str = ""
    password: str = ""
    token: str = ""
    comment: str = ""


def default_remotes() -> Dict[str, RemoteEntry]:
    return {
        DEFAULT_REMOTE: RemoteEntry(
            infrastructure=DEFAULT_INFRASTRUCTURE,
            service=DEFAULT_SERVICE_DOMAIN,
            comment="Default cloud remote",
        ),
        LOCAL_REMOTE: RemoteEntry(
            infrastructure=LOCAL_INFRASTRUCTURE,
            service=LOCAL_SERVICE_DOMAIN,
            comment="Local infrastructure",
        ),
    }


def is_http_localhost(address: str) -> bool:
    if not address.startswith("http://"):
        address = "http://" + address
    return urlparse(address).hostname == "localhost"


def infrastructure_url(address: str) -> str:
    """Full API endpoint for a remote infrastructure address."""
    if is_http_localhost(address):
        if not address.startswith("http://"):
            address = "http://" + address
        return address.rstrip("/")
    if address.startswith("https://") or address.startswith("http://"):
        return address.rstrip("/")
    return API_SUBDOMAIN_PREFIX + address.rstrip("/")


def infrastructure_domain(address: str) -> str:
    """Bare domain of a remote infrastructure (no scheme, api. prefix or port)."""
    if address.startswith(API_SUBDOMAIN_PREFIX):
        address = address[len(API_SUBDOMAIN_PREFIX):]
    if "://" not in address:
        address = "//" + address
    return urlparse(address).hostname or address


@dataclass(frozen=True)
class Context:
    """
    Everything a command needs to talk to a remote.

    Built once per command and passed explicitly to clients, machines
    and watchers.
    """

    remote: str
    infrastructure: str
    infrastructure_domain: str
    service_domain: str
    username: str = ""
    password: str = ""
    token: str = ""
    project_root: Optional[Path] = None
    service_root: Optional[Path] = None
    verbose: bool = False

    @property
    def is_local(self) -> bool:
        return is_http_localhost(self.infrastructure)

    def with_roots(self, project_root=None, service_root=None) -> "Context":
        return replace(self, project_root=project_root, service_root=service_root)


@dataclass
class GlobalConfig:
    """Contents of the ~/.we INI file."""

    path: Path
    default_remote: str = DEFAULT_REMOTE
    notify_updates: bool = True
    release_channel: str = "stable"
    enable_analytics: bool = True
    remotes: Dict[str, RemoteEntry] = field(default_factory=default_remotes)

    @classmethod
    def default_path(cls) -> Path:
        override = os.environ.get(CONFIG_ENV_VAR)
        if override:
            return Path(override).expanduser()
        return Path.home() / CONFIG_FILENAME

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "GlobalConfig":
        """
        Load the global configuration.

        A missing file yields the defaults; it is only written by save().

        Raises:
            ConfigurationError: File can not be parsed or default remote is unknown
        """
        path = Path(path) if path else cls.default_path()
        config = cls(path=path)

        if not path.exists():
            return config

        parser = configparser.ConfigParser(interpolation=None)
        try:
            parser.read(path)
        except configparser.Error as e:
            raise ConfigurationError(
                f"Error reading configuration file: {e}",
                f"Fix {path} by hand or erase it.",
            )

        if parser.has_section(MAIN_SECTION):
            main = parser[MAIN_SECTION]
            config.default_remote = main.get("default_remote", DEFAULT_REMOTE).strip()
            config.release_channel = main.get("release_channel", "stable").strip()
            config.notify_updates = main.getboolean("notify_updates", True)
            config.enable_analytics = main.getboolean("enable_analytics", True)

        for section in parser.sections():
            match = REMOTE_SECTION.match(section)
            if not match:
                continue
            values = parser[section]
            config.remotes[match.group(1)] = RemoteEntry(
                infrastructure=values.get("infrastructure", "").strip(),
                service=values.get("service", "").strip(),
                username=values.get("username", "").strip(),
                password=values.get("password", "").strip(),
                token=values.get("token", "").strip(),
                comment=values.get("comment", "").strip(),
            )

        config.validate()
        return config

    def validate(self) -> None:
        if self.default_remote not in self.remotes:
            raise ConfigurationError(
                f'Remote "{self.default_remote}" is set as default, but not found.',
                f"Please fix your {self.path} file",
            )
        for name, entry in self.remotes.items():
            if not entry.infrastructure:
                raise ConfigurationError(
                    f'Remote "{name}" has no infrastructure address',
                    f"Please fix your {self.path} file",
                )

    def save(self) -> None:
        parser = configparser.ConfigParser(interpolation=None)
        parser[MAIN_SECTION] = {
            "default_remote": self.default_remote,
            "notify_updates": str(self.notify_updates).lower(),
            "release_channel": self.release_channel,
            "enable_analytics": str(self.enable_analytics).lower(),
        }
        for name, entry in self.remotes.items():
            values = {"infrastructure": entry.infrastructure}
            for key in ("service", "username", "password", "token", "comment"):
                value = getattr(entry, key)
                if value:
                    values[key] = value
            parser[f'remote "{name}"'] = values

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            parser.write(f)
        os.chmod(self.path, 0o600)

    def context(self, remote: Optional[str] = None, verbose: bool = False) -> Context:
        """
        Build the Context for a remote (default remote if None).

        Environment variables (and .env in the working directory) may
        override the remote and its credentials.
        """
        overrides = load_env_overrides()
        remote = remote or overrides.get("WEDEPLOY_REMOTE") or self.default_remote

        if remote not in self.remotes:
            raise RemoteNotFoundError(remote)

        entry = self.remotes[remote]
        return Context(
            remote=remote,
            infrastructure=infrastructure_url(entry.infrastructure),
            infrastructure_domain=infrastructure_domain(entry.infrastructure),
            service_domain=entry.service,
            username=overrides.get("WEDEPLOY_USERNAME") or entry.username,
            password=overrides.get("WEDEPLOY_PASSWORD") or entry.password,
            token=overrides.get("WEDEPLOY_TOKEN") or entry.token,
            verbose=verbose,
        )


def load_env_overrides(env_file: Optional[Path] = None) -> Dict[str, str]:
    """Read overrides from .env then the process environment (environment wins)."""
    env_file = env_file or Path.cwd() / ".env"
    values: Dict[str, str] = {}

    if env_file.exists():
        for key, value in dotenv_values(env_file).items():
            if key in ENV_OVERRIDES and value:
                values[key] = value

    for key in ENV_OVERRIDES:
        if os.environ.get(key):
            values[key] = os.environ[key]

    return values
