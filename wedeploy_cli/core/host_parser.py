"""
Host pattern parsing

Resolves --project/--service/--remote flags or a single host argument such as
``web-myproject.wedeploy.io`` into a project, service and remote.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from wedeploy_cli.constants import (
    ERROR_REMOTE_WITH_HOST,
    ERROR_FLAGS_WITH_HOST,
    ERROR_SERVICE_WITHOUT_PROJECT,
)
from wedeploy_cli.core.config_loader import RemoteEntry
from wedeploy_cli.exceptions import (
    HostParseError,
    RemoteNotFoundError,
    RemoteAddressNotFoundError,
    MultipleRemotesError,
)


@dataclass
class HostFlags:
    """Project, service and remote resolved from flags or a host."""

    project: str = ""
    service: str = ""
    remote: str = ""
    remote_from_host: bool = False


class HostParser:
    """Parses host patterns against the configured remotes."""

    def __init__(self, remotes: Dict[str, RemoteEntry]):
        self.remotes = remotes

    def parse(
        self,
        project: str = "",
        service: str = "",
        remote: str = "",
        host: str = "",
    ) -> HostFlags:
        """
        Parse flags and host into HostFlags.

        Raises:
            HostParseError: Flags and host are used in an incompatible way
            RemoteNotFoundError: --remote names an unknown remote
            RemoteAddressNotFoundError: Host address matches no remote
            MultipleRemotesError: Host address matches more than one remote
        """
        host = (host or "").lower()
        project = (project or "").lower()
        service = (service or "").lower()
        remote = (remote or "").lower()

        if host:
            if project or service:
                raise HostParseError(ERROR_FLAGS_WITH_HOST)
            flags = self._parse_with_host(host, remote)
        else:
            if remote and remote not in self.remotes:
                raise RemoteNotFoundError(remote)
            flags = HostFlags(project=project, service=service, remote=remote)

        if flags.service and not flags.project:
            raise HostParseError(ERROR_SERVICE_WITHOUT_PROJECT)

        return flags

    def remote_for_address(self, address: str) -> str:
        """Return the single remote serving a service domain address."""
        found = self._find_remotes(address)
        if not found:
            raise RemoteAddressNotFoundError(address)
        if len(found) > 1:
            raise MultipleRemotesError(address, found)
        return found[0]

    def _parse_with_host(self, host: str, remote_flag: str) -> HostFlags:
        found = self._find_remotes(host)
        if len(found) > 1:
            raise MultipleRemotesError(host, found)
        if len(found) == 1:
            if remote_flag:
                raise HostParseError(ERROR_REMOTE_WITH_HOST)
            return HostFlags(remote=found[0], remote_from_host=True)

        flags = self._parse_host(host)

        if flags.remote and remote_flag:
            raise HostParseError(ERROR_REMOTE_WITH_HOST)

        if remote_flag:
            if remote_flag not in self.remotes:
                raise RemoteNotFoundError(remote_flag)
            flags.remote = remote_flag

        return flags

    def _parse_host(self, host: str) -> HostFlags:
        parts = host.split(".", 1)
        names = _split_hyphen(parts[0])

        if len(parts) == 1:
            if len(names) == 1:
                return HostFlags(service=names[0])
            return HostFlags(service=names[0], project=names[1])

        if len(names) == 1:
            project, service = names[0], ""
        else:
            service, project = names[0], names[1]

        try:
            remote = self.remote_for_address(parts[1])
        except RemoteAddressNotFoundError:
            raise RemoteAddressNotFoundError(host)

        return HostFlags(
            project=project, service=service, remote=remote, remote_from_host=True
        )

    def _find_remotes(self, address: str) -> List[str]:
        found = []
        for name in sorted(self.remotes):
            domain = self.remotes[name].service
            if not domain:
                continue
            if address in (domain, _strip_scheme(domain)):
                found.append(name)
        return found


def _split_hyphen(value: str) -> List[str]:
    """Split on the first hyphen only: ``web-my-project`` -> web, my-project."""
    if "-" not in value:
        return [value]
    head, tail = value.split("-", 1)
    return [head, tail]


def _strip_scheme(value: str) -> Optional[str]:
    for prefix in ("http://", "https://"):
        if value.startswith(prefix):
            return value[len(prefix):]
    return None
