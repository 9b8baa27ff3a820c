"""
WeDeploy CLI Exception Hierarchy

Clean exception hierarchy for consistent error handling across the CLI.
"""

from dataclasses import dataclass, field
from typing import Optional, List, Dict


class WeDeployError(Exception):
    """Base exception for all WeDeploy errors."""

    def __init__(self, message: str, context: Optional[str] = None):
        self.message = message
        self.context = context
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error message with optional context."""
        if self.context:
            return f"{self.message}\nContext: {self.context}"
        return self.message


class ConfigurationError(WeDeployError):
    """Raised when configuration is invalid or missing."""

    pass


class DeploymentError(WeDeployError):
    """Raised when deployment operations fail."""

    pass


class ValidationError(WeDeployError):
    """Raised when validation fails."""

    pass


class InfrastructureError(WeDeployError):
    """Raised when the local infrastructure can not be managed."""

    pass


class DockerError(InfrastructureError):
    """Raised when a docker command fails."""

    def __init__(self, command: str, returncode: int, stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        message = f"docker command failed with exit status {returncode}: {command}"
        super().__init__(message, stderr.strip() or None)


class PortsUnavailableError(InfrastructureError):
    """Raised when ports required by the local infrastructure are taken."""

    def __init__(self, ports: List[int]):
        from wedeploy_cli.constants import ERROR_PORTS_UNAVAILABLE

        self.ports = ports
        lines = "\n".join(f"{port}" for port in ports)
        super().__init__(ERROR_PORTS_UNAVAILABLE.format(ports=lines))


class HookError(WeDeployError):
    """Raised when a user hook exits with a non-zero status."""

    def __init__(self, hook: str, returncode: int):
        self.hook = hook
        self.returncode = returncode
        super().__init__(f"exit status {returncode}")


class DescriptorError(WeDeployError):
    """Raised when a local descriptor file can not be read."""

    pass


class ProjectDescriptorNotFoundError(DescriptorError):
    """Raised when project.json is missing."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Project descriptor not found at {path}")


class ServiceDescriptorNotFoundError(DescriptorError):
    """Raised when service.json (or container.json) is missing."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Service descriptor not found at {path}")


class InvalidProjectIDError(DescriptorError):
    """Raised when a project id is empty or malformed."""

    def __init__(self, project_id: str = ""):
        self.project_id = project_id
        super().__init__(f'Invalid project ID "{project_id}"')


class InvalidServiceIDError(DescriptorError):
    """Raised when a service id is empty or malformed."""

    def __init__(self, service_id: str = ""):
        self.service_id = service_id
        super().__init__(f'Invalid service ID "{service_id}"')


class HostParseError(ValidationError):
    """Raised when --project/--service/--remote flags and host can't be combined."""

    pass


class RemoteNotFoundError(HostParseError):
    """Raised when a remote name is not configured."""

    def __init__(self, remote: str):
        self.remote = remote
        super().__init__(f"remote {remote} not found")


class RemoteAddressNotFoundError(HostParseError):
    """Raised when no remote serves a host address."""

    def __init__(self, address: str):
        self.address = address
        super().__init__(f"found no remote for address {address}")


class MultipleRemotesError(HostParseError):
    """Raised when more than one remote serves a host address."""

    def __init__(self, address: str, remotes: List[str]):
        self.address = address
        self.remotes = remotes
        super().__init__(
            f"found multiple remotes for address {address}: {', '.join(remotes)}"
        )


@dataclass
class APIFaultError:
    """Single error entry returned by the WeDeploy API."""

    reason: str
    context: Dict[str, str] = field(default_factory=dict)

    @property
    def message(self) -> str:
        return self.context.get("message", "") if self.context else ""


class APIFault(WeDeployError):
    """Raised for any non-2xx response from the WeDeploy API."""

    def __init__(
        self,
        method: str = "",
        url: str = "",
        status: int = 0,
        message: str = "",
        errors: Optional[List[APIFaultError]] = None,
    ):
        self.method = method
        self.url = url
        self.status = status
        self.api_message = message
        self.errors = errors or []
        super().__init__(self._render())

    def _render(self) -> str:
        text = "WeDeploy API error:"
        if self.status:
            text += f" {self.status}"
        if self.api_message:
            text += f" {self.api_message}"
        if self.method or self.url:
            text += f" ({self.method} {self.url})"
        for error in self.errors:
            text += f"\n\t{error.message}: {error.reason}"
        return text

    def get(self, reason: str) -> Optional[str]:
        """Return the context message for a reason, or None if absent."""
        for error in self.errors:
            if error.reason == reason:
                return error.message
        return None

    def has(self, reason: str) -> bool:
        """Check if the fault carries the given reason."""
        return any(error.reason == reason for error in self.errors)

    @classmethod
    def from_response(cls, method: str, url: str, status: int, body) -> "APIFault":
        """Build a fault from a decoded JSON error body (or anything else)."""
        if not isinstance(body, dict):
            return cls(method=method, url=url, status=status)

        errors = []
        for item in body.get("errors") or []:
            if isinstance(item, dict):
                errors.append(
                    APIFaultError(
                        reason=item.get("reason", ""),
                        context=item.get("context") or {},
                    )
                )

        return cls(
            method=method,
            url=url,
            status=body.get("status", status) or status,
            message=body.get("message", ""),
            errors=errors,
        )


class APIConnectionError(WeDeployError):
    """Raised when the WeDeploy API can not be reached."""

    pass
