"""Typed interfaces for adapter-layer responsibilities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class ContainerState:
    """Process and health state reported by the container runtime.

    Attributes:
        container_id: Runtime container identifier.
        status: Process state, e.g. `running` or `exited`.
        health: Health status, `none` when no health check is configured.
    """

    container_id: str
    status: str
    health: str


@dataclass(frozen=True)
class CommandResult:
    """Completed command execution inside a container namespace.

    Attributes:
        exit_code: Process exit status.
        stdout: Captured standard output.
        stderr: Captured standard error.
    """

    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


@dataclass(frozen=True)
class HttpProbeResponse:
    """Status-only HTTP probe response.

    Attributes:
        url: Requested URL.
        status_code: HTTP status, 0 when no response was received.
        error: Transport error text when no response was received.
    """

    url: str
    status_code: int
    error: str | None = None

    @property
    def code_label(self) -> str:
        """Return a three-digit status label, `000` for transport failures."""

        return f"{self.status_code:03d}"


class ContainerRuntimePort(Protocol):
    """Port definition for container-runtime queries and group restart."""

    def runtime_ensure_access(self) -> bool:
        """Verify runtime reachability once and memoize privilege escalation.

        Returns:
            bool: True when privilege escalation was switched on by the check.

        Raises:
            ContainerRuntimeUnavailableError: Raised when the runtime is unreachable.
        """

    def runtime_find_container(self, service_name: str) -> str | None:
        """Return the container id of one compose service, None when absent.

        Raises:
            ContainerRuntimeError: Raised when the runtime query fails.
        """

    def runtime_inspect_state(self, container_id: str) -> ContainerState:
        """Return process and health state of one container.

        Raises:
            ContainerRuntimeError: Raised when the runtime query fails.
        """

    def runtime_exec(self, container_id: str, command: list[str]) -> CommandResult:
        """Execute one command inside a container namespace.

        Raises:
            ContainerRuntimeError: Raised when the runtime cannot start the command.
        """

    def runtime_restart_group(self) -> None:
        """Restart every service of the managed group.

        Raises:
            ContainerRuntimeError: Raised when the restart command fails.
        """


class HttpProbePort(Protocol):
    """Port definition for status-only HTTP(S) requests."""

    def http_status(
        self,
        url: str,
        host_header: str | None = None,
        auth: tuple[str, str] | None = None,
    ) -> HttpProbeResponse:
        """Issue one GET request and return its status without raising on transport errors.

        Args:
            url: Target URL.
            host_header: Optional virtual-host header.
            auth: Optional basic-auth credentials.

        Returns:
            HttpProbeResponse: Status code, or 0 with error text.
        """
