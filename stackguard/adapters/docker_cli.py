"""Container-runtime adapter backed by the docker CLI and compose tooling."""

from __future__ import annotations

import shutil
import subprocess
from typing import Callable, Final

import structlog

from .interfaces import CommandResult, ContainerRuntimePort, ContainerState
from .runtime_errors import (
    ComposeToolNotFoundError,
    ContainerRuntimeCommandError,
    ContainerRuntimeUnavailableError,
)

log = structlog.get_logger()

CommandRunner = Callable[[list[str], float], CommandResult]


def runtime_subprocess_runner(command: list[str], timeout_seconds: float) -> CommandResult:
    """Run one command and capture its output.

    Args:
        command: Full argument vector.
        timeout_seconds: Hard timeout for the process.

    Returns:
        CommandResult: Exit code and decoded output streams.

    Raises:
        ContainerRuntimeCommandError: Raised when the process times out or the binary is missing.
    """

    try:
        completed = subprocess.run(
            command,
            capture_output=True,
            text=True,
            timeout=timeout_seconds,
            check=False,
        )
    except subprocess.TimeoutExpired as error:
        raise ContainerRuntimeCommandError(
            f"command timed out after {timeout_seconds:g}s",
            command=command,
        ) from error
    except FileNotFoundError as error:
        raise ContainerRuntimeCommandError(
            f"executable not found: {command[0]}",
            command=command,
            exit_code=127,
        ) from error
    return CommandResult(exit_code=completed.returncode, stdout=completed.stdout or "", stderr=completed.stderr or "")


class DockerCliRuntime(ContainerRuntimePort):
    """Runtime adapter issuing `docker` and `docker compose` commands."""

    _INSPECT_FORMAT: Final[str] = (
        "{{.State.Status}}|{{if .State.Health}}{{.State.Health.Status}}{{else}}none{{end}}"
    )

    def __init__(
        self,
        docker_binary: str = "docker",
        use_sudo: bool = False,
        compose_file: str | None = None,
        compose_project_name: str | None = None,
        command_timeout_seconds: float = 60.0,
        restart_timeout_seconds: float = 300.0,
        command_runner: CommandRunner | None = None,
        standalone_compose_locator: Callable[[str], str | None] | None = None,
    ):
        """Initialize docker CLI runtime adapter.

        Args:
            docker_binary: Docker CLI executable.
            use_sudo: Prefix every runtime command with sudo.
            compose_file: Optional compose file path.
            compose_project_name: Optional compose project name.
            command_timeout_seconds: Timeout for query and exec commands.
            restart_timeout_seconds: Timeout for group restart.
            command_runner: Optional runner replacing subprocess execution.
            standalone_compose_locator: Optional lookup for the standalone compose binary.

        Raises:
            ValueError: Raised when config values are invalid.
        """

        normalized_docker_binary = docker_binary.strip()
        if not normalized_docker_binary:
            raise ValueError("docker_binary must not be blank")
        if command_timeout_seconds <= 0:
            raise ValueError("command_timeout_seconds must be > 0")
        if restart_timeout_seconds <= 0:
            raise ValueError("restart_timeout_seconds must be > 0")

        self._docker_binary = normalized_docker_binary
        self._use_sudo = use_sudo
        self._compose_file = compose_file
        self._compose_project_name = compose_project_name
        self._command_timeout_seconds = command_timeout_seconds
        self._restart_timeout_seconds = restart_timeout_seconds
        self._command_runner = command_runner or runtime_subprocess_runner
        self._standalone_compose_locator = standalone_compose_locator or shutil.which
        self._access_verified = False
        self._compose_prefix: list[str] | None = None

    @property
    def use_sudo(self) -> bool:
        return self._use_sudo

    def runtime_ensure_access(self) -> bool:
        """Check daemon access once, escalating to sudo a single time when needed.

        Compose tooling is resolved right after access is settled so a missing
        compose tool surfaces here instead of inside individual queries.

        Returns:
            bool: True when this check switched on sudo escalation.

        Raises:
            ContainerRuntimeUnavailableError: Raised when the daemon is unreachable with and without sudo.
            ComposeToolNotFoundError: Raised when no compose tool is installed.
        """

        if self._access_verified:
            return False

        if self._runtime_probe_info(use_sudo=self._use_sudo):
            self._access_verified = True
            self._runtime_compose_command()
            return False

        if not self._use_sudo and self._runtime_probe_info(use_sudo=True):
            self._use_sudo = True
            self._access_verified = True
            log.warning("runtime.sudo_escalated", docker_binary=self._docker_binary)
            self._runtime_compose_command()
            return True

        raise ContainerRuntimeUnavailableError(
            "cannot reach the container runtime daemon; start it, run with sudo, or join the docker group",
            command=[self._docker_binary, "info"],
        )

    def runtime_find_container(self, service_name: str) -> str | None:
        """Return the first container id of one compose service.

        Args:
            service_name: Compose service name.

        Returns:
            str | None: Container id, None when the service has no container.

        Raises:
            ContainerRuntimeCommandError: Raised when the compose query fails.
            ComposeToolNotFoundError: Raised when no compose tool is installed.
        """

        command = [*self._runtime_compose_command(), "ps", "-q", service_name]
        result = self._runtime_run_checked(command=command, timeout_seconds=self._command_timeout_seconds)
        for line in result.stdout.splitlines():
            container_id = line.strip()
            if container_id:
                return container_id
        return None

    def runtime_inspect_state(self, container_id: str) -> ContainerState:
        """Return process and health state of one container.

        Args:
            container_id: Runtime container id.

        Returns:
            ContainerState: Parsed state, health `none` when unmonitored.

        Raises:
            ContainerRuntimeCommandError: Raised when inspect fails or output is malformed.
        """

        command = [*self._runtime_docker_command(), "inspect", "-f", self._INSPECT_FORMAT, container_id]
        result = self._runtime_run_checked(command=command, timeout_seconds=self._command_timeout_seconds)
        status_text, separator, health_text = result.stdout.strip().partition("|")
        if not separator or not status_text:
            raise ContainerRuntimeCommandError(
                f"unexpected inspect output: {result.stdout.strip()!r}",
                command=command,
                exit_code=result.exit_code,
            )
        return ContainerState(
            container_id=container_id,
            status=status_text.strip(),
            health=health_text.strip() or "unknown",
        )

    def runtime_exec(self, container_id: str, command: list[str]) -> CommandResult:
        """Execute one command inside a container namespace.

        Args:
            container_id: Runtime container id or name.
            command: Argument vector executed in the container.

        Returns:
            CommandResult: Completed command result; non-zero exit is not an error here.

        Raises:
            ContainerRuntimeCommandError: Raised when the exec call times out or cannot start.
        """

        full_command = [*self._runtime_docker_command(), "exec", container_id, *command]
        return self._command_runner(full_command, self._command_timeout_seconds)

    def runtime_restart_group(self) -> None:
        """Restart every service of the compose project.

        Raises:
            ContainerRuntimeCommandError: Raised when restart exits non-zero or times out.
        """

        command = [*self._runtime_compose_command(), "restart"]
        self._runtime_run_checked(command=command, timeout_seconds=self._restart_timeout_seconds)

    def _runtime_probe_info(self, use_sudo: bool) -> bool:
        command = [*self._runtime_sudo_prefix(use_sudo), self._docker_binary, "info"]
        try:
            return self._command_runner(command, self._command_timeout_seconds).succeeded
        except ContainerRuntimeCommandError:
            return False

    def _runtime_compose_command(self) -> list[str]:
        """Return compose argv prefix, detecting plugin versus standalone once.

        Returns:
            list[str]: Command prefix including sudo, file and project options.

        Raises:
            ComposeToolNotFoundError: Raised when no compose tool is available.
        """

        if self._compose_prefix is None:
            self._compose_prefix = self._runtime_detect_compose()

        command = [*self._runtime_sudo_prefix(self._use_sudo), *self._compose_prefix]
        if self._compose_file:
            command.extend(["-f", self._compose_file])
        if self._compose_project_name:
            command.extend(["-p", self._compose_project_name])
        return command

    def _runtime_detect_compose(self) -> list[str]:
        plugin_command = [*self._runtime_sudo_prefix(self._use_sudo), self._docker_binary, "compose", "version"]
        try:
            plugin_available = self._command_runner(plugin_command, self._command_timeout_seconds).succeeded
        except ContainerRuntimeCommandError:
            plugin_available = False
        if plugin_available:
            return [self._docker_binary, "compose"]

        if self._standalone_compose_locator("docker-compose"):
            return ["docker-compose"]

        raise ComposeToolNotFoundError(
            "neither `docker compose` nor `docker-compose` is available",
            command=plugin_command,
        )

    def _runtime_docker_command(self) -> list[str]:
        return [*self._runtime_sudo_prefix(self._use_sudo), self._docker_binary]

    def _runtime_sudo_prefix(self, use_sudo: bool) -> list[str]:
        return ["sudo"] if use_sudo else []

    def _runtime_run_checked(self, command: list[str], timeout_seconds: float) -> CommandResult:
        result = self._command_runner(command, timeout_seconds)
        if not result.succeeded:
            raise ContainerRuntimeCommandError(
                f"command exited with {result.exit_code}: {result.stderr.strip() or 'no stderr'}",
                command=command,
                exit_code=result.exit_code,
                stderr=result.stderr,
            )
        return result
