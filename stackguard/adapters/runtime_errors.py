"""Project-native typed exceptions for container-runtime failures."""

from __future__ import annotations


class ContainerRuntimeError(Exception):
    """Base exception for container-runtime adapter failures.

    Attributes:
        command: Full command line that failed, when one was executed.
    """

    def __init__(self, message: str, command: list[str] | None = None):
        super().__init__(message)
        self.command = list(command) if command is not None else None


class ContainerRuntimeUnavailableError(ContainerRuntimeError, ConnectionError):
    """Runtime daemon unreachable or access denied, even after escalation."""


class ComposeToolNotFoundError(ContainerRuntimeError, FileNotFoundError):
    """Neither the compose plugin nor the standalone compose binary is installed."""


class ContainerRuntimeCommandError(ContainerRuntimeError, RuntimeError):
    """Runtime command exited non-zero or timed out."""

    def __init__(
        self,
        message: str,
        command: list[str] | None = None,
        exit_code: int | None = None,
        stderr: str = "",
    ):
        super().__init__(message=message, command=command)
        self.exit_code = exit_code
        self.stderr = stderr
