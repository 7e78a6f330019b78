"""Adapter layer package for container-runtime and HTTP boundaries."""

from .docker_cli import DockerCliRuntime, runtime_subprocess_runner
from .http_probe import HttpxStatusProbe
from .interfaces import CommandResult, ContainerRuntimePort, ContainerState, HttpProbePort, HttpProbeResponse
from .runtime_errors import (
	ComposeToolNotFoundError,
	ContainerRuntimeCommandError,
	ContainerRuntimeError,
	ContainerRuntimeUnavailableError,
)

__all__ = [
	"CommandResult",
	"ComposeToolNotFoundError",
	"ContainerRuntimeCommandError",
	"ContainerRuntimeError",
	"ContainerRuntimePort",
	"ContainerRuntimeUnavailableError",
	"ContainerState",
	"DockerCliRuntime",
	"HttpProbePort",
	"HttpProbeResponse",
	"HttpxStatusProbe",
	"runtime_subprocess_runner",
]
