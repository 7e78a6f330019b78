"""Typed contracts for the audit probe battery."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Protocol

from stackguard.domain import ProbeOutcome, RunSummary


class ProbeSkipped(Exception):
    """Raised by a probe execution when a runtime prerequisite is absent.

    The message becomes the warn-level note of the skipped probe.
    """


@dataclass(frozen=True)
class ProbeDescriptor:
    """One entry of the ordered probe battery.

    Attributes:
        name: Stable probe identifier.
        execute: Closure performing the observation; may raise `ProbeSkipped`.
        classify: Maps the observation to an outcome and detail text.
        skip_reason: Set when required configuration is absent; the probe is not executed.
    """

    name: str
    execute: Callable[[], Any]
    classify: Callable[[Any], tuple[ProbeOutcome, str]]
    skip_reason: str | None = None


@dataclass(frozen=True)
class AuditConfig:
    """Inputs of one audit run.

    Attributes:
        target_host: Host/IP used for external route probes.
        dashboard_user: Optional basic-auth user for the dashboard route.
        dashboard_password: Optional basic-auth password for the dashboard route.
        skip_internal: Omit the inter-service reachability probe.
        use_sudo: Elevate privilege for container-runtime queries.
        traefik_hostname: Dashboard virtual host, None disables that probe.
        ollama_hostname: Frontend virtual host, None disables that probe.
        https_port: Published HTTPS port of the proxy.
        http_port: Published HTTP port routed to the inference API.
        proxy_service: Compose service name of the proxy.
        inference_service: Compose service name of the inference server.
        frontend_service: Compose service name of the web frontend.
        proxy_ping_port: Proxy ping port inside its container.
        inference_internal_url: Inference URL reachable from the frontend network.
    """

    target_host: str = "127.0.0.1"
    dashboard_user: str | None = None
    dashboard_password: str | None = None
    skip_internal: bool = False
    use_sudo: bool = False
    traefik_hostname: str | None = None
    ollama_hostname: str | None = None
    https_port: int = 8443
    http_port: int = 8880
    proxy_service: str = "traefik"
    inference_service: str = "ollama"
    frontend_service: str = "webui"
    proxy_ping_port: int = 8082
    inference_internal_url: str = "http://ollama:11434/api/tags"

    @property
    def service_names(self) -> tuple[str, ...]:
        return (self.proxy_service, self.inference_service, self.frontend_service)

    @property
    def dashboard_auth(self) -> tuple[str, str] | None:
        """Return credentials only when both user and password are present."""

        if self.dashboard_user and self.dashboard_password:
            return self.dashboard_user, self.dashboard_password
        return None


class AuditRunnerPort(Protocol):
    """Port definition for anything that can produce one audit run summary."""

    def audit_run(self) -> RunSummary:
        """Execute one audit.

        Returns:
            RunSummary: Ordered probe results.

        Raises:
            ContainerRuntimeUnavailableError: Raised when the runtime is unreachable.
        """
