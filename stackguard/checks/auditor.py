"""Health auditor running the fixed probe battery against the managed stack."""

from __future__ import annotations

from typing import Iterable

import structlog

from stackguard.adapters import (
    CommandResult,
    ContainerRuntimeError,
    ContainerRuntimePort,
    ContainerState,
    HttpProbePort,
)
from stackguard.domain import ProbeOutcome, ProbeResult, RunSummary

from .classification import (
    classify_container_state,
    classify_dashboard_response,
    classify_frontend_response,
    classify_inference_response,
)
from .interfaces import AuditConfig, ProbeDescriptor, ProbeSkipped

log = structlog.get_logger()


def audit_run_battery(descriptors: Iterable[ProbeDescriptor]) -> list[ProbeResult]:
    """Execute probes strictly in order, isolating each probe's failure.

    Args:
        descriptors: Ordered probe battery.

    Returns:
        list[ProbeResult]: One result per descriptor, in execution order.
    """

    results: list[ProbeResult] = []
    for descriptor in descriptors:
        if descriptor.skip_reason is not None:
            results.append(
                ProbeResult(name=descriptor.name, outcome=ProbeOutcome.WARN, detail=descriptor.skip_reason, skipped=True)
            )
            continue

        try:
            observation = descriptor.execute()
        except ProbeSkipped as skipped:
            results.append(
                ProbeResult(name=descriptor.name, outcome=ProbeOutcome.WARN, detail=str(skipped), skipped=True)
            )
            continue
        except ContainerRuntimeError as error:
            log.warning("audit.probe_runtime_error", probe=descriptor.name, error=str(error), command=error.command)
            results.append(
                ProbeResult(name=descriptor.name, outcome=ProbeOutcome.FAIL, detail=f"runtime query failed: {error}")
            )
            continue
        except Exception as error:
            log.error("audit.probe_unexpected_error", probe=descriptor.name, error=str(error), exc_info=True)
            results.append(
                ProbeResult(
                    name=descriptor.name,
                    outcome=ProbeOutcome.FAIL,
                    detail=f"probe error: {type(error).__name__}: {error}",
                )
            )
            continue

        outcome, detail = descriptor.classify(observation)
        results.append(ProbeResult(name=descriptor.name, outcome=outcome, detail=detail))
    return results


def audit_url_host(host: str) -> str:
    """Return the host as it must appear in a URL authority, bracketing IPv6 literals."""

    if ":" in host and not host.startswith("["):
        return f"[{host}]"
    return host


def _classify_exec_result(success_detail: str, failure_detail: str):
    def _classify(result: CommandResult) -> tuple[ProbeOutcome, str]:
        if result.succeeded:
            return ProbeOutcome.PASS, success_detail
        return ProbeOutcome.FAIL, f"{failure_detail} (exit={result.exit_code})"

    return _classify


class HealthAuditor:
    """Run the ordered probe battery and aggregate a run summary."""

    _PING_COMMAND_TEMPLATE = (
        "curl -sf http://localhost:{port}/ping >/dev/null 2>&1 || wget -q --spider http://localhost:{port}/ping"
    )
    _INTERNAL_COMMAND_TEMPLATE = (
        "command -v curl >/dev/null 2>&1 && curl -sf {url} >/dev/null 2>&1 "
        "|| (command -v wget >/dev/null 2>&1 && wget -qO- {url} >/dev/null 2>&1)"
    )

    def __init__(self, runtime: ContainerRuntimePort, http_probe: HttpProbePort, config: AuditConfig):
        """Initialize auditor dependencies.

        Args:
            runtime: Container-runtime port used for state and exec probes.
            http_probe: HTTP port used for route probes.
            config: Audit inputs.

        Raises:
            ValueError: Raised when dependencies or config values are invalid.
        """

        if runtime is None:
            raise ValueError("runtime must not be None")
        if http_probe is None:
            raise ValueError("http_probe must not be None")
        if not config.target_host.strip():
            raise ValueError("config.target_host must not be blank")

        self._runtime = runtime
        self._http_probe = http_probe
        self._config = config

    def audit_run(self) -> RunSummary:
        """Verify runtime access once, then execute the probe battery.

        Returns:
            RunSummary: Ordered results and informational notes.

        Raises:
            ContainerRuntimeUnavailableError: Raised when the runtime cannot be reached at all.
        """

        notes: list[str] = []
        if self._runtime.runtime_ensure_access():
            notes.append(
                "container runtime access required sudo; escalated for this run "
                "(pass --use-sudo or join the docker group)"
            )

        results = audit_run_battery(self.audit_build_battery())
        if self._config.skip_internal:
            notes.append("skipped internal connectivity check (--skip-internal)")

        summary = RunSummary(results=tuple(results), notes=tuple(notes))
        log.info(
            "audit.completed",
            probes=len(summary.results),
            failures=summary.failure_count,
            warnings=summary.warning_count,
        )
        return summary

    def audit_build_battery(self) -> list[ProbeDescriptor]:
        """Return the fixed, ordered probe battery for the configured stack.

        Returns:
            list[ProbeDescriptor]: Probe descriptors in execution order.
        """

        config = self._config
        battery = [self._audit_service_probe(service_name) for service_name in config.service_names]
        battery.append(self._audit_proxy_ping_probe())
        battery.append(self._audit_dashboard_probe())
        battery.append(self._audit_frontend_probe())
        battery.append(self._audit_inference_probe())
        if not config.skip_internal:
            battery.append(self._audit_internal_probe())
        return battery

    def _audit_service_probe(self, service_name: str) -> ProbeDescriptor:
        def _execute() -> ContainerState | None:
            container_id = self._runtime.runtime_find_container(service_name)
            if container_id is None:
                return None
            return self._runtime.runtime_inspect_state(container_id)

        def _classify(state: ContainerState | None) -> tuple[ProbeOutcome, str]:
            if state is None:
                return ProbeOutcome.FAIL, f"service={service_name} not started (no container)"
            outcome, detail = classify_container_state(state)
            return outcome, f"service={service_name} {detail}"

        return ProbeDescriptor(name=f"service:{service_name}", execute=_execute, classify=_classify)

    def _audit_proxy_ping_probe(self) -> ProbeDescriptor:
        config = self._config
        command = ["sh", "-lc", self._PING_COMMAND_TEMPLATE.format(port=config.proxy_ping_port)]

        def _execute() -> CommandResult:
            container_id = self._runtime.runtime_find_container(config.proxy_service)
            if container_id is None:
                raise ProbeSkipped(f"{config.proxy_service} container not found, ping check skipped")
            return self._runtime.runtime_exec(container_id, command)

        return ProbeDescriptor(
            name="proxy:ping",
            execute=_execute,
            classify=_classify_exec_result(
                success_detail=f"{config.proxy_service} ping passed",
                failure_detail=f"{config.proxy_service} ping failed",
            ),
        )

    def _audit_dashboard_probe(self) -> ProbeDescriptor:
        config = self._config
        url = f"https://{audit_url_host(config.target_host)}:{config.https_port}/api/rawdata"
        skip_reason = None
        if config.traefik_hostname is None:
            skip_reason = "TRAEFIK_HOSTNAME not configured, dashboard route check skipped"

        return ProbeDescriptor(
            name="route:dashboard",
            execute=lambda: self._http_probe.http_status(
                url, host_header=config.traefik_hostname, auth=config.dashboard_auth
            ),
            classify=classify_dashboard_response,
            skip_reason=skip_reason,
        )

    def _audit_frontend_probe(self) -> ProbeDescriptor:
        config = self._config
        url = f"https://{audit_url_host(config.target_host)}:{config.https_port}/"
        skip_reason = None
        if config.ollama_hostname is None:
            skip_reason = "OLLAMA_HOSTNAME not configured, frontend route check skipped"

        return ProbeDescriptor(
            name="route:frontend",
            execute=lambda: self._http_probe.http_status(url, host_header=config.ollama_hostname),
            classify=classify_frontend_response,
            skip_reason=skip_reason,
        )

    def _audit_inference_probe(self) -> ProbeDescriptor:
        config = self._config
        url = f"http://{audit_url_host(config.target_host)}:{config.http_port}/api/tags"
        return ProbeDescriptor(
            name="route:inference",
            execute=lambda: self._http_probe.http_status(url),
            classify=classify_inference_response,
        )

    def _audit_internal_probe(self) -> ProbeDescriptor:
        config = self._config
        command = ["sh", "-lc", self._INTERNAL_COMMAND_TEMPLATE.format(url=config.inference_internal_url)]

        def _execute() -> CommandResult:
            container_id = self._runtime.runtime_find_container(config.frontend_service)
            if container_id is None:
                raise ProbeSkipped(f"{config.frontend_service} container not found, internal connectivity check skipped")
            return self._runtime.runtime_exec(container_id, command)

        return ProbeDescriptor(
            name="internal:frontend-to-inference",
            execute=_execute,
            classify=_classify_exec_result(
                success_detail=f"{config.frontend_service} container reaches {config.inference_internal_url}",
                failure_detail=f"{config.frontend_service} container cannot reach {config.inference_internal_url}",
            ),
        )
