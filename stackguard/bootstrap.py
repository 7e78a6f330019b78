"""Dependency wiring for commands and the status application."""

from fastapi import FastAPI

from stackguard.adapters import DockerCliRuntime, HttpxStatusProbe
from stackguard.api import create_api_application
from stackguard.checks import AuditConfig, HealthAuditor, ReadinessGate
from stackguard.config import AppSettings
from stackguard.jobs import (
    FileRecoveryStateStore,
    ModelBootstrapper,
    RecoveryMonitor,
    RecoveryMonitorConfig,
)


def bootstrap_create_runtime(settings: AppSettings, use_sudo: bool | None = None) -> DockerCliRuntime:
    """Build the docker CLI runtime adapter.

    Args:
        settings: Validated settings.
        use_sudo: Optional override of `DOCKER_USE_SUDO`.

    Returns:
        DockerCliRuntime: Runtime adapter.
    """

    return DockerCliRuntime(
        docker_binary=settings.docker_binary,
        use_sudo=settings.docker_use_sudo if use_sudo is None else use_sudo,
        compose_file=settings.compose_file,
        compose_project_name=settings.compose_project_name,
        command_timeout_seconds=settings.docker_command_timeout_seconds,
        restart_timeout_seconds=settings.recovery_restart_timeout_seconds,
    )


def bootstrap_build_audit_config(
    settings: AppSettings,
    target_host: str | None = None,
    dashboard_user: str | None = None,
    dashboard_password: str | None = None,
    skip_internal: bool = False,
    use_sudo: bool = False,
) -> AuditConfig:
    """Merge CLI overrides with settings into one audit config.

    Returns:
        AuditConfig: Audit inputs.
    """

    return AuditConfig(
        target_host=(target_host or settings.audit_target_host).strip(),
        dashboard_user=dashboard_user or None,
        dashboard_password=dashboard_password or None,
        skip_internal=skip_internal,
        use_sudo=use_sudo or settings.docker_use_sudo,
        traefik_hostname=settings.traefik_hostname,
        ollama_hostname=settings.ollama_hostname,
        https_port=settings.audit_https_port,
        http_port=settings.audit_http_port,
        proxy_service=settings.proxy_service_name,
        inference_service=settings.inference_service_name,
        frontend_service=settings.frontend_service_name,
        proxy_ping_port=settings.proxy_ping_port,
        inference_internal_url=settings.inference_internal_url,
    )


def bootstrap_create_auditor(settings: AppSettings, audit_config: AuditConfig) -> HealthAuditor:
    """Build the health auditor.

    Returns:
        HealthAuditor: Auditor wired to docker CLI and httpx adapters.
    """

    return HealthAuditor(
        runtime=bootstrap_create_runtime(settings=settings, use_sudo=audit_config.use_sudo),
        http_probe=HttpxStatusProbe(timeout_seconds=settings.audit_request_timeout_seconds),
        config=audit_config,
    )


def bootstrap_create_recovery_monitor(settings: AppSettings) -> RecoveryMonitor:
    """Build the recovery monitor with file-backed restart state.

    Returns:
        RecoveryMonitor: Monitor ready for one scheduled tick.
    """

    return RecoveryMonitor(
        runtime=bootstrap_create_runtime(settings=settings),
        state_store=FileRecoveryStateStore(
            state_path=settings.recovery_state_path,
            lock_stale_seconds=settings.recovery_restart_timeout_seconds,
        ),
        config=RecoveryMonitorConfig(
            container_name=settings.recovery_container_name,
            liveness_command=settings.recovery_liveness_command,
            cooldown_seconds=settings.recovery_cooldown_seconds,
            group_label=settings.compose_project_name or settings.compose_file or "compose",
        ),
    )


def bootstrap_create_model_bootstrapper(settings: AppSettings) -> ModelBootstrapper:
    """Build the model bootstrapper.

    Returns:
        ModelBootstrapper: Bootstrapper targeting the configured inference API.
    """

    return ModelBootstrapper(
        readiness_gate=ReadinessGate(),
        api_url=settings.ollama_api_url,
        pull_timeout_seconds=settings.model_pull_timeout_seconds,
    )


def bootstrap_create_application(settings: AppSettings) -> FastAPI:
    """Assemble the status application.

    Returns:
        FastAPI: Application whose `/health` runs the audit.
    """

    audit_config = bootstrap_build_audit_config(settings=settings)
    return create_api_application(auditor=bootstrap_create_auditor(settings=settings, audit_config=audit_config))
