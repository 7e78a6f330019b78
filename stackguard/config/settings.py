"""Typed runtime settings with dotenv support and startup validation."""

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SettingsLoadError(RuntimeError):
    """Raised when runtime settings cannot be loaded or validated."""


class AppSettings(BaseSettings):
    """Operational settings for audit, recovery and bootstrap commands.

    Environment variable names map directly to field names in uppercase.
    Example: `traefik_hostname` reads from `TRAEFIK_HOSTNAME`, which is the same
    `.env` entry the compose project uses for its router rules.

    Attributes:
        traefik_hostname: Virtual host of the proxy dashboard router.
        ollama_hostname: Virtual host of the web frontend router.
        audit_target_host: Host/IP used for external HTTP(S) route probes.
        audit_https_port: Published HTTPS port of the proxy.
        audit_http_port: Published HTTP port routed to the inference API.
        audit_request_timeout_seconds: Per-request timeout of route probes.
        proxy_service_name: Compose service name of the reverse proxy.
        inference_service_name: Compose service name of the inference server.
        frontend_service_name: Compose service name of the web frontend.
        proxy_ping_port: Proxy ping entrypoint port inside its container.
        inference_internal_url: Inference list-models URL on the internal network.
        compose_file: Optional compose file passed with `-f`.
        compose_project_name: Optional compose project passed with `-p`.
        docker_binary: Container runtime CLI binary.
        docker_use_sudo: Whether runtime commands start with sudo.
        docker_command_timeout_seconds: Timeout for one runtime CLI call.
        recovery_container_name: Container inspected by the recovery monitor.
        recovery_liveness_command: Accelerator presence command run in that container.
        recovery_cooldown_seconds: Minimum interval between restarts, 0 disables.
        recovery_state_path: JSON state file shared across scheduled ticks.
        recovery_restart_timeout_seconds: Upper bound of one group restart.
        ollama_api_url: Inference API base URL used by model bootstrap.
        ollama_install_models: Comma separated model names to pull.
        readiness_timeout_seconds: Default readiness gate timeout.
        readiness_poll_interval_seconds: Default readiness gate poll interval.
        model_pull_timeout_seconds: Timeout for one model pull request.
        application_host: Host interface for the status API.
        application_port: Status API port.
        log_level: Structured log level name.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    traefik_hostname: str | None = Field(default=None)
    ollama_hostname: str | None = Field(default=None)
    audit_target_host: str = Field(default="127.0.0.1", min_length=1)
    audit_https_port: int = Field(default=8443, ge=1, le=65535)
    audit_http_port: int = Field(default=8880, ge=1, le=65535)
    audit_request_timeout_seconds: float = Field(default=10.0, gt=0)
    proxy_service_name: str = Field(default="traefik", min_length=1)
    inference_service_name: str = Field(default="ollama", min_length=1)
    frontend_service_name: str = Field(default="webui", min_length=1)
    proxy_ping_port: int = Field(default=8082, ge=1, le=65535)
    inference_internal_url: str = Field(default="http://ollama:11434/api/tags", min_length=1)
    compose_file: str | None = Field(default=None)
    compose_project_name: str | None = Field(default=None)
    docker_binary: str = Field(default="docker", min_length=1)
    docker_use_sudo: bool = Field(default=False)
    docker_command_timeout_seconds: float = Field(default=60.0, gt=0)
    recovery_container_name: str = Field(default="ollama-compose-ollama-1", min_length=1)
    recovery_liveness_command: str = Field(default="nvidia-smi", min_length=1)
    recovery_cooldown_seconds: float = Field(default=0.0, ge=0)
    recovery_state_path: str = Field(default=".stackguard/recovery-state.json", min_length=1)
    recovery_restart_timeout_seconds: float = Field(default=300.0, gt=0)
    ollama_api_url: str = Field(default="http://127.0.0.1:11434", min_length=1)
    ollama_install_models: str = Field(default="")
    readiness_timeout_seconds: float = Field(default=120.0, gt=0)
    readiness_poll_interval_seconds: float = Field(default=2.0, gt=0)
    model_pull_timeout_seconds: float = Field(default=1800.0, gt=0)
    application_host: str = Field(default="0.0.0.0")
    application_port: int = Field(default=8090, ge=1, le=65535)
    log_level: str = Field(default="INFO")

    @field_validator("traefik_hostname", "ollama_hostname", "compose_file", "compose_project_name", mode="before")
    @classmethod
    def _normalize_optional_string(cls, value: str | None) -> str | None:
        if value is None:
            return None
        stripped_value = str(value).strip()
        return stripped_value or None

    @field_validator(
        "audit_target_host",
        "proxy_service_name",
        "inference_service_name",
        "frontend_service_name",
        "docker_binary",
        "recovery_container_name",
        "recovery_liveness_command",
    )
    @classmethod
    def _validate_non_empty_string(cls, value: str) -> str:
        stripped_value = value.strip()
        if not stripped_value:
            raise ValueError("value must not be blank")
        return stripped_value

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized_value = value.strip().upper()
        if normalized_value not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError("log_level must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL")
        return normalized_value

    @field_validator("readiness_poll_interval_seconds")
    @classmethod
    def _validate_poll_interval_bounds(cls, value: float, info) -> float:
        timeout_seconds = float(info.data.get("readiness_timeout_seconds", 120.0))
        if value >= timeout_seconds:
            raise ValueError("readiness_poll_interval_seconds must be less than readiness_timeout_seconds")
        return value

    def settings_install_models(self) -> tuple[str, ...]:
        """Return configured model names in declaration order without blanks or duplicates.

        Returns:
            tuple[str, ...]: Model names to pull during bootstrap.
        """

        return settings_split_model_names(self.ollama_install_models)


def settings_split_model_names(raw_value: str) -> tuple[str, ...]:
    """Split a comma or whitespace separated model list.

    Args:
        raw_value: Raw model list text.

    Returns:
        tuple[str, ...]: Ordered unique model names.
    """

    model_names: list[str] = []
    for candidate in raw_value.replace(",", " ").split():
        if candidate not in model_names:
            model_names.append(candidate)
    return tuple(model_names)


def config_load_settings() -> AppSettings:
    """Load and validate runtime settings from environment and dotenv.

    Returns:
        AppSettings: Validated runtime settings object.

    Raises:
        SettingsLoadError: Raised when settings are invalid.
    """

    try:
        return AppSettings()
    except ValidationError as error:
        raise SettingsLoadError(
            f"Startup configuration validation failed. Update .env or environment variables. Details: {error}"
        ) from error
