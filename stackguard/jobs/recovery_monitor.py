"""Recovery monitor restarting the service group when the accelerator disappears."""

from __future__ import annotations

import shlex
import time
from datetime import datetime, timezone
from typing import Callable

import structlog

from stackguard.adapters import ContainerRuntimeError, ContainerRuntimePort
from stackguard.domain import RecoveryDecision

from .interfaces import RecoveryMonitorConfig, RecoveryStatePort

log = structlog.get_logger()


class RecoveryActionError(RuntimeError):
    """Raised when the group restart itself failed.

    Attributes:
        command: Restart command line, when known.
    """

    def __init__(self, message: str, command: list[str] | None = None):
        super().__init__(message)
        self.command = command


class RecoveryMonitor:
    """Evaluate one liveness predicate per tick and restart the group when it fails.

    Ticks are driven by an external scheduler. Nothing carries between ticks
    except what the state store records: the last restart time for the cooldown
    guard and the in-flight marker that keeps restarts non-reentrant.
    """

    def __init__(
        self,
        runtime: ContainerRuntimePort,
        state_store: RecoveryStatePort,
        config: RecoveryMonitorConfig,
        clock: Callable[[], float] | None = None,
    ):
        """Initialize recovery monitor dependencies.

        Args:
            runtime: Container-runtime port for exec and group restart.
            state_store: Restart bookkeeping store.
            config: Monitor configuration.
            clock: Optional wall-clock provider returning epoch seconds.

        Raises:
            ValueError: Raised when dependencies or config values are invalid.
        """

        if runtime is None:
            raise ValueError("runtime must not be None")
        if state_store is None:
            raise ValueError("state_store must not be None")
        if not config.container_name.strip():
            raise ValueError("config.container_name must not be blank")
        if not config.liveness_command.strip():
            raise ValueError("config.liveness_command must not be blank")
        if config.cooldown_seconds < 0:
            raise ValueError("config.cooldown_seconds must be >= 0")

        self._runtime = runtime
        self._state_store = state_store
        self._config = config
        self._liveness_command = shlex.split(config.liveness_command)
        self._clock = clock or time.time

    def monitor_tick(self, service_name: str) -> RecoveryDecision:
        """Run one evaluation cycle.

        Args:
            service_name: Label of the monitored service for logs and the decision.

        Returns:
            RecoveryDecision: What was observed and whether a restart was issued.

        Raises:
            ContainerRuntimeUnavailableError: Raised when the runtime cannot be reached at all.
            RecoveryActionError: Raised when the restart command failed.
        """

        self._runtime.runtime_ensure_access()
        evaluated_at = self._clock()
        evaluated_at_utc = datetime.fromtimestamp(evaluated_at, tz=timezone.utc).isoformat()
        bound_log = log.bind(
            service=service_name,
            container=self._config.container_name,
            group=self._config.group_label,
        )

        liveness_ok, liveness_detail = self._monitor_check_liveness()
        if liveness_ok:
            bound_log.info("recovery.healthy", detail=liveness_detail)
            return RecoveryDecision(
                service_name=service_name,
                liveness_ok=True,
                restart_issued=False,
                suppressed_reason=None,
                evaluated_at_utc=evaluated_at_utc,
            )

        bound_log.warning(
            "recovery.liveness_failed",
            command=self._liveness_command,
            detail=liveness_detail,
        )

        suppressed_reason = self._monitor_cooldown_reason(now=evaluated_at)
        if suppressed_reason is None and not self._state_store.state_acquire_restart_lock():
            suppressed_reason = "restart already in progress"
        if suppressed_reason is not None:
            bound_log.warning("recovery.restart_suppressed", reason=suppressed_reason)
            return RecoveryDecision(
                service_name=service_name,
                liveness_ok=False,
                restart_issued=False,
                suppressed_reason=suppressed_reason,
                evaluated_at_utc=evaluated_at_utc,
            )

        try:
            bound_log.warning("recovery.restarting")
            try:
                self._runtime.runtime_restart_group()
            except ContainerRuntimeError as error:
                bound_log.error(
                    "recovery.restart_failed",
                    command=error.command,
                    exit_code=getattr(error, "exit_code", None),
                    stderr=getattr(error, "stderr", ""),
                    error=str(error),
                )
                raise RecoveryActionError(
                    f"group restart failed: {error}",
                    command=error.command,
                ) from error
            try:
                self._state_store.state_record_restart(self._clock())
            except RuntimeError as error:
                bound_log.error("recovery.state_write_failed", error=str(error))
        finally:
            self._state_store.state_release_restart_lock()

        bound_log.warning("recovery.restart_completed")
        return RecoveryDecision(
            service_name=service_name,
            liveness_ok=False,
            restart_issued=True,
            suppressed_reason=None,
            evaluated_at_utc=evaluated_at_utc,
        )

    def _monitor_check_liveness(self) -> tuple[bool, str]:
        try:
            result = self._runtime.runtime_exec(self._config.container_name, self._liveness_command)
        except ContainerRuntimeError as error:
            return False, f"exec failed: {error}"
        if result.succeeded:
            return True, "accelerator available"
        return False, f"exit={result.exit_code} {result.stderr.strip()}".strip()

    def _monitor_cooldown_reason(self, now: float) -> str | None:
        if self._config.cooldown_seconds <= 0:
            return None
        try:
            last_restart_at = self._state_store.state_last_restart_at()
        except RuntimeError as error:
            log.error("recovery.state_unreadable", error=str(error))
            return None
        if last_restart_at is None:
            return None
        remaining_seconds = self._config.cooldown_seconds - (now - last_restart_at)
        if remaining_seconds <= 0:
            return None
        return f"cooldown active, {remaining_seconds:.0f}s remaining"
