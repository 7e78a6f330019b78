"""Typed interfaces for job-layer recovery responsibilities."""

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class RecoveryMonitorConfig:
    """Static configuration of the recovery monitor.

    Attributes:
        container_name: Container in which the liveness predicate runs.
        liveness_command: Command whose zero exit means the accelerator is present.
        cooldown_seconds: Minimum seconds between group restarts, 0 disables the guard.
        group_label: Human-readable identifier of the managed service group.
    """

    container_name: str
    liveness_command: str = "nvidia-smi"
    cooldown_seconds: float = 0.0
    group_label: str = "compose"


class RecoveryStatePort(Protocol):
    """Port definition for restart bookkeeping shared across ticks."""

    def state_last_restart_at(self) -> float | None:
        """Return epoch seconds of the last completed restart, None when unknown.

        Raises:
            RuntimeError: Raised when stored state cannot be read.
        """

    def state_record_restart(self, restarted_at: float) -> None:
        """Persist epoch seconds of a completed restart.

        Args:
            restarted_at: Restart completion time.

        Raises:
            RuntimeError: Raised when state cannot be written.
        """

    def state_acquire_restart_lock(self) -> bool:
        """Try to mark a restart as in flight.

        Returns:
            bool: False when another restart already holds the lock.
        """

    def state_release_restart_lock(self) -> None:
        """Clear the in-flight marker."""
