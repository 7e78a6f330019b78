"""Restart bookkeeping stores for cooldown and non-reentrancy guards."""

from __future__ import annotations

import json
import os
import threading
import time
from pathlib import Path
from typing import Callable

import structlog

from .interfaces import RecoveryStatePort

log = structlog.get_logger()


class InMemoryRecoveryStateStore(RecoveryStatePort):
    """Process-local store, suitable when one process drives every tick."""

    def __init__(self):
        self._last_restart_at: float | None = None
        self._restart_lock = threading.Lock()

    def state_last_restart_at(self) -> float | None:
        return self._last_restart_at

    def state_record_restart(self, restarted_at: float) -> None:
        self._last_restart_at = restarted_at

    def state_acquire_restart_lock(self) -> bool:
        return self._restart_lock.acquire(blocking=False)

    def state_release_restart_lock(self) -> None:
        if self._restart_lock.locked():
            self._restart_lock.release()


class FileRecoveryStateStore(RecoveryStatePort):
    """JSON state file plus exclusive lock file shared by scheduler-driven processes.

    The lock file is created with `O_EXCL`; a lock older than `lock_stale_seconds`
    is treated as abandoned by a crashed process and replaced.
    """

    def __init__(
        self,
        state_path: str | Path,
        lock_stale_seconds: float = 300.0,
        clock: Callable[[], float] | None = None,
    ):
        """Initialize file-backed recovery state.

        Args:
            state_path: JSON file holding the last restart timestamp.
            lock_stale_seconds: Age after which an existing lock is considered abandoned.
            clock: Optional wall-clock provider.

        Raises:
            ValueError: Raised when lock_stale_seconds is not positive.
        """

        if lock_stale_seconds <= 0:
            raise ValueError("lock_stale_seconds must be > 0")
        self._state_path = Path(state_path)
        self._lock_path = self._state_path.with_name(self._state_path.name + ".lock")
        self._lock_stale_seconds = lock_stale_seconds
        self._clock = clock or time.time

    @property
    def lock_path(self) -> Path:
        return self._lock_path

    def state_last_restart_at(self) -> float | None:
        """Return the stored restart timestamp.

        Returns:
            float | None: Epoch seconds, None when the file does not exist.

        Raises:
            RuntimeError: Raised when the state file is unreadable or malformed.
        """

        if not self._state_path.exists():
            return None
        try:
            payload = json.loads(self._state_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as error:
            raise RuntimeError(f"recovery state file unreadable: {self._state_path}") from error

        last_restart_at = payload.get("last_restart_at") if isinstance(payload, dict) else None
        if last_restart_at is None:
            return None
        if not isinstance(last_restart_at, (int, float)):
            raise RuntimeError(f"recovery state file malformed: {self._state_path}")
        return float(last_restart_at)

    def state_record_restart(self, restarted_at: float) -> None:
        """Write the restart timestamp atomically.

        Args:
            restarted_at: Epoch seconds of restart completion.

        Raises:
            RuntimeError: Raised when the state file cannot be written.
        """

        temporary_path = self._state_path.with_name(self._state_path.name + ".tmp")
        try:
            self._state_path.parent.mkdir(parents=True, exist_ok=True)
            temporary_path.write_text(json.dumps({"last_restart_at": restarted_at}), encoding="utf-8")
            os.replace(temporary_path, self._state_path)
        except OSError as error:
            raise RuntimeError(f"recovery state file not writable: {self._state_path}") from error

    def state_acquire_restart_lock(self) -> bool:
        """Create the lock file exclusively, replacing a stale one once.

        Returns:
            bool: True when the lock was acquired.

        Raises:
            RuntimeError: Raised when the lock directory is not writable.
        """

        try:
            self._lock_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as error:
            raise RuntimeError(f"recovery lock directory not writable: {self._lock_path.parent}") from error

        for _ in range(2):
            try:
                lock_descriptor = os.open(self._lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
            except FileExistsError:
                if not self._state_remove_stale_lock():
                    return False
                continue
            with os.fdopen(lock_descriptor, "w", encoding="utf-8") as lock_file:
                lock_file.write(json.dumps({"pid": os.getpid(), "acquired_at": self._clock()}))
            return True
        return False

    def state_release_restart_lock(self) -> None:
        self._lock_path.unlink(missing_ok=True)

    def _state_remove_stale_lock(self) -> bool:
        try:
            lock_age_seconds = self._clock() - self._lock_path.stat().st_mtime
        except FileNotFoundError:
            return True
        if lock_age_seconds < self._lock_stale_seconds:
            return False
        log.warning(
            "recovery.stale_lock_removed",
            lock_path=str(self._lock_path),
            age_seconds=round(lock_age_seconds, 1),
        )
        self._lock_path.unlink(missing_ok=True)
        return True
