"""Tests for the file-backed recovery state store."""

from __future__ import annotations

import time
from pathlib import Path

import pytest

from stackguard.jobs import FileRecoveryStateStore


def test_jobs_recovery_state_round_trips_last_restart(tmp_path: Path) -> None:
    """Return None before any restart and the recorded timestamp afterwards.

    Args:
        tmp_path: Pytest temporary directory.

    Returns:
        None: Assertions validate persisted restart time.

    Raises:
        AssertionError: Raised when state is not persisted.
    """

    store = FileRecoveryStateStore(state_path=tmp_path / "state" / "recovery.json")

    assert store.state_last_restart_at() is None
    store.state_record_restart(1_700_000_123.5)

    reopened_store = FileRecoveryStateStore(state_path=tmp_path / "state" / "recovery.json")
    assert reopened_store.state_last_restart_at() == 1_700_000_123.5


def test_jobs_recovery_state_malformed_file_raises(tmp_path: Path) -> None:
    """Raise a runtime error for an unreadable state file.

    Args:
        tmp_path: Pytest temporary directory.

    Returns:
        None: Assertions validate malformed state handling.

    Raises:
        AssertionError: Raised when malformed state is accepted.
    """

    state_path = tmp_path / "recovery.json"
    state_path.write_text("{not json", encoding="utf-8")

    with pytest.raises(RuntimeError, match="unreadable"):
        FileRecoveryStateStore(state_path=state_path).state_last_restart_at()


def test_jobs_recovery_state_lock_is_exclusive_across_instances(tmp_path: Path) -> None:
    """Deny a second lock holder until the first releases.

    Args:
        tmp_path: Pytest temporary directory.

    Returns:
        None: Assertions validate cross-process lock semantics.

    Raises:
        AssertionError: Raised when the lock is not exclusive.
    """

    first_store = FileRecoveryStateStore(state_path=tmp_path / "recovery.json")
    second_store = FileRecoveryStateStore(state_path=tmp_path / "recovery.json")

    assert first_store.state_acquire_restart_lock() is True
    assert second_store.state_acquire_restart_lock() is False
    first_store.state_release_restart_lock()
    assert second_store.state_acquire_restart_lock() is True
    assert second_store.lock_path.exists()


def test_jobs_recovery_state_stale_lock_is_replaced(tmp_path: Path) -> None:
    """Replace a lock older than the stale threshold.

    Args:
        tmp_path: Pytest temporary directory.

    Returns:
        None: Assertions validate stale lock recovery.

    Raises:
        AssertionError: Raised when a stale lock blocks forever.
    """

    crashed_store = FileRecoveryStateStore(state_path=tmp_path / "recovery.json", lock_stale_seconds=10)
    assert crashed_store.state_acquire_restart_lock() is True

    later_store = FileRecoveryStateStore(
        state_path=tmp_path / "recovery.json",
        lock_stale_seconds=10,
        clock=lambda: time.time() + 3600,
    )

    assert later_store.state_acquire_restart_lock() is True
