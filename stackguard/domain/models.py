"""Typed domain models shared across runtime layers.

Probe results and run summaries are produced fresh by every audit invocation
and never persisted. Recovery decisions live for one monitor tick.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ProbeOutcome(str, Enum):
    """Classification of one probe execution."""

    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"

    @property
    def marker(self) -> str:
        """Return the operator-facing severity marker."""

        return _OUTCOME_MARKERS[self]


_OUTCOME_MARKERS: dict[ProbeOutcome, str] = {
    ProbeOutcome.PASS: "[OK]",
    ProbeOutcome.WARN: "[WARN]",
    ProbeOutcome.FAIL: "[ERROR]",
}

INFO_MARKER = "[INFO]"


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of one discrete check.

    Attributes:
        name: Stable probe identifier, e.g. `service:ollama`.
        outcome: Pass, warn or fail classification.
        detail: Human-readable explanation.
        skipped: True when the probe did not run because a prerequisite was absent.
    """

    name: str
    outcome: ProbeOutcome
    detail: str
    skipped: bool = False


@dataclass(frozen=True)
class RunSummary:
    """Ordered probe results of one audit invocation.

    Attributes:
        results: Probe results in execution order.
        notes: Informational lines that are not probe results.
    """

    results: tuple[ProbeResult, ...]
    notes: tuple[str, ...] = field(default_factory=tuple)

    @property
    def failure_count(self) -> int:
        """Return the number of failed probes; warnings and skips never count."""

        return sum(1 for result in self.results if result.outcome is ProbeOutcome.FAIL)

    @property
    def warning_count(self) -> int:
        return sum(1 for result in self.results if result.outcome is ProbeOutcome.WARN)

    @property
    def exit_code(self) -> int:
        """Return process exit status: 0 iff no probe failed."""

        return 0 if self.failure_count == 0 else 1

    def summary_to_payload(self) -> dict[str, object]:
        """Render the summary as a JSON-serializable payload.

        Returns:
            dict[str, object]: Deterministic payload for API and log output.
        """

        return {
            "status": "ok" if self.failure_count == 0 else "degraded",
            "failure_count": self.failure_count,
            "warning_count": self.warning_count,
            "results": [
                {
                    "name": result.name,
                    "outcome": result.outcome.value,
                    "detail": result.detail,
                    "skipped": result.skipped,
                }
                for result in self.results
            ],
            "notes": list(self.notes),
        }


@dataclass(frozen=True)
class RecoveryDecision:
    """Result of one recovery monitor tick.

    Attributes:
        service_name: Evaluated service label.
        liveness_ok: Whether the liveness predicate succeeded.
        restart_issued: Whether a group restart was executed.
        suppressed_reason: Why a needed restart was not issued, if it was not.
        evaluated_at_utc: ISO timestamp of the evaluation.
    """

    service_name: str
    liveness_ok: bool
    restart_issued: bool
    suppressed_reason: str | None
    evaluated_at_utc: str
