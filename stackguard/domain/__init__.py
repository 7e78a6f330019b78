"""Domain models used across application layer boundaries."""

from .models import INFO_MARKER, ProbeOutcome, ProbeResult, RecoveryDecision, RunSummary

__all__ = ["INFO_MARKER", "ProbeOutcome", "ProbeResult", "RecoveryDecision", "RunSummary"]
