"""Operator-facing line rendering for audit runs."""

from __future__ import annotations

from stackguard.domain import INFO_MARKER, ProbeOutcome, RunSummary

from .interfaces import AuditConfig


def _format_line(marker: str, text: str) -> str:
    return f"{marker:<8}{text}"


def report_header_lines(config: AuditConfig) -> list[str]:
    """Return informational lines describing the audit target.

    Args:
        config: Audit inputs.

    Returns:
        list[str]: Header lines.
    """

    lines = [_format_line(INFO_MARKER, f"target host: {config.target_host}")]
    if config.traefik_hostname:
        lines.append(_format_line(INFO_MARKER, f"TRAEFIK_HOSTNAME={config.traefik_hostname}"))
    if config.ollama_hostname:
        lines.append(_format_line(INFO_MARKER, f"OLLAMA_HOSTNAME={config.ollama_hostname}"))
    return lines


def report_summary_lines(summary: RunSummary) -> list[str]:
    """Return one line per probe, the notes, and a closing failure-count line.

    Args:
        summary: Completed run summary.

    Returns:
        list[str]: Rendered lines in output order.
    """

    lines = [_format_line(result.outcome.marker, result.detail) for result in summary.results]
    lines.extend(_format_line(INFO_MARKER, note) for note in summary.notes)
    if summary.failure_count == 0:
        lines.append(_format_line(ProbeOutcome.PASS.marker, "all checks completed, 0 failed"))
    else:
        lines.append(_format_line(ProbeOutcome.FAIL.marker, f"{summary.failure_count} check(s) failed"))
    return lines
