"""Tests for run summary aggregation invariants."""

import pytest

from stackguard.domain import ProbeOutcome, ProbeResult, RunSummary


@pytest.mark.parametrize(
    "outcomes",
    [
        (),
        (ProbeOutcome.PASS, ProbeOutcome.PASS),
        (ProbeOutcome.WARN, ProbeOutcome.WARN, ProbeOutcome.PASS),
        (ProbeOutcome.FAIL, ProbeOutcome.WARN, ProbeOutcome.FAIL, ProbeOutcome.PASS),
        (ProbeOutcome.FAIL,),
    ],
)
def test_domain_failure_count_equals_failed_results(outcomes: tuple[ProbeOutcome, ...]) -> None:
    """Count only failed results and derive a non-zero exit iff any failed.

    Args:
        outcomes: Probe outcomes in order.

    Returns:
        None: Assertions validate aggregation invariant.

    Raises:
        AssertionError: Raised when warnings or skips change the count.
    """

    results = tuple(
        ProbeResult(name=f"probe-{index}", outcome=outcome, detail="detail", skipped=outcome is ProbeOutcome.WARN)
        for index, outcome in enumerate(outcomes)
    )
    summary = RunSummary(results=results)

    expected_failures = sum(1 for outcome in outcomes if outcome is ProbeOutcome.FAIL)
    assert summary.failure_count == expected_failures
    assert (summary.exit_code != 0) == (expected_failures > 0)


def test_domain_summary_payload_is_json_ready() -> None:
    """Render outcomes as plain strings in the payload.

    Returns:
        None: Assertions validate payload rendering.

    Raises:
        AssertionError: Raised when payload shape differs.
    """

    summary = RunSummary(
        results=(ProbeResult(name="route:dashboard", outcome=ProbeOutcome.WARN, detail="skipped", skipped=True),),
        notes=("skipped internal connectivity check (--skip-internal)",),
    )

    payload = summary.summary_to_payload()

    assert payload["status"] == "ok"
    assert payload["results"] == [
        {"name": "route:dashboard", "outcome": "warn", "detail": "skipped", "skipped": True}
    ]
    assert payload["notes"] == ["skipped internal connectivity check (--skip-internal)"]
    assert ProbeOutcome.FAIL.marker == "[ERROR]"
