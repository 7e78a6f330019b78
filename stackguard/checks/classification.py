"""Deterministic mapping of observed states and status codes to probe outcomes."""

from __future__ import annotations

from stackguard.adapters import ContainerState, HttpProbeResponse
from stackguard.domain import ProbeOutcome

UNMONITORED_HEALTH = "none"


def classify_container_state(state: ContainerState) -> tuple[ProbeOutcome, str]:
    """Classify process and health state of one service container.

    Args:
        state: Inspected container state.

    Returns:
        tuple[ProbeOutcome, str]: Outcome and detail text.
    """

    if state.status != "running":
        return ProbeOutcome.FAIL, f"state={state.status}"
    if state.health in {"healthy", UNMONITORED_HEALTH}:
        return ProbeOutcome.PASS, f"running (health={state.health})"
    return ProbeOutcome.WARN, f"running (health={state.health})"


def _is_redirect(status_code: int) -> bool:
    return 300 <= status_code < 400


def _is_success_or_redirect(status_code: int) -> bool:
    return 200 <= status_code < 400


def _transport_suffix(response: HttpProbeResponse) -> str:
    return f", {response.error}" if response.error else ""


def classify_dashboard_response(response: HttpProbeResponse) -> tuple[ProbeOutcome, str]:
    """Classify the proxy administrative route.

    200 and 3xx pass, 401 passes because it proves the route exists behind basic
    auth, every other code fails.
    """

    status_code = response.status_code
    if status_code == 200:
        return ProbeOutcome.PASS, "dashboard route available (200)"
    if status_code == 401:
        return ProbeOutcome.PASS, "dashboard route available, basic auth required (401 expected)"
    if _is_redirect(status_code):
        return ProbeOutcome.PASS, f"dashboard route answered {response.code_label}"
    return ProbeOutcome.FAIL, f"dashboard route unexpected response {response.code_label}{_transport_suffix(response)}"


def classify_frontend_response(response: HttpProbeResponse) -> tuple[ProbeOutcome, str]:
    """Classify the web frontend HTTPS route: 2xx/3xx pass, else fail."""

    if _is_success_or_redirect(response.status_code):
        return ProbeOutcome.PASS, f"frontend HTTPS route available (code={response.code_label})"
    return ProbeOutcome.FAIL, f"frontend HTTPS route unavailable (code={response.code_label}{_transport_suffix(response)})"


def classify_inference_response(response: HttpProbeResponse) -> tuple[ProbeOutcome, str]:
    """Classify the inference list-models route: 2xx/3xx pass, 403 warn, else fail."""

    if _is_success_or_redirect(response.status_code):
        return ProbeOutcome.PASS, f"inference API route available (code={response.code_label})"
    if response.status_code == 403:
        return (
            ProbeOutcome.WARN,
            "inference API answered 403, probably rejected by the IP allowlist; check the source IP is allowed",
        )
    return ProbeOutcome.FAIL, f"inference API route unavailable (code={response.code_label}{_transport_suffix(response)})"
