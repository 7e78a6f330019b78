"""Model bootstrap: wait for the inference API, then pull the configured models."""

from __future__ import annotations

from dataclasses import dataclass, field

import httpx
import structlog

from stackguard.checks import ReadinessEndpoint, ReadinessGate

log = structlog.get_logger()


@dataclass(frozen=True)
class ModelPullReport:
    """Outcome of one bootstrap run.

    Attributes:
        pulled: Models pulled successfully, in request order.
        failed: Failed model names mapped to error detail.
    """

    pulled: tuple[str, ...] = ()
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return not self.failed


class ModelBootstrapper:
    """Gate on inference API readiness, then request each model pull sequentially."""

    def __init__(
        self,
        readiness_gate: ReadinessGate,
        api_url: str,
        pull_timeout_seconds: float = 1800.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize model bootstrapper.

        Args:
            readiness_gate: Gate used before the first pull.
            api_url: Inference API base URL.
            pull_timeout_seconds: Timeout for one pull request.
            transport: Optional httpx transport, used by tests.

        Raises:
            ValueError: Raised when config values are invalid.
        """

        if readiness_gate is None:
            raise ValueError("readiness_gate must not be None")
        normalized_api_url = api_url.strip().rstrip("/")
        if not normalized_api_url:
            raise ValueError("api_url must not be blank")
        if pull_timeout_seconds <= 0:
            raise ValueError("pull_timeout_seconds must be > 0")

        self._readiness_gate = readiness_gate
        self._api_url = normalized_api_url
        self._pull_timeout_seconds = pull_timeout_seconds
        self._transport = transport

    def bootstrap_run(
        self,
        model_names: tuple[str, ...],
        readiness_timeout_seconds: float,
        readiness_poll_interval_seconds: float,
    ) -> ModelPullReport:
        """Wait for the API, then pull every model; one failed pull does not stop the rest.

        Args:
            model_names: Ordered model names.
            readiness_timeout_seconds: Maximum wait for the API port.
            readiness_poll_interval_seconds: Delay between readiness attempts.

        Returns:
            ModelPullReport: Pulled and failed models.

        Raises:
            ReadinessTimeoutError: Raised when the API never became reachable.
        """

        if not model_names:
            log.info("bootstrap.no_models_configured")
            return ModelPullReport()

        endpoint = ReadinessEndpoint.from_url(self._api_url)
        tcp_endpoint = ReadinessEndpoint(kind="tcp", host=endpoint.host, port=endpoint.port)
        self._readiness_gate.wait_ready(
            tcp_endpoint,
            timeout=readiness_timeout_seconds,
            poll_interval=readiness_poll_interval_seconds,
        )

        pulled: list[str] = []
        failed: dict[str, str] = {}
        with httpx.Client(timeout=self._pull_timeout_seconds, transport=self._transport) as client:
            for model_name in model_names:
                log.info("bootstrap.pull_started", model=model_name)
                error_detail = self._bootstrap_pull_one(client=client, model_name=model_name)
                if error_detail is None:
                    pulled.append(model_name)
                    log.info("bootstrap.pull_completed", model=model_name)
                else:
                    failed[model_name] = error_detail
                    log.error("bootstrap.pull_failed", model=model_name, error=error_detail)
        return ModelPullReport(pulled=tuple(pulled), failed=failed)

    def _bootstrap_pull_one(self, client: httpx.Client, model_name: str) -> str | None:
        try:
            response = client.post(
                f"{self._api_url}/api/pull",
                json={"model": model_name, "stream": False},
            )
        except httpx.HTTPError as error:
            return f"{type(error).__name__}: {error}"

        if response.status_code >= 300:
            return f"HTTP {response.status_code}: {response.text.strip()[:200]}"

        try:
            payload = response.json()
        except ValueError:
            return None
        if isinstance(payload, dict) and payload.get("error"):
            return str(payload["error"])
        return None
