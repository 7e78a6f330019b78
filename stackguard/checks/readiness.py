"""Readiness gate that blocks until a dependent endpoint accepts connections."""

from __future__ import annotations

import socket
import time
from dataclasses import dataclass
from typing import Callable
from urllib.parse import urlsplit

import httpx
import structlog

log = structlog.get_logger()

_MINIMUM_ATTEMPT_TIMEOUT_SECONDS = 0.1


class ReadinessTimeoutError(TimeoutError):
    """Raised when an endpoint never became reachable within the allowed time.

    Attributes:
        elapsed_seconds: Time spent waiting.
        last_error: Text of the last failed attempt.
    """

    def __init__(self, message: str, elapsed_seconds: float, last_error: str | None):
        super().__init__(message)
        self.elapsed_seconds = elapsed_seconds
        self.last_error = last_error


@dataclass(frozen=True)
class ReadinessEndpoint:
    """TCP or HTTP endpoint descriptor.

    Attributes:
        kind: `tcp` or `http`.
        host: Target host.
        port: Target port.
        url: Full URL for HTTP endpoints, None for TCP.
    """

    kind: str
    host: str
    port: int
    url: str | None = None

    @classmethod
    def from_url(cls, raw_url: str) -> "ReadinessEndpoint":
        """Parse `tcp://host:port` or `http(s)://host[:port]/path`.

        Args:
            raw_url: Endpoint text.

        Returns:
            ReadinessEndpoint: Parsed descriptor.

        Raises:
            ValueError: Raised for unsupported schemes or missing host/port.
        """

        parsed = urlsplit(raw_url.strip())
        scheme = parsed.scheme.lower()
        if scheme not in {"tcp", "http", "https"}:
            raise ValueError(f"unsupported endpoint scheme: {parsed.scheme or '<none>'}")
        if not parsed.hostname:
            raise ValueError(f"endpoint host is missing: {raw_url}")

        try:
            port = parsed.port
        except ValueError as error:
            raise ValueError(f"endpoint port is invalid: {raw_url}") from error

        if scheme == "tcp":
            if port is None:
                raise ValueError(f"tcp endpoint requires a port: {raw_url}")
            return cls(kind="tcp", host=parsed.hostname, port=port)

        default_port = 443 if scheme == "https" else 80
        return cls(kind="http", host=parsed.hostname, port=port or default_port, url=raw_url.strip())

    def describe(self) -> str:
        return self.url if self.url else f"tcp://{self.host}:{self.port}"


def readiness_attempt(endpoint: ReadinessEndpoint, timeout_seconds: float) -> None:
    """Make one lightweight connection attempt.

    Args:
        endpoint: Target endpoint.
        timeout_seconds: Per-attempt timeout.

    Raises:
        OSError: Raised when the TCP connection fails.
        httpx.HTTPError: Raised when the HTTP request fails.
        ConnectionError: Raised when the HTTP endpoint answers with a server error.
    """

    if endpoint.kind == "tcp":
        with socket.create_connection((endpoint.host, endpoint.port), timeout=timeout_seconds):
            return

    response = httpx.get(endpoint.url, timeout=timeout_seconds, verify=False)
    if response.status_code >= 500:
        raise ConnectionError(f"endpoint answered HTTP {response.status_code}")


class ReadinessGate:
    """Poll an endpoint until reachable or the timeout elapses."""

    def __init__(
        self,
        attempt: Callable[[ReadinessEndpoint, float], None] | None = None,
        clock: Callable[[], float] | None = None,
        sleep: Callable[[float], None] | None = None,
    ):
        self._attempt = attempt or readiness_attempt
        self._clock = clock or time.monotonic
        self._sleep = sleep or time.sleep

    def wait_ready(self, endpoint: ReadinessEndpoint, timeout: float, poll_interval: float) -> float:
        """Block until one attempt succeeds.

        Args:
            endpoint: Endpoint to probe.
            timeout: Maximum wait in seconds.
            poll_interval: Delay between attempts in seconds.

        Returns:
            float: Elapsed seconds until the successful attempt.

        Raises:
            ValueError: Raised when timeout or poll interval is not positive.
            ReadinessTimeoutError: Raised when no attempt succeeded before the deadline.
        """

        if timeout <= 0:
            raise ValueError("timeout must be > 0")
        if poll_interval <= 0:
            raise ValueError("poll_interval must be > 0")

        started_at = self._clock()
        deadline = started_at + timeout
        last_error: str | None = None
        attempt_number = 0

        while True:
            attempt_number += 1
            remaining = deadline - self._clock()
            attempt_timeout = max(min(poll_interval, remaining), _MINIMUM_ATTEMPT_TIMEOUT_SECONDS)
            try:
                self._attempt(endpoint, attempt_timeout)
            except (OSError, httpx.HTTPError) as error:
                last_error = f"{type(error).__name__}: {error}"
                log.debug(
                    "readiness.attempt_failed",
                    endpoint=endpoint.describe(),
                    attempt=attempt_number,
                    error=last_error,
                )
            else:
                elapsed_seconds = self._clock() - started_at
                log.info(
                    "readiness.ready",
                    endpoint=endpoint.describe(),
                    attempts=attempt_number,
                    elapsed_seconds=round(elapsed_seconds, 3),
                )
                return elapsed_seconds

            remaining = deadline - self._clock()
            if remaining <= 0:
                break
            self._sleep(min(poll_interval, remaining))

        elapsed_seconds = self._clock() - started_at
        raise ReadinessTimeoutError(
            f"{endpoint.describe()} not reachable after {elapsed_seconds:.1f}s ({attempt_number} attempts)",
            elapsed_seconds=elapsed_seconds,
            last_error=last_error,
        )
