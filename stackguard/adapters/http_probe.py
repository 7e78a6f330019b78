"""HTTP(S) status probe adapter backed by httpx."""

from __future__ import annotations

from typing import Final

import httpx

from .interfaces import HttpProbePort, HttpProbeResponse


class HttpxStatusProbe(HttpProbePort):
    """Status-only GET probe tolerant of self-signed and staging certificates."""

    _USER_AGENT: Final[str] = "stackguard/1.0 (Python/httpx)"

    def __init__(
        self,
        timeout_seconds: float = 10.0,
        verify_tls: bool = False,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize HTTP status probe.

        Args:
            timeout_seconds: Per-request timeout.
            verify_tls: Whether certificates are validated.
            transport: Optional httpx transport, used by tests.

        Raises:
            ValueError: Raised when timeout is not positive.
        """

        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        self._timeout_seconds = timeout_seconds
        self._verify_tls = verify_tls
        self._transport = transport

    def http_status(
        self,
        url: str,
        host_header: str | None = None,
        auth: tuple[str, str] | None = None,
    ) -> HttpProbeResponse:
        """Issue one GET without following redirects and return its status.

        Args:
            url: Target URL.
            host_header: Optional virtual-host header.
            auth: Optional basic-auth credentials.

        Returns:
            HttpProbeResponse: Status code, or 0 with transport error text.
        """

        headers = {"User-Agent": self._USER_AGENT}
        if host_header:
            headers["Host"] = host_header

        try:
            with httpx.Client(
                timeout=self._timeout_seconds,
                verify=self._verify_tls,
                follow_redirects=False,
                transport=self._transport,
            ) as client:
                response = client.get(url, headers=headers, auth=auth)
        except httpx.TimeoutException as error:
            return HttpProbeResponse(url=url, status_code=0, error=f"timed out: {error}")
        except (httpx.HTTPError, httpx.InvalidURL) as error:
            return HttpProbeResponse(url=url, status_code=0, error=f"{type(error).__name__}: {error}")

        return HttpProbeResponse(url=url, status_code=response.status_code)
