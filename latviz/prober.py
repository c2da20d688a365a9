"""HTTP probe executor for latviz."""

import logging
import time
from datetime import datetime, timezone
from typing import Callable, Protocol

import httpx

from latviz.models import Measurement

logger = logging.getLogger(__name__)

IdSource = Callable[[], int]


def elapsed_ms(started_at: float) -> int:
    """Milliseconds since a time.perf_counter() reading, rounded to int."""
    return max(0, round((time.perf_counter() - started_at) * 1000))


class ProbeExecutor(Protocol):
    """Protocol for anything that can turn one probe of a URL into a Measurement."""

    def execute_probe(self, url: str) -> Measurement:
        """Probe url once. Must return a Measurement even when the request fails."""
        ...


class HttpProbeExecutor:
    """Probes an endpoint with a single GET request per call.

    Latency runs from request start until the response headers are received.
    The body is not downloaded, so a failure while it streams cannot turn a
    received status into a failed probe.

    Transport failures (DNS, connect, timeout, invalid URL, protocol errors)
    never escape: they become a Measurement with status=None and ok=False.
    httpx keeps no response cache, so every probe reaches the endpoint.
    Timeouts are whatever the client's transport defaults to.
    """

    def __init__(self, id_source: IdSource, client: httpx.Client | None = None):
        """Initialize executor.

        Args:
            id_source: Callable returning the next measurement id
            client: Optional pre-configured httpx.Client (e.g. with a mock
                    transport). When omitted the executor owns its own client.
        """
        self._id_source = id_source
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(follow_redirects=False)

    def execute_probe(self, url: str) -> Measurement:
        """Issue one GET to url and measure it.

        Args:
            url: Target URL

        Returns:
            Measurement with latency, status code (or None) and ok flag
        """
        started_at = time.perf_counter()

        try:
            logger.debug("Probing %s", url)
            # Complete once headers arrive; the body is never read
            with self._client.stream("GET", url) as response:
                latency_ms = elapsed_ms(started_at)
                status = response.status_code
                ok = response.is_success
            logger.debug("Probe completed: url=%s, status=%d, latency=%dms", url, status, latency_ms)

        except httpx.HTTPError as e:
            latency_ms = elapsed_ms(started_at)
            status = None
            ok = False
            logger.warning(
                "Probe failed: url=%s, error=%s: %s", url, type(e).__name__, e
            )

        except Exception as e:
            # Anything httpx did not wrap, e.g. a malformed URL type
            latency_ms = elapsed_ms(started_at)
            status = None
            ok = False
            logger.warning("Probe error: url=%s, error=%s", url, str(e), exc_info=True)

        return Measurement(
            id=self._id_source(),
            timestamp=datetime.now(timezone.utc),
            latency_ms=latency_ms,
            status=status,
            ok=ok,
        )

    def close(self):
        """Release the HTTP client if this executor created it."""
        if self._owns_client:
            self._client.close()
