"""httpx transport that records Prometheus metrics for every Up API call."""
import logging
import time
from typing import Optional

import httpx

from up_exporter.metrics import ExporterMetrics

logger = logging.getLogger(__name__)


class InstrumentedTransport(httpx.AsyncBaseTransport):
    """Wrap another async transport with in-flight, count, latency and size metrics.

    Requests are never retried; transport errors are logged and re-raised
    without labeled observations since there is no status code to label.
    """

    def __init__(self, metrics: ExporterMetrics, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._metrics = metrics
        self._transport = transport if transport is not None else httpx.AsyncHTTPTransport()

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self._metrics.outgoing_inflights.inc()
        try:
            start_time = time.perf_counter()
            try:
                response = await self._transport.handle_async_request(request)
                content = await response.aread()
            except httpx.HTTPError as e:
                logger.error(
                    "Up API request failed",
                    extra={"path": request.url.path, "error": str(e)}
                )
                raise
            latency_ms = (time.perf_counter() - start_time) * 1000

            self._metrics.record_outbound_request(
                path=request.url.path,
                code=response.status_code,
                latency_ms=latency_ms,
                size_bytes=float(len(content))
            )
            return response
        finally:
            self._metrics.outgoing_inflights.dec()

    async def aclose(self) -> None:
        await self._transport.aclose()
