"""FastAPI application with metrics, webhook and health endpoints."""
import logging
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.responses import Response

from up_exporter.client import UpClient
from up_exporter.config import Settings, settings as default_settings
from up_exporter.logging_utils import RequestLoggingMiddleware
from up_exporter.metrics import CONTENT_TYPE_LATEST, ExporterMetrics
from up_exporter.refresher import MetricsRefresher
from up_exporter.webhooks import WebhookHandler

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    metrics: Optional[ExporterMetrics] = None,
    client: Optional[UpClient] = None,
    webhook_secret_key: Optional[bytes] = None
) -> FastAPI:
    """
    Build the exporter application.

    `metrics` and `client` default to a fresh registry and a client built
    from `settings`. The webhook route is only registered when a secret
    key is given directly or configured in `settings`.
    """
    settings = settings or default_settings
    metrics = metrics or ExporterMetrics()
    if client is None:
        client = UpClient(
            settings.load_bearer_token(),
            metrics,
            base_url=settings.UP_API_ADDRESS,
            page_size=settings.PAGE_SIZE
        )
    if webhook_secret_key is None:
        webhook_secret_key = settings.load_webhook_secret_key()

    app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION)
    app.add_middleware(RequestLoggingMiddleware)

    app.state.metrics = metrics
    app.state.client = client
    refresher = MetricsRefresher(client, metrics)

    @app.get("/metrics")
    async def metrics_endpoint():
        """Refresh Up account metrics, then serve the Prometheus exposition."""
        try:
            await refresher.update_metrics()
        except Exception as e:
            # Scrapes always succeed; upstream failures only leave gauges stale
            logger.error("Failed to update metrics", extra={"error": str(e)})
        return Response(content=metrics.get_metrics(), media_type=CONTENT_TYPE_LATEST)

    if webhook_secret_key:
        webhook_handler = WebhookHandler(
            webhook_secret_key,
            client,
            metrics,
            timeout=settings.WEBHOOK_TIMEOUT_SECONDS
        )

        @app.post("/webhook")
        async def webhook(request: Request):
            """Ingest an Up webhook event, authenticated by HMAC signature."""
            return await webhook_handler.handle(request)

        logger.info("Webhook endpoint enabled")

    @app.get("/health/live")
    async def health_live():
        """Liveness probe - always returns 200 once app is running."""
        return {"status": "alive"}

    @app.on_event("shutdown")
    async def shutdown():
        """Close the Up API client."""
        logger.info("Application shutting down")
        await client.aclose()

    return app
