"""Ingestion of Up webhook events into transaction counters."""
import asyncio
import logging
from typing import Optional

import httpx
from fastapi import Request
from fastapi.responses import Response
from pydantic import ValidationError
from starlette.requests import ClientDisconnect

from up_exporter.client import UpClient
from up_exporter.exceptions import UpAPIError
from up_exporter.metrics import ExporterMetrics
from up_exporter.models import WebhookEventCallback
from up_exporter.security import UP_AUTHENTICITY_HEADER, WebhookAuthenticator

logger = logging.getLogger(__name__)

# Upper bound for handling one delivery, including the transaction fetch
WEBHOOK_TIMEOUT_SECONDS = 60.0


class WebhookDelivery:
    """Label values and outcome of a single webhook request."""

    def __init__(self):
        self.webhook_id = ""
        self.event_type = ""
        self.status: Optional[int] = None


class WebhookHandler:
    """
    Handle POST /webhook deliveries from Up.

    Each delivery ends with exactly one increment of the webhook request
    counter, labeled with whatever webhook id and event type were known
    when it finished:

    - 400: body unreadable or not a webhook event
    - 401: signature header missing, malformed or not matching
    - 500: referenced transaction could not be fetched, timeout or any
      other failure while processing
    - 200: processed
    """

    def __init__(
        self,
        secret_key: bytes,
        client: UpClient,
        metrics: ExporterMetrics,
        timeout: float = WEBHOOK_TIMEOUT_SECONDS
    ):
        self._authenticator = WebhookAuthenticator(secret_key)
        self._client = client
        self._metrics = metrics
        self._timeout = timeout

    async def handle(self, request: Request) -> Response:
        self._metrics.webhook_inflights.inc()
        delivery = WebhookDelivery()
        try:
            try:
                delivery.status = await asyncio.wait_for(
                    self._process(request, delivery),
                    timeout=self._timeout
                )
            except asyncio.TimeoutError:
                logger.error(
                    "Webhook processing timed out",
                    extra={
                        "webhook_id": delivery.webhook_id,
                        "event_type": delivery.event_type,
                        "timeout_s": self._timeout
                    }
                )
                delivery.status = 500
            except Exception:
                logger.exception(
                    "Webhook processing failed",
                    extra={"webhook_id": delivery.webhook_id, "event_type": delivery.event_type}
                )
                delivery.status = 500

            self._metrics.record_webhook_result(
                delivery.webhook_id,
                delivery.event_type,
                delivery.status
            )
            return Response(status_code=delivery.status)
        finally:
            self._metrics.webhook_inflights.dec()

    async def _process(self, request: Request, delivery: WebhookDelivery) -> int:
        """Run one delivery through read, verify, parse and resolve; return the status."""
        try:
            body = await request.body()
        except ClientDisconnect as e:
            logger.error("Failed to read webhook body", extra={"error": str(e)})
            return 400

        # Verify on the raw bytes before anything is decoded
        authenticated = self._authenticator.authenticate(
            body,
            request.headers.get(UP_AUTHENTICITY_HEADER)
        )

        try:
            event = WebhookEventCallback.model_validate_json(body).data
        except ValidationError as e:
            logger.error(
                "Invalid webhook payload",
                extra={"result": "validation_error", "error": str(e)}
            )
            return 400

        delivery.webhook_id = event.webhook_id
        delivery.event_type = event.attributes.event_type.label

        if not authenticated:
            logger.error(
                "Invalid signature",
                extra={
                    "webhook_id": delivery.webhook_id,
                    "event_type": delivery.event_type,
                    "result": "invalid_signature"
                }
            )
            return 401

        transaction_id = event.transaction_id
        if transaction_id is None:
            logger.info(
                "Webhook processed",
                extra={"webhook_id": delivery.webhook_id, "event_type": delivery.event_type}
            )
            return 200

        try:
            transaction = await self._client.get_transaction(transaction_id)
        except (httpx.HTTPError, httpx.InvalidURL, UpAPIError, ValidationError) as e:
            logger.error(
                "Failed to fetch transaction",
                extra={
                    "webhook_id": delivery.webhook_id,
                    "event_type": delivery.event_type,
                    "transaction_id": transaction_id,
                    "error": str(e)
                }
            )
            return 500

        account_id = transaction.relationships.account.data.id
        status = transaction.attributes.status.label
        self._metrics.record_transaction(
            account_id=account_id,
            status=status,
            amount=float(transaction.attributes.amount.value_in_base_units)
        )

        logger.info(
            "Webhook processed",
            extra={
                "webhook_id": delivery.webhook_id,
                "event_type": delivery.event_type,
                "transaction_id": transaction_id,
                "account_id": account_id,
                "transaction_status": status
            }
        )
        return 200
