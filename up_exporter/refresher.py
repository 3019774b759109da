"""Refresh account and webhook gauges from the Up API."""
import asyncio
import logging

from up_exporter.client import UpClient
from up_exporter.metrics import ExporterMetrics

logger = logging.getLogger(__name__)


class MetricsRefresher:
    """Recompute the account and webhook gauges on demand.

    Balance series of accounts that disappear upstream are left in place;
    every refresh only overwrites the label sets it sees.
    """

    def __init__(self, client: UpClient, metrics: ExporterMetrics):
        self._client = client
        self._metrics = metrics

    async def update_metrics(self) -> None:
        """
        Refresh accounts and webhooks concurrently.

        Both refreshes run to completion; the first error (accounts before
        webhooks) is raised afterwards.
        """
        results = await asyncio.gather(
            self.update_accounts_metrics(),
            self.update_webhook_metrics(),
            return_exceptions=True
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result

    async def update_accounts_metrics(self) -> None:
        accounts = await self._client.list_accounts()

        self._metrics.accounts_count.set(len(accounts))
        for account in accounts:
            attributes = account.attributes
            self._metrics.account_balance.labels(
                id=account.id,
                display_name=attributes.display_name,
                account_type=attributes.account_type.label,
                ownership_type=attributes.ownership_type.label,
                currency_code=attributes.balance.currency_code
            ).set(float(attributes.balance.value_in_base_units))

        logger.info("Account metrics updated", extra={"count": len(accounts)})

    async def update_webhook_metrics(self) -> None:
        webhooks = await self._client.list_webhooks()
        self._metrics.webhooks_count.set(len(webhooks))
        logger.info("Webhook metrics updated", extra={"count": len(webhooks)})
