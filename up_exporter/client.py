"""Async client for the Up API."""
import logging
from typing import List, Optional, Type, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from up_exporter.exceptions import PaginationError, UpstreamStatusError
from up_exporter.metrics import ExporterMetrics
from up_exporter.models import (
    AccountResource,
    Page,
    TransactionResource,
    TransactionResponse,
    WebhookResource,
)
from up_exporter.transport import InstrumentedTransport

logger = logging.getLogger(__name__)

UP_API_ADDRESS = "https://api.up.com.au/api/v1"

# Page size for paginated requests
DEFAULT_PAGE_SIZE = 100

ItemT = TypeVar("ItemT", bound=BaseModel)


class BearerAuth(httpx.Auth):
    """Attach the Up personal access token to every outgoing request."""

    def __init__(self, token: str):
        if not token:
            raise ValueError("bearer token must not be empty")
        self._token = token

    def auth_flow(self, request: httpx.Request):
        request.headers["Authorization"] = f"Bearer {self._token}"
        yield request


class UpClient:
    """Thin wrapper around the Up REST API, instrumented with Prometheus metrics."""

    def __init__(
        self,
        bearer_token: str,
        metrics: ExporterMetrics,
        base_url: str = UP_API_ADDRESS,
        page_size: int = DEFAULT_PAGE_SIZE,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0
    ):
        self.page_size = page_size
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + "/",
            auth=BearerAuth(bearer_token),
            transport=InstrumentedTransport(metrics, transport),
            timeout=timeout,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, url) -> httpx.Response:
        """Issue a GET and fail on anything but 200."""
        response = await self._client.get(url)
        if response.status_code != 200:
            raise UpstreamStatusError(response.request.url.path, response.status_code)
        return response

    async def paginate(
        self,
        path: str,
        item_model: Type[ItemT],
        page_size: Optional[int] = None
    ) -> List[ItemT]:
        """
        Fetch every page of a collection, following `links.next` cursors.

        The first request carries `page[size]`; later requests use the
        cursor verbatim as the whole request target. Items keep the order
        in which the API returned them.
        """
        page_model = Page[item_model]
        size = page_size if page_size is not None else self.page_size

        url = httpx.URL(path.lstrip("/"), params={"page[size]": size})
        items: List[ItemT] = []
        while True:
            response = await self._get(url)
            page = page_model.model_validate_json(response.content)
            items.extend(page.data)

            cursor = page.links.next
            if cursor is None:
                break
            try:
                url = httpx.URL(cursor)
            except httpx.InvalidURL as e:
                raise PaginationError(cursor, str(e)) from e

        logger.debug("Fetched paginated collection", extra={"path": path, "count": len(items)})
        return items

    async def list_accounts(self) -> List[AccountResource]:
        return await self.paginate("accounts", AccountResource)

    async def list_webhooks(self) -> List[WebhookResource]:
        return await self.paginate("webhooks", WebhookResource)

    async def get_transaction(self, transaction_id: str) -> TransactionResource:
        """Fetch a single transaction by id."""
        response = await self._get(f"transactions/{quote(transaction_id, safe='')}")
        return TransactionResponse.model_validate_json(response.content).data
