"""Shared fixtures: an in-memory Up API and a fresh metrics registry."""
from typing import Dict, Optional

import httpx
import pytest

from up_exporter.client import UpClient
from up_exporter.config import Settings
from up_exporter.metrics import ExporterMetrics

API_BASE = "https://api.up.com.au/api/v1"
API_PATH = "/api/v1"


def account(account_id: str, balance: int, display_name: Optional[str] = None,
            account_type: str = "TRANSACTIONAL", ownership_type: str = "INDIVIDUAL") -> dict:
    return {
        "type": "accounts",
        "id": account_id,
        "attributes": {
            "displayName": display_name or f"Account {account_id}",
            "accountType": account_type,
            "ownershipType": ownership_type,
            "balance": {
                "currencyCode": "AUD",
                "value": f"{balance / 100:.2f}",
                "valueInBaseUnits": balance,
            },
            "createdAt": "2024-01-01T00:00:00+10:00",
        },
    }


def webhook(webhook_id: str) -> dict:
    return {
        "type": "webhooks",
        "id": webhook_id,
        "attributes": {"url": "https://example.com/webhook", "description": None},
    }


def transaction(transaction_id: str, account_id: str, amount: int, status: str = "SETTLED") -> dict:
    return {
        "data": {
            "type": "transactions",
            "id": transaction_id,
            "attributes": {
                "status": status,
                "description": "Coffee",
                "amount": {
                    "currencyCode": "AUD",
                    "value": f"{amount / 100:.2f}",
                    "valueInBaseUnits": amount,
                },
            },
            "relationships": {
                "account": {"data": {"type": "accounts", "id": account_id}},
            },
        }
    }


def page(items: list, next_cursor: Optional[str] = None) -> dict:
    return {"data": items, "links": {"prev": None, "next": next_cursor}}


class FakeUpAPI:
    """httpx.MockTransport handler serving canned responses by path and query."""

    def __init__(self):
        self.requests = []
        self._routes: Dict[tuple, object] = {}

    @staticmethod
    def _key(path: str, params: Optional[dict]) -> tuple:
        return path, tuple(sorted((params or {}).items()))

    def route(self, path: str, response, params: Optional[dict] = None):
        """Serve `response` (httpx.Response, exception or callable) for `path`."""
        self._routes[self._key(path, params)] = response

    def paths(self):
        return [r.url.path for r in self.requests]

    def __call__(self, request: httpx.Request):
        self.requests.append(request)
        key = self._key(request.url.path, dict(request.url.params))
        response = self._routes.get(key)
        if response is None:
            return httpx.Response(404, json={"errors": [{"status": "404"}]})
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(request)
        return response


@pytest.fixture
def fake_api():
    return FakeUpAPI()


@pytest.fixture
def metrics():
    return ExporterMetrics()


@pytest.fixture
def up_client(fake_api, metrics):
    return UpClient(
        "up:yeah:token",
        metrics,
        base_url=API_BASE,
        transport=httpx.MockTransport(fake_api),
    )


@pytest.fixture
def test_settings():
    """Settings with webhooks disabled and no token file needed."""
    settings = Settings()
    settings.UP_BANK_BEARER_TOKEN = "up:yeah:token"
    settings.UP_BANK_WEBHOOK_SECRET_KEY_PATH = None
    settings.UP_API_ADDRESS = API_BASE
    settings.WEBHOOK_TIMEOUT_SECONDS = 60.0
    return settings
