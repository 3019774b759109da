"""Tests for the /metrics scrape endpoint."""
import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import API_PATH, account, page, webhook
from up_exporter.main import create_app

FIRST_PAGE = {"page[size]": "100"}


@pytest.fixture
def client(test_settings, metrics, up_client):
    return TestClient(create_app(test_settings, metrics=metrics, client=up_client))


def test_metrics_refreshes_gauges(client, fake_api, metrics):
    fake_api.route(
        f"{API_PATH}/accounts",
        httpx.Response(200, json=page([account("A", 1050, "Spending")])),
        params=FIRST_PAGE
    )
    fake_api.route(
        f"{API_PATH}/webhooks",
        httpx.Response(200, json=page([webhook("w1")])),
        params=FIRST_PAGE
    )

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "text/plain" in response.headers["content-type"]
    registry = metrics.registry
    assert registry.get_sample_value("up_bank_accounts_count") == 1.0
    assert registry.get_sample_value("up_bank_webhooks_count") == 1.0
    assert registry.get_sample_value("up_bank_account_balance", {
        "id": "A",
        "display_name": "Spending",
        "account_type": "TRANSACTIONAL",
        "ownership_type": "INDIVIDUAL",
        "currency_code": "AUD",
    }) == 1050.0
    assert registry.get_sample_value(
        "up_bank_http_request_total", {"path": "/api/v1/accounts", "code": "200"}
    ) == 1.0
    assert "up_bank_account_balance{" in response.text


def test_metrics_served_when_upstream_fails(client, fake_api, metrics):
    """Upstream errors are logged; the scrape still succeeds."""
    fake_api.route(
        f"{API_PATH}/accounts",
        httpx.ConnectError("connection refused"),
        params=FIRST_PAGE
    )
    fake_api.route(
        f"{API_PATH}/webhooks",
        httpx.Response(503, json={"errors": []}),
        params=FIRST_PAGE
    )

    response = client.get("/metrics")

    assert response.status_code == 200
    assert metrics.registry.get_sample_value("up_bank_accounts_count") == 0.0
    assert metrics.registry.get_sample_value(
        "up_bank_http_request_total", {"path": "/api/v1/webhooks", "code": "503"}
    ) == 1.0
    assert "up_bank_webhooks_count" in response.text


def test_health_live(client):
    response = client.get("/health/live")
    assert response.status_code == 200
    assert response.json() == {"status": "alive"}
