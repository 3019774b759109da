"""Prometheus metrics collection."""
import math
from typing import List, Optional

from prometheus_client import Counter, Gauge, Histogram, generate_latest, CONTENT_TYPE_LATEST
from prometheus_client.core import CollectorRegistry


def exponential_buckets_range(minimum: float, maximum: float, count: int) -> List[float]:
    """Return `count` exponentially spaced buckets from `minimum` to `maximum`."""
    if count < 2:
        raise ValueError("count must be at least 2")
    if minimum <= 0:
        raise ValueError("minimum must be positive")
    if maximum <= minimum:
        raise ValueError("maximum must be greater than minimum")

    factor = math.pow(maximum / minimum, 1.0 / (count - 1))
    buckets = []
    value = minimum
    for _ in range(count):
        buckets.append(value)
        value *= factor
    return buckets


LATENCY_BUCKETS_MS = exponential_buckets_range(1.0, 2000.0, 25)
RESPONSE_SIZE_BUCKETS_BYTES = exponential_buckets_range(1.0, math.pow(2, 20), 25)


class ExporterMetrics:
    """All collectors of the exporter, bound to a single registry.

    One instance is created at startup and handed to every component that
    records observations.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry if registry is not None else CollectorRegistry()

        # Account and webhook state, refreshed on every scrape
        self.accounts_count = Gauge(
            "up_bank_accounts_count",
            "Count of Up bank accounts",
            registry=self.registry
        )
        self.account_balance = Gauge(
            "up_bank_account_balance",
            "Up bank account balance in base currency units (e.g. cents)",
            ["id", "display_name", "account_type", "ownership_type", "currency_code"],
            registry=self.registry
        )
        self.webhooks_count = Gauge(
            "up_bank_webhooks_count",
            "Count of configured Up webhooks",
            registry=self.registry
        )

        # Outbound API calls
        self.outgoing_inflights = Gauge(
            "up_bank_http_outgoing_inflights",
            "Number of Up bank outgoing HTTP requests inflight",
            registry=self.registry
        )
        self.request_total = Counter(
            "up_bank_http_request_total",
            "Total HTTP requests to the Up API",
            ["path", "code"],
            registry=self.registry
        )
        self.request_latency = Histogram(
            "up_bank_http_request_latency",
            "Latency histogram of Up API requests (ms)",
            ["path", "code"],
            buckets=LATENCY_BUCKETS_MS,
            registry=self.registry
        )
        self.response_size = Histogram(
            "up_bank_http_response_size",
            "Up bank API response size bytes",
            ["path", "code"],
            buckets=RESPONSE_SIZE_BUCKETS_BYTES,
            registry=self.registry
        )

        # Inbound webhooks
        self.webhook_requests = Counter(
            "up_bank_webhook_requests",
            "Up bank webhook requests with full information labels",
            ["webhook_id", "event_type", "status"],
            registry=self.registry
        )
        self.webhook_inflights = Gauge(
            "up_bank_webhook_incoming_inflights",
            "Number of inflight incoming webhook requests",
            registry=self.registry
        )
        self.transaction_count = Counter(
            "up_bank_transaction_count",
            "Up bank transaction count processed by the webhook handler",
            ["account_id", "status"],
            registry=self.registry
        )
        self.transaction_amount = Counter(
            "up_bank_transaction_amount",
            "Up bank transaction amount in base units processed by the webhook handler, "
            "e.g. an Australian dollar value of $10.56 is recorded as 1056",
            ["account_id", "status"],
            registry=self.registry
        )

    def get_metrics(self) -> bytes:
        """Get Prometheus metrics in text format."""
        return generate_latest(self.registry)

    def record_outbound_request(self, path: str, code: int, latency_ms: float, size_bytes: float):
        """Record a completed outbound API call."""
        labels = {"path": path, "code": str(code)}
        self.request_total.labels(**labels).inc()
        self.request_latency.labels(**labels).observe(latency_ms)
        self.response_size.labels(**labels).observe(size_bytes)

    def record_webhook_result(self, webhook_id: str, event_type: str, status: int):
        """Record the outcome of one inbound webhook request."""
        self.webhook_requests.labels(
            webhook_id=webhook_id,
            event_type=event_type,
            status=str(status)
        ).inc()

    def record_transaction(self, account_id: str, status: str, amount: float):
        """Record a transaction resolved from a webhook event.

        Counters cannot decrease, so debits are accumulated by magnitude.
        """
        self.transaction_count.labels(account_id=account_id, status=status).inc()
        self.transaction_amount.labels(account_id=account_id, status=status).inc(abs(amount))


__all__ = [
    "CONTENT_TYPE_LATEST",
    "ExporterMetrics",
    "LATENCY_BUCKETS_MS",
    "RESPONSE_SIZE_BUCKETS_BYTES",
    "exponential_buckets_range",
]
