"""Tests for metric collectors and bucket layout."""
import math

import pytest

from up_exporter.metrics import (
    LATENCY_BUCKETS_MS,
    RESPONSE_SIZE_BUCKETS_BYTES,
    ExporterMetrics,
    exponential_buckets_range,
)


def test_exponential_buckets_range_endpoints():
    buckets = exponential_buckets_range(1.0, 2000.0, 25)

    assert len(buckets) == 25
    assert buckets[0] == 1.0
    assert math.isclose(buckets[-1], 2000.0, rel_tol=1e-9)
    assert all(a < b for a, b in zip(buckets, buckets[1:]))


def test_default_buckets():
    assert math.isclose(LATENCY_BUCKETS_MS[-1], 2000.0, rel_tol=1e-9)
    assert math.isclose(RESPONSE_SIZE_BUCKETS_BYTES[-1], 2 ** 20, rel_tol=1e-9)


@pytest.mark.parametrize("minimum,maximum,count", [(0, 10, 5), (10, 5, 5), (1, 10, 1)])
def test_exponential_buckets_range_invalid(minimum, maximum, count):
    with pytest.raises(ValueError):
        exponential_buckets_range(minimum, maximum, count)


def test_registries_are_independent():
    first = ExporterMetrics()
    second = ExporterMetrics()

    first.record_webhook_result("w1", "PING", 200)

    labels = {"webhook_id": "w1", "event_type": "PING", "status": "200"}
    assert first.registry.get_sample_value("up_bank_webhook_requests_total", labels) == 1.0
    assert second.registry.get_sample_value("up_bank_webhook_requests_total", labels) is None


def test_get_metrics_exposition():
    metrics = ExporterMetrics()
    metrics.accounts_count.set(2)

    output = metrics.get_metrics().decode()

    assert "# TYPE up_bank_accounts_count gauge" in output
    assert "up_bank_accounts_count 2.0" in output
    assert "# TYPE up_bank_http_request_latency histogram" in output
