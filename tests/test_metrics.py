"""Tests for OTel metrics recorded by the /posts endpoints."""

from typing import Any

import pytest
from httpx import AsyncClient
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import InMemoryMetricReader

from blog_api import metrics as app_metrics
from blog_api.models import BlogPost
from tests.conftest import UPDATE_DATA


@pytest.fixture
def reader(monkeypatch: pytest.MonkeyPatch) -> InMemoryMetricReader:
    """Swap the module instruments for ones on an in-memory provider."""
    metric_reader = InMemoryMetricReader()
    provider = MeterProvider(metric_readers=[metric_reader])
    meter = provider.get_meter(app_metrics.METER_NAME)
    for name in (
        "post_requests_total",
        "posts_created_total",
        "posts_updated_total",
        "posts_deleted_total",
    ):
        monkeypatch.setattr(app_metrics, name, meter.create_counter(name, unit="1"))
    return metric_reader


def _points(reader: InMemoryMetricReader, name: str) -> list[dict[str, Any]]:
    """Extract counter data points for a given metric name."""
    data = reader.get_metrics_data()
    results: list[dict[str, Any]] = []
    if data is None:
        return results
    for resource_metric in data.resource_metrics:
        for scope_metric in resource_metric.scope_metrics:
            for metric in scope_metric.metrics:
                if metric.name == name:
                    for point in metric.data.data_points:
                        results.append({"value": point.value, "attributes": dict(point.attributes)})
    return results


def _total(reader: InMemoryMetricReader, name: str) -> int:
    return sum(int(p["value"]) for p in _points(reader, name))


async def test_create_records_counters(
    reader: InMemoryMetricReader, client: AsyncClient
) -> None:
    payload = {"title": "T", "content": "C", "author": {"firstName": "A", "lastName": "B"}}
    await client.post("/posts", json=payload)

    assert _total(reader, "posts_created_total") == 1
    points = _points(reader, "post_requests_total")
    assert points == [{"value": 1, "attributes": {"operation": "create", "outcome": "ok"}}]


async def test_update_and_delete_record_counters(
    reader: InMemoryMetricReader, client: AsyncClient, seeded: list[BlogPost]
) -> None:
    post_id = seeded[0].id
    await client.put(f"/posts/{post_id}", json={**UPDATE_DATA, "id": post_id})
    await client.delete(f"/posts/{post_id}")

    assert _total(reader, "posts_updated_total") == 1
    assert _total(reader, "posts_deleted_total") == 1


async def test_not_found_outcome_recorded(
    reader: InMemoryMetricReader, client: AsyncClient
) -> None:
    await client.delete("/posts/missing")

    points = _points(reader, "post_requests_total")
    assert points == [{"value": 1, "attributes": {"operation": "delete", "outcome": "not_found"}}]
    assert _total(reader, "posts_deleted_total") == 0


async def test_id_mismatch_outcome_recorded(
    reader: InMemoryMetricReader, client: AsyncClient, seeded: list[BlogPost]
) -> None:
    await client.put(f"/posts/{seeded[0].id}", json={"id": seeded[1].id, "title": "x"})

    outcomes = {p["attributes"]["outcome"] for p in _points(reader, "post_requests_total")}
    assert outcomes == {"id_mismatch"}
