"""
tests.test_smoke

Smoke tests: the app boots, serves probes, and propagates correlation ids.
"""

from __future__ import annotations

import httpx
import pytest


@pytest.mark.asyncio
async def test_health_endpoints(client: httpx.AsyncClient) -> None:
    r = await client.get("/healthz")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"

    r = await client.get("/readyz")
    assert r.status_code == 200
    assert r.json()["status"] == "ready"


@pytest.mark.asyncio
async def test_correlation_id_is_echoed_or_generated(client: httpx.AsyncClient) -> None:
    r = await client.get("/healthz", headers={"Correlation-Id": "abc-123"})
    assert r.headers["Correlation-Id"] == "abc-123"

    r = await client.get("/healthz")
    assert r.headers["Correlation-Id"]
