from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

import httpx
import pytest

from app.config import Settings
from app.services.weather_service import ForecastClient, ForecastUnavailableError, location_key


def _payload(count: int = 16) -> dict[str, Any]:
    start = int(datetime(2026, 7, 15, tzinfo=UTC).timestamp())
    return {
        "list": [
            {
                "dt": start + i * 3 * 3600,
                "main": {"temp": 20 + i, "humidity": 50},
                "weather": [{"description": "clear sky"}],
            }
            for i in range(count)
        ]
    }


class RecordingSnapshots:
    def __init__(self) -> None:
        self.saved: list[tuple[float, float, int]] = []

    async def save(self, latitude: float, longitude: float, items: list[dict[str, Any]]) -> None:
        self.saved.append((latitude, longitude, len(items)))


def test_location_key_rounds_coordinates() -> None:
    assert location_key(39.933333, 32.859742) == "39.9333,32.8597"


@pytest.mark.asyncio
async def test_fetch_calls_provider_caches_and_snapshots(settings: Settings, fake_redis: Any) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_payload())

    snapshots = RecordingSnapshots()
    client = ForecastClient(
        redis_client=fake_redis,
        snapshots=snapshots,  # type: ignore[arg-type]
        settings=settings,
        transport=httpx.MockTransport(handler),
    )

    samples = await client.fetch(39.93, 32.85)

    assert len(samples) == 16
    assert samples[0].temperature == 20.0
    assert seen[0].url.path.endswith("/forecast")
    assert seen[0].url.params["units"] == "metric"
    assert seen[0].url.params["appid"] == "test-key"
    assert "forecast:39.9300,32.8500" in fake_redis.store
    assert snapshots.saved == [(39.93, 32.85, 16)]

    again = await client.fetch(39.93, 32.85)
    assert len(again) == 16
    assert len(seen) == 1
    assert snapshots.saved == [(39.93, 32.85, 16), (39.93, 32.85, 16)]


@pytest.mark.asyncio
async def test_cached_payload_skips_provider(settings: Settings, fake_redis: Any) -> None:
    fake_redis.store["forecast:39.9300,32.8500"] = json.dumps(_payload(4)["list"])

    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("provider must not be called")

    snapshots = RecordingSnapshots()
    client = ForecastClient(
        redis_client=fake_redis,
        snapshots=snapshots,  # type: ignore[arg-type]
        settings=settings,
        transport=httpx.MockTransport(handler),
    )

    assert len(await client.fetch(39.93, 32.85)) == 4
    assert snapshots.saved == [(39.93, 32.85, 4)]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"message": "boom"}),
        httpx.Response(200, json={"list": []}),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"list": [{"dt": 0}]}),
    ],
)
async def test_provider_failures_raise_unavailable(settings: Settings, response: httpx.Response) -> None:
    client = ForecastClient(settings=settings, transport=httpx.MockTransport(lambda _request: response))

    with pytest.raises(ForecastUnavailableError):
        await client.fetch(39.93, 32.85)


@pytest.mark.asyncio
async def test_missing_coordinates_or_key_raise_unavailable(settings: Settings) -> None:
    client = ForecastClient(settings=settings)
    with pytest.raises(ForecastUnavailableError):
        await client.fetch(None, 32.85)

    unconfigured = ForecastClient(settings=Settings(openweather_api_key=""))
    with pytest.raises(ForecastUnavailableError):
        await unconfigured.fetch(39.93, 32.85)
