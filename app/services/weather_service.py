"""Live forecast client (OpenWeather) and the weather snapshot store."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx
import structlog
from redis.asyncio import Redis
from redis.exceptions import RedisError
from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from app.engine.forecast import ForecastSample, samples_from_openweather
from app.models.weather import WeatherCache

logger = structlog.get_logger("tarimsense.weather")


class ForecastUnavailableError(RuntimeError):
	"""The live forecast could not be obtained."""


def location_key(latitude: float, longitude: float) -> str:
	return f"{latitude:.4f},{longitude:.4f}"


class WeatherSnapshotStore:
	"""``weather_cache`` table access; read by the fallback planner."""

	def __init__(self, db: AsyncSession, settings: Settings | None = None):
		self.db = db
		self.settings = settings or get_settings()

	async def save(self, latitude: float, longitude: float, items: list[dict[str, Any]]) -> None:
		first = items[0] if items else {}
		main = first.get("main") or {}
		weather = first.get("weather") or [{}]
		values = {
			"location": location_key(latitude, longitude),
			"latitude": latitude,
			"longitude": longitude,
			"temperature": main.get("temp"),
			"humidity": main.get("humidity"),
			"condition": weather[0].get("description") if weather else None,
			"precipitation": (first.get("rain") or {}).get("3h", 0),
			"forecast": items,
		}
		stmt = insert(WeatherCache).values(**values)
		stmt = stmt.on_conflict_do_update(
			index_elements=[WeatherCache.location],
			set_={**{key: stmt.excluded[key] for key in values if key != "location"}, "updated_at": datetime.now(UTC)},
		)
		try:
			async with self.db.begin_nested():
				await self.db.execute(stmt)
		except SQLAlchemyError as exc:
			logger.warning("weather_snapshot_save_failed", location=values["location"], error=str(exc))

	async def load_fresh(
		self,
		latitude: float | None,
		longitude: float | None,
		now: datetime | None = None,
	) -> list[dict[str, Any]] | None:
		cached = await self.load_fresh_row(latitude, longitude, now)
		if cached is None:
			return None
		return list(cached.forecast or [])

	async def load_fresh_row(
		self,
		latitude: float | None,
		longitude: float | None,
		now: datetime | None = None,
	) -> WeatherCache | None:
		if latitude is None or longitude is None:
			return None
		row = await self.db.execute(
			select(WeatherCache)
			.where(WeatherCache.location == location_key(latitude, longitude))
			.execution_options(populate_existing=True)
		)
		cached = row.scalar_one_or_none()
		if cached is None:
			return None
		now = now or datetime.now(UTC)
		max_age = timedelta(seconds=self.settings.weather_snapshot_max_age_seconds)
		if now - cached.updated_at >= max_age:
			return None
		return cached


class ForecastClient:
	"""Fetches 5-day / 3-hour forecast samples, cached in Redis per coordinate pair."""

	def __init__(
		self,
		redis_client: Redis | None = None,
		snapshots: WeatherSnapshotStore | None = None,
		settings: Settings | None = None,
		transport: httpx.AsyncBaseTransport | None = None,
	):
		self.redis_client = redis_client
		self.snapshots = snapshots
		self.settings = settings or get_settings()
		self.transport = transport

	async def fetch(self, latitude: float | None, longitude: float | None) -> list[ForecastSample]:
		items = await self.fetch_raw(latitude, longitude)
		try:
			return samples_from_openweather(items)
		except (KeyError, TypeError, ValueError) as exc:
			raise ForecastUnavailableError(f"malformed forecast payload: {exc}") from exc

	async def fetch_raw(self, latitude: float | None, longitude: float | None) -> list[dict[str, Any]]:
		if latitude is None or longitude is None:
			raise ForecastUnavailableError("field has no coordinates")

		cache_key = f"forecast:{location_key(latitude, longitude)}"
		items = await self._read_cache(cache_key)
		if items is None:
			items = await self._fetch_live(latitude, longitude)
			await self._write_cache(cache_key, items)
		# Refreshed on cache hits too; the fallback planner only sees the snapshot.
		if self.snapshots is not None:
			await self.snapshots.save(latitude, longitude, items)
		return items

	async def _fetch_live(self, latitude: float, longitude: float) -> list[dict[str, Any]]:
		if not self.settings.openweather_api_key:
			raise ForecastUnavailableError("forecast provider is not configured")

		params = {
			"lat": latitude,
			"lon": longitude,
			"appid": self.settings.openweather_api_key,
			"units": "metric",
		}
		try:
			async with httpx.AsyncClient(
				timeout=self.settings.forecast_timeout_seconds,
				transport=self.transport,
			) as client:
				response = await client.get(f"{self.settings.openweather_base_url}/forecast", params=params)
				response.raise_for_status()
				payload = response.json()
		except (httpx.HTTPError, ValueError) as exc:
			raise ForecastUnavailableError(str(exc)) from exc

		items = payload.get("list") if isinstance(payload, dict) else None
		if not isinstance(items, list) or not items:
			raise ForecastUnavailableError("forecast payload has no samples")
		return items

	async def _read_cache(self, key: str) -> list[dict[str, Any]] | None:
		if self.redis_client is None:
			return None
		try:
			value = await self.redis_client.get(key)
		except RedisError as exc:
			logger.warning("forecast_cache_read_failed", key=key, error=str(exc))
			return None
		if value is None:
			return None
		return json.loads(value)

	async def _write_cache(self, key: str, items: list[dict[str, Any]]) -> None:
		if self.redis_client is None:
			return
		try:
			await self.redis_client.setex(key, self.settings.forecast_cache_ttl_seconds, json.dumps(items))
		except RedisError as exc:
			logger.warning("forecast_cache_write_failed", key=key, error=str(exc))
