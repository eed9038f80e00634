"""Shared pytest fixtures: async test client, fake session/redis, engine stubs."""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import date, datetime, timedelta
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock
from zoneinfo import ZoneInfo

import pytest
from httpx import ASGITransport, AsyncClient

from app.auth.dependencies import get_current_user
from app.auth.jwt import create_access_token
from app.config import Settings
from app.database import get_db
from app.engine.forecast import ForecastSample
from app.main import app

ISTANBUL = ZoneInfo("Europe/Istanbul")


class FakeNested:
	"""Stands in for ``AsyncSession.begin_nested()``; records enter/exit."""

	def __init__(self, session: FakeAsyncSession) -> None:
		self.session = session

	async def __aenter__(self) -> FakeNested:
		self.session.savepoints += 1
		return self

	async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> bool:
		if exc_type is not None:
			self.session.savepoint_rollbacks += 1
		return False


class FakeAsyncSession:
	def __init__(self) -> None:
		self.commit = AsyncMock()
		self.rollback = AsyncMock()
		self.close = AsyncMock()
		self.execute = AsyncMock()
		self.flush = AsyncMock()
		self.refresh = AsyncMock()
		self.delete = AsyncMock()
		self.add = MagicMock()
		self.add_all = MagicMock()
		self.savepoints = 0
		self.savepoint_rollbacks = 0

	def begin_nested(self) -> FakeNested:
		return FakeNested(self)


class FakeLock:
	def __init__(self, redis: FakeRedis, name: str) -> None:
		self.redis = redis
		self.name = name

	async def acquire(self) -> bool:
		if self.name in self.redis.held:
			return False
		self.redis.held.add(self.name)
		self.redis.lock_names.append(self.name)
		return True

	async def release(self) -> None:
		self.redis.held.discard(self.name)


class FakeRedis:
	def __init__(self) -> None:
		self.store: dict[str, str] = {}
		self.held: set[str] = set()
		self.lock_names: list[str] = []
		self.get = AsyncMock(side_effect=self._get)
		self.setex = AsyncMock(side_effect=self._setex)

	async def _get(self, key: str) -> str | None:
		return self.store.get(key)

	async def _setex(self, key: str, _ttl: int, value: str) -> bool:
		self.store[key] = value
		return True

	def lock(self, name: str, **_kwargs: Any) -> FakeLock:
		return FakeLock(self, name)


@pytest.fixture
def fake_db_session() -> FakeAsyncSession:
	"""A lightweight async-session stub for dependency overrides in API tests."""
	return FakeAsyncSession()


@pytest.fixture
def fake_redis() -> FakeRedis:
	return FakeRedis()


@pytest.fixture
def user_id() -> uuid.UUID:
	return uuid.UUID("11111111-1111-1111-1111-111111111111")


@pytest.fixture
def settings() -> Settings:
	return Settings(
		jwt_secret="test-secret",
		openweather_api_key="test-key",
		openweather_base_url="https://weather.test/data/2.5",
		anthropic_api_key="",
		schedule_timezone="Europe/Istanbul",
		advisory_timeout_seconds=0.05,
		field_lock_timeout_seconds=0.5,
	)


@pytest.fixture
def today() -> date:
	return date(2026, 7, 15)


@pytest.fixture
def field_stub(user_id: uuid.UUID) -> SimpleNamespace:
	return SimpleNamespace(
		id=uuid.UUID("22222222-2222-2222-2222-222222222222"),
		user_id=user_id,
		name="North plot",
		crop_type="Domates",
		soil_type="Tınlı",
		latitude=39.93,
		longitude=32.85,
	)


def make_samples(
	start: date,
	days: int,
	*,
	temp: float = 24.0,
	humidity: float = 60.0,
	rain: float = 0.0,
) -> list[ForecastSample]:
	"""Eight 3-hourly samples per local day; ``rain`` is the daily total."""
	samples: list[ForecastSample] = []
	for offset in range(days):
		day = start + timedelta(days=offset)
		for slot in range(8):
			samples.append(
				ForecastSample(
					timestamp=datetime(day.year, day.month, day.day, tzinfo=ISTANBUL) + timedelta(hours=3 * slot),
					temperature=temp,
					humidity=humidity,
					precipitation_mm=rain / 8,
					condition="clear sky",
				)
			)
	return samples


@pytest.fixture
async def client(fake_db_session: FakeAsyncSession, user_id: uuid.UUID) -> AsyncGenerator[AsyncClient, None]:
	"""HTTPX async client with lifespan disabled and DB/auth dependencies mocked."""

	async def override_get_db() -> AsyncGenerator[Any, None]:
		yield fake_db_session

	async def override_current_user() -> Any:
		return SimpleNamespace(id=user_id, is_active=True, email="farmer@test.local")

	app.dependency_overrides[get_db] = override_get_db
	app.dependency_overrides[get_current_user] = override_current_user
	original_lifespan = app.router.lifespan_context

	@asynccontextmanager
	async def noop_lifespan(_: Any) -> AsyncGenerator[None, None]:
		yield

	app.router.lifespan_context = noop_lifespan

	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://test") as test_client:
		yield test_client

	app.router.lifespan_context = original_lifespan
	app.dependency_overrides.clear()


@pytest.fixture
async def auth_client(fake_db_session: FakeAsyncSession) -> AsyncGenerator[AsyncClient, None]:
	"""HTTPX async client with DB override only (real auth dependency active)."""

	async def override_get_db() -> AsyncGenerator[Any, None]:
		yield fake_db_session

	app.dependency_overrides[get_db] = override_get_db
	original_lifespan = app.router.lifespan_context

	@asynccontextmanager
	async def noop_lifespan(_: Any) -> AsyncGenerator[None, None]:
		yield

	app.router.lifespan_context = noop_lifespan

	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://test") as test_client:
		yield test_client

	app.router.lifespan_context = original_lifespan
	app.dependency_overrides.clear()


@pytest.fixture
def access_token(user_id: uuid.UUID) -> str:
	return create_access_token(str(user_id), expires_minutes=30)


@pytest.fixture
def samples_factory() -> Any:
	return make_samples
