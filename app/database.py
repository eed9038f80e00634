"""Async SQLAlchemy engine, session factory and request-scoped storage dependencies."""

from __future__ import annotations

from collections.abc import AsyncGenerator

from fastapi import Request
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.config import get_settings

engine = create_async_engine(
	get_settings().database_url,
	pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(
	engine,
	class_=AsyncSession,
	expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
	"""Yield a session; commit when the request succeeds, roll back otherwise."""
	async with async_session_factory() as session:
		try:
			yield session
			await session.commit()
		except Exception:
			await session.rollback()
			raise


def get_redis(request: Request) -> Redis | None:
	"""Redis client connected during startup, or ``None`` when unavailable."""
	return getattr(request.app.state, "redis", None)
