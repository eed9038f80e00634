"""Per-field serialization of schedule rebuilds.

Uses a Redis lock when a client is available so that concurrent workers are
serialized too; without a client, or when Redis fails to grant the lock, it
falls back to an in-process ``asyncio.Lock``.
"""

from __future__ import annotations

import asyncio
import uuid
import weakref
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from redis.asyncio import Redis
from redis.exceptions import RedisError

logger = structlog.get_logger("tarimsense.field_lock")

_local_locks: weakref.WeakValueDictionary[uuid.UUID, asyncio.Lock] = weakref.WeakValueDictionary()


class FieldLockTimeout(TimeoutError):
	"""The field's rebuild lock could not be acquired in time."""


def _local_lock(field_id: uuid.UUID) -> asyncio.Lock:
	lock = _local_locks.get(field_id)
	if lock is None:
		lock = asyncio.Lock()
		_local_locks[field_id] = lock
	return lock


class FieldLockRegistry:
	def __init__(self, redis_client: Redis | None = None, timeout_seconds: float = 30.0):
		self.redis_client = redis_client
		self.timeout_seconds = timeout_seconds

	@asynccontextmanager
	async def hold(self, field_id: uuid.UUID) -> AsyncIterator[None]:
		if self.redis_client is None:
			async with self._hold_local(field_id):
				yield
			return

		redis_lock = self.redis_client.lock(
			f"field:{field_id}:schedule-lock",
			timeout=self.timeout_seconds,
			blocking_timeout=self.timeout_seconds,
		)
		try:
			acquired = await redis_lock.acquire()
		except RedisError as exc:
			# Redis went away after startup: serialize within this process only.
			logger.warning("field_lock_redis_unavailable", field_id=str(field_id), error=str(exc))
			acquired = None
		if acquired is None:
			async with self._hold_local(field_id):
				yield
			return
		if not acquired:
			raise FieldLockTimeout(f"field {field_id} is being rebuilt")
		try:
			yield
		finally:
			try:
				await redis_lock.release()
			except RedisError as exc:
				logger.warning("field_lock_release_failed", field_id=str(field_id), error=str(exc))

	@asynccontextmanager
	async def _hold_local(self, field_id: uuid.UUID) -> AsyncIterator[None]:
		lock = _local_lock(field_id)
		try:
			await asyncio.wait_for(lock.acquire(), timeout=self.timeout_seconds)
		except TimeoutError as exc:
			raise FieldLockTimeout(f"field {field_id} is being rebuilt") from exc
		try:
			yield
		finally:
			lock.release()
