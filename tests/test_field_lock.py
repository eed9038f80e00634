from __future__ import annotations

import uuid
from typing import Any

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from app.services.field_lock import FieldLockRegistry, FieldLockTimeout


@pytest.mark.asyncio
async def test_redis_lock_is_named_per_field(fake_redis: Any) -> None:
    field_id = uuid.uuid4()
    locks = FieldLockRegistry(fake_redis, timeout_seconds=0.1)

    async with locks.hold(field_id):
        assert f"field:{field_id}:schedule-lock" in fake_redis.held

    assert fake_redis.held == set()
    assert fake_redis.lock_names == [f"field:{field_id}:schedule-lock"]


@pytest.mark.asyncio
async def test_redis_lock_not_acquired_raises(fake_redis: Any) -> None:
    field_id = uuid.uuid4()
    fake_redis.held.add(f"field:{field_id}:schedule-lock")
    locks = FieldLockRegistry(fake_redis, timeout_seconds=0.1)

    with pytest.raises(FieldLockTimeout):
        async with locks.hold(field_id):
            pass


@pytest.mark.asyncio
async def test_local_lock_released_after_error() -> None:
    field_id = uuid.uuid4()
    locks = FieldLockRegistry(timeout_seconds=0.1)

    with pytest.raises(RuntimeError):
        async with locks.hold(field_id):
            raise RuntimeError("build failed")

    async with locks.hold(field_id):
        pass


class _UnreachableLock:
    def __init__(self, fail_acquire: bool, fail_release: bool) -> None:
        self.fail_acquire = fail_acquire
        self.fail_release = fail_release

    async def acquire(self) -> bool:
        if self.fail_acquire:
            raise RedisConnectionError("redis went away")
        return True

    async def release(self) -> None:
        if self.fail_release:
            raise RedisConnectionError("redis went away")


class FlakyRedis:
    def __init__(self, *, fail_acquire: bool = False, fail_release: bool = False) -> None:
        self.fail_acquire = fail_acquire
        self.fail_release = fail_release

    def lock(self, name: str, **_kwargs: Any) -> _UnreachableLock:
        return _UnreachableLock(self.fail_acquire, self.fail_release)


@pytest.mark.asyncio
async def test_redis_outage_on_acquire_serializes_locally() -> None:
    field_id = uuid.uuid4()
    locks = FieldLockRegistry(FlakyRedis(fail_acquire=True), timeout_seconds=0.05)  # type: ignore[arg-type]

    async with locks.hold(field_id):
        with pytest.raises(FieldLockTimeout):
            async with locks.hold(field_id):
                pass

    async with locks.hold(field_id):
        pass


@pytest.mark.asyncio
async def test_redis_outage_on_release_is_absorbed() -> None:
    locks = FieldLockRegistry(FlakyRedis(fail_release=True), timeout_seconds=0.1)  # type: ignore[arg-type]
    entered = False

    async with locks.hold(uuid.uuid4()):
        entered = True

    assert entered
