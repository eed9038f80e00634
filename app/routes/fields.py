"""Field CRUD and schedule recalculation routes."""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Response, status
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.database import get_db, get_redis
from app.engine.schedule import ScheduleBuildResult
from app.models import User
from app.schemas.field import (
	FieldCreate,
	FieldListRead,
	FieldRead,
	FieldUpdate,
	FieldWithScheduleRead,
	ScheduleBuildRead,
	ScheduleEntryRead,
)
from app.services.field_service import FieldService
from app.services.schedule_service import build_schedule_builder

router = APIRouter(prefix="/fields", tags=["fields"])


def _map_error(exc: Exception) -> HTTPException:
	if isinstance(exc, LookupError):
		return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
	if isinstance(exc, PermissionError):
		return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
	if isinstance(exc, ValueError):
		return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
	return HTTPException(
		status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
		detail="Unexpected field service failure",
	)


def _service(db: AsyncSession, redis: Redis | None) -> FieldService:
	return FieldService(db, build_schedule_builder(db, redis))


def _to_build_read(result: ScheduleBuildResult) -> ScheduleBuildRead:
	return ScheduleBuildRead(
		field_id=result.field_id,
		source=result.source,
		entries=[ScheduleEntryRead.model_validate(entry) for entry in result.entries],
	)


def _to_field_read(field: Any, next_irrigation: Any = None) -> FieldRead:
	return FieldRead(
		id=field.id,
		user_id=field.user_id,
		name=field.name,
		crop_type=field.crop_type,
		soil_type=field.soil_type,
		location=field.location,
		latitude=field.latitude,
		longitude=field.longitude,
		area=field.area,
		created_at=field.created_at,
		updated_at=field.updated_at,
		next_irrigation=ScheduleEntryRead.model_validate(next_irrigation) if next_irrigation else None,
	)


def _with_schedule(field: Any, result: ScheduleBuildResult | None) -> FieldWithScheduleRead:
	return FieldWithScheduleRead(
		**_to_field_read(field).model_dump(),
		schedule=_to_build_read(result) if result is not None else None,
	)


@router.post("", response_model=FieldWithScheduleRead, status_code=status.HTTP_201_CREATED)
async def create_field(
	payload: FieldCreate,
	db: AsyncSession = Depends(get_db),
	redis: Redis | None = Depends(get_redis),
	user: User = Depends(get_current_user),
) -> FieldWithScheduleRead:
	service = _service(db, redis)
	try:
		field, result = await service.create_field(user.id, payload)
	except Exception as exc:
		raise _map_error(exc) from exc
	return _with_schedule(field, result)


@router.get("", response_model=FieldListRead)
async def list_fields(
	db: AsyncSession = Depends(get_db),
	user: User = Depends(get_current_user),
) -> FieldListRead:
	service = FieldService(db)
	try:
		fields = await service.list_fields(user.id)
		upcoming = await service.next_pending([field.id for field in fields])
	except Exception as exc:
		raise _map_error(exc) from exc
	return FieldListRead(items=[_to_field_read(field, upcoming.get(field.id)) for field in fields])


@router.get("/{field_id}", response_model=FieldRead)
async def get_field(
	field_id: uuid.UUID,
	db: AsyncSession = Depends(get_db),
	user: User = Depends(get_current_user),
) -> FieldRead:
	service = FieldService(db)
	try:
		field = await service.get_field(user.id, field_id)
		upcoming = await service.next_pending([field.id])
	except Exception as exc:
		raise _map_error(exc) from exc
	return _to_field_read(field, upcoming.get(field.id))


@router.put("/{field_id}", response_model=FieldWithScheduleRead)
async def update_field(
	field_id: uuid.UUID,
	payload: FieldUpdate,
	db: AsyncSession = Depends(get_db),
	redis: Redis | None = Depends(get_redis),
	user: User = Depends(get_current_user),
) -> FieldWithScheduleRead:
	service = _service(db, redis)
	try:
		field, result = await service.update_field(user.id, field_id, payload)
	except Exception as exc:
		raise _map_error(exc) from exc
	return _with_schedule(field, result)


@router.delete("/{field_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_field(
	field_id: uuid.UUID,
	db: AsyncSession = Depends(get_db),
	user: User = Depends(get_current_user),
) -> Response:
	try:
		await FieldService(db).delete_field(user.id, field_id)
	except Exception as exc:
		raise _map_error(exc) from exc
	return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{field_id}/irrigation/recalculate", response_model=ScheduleBuildRead)
async def recalculate_schedule(
	field_id: uuid.UUID,
	db: AsyncSession = Depends(get_db),
	redis: Redis | None = Depends(get_redis),
	user: User = Depends(get_current_user),
) -> ScheduleBuildRead:
	"""Rebuild pending entries; ``source == "failed"`` with no entries means uncomputable."""
	service = _service(db, redis)
	try:
		result = await service.recalculate(user.id, field_id)
	except Exception as exc:
		raise _map_error(exc) from exc
	return _to_build_read(result)
