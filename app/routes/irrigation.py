"""Irrigation schedule and log routes."""

from __future__ import annotations

import uuid
from datetime import date
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.database import get_db
from app.models import User
from app.models.enums import ScheduleStatusEnum
from app.schemas.irrigation import (
	IrrigationLogCreate,
	IrrigationLogRead,
	ScheduleComplete,
	ScheduleListRead,
	ScheduleRead,
)
from app.services.irrigation_service import IrrigationService

router = APIRouter(prefix="/irrigation", tags=["irrigation"])


def _map_error(exc: Exception) -> HTTPException:
	if isinstance(exc, LookupError):
		return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
	if isinstance(exc, PermissionError):
		return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
	if isinstance(exc, ValueError):
		return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
	return HTTPException(
		status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
		detail="Unexpected irrigation service failure",
	)


def _to_schedule_read(schedule: Any, field_name: str | None) -> ScheduleRead:
	read = ScheduleRead.model_validate(schedule)
	read.field_name = field_name
	return read


@router.get("/schedules", response_model=ScheduleListRead)
async def list_schedules(
	field_id: uuid.UUID | None = Query(default=None),
	schedule_status: ScheduleStatusEnum | None = Query(default=None, alias="status"),
	start_date: date | None = Query(default=None),
	end_date: date | None = Query(default=None),
	db: AsyncSession = Depends(get_db),
	user: User = Depends(get_current_user),
) -> ScheduleListRead:
	service = IrrigationService(db)
	try:
		rows = await service.list_schedules(
			user.id,
			field_id=field_id,
			status=schedule_status,
			start_date=start_date,
			end_date=end_date,
		)
	except Exception as exc:
		raise _map_error(exc) from exc
	return ScheduleListRead(items=[_to_schedule_read(schedule, name) for schedule, name in rows])


@router.post("/schedules/{schedule_id}/complete", response_model=ScheduleRead)
async def complete_schedule(
	schedule_id: uuid.UUID,
	payload: ScheduleComplete,
	db: AsyncSession = Depends(get_db),
	user: User = Depends(get_current_user),
) -> ScheduleRead:
	service = IrrigationService(db)
	try:
		schedule, field_name = await service.complete_schedule(user.id, schedule_id, payload)
	except Exception as exc:
		raise _map_error(exc) from exc
	return _to_schedule_read(schedule, field_name)


@router.post("/logs", response_model=IrrigationLogRead, status_code=status.HTTP_201_CREATED)
async def log_irrigation(
	payload: IrrigationLogCreate,
	db: AsyncSession = Depends(get_db),
	user: User = Depends(get_current_user),
) -> IrrigationLogRead:
	service = IrrigationService(db)
	try:
		log = await service.log_irrigation(user.id, payload)
	except Exception as exc:
		raise _map_error(exc) from exc
	return IrrigationLogRead.model_validate(log)
