"""Schedule listing, completion and manual irrigation logs."""

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import IrrigationMethodEnum, NotificationCategoryEnum, ScheduleStatusEnum
from app.models.field import Field
from app.models.irrigation import IrrigationLog, IrrigationSchedule
from app.schemas.irrigation import IrrigationLogCreate, ScheduleComplete
from app.services.notification_service import NotificationService
from app.services.schedule_repository import ScheduleRepository

logger = structlog.get_logger("tarimsense.irrigation")


class IrrigationService:
	def __init__(self, db: AsyncSession):
		self.db = db
		self.repository = ScheduleRepository(db)
		self.notifications = NotificationService(db)

	async def list_schedules(
		self,
		user_id: uuid.UUID,
		*,
		field_id: uuid.UUID | None = None,
		status: ScheduleStatusEnum | None = None,
		start_date: date | None = None,
		end_date: date | None = None,
	) -> list[tuple[IrrigationSchedule, str]]:
		"""Schedules of the user's fields, oldest first, paired with the field name."""
		if start_date is not None and end_date is not None and start_date > end_date:
			raise ValueError("start_date must not be after end_date")

		stmt = (
			select(IrrigationSchedule, Field.name)
			.join(Field, Field.id == IrrigationSchedule.field_id)
			.where(Field.user_id == user_id)
		)
		if field_id is not None:
			stmt = stmt.where(IrrigationSchedule.field_id == field_id)
		if status is not None:
			stmt = stmt.where(IrrigationSchedule.status == status)
		if start_date is not None:
			stmt = stmt.where(IrrigationSchedule.date >= start_date)
		if end_date is not None:
			stmt = stmt.where(IrrigationSchedule.date <= end_date)
		stmt = stmt.order_by(IrrigationSchedule.date.asc())

		rows = await self.db.execute(stmt)
		return [(schedule, name) for schedule, name in rows.all()]

	async def complete_schedule(
		self,
		user_id: uuid.UUID,
		schedule_id: uuid.UUID,
		payload: ScheduleComplete,
	) -> tuple[IrrigationSchedule, str]:
		stmt = (
			select(IrrigationSchedule, Field)
			.join(Field, Field.id == IrrigationSchedule.field_id)
			.where(IrrigationSchedule.id == schedule_id)
		)
		row = (await self.db.execute(stmt)).first()
		if row is None:
			raise LookupError(f"Schedule {schedule_id} not found")
		schedule, field = row
		if field.user_id != user_id:
			raise PermissionError("Schedule belongs to another user")

		await self.repository.mark_completed(
			schedule,
			actual_water_used=payload.actual_water_used,
			notes=payload.notes,
		)
		self.db.add(
			IrrigationLog(
				field_id=schedule.field_id,
				scheduled_date=schedule.date,
				method=IrrigationMethodEnum.scheduled,
				water_used=schedule.actual_water_used
				if schedule.actual_water_used is not None
				else schedule.water_amount,
				notes=payload.notes or "Scheduled irrigation completed",
			)
		)
		await self.db.flush()
		await self.notifications.notify(
			user_id,
			NotificationCategoryEnum.irrigation_completed,
			f"Irrigation completed - {field.name}",
			f"{schedule.water_amount} L/m² irrigation completed.",
			datetime.now(UTC),
		)
		logger.info("schedule_completed", schedule_id=str(schedule.id), field_id=str(field.id))
		return schedule, field.name

	async def log_irrigation(self, user_id: uuid.UUID, payload: IrrigationLogCreate) -> IrrigationLog:
		row = await self.db.execute(
			select(Field.id).where(Field.id == payload.field_id, Field.user_id == user_id)
		)
		if row.scalar_one_or_none() is None:
			raise LookupError(f"Field {payload.field_id} not found")

		log = IrrigationLog(
			field_id=payload.field_id,
			method=payload.method,
			water_used=payload.water_used,
			duration_minutes=payload.duration_minutes,
			notes=payload.notes,
		)
		self.db.add(log)
		await self.db.flush()
		await self.db.refresh(log)
		return log
