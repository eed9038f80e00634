"""Field CRUD plus the schedule rebuilds that agronomic edits trigger."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from zoneinfo import ZoneInfo

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.engine.schedule import ScheduleBuildResult
from app.models.enums import ScheduleStatusEnum
from app.models.field import Field
from app.models.irrigation import IrrigationSchedule
from app.schemas.field import FieldCreate, FieldUpdate
from app.services.schedule_service import ScheduleBuilder, build_schedule_builder

logger = structlog.get_logger("tarimsense.fields")

_AGRONOMIC_ATTRS = ("crop_type", "soil_type", "latitude", "longitude")


class FieldService:
	"""Service for field CRUD; owns when a field's schedule gets rebuilt."""

	def __init__(self, db: AsyncSession, scheduler: ScheduleBuilder | None = None):
		self.db = db
		self._scheduler = scheduler

	@property
	def scheduler(self) -> ScheduleBuilder:
		if self._scheduler is None:
			self._scheduler = build_schedule_builder(self.db)
		return self._scheduler

	async def create_field(self, user_id: uuid.UUID, payload: FieldCreate) -> tuple[Field, ScheduleBuildResult]:
		field = Field(user_id=user_id, **payload.model_dump())
		self.db.add(field)
		await self.db.flush()
		await self.db.refresh(field)
		await self.db.commit()

		result = await self.scheduler.build(field)
		logger.info("field_created", field_id=str(field.id), schedule_source=result.source.value)
		return field, result

	async def list_fields(self, user_id: uuid.UUID) -> list[Field]:
		stmt = select(Field).where(Field.user_id == user_id).order_by(Field.created_at.desc())
		rows = await self.db.execute(stmt)
		return list(rows.scalars().all())

	async def next_pending(
		self,
		field_ids: list[uuid.UUID],
		today: date | None = None,
	) -> dict[uuid.UUID, IrrigationSchedule]:
		"""Earliest upcoming pending entry per field."""
		if not field_ids:
			return {}
		if today is None:
			today = datetime.now(ZoneInfo(get_settings().schedule_timezone)).date()
		stmt = (
			select(IrrigationSchedule)
			.where(
				IrrigationSchedule.field_id.in_(field_ids),
				IrrigationSchedule.status == ScheduleStatusEnum.pending,
				IrrigationSchedule.date >= today,
			)
			.order_by(IrrigationSchedule.date.asc())
		)
		rows = await self.db.execute(stmt)
		upcoming: dict[uuid.UUID, IrrigationSchedule] = {}
		for schedule in rows.scalars().all():
			upcoming.setdefault(schedule.field_id, schedule)
		return upcoming

	async def get_field(self, user_id: uuid.UUID, field_id: uuid.UUID) -> Field:
		stmt = select(Field).where(Field.id == field_id, Field.user_id == user_id)
		row = await self.db.execute(stmt)
		field = row.scalar_one_or_none()
		if field is None:
			raise LookupError(f"Field {field_id} not found")
		return field

	async def update_field(
		self,
		user_id: uuid.UUID,
		field_id: uuid.UUID,
		payload: FieldUpdate,
	) -> tuple[Field, ScheduleBuildResult | None]:
		field = await self.get_field(user_id, field_id)
		values = payload.model_dump()
		changed = any(getattr(field, attr) != values[attr] for attr in _AGRONOMIC_ATTRS)

		for key, value in values.items():
			setattr(field, key, value)
		await self.db.flush()
		await self.db.refresh(field)
		await self.db.commit()

		if not (changed and field.has_coordinates):
			return field, None
		result = await self.scheduler.build(field)
		logger.info("field_recalculated", field_id=str(field.id), schedule_source=result.source.value)
		return field, result

	async def delete_field(self, user_id: uuid.UUID, field_id: uuid.UUID) -> None:
		field = await self.get_field(user_id, field_id)
		await self.db.delete(field)
		await self.db.flush()

	async def recalculate(self, user_id: uuid.UUID, field_id: uuid.UUID) -> ScheduleBuildResult:
		field = await self.get_field(user_id, field_id)
		if not field.has_coordinates:
			raise ValueError("Field location must be set before calculating a schedule")
		return await self.scheduler.build(field)
