"""Loads the user's fields and schedules for the savings comparison."""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from app.engine.savings import FieldUsage, SavingsSummary, ScheduleUsage, summarize_savings
from app.models.enums import ScheduleStatusEnum
from app.models.field import Field
from app.models.irrigation import IrrigationSchedule


class SavingsService:
	def __init__(self, db: AsyncSession, settings: Settings | None = None):
		self.db = db
		self.settings = settings or get_settings()

	async def summary(self, user_id: uuid.UUID) -> SavingsSummary:
		rows = await self.db.execute(
			select(Field.id, Field.crop_type, Field.area).where(Field.user_id == user_id)
		)
		fields = [FieldUsage(id=row.id, crop_type=row.crop_type, area=row.area) for row in rows.all()]
		if not fields:
			return summarize_savings([], [], self.settings.water_price_per_liter)

		rows = await self.db.execute(
			select(
				IrrigationSchedule.field_id,
				IrrigationSchedule.water_amount,
				IrrigationSchedule.actual_water_used,
				IrrigationSchedule.status,
				IrrigationSchedule.completed_at,
				IrrigationSchedule.created_at,
			).where(IrrigationSchedule.field_id.in_([usage.id for usage in fields]))
		)
		schedules = [
			ScheduleUsage(
				field_id=row.field_id,
				water_amount=row.water_amount,
				actual_water_used=row.actual_water_used,
				completed=row.status == ScheduleStatusEnum.completed,
				completed_at=row.completed_at,
				created_at=row.created_at,
			)
			for row in rows.all()
		]
		return summarize_savings(fields, schedules, self.settings.water_price_per_liter)
