"""Persistence for irrigation schedule entries."""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from datetime import UTC, datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.engine.schedule import ScheduleEntry
from app.models.enums import ScheduleStatusEnum
from app.models.irrigation import IrrigationSchedule


class ScheduleRepository:
	def __init__(self, db: AsyncSession):
		self.db = db

	async def replace_pending(
		self,
		field_id: uuid.UUID,
		entries: Sequence[ScheduleEntry],
	) -> list[IrrigationSchedule]:
		"""Delete the field's pending rows and insert ``entries`` as one unit.

		Runs in a savepoint: either both the delete and the insert land or
		neither does.  Completed rows are left alone.
		"""
		async with self.db.begin_nested():
			await self.delete_pending(field_id)
			rows = await self.insert_batch(entries)
		return rows

	async def delete_pending(self, field_id: uuid.UUID) -> None:
		await self.db.execute(
			delete(IrrigationSchedule).where(
				IrrigationSchedule.field_id == field_id,
				IrrigationSchedule.status == ScheduleStatusEnum.pending,
			)
		)

	async def insert_batch(self, entries: Sequence[ScheduleEntry]) -> list[IrrigationSchedule]:
		rows = [
			IrrigationSchedule(
				field_id=entry.field_id,
				date=entry.date,
				recommended_time=entry.recommended_time,
				water_amount=entry.water_amount,
				weather_temp=entry.weather_temp,
				weather_humidity=entry.weather_humidity,
				weather_condition=entry.weather_condition,
				note=entry.note,
				status=ScheduleStatusEnum.pending,
			)
			for entry in entries
		]
		self.db.add_all(rows)
		await self.db.flush()
		return rows

	async def get(self, schedule_id: uuid.UUID) -> IrrigationSchedule | None:
		row = await self.db.execute(select(IrrigationSchedule).where(IrrigationSchedule.id == schedule_id))
		return row.scalar_one_or_none()

	async def mark_completed(
		self,
		schedule: IrrigationSchedule,
		*,
		actual_water_used: float | None = None,
		notes: str | None = None,
	) -> IrrigationSchedule:
		if schedule.status != ScheduleStatusEnum.pending:
			raise ValueError(f"Schedule {schedule.id} is {schedule.status.value}, not pending")
		schedule.status = ScheduleStatusEnum.completed
		schedule.completed_at = datetime.now(UTC)
		if actual_water_used is not None:
			schedule.actual_water_used = actual_water_used
		if notes:
			schedule.notes = notes
		await self.db.flush()
		return schedule

	async def commit(self) -> None:
		await self.db.commit()

	async def rollback(self) -> None:
		await self.db.rollback()
