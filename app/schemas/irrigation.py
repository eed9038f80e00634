"""Pydantic schemas for irrigation schedules and logs."""

from __future__ import annotations

import datetime as dt
import uuid

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import IrrigationMethodEnum, ScheduleStatusEnum


class ScheduleRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: uuid.UUID
	field_id: uuid.UUID
	field_name: str | None = None
	date: dt.date
	recommended_time: str
	water_amount: float
	weather_temp: float | None = None
	weather_humidity: float | None = None
	weather_condition: str | None = None
	note: str | None = None
	status: ScheduleStatusEnum
	completed_at: dt.datetime | None = None
	actual_water_used: float | None = None
	notes: str | None = None


class ScheduleListRead(BaseModel):
	items: list[ScheduleRead]


class ScheduleComplete(BaseModel):
	actual_water_used: float | None = Field(default=None, ge=0)
	notes: str | None = Field(default=None, max_length=2000)


class IrrigationLogCreate(BaseModel):
	field_id: uuid.UUID
	method: IrrigationMethodEnum = IrrigationMethodEnum.manual
	water_used: float = Field(ge=0)
	duration_minutes: int | None = Field(default=None, ge=0)
	notes: str | None = Field(default=None, max_length=2000)


class IrrigationLogRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: uuid.UUID
	field_id: uuid.UUID
	scheduled_date: dt.date | None = None
	method: IrrigationMethodEnum
	water_used: float
	duration_minutes: int | None = None
	notes: str | None = None
	created_at: dt.datetime
