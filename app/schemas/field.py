"""Pydantic request/response schemas for fields and schedule builds."""

from __future__ import annotations

import datetime as dt
import uuid

from pydantic import BaseModel, ConfigDict, Field

from app.engine.schedule import ScheduleSource
from app.models.enums import ScheduleStatusEnum


class FieldCreate(BaseModel):
	name: str = Field(min_length=1, max_length=255)
	crop_type: str = Field(min_length=1, max_length=100)
	soil_type: str = Field(default="unknown", min_length=1, max_length=100)
	location: str | None = Field(default=None, max_length=255)
	latitude: float | None = Field(default=None, ge=-90, le=90)
	longitude: float | None = Field(default=None, ge=-180, le=180)
	area: float | None = Field(default=None, gt=0, description="Area in decares")


class FieldUpdate(FieldCreate):
	pass


class ScheduleEntryRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	date: dt.date
	recommended_time: str
	water_amount: float
	weather_temp: float
	weather_humidity: float
	weather_condition: str
	note: str | None = None
	status: ScheduleStatusEnum = ScheduleStatusEnum.pending


class ScheduleBuildRead(BaseModel):
	field_id: uuid.UUID
	source: ScheduleSource
	entries: list[ScheduleEntryRead] = Field(default_factory=list)


class FieldRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: uuid.UUID
	user_id: uuid.UUID
	name: str
	crop_type: str
	soil_type: str
	location: str | None = None
	latitude: float | None = None
	longitude: float | None = None
	area: float | None = None
	created_at: dt.datetime
	updated_at: dt.datetime
	next_irrigation: ScheduleEntryRead | None = None


class FieldWithScheduleRead(FieldRead):
	schedule: ScheduleBuildRead | None = None


class FieldListRead(BaseModel):
	items: list[FieldRead]
