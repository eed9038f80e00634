from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict


class ForecastDayRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	date: dt.date
	avg_temp: float
	avg_humidity: float
	total_rain: float
	condition: str


class ForecastRead(BaseModel):
	latitude: float
	longitude: float
	days: list[ForecastDayRead]


class CurrentWeatherRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	location: str
	latitude: float
	longitude: float
	temperature: float | None = None
	humidity: float | None = None
	condition: str | None = None
	precipitation: float | None = None
	updated_at: dt.datetime
