"""Water savings summary schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PeriodSavingRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	period: str
	water_saved: float


class SavingsRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	total_water_saved: float
	total_money_saved: float
	saving_percentage: int
	total_smart_water: float
	total_traditional_water: float
	potential_water_saved: float
	potential_money_saved: float
	potential_smart_water: float
	potential_traditional_water: float
	weekly_stats: list[PeriodSavingRead] = Field(default_factory=list)
	monthly_stats: list[PeriodSavingRead] = Field(default_factory=list)
	total_field_area: float
	field_count: int
	completed_irrigations: int
	total_schedules: int
	comparison_note: str
