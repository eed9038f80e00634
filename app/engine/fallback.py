"""Simplified AI-free plan used when the primary pipeline cannot run.

Deliberately independent from the primary calculator: its own daily liter
table, coarse tiered multipliers and no advisory notes.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any

from app.engine.calculator import round_one
from app.engine.forecast import UNKNOWN_CONDITION
from app.engine.reference import SoilType, fallback_daily_liters, resolve_soil
from app.engine.schedule import ScheduleEntry

ASSUMED_TEMP = 25.0
ASSUMED_HUMIDITY = 50.0
SAMPLES_PER_DAY = 8


@dataclass(frozen=True, slots=True)
class FallbackWeather:
    temperature: float = ASSUMED_TEMP
    humidity: float = ASSUMED_HUMIDITY
    rain: float = 0.0
    condition: str = UNKNOWN_CONDITION


def weather_for_day(snapshot: Sequence[Mapping[str, Any]] | None, day_index: int) -> FallbackWeather:
    """Pick the 3-hourly snapshot sample starting ``day_index`` days out."""
    if not snapshot:
        return FallbackWeather()
    position = day_index * SAMPLES_PER_DAY
    if position >= len(snapshot):
        return FallbackWeather()

    item = snapshot[position]
    main = item.get("main") or {}
    rain = item.get("rain") or {}
    weather = item.get("weather") or []
    condition = UNKNOWN_CONDITION
    if weather and isinstance(weather[0], Mapping):
        condition = str(weather[0].get("description") or UNKNOWN_CONDITION)
    return FallbackWeather(
        temperature=float(main.get("temp", ASSUMED_TEMP)),
        humidity=float(main.get("humidity", ASSUMED_HUMIDITY)),
        rain=float(rain.get("3h") or 0.0),
        condition=condition,
    )


def fallback_amount(base: float, weather: FallbackWeather, soil: SoilType | None) -> float:
    amount = base
    if weather.temperature > 30:
        amount *= 1.3
    elif weather.temperature > 25:
        amount *= 1.1
    elif weather.temperature < 15:
        amount *= 0.8

    if weather.humidity < 40:
        amount *= 1.2
    elif weather.humidity > 70:
        amount *= 0.8

    if soil == SoilType.sandy:
        amount *= 1.2
    elif soil == SoilType.clay:
        amount *= 0.9

    if weather.rain > 5:
        return 0.0
    return max(0.0, round_one(amount))


def build_fallback_plan(
    field_id: uuid.UUID,
    crop_type: str | None,
    soil_type: str | None,
    today: date,
    *,
    days: int = 7,
    snapshot: Sequence[Mapping[str, Any]] | None = None,
) -> list[ScheduleEntry]:
    base = fallback_daily_liters(crop_type)
    soil = resolve_soil(soil_type)

    entries: list[ScheduleEntry] = []
    for offset in range(days):
        weather = weather_for_day(snapshot, offset)
        entries.append(
            ScheduleEntry(
                field_id=field_id,
                date=today + timedelta(days=offset),
                recommended_time="06:00-08:00" if weather.temperature > 28 else "07:00-09:00",
                water_amount=fallback_amount(base, weather, soil),
                weather_temp=weather.temperature,
                weather_humidity=weather.humidity,
                weather_condition=weather.condition,
            )
        )
    return entries
