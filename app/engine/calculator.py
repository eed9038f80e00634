"""Daily water calculator: the correction pipeline for one scheduled date.

The running amount goes through, in order: base need, temperature factor,
humidity factor, soil multiplier, rain suppression, seasonal adjustment,
then rounding to one decimal and clamping at zero.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from enum import StrEnum

from app.engine.forecast import ForecastDaySummary
from app.engine.reference import CropProfile

CLEAR_CONDITION = "Clear"

SUMMER_MONTHS = frozenset({6, 7, 8, 9})
WINTER_MONTHS = frozenset({12, 1, 2, 3})

# (exclusive lower bound in mm, multiplier), most severe first.
RAIN_TIERS: tuple[tuple[float, float], ...] = (
    (15.0, 0.0),
    (10.0, 0.2),
    (5.0, 0.5),
    (2.0, 0.7),
)

# Thresholds (mm) for the rain notes; a skip note also needs a zero amount.
RAIN_SKIP_NOTE_MM = 2.0
RAIN_REDUCED_NOTE_MM = 5.0

# (exclusive lower bound in °C, window), hottest first.
_WARM_WINDOWS: tuple[tuple[float, str], ...] = (
    (30.0, "04:30-06:30"),
    (28.0, "05:00-07:00"),
    (24.0, "06:00-08:00"),
    (18.0, "07:00-09:00"),
)
_COLD_WINDOW = "10:00-12:00"
_MILD_WINDOW = "08:00-10:00"


class NoteKind(StrEnum):
    rain_skip = "rain_skip"
    rain_reduced = "rain_reduced"
    heat = "heat"
    dry = "dry"
    cold = "cold"


@dataclass(frozen=True, slots=True)
class DailyWaterResult:
    water_amount: float
    recommended_time: str
    note: str | None
    note_kind: NoteKind | None
    avg_temp: float
    avg_humidity: float
    total_rain: float
    condition: str


def round_one(value: float) -> float:
    """Round half-up to one decimal place."""
    return math.floor(value * 10 + 0.5) / 10


def temperature_factor(temp: float, optimal: float) -> float:
    if temp > optimal:
        return 1 + min((temp - optimal) / 10, 0.5)
    if temp < optimal:
        return 1 - min((optimal - temp) / 20, 0.3)
    return 1.0


def humidity_factor(humidity: float, optimal: float) -> float:
    if humidity < optimal:
        return 1 + min((optimal - humidity) / 100, 0.4)
    if humidity > optimal:
        return 1 - min((humidity - optimal) / 150, 0.2)
    return 1.0


def rain_factor(total_rain: float) -> float:
    for threshold, multiplier in RAIN_TIERS:
        if total_rain > threshold:
            return multiplier
    return 1.0


def seasonal_factor(month: int) -> float:
    if month in SUMMER_MONTHS:
        return 1.2
    if month in WINTER_MONTHS:
        return 0.8
    return 1.0


def recommended_window(avg_temp: float, override: str | None = None) -> str:
    if override:
        return override
    for threshold, window in _WARM_WINDOWS:
        if avg_temp > threshold:
            return window
    if avg_temp < 12:
        return _COLD_WINDOW
    return _MILD_WINDOW


def optimal_day(profile: CropProfile, day: date) -> ForecastDaySummary:
    """Stand-in weather for a date the forecast does not cover."""
    return ForecastDaySummary(
        date=day,
        avg_temp=profile.temp_optimal,
        avg_humidity=profile.humidity_optimal,
        total_rain=0.0,
        condition=CLEAR_CONDITION,
    )


def select_note(
    amount: float,
    weather: ForecastDaySummary,
    profile: CropProfile,
) -> tuple[NoteKind | None, str | None]:
    rain = weather.total_rain
    temp = weather.avg_temp
    humidity = weather.avg_humidity

    if amount == 0 and rain > RAIN_SKIP_NOTE_MM:
        return NoteKind.rain_skip, f"No irrigation needed: {rain:.1f}mm of rain expected."
    if rain > RAIN_REDUCED_NOTE_MM:
        return NoteKind.rain_reduced, f"Rain expected ({rain:.1f}mm). Irrigation amount reduced."
    if temp > profile.temp_optimal + 5:
        return NoteKind.heat, f"High temperature ({temp:.1f}°C). More water may be needed."
    if humidity < profile.humidity_optimal - 20:
        return NoteKind.dry, f"Low humidity ({humidity:.0f}%). Water need increased."
    if temp < profile.temp_optimal - 8:
        return NoteKind.cold, f"Low temperature ({temp:.1f}°C). Water need reduced."
    return None, None


def compute_daily_water(
    *,
    profile: CropProfile,
    soil_multiplier: float,
    weather: ForecastDaySummary,
    water_min: float | None = None,
    water_max: float | None = None,
    time_range_override: str | None = None,
) -> DailyWaterResult:
    """Water volume (L/m²), time window and advisory note for ``weather.date``.

    ``water_min``/``water_max`` replace the profile's range when an advisory
    estimate supplied them; comfort optima always come from the profile.
    """
    effective_min = profile.water_min if water_min is None else water_min
    effective_max = profile.water_max if water_max is None else water_max
    base = (effective_min + effective_max) / 2

    amount = (
        base
        * temperature_factor(weather.avg_temp, profile.temp_optimal)
        * humidity_factor(weather.avg_humidity, profile.humidity_optimal)
        * soil_multiplier
    )
    amount *= rain_factor(weather.total_rain)
    amount *= seasonal_factor(weather.date.month)
    amount = max(0.0, round_one(amount))

    note_kind, note = select_note(amount, weather, profile)
    return DailyWaterResult(
        water_amount=amount,
        recommended_time=recommended_window(weather.avg_temp, time_range_override),
        note=note,
        note_kind=note_kind,
        avg_temp=weather.avg_temp,
        avg_humidity=weather.avg_humidity,
        total_rain=weather.total_rain,
        condition=weather.condition,
    )
