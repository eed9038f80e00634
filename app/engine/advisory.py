"""Advisory estimate types plus validation and clamping of raw estimates."""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from app.engine.forecast import ForecastSummary

WATER_MIN_BOUNDS = (0.5, 12.0)
WATER_MAX_BOUNDS = (0.8, 15.0)
INTERVAL_BOUNDS = (1, 10)

_TIME_RANGE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d-([01]\d|2[0-3]):[0-5]\d$")


@dataclass(frozen=True, slots=True)
class AdvisoryRequest:
    crop_type: str
    soil_type: str
    latitude: float | None
    longitude: float | None
    month: int
    forecast: ForecastSummary


@dataclass(frozen=True, slots=True)
class AdvisoryEstimate:
    water_min: float
    water_max: float
    interval_days: int
    recommended_time_range: str | None = None


def _clamp(value: float, bounds: tuple[float, float]) -> float:
    low, high = bounds
    return max(low, min(value, high))


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def parse_time_range(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    candidate = value.strip().replace(" ", "")
    if _TIME_RANGE.match(candidate) is None:
        return None
    return candidate


def validate_estimate(payload: Mapping[str, Any] | None) -> AdvisoryEstimate | None:
    """Turn a raw advisory payload into a safe estimate, or ``None``.

    Missing, non-numeric or non-finite fields reject the whole estimate, as
    do non-positive values and an inverted range.  Positive values outside
    the safe bounds are clamped into them.
    """
    if not isinstance(payload, Mapping):
        return None

    water_min = _as_number(payload.get("waterMin"))
    water_max = _as_number(payload.get("waterMax"))
    interval = _as_number(payload.get("intervalDays"))
    if water_min is None or water_max is None or interval is None:
        return None
    if water_min <= 0 or water_max <= 0 or interval < 0.5:
        return None

    water_min = _clamp(water_min, WATER_MIN_BOUNDS)
    water_max = _clamp(water_max, WATER_MAX_BOUNDS)
    if water_min > water_max:
        return None

    interval_days = int(_clamp(math.floor(interval + 0.5), INTERVAL_BOUNDS))
    return AdvisoryEstimate(
        water_min=water_min,
        water_max=water_max,
        interval_days=interval_days,
        recommended_time_range=parse_time_range(payload.get("recommendedTimeRange")),
    )
