"""Forecast samples and their reduction into per-day summaries."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime, tzinfo
from typing import Any

UNKNOWN_CONDITION = "Unknown"


@dataclass(frozen=True, slots=True)
class ForecastSample:
    """One provider sample (3-hourly for OpenWeather)."""

    timestamp: datetime
    temperature: float
    humidity: float
    precipitation_mm: float = 0.0
    condition: str = UNKNOWN_CONDITION


@dataclass(frozen=True, slots=True)
class ForecastDaySummary:
    date: date
    avg_temp: float
    avg_humidity: float
    total_rain: float
    condition: str


@dataclass(frozen=True, slots=True)
class ForecastSummary:
    """Whole-window aggregate sent along with advisory requests."""

    avg_temp: float
    avg_humidity: float
    total_rain: float


def local_date(sample: ForecastSample, tz: tzinfo | None = None) -> date:
    if tz is None or sample.timestamp.tzinfo is None:
        return sample.timestamp.date()
    return sample.timestamp.astimezone(tz).date()


def aggregate_daily(
    samples: Iterable[ForecastSample],
    tz: tzinfo | None = None,
) -> dict[date, ForecastDaySummary]:
    """Partition samples by local calendar date and summarize each day.

    Temperature and humidity are averaged, precipitation is summed and the
    condition text is the first sample's of that day.  Days come back in the
    order they first appear in ``samples``.
    """
    buckets: dict[date, list[ForecastSample]] = {}
    for sample in samples:
        buckets.setdefault(local_date(sample, tz), []).append(sample)

    return {day: _summarize_day(day, items) for day, items in buckets.items()}


def summary_for(
    samples: Iterable[ForecastSample],
    day: date,
    tz: tzinfo | None = None,
) -> ForecastDaySummary | None:
    matching = [sample for sample in samples if local_date(sample, tz) == day]
    if not matching:
        return None
    return _summarize_day(day, matching)


def summarize(samples: Sequence[ForecastSample]) -> ForecastSummary:
    if not samples:
        return ForecastSummary(avg_temp=20.0, avg_humidity=50.0, total_rain=0.0)
    count = len(samples)
    return ForecastSummary(
        avg_temp=sum(s.temperature for s in samples) / count,
        avg_humidity=sum(s.humidity for s in samples) / count,
        total_rain=sum(s.precipitation_mm for s in samples),
    )


def _summarize_day(day: date, items: Sequence[ForecastSample]) -> ForecastDaySummary:
    count = len(items)
    return ForecastDaySummary(
        date=day,
        avg_temp=sum(s.temperature for s in items) / count,
        avg_humidity=sum(s.humidity for s in items) / count,
        total_rain=sum(s.precipitation_mm for s in items),
        condition=items[0].condition,
    )


# ── OpenWeather payload parsing ─────────────────────────────────────────────


def sample_from_openweather(item: Mapping[str, Any]) -> ForecastSample:
    """Parse one element of OpenWeather's ``/forecast`` ``list``.

    Raises ``KeyError``/``TypeError``/``ValueError`` for malformed items.
    """
    main = item["main"]
    rain = item.get("rain") or {}
    weather = item.get("weather") or []
    condition = UNKNOWN_CONDITION
    if weather and isinstance(weather[0], Mapping):
        condition = str(weather[0].get("description") or UNKNOWN_CONDITION)
    return ForecastSample(
        timestamp=datetime.fromtimestamp(int(item["dt"]), tz=UTC),
        temperature=float(main["temp"]),
        humidity=float(main["humidity"]),
        precipitation_mm=float(rain.get("3h") or 0.0),
        condition=condition,
    )


def samples_from_openweather(items: Iterable[Mapping[str, Any]]) -> list[ForecastSample]:
    return [sample_from_openweather(item) for item in items]
