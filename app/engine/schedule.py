"""Schedule entries and horizon walking shared by the primary and fallback paths."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, timedelta
from enum import StrEnum

from app.engine.calculator import DailyWaterResult, NoteKind, round_one
from app.models.enums import ScheduleStatusEnum


class ScheduleSource(StrEnum):
    primary = "primary"
    fallback = "fallback"
    failed = "failed"


@dataclass(frozen=True, slots=True)
class ScheduleEntry:
    field_id: uuid.UUID
    date: date
    recommended_time: str
    water_amount: float
    weather_temp: float
    weather_humidity: float
    weather_condition: str
    note: str | None = None
    note_kind: NoteKind | None = None
    status: ScheduleStatusEnum = ScheduleStatusEnum.pending


@dataclass(frozen=True, slots=True)
class ScheduleBuildResult:
    """Outcome of one build.

    ``source == failed`` means no schedule could be computed; an empty list
    or zero amounts with any other source are valid recommendations.
    """

    field_id: uuid.UUID
    source: ScheduleSource
    entries: tuple[ScheduleEntry, ...] = ()

    @property
    def computed(self) -> bool:
        return self.source != ScheduleSource.failed


def horizon_dates(today: date, horizon_days: int, interval_days: int) -> list[date]:
    """``today + i`` for ``i`` in ``range(0, horizon_days, interval_days)``."""
    step = max(1, int(interval_days))
    return [today + timedelta(days=offset) for offset in range(0, horizon_days, step)]


def entry_from_result(field_id: uuid.UUID, day: date, result: DailyWaterResult) -> ScheduleEntry:
    return ScheduleEntry(
        field_id=field_id,
        date=day,
        recommended_time=result.recommended_time,
        water_amount=result.water_amount,
        weather_temp=round_one(result.avg_temp),
        weather_humidity=float(round(result.avg_humidity)),
        weather_condition=result.condition,
        note=result.note,
        note_kind=result.note_kind,
    )
