"""Smart vs. traditional water usage comparison.

The traditional per-crop usage table is its own reference data and is not
derived from the crop profiles used for scheduling.
"""

from __future__ import annotations

import math
import uuid
from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

from app.engine.normalize import normalize_key
from app.engine.reference import resolve_crop

M2_PER_DECARE = 1000.0
SMART_ESTIMATE_PER_M2 = 4.0
IRRIGATIONS_PER_YEAR = 30
WEEKLY_WINDOW = 8
MONTHLY_WINDOW = 12

DEFAULT_TRADITIONAL_PER_M2 = 15.0

# L/m² per irrigation with conventional flood/furrow practice.
TRADITIONAL_USAGE: dict[str, float] = {
    normalize_key(name): liters
    for name, liters in {
        "Buğday": 12, "Arpa": 11, "Mısır": 18, "Ayçiçeği": 14, "Pamuk": 21,
        "Soya": 15, "Şeker Pancarı": 18, "Patates": 15, "Domates": 18,
        "Biber": 15, "Patlıcan": 16, "Salatalık": 15, "Kabak": 14,
        "Kavun": 14, "Karpuz": 18, "Soğan": 12, "Sarımsak": 10, "Havuç": 12,
        "Marul": 12, "Ispanak": 10, "Lahana": 14, "Fasulye": 14, "Nohut": 10,
        "Mercimek": 9, "Çilek": 15, "Üzüm": 12, "Elma": 12, "Armut": 12,
        "Şeftali": 14, "Kayısı": 12, "Kiraz": 10, "Zeytin": 10, "Ceviz": 12,
    }.items()
}

NOTE_COMPLETED = "Compared against traditional irrigation"
NOTE_POTENTIAL = "Potential savings (updated as irrigations are completed)"
NOTE_ESTIMATED = "Estimated yearly savings potential"
NOTE_NO_FIELDS = "No fields added yet"


@dataclass(frozen=True, slots=True)
class FieldUsage:
    id: uuid.UUID
    crop_type: str | None
    area: float | None


@dataclass(frozen=True, slots=True)
class ScheduleUsage:
    field_id: uuid.UUID
    water_amount: float | None
    actual_water_used: float | None
    completed: bool
    completed_at: datetime | None
    created_at: datetime


@dataclass(frozen=True, slots=True)
class PeriodSaving:
    period: str
    water_saved: float


@dataclass(slots=True)
class SavingsSummary:
    total_water_saved: float = 0
    total_money_saved: float = 0
    saving_percentage: int = 0
    total_smart_water: float = 0
    total_traditional_water: float = 0
    potential_water_saved: float = 0
    potential_money_saved: float = 0
    potential_smart_water: float = 0
    potential_traditional_water: float = 0
    weekly_stats: list[PeriodSaving] = field(default_factory=list)
    monthly_stats: list[PeriodSaving] = field(default_factory=list)
    total_field_area: float = 0
    field_count: int = 0
    completed_irrigations: int = 0
    total_schedules: int = 0
    comparison_note: str = NOTE_NO_FIELDS


def traditional_usage(crop_type: str | None) -> float:
    key = normalize_key(crop_type)
    if key in TRADITIONAL_USAGE:
        return TRADITIONAL_USAGE[key]
    crop = resolve_crop(crop_type)
    if crop is not None:
        return TRADITIONAL_USAGE.get(normalize_key(crop.value), DEFAULT_TRADITIONAL_PER_M2)
    return DEFAULT_TRADITIONAL_PER_M2


def _area_m2(usage: FieldUsage | None) -> float:
    return ((usage.area if usage else None) or 1) * M2_PER_DECARE


def _half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _cents(value: float) -> float:
    return math.floor(value * 100 + 0.5) / 100


def week_key(moment: datetime) -> str:
    year, week, _ = moment.isocalendar()
    return f"{year}-W{week:02d}"


def month_key(moment: datetime) -> str:
    return f"{moment.year}-{moment.month:02d}"


def _stats(buckets: dict[str, float], window: int) -> list[PeriodSaving]:
    return [PeriodSaving(period=key, water_saved=_half_up(buckets[key])) for key in sorted(buckets)[-window:]]


def summarize_savings(
    fields: Sequence[FieldUsage],
    schedules: Sequence[ScheduleUsage],
    price_per_liter: float,
) -> SavingsSummary:
    if not fields:
        return SavingsSummary()

    by_id = {usage.id: usage for usage in fields}
    completed = [s for s in schedules if s.completed]

    saved_total = smart_total = traditional_total = 0.0
    weekly: dict[str, float] = defaultdict(float)
    monthly: dict[str, float] = defaultdict(float)
    for schedule in completed:
        usage = by_id.get(schedule.field_id)
        area = _area_m2(usage)
        smart = (schedule.actual_water_used or schedule.water_amount or 0) * area
        traditional = traditional_usage(usage.crop_type if usage else None) * area
        saved = max(0.0, traditional - smart)

        smart_total += smart
        traditional_total += traditional
        saved_total += saved

        moment = schedule.completed_at or schedule.created_at
        weekly[week_key(moment)] += saved
        monthly[month_key(moment)] += saved

    potential_saved = potential_smart = potential_traditional = 0.0
    if schedules:
        for schedule in schedules:
            usage = by_id.get(schedule.field_id)
            area = _area_m2(usage)
            smart = (schedule.water_amount or 0) * area
            traditional = traditional_usage(usage.crop_type if usage else None) * area
            potential_smart += smart
            potential_traditional += traditional
            potential_saved += max(0.0, traditional - smart)
    else:
        for usage in fields:
            area = _area_m2(usage)
            smart = SMART_ESTIMATE_PER_M2 * area * IRRIGATIONS_PER_YEAR
            traditional = traditional_usage(usage.crop_type) * area * IRRIGATIONS_PER_YEAR
            potential_smart += smart
            potential_traditional += traditional
            potential_saved += max(0.0, traditional - smart)

    if traditional_total > 0:
        percentage = _half_up(saved_total / traditional_total * 100)
    elif potential_traditional > 0:
        percentage = _half_up(potential_saved / potential_traditional * 100)
    else:
        percentage = 0

    if completed:
        note = NOTE_COMPLETED
    elif schedules:
        note = NOTE_POTENTIAL
    else:
        note = NOTE_ESTIMATED

    return SavingsSummary(
        total_water_saved=_half_up(saved_total),
        total_money_saved=_cents(saved_total * price_per_liter),
        saving_percentage=percentage,
        total_smart_water=_half_up(smart_total),
        total_traditional_water=_half_up(traditional_total),
        potential_water_saved=_half_up(potential_saved),
        potential_money_saved=_cents(potential_saved * price_per_liter),
        potential_smart_water=_half_up(potential_smart),
        potential_traditional_water=_half_up(potential_traditional),
        weekly_stats=_stats(weekly, WEEKLY_WINDOW),
        monthly_stats=_stats(monthly, MONTHLY_WINDOW),
        total_field_area=sum(usage.area or 1 for usage in fields),
        field_count=len(fields),
        completed_irrigations=len(completed),
        total_schedules=len(schedules),
        comparison_note=note,
    )
