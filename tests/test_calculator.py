from __future__ import annotations

from datetime import date

import pytest

from app.engine.calculator import (
    RAIN_SKIP_NOTE_MM,
    NoteKind,
    compute_daily_water,
    humidity_factor,
    rain_factor,
    recommended_window,
    round_one,
    seasonal_factor,
    select_note,
    temperature_factor,
)
from app.engine.forecast import ForecastDaySummary
from app.engine.reference import CropType, crop_profile

WHEAT = crop_profile(CropType.wheat.value)  # water 3-5, 20 °C, 45 %
APRIL = date(2026, 4, 10)


def _weather(
    *,
    temp: float = 20.0,
    humidity: float = 45.0,
    rain: float = 0.0,
    day: date = APRIL,
) -> ForecastDaySummary:
    return ForecastDaySummary(date=day, avg_temp=temp, avg_humidity=humidity, total_rain=rain, condition="clear sky")


def _amount(**kwargs: float) -> float:
    return compute_daily_water(profile=WHEAT, soil_multiplier=1.0, weather=_weather(**kwargs)).water_amount


def test_neutral_day_is_base_need() -> None:
    result = compute_daily_water(profile=WHEAT, soil_multiplier=1.0, weather=_weather())
    assert result.water_amount == 4.0
    assert result.note is None
    assert result.note_kind is None


def test_temperature_factor_caps_at_plus_fifty_percent() -> None:
    assert temperature_factor(35, 20) == 1.5
    assert temperature_factor(45, 20) == 1.5
    assert _amount(temp=35) == 6.0
    assert _amount(temp=45) == 6.0


def test_temperature_factor_caps_at_minus_thirty_percent() -> None:
    assert temperature_factor(0, 20) == pytest.approx(0.7)
    assert _amount(temp=0) == 2.8
    assert _amount(temp=-20) == 2.8


def test_humidity_factor_caps() -> None:
    assert humidity_factor(0, 45) == pytest.approx(1.4)
    assert humidity_factor(100, 45) == pytest.approx(0.8)
    assert humidity_factor(45, 45) == 1.0
    assert _amount(humidity=0) == 5.6
    assert _amount(humidity=100) == 3.2


def test_soil_multiplier_scales_amount() -> None:
    result = compute_daily_water(profile=WHEAT, soil_multiplier=1.3, weather=_weather())
    assert result.water_amount == 5.2


@pytest.mark.parametrize(
    ("rain", "expected"),
    [(0.0, 4.0), (2.0, 4.0), (3.0, 2.8), (7.0, 2.0), (12.0, 0.8), (15.0, 0.8), (15.1, 0.0), (40.0, 0.0)],
)
def test_rain_tiers(rain: float, expected: float) -> None:
    assert _amount(rain=rain) == expected


def test_rain_suppression_is_monotonic() -> None:
    amounts = [_amount(rain=rain / 2) for rain in range(0, 60)]
    assert all(later <= earlier for earlier, later in zip(amounts, amounts[1:]))
    assert [rain_factor(r) for r in (1, 3, 6, 11, 16)] == [1.0, 0.7, 0.5, 0.2, 0.0]


def test_seasonal_adjustment() -> None:
    assert seasonal_factor(7) == 1.2
    assert seasonal_factor(1) == 0.8
    assert seasonal_factor(4) == 1.0
    assert _amount(day=date(2026, 7, 10)) == 4.8
    assert _amount(day=date(2026, 1, 10)) == 3.2


def test_amounts_are_non_negative_with_one_decimal() -> None:
    for temp in range(-10, 46, 3):
        for humidity in range(0, 101, 7):
            for rain in (0.0, 2.5, 6.0, 11.0, 20.0):
                amount = _amount(temp=temp, humidity=humidity, rain=rain)
                assert amount >= 0
                assert round(amount, 1) == amount


def test_round_one_is_half_up() -> None:
    assert round_one(2.25) == 2.3
    assert round_one(2.24) == 2.2
    assert round_one(0.0) == 0.0


def test_advisory_range_replaces_profile_water_range() -> None:
    result = compute_daily_water(
        profile=WHEAT,
        soil_multiplier=1.0,
        weather=_weather(),
        water_min=8.0,
        water_max=10.0,
    )
    assert result.water_amount == 9.0


def test_rain_skip_note_cites_rainfall() -> None:
    result = compute_daily_water(profile=WHEAT, soil_multiplier=1.0, weather=_weather(rain=20.0))
    assert result.water_amount == 0.0
    assert result.note_kind is NoteKind.rain_skip
    assert "20.0mm" in result.note


@pytest.mark.parametrize(
    ("weather", "kind"),
    [
        ({"rain": 7.0}, NoteKind.rain_reduced),
        ({"temp": 26.0}, NoteKind.heat),
        ({"humidity": 20.0}, NoteKind.dry),
        ({"temp": 11.0}, NoteKind.cold),
        ({"temp": 24.0, "humidity": 30.0}, None),
    ],
)
def test_note_selection(weather: dict[str, float], kind: NoteKind | None) -> None:
    result = compute_daily_water(profile=WHEAT, soil_multiplier=1.0, weather=_weather(**weather))
    assert result.note_kind is kind
    assert (result.note is None) == (kind is None)


@pytest.mark.parametrize(
    ("rain", "kind"),
    [
        (RAIN_SKIP_NOTE_MM, None),
        (RAIN_SKIP_NOTE_MM + 0.1, NoteKind.rain_skip),
    ],
)
def test_zero_amount_skip_note_needs_more_than_threshold(rain: float, kind: NoteKind | None) -> None:
    note_kind, _ = select_note(0.0, _weather(rain=rain), WHEAT)
    assert note_kind is kind


def test_rain_note_wins_over_heat_note() -> None:
    result = compute_daily_water(profile=WHEAT, soil_multiplier=1.0, weather=_weather(temp=30.0, rain=6.0))
    assert result.note_kind is NoteKind.rain_reduced


@pytest.mark.parametrize(
    ("temp", "window"),
    [
        (31.0, "04:30-06:30"),
        (29.0, "05:00-07:00"),
        (25.0, "06:00-08:00"),
        (20.0, "07:00-09:00"),
        (15.0, "08:00-10:00"),
        (11.0, "10:00-12:00"),
    ],
)
def test_time_window_tiers(temp: float, window: str) -> None:
    assert recommended_window(temp) == window


def test_advisory_time_range_overrides_window() -> None:
    assert recommended_window(35.0, "05:30-07:30") == "05:30-07:30"
    result = compute_daily_water(
        profile=WHEAT,
        soil_multiplier=1.0,
        weather=_weather(temp=35.0),
        time_range_override="06:15-07:45",
    )
    assert result.recommended_time == "06:15-07:45"
