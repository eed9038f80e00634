"""Severe-weather thresholds applied to daily forecast summaries."""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from app.engine.calculator import round_one
from app.engine.forecast import ForecastDaySummary
from app.models.enums import NotificationCategoryEnum

HEAVY_RAIN_MM = 20.0
HIGH_TEMP_C = 35.0
LOW_TEMP_C = 5.0
LOW_HUMIDITY_PCT = 30.0


@dataclass(frozen=True, slots=True)
class WeatherAlert:
    category: NotificationCategoryEnum
    date: date
    value: float

    def title(self, field_name: str) -> str:
        return f"{_TITLES[self.category]} - {field_name}"

    def message(self) -> str:
        day = self.date.isoformat()
        if self.category is NotificationCategoryEnum.heavy_rain:
            return f"{self.value}mm of rain expected on {day}."
        if self.category is NotificationCategoryEnum.low_humidity:
            return f"{self.value:.0f}% humidity expected on {day}."
        return f"{self.value}°C expected on {day}."


_TITLES = {
    NotificationCategoryEnum.heavy_rain: "Heavy rain warning",
    NotificationCategoryEnum.high_temp: "High temperature",
    NotificationCategoryEnum.low_temp: "Low temperature",
    NotificationCategoryEnum.low_humidity: "Low humidity",
}


def weather_alerts(days: Iterable[ForecastDaySummary]) -> list[WeatherAlert]:
    """Alerts in day order; within a day: rain, then temperature, then humidity.

    Values are rounded as displayed (0.1 mm, 0.1 °C, whole percent) before
    comparison, and all thresholds are exclusive.  High and low temperature are
    mutually exclusive by construction.
    """
    alerts: list[WeatherAlert] = []
    for day in sorted(days, key=lambda item: item.date):
        rain = round_one(day.total_rain)
        temp = round_one(day.avg_temp)
        humidity = float(math.floor(day.avg_humidity + 0.5))

        if rain > HEAVY_RAIN_MM:
            alerts.append(WeatherAlert(NotificationCategoryEnum.heavy_rain, day.date, rain))
        if temp > HIGH_TEMP_C:
            alerts.append(WeatherAlert(NotificationCategoryEnum.high_temp, day.date, temp))
        elif temp < LOW_TEMP_C:
            alerts.append(WeatherAlert(NotificationCategoryEnum.low_temp, day.date, temp))
        if humidity < LOW_HUMIDITY_PCT:
            alerts.append(WeatherAlert(NotificationCategoryEnum.low_humidity, day.date, humidity))
    return alerts
