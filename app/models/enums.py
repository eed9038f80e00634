"""PostgreSQL-backed enum types for all ORM models.

Each StrEnum maps 1:1 to a PostgreSQL CREATE TYPE ... AS ENUM.
"""

from enum import StrEnum

# ── Irrigation enums ────────────────────────────────────────────────────────


class ScheduleStatusEnum(StrEnum):
    """Lifecycle of a schedule entry.

    The recommendation engine only ever writes ``pending``.  ``completed`` is
    set when the farmer marks the irrigation as done; ``skipped`` exists for
    client surfaces that record a deliberately skipped day.
    """

    pending = "pending"
    completed = "completed"
    skipped = "skipped"


class IrrigationMethodEnum(StrEnum):
    """How a logged irrigation was carried out."""

    manual = "manual"
    scheduled = "scheduled"
    drip = "drip"
    sprinkler = "sprinkler"
    flood = "flood"


# ── Notification enums ──────────────────────────────────────────────────────


class NotificationCategoryEnum(StrEnum):
    """Notification categories shown in the client inbox."""

    info = "info"
    irrigation = "irrigation"
    irrigation_completed = "irrigation_completed"
    weather_warning = "weather_warning"
    heavy_rain = "heavy_rain"
    high_temp = "high_temp"
    low_temp = "low_temp"
    low_humidity = "low_humidity"
