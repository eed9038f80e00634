"""Weather snapshot cache keyed by ``"lat,lon"``.

Refreshed on every successful live forecast fetch.  The fallback planner
reads it when the live provider is unreachable, as long as the snapshot is
younger than ``weather_snapshot_max_age_seconds``.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import Float, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class WeatherCache(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Latest conditions plus the raw 3-hourly forecast list for one location."""

    __tablename__ = "weather_cache"

    location: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    temperature: Mapped[float | None] = mapped_column(Float, nullable=True)
    humidity: Mapped[float | None] = mapped_column(Float, nullable=True)
    condition: Mapped[str | None] = mapped_column(String(128), nullable=True)
    precipitation: Mapped[float | None] = mapped_column(Float, nullable=True)
    forecast: Mapped[list[dict[str, Any]]] = mapped_column(JSONB, nullable=False)

    def __repr__(self) -> str:
        return f"<WeatherCache location={self.location!r} updated={self.updated_at}>"
