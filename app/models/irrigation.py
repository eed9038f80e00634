"""Irrigation schedule entries and irrigation logs."""

from __future__ import annotations

import datetime as dt
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Date, DateTime, Enum, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from app.models.enums import IrrigationMethodEnum, ScheduleStatusEnum

if TYPE_CHECKING:
    from app.models.field import Field

# ═══════════════════════════════════════════════════════════════════════════
# Schedule entries
# ═══════════════════════════════════════════════════════════════════════════


class IrrigationSchedule(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """One recommended irrigation event for a field.

    Rows are inserted in batches by the schedule builder as ``pending``.  A
    recalculation deletes the field's ``pending`` rows and inserts the new
    batch in the same savepoint; ``completed`` rows are history and are
    never touched by the builder.
    """

    __tablename__ = "irrigation_schedules"
    __table_args__ = (
        Index("ix_irrigation_schedules_field_status", "field_id", "status"),
        Index("ix_irrigation_schedules_field_date", "field_id", "date"),
    )

    field_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("fields.id", ondelete="CASCADE"),
        nullable=False,
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    recommended_time: Mapped[str] = mapped_column(String(16), nullable=False)
    water_amount: Mapped[float] = mapped_column(Float, nullable=False)
    weather_temp: Mapped[float | None] = mapped_column(Float, nullable=True)
    weather_humidity: Mapped[float | None] = mapped_column(Float, nullable=True)
    weather_condition: Mapped[str | None] = mapped_column(String(128), nullable=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[ScheduleStatusEnum] = mapped_column(
        Enum(
            ScheduleStatusEnum,
            name="schedule_status",
            create_constraint=False,
            native_enum=True,
        ),
        nullable=False,
        default=ScheduleStatusEnum.pending,
        server_default=ScheduleStatusEnum.pending.value,
    )
    completed_at: Mapped[dt.datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    actual_water_used: Mapped[float | None] = mapped_column(Float, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # ── Relationships ────────────────────────────────────────────────────
    field: Mapped[Field] = relationship(back_populates="schedules")

    def __repr__(self) -> str:
        return (
            f"<IrrigationSchedule id={self.id} field={self.field_id} "
            f"date={self.date} status={self.status}>"
        )


# ═══════════════════════════════════════════════════════════════════════════
# Logs
# ═══════════════════════════════════════════════════════════════════════════


class IrrigationLog(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """An irrigation that actually happened (scheduled or manual)."""

    __tablename__ = "irrigation_logs"
    __table_args__ = (Index("ix_irrigation_logs_field_id", "field_id"),)

    field_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("fields.id", ondelete="CASCADE"),
        nullable=False,
    )
    scheduled_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    method: Mapped[IrrigationMethodEnum] = mapped_column(
        Enum(
            IrrigationMethodEnum,
            name="irrigation_method",
            create_constraint=False,
            native_enum=True,
        ),
        nullable=False,
        default=IrrigationMethodEnum.manual,
    )
    water_used: Mapped[float] = mapped_column(Float, nullable=False)
    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # ── Relationships ────────────────────────────────────────────────────
    field: Mapped[Field] = relationship(back_populates="logs")

    def __repr__(self) -> str:
        return f"<IrrigationLog id={self.id} field={self.field_id} water={self.water_used}>"
