"""Field ORM model, the agronomic unit the irrigation engine schedules for."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Float, ForeignKey, Index, String, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from app.auth.models import User
    from app.models.irrigation import IrrigationLog, IrrigationSchedule


class Field(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """A cultivated field owned by a user.

    ``crop_type`` and ``soil_type`` are free text as entered by the farmer;
    the engine resolves them through the normalized reference registry.
    ``area`` is in decares (1 da = 1000 m²) and is only used downstream to
    turn L/m² recommendations into absolute volumes.
    """

    __tablename__ = "fields"
    __table_args__ = (Index("ix_fields_user_id", "user_id"),)

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    crop_type: Mapped[str] = mapped_column(String(100), nullable=False)
    soil_type: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        default="unknown",
        server_default=text("'unknown'"),
    )
    area: Mapped[float | None] = mapped_column(Float, nullable=True)

    # ── Relationships ────────────────────────────────────────────────────
    user: Mapped[User] = relationship(back_populates="fields")
    schedules: Mapped[list[IrrigationSchedule]] = relationship(
        back_populates="field",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    logs: Mapped[list[IrrigationLog]] = relationship(
        back_populates="field",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def __repr__(self) -> str:
        return f"<Field id={self.id} name={self.name!r} crop={self.crop_type!r}>"
