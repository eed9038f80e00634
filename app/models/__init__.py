"""ORM model registry. Importing this module registers every table on Base.metadata.

Alembic ``env.py`` imports ``Base`` from here (not from ``base.py``) so that
autogenerate sees all tables.  ``User`` is defined in ``app.auth.models`` but should be
imported from here, so that ``base`` is loaded before it.  Application code can also do::

    from app.models import Field, IrrigationSchedule, Notification, ...
"""

# ── Base & Mixins ───────────────────────────────────────────────────────────
# ── Auth models ─────────────────────────────────────────────────────────────
from app.auth.models import User
from app.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

# ── Enums ───────────────────────────────────────────────────────────────────
from app.models.enums import (
    IrrigationMethodEnum,
    NotificationCategoryEnum,
    ScheduleStatusEnum,
)

# ── Field & irrigation models ───────────────────────────────────────────────
from app.models.field import Field
from app.models.irrigation import IrrigationLog, IrrigationSchedule

# ── Notifications & weather ─────────────────────────────────────────────────
from app.models.notifications import Notification
from app.models.weather import WeatherCache

__all__ = [
    # Base & mixins
    "Base",
    # Core
    "Field",
    "IrrigationLog",
    # Enums
    "IrrigationMethodEnum",
    "IrrigationSchedule",
    "Notification",
    "NotificationCategoryEnum",
    "ScheduleStatusEnum",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    # Auth
    "User",
    "WeatherCache",
]
