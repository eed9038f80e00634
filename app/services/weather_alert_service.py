"""Per-field severe-weather notifications raised from the daily forecast."""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from datetime import datetime, time
from zoneinfo import ZoneInfo

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from app.engine.alerts import WeatherAlert, weather_alerts
from app.engine.forecast import ForecastDaySummary
from app.models.field import Field
from app.models.notifications import Notification
from app.services.notification_service import NotificationService

logger = structlog.get_logger("tarimsense.weather_alerts")


class WeatherAlertService:
	def __init__(self, db: AsyncSession, settings: Settings | None = None):
		self.db = db
		self.settings = settings or get_settings()
		self.notifications = NotificationService(db)

	async def notify_user(self, user_id: uuid.UUID, days: Iterable[ForecastDaySummary]) -> int:
		"""Send one notification per alert and field; returns how many were created.

		An alert already delivered for the same field and day is not repeated,
		so refreshing the forecast does not flood the inbox.  Database errors
		are logged and reported as zero sent.
		"""
		alerts = weather_alerts(days)
		if not alerts:
			return 0

		try:
			async with self.db.begin_nested():
				rows = await self.db.execute(
					select(Field.name).where(Field.user_id == user_id).order_by(Field.created_at.asc())
				)
				names = list(rows.scalars().all())
				sent = 0
				for alert in alerts:
					for name in names:
						if await self._deliver(user_id, alert, name):
							sent += 1
		except SQLAlchemyError as exc:
			logger.warning("weather_alerts_failed", user_id=str(user_id), error=str(exc))
			return 0

		logger.info("weather_alerts_sent", user_id=str(user_id), alerts=len(alerts), sent=sent)
		return sent

	async def _deliver(self, user_id: uuid.UUID, alert: WeatherAlert, field_name: str) -> bool:
		title = alert.title(field_name)
		scheduled_for = datetime.combine(alert.date, time.min, tzinfo=ZoneInfo(self.settings.schedule_timezone))
		existing = await self.db.execute(
			select(Notification.id)
			.where(
				Notification.user_id == user_id,
				Notification.category == alert.category,
				Notification.title == title,
				Notification.scheduled_for == scheduled_for,
			)
			.limit(1)
		)
		if existing.scalar_one_or_none() is not None:
			return False
		created = await self.notifications.notify(user_id, alert.category, title, alert.message(), scheduled_for)
		return created is not None
