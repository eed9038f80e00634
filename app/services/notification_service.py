"""Notification sink and inbox queries."""

from __future__ import annotations

import uuid
from datetime import datetime

import structlog
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import NotificationCategoryEnum
from app.models.notifications import Notification

logger = structlog.get_logger("tarimsense.notifications")


class NotificationService:
	def __init__(self, db: AsyncSession):
		self.db = db

	async def notify(
		self,
		user_id: uuid.UUID,
		category: NotificationCategoryEnum,
		title: str,
		body: str,
		scheduled_for: datetime | None = None,
	) -> Notification | None:
		"""Fire-and-forget: a failed insert is logged and never propagates."""
		notification = Notification(
			user_id=user_id,
			category=category,
			title=title,
			message=body,
			scheduled_for=scheduled_for,
			is_read=False,
		)
		try:
			async with self.db.begin_nested():
				self.db.add(notification)
				await self.db.flush()
		except SQLAlchemyError as exc:
			logger.warning(
				"notification_failed",
				user_id=str(user_id),
				category=category.value,
				error=str(exc),
			)
			return None
		return notification

	async def list_notifications(
		self,
		user_id: uuid.UUID,
		*,
		unread_only: bool = False,
		category: NotificationCategoryEnum | None = None,
		limit: int = 50,
	) -> tuple[list[Notification], int]:
		stmt = select(Notification).where(Notification.user_id == user_id)
		if unread_only:
			stmt = stmt.where(Notification.is_read.is_(False))
		if category is not None:
			stmt = stmt.where(Notification.category == category)
		stmt = stmt.order_by(Notification.created_at.desc()).limit(limit)
		rows = await self.db.execute(stmt)
		items = list(rows.scalars().all())

		count_row = await self.db.execute(
			select(func.count())
			.select_from(Notification)
			.where(Notification.user_id == user_id, Notification.is_read.is_(False))
		)
		return items, int(count_row.scalar_one())

	async def mark_read(self, user_id: uuid.UUID, notification_id: uuid.UUID) -> Notification:
		notification = await self._require_owned(user_id, notification_id)
		notification.is_read = True
		await self.db.flush()
		return notification

	async def mark_all_read(self, user_id: uuid.UUID) -> int:
		result = await self.db.execute(
			update(Notification)
			.where(Notification.user_id == user_id, Notification.is_read.is_(False))
			.values(is_read=True)
		)
		return int(result.rowcount or 0)

	async def delete_notification(self, user_id: uuid.UUID, notification_id: uuid.UUID) -> None:
		await self._require_owned(user_id, notification_id)
		await self.db.execute(delete(Notification).where(Notification.id == notification_id))

	async def _require_owned(self, user_id: uuid.UUID, notification_id: uuid.UUID) -> Notification:
		row = await self.db.execute(
			select(Notification).where(
				Notification.id == notification_id,
				Notification.user_id == user_id,
			)
		)
		notification = row.scalar_one_or_none()
		if notification is None:
			raise LookupError(f"Notification {notification_id} not found")
		return notification
