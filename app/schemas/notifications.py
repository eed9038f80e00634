from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from app.models.enums import NotificationCategoryEnum


class NotificationRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: uuid.UUID
	category: NotificationCategoryEnum
	title: str
	message: str
	scheduled_for: datetime | None = None
	is_read: bool
	created_at: datetime


class NotificationListRead(BaseModel):
	items: list[NotificationRead]
	unread_count: int


class MarkAllReadResult(BaseModel):
	updated: int
