"""Notification inbox routes."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.database import get_db
from app.models import User
from app.models.enums import NotificationCategoryEnum
from app.schemas.notifications import MarkAllReadResult, NotificationListRead, NotificationRead
from app.services.notification_service import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _map_error(exc: Exception) -> HTTPException:
	if isinstance(exc, LookupError):
		return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
	if isinstance(exc, ValueError):
		return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
	return HTTPException(
		status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
		detail="Unexpected notification service failure",
	)


@router.get("", response_model=NotificationListRead)
async def list_notifications(
	unread_only: bool = Query(default=False),
	category: NotificationCategoryEnum | None = Query(default=None),
	limit: int = Query(default=50, ge=1, le=200),
	db: AsyncSession = Depends(get_db),
	user: User = Depends(get_current_user),
) -> NotificationListRead:
	service = NotificationService(db)
	try:
		items, unread = await service.list_notifications(
			user.id,
			unread_only=unread_only,
			category=category,
			limit=limit,
		)
	except Exception as exc:
		raise _map_error(exc) from exc
	return NotificationListRead(
		items=[NotificationRead.model_validate(item) for item in items],
		unread_count=unread,
	)


@router.patch("/read-all", response_model=MarkAllReadResult)
async def mark_all_read(
	db: AsyncSession = Depends(get_db),
	user: User = Depends(get_current_user),
) -> MarkAllReadResult:
	try:
		updated = await NotificationService(db).mark_all_read(user.id)
	except Exception as exc:
		raise _map_error(exc) from exc
	return MarkAllReadResult(updated=updated)


@router.patch("/{notification_id}/read", response_model=NotificationRead)
async def mark_read(
	notification_id: uuid.UUID,
	db: AsyncSession = Depends(get_db),
	user: User = Depends(get_current_user),
) -> NotificationRead:
	try:
		notification = await NotificationService(db).mark_read(user.id, notification_id)
	except Exception as exc:
		raise _map_error(exc) from exc
	return NotificationRead.model_validate(notification)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
	notification_id: uuid.UUID,
	db: AsyncSession = Depends(get_db),
	user: User = Depends(get_current_user),
) -> Response:
	try:
		await NotificationService(db).delete_notification(user.id, notification_id)
	except Exception as exc:
		raise _map_error(exc) from exc
	return Response(status_code=status.HTTP_204_NO_CONTENT)
