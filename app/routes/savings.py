"""Water savings summary route."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.database import get_db
from app.models import User
from app.schemas.savings import SavingsRead
from app.services.savings_service import SavingsService

router = APIRouter(prefix="/savings", tags=["savings"])


def _map_error(exc: Exception) -> HTTPException:
	if isinstance(exc, LookupError):
		return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
	return HTTPException(
		status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
		detail="Unexpected savings service failure",
	)


@router.get("", response_model=SavingsRead)
async def get_savings(
	db: AsyncSession = Depends(get_db),
	user: User = Depends(get_current_user),
) -> SavingsRead:
	try:
		summary = await SavingsService(db).summary(user.id)
	except Exception as exc:
		raise _map_error(exc) from exc
	return SavingsRead.model_validate(summary)
