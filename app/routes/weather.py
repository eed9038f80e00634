"""Daily forecast summaries and the current snapshot for a coordinate pair."""

from __future__ import annotations

from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, HTTPException, Query, status
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.config import get_settings
from app.database import get_db, get_redis
from app.engine.forecast import aggregate_daily
from app.models import User
from app.schemas.weather import CurrentWeatherRead, ForecastDayRead, ForecastRead
from app.services.weather_alert_service import WeatherAlertService
from app.services.weather_service import ForecastClient, ForecastUnavailableError, WeatherSnapshotStore

router = APIRouter(prefix="/weather", tags=["weather"])


def _map_error(exc: Exception) -> HTTPException:
	if isinstance(exc, ForecastUnavailableError):
		return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))
	if isinstance(exc, ValueError):
		return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
	return HTTPException(
		status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
		detail="Unexpected weather service failure",
	)


@router.get("/forecast", response_model=ForecastRead)
async def get_forecast(
	lat: float = Query(ge=-90, le=90),
	lon: float = Query(ge=-180, le=180),
	db: AsyncSession = Depends(get_db),
	redis: Redis | None = Depends(get_redis),
	user: User = Depends(get_current_user),
) -> ForecastRead:
	"""Daily summaries; also raises severe-weather alerts for each of the user's fields."""
	settings = get_settings()
	client = ForecastClient(redis_client=redis, snapshots=WeatherSnapshotStore(db, settings), settings=settings)
	try:
		samples = await client.fetch(lat, lon)
	except Exception as exc:
		raise _map_error(exc) from exc
	daily = aggregate_daily(samples, ZoneInfo(settings.schedule_timezone))
	await WeatherAlertService(db, settings).notify_user(user.id, daily.values())
	return ForecastRead(
		latitude=lat,
		longitude=lon,
		days=[ForecastDayRead.model_validate(day) for day in daily.values()],
	)


@router.get("/current", response_model=CurrentWeatherRead)
async def get_current(
	lat: float = Query(ge=-90, le=90),
	lon: float = Query(ge=-180, le=180),
	db: AsyncSession = Depends(get_db),
	redis: Redis | None = Depends(get_redis),
	_user: User = Depends(get_current_user),
) -> CurrentWeatherRead:
	"""Latest ``weather_cache`` snapshot, refreshed from the forecast when stale."""
	settings = get_settings()
	store = WeatherSnapshotStore(db, settings)
	try:
		snapshot = await store.load_fresh_row(lat, lon)
		if snapshot is None:
			await ForecastClient(redis_client=redis, snapshots=store, settings=settings).fetch_raw(lat, lon)
			snapshot = await store.load_fresh_row(lat, lon)
		if snapshot is None:
			raise ForecastUnavailableError("weather snapshot could not be stored")
	except Exception as exc:
		raise _map_error(exc) from exc
	return CurrentWeatherRead.model_validate(snapshot)
