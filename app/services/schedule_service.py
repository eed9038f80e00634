"""Irrigation schedule builder.

Primary path: live forecast, optional advisory estimate, per-day calculator
over the horizon.  Any failure on that path drops to the fallback planner;
if the fallback cannot be persisted either, the build reports ``failed``.
Every build is serialized per field and committed while the lock is held.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Callable, Sequence
from datetime import date, datetime, time
from typing import Any, Protocol
from zoneinfo import ZoneInfo

import structlog
from redis.asyncio import Redis
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from app.engine.advisory import AdvisoryEstimate, AdvisoryRequest
from app.engine.calculator import NoteKind, compute_daily_water, optimal_day
from app.engine.fallback import build_fallback_plan
from app.engine.forecast import ForecastSample, aggregate_daily, summarize
from app.engine.reference import crop_profile, irrigation_interval, soil_multiplier
from app.engine.schedule import (
	ScheduleBuildResult,
	ScheduleEntry,
	ScheduleSource,
	entry_from_result,
	horizon_dates,
)
from app.models.enums import NotificationCategoryEnum
from app.services.advisory_service import AdvisoryEstimator, build_advisory_estimator
from app.services.field_lock import FieldLockRegistry, FieldLockTimeout
from app.services.notification_service import NotificationService
from app.services.schedule_repository import ScheduleRepository
from app.services.weather_service import ForecastClient, WeatherSnapshotStore

logger = structlog.get_logger("tarimsense.schedule")

REMINDER_COUNT = 3


class SchedulableField(Protocol):
	id: uuid.UUID
	user_id: uuid.UUID
	name: str
	crop_type: str
	soil_type: str
	latitude: float | None
	longitude: float | None


class ForecastSource(Protocol):
	async def fetch(self, latitude: float | None, longitude: float | None) -> list[ForecastSample]: ...


class SnapshotSource(Protocol):
	async def load_fresh(self, latitude: float | None, longitude: float | None) -> list[dict[str, Any]] | None: ...


class NotificationSink(Protocol):
	async def notify(
		self,
		user_id: uuid.UUID,
		category: NotificationCategoryEnum,
		title: str,
		body: str,
		scheduled_for: datetime | None = None,
	) -> Any: ...


class ScheduleBuilder:
	def __init__(
		self,
		*,
		forecast: ForecastSource,
		advisory: AdvisoryEstimator,
		repository: ScheduleRepository,
		notifier: NotificationSink,
		snapshots: SnapshotSource | None = None,
		locks: FieldLockRegistry | None = None,
		settings: Settings | None = None,
		today: Callable[[], date] | None = None,
	):
		self.forecast = forecast
		self.advisory = advisory
		self.repository = repository
		self.notifier = notifier
		self.snapshots = snapshots
		self.settings = settings or get_settings()
		self.locks = locks or FieldLockRegistry(timeout_seconds=self.settings.field_lock_timeout_seconds)
		self.tz = ZoneInfo(self.settings.schedule_timezone)
		self._today = today or (lambda: datetime.now(self.tz).date())

	async def build(self, field: SchedulableField) -> ScheduleBuildResult:
		"""Rebuild the field's pending schedule.  Never raises."""
		try:
			async with self.locks.hold(field.id):
				return await self._build_locked(field)
		except FieldLockTimeout as exc:
			logger.warning("schedule_lock_timeout", field_id=str(field.id), error=str(exc))
			return ScheduleBuildResult(field_id=field.id, source=ScheduleSource.failed)

	async def _build_locked(self, field: SchedulableField) -> ScheduleBuildResult:
		today = self._today()
		try:
			entries = await self._build_primary(field, today)
		except Exception as exc:
			logger.warning(
				"schedule_primary_failed",
				field_id=str(field.id),
				error_type=type(exc).__name__,
				error=str(exc),
			)
			await self._safe_rollback()
		else:
			logger.info("schedule_built", field_id=str(field.id), source="primary", entries=len(entries))
			return ScheduleBuildResult(field_id=field.id, source=ScheduleSource.primary, entries=tuple(entries))

		try:
			entries = await self._build_fallback(field, today)
		except Exception:
			logger.exception("schedule_fallback_failed", field_id=str(field.id))
			await self._safe_rollback()
			return ScheduleBuildResult(field_id=field.id, source=ScheduleSource.failed)

		logger.info("schedule_built", field_id=str(field.id), source="fallback", entries=len(entries))
		return ScheduleBuildResult(field_id=field.id, source=ScheduleSource.fallback, entries=tuple(entries))

	async def _build_primary(self, field: SchedulableField, today: date) -> list[ScheduleEntry]:
		samples = await self.forecast.fetch(field.latitude, field.longitude)
		profile = crop_profile(field.crop_type)
		multiplier = soil_multiplier(field.soil_type)

		estimate = await self._estimate(field, samples, today)
		interval = estimate.interval_days if estimate else irrigation_interval(field.crop_type)

		daily = aggregate_daily(samples, self.tz)
		entries: list[ScheduleEntry] = []
		for day in horizon_dates(today, self.settings.schedule_horizon_days, interval):
			weather = daily.get(day) or optimal_day(profile, day)
			result = compute_daily_water(
				profile=profile,
				soil_multiplier=multiplier,
				weather=weather,
				water_min=estimate.water_min if estimate else None,
				water_max=estimate.water_max if estimate else None,
				time_range_override=estimate.recommended_time_range if estimate else None,
			)
			entries.append(entry_from_result(field.id, day, result))

		await self.repository.replace_pending(field.id, entries)
		await self._notify(field, entries)
		await self.repository.commit()
		return entries

	async def _estimate(
		self,
		field: SchedulableField,
		samples: Sequence[ForecastSample],
		today: date,
	) -> AdvisoryEstimate | None:
		request = AdvisoryRequest(
			crop_type=field.crop_type,
			soil_type=field.soil_type,
			latitude=field.latitude,
			longitude=field.longitude,
			month=today.month,
			forecast=summarize(samples),
		)
		try:
			return await asyncio.wait_for(
				self.advisory.estimate(request),
				timeout=self.settings.advisory_timeout_seconds,
			)
		except Exception as exc:
			logger.warning("advisory_unavailable", field_id=str(field.id), error_type=type(exc).__name__)
			return None

	async def _build_fallback(self, field: SchedulableField, today: date) -> list[ScheduleEntry]:
		snapshot = await self._load_snapshot(field)
		entries = build_fallback_plan(
			field.id,
			field.crop_type,
			field.soil_type,
			today,
			days=self.settings.fallback_horizon_days,
			snapshot=snapshot,
		)
		await self.repository.replace_pending(field.id, entries)
		await self.repository.commit()
		return entries

	async def _load_snapshot(self, field: SchedulableField) -> list[dict[str, Any]] | None:
		if self.snapshots is None:
			return None
		try:
			return await self.snapshots.load_fresh(field.latitude, field.longitude)
		except SQLAlchemyError as exc:
			logger.warning("weather_snapshot_unavailable", field_id=str(field.id), error=str(exc))
			return None

	async def _notify(self, field: SchedulableField, entries: Sequence[ScheduleEntry]) -> None:
		for entry in entries[:REMINDER_COUNT]:
			if entry.water_amount <= 0:
				continue
			await self.notifier.notify(
				field.user_id,
				NotificationCategoryEnum.irrigation,
				f"Irrigation time - {field.name}",
				f"{entry.date:%d %b} {entry.recommended_time}: {entry.water_amount} L/m² recommended.",
				self._at_midnight(entry.date),
			)

		heavy_rain = next((e for e in entries if e.note_kind == NoteKind.rain_skip), None)
		if heavy_rain is not None:
			await self.notifier.notify(
				field.user_id,
				NotificationCategoryEnum.weather_warning,
				f"Rain warning - {field.name}",
				f"Heavy rain expected on {heavy_rain.date:%A %d %b}. Irrigation may not be needed.",
				self._at_midnight(heavy_rain.date),
			)

	def _at_midnight(self, day: date) -> datetime:
		return datetime.combine(day, time.min, tzinfo=self.tz)

	async def _safe_rollback(self) -> None:
		try:
			await self.repository.rollback()
		except SQLAlchemyError as exc:
			logger.warning("schedule_rollback_failed", error=str(exc))


def build_schedule_builder(
	db: AsyncSession,
	redis_client: Redis | None = None,
	settings: Settings | None = None,
) -> ScheduleBuilder:
	settings = settings or get_settings()
	snapshots = WeatherSnapshotStore(db, settings)
	return ScheduleBuilder(
		forecast=ForecastClient(redis_client=redis_client, snapshots=snapshots, settings=settings),
		advisory=build_advisory_estimator(settings),
		repository=ScheduleRepository(db),
		notifier=NotificationService(db),
		snapshots=snapshots,
		locks=FieldLockRegistry(redis_client, settings.field_lock_timeout_seconds),
		settings=settings,
	)
