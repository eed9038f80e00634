from __future__ import annotations

from datetime import UTC, date, datetime
from types import SimpleNamespace
from typing import Any
from uuid import UUID, uuid4

import pytest
from httpx import AsyncClient

from app.engine.schedule import ScheduleBuildResult, ScheduleEntry, ScheduleSource
from app.schemas.field import FieldUpdate
from app.services.field_service import FieldService


class _FieldStub(SimpleNamespace):
    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


def _field_obj(user_id: UUID, **overrides: Any) -> _FieldStub:
    now = datetime.now(UTC)
    values = {
        "id": uuid4(),
        "user_id": user_id,
        "name": "North plot",
        "crop_type": "Domates",
        "soil_type": "Tınlı",
        "location": "Polatlı",
        "latitude": 39.58,
        "longitude": 32.14,
        "area": 12.5,
        "created_at": now,
        "updated_at": now,
    }
    values.update(overrides)
    return _FieldStub(**values)


def _entry(field_id: UUID) -> ScheduleEntry:
    return ScheduleEntry(
        field_id=field_id,
        date=date(2026, 7, 15),
        recommended_time="06:00-08:00",
        water_amount=7.8,
        weather_temp=25.3,
        weather_humidity=58.0,
        weather_condition="clear sky",
    )


@pytest.mark.asyncio
async def test_create_field_returns_initial_schedule(
    client: AsyncClient, monkeypatch: pytest.MonkeyPatch, user_id: UUID
) -> None:
    field = _field_obj(user_id)
    captured: dict[str, Any] = {}

    async def fake_create(self: FieldService, owner: UUID, payload: Any) -> tuple[object, ScheduleBuildResult]:
        captured["owner"] = owner
        captured["payload"] = payload
        return field, ScheduleBuildResult(field.id, ScheduleSource.primary, (_entry(field.id),))

    monkeypatch.setattr(FieldService, "create_field", fake_create)

    response = await client.post(
        "/api/v1/fields",
        json={"name": "North plot", "crop_type": "Domates", "soil_type": "Tınlı", "latitude": 39.58, "longitude": 32.14},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["name"] == "North plot"
    assert body["schedule"]["source"] == "primary"
    assert body["schedule"]["entries"][0]["water_amount"] == 7.8
    assert body["schedule"]["entries"][0]["status"] == "pending"
    assert captured["owner"] == user_id
    assert captured["payload"].soil_type == "Tınlı"


@pytest.mark.asyncio
async def test_create_field_validates_payload(client: AsyncClient) -> None:
    response = await client.post("/api/v1/fields", json={"name": "", "crop_type": "Domates", "latitude": 120})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_fields_includes_next_irrigation(
    client: AsyncClient, monkeypatch: pytest.MonkeyPatch, user_id: UUID
) -> None:
    field = _field_obj(user_id)
    upcoming = _entry(field.id)

    async def fake_list(self: FieldService, owner: UUID) -> list[object]:
        return [field]

    async def fake_next(self: FieldService, field_ids: list[UUID], today: date | None = None) -> dict[UUID, object]:
        return {field.id: upcoming}

    monkeypatch.setattr(FieldService, "list_fields", fake_list)
    monkeypatch.setattr(FieldService, "next_pending", fake_next)

    response = await client.get("/api/v1/fields")

    assert response.status_code == 200
    items = response.json()["items"]
    assert len(items) == 1
    assert items[0]["next_irrigation"]["recommended_time"] == "06:00-08:00"


@pytest.mark.asyncio
async def test_get_missing_field_is_404(client: AsyncClient, monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_get(self: FieldService, owner: UUID, field_id: UUID) -> object:
        raise LookupError(f"Field {field_id} not found")

    monkeypatch.setattr(FieldService, "get_field", fake_get)

    response = await client.get(f"/api/v1/fields/{uuid4()}")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_recalculate_without_location_is_400(client: AsyncClient, monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_recalculate(self: FieldService, owner: UUID, field_id: UUID) -> ScheduleBuildResult:
        raise ValueError("Field location must be set before calculating a schedule")

    monkeypatch.setattr(FieldService, "recalculate", fake_recalculate)

    response = await client.post(f"/api/v1/fields/{uuid4()}/irrigation/recalculate")

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_recalculate_reports_failed_schedule(client: AsyncClient, monkeypatch: pytest.MonkeyPatch) -> None:
    field_id = uuid4()

    async def fake_recalculate(self: FieldService, owner: UUID, target: UUID) -> ScheduleBuildResult:
        return ScheduleBuildResult(target, ScheduleSource.failed)

    monkeypatch.setattr(FieldService, "recalculate", fake_recalculate)

    response = await client.post(f"/api/v1/fields/{field_id}/irrigation/recalculate")

    assert response.status_code == 200
    assert response.json() == {"field_id": str(field_id), "source": "failed", "entries": []}


@pytest.mark.asyncio
async def test_delete_field(client: AsyncClient, monkeypatch: pytest.MonkeyPatch) -> None:
    deleted: list[UUID] = []

    async def fake_delete(self: FieldService, owner: UUID, field_id: UUID) -> None:
        deleted.append(field_id)

    monkeypatch.setattr(FieldService, "delete_field", fake_delete)
    field_id = uuid4()

    response = await client.delete(f"/api/v1/fields/{field_id}")

    assert response.status_code == 204
    assert deleted == [field_id]


class _RecordingScheduler:
    def __init__(self) -> None:
        self.built: list[object] = []

    async def build(self, field: Any) -> ScheduleBuildResult:
        self.built.append(field)
        return ScheduleBuildResult(field.id, ScheduleSource.primary)


def _update_payload(**overrides: Any) -> FieldUpdate:
    values = {
        "name": "North plot",
        "crop_type": "Domates",
        "soil_type": "Tınlı",
        "location": "Polatlı",
        "latitude": 39.58,
        "longitude": 32.14,
        "area": 12.5,
    }
    values.update(overrides)
    return FieldUpdate(**values)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("changes", "rebuilds"),
    [
        ({"name": "Renamed"}, False),
        ({"crop_type": "Biber"}, True),
        ({"soil_type": "Kumlu"}, True),
        ({"latitude": 40.0}, True),
        ({"latitude": None, "longitude": None}, False),
    ],
)
async def test_update_rebuilds_only_on_agronomic_change(
    fake_db_session: Any,
    monkeypatch: pytest.MonkeyPatch,
    user_id: UUID,
    changes: dict[str, Any],
    rebuilds: bool,
) -> None:
    field = _field_obj(user_id)

    async def fake_get(self: FieldService, owner: UUID, field_id: UUID) -> object:
        return field

    monkeypatch.setattr(FieldService, "get_field", fake_get)
    scheduler = _RecordingScheduler()
    service = FieldService(fake_db_session, scheduler)  # type: ignore[arg-type]

    _, result = await service.update_field(user_id, field.id, _update_payload(**changes))

    assert (len(scheduler.built) == 1) is rebuilds
    assert (result is not None) is rebuilds
    fake_db_session.commit.assert_awaited()


@pytest.mark.asyncio
async def test_recalculate_requires_coordinates(
    fake_db_session: Any, monkeypatch: pytest.MonkeyPatch, user_id: UUID
) -> None:
    field = _field_obj(user_id, latitude=None, longitude=None)

    async def fake_get(self: FieldService, owner: UUID, field_id: UUID) -> object:
        return field

    monkeypatch.setattr(FieldService, "get_field", fake_get)
    service = FieldService(fake_db_session, _RecordingScheduler())  # type: ignore[arg-type]

    with pytest.raises(ValueError):
        await service.recalculate(user_id, field.id)


@pytest.mark.asyncio
async def test_create_field_commits_then_builds(fake_db_session: Any, user_id: UUID) -> None:
    scheduler = _RecordingScheduler()
    service = FieldService(fake_db_session, scheduler)  # type: ignore[arg-type]
    payload = _update_payload()

    field, result = await service.create_field(user_id, payload)

    fake_db_session.add.assert_called_once_with(field)
    fake_db_session.commit.assert_awaited_once()
    assert scheduler.built == [field]
    assert field.user_id == user_id
    assert field.crop_type == "Domates"
    assert result.source is ScheduleSource.primary
