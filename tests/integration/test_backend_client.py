import pytest
from datetime import date
from sqlalchemy import select

from transport_admin.backend.client import parse_response
from transport_admin.core.exceptions import MalformedResponseError, NotFoundError, ValidationError
from transport_admin.models import Notification, VehicleBreakdown
from transport_admin.models.shared.enums import SessionType
from transport_admin.schemas.precheck.pre_check_schema import CHECKLIST_FIELDS
from transport_admin.schemas.session.start_session_schema import StartSessionResult


@pytest.mark.asyncio
class TestDriverLookup:
    async def test_driver_with_route_and_vehicle(self, backend, seed):
        record = await backend.get_driver_by_token(seed.driver_token)
        assert record.employee_id == seed.driver_id
        assert record.full_name == "Sam Carter"
        assert record.route_id == seed.route_id
        assert record.route_number == "R12"
        assert record.vehicle_id == seed.vehicle_id
        assert record.vehicle_registration == "AB12 CDE"

    async def test_driver_without_route(self, backend, seed):
        record = await backend.get_driver_by_token(seed.spare_token)
        assert record.employee_id == seed.spare_driver_id
        assert record.route_id is None
        assert record.vehicle_id is None

    async def test_unknown_token(self, backend, seed):
        assert await backend.get_driver_by_token("not-a-token") is None


@pytest.mark.asyncio
class TestStartProcedure:
    async def test_start_am_session(self, backend, seed):
        result = await backend.start_route_session(seed.driver_token, SessionType.AM)

        assert result.success
        assert result.message == "AM session started successfully"
        assert result.route_name == "R12"
        assert result.session_type == SessionType.AM
        assert result.session_date == date.today()

        active = await backend.list_active_sessions(seed.driver_id)
        assert [s.id for s in active] == [result.session_id]
        assert active[0].route_name == "R12"

    async def test_one_active_session_per_half_day(self, backend, seed):
        first = await backend.start_route_session(seed.driver_token, SessionType.AM)
        second = await backend.start_route_session(seed.driver_token, SessionType.AM)
        pm = await backend.start_route_session(seed.driver_token, SessionType.PM)

        assert first.success
        assert not second.success
        assert second.error == (
            "An active AM session is already in progress. End it before starting a new one."
        )
        assert pm.success

    async def test_ended_session_frees_the_half_day(self, backend, seed):
        first = await backend.start_route_session(seed.driver_token, SessionType.AM)
        ended = await backend.end_route_session(first.session_id)
        assert ended.ended_at is not None

        again = await backend.start_route_session(seed.driver_token, SessionType.AM)
        assert again.success
        assert again.session_id != first.session_id

    async def test_invalid_token(self, backend, seed):
        result = await backend.start_route_session("stale-token", SessionType.PM)
        assert not result.success
        assert result.error == "Invalid or expired QR code"

    async def test_driver_without_route_starts_unassigned(self, backend, seed):
        result = await backend.start_route_session(seed.spare_token, SessionType.PM)
        assert result.success
        assert result.route_name is None
        record = await backend.get_route_session(result.session_id)
        assert record.route_id is None

    async def test_end_missing_session(self, backend, seed):
        with pytest.raises(NotFoundError):
            await backend.end_route_session(9999)


@pytest.mark.asyncio
class TestPreCheckInsert:
    async def test_insert_returns_id(self, backend, seed):
        result = await backend.start_route_session(seed.driver_token, SessionType.AM)
        pre_check_id = await backend.insert_vehicle_pre_check({
            "route_session_id": result.session_id,
            "driver_id": seed.driver_id,
            "vehicle_id": seed.vehicle_id,
            "route_id": seed.route_id,
            "session_type": "AM",
            "check_date": date.today(),
            **{field: True for field in CHECKLIST_FIELDS},
            "notes": "",
            "issues_found": "",
            "media_urls": [{"type": "image", "url": "http://test/storage/x.jpg"}],
        })
        assert isinstance(pre_check_id, int)


@pytest.mark.asyncio
class TestBreakdownProcedure:
    async def test_breakdown_on_active_session(self, backend, seed, session_maker):
        result = await backend.start_route_session(seed.driver_token, SessionType.AM)

        breakdown = await backend.report_vehicle_breakdown(result.session_id, "Engine warning light", "School gate")

        assert breakdown.route_session_id == result.session_id
        assert breakdown.vehicle_id == seed.vehicle_id
        assert breakdown.driver_id == seed.driver_id
        assert breakdown.status == "reported"

        async with session_maker() as session:
            notifications = (await session.execute(select(Notification))).scalars().all()
            assert len(notifications) == 1
            assert notifications[0].notification_type == "vehicle_breakdown"
            assert notifications[0].entity_id == breakdown.id

    async def test_breakdown_needs_active_session(self, backend, seed, session_maker):
        result = await backend.start_route_session(seed.driver_token, SessionType.PM)
        await backend.end_route_session(result.session_id)

        with pytest.raises(ValidationError):
            await backend.report_vehicle_breakdown(result.session_id)
        with pytest.raises(NotFoundError):
            await backend.report_vehicle_breakdown(424242)

        async with session_maker() as session:
            assert (await session.execute(select(VehicleBreakdown))).scalars().all() == []


class TestParseResponse:
    def test_malformed_result(self):
        with pytest.raises(MalformedResponseError):
            parse_response(StartSessionResult, {"session_id": "not-a-number"})

    def test_valid_result(self):
        result = parse_response(StartSessionResult, {"success": False, "error": "Invalid or expired QR code"})
        assert result.error == "Invalid or expired QR code"
