import pytest
from datetime import date, datetime, timezone
from typing import Dict, List, Optional

from transport_admin.core.exceptions import BackendError, NotFoundError, StorageError
from transport_admin.models.shared.enums import AuditAction, SessionType
from transport_admin.schemas.fleet.driver_schema import DriverRecord
from transport_admin.schemas.incident.breakdown_schema import BreakdownRecord
from transport_admin.schemas.session.start_session_schema import (
    ActiveSession, RouteSessionRecord, StartSessionResult
)


class FakeStorage:
    """Blob storage that records uploads and fails on chosen call numbers"""

    def __init__(self, fail_on: Optional[set] = None):
        self.fail_on = fail_on or set()
        self.uploads: List[str] = []
        self._calls = 0

    async def upload(self, bucket, path, data, content_type="application/octet-stream"):
        self._calls += 1
        if self._calls in self.fail_on:
            raise StorageError("upload failed")
        self.uploads.append(path)
        return path

    def get_public_url(self, bucket, path):
        return f"https://cdn.test/{bucket}/{path}"


class FakeBackend:
    """Backend double counting calls made by the orchestrator"""

    def __init__(self, driver: Optional[DriverRecord]):
        self.driver = driver
        self.calls: List[str] = []
        self.start_result = StartSessionResult(
            success=True, session_id=501, message="AM session started successfully",
            route_name="R12", session_type=SessionType.AM, session_date=date(2026, 10, 19),
        )
        self.start_error: Optional[Exception] = None
        self.insert_error: Optional[Exception] = None
        self.inserted: List[Dict] = []
        self.sessions: Dict[int, RouteSessionRecord] = {}
        self.active: List[ActiveSession] = []
        self.breakdowns: List[int] = []

    async def get_driver_by_token(self, qr_token):
        self.calls.append("get_driver")
        if self.driver and self.driver.qr_token == qr_token:
            return self.driver
        return None

    async def list_active_sessions(self, driver_id):
        self.calls.append("list_active")
        return list(self.active)

    async def start_route_session(self, qr_token, session_type):
        self.calls.append(f"start:{SessionType(session_type).value}")
        if self.start_error:
            raise self.start_error
        return self.start_result

    async def insert_vehicle_pre_check(self, values):
        self.calls.append("insert_pre_check")
        self.inserted.append(values)
        if self.insert_error:
            raise self.insert_error
        return 77

    async def get_route_session(self, session_id):
        return self.sessions.get(session_id)

    async def end_route_session(self, session_id):
        self.calls.append("end")
        record = self.sessions.get(session_id)
        if record is None:
            raise NotFoundError("Route session not found")
        record.ended_at = datetime.now(timezone.utc)
        return record

    async def report_vehicle_breakdown(self, session_id, description=None, location=None):
        self.calls.append("breakdown")
        self.breakdowns.append(session_id)
        return BreakdownRecord(
            id=len(self.breakdowns), route_session_id=session_id, vehicle_id=9, driver_id=1,
            description=description, location=location,
            reported_at=datetime.now(timezone.utc), status="reported",
        )


class RecordingAuditLogger:
    def __init__(self):
        self.entries = []

    def log(self, table_name, record_id, action: AuditAction):
        self.entries.append((table_name, record_id, AuditAction(action)))


@pytest.fixture
def driver_record() -> DriverRecord:
    return DriverRecord(
        employee_id=1, full_name="Sam Carter", qr_token="tok-1",
        route_id=12, route_number="R12", vehicle_id=9, vehicle_registration="AB12 CDE",
    )


@pytest.fixture
def fake_backend(driver_record) -> FakeBackend:
    return FakeBackend(driver_record)


@pytest.fixture
def fake_storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def audit_recorder() -> RecordingAuditLogger:
    return RecordingAuditLogger()


@pytest.fixture
def backend_error() -> BackendError:
    return BackendError("Failed to save vehicle pre-check")


@pytest.fixture
def failing_storage() -> FakeStorage:
    """Second upload fails"""
    return FakeStorage(fail_on={2})
