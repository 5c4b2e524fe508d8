import pytest
from datetime import date, timedelta
from types import SimpleNamespace
from typing import AsyncGenerator
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from transport_admin.main import app
from transport_admin.backend.client import BackendClient
from transport_admin.backend.storage import LocalBlobStorage
from transport_admin.core.database import get_async_session
from transport_admin.models import Driver, Employee, Route, Vehicle
from transport_admin.models.shared.enums import Base, EmployeeRole
from transport_admin.services.incident.tardiness_reporter import TardinessReporter
from transport_admin.services.precheck.capture import PreviewStore
from transport_admin.services.precheck.media_service import MediaUploadService
from transport_admin.services.precheck.pre_check_form import PreCheckFormFactory
from transport_admin.services.session.workflow_registry import WorkflowRegistry
from transport_admin.services.system.audit_service import AuditLogger
from transport_admin.utils.file_handler import MediaFileValidator

# In-memory database, one per test
TEST_DATABASE_URL = "sqlite+aiosqlite://"

DRIVER_TOKEN = "driver-token-0001"
NO_ROUTE_TOKEN = "driver-token-0002"


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(test_engine) -> async_sessionmaker:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


@pytest.fixture
async def seed(session_maker) -> SimpleNamespace:
    """One driver with route R12 and vehicle, one driver with no route, one coordinator"""
    today = date.today()
    async with session_maker() as session:
        driver_employee = Employee(full_name="Sam Carter", role=EmployeeRole.DRIVER.value,
                                   personal_email="sam.carter@example.com")
        spare_employee = Employee(full_name="Robin Hale", role=EmployeeRole.DRIVER.value,
                                  personal_email="robin.hale@example.com")
        coordinator = Employee(full_name="Ash Patel", role=EmployeeRole.COORDINATOR.value,
                               personal_email="ash.patel@example.com")
        session.add_all([driver_employee, spare_employee, coordinator])
        await session.flush()

        driver = Driver(
            employee_id=driver_employee.id,
            qr_token=DRIVER_TOKEN,
            tas_badge_number="TAS-1001",
            dbs_expiry_date=today + timedelta(days=14),
            passport_expiry_date=today - timedelta(days=3),
            driving_license_expiry_date=today + timedelta(days=200),
        )
        spare_driver = Driver(employee_id=spare_employee.id, qr_token=NO_ROUTE_TOKEN)
        vehicle = Vehicle(
            vehicle_identifier="BUS-07",
            registration="AB12 CDE",
            mot_expiry_date=today + timedelta(days=25),
            insurance_expiry_date=today + timedelta(days=60),
        )
        session.add_all([driver, spare_driver, vehicle])
        await session.flush()

        route = Route(route_number="R12", driver_id=driver_employee.id, vehicle_id=vehicle.id)
        session.add(route)
        await session.commit()

        return SimpleNamespace(
            driver_id=driver_employee.id,
            driver_token=DRIVER_TOKEN,
            spare_driver_id=spare_employee.id,
            spare_token=NO_ROUTE_TOKEN,
            coordinator_id=coordinator.id,
            vehicle_id=vehicle.id,
            route_id=route.id,
        )


@pytest.fixture
def backend(session_maker) -> BackendClient:
    return BackendClient(session_maker)


@pytest.fixture
def storage(tmp_path) -> LocalBlobStorage:
    return LocalBlobStorage(str(tmp_path / "storage"), "http://test/storage")


@pytest.fixture
def preview_store(tmp_path) -> PreviewStore:
    return PreviewStore(str(tmp_path / "previews"), "/previews")


@pytest.fixture
def validator() -> MediaFileValidator:
    return MediaFileValidator(max_video_size=1024 * 1024, max_image_size=512 * 1024)


@pytest.fixture
def form_factory(storage, preview_store, validator) -> PreCheckFormFactory:
    return PreCheckFormFactory(
        media_service=MediaUploadService(storage, "VEHICLE_DOCUMENTS"),
        preview_store=preview_store,
        validator=validator,
    )


@pytest.fixture
async def client(session_maker, backend, form_factory, seed) -> AsyncGenerator[AsyncClient, None]:
    """API client; outbound workflow calls are routed back into the same app"""
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        audit_logger = AuditLogger(ac, enabled=False)
        app.state.backend = backend
        app.state.audit_logger = audit_logger
        app.state.workflows = WorkflowRegistry(
            backend=backend,
            form_factory=form_factory,
            tardiness_reporter=TardinessReporter(ac),
            audit_logger=audit_logger,
        )
        yield ac
        app.state.workflows.close_all()
    app.dependency_overrides.clear()
