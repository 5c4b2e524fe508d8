# transport_admin/backend/client.py
import logging
from typing import Any, Dict, List, Optional, Type, TypeVar
from datetime import datetime, timezone
from pydantic import BaseModel, ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from transport_admin.backend import procedures
from transport_admin.core.exceptions import (
    BackendError, MalformedResponseError, NotFoundError, ValidationError
)
from transport_admin.models.fleet.driver import Driver
from transport_admin.models.fleet.route import Route
from transport_admin.models.fleet.route_session import RouteSession
from transport_admin.models.fleet.vehicle_pre_check import VehiclePreCheck
from transport_admin.models.shared.enums import SessionType
from transport_admin.schemas.fleet.driver_schema import DriverRecord
from transport_admin.schemas.incident.breakdown_schema import BreakdownRecord
from transport_admin.schemas.session.start_session_schema import (
    ActiveSession, RouteSessionRecord, StartSessionResult
)

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


def parse_response(model: Type[T], raw: Any) -> T:
    """Validate a backend row or procedure result into its typed struct"""
    try:
        if isinstance(raw, dict):
            return model.model_validate(raw)
        return model.model_validate(raw, from_attributes=True)
    except PydanticValidationError as e:
        logger.error(f"Malformed {model.__name__} from backend: {e}")
        raise MalformedResponseError(f"Malformed {model.__name__} from backend")


class BackendClient:
    """Process-scoped handle to the route-session backend.

    Built once at start-up and injected into the workflow; every call opens
    its own short-lived database session.
    """

    def __init__(self, session_maker: async_sessionmaker):
        self._session_maker = session_maker

    async def get_driver_by_token(self, qr_token: str) -> Optional[DriverRecord]:
        """Resolve a QR token to its driver, assigned route and vehicle"""
        try:
            async with self._session_maker() as session:
                result = await session.execute(
                    select(Driver)
                    .options(selectinload(Driver.employee))
                    .where(Driver.qr_token == qr_token, Driver.is_deleted == False)
                )
                driver = result.scalar_one_or_none()
                if not driver:
                    return None

                route = await self._assigned_route(session, driver.employee_id)
                vehicle = route.vehicle if route else None
                raw = {
                    "employee_id": driver.employee_id,
                    "full_name": driver.employee.full_name if driver.employee else None,
                    "qr_token": driver.qr_token,
                    "route_id": route.id if route else None,
                    "route_number": route.route_number if route else None,
                    "vehicle_id": vehicle.id if vehicle else None,
                    "vehicle_registration": (vehicle.registration or vehicle.plate_number) if vehicle else None,
                }
        except SQLAlchemyError as e:
            logger.error(f"Error resolving driver token: {str(e)}")
            raise BackendError("Failed to load driver")
        return parse_response(DriverRecord, raw)

    async def _assigned_route(self, session: AsyncSession, driver_id: int) -> Optional[Route]:
        result = await session.execute(
            select(Route)
            .options(selectinload(Route.vehicle))
            .where(Route.driver_id == driver_id, Route.is_deleted == False)
            .order_by(Route.id)
        )
        return result.scalars().first()

    async def list_active_sessions(self, driver_id: int) -> List[ActiveSession]:
        """Sessions started and not yet ended for a driver"""
        try:
            async with self._session_maker() as session:
                result = await session.execute(
                    select(RouteSession)
                    .options(selectinload(RouteSession.route))
                    .where(
                        RouteSession.driver_id == driver_id,
                        RouteSession.ended_at.is_(None),
                        RouteSession.started_at.is_not(None),
                    )
                    .order_by(RouteSession.session_date.desc(), RouteSession.session_type.asc())
                )
                rows = [
                    {
                        "id": s.id,
                        "session_date": s.session_date,
                        "session_type": s.session_type,
                        "started_at": s.started_at,
                        "route_id": s.route_id,
                        "route_name": s.route.route_number if s.route else None,
                    }
                    for s in result.scalars().all()
                ]
        except SQLAlchemyError as e:
            logger.error(f"Error loading active sessions for driver {driver_id}: {str(e)}")
            raise BackendError("Failed to load active sessions")
        return [parse_response(ActiveSession, row) for row in rows]

    async def get_route_session(self, session_id: int) -> Optional[RouteSessionRecord]:
        try:
            async with self._session_maker() as session:
                route_session = await session.get(RouteSession, session_id)
                if not route_session:
                    return None
                return parse_response(RouteSessionRecord, route_session)
        except SQLAlchemyError as e:
            logger.error(f"Error loading route session {session_id}: {str(e)}")
            raise BackendError("Failed to load route session")

    async def start_route_session(self, qr_token: str, session_type: SessionType) -> StartSessionResult:
        """Call the start-session procedure and validate its structured result"""
        try:
            async with self._session_maker() as session:
                raw = await procedures.start_route_session_from_qr(
                    session, p_qr_token=qr_token, p_session_type=SessionType(session_type).value
                )
        except SQLAlchemyError as e:
            logger.error(f"Start session procedure failed: {str(e)}")
            raise BackendError("Failed to start session")
        return parse_response(StartSessionResult, raw)

    async def end_route_session(self, session_id: int) -> RouteSessionRecord:
        try:
            async with self._session_maker() as session:
                route_session = await session.get(RouteSession, session_id)
                if not route_session:
                    raise NotFoundError("Route session not found")
                if route_session.ended_at is None:
                    route_session.ended_at = datetime.now(timezone.utc)
                    await session.commit()
                    await session.refresh(route_session)
                    logger.info(f"Route session {session_id} ended")
                return parse_response(RouteSessionRecord, route_session)
        except SQLAlchemyError as e:
            logger.error(f"Error ending route session {session_id}: {str(e)}")
            raise BackendError("Error ending session")

    async def insert_vehicle_pre_check(self, values: Dict[str, Any]) -> int:
        """Insert a vehicle_pre_checks row, returning its generated id"""
        try:
            async with self._session_maker() as session:
                pre_check = VehiclePreCheck(**values)
                session.add(pre_check)
                await session.commit()
                await session.refresh(pre_check)
                return pre_check.id
        except SQLAlchemyError as e:
            logger.error(f"Error inserting vehicle pre-check: {str(e)}")
            raise BackendError("Failed to save vehicle pre-check")

    async def report_vehicle_breakdown(
        self,
        route_session_id: int,
        description: Optional[str] = None,
        location: Optional[str] = None
    ) -> BreakdownRecord:
        try:
            async with self._session_maker() as session:
                raw = await procedures.report_vehicle_breakdown(
                    session,
                    p_route_session_id=route_session_id,
                    p_description=description,
                    p_location=location,
                )
        except LookupError as e:
            raise NotFoundError(str(e))
        except ValueError as e:
            raise ValidationError(str(e))
        except SQLAlchemyError as e:
            logger.error(f"Breakdown procedure failed: {str(e)}")
            raise BackendError("Failed to report breakdown")
        return parse_response(BreakdownRecord, raw)
