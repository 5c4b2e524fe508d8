# transport_admin/backend/procedures.py
"""
Stored procedures of the route-session backend.

Each procedure runs in its own transaction on the given session and returns
a plain JSON-like dict, the same shape a database RPC would hand back. The
"at most one active session per half-day per driver" invariant lives here
and nowhere else.
"""
import logging
from typing import Any, Dict, Optional
from datetime import date, datetime, timezone
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from transport_admin.models.fleet.driver import Driver
from transport_admin.models.fleet.route import Route
from transport_admin.models.fleet.route_session import RouteSession
from transport_admin.models.incident.notification import Notification
from transport_admin.models.incident.vehicle_breakdown import VehicleBreakdown
from transport_admin.models.shared.enums import (
    BreakdownStatus, NotificationStatus, NotificationType, SessionType
)

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


async def start_route_session_from_qr(
    session: AsyncSession,
    p_qr_token: str,
    p_session_type: str,
    p_session_date: Optional[date] = None
) -> Dict[str, Any]:
    """Start an AM/PM route session for the driver owning the QR token"""
    if p_session_type not in (SessionType.AM.value, SessionType.PM.value):
        return {"success": False, "error": "Session type must be AM or PM"}

    result = await session.execute(
        select(Driver).where(Driver.qr_token == p_qr_token, Driver.is_deleted == False)
    )
    driver = result.scalar_one_or_none()
    if not driver:
        return {"success": False, "error": "Invalid or expired QR code"}

    result = await session.execute(
        select(RouteSession).where(
            RouteSession.driver_id == driver.employee_id,
            RouteSession.session_type == p_session_type,
            RouteSession.started_at.is_not(None),
            RouteSession.ended_at.is_(None),
        )
    )
    if result.scalars().first():
        return {
            "success": False,
            "error": (
                f"An active {p_session_type} session is already in progress. "
                "End it before starting a new one."
            ),
        }

    result = await session.execute(
        select(Route).where(Route.driver_id == driver.employee_id, Route.is_deleted == False)
        .order_by(Route.id)
    )
    route = result.scalars().first()

    session_date = p_session_date or date.today()
    route_session = RouteSession(
        driver_id=driver.employee_id,
        route_id=route.id if route else None,
        session_date=session_date,
        session_type=p_session_type,
        started_at=_now(),
    )
    session.add(route_session)
    await session.commit()
    await session.refresh(route_session)

    logger.info(
        f"Route session {route_session.id} started for driver {driver.employee_id} "
        f"({p_session_type} {session_date.isoformat()})"
    )
    return {
        "success": True,
        "session_id": route_session.id,
        "message": f"{p_session_type} session started successfully",
        "route_name": route.route_number if route else None,
        "session_type": p_session_type,
        "session_date": session_date.isoformat(),
    }


async def report_vehicle_breakdown(
    session: AsyncSession,
    p_route_session_id: int,
    p_description: Optional[str] = None,
    p_location: Optional[str] = None
) -> Dict[str, Any]:
    """Record a breakdown against an active route session and notify coordinators"""
    result = await session.execute(
        select(RouteSession).where(RouteSession.id == p_route_session_id)
    )
    route_session = result.scalar_one_or_none()
    if not route_session:
        raise LookupError(f"Route session {p_route_session_id} not found")
    if route_session.ended_at is not None:
        raise ValueError("Breakdowns can only be reported for an active session")

    vehicle_id = None
    if route_session.route_id:
        route = await session.get(Route, route_session.route_id)
        vehicle_id = route.vehicle_id if route else None

    breakdown = VehicleBreakdown(
        route_session_id=route_session.id,
        vehicle_id=vehicle_id,
        driver_id=route_session.driver_id,
        description=p_description,
        location=p_location,
        reported_at=_now(),
        status=BreakdownStatus.REPORTED.value,
    )
    session.add(breakdown)
    await session.flush()

    session.add(Notification(
        notification_type=NotificationType.VEHICLE_BREAKDOWN.value,
        entity_type="vehicle_breakdowns",
        entity_id=breakdown.id,
        message=p_description or "Vehicle breakdown reported",
        status=NotificationStatus.PENDING.value,
    ))
    await session.commit()
    await session.refresh(breakdown)

    logger.warning(f"🚨 Breakdown {breakdown.id} reported for route session {route_session.id}")
    return {
        "id": breakdown.id,
        "route_session_id": breakdown.route_session_id,
        "vehicle_id": breakdown.vehicle_id,
        "driver_id": breakdown.driver_id,
        "description": breakdown.description,
        "location": breakdown.location,
        "reported_at": breakdown.reported_at.isoformat(),
        "status": breakdown.status,
    }
