# transport_admin/services/incident/tardiness_service.py
import logging
from typing import Any, Dict, Optional
from datetime import date, datetime, timezone
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from transport_admin.models.fleet.employee import Employee
from transport_admin.models.fleet.route_session import RouteSession
from transport_admin.models.incident.notification import Notification
from transport_admin.models.incident.tardiness_report import TardinessReport
from transport_admin.models.shared.enums import (
    EmployeeRole, NotificationStatus, NotificationType, TardinessStatus
)
from transport_admin.schemas.incident.tardiness_schema import TardinessReportPayload, TardinessReviewRequest

logger = logging.getLogger(__name__)


class TardinessService:
    """Backend side of /api/tardiness: stores reports and handles coordinator review"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _todays_session_id(self, route_id: int, session_type: str, today: date) -> Optional[int]:
        result = await self.session.execute(
            select(RouteSession.id).where(
                RouteSession.route_id == route_id,
                RouteSession.session_date == today,
                RouteSession.session_type == session_type,
            ).order_by(RouteSession.id.desc()).limit(1)
        )
        return result.scalar_one_or_none()

    async def _create_notification(self, report_id: int, driver_id: int, reason: str) -> None:
        """Notify coordinators; a failure here never fails the report"""
        try:
            self.session.add(Notification(
                notification_type=NotificationType.DRIVER_TARDINESS.value,
                entity_type="tardiness_reports",
                entity_id=report_id,
                message=f"Driver {driver_id} reported a delay ({reason})",
                status=NotificationStatus.PENDING.value,
            ))
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error creating tardiness notification for report {report_id}: {e}")

    async def create_report(self, payload: TardinessReportPayload, today: Optional[date] = None) -> Dict[str, Any]:
        if not payload.driverId or not payload.sessionType or not payload.reason:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Missing required fields: driverId, sessionType, and reason are required"
            )

        today = today or date.today()
        try:
            route_session_id = payload.routeSessionId
            if not route_session_id and payload.routeId:
                route_session_id = await self._todays_session_id(payload.routeId, payload.sessionType, today)

            report = TardinessReport(
                driver_id=payload.driverId,
                route_id=payload.routeId or None,
                route_session_id=route_session_id,
                session_type=payload.sessionType,
                session_date=today,
                reason=payload.reason,
                additional_notes=payload.additionalNotes or None,
                status=TardinessStatus.PENDING.value,
            )
            self.session.add(report)
            await self.session.commit()
            await self.session.refresh(report)

        except HTTPException:
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error inserting tardiness report: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to create tardiness report"
            )

        report_id = report.id
        await self._create_notification(report_id, payload.driverId, payload.reason)
        logger.info(f"Tardiness report {report_id} created for driver {payload.driverId}")
        return {
            "success": True,
            "tardinessReportId": report_id,
            "message": "Tardiness report submitted successfully",
        }

    async def _review(self, request: TardinessReviewRequest, new_status: TardinessStatus) -> Dict[str, Any]:
        verb = "approve" if new_status == TardinessStatus.APPROVED else "decline"
        if not request.tardinessReportId:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Missing required field: tardinessReportId"
            )

        try:
            coordinator_id = None
            if request.coordinatorId:
                coordinator = await self.session.get(Employee, request.coordinatorId)
                if coordinator and coordinator.role != EmployeeRole.COORDINATOR.value:
                    raise HTTPException(
                        status_code=status.HTTP_403_FORBIDDEN,
                        detail=f"Only coordinators can {verb} tardiness reports"
                    )
                coordinator_id = coordinator.id if coordinator else None

            report = await self.session.get(TardinessReport, request.tardinessReportId)
            if not report:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tardiness report not found")

            now = datetime.now(timezone.utc)
            # Only pending reports are reviewed
            if report.status == TardinessStatus.PENDING.value:
                report.status = new_status.value
                report.coordinator_id = coordinator_id
                report.coordinator_notes = request.coordinatorNotes or None
                report.reviewed_at = now

                result = await self.session.execute(
                    select(Notification).where(
                        Notification.notification_type == NotificationType.DRIVER_TARDINESS.value,
                        Notification.entity_id == report.id,
                        Notification.status == NotificationStatus.PENDING.value,
                    )
                )
                for notification in result.scalars().all():
                    notification.status = NotificationStatus.RESOLVED.value
                    notification.resolved_at = now

                await self.session.commit()
                logger.info(f"Tardiness report {report.id} {new_status.value}")
            else:
                logger.info(f"Tardiness report {report.id} already {report.status}, left unchanged")

            return {
                "success": True,
                "message": f"Tardiness report {new_status.value} successfully",
            }

        except HTTPException:
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error trying to {verb} tardiness report: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to {verb} tardiness report"
            )

    async def approve(self, request: TardinessReviewRequest) -> Dict[str, Any]:
        return await self._review(request, TardinessStatus.APPROVED)

    async def decline(self, request: TardinessReviewRequest) -> Dict[str, Any]:
        return await self._review(request, TardinessStatus.DECLINED)
