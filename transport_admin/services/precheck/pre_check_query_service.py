import logging
from typing import List, Optional
from datetime import date
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from transport_admin.models.fleet.employee import Employee
from transport_admin.models.fleet.route import Route
from transport_admin.models.fleet.vehicle_pre_check import VehiclePreCheck
from transport_admin.schemas.precheck.pre_check_schema import (
    CHECKLIST_FIELDS, CHECKLIST_LABELS, VehiclePreCheckResponse
)

logger = logging.getLogger(__name__)


class PreCheckQueryService:
    """Read side of vehicle_pre_checks for coordinators"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_pre_checks(self, check_date: date, driver_id: Optional[int] = None) -> List[VehiclePreCheckResponse]:
        try:
            query = (
                select(VehiclePreCheck, Employee.full_name, Route.route_number)
                .outerjoin(Employee, Employee.id == VehiclePreCheck.driver_id)
                .outerjoin(Route, Route.id == VehiclePreCheck.route_id)
                .options(selectinload(VehiclePreCheck.vehicle))
                .where(VehiclePreCheck.check_date == check_date, VehiclePreCheck.is_deleted == False)
            )
            if driver_id:
                query = query.where(VehiclePreCheck.driver_id == driver_id)
            query = query.order_by(VehiclePreCheck.completed_at.desc(), VehiclePreCheck.id.desc())

            result = await self.session.execute(query)
            return [
                self._to_response(pre_check, driver_name, route_number)
                for pre_check, driver_name, route_number in result.all()
            ]

        except Exception as e:
            logger.error(f"Error listing vehicle pre-checks for {check_date}: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error retrieving vehicle pre-checks"
            )

    @staticmethod
    def _to_response(pre_check: VehiclePreCheck, driver_name: Optional[str], route_number: Optional[str]) -> VehiclePreCheckResponse:
        checks = {field: bool(getattr(pre_check, field)) for field in CHECKLIST_FIELDS}
        failed_items = [CHECKLIST_LABELS[field] for field, passed in checks.items() if not passed]
        vehicle = pre_check.vehicle
        return VehiclePreCheckResponse(
            id=pre_check.id,
            route_session_id=pre_check.route_session_id,
            driver_id=pre_check.driver_id,
            driver_name=driver_name,
            vehicle_id=pre_check.vehicle_id,
            vehicle_registration=(vehicle.registration or vehicle.plate_number) if vehicle else None,
            route_number=route_number,
            session_type=pre_check.session_type,
            check_date=pre_check.check_date,
            completed_at=pre_check.completed_at,
            checks=checks,
            all_passed=not failed_items,
            failed_items=failed_items,
            notes=pre_check.notes,
            issues_found=pre_check.issues_found,
            media_urls=pre_check.media_urls or None,
        )
