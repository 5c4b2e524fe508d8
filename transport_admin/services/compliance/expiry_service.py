# transport_admin/services/compliance/expiry_service.py
import logging
from typing import List, Optional, Union
from datetime import date, datetime
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from transport_admin.models.fleet.driver import Driver
from transport_admin.models.fleet.vehicle import Vehicle
from transport_admin.models.shared.enums import CertificateEntityType, ExpiryPeriod, ExpiryStatusKind
from transport_admin.schemas.compliance.expiry_schema import ExpiringCertificate, ExpiryStatus

logger = logging.getLogger(__name__)

CRITICAL_DAYS = 14
WARNING_DAYS = 30

_COLORS = {
    ExpiryStatusKind.NOT_SET: "gray",
    ExpiryStatusKind.EXPIRED: "red",
    ExpiryStatusKind.CRITICAL: "orange",
    ExpiryStatusKind.WARNING: "yellow",
    ExpiryStatusKind.OK: "green",
}

DRIVER_CERTIFICATES = {
    "tas_badge_expiry_date": "TAS Badge",
    "taxi_badge_expiry_date": "Taxi Badge",
    "dbs_expiry_date": "DBS",
    "first_aid_certificate_expiry_date": "First Aid Certificate",
    "passport_expiry_date": "Passport",
    "driving_license_expiry_date": "Driving License",
    "cpc_expiry_date": "CPC",
}

VEHICLE_CERTIFICATES = {
    "mot_expiry_date": "MOT",
    "insurance_expiry_date": "Insurance",
    "tax_expiry_date": "Road Tax",
    "phv_licence_expiry_date": "PHV Licence",
    "loler_expiry_date": "LOLER",
}


def _as_date(value: Union[date, datetime]) -> date:
    return value.date() if isinstance(value, datetime) else value


def _days(n: int) -> str:
    return f"{n} day" if n == 1 else f"{n} days"


def classify(expiry_date: Optional[Union[date, datetime]], today: Union[date, datetime]) -> ExpiryStatus:
    """Classify a certificate expiry date into a status badge.

    Days are counted on calendar dates, so the time of day on either side
    never moves a certificate between buckets.
    """
    if expiry_date is None:
        return ExpiryStatus(
            status_kind=ExpiryStatusKind.NOT_SET,
            days_remaining=None,
            label="Not set",
            color=_COLORS[ExpiryStatusKind.NOT_SET],
        )

    days_remaining = (_as_date(expiry_date) - _as_date(today)).days

    if days_remaining < 0:
        kind = ExpiryStatusKind.EXPIRED
        label = f"{_days(abs(days_remaining))} overdue"
    else:
        if days_remaining <= CRITICAL_DAYS:
            kind = ExpiryStatusKind.CRITICAL
        elif days_remaining <= WARNING_DAYS:
            kind = ExpiryStatusKind.WARNING
        else:
            kind = ExpiryStatusKind.OK
        label = f"{_days(days_remaining)} remaining"

    return ExpiryStatus(
        status_kind=kind,
        days_remaining=days_remaining,
        label=label,
        color=_COLORS[kind],
    )


def in_period(status_: ExpiryStatus, period: ExpiryPeriod) -> bool:
    days = status_.days_remaining
    if days is None:
        return False
    if period == ExpiryPeriod.EXPIRED:
        return days < 0
    if period == ExpiryPeriod.DAYS_14:
        return 0 <= days <= CRITICAL_DAYS
    return 0 <= days <= WARNING_DAYS


class ExpiryService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_expiring_certificates(
        self,
        period: ExpiryPeriod,
        entity_type: CertificateEntityType,
        today: Optional[date] = None
    ) -> List[ExpiringCertificate]:
        """List driver or vehicle certificates falling into an expiry period"""
        today = today or date.today()
        try:
            if entity_type == CertificateEntityType.EMPLOYEES:
                certificates = await self._driver_certificates(period, today)
            else:
                certificates = await self._vehicle_certificates(period, today)

            certificates.sort(key=lambda c: c.expiry.days_remaining)
            return certificates

        except Exception as e:
            logger.error(f"Error getting expiring certificates: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to retrieve expiring certificates"
            )

    async def _driver_certificates(self, period: ExpiryPeriod, today: date) -> List[ExpiringCertificate]:
        result = await self.session.execute(
            select(Driver)
            .options(selectinload(Driver.employee))
            .where(Driver.is_deleted == False)
        )
        certificates = []
        for driver in result.scalars().all():
            for column, certificate_type in DRIVER_CERTIFICATES.items():
                expiry_date = getattr(driver, column)
                if expiry_date is None:
                    continue
                expiry = classify(expiry_date, today)
                if in_period(expiry, period):
                    certificates.append(ExpiringCertificate(
                        entity_type="driver",
                        entity_id=driver.employee_id,
                        entity_name=driver.employee.full_name if driver.employee else "Unknown Driver",
                        entity_identifier=driver.tas_badge_number,
                        certificate_type=certificate_type,
                        expiry_date=expiry_date,
                        expiry=expiry,
                    ))
        return certificates

    async def _vehicle_certificates(self, period: ExpiryPeriod, today: date) -> List[ExpiringCertificate]:
        result = await self.session.execute(
            select(Vehicle).where(Vehicle.is_deleted == False)
        )
        certificates = []
        for vehicle in result.scalars().all():
            for column, certificate_type in VEHICLE_CERTIFICATES.items():
                expiry_date = getattr(vehicle, column)
                if expiry_date is None:
                    continue
                expiry = classify(expiry_date, today)
                if in_period(expiry, period):
                    certificates.append(ExpiringCertificate(
                        entity_type="vehicle",
                        entity_id=vehicle.id,
                        entity_name=vehicle.vehicle_identifier,
                        entity_identifier=vehicle.registration or vehicle.plate_number,
                        certificate_type=certificate_type,
                        expiry_date=expiry_date,
                        expiry=expiry,
                    ))
        return certificates
