from fastapi import APIRouter, Depends, Query
from typing import List
from sqlalchemy.ext.asyncio import AsyncSession

from transport_admin.core.database import get_async_session
from transport_admin.models.shared.enums import CertificateEntityType, ExpiryPeriod
from transport_admin.schemas.compliance.expiry_schema import ExpiringCertificate
from transport_admin.services.compliance.expiry_service import ExpiryService

router = APIRouter()


@router.get("/certificates-expiry", response_model=List[ExpiringCertificate])
async def get_expiring_certificates(
    period: ExpiryPeriod = Query(ExpiryPeriod.DAYS_30),
    entity_type: CertificateEntityType = Query(CertificateEntityType.EMPLOYEES),
    session: AsyncSession = Depends(get_async_session)
):
    """Driver or vehicle certificates expired or expiring within the period"""
    service = ExpiryService(session)
    return await service.get_expiring_certificates(period, entity_type)
