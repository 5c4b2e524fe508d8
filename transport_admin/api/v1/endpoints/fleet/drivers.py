import logging
from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from transport_admin.api.dependencies import get_audit_logger
from transport_admin.core.config import settings
from transport_admin.core.database import get_async_session
from transport_admin.models.shared.enums import AuditAction
from transport_admin.schemas.fleet.driver_schema import DriverQRTokenResponse
from transport_admin.services.fleet.driver_service import DriverService
from transport_admin.services.system.audit_service import AuditLogger
from transport_admin.utils.qr_generator import generate_qr_png, start_session_url

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/{employee_id}/qr-code")
async def get_driver_qr_code(
    employee_id: int,
    session: AsyncSession = Depends(get_async_session)
):
    """PNG QR code pointing at the driver's start-session page"""
    service = DriverService(session)
    driver = await service.ensure_qr_token(employee_id)
    png = generate_qr_png(start_session_url(settings.PUBLIC_APP_URL, driver.qr_token))
    return Response(content=png, media_type="image/png")


@router.post("/{employee_id}/qr-token/rotate", response_model=DriverQRTokenResponse)
async def rotate_driver_qr_token(
    employee_id: int,
    session: AsyncSession = Depends(get_async_session),
    audit_logger: AuditLogger = Depends(get_audit_logger)
):
    """Issue a new QR token; printed codes carrying the old token stop working"""
    service = DriverService(session)
    driver = await service.rotate_qr_token(employee_id)
    audit_logger.log("drivers", driver.id, AuditAction.UPDATE)
    return DriverQRTokenResponse(
        employee_id=driver.employee_id,
        qr_token=driver.qr_token,
        start_session_url=start_session_url(settings.PUBLIC_APP_URL, driver.qr_token),
    )
