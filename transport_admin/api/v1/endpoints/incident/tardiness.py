from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from transport_admin.core.database import get_async_session
from transport_admin.schemas.incident.tardiness_schema import TardinessReportPayload, TardinessReviewRequest
from transport_admin.services.incident.tardiness_service import TardinessService

router = APIRouter()


@router.post("/report")
async def report_tardiness(
    payload: TardinessReportPayload,
    session: AsyncSession = Depends(get_async_session)
):
    service = TardinessService(session)
    return await service.create_report(payload)


@router.post("/approve")
async def approve_tardiness(
    body: TardinessReviewRequest,
    session: AsyncSession = Depends(get_async_session)
):
    service = TardinessService(session)
    return await service.approve(body)


@router.post("/decline")
async def decline_tardiness(
    body: TardinessReviewRequest,
    session: AsyncSession = Depends(get_async_session)
):
    service = TardinessService(session)
    return await service.decline(body)
