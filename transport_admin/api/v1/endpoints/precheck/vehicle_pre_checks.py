from fastapi import APIRouter, Depends, Query
from typing import List, Optional
from datetime import date
from sqlalchemy.ext.asyncio import AsyncSession

from transport_admin.core.database import get_async_session
from transport_admin.schemas.precheck.pre_check_schema import VehiclePreCheckResponse
from transport_admin.services.precheck.pre_check_query_service import PreCheckQueryService

router = APIRouter()


@router.get("/", response_model=List[VehiclePreCheckResponse])
async def list_vehicle_pre_checks(
    check_date: Optional[date] = Query(None),
    driver_id: Optional[int] = Query(None),
    session: AsyncSession = Depends(get_async_session)
):
    """Pre-checks recorded on a day (today by default), newest first"""
    service = PreCheckQueryService(session)
    return await service.list_pre_checks(check_date or date.today(), driver_id)
