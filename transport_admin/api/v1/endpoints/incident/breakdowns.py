from fastapi import APIRouter, Depends, HTTPException, status

from transport_admin.api.dependencies import get_backend
from transport_admin.backend.client import BackendClient
from transport_admin.schemas.incident.breakdown_schema import BreakdownRecord, BreakdownReportRequest

router = APIRouter()


@router.post("/report", response_model=BreakdownRecord)
async def report_breakdown(
    body: BreakdownReportRequest,
    backend: BackendClient = Depends(get_backend)
):
    """Record a vehicle breakdown against an active route session"""
    if not body.route_session_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required field: route_session_id"
        )
    return await backend.report_vehicle_breakdown(body.route_session_id, body.description, body.location)
