from pydantic import BaseModel, Field
from typing import Optional
from transport_admin.models.shared.enums import SessionType


class TardinessReportRequest(BaseModel):
    """Driver-side tardiness report; reason is validated before sending"""
    driver_id: int
    route_id: Optional[int] = None
    session_id: Optional[int] = None
    session_type: SessionType
    reason: str = ""
    notes: Optional[str] = None


class TardinessReportPayload(BaseModel):
    """Body of POST /api/tardiness/report"""
    driverId: Optional[int] = None
    routeId: Optional[int] = None
    routeSessionId: Optional[int] = None
    sessionType: Optional[str] = None
    reason: Optional[str] = None
    additionalNotes: Optional[str] = None


class TardinessReportOutcome(BaseModel):
    success: bool
    tardiness_report_id: Optional[int] = None
    message: Optional[str] = None
    error: Optional[str] = None


class WorkflowTardinessRequest(BaseModel):
    reason: str = ""
    session_type: Optional[SessionType] = None
    session_id: Optional[int] = None
    notes: Optional[str] = Field(None, max_length=2000)


class TardinessReviewRequest(BaseModel):
    tardinessReportId: Optional[int] = None
    coordinatorNotes: Optional[str] = None
    coordinatorId: Optional[int] = None
