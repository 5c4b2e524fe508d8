from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime
from transport_admin.models.shared.enums import SessionType, WorkflowState
from transport_admin.schemas.precheck.pre_check_schema import PreCheckFormView


class DriverContext(BaseModel):
    """Driver resolved from a QR token, with the optional assigned route/vehicle"""
    driver_id: int
    name: str
    route_id: Optional[int] = None
    route_name: Optional[str] = None
    vehicle_id: Optional[int] = None
    vehicle_registration: Optional[str] = None


class ActiveSession(BaseModel):
    id: int
    session_date: date
    session_type: SessionType
    started_at: datetime
    route_id: Optional[int] = None
    route_name: Optional[str] = None


class RouteSessionRecord(BaseModel):
    id: int
    driver_id: int
    route_id: Optional[int] = None
    session_date: date
    session_type: SessionType
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None


class StartSessionResult(BaseModel):
    """Structured result of the start-session procedure"""
    success: bool
    session_id: Optional[int] = None
    message: Optional[str] = None
    error: Optional[str] = None
    route_name: Optional[str] = None
    session_type: Optional[SessionType] = None
    session_date: Optional[date] = None


class ChooseSessionTypeRequest(BaseModel):
    session_type: SessionType


class EndSessionRequest(BaseModel):
    confirmed: bool = False


class WorkflowView(BaseModel):
    workflow_id: str
    state: WorkflowState
    driver: Optional[DriverContext] = None
    active_sessions: List[ActiveSession] = Field(default_factory=list)
    pending_session_type: Optional[SessionType] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None
    result: Optional[StartSessionResult] = None
    pre_check: Optional[PreCheckFormView] = None
    reported_breakdowns: List[int] = Field(default_factory=list)
