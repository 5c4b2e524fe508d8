from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class BreakdownReportRequest(BaseModel):
    route_session_id: Optional[int] = None
    description: Optional[str] = Field(None, max_length=2000)
    location: Optional[str] = Field(None, max_length=255)


class WorkflowBreakdownRequest(BaseModel):
    session_id: int
    description: Optional[str] = Field(None, max_length=2000)
    location: Optional[str] = Field(None, max_length=255)


class BreakdownRecord(BaseModel):
    id: int
    route_session_id: int
    vehicle_id: Optional[int] = None
    driver_id: int
    description: Optional[str] = None
    location: Optional[str] = None
    reported_at: datetime
    status: str
