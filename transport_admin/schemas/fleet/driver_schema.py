from pydantic import BaseModel
from typing import Optional


class DriverQRTokenResponse(BaseModel):
    employee_id: int
    qr_token: str
    start_session_url: str


class DriverRecord(BaseModel):
    """Row shape of drivers joined to employee, assigned route and vehicle"""
    employee_id: int
    full_name: Optional[str] = None
    qr_token: Optional[str] = None
    route_id: Optional[int] = None
    route_number: Optional[str] = None
    vehicle_id: Optional[int] = None
    vehicle_registration: Optional[str] = None
