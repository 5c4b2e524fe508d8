from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from transport_admin.db.base import BaseModel

class VehicleBreakdown(BaseModel):
    __tablename__ = 'vehicle_breakdowns'

    route_session_id = Column(Integer, ForeignKey('route_sessions.id'), nullable=False)
    vehicle_id = Column(Integer, ForeignKey('vehicles.id'), nullable=True)
    driver_id = Column(Integer, ForeignKey('drivers.employee_id'), nullable=False)
    description = Column(Text)
    location = Column(String(255))
    reported_at = Column(DateTime(timezone=True), nullable=False)
    status = Column(String(30), default="reported", nullable=False)
