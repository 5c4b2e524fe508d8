from sqlalchemy import Column, Integer, String, Text, Date, DateTime, ForeignKey
from transport_admin.db.base import BaseModel

class TardinessReport(BaseModel):
    __tablename__ = 'tardiness_reports'

    driver_id = Column(Integer, ForeignKey('drivers.employee_id'), nullable=False)
    route_id = Column(Integer, ForeignKey('routes.id'), nullable=True)
    route_session_id = Column(Integer, ForeignKey('route_sessions.id'), nullable=True)
    session_type = Column(String(2), nullable=False)
    session_date = Column(Date, nullable=False)
    reason = Column(String(50), nullable=False)
    additional_notes = Column(Text)
    status = Column(String(20), default="pending", nullable=False)
    coordinator_id = Column(Integer, ForeignKey('employees.id'), nullable=True)
    coordinator_notes = Column(Text)
    reviewed_at = Column(DateTime(timezone=True))
