from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from transport_admin.db.base import BaseModel

class RouteSession(BaseModel):
    __tablename__ = 'route_sessions'

    driver_id = Column(Integer, ForeignKey('drivers.employee_id'), nullable=False)
    route_id = Column(Integer, ForeignKey('routes.id'), nullable=True)
    session_date = Column(Date, nullable=False)
    session_type = Column(String(2), nullable=False)  # AM / PM
    started_at = Column(DateTime(timezone=True))
    ended_at = Column(DateTime(timezone=True))

    # Relationships
    route = relationship("Route")

    __table_args__ = (
        Index('ix_route_sessions_driver_active', 'driver_id', 'session_type', 'ended_at'),
    )
