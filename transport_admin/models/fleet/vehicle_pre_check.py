from sqlalchemy import Column, Integer, String, Text, Boolean, Date, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from transport_admin.db.base import BaseModel

class VehiclePreCheck(BaseModel):
    __tablename__ = 'vehicle_pre_checks'

    route_session_id = Column(Integer, ForeignKey('route_sessions.id'), nullable=True)
    driver_id = Column(Integer, ForeignKey('drivers.employee_id'), nullable=False)
    vehicle_id = Column(Integer, ForeignKey('vehicles.id'), nullable=True)
    route_id = Column(Integer, ForeignKey('routes.id'), nullable=True)
    session_type = Column(String(2), nullable=False)
    check_date = Column(Date, nullable=False, index=True)
    completed_at = Column(DateTime(timezone=True))

    # Vehicle exterior
    lights_working = Column(Boolean, default=False)
    mirrors_adjusted = Column(Boolean, default=False)
    tires_condition = Column(Boolean, default=False)
    body_damage = Column(Boolean, default=False)  # true = "no damage" confirmed
    windows_clean = Column(Boolean, default=False)
    # Vehicle interior
    dashboard_lights = Column(Boolean, default=False)
    horn_working = Column(Boolean, default=False)
    wipers_working = Column(Boolean, default=False)
    seatbelts_working = Column(Boolean, default=False)
    interior_clean = Column(Boolean, default=False)
    # Safety equipment
    first_aid_kit = Column(Boolean, default=False)
    fire_extinguisher = Column(Boolean, default=False)
    warning_triangle = Column(Boolean, default=False)
    emergency_kit = Column(Boolean, default=False)
    # Mechanical
    engine_oil_level = Column(Boolean, default=False)
    coolant_level = Column(Boolean, default=False)
    brake_fluid = Column(Boolean, default=False)
    fuel_level_adequate = Column(Boolean, default=False)

    notes = Column(Text)
    issues_found = Column(Text)
    media_urls = Column(JSON)  # [{"type": "video"|"image", "url": "..."}]

    # Relationships
    route_session = relationship("RouteSession")
    vehicle = relationship("Vehicle")
