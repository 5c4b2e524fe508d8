from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from transport_admin.db.base import BaseModel

class Route(BaseModel):
    __tablename__ = 'routes'

    route_number = Column(String(50), unique=True, nullable=False)
    driver_id = Column(Integer, ForeignKey('drivers.employee_id'), nullable=True)  # assigned driver
    vehicle_id = Column(Integer, ForeignKey('vehicles.id'), nullable=True)

    # Relationships
    driver = relationship("Driver")
    vehicle = relationship("Vehicle")
