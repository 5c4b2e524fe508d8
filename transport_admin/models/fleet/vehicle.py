from sqlalchemy import Column, String, Date, Boolean
from transport_admin.db.base import BaseModel

class Vehicle(BaseModel):
    __tablename__ = 'vehicles'

    vehicle_identifier = Column(String(50), unique=True, nullable=False)
    registration = Column(String(20), unique=True)
    plate_number = Column(String(20))
    make = Column(String(100))
    model = Column(String(100))

    # Certificates
    mot_expiry_date = Column(Date)
    insurance_expiry_date = Column(Date)
    tax_expiry_date = Column(Date)
    phv_licence_expiry_date = Column(Date)
    loler_expiry_date = Column(Date)

    off_the_road = Column(Boolean, default=False)
