from sqlalchemy import Column, Integer, String, Date, ForeignKey
from sqlalchemy.orm import relationship
from transport_admin.db.base import BaseModel

class Driver(BaseModel):
    __tablename__ = 'drivers'

    employee_id = Column(Integer, ForeignKey('employees.id'), unique=True, nullable=False)
    qr_token = Column(String(64), unique=True, nullable=True, index=True)

    # Certificates
    tas_badge_number = Column(String(50))
    tas_badge_expiry_date = Column(Date)
    taxi_badge_number = Column(String(50))
    taxi_badge_expiry_date = Column(Date)
    dbs_expiry_date = Column(Date)
    first_aid_certificate_expiry_date = Column(Date)
    passport_expiry_date = Column(Date)
    driving_license_expiry_date = Column(Date)
    cpc_expiry_date = Column(Date)

    # Relationships
    employee = relationship("Employee")
