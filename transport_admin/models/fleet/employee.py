from sqlalchemy import Column, String, Boolean
from transport_admin.db.base import BaseModel

class Employee(BaseModel):
    __tablename__ = 'employees'

    full_name = Column(String(200), nullable=False)
    role = Column(String(50), nullable=False)  # Driver, Passenger Assistant, Coordinator
    personal_email = Column(String(255), unique=True, nullable=True)
    phone_number = Column(String(30))
    is_active = Column(Boolean, default=True)
