from sqlalchemy import Column, Integer, String, Text, DateTime
from transport_admin.db.base import BaseModel

class Notification(BaseModel):
    __tablename__ = 'notifications'

    notification_type = Column(String(50), nullable=False, index=True)
    entity_type = Column(String(50), nullable=False)
    entity_id = Column(Integer, nullable=False)
    message = Column(Text)
    status = Column(String(20), default="pending", nullable=False)
    resolved_at = Column(DateTime(timezone=True))
