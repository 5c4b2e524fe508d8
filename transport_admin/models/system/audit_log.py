from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from transport_admin.db.base import BaseModel

class AuditLog(BaseModel):
    __tablename__ = "audit_log"

    table_name = Column(String(100), nullable=False)
    record_id = Column(Integer, nullable=False)
    action = Column(String(20), nullable=False)  # CREATE / UPDATE / DELETE
    changed_by = Column(Integer, nullable=True)
    timestamp = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<AuditLog {self.action} on {self.table_name} {self.record_id}>"
