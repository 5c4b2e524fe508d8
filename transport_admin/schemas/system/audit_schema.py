from pydantic import BaseModel
from typing import Optional
from transport_admin.models.shared.enums import AuditAction


class AuditLogCreate(BaseModel):
    table_name: str
    record_id: int
    action: AuditAction
    changed_by: Optional[int] = None
