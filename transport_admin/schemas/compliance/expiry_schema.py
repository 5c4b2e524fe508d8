from pydantic import BaseModel
from typing import Optional
from datetime import date
from transport_admin.models.shared.enums import ExpiryStatusKind


class ExpiryStatus(BaseModel):
    status_kind: ExpiryStatusKind
    days_remaining: Optional[int] = None
    label: str
    color: str


class ExpiringCertificate(BaseModel):
    entity_type: str  # driver / vehicle
    entity_id: int
    entity_name: str
    entity_identifier: Optional[str] = None
    certificate_type: str
    expiry_date: date
    expiry: ExpiryStatus
