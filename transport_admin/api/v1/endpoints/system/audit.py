from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from transport_admin.core.database import get_async_session
from transport_admin.schemas.system.audit_schema import AuditLogCreate
from transport_admin.services.system.audit_service import AuditService

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_audit_entry(
    entry: AuditLogCreate,
    session: AsyncSession = Depends(get_async_session)
):
    service = AuditService(session)
    audit_log = await service.create_entry(entry)
    return {"success": True, "id": audit_log.id}
