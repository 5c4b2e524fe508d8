# transport_admin/services/system/audit_service.py
import asyncio
import logging
from typing import Optional, Set
import httpx
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from transport_admin.models.shared.enums import AuditAction
from transport_admin.models.system.audit_log import AuditLog
from transport_admin.schemas.system.audit_schema import AuditLogCreate

logger = logging.getLogger(__name__)


class AuditLogger:
    """Fire-and-forget client for POST /api/audit.

    ``log`` schedules the request and returns immediately; failures are
    logged here and never reach the caller.
    """

    def __init__(self, http_client: Optional[httpx.AsyncClient], enabled: bool = True):
        self.http_client = http_client
        self.enabled = enabled and http_client is not None
        self._pending: Set[asyncio.Task] = set()

    def log(self, table_name: str, record_id: int, action: AuditAction) -> None:
        if not self.enabled:
            return
        task = asyncio.create_task(self._send(table_name, record_id, action))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _send(self, table_name: str, record_id: int, action: AuditAction) -> None:
        try:
            response = await self.http_client.post(
                "/api/audit",
                json={"table_name": table_name, "record_id": record_id, "action": AuditAction(action).value},
            )
            response.raise_for_status()
        except Exception as e:
            logger.warning(f"Audit log failed for {table_name} {record_id} {action}: {e}")

    async def drain(self) -> None:
        """Wait for in-flight audit calls (shutdown and tests)"""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


class AuditService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_entry(self, entry: AuditLogCreate) -> AuditLog:
        """Insert an audit_log row"""
        try:
            audit_log = AuditLog(
                table_name=entry.table_name,
                record_id=entry.record_id,
                action=entry.action.value,
                changed_by=entry.changed_by,
            )
            self.session.add(audit_log)
            await self.session.commit()
            await self.session.refresh(audit_log)
            return audit_log

        except Exception as e:
            await self.session.rollback()
            logger.error(f"Audit log error: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to log audit"
            )
