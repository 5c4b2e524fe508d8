import json
import httpx
import pytest

from transport_admin.models.shared.enums import AuditAction
from transport_admin.services.system.audit_service import AuditLogger


@pytest.mark.asyncio
class TestAuditLogger:
    async def test_posts_entry_without_blocking(self):
        received = []

        def handler(request: httpx.Request) -> httpx.Response:
            received.append(json.loads(request.content))
            return httpx.Response(201, json={"success": True})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://backend.test") as client:
            audit_logger = AuditLogger(client)
            assert audit_logger.log("route_sessions", 7, AuditAction.CREATE) is None
            await audit_logger.drain()

        assert received == [{"table_name": "route_sessions", "record_id": 7, "action": "CREATE"}]

    async def test_failures_are_logged_only(self, caplog):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"detail": "boom"})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://backend.test") as client:
            audit_logger = AuditLogger(client)
            audit_logger.log("route_sessions", 7, AuditAction.UPDATE)
            await audit_logger.drain()

        assert "Audit log failed" in caplog.text

    async def test_disabled_logger_sends_nothing(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://backend.test") as client:
            audit_logger = AuditLogger(client, enabled=False)
            audit_logger.log("route_sessions", 7, AuditAction.DELETE)
            await audit_logger.drain()

    async def test_unexpected_errors_are_logged_only(self, caplog):
        def handler(request: httpx.Request) -> httpx.Response:
            raise RuntimeError("client has been closed")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://backend.test") as client:
            audit_logger = AuditLogger(client)
            audit_logger.log("route_sessions", 7, AuditAction.CREATE)
            audit_logger.log("route_sessions", 8, "TRUNCATE")
            tasks = list(audit_logger._pending)
            await audit_logger.drain()

        assert all(task.exception() is None for task in tasks)
        assert caplog.text.count("Audit log failed") == 2
