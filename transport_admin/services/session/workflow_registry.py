import logging
import time
from typing import Callable, Dict, Optional

from transport_admin.backend.client import BackendClient
from transport_admin.core.exceptions import NotFoundError
from transport_admin.services.incident.tardiness_reporter import TardinessReporter
from transport_admin.services.precheck.pre_check_form import PreCheckFormFactory
from transport_admin.services.session.session_start_service import SessionStartOrchestrator
from transport_admin.services.system.audit_service import AuditLogger

logger = logging.getLogger(__name__)


class WorkflowRegistry:
    """In-memory start-session workflows keyed by workflow id.

    Workflows idle for longer than the TTL are closed on the next access,
    which releases any camera and preview still held by their pre-check.
    """

    def __init__(
        self,
        backend: BackendClient,
        form_factory: PreCheckFormFactory,
        tardiness_reporter: TardinessReporter,
        audit_logger: AuditLogger,
        ttl_minutes: int = 120,
        clock: Callable[[], float] = time.monotonic
    ):
        self.backend = backend
        self.form_factory = form_factory
        self.tardiness_reporter = tardiness_reporter
        self.audit_logger = audit_logger
        self.ttl_seconds = ttl_minutes * 60
        self.clock = clock
        self._workflows: Dict[str, SessionStartOrchestrator] = {}

    def __len__(self) -> int:
        return len(self._workflows)

    async def create(self, qr_token: str) -> SessionStartOrchestrator:
        """Open a workflow for a scanned QR code and resolve its driver"""
        self.sweep()
        workflow = SessionStartOrchestrator(
            qr_token=qr_token,
            backend=self.backend,
            form_factory=self.form_factory,
            tardiness_reporter=self.tardiness_reporter,
            audit_logger=self.audit_logger,
        )
        workflow.last_activity = self.clock()
        self._workflows[workflow.workflow_id] = workflow
        await workflow.load_driver()
        logger.info(f"Workflow {workflow.workflow_id} opened ({workflow.state.value})")
        return workflow

    def get(self, workflow_id: str) -> SessionStartOrchestrator:
        self.sweep()
        workflow = self._workflows.get(workflow_id)
        if workflow is None:
            raise NotFoundError("Workflow not found or expired")
        workflow.last_activity = self.clock()
        return workflow

    def discard(self, workflow_id: str) -> bool:
        workflow = self._workflows.pop(workflow_id, None)
        if workflow is None:
            return False
        workflow.close()
        logger.info(f"Workflow {workflow_id} discarded")
        return True

    def sweep(self, now: Optional[float] = None) -> int:
        """Close every workflow idle past the TTL; returns how many were removed"""
        now = self.clock() if now is None else now
        expired = [
            workflow_id for workflow_id, workflow in self._workflows.items()
            if now - workflow.last_activity > self.ttl_seconds
        ]
        for workflow_id in expired:
            workflow = self._workflows.pop(workflow_id)
            try:
                workflow.close()
            except Exception as e:
                logger.error(f"Error closing expired workflow {workflow_id}: {e}")
        if expired:
            logger.info(f"🧹 Expired {len(expired)} idle workflow(s)")
        return len(expired)

    def close_all(self) -> None:
        for workflow_id in list(self._workflows):
            self.discard(workflow_id)
