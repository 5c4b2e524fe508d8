# transport_admin/services/session/session_start_service.py
"""
Driver start-session workflow.

A ``SessionStartOrchestrator`` is opened when a driver scans their QR code
and lives until the workflow is discarded or expires. Its state moves only
through ``_transition``:

    LOADING_DRIVER -> READY | FAILED
    READY -> CHOOSING_PRE_CHECK (AM) | STARTING_SESSION (PM)
    CHOOSING_PRE_CHECK -> STARTING_SESSION | READY
    STARTING_SESSION -> STARTED | FAILED
    STARTED | FAILED -> READY (reset), FAILED -> LOADING_DRIVER (retry)

The start procedure is the only judge of whether a session may start; the
orchestrator just interprets its structured result.
"""
import logging
import time
import uuid
from datetime import date, datetime, timezone
from typing import List, Optional, Set

from transport_admin.backend.client import BackendClient
from transport_admin.core.exceptions import (
    BackendError, DriverNotFoundError, InvalidTransitionError, NotFoundError, ValidationError
)
from transport_admin.models.shared.enums import AuditAction, PreCheckState, SessionType, WorkflowState
from transport_admin.schemas.incident.breakdown_schema import BreakdownRecord
from transport_admin.schemas.incident.tardiness_schema import (
    TardinessReportOutcome, TardinessReportRequest
)
from transport_admin.schemas.precheck.pre_check_schema import VehiclePreCheckData
from transport_admin.schemas.session.start_session_schema import (
    ActiveSession, DriverContext, RouteSessionRecord, StartSessionResult, WorkflowView
)
from transport_admin.services.incident.tardiness_reporter import TardinessReporter
from transport_admin.services.precheck.pre_check_form import PreCheckForm, PreCheckFormFactory
from transport_admin.services.system.audit_service import AuditLogger

logger = logging.getLogger(__name__)

_TRANSITIONS = {
    WorkflowState.LOADING_DRIVER: {WorkflowState.READY, WorkflowState.FAILED},
    WorkflowState.READY: {WorkflowState.CHOOSING_PRE_CHECK, WorkflowState.STARTING_SESSION},
    WorkflowState.CHOOSING_PRE_CHECK: {WorkflowState.STARTING_SESSION, WorkflowState.READY},
    WorkflowState.STARTING_SESSION: {WorkflowState.STARTED, WorkflowState.FAILED},
    WorkflowState.STARTED: {WorkflowState.READY},
    WorkflowState.FAILED: {WorkflowState.READY, WorkflowState.LOADING_DRIVER},
}

ERROR_BACKEND = "BACKEND_ERROR"
ERROR_START_FAILED = "SESSION_START_FAILED"


class SessionStartOrchestrator:
    def __init__(
        self,
        qr_token: str,
        backend: BackendClient,
        form_factory: PreCheckFormFactory,
        tardiness_reporter: TardinessReporter,
        audit_logger: AuditLogger,
        workflow_id: Optional[str] = None
    ):
        self.workflow_id = workflow_id or uuid.uuid4().hex
        self.qr_token = qr_token
        self.backend = backend
        self.form_factory = form_factory
        self.tardiness_reporter = tardiness_reporter
        self.audit_logger = audit_logger

        self.state = WorkflowState.LOADING_DRIVER
        self.driver: Optional[DriverContext] = None
        self.active_sessions: List[ActiveSession] = []
        self.pending_session_type: Optional[SessionType] = None
        self.pre_check: Optional[PreCheckForm] = None
        self.result: Optional[StartSessionResult] = None
        self.error: Optional[str] = None
        self.error_kind: Optional[str] = None
        # Guards duplicate breakdown reports for this workflow only
        self.reported_breakdowns: Set[int] = set()
        self.last_activity = time.monotonic()

    def _transition(self, target: WorkflowState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise InvalidTransitionError(
                f"Workflow cannot move from {self.state.value} to {target.value}"
            )
        logger.debug(f"Workflow {self.workflow_id}: {self.state.value} -> {target.value}")
        self.state = target

    def _fail(self, error: str, error_kind: str) -> None:
        self.error = error
        self.error_kind = error_kind
        self._transition(WorkflowState.FAILED)

    def _require_driver(self) -> DriverContext:
        if self.driver is None:
            raise InvalidTransitionError("Driver has not been loaded")
        return self.driver

    # --- driver resolution ---

    async def load_driver(self) -> None:
        """Resolve the QR token to a driver and their optional route/vehicle"""
        if self.state != WorkflowState.LOADING_DRIVER:
            raise InvalidTransitionError("Driver is already loaded")
        self.error = None
        self.error_kind = None

        try:
            record = await self.backend.get_driver_by_token(self.qr_token)
        except BackendError as e:
            logger.error(f"Error loading driver for workflow {self.workflow_id}: {e.detail}")
            self._fail(e.detail, ERROR_BACKEND)
            return

        if record is None:
            not_found = DriverNotFoundError()
            logger.warning(f"No driver found for QR token (workflow {self.workflow_id})")
            self._fail(not_found.detail, not_found.error_kind)
            return

        self.driver = DriverContext(
            driver_id=record.employee_id,
            name=record.full_name or "Driver",
            route_id=record.route_id,
            route_name=record.route_number,
            vehicle_id=record.vehicle_id,
            vehicle_registration=record.vehicle_registration,
        )
        await self.refresh_active_sessions()
        self._transition(WorkflowState.READY)
        logger.info(f"Driver {self.driver.driver_id} loaded for workflow {self.workflow_id}")

    async def retry(self) -> None:
        """Re-run driver resolution after it failed"""
        if self.state != WorkflowState.FAILED or self.driver is not None:
            raise InvalidTransitionError("Nothing to retry")
        self._transition(WorkflowState.LOADING_DRIVER)
        await self.load_driver()

    async def refresh_active_sessions(self) -> List[ActiveSession]:
        driver = self._require_driver()
        try:
            self.active_sessions = await self.backend.list_active_sessions(driver.driver_id)
        except BackendError as e:
            logger.warning(f"Could not refresh active sessions for driver {driver.driver_id}: {e.detail}")
        return self.active_sessions

    # --- session start ---

    def _discard_pre_check(self) -> None:
        if self.pre_check is not None:
            self.pre_check.close()
            self.pre_check = None

    async def choose_session_type(self, session_type: SessionType) -> None:
        self._require_driver()
        if self.state in (WorkflowState.STARTED, WorkflowState.FAILED, WorkflowState.CHOOSING_PRE_CHECK):
            self.reset()
        elif self.state != WorkflowState.READY:
            raise InvalidTransitionError(f"Cannot choose a session type while {self.state.value}")

        session_type = SessionType(session_type)
        if session_type == SessionType.AM:
            # AM always goes through the vehicle pre-check first
            self.pre_check = self.form_factory(SessionType.AM, self.driver.vehicle_id)
            self.pending_session_type = SessionType.AM
            self._transition(WorkflowState.CHOOSING_PRE_CHECK)
            return

        # PM reuses the morning vehicle check; any leftover form is dropped
        self._discard_pre_check()
        await self.start_session(SessionType.PM, None)

    async def submit_pre_check(self) -> None:
        """Finalize the pre-check and start the pending AM session"""
        if self.state != WorkflowState.CHOOSING_PRE_CHECK or self.pre_check is None:
            raise InvalidTransitionError("No pre-check in progress")
        data = await self.pre_check.submit()
        await self.start_session(self.pending_session_type, data)

    def cancel_pre_check(self) -> None:
        if self.state != WorkflowState.CHOOSING_PRE_CHECK or self.pre_check is None:
            raise InvalidTransitionError("No pre-check in progress")
        self.pre_check.cancel()
        self.pre_check = None
        self.pending_session_type = None
        self._transition(WorkflowState.READY)

    async def start_session(self, session_type: SessionType, pre_check_data: Optional[VehiclePreCheckData]) -> None:
        driver = self._require_driver()
        session_type = SessionType(session_type)
        if session_type == SessionType.AM and pre_check_data is None:
            raise ValidationError("Complete the vehicle pre-check before starting an AM session")
        if session_type == SessionType.PM:
            pre_check_data = None

        self._transition(WorkflowState.STARTING_SESSION)
        self.error = None
        self.error_kind = None

        try:
            result = await self.backend.start_route_session(self.qr_token, session_type)
        except BackendError as e:
            logger.error(f"Error starting {session_type.value} session for driver {driver.driver_id}: {e.detail}")
            self._fail(e.detail, ERROR_BACKEND)
            return

        if not result.success or result.session_id is None:
            logger.warning(f"Session start rejected for driver {driver.driver_id}: {result.error}")
            self._fail(result.error or "Failed to start session", ERROR_START_FAILED)
            return

        if pre_check_data is not None:
            await self._save_pre_check(result, pre_check_data)

        self.result = result
        self.pending_session_type = None
        self._discard_pre_check()
        self._transition(WorkflowState.STARTED)
        logger.info(
            f"✅ {session_type.value} session {result.session_id} started for driver {driver.driver_id}"
        )
        self.audit_logger.log("route_sessions", result.session_id, AuditAction.CREATE)
        await self.refresh_active_sessions()

    async def _save_pre_check(self, result: StartSessionResult, data: VehiclePreCheckData) -> None:
        """Persist the pre-check against the new session; failures are logged only"""
        driver = self.driver
        values = {
            "route_session_id": result.session_id,
            "driver_id": driver.driver_id,
            "vehicle_id": driver.vehicle_id,
            "route_id": driver.route_id,
            "session_type": SessionType.AM.value,
            "check_date": result.session_date or date.today(),
            "completed_at": datetime.now(timezone.utc),
            **data.checklist(),
            "notes": data.notes,
            "issues_found": data.issues_found,
            "media_urls": [m.model_dump(mode="json") for m in data.media_urls] if data.media_urls else None,
        }
        try:
            pre_check_id = await self.backend.insert_vehicle_pre_check(values)
        except BackendError as e:
            # The session stays started
            logger.error(
                f"Error saving pre-check for route session {result.session_id}: {e.detail}"
            )
            return
        self.audit_logger.log("vehicle_pre_checks", pre_check_id, AuditAction.CREATE)

    def reset(self) -> None:
        """Return to the session-type choice after a start or a failed start"""
        self._require_driver()
        if self.pre_check is not None and self.pre_check.state == PreCheckState.SUBMITTING:
            raise InvalidTransitionError("Pre-check is being submitted")
        self._discard_pre_check()
        if self.state != WorkflowState.READY:
            self._transition(WorkflowState.READY)
        self.pending_session_type = None
        self.result = None
        self.error = None
        self.error_kind = None

    # --- active session actions ---

    async def _owned_session(self, session_id: int) -> RouteSessionRecord:
        driver = self._require_driver()
        record = await self.backend.get_route_session(session_id)
        if record is None or record.driver_id != driver.driver_id:
            raise NotFoundError("Route session not found")
        return record

    async def end_session(self, session_id: int, confirmed: bool = False) -> RouteSessionRecord:
        if not confirmed:
            raise ValidationError("Please confirm that you want to end this session")
        await self._owned_session(session_id)
        record = await self.backend.end_route_session(session_id)
        self.audit_logger.log("route_sessions", session_id, AuditAction.UPDATE)
        await self.refresh_active_sessions()
        return record

    async def report_breakdown(
        self,
        session_id: int,
        description: Optional[str] = None,
        location: Optional[str] = None
    ) -> BreakdownRecord:
        if session_id in self.reported_breakdowns:
            raise InvalidTransitionError("A breakdown has already been reported for this session")
        # Claimed before the first await so an overlapping request is refused
        self.reported_breakdowns.add(session_id)
        try:
            await self._owned_session(session_id)
            breakdown = await self.backend.report_vehicle_breakdown(session_id, description, location)
        except Exception:
            self.reported_breakdowns.discard(session_id)
            raise
        self.audit_logger.log("vehicle_breakdowns", breakdown.id, AuditAction.CREATE)
        return breakdown

    async def report_tardiness(
        self,
        reason: str,
        session_type: Optional[SessionType] = None,
        session_id: Optional[int] = None,
        notes: Optional[str] = None
    ) -> TardinessReportOutcome:
        driver = self._require_driver()
        self.tardiness_reporter.validate_reason(reason)

        route_id = driver.route_id
        if session_id is not None:
            # Report against the route actually being driven
            record = await self._owned_session(session_id)
            route_id = record.route_id
            session_type = session_type or record.session_type
        if session_type is None:
            raise ValidationError("Session type is required")

        return await self.tardiness_reporter.report(TardinessReportRequest(
            driver_id=driver.driver_id,
            route_id=route_id,
            session_id=session_id,
            session_type=session_type,
            reason=reason,
            notes=notes,
        ))

    # --- teardown ---

    def close(self) -> None:
        """Release the pre-check form's camera and previews"""
        self._discard_pre_check()
        logger.debug(f"Workflow {self.workflow_id} closed")

    def view(self) -> WorkflowView:
        return WorkflowView(
            workflow_id=self.workflow_id,
            state=self.state,
            driver=self.driver,
            active_sessions=self.active_sessions,
            pending_session_type=self.pending_session_type,
            error=self.error,
            error_kind=self.error_kind,
            result=self.result,
            pre_check=self.pre_check.view() if self.pre_check else None,
            reported_breakdowns=sorted(self.reported_breakdowns),
        )
