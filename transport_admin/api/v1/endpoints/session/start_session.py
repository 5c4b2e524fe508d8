import logging
from fastapi import APIRouter, Depends, status

from transport_admin.api.dependencies import get_workflow, get_workflow_registry
from transport_admin.schemas.incident.breakdown_schema import BreakdownRecord, WorkflowBreakdownRequest
from transport_admin.schemas.incident.tardiness_schema import TardinessReportOutcome, WorkflowTardinessRequest
from transport_admin.schemas.session.start_session_schema import (
    ChooseSessionTypeRequest, EndSessionRequest, RouteSessionRecord, WorkflowView
)
from transport_admin.services.session.session_start_service import SessionStartOrchestrator
from transport_admin.services.session.workflow_registry import WorkflowRegistry

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/{qr_token}", response_model=WorkflowView, status_code=status.HTTP_201_CREATED)
async def open_workflow(
    qr_token: str,
    registry: WorkflowRegistry = Depends(get_workflow_registry)
):
    """Open a start-session workflow for a scanned driver QR code"""
    workflow = await registry.create(qr_token)
    return workflow.view()


@router.get("/workflows/{workflow_id}", response_model=WorkflowView)
async def get_workflow_view(workflow: SessionStartOrchestrator = Depends(get_workflow)):
    return workflow.view()


@router.post("/workflows/{workflow_id}/retry", response_model=WorkflowView)
async def retry_driver_lookup(workflow: SessionStartOrchestrator = Depends(get_workflow)):
    await workflow.retry()
    return workflow.view()


@router.post("/workflows/{workflow_id}/session-type", response_model=WorkflowView)
async def choose_session_type(
    body: ChooseSessionTypeRequest,
    workflow: SessionStartOrchestrator = Depends(get_workflow)
):
    """AM opens the vehicle pre-check, PM starts the session straight away"""
    await workflow.choose_session_type(body.session_type)
    return workflow.view()


@router.post("/workflows/{workflow_id}/reset", response_model=WorkflowView)
async def reset_workflow(workflow: SessionStartOrchestrator = Depends(get_workflow)):
    workflow.reset()
    return workflow.view()


@router.post("/workflows/{workflow_id}/sessions/{session_id}/end", response_model=RouteSessionRecord)
async def end_session(
    session_id: int,
    body: EndSessionRequest,
    workflow: SessionStartOrchestrator = Depends(get_workflow)
):
    return await workflow.end_session(session_id, confirmed=body.confirmed)


@router.post("/workflows/{workflow_id}/breakdown", response_model=BreakdownRecord)
async def report_breakdown(
    body: WorkflowBreakdownRequest,
    workflow: SessionStartOrchestrator = Depends(get_workflow)
):
    return await workflow.report_breakdown(body.session_id, body.description, body.location)


@router.post("/workflows/{workflow_id}/tardiness", response_model=TardinessReportOutcome)
async def report_tardiness(
    body: WorkflowTardinessRequest,
    workflow: SessionStartOrchestrator = Depends(get_workflow)
):
    return await workflow.report_tardiness(
        reason=body.reason,
        session_type=body.session_type,
        session_id=body.session_id,
        notes=body.notes,
    )


@router.delete("/workflows/{workflow_id}")
async def close_workflow(
    workflow_id: str,
    registry: WorkflowRegistry = Depends(get_workflow_registry)
):
    """Tear the workflow down, releasing any camera and previews it holds"""
    registry.get(workflow_id)
    registry.discard(workflow_id)
    return {"success": True, "message": "Workflow closed"}
