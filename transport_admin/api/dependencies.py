from fastapi import Request

from transport_admin.backend.client import BackendClient
from transport_admin.services.session.session_start_service import SessionStartOrchestrator
from transport_admin.services.session.workflow_registry import WorkflowRegistry
from transport_admin.services.system.audit_service import AuditLogger


def get_backend(request: Request) -> BackendClient:
    return request.app.state.backend


def get_audit_logger(request: Request) -> AuditLogger:
    return request.app.state.audit_logger


def get_workflow_registry(request: Request) -> WorkflowRegistry:
    return request.app.state.workflows


def get_workflow(workflow_id: str, request: Request) -> SessionStartOrchestrator:
    """Path dependency resolving /workflows/{workflow_id}"""
    return get_workflow_registry(request).get(workflow_id)
