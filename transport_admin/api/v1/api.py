from fastapi import APIRouter
from transport_admin.api.v1.endpoints.compliance import certificates
from transport_admin.api.v1.endpoints.fleet import drivers
from transport_admin.api.v1.endpoints.incident import breakdowns, tardiness
from transport_admin.api.v1.endpoints.precheck import pre_check_form, vehicle_pre_checks
from transport_admin.api.v1.endpoints.session import start_session
from transport_admin.api.v1.endpoints.system import audit

api_router = APIRouter()

# Driver start-session workflow
api_router.include_router(start_session.router, prefix="/start-session", tags=["Start Session"])
api_router.include_router(
    pre_check_form.router,
    prefix="/start-session/workflows/{workflow_id}/pre-check",
    tags=["Start Session"]
)

# Fleet & compliance routes
api_router.include_router(drivers.router, prefix="/drivers", tags=["Fleet"])
api_router.include_router(vehicle_pre_checks.router, prefix="/vehicle-pre-checks", tags=["Fleet"])
api_router.include_router(certificates.router, prefix="/compliance", tags=["Compliance"])

# Backend endpoints called by the workflow (mounted under /api)
backend_router = APIRouter()
backend_router.include_router(audit.router, prefix="/audit", tags=["Audit"])
backend_router.include_router(tardiness.router, prefix="/tardiness", tags=["Incidents"])
backend_router.include_router(breakdowns.router, prefix="/breakdowns", tags=["Incidents"])
