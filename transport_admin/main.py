import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from transport_admin.api.v1.api import api_router, backend_router
from transport_admin.backend.client import BackendClient
from transport_admin.backend.storage import LocalBlobStorage
from transport_admin.core.config import settings
from transport_admin.core.database import async_session_maker, engine
from transport_admin.core.logging_config import setup_logging
from transport_admin.middleware.logging import LoggingMiddleware
from transport_admin.models.shared.enums import Base
from transport_admin.services.incident.tardiness_reporter import TardinessReporter
from transport_admin.services.precheck.capture import PreviewStore
from transport_admin.services.precheck.media_service import MediaUploadService
from transport_admin.services.precheck.pre_check_form import PreCheckFormFactory
from transport_admin.services.session.workflow_registry import WorkflowRegistry
from transport_admin.services.system.audit_service import AuditLogger
from transport_admin.utils.file_handler import MediaFileValidator
import transport_admin.models  # noqa: F401  registers every table on Base

logger = logging.getLogger(__name__)

# Served directories must exist before StaticFiles is mounted
Path(settings.STORAGE_ROOT).mkdir(parents=True, exist_ok=True)
Path(settings.PREVIEW_DIR).mkdir(parents=True, exist_ok=True)


def build_workflow_registry(
    backend: BackendClient,
    storage: LocalBlobStorage,
    http_client: httpx.AsyncClient,
    audit_logger: AuditLogger
) -> WorkflowRegistry:
    """Wire the start-session workflow collaborators from settings"""
    validator = MediaFileValidator(settings.MAX_VIDEO_SIZE, settings.MAX_IMAGE_SIZE)
    form_factory = PreCheckFormFactory(
        media_service=MediaUploadService(
            storage, settings.VEHICLE_DOCUMENTS_BUCKET, settings.IMAGE_MAX_DIMENSION
        ),
        preview_store=PreviewStore(settings.PREVIEW_DIR, settings.PREVIEW_PUBLIC_URL),
        validator=validator,
        capture_enabled=settings.CAPTURE_ENABLED,
        spool_dir=settings.CAPTURE_SPOOL_DIR,
    )
    return WorkflowRegistry(
        backend=backend,
        form_factory=form_factory,
        tardiness_reporter=TardinessReporter(http_client),
        audit_logger=audit_logger,
        ttl_minutes=settings.WORKFLOW_TTL_MINUTES,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    http_client = httpx.AsyncClient(base_url=settings.API_BASE_URL, timeout=30.0)
    backend = BackendClient(async_session_maker)
    storage = LocalBlobStorage(settings.STORAGE_ROOT, settings.STORAGE_PUBLIC_URL)
    audit_logger = AuditLogger(http_client, enabled=settings.AUDIT_ENABLED)

    app.state.backend = backend
    app.state.audit_logger = audit_logger
    app.state.workflows = build_workflow_registry(backend, storage, http_client, audit_logger)
    logger.info(f"🚍 Transport admin started ({settings.ENVIRONMENT})")

    try:
        yield
    finally:
        app.state.workflows.close_all()
        await audit_logger.drain()
        await http_client.aclose()
        await engine.dispose()
        logger.info("Transport admin stopped")


# Create FastAPI app
app_config = {
    "title": "School Transport Administration",
    "description": "Fleet compliance and driver route-session service",
    "version": "1.0.0",
    "lifespan": lifespan,
}

app = FastAPI(**app_config)

# Add middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=settings.ALLOWED_METHODS,
    allow_headers=settings.ALLOWED_HEADERS
)
app.add_middleware(LoggingMiddleware)

# Mount static files
app.mount("/storage", StaticFiles(directory=settings.STORAGE_ROOT), name="storage")
app.mount(settings.PREVIEW_PUBLIC_URL, StaticFiles(directory=settings.PREVIEW_DIR), name="previews")

# Include routers
app.include_router(api_router, prefix="/api/v1")
app.include_router(backend_router, prefix="/api")


@app.get("/")
async def root():
    return {
        "message": "🚍 School Transport Administration",
        "status": "active",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
