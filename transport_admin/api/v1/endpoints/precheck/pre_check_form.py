import logging
from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status
from typing import List

from transport_admin.api.dependencies import get_workflow
from transport_admin.core.exceptions import InvalidTransitionError
from transport_admin.models.shared.enums import WorkflowState
from transport_admin.schemas.precheck.pre_check_schema import (
    PreCheckFormView, PreCheckNotesUpdate, ToggleCheckRequest
)
from transport_admin.schemas.session.start_session_schema import WorkflowView
from transport_admin.services.precheck.pre_check_form import PreCheckForm
from transport_admin.services.session.session_start_service import SessionStartOrchestrator

router = APIRouter()
logger = logging.getLogger(__name__)


def get_pre_check(workflow: SessionStartOrchestrator = Depends(get_workflow)) -> PreCheckForm:
    if workflow.state != WorkflowState.CHOOSING_PRE_CHECK or workflow.pre_check is None:
        raise InvalidTransitionError("No pre-check in progress")
    return workflow.pre_check


@router.post("/toggle", response_model=PreCheckFormView)
async def toggle_check(body: ToggleCheckRequest, form: PreCheckForm = Depends(get_pre_check)):
    form.toggle(body.field)
    return form.view()


@router.put("/notes", response_model=PreCheckFormView)
async def update_notes(body: PreCheckNotesUpdate, form: PreCheckForm = Depends(get_pre_check)):
    form.set_notes(notes=body.notes, issues_found=body.issues_found)
    return form.view()


@router.post("/recording/start", response_model=PreCheckFormView)
async def start_recording(form: PreCheckForm = Depends(get_pre_check)):
    form.start_recording()
    return form.view()


@router.post("/recording/chunks")
async def append_recording_chunk(request: Request, form: PreCheckForm = Depends(get_pre_check)):
    """Append raw video bytes streamed by the driver's camera"""
    chunk = await request.body()
    size = form.write_recording(chunk)
    return {"success": True, "size": size}


@router.post("/recording/stop", response_model=PreCheckFormView)
async def stop_recording(form: PreCheckForm = Depends(get_pre_check)):
    form.stop_recording()
    return form.view()


@router.post("/videos", response_model=PreCheckFormView)
async def select_video(
    file: UploadFile = File(...),
    form: PreCheckForm = Depends(get_pre_check)
):
    try:
        data = await file.read()
        form.select_video_file(file.filename, file.content_type, data)
        return form.view()

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error staging pre-check video: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to add video"
        )


@router.post("/images", response_model=PreCheckFormView)
async def select_images(
    files: List[UploadFile] = File(...),
    form: PreCheckForm = Depends(get_pre_check)
):
    try:
        selected = [(f.filename, f.content_type, await f.read()) for f in files]
        form.select_image_files(selected)
        return form.view()

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error staging pre-check images: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to add images"
        )


@router.delete("/media/{index}", response_model=PreCheckFormView)
async def remove_media(index: int, form: PreCheckForm = Depends(get_pre_check)):
    form.remove_media(index)
    return form.view()


@router.post("/submit", response_model=WorkflowView)
async def submit_pre_check(workflow: SessionStartOrchestrator = Depends(get_workflow)):
    """Upload media, then start the AM session and store the pre-check"""
    await workflow.submit_pre_check()
    return workflow.view()


@router.post("/cancel", response_model=WorkflowView)
async def cancel_pre_check(workflow: SessionStartOrchestrator = Depends(get_workflow)):
    workflow.cancel_pre_check()
    return workflow.view()
