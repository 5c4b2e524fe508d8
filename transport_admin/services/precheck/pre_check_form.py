# transport_admin/services/precheck/pre_check_form.py
"""
Vehicle pre-check form.

One ``PreCheckForm`` lives for one AM start attempt. Its state is a single
``PreCheckState`` value moved only through ``_transition``:

    EDITING <-> RECORDING
    EDITING  -> SUBMITTING -> COMPLETED
    EDITING  -> CANCELLED

RECORDING is a sub-state of editing: checklist, notes and file selection
stay available, only start/stop recording are exclusive.
"""
import logging
import time
from typing import Dict, Iterable, List, Optional, Tuple

from transport_admin.core.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from transport_admin.models.shared.enums import MediaType, PreCheckState, SessionType
from transport_admin.schemas.precheck.pre_check_schema import (
    CHECKLIST_FIELDS, MediaItemView, PreCheckFormView, VehiclePreCheckData
)
from transport_admin.services.precheck.capture import CaptureDevice, CaptureStream, PreviewStore
from transport_admin.services.precheck.media_service import MediaAttachment, MediaUploadService
from transport_admin.utils.file_handler import MediaFileValidator

logger = logging.getLogger(__name__)

# (filename, content_type, data)
SelectedFile = Tuple[str, Optional[str], bytes]

_TRANSITIONS = {
    PreCheckState.EDITING: {PreCheckState.RECORDING, PreCheckState.SUBMITTING, PreCheckState.CANCELLED},
    PreCheckState.RECORDING: {PreCheckState.EDITING},
    PreCheckState.SUBMITTING: {PreCheckState.COMPLETED, PreCheckState.EDITING},
    PreCheckState.COMPLETED: set(),
    PreCheckState.CANCELLED: set(),
}

_EDITABLE = (PreCheckState.EDITING, PreCheckState.RECORDING)


class PreCheckForm:
    def __init__(
        self,
        session_type: SessionType,
        vehicle_id: Optional[int],
        media_service: MediaUploadService,
        capture_device: CaptureDevice,
        preview_store: PreviewStore,
        validator: MediaFileValidator
    ):
        self.session_type = session_type
        self.vehicle_id = vehicle_id
        self.media_service = media_service
        self.capture_device = capture_device
        self.preview_store = preview_store
        self.validator = validator

        self.state = PreCheckState.EDITING
        self.checks: Dict[str, bool] = {field: False for field in CHECKLIST_FIELDS}
        self.notes = ""
        self.issues_found = ""
        self.media: List[MediaAttachment] = []
        self.result: Optional[VehiclePreCheckData] = None
        self._capture: Optional[CaptureStream] = None

    # --- state ---

    def _transition(self, target: PreCheckState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise InvalidTransitionError(
                f"Pre-check cannot move from {self.state.value} to {target.value}"
            )
        logger.debug(f"Pre-check {self.state.value} -> {target.value}")
        self.state = target

    def _require_editable(self, action: str) -> None:
        if self.state not in _EDITABLE:
            raise InvalidTransitionError(f"Cannot {action} while pre-check is {self.state.value}")

    @property
    def all_checks_complete(self) -> bool:
        return all(self.checks[field] for field in CHECKLIST_FIELDS)

    @property
    def recording(self) -> bool:
        return self.state == PreCheckState.RECORDING

    # --- checklist and free text ---

    def toggle(self, field: str) -> bool:
        """Flip one checklist item and return its new value"""
        self._require_editable("change checks")
        if field not in self.checks:
            raise ValidationError(f"Unknown checklist item: {field}")
        self.checks[field] = not self.checks[field]
        return self.checks[field]

    def set_notes(self, notes: Optional[str] = None, issues_found: Optional[str] = None) -> None:
        self._require_editable("edit notes")
        if notes is not None:
            self.notes = notes
        if issues_found is not None:
            self.issues_found = issues_found

    # --- recording ---

    def start_recording(self) -> None:
        if self.state != PreCheckState.EDITING:
            raise InvalidTransitionError(f"Cannot start recording while pre-check is {self.state.value}")
        try:
            stream = self.capture_device.acquire()
        except Exception as e:
            logger.error(f"Error starting video recording: {e}")
            raise
        self._capture = stream
        self._transition(PreCheckState.RECORDING)

    def write_recording(self, chunk: bytes) -> int:
        if self.state != PreCheckState.RECORDING or self._capture is None:
            raise InvalidTransitionError("No recording in progress")
        self._capture.write(chunk)
        return self._capture.size

    def stop_recording(self) -> MediaAttachment:
        """Finish the walkaround video; the device is released even if finalizing fails"""
        if self.state != PreCheckState.RECORDING or self._capture is None:
            raise InvalidTransitionError("No recording in progress")
        stream = self._capture
        try:
            data = stream.finalize()
            filename = f"walkaround_{int(time.time() * 1000)}.webm"
            return self._append(MediaType.VIDEO, filename, stream.mime_type, data)
        finally:
            stream.release()
            self._capture = None
            self._transition(PreCheckState.EDITING)

    # --- file selection ---

    def _append(self, media_type: MediaType, filename: str, content_type: Optional[str], data: bytes) -> MediaAttachment:
        item = MediaAttachment(
            media_type=media_type,
            filename=filename,
            content_type=content_type or "application/octet-stream",
            data=data,
        )
        item.preview = self.preview_store.create(data, filename)
        self.media.append(item)
        return item

    def select_video_file(self, filename: str, content_type: Optional[str], data: bytes) -> MediaAttachment:
        self._require_editable("add media")
        self.validator.validate(filename, content_type, len(data), MediaType.VIDEO)
        return self._append(MediaType.VIDEO, filename, content_type, data)

    def select_image_files(self, files: Iterable[SelectedFile]) -> List[MediaAttachment]:
        self._require_editable("add media")
        files = list(files)
        # Validate the whole selection before staging any of it
        for filename, content_type, data in files:
            self.validator.validate(filename, content_type, len(data), MediaType.IMAGE)
        return [self._append(MediaType.IMAGE, *selected) for selected in files]

    def remove_media(self, index: int) -> MediaAttachment:
        self._require_editable("remove media")
        if index < 0 or index >= len(self.media):
            raise NotFoundError("Media item not found")
        item = self.media.pop(index)
        if item.preview:
            self.preview_store.revoke(item.preview)
        return item

    # --- completion ---

    async def submit(self) -> VehiclePreCheckData:
        """Upload queued media and finalize the pre-check"""
        if self.state == PreCheckState.SUBMITTING:
            raise InvalidTransitionError("Pre-check is already being submitted")
        if self.state == PreCheckState.RECORDING:
            raise InvalidTransitionError("Stop the recording before submitting")
        if not self.all_checks_complete:
            raise ValidationError("Complete all checks before starting your route")

        self._transition(PreCheckState.SUBMITTING)
        try:
            media_urls = await self.media_service.upload_all(self.media, self.vehicle_id)
        except Exception as e:
            logger.error(f"Error submitting pre-check: {e}")
            self._transition(PreCheckState.EDITING)
            raise

        self.result = VehiclePreCheckData(
            **self.checks,
            notes=self.notes,
            issues_found=self.issues_found,
            media_urls=media_urls or None,
        )
        self._transition(PreCheckState.COMPLETED)
        self._release_resources()
        logger.info(
            f"✅ {self.session_type.value} pre-check completed for vehicle {self.vehicle_id} "
            f"with {len(media_urls)} media item(s)"
        )
        return self.result

    def cancel(self) -> None:
        if self.state != PreCheckState.EDITING:
            raise InvalidTransitionError(f"Cannot cancel while pre-check is {self.state.value}")
        self._transition(PreCheckState.CANCELLED)
        self._release_resources()
        self.media.clear()

    def close(self) -> None:
        """Teardown: release the camera and every preview, whatever the state"""
        if self.state in _EDITABLE:
            self.state = PreCheckState.CANCELLED
        self._release_resources()

    def _release_resources(self) -> None:
        if self._capture is not None:
            self._capture.release()
            self._capture = None
        for item in self.media:
            if item.preview:
                self.preview_store.revoke(item.preview)

    def view(self) -> PreCheckFormView:
        return PreCheckFormView(
            state=self.state,
            session_type=self.session_type,
            vehicle_id=self.vehicle_id,
            checks=dict(self.checks),
            all_checks_complete=self.all_checks_complete,
            notes=self.notes,
            issues_found=self.issues_found,
            media=[
                MediaItemView(
                    index=index,
                    id=item.id,
                    type=item.media_type,
                    filename=item.filename,
                    size=item.size,
                    preview_url=item.preview.url if item.preview and not item.preview.released else None,
                )
                for index, item in enumerate(self.media)
            ],
            recording=self.recording,
        )


class PreCheckFormFactory:
    """Builds forms wired to the shared media services; each form gets its own capture device"""

    def __init__(
        self,
        media_service: MediaUploadService,
        preview_store: PreviewStore,
        validator: MediaFileValidator,
        capture_enabled: bool = True,
        spool_dir: Optional[str] = None
    ):
        self.media_service = media_service
        self.preview_store = preview_store
        self.validator = validator
        self.capture_enabled = capture_enabled
        self.spool_dir = spool_dir

    def __call__(self, session_type: SessionType, vehicle_id: Optional[int]) -> PreCheckForm:
        return PreCheckForm(
            session_type=session_type,
            vehicle_id=vehicle_id,
            media_service=self.media_service,
            capture_device=CaptureDevice(
                enabled=self.capture_enabled,
                max_bytes=self.validator.max_video_size,
                spool_dir=self.spool_dir,
            ),
            preview_store=self.preview_store,
            validator=self.validator,
        )
