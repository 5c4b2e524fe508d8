"""
Walkaround video capture and local media previews.

A ``CaptureDevice`` stands in for the driver's camera and microphone: it can
be held by a single ``CaptureStream`` at a time. Chunks streamed by the
phone are spooled to a temporary file until the recording is stopped.
``PreviewStore`` keeps staged media reachable under a preview URL until the
item is removed, submitted or the form is torn down.
"""
import logging
import tempfile
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from transport_admin.core.exceptions import CapabilityError, ValidationError

logger = logging.getLogger(__name__)

SPOOL_IN_MEMORY_BYTES = 5 * 1024 * 1024


class CaptureStream:
    """An in-progress recording holding the capture device"""

    mime_type = "video/webm"

    def __init__(self, device: "CaptureDevice", max_bytes: int):
        self._device = device
        self._max_bytes = max_bytes
        self._size = 0
        self._buffer = tempfile.SpooledTemporaryFile(
            max_size=SPOOL_IN_MEMORY_BYTES, dir=device.spool_dir
        )
        self.released = False

    @property
    def size(self) -> int:
        return self._size

    def write(self, chunk: bytes) -> None:
        if self.released:
            raise CapabilityError("Recording has already been stopped")
        if self._size + len(chunk) > self._max_bytes:
            raise ValidationError(f"Recording too large. Max: {self._max_bytes // (1024 * 1024)}MB")
        self._buffer.write(chunk)
        self._size += len(chunk)

    def finalize(self) -> bytes:
        """Collect the recorded bytes"""
        if self.released:
            raise CapabilityError("Recording has already been stopped")
        if self._size == 0:
            raise ValidationError("No video was recorded")
        self._buffer.seek(0)
        return self._buffer.read()

    def release(self) -> None:
        """Close the spool and hand the device back; safe to call repeatedly"""
        if self.released:
            return
        self.released = True
        try:
            self._buffer.close()
        finally:
            self._device._on_release(self)


class CaptureDevice:
    def __init__(self, enabled: bool = True, max_bytes: int = 200 * 1024 * 1024, spool_dir: Optional[str] = None):
        self.enabled = enabled
        self.max_bytes = max_bytes
        self.spool_dir = spool_dir
        self._active: Optional[CaptureStream] = None

    @property
    def in_use(self) -> bool:
        return self._active is not None

    def acquire(self) -> CaptureStream:
        if not self.enabled:
            raise CapabilityError()
        if self._active is not None:
            raise CapabilityError("Camera is already in use by another recording")
        self._active = CaptureStream(self, self.max_bytes)
        logger.info("🎥 Capture device acquired")
        return self._active

    def _on_release(self, stream: CaptureStream) -> None:
        if self._active is stream:
            self._active = None
            logger.info("Capture device released")


@dataclass
class PreviewHandle:
    url: str
    path: Path
    released: bool = False


class PreviewStore:
    """Stages media files under a preview URL until they are revoked"""

    def __init__(self, preview_dir: str, public_url: str = "/previews"):
        self.preview_dir = Path(preview_dir)
        self.public_url = public_url.rstrip("/")
        self.preview_dir.mkdir(parents=True, exist_ok=True)

    def create(self, data: bytes, filename: str) -> PreviewHandle:
        suffix = Path(filename).suffix.lower()
        name = f"{int(time.time() * 1000)}_{uuid.uuid4().hex[:12]}{suffix}"
        path = self.preview_dir / name
        path.write_bytes(data)
        return PreviewHandle(url=f"{self.public_url}/{name}", path=path)

    def revoke(self, handle: PreviewHandle) -> bool:
        """Delete a preview; returns False if it was already released"""
        if handle.released:
            return False
        handle.released = True
        try:
            handle.path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove preview {handle.path}: {e}")
        return True
