# transport_admin/services/precheck/media_service.py
import logging
import random
import string
import time
import uuid
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from transport_admin.backend.storage import BlobStorage
from transport_admin.models.shared.enums import MediaType
from transport_admin.schemas.precheck.pre_check_schema import MediaUrl
from transport_admin.services.precheck.capture import PreviewHandle
from transport_admin.utils.file_handler import optimize_image_bytes

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = {MediaType.VIDEO: "mp4", MediaType.IMAGE: "jpg"}


@dataclass
class MediaAttachment:
    """A staged video or image waiting to be uploaded"""
    media_type: MediaType
    filename: str
    content_type: str
    data: bytes
    preview: Optional[PreviewHandle] = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def size(self) -> int:
        return len(self.data)


def _random_suffix(length: int = 11) -> str:
    return "".join(random.choices(string.ascii_lowercase + string.digits, k=length))


def build_storage_path(prefix: str, index: int, filename: str, media_type: MediaType) -> str:
    """<prefix>/<timestamp>_<index>_<random>.<ext>"""
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    ext = ext or DEFAULT_EXTENSIONS[media_type]
    timestamp = int(time.time() * 1000)
    return f"{prefix.rstrip('/')}/{timestamp}_{index}_{_random_suffix()}.{ext}"


def media_prefix(vehicle_id: int, media_type: MediaType) -> str:
    return f"vehicles/{vehicle_id}/pre-checks/{media_type.value}s"


class MediaUploadService:
    """Uploads pre-check media to the vehicle documents bucket, one attempt per item"""

    def __init__(self, storage: BlobStorage, bucket: str, image_max_dimension: int = 1920):
        self.storage = storage
        self.bucket = bucket
        self.image_max_dimension = image_max_dimension

    async def upload(self, item: MediaAttachment, prefix: str, index: int) -> Optional[MediaUrl]:
        """Upload one item; failures are logged and reported as None"""
        storage_path = build_storage_path(prefix, index, item.filename, item.media_type)
        data = item.data

        try:
            if item.media_type == MediaType.IMAGE:
                data = optimize_image_bytes(data, item.filename, self.image_max_dimension)
            path = await self.storage.upload(self.bucket, storage_path, data, item.content_type)
            url = self.storage.get_public_url(self.bucket, path)
        except Exception as e:
            logger.error(f"Error uploading {item.media_type.value} {item.filename}: {e}")
            return None

        return MediaUrl(type=item.media_type, url=url)

    async def upload_all(self, items: Sequence[MediaAttachment], vehicle_id: Optional[int]) -> List[MediaUrl]:
        """Upload every item independently, keeping the successful ones in order"""
        if not items:
            return []
        if vehicle_id is None:
            logger.warning(f"No vehicle assigned, skipping upload of {len(items)} pre-check media item(s)")
            return []

        media_urls = []
        counters = {MediaType.VIDEO: 0, MediaType.IMAGE: 0}
        for item in items:
            index = counters[item.media_type]
            counters[item.media_type] += 1
            uploaded = await self.upload(item, media_prefix(vehicle_id, item.media_type), index)
            if uploaded:
                media_urls.append(uploaded)

        logger.info(f"Uploaded {len(media_urls)}/{len(items)} pre-check media item(s) for vehicle {vehicle_id}")
        return media_urls
