import io
import logging
from pathlib import Path
from typing import Dict, Optional
from PIL import Image, UnidentifiedImageError

from transport_admin.core.exceptions import ValidationError
from transport_admin.models.shared.enums import MediaType

logger = logging.getLogger(__name__)


class MediaFileValidator:
    """Validates pre-check media by content type/extension and size"""

    def __init__(self, max_video_size: int, max_image_size: int):
        self.allowed_video_types = {
            "video/mp4", "video/webm", "video/quicktime", "video/x-matroska",
            "video/3gpp", "video/x-msvideo",
        }
        self.allowed_image_types = {
            "image/jpeg", "image/jpg", "image/png", "image/webp",
            "image/gif", "image/heic", "image/heif",
        }
        self.video_extensions = {".mp4", ".webm", ".mov", ".mkv", ".3gp", ".avi"}
        self.image_extensions = {".jpg", ".jpeg", ".png", ".webp", ".gif", ".heic", ".heif"}
        self.max_video_size = max_video_size
        self.max_image_size = max_image_size

    def get_media_type(self, filename: str, content_type: Optional[str]) -> Optional[MediaType]:
        """Determine if a file is a video or an image"""
        content_type = (content_type or "").split(";")[0].strip().lower()
        file_extension = Path(filename or "").suffix.lower()

        # Check by content type first
        if content_type in self.allowed_video_types:
            return MediaType.VIDEO
        if content_type in self.allowed_image_types:
            return MediaType.IMAGE

        # Fallback to extension check
        if file_extension in self.video_extensions:
            return MediaType.VIDEO
        if file_extension in self.image_extensions:
            return MediaType.IMAGE
        return None

    def validate(self, filename: str, content_type: Optional[str], size: int, expected: MediaType) -> Dict[str, object]:
        if not filename:
            raise ValidationError("No filename provided")

        media_type = self.get_media_type(filename, content_type)
        if media_type != expected:
            allowed = "MP4, WebM, MOV" if expected == MediaType.VIDEO else "JPEG, PNG, WebP, GIF, HEIC"
            raise ValidationError(f"Unsupported file type for {expected.value}. Allowed: {allowed}")

        if size == 0:
            raise ValidationError("File is empty")

        limit = self.max_video_size if expected == MediaType.VIDEO else self.max_image_size
        if size > limit:
            raise ValidationError(
                f"{expected.value.capitalize()} size too large. Max: {limit // (1024 * 1024)}MB"
            )

        return {"media_type": media_type, "file_size": size, "is_valid": True}


def optimize_image_bytes(data: bytes, filename: str, max_dimension: int = 1920) -> bytes:
    """Down-scale and re-encode an image; returns the original bytes if it cannot be read"""
    suffix = Path(filename).suffix.lower()
    try:
        with Image.open(io.BytesIO(data)) as img:
            # Convert to RGB if necessary (but preserve transparency for PNG)
            if img.mode in ("RGBA", "LA", "P") and suffix not in (".png", ".webp"):
                img = img.convert("RGB")

            if max(img.size) > max_dimension:
                img.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)

            out = io.BytesIO()
            if suffix in (".jpg", ".jpeg"):
                img.save(out, format="JPEG", optimize=True, quality=85)
            elif suffix == ".png":
                img.save(out, format="PNG", optimize=True)
            elif suffix == ".webp":
                img.save(out, format="WEBP", quality=85)
            else:
                return data
            return out.getvalue()

    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        logger.error(f"Error optimizing image {filename}: {e}")
        # Don't raise error, upload the original
        return data
