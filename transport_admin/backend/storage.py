import logging
import aiofiles
from pathlib import Path
from typing import Protocol

from transport_admin.core.exceptions import StorageError

logger = logging.getLogger(__name__)


class BlobStorage(Protocol):
    async def upload(self, bucket: str, path: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        ...

    def get_public_url(self, bucket: str, path: str) -> str:
        ...


class LocalBlobStorage:
    """Bucketed blob storage on the local filesystem, served under a public base URL"""

    def __init__(self, root: str, public_base_url: str):
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")

    def _resolve(self, bucket: str, path: str) -> Path:
        bucket_dir = (self.root / bucket).resolve()
        target = (bucket_dir / path.lstrip("/")).resolve()
        # Security check: ensure object stays inside its bucket
        if bucket_dir not in target.parents:
            raise StorageError(f"Invalid storage path: {path}")
        return target

    async def upload(self, bucket: str, path: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        """Store an object; never overwrites an existing one"""
        target = self._resolve(bucket, path)
        if target.exists():
            raise StorageError("The resource already exists")

        target.parent.mkdir(parents=True, exist_ok=True)
        try:
            async with aiofiles.open(target, "wb") as f:
                await f.write(data)
        except OSError as e:
            logger.error(f"Error writing {bucket}/{path}: {e}")
            if target.exists():
                target.unlink()  # Clean up on error
            raise StorageError(f"Failed to store object: {path}")

        logger.info(f"Stored {len(data)} bytes ({content_type}) at {bucket}/{path}")
        return path.lstrip("/")

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self.public_base_url}/{bucket}/{path.lstrip('/')}"
