import re
import pytest

from transport_admin.core.exceptions import StorageError, ValidationError
from transport_admin.models.shared.enums import MediaType
from transport_admin.services.precheck.media_service import (
    MediaAttachment, MediaUploadService, build_storage_path, media_prefix
)
from transport_admin.utils.file_handler import MediaFileValidator


def attachment(media_type, filename, data=b"bytes"):
    content_type = "video/mp4" if media_type == MediaType.VIDEO else "image/jpeg"
    return MediaAttachment(media_type=media_type, filename=filename, content_type=content_type, data=data)


class TestStoragePath:
    def test_path_layout(self):
        path = build_storage_path(media_prefix(9, MediaType.IMAGE), 3, "Front Tyre.JPG", MediaType.IMAGE)
        assert re.fullmatch(r"vehicles/9/pre-checks/images/\d{13}_3_[a-z0-9]{11}\.jpg", path)

    def test_default_extension(self):
        path = build_storage_path("vehicles/9/pre-checks/videos", 0, "walkaround", MediaType.VIDEO)
        assert path.endswith(".mp4")

    def test_same_filename_never_collides(self):
        prefix = media_prefix(9, MediaType.IMAGE)
        paths = {build_storage_path(prefix, 0, "photo.jpg", MediaType.IMAGE) for _ in range(20)}
        assert len(paths) == 20


@pytest.mark.asyncio
class TestUploadAll:
    async def test_videos_and_images_get_their_own_prefix(self, fake_storage):
        service = MediaUploadService(fake_storage, "VEHICLE_DOCUMENTS")
        urls = await service.upload_all([
            attachment(MediaType.VIDEO, "walk.mp4"),
            attachment(MediaType.IMAGE, "a.jpg"),
            attachment(MediaType.IMAGE, "b.jpg"),
        ], vehicle_id=9)

        assert [u.type for u in urls] == [MediaType.VIDEO, MediaType.IMAGE, MediaType.IMAGE]
        assert "/pre-checks/videos/" in urls[0].url and "_0_" in urls[0].url
        assert "/pre-checks/images/" in urls[2].url and "_1_" in urls[2].url
        assert urls[0].url.startswith("https://cdn.test/VEHICLE_DOCUMENTS/")

    async def test_failed_item_is_dropped(self, failing_storage):
        service = MediaUploadService(failing_storage, "VEHICLE_DOCUMENTS")
        urls = await service.upload_all([
            attachment(MediaType.IMAGE, "a.jpg"),
            attachment(MediaType.IMAGE, "b.jpg"),
        ], vehicle_id=9)
        assert len(urls) == 1
        assert "_0_" in urls[0].url

    async def test_local_storage_refuses_overwrite(self, storage):
        await storage.upload("VEHICLE_DOCUMENTS", "vehicles/1/x.jpg", b"one")
        with pytest.raises(StorageError):
            await storage.upload("VEHICLE_DOCUMENTS", "vehicles/1/x.jpg", b"two")

        service = MediaUploadService(storage, "VEHICLE_DOCUMENTS")
        url = await service.upload(attachment(MediaType.IMAGE, "x.jpg"), "vehicles/1", 0)
        assert url is not None
        assert url.url.startswith("http://test/storage/VEHICLE_DOCUMENTS/vehicles/1/")


class TestMediaFileValidator:
    def test_rejections(self):
        validator = MediaFileValidator(max_video_size=100, max_image_size=10)
        with pytest.raises(ValidationError):
            validator.validate("", "image/jpeg", 5, MediaType.IMAGE)
        with pytest.raises(ValidationError):
            validator.validate("a.jpg", "image/jpeg", 0, MediaType.IMAGE)
        with pytest.raises(ValidationError):
            validator.validate("a.jpg", "image/jpeg", 11, MediaType.IMAGE)
        with pytest.raises(ValidationError):
            validator.validate("clip.mp4", "video/mp4", 5, MediaType.IMAGE)

    def test_extension_fallback(self):
        validator = MediaFileValidator(max_video_size=100, max_image_size=10)
        assert validator.get_media_type("clip.MOV", "application/octet-stream") == MediaType.VIDEO
        assert validator.validate("shot.heic", None, 5, MediaType.IMAGE)["is_valid"]
