"""
Tests for CaptureService
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from core.camera_session import SessionState
from core.capabilities import CameraCapabilities
from core.enums import DeviceClass, SourceType
from core.exceptions import (
    CaptureNotReadyError,
    ConstraintRejectedError,
    ImageNotFoundError,
    SessionNotReadyError,
    UploadDecodeError,
)
from core.metadata import EnvironmentDescriptors
from services.capture_service import CaptureService


class TestCaptureService:
    @pytest.mark.asyncio
    async def test_capture(self, capture_service, gallery):
        await capture_service.initialize()
        environment = EnvironmentDescriptors(
            language="de-DE", device_class=DeviceClass.DESKTOP, camera_backend="Test Pattern"
        )

        image = capture_service.capture(environment)

        assert image.source_type == SourceType.CAMERA
        assert image.metadata.capture_method == "Live Camera"
        assert image.metadata.facing_mode == "front"
        assert image.metadata.language == "de-DE"
        assert image.metadata.make == "Test Pattern"
        assert (image.metadata.image_width, image.metadata.image_height) == (640, 480)
        assert gallery.get(image.id) is image

    def test_capture_not_ready(self, capture_service, gallery):
        with pytest.raises(CaptureNotReadyError):
            capture_service.capture()

        assert len(gallery) == 0

    def test_upload(self, capture_service, png_1024x768):
        modified = datetime(2024, 3, 1, tzinfo=timezone.utc)

        image = capture_service.upload(
            png_1024x768, file_name="scan.png", content_type="image/png", last_modified=modified
        )

        assert image.source_type == SourceType.UPLOAD
        assert image.metadata.image_width == 1024
        assert image.metadata.image_height == 768
        assert image.metadata.capture_method == "File Upload"
        assert image.metadata.file_name == "scan.png"
        assert image.metadata.last_modified == modified.isoformat()

    def test_upload_invalid(self, capture_service, gallery):
        with pytest.raises(UploadDecodeError):
            capture_service.upload(b"nope", file_name="a.png", content_type="image/png")

        assert len(gallery) == 0

    def test_upload_size_limit(self, camera_session, gallery, png_1024x768):
        service = CaptureService(camera_session, gallery, max_upload_mb=0.0001)

        with pytest.raises(UploadDecodeError):
            service.upload(png_1024x768, content_type="image/png")

    def test_upload_pixel_limit(self, camera_session, gallery, png_1024x768):
        service = CaptureService(camera_session, gallery, max_upload_pixels=640 * 480)

        with pytest.raises(UploadDecodeError, match="pixels"):
            service.upload(png_1024x768, content_type="image/png")

        assert len(gallery) == 0

    @pytest.mark.asyncio
    async def test_switch_not_ready(self, capture_service):
        with pytest.raises(SessionNotReadyError):
            await capture_service.switch_device()

    @pytest.mark.asyncio
    async def test_zoom(self, capture_service):
        await capture_service.initialize()

        state = await capture_service.set_zoom(2.0)

        assert state.capabilities.current_zoom == 2.0

    @pytest.mark.asyncio
    async def test_zoom_rejected(self, capture_service):
        await capture_service.initialize()

        with pytest.raises(ConstraintRejectedError):
            await capture_service.set_zoom(50.0)

    @pytest.mark.asyncio
    async def test_flash(self, capture_service):
        await capture_service.initialize()

        state = await capture_service.toggle_flash()

        assert state.capabilities.is_flash_on is True

    @pytest.mark.asyncio
    async def test_failure_without_recorded_error(self, gallery):
        session = MagicMock()
        session.set_zoom = AsyncMock(return_value=False)
        session.last_error = None
        service = CaptureService(session, gallery)

        with pytest.raises(ConstraintRejectedError, match="Zoom was not applied"):
            await service.set_zoom(2.0)

    def test_upload_records_camera_capabilities(self, gallery, png_1024x768):
        session = MagicMock()
        session.current_capabilities.return_value = CameraCapabilities(
            has_zoom=True, current_zoom=3.0
        )
        session.current_state.return_value = SessionState.ready(
            session.current_capabilities.return_value
        )
        service = CaptureService(session, gallery)

        image = service.upload(png_1024x768, content_type="image/png")

        assert image.metadata.has_zoom is True
        assert image.metadata.current_zoom == 3.0

    def test_get_image(self, capture_service, png_1024x768):
        image = capture_service.upload(png_1024x768, content_type="image/png")

        assert capture_service.get_image(image.id) is image
        with pytest.raises(ImageNotFoundError):
            capture_service.get_image("img_missing")

    def test_list_images(self, capture_service, image_bytes):
        first = capture_service.upload(image_bytes(10, 10), content_type="image/png")
        second = capture_service.upload(image_bytes(20, 20), content_type="image/png")

        assert [i.id for i in capture_service.list_images()] == [second.id, first.id]
        assert capture_service.list_images(source_type=SourceType.CAMERA) == []
