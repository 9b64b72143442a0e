"""
Capture Service - Business logic for camera and upload captures.

This service sits between the HTTP layer and the camera core: it drives the
camera session, turns its non-fatal operation failures into exceptions,
attaches synthesized metadata to every image and records it in the gallery.
"""

import logging
from datetime import datetime
from typing import List, Optional

from core.camera_session import CameraSession, SessionState
from core.constants import UploadConstants
from core.enums import DeviceClass, FacingMode, SourceType
from core.exceptions import (
    CameraError,
    CaptureNotReadyError,
    ConstraintRejectedError,
    ImageNotFoundError,
    SessionNotReadyError,
)
from core.gallery import CaptureGallery, CapturedImage
from core.metadata import EnvironmentDescriptors, FileInfo, synthesize_metadata
from core.upload_reader import read_upload

logger = logging.getLogger(__name__)


class CaptureService:
    """
    Service for capture operations.

    Combines the camera session with metadata synthesis and the capture gallery.
    """

    def __init__(
        self,
        session: CameraSession,
        gallery: CaptureGallery,
        max_upload_mb: float = UploadConstants.DEFAULT_MAX_SIZE_MB,
        max_upload_pixels: int = UploadConstants.MAX_PIXELS,
    ):
        """
        Initialize capture service.

        Args:
            session: Camera session instance
            gallery: Capture gallery instance
            max_upload_mb: Upload size limit
            max_upload_pixels: Largest accepted upload width x height
        """
        self.session = session
        self.gallery = gallery
        self.max_upload_mb = max_upload_mb
        self.max_upload_pixels = max_upload_pixels

    def _failure(self, default: CameraError) -> CameraError:
        """Error recorded by the session for its last failed operation"""
        return self.session.last_error or default

    async def initialize(
        self,
        facing: Optional[FacingMode] = None,
        device_class: Optional[DeviceClass] = None,
        secure_context: bool = True,
    ) -> SessionState:
        """Start (or restart) the camera; acquisition errors are reported in the state"""
        return await self.session.initialize(
            facing, device_class=device_class, secure_context=secure_context
        )

    async def switch_device(self) -> SessionState:
        if not await self.session.switch_device():
            raise self._failure(SessionNotReadyError())
        return self.session.current_state()

    async def set_zoom(self, level: float) -> SessionState:
        if not await self.session.set_zoom(level):
            raise self._failure(ConstraintRejectedError("Zoom was not applied"))
        return self.session.current_state()

    async def toggle_flash(self) -> SessionState:
        if not await self.session.toggle_flash():
            raise self._failure(ConstraintRejectedError("Flash was not toggled"))
        return self.session.current_state()

    def capture(self, environment: Optional[EnvironmentDescriptors] = None) -> CapturedImage:
        """
        Capture a frame from the live camera.

        Args:
            environment: Client/device descriptors for the metadata

        Returns:
            The stored CapturedImage

        Raises:
            CaptureNotReadyError: If the camera has no frame to capture
        """
        payload = self.session.capture()
        if payload is None:
            raise self._failure(CaptureNotReadyError())
        environment = environment or EnvironmentDescriptors.local(self.session.backend_name)

        captured_at = datetime.now().astimezone()
        metadata = synthesize_metadata(
            payload,
            SourceType.CAMERA,
            capabilities=self.session.current_capabilities(),
            environment=environment,
            facing=self.session.facing,
            captured_at=captured_at,
        )
        image = self.gallery.add(payload, metadata, SourceType.CAMERA, timestamp=captured_at)
        logger.info(f"Captured {image.id} ({payload.width}x{payload.height})")
        return image

    def upload(
        self,
        data: bytes,
        file_name: Optional[str] = None,
        content_type: Optional[str] = None,
        last_modified: Optional[datetime] = None,
        environment: Optional[EnvironmentDescriptors] = None,
    ) -> CapturedImage:
        """
        Store an uploaded image file.

        Raises:
            UploadDecodeError: If the file is not a decodable image
        """
        payload = read_upload(
            data,
            content_type,
            max_size_mb=self.max_upload_mb,
            max_pixels=self.max_upload_pixels,
        )
        environment = environment or EnvironmentDescriptors.local(self.session.backend_name)

        uploaded_at = datetime.now().astimezone()
        metadata = synthesize_metadata(
            payload,
            SourceType.UPLOAD,
            capabilities=self.session.current_capabilities(),
            environment=environment,
            file_info=FileInfo(
                name=file_name,
                size=len(data),
                mime_type=content_type,
                last_modified=last_modified,
            ),
            captured_at=uploaded_at,
        )
        image = self.gallery.add(payload, metadata, SourceType.UPLOAD, timestamp=uploaded_at)
        logger.info(f"Uploaded {image.id} from {file_name} ({payload.width}x{payload.height})")
        return image

    def get_image(self, image_id: str) -> CapturedImage:
        image = self.gallery.get(image_id)
        if image is None:
            raise ImageNotFoundError(image_id)
        return image

    def list_images(
        self, limit: int = 10, source_type: Optional[SourceType] = None
    ) -> List[CapturedImage]:
        return self.gallery.get_recent(limit, source_type)
