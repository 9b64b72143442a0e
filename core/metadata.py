"""
Metadata Synthesizer - builds the descriptive record for captured and uploaded images
"""

import logging
import platform as platform_module
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from core.capabilities import CameraCapabilities
from core.constants import CaptureConstants, MetadataConstants
from core.enums import CaptureMethod, DeviceClass, FacingMode, SourceType
from core.frame_capturer import EncodedImage
from core.image.converters import ImageConverters
from schemas.metadata import CaptureMetadata

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnvironmentDescriptors:
    """Device/client context of a capture; None marks an unknown value"""

    user_agent: Optional[str] = None
    platform: Optional[str] = None
    language: Optional[str] = None
    time_zone: Optional[str] = None
    device_class: Optional[DeviceClass] = None
    camera_backend: Optional[str] = None

    @classmethod
    def local(cls, camera_backend: Optional[str] = None) -> "EnvironmentDescriptors":
        """Descriptors of the host process itself"""
        return cls(
            platform=platform_module.system() or None,
            time_zone=datetime.now().astimezone().tzname(),
            device_class=DeviceClass.DESKTOP,
            camera_backend=camera_backend,
        )


@dataclass(frozen=True)
class FileInfo:
    """Properties of an uploaded file as declared by the client"""

    name: Optional[str] = None
    size: Optional[int] = None
    mime_type: Optional[str] = None
    last_modified: Optional[datetime] = None


def synthesize_metadata(
    payload: EncodedImage,
    source_type: SourceType,
    capabilities: Optional[CameraCapabilities] = None,
    environment: Optional[EnvironmentDescriptors] = None,
    file_info: Optional[FileInfo] = None,
    facing: Optional[FacingMode] = None,
    captured_at: Optional[datetime] = None,
) -> CaptureMetadata:
    """
    Build the metadata record for an image payload.

    The capture method follows source_type, never the payload content. Pixel
    dimensions are read from the payload. This function does not fail: values
    it cannot determine are left as None.

    Args:
        payload: Encoded image
        source_type: Where the image came from
        capabilities: Camera capability snapshot at capture time
        environment: Client/device descriptors
        file_info: Declared properties of an uploaded file
        facing: Camera facing direction for live captures
        captured_at: Capture time (defaults to now)

    Returns:
        CaptureMetadata
    """
    capabilities = capabilities or CameraCapabilities.none()
    environment = environment or EnvironmentDescriptors()
    captured_at = captured_at or datetime.now(timezone.utc)
    if captured_at.tzinfo is None:
        captured_at = captured_at.astimezone()

    dimensions = ImageConverters.read_dimensions(payload.data)
    if dimensions is None and payload.width and payload.height:
        dimensions = (payload.width, payload.height)
    width, height = dimensions if dimensions else (None, None)

    is_camera = source_type == SourceType.CAMERA
    make = model = None
    if is_camera:
        make = environment.camera_backend
        model = (
            MetadataConstants.MOBILE_MODEL
            if environment.device_class == DeviceClass.MOBILE
            else MetadataConstants.DESKTOP_MODEL
        )

    file_info = file_info if not is_camera else None
    file_size = payload.size
    if file_info and file_info.size is not None:
        file_size = file_info.size

    return CaptureMetadata(
        date_time=captured_at.isoformat(),
        capture_timestamp=int(captured_at.timestamp() * 1000),
        time_zone=environment.time_zone,
        image_width=width,
        image_height=height,
        file_size=file_size,
        color_depth=CaptureConstants.COLOR_DEPTH,
        has_zoom=capabilities.has_zoom,
        current_zoom=capabilities.current_zoom,
        has_flash=capabilities.has_flash,
        is_flash_on=capabilities.is_flash_on,
        facing_mode=facing.value if (is_camera and facing) else None,
        capture_method=CaptureMethod.for_source(source_type).value,
        software=MetadataConstants.SOFTWARE,
        make=make,
        model=model,
        user_agent=environment.user_agent,
        platform=environment.platform,
        language=environment.language,
        file_name=file_info.name if file_info else None,
        file_type=(file_info.mime_type or payload.mime_type) if file_info else None,
        last_modified=(
            file_info.last_modified.isoformat()
            if file_info and file_info.last_modified
            else None
        ),
    )
