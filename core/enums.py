"""
Enumerations shared across the camera core, services and API layers.
"""

from enum import Enum


class FacingMode(str, Enum):
    """Physical camera to request"""

    FRONT = "front"
    BACK = "back"

    @property
    def platform_value(self) -> str:
        """Facing mode in media-device vocabulary"""
        return "user" if self is FacingMode.FRONT else "environment"

    def toggled(self) -> "FacingMode":
        return FacingMode.BACK if self is FacingMode.FRONT else FacingMode.FRONT


class DeviceClass(str, Enum):
    MOBILE = "mobile"
    DESKTOP = "desktop"


class SessionStatus(str, Enum):
    """Lifecycle state of a camera session"""

    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    DENIED = "denied"
    UNAVAILABLE = "unavailable"
    BUSY = "busy"
    FAILED = "failed"


class AcquisitionErrorReason(str, Enum):
    """Closed set of reasons a stream acquisition can fail"""

    PERMISSION_DENIED = "permission_denied"
    DEVICE_NOT_FOUND = "device_not_found"
    DEVICE_BUSY = "device_busy"
    INSECURE_CONTEXT = "insecure_context"
    FAILED = "failed"


class SourceType(str, Enum):
    CAMERA = "camera"
    UPLOAD = "upload"


class CaptureMethod(str, Enum):
    LIVE_CAMERA = "Live Camera"
    FILE_UPLOAD = "File Upload"

    @classmethod
    def for_source(cls, source_type: SourceType) -> "CaptureMethod":
        if source_type == SourceType.CAMERA:
            return cls.LIVE_CAMERA
        return cls.FILE_UPLOAD
