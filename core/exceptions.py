"""
Camera core exceptions.

The acquisition errors form a closed taxonomy consumed by the session state;
the remaining errors are local, non-fatal operation failures.
"""

from typing import Optional

from core.constants import ErrorMessages
from core.enums import AcquisitionErrorReason


class CameraError(Exception):
    """Base class for camera core errors"""

    code = "camera_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AcquisitionError(CameraError):
    """Stream acquisition failed"""

    code = "acquisition_failed"
    reason = AcquisitionErrorReason.FAILED

    @staticmethod
    def for_reason(
        reason: AcquisitionErrorReason, raw_message: Optional[str] = None
    ) -> "AcquisitionError":
        """Build the acquisition error matching a classified reason."""
        if reason == AcquisitionErrorReason.PERMISSION_DENIED:
            return PermissionDeniedError()
        if reason == AcquisitionErrorReason.DEVICE_NOT_FOUND:
            return DeviceNotFoundError()
        if reason == AcquisitionErrorReason.DEVICE_BUSY:
            return DeviceBusyError()
        if reason == AcquisitionErrorReason.INSECURE_CONTEXT:
            return InsecureContextError()
        return AcquisitionFailedError(raw_message)


class PermissionDeniedError(AcquisitionError):
    code = "permission_denied"
    reason = AcquisitionErrorReason.PERMISSION_DENIED

    def __init__(self, message: str = ErrorMessages.PERMISSION_DENIED):
        super().__init__(message)


class DeviceNotFoundError(AcquisitionError):
    code = "device_not_found"
    reason = AcquisitionErrorReason.DEVICE_NOT_FOUND

    def __init__(self, message: str = ErrorMessages.DEVICE_NOT_FOUND):
        super().__init__(message)


class DeviceBusyError(AcquisitionError):
    code = "device_busy"
    reason = AcquisitionErrorReason.DEVICE_BUSY

    def __init__(self, message: str = ErrorMessages.DEVICE_BUSY):
        super().__init__(message)


class InsecureContextError(AcquisitionError):
    code = "insecure_context"
    reason = AcquisitionErrorReason.INSECURE_CONTEXT

    def __init__(self, message: str = ErrorMessages.INSECURE_CONTEXT):
        super().__init__(message)


class AcquisitionFailedError(AcquisitionError):
    """Catch-all acquisition failure; keeps the raw platform message"""

    code = "acquisition_failed"
    reason = AcquisitionErrorReason.FAILED

    def __init__(self, raw_message: Optional[str] = None):
        self.raw_message = raw_message
        super().__init__(
            ErrorMessages.ACQUISITION_FAILED.format(message=raw_message or "Unknown error")
        )


class CaptureNotReadyError(CameraError):
    """Session is not Ready or the video has no decoded frame"""

    code = "capture_not_ready"

    def __init__(self, message: str = ErrorMessages.CAPTURE_NOT_READY):
        super().__init__(message)


class ConstraintRejectedError(CameraError):
    """Zoom/torch constraint was not applied by the hardware"""

    code = "constraint_rejected"


class SessionNotReadyError(CameraError):
    code = "session_not_ready"

    def __init__(self, message: str = ErrorMessages.SWITCH_NOT_READY):
        super().__init__(message)


class UploadDecodeError(CameraError):
    code = "invalid_upload"


class ImageNotFoundError(CameraError):
    code = "image_not_found"

    def __init__(self, image_id: str):
        super().__init__(f"Image {image_id} not found")
        self.image_id = image_id
