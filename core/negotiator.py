"""
Device Negotiator - builds stream constraints and classifies acquisition failures
"""

import logging
from typing import Optional
from urllib.parse import urlsplit

from core.constants import CameraConstants
from core.enums import AcquisitionErrorReason, DeviceClass, FacingMode
from core.exceptions import AcquisitionError, InsecureContextError
from core.media.base import (
    CaptureConstraints,
    MediaDeviceError,
    MediaDevices,
    MediaStream,
    ResolutionRange,
)

logger = logging.getLogger(__name__)


# Platform error names grouped by acquisition failure reason
PERMISSION_ERROR_NAMES = {"NotAllowedError", "PermissionDeniedError"}
NOT_FOUND_ERROR_NAMES = {"NotFoundError", "DevicesNotFoundError"}
BUSY_ERROR_NAMES = {"NotReadableError", "TrackStartError"}
INSECURE_ERROR_NAMES = {"SecurityError"}


def detect_device_class(user_agent: Optional[str]) -> DeviceClass:
    """Classify a client as mobile or desktop from its user agent"""
    if user_agent and CameraConstants.MOBILE_USER_AGENT_PATTERN.search(user_agent):
        return DeviceClass.MOBILE
    return DeviceClass.DESKTOP


def is_secure_origin(url: Optional[str]) -> bool:
    """
    Check whether an origin may use the camera.

    HTTPS origins and local hosts are secure. A missing origin means the caller
    is in-process and is treated as local.
    """
    if not url:
        return True
    parts = urlsplit(url)
    if parts.scheme in ("https", "wss"):
        return True
    host = (parts.hostname or "").lower()
    return host in CameraConstants.LOCAL_HOSTS or host.strip("[]") in CameraConstants.LOCAL_HOSTS


def build_constraints(facing: FacingMode, device_class: DeviceClass) -> CaptureConstraints:
    """Resolution presets differ between mobile and desktop devices"""
    if device_class == DeviceClass.MOBILE:
        ideal_w, ideal_h = CameraConstants.MOBILE_IDEAL_RESOLUTION
        return CaptureConstraints(
            facing=facing,
            width=ResolutionRange(ideal=ideal_w),
            height=ResolutionRange(ideal=ideal_h),
        )

    min_w, min_h = CameraConstants.DESKTOP_MIN_RESOLUTION
    ideal_w, ideal_h = CameraConstants.DESKTOP_IDEAL_RESOLUTION
    max_w, max_h = CameraConstants.DESKTOP_MAX_RESOLUTION
    return CaptureConstraints(
        facing=facing,
        width=ResolutionRange(ideal=ideal_w, min=min_w, max=max_w),
        height=ResolutionRange(ideal=ideal_h, min=min_h, max=max_h),
    )


def classify_error(error: Exception) -> AcquisitionErrorReason:
    """Map a platform rejection onto the acquisition failure taxonomy"""
    name = getattr(error, "name", None) or type(error).__name__
    if name in PERMISSION_ERROR_NAMES or isinstance(error, PermissionError):
        return AcquisitionErrorReason.PERMISSION_DENIED
    if name in NOT_FOUND_ERROR_NAMES:
        return AcquisitionErrorReason.DEVICE_NOT_FOUND
    if name in BUSY_ERROR_NAMES:
        return AcquisitionErrorReason.DEVICE_BUSY
    if name in INSECURE_ERROR_NAMES:
        return AcquisitionErrorReason.INSECURE_CONTEXT
    return AcquisitionErrorReason.FAILED


class DeviceNegotiator:
    """Requests camera streams from a media-device backend"""

    def __init__(self, media_devices: MediaDevices, require_secure_context: bool = True):
        self.media_devices = media_devices
        self.require_secure_context = require_secure_context

    async def acquire(
        self, facing: FacingMode, device_class: DeviceClass, secure_context: bool = True
    ) -> MediaStream:
        """
        Request a stream for the given facing direction.

        Args:
            facing: Camera to request
            device_class: Selects the resolution preset
            secure_context: Whether the requesting origin may use the camera

        Returns:
            The acquired media stream

        Raises:
            AcquisitionError: Classified acquisition failure
        """
        if self.require_secure_context and not secure_context:
            logger.warning("Camera requested from an insecure context")
            raise InsecureContextError()

        constraints = build_constraints(facing, device_class)
        logger.debug(f"Requesting stream with constraints {constraints.to_dict()}")

        try:
            return await self.media_devices.request_stream(constraints)
        except MediaDeviceError as e:
            reason = classify_error(e)
            logger.warning(f"Camera access error ({e.name}): {e.message}")
            raise AcquisitionError.for_reason(reason, e.message or e.name) from e
        except Exception as e:
            reason = classify_error(e)
            logger.error(f"Camera access error: {e}", exc_info=True)
            raise AcquisitionError.for_reason(reason, str(e) or type(e).__name__) from e
