"""
Camera Session - owns the active camera stream and its lifecycle state
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import numpy as np

from core.capabilities import CameraCapabilities, MediaTrackCapabilityProbe, StreamCapabilityProbe
from core.constants import ErrorMessages
from core.enums import AcquisitionErrorReason, DeviceClass, FacingMode, SessionStatus
from core.exceptions import (
    AcquisitionError,
    CameraError,
    CaptureNotReadyError,
    ConstraintRejectedError,
    SessionNotReadyError,
)
from core.frame_capturer import EncodedImage, FrameCapturer
from core.media.base import MediaDeviceError, MediaStream
from core.negotiator import DeviceNegotiator
from core.video_surface import VideoSurface

logger = logging.getLogger(__name__)


_STATUS_FOR_REASON = {
    AcquisitionErrorReason.PERMISSION_DENIED: SessionStatus.DENIED,
    AcquisitionErrorReason.DEVICE_NOT_FOUND: SessionStatus.UNAVAILABLE,
    AcquisitionErrorReason.DEVICE_BUSY: SessionStatus.BUSY,
    AcquisitionErrorReason.INSECURE_CONTEXT: SessionStatus.FAILED,
    AcquisitionErrorReason.FAILED: SessionStatus.FAILED,
}


@dataclass(frozen=True)
class SessionState:
    """Current lifecycle state; capabilities are only set when ready"""

    status: SessionStatus
    message: Optional[str] = None
    capabilities: Optional[CameraCapabilities] = None
    reason: Optional[AcquisitionErrorReason] = None

    @classmethod
    def uninitialized(cls) -> "SessionState":
        return cls(SessionStatus.UNINITIALIZED)

    @classmethod
    def loading(cls) -> "SessionState":
        return cls(SessionStatus.LOADING)

    @classmethod
    def ready(cls, capabilities: CameraCapabilities) -> "SessionState":
        return cls(SessionStatus.READY, capabilities=capabilities)

    @classmethod
    def from_error(cls, error: AcquisitionError) -> "SessionState":
        return cls(_STATUS_FOR_REASON[error.reason], message=error.message, reason=error.reason)

    @property
    def is_ready(self) -> bool:
        return self.status == SessionStatus.READY

    @property
    def is_error(self) -> bool:
        return self.status in (
            SessionStatus.DENIED,
            SessionStatus.UNAVAILABLE,
            SessionStatus.BUSY,
            SessionStatus.FAILED,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "message": self.message,
            "reason": self.reason.value if self.reason else None,
            "capabilities": self.capabilities.to_dict() if self.capabilities else None,
        }


class CameraSession:
    """
    Camera session state machine.

    Holds zero or one active stream. Every acquisition carries a request token;
    only the result of the most recent acquisition is applied, and streams from
    superseded acquisitions are stopped when they arrive.
    """

    def __init__(
        self,
        negotiator: DeviceNegotiator,
        probe: Optional[StreamCapabilityProbe] = None,
        capturer: Optional[FrameCapturer] = None,
        surface: Optional[VideoSurface] = None,
        device_class: DeviceClass = DeviceClass.DESKTOP,
        facing: FacingMode = FacingMode.FRONT,
    ):
        self.negotiator = negotiator
        self.probe = probe or MediaTrackCapabilityProbe()
        self.capturer = capturer or FrameCapturer()
        self.surface = surface or VideoSurface()
        self.device_class = device_class
        self.facing = facing
        self.secure_context = True
        self.last_error: Optional[CameraError] = None

        self._state = SessionState.uninitialized()
        self._stream: Optional[MediaStream] = None
        self._request_token = 0

    def current_state(self) -> SessionState:
        return self._state

    def current_capabilities(self) -> CameraCapabilities:
        return self._state.capabilities or CameraCapabilities.none()

    @property
    def has_stream(self) -> bool:
        return self._stream is not None

    @property
    def backend_name(self) -> str:
        return getattr(self.negotiator.media_devices, "name", "Unknown")

    def _set_state(self, state: SessionState):
        if state.status != self._state.status:
            logger.info(f"Camera session {self._state.status.value} -> {state.status.value}")
        self._state = state

    def _report(self, error: CameraError):
        self.last_error = error
        logger.warning(f"Camera operation failed ({error.code}): {error.message}")

    def _release_stream(self):
        if self._stream is not None:
            logger.info(f"Stopping stream {self._stream.id}")
            self._stream.stop_all_tracks()
            self._stream = None
        self.surface.detach()

    async def initialize(
        self,
        facing: Optional[FacingMode] = None,
        *,
        device_class: Optional[DeviceClass] = None,
        secure_context: Optional[bool] = None,
    ) -> SessionState:
        """
        Acquire a camera stream.

        The current stream is stopped before the new one is requested. A newer
        call supersedes this one: its result is then discarded and its stream
        stopped.

        Args:
            facing: Camera to request (defaults to the current facing)
            device_class: Updates the device class used for constraints
            secure_context: Whether the requesting origin may use the camera

        Returns:
            Session state after this acquisition resolved
        """
        if facing is not None:
            self.facing = facing
        if device_class is not None:
            self.device_class = device_class
        if secure_context is not None:
            self.secure_context = secure_context

        self._request_token += 1
        token = self._request_token
        requested_facing = self.facing

        self._release_stream()
        self.last_error = None
        self._set_state(SessionState.loading())

        try:
            stream = await self.negotiator.acquire(
                requested_facing, self.device_class, self.secure_context
            )
        except AcquisitionError as e:
            if token != self._request_token:
                logger.debug(f"Discarding failure of superseded acquisition #{token}: {e}")
                return self._state
            self.last_error = e
            self._set_state(SessionState.from_error(e))
            return self._state

        if token != self._request_token:
            logger.info(f"Acquisition #{token} was superseded; stopping its stream {stream.id}")
            stream.stop_all_tracks()
            return self._state

        self._stream = stream
        self.surface.attach(stream)
        track = stream.get_video_track()
        capabilities = self.probe.probe(track) if track else CameraCapabilities.none()
        self._set_state(SessionState.ready(capabilities))
        logger.info(f"Camera ready ({requested_facing.value}): {capabilities.to_dict()}")
        return self._state

    async def switch_device(self) -> bool:
        """
        Toggle between front and back cameras.

        Returns:
            False without side effects if the session is not ready, else True
            once the new acquisition has resolved
        """
        if not self._state.is_ready:
            self._report(SessionNotReadyError())
            return False

        await self.initialize(self.facing.toggled())
        return True

    async def set_zoom(self, level: float) -> bool:
        """Apply a zoom level; a rejection leaves the session state unchanged"""
        capabilities = self.current_capabilities()
        if not self._state.is_ready or not capabilities.has_zoom:
            message = (
                ErrorMessages.ZOOM_UNSUPPORTED
                if self._state.is_ready
                else ErrorMessages.CAPTURE_NOT_READY
            )
            self._report(ConstraintRejectedError(message))
            return False

        stream = self._stream
        track = stream.get_video_track() if stream else None
        if track is None:
            self._report(ConstraintRejectedError(ErrorMessages.ZOOM_UNSUPPORTED))
            return False

        try:
            await track.apply_constraints({"advanced": [{"zoom": level}]})
        except MediaDeviceError as e:
            self._report(ConstraintRejectedError(f"Error setting zoom: {e.message or e.name}"))
            return False

        if stream is not self._stream:
            logger.debug("Stream replaced while applying zoom; ignoring result")
            self._report(ConstraintRejectedError(ErrorMessages.STREAM_REPLACED))
            return False

        probed = self.probe.probe(track)
        zoom = probed.current_zoom if probed.current_zoom is not None else float(level)
        self._set_state(SessionState.ready(self.current_capabilities().with_zoom(zoom)))
        return True

    async def toggle_flash(self) -> bool:
        """Toggle the torch; a rejection leaves the session state unchanged"""
        capabilities = self.current_capabilities()
        if not self._state.is_ready or not capabilities.has_flash:
            message = (
                ErrorMessages.FLASH_UNSUPPORTED
                if self._state.is_ready
                else ErrorMessages.CAPTURE_NOT_READY
            )
            self._report(ConstraintRejectedError(message))
            return False

        stream = self._stream
        track = stream.get_video_track() if stream else None
        if track is None:
            self._report(ConstraintRejectedError(ErrorMessages.FLASH_UNSUPPORTED))
            return False

        new_flash_state = not capabilities.is_flash_on
        try:
            await track.apply_constraints({"advanced": [{"torch": new_flash_state}]})
        except MediaDeviceError as e:
            self._report(ConstraintRejectedError(f"Error toggling flash: {e.message or e.name}"))
            return False

        if stream is not self._stream:
            logger.debug("Stream replaced while toggling flash; ignoring result")
            self._report(ConstraintRejectedError(ErrorMessages.STREAM_REPLACED))
            return False

        probed = self.probe.probe(track)
        is_on = probed.is_flash_on if probed.has_flash else new_flash_state
        self._set_state(SessionState.ready(self.current_capabilities().with_flash(is_on)))
        return True

    def capture(self) -> Optional[EncodedImage]:
        """
        Capture a still frame from the live stream.

        Returns:
            Encoded frame, or None (with last_error set) if the session is not
            ready, the video has no decoded frame yet, or capture fails
        """
        if not self._state.is_ready or self._stream is None:
            self._report(CaptureNotReadyError())
            return None

        self.surface.refresh()
        if self.surface.video_width == 0 or self.surface.video_height == 0:
            self._report(CaptureNotReadyError(ErrorMessages.NO_FRAME))
            return None

        image = self.capturer.capture(self.surface)
        if image is None:
            self._report(CaptureNotReadyError(ErrorMessages.CAPTURE_FAILED))
            return None

        self.last_error = None
        return image

    def preview_frame(self) -> Optional[np.ndarray]:
        """Latest decoded frame for live display"""
        if not self._state.is_ready:
            return None
        return self.surface.refresh()

    async def dispose(self):
        """Stop the active stream and discard any in-flight acquisition"""
        self._request_token += 1
        self._release_stream()
        self._set_state(SessionState.uninitialized())
        logger.info("Camera session disposed")
