"""
OpenCV media-device backend - opens local cameras through cv2.VideoCapture
"""

import asyncio
import logging
import os
import sys
from threading import Lock
from typing import Any, Dict, Optional, Tuple

import cv2
import numpy as np

from core.constants import CameraConstants
from core.enums import FacingMode
from core.media.base import (
    CaptureConstraints,
    LocalMediaStream,
    MediaDeviceError,
    flatten_constraints,
)

logger = logging.getLogger(__name__)


class OpenCVVideoTrack:
    """Video track backed by an open cv2.VideoCapture"""

    def __init__(
        self,
        cap: cv2.VideoCapture,
        facing: FacingMode,
        source: Any,
        zoom_range: Optional[Tuple[float, float]] = None,
    ):
        self.cap = cap
        self.facing = facing
        self.source = source
        self.zoom_range = zoom_range
        self.ready_state = "live"
        self.lock = Lock()

    def get_settings(self) -> Dict[str, Any]:
        with self.lock:
            if self.cap is None:
                return {}
            settings = {
                "width": int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
                "height": int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
                "frameRate": float(self.cap.get(cv2.CAP_PROP_FPS)),
                "facingMode": self.facing.platform_value,
                "deviceId": str(self.source),
            }
            if self.zoom_range:
                # Driver zoom units vary (V4L2 often uses 100-500); clamp to the configured range
                zoom_min, zoom_max = self.zoom_range
                zoom = float(self.cap.get(cv2.CAP_PROP_ZOOM))
                settings["zoom"] = min(max(zoom, zoom_min), zoom_max)
            return settings

    def get_capabilities(self) -> Dict[str, Any]:
        capabilities: Dict[str, Any] = {
            "facingMode": [self.facing.platform_value],
            "deviceId": str(self.source),
        }
        if self.zoom_range:
            capabilities["zoom"] = {
                "min": self.zoom_range[0],
                "max": self.zoom_range[1],
                "step": CameraConstants.DEFAULT_ZOOM_STEP,
            }
        # OpenCV exposes no torch control
        return capabilities

    async def apply_constraints(self, constraints: Dict[str, Any]) -> None:
        await asyncio.to_thread(self._apply, flatten_constraints(constraints))

    def _apply(self, constraints: Dict[str, Any]) -> None:
        with self.lock:
            if self.cap is None:
                raise MediaDeviceError("InvalidStateError", "Track has ended")

            for name, value in constraints.items():
                if name == "zoom":
                    if not self.zoom_range:
                        raise MediaDeviceError("OverconstrainedError", "zoom is not supported")
                    if not self.zoom_range[0] <= value <= self.zoom_range[1]:
                        raise MediaDeviceError(
                            "OverconstrainedError", f"zoom {value} outside {self.zoom_range}"
                        )
                    if not self.cap.set(cv2.CAP_PROP_ZOOM, float(value)):
                        raise MediaDeviceError("OverconstrainedError", "driver rejected zoom")
                elif name == "torch":
                    raise MediaDeviceError("OverconstrainedError", "torch is not supported")
                else:
                    logger.debug(f"Ignoring unsupported constraint {name}={value}")

    def read_frame(self) -> Optional[np.ndarray]:
        with self.lock:
            if self.cap is None or not self.cap.isOpened():
                return None
            ret, frame = self.cap.read()
            return frame if ret else None

    def stop(self) -> None:
        with self.lock:
            if self.cap is not None:
                self.cap.release()
                self.cap = None
            if self.ready_state != "ended":
                self.ready_state = "ended"
                logger.info(f"Camera {self.source} released")


class OpenCVMediaDevices:
    """Local cameras, one configured source per facing direction"""

    name = "OpenCV"

    def __init__(
        self,
        sources: Optional[Dict[FacingMode, Any]] = None,
        zoom_range: Optional[Tuple[float, float]] = None,
        warmup_frames: int = CameraConstants.WARMUP_FRAMES,
    ):
        self.sources = sources or {
            FacingMode.FRONT: CameraConstants.DEFAULT_FRONT_SOURCE,
            FacingMode.BACK: CameraConstants.DEFAULT_BACK_SOURCE,
        }
        self.zoom_range = zoom_range
        self.warmup_frames = max(warmup_frames, 1)

    async def request_stream(self, constraints: CaptureConstraints) -> LocalMediaStream:
        return await asyncio.to_thread(self._open, constraints)

    def _open(self, constraints: CaptureConstraints) -> LocalMediaStream:
        source = self.sources.get(constraints.facing)
        if source is None:
            raise MediaDeviceError(
                "NotFoundError", f"No {constraints.facing.value} camera configured"
            )

        self._check_permission(source)

        cap = cv2.VideoCapture(source)
        if not cap.isOpened():
            cap.release()
            raise MediaDeviceError("NotFoundError", f"Camera {source} could not be opened")

        cap.set(cv2.CAP_PROP_FRAME_WIDTH, constraints.width.ideal)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, constraints.height.ideal)

        # A device held by another process opens but never delivers frames
        frame = None
        for _ in range(self.warmup_frames):
            ret, frame = cap.read()
            if ret:
                break
            frame = None
        if frame is None:
            cap.release()
            raise MediaDeviceError("NotReadableError", f"Could not start video source {source}")

        height, width = frame.shape[:2]
        if not (constraints.width.accepts(width) and constraints.height.accepts(height)):
            cap.release()
            raise MediaDeviceError(
                "OverconstrainedError",
                f"Camera resolution {width}x{height} outside requested range",
            )

        zoom_range = None
        if self.zoom_range and cap.get(cv2.CAP_PROP_ZOOM) > 0:
            zoom_range = self.zoom_range

        track = OpenCVVideoTrack(cap, constraints.facing, source, zoom_range)
        logger.info(f"Camera {source} opened at {width}x{height} ({constraints.facing.value})")
        return LocalMediaStream([track])

    @staticmethod
    def _check_permission(source: Any) -> None:
        """Report an existing but inaccessible V4L2 device node as a permission error"""
        if not isinstance(source, int) or not sys.platform.startswith("linux"):
            return
        device_path = f"/dev/video{source}"
        if os.path.exists(device_path) and not os.access(device_path, os.R_OK | os.W_OK):
            raise MediaDeviceError("NotAllowedError", f"Permission denied for {device_path}")
