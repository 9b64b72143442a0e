"""
Synthetic media-device backend - test pattern frames for development and tests
"""

import logging
import time
from threading import Lock
from typing import Any, Dict, Iterable, List, Optional, Tuple

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


def create_test_pattern(width: int, height: int, text: str = "Test Image") -> np.ndarray:
    """Create a gradient test image with a grid and a label"""
    rows = np.arange(height, dtype=np.uint32) * 255 // max(height, 1)
    img = np.zeros((height, width, 3), dtype=np.uint8)
    img[:, :, 0] = rows[:, None]
    img[:, :, 1] = 100
    img[:, :, 2] = (255 - rows)[:, None]

    # Grid every tenth of the frame
    step_x = max(width // 10, 1)
    step_y = max(height // 10, 1)
    for x in range(0, width, step_x):
        cv2.line(img, (x, 0), (x, height), (50, 50, 50), 1)
    for y in range(0, height, step_y):
        cv2.line(img, (0, y), (width, y), (50, 50, 50), 1)

    font = cv2.FONT_HERSHEY_SIMPLEX
    scale = max(width / 1280, 0.4)
    cv2.putText(img, text, (width // 4, height // 2), font, 2 * scale, (255, 255, 255), 2)
    return img


class SyntheticVideoTrack:
    """Video track rendering a test pattern; supports zoom and optional torch"""

    def __init__(
        self,
        facing: FacingMode,
        width: int,
        height: int,
        zoom_range: Optional[Tuple[float, float]] = (
            CameraConstants.DEFAULT_ZOOM_MIN,
            CameraConstants.DEFAULT_ZOOM_MAX,
        ),
        has_torch: bool = False,
        frames_before_ready: int = 0,
    ):
        self.facing = facing
        self.width = width
        self.height = height
        self.zoom_range = zoom_range
        self.has_torch = has_torch
        self.zoom = zoom_range[0] if zoom_range else None
        self.torch = False
        self.ready_state = "live"
        self.frames_before_ready = frames_before_ready
        self.lock = Lock()
        self._pattern = create_test_pattern(width, height, f"Camera: {facing.value}")

    def get_settings(self) -> Dict[str, Any]:
        settings: Dict[str, Any] = {
            "width": self.width,
            "height": self.height,
            "facingMode": self.facing.platform_value,
        }
        if self.zoom_range:
            settings["zoom"] = self.zoom
        if self.has_torch:
            settings["torch"] = self.torch
        return settings

    def get_capabilities(self) -> Dict[str, Any]:
        capabilities: Dict[str, Any] = {
            "width": {"min": 1, "max": self.width},
            "height": {"min": 1, "max": self.height},
            "facingMode": [self.facing.platform_value],
        }
        if self.zoom_range:
            capabilities["zoom"] = {
                "min": self.zoom_range[0],
                "max": self.zoom_range[1],
                "step": CameraConstants.DEFAULT_ZOOM_STEP,
            }
        if self.has_torch:
            capabilities["torch"] = True
        return capabilities

    async def apply_constraints(self, constraints: Dict[str, Any]) -> None:
        constraints = flatten_constraints(constraints)
        with self.lock:
            if self.ready_state == "ended":
                raise MediaDeviceError("InvalidStateError", "Track has ended")
            if "zoom" in constraints:
                value = float(constraints["zoom"])
                if not self.zoom_range or not self.zoom_range[0] <= value <= self.zoom_range[1]:
                    raise MediaDeviceError("OverconstrainedError", f"zoom {value} not supported")
            if "torch" in constraints and not self.has_torch:
                raise MediaDeviceError("OverconstrainedError", "torch is not supported")

            if "zoom" in constraints:
                self.zoom = float(constraints["zoom"])
            if "torch" in constraints:
                self.torch = bool(constraints["torch"])

    def read_frame(self) -> Optional[np.ndarray]:
        with self.lock:
            if self.ready_state == "ended":
                return None
            if self.frames_before_ready > 0:
                self.frames_before_ready -= 1
                return None
            frame = self._pattern
            if self.zoom_range and self.zoom and self.zoom > 1:
                crop_w = max(int(self.width / self.zoom), 1)
                crop_h = max(int(self.height / self.zoom), 1)
                x = (self.width - crop_w) // 2
                y = (self.height - crop_h) // 2
                frame = cv2.resize(frame[y : y + crop_h, x : x + crop_w], (self.width, self.height))
            else:
                frame = frame.copy()
            if self.torch:
                frame = cv2.convertScaleAbs(frame, alpha=1.0, beta=60)
            timestamp = time.strftime("%Y-%m-%d %H:%M:%S")
            cv2.putText(frame, timestamp, (20, 40), cv2.FONT_HERSHEY_SIMPLEX, 1, (255, 255, 255), 2)
            return frame

    def stop(self) -> None:
        with self.lock:
            self.ready_state = "ended"


class SyntheticMediaDevices:
    """Test pattern cameras for the configured facing directions"""

    name = "Test Pattern"

    def __init__(
        self,
        facings: Iterable[FacingMode] = (FacingMode.FRONT, FacingMode.BACK),
        width: Optional[int] = None,
        height: Optional[int] = None,
        zoom_range: Optional[Tuple[float, float]] = (
            CameraConstants.DEFAULT_ZOOM_MIN,
            CameraConstants.DEFAULT_ZOOM_MAX,
        ),
        has_torch: bool = False,
    ):
        self.facings = set(facings)
        self.width = width
        self.height = height
        self.zoom_range = zoom_range
        self.has_torch = has_torch
        self.streams: List[LocalMediaStream] = []

    async def request_stream(self, constraints: CaptureConstraints) -> LocalMediaStream:
        if constraints.facing not in self.facings:
            raise MediaDeviceError("NotFoundError", f"No {constraints.facing.value} camera")

        width = self.width or constraints.width.ideal
        height = self.height or constraints.height.ideal
        if not (constraints.width.accepts(width) and constraints.height.accepts(height)):
            raise MediaDeviceError(
                "OverconstrainedError", f"Resolution {width}x{height} outside requested range"
            )

        track = SyntheticVideoTrack(
            constraints.facing, width, height, zoom_range=self.zoom_range, has_torch=self.has_torch
        )
        stream = LocalMediaStream([track])
        self.streams = [s for s in self.streams if s.active]
        self.streams.append(stream)
        logger.info(f"Synthetic camera started at {width}x{height} ({constraints.facing.value})")
        return stream
