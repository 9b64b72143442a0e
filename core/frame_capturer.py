"""
Frame Capturer - renders the current video frame and encodes it
"""

import logging
from dataclasses import dataclass
from typing import Optional

import cv2
import numpy as np

from core.constants import CaptureConstants, ReadyState
from core.image.converters import ImageConverters
from core.video_surface import VideoSurface

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EncodedImage:
    """Encoded image bytes with their MIME type and pixel dimensions"""

    data: bytes
    mime_type: str
    width: int
    height: int

    @property
    def size(self) -> int:
        return len(self.data)

    def to_data_uri(self) -> str:
        return ImageConverters.to_data_uri(self.data, self.mime_type)


class FrameCapturer:
    """Captures still frames from a video surface as JPEG payloads"""

    def __init__(self, quality: float = CaptureConstants.JPEG_QUALITY):
        self.quality = quality
        self.buffer: Optional[np.ndarray] = None

    def _allocate(self, width: int, height: int) -> np.ndarray:
        """Reuse the raster buffer while the video dimensions are unchanged"""
        shape = (height, width, 3)
        if self.buffer is None or self.buffer.shape != shape:
            self.buffer = np.zeros(shape, dtype=np.uint8)
        return self.buffer

    def capture(self, surface: VideoSurface) -> Optional[EncodedImage]:
        """
        Capture the surface's current frame.

        Args:
            surface: Video surface with a decoded frame

        Returns:
            EncodedImage sized to the video's native dimensions, or None if the
            video has no frame yet or drawing/encoding fails
        """
        if surface.ready_state < ReadyState.HAVE_CURRENT_DATA:
            logger.error(f"Video not ready - ready_state: {surface.ready_state}")
            return None

        width, height = surface.video_width, surface.video_height
        if width == 0 or height == 0:
            logger.error("Video has no dimensions")
            return None

        try:
            buffer = self._allocate(width, height)
            surface.draw_into(buffer)

            encode_params = [int(cv2.IMWRITE_JPEG_QUALITY), int(round(self.quality * 100))]
            ok, encoded = cv2.imencode(".jpg", buffer, encode_params)
            if not ok:
                logger.error("Frame encoding failed")
                return None

        except (cv2.error, ValueError) as e:
            logger.error(f"Screenshot capture error: {e}")
            return None

        logger.info(f"Frame captured successfully ({width}x{height})")
        return EncodedImage(
            data=encoded.tobytes(),
            mime_type=CaptureConstants.MIME_TYPE,
            width=width,
            height=height,
        )
