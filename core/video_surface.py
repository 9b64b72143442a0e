"""
Video Surface - displays a live stream and exposes its decoded frame
"""

import logging
from typing import Optional

import numpy as np

from core.constants import ReadyState
from core.media.base import MediaStream

logger = logging.getLogger(__name__)


class VideoSurface:
    """
    Rendering surface attached to at most one stream.

    video_width/video_height are the native pixel dimensions of the last
    decoded frame (0 until a frame has been decoded).
    """

    def __init__(self):
        self.stream: Optional[MediaStream] = None
        self.frame: Optional[np.ndarray] = None
        self.ready_state = ReadyState.HAVE_NOTHING

    @property
    def video_width(self) -> int:
        return int(self.frame.shape[1]) if self.frame is not None else 0

    @property
    def video_height(self) -> int:
        return int(self.frame.shape[0]) if self.frame is not None else 0

    def attach(self, stream: MediaStream):
        self.stream = stream
        self.frame = None
        self.ready_state = ReadyState.HAVE_METADATA

    def detach(self):
        self.stream = None
        self.frame = None
        self.ready_state = ReadyState.HAVE_NOTHING

    def refresh(self) -> Optional[np.ndarray]:
        """Decode the next frame from the attached stream"""
        if self.stream is None:
            return None

        track = self.stream.get_video_track()
        if track is None or track.ready_state != "live":
            return self.frame

        frame = track.read_frame()
        if frame is not None and frame.size > 0:
            self.frame = frame
            self.ready_state = ReadyState.HAVE_CURRENT_DATA
        return self.frame

    def draw_into(self, buffer: np.ndarray):
        """Copy the current frame into a raster buffer of the same shape"""
        if self.frame is None:
            raise ValueError("No decoded frame to draw")
        frame = self.frame
        if frame.ndim == 2:
            frame = frame[:, :, None]
        np.copyto(buffer, np.broadcast_to(frame, buffer.shape))
