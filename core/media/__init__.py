"""
Media-device backends.

- base: constraints, platform error, protocols
- opencv: local cameras via cv2.VideoCapture
- synthetic: test pattern cameras
"""

from core.media.base import (
    CaptureConstraints,
    LocalMediaStream,
    MediaDeviceError,
    MediaDevices,
    MediaStream,
    ResolutionRange,
    VideoTrack,
)
from core.media.opencv import OpenCVMediaDevices
from core.media.synthetic import SyntheticMediaDevices

__all__ = [
    "CaptureConstraints",
    "LocalMediaStream",
    "MediaDeviceError",
    "MediaDevices",
    "MediaStream",
    "ResolutionRange",
    "VideoTrack",
    "OpenCVMediaDevices",
    "SyntheticMediaDevices",
]
