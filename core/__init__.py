"""
Core modules for Camera Studio
"""

from .camera_session import CameraSession, SessionState
from .capabilities import CameraCapabilities
from .frame_capturer import EncodedImage, FrameCapturer
from .gallery import CaptureGallery, CapturedImage
from .negotiator import DeviceNegotiator

__all__ = [
    "CameraSession",
    "SessionState",
    "CameraCapabilities",
    "EncodedImage",
    "FrameCapturer",
    "CaptureGallery",
    "CapturedImage",
    "DeviceNegotiator",
]
