"""
Constants and configuration values for the Camera Studio system.
Centralizes all magic numbers and user-facing messages.
"""

import re


# Camera Constants
class CameraConstants:
    """Constants related to camera acquisition and capture."""

    # Resolution presets (width, height)
    MOBILE_IDEAL_RESOLUTION = (1280, 720)
    DESKTOP_MIN_RESOLUTION = (320, 240)
    DESKTOP_IDEAL_RESOLUTION = (640, 480)
    DESKTOP_MAX_RESOLUTION = (1280, 720)

    # Default device sources for OpenCV backend
    DEFAULT_FRONT_SOURCE = 0
    DEFAULT_BACK_SOURCE = 1

    # Zoom range reported when the driver exposes zoom but no range
    DEFAULT_ZOOM_MIN = 1.0
    DEFAULT_ZOOM_MAX = 5.0
    DEFAULT_ZOOM_STEP = 0.1

    # Frames read while warming up a freshly opened device
    WARMUP_FRAMES = 5

    # Hosts treated as secure without HTTPS
    LOCAL_HOSTS = ("localhost", "127.0.0.1", "::1", "[::1]")

    # Matches user agents of mobile devices
    MOBILE_USER_AGENT_PATTERN = re.compile(
        r"android|webos|iphone|ipad|ipod|blackberry|iemobile|opera mini", re.IGNORECASE
    )


# Video surface ready states (mirrors HTMLMediaElement.readyState)
class ReadyState:
    HAVE_NOTHING = 0
    HAVE_METADATA = 1
    HAVE_CURRENT_DATA = 2


# Capture Constants
class CaptureConstants:
    """Constants related to frame encoding."""

    JPEG_QUALITY = 0.9
    MIME_TYPE = "image/jpeg"
    COLOR_DEPTH = 24


# Preview stream Constants
class PreviewConstants:
    MJPEG_FPS = 15
    MJPEG_QUALITY = 85
    MAX_WIDTH = 1280


# Metadata Constants
class MetadataConstants:
    SOFTWARE = "Dual Camera Studio v1.0"
    MOBILE_MODEL = "Mobile Camera"
    DESKTOP_MODEL = "Desktop Camera"


# Upload Constants
class UploadConstants:
    DEFAULT_MAX_SIZE_MB = 20
    MAX_PIXELS = 50_000_000
    ALLOWED_MIME_PREFIX = "image/"


# User-facing messages
class ErrorMessages:
    PERMISSION_DENIED = (
        "Camera permission denied. Please allow camera access for this device and retry."
    )
    DEVICE_NOT_FOUND = "No camera found on this device."
    DEVICE_BUSY = (
        "Camera is being used by another app. Please close other camera apps and try again."
    )
    INSECURE_CONTEXT = (
        "Camera requires secure connection (HTTPS). Please access this page via HTTPS."
    )
    ACQUISITION_FAILED = "Camera error: {message}. Try again."
    CAPTURE_NOT_READY = "Camera is not ready. Please wait for the camera to start and try again."
    NO_FRAME = "Camera has not delivered a frame yet. Please try again in a moment."
    CAPTURE_FAILED = "Failed to capture image. Please ensure camera is working and try again."
    SWITCH_NOT_READY = "Camera not initialized. Please wait or retry the camera."
    ZOOM_UNSUPPORTED = "Zoom is not supported by this camera."
    FLASH_UNSUPPORTED = "Flash is not supported by this camera."
    STREAM_REPLACED = "Camera changed before the setting was applied. Please try again."
