"""
Shared FastAPI dependencies for the Camera Studio system.
Centralizes common dependencies to eliminate code duplication.
"""

import logging
from datetime import datetime
from typing import Any, Dict

from fastapi import Depends, HTTPException, Request

from core.camera_session import CameraSession
from core.constants import UploadConstants
from core.enums import DeviceClass
from core.gallery import CaptureGallery
from core.metadata import EnvironmentDescriptors
from core.negotiator import detect_device_class, is_secure_origin
from services.capture_service import CaptureService

logger = logging.getLogger(__name__)


class Managers:
    """Container for the shared component instances."""

    def __init__(self, camera_session: CameraSession, gallery: CaptureGallery):
        self.camera_session = camera_session
        self.gallery = gallery


def get_managers(request: Request) -> Managers:
    """
    Get shared component instances from app state.

    Args:
        request: FastAPI request object

    Returns:
        Managers container

    Raises:
        HTTPException: If components not initialized
    """
    try:
        return Managers(
            camera_session=request.app.state.camera_session,
            gallery=request.app.state.gallery,
        )
    except AttributeError as e:
        logger.error(f"Components not initialized in app state: {e}")
        raise HTTPException(
            status_code=500, detail="Internal server error: Components not initialized"
        )


def get_camera_session(managers: Managers = Depends(get_managers)) -> CameraSession:
    """Get CameraSession instance."""
    return managers.camera_session


def get_gallery(managers: Managers = Depends(get_managers)) -> CaptureGallery:
    """Get CaptureGallery instance."""
    return managers.gallery


def get_config(request: Request) -> Dict[str, Any]:
    """
    Get application configuration.

    Args:
        request: FastAPI request object

    Returns:
        Configuration dictionary
    """
    try:
        return request.app.state.config
    except AttributeError:
        logger.warning("Config not found in app state, using defaults")
        return {}


def get_capture_service(
    request: Request,
    camera_session: CameraSession = Depends(get_camera_session),
    gallery: CaptureGallery = Depends(get_gallery),
) -> CaptureService:
    """
    Get capture service instance.

    Args:
        request: FastAPI request object
        camera_session: Camera session dependency
        gallery: Capture gallery dependency

    Returns:
        CaptureService instance
    """
    upload_config = get_config(request).get("upload", {})
    return CaptureService(
        session=camera_session,
        gallery=gallery,
        max_upload_mb=upload_config.get("max_size_mb", UploadConstants.DEFAULT_MAX_SIZE_MB),
        max_upload_pixels=upload_config.get("max_pixels", UploadConstants.MAX_PIXELS),
    )


def get_device_class(request: Request) -> DeviceClass:
    """Device class of the requesting client, from its User-Agent."""
    return detect_device_class(request.headers.get("user-agent"))


def get_secure_context(request: Request) -> bool:
    """Whether the requesting origin may use the camera (HTTPS or local host)."""
    origin = request.headers.get("origin")
    if origin:
        return is_secure_origin(origin)
    return is_secure_origin(str(request.base_url))


def get_environment(
    request: Request,
    camera_session: CameraSession = Depends(get_camera_session),
) -> EnvironmentDescriptors:
    """
    Environment descriptors of the requesting client for image metadata.

    Values the client does not send stay None.
    """
    headers = request.headers
    language = headers.get("accept-language")
    if language:
        language = language.split(",")[0].split(";")[0].strip() or None

    platform = headers.get("sec-ch-ua-platform")
    if platform:
        platform = platform.strip('"') or None

    return EnvironmentDescriptors(
        user_agent=headers.get("user-agent"),
        platform=platform,
        language=language,
        time_zone=headers.get("x-timezone") or datetime.now().astimezone().tzname(),
        device_class=camera_session.device_class,
        camera_backend=camera_session.backend_name,
    )
