"""
Camera API Router
"""

import asyncio
import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from api.dependencies import (
    get_camera_session,
    get_capture_service,
    get_config,
    get_device_class,
    get_environment,
    get_secure_context,
)
from api.exceptions import safe_endpoint
from core.camera_session import CameraSession
from core.constants import PreviewConstants
from core.enums import DeviceClass
from core.gallery import CapturedImage
from core.image.converters import ImageConverters
from core.image.processors import resize_image
from core.metadata import EnvironmentDescriptors
from schemas import (
    CameraCapabilitiesModel,
    CapturedImageResponse,
    InitializeRequest,
    SessionStateResponse,
    Size,
    ZoomRequest,
)
from services.capture_service import CaptureService

logger = logging.getLogger(__name__)

router = APIRouter()


def state_response(session: CameraSession) -> SessionStateResponse:
    """Render the session state for the client"""
    state = session.current_state()
    capabilities = session.current_capabilities()
    return SessionStateResponse(
        status=state.status,
        message=state.message,
        reason=state.reason,
        facing=session.facing,
        capabilities=CameraCapabilitiesModel(
            has_zoom=capabilities.has_zoom,
            has_flash=capabilities.has_flash,
            current_zoom=capabilities.current_zoom,
            is_flash_on=capabilities.is_flash_on,
            zoom_min=capabilities.zoom_min,
            zoom_max=capabilities.zoom_max,
        ),
        retry_available=state.is_error,
    )


def image_response(image: CapturedImage) -> CapturedImageResponse:
    return CapturedImageResponse(
        id=image.id,
        source_type=image.source_type,
        timestamp=image.timestamp,
        size=Size(width=image.payload.width, height=image.payload.height),
        mime_type=image.payload.mime_type,
        payload=image.payload.to_data_uri(),
        metadata=image.metadata,
    )


@router.post("/initialize")
@safe_endpoint
async def initialize_camera(
    request: Optional[InitializeRequest] = None,
    device_class: DeviceClass = Depends(get_device_class),
    secure_context: bool = Depends(get_secure_context),
    capture_service: CaptureService = Depends(get_capture_service),
) -> SessionStateResponse:
    """Start the camera, or retry after a failure"""
    facing = request.facing if request else None
    await capture_service.initialize(
        facing=facing, device_class=device_class, secure_context=secure_context
    )
    return state_response(capture_service.session)


@router.post("/switch")
@safe_endpoint
async def switch_camera(
    capture_service: CaptureService = Depends(get_capture_service),
) -> SessionStateResponse:
    """Switch between front and back cameras"""
    await capture_service.switch_device()
    return state_response(capture_service.session)


@router.post("/zoom")
@safe_endpoint
async def set_zoom(
    request: ZoomRequest,
    capture_service: CaptureService = Depends(get_capture_service),
) -> SessionStateResponse:
    """Set the camera zoom level"""
    await capture_service.set_zoom(request.level)
    return state_response(capture_service.session)


@router.post("/flash")
@safe_endpoint
async def toggle_flash(
    capture_service: CaptureService = Depends(get_capture_service),
) -> SessionStateResponse:
    """Toggle the camera torch"""
    await capture_service.toggle_flash()
    return state_response(capture_service.session)


@router.post("/capture")
@safe_endpoint
async def capture_image(
    capture_service: CaptureService = Depends(get_capture_service),
    environment: EnvironmentDescriptors = Depends(get_environment),
) -> CapturedImageResponse:
    """Capture a still image from the live camera"""
    image = capture_service.capture(environment)
    return image_response(image)


@router.get("/state")
@safe_endpoint
async def get_state(
    camera_session: CameraSession = Depends(get_camera_session),
) -> SessionStateResponse:
    """Get the camera session state"""
    return state_response(camera_session)


@router.get("/capabilities")
@safe_endpoint
async def get_capabilities(
    camera_session: CameraSession = Depends(get_camera_session),
) -> CameraCapabilitiesModel:
    """Get the capabilities of the active camera"""
    return state_response(camera_session).capabilities


@router.post("/dispose")
@safe_endpoint
async def dispose_camera(
    camera_session: CameraSession = Depends(get_camera_session),
) -> SessionStateResponse:
    """Stop the camera and release the device"""
    await camera_session.dispose()
    return state_response(camera_session)


@router.get("/stream")
async def stream_mjpeg(
    request: Request,
    camera_session: CameraSession = Depends(get_camera_session),
):
    """
    Stream MJPEG video from the camera for live preview.

    Returns a multipart/x-mixed-replace stream of JPEG frames. The stream ends
    when the camera session leaves the ready state or the client disconnects.
    """
    preview = get_config(request).get("preview", {})
    preview_fps = preview.get("fps", PreviewConstants.MJPEG_FPS)
    preview_quality = preview.get("quality", PreviewConstants.MJPEG_QUALITY)
    max_width = preview.get("max_width", PreviewConstants.MAX_WIDTH)

    frame_interval = 1.0 / preview_fps  # Time between frames

    async def generate():
        """Generate MJPEG frames"""
        last_frame_time = 0.0

        try:
            while camera_session.current_state().is_ready:
                if await request.is_disconnected():
                    break

                current_time = time.time()

                # Limit frame rate
                if current_time - last_frame_time < frame_interval:
                    await asyncio.sleep(frame_interval - (current_time - last_frame_time))

                frame = camera_session.preview_frame()
                if frame is None:
                    await asyncio.sleep(frame_interval)
                    continue

                if frame.shape[1] > max_width:
                    frame = resize_image(frame, width=max_width)
                buffer = ImageConverters.encode_jpeg(frame, preview_quality)

                # Yield frame in MJPEG format
                yield (b"--frame\r\n" b"Content-Type: image/jpeg\r\n\r\n" + buffer + b"\r\n")

                last_frame_time = time.time()

        except Exception as e:
            logger.error(f"Error in MJPEG stream: {e}")
        finally:
            logger.info("MJPEG stream ended")

    return StreamingResponse(
        generate(),
        media_type="multipart/x-mixed-replace; boundary=frame",
        headers={
            "Cache-Control": "no-cache, no-store, must-revalidate",
            "Pragma": "no-cache",
            "Expires": "0",
            "Connection": "close",
        },
    )
