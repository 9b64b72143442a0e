"""
Camera Studio - Main FastAPI Application
"""

import logging
import os
import sys
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Add parent directory to path
sys.path.append(str(Path(__file__).parent))

from api.exceptions import register_exception_handlers  # noqa: E402

# Import routers  # noqa: E402
from api.routers import camera, images, system  # noqa: E402

# Import configuration  # noqa: E402
from config import CameraSettings, Settings, get_settings  # noqa: E402

# Import core components  # noqa: E402
from core.camera_session import CameraSession  # noqa: E402
from core.enums import FacingMode  # noqa: E402
from core.frame_capturer import FrameCapturer  # noqa: E402
from core.gallery import CaptureGallery  # noqa: E402
from core.media import MediaDevices, OpenCVMediaDevices, SyntheticMediaDevices  # noqa: E402
from core.negotiator import DeviceNegotiator  # noqa: E402

# Get configuration
settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.system.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Suppress watchfiles debug messages
logging.getLogger("watchfiles").setLevel(logging.WARNING)


def create_media_devices(camera_settings: CameraSettings) -> MediaDevices:
    """Build the platform media API selected in the camera settings"""
    zoom_range = (camera_settings.zoom_min, camera_settings.zoom_max)

    if camera_settings.backend == "opencv":
        sources = {FacingMode.FRONT: camera_settings.front_source}
        if camera_settings.back_source is not None:
            sources[FacingMode.BACK] = camera_settings.back_source
        return OpenCVMediaDevices(sources=sources, zoom_range=zoom_range)

    return SyntheticMediaDevices(
        width=camera_settings.synthetic_width,
        height=camera_settings.synthetic_height,
        zoom_range=zoom_range,
        has_torch=camera_settings.synthetic_torch,
    )


def create_camera_session(app_settings: Settings) -> CameraSession:
    """Wire a camera session from settings"""
    camera_settings = app_settings.camera
    negotiator = DeviceNegotiator(
        create_media_devices(camera_settings),
        require_secure_context=camera_settings.require_secure_context,
    )
    return CameraSession(
        negotiator,
        capturer=FrameCapturer(quality=camera_settings.jpeg_quality),
        facing=FacingMode(camera_settings.default_facing),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle"""
    # Startup
    logger.info("Starting Camera Studio server...")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Camera backend: {settings.camera.backend}")

    camera_session = create_camera_session(settings)
    gallery = CaptureGallery()

    # Store components in app state for access by routers
    app.state.camera_session = camera_session
    app.state.gallery = gallery
    app.state.config = settings.to_dict()
    app.state.debug = settings.system.debug

    yield

    # Shutdown
    logger.info("Shutting down Camera Studio server...")

    # Release the camera device
    try:
        await camera_session.dispose()
    except Exception as e:
        logger.error(f"Error during cleanup: {e}")

    logger.info("Server shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="Camera Studio",
    description="Camera session manager with capture, upload and image metadata",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS for browser clients
if settings.api.cors_enabled:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Register exception handlers
register_exception_handlers(app)

# Include routers
app.include_router(camera.router, prefix="/api/camera", tags=["Camera"])
app.include_router(images.router, prefix="/api/images", tags=["Images"])
app.include_router(system.router, prefix="/api/system", tags=["System"])


# Root endpoint
@app.get("/")
async def root():
    return {
        "name": "Camera Studio",
        "status": "running",
        "version": "1.0.0",
        "endpoints": {
            "camera": "/api/camera",
            "images": "/api/images",
            "system": "/api/system",
            "docs": "/docs",
        },
    }


# Health check endpoint
@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "services": {
            "camera_session": getattr(app.state, "camera_session", None) is not None,
            "gallery": getattr(app.state, "gallery", None) is not None,
        },
    }


# Error handler
@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    logger.error(f"Global exception: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"detail": f"Internal server error: {str(exc)}"})


if __name__ == "__main__":
    reload_excludes = (
        ["*.log", "*.pyc", "__pycache__", ".git", ".venv", "venv"]
        if settings.system.debug
        else None
    )

    server_config = uvicorn.Config(
        "main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.system.debug,
        reload_excludes=reload_excludes,
        log_level=settings.system.log_level.lower(),
        loop="asyncio",
    )

    server = uvicorn.Server(server_config)

    try:
        server.run()
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")
    finally:
        logger.info(f"Server process {os.getpid()} exiting...")
