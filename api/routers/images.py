"""
Images API Router - File uploads and the capture gallery
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from api.dependencies import get_capture_service, get_environment, get_gallery
from api.exceptions import safe_endpoint
from api.routers.camera import image_response
from core.enums import SourceType
from core.gallery import CaptureGallery
from core.image.processors import create_thumbnail
from core.metadata import EnvironmentDescriptors
from schemas import CapturedImageResponse, CapturedImageSummary, GalleryResponse, Size
from services.capture_service import CaptureService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/upload")
@safe_endpoint
async def upload_image(
    file: UploadFile = File(...),
    last_modified: Optional[int] = Form(
        None, description="File last-modified time in milliseconds since epoch"
    ),
    capture_service: CaptureService = Depends(get_capture_service),
    environment: EnvironmentDescriptors = Depends(get_environment),
) -> CapturedImageResponse:
    """Upload an image file"""
    contents = await file.read()

    modified_at = None
    if last_modified is not None:
        modified_at = datetime.fromtimestamp(last_modified / 1000, tz=timezone.utc)

    image = capture_service.upload(
        contents,
        file_name=file.filename,
        content_type=file.content_type,
        last_modified=modified_at,
        environment=environment,
    )
    return image_response(image)


@router.get("")
@safe_endpoint
async def list_images(
    limit: int = Query(10, ge=1, le=100),
    source_type: Optional[SourceType] = Query(None),
    capture_service: CaptureService = Depends(get_capture_service),
) -> GalleryResponse:
    """List captured and uploaded images, newest first"""
    images = capture_service.list_images(limit, source_type)

    summaries = [
        CapturedImageSummary(
            id=image.id,
            source_type=image.source_type,
            timestamp=image.timestamp,
            size=Size(width=image.payload.width, height=image.payload.height),
            thumbnail_base64=create_thumbnail(image.payload.data),
            metadata=image.metadata,
        )
        for image in images
    ]

    return GalleryResponse(
        images=summaries, statistics=capture_service.gallery.get_statistics()
    )


@router.get("/statistics")
@safe_endpoint
async def get_statistics(gallery: CaptureGallery = Depends(get_gallery)) -> dict:
    """Get gallery statistics"""
    return gallery.get_statistics()


@router.get("/{image_id}")
@safe_endpoint
async def get_image(
    image_id: str, capture_service: CaptureService = Depends(get_capture_service)
) -> CapturedImageResponse:
    """Get a captured image with its payload and metadata"""
    return image_response(capture_service.get_image(image_id))
