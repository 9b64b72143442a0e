"""
Captured image API models.

This module contains response models for captured and uploaded images.
"""

from datetime import datetime
from typing import Any, Dict, List

from pydantic import BaseModel, Field

from core.enums import SourceType

from .common import Size
from .metadata import CaptureMetadata


class CapturedImageResponse(BaseModel):
    """Captured or uploaded image with its metadata"""

    id: str
    source_type: SourceType
    timestamp: datetime
    size: Size
    mime_type: str
    payload: str = Field(..., description="Base64 data URI of the encoded image")
    metadata: CaptureMetadata


class CapturedImageSummary(BaseModel):
    """Gallery entry without the payload"""

    id: str
    source_type: SourceType
    timestamp: datetime
    size: Size
    thumbnail_base64: str
    metadata: CaptureMetadata


class GalleryResponse(BaseModel):
    """Gallery listing"""

    images: List[CapturedImageSummary]
    statistics: Dict[str, Any]
