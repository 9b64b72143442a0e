"""
Schemas Package

This package contains all Pydantic schemas for data validation and serialization,
organized by domain for better maintainability.

These schemas are shared across all application layers:
- API (routers, dependencies)
- Services (business logic)
- Core (metadata synthesis)
"""

# Camera models
from .camera import (
    CameraCapabilitiesModel,
    InitializeRequest,
    SessionStateResponse,
    ZoomRequest,
)

# Common models
from .common import ErrorResponse, Size, SystemStatus

# Image models
from .image import CapturedImageResponse, CapturedImageSummary, GalleryResponse

# Metadata
from .metadata import CaptureMetadata

# Explicitly declare public API for re-export
__all__ = [
    # Common models
    "Size",
    "ErrorResponse",
    "SystemStatus",
    # Camera models
    "CameraCapabilitiesModel",
    "InitializeRequest",
    "SessionStateResponse",
    "ZoomRequest",
    # Image models
    "CapturedImageResponse",
    "CapturedImageSummary",
    "GalleryResponse",
    # Metadata
    "CaptureMetadata",
]
