"""
Camera-related API models.

This module contains request and response models for camera operations:
- Session initialization and device switching
- Zoom and flash control
- Session state and capabilities
"""

from typing import Optional

from pydantic import BaseModel, Field

from core.enums import AcquisitionErrorReason, FacingMode, SessionStatus


class CameraCapabilitiesModel(BaseModel):
    """What the active camera stream can currently do"""

    has_zoom: bool = False
    has_flash: bool = False
    current_zoom: Optional[float] = None
    is_flash_on: bool = False
    zoom_min: Optional[float] = None
    zoom_max: Optional[float] = None


class SessionStateResponse(BaseModel):
    """Camera session state"""

    status: SessionStatus
    message: Optional[str] = None
    reason: Optional[AcquisitionErrorReason] = None
    facing: FacingMode
    capabilities: CameraCapabilitiesModel
    retry_available: bool = Field(
        False, description="True when the session failed and initialize can be retried"
    )


class InitializeRequest(BaseModel):
    """Request to start the camera"""

    class Config:
        extra = "forbid"

    facing: Optional[FacingMode] = Field(
        None, description="Camera to start; defaults to the current facing"
    )


class ZoomRequest(BaseModel):
    """Request to change the zoom level"""

    level: float = Field(..., gt=0, description="Zoom level within the camera's zoom range")
