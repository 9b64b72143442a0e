"""
Capture metadata model.

A descriptive record attached to every captured or uploaded image. Fields are
serialized with their PascalCase names; unknown optional values are None.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CaptureMetadata(BaseModel):
    """Synthesized image metadata"""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    # Timestamps
    date_time: str = Field(..., alias="DateTime", description="ISO 8601 capture time")
    capture_timestamp: int = Field(..., alias="CaptureTimestamp", description="Epoch ms")
    time_zone: Optional[str] = Field(None, alias="TimeZone")

    # Image
    image_width: Optional[int] = Field(None, alias="ImageWidth")
    image_height: Optional[int] = Field(None, alias="ImageHeight")
    file_size: Optional[int] = Field(None, alias="FileSize", description="Payload size in bytes")
    color_depth: int = Field(24, alias="ColorDepth")

    # Camera capabilities at capture time
    has_zoom: bool = Field(False, alias="HasZoom")
    current_zoom: Optional[float] = Field(None, alias="CurrentZoom")
    has_flash: bool = Field(False, alias="HasFlash")
    is_flash_on: bool = Field(False, alias="IsFlashOn")
    facing_mode: Optional[str] = Field(None, alias="FacingMode")

    # Source
    capture_method: str = Field(..., alias="CaptureMethod")
    software: str = Field(..., alias="Software")
    make: Optional[str] = Field(None, alias="Make")
    model: Optional[str] = Field(None, alias="Model")

    # Environment
    user_agent: Optional[str] = Field(None, alias="UserAgent")
    platform: Optional[str] = Field(None, alias="Platform")
    language: Optional[str] = Field(None, alias="Language")

    # Uploaded files only
    file_name: Optional[str] = Field(None, alias="FileName")
    file_type: Optional[str] = Field(None, alias="FileType")
    last_modified: Optional[str] = Field(None, alias="LastModified")
