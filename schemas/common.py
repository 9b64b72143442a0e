"""
Common API models shared by several routers.
"""

from typing import Dict

from pydantic import BaseModel, Field


class Size(BaseModel):
    """Pixel dimensions"""

    width: int = Field(..., ge=0)
    height: int = Field(..., ge=0)


class ErrorResponse(BaseModel):
    """Error body returned by the exception handlers"""

    detail: str
    code: str


class SystemStatus(BaseModel):
    """System status information"""

    status: str
    uptime: float
    memory_usage: Dict[str, float]
    camera_status: str
    camera_backend: str
    gallery_size: int
