"""
Configuration for the Camera Studio backend.

Settings are pydantic models with defaults; any value can be overridden with an
environment variable named CAMERA_STUDIO_<SECTION>_<FIELD>, e.g.
CAMERA_STUDIO_CAMERA_BACKEND=opencv or CAMERA_STUDIO_SYSTEM_LOG_LEVEL=DEBUG.
"""

import json
import os
from functools import lru_cache
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from core.constants import CameraConstants, CaptureConstants, PreviewConstants, UploadConstants

ENV_PREFIX = "CAMERA_STUDIO_"


class SystemSettings(BaseModel):
    log_level: str = "INFO"
    debug: bool = False

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {v}")
        return level


class ApiSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = Field(8000, ge=1, le=65535)
    cors_enabled: bool = True
    cors_origins: List[str] = ["*"]


class CameraSettings(BaseModel):
    backend: str = Field("synthetic", pattern="^(opencv|synthetic)$")
    front_source: int = CameraConstants.DEFAULT_FRONT_SOURCE
    back_source: Optional[int] = CameraConstants.DEFAULT_BACK_SOURCE
    default_facing: str = Field("front", pattern="^(front|back)$")
    require_secure_context: bool = True
    zoom_min: float = CameraConstants.DEFAULT_ZOOM_MIN
    zoom_max: float = CameraConstants.DEFAULT_ZOOM_MAX
    synthetic_torch: bool = False
    synthetic_width: Optional[int] = None
    synthetic_height: Optional[int] = None
    jpeg_quality: float = Field(CaptureConstants.JPEG_QUALITY, gt=0.0, le=1.0)


class PreviewSettings(BaseModel):
    fps: int = Field(PreviewConstants.MJPEG_FPS, ge=1, le=60)
    quality: int = Field(PreviewConstants.MJPEG_QUALITY, ge=1, le=100)
    max_width: int = Field(PreviewConstants.MAX_WIDTH, ge=64)


class UploadSettings(BaseModel):
    max_size_mb: float = Field(UploadConstants.DEFAULT_MAX_SIZE_MB, gt=0)
    max_pixels: int = Field(UploadConstants.MAX_PIXELS, gt=0)


class Settings(BaseModel):
    environment: str = "development"
    system: SystemSettings = SystemSettings()
    api: ApiSettings = ApiSettings()
    camera: CameraSettings = CameraSettings()
    preview: PreviewSettings = PreviewSettings()
    upload: UploadSettings = UploadSettings()

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()


def _parse_env_value(raw: str) -> Any:
    """Accept JSON literals (numbers, booleans, lists) and fall back to the raw string"""
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def load_settings(environ: Optional[Dict[str, str]] = None) -> Settings:
    """
    Build settings from defaults and environment overrides.

    Args:
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Validated Settings
    """
    environ = os.environ if environ is None else environ
    data: Dict[str, Any] = {}

    if f"{ENV_PREFIX}ENVIRONMENT" in environ:
        data["environment"] = environ[f"{ENV_PREFIX}ENVIRONMENT"]

    for section, model in Settings.model_fields.items():
        if section == "environment":
            continue
        section_data = {}
        for field_name in model.annotation.model_fields:
            key = f"{ENV_PREFIX}{section}_{field_name}".upper()
            if key in environ:
                section_data[field_name] = _parse_env_value(environ[key])
        if section_data:
            data[section] = section_data

    return Settings(**data)


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings"""
    return load_settings()
