"""
Camera capability model and stream capability probing.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CameraCapabilities:
    """
    What the active camera stream can currently do.

    current_zoom is None whenever has_zoom is False, and is_flash_on is False
    whenever has_flash is False.
    """

    has_zoom: bool = False
    has_flash: bool = False
    current_zoom: Optional[float] = None
    is_flash_on: bool = False
    zoom_min: Optional[float] = None
    zoom_max: Optional[float] = None

    def __post_init__(self):
        if not self.has_zoom:
            object.__setattr__(self, "current_zoom", None)
            object.__setattr__(self, "zoom_min", None)
            object.__setattr__(self, "zoom_max", None)
        if not self.has_flash:
            object.__setattr__(self, "is_flash_on", False)

    @classmethod
    def none(cls) -> "CameraCapabilities":
        """Capabilities of a session with no stream"""
        return cls()

    def with_zoom(self, zoom: Optional[float]) -> "CameraCapabilities":
        return replace(self, current_zoom=zoom)

    def with_flash(self, is_on: bool) -> "CameraCapabilities":
        return replace(self, is_flash_on=is_on)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hasZoom": self.has_zoom,
            "hasFlash": self.has_flash,
            "currentZoom": self.current_zoom,
            "isFlashOn": self.is_flash_on,
        }


@runtime_checkable
class StreamCapabilityProbe(Protocol):
    """Reads a capability snapshot from a live video track"""

    def probe(self, track) -> CameraCapabilities: ...


class MediaTrackCapabilityProbe:
    """
    Probe for tracks exposing get_capabilities()/get_settings() dictionaries.

    A zoom range in the capabilities means zoom is supported, a torch entry
    means flash is supported. Current values come from the track settings.
    """

    def probe(self, track) -> CameraCapabilities:
        try:
            capabilities = track.get_capabilities() or {}
            settings = track.get_settings() or {}
        except Exception as e:
            logger.warning(f"Failed to read track capabilities: {e}")
            return CameraCapabilities.none()

        zoom_range = capabilities.get("zoom")
        has_zoom = isinstance(zoom_range, dict) and "min" in zoom_range and "max" in zoom_range
        has_flash = bool(capabilities.get("torch", False))

        current_zoom = None
        zoom_min = zoom_max = None
        if has_zoom:
            zoom_min = float(zoom_range["min"])
            zoom_max = float(zoom_range["max"])
            current_zoom = float(settings.get("zoom", zoom_min))

        caps = CameraCapabilities(
            has_zoom=has_zoom,
            has_flash=has_flash,
            current_zoom=current_zoom,
            is_flash_on=bool(settings.get("torch", False)),
            zoom_min=zoom_min,
            zoom_max=zoom_max,
        )
        logger.debug(f"Probed capabilities: {caps.to_dict()}")
        return caps
