"""
Platform media-device API.

Defines the request type handed to the platform (CaptureConstraints), the error
the platform rejects with (MediaDeviceError, using platform vocabulary) and the
protocols every backend implements.
"""

import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, runtime_checkable

import numpy as np

from core.enums import FacingMode


@dataclass(frozen=True)
class ResolutionRange:
    """Ideal/min/max bounds for one resolution axis"""

    ideal: int
    min: Optional[int] = None
    max: Optional[int] = None

    def accepts(self, value: int) -> bool:
        if self.min is not None and value < self.min:
            return False
        if self.max is not None and value > self.max:
            return False
        return True

    def to_dict(self) -> Dict[str, int]:
        bounds = {"ideal": self.ideal}
        if self.min is not None:
            bounds["min"] = self.min
        if self.max is not None:
            bounds["max"] = self.max
        return bounds


@dataclass(frozen=True)
class CaptureConstraints:
    """Stream request for a single acquisition attempt"""

    facing: FacingMode
    width: ResolutionRange
    height: ResolutionRange

    def to_dict(self) -> Dict[str, Any]:
        return {
            "video": {
                "facingMode": self.facing.platform_value,
                "width": self.width.to_dict(),
                "height": self.height.to_dict(),
            }
        }


class MediaDeviceError(Exception):
    """
    Rejection reported by a media-device backend.

    name follows the platform vocabulary (NotAllowedError, NotFoundError,
    NotReadableError, OverconstrainedError, ...).
    """

    def __init__(self, name: str, message: str = ""):
        super().__init__(f"{name}: {message}" if message else name)
        self.name = name
        self.message = message


def flatten_constraints(constraints: Dict[str, Any]) -> Dict[str, Any]:
    """Merge top-level and 'advanced' constraint sets into one dict"""
    flat = {k: v for k, v in constraints.items() if k != "advanced"}
    for constraint_set in constraints.get("advanced", []):
        flat.update(constraint_set)
    return flat


@runtime_checkable
class VideoTrack(Protocol):
    ready_state: str

    def get_settings(self) -> Dict[str, Any]: ...

    def get_capabilities(self) -> Dict[str, Any]: ...

    async def apply_constraints(self, constraints: Dict[str, Any]) -> None: ...

    def read_frame(self) -> Optional[np.ndarray]: ...

    def stop(self) -> None: ...


@runtime_checkable
class MediaStream(Protocol):
    id: str

    @property
    def active(self) -> bool: ...

    def get_video_track(self) -> Optional[VideoTrack]: ...

    def stop_all_tracks(self) -> None: ...


@runtime_checkable
class MediaDevices(Protocol):
    name: str

    async def request_stream(self, constraints: CaptureConstraints) -> MediaStream: ...


class LocalMediaStream:
    """MediaStream holding the tracks opened by a local backend"""

    def __init__(self, tracks):
        self.id = uuid.uuid4().hex[:12]
        self.tracks = list(tracks)

    @property
    def active(self) -> bool:
        return any(track.ready_state == "live" for track in self.tracks)

    def get_video_track(self) -> Optional[VideoTrack]:
        return self.tracks[0] if self.tracks else None

    def stop_all_tracks(self) -> None:
        for track in self.tracks:
            track.stop()
