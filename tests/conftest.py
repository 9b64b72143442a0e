"""
Pytest configuration and fixtures for Camera Studio tests
"""

import asyncio
import io
from typing import List

import cv2
import numpy as np
import pytest
from PIL import Image

from core.camera_session import CameraSession
from core.gallery import CaptureGallery
from core.media.base import CaptureConstraints, LocalMediaStream, MediaDeviceError
from core.media.synthetic import SyntheticMediaDevices, SyntheticVideoTrack
from core.negotiator import DeviceNegotiator
from services.capture_service import CaptureService


class ScriptedMediaDevices:
    """
    Media devices whose requests resolve only when the test says so.

    Each request_stream call gets its own pending future; tests resolve them
    in any order with grant()/reject() to simulate out-of-order completion.
    """

    name = "Scripted"

    def __init__(self, has_torch: bool = True, zoom_range=(1.0, 5.0)):
        self.has_torch = has_torch
        self.zoom_range = zoom_range
        self.requests: List[CaptureConstraints] = []
        self.pending: List[asyncio.Future] = []
        self.streams: List[LocalMediaStream] = []

    async def request_stream(self, constraints: CaptureConstraints) -> LocalMediaStream:
        future = asyncio.get_running_loop().create_future()
        self.requests.append(constraints)
        self.pending.append(future)
        return await future

    def make_stream(self, index: int) -> LocalMediaStream:
        constraints = self.requests[index]
        track = SyntheticVideoTrack(
            constraints.facing,
            constraints.width.ideal,
            constraints.height.ideal,
            zoom_range=self.zoom_range,
            has_torch=self.has_torch,
        )
        stream = LocalMediaStream([track])
        self.streams.append(stream)
        return stream

    def grant(self, index: int) -> LocalMediaStream:
        stream = self.make_stream(index)
        self.pending[index].set_result(stream)
        return stream

    def reject(self, index: int, name: str, message: str = ""):
        self.pending[index].set_exception(MediaDeviceError(name, message))

    def live_streams(self) -> List[LocalMediaStream]:
        return [s for s in self.streams if s.active]


async def _settle():
    """Let pending tasks run until they block again"""
    for _ in range(5):
        await asyncio.sleep(0)


@pytest.fixture
def test_image():
    """Create a test image for testing"""
    image = np.zeros((480, 640, 3), dtype=np.uint8)
    # Add some content
    cv2.rectangle(image, (100, 100), (300, 300), (255, 255, 255), -1)
    cv2.circle(image, (450, 350), 50, (128, 128, 128), -1)
    return image


def encode_image(width: int, height: int, fmt: str = "PNG") -> bytes:
    """Encode a solid-color image of the given size"""
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), (40, 120, 200)).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def png_1024x768() -> bytes:
    return encode_image(1024, 768)


@pytest.fixture(scope="session")
def oversized_png() -> bytes:
    """Small 1-bit PNG whose header declares 20000x20000 pixels"""
    buffer = io.BytesIO()
    Image.new("1", (20000, 20000)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def synthetic_devices():
    """Synthetic front/back cameras with zoom and torch"""
    return SyntheticMediaDevices(has_torch=True)


@pytest.fixture
def scripted_devices():
    return ScriptedMediaDevices()


@pytest.fixture
def camera_session(synthetic_devices):
    """Create CameraSession on synthetic cameras for testing"""
    return CameraSession(DeviceNegotiator(synthetic_devices))


@pytest.fixture
def gallery():
    """Create CaptureGallery instance for testing"""
    return CaptureGallery()


@pytest.fixture
def capture_service(camera_session, gallery):
    """Create CaptureService instance for testing"""
    return CaptureService(session=camera_session, gallery=gallery)


@pytest.fixture
def settle():
    return _settle


@pytest.fixture
def image_bytes():
    """Factory encoding a solid-color image: image_bytes(width, height, fmt)"""
    return encode_image
