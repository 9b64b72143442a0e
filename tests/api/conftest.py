"""
Pytest configuration for API integration tests
"""

import pytest
from fastapi.testclient import TestClient

from core.camera_session import CameraSession
from core.gallery import CaptureGallery
from core.media.synthetic import SyntheticMediaDevices
from core.negotiator import DeviceNegotiator

DESKTOP_UA = "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 Chrome/120.0 Safari/537.36"


@pytest.fixture(scope="function")
def app_components():
    """Fresh camera session and gallery on synthetic cameras"""
    devices = SyntheticMediaDevices(has_torch=True)
    return {
        "devices": devices,
        "camera_session": CameraSession(DeviceNegotiator(devices)),
        "gallery": CaptureGallery(),
    }


@pytest.fixture(scope="function")
def client(app_components):
    """
    Create a test client with properly initialized app state.
    Each test gets a fresh client to avoid state contamination.
    """
    from main import app

    # Set in app state
    app.state.camera_session = app_components["camera_session"]
    app.state.gallery = app_components["gallery"]
    app.state.config = {
        "preview": {"fps": 30, "quality": 80, "max_width": 320},
        "upload": {"max_size_mb": 5},
    }

    # HTTPS base URL: camera access requires a secure origin
    test_client = TestClient(
        app,
        base_url="https://testserver",
        headers={"User-Agent": DESKTOP_UA},
        raise_server_exceptions=False,
    )

    yield test_client


@pytest.fixture
def ready_client(client):
    """Client whose camera session has been initialized"""
    response = client.post("/api/camera/initialize")
    assert response.json()["status"] == "ready"
    return client
