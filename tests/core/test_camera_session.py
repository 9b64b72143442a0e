"""
Tests for CameraSession module
"""

import asyncio
from unittest.mock import MagicMock

import pytest

from core.camera_session import CameraSession, SessionState
from core.capabilities import CameraCapabilities
from core.constants import ErrorMessages
from core.enums import AcquisitionErrorReason, DeviceClass, FacingMode, SessionStatus
from core.exceptions import (
    CaptureNotReadyError,
    ConstraintRejectedError,
    SessionNotReadyError,
)
from core.media.base import LocalMediaStream
from core.media.synthetic import SyntheticMediaDevices, SyntheticVideoTrack
from core.negotiator import DeviceNegotiator


class HeldVideoTrack(SyntheticVideoTrack):
    """Synthetic track whose constraint changes wait until released"""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.release = asyncio.get_running_loop().create_future()
        self.applied = []

    async def apply_constraints(self, constraints):
        await self.release
        self.applied.append(constraints)


class StuckTorchTrack(SyntheticVideoTrack):
    """Synthetic track that accepts torch constraints but never lights up"""

    async def apply_constraints(self, constraints):
        return None


def devices_serving(*tracks):
    devices = MagicMock()
    devices.name = "Mock"
    queue = list(tracks)

    async def request_stream(constraints):
        return LocalMediaStream([queue.pop(0)])

    devices.request_stream = request_stream
    return devices


class TestSessionState:
    """Test SessionState construction"""

    def test_initial_state(self, camera_session):
        state = camera_session.current_state()
        assert state.status == SessionStatus.UNINITIALIZED
        assert state.capabilities is None
        assert camera_session.current_capabilities() == CameraCapabilities.none()
        assert not camera_session.has_stream

    def test_to_dict(self):
        state = SessionState.ready(CameraCapabilities(has_zoom=True, current_zoom=2.0))
        data = state.to_dict()
        assert data["status"] == "ready"
        assert data["reason"] is None
        assert data["capabilities"]["hasZoom"] is True
        assert data["capabilities"]["currentZoom"] == 2.0

    def test_error_states(self):
        assert SessionState(SessionStatus.DENIED).is_error
        assert SessionState(SessionStatus.BUSY).is_error
        assert not SessionState(SessionStatus.LOADING).is_error
        assert not SessionState(SessionStatus.READY).is_error


class TestInitialize:
    """Test stream acquisition"""

    @pytest.mark.asyncio
    async def test_initialize_ready(self, camera_session):
        state = await camera_session.initialize()

        assert state.status == SessionStatus.READY
        assert state.message is None
        assert camera_session.has_stream
        assert camera_session.backend_name == "Test Pattern"

    @pytest.mark.asyncio
    async def test_zoom_range_capabilities(self):
        """Stream reporting zoom range [1, 5] without torch"""
        devices = SyntheticMediaDevices(zoom_range=(1.0, 5.0), has_torch=False)
        session = CameraSession(DeviceNegotiator(devices))

        state = await session.initialize()

        assert state.capabilities.to_dict() == {
            "hasZoom": True,
            "hasFlash": False,
            "currentZoom": 1.0,
            "isFlashOn": False,
        }

    @pytest.mark.asyncio
    async def test_no_zoom_capabilities(self):
        devices = SyntheticMediaDevices(zoom_range=None)
        session = CameraSession(DeviceNegotiator(devices))

        state = await session.initialize()

        assert state.capabilities.has_zoom is False
        assert state.capabilities.current_zoom is None

    @pytest.mark.asyncio
    async def test_initialize_with_facing(self, camera_session, synthetic_devices):
        await camera_session.initialize(FacingMode.BACK)

        assert camera_session.facing == FacingMode.BACK
        track = synthetic_devices.streams[-1].get_video_track()
        assert track.facing == FacingMode.BACK

    @pytest.mark.asyncio
    async def test_device_class_selects_resolution(self, camera_session, synthetic_devices):
        await camera_session.initialize(device_class=DeviceClass.MOBILE)
        track = synthetic_devices.streams[-1].get_video_track()
        assert (track.width, track.height) == (1280, 720)

        await camera_session.initialize(device_class=DeviceClass.DESKTOP)
        track = synthetic_devices.streams[-1].get_video_track()
        assert (track.width, track.height) == (640, 480)

    @pytest.mark.asyncio
    async def test_permission_denied(self, scripted_devices, settle):
        """Permission rejection moves the session to Denied and blocks capture"""
        session = CameraSession(DeviceNegotiator(scripted_devices))

        task = asyncio.create_task(session.initialize())
        await settle()
        assert session.current_state().status == SessionStatus.LOADING

        scripted_devices.reject(0, "NotAllowedError", "Permission denied")
        state = await task

        assert state.status == SessionStatus.DENIED
        assert state.reason == AcquisitionErrorReason.PERMISSION_DENIED
        assert "permission" in state.message.lower()
        assert state.capabilities is None

        assert session.capture() is None
        assert isinstance(session.last_error, CaptureNotReadyError)

    @pytest.mark.parametrize(
        "error_name,status",
        [
            ("NotFoundError", SessionStatus.UNAVAILABLE),
            ("DevicesNotFoundError", SessionStatus.UNAVAILABLE),
            ("NotReadableError", SessionStatus.BUSY),
            ("TrackStartError", SessionStatus.BUSY),
            ("SecurityError", SessionStatus.FAILED),
            ("AbortError", SessionStatus.FAILED),
        ],
    )
    @pytest.mark.asyncio
    async def test_failure_statuses(self, scripted_devices, settle, error_name, status):
        session = CameraSession(DeviceNegotiator(scripted_devices))

        task = asyncio.create_task(session.initialize())
        await settle()
        scripted_devices.reject(0, error_name, "boom")
        state = await task

        assert state.status == status
        assert state.is_error
        assert state.message

    @pytest.mark.asyncio
    async def test_generic_failure_message(self, scripted_devices, settle):
        session = CameraSession(DeviceNegotiator(scripted_devices))

        task = asyncio.create_task(session.initialize())
        await settle()
        scripted_devices.reject(0, "AbortError", "Timeout starting video source")
        state = await task

        assert state.message == "Camera error: Timeout starting video source. Try again."

    @pytest.mark.asyncio
    async def test_insecure_context(self, camera_session, synthetic_devices):
        state = await camera_session.initialize(secure_context=False)

        assert state.status == SessionStatus.FAILED
        assert state.reason == AcquisitionErrorReason.INSECURE_CONTEXT
        assert "HTTPS" in state.message
        assert synthetic_devices.streams == []

    @pytest.mark.asyncio
    async def test_retry_after_failure(self, scripted_devices, settle):
        session = CameraSession(DeviceNegotiator(scripted_devices))

        task = asyncio.create_task(session.initialize())
        await settle()
        scripted_devices.reject(0, "NotReadableError")
        assert (await task).status == SessionStatus.BUSY

        task = asyncio.create_task(session.initialize())
        await settle()
        scripted_devices.grant(1)
        state = await task

        assert state.status == SessionStatus.READY
        assert session.last_error is None


class TestSingleActiveStream:
    """Superseded acquisitions never leave a running stream behind"""

    @pytest.mark.asyncio
    async def test_late_stream_is_stopped(self, scripted_devices, settle):
        session = CameraSession(DeviceNegotiator(scripted_devices))

        first = asyncio.create_task(session.initialize(FacingMode.FRONT))
        await settle()
        second = asyncio.create_task(session.initialize(FacingMode.BACK))
        await settle()

        # Newer request resolves first, older one afterwards
        newer = scripted_devices.grant(1)
        await second
        older = scripted_devices.grant(0)
        await first

        assert session.current_state().is_ready
        assert session.facing == FacingMode.BACK
        assert newer.active
        assert not older.active
        assert scripted_devices.live_streams() == [newer]

    @pytest.mark.asyncio
    async def test_in_order_resolution(self, scripted_devices, settle):
        session = CameraSession(DeviceNegotiator(scripted_devices))

        first = asyncio.create_task(session.initialize(FacingMode.FRONT))
        await settle()
        second = asyncio.create_task(session.initialize(FacingMode.BACK))
        await settle()

        older = scripted_devices.grant(0)
        await first
        assert session.current_state().status == SessionStatus.LOADING
        assert not older.active

        newer = scripted_devices.grant(1)
        await second
        assert session.current_state().is_ready
        assert scripted_devices.live_streams() == [newer]

    @pytest.mark.asyncio
    async def test_superseded_failure_is_discarded(self, scripted_devices, settle):
        session = CameraSession(DeviceNegotiator(scripted_devices))

        first = asyncio.create_task(session.initialize())
        await settle()
        second = asyncio.create_task(session.initialize())
        await settle()

        scripted_devices.grant(1)
        await second
        scripted_devices.reject(0, "NotAllowedError")
        await first

        assert session.current_state().status == SessionStatus.READY
        assert session.last_error is None

    @pytest.mark.asyncio
    async def test_reinitialize_releases_previous_stream(self, camera_session, synthetic_devices):
        await camera_session.initialize()
        first = synthetic_devices.streams[-1]
        await camera_session.initialize()
        second = synthetic_devices.streams[-1]
        await camera_session.initialize()

        assert not first.active
        assert not second.active
        assert [s.active for s in synthetic_devices.streams] == [True]

    @pytest.mark.asyncio
    async def test_backend_keeps_only_live_streams(self, camera_session, synthetic_devices):
        for _ in range(50):
            await camera_session.initialize()

        assert len(synthetic_devices.streams) == 1
        assert synthetic_devices.streams[0].active

    @pytest.mark.asyncio
    async def test_dispose_during_acquisition(self, scripted_devices, settle):
        session = CameraSession(DeviceNegotiator(scripted_devices))

        task = asyncio.create_task(session.initialize())
        await settle()
        await session.dispose()
        stream = scripted_devices.grant(0)
        await task

        assert session.current_state().status == SessionStatus.UNINITIALIZED
        assert not stream.active
        assert not session.has_stream


class TestSwitchDevice:
    """Test front/back camera switching"""

    @pytest.mark.asyncio
    async def test_switch_stops_previous_stream_first(self, scripted_devices, settle):
        session = CameraSession(DeviceNegotiator(scripted_devices))

        task = asyncio.create_task(session.initialize(FacingMode.FRONT))
        await settle()
        front = scripted_devices.grant(0)
        await task

        switch = asyncio.create_task(session.switch_device())
        await settle()

        # The new request has been issued and the front stream is already stopped
        assert len(scripted_devices.requests) == 2
        assert scripted_devices.requests[1].facing == FacingMode.BACK
        assert not front.active
        assert session.current_state().status == SessionStatus.LOADING

        scripted_devices.grant(1)
        assert await switch is True
        assert session.facing == FacingMode.BACK
        assert session.current_state().is_ready

    @pytest.mark.asyncio
    async def test_switch_toggles_back_to_front(self, camera_session):
        await camera_session.initialize(FacingMode.BACK)

        assert await camera_session.switch_device() is True
        assert camera_session.facing == FacingMode.FRONT

    @pytest.mark.asyncio
    async def test_switch_not_ready(self, camera_session, synthetic_devices):
        assert await camera_session.switch_device() is False

        assert isinstance(camera_session.last_error, SessionNotReadyError)
        assert camera_session.facing == FacingMode.FRONT
        assert synthetic_devices.streams == []

    @pytest.mark.asyncio
    async def test_switch_to_missing_camera(self):
        devices = SyntheticMediaDevices(facings=(FacingMode.FRONT,))
        session = CameraSession(DeviceNegotiator(devices))
        await session.initialize()

        await session.switch_device()

        assert session.current_state().status == SessionStatus.UNAVAILABLE
        assert not session.has_stream
        assert not any(s.active for s in devices.streams)


class TestZoomAndFlash:
    """Test capability constraints"""

    @pytest.mark.asyncio
    async def test_set_zoom(self, camera_session):
        await camera_session.initialize()

        assert await camera_session.set_zoom(2.5) is True
        assert camera_session.current_capabilities().current_zoom == 2.5

    @pytest.mark.asyncio
    async def test_zoom_rejected_keeps_state(self, camera_session):
        await camera_session.initialize()
        before = camera_session.current_state()

        assert await camera_session.set_zoom(10.0) is False

        assert camera_session.current_state() == before
        assert isinstance(camera_session.last_error, ConstraintRejectedError)

    @pytest.mark.asyncio
    async def test_zoom_unsupported(self):
        session = CameraSession(DeviceNegotiator(SyntheticMediaDevices(zoom_range=None)))
        await session.initialize()

        assert await session.set_zoom(2.0) is False
        assert session.last_error.message == ErrorMessages.ZOOM_UNSUPPORTED

    @pytest.mark.asyncio
    async def test_zoom_not_ready(self, camera_session):
        assert await camera_session.set_zoom(2.0) is False
        assert camera_session.current_state().status == SessionStatus.UNINITIALIZED

    @pytest.mark.asyncio
    async def test_toggle_flash(self, camera_session):
        await camera_session.initialize()
        assert camera_session.current_capabilities().has_flash

        assert await camera_session.toggle_flash() is True
        assert camera_session.current_capabilities().is_flash_on is True

        assert await camera_session.toggle_flash() is True
        assert camera_session.current_capabilities().is_flash_on is False

    @pytest.mark.asyncio
    async def test_flash_unsupported(self):
        session = CameraSession(DeviceNegotiator(SyntheticMediaDevices(has_torch=False)))
        await session.initialize()
        before = session.current_state()

        assert await session.toggle_flash() is False
        assert session.current_state() == before
        assert session.last_error.message == ErrorMessages.FLASH_UNSUPPORTED

    @pytest.mark.asyncio
    async def test_flash_rejected_by_track(self):
        """Track advertises torch but refuses the constraint"""
        track = SyntheticVideoTrack(FacingMode.FRONT, 640, 480, has_torch=True)
        devices = MagicMock()
        devices.name = "Mock"

        async def request_stream(constraints):
            return LocalMediaStream([track])

        devices.request_stream = request_stream
        session = CameraSession(DeviceNegotiator(devices))
        await session.initialize()
        track.has_torch = False

        assert await session.toggle_flash() is False
        assert session.current_capabilities().is_flash_on is False
        assert isinstance(session.last_error, ConstraintRejectedError)

    @pytest.mark.asyncio
    async def test_zoom_on_replaced_stream_is_ignored(self, settle):
        held = HeldVideoTrack(FacingMode.FRONT, 640, 480)
        fresh = SyntheticVideoTrack(FacingMode.FRONT, 640, 480)
        session = CameraSession(DeviceNegotiator(devices_serving(held, fresh)))
        await session.initialize()

        task = asyncio.create_task(session.set_zoom(3.0))
        await settle()
        await session.initialize()
        before = session.current_state()
        held.release.set_result(None)

        assert await task is False
        assert session.current_state() == before
        assert session.current_capabilities().current_zoom == 1.0
        assert isinstance(session.last_error, ConstraintRejectedError)
        assert session.last_error.message == ErrorMessages.STREAM_REPLACED

    @pytest.mark.asyncio
    async def test_flash_on_replaced_stream_is_ignored(self, settle):
        held = HeldVideoTrack(FacingMode.FRONT, 640, 480, has_torch=True)
        fresh = SyntheticVideoTrack(FacingMode.FRONT, 640, 480, has_torch=True)
        session = CameraSession(DeviceNegotiator(devices_serving(held, fresh)))
        await session.initialize()

        task = asyncio.create_task(session.toggle_flash())
        await settle()
        await session.initialize()
        before = session.current_state()
        held.release.set_result(None)

        assert await task is False
        assert held.applied == [{"advanced": [{"torch": True}]}]
        assert session.current_state() == before
        assert session.current_capabilities().is_flash_on is False
        assert session.last_error.message == ErrorMessages.STREAM_REPLACED

    @pytest.mark.asyncio
    async def test_flash_state_read_back_from_track(self):
        track = StuckTorchTrack(FacingMode.FRONT, 640, 480, has_torch=True)
        session = CameraSession(DeviceNegotiator(devices_serving(track)))
        await session.initialize()

        assert await session.toggle_flash() is True
        assert session.current_capabilities().is_flash_on is False

    @pytest.mark.asyncio
    async def test_switch_resets_capabilities(self, camera_session):
        await camera_session.initialize()
        await camera_session.set_zoom(3.0)
        await camera_session.toggle_flash()

        await camera_session.switch_device()

        capabilities = camera_session.current_capabilities()
        assert capabilities.current_zoom == 1.0
        assert capabilities.is_flash_on is False


class TestCapture:
    """Test still capture"""

    @pytest.mark.asyncio
    async def test_capture(self, camera_session):
        await camera_session.initialize()

        image = camera_session.capture()

        assert image is not None
        assert image.mime_type == "image/jpeg"
        assert (image.width, image.height) == (640, 480)
        assert image.data[:2] == b"\xff\xd8"

    def test_capture_not_ready(self, camera_session):
        assert camera_session.capture() is None
        assert isinstance(camera_session.last_error, CaptureNotReadyError)

    @pytest.mark.asyncio
    async def test_capture_before_first_frame(self, camera_session, synthetic_devices):
        await camera_session.initialize()
        track = synthetic_devices.streams[-1].get_video_track()
        track.frames_before_ready = 1

        assert camera_session.capture() is None
        assert camera_session.last_error.message == ErrorMessages.NO_FRAME

        # Next frame is decoded
        assert camera_session.capture() is not None

    @pytest.mark.asyncio
    async def test_capture_after_dispose(self, camera_session):
        await camera_session.initialize()
        await camera_session.dispose()

        assert camera_session.capture() is None
        assert camera_session.preview_frame() is None

    @pytest.mark.asyncio
    async def test_preview_frame(self, camera_session):
        await camera_session.initialize()
        frame = camera_session.preview_frame()
        assert frame.shape == (480, 640, 3)


class TestDispose:
    @pytest.mark.asyncio
    async def test_dispose_stops_stream(self, camera_session, synthetic_devices):
        await camera_session.initialize()

        await camera_session.dispose()

        assert camera_session.current_state().status == SessionStatus.UNINITIALIZED
        assert not synthetic_devices.streams[0].active
        assert not camera_session.has_stream
