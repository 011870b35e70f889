"""
Camera manager and frame sampler tests using a mocked cv2.VideoCapture.
No real camera needed.
"""

import time
from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from tryon_engine.camera.camera_manager import CameraManager
from tryon_engine.camera.frame_sampler import FrameSampler
from tryon_engine.common.enums import FacingMode
from tryon_engine.common.errors import CameraAccessError
from tryon_engine.common.models import FrameMetadata

CAPTURE = "tryon_engine.camera.camera_manager.cv2.VideoCapture"


def _make_mock_capture(frame=None, opened=True):
    mock_cap = MagicMock()
    mock_cap.isOpened.return_value = opened
    mock_cap.grab.return_value = frame is not None
    mock_cap.retrieve.return_value = (frame is not None, frame)
    return mock_cap


def _wait_for_frame(camera, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        frame, metadata = camera.get_frame()
        if frame is not None:
            return frame, metadata
        time.sleep(0.005)
    return None, None


def test_unavailable_device_raises_camera_access_error():
    mock_cap = _make_mock_capture(opened=False)

    with patch(CAPTURE, return_value=mock_cap):
        camera = CameraManager({})
        with pytest.raises(CameraAccessError):
            camera.start()

    mock_cap.release.assert_called_once()
    assert not camera.is_running()


def test_camera_access_error_is_an_ioerror():
    assert issubclass(CameraAccessError, IOError)


def test_facing_mode_selects_configured_source():
    mock_cap = _make_mock_capture(opened=False)
    config = {'sources': {'user': 3, 'environment': 7}}

    with patch(CAPTURE, return_value=mock_cap) as video_capture:
        with pytest.raises(CameraAccessError):
            CameraManager(config, FacingMode.ENVIRONMENT).start()

    video_capture.assert_called_once_with(7)


def test_frames_flow_until_release():
    frame = np.zeros((48, 64, 3), dtype=np.uint8)
    mock_cap = _make_mock_capture(frame)

    with patch(CAPTURE, return_value=mock_cap):
        with CameraManager({'resolution': [64, 48]}) as camera:
            assert camera.is_running()
            latest, metadata = _wait_for_frame(camera)
            assert latest is not None
            assert metadata.source_resolution == (64, 48)
            assert metadata.frame_id >= 1

    assert not camera.is_running()
    mock_cap.release.assert_called_once()
    assert camera.get_frame() == (None, None)


def test_release_is_idempotent():
    mock_cap = _make_mock_capture(np.zeros((8, 8, 3), dtype=np.uint8))

    with patch(CAPTURE, return_value=mock_cap):
        camera = CameraManager({})
        camera.start()
        camera.release()
        camera.release()

    mock_cap.release.assert_called_once()


def test_get_frame_before_start_is_empty():
    assert CameraManager({}).get_frame() == (None, None)


class _StaticCamera:
    def __init__(self, frame):
        self.frame = frame

    def get_frame(self):
        if self.frame is None:
            return None, None
        return self.frame, FrameMetadata(frame_id=1, timestamp=0.0, source_resolution=(2, 1))


def test_sampler_converts_bgr_to_read_only_rgb():
    bgr = np.array([[[255, 0, 0], [0, 0, 255]]], dtype=np.uint8)

    buffer = FrameSampler().sample(_StaticCamera(bgr))

    assert buffer.pixels[0, 0].tolist() == [0, 0, 255]
    assert buffer.pixels[0, 1].tolist() == [255, 0, 0]
    assert (buffer.width, buffer.height) == (2, 1)
    assert not buffer.pixels.flags.writeable


def test_sampler_without_frame_returns_none():
    assert FrameSampler().sample(_StaticCamera(None)) is None
