"""
Still-image capture and the detection visualizer on synthetic frames.
"""

import cv2
import numpy as np
import pytest

from tryon_engine.common.enums import DetectionQuality, GarmentType, NotificationLevel, SessionState
from tryon_engine.common.models import (
    DetectionState,
    FaceRegion,
    FrameMetadata,
    Garment,
    Keypoint,
    Notification,
    Outfit,
    PixelBuffer,
)
from tryon_engine.processing.body_estimator import synthesize_skeleton
from tryon_engine.visualization.capture import capture_filename, capture_photo, save_capture
from tryon_engine.visualization.visualizer import Visualizer, confidence_color

OUTFIT = Outfit(
    id="2",
    name="Casual Weekend Vibes",
    items=[Garment(name="Cotton Graphic T-Shirt", type=GarmentType.TOP, color="White")],
)


def _frame():
    return np.full((480, 640, 3), 40, dtype=np.uint8)


def test_capture_composites_without_touching_input():
    frame = _frame()
    skeleton = synthesize_skeleton(640, 480, 0.9)

    image = capture_photo(frame, OUTFIT, skeleton)

    assert image is not frame
    assert (frame == 40).all()
    assert not (image == 40).all()


@pytest.mark.parametrize("outfit, confidence", [(None, 0.9), (OUTFIT, 0.6), (OUTFIT, None)])
def test_capture_without_overlay_is_plain_frame(outfit, confidence):
    frame = _frame()
    skeleton = synthesize_skeleton(640, 480, confidence) if confidence is not None else None

    image = capture_photo(frame, outfit, skeleton)

    assert np.array_equal(image, frame)


def test_capture_filename():
    assert capture_filename(OUTFIT) == "virtual-tryon-casual-weekend-vibes.png"
    assert capture_filename(None) == "virtual-tryon-photo.png"


def test_save_capture_writes_png(tmp_path):
    path = save_capture(_frame(), str(tmp_path / "captures"), OUTFIT)

    written = cv2.imread(path)
    assert written.shape == (480, 640, 3)


@pytest.mark.parametrize("confidence, expected", [(0.9, (0, 255, 0)), (0.7, (0, 255, 255)), (0.6, (0, 102, 255))])
def test_confidence_colors(confidence, expected):
    assert confidence_color(confidence) == expected


def test_visualizer_draws_detections_on_a_copy():
    frame = _frame()
    state = DetectionState(
        status=SessionState.DETECTING,
        face=FaceRegion(x=260, y=20, width=120, height=160, confidence=0.85),
        body=synthesize_skeleton(640, 480, 0.9),
        quality=DetectionQuality.EXCELLENT,
    )
    notification = Notification(title="Outfit Applied", description="Now wearing: Casual Weekend Vibes")

    output = Visualizer({}).render(frame, state, 30.0, outfit=OUTFIT, notification=notification)

    assert output.shape == frame.shape
    assert (frame == 40).all()
    assert not np.array_equal(output, frame)


def test_visualizer_without_hud_or_detections_is_unchanged():
    frame = _frame()

    output = Visualizer({'draw_hud': False}).render(frame, DetectionState(), 0.0)

    assert np.array_equal(output, frame)


def test_visualizer_shows_error_banner():
    frame = _frame()

    output = Visualizer({'draw_hud': False}).render(
        frame, DetectionState(), 0.0, error="Camera access denied or not available"
    )

    assert not np.array_equal(output[10:50], frame[10:50])


def test_confidence_is_clamped():
    assert Keypoint(x=0, y=0, confidence=1.4).confidence == 1.0
    assert FaceRegion(x=0, y=0, width=1, height=1, confidence=-0.2).confidence == 0.0
    assert Notification(title="t", description="d").level is NotificationLevel.INFO


def test_pixel_buffer_is_read_only_without_freezing_the_source():
    frame = _frame()

    buffer = PixelBuffer(pixels=frame, metadata=FrameMetadata(frame_id=1, timestamp=0.0, source_resolution=(640, 480)))

    assert not buffer.pixels.flags.writeable
    assert frame.flags.writeable
    frame[0, 0] = 255
    assert buffer.pixels[0, 0].tolist() == [255, 255, 255]
