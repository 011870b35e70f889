"""
Face region estimator tests on synthetic RGB frames (block size 20).
"""

import numpy as np
import pytest

from tryon_engine.processing.face_estimator import FaceEstimator, skin_tone_mask
from synthetic import GRAY, SKIN_A, SKIN_B, FixedRandom, paint_row_pattern, solid_rgb, to_buffer


def _estimator(value: float = 0.5) -> FaceEstimator:
    return FaceEstimator({'block_size': 20, 'jitter': 0.1}, rng=FixedRandom(value))


def _skin_block(pixels, x, y):
    """Full skin coverage, alternate rows so every diagonal pair differs."""
    paint_row_pattern(pixels, x, y, 20, lambda row: SKIN_A if row % 2 == 0 else SKIN_B)


# 0.7 * 1.0 + 0.3 * (19 * 19 / 400)
FULL_SKIN_SCORE = 0.97075
# 0.7 * 0.5 + 0.3 * (19 * 19 / 400)
HALF_SKIN_SCORE = 0.62075


def test_skin_tone_rule():
    rgb = np.array([[SKIN_A, SKIN_B, GRAY, (90, 60, 40), (120, 130, 100)]], dtype=np.int16)
    assert skin_tone_mask(rgb).tolist() == [[True, True, False, False, False]]


@pytest.mark.parametrize("color", [GRAY, SKIN_A, (0, 0, 0)])
def test_zero_variance_frame_has_no_face(color):
    assert _estimator().estimate(to_buffer(solid_rgb(120, 160, color))) is None


def test_single_skin_block_yields_centered_box():
    pixels = solid_rgb(300, 300)
    _skin_block(pixels, 140, 160)

    face = _estimator(0.5).estimate(to_buffer(pixels))

    assert face is not None
    assert (face.width, face.height) == (120, 160)
    assert face.x + face.width / 2 == pytest.approx(150, abs=20)
    assert face.y + face.height / 2 == pytest.approx(170, abs=20)
    assert (face.x, face.y) == (90, 90)
    assert face.confidence == pytest.approx(min(0.95, FULL_SKIN_SCORE))


def test_confidence_stays_within_jitter_bound_with_real_randomness():
    pixels = solid_rgb(300, 300)
    paint_row_pattern(pixels, 140, 160, 20, lambda row: SKIN_A if row % 2 == 0 else GRAY)
    estimator = FaceEstimator({'block_size': 20, 'jitter': 0.1, 'seed': 7})

    for _ in range(20):
        face = estimator.estimate(to_buffer(pixels))
        assert face is not None
        assert abs(face.confidence - HALF_SKIN_SCORE) <= 0.05 + 1e-9


@pytest.mark.parametrize("draw, expected", [(0.0, HALF_SKIN_SCORE - 0.05), (0.5, HALF_SKIN_SCORE), (1.0, HALF_SKIN_SCORE + 0.05)])
def test_jitter_is_applied_from_injected_source(draw, expected):
    pixels = solid_rgb(300, 300)
    paint_row_pattern(pixels, 140, 160, 20, lambda row: SKIN_A if row % 2 == 0 else GRAY)

    face = _estimator(draw).estimate(to_buffer(pixels))

    assert face.confidence == pytest.approx(expected)


def test_low_scoring_candidate_is_rejected():
    # Skin on every third row: a candidate block whose score stays under 0.5 after jitter.
    pixels = solid_rgb(300, 300)
    paint_row_pattern(pixels, 140, 160, 20, lambda row: SKIN_A if row % 3 == 0 else GRAY)

    assert _estimator(1.0).estimate(to_buffer(pixels)) is None


def test_ties_resolve_to_first_block_in_scan_order():
    pixels = solid_rgb(300, 300)
    _skin_block(pixels, 140, 100)
    _skin_block(pixels, 100, 100)

    face = _estimator().estimate(to_buffer(pixels))

    assert (face.x, face.y) == (50, 30)


def test_box_is_clamped_to_frame_origin():
    pixels = solid_rgb(200, 200)
    _skin_block(pixels, 0, 0)

    face = _estimator().estimate(to_buffer(pixels))

    assert (face.x, face.y) == (0, 0)


def test_trailing_blocks_are_not_scanned():
    # Block origins satisfy y < H - B, so a 40x40 frame only scans the block at (0, 0).
    pixels = solid_rgb(40, 40)
    _skin_block(pixels, 20, 20)

    assert _estimator().estimate(to_buffer(pixels)) is None


def test_rgba_buffers_are_accepted():
    pixels = solid_rgb(300, 300)
    _skin_block(pixels, 140, 160)
    rgba = np.dstack([pixels, np.full(pixels.shape[:2], 255, dtype=np.uint8)])

    face = _estimator().estimate(to_buffer(rgba))

    assert face is not None
    assert face.confidence == pytest.approx(0.95)


def test_tiny_frame_returns_none():
    assert _estimator().estimate(to_buffer(solid_rgb(10, 10, SKIN_A))) is None
