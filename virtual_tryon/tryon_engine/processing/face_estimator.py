# virtual_tryon/tryon_engine/processing/face_estimator.py
import logging
import numpy as np
from typing import Optional
from ..common.models import FaceRegion, PixelBuffer

logger = logging.getLogger(__name__)

SKIN_RATIO_MIN = 0.3
EDGE_RATIO_MIN = 0.1
DIAGONAL_EDGE_THRESHOLD = 30
SKIN_WEIGHT = 0.7
EDGE_WEIGHT = 0.3
MAX_CONFIDENCE = 0.95
ACCEPT_CONFIDENCE = 0.5
FACE_BOX_SIZE = (120, 160)

def skin_tone_mask(rgb: np.ndarray) -> np.ndarray:
    """Per-pixel skin-tone rule on an int-typed RGB array."""
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
    spread = rgb.max(axis=-1) - rgb.min(axis=-1)
    return (
        (r > 95) & (g > 40) & (b > 20)
        & (spread > 15)
        & (np.abs(r - g) > 15)
        & (r > g) & (r > b)
    )

class FaceEstimator:
    """Scores fixed-size blocks by skin tone and diagonal edge density and keeps the best one."""

    def __init__(self, config: dict, rng=None):
        self.block_size = config.get('block_size', 20)
        self.jitter = config.get('jitter', 0.1)
        # Anything exposing random() in [0, 1) works; tests inject a fixed source.
        self.rng = rng if rng is not None else np.random.default_rng(config.get('seed'))

    def estimate(self, buffer: PixelBuffer) -> Optional[FaceRegion]:
        block = self.block_size
        height, width = buffer.height, buffer.width
        rows = len(range(0, height - block, block))
        cols = len(range(0, width - block, block))
        if rows == 0 or cols == 0:
            return None

        rgb = buffer.pixels[:rows * block, :cols * block, :3].astype(np.int16)

        skin = skin_tone_mask(rgb)

        # Diagonal edges compare each pixel with its up-left neighbour inside the same block.
        diff = np.abs(rgb[1:, 1:] - rgb[:-1, :-1]).sum(axis=-1)
        edges = np.zeros(skin.shape, dtype=bool)
        edges[1:, 1:] = diff > DIAGONAL_EDGE_THRESHOLD
        edges[::block, :] = False
        edges[:, ::block] = False

        area = float(block * block)
        skin_ratio = self._block_sums(skin, rows, cols) / area
        edge_ratio = self._block_sums(edges, rows, cols) / area

        candidates = (skin_ratio > SKIN_RATIO_MIN) & (edge_ratio > EDGE_RATIO_MIN)
        if not candidates.any():
            return None

        scores = np.where(candidates, SKIN_WEIGHT * skin_ratio + EDGE_WEIGHT * edge_ratio, -np.inf)
        # argmax keeps the first maximum in row-major (scan) order.
        best_row, best_col = np.unravel_index(int(np.argmax(scores)), scores.shape)
        best_score = float(scores[best_row, best_col])

        confidence = min(MAX_CONFIDENCE, best_score + (self.rng.random() - 0.5) * self.jitter)
        if confidence <= ACCEPT_CONFIDENCE:
            logger.debug("Face candidate rejected (score %.3f, confidence %.3f)", best_score, confidence)
            return None

        center_x = best_col * block + block / 2
        center_y = best_row * block + block / 2
        box_w, box_h = FACE_BOX_SIZE
        return FaceRegion(
            x=max(0.0, center_x - box_w / 2),
            y=max(0.0, center_y - box_h / 2),
            width=box_w,
            height=box_h,
            confidence=confidence,
        )

    def _block_sums(self, mask: np.ndarray, rows: int, cols: int) -> np.ndarray:
        block = self.block_size
        return mask.reshape(rows, block, cols, block).sum(axis=(1, 3))
