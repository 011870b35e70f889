# virtual_tryon/tryon_engine/processing/body_estimator.py
import logging
import numpy as np
from typing import Optional
from ..common.enums import KeypointName as K
from ..common.models import Keypoint, PixelBuffer, Skeleton

logger = logging.getLogger(__name__)

VERTICAL_EDGE_THRESHOLD = 40
EDGE_RATIO_MIN = 0.15
MIN_CANDIDATES = 3
MAX_CONFIDENCE = 0.9
SCAN_TOP = 0.2
SCAN_LEFT = 0.2
SCAN_RIGHT = 0.8
ANCHOR_TOP = 0.15

# (dx, dy, confidence fraction) relative to the anchor at (width / 2, 0.15 * height).
SKELETON_OFFSETS = {
    K.NOSE: (0, 20, 0.9),
    K.LEFT_EYE: (-15, 10, 0.8),
    K.RIGHT_EYE: (15, 10, 0.8),
    K.LEFT_EAR: (-25, 15, 0.7),
    K.RIGHT_EAR: (25, 15, 0.7),
    K.LEFT_SHOULDER: (-60, 80, 0.9),
    K.RIGHT_SHOULDER: (60, 80, 0.9),
    K.LEFT_ELBOW: (-80, 140, 0.8),
    K.RIGHT_ELBOW: (80, 140, 0.8),
    K.LEFT_WRIST: (-90, 200, 0.7),
    K.RIGHT_WRIST: (90, 200, 0.7),
    K.LEFT_HIP: (-40, 240, 0.9),
    K.RIGHT_HIP: (40, 240, 0.9),
    K.LEFT_KNEE: (-45, 340, 0.8),
    K.RIGHT_KNEE: (45, 340, 0.8),
    K.LEFT_ANKLE: (-50, 440, 0.7),
    K.RIGHT_ANKLE: (50, 440, 0.7),
}

def synthesize_skeleton(width: int, height: int, confidence: float) -> Skeleton:
    """Places every joint at a fixed offset from a single anchor; all joints scale from one confidence."""
    center_x = width / 2
    top_y = height * ANCHOR_TOP
    keypoints = {
        name: Keypoint(x=center_x + dx, y=top_y + dy, confidence=confidence * fraction)
        for name, (dx, dy, fraction) in SKELETON_OFFSETS.items()
    }
    return Skeleton(keypoints=keypoints, confidence=confidence)

class BodyEstimator:
    """Decides body presence from vertical-edge density in the centre band of the frame."""

    def __init__(self, config: dict):
        self.block_size = config.get('block_size', 30)

    def count_candidates(self, buffer: PixelBuffer) -> int:
        block = self.block_size
        height, width = buffer.height, buffer.width
        if width < 2:
            return 0

        rgb = buffer.pixels[..., :3].astype(np.int16)
        # edges[y, x] compares pixel x with its right neighbour x + 1.
        edges = np.abs(rgb[:, 1:] - rgb[:, :-1]).sum(axis=-1) > VERTICAL_EDGE_THRESHOLD

        area = float(block * block)
        candidates = 0
        for y in range(int(height * SCAN_TOP), height - block, block):
            for x in range(int(width * SCAN_LEFT), width, block):
                if x >= width * SCAN_RIGHT or x + block > width:
                    break
                # The last column of a block has no in-block right neighbour.
                edge_ratio = edges[y:y + block, x:x + block - 1].sum() / area
                if edge_ratio > EDGE_RATIO_MIN:
                    candidates += 1
        return candidates

    def estimate(self, buffer: PixelBuffer) -> Optional[Skeleton]:
        candidates = self.count_candidates(buffer)
        if candidates <= MIN_CANDIDATES:
            return None

        confidence = min(MAX_CONFIDENCE, candidates / 10)
        logger.debug("Body present: %d candidate blocks, confidence %.2f", candidates, confidence)
        return synthesize_skeleton(buffer.width, buffer.height, confidence)
