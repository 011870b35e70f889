# virtual_tryon/tryon_engine/processing/quality.py
from typing import Optional
from ..common.enums import DetectionQuality

EXCELLENT_AVERAGE = 0.8
GOOD_AVERAGE = 0.6

def classify_quality(face_confidence: Optional[float], body_confidence: Optional[float]) -> DetectionQuality:
    """Combines face and body confidences into a quality label. Thresholds are strict."""
    if face_confidence is not None and body_confidence is not None:
        average = (face_confidence + body_confidence) / 2
        if average > EXCELLENT_AVERAGE:
            return DetectionQuality.EXCELLENT
        if average > GOOD_AVERAGE:
            return DetectionQuality.GOOD
        return DetectionQuality.POOR
    if face_confidence is not None or body_confidence is not None:
        return DetectionQuality.GOOD
    return DetectionQuality.POOR
