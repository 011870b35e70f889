# virtual_tryon/tryon_engine/visualization/capture.py
import os
import re
import cv2
import logging
import numpy as np
from typing import Optional
from ..common.models import Outfit, Skeleton
from .garment_renderer import GarmentRenderer

logger = logging.getLogger(__name__)

CAPTURE_MIN_CONFIDENCE = 0.6

def capture_photo(frame: np.ndarray, outfit: Optional[Outfit], skeleton: Optional[Skeleton],
                  renderer: Optional[GarmentRenderer] = None) -> np.ndarray:
    """Composes a still image of the frame with the outfit overlay. The input frame is not modified."""
    image = frame.copy()
    if outfit is not None and skeleton is not None and skeleton.confidence > CAPTURE_MIN_CONFIDENCE:
        (renderer or GarmentRenderer()).draw(image, outfit.items, skeleton)
    return image

def capture_filename(outfit: Optional[Outfit]) -> str:
    name = outfit.name if outfit is not None else "photo"
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-") or "photo"
    return f"virtual-tryon-{slug}.png"

def save_capture(image: np.ndarray, directory: str, outfit: Optional[Outfit]) -> str:
    os.makedirs(directory, exist_ok=True)
    path = os.path.join(directory, capture_filename(outfit))
    if not cv2.imwrite(path, image):
        raise IOError(f"Failed to write capture to {path}")
    logger.info("Photo captured: %s", path)
    return path
