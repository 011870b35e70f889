# virtual_tryon/tryon_engine/visualization/garment_renderer.py
import cv2
import logging
import webcolors
import numpy as np
from pydantic import BaseModel
from typing import List, Optional, Sequence, Tuple
from ..common.enums import GarmentType, KeypointName as K
from ..common.models import Garment, Skeleton

logger = logging.getLogger(__name__)

COLOR_PALETTE = {
    "navy blue": "#000080",
    "white": "#ffffff",
    "black": "#000000",
    "blue": "#0066cc",
}
FALLBACK_COLOR = "#808080"
STROKE_COLOR = "#333333"
GARMENT_ALPHA = 0.6
TORSO_CONFIDENCE = 0.6
ANKLE_CONFIDENCE = 0.5
SHOE_SIZE = (50, 25)

Rect = Tuple[int, int, int, int]

class GarmentPlacement(BaseModel):
    """Where and how one garment is drawn for the current skeleton."""
    garment: Garment
    rects: List[Rect]
    corner_radius: int = 0
    color: str
    label_anchor: Tuple[int, int]
    label_scale: float = 0.5

def resolve_color(color: str) -> str:
    """Maps a palette colour name to hex; anything else passes through unchanged."""
    return COLOR_PALETTE.get(color.strip().lower(), color)

def color_to_bgr(color: str) -> Tuple[int, int, int]:
    """Converts a hex value or a CSS colour name ('Red', 'Light Blue') to an OpenCV BGR triple."""
    try:
        if color.startswith('#'):
            r, g, b = webcolors.hex_to_rgb(color)
        else:
            r, g, b = webcolors.name_to_rgb(''.join(color.split()).lower())
    except ValueError:
        logger.debug("Colour %r is not drawable, using %s", color, FALLBACK_COLOR)
        return color_to_bgr(FALLBACK_COLOR)
    return b, g, r

def label_color(color: str) -> str:
    return "#000000" if color == "#ffffff" else "#ffffff"

def _place_top(garment: Garment, skeleton: Skeleton, color: str) -> Optional[GarmentPlacement]:
    left_shoulder, right_shoulder = skeleton[K.LEFT_SHOULDER], skeleton[K.RIGHT_SHOULDER]
    left_hip = skeleton[K.LEFT_HIP]
    if left_shoulder.confidence <= TORSO_CONFIDENCE or right_shoulder.confidence <= TORSO_CONFIDENCE:
        return None

    width = abs(right_shoulder.x - left_shoulder.x) + 40
    height = abs(left_hip.y - left_shoulder.y) + 20
    x = left_shoulder.x - 20
    y = left_shoulder.y - 10
    return GarmentPlacement(
        garment=garment,
        rects=[(round(x), round(y), round(width), round(height))],
        corner_radius=10,
        color=color,
        label_anchor=(round(x + width / 2), round(y + height / 2)),
    )

def _place_bottom(garment: Garment, skeleton: Skeleton, color: str) -> Optional[GarmentPlacement]:
    left_hip, right_hip = skeleton[K.LEFT_HIP], skeleton[K.RIGHT_HIP]
    left_ankle = skeleton[K.LEFT_ANKLE]
    if left_hip.confidence <= TORSO_CONFIDENCE or right_hip.confidence <= TORSO_CONFIDENCE:
        return None

    width = abs(right_hip.x - left_hip.x) + 20
    height = abs(left_ankle.y - left_hip.y) - 20
    x = left_hip.x - 10
    y = left_hip.y
    return GarmentPlacement(
        garment=garment,
        rects=[(round(x), round(y), round(width), round(height))],
        corner_radius=5,
        color=color,
        label_anchor=(round(x + width / 2), round(y + height / 2)),
    )

def _place_shoes(garment: Garment, skeleton: Skeleton, color: str) -> Optional[GarmentPlacement]:
    left_ankle, right_ankle = skeleton[K.LEFT_ANKLE], skeleton[K.RIGHT_ANKLE]
    shoe_w, shoe_h = SHOE_SIZE
    rects = [
        (round(ankle.x - shoe_w / 2), round(ankle.y), shoe_w, shoe_h)
        for ankle in (left_ankle, right_ankle)
        if ankle.confidence > ANKLE_CONFIDENCE
    ]
    if not rects:
        return None

    return GarmentPlacement(
        garment=garment,
        rects=rects,
        color=color,
        label_anchor=(round((left_ankle.x + right_ankle.x) / 2), round(max(left_ankle.y, right_ankle.y) + 40)),
        label_scale=0.45,
    )

PLACERS = {
    GarmentType.TOP: _place_top,
    GarmentType.BOTTOM: _place_bottom,
    GarmentType.SHOES: _place_shoes,
}

def plan_garments(garments: Sequence[Garment], skeleton: Skeleton) -> List[GarmentPlacement]:
    """Computes placements in outfit order, omitting garments whose anchor joints are below threshold."""
    placements = []
    for garment in garments:
        placer = PLACERS.get(garment.type)
        if placer is None:
            continue
        placement = placer(garment, skeleton, resolve_color(garment.color))
        if placement is not None:
            placements.append(placement)
    return placements

def _rounded_rect(surface: np.ndarray, rect: Rect, radius: int, color, thickness: int):
    x, y, w, h = rect
    radius = max(0, min(radius, abs(w) // 2, abs(h) // 2))
    if radius == 0:
        cv2.rectangle(surface, (x, y), (x + w, y + h), color, thickness, cv2.LINE_AA)
        return

    x2, y2 = x + w, y + h
    corners = (
        ((x + radius, y + radius), 180),
        ((x2 - radius, y + radius), 270),
        ((x2 - radius, y2 - radius), 0),
        ((x + radius, y2 - radius), 90),
    )
    if thickness < 0:
        cv2.rectangle(surface, (x + radius, y), (x2 - radius, y2), color, -1)
        cv2.rectangle(surface, (x, y + radius), (x2, y2 - radius), color, -1)
    else:
        cv2.line(surface, (x + radius, y), (x2 - radius, y), color, thickness, cv2.LINE_AA)
        cv2.line(surface, (x + radius, y2), (x2 - radius, y2), color, thickness, cv2.LINE_AA)
        cv2.line(surface, (x, y + radius), (x, y2 - radius), color, thickness, cv2.LINE_AA)
        cv2.line(surface, (x2, y + radius), (x2, y2 - radius), color, thickness, cv2.LINE_AA)
    for center, start in corners:
        cv2.ellipse(surface, center, (radius, radius), start, 0, 90, color, thickness, cv2.LINE_AA)

def draw_centered_text(surface: np.ndarray, text: str, anchor: Tuple[int, int], color, scale: float = 0.5, thickness: int = 1):
    font = cv2.FONT_HERSHEY_SIMPLEX
    (text_w, text_h), _ = cv2.getTextSize(text, font, scale, thickness)
    origin = (int(anchor[0] - text_w / 2), int(anchor[1] + text_h / 2))
    cv2.putText(surface, text, origin, font, scale, color, thickness, cv2.LINE_AA)

class GarmentRenderer:
    """Draws an outfit's garments onto a BGR surface, aligned to a skeleton."""

    def __init__(self, alpha: float = GARMENT_ALPHA):
        self.alpha = alpha

    def draw(self, surface: np.ndarray, garments: Sequence[Garment], skeleton: Skeleton) -> None:
        # Each garment is blended on its own so later items paint over earlier ones.
        for placement in plan_garments(garments, skeleton):
            layer = surface.copy()
            fill = color_to_bgr(placement.color)
            for rect in placement.rects:
                _rounded_rect(layer, rect, placement.corner_radius, fill, -1)
                _rounded_rect(layer, rect, placement.corner_radius, color_to_bgr(STROKE_COLOR), 2)
            draw_centered_text(
                layer,
                placement.garment.name,
                placement.label_anchor,
                color_to_bgr(label_color(placement.color)),
                scale=placement.label_scale,
            )
            cv2.addWeighted(layer, self.alpha, surface, 1 - self.alpha, 0, dst=surface)
