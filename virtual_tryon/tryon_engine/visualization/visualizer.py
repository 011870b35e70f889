# virtual_tryon/tryon_engine/visualization/visualizer.py
import cv2
import numpy as np
from typing import Optional
from ..common.enums import DetectionQuality, KeypointName as K
from ..common.models import DetectionState, FaceRegion, Notification, Outfit, Skeleton
from .garment_renderer import GarmentRenderer, draw_centered_text

GREEN = (0, 255, 0)
YELLOW = (0, 255, 255)
ORANGE = (0, 102, 255)
HUD_TEXT = (240, 240, 240)
ERROR_BANNER = (68, 68, 239)

DETECTION_MIN_CONFIDENCE = 0.5
OVERLAY_MIN_CONFIDENCE = 0.6

SKELETON_CONNECTIONS = (
    (K.LEFT_SHOULDER, K.RIGHT_SHOULDER),
    (K.LEFT_SHOULDER, K.LEFT_ELBOW),
    (K.LEFT_ELBOW, K.LEFT_WRIST),
    (K.RIGHT_SHOULDER, K.RIGHT_ELBOW),
    (K.RIGHT_ELBOW, K.RIGHT_WRIST),
    (K.LEFT_SHOULDER, K.LEFT_HIP),
    (K.RIGHT_SHOULDER, K.RIGHT_HIP),
    (K.LEFT_HIP, K.RIGHT_HIP),
    (K.LEFT_HIP, K.LEFT_KNEE),
    (K.LEFT_KNEE, K.LEFT_ANKLE),
    (K.RIGHT_HIP, K.RIGHT_KNEE),
    (K.RIGHT_KNEE, K.RIGHT_ANKLE),
)

QUALITY_TEXT = {
    DetectionQuality.EXCELLENT: ("Excellent Detection", GREEN),
    DetectionQuality.GOOD: ("Good Detection", YELLOW),
    DetectionQuality.POOR: ("Poor Detection", (68, 68, 220)),
}

def confidence_color(confidence: float):
    if confidence > 0.8:
        return GREEN
    if confidence > 0.6:
        return YELLOW
    return ORANGE

def _dashed_rect(frame: np.ndarray, top_left, bottom_right, color, thickness: int = 3, dash: int = 5):
    (x1, y1), (x2, y2) = top_left, bottom_right
    edges = (((x1, y1), (x2, y1)), ((x2, y1), (x2, y2)), ((x2, y2), (x1, y2)), ((x1, y2), (x1, y1)))
    for (sx, sy), (ex, ey) in edges:
        length = int(max(abs(ex - sx), abs(ey - sy)))
        for start in range(0, length, dash * 2):
            end = min(start + dash, length)
            p1 = (int(sx + (ex - sx) * start / length), int(sy + (ey - sy) * start / length))
            p2 = (int(sx + (ex - sx) * end / length), int(sy + (ey - sy) * end / length))
            cv2.line(frame, p1, p2, color, thickness, cv2.LINE_AA)

class Visualizer:
    """Draws detections, the applied outfit and the HUD over the live video frame."""

    def __init__(self, config: dict, garment_renderer: Optional[GarmentRenderer] = None):
        self.config = config
        self.garment_renderer = garment_renderer or GarmentRenderer()
        self.font = cv2.FONT_HERSHEY_SIMPLEX

    def render(
        self,
        frame: np.ndarray,
        state: DetectionState,
        current_fps: float,
        outfit: Optional[Outfit] = None,
        error: Optional[str] = None,
        notification: Optional[Notification] = None,
    ) -> np.ndarray:
        """Renders detections, garments and HUD onto a copy of the frame."""
        output_frame = frame.copy()

        if state.face is not None and state.face.confidence > DETECTION_MIN_CONFIDENCE and self.config.get('draw_face', True):
            self._draw_face(output_frame, state.face)

        if state.body is not None and state.body.confidence > DETECTION_MIN_CONFIDENCE and self.config.get('draw_skeleton', True):
            self._draw_skeleton(output_frame, state.body)

        if outfit is not None and state.body is not None and state.body.confidence > OVERLAY_MIN_CONFIDENCE:
            self.garment_renderer.draw(output_frame, outfit.items, state.body)

        if self.config.get('draw_hud', True):
            self._draw_hud(output_frame, state, current_fps, outfit, notification)

        if error:
            self._draw_error(output_frame, error)

        return output_frame

    def _draw_face(self, frame: np.ndarray, face: FaceRegion):
        color = confidence_color(face.confidence)
        top_left = (int(face.x), int(face.y))
        bottom_right = (int(face.x + face.width), int(face.y + face.height))
        _dashed_rect(frame, top_left, bottom_right, color)
        draw_centered_text(
            frame,
            f"Face: {round(face.confidence * 100)}%",
            (int(face.x + face.width / 2), int(face.y - 10)),
            color,
            scale=0.6,
            thickness=2,
        )

    def _draw_skeleton(self, frame: np.ndarray, body: Skeleton):
        color = confidence_color(body.confidence)
        for start, end in SKELETON_CONNECTIONS:
            p1, p2 = body[start], body[end]
            if p1.confidence > DETECTION_MIN_CONFIDENCE and p2.confidence > DETECTION_MIN_CONFIDENCE:
                cv2.line(frame, (int(p1.x), int(p1.y)), (int(p2.x), int(p2.y)), color, 3, cv2.LINE_AA)

        for point in body.keypoints.values():
            if point.confidence > DETECTION_MIN_CONFIDENCE:
                cv2.circle(frame, (int(point.x), int(point.y)), 4, color, -1, cv2.LINE_AA)

        nose = body[K.NOSE]
        draw_centered_text(
            frame,
            f"Body: {round(body.confidence * 100)}%",
            (int(nose.x), int(nose.y - 30)),
            color,
            scale=0.6,
            thickness=2,
        )

    def _draw_hud(self, frame: np.ndarray, state: DetectionState, fps: float,
                  outfit: Optional[Outfit], notification: Optional[Notification]):
        """Draws the Heads-Up Display with detection status."""
        hud_elements = [
            (f"FPS: {fps:.1f}", HUD_TEXT),
            (f"Processing: {state.processing_time_ms:.1f} ms", HUD_TEXT),
            (f"State: {state.status.value}", HUD_TEXT),
            QUALITY_TEXT[state.quality],
        ]
        if state.face is not None:
            hud_elements.append((f"Face Detection: {round(state.face.confidence * 100)}%", HUD_TEXT))
        if state.body is not None:
            hud_elements.append((f"Body Detection: {round(state.body.confidence * 100)}%", HUD_TEXT))
        if outfit is not None:
            hud_elements.append((f"Outfit Applied: {outfit.name}", (255, 128, 0)))

        for i, (text, color) in enumerate(hud_elements):
            cv2.putText(frame, text, (10, 30 + i * 30), self.font, 0.7, color, 2, cv2.LINE_AA)

        if notification is not None:
            text = f"{notification.title}: {notification.description}"
            cv2.putText(frame, text, (10, frame.shape[0] - 20), self.font, 0.6, HUD_TEXT, 1, cv2.LINE_AA)

    def _draw_error(self, frame: np.ndarray, message: str):
        cv2.rectangle(frame, (10, 10), (frame.shape[1] - 10, 50), ERROR_BANNER, -1)
        cv2.putText(frame, message, (20, 38), self.font, 0.7, (255, 255, 255), 2, cv2.LINE_AA)
