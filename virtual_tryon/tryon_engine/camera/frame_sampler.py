# virtual_tryon/tryon_engine/camera/frame_sampler.py
import cv2
from typing import Optional
from ..common.models import PixelBuffer

class FrameSampler:
    """Pulls the latest still frame from a camera into a read-only RGB PixelBuffer."""

    def sample(self, camera) -> Optional[PixelBuffer]:
        frame, metadata = camera.get_frame()
        if frame is None or frame.size == 0:
            return None

        frame_rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        return PixelBuffer(pixels=frame_rgb, metadata=metadata)
