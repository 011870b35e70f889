# virtual_tryon/tryon_engine/common/models.py
import numpy as np
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Dict, List, Optional, Tuple
from .enums import (
    DetectionQuality,
    GarmentType,
    KeypointName,
    NotificationLevel,
    SessionState,
)

def clamp_unit(value: float) -> float:
    return min(1.0, max(0.0, float(value)))

class FrameMetadata(BaseModel):
    """Metadata associated with a single camera frame."""
    frame_id: int
    timestamp: float
    source_resolution: Tuple[int, int]

class PixelBuffer(BaseModel):
    """Read-only RGB snapshot of one sampled frame, valid for a single detection tick."""
    pixels: np.ndarray
    metadata: FrameMetadata

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    @field_validator("pixels")
    @classmethod
    def _check_pixels(cls, value: np.ndarray) -> np.ndarray:
        if value.ndim != 3 or value.shape[2] < 3:
            raise ValueError(f"expected an HxWx3 (or HxWx4) array, got shape {value.shape}")
        # Read-only view; the caller keeps a writable array.
        value = value.view()
        value.flags.writeable = False
        return value

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

class ScoredModel(BaseModel):
    """Base for detections carrying a confidence, always clamped to [0, 1]."""
    confidence: float

    model_config = ConfigDict(frozen=True)

    @field_validator("confidence")
    @classmethod
    def _clamp_confidence(cls, value: float) -> float:
        return clamp_unit(value)

class FaceRegion(ScoredModel):
    x: float
    y: float
    width: float
    height: float

class Keypoint(ScoredModel):
    x: float
    y: float

class Skeleton(ScoredModel):
    """Full set of synthesized keypoints for one detection tick."""
    keypoints: Dict[KeypointName, Keypoint]

    def __getitem__(self, name: KeypointName) -> Keypoint:
        return self.keypoints[name]

class DetectionState(BaseModel):
    """Encapsulates the complete result of one detection tick, replaced as a whole."""
    timestamp: float = 0.0
    frame_id: int = 0
    processing_time_ms: float = 0.0
    status: SessionState = SessionState.IDLE
    face: Optional[FaceRegion] = None
    body: Optional[Skeleton] = None
    quality: DetectionQuality = DetectionQuality.POOR

    model_config = ConfigDict(frozen=True)

    @property
    def body_confidence(self) -> float:
        return self.body.confidence if self.body is not None else 0.0

class Garment(BaseModel):
    """A single outfit item as supplied by the catalog."""
    id: str = ""
    name: str
    type: GarmentType
    color: str
    price: float = 0.0
    platform: str = ""
    image_url: str = ""
    buy_url: str = ""
    brand: str = ""

class Outfit(BaseModel):
    id: str
    name: str
    occasion: str = ""
    mood: str = ""
    items: List[Garment] = Field(default_factory=list)
    total_price: float = 0.0
    created_at: Optional[datetime] = None
    scheduled_date: Optional[datetime] = None
    image_url: str = ""

class Notification(BaseModel):
    """A user-facing message, shown by the UI as a toast."""
    title: str
    description: str
    level: NotificationLevel = NotificationLevel.INFO
