# virtual_tryon/tryon_engine/common/enums.py
from enum import Enum

class SessionState(str, Enum):
    """Defines the lifecycle state of the TryOnSession."""
    IDLE = "IDLE"
    STARTING = "STARTING"
    STREAMING = "STREAMING"
    DETECTING = "DETECTING"
    STOPPED = "STOPPED"

class DetectionQuality(str, Enum):
    POOR = "poor"
    GOOD = "good"
    EXCELLENT = "excellent"

class FacingMode(str, Enum):
    """Which physical camera to acquire."""
    USER = "user"
    ENVIRONMENT = "environment"

    def opposite(self) -> "FacingMode":
        return FacingMode.ENVIRONMENT if self is FacingMode.USER else FacingMode.USER

class GarmentType(str, Enum):
    TOP = "top"
    BOTTOM = "bottom"
    SHOES = "shoes"
    ACCESSORY = "accessory"

class KeypointName(str, Enum):
    """The 17 joints of a synthesized skeleton."""
    NOSE = "nose"
    LEFT_EYE = "left_eye"
    RIGHT_EYE = "right_eye"
    LEFT_EAR = "left_ear"
    RIGHT_EAR = "right_ear"
    LEFT_SHOULDER = "left_shoulder"
    RIGHT_SHOULDER = "right_shoulder"
    LEFT_ELBOW = "left_elbow"
    RIGHT_ELBOW = "right_elbow"
    LEFT_WRIST = "left_wrist"
    RIGHT_WRIST = "right_wrist"
    LEFT_HIP = "left_hip"
    RIGHT_HIP = "right_hip"
    LEFT_KNEE = "left_knee"
    RIGHT_KNEE = "right_knee"
    LEFT_ANKLE = "left_ankle"
    RIGHT_ANKLE = "right_ankle"

class NotificationLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

class LogLevel(str, Enum):
    """Defines logging levels accepted in the `logging` config section."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
