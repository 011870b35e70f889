# virtual_tryon/tryon_engine/processing/tryon_session.py
import time
import logging
import numpy as np
from collections import deque
from typing import Callable, List, Optional
from ..camera.frame_sampler import FrameSampler
from ..common.enums import DetectionQuality, FacingMode, NotificationLevel, SessionState
from ..common.errors import CameraAccessError
from ..common.models import DetectionState, Notification, Outfit
from ..visualization.capture import capture_photo
from .body_estimator import BodyEstimator
from .face_estimator import FaceEstimator
from .quality import classify_quality

logger = logging.getLogger(__name__)

APPLY_MIN_BODY_CONFIDENCE = 0.5
CAMERA_ERROR_MESSAGE = "Camera access denied or not available"

class TryOnSession:
    """Drives the camera lifecycle and the fixed-interval detection tick.

    The session is cooperative: the application calls `poll()` once per display
    frame and reads `detection`, which is replaced as a whole at the end of each
    tick. Camera devices come from `camera_factory(facing_mode)` and must expose
    `start()`, `release()` and `get_frame()`.
    """

    def __init__(
        self,
        config: dict,
        camera_factory: Callable,
        face_estimator: FaceEstimator,
        body_estimator: BodyEstimator,
        sampler: Optional[FrameSampler] = None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.config = config
        self.tick_interval = config.get('tick_interval_ms', 100) / 1000.0
        self.facing_mode = FacingMode(config.get('facing_mode', FacingMode.USER.value))
        self.face_estimator = face_estimator
        self.body_estimator = body_estimator
        self._camera_factory = camera_factory
        self._sampler = sampler or FrameSampler()
        self._clock = clock

        self.state = SessionState.IDLE
        self.selected_outfit: Optional[Outfit] = None
        self.error: Optional[str] = None
        self._camera = None
        self._next_tick: Optional[float] = None
        self._render_active = False
        self._detection = DetectionState()
        self._notifications = deque(maxlen=config.get('notification_history', 20))

    # --- Lifecycle ---

    def start(self) -> bool:
        """Acquires the camera. Ignored unless the session is idle."""
        if self.state is not SessionState.IDLE:
            logger.warning("start() ignored while session is %s", self.state.value)
            return False

        self.state = SessionState.STARTING
        self.error = None
        camera = None
        try:
            camera = self._camera_factory(self.facing_mode)
            camera.start()
        except CameraAccessError as e:
            logger.error("Camera acquisition failed: %s", e)
            if camera is not None:
                camera.release()
            self.state = SessionState.IDLE
            self.error = CAMERA_ERROR_MESSAGE
            self.notify(
                "Camera Access Denied",
                "Please allow camera access to use virtual try-on feature",
                NotificationLevel.ERROR,
            )
            return False
        except Exception:
            if camera is not None:
                camera.release()
            self.state = SessionState.IDLE
            raise

        self._camera = camera
        self._render_active = True
        self.notify("Camera Started", "Advanced face and body detection is now active")
        return True

    def stop(self):
        """Cancels the tick, halts the render loop and releases the camera, in that order."""
        if self.state is SessionState.IDLE:
            return

        self._next_tick = None
        self._render_active = False
        self._release_camera()

        self.state = SessionState.STOPPED
        self._detection = DetectionState()
        self.error = None
        self.state = SessionState.IDLE
        self.notify("Camera Stopped", "Virtual try-on session ended")

    def switch_camera(self) -> bool:
        """Restarts the session on the opposite camera; only flips the mode while idle."""
        self.facing_mode = self.facing_mode.opposite()
        logger.info("Switching camera to %s", self.facing_mode.value)
        if self.state is SessionState.IDLE:
            return True
        self.stop()
        return self.start()

    def close(self):
        self.stop()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _release_camera(self):
        camera, self._camera = self._camera, None
        if camera is not None:
            camera.release()

    # --- Detection loop ---

    def poll(self, now: Optional[float] = None) -> Optional[DetectionState]:
        """Advances the session; returns the new detection state when a tick ran."""
        now = self._clock() if now is None else now

        if self.state is SessionState.STARTING:
            frame, metadata = self._camera.get_frame()
            if frame is None:
                return None
            self._on_ready(metadata.source_resolution, now)

        if self._next_tick is not None and now >= self._next_tick:
            self._next_tick = now + self.tick_interval
            return self.tick()
        return None

    def _on_ready(self, resolution, now: float):
        logger.info("Video ready at %dx%d, detection every %.0f ms",
                    resolution[0], resolution[1], self.tick_interval * 1000)
        self.state = SessionState.STREAMING
        self._next_tick = now
        self.notify("Detection Started", "AI is analyzing your pose and face position")

    def tick(self) -> Optional[DetectionState]:
        """Runs one sampling and estimation pass and replaces the detection state."""
        if self.state not in (SessionState.STREAMING, SessionState.DETECTING):
            return None

        start_time = time.perf_counter()
        buffer = self._sampler.sample(self._camera)
        if buffer is None:
            return None

        face = self.face_estimator.estimate(buffer)
        body = self.body_estimator.estimate(buffer)
        quality = classify_quality(
            face.confidence if face is not None else None,
            body.confidence if body is not None else None,
        )
        processing_time_ms = (time.perf_counter() - start_time) * 1000

        self.state = SessionState.DETECTING
        self._detection = DetectionState(
            timestamp=buffer.metadata.timestamp,
            frame_id=buffer.metadata.frame_id,
            processing_time_ms=processing_time_ms,
            status=self.state,
            face=face,
            body=body,
            quality=quality,
        )
        logger.debug("Tick %d: face=%s body=%s quality=%s", buffer.metadata.frame_id,
                     face is not None, body is not None, quality.value)
        return self._detection

    # --- Read side ---

    @property
    def detection(self) -> DetectionState:
        return self._detection

    @property
    def is_streaming(self) -> bool:
        """The render loop keeps drawing only while this is true."""
        return self._render_active

    @property
    def camera(self):
        return self._camera

    def current_frame(self) -> Optional[np.ndarray]:
        if self._camera is None:
            return None
        frame, _ = self._camera.get_frame()
        return frame

    # --- Outfit and capture ---

    def apply_outfit(self, outfit: Outfit) -> bool:
        """Selects an outfit when the body is confidently detected; otherwise warns and changes nothing."""
        body = self._detection.body
        if body is None or body.confidence <= APPLY_MIN_BODY_CONFIDENCE:
            logger.warning("Outfit %s rejected: body confidence %.2f", outfit.id, self._detection.body_confidence)
            self.notify(
                "Body Not Detected",
                "Please position yourself properly in front of the camera for better body detection",
                NotificationLevel.WARNING,
            )
            return False

        self.selected_outfit = outfit
        self.notify("Outfit Applied", f"Now wearing: {outfit.name}")
        return True

    def clear_outfit(self):
        self.selected_outfit = None

    def can_capture(self) -> bool:
        return (
            self.is_streaming
            and self.selected_outfit is not None
            and self._detection.quality is not DetectionQuality.POOR
        )

    def capture(self) -> Optional[np.ndarray]:
        """Composes the current frame with the overlay; None when capture is not available."""
        if not self.can_capture():
            return None
        frame = self.current_frame()
        if frame is None:
            return None
        image = capture_photo(frame, self.selected_outfit, self._detection.body)
        self.notify("Photo Captured", "Your virtual try-on photo has been saved")
        return image

    # --- Notifications ---

    def notify(self, title: str, description: str, level: NotificationLevel = NotificationLevel.INFO):
        self._notifications.append(Notification(title=title, description=description, level=level))

    @property
    def latest_notification(self) -> Optional[Notification]:
        return self._notifications[-1] if self._notifications else None

    def drain_notifications(self) -> List[Notification]:
        notifications = list(self._notifications)
        self._notifications.clear()
        return notifications
