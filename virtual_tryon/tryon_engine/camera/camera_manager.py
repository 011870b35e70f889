# virtual_tryon/tryon_engine/camera/camera_manager.py
import cv2
import time
import logging
import threading
import numpy as np
from collections import deque
from typing import Tuple, Optional
from ..common.enums import FacingMode
from ..common.errors import CameraAccessError
from ..common.models import FrameMetadata

logger = logging.getLogger(__name__)

DEFAULT_SOURCES = {FacingMode.USER.value: 0, FacingMode.ENVIRONMENT.value: 1}

class CameraManager:
    """Owns one exclusive camera device and grabs frames in a separate thread.

    The device is only opened by `start()` and is released on every exit path
    through `release()`, which is safe to call more than once.
    """

    def __init__(self, config: dict, facing_mode: FacingMode = FacingMode.USER):
        self.config = config
        self.facing_mode = FacingMode(facing_mode)
        sources = config.get('sources', DEFAULT_SOURCES)
        self._source = sources[self.facing_mode.value]
        self._resolution = tuple(config.get('resolution', (1280, 720)))
        self._target_fps = config.get('target_fps', 30)
        self._buffer = deque(maxlen=config.get('buffer_size', 5))
        self._lock = threading.Lock()
        self._cap = None
        self._thread = None
        self._running = False
        self._frame_id = 0
        self._dropped_frames = 0

    def start(self):
        """Acquires the device and starts the grab thread. Raises CameraAccessError."""
        if self._running:
            return
        self._cap = cv2.VideoCapture(self._source)
        if not self._cap.isOpened():
            self._cap.release()
            self._cap = None
            logger.error("Cannot open camera source %s (%s)", self._source, self.facing_mode.value)
            raise CameraAccessError(self._source)

        self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, self._resolution[0])
        self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self._resolution[1])
        self._cap.set(cv2.CAP_PROP_FPS, self._target_fps)

        self._running = True
        self._thread = threading.Thread(target=self._update, daemon=True)
        self._thread.start()
        logger.info("Camera %s (%s) started.", self._source, self.facing_mode.value)

    def release(self):
        """Stops the grab thread and releases the device handle."""
        self._running = False
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logger.info("Camera %s stopped and resources released (%d dropped frames).",
                        self._source, self._dropped_frames)
        with self._lock:
            self._buffer.clear()

    def _update(self):
        """The core frame-grabbing loop running in a dedicated thread."""
        while self._running:
            grabbed = self._cap.grab()
            if not grabbed:
                self._dropped_frames += 1
                time.sleep(0.01)
                continue

            # The deque's maxlen drops the oldest frame once the buffer is full.
            ret, frame = self._cap.retrieve()
            if ret:
                timestamp = time.perf_counter()
                self._frame_id += 1
                with self._lock:
                    self._buffer.append((frame, self._frame_id, timestamp))
            else:
                self._dropped_frames += 1

    def get_frame(self) -> Tuple[Optional[np.ndarray], Optional[FrameMetadata]]:
        """Returns the latest BGR frame and its metadata from the buffer."""
        with self._lock:
            if not self._buffer:
                return None, None
            frame, frame_id, timestamp = self._buffer[-1]

        metadata = FrameMetadata(
            frame_id=frame_id,
            timestamp=timestamp,
            source_resolution=(frame.shape[1], frame.shape[0])
        )
        return frame.copy(), metadata

    def is_running(self) -> bool:
        return self._running

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
