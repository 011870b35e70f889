# virtual_tryon/main.py
import os
import cv2
import time
import yaml
import logging
import numpy as np
from collections import deque

from tryon_engine.camera.camera_manager import CameraManager
from tryon_engine.catalog.outfit_catalog import OutfitCatalog
from tryon_engine.common.enums import LogLevel, NotificationLevel
from tryon_engine.processing.body_estimator import BodyEstimator
from tryon_engine.processing.face_estimator import FaceEstimator
from tryon_engine.processing.tryon_session import TryOnSession
from tryon_engine.visualization.capture import save_capture
from tryon_engine.visualization.visualizer import Visualizer

logger = logging.getLogger("virtual_tryon")

WINDOW_NAME = 'AI Virtual Mirror'
HELP = "[space] start/stop  [s] switch camera  [1-9] apply outfit  [0] clear  [c] capture  [q] quit"

def load_config(script_dir: str) -> dict:
    config_path = os.path.join(script_dir, 'config.yaml')
    with open(config_path, 'r') as f:
        return yaml.safe_load(f)

def handle_key(key: int, session: TryOnSession, catalog: OutfitCatalog, capture_dir: str) -> bool:
    """Applies one keyboard command; returns False when the user asked to quit."""
    if key == ord('q'):
        logger.info("Shutdown signal received.")
        return False
    if key == ord(' '):
        if session.is_streaming:
            session.stop()
        else:
            session.start()
    elif key == ord('s'):
        session.switch_camera()
    elif key == ord('0'):
        session.clear_outfit()
    elif ord('1') <= key <= ord('9'):
        outfits = catalog.list()
        index = key - ord('1')
        if index < len(outfits):
            session.apply_outfit(outfits[index])
    elif key == ord('c'):
        image = session.capture()
        if image is not None:
            try:
                save_capture(image, capture_dir, session.selected_outfit)
            except OSError as e:
                logger.error("Capture could not be saved. %s", e)
                session.notify("Capture Failed", str(e), NotificationLevel.ERROR)
    return True

def main():
    """Runs the virtual try-on mirror until the user quits."""
    script_dir = os.path.dirname(os.path.abspath(__file__))
    try:
        config = load_config(script_dir)
    except FileNotFoundError:
        print(f"ERROR: Configuration file 'config.yaml' not found in {script_dir}.")
        return
    except yaml.YAMLError as e:
        print(f"ERROR: Failed to parse configuration file. {e}")
        return

    level = LogLevel(config.get('logging', {}).get('level', LogLevel.INFO.value))
    logging.basicConfig(level=level.value, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    try:
        catalog = OutfitCatalog.from_yaml(os.path.join(script_dir, config['catalog']['path']))
        capture_dir = os.path.join(script_dir, config['capture']['output_dir'])
        visualizer = Visualizer(config['visualization'])
        camera_config = config['camera']
        width, height = camera_config['resolution']
        session = TryOnSession(
            config['session'],
            camera_factory=lambda facing_mode: CameraManager(camera_config, facing_mode),
            face_estimator=FaceEstimator(config['face']),
            body_estimator=BodyEstimator(config['body']),
        )
    except KeyError as e:
        logger.error("Missing configuration key: %s", e)
        return
    except (IOError, yaml.YAMLError) as e:
        logger.error("Failed to initialize. %s", e)
        return

    blank = np.zeros((height, width, 3), dtype=np.uint8)
    fps_history = deque(maxlen=100)
    try:
        with session:
            logger.info(HELP)
            session.start()
            last_frame_time = time.perf_counter()

            while True:
                session.poll()
                frame = session.current_frame() if session.is_streaming else None
                if frame is None:
                    frame = blank

                now = time.perf_counter()
                latency = now - last_frame_time
                last_frame_time = now
                fps_history.append(1.0 / latency if latency > 0 else 0)
                avg_fps = np.mean(fps_history)

                output_frame = visualizer.render(
                    frame,
                    session.detection,
                    avg_fps,
                    outfit=session.selected_outfit,
                    error=session.error,
                    notification=session.latest_notification,
                )
                cv2.imshow(WINDOW_NAME, output_frame)

                key = cv2.waitKey(1) & 0xFF
                if key != 0xFF and not handle_key(key, session, catalog, capture_dir):
                    break
    finally:
        cv2.destroyAllWindows()
        logger.info("Application terminated.")

if __name__ == "__main__":
    main()
