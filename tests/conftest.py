import numpy as np
import pytest

from synthetic import CameraRegistry, paint_vertical_stripes


@pytest.fixture
def registry():
    return CameraRegistry()


@pytest.fixture
def body_frame():
    """A 200x200 BGR frame whose centre band is full of vertical edges."""
    frame = np.zeros((200, 200, 3), dtype=np.uint8)
    paint_vertical_stripes(frame, 0, 200, 0, 200)
    return frame
