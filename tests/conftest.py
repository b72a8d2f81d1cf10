import numpy as np
import pytest

from mandel import BACKGROUND, PixelBuffer


@pytest.fixture
def make_buffer():
    def factory(width, height):
        buffer = PixelBuffer.create(width, height)
        buffer.reset(BACKGROUND)
        return buffer

    return factory


def background_mask(buffer):
    """Boolean ``(height, width)`` array, true where a pixel still has the background color."""

    return np.all(buffer.pixels == np.array(BACKGROUND, dtype=np.uint8), axis=-1)
