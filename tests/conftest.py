import pytest
import numpy as np

from lut_filter.processing.buffer import PixelBuffer
from lut_filter.processing.lut_cube import build_lut_cube


def make_identity_reference(dimension):
    """Linear-layout reference whose grid point (r, g, b) stores (r, g, b) / (N - 1)."""
    steps = np.linspace(0.0, 1.0, dimension, dtype=np.float32)
    b, g, r = np.meshgrid(steps, steps, steps, indexing="ij")
    rgba = np.stack([r, g, b, np.ones_like(r)], axis=-1)
    return PixelBuffer(rgba.reshape(dimension, dimension * dimension, 4))


@pytest.fixture
def eight_color_reference():
    """2x2x2 LUT image: black, red, green, yellow, blue, magenta, cyan, white."""
    colors = np.array([
        [0, 0, 0, 255],
        [255, 0, 0, 255],
        [0, 255, 0, 255],
        [255, 255, 0, 255],
        [0, 0, 255, 255],
        [255, 0, 255, 255],
        [0, 255, 255, 255],
        [255, 255, 255, 255],
    ], dtype=np.uint8)
    return PixelBuffer(colors.reshape(2, 4, 4))


@pytest.fixture
def identity_cube():
    """A 5x5x5 LUT that maps every color to itself."""
    return build_lut_cube(make_identity_reference(5), 5)


@pytest.fixture
def warm_cube():
    """A 4x4x4 LUT that warms and lifts the image, so it visibly changes pixels."""
    steps = np.linspace(0.0, 1.0, 4, dtype=np.float32)
    b, g, r = np.meshgrid(steps, steps, steps, indexing="ij")
    rgba = np.stack([
        np.clip(r * 0.8 + 0.2, 0, 1),
        g * 0.9 + 0.05,
        b * 0.6,
        np.ones_like(r),
    ], axis=-1)
    return build_lut_cube(PixelBuffer(rgba.reshape(4, 16, 4)), 4)


@pytest.fixture
def sample_image():
    """A 40x60 RGBA uint8 image with random colors and a varying alpha channel."""
    rng = np.random.default_rng(7)
    pixels = rng.integers(0, 256, (40, 60, 4), dtype=np.uint8)
    return PixelBuffer(pixels)


@pytest.fixture
def quadrant_image():
    """A 100x100 RGB image with red, green, blue and yellow quadrants."""
    img = np.zeros((100, 100, 3), dtype=np.uint8)
    img[:50, :50] = [255, 0, 0]    # Red quadrant
    img[:50, 50:] = [0, 255, 0]    # Green quadrant
    img[50:, :50] = [0, 0, 255]    # Blue quadrant
    img[50:, 50:] = [255, 255, 0]  # Yellow quadrant
    return PixelBuffer.from_array(img)


def uniform_buffer(width, height, rgba):
    return PixelBuffer(np.full((height, width, 4), rgba, dtype=np.uint8))


@pytest.fixture
def make_uniform():
    """Factory for single-color uint8 buffers: make_uniform(width, height, rgba)."""
    return uniform_buffer
