"""Tests for PixelBuffer."""

import numpy as np
import pytest
from PIL import Image

from lut_filter.processing.buffer import PixelBuffer, to_storage
from lut_filter.utils.errors import ErrorCategory, ProcessingError


class TestPixelBuffer:

    def test_dimensions(self, sample_image):
        assert sample_image.width == 60
        assert sample_image.height == 40
        assert sample_image.pixel_count == 2400
        assert not sample_image.is_float

    def test_rgb_array_gets_opaque_alpha(self, quadrant_image):
        assert quadrant_image.pixels.shape == (100, 100, 4)
        assert np.all(quadrant_image.pixels[..., 3] == 255)
        assert tuple(quadrant_image.pixels[0, 0]) == (255, 0, 0, 255)

    def test_float_rgb_gets_alpha_of_one(self):
        buf = PixelBuffer.from_array(np.zeros((2, 2, 3), dtype=np.float32))
        assert buf.is_float
        assert np.all(buf.pixels[..., 3] == 1.0)

    @pytest.mark.parametrize("shape", [(4, 4), (4, 4, 3), (4, 4, 5)])
    def test_invalid_shape_raises(self, shape):
        with pytest.raises(ProcessingError) as exc_info:
            PixelBuffer(np.zeros(shape, dtype=np.uint8))
        assert exc_info.value.category == ErrorCategory.USER_INPUT

    def test_float64_is_stored_as_float32(self):
        buf = PixelBuffer(np.full((2, 2, 4), 0.25))
        assert buf.pixels.dtype == np.float32

    def test_as_float_normalizes(self, make_uniform):
        buf = make_uniform(2, 2, (255, 0, 51, 255))
        values = buf.as_float()
        assert values.dtype == np.float32
        assert np.allclose(values[0, 0], [1.0, 0.0, 0.2, 1.0])

    def test_as_float_returns_a_copy(self):
        buf = PixelBuffer(np.full((2, 2, 4), 0.5, dtype=np.float32))
        values = buf.as_float()
        values[:] = 0.0
        assert np.all(buf.pixels == 0.5)

    def test_image_round_trip(self, sample_image):
        image = sample_image.to_image()
        assert image.mode == "RGBA"
        assert image.size == (60, 40)
        assert np.array_equal(PixelBuffer.from_image(image).pixels, sample_image.pixels)

    def test_from_rgb_image(self):
        image = Image.new("RGB", (3, 2), (10, 20, 30))
        buf = PixelBuffer.from_image(image)
        assert buf.pixels.shape == (2, 3, 4)
        assert tuple(buf.pixels[1, 2]) == (10, 20, 30, 255)

    def test_to_uint8_rounds(self):
        buf = PixelBuffer(np.full((1, 1, 4), 0.5, dtype=np.float32))
        assert tuple(buf.to_uint8().pixels[0, 0]) == (128, 128, 128, 128)

    def test_copy_is_independent(self, sample_image):
        clone = sample_image.copy()
        clone.pixels[0, 0] = 0
        assert clone.pixels is not sample_image.pixels


class TestToStorage:

    def test_clips_uint8(self):
        values = np.array([[[-0.2, 0.5, 1.4, 1.0]]], dtype=np.float32)
        assert tuple(to_storage(values, np.uint8)[0, 0]) == (0, 128, 255, 255)

    def test_clips_float(self):
        values = np.array([[[-0.2, 0.5, 1.4, 1.0]]], dtype=np.float32)
        stored = to_storage(values, np.float32)
        assert stored.dtype == np.float32
        assert np.allclose(stored[0, 0], [0.0, 0.5, 1.0, 1.0])
