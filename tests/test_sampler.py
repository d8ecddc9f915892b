"""Tests for trilinear sampling and intensity blending."""

import numpy as np
import pytest

from lut_filter.processing.lut_cube import build_lut_cube
from lut_filter.processing.sampler import (
    blend_intensity,
    sample_color,
    transform_pixels,
    trilinear_sample,
)


class TestSampleColor:
    """Tests for the scalar reference sampler."""

    def test_pure_red_hits_red_grid_point(self, eight_color_reference):
        cube = build_lut_cube(eight_color_reference, 2)
        result = sample_color(cube, 255, 0, 0)
        assert np.array_equal(result, cube.grid_value(1, 0, 0))
        assert np.array_equal(result, [1.0, 0.0, 0.0, 1.0])

    def test_corners_of_eight_color_cube(self, eight_color_reference):
        cube = build_lut_cube(eight_color_reference, 2)
        for r in (0, 1):
            for g in (0, 1):
                for b in (0, 1):
                    result = sample_color(cube, r * 255, g * 255, b * 255)
                    assert np.array_equal(result, cube.grid_value(r, g, b))

    def test_midpoint_averages_neighbours(self, eight_color_reference):
        cube = build_lut_cube(eight_color_reference, 2)
        # halfway between black and red along r
        result = sample_color(cube, 127.5, 0, 0)
        assert result[0] == pytest.approx(0.5)
        assert result[1] == pytest.approx(0.0)
        assert result[2] == pytest.approx(0.0)

    def test_identity_lut_reproduces_input(self, identity_cube):
        for rgb in [(12, 200, 99), (0, 0, 0), (255, 255, 255), (128, 64, 32)]:
            result = sample_color(identity_cube, *rgb)
            assert np.allclose(result[:3] * 255.0, rgb, atol=1e-3)

    def test_interpolation_order_r_then_g_then_b(self, warm_cube):
        """Matches a hand-written r -> g -> b trilinear interpolation."""
        r, g, b = 100.0, 180.0, 30.0
        n = warm_cube.dimension
        t = warm_cube.table.astype(np.float64)
        rf, gf, bf = r / 255 * (n - 1), g / 255 * (n - 1), b / 255 * (n - 1)
        r0, g0, b0 = int(rf), int(gf), int(bf)
        rd, gd, bd = rf - r0, gf - g0, bf - b0
        along_r = t[:, :, r0] * (1 - rd) + t[:, :, r0 + 1] * rd
        along_g = along_r[:, g0] * (1 - gd) + along_r[:, g0 + 1] * gd
        expected = along_g[b0] * (1 - bd) + along_g[b0 + 1] * bd
        assert np.allclose(sample_color(warm_cube, r, g, b), expected, atol=1e-6)


class TestTrilinearSample:
    """The vectorized kernel must agree with the scalar reference."""

    def test_matches_scalar_reference(self, warm_cube):
        rng = np.random.default_rng(3)
        rgb = rng.uniform(0, 255, (16, 3)).astype(np.float32)
        vectorized = trilinear_sample(warm_cube.table, rgb)
        for i, (r, g, b) in enumerate(rgb):
            assert np.allclose(vectorized[i], sample_color(warm_cube, r, g, b), atol=1e-5)

    def test_exact_at_grid_points(self, warm_cube):
        steps = np.array([0, 85, 170, 255], dtype=np.float32)
        b, g, r = np.meshgrid(steps, steps, steps, indexing="ij")
        rgb = np.stack([r, g, b], axis=-1)
        result = trilinear_sample(warm_cube.table, rgb)
        assert np.array_equal(result, warm_cube.table)

    def test_output_shape(self, warm_cube):
        rgb = np.zeros((7, 9, 3), dtype=np.float32)
        assert trilinear_sample(warm_cube.table, rgb).shape == (7, 9, 4)


class TestBlendIntensity:

    @pytest.fixture
    def colors(self):
        sampled = np.array([[0.2, 0.4, 0.6, 0.1]], dtype=np.float32)
        original = np.array([[0.8, 0.6, 0.4, 0.9]], dtype=np.float32)
        return sampled, original

    def test_zero_is_identity(self, colors):
        sampled, original = colors
        assert np.array_equal(blend_intensity(sampled, original, 0.0), original)

    def test_one_is_pure_lut_with_original_alpha(self, colors):
        sampled, original = colors
        result = blend_intensity(sampled, original, 1.0)
        assert np.array_equal(result[..., :3], sampled[..., :3])
        assert result[0, 3] == original[0, 3]

    def test_half_mixes_rgb(self, colors):
        sampled, original = colors
        result = blend_intensity(sampled, original, 0.5)
        assert np.allclose(result[0, :3], [0.5, 0.5, 0.5])
        assert result[0, 3] == pytest.approx(0.9)

    def test_out_of_range_intensity_is_clamped(self, colors):
        sampled, original = colors
        assert np.array_equal(blend_intensity(sampled, original, 1.7),
                              blend_intensity(sampled, original, 1.0))
        assert np.array_equal(blend_intensity(sampled, original, -2.0), original)

    def test_inputs_not_modified(self, colors):
        sampled, original = colors
        before = original.copy()
        blend_intensity(sampled, original, 0.3)
        assert np.array_equal(original, before)


class TestTransformPixels:

    def test_alpha_passes_through(self, warm_cube, sample_image):
        pixels = sample_image.as_float()
        result = transform_pixels(pixels, warm_cube.table, 1.0)
        assert np.array_equal(result[..., 3], pixels[..., 3])
