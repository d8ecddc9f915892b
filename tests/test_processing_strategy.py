"""Tests for the CPU/GPU sampling strategies."""

import numpy as np
import pytest

from lut_filter.processing.processing_strategy import (
    CPUStrategy,
    GPUStrategy,
    ProcessingContext,
    SamplingStrategy,
)
from lut_filter.processing.sampler import transform_pixels
from lut_filter.utils.errors import GPUError
from lut_filter.utils.gpu import get_array_module, get_gpu_info, is_gpu_enabled, to_numpy


@pytest.fixture
def large_image():
    rng = np.random.default_rng(11)
    return rng.random((300, 50, 4)).astype(np.float32)


class TestCPUStrategy:

    def test_always_available(self):
        assert CPUStrategy().is_available()
        assert CPUStrategy().name == "CPU"

    def test_chunked_matches_single_pass(self, warm_cube, large_image):
        single = CPUStrategy(max_workers=1).transform(large_image, warm_cube, 0.75)
        chunked = CPUStrategy(max_workers=4, rows_per_chunk=7).transform(large_image, warm_cube, 0.75)
        assert np.array_equal(single, chunked)

    def test_matches_kernel(self, warm_cube, large_image):
        result = CPUStrategy(max_workers=3, rows_per_chunk=64).transform(large_image, warm_cube, 1.0)
        expected = transform_pixels(large_image, warm_cube.table, 1.0)
        assert np.array_equal(result, expected)


class FailingStrategy(SamplingStrategy):

    @property
    def name(self):
        return "GPU"

    def is_available(self):
        return True

    def transform(self, pixels, cube, intensity):
        raise RuntimeError("device lost")


class TestProcessingContext:

    def test_cpu_when_gpu_not_preferred(self):
        context = ProcessingContext(prefer_gpu=False)
        assert context.get_strategy().name == "CPU"

    def test_gpu_failure_falls_back_to_cpu(self, warm_cube, large_image):
        context = ProcessingContext(prefer_gpu=True)
        context._gpu_strategy = FailingStrategy()
        result, name = context.transform(large_image, warm_cube, 0.5)
        assert name == "CPU (fallback)"
        expected = CPUStrategy().transform(large_image, warm_cube, 0.5)
        assert np.array_equal(result, expected)

    def test_cpu_errors_propagate(self, large_image):
        context = ProcessingContext(prefer_gpu=False, cpu_strategy=CPUStrategy())
        with pytest.raises(AttributeError):
            context.transform(large_image, None, 1.0)


class TestGPUStrategy:

    def test_availability_matches_detection(self):
        assert GPUStrategy().is_available() == is_gpu_enabled()

    def test_gpu_info(self):
        info = get_gpu_info()
        assert "enabled" in info
        assert "backend" in info
        assert "device_name" in info
        assert "message" in info

    def test_array_module(self):
        xp = get_array_module()
        assert hasattr(xp, "asarray")
        assert hasattr(xp, "floor")

    def test_matches_cpu_within_one_step(self, warm_cube, large_image):
        gpu = GPUStrategy()
        if not gpu.is_available():
            pytest.skip("GPU not available")
        cpu_result = CPUStrategy().transform(large_image, warm_cube, 0.8)
        gpu_result = gpu.transform(large_image, warm_cube, 0.8)
        assert np.abs(cpu_result - gpu_result).max() * 255.0 <= 1.0

    def test_transform_without_gpu_raises(self, warm_cube, large_image):
        if is_gpu_enabled():
            pytest.skip("GPU available")
        with pytest.raises(GPUError) as exc_info:
            GPUStrategy().transform(large_image, warm_cube, 1.0)
        assert exc_info.value.fallback_available

    def test_to_numpy_passes_host_arrays_through(self):
        values = np.arange(6, dtype=np.float32)
        assert np.array_equal(to_numpy(values), values)
