"""
Processing strategies for LUT sampling.

This module provides an abstraction layer over the GPU and CPU sampling
paths. Both run the same kernel (``sampler.transform_pixels``) and must agree
within one 8-bit step per channel.
"""

import concurrent.futures
from abc import ABC, abstractmethod
from typing import Optional, Tuple

import numpy as np

from lut_filter.config import settings
from ..utils.errors import GPUError
from ..utils.logger import get_logger
from .lut_cube import LutCube
from .sampler import transform_pixels

logger = get_logger(__name__)


class SamplingStrategy(ABC):
    """Abstract base class for LUT sampling backends."""

    @abstractmethod
    def transform(self, pixels: np.ndarray, cube: LutCube, intensity: float) -> np.ndarray:
        """
        Sample the cube for every pixel and blend by intensity.

        Args:
            pixels: (H, W, 4) float32 RGBA in [0, 1].
            cube: LUT cube.
            intensity: Blend factor in [0, 1].

        Returns:
            (H, W, 4) float32 NumPy array.
        """
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this strategy can run here."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of this strategy."""
        pass


class CPUStrategy(SamplingStrategy):
    """NumPy sampling, rows split across a thread pool."""

    def __init__(self, max_workers: Optional[int] = None, rows_per_chunk: Optional[int] = None):
        self.max_workers = max_workers or settings.PROCESSING_DEFAULTS["max_workers"]
        self.rows_per_chunk = rows_per_chunk or settings.PROCESSING_DEFAULTS["rows_per_chunk"]

    @property
    def name(self) -> str:
        return "CPU"

    def is_available(self) -> bool:
        return True  # CPU is always available

    def transform(self, pixels, cube, intensity):
        height = pixels.shape[0]
        table = cube.table
        if height <= self.rows_per_chunk or self.max_workers <= 1:
            return transform_pixels(pixels, table, intensity, xp=np)

        out = np.empty_like(pixels, dtype=np.float32)
        starts = range(0, height, self.rows_per_chunk)

        def work(start):
            stop = min(start + self.rows_per_chunk, height)
            out[start:stop] = transform_pixels(pixels[start:stop], table, intensity, xp=np)

        # chunks write disjoint row ranges, so only the final join is needed
        with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            for future in [executor.submit(work, start) for start in starts]:
                future.result()
        return out


class GPUStrategy(SamplingStrategy):
    """CuPy sampling on a CUDA/ROCm device."""

    def __init__(self):
        self._available = None

    @property
    def name(self) -> str:
        return "GPU"

    def is_available(self) -> bool:
        if self._available is None:
            from ..utils.gpu import is_gpu_enabled
            self._available = is_gpu_enabled()
        return self._available

    def transform(self, pixels, cube, intensity):
        from ..utils.gpu import get_gpu_state, to_numpy

        enabled, _, cp = get_gpu_state()
        if not enabled or cp is None:
            raise GPUError("CuPy backend is not available", fallback_available=True)
        table_gpu = cp.asarray(cube.table)
        pixels_gpu = cp.asarray(pixels, dtype=cp.float32)
        result = transform_pixels(pixels_gpu, table_gpu, intensity, xp=cp)
        return to_numpy(result)


class ProcessingContext:
    """
    Context for selecting and using sampling strategies.

    Automatically selects the best available strategy and provides
    fallback to CPU if GPU sampling fails.
    """

    def __init__(self, prefer_gpu: Optional[bool] = None, cpu_strategy: Optional[CPUStrategy] = None):
        """
        Initialize processing context.

        Args:
            prefer_gpu: Whether to prefer GPU sampling when available
                (defaults to the configured preference).
            cpu_strategy: CPU strategy to use (e.g. with a custom worker count).
        """
        if prefer_gpu is None:
            prefer_gpu = settings.PROCESSING_DEFAULTS["prefer_gpu"]
        self._gpu_strategy = GPUStrategy()
        self._cpu_strategy = cpu_strategy or CPUStrategy()
        self._prefer_gpu = prefer_gpu

    def get_strategy(self) -> SamplingStrategy:
        """Get the best available sampling strategy."""
        if self._prefer_gpu and self._gpu_strategy.is_available():
            return self._gpu_strategy
        return self._cpu_strategy

    def transform(self, pixels: np.ndarray, cube: LutCube, intensity: float) -> Tuple[np.ndarray, str]:
        """
        Sample + blend with automatic fallback.

        Returns:
            Tuple of (float32 RGBA result, strategy name used).
        """
        strategy = self.get_strategy()

        try:
            return strategy.transform(pixels, cube, intensity), strategy.name
        except Exception as e:
            if strategy.name == "GPU":
                logger.warning(f"GPU sampling failed, falling back to CPU: {e}")
                result = self._cpu_strategy.transform(pixels, cube, intensity)
                return result, "CPU (fallback)"
            raise
