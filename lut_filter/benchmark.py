"""
LUT sampling benchmark: CPU thread pool vs CuPy.

Builds a 33^3 grading LUT, runs both sampling strategies over synthetic
images of increasing size and prints a timing table together with the
largest per-channel difference between the two backends.

Usage:
    python -m lut_filter.benchmark [-v]
"""

import time
from dataclasses import dataclass
from typing import Callable, List, Optional

import numpy as np

from .processing.buffer import PixelBuffer
from .processing.lut_cube import LutCube, build_lut_cube
from .processing.processing_strategy import CPUStrategy, GPUStrategy, SamplingStrategy
from .utils.gpu import get_gpu_info
from .utils.logger import get_logger, set_log_level

logger = get_logger(__name__)

IMAGE_SIZES = [(1024, 768), (2048, 1536), (4032, 3024)]
INTENSITY = 0.8


@dataclass
class Timing:
    best_ms: float
    mean_ms: float
    spread_ms: float


@dataclass
class BenchmarkRow:
    width: int
    height: int
    cpu: Timing
    gpu: Optional[Timing] = None
    deviation: Optional[int] = None
    gpu_error: Optional[str] = None

    @property
    def megapixels(self) -> float:
        return self.width * self.height / 1e6


def create_test_image(width: int, height: int, seed: int = 42) -> np.ndarray:
    """Normalized RGBA gradient with noise, so every LUT cell gets hit."""
    rng = np.random.default_rng(seed)
    u = np.linspace(0.0, 1.0, width, dtype=np.float32)[np.newaxis, :]
    v = np.linspace(0.0, 1.0, height, dtype=np.float32)[:, np.newaxis]
    noise = rng.random((height, width, 3), dtype=np.float32) * 0.1

    rgb = np.empty((height, width, 3), dtype=np.float32)
    rgb[..., 0] = 0.6 * u + 0.3 * v
    rgb[..., 1] = 0.3 * u + 0.6 * v
    rgb[..., 2] = 0.5 * (1.0 - u) + 0.2 * v
    rgb = np.clip(rgb + noise, 0.0, 1.0)
    alpha = np.ones((height, width, 1), dtype=np.float32)
    return np.concatenate([rgb, alpha], axis=2)


def create_test_lut(dimension: int = 33) -> LutCube:
    """A warm, slightly crushed LUT so the output differs visibly from the input."""
    steps = np.linspace(0.0, 1.0, dimension, dtype=np.float32)
    b, g, r = np.meshgrid(steps, steps, steps, indexing="ij")
    graded = np.stack([
        np.clip(r * 1.08 + 0.02, 0, 1),
        np.clip(g * 0.98, 0, 1),
        np.clip(b * 0.85 + 0.05, 0, 1),
        np.ones_like(r),
    ], axis=-1)
    reference = PixelBuffer(graded.reshape(1, -1, 4))
    return build_lut_cube(reference, dimension)


def time_call(func: Callable[[], object], repeats: int = 5, warmup: int = 2) -> Timing:
    """Time ``func`` after ``warmup`` discarded runs."""
    for _ in range(warmup):
        func()
    samples = []
    for _ in range(repeats):
        started = time.perf_counter()
        func()
        samples.append((time.perf_counter() - started) * 1000.0)
    return Timing(min(samples), float(np.mean(samples)), float(np.std(samples)))


def max_deviation(reference: np.ndarray, candidate: np.ndarray) -> int:
    """Largest per-channel difference, in 8-bit steps."""
    ref_u8 = np.rint(reference * 255.0).astype(np.int16)
    cand_u8 = np.rint(candidate * 255.0).astype(np.int16)
    return int(np.abs(ref_u8 - cand_u8).max())


def benchmark_size(width: int, height: int, cube: LutCube,
                   cpu: SamplingStrategy, gpu: SamplingStrategy) -> BenchmarkRow:
    image = create_test_image(width, height)
    row = BenchmarkRow(width, height, time_call(lambda: cpu.transform(image, cube, INTENSITY)))
    if not gpu.is_available():
        return row
    try:
        row.gpu = time_call(lambda: gpu.transform(image, cube, INTENSITY))
        row.deviation = max_deviation(cpu.transform(image, cube, INTENSITY),
                                      gpu.transform(image, cube, INTENSITY))
    except Exception as e:
        logger.exception("GPU benchmark failed for %dx%d", width, height)
        row.gpu_error = str(e)
    return row


def format_row(row: BenchmarkRow) -> str:
    size = f"{row.width}x{row.height} ({row.megapixels:.1f} MP)"
    cpu = f"{row.cpu.mean_ms:8.1f} ±{row.cpu.spread_ms:5.1f}"
    if row.gpu_error:
        return f"{size:<22} {cpu}   error: {row.gpu_error}"
    if row.gpu is None:
        return f"{size:<22} {cpu}   {'n/a':>14}"
    speedup = row.cpu.mean_ms / row.gpu.mean_ms
    gpu = f"{row.gpu.mean_ms:8.1f} ±{row.gpu.spread_ms:5.1f}"
    return f"{size:<22} {cpu}   {gpu}   {speedup:5.1f}x   {row.deviation}"


def run_benchmark(verbose: bool = False) -> List[BenchmarkRow]:
    """Run every image size and print the table. ``verbose`` turns on debug logging."""
    if verbose:
        set_log_level("DEBUG")

    info = get_gpu_info()
    cube = create_test_lut()
    cpu, gpu = CPUStrategy(), GPUStrategy()

    print(f"LUT sampling benchmark: {cube.dimension}^3 LUT, intensity {INTENSITY}")
    print(f"Backend: {info['message']}")
    print()
    print(f"{'image':<22} {'CPU ms':>14}   {'GPU ms':>14}   {'speed':>6}   max diff")
    print("-" * 78)

    rows = []
    for width, height in IMAGE_SIZES:
        row = benchmark_size(width, height, cube, cpu, gpu)
        rows.append(row)
        print(format_row(row))

    if not gpu.is_available():
        print()
        print("No GPU backend. Install the CuPy build for your platform to compare, "
              "e.g. `pip install cupy-cuda12x` or `pip install cupy-rocm-6-0`.")
    return rows


if __name__ == "__main__":
    import sys
    run_benchmark(verbose="-v" in sys.argv[1:])
