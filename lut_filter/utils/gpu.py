"""
Optional CuPy backend detection.

Detection runs once at import. Everything else in the package asks this
module which array module to use instead of importing cupy itself.
"""

from dataclasses import dataclass
from typing import Any, Optional

import numpy as np

from lut_filter.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class GPUState:
    enabled: bool
    array_module: Any
    cp_module: Optional[Any] = None
    device_name: str = "CPU"


_state: Optional[GPUState] = None


def _query_device_name(cp) -> str:
    try:
        props = cp.cuda.runtime.getDeviceProperties(0)
    except Exception as e:
        logger.debug("Could not query CUDA device properties: %s", e)
        return "Unknown GPU"
    name = props.get("name", b"Unknown GPU")
    if isinstance(name, bytes):
        name = name.decode("utf-8", errors="ignore")
    return name


def _detect() -> GPUState:
    try:
        import cupy as cp
    except ImportError:
        logger.info("CuPy not installed, LUT sampling runs on the CPU.")
        return GPUState(False, np)

    try:
        count = cp.cuda.runtime.getDeviceCount()
    except Exception as e:
        logger.warning("CuPy is installed but no usable CUDA/ROCm device was found (%s). "
                       "LUT sampling runs on the CPU.", e)
        return GPUState(False, np)
    if count < 1:
        logger.info("CuPy reports no devices, LUT sampling runs on the CPU.")
        return GPUState(False, np)

    state = GPUState(True, cp, cp, _query_device_name(cp))
    logger.info("GPU LUT sampling enabled on %s.", state.device_name)
    return state


def initialize_gpu():
    """
    Detect CuPy and a device, caching the result.

    Returns:
        (gpu_enabled, array_module, cp_module). ``array_module`` is cupy when
        enabled and numpy otherwise; ``cp_module`` is None without a GPU.
    """
    global _state
    if _state is None:
        _state = _detect()
    return _state.enabled, _state.array_module, _state.cp_module


GPU_ENABLED, xp, cp_module = initialize_gpu()


def get_gpu_state():
    return initialize_gpu()


def get_array_module():
    """cupy when the GPU backend is enabled, numpy otherwise."""
    return xp


def is_gpu_enabled():
    return bool(GPU_ENABLED)


def get_gpu_info():
    """Summary of the detected backend, for logs and the benchmark."""
    initialize_gpu()
    if _state.enabled:
        return {
            "enabled": True,
            "backend": "cupy",
            "device_name": _state.device_name,
            "message": f"GPU sampling enabled on {_state.device_name}",
        }
    return {
        "enabled": False,
        "backend": None,
        "device_name": _state.device_name,
        "message": "No GPU acceleration available. Using CPU.",
    }


def to_numpy(array):
    """Return a NumPy array whether the input lives on the host or the GPU."""
    if cp_module is not None and isinstance(array, cp_module.ndarray):
        return cp_module.asnumpy(array)
    return np.asarray(array)
