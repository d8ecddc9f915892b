# This file makes the 'utils' directory a Python package.

from .errors import (
    AppError,
    ProcessingError,
    GPUError,
    ConfigurationError,
    InvalidDimensionError,
    LutSizeMismatchError,
    ErrorCategory,
    log_and_continue,
)
from .logger import get_logger, set_log_level
from .gpu import (
    GPU_ENABLED,
    get_gpu_state,
    get_array_module,
    get_gpu_info,
    is_gpu_enabled,
    to_numpy,
)

__all__ = [
    # Errors
    'AppError',
    'ProcessingError',
    'GPUError',
    'ConfigurationError',
    'InvalidDimensionError',
    'LutSizeMismatchError',
    'ErrorCategory',
    'log_and_continue',
    # Logging
    'get_logger',
    'set_log_level',
    # GPU
    'GPU_ENABLED',
    'get_gpu_state',
    'get_array_module',
    'get_gpu_info',
    'is_gpu_enabled',
    'to_numpy',
]
