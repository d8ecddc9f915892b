"""
3D LUT photo filters: LUT cube construction, trilinear sampling, intensity
blending, orientation normalization and grain compositing over decoded
pixel buffers.
"""

from .processing import (
    PixelBuffer,
    LutCube,
    LutLayout,
    LutSizeMismatch,
    build_lut_cube,
    sample_color,
    OrientationCode,
    normalize_orientation,
    BlendMode,
    GrainConfig,
    composite_grain,
    FilterCache,
    FilterEntry,
    get_or_build_cached_filter,
    ProcessingContext,
    FilterPipeline,
    apply_filter,
)
from .utils.errors import (
    AppError,
    ProcessingError,
    InvalidDimensionError,
    LutSizeMismatchError,
)

__version__ = "1.0.0"

__all__ = [
    'PixelBuffer',
    'LutCube',
    'LutLayout',
    'LutSizeMismatch',
    'build_lut_cube',
    'sample_color',
    'OrientationCode',
    'normalize_orientation',
    'BlendMode',
    'GrainConfig',
    'composite_grain',
    'FilterCache',
    'FilterEntry',
    'get_or_build_cached_filter',
    'ProcessingContext',
    'FilterPipeline',
    'apply_filter',
    'AppError',
    'ProcessingError',
    'InvalidDimensionError',
    'LutSizeMismatchError',
]
