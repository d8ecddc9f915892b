# Processing package initialization
from .buffer import PixelBuffer
from .lut_cube import LutCube, LutLayout, LutSizeMismatch, build_lut_cube
from .sampler import sample_color, trilinear_sample, blend_intensity, transform_pixels
from .orientation import OrientationCode, normalize_orientation, read_exif_orientation
from .grain import BlendMode, GrainConfig, blend_channels, resample_grain, composite_grain
from .filter_cache import (
    FilterCache, FilterEntry, get_default_cache, get_or_build_cached_filter
)
from .processing_strategy import (
    SamplingStrategy, CPUStrategy, GPUStrategy, ProcessingContext
)
from .pipeline import FilterPipeline, apply_filter
