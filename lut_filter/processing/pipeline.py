# Filter pipeline: orientation -> LUT sampling -> grain
"""
Sequences the processing steps for one image.

``apply_filter`` is the stateless LUT step. ``FilterPipeline`` adds the
filter cache and the default grain settings, mirroring a host that sets a
grain texture once and then filters many images.
"""

from typing import Optional, Union

from lut_filter.config import settings
from ..utils.logger import get_logger
from .buffer import PixelBuffer, to_storage
from .filter_cache import FilterCache, FilterEntry, ReferenceSource, get_default_cache
from .grain import BlendMode, GrainConfig, clamp_opacity, composite_grain
from .lut_cube import LutCube, LutLayout
from .orientation import OrientationCode, normalize_orientation
from .processing_strategy import ProcessingContext
from .sampler import clamp_intensity

logger = get_logger(__name__)


def apply_filter(
    image: PixelBuffer,
    cube: LutCube,
    intensity: float = 1.0,
    orientation: Optional[Union[int, OrientationCode]] = None,
    context: Optional[ProcessingContext] = None,
) -> PixelBuffer:
    """
    Apply a LUT to every pixel of an image.

    Args:
        image: Source image. Not modified.
        cube: LUT cube to sample.
        intensity: 0 keeps the image, 1 is the pure LUT result.
        orientation: Optional EXIF orientation of ``image``; applied first.
        context: Processing context (a CPU/GPU auto-selecting one by default).

    Returns:
        New PixelBuffer with the input's dtype. For intensity 0 the
        orientation-normalized input is returned unchanged.
    """
    image, _ = normalize_orientation(image, orientation)

    k = clamp_intensity(intensity)
    if k == 0.0:
        return image

    context = context or ProcessingContext()
    result, backend = context.transform(image.as_float(), cube, k)
    logger.debug("Applied %dx%dx%d LUT to %dx%d image on %s (intensity %.2f)",
                 cube.dimension, cube.dimension, cube.dimension,
                 image.width, image.height, backend, k)
    return PixelBuffer(to_storage(result, image.pixels.dtype))


class FilterPipeline:
    """
    Orchestrates orientation, LUT sampling and the optional grain overlay.

    Grain settings set on the pipeline are defaults; a GrainConfig passed to
    ``apply`` overrides them for that call only.
    """

    def __init__(
        self,
        cache: Optional[FilterCache] = None,
        context: Optional[ProcessingContext] = None,
    ):
        self.cache = cache if cache is not None else get_default_cache()
        self.context = context or ProcessingContext()
        self._grain_texture: Optional[PixelBuffer] = None
        self._grain_opacity = clamp_opacity(settings.GRAIN_DEFAULTS["opacity"])
        self._grain_blend_mode = BlendMode.parse(settings.GRAIN_DEFAULTS["blend_mode"])

    # --- Grain settings ---

    def set_grain_image(self, texture: Optional[PixelBuffer]) -> None:
        self._grain_texture = texture

    def set_grain_opacity(self, opacity: float) -> None:
        self._grain_opacity = clamp_opacity(opacity)

    def set_grain_blend_mode(self, blend_mode: Union[BlendMode, str]) -> None:
        self._grain_blend_mode = BlendMode.parse(blend_mode)

    @property
    def grain_config(self) -> GrainConfig:
        """Current default grain settings."""
        return GrainConfig(
            opacity=self._grain_opacity,
            blend_mode=self._grain_blend_mode,
            texture=self._grain_texture,
        )

    # --- Processing ---

    def apply(
        self,
        image: PixelBuffer,
        entry: FilterEntry,
        with_grain: bool = False,
        grain_config: Optional[GrainConfig] = None,
        intensity: Optional[float] = None,
        orientation: Optional[Union[int, OrientationCode]] = None,
    ) -> PixelBuffer:
        """
        Run the full sequence for one image.

        Args:
            image: Source image.
            entry: Cached filter to apply.
            with_grain: Composite the grain overlay after the LUT.
            grain_config: Grain settings for this call (pipeline defaults otherwise).
            intensity: Blend factor (the entry's default intensity otherwise).
            orientation: Optional EXIF orientation of ``image``.
        """
        if intensity is None:
            intensity = entry.intensity
        result = apply_filter(image, entry.cube, intensity, orientation, self.context)

        if not with_grain:
            return result

        grain = grain_config or self.grain_config
        if grain.texture is None:
            logger.info("Grain requested for filter '%s' but no grain texture is set; skipping",
                        entry.filter_id)
            return result
        return composite_grain(result, grain.texture, grain.opacity, grain.blend_mode, grain.fit)

    def apply_lut(
        self,
        image: PixelBuffer,
        filter_id: str,
        reference: ReferenceSource,
        dimension: Optional[int] = None,
        intensity: Optional[float] = None,
        with_grain: bool = False,
        orientation: Optional[Union[int, OrientationCode]] = None,
        layout: Union[LutLayout, str, None] = None,
        grain_config: Optional[GrainConfig] = None,
    ) -> PixelBuffer:
        """Look up (or build) ``filter_id`` in the cache and apply it to ``image``."""
        entry = self.cache.get_or_build(filter_id, reference, dimension, layout)
        return self.apply(
            image,
            entry,
            with_grain=with_grain,
            grain_config=grain_config,
            intensity=intensity,
            orientation=orientation,
        )
