# Grain overlay compositing
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

import cv2
import numpy as np

from lut_filter.config import settings
from ..utils.errors import ErrorCategory, log_and_continue
from ..utils.logger import get_logger
from .buffer import PixelBuffer, to_storage

logger = get_logger(__name__)

_INTERPOLATION = {
    "linear": cv2.INTER_LINEAR,
    "nearest": cv2.INTER_NEAREST,
}


class BlendMode(Enum):
    """Per-channel formulas for combining the grain layer with the base."""
    MULTIPLY = "multiply"
    SCREEN = "screen"
    OVERLAY = "overlay"

    @classmethod
    def parse(cls, label: Union["BlendMode", str, None]) -> "BlendMode":
        """Resolve a blend mode label; anything unrecognized becomes SCREEN."""
        if isinstance(label, cls):
            return label
        try:
            return cls(str(label).strip().lower())
        except ValueError:
            log_and_continue(
                f"Unsupported blend mode {label!r}, falling back to screen",
                category=ErrorCategory.RECOVERABLE,
            )
            return cls.SCREEN


def clamp_opacity(opacity) -> float:
    return min(max(float(opacity), 0.0), 1.0)


@dataclass
class GrainConfig:
    """Grain settings for one composite. ``texture`` is borrowed and never modified."""
    opacity: float = field(default_factory=lambda: settings.GRAIN_DEFAULTS["opacity"])
    blend_mode: Union[BlendMode, str] = field(
        default_factory=lambda: settings.GRAIN_DEFAULTS["blend_mode"])
    texture: Optional[PixelBuffer] = None
    fit: str = field(default_factory=lambda: settings.GRAIN_DEFAULTS["fit"])

    def __post_init__(self):
        self.opacity = clamp_opacity(self.opacity)
        self.blend_mode = BlendMode.parse(self.blend_mode)


def blend_channels(base, grain, mode: BlendMode):
    """Apply a blend formula to normalized RGB arrays of equal shape."""
    if mode is BlendMode.MULTIPLY:
        return base * grain
    if mode is BlendMode.OVERLAY:
        return np.where(
            base < 0.5,
            2.0 * base * grain,
            1.0 - 2.0 * (1.0 - base) * (1.0 - grain),
        )
    return 1.0 - (1.0 - base) * (1.0 - grain)


def resample_grain(grain: np.ndarray, width: int, height: int,
                   fit: str = "stretch", interpolation: str = "linear") -> np.ndarray:
    """
    Scale a normalized grain texture so it covers a width x height base.

    "stretch" scales each axis independently to the base size. "fill" keeps
    the grain's aspect ratio, scales until both axes cover the base and
    center-crops the overflow.
    """
    gh, gw = grain.shape[:2]
    if (gw, gh) == (width, height):
        return grain
    flag = _INTERPOLATION.get(interpolation, cv2.INTER_LINEAR)

    if fit == "fill":
        scale = max(width / gw, height / gh)
        scaled_w = max(width, int(math.ceil(gw * scale)))
        scaled_h = max(height, int(math.ceil(gh * scale)))
        scaled = cv2.resize(grain, (scaled_w, scaled_h), interpolation=flag)
        x = (scaled_w - width) // 2
        y = (scaled_h - height) // 2
        return scaled[y:y + height, x:x + width]

    if fit != "stretch":
        logger.warning("Unknown grain fit '%s', stretching instead", fit)
    return cv2.resize(grain, (width, height), interpolation=flag)


def composite_grain(
    base: PixelBuffer,
    grain: Optional[PixelBuffer],
    opacity: float,
    blend_mode: Union[BlendMode, str] = BlendMode.SCREEN,
    fit: Optional[str] = None,
) -> PixelBuffer:
    """
    Blend a grain texture onto a base image.

    Args:
        base: Image to composite onto. Not modified.
        grain: Grain texture of any size, or None.
        opacity: Grain layer opacity, clamped to [0, 1].
        blend_mode: BlendMode or label; unknown labels use Screen.
        fit: "stretch" or "fill" (defaults to the configured fit).

    Returns:
        A new PixelBuffer with base's dimensions and dtype. Base alpha is kept.
        Without a grain texture the base buffer is returned as is.
    """
    if grain is None:
        log_and_continue("Grain requested but no grain texture is set, skipping",
                         category=ErrorCategory.RECOVERABLE, level="info")
        return base

    mode = BlendMode.parse(blend_mode)
    alpha = clamp_opacity(opacity)
    if alpha == 0.0:
        return base.copy()

    fit = fit or settings.GRAIN_DEFAULTS["fit"]
    interpolation = settings.GRAIN_DEFAULTS["interpolation"]

    base_float = base.as_float()
    grain_float = resample_grain(grain.as_float(), base.width, base.height, fit, interpolation)

    cb = base_float[..., :3]
    cg = grain_float[..., :3]
    blended = blend_channels(cb, cg, mode)

    # grain alpha scales the layer opacity per pixel; opaque grain uses opacity as is
    layer_alpha = alpha * grain_float[..., 3:4]
    out = base_float
    out[..., :3] = blended * layer_alpha + cb * (1.0 - layer_alpha)

    logger.debug("Composited %dx%d grain onto %dx%d base (%s, opacity %.2f)",
                 grain.width, grain.height, base.width, base.height, mode.value, alpha)
    return PixelBuffer(to_storage(out, base.pixels.dtype))
