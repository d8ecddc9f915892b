# Orientation normalization
"""
Puts a pixel buffer into display orientation before LUT sampling.

Codes follow the EXIF orientation tag. Transpose (5) and transverse (7) are
not handled and fall back to IDENTITY.
"""

from enum import Enum
from typing import Optional, Tuple, Union

import numpy as np
from PIL import ExifTags, Image

from ..utils.errors import ErrorCategory, log_and_continue
from ..utils.logger import get_logger
from .buffer import PixelBuffer

logger = get_logger(__name__)


class OrientationCode(Enum):
    """Stored orientation of an image relative to how it should be displayed."""
    IDENTITY = 1
    FLIP_HORIZONTAL = 2
    ROTATE_180 = 3
    FLIP_VERTICAL = 4
    ROTATE_90 = 6   # rotate 90 degrees clockwise to display
    ROTATE_270 = 8  # rotate 270 degrees clockwise to display

    @classmethod
    def from_exif(cls, tag: Optional[Union[int, "OrientationCode"]]) -> "OrientationCode":
        if tag is None:
            return cls.IDENTITY
        if isinstance(tag, cls):
            return tag
        try:
            return cls(int(tag))
        except (TypeError, ValueError):
            log_and_continue(
                f"Unsupported orientation tag {tag!r}, leaving image as stored",
                category=ErrorCategory.RECOVERABLE,
            )
            return cls.IDENTITY

    @property
    def inverse(self) -> "OrientationCode":
        if self is OrientationCode.ROTATE_90:
            return OrientationCode.ROTATE_270
        if self is OrientationCode.ROTATE_270:
            return OrientationCode.ROTATE_90
        # flips, 180 and identity are their own inverse
        return self

    @property
    def swaps_dimensions(self) -> bool:
        return self in (OrientationCode.ROTATE_90, OrientationCode.ROTATE_270)


def _rotate_90(pixels: np.ndarray, clockwise: bool = True) -> np.ndarray:
    if clockwise:
        return np.ascontiguousarray(np.rot90(pixels, k=-1))  # k=-1 is clockwise
    return np.ascontiguousarray(np.rot90(pixels, k=1))


def _flip(pixels: np.ndarray, horizontal: bool = True) -> np.ndarray:
    if horizontal:
        return np.fliplr(pixels).copy()
    return np.flipud(pixels).copy()


_OPERATIONS = {
    OrientationCode.FLIP_HORIZONTAL: lambda p: _flip(p, horizontal=True),
    OrientationCode.FLIP_VERTICAL: lambda p: _flip(p, horizontal=False),
    OrientationCode.ROTATE_90: lambda p: _rotate_90(p, clockwise=True),
    OrientationCode.ROTATE_180: lambda p: np.ascontiguousarray(np.rot90(p, k=2)),
    OrientationCode.ROTATE_270: lambda p: _rotate_90(p, clockwise=False),
}


def normalize_orientation(
    buffer: PixelBuffer,
    orientation: Optional[Union[int, OrientationCode]] = None,
) -> Tuple[PixelBuffer, OrientationCode]:
    """
    Apply the transform for ``orientation`` and return the buffer with its new code.

    The returned code is always IDENTITY. For IDENTITY (or no orientation) the
    input buffer itself is returned, not a copy.

    Args:
        buffer: Pixel buffer as stored.
        orientation: OrientationCode or raw EXIF orientation tag.

    Returns:
        (oriented buffer, OrientationCode.IDENTITY)
    """
    code = OrientationCode.from_exif(orientation)
    if code is OrientationCode.IDENTITY:
        return buffer, code

    oriented = PixelBuffer(_OPERATIONS[code](buffer.pixels))
    logger.debug(
        "Normalized orientation %s: %dx%d -> %dx%d",
        code.name, buffer.width, buffer.height, oriented.width, oriented.height,
    )
    return oriented, OrientationCode.IDENTITY


def read_exif_orientation(image: Image.Image) -> OrientationCode:
    """Orientation code stored in a decoded Pillow image's EXIF block (IDENTITY if absent)."""
    tag = image.getexif().get(ExifTags.Base.Orientation)
    return OrientationCode.from_exif(tag)
