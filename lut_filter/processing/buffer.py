# Pixel buffer shared by every processing step
"""
RGBA pixel buffers consumed and produced by the filter engine.

Decoding and encoding files is left to the caller; this module only wraps
already-decoded pixels (NumPy arrays or in-memory Pillow images).
"""

from dataclasses import dataclass
from typing import Union

import numpy as np
from PIL import Image

from ..utils.errors import ErrorCategory, ProcessingError


@dataclass
class PixelBuffer:
    """
    A width x height grid of RGBA samples, stored row-major as an (H, W, 4) array.

    ``pixels`` is either uint8 (RGBA8) or float32 with values in [0, 1]
    (RGBA-float). Results of a transform keep the dtype of their input.
    """
    pixels: np.ndarray

    def __post_init__(self):
        pixels = np.asarray(self.pixels)
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ProcessingError(
                f"Pixel buffer must be shaped (height, width, 4), got {pixels.shape}",
                step="pixel_buffer",
                category=ErrorCategory.USER_INPUT,
            )
        if pixels.dtype != np.uint8:
            pixels = pixels.astype(np.float32, copy=False)
        self.pixels = pixels

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    @property
    def is_float(self) -> bool:
        return self.pixels.dtype != np.uint8

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelBuffer":
        """Wrap an (H, W, 3) or (H, W, 4) array; RGB input gets an opaque alpha channel."""
        array = np.asarray(array)
        if array.ndim == 3 and array.shape[2] == 3:
            opaque = 255 if array.dtype == np.uint8 else 1.0
            alpha = np.full(array.shape[:2] + (1,), opaque, dtype=array.dtype)
            array = np.concatenate([array, alpha], axis=2)
        return cls(array)

    @classmethod
    def from_image(cls, image: Image.Image) -> "PixelBuffer":
        """Wrap a decoded Pillow image (any mode is converted to RGBA)."""
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        return cls(np.array(image, dtype=np.uint8))

    def to_image(self) -> Image.Image:
        """Return the pixels as an RGBA Pillow image, ready for an external encoder."""
        return Image.fromarray(self.to_uint8().pixels)

    def as_float(self) -> np.ndarray:
        """Normalized float32 RGBA copy of the pixels."""
        if self.is_float:
            return self.pixels.astype(np.float32, copy=True)
        return self.pixels.astype(np.float32) / 255.0

    def to_uint8(self) -> "PixelBuffer":
        if not self.is_float:
            return self
        return PixelBuffer(to_storage(self.pixels, np.dtype(np.uint8)))

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self.pixels.copy())


def to_storage(normalized: np.ndarray, dtype: Union[np.dtype, type]) -> np.ndarray:
    """Convert normalized float RGBA back to the dtype of the source buffer."""
    if np.dtype(dtype) == np.uint8:
        return np.clip(np.rint(normalized * 255.0), 0, 255).astype(np.uint8)
    return np.clip(normalized, 0.0, 1.0).astype(np.float32)
