# LUT cube construction from a reference image
"""
Decodes a LUT reference image into a dense (N, N, N) cube of normalized RGBA.

Two encodings of the reference image are supported and must be chosen by the
caller, they are not auto-detected:

- LINEAR: exactly N^3 pixels read left-to-right, top-to-bottom. Each pixel
  fills the next grid point with red varying fastest, then green, then blue.
- TILED: a square grid of N x N tiles, ceil(sqrt(N)) tiles per row. The tile
  for blue index b holds the (r, g) plane, r along x and g along y.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

import numpy as np

from ..utils.errors import (
    ConfigurationError,
    ErrorCategory,
    InvalidDimensionError,
    LutSizeMismatchError,
    log_and_continue,
)
from ..utils.logger import get_logger
from .buffer import PixelBuffer

logger = get_logger(__name__)


class LutLayout(Enum):
    """How the grid points are laid out in the reference image."""
    LINEAR = "linear"
    TILED = "tiled"

    @classmethod
    def parse(cls, value: Union["LutLayout", str]) -> "LutLayout":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ConfigurationError(
                f"Unknown LUT layout '{value}', expected 'linear' or 'tiled'",
                setting_name="lut_layout",
            ) from None


@dataclass(frozen=True)
class LutSizeMismatch:
    """Reference image did not cover the cube exactly. Missing grid points are zero."""
    expected: int
    actual: int


@dataclass(frozen=True, eq=False)
class LutCube:
    """
    Dense 3D lookup table.

    ``table`` has shape (N, N, N, 4) and is indexed ``[b, g, r, channel]``,
    which makes its C-order flattening identical to the flat layout
    ``(b*N + g)*N*4 + r*4 + channel``.
    """
    dimension: int
    layout: LutLayout
    table: np.ndarray
    size_mismatch: Optional[LutSizeMismatch] = None

    @property
    def data(self) -> np.ndarray:
        """Flat float32 view of the cube, length N^3 * 4."""
        return self.table.reshape(-1)

    @property
    def is_degraded(self) -> bool:
        return self.size_mismatch is not None

    def index(self, r: int, g: int, b: int, channel: int = 0) -> int:
        n = self.dimension
        for name, value in (("r", r), ("g", g), ("b", b)):
            if not 0 <= value < n:
                raise IndexError(f"LUT coordinate {name}={value} outside [0, {n})")
        return (b * n + g) * n * 4 + r * 4 + channel

    def grid_value(self, r: int, g: int, b: int) -> np.ndarray:
        """RGBA stored at an integer grid coordinate."""
        start = self.index(r, g, b)
        return self.data[start:start + 4].copy()


def build_lut_cube(
    reference: PixelBuffer,
    dimension: int,
    layout: Union[LutLayout, str] = LutLayout.LINEAR,
    strict: bool = False,
    filter_id: Optional[str] = None,
) -> LutCube:
    """
    Build a LUT cube from a reference image.

    Args:
        reference: Decoded LUT reference image. Not modified.
        dimension: Cube edge length N (>= 2).
        layout: LutLayout.LINEAR or LutLayout.TILED (or their string names).
        strict: Raise LutSizeMismatchError instead of returning a degraded cube.
        filter_id: Only used for log and error context.

    Returns:
        LutCube. When the reference does not match the dimension, as many grid
        points as possible are filled, the rest stay zero and
        ``cube.size_mismatch`` records the pixel counts.

    Raises:
        InvalidDimensionError: dimension < 2.
        LutSizeMismatchError: size mismatch while ``strict`` is set.
    """
    if dimension is None or int(dimension) < 2:
        raise InvalidDimensionError(dimension, filter_id=filter_id)
    n = int(dimension)
    layout = LutLayout.parse(layout)

    source = reference.as_float()
    table = np.zeros((n, n, n, 4), dtype=np.float32)

    if layout is LutLayout.LINEAR:
        expected, filled = _fill_linear(table, source)
        actual = reference.pixel_count
        matches = actual == expected
    else:
        expected, filled = _fill_tiled(table, source)
        actual = reference.pixel_count
        matches = filled == n ** 3

    mismatch = None
    if not matches:
        if strict:
            raise LutSizeMismatchError(expected, actual, n, filter_id=filter_id)
        mismatch = LutSizeMismatch(expected=expected, actual=actual)
        log_and_continue(
            f"LUT reference{_describe(filter_id)} has {actual} pixels, expected {expected} "
            f"for dimension {n} ({layout.value}); filled {filled} of {n ** 3} grid points",
            category=ErrorCategory.RECOVERABLE,
        )

    table.setflags(write=False)
    logger.debug("Built %dx%dx%d LUT cube%s (%s)", n, n, n, _describe(filter_id), layout.value)
    return LutCube(dimension=n, layout=layout, table=table, size_mismatch=mismatch)


def _fill_linear(table, source):
    n = table.shape[0]
    expected = n ** 3
    flat = source.reshape(-1, 4)
    count = min(flat.shape[0], expected)
    table.reshape(-1, 4)[:count] = flat[:count]
    return expected, count


def _fill_tiled(table, source):
    n = table.shape[0]
    tiles_per_row = math.ceil(math.sqrt(n))
    tile_rows = math.ceil(n / tiles_per_row)
    expected = (tiles_per_row * n) * (tile_rows * n)
    height, width = source.shape[:2]

    filled = 0
    for b in range(n):
        x0 = (b % tiles_per_row) * n
        y0 = (b // tiles_per_row) * n
        tile = source[y0:y0 + n, x0:x0 + n]
        rows, cols = tile.shape[:2]
        if rows == 0 or cols == 0:
            continue
        # tile is indexed [g, r], exactly the table's plane for this b
        table[b, :rows, :cols] = tile
        filled += rows * cols
    if filled < n ** 3:
        logger.debug("Tiled LUT image %dx%d is smaller than the %dx%d tile grid", width, height,
                     tiles_per_row * n, tile_rows * n)
    return expected, filled


def _describe(filter_id):
    return f" '{filter_id}'" if filter_id else ""
