# Trilinear LUT sampling and intensity blending
"""
Color sampling against a LutCube.

``sample_color`` is the scalar reference implementation. ``trilinear_sample``
is the same arithmetic over whole arrays and accepts the array module to run
on (numpy or cupy), so the CPU and GPU strategies share one kernel.

Interpolation always runs along r, then g, then b.
"""

import math

import numpy as np

from .lut_cube import LutCube

# Continuous coordinates closer than this to an integer are treated as grid points
_GRID_SNAP = 1e-4


def _lerp(a, b, t):
    return a * (1.0 - t) + b * t


def _axis(value, dimension):
    """Split one 0-255 channel value into (lower grid index, fraction)."""
    coord = value / 255.0 * (dimension - 1)
    nearest = round(coord)
    if abs(coord - nearest) < _GRID_SNAP:
        coord = float(nearest)
    base = min(max(int(math.floor(coord)), 0), dimension - 2)
    return base, coord - base


def sample_color(cube: LutCube, r: float, g: float, b: float) -> np.ndarray:
    """
    Sample the cube at one color.

    Args:
        cube: LUT cube.
        r, g, b: Channel values in [0, 255].

    Returns:
        float32 array of 4 values (RGBA) in [0, 1]. At a grid-aligned input
        the stored grid value is returned exactly.
    """
    n = cube.dimension
    table = cube.table
    r0, rd = _axis(float(r), n)
    g0, gd = _axis(float(g), n)
    b0, bd = _axis(float(b), n)

    result = np.empty(4, dtype=np.float32)
    for channel in range(4):
        c000 = float(table[b0, g0, r0, channel])
        c100 = float(table[b0, g0, r0 + 1, channel])
        c010 = float(table[b0, g0 + 1, r0, channel])
        c110 = float(table[b0, g0 + 1, r0 + 1, channel])
        c001 = float(table[b0 + 1, g0, r0, channel])
        c101 = float(table[b0 + 1, g0, r0 + 1, channel])
        c011 = float(table[b0 + 1, g0 + 1, r0, channel])
        c111 = float(table[b0 + 1, g0 + 1, r0 + 1, channel])

        c00 = _lerp(c000, c100, rd)
        c10 = _lerp(c010, c110, rd)
        c01 = _lerp(c001, c101, rd)
        c11 = _lerp(c011, c111, rd)

        c0 = _lerp(c00, c10, gd)
        c1 = _lerp(c01, c11, gd)

        result[channel] = _lerp(c0, c1, bd)
    return result


def trilinear_sample(table, rgb, xp=np):
    """
    Vectorized trilinear sampling.

    Args:
        table: (N, N, N, 4) cube indexed [b, g, r, channel], on the ``xp`` device.
        rgb: (..., 3) float array of channel values in [0, 255], on the ``xp`` device.
        xp: numpy or cupy.

    Returns:
        (..., 4) float32 array of sampled RGBA in [0, 1].
    """
    n = table.shape[0]
    coords = rgb.astype(xp.float32) / 255.0 * (n - 1)
    nearest = xp.rint(coords)
    coords = xp.where(xp.abs(coords - nearest) < _GRID_SNAP, nearest, coords)
    base = xp.clip(xp.floor(coords), 0, n - 2).astype(xp.int32)
    frac = (coords - base).astype(xp.float32)

    r0, g0, b0 = base[..., 0], base[..., 1], base[..., 2]
    rd = frac[..., 0:1]
    gd = frac[..., 1:2]
    bd = frac[..., 2:3]
    r1, g1, b1 = r0 + 1, g0 + 1, b0 + 1

    c00 = _lerp(table[b0, g0, r0], table[b0, g0, r1], rd)
    c10 = _lerp(table[b0, g1, r0], table[b0, g1, r1], rd)
    c01 = _lerp(table[b1, g0, r0], table[b1, g0, r1], rd)
    c11 = _lerp(table[b1, g1, r0], table[b1, g1, r1], rd)

    c0 = _lerp(c00, c10, gd)
    c1 = _lerp(c01, c11, gd)

    return _lerp(c0, c1, bd).astype(xp.float32)


def clamp_intensity(intensity) -> float:
    if intensity is None:
        return 1.0
    return min(max(float(intensity), 0.0), 1.0)


def blend_intensity(sampled, original, intensity):
    """
    Mix the sampled color with the original by ``intensity``.

    Both inputs are normalized (..., 4) RGBA arrays. RGB becomes
    ``k*sampled + (1-k)*original``; alpha is always the original alpha.
    ``intensity`` 0 returns the original values exactly.
    """
    k = clamp_intensity(intensity)
    if k == 0.0:
        return original.copy()
    out = original.copy()
    if k == 1.0:
        out[..., :3] = sampled[..., :3]
    else:
        out[..., :3] = k * sampled[..., :3] + (1.0 - k) * original[..., :3]
    return out


def transform_pixels(pixels, table, intensity, xp=np):
    """
    Sample + blend a block of normalized RGBA pixels.

    Args:
        pixels: (..., 4) float32 RGBA in [0, 1], on the ``xp`` device.
        table: cube table on the ``xp`` device.
        intensity: blend factor in [0, 1].
    """
    sampled = trilinear_sample(table, pixels[..., :3] * 255.0, xp=xp)
    return blend_intensity(sampled, pixels, intensity)
