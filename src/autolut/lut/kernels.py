"""Numba-optimized kernels for LUT lookup, application and 3D grid generation.

Lut3D data is a flat float32 array indexed ``(r + g*N + b*N*N) * 3``. Pixel
buffers are flattened to ``[n_pixels, 4]`` uint8 before reaching a kernel.
"""

from __future__ import annotations

import math

import numpy as np
from numba import njit, prange
from numpy.typing import NDArray

from autolut.lut.colorspace import hsl_to_rgb, hue_difference, rgb_to_hsl, round_level

# =============================================================================
# Scalar helpers
# =============================================================================


@njit(cache=True, nogil=True)
def clamp01(x: float) -> float:
    if x < 0.0:
        return 0.0
    if x > 1.0:
        return 1.0
    return x


@njit(cache=True, nogil=True)
def smoothstep(edge0: float, edge1: float, x: float) -> float:
    """Hermite smoothstep, a step function when both edges coincide."""
    if edge1 <= edge0:
        return 0.0 if x < edge0 else 1.0
    t = clamp01((x - edge0) / (edge1 - edge0))
    return t * t * (3.0 - 2.0 * t)


@njit(cache=True, nogil=True)
def trilinear_lookup(
    data: NDArray[np.float32], size: int, r: float, g: float, b: float
) -> tuple[float, float, float]:
    """Trilinear lookup of one RGB triple (inputs clamped to [0, 1]).

    Interpolates along R, then G, then B. Exact at grid coordinates.
    """
    max_idx = size - 1
    rs = clamp01(r) * max_idx
    gs = clamp01(g) * max_idx
    bs = clamp01(b) * max_idx

    r0 = int(math.floor(rs))
    g0 = int(math.floor(gs))
    b0 = int(math.floor(bs))
    r1 = min(r0 + 1, max_idx)
    g1 = min(g0 + 1, max_idx)
    b1 = min(b0 + 1, max_idx)
    rt = rs - r0
    gt = gs - g0
    bt = bs - b0

    stride_g = size
    stride_b = size * size
    i000 = (r0 + g0 * stride_g + b0 * stride_b) * 3
    i100 = (r1 + g0 * stride_g + b0 * stride_b) * 3
    i010 = (r0 + g1 * stride_g + b0 * stride_b) * 3
    i110 = (r1 + g1 * stride_g + b0 * stride_b) * 3
    i001 = (r0 + g0 * stride_g + b1 * stride_b) * 3
    i101 = (r1 + g0 * stride_g + b1 * stride_b) * 3
    i011 = (r0 + g1 * stride_g + b1 * stride_b) * 3
    i111 = (r1 + g1 * stride_g + b1 * stride_b) * 3

    out0 = 0.0
    out1 = 0.0
    out2 = 0.0
    for c in range(3):
        c00 = data[i000 + c] + (data[i100 + c] - data[i000 + c]) * rt
        c01 = data[i001 + c] + (data[i101 + c] - data[i001 + c]) * rt
        c10 = data[i010 + c] + (data[i110 + c] - data[i010 + c]) * rt
        c11 = data[i011 + c] + (data[i111 + c] - data[i011 + c]) * rt
        c0 = c00 + (c10 - c00) * gt
        c1 = c01 + (c11 - c01) * gt
        v = c0 + (c1 - c0) * bt
        if c == 0:
            out0 = v
        elif c == 1:
            out1 = v
        else:
            out2 = v
    return out0, out1, out2


# =============================================================================
# Lookup / application kernels
# =============================================================================


@njit(parallel=True, cache=True, nogil=True)
def lookup_many_numba(
    rgb: NDArray[np.float32],
    data: NDArray[np.float32],
    size: int,
    out: NDArray[np.float32],
) -> None:
    """Trilinear lookup for many RGB triples.

    :param rgb: Input colors [N, 3] in [0, 1]
    :param data: Flat Lut3D data [size^3 * 3]
    :param size: Grid size
    :param out: Output colors [N, 3]
    """
    n = rgb.shape[0]
    for i in prange(n):
        r, g, b = trilinear_lookup(data, size, rgb[i, 0], rgb[i, 1], rgb[i, 2])
        out[i, 0] = r
        out[i, 1] = g
        out[i, 2] = b


@njit(parallel=True, cache=True, nogil=True)
def apply_lut1d_numba(
    pixels: NDArray[np.uint8],
    table: NDArray[np.uint8],
    out: NDArray[np.uint8],
) -> None:
    """Map RGB through a byte table, copying alpha.

    :param pixels: Input pixels [N, 4]
    :param table: Pre-rounded output levels [256, 3]
    :param out: Output pixels [N, 4]
    """
    n = pixels.shape[0]
    for i in prange(n):
        out[i, 0] = table[pixels[i, 0], 0]
        out[i, 1] = table[pixels[i, 1], 1]
        out[i, 2] = table[pixels[i, 2], 2]
        out[i, 3] = pixels[i, 3]


@njit(parallel=True, cache=True, nogil=True)
def apply_lut3d_numba(
    pixels: NDArray[np.uint8],
    data: NDArray[np.float32],
    size: int,
    out: NDArray[np.uint8],
) -> None:
    """Map RGB through a 3D LUT with trilinear interpolation, copying alpha.

    :param pixels: Input pixels [N, 4]
    :param data: Flat Lut3D data [size^3 * 3]
    :param size: Grid size
    :param out: Output pixels [N, 4]
    """
    n = pixels.shape[0]
    for i in prange(n):
        r, g, b = trilinear_lookup(
            data, size, pixels[i, 0] / 255.0, pixels[i, 1] / 255.0, pixels[i, 2] / 255.0
        )
        out[i, 0] = round_level(r * 255.0)
        out[i, 1] = round_level(g * 255.0)
        out[i, 2] = round_level(b * 255.0)
        out[i, 3] = pixels[i, 3]


@njit(parallel=True, cache=True, nogil=True)
def hsl_saturation_numba(rgb: NDArray[np.uint8], out: NDArray[np.float64]) -> None:
    """HSL saturation of byte colors.

    :param rgb: Input colors [N, 3]
    :param out: Saturation [N] in [0, 1]
    """
    n = rgb.shape[0]
    for i in prange(n):
        _, sat, _ = rgb_to_hsl(rgb[i, 0] / 255.0, rgb[i, 1] / 255.0, rgb[i, 2] / 255.0)
        out[i] = sat


# =============================================================================
# Per-pixel effects
# =============================================================================


@njit(parallel=True, cache=True, nogil=True)
def apply_effects_numba(
    levels: NDArray[np.uint8],
    selective_enabled: bool,
    selective_hue: float,
    selective_range: float,
    selective_desaturate: float,
    posterize_table: NDArray[np.uint8],
    hue_rotation: float,
    vibrance: float,
    out: NDArray[np.uint8],
) -> None:
    """Apply the fixed effect chain to LUT-mapped pixels.

    Order: selective color, posterize, hue rotation, vibrance.

    :param levels: LUT-mapped pixels [N, 4]
    :param selective_enabled: Desaturate hues outside the selected range
    :param selective_hue: Kept hue in degrees
    :param selective_range: Half-width of the kept hue band in degrees
    :param selective_desaturate: 0 turns other hues gray, 1 keeps them
    :param posterize_table: Level table [256], or empty to skip
    :param hue_rotation: Degrees to rotate (skipped when ~0)
    :param vibrance: Vibrance amount (skipped when ~0)
    :param out: Output pixels [N, 4]
    """
    n = levels.shape[0]
    do_posterize = posterize_table.shape[0] == 256
    do_rotate = abs(hue_rotation) > 0.001
    do_vibrance = abs(vibrance) > 0.001

    for i in prange(n):
        r = int(levels[i, 0])
        g = int(levels[i, 1])
        b = int(levels[i, 2])

        if selective_enabled:
            h, _, _ = rgb_to_hsl(r / 255.0, g / 255.0, b / 255.0)
            diff = hue_difference(h, selective_hue)
            amount = 1.0
            if diff > selective_range:
                amount = selective_desaturate
            elif diff > selective_range * 0.7:
                edge_t = (diff - selective_range * 0.7) / (selective_range * 0.3)
                amount = selective_desaturate + (1.0 - selective_desaturate) * (1.0 - edge_t)
            if amount != 1.0:
                gray = round_level(r * 0.2126 + g * 0.7152 + b * 0.0722)
                r = round_level(gray + (r - gray) * amount)
                g = round_level(gray + (g - gray) * amount)
                b = round_level(gray + (b - gray) * amount)

        if do_posterize:
            r = int(posterize_table[r])
            g = int(posterize_table[g])
            b = int(posterize_table[b])

        if do_rotate:
            h, s, lightness = rgb_to_hsl(r / 255.0, g / 255.0, b / 255.0)
            h = (h + hue_rotation + 360.0) % 360.0
            rf, gf, bf = hsl_to_rgb(h, s, lightness)
            r = round_level(rf * 255.0)
            g = round_level(gf * 255.0)
            b = round_level(bf * 255.0)

        if do_vibrance:
            max_c = max(r, g, b)
            min_c = min(r, g, b)
            if max_c > 0:
                sat = (max_c - min_c) / max_c
                factor = (1.0 - sat) * (1.0 - sat)
                scale = 1.0 + vibrance * factor * 0.5
                gray_f = (r + g + b) / 3.0
                r = round_level(gray_f + (r - gray_f) * scale)
                g = round_level(gray_f + (g - gray_f) * scale)
                b = round_level(gray_f + (b - gray_f) * scale)

        out[i, 0] = r
        out[i, 1] = g
        out[i, 2] = b
        out[i, 3] = levels[i, 3]


# =============================================================================
# 3D grid generation
# =============================================================================


@njit(parallel=True, cache=True, nogil=True)
def saturation_compress_grid_numba(
    size: int,
    compression: float,
    sat_lo: float,
    sat_hi: float,
    out: NDArray[np.float32],
) -> None:
    """Pull saturated cells toward their Rec.709 gray.

    The pull is ``compression * smoothstep(sat_lo, sat_hi, max - min)``.

    :param size: Grid size
    :param compression: Compression amount in [0, 1]
    :param sat_lo: Proxy where the pull starts
    :param sat_hi: Proxy where the pull is full
    :param out: Flat output data [size^3 * 3]
    """
    max_idx = size - 1
    cells = size * size * size
    for i in prange(cells):
        r = (i % size) / max_idx
        g = ((i // size) % size) / max_idx
        b = (i // (size * size)) / max_idx

        proxy = max(r, g, b) - min(r, g, b)
        t = compression * smoothstep(sat_lo, sat_hi, proxy)
        y = 0.2126 * r + 0.7152 * g + 0.0722 * b

        out[i * 3] = clamp01(r + (y - r) * t)
        out[i * 3 + 1] = clamp01(g + (y - g) * t)
        out[i * 3 + 2] = clamp01(b + (y - b) * t)


@njit(parallel=True, cache=True, nogil=True)
def hue_shift_grid_numba(
    size: int,
    source_hue: float,
    target_hue: float,
    hue_range: float,
    strength: float,
    out: NDArray[np.float32],
) -> None:
    """Rotate hues near ``source_hue`` toward ``target_hue`` with linear falloff."""
    max_idx = size - 1
    cells = size * size * size
    shift = ((target_hue - source_hue + 540.0) % 360.0) - 180.0
    for i in prange(cells):
        r = (i % size) / max_idx
        g = ((i // size) % size) / max_idx
        b = (i // (size * size)) / max_idx

        h, s, lightness = rgb_to_hsl(r, g, b)
        diff = abs(((h - source_hue + 540.0) % 360.0) - 180.0)
        if diff < hue_range:
            factor = (1.0 - diff / hue_range) * strength
            h = (h + shift * factor + 360.0) % 360.0
            r, g, b = hsl_to_rgb(h, s, lightness)

        out[i * 3] = r
        out[i * 3 + 1] = g
        out[i * 3 + 2] = b


@njit(parallel=True, cache=True, nogil=True)
def hue_saturation_grid_numba(
    size: int,
    hue: float,
    boost: float,
    hue_range: float,
    out: NDArray[np.float32],
) -> None:
    """Add ``boost`` to the HSL saturation of hues near ``hue``."""
    max_idx = size - 1
    cells = size * size * size
    for i in prange(cells):
        r = (i % size) / max_idx
        g = ((i // size) % size) / max_idx
        b = (i // (size * size)) / max_idx

        h, s, lightness = rgb_to_hsl(r, g, b)
        diff = abs(((h - hue + 540.0) % 360.0) - 180.0)
        if diff < hue_range:
            factor = 1.0 - diff / hue_range
            s = clamp01(s + boost * factor)
            r, g, b = hsl_to_rgb(h, s, lightness)

        out[i * 3] = r
        out[i * 3 + 1] = g
        out[i * 3 + 2] = b
