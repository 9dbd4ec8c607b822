"""Scalar HSL conversions shared by the LUT generators and per-pixel effects.

All functions are Numba-compiled so they can be called from other kernels.
Channel values are in [0, 1], hue is in degrees [0, 360).
"""

from __future__ import annotations

import math

from numba import njit


@njit(cache=True, nogil=True)
def rgb_to_hsl(r: float, g: float, b: float) -> tuple[float, float, float]:
    """Convert RGB in [0, 1] to (hue degrees, saturation, lightness)."""
    max_c = max(r, g, b)
    min_c = min(r, g, b)
    lightness = (max_c + min_c) / 2.0
    hue = 0.0
    sat = 0.0

    if max_c != min_c:
        d = max_c - min_c
        if lightness > 0.5:
            sat = d / (2.0 - max_c - min_c)
        else:
            sat = d / (max_c + min_c)

        if max_c == r:
            hue = (g - b) / d + (6.0 if g < b else 0.0)
        elif max_c == g:
            hue = (b - r) / d + 2.0
        else:
            hue = (r - g) / d + 4.0
        hue /= 6.0

    return hue * 360.0, sat, lightness


@njit(cache=True, nogil=True)
def _hue_to_channel(p: float, q: float, t: float) -> float:
    if t < 0.0:
        t += 1.0
    if t > 1.0:
        t -= 1.0
    if t < 1.0 / 6.0:
        return p + (q - p) * 6.0 * t
    if t < 0.5:
        return q
    if t < 2.0 / 3.0:
        return p + (q - p) * (2.0 / 3.0 - t) * 6.0
    return p


@njit(cache=True, nogil=True)
def hsl_to_rgb(hue: float, sat: float, lightness: float) -> tuple[float, float, float]:
    """Convert (hue degrees, saturation, lightness) to RGB in [0, 1]."""
    if sat == 0.0:
        return lightness, lightness, lightness

    h = hue / 360.0
    if lightness < 0.5:
        q = lightness * (1.0 + sat)
    else:
        q = lightness + sat - lightness * sat
    p = 2.0 * lightness - q
    return (
        _hue_to_channel(p, q, h + 1.0 / 3.0),
        _hue_to_channel(p, q, h),
        _hue_to_channel(p, q, h - 1.0 / 3.0),
    )


@njit(cache=True, nogil=True)
def hue_difference(a: float, b: float) -> float:
    """Shortest angular distance between two hues, in [0, 180]."""
    d = math.fabs(a - b) % 360.0
    if d > 180.0:
        return 360.0 - d
    return d


@njit(cache=True, nogil=True)
def round_level(value: float) -> int:
    """Round a 0-255 value half up and clamp it to a byte."""
    level = int(math.floor(value + 0.5))
    if level < 0:
        return 0
    if level > 255:
        return 255
    return level
