"""Numba-optimized statistics accumulation over RGBA8 pixels."""

from __future__ import annotations

import math

import numpy as np
from numba import njit
from numpy.typing import NDArray


# Not using parallel=True because histogram accumulation has race conditions
@njit(cache=True, nogil=True)
def accumulate_stats_numba(
    pixels: NDArray[np.uint8],
    mid_lo_bin: int,
    mid_hi_bin: int,
    neutral_y_lo: float,
    neutral_y_hi: float,
    neutral_chroma: float,
    lum_hist: NDArray[np.int64],
    sat_hist: NDArray[np.int64],
    channel_hist: NDArray[np.int64],
    neutral_mask: NDArray[np.bool_],
) -> tuple[int, float]:
    """Single pass accumulating every histogram the analyzer needs.

    Luminance uses Rec.709 weights and is binned by rounding half up.
    The saturation proxy is ``max(r, g, b) - min(r, g, b)``.

    :param pixels: Input pixels [N, 4]
    :param mid_lo_bin: First luminance bin of the mid-tone band
    :param mid_hi_bin: Last luminance bin of the mid-tone band (inclusive)
    :param neutral_y_lo: Minimum luminance of a neutral candidate
    :param neutral_y_hi: Maximum luminance of a neutral candidate
    :param neutral_chroma: Proxy below which a pixel is a neutral candidate
    :param lum_hist: Output luminance histogram [256]
    :param sat_hist: Output saturation proxy histogram [256]
    :param channel_hist: Output per-channel histograms [3, 256]
    :param neutral_mask: Output flag per pixel [N]
    :returns: Tuple of (mid-tone pixel count, sum of saturation proxy)
    """
    n = pixels.shape[0]
    mid_count = 0
    sat_sum = 0.0

    for i in range(n):
        ri = pixels[i, 0]
        gi = pixels[i, 1]
        bi = pixels[i, 2]
        channel_hist[0, ri] += 1
        channel_hist[1, gi] += 1
        channel_hist[2, bi] += 1

        r = ri / 255.0
        g = gi / 255.0
        b = bi / 255.0

        y = 0.2126 * r + 0.7152 * g + 0.0722 * b
        y_bin = int(math.floor(y * 255.0 + 0.5))
        lum_hist[max(0, min(255, y_bin))] += 1
        if mid_lo_bin <= y_bin <= mid_hi_bin:
            mid_count += 1

        proxy = max(r, g, b) - min(r, g, b)
        sat_bin = int(math.floor(proxy * 255.0 + 0.5))
        sat_hist[max(0, min(255, sat_bin))] += 1
        sat_sum += proxy

        neutral_mask[i] = neutral_y_lo <= y <= neutral_y_hi and proxy < neutral_chroma

    return mid_count, sat_sum


@njit(cache=True, nogil=True)
def histogram_percentile_numba(hist: NDArray[np.int64], total: float, p: float) -> float:
    """First bin whose cumulative count reaches ``total * p``, as bin/255.

    Returns 1.0 when no bin reaches the target.
    """
    target = total * p
    cumulative = 0.0
    for i in range(hist.shape[0]):
        cumulative += hist[i]
        if cumulative >= target:
            return i / 255.0
    return 1.0
