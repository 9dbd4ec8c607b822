"""Descriptive image analysis for display next to the automatic corrections.

Unlike ``autolut.histogram.stats``, which feeds the correction stages, this
module reports human-oriented figures: moments in 0-255 units, tonal zones,
HSL saturation and clipping counts.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np
from numpy.typing import ArrayLike

from autolut.constants import LUT1D_SIZE, REC709_WEIGHTS
from autolut.histogram.stats import first_level_exceeding
from autolut.lut.buffer import as_pixel_rows
from autolut.lut.kernels import hsl_saturation_numba

_LEVELS = np.arange(LUT1D_SIZE, dtype=np.float64)
_ZONES = ((0, 85), (86, 170), (171, 255))


class SceneKey(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


@dataclass(frozen=True)
class HistogramMoments:
    """Moments of a 256-bin histogram in 0-255 units."""

    mean: float = 0.0
    median: float = 0.0
    std_dev: float = 0.0
    skewness: float = 0.0


@dataclass(frozen=True)
class DynamicRange:
    """Spread of luminance between the 1% black and white points.

    Attributes:
        black_point: Darkest level after clipping 1% of pixels
        white_point: Brightest level after clipping 1% of pixels
        contrast_ratio: white_point / black_point (255 when black is 0)
        range: white_point - black_point
        key: Low, normal or high key from the mean luminance
        key_value: Mean luminance in [0, 1]
    """

    black_point: int
    white_point: int
    contrast_ratio: float
    range: int
    key: SceneKey
    key_value: float


@dataclass(frozen=True)
class ZoneStats:
    range: tuple[int, int]
    percentage: float
    mean: float


@dataclass(frozen=True)
class TonalZones:
    shadows: ZoneStats
    midtones: ZoneStats
    highlights: ZoneStats


@dataclass(frozen=True, eq=False)
class HslSaturation:
    """HSL saturation distribution (values in [0, 1])."""

    mean: float
    median: float
    std_dev: float
    histogram: np.ndarray


@dataclass(frozen=True)
class ChannelClipping:
    black: int
    white: int


@dataclass(frozen=True)
class ClippingInfo:
    """Pixels clipped on all channels at once, plus per-channel counts."""

    black_clipped: int
    black_clipped_percent: float
    white_clipped: int
    white_clipped_percent: float
    total_clipped_percent: float
    r: ChannelClipping
    g: ChannelClipping
    b: ChannelClipping


@dataclass(frozen=True)
class ImageAnalysis:
    luminance: HistogramMoments
    dynamic_range: DynamicRange
    tonal_zones: TonalZones
    saturation: HslSaturation
    clipping: ClippingInfo
    r: HistogramMoments
    g: HistogramMoments
    b: HistogramMoments


def histogram_moments(histogram: ArrayLike, total: float) -> HistogramMoments:
    """Mean, median, standard deviation and skewness of a histogram.

    :param histogram: Bin counts [256]
    :param total: Total count
    :returns: HistogramMoments (zeros when total is 0)
    """
    if total <= 0:
        return HistogramMoments()
    hist = np.asarray(histogram, dtype=np.float64)
    mean = float((_LEVELS * hist).sum() / total)
    median = float(np.argmax(np.cumsum(hist) >= total / 2.0))
    diff = _LEVELS - mean
    std_dev = float(np.sqrt((diff * diff * hist).sum() / total))
    skewness = float((diff**3 * hist).sum() / total / std_dev**3) if std_dev > 0 else 0.0
    return HistogramMoments(mean=mean, median=median, std_dev=std_dev, skewness=skewness)


def dynamic_range(luminance_histogram: ArrayLike, total: float, mean_luminance: float) -> DynamicRange:
    """Black point, white point and key of a luminance histogram."""
    threshold = total * 0.01
    black = first_level_exceeding(luminance_histogram, threshold, 0)
    white = first_level_exceeding(luminance_histogram, threshold, 255, reverse=True)

    if black > 0:
        contrast_ratio = white / black
    else:
        contrast_ratio = 255.0 if white > 0 else 1.0

    key_value = mean_luminance / 255.0
    if key_value < 0.35:
        key = SceneKey.LOW
    elif key_value > 0.65:
        key = SceneKey.HIGH
    else:
        key = SceneKey.NORMAL

    return DynamicRange(black, white, float(contrast_ratio), white - black, key, key_value)


def tonal_zones(luminance_histogram: ArrayLike, total: float) -> TonalZones:
    """Share and mean level of shadows (0-85), midtones (86-170) and highlights (171-255)."""
    hist = np.asarray(luminance_histogram, dtype=np.float64)
    zones = []
    for lo, hi in _ZONES:
        counts = hist[lo : hi + 1]
        count = counts.sum()
        mean = float((_LEVELS[lo : hi + 1] * counts).sum() / count) if count > 0 else (lo + hi) / 2.0
        zones.append(ZoneStats((lo, hi), float(count / total) if total > 0 else 0.0, mean))
    return TonalZones(*zones)


def hsl_saturation(rgb: np.ndarray) -> np.ndarray:
    """HSL saturation of byte colors.

    :param rgb: uint8 colors [n, 3]
    :returns: Saturation [n] in [0, 1]
    """
    rgb = np.ascontiguousarray(rgb, dtype=np.uint8)
    out = np.empty(rgb.shape[0], dtype=np.float64)
    hsl_saturation_numba(rgb, out)
    return out


def analyze_image(pixels: np.ndarray) -> ImageAnalysis:
    """Compute descriptive statistics of an RGBA8 buffer.

    :param pixels: uint8 array with last axis RGBA
    :returns: ImageAnalysis

    Example:
        >>> report = analyze_image(pixels)
        >>> report.dynamic_range.key
        <SceneKey.NORMAL: 'normal'>
    """
    rows, _ = as_pixel_rows(pixels)
    rgb = rows[:, :3]
    total = rgb.shape[0]

    channel_hists = [np.bincount(rgb[:, c], minlength=LUT1D_SIZE) for c in range(3)]
    levels = np.floor(rgb.astype(np.float64) @ REC709_WEIGHTS.astype(np.float64) + 0.5)
    lum_hist = np.bincount(np.clip(levels, 0, 255).astype(np.int64), minlength=LUT1D_SIZE)

    sat = hsl_saturation(rgb)
    sat_hist = np.bincount(
        np.clip(np.floor(sat * 255.0 + 0.5), 0, 255).astype(np.int64), minlength=LUT1D_SIZE
    )
    if total > 0:
        saturation = HslSaturation(
            mean=float(sat.mean()),
            median=float(np.median(sat)),
            std_dev=float(sat.std()),
            histogram=sat_hist,
        )
    else:
        saturation = HslSaturation(0.0, 0.0, 0.0, sat_hist)

    black = int(np.all(rgb == 0, axis=1).sum())
    white = int(np.all(rgb == 255, axis=1).sum())
    per_channel = [ChannelClipping(int((rgb[:, c] == 0).sum()), int((rgb[:, c] == 255).sum())) for c in range(3)]
    denom = total if total > 0 else 1
    clipping = ClippingInfo(
        black_clipped=black,
        black_clipped_percent=black / denom,
        white_clipped=white,
        white_clipped_percent=white / denom,
        total_clipped_percent=(black + white) / denom,
        r=per_channel[0],
        g=per_channel[1],
        b=per_channel[2],
    )

    luminance = histogram_moments(lum_hist, total)
    return ImageAnalysis(
        luminance=luminance,
        dynamic_range=dynamic_range(lum_hist, total, luminance.mean),
        tonal_zones=tonal_zones(lum_hist, total),
        saturation=saturation,
        clipping=clipping,
        r=histogram_moments(channel_hists[0], total),
        g=histogram_moments(channel_hists[1], total),
        b=histogram_moments(channel_hists[2], total),
    )
