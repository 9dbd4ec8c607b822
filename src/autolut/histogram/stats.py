"""Image statistics driving the automatic corrections.

The analyzer turns an RGBA8 buffer, or precomputed per-channel histograms,
into luminance percentiles, a neutral (gray) pixel estimate, a saturation
proxy distribution and a coarse scene classification. Degenerate input never
raises: an empty image yields the neutral defaults of ``AutoCorrectionStats.empty()``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

import numpy as np
from numpy.typing import ArrayLike

from autolut.config.params import AnalysisParams
from autolut.constants import LUT1D_SIZE, REC709_B, REC709_G, REC709_R
from autolut.histogram.kernels import accumulate_stats_numba, histogram_percentile_numba
from autolut.lut.buffer import as_pixel_rows

logger = logging.getLogger(__name__)

_LUMINANCE_PERCENTILES = (0.01, 0.10, 0.50, 0.90, 0.99)


class NeutralConfidence(str, Enum):
    """How much the neutral estimate can be trusted."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"


# =============================================================================
# Result types
# =============================================================================


@dataclass(frozen=True)
class LuminanceStats:
    """Luminance percentiles and clip ratios, all normalized to [0, 1].

    Attributes:
        p01, p10, p50, p90, p99: Luminance percentiles
        clip_black: Fraction of pixels at or below the black clip level
        clip_white: Fraction of pixels at or above the white clip level
        range: p90 - p10
        mid_ratio: Fraction of pixels in the mid-tone band
    """

    p01: float = 0.0
    p10: float = 0.0
    p50: float = 0.5
    p90: float = 1.0
    p99: float = 1.0
    clip_black: float = 0.0
    clip_white: float = 0.0
    range: float = 1.0
    mid_ratio: float = 0.4

    @classmethod
    def empty(cls) -> LuminanceStats:
        return cls()

    @property
    def total_clip(self) -> float:
        return self.clip_black + self.clip_white


@dataclass(frozen=True)
class ImageClassification:
    """Scene flags derived from luminance statistics."""

    is_low_key: bool = False
    is_high_key: bool = False
    is_low_contrast: bool = False
    is_high_contrast: bool = False
    has_significant_clipping: bool = False
    is_extreme_scene: bool = False


@dataclass(frozen=True)
class NeutralStats:
    """Near-gray candidate pixels used to estimate a color cast.

    Attributes:
        count: Number of candidates
        ratio: Candidates over total pixels
        median_rgb: Per-channel median of the candidates in [0, 1]
        confidence: Tier derived from ``ratio``
    """

    count: int = 0
    ratio: float = 0.0
    median_rgb: tuple[float, float, float] = (1.0, 1.0, 1.0)
    confidence: NeutralConfidence = NeutralConfidence.NONE

    @classmethod
    def empty(cls) -> NeutralStats:
        return cls()


@dataclass(frozen=True)
class SaturationStats:
    """Distribution of the ``max - min`` saturation proxy."""

    p95_proxy: float = 0.0
    p99_proxy: float = 0.0
    mean_proxy: float = 0.0

    @classmethod
    def empty(cls) -> SaturationStats:
        return cls()


@dataclass(frozen=True)
class AutoCorrectionStats:
    """Everything the correction stages read from an image."""

    luminance: LuminanceStats = field(default_factory=LuminanceStats)
    neutral: NeutralStats = field(default_factory=NeutralStats)
    saturation: SaturationStats = field(default_factory=SaturationStats)
    classification: ImageClassification = field(default_factory=ImageClassification)

    @classmethod
    def empty(cls) -> AutoCorrectionStats:
        """Neutral defaults for an image with no pixels."""
        return cls()


# =============================================================================
# Histogram input
# =============================================================================


def _histogram(values: ArrayLike, name: str) -> np.ndarray:
    arr = np.asarray(values, dtype=np.float64).reshape(-1)
    if arr.shape[0] != LUT1D_SIZE:
        raise ValueError(f"{name} histogram must have {LUT1D_SIZE} bins, got {arr.shape[0]}")
    arr = arr.copy()
    arr.flags.writeable = False
    return arr


@dataclass(frozen=True, eq=False)
class HistogramData:
    """Per-channel 256-bin counts plus an optional luminance histogram.

    When ``luminance`` is omitted, it is approximated by mixing the channel
    histograms with Rec.709 weights. The mixture has the right total and
    is exact for gray images, but it cannot see cross-channel structure.
    """

    r: np.ndarray
    g: np.ndarray
    b: np.ndarray
    luminance: np.ndarray | None = None

    def __post_init__(self):
        object.__setattr__(self, "r", _histogram(self.r, "r"))
        object.__setattr__(self, "g", _histogram(self.g, "g"))
        object.__setattr__(self, "b", _histogram(self.b, "b"))
        if self.luminance is not None:
            object.__setattr__(self, "luminance", _histogram(self.luminance, "luminance"))

    @property
    def total(self) -> float:
        return float(self.g.sum())

    def luminance_histogram(self) -> np.ndarray:
        """Luminance histogram, approximated from channels when absent."""
        if self.luminance is not None:
            return self.luminance
        return REC709_R * self.r + REC709_G * self.g + REC709_B * self.b


def compute_histograms(pixels: np.ndarray) -> HistogramData:
    """Compute channel and luminance histograms of an RGBA8 buffer.

    :param pixels: uint8 array with last axis RGBA
    :returns: HistogramData with luminance filled in
    """
    rows, _ = as_pixel_rows(pixels)
    params = AnalysisParams()
    lum_hist, _, channel_hist, _, _, _ = _accumulate(rows, params)
    return HistogramData(channel_hist[0], channel_hist[1], channel_hist[2], lum_hist)


# =============================================================================
# Statistics
# =============================================================================


def histogram_percentile(histogram: ArrayLike, p: float) -> float:
    """Percentile of a 256-bin histogram, as first bin reaching ``total * p`` over 255.

    :param histogram: Bin counts [256]
    :param p: Fraction in [0, 1]
    :returns: Percentile in [0, 1]
    """
    hist = np.ascontiguousarray(histogram, dtype=np.float64)
    return float(histogram_percentile_numba(hist, float(hist.sum()), float(p)))


def first_level_exceeding(
    histogram: ArrayLike, threshold: float, default: int, reverse: bool = False
) -> int:
    """First occupied level where the running count exceeds ``threshold``.

    :param histogram: Bin counts [256]
    :param threshold: Count the running sum must exceed
    :param default: Level returned when no bin qualifies
    :param reverse: Scan from level 255 down instead of from 0 up
    :returns: Level index
    """
    hist = np.asarray(histogram, dtype=np.float64).reshape(-1)
    scan = hist[::-1] if reverse else hist
    # Only occupied bins can end the scan
    hits = np.nonzero((scan > 0) & (np.cumsum(scan) > threshold))[0]
    if not hits.size:
        return default
    index = int(hits[0])
    return hist.size - 1 - index if reverse else index


def _level_bin(value: float) -> int:
    return int(np.floor(value * 255.0 + 0.5))


def compute_luminance_stats(
    histogram: ArrayLike,
    total: float,
    mid_count: float,
    params: AnalysisParams | None = None,
) -> LuminanceStats:
    """Read percentiles, clip ratios and mid ratio off a luminance histogram.

    :param histogram: Luminance counts [256]
    :param total: Total pixel count
    :param mid_count: Pixels in the mid-tone band
    :param params: Analysis thresholds
    :returns: LuminanceStats (defaults when total is 0)
    """
    params = params or AnalysisParams()
    if total <= 0:
        return LuminanceStats.empty()

    hist = np.ascontiguousarray(histogram, dtype=np.float64)
    p01, p10, p50, p90, p99 = (
        float(histogram_percentile_numba(hist, float(total), p)) for p in _LUMINANCE_PERCENTILES
    )

    black_bin = _level_bin(params.black_clip)
    white_bin = _level_bin(params.white_clip)
    clip_black = float(hist[: black_bin + 1].sum()) / total
    clip_white = float(hist[white_bin:].sum()) / total

    return LuminanceStats(
        p01=p01,
        p10=p10,
        p50=p50,
        p90=p90,
        p99=p99,
        clip_black=clip_black,
        clip_white=clip_white,
        range=p90 - p10,
        mid_ratio=float(mid_count) / total,
    )


def confidence_for_ratio(ratio: float) -> NeutralConfidence:
    """Map a neutral candidate ratio to a confidence tier."""
    if ratio >= 0.05:
        return NeutralConfidence.HIGH
    if ratio >= 0.02:
        return NeutralConfidence.MEDIUM
    if ratio >= 0.005:
        return NeutralConfidence.LOW
    return NeutralConfidence.NONE


def compute_neutral_stats(candidates: ArrayLike, total_pixels: int) -> NeutralStats:
    """Median color of the neutral candidates.

    The median is the element at index ``count // 2`` of each sorted channel.

    :param candidates: Candidate colors [n, 3] in [0, 1]
    :param total_pixels: Pixel count of the image
    :returns: NeutralStats (white, confidence none, when there are no candidates)
    """
    candidates = np.asarray(candidates, dtype=np.float64).reshape(-1, 3)
    count = candidates.shape[0]
    if count == 0 or total_pixels <= 0:
        return NeutralStats.empty()

    ratio = count / total_pixels
    mid = count // 2
    ordered = np.sort(candidates, axis=0)
    median_rgb = (float(ordered[mid, 0]), float(ordered[mid, 1]), float(ordered[mid, 2]))
    return NeutralStats(
        count=int(count),
        ratio=float(ratio),
        median_rgb=median_rgb,
        confidence=confidence_for_ratio(ratio),
    )


def compute_saturation_stats(histogram: ArrayLike, total: float, sum_proxy: float) -> SaturationStats:
    """Percentiles and mean of the saturation proxy.

    :param histogram: Proxy counts [256]
    :param total: Total pixel count
    :param sum_proxy: Sum of the proxy over all pixels
    :returns: SaturationStats (zeros when total is 0)
    """
    if total <= 0:
        return SaturationStats.empty()
    hist = np.ascontiguousarray(histogram, dtype=np.float64)
    return SaturationStats(
        p95_proxy=float(histogram_percentile_numba(hist, float(total), 0.95)),
        p99_proxy=float(histogram_percentile_numba(hist, float(total), 0.99)),
        mean_proxy=float(sum_proxy) / total,
    )


def classify(luminance: LuminanceStats) -> ImageClassification:
    """Derive scene flags from luminance statistics."""
    total_clip = luminance.total_clip
    return ImageClassification(
        is_low_key=luminance.p50 < 0.25 and luminance.p90 < 0.55,
        is_high_key=luminance.p50 > 0.75 and luminance.p10 > 0.45,
        is_low_contrast=luminance.range < 0.25,
        is_high_contrast=luminance.range > 0.75 or total_clip > 0.05,
        has_significant_clipping=total_clip > 0.05,
        is_extreme_scene=luminance.mid_ratio < 0.2 or total_clip > 0.1,
    )


def _accumulate(rows: np.ndarray, params: AnalysisParams):
    n = rows.shape[0]
    lum_hist = np.zeros(LUT1D_SIZE, dtype=np.int64)
    sat_hist = np.zeros(LUT1D_SIZE, dtype=np.int64)
    channel_hist = np.zeros((3, LUT1D_SIZE), dtype=np.int64)
    neutral_mask = np.zeros(n, dtype=np.bool_)
    mid_count, sat_sum = accumulate_stats_numba(
        rows,
        _level_bin(params.mid_lo),
        _level_bin(params.mid_hi),
        float(params.neutral_y_lo),
        float(params.neutral_y_hi),
        float(params.neutral_chroma_thresh),
        lum_hist,
        sat_hist,
        channel_hist,
        neutral_mask,
    )
    return lum_hist, sat_hist, channel_hist, neutral_mask, int(mid_count), float(sat_sum)


def analyze(
    pixels: np.ndarray,
    params: AnalysisParams | Mapping[str, float] | None = None,
) -> AutoCorrectionStats:
    """Analyze an RGBA8 buffer in a single pass.

    :param pixels: uint8 array with last axis RGBA (alpha ignored)
    :param params: Analysis thresholds or partial overrides
    :returns: AutoCorrectionStats

    Example:
        >>> stats = analyze(pixels)
        >>> stats.luminance.p50, stats.neutral.confidence
        (0.447, <NeutralConfidence.HIGH: 'high'>)
    """
    params = AnalysisParams.resolve(params)
    rows, _ = as_pixel_rows(pixels)
    total = rows.shape[0]
    if total == 0:
        logger.debug("[Stats] Empty image, using neutral defaults")
        return AutoCorrectionStats.empty()

    lum_hist, sat_hist, _, neutral_mask, mid_count, sat_sum = _accumulate(rows, params)

    luminance = compute_luminance_stats(lum_hist, total, mid_count, params)
    candidates = rows[neutral_mask, :3].astype(np.float64) / 255.0
    neutral = compute_neutral_stats(candidates, total)
    saturation = compute_saturation_stats(sat_hist, total, sat_sum)
    classification = classify(luminance)

    logger.debug(
        "[Stats] p50=%.3f range=%.3f mid=%.3f neutral=%.3f (%s) sat95=%.3f",
        luminance.p50,
        luminance.range,
        luminance.mid_ratio,
        neutral.ratio,
        neutral.confidence.value,
        saturation.p95_proxy,
    )
    return AutoCorrectionStats(luminance, neutral, saturation, classification)


def analyze_from_histogram(
    luminance_histogram: ArrayLike,
    params: AnalysisParams | Mapping[str, float] | None = None,
) -> tuple[LuminanceStats, ImageClassification]:
    """Luminance statistics and classification from a luminance histogram alone.

    :param luminance_histogram: Counts [256]
    :param params: Analysis thresholds or partial overrides
    :returns: Tuple of (LuminanceStats, ImageClassification)
    """
    params = AnalysisParams.resolve(params)
    hist = np.asarray(luminance_histogram, dtype=np.float64).reshape(-1)
    total = float(hist.sum())
    mid_count = float(hist[_level_bin(params.mid_lo) : _level_bin(params.mid_hi) + 1].sum())
    luminance = compute_luminance_stats(hist, total, mid_count, params)
    return luminance, classify(luminance)


def estimate_neutral_stats(histogram: HistogramData) -> NeutralStats:
    """Estimate the neutral color from per-channel medians.

    Individual pixels are not available, so the estimate uses a fixed
    medium confidence with a nominal ratio of 0.1.
    """
    if histogram.total <= 0:
        return NeutralStats.empty()
    median_rgb = (
        histogram_percentile(histogram.r, 0.5),
        histogram_percentile(histogram.g, 0.5),
        histogram_percentile(histogram.b, 0.5),
    )
    return NeutralStats(
        count=1000,
        ratio=0.1,
        median_rgb=median_rgb,
        confidence=NeutralConfidence.MEDIUM,
    )


def estimate_saturation_stats(histogram: HistogramData) -> SaturationStats:
    """Estimate the saturation proxy from the spread of channel percentiles."""
    if histogram.total <= 0:
        return SaturationStats.empty()

    def spread(p: float) -> float:
        values = [histogram_percentile(h, p) for h in (histogram.r, histogram.g, histogram.b)]
        return max(values) - min(values)

    return SaturationStats(p95_proxy=spread(0.95), p99_proxy=spread(0.99), mean_proxy=spread(0.5))


def estimate_stats(
    histogram: HistogramData,
    params: AnalysisParams | Mapping[str, float] | None = None,
) -> AutoCorrectionStats:
    """Full statistics from histograms when the pixels themselves are unavailable.

    :param histogram: Channel (and optionally luminance) histograms
    :param params: Analysis thresholds or partial overrides
    :returns: AutoCorrectionStats
    """
    luminance, classification = analyze_from_histogram(histogram.luminance_histogram(), params)
    return AutoCorrectionStats(
        luminance=luminance,
        neutral=estimate_neutral_stats(histogram),
        saturation=estimate_saturation_stats(histogram),
        classification=classification,
    )
