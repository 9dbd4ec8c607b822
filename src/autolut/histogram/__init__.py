"""Image statistics: histograms, correction stats and descriptive analysis."""

from autolut.histogram.analysis import ImageAnalysis, SceneKey, analyze_image
from autolut.histogram.stats import (
    AutoCorrectionStats,
    HistogramData,
    ImageClassification,
    LuminanceStats,
    NeutralConfidence,
    NeutralStats,
    SaturationStats,
    analyze,
    analyze_from_histogram,
    classify,
    compute_histograms,
    compute_luminance_stats,
    compute_neutral_stats,
    compute_saturation_stats,
    estimate_stats,
    histogram_percentile,
)

__all__ = [
    "AutoCorrectionStats",
    "HistogramData",
    "ImageClassification",
    "LuminanceStats",
    "NeutralConfidence",
    "NeutralStats",
    "SaturationStats",
    "analyze",
    "analyze_from_histogram",
    "classify",
    "compute_histograms",
    "compute_luminance_stats",
    "compute_neutral_stats",
    "compute_saturation_stats",
    "estimate_stats",
    "histogram_percentile",
    "ImageAnalysis",
    "SceneKey",
    "analyze_image",
]
