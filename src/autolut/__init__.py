"""
autolut - Automatic color correction with lookup tables

Analyzes an image's histograms and builds guarded Exposure, Contrast,
White Balance and Saturation corrections, each expressed as a 1D or 3D LUT
that composes into a single table for rendering.

Features:
- Lut1D / Lut3D value types with functional composition and trilinear lookup
- One-pass Numba image statistics (luminance percentiles, neutral estimate, saturation proxy)
- Guards that scale corrections down for low-key, high-key, clipped or flat scenes
- Two-phase orchestrator producing one Lut3D
- Tone profiles and histogram matching
- Stage pipeline with enable/intensity controls and partial composition for previews
- Creative 3D LUT generators (hue shift, duotone, color matrix, temperature)

Example - Automatic correction:
    >>> from autolut import AutoCorrection
    >>>
    >>> auto = AutoCorrection()
    >>> result = auto.compute_from_pixels(pixels)       # (H, W, 4) uint8
    >>> lut = AutoCorrection.to_lut3d(result, size=33)
    >>> corrected = lut.apply(pixels)

Example - Manual stages:
    >>> from autolut import Pipeline, Stage, Lut3D
    >>>
    >>> pipe = Pipeline().add(Stage("warm", "Warm", Lut3D.color_temperature(30)))
    >>> pipe = pipe.set_intensity("warm", 0.5)
    >>> preview = pipe.apply(pixels)
"""

__version__ = "0.1.0"

from autolut.config import (
    AnalysisParams,
    ContrastParams,
    ExposureParams,
    ParamSpec,
    SaturationParams,
    WhiteBalanceParams,
)
from autolut.correction import (
    AutoCorrection,
    AutoCorrectionResult,
    ContrastCorrectionResult,
    ContrastGuard,
    ControlPoint,
    Curve,
    ExposureCorrectionResult,
    ExposureGuard,
    SaturationCorrectionResult,
    SaturationGuard,
    WhiteBalanceCorrectionResult,
    WhiteBalanceGuard,
    compute_contrast,
    compute_exposure,
    compute_saturation,
    compute_white_balance,
    contrast_to_curve,
    contrast_to_lut,
    exposure_to_lut,
    saturation_to_lut3d,
    white_balance_to_lut,
)
from autolut.histogram import (
    AutoCorrectionStats,
    HistogramData,
    ImageAnalysis,
    ImageClassification,
    LuminanceStats,
    NeutralConfidence,
    NeutralStats,
    SaturationStats,
    SceneKey,
    analyze,
    analyze_from_histogram,
    analyze_image,
    classify,
    compute_histograms,
    estimate_stats,
)
from autolut.lut import (
    Lut1D,
    Lut3D,
    PixelEffects,
    Texture2D,
    apply_with_effects,
)
from autolut.pipeline import Pipeline, Stage
from autolut.tone import (
    ChannelTone,
    ChannelToneDetailed,
    ToneProfile,
    ToneProfileDetailed,
    create_detailed_transfer_lut,
    create_transfer_lut,
)

__all__ = [
    "__version__",
    # LUT types
    "Lut1D",
    "Lut3D",
    "Texture2D",
    "PixelEffects",
    "apply_with_effects",
    # Statistics
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
    "estimate_stats",
    "ImageAnalysis",
    "SceneKey",
    "analyze_image",
    # Corrections
    "ControlPoint",
    "Curve",
    "ExposureCorrectionResult",
    "ExposureGuard",
    "compute_exposure",
    "exposure_to_lut",
    "ContrastCorrectionResult",
    "ContrastGuard",
    "compute_contrast",
    "contrast_to_curve",
    "contrast_to_lut",
    "WhiteBalanceCorrectionResult",
    "WhiteBalanceGuard",
    "compute_white_balance",
    "white_balance_to_lut",
    "SaturationCorrectionResult",
    "SaturationGuard",
    "compute_saturation",
    "saturation_to_lut3d",
    "AutoCorrection",
    "AutoCorrectionResult",
    # Tone
    "ChannelTone",
    "ChannelToneDetailed",
    "ToneProfile",
    "ToneProfileDetailed",
    "create_transfer_lut",
    "create_detailed_transfer_lut",
    # Pipeline
    "Pipeline",
    "Stage",
    # Configuration
    "ParamSpec",
    "AnalysisParams",
    "ExposureParams",
    "ContrastParams",
    "WhiteBalanceParams",
    "SaturationParams",
]
