"""Guarded correction stages and the two-phase orchestrator."""

from autolut.correction.auto import AutoCorrection, AutoCorrectionResult
from autolut.correction.contrast import (
    ContrastCorrectionResult,
    ContrastGuard,
    compute_contrast,
    contrast_to_curve,
    contrast_to_lut,
)
from autolut.correction.curve import ControlPoint, Curve
from autolut.correction.exposure import (
    ExposureCorrectionResult,
    ExposureGuard,
    compute_exposure,
    exposure_to_lut,
)
from autolut.correction.saturation import (
    SaturationCorrectionResult,
    SaturationGuard,
    compute_saturation,
    saturation_to_lut3d,
)
from autolut.correction.white_balance import (
    WhiteBalanceCorrectionResult,
    WhiteBalanceGuard,
    compute_white_balance,
    white_balance_to_lut,
)

__all__ = [
    "AutoCorrection",
    "AutoCorrectionResult",
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
]
