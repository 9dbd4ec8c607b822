"""Two-phase automatic correction producing a single 3D LUT.

Phase 1 derives exposure and contrast from the original image and composes
them into a Lut1D. Phase 2 derives white balance and saturation, ideally from
the image after Phase 1 has been applied, and composes them into a Lut3D.
``to_lut3d`` merges both phases into the final cube.

Example:
    >>> auto = AutoCorrection()
    >>> result = auto.compute_from_pixels(pixels)
    >>> AutoCorrection.get_summary(result)
    'Exp: +0.31EV → Con: +2.4%'
    >>> corrected = AutoCorrection.to_lut3d(result).apply(pixels)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from autolut.config.params import (
    AnalysisParams,
    ContrastParams,
    ExposureParams,
    SaturationParams,
    WhiteBalanceParams,
)
from autolut.constants import DEFAULT_GRID_SIZE, MAX_GRID_SIZE, MIN_GRID_SIZE
from autolut.correction.contrast import ContrastCorrectionResult, compute_contrast, contrast_to_lut
from autolut.correction.exposure import ExposureCorrectionResult, compute_exposure, exposure_to_lut
from autolut.correction.saturation import (
    SaturationCorrectionResult,
    compute_saturation,
    saturation_to_lut3d,
)
from autolut.correction.white_balance import (
    WhiteBalanceCorrectionResult,
    compute_white_balance,
    white_balance_to_lut,
)
from autolut.histogram.stats import (
    HistogramData,
    ImageClassification,
    LuminanceStats,
    NeutralStats,
    SaturationStats,
    analyze,
    analyze_from_histogram,
    estimate_neutral_stats,
    estimate_saturation_stats,
)
from autolut.lut.lut1d import Lut1D
from autolut.lut.lut3d import Lut3D
from autolut.pipeline import Pipeline, Stage
from autolut.validators import validate_range

logger = logging.getLogger(__name__)

# Phase 2 cubes are built at the default grid; the final grid is chosen in to_lut3d
PHASE2_GRID_SIZE = DEFAULT_GRID_SIZE


@dataclass(frozen=True)
class AutoCorrectionResult:
    """Per-stage results and the two phase tables.

    Attributes:
        exposure: Exposure stage result
        contrast: Contrast stage result
        white_balance: White balance stage result
        saturation: Saturation stage result
        phase1_lut: Exposure then contrast, as a Lut1D
        phase2_lut3d: White balance then saturation, as a Lut3D
    """

    exposure: ExposureCorrectionResult
    contrast: ContrastCorrectionResult
    white_balance: WhiteBalanceCorrectionResult
    saturation: SaturationCorrectionResult
    phase1_lut: Lut1D
    phase2_lut3d: Lut3D


@dataclass(frozen=True)
class AutoCorrection:
    """Orchestrates the four correction stages.

    Each parameter set may be overridden independently; omitted ones use
    their documented defaults.

    Attributes:
        analysis: Thresholds for the statistics
        exposure: Exposure stage parameters
        contrast: Contrast stage parameters
        white_balance: White balance stage parameters
        saturation: Saturation stage parameters
    """

    analysis: AnalysisParams = field(default_factory=AnalysisParams)
    exposure: ExposureParams = field(default_factory=ExposureParams)
    contrast: ContrastParams = field(default_factory=ContrastParams)
    white_balance: WhiteBalanceParams = field(default_factory=WhiteBalanceParams)
    saturation: SaturationParams = field(default_factory=SaturationParams)

    def __post_init__(self):
        # Accept partial mappings for any parameter set
        object.__setattr__(self, "analysis", AnalysisParams.resolve(self.analysis))
        object.__setattr__(self, "exposure", ExposureParams.resolve(self.exposure))
        object.__setattr__(self, "contrast", ContrastParams.resolve(self.contrast))
        object.__setattr__(self, "white_balance", WhiteBalanceParams.resolve(self.white_balance))
        object.__setattr__(self, "saturation", SaturationParams.resolve(self.saturation))

    # ========================================================================
    # Phases
    # ========================================================================

    def _phase1(self, luminance: LuminanceStats, classification: ImageClassification):
        exposure = compute_exposure(luminance, classification, self.exposure)
        contrast = compute_contrast(luminance, classification, self.contrast)
        phase1_lut = Lut1D.compose(exposure_to_lut(exposure), contrast_to_lut(contrast))
        return exposure, contrast, phase1_lut

    def _phase2(self, neutral: NeutralStats, saturation_stats: SaturationStats, luminance: LuminanceStats):
        white_balance = compute_white_balance(neutral, luminance, self.white_balance)
        saturation = compute_saturation(saturation_stats, luminance, self.saturation)
        # White balance is per-channel, so lift it to a cube before composing
        wb_cube = Lut3D.from_lut1d(white_balance_to_lut(white_balance), PHASE2_GRID_SIZE)
        phase2_lut3d = Lut3D.compose(wb_cube, saturation_to_lut3d(saturation, PHASE2_GRID_SIZE))
        return white_balance, saturation, phase2_lut3d

    def compute(self, original: HistogramData, phase2: HistogramData | None = None) -> AutoCorrectionResult:
        """Run both phases from histograms.

        :param original: Histograms of the uncorrected image
        :param phase2: Histograms of the image after Phase 1; ``original`` when omitted
        :returns: AutoCorrectionResult
        """
        luminance0, classification0 = analyze_from_histogram(original.luminance_histogram(), self.analysis)
        exposure, contrast, phase1_lut = self._phase1(luminance0, classification0)

        source = phase2 if phase2 is not None else original
        luminance1, _ = analyze_from_histogram(source.luminance_histogram(), self.analysis)
        white_balance, saturation, phase2_lut3d = self._phase2(
            estimate_neutral_stats(source), estimate_saturation_stats(source), luminance1
        )

        result = AutoCorrectionResult(exposure, contrast, white_balance, saturation, phase1_lut, phase2_lut3d)
        logger.info("[AutoCorrection] %s", self.get_summary(result))
        return result

    def compute_from_pixels(self, pixels: np.ndarray) -> AutoCorrectionResult:
        """Run both phases on an RGBA8 buffer.

        Phase 2 statistics are measured on the pixels after the Phase 1
        table has been applied, with the exact neutral and saturation
        estimates that pixel access allows.

        :param pixels: uint8 array with last axis RGBA
        :returns: AutoCorrectionResult
        """
        stats0 = analyze(pixels, self.analysis)
        exposure, contrast, phase1_lut = self._phase1(stats0.luminance, stats0.classification)

        stats1 = analyze(phase1_lut.apply(pixels), self.analysis)
        white_balance, saturation, phase2_lut3d = self._phase2(
            stats1.neutral, stats1.saturation, stats1.luminance
        )

        result = AutoCorrectionResult(exposure, contrast, white_balance, saturation, phase1_lut, phase2_lut3d)
        logger.info("[AutoCorrection] %s", self.get_summary(result))
        return result

    # ========================================================================
    # Output
    # ========================================================================

    @staticmethod
    @validate_range(MIN_GRID_SIZE, MAX_GRID_SIZE, "size")
    def to_lut3d(result: AutoCorrectionResult, size: int = DEFAULT_GRID_SIZE) -> Lut3D:
        """Merge both phases into one cube of the given grid size."""
        return Lut3D.compose(Lut3D.from_lut1d(result.phase1_lut, size), result.phase2_lut3d)

    def create_lut_from_original(
        self, original: HistogramData, size: int = DEFAULT_GRID_SIZE
    ) -> tuple[Lut3D, AutoCorrectionResult]:
        """Single-shot variant using the original histograms for both phases.

        :returns: Tuple of (lut, result)
        """
        result = self.compute(original)
        return self.to_lut3d(result, size), result

    def create_lut_with_phase2(
        self, original: HistogramData, phase2: HistogramData, size: int = DEFAULT_GRID_SIZE
    ) -> tuple[Lut3D, AutoCorrectionResult]:
        """Two-phase variant with separately measured Phase 2 histograms.

        :returns: Tuple of (lut, result)
        """
        result = self.compute(original, phase2)
        return self.to_lut3d(result, size), result

    @staticmethod
    def get_summary(result: AutoCorrectionResult) -> str:
        """Short human-readable description of the corrections applied."""
        parts = []
        ev = result.exposure.applied_ev_delta
        if abs(ev) > 0.01:
            parts.append(f"Exp: {ev:+.2f}EV")
        if abs(result.contrast.amount) > 0.001:
            parts.append(f"Con: {result.contrast.amount * 100:+.1f}%")
        wb = result.white_balance
        if abs(wb.gain_r - 1.0) > 0.01 or abs(wb.gain_b - 1.0) > 0.01:
            parts.append(f"WB: R{wb.gain_r:.2f} B{wb.gain_b:.2f}")
        if result.saturation.compression_base > 0.01:
            parts.append(f"Sat: -{result.saturation.compression_base * 100:.1f}%")
        return " → ".join(parts) if parts else "No correction"

    @staticmethod
    def to_pipeline(result: AutoCorrectionResult) -> Pipeline:
        """Expose each stage separately for toggling and intensity control."""
        return Pipeline(
            (
                Stage("exposure", "Exposure", exposure_to_lut(result.exposure)),
                Stage("contrast", "Contrast", contrast_to_lut(result.contrast)),
                Stage("white_balance", "White Balance", white_balance_to_lut(result.white_balance)),
                Stage("saturation", "Saturation", saturation_to_lut3d(result.saturation)),
            )
        )
