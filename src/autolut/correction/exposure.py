"""Exposure correction: drive median luminance toward a target.

The EV delta ``log2(target / p50)`` is soft-limited with ``tanh`` and turned
into a linear gain, blended toward 1.0 by the effective strength.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

import numpy as np

from autolut.config.params import ExposureParams
from autolut.constants import EPSILON, LUT1D_SIZE, MAX_LEVEL
from autolut.histogram.stats import ImageClassification, LuminanceStats, classify
from autolut.lut.lut1d import Lut1D

logger = logging.getLogger(__name__)


class ExposureGuard(str, Enum):
    NONE = "none"
    DARK_INPUT = "darkInput"
    LOW_KEY = "lowKey"
    HIGH_KEY = "highKey"
    SIGNIFICANT_CLIPPING = "significantClipping"


@dataclass(frozen=True)
class ExposureCorrectionResult:
    """Outcome of an exposure computation.

    Attributes:
        gain: Linear multiplier applied to every channel
        ev_delta: Raw EV delta toward the target
        applied_ev_delta: EV delta after the tanh soft limit
        effective_strength: Strength after key and clipping adjustments
        max_ev: EV limit after key adjustments
        guard_applied: True if any guard changed the correction
        guard_type: First guard that fired
        guards: Every guard that fired, in evaluation order
    """

    gain: float = 1.0
    ev_delta: float = 0.0
    applied_ev_delta: float = 0.0
    effective_strength: float = 0.0
    max_ev: float = 0.0
    guard_applied: bool = False
    guard_type: ExposureGuard = ExposureGuard.NONE
    guards: tuple[ExposureGuard, ...] = ()


def adjust_params(params: ExposureParams, classification: ImageClassification) -> tuple[float, float, list]:
    """Scale strength and EV limit for the scene type.

    :returns: Tuple of (strength, max_ev, guards fired)
    """
    strength = params.strength
    max_ev = params.max_ev
    guards = []

    if classification.is_low_key:
        strength *= params.key_strength_factor
        max_ev = min(max_ev, params.key_max_ev)
        guards.append(ExposureGuard.LOW_KEY)
    if classification.is_high_key:
        strength *= params.key_strength_factor
        max_ev = min(max_ev, params.key_max_ev)
        guards.append(ExposureGuard.HIGH_KEY)
    if classification.has_significant_clipping:
        strength *= params.clipping_strength_factor
        guards.append(ExposureGuard.SIGNIFICANT_CLIPPING)

    return strength, max_ev, guards


def compute_exposure(
    stats: LuminanceStats,
    classification: ImageClassification | None = None,
    params: ExposureParams | Mapping[str, float] | None = None,
) -> ExposureCorrectionResult:
    """Compute the exposure gain for an image.

    :param stats: Luminance statistics
    :param classification: Scene flags, derived from ``stats`` when omitted
    :param params: Exposure parameters or partial overrides
    :returns: ExposureCorrectionResult

    Example:
        >>> result = compute_exposure(LuminanceStats(p50=0.3, p10=0.1, p90=0.6, range=0.5))
        >>> result.gain > 1.0
        True
    """
    params = ExposureParams.resolve(params)
    classification = classification if classification is not None else classify(stats)
    strength, max_ev, guards = adjust_params(params, classification)

    if stats.p50 <= EPSILON:
        guards.insert(0, ExposureGuard.DARK_INPUT)
        logger.debug("[Exposure] p50=%.4f too dark to measure, skipping", stats.p50)
        return ExposureCorrectionResult(
            gain=1.0,
            effective_strength=strength,
            max_ev=max_ev,
            guard_applied=True,
            guard_type=ExposureGuard.DARK_INPUT,
            guards=tuple(guards),
        )

    ev_delta = math.log2(params.target_y50 / stats.p50)
    applied = max_ev * math.tanh(ev_delta / max_ev) if max_ev > 0 else 0.0
    gain = 1.0 + (2.0**applied - 1.0) * strength

    logger.debug(
        "[Exposure] ev=%+.3f applied=%+.3f strength=%.3f gain=%.4f",
        ev_delta,
        applied,
        strength,
        gain,
    )
    return ExposureCorrectionResult(
        gain=gain,
        ev_delta=ev_delta,
        applied_ev_delta=applied,
        effective_strength=strength,
        max_ev=max_ev,
        guard_applied=bool(guards),
        guard_type=guards[0] if guards else ExposureGuard.NONE,
        guards=tuple(guards),
    )


def exposure_to_lut(result: ExposureCorrectionResult) -> Lut1D:
    """Master curve ``clamp(i/255 * gain)``."""
    levels = np.arange(LUT1D_SIZE, dtype=np.float64) / MAX_LEVEL
    return Lut1D.from_master(np.clip(levels * result.gain, 0.0, 1.0))
