"""Contrast correction: move the p10-p90 range toward a target with an S-curve.

``delta = target_range - range`` is soft-limited to ``+/- max_range`` with
``tanh``; the S-curve amount is that clamped delta times the effective
strength. Guards only ever reduce strength, and only the first one that
matches is applied:

- ``highContrast``: range already above the threshold and the correction
  would expand it further, so nothing is done
- ``lowKeyLowContrast``: dim, flat scene, strength x0.3
- ``highKey``: bright scene, strength x0.5
- ``lowMidRatio``: few mid-tones, strength x0.3
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

import numpy as np

from autolut.config.params import ContrastParams
from autolut.constants import EPSILON
from autolut.correction.curve import Curve
from autolut.histogram.stats import ImageClassification, LuminanceStats
from autolut.lut.lut1d import Lut1D
from autolut.validators import validate_range

logger = logging.getLogger(__name__)


class ContrastGuard(str, Enum):
    NONE = "none"
    HIGH_CONTRAST = "highContrast"
    LOW_KEY_LOW_CONTRAST = "lowKeyLowContrast"
    HIGH_KEY = "highKey"
    LOW_MID_RATIO = "lowMidRatio"


@dataclass(frozen=True)
class ContrastCorrectionResult:
    """Outcome of a contrast computation.

    Attributes:
        delta: Raw range delta (target - current)
        clamped_delta: Delta after the tanh soft limit
        amount: S-curve displacement, positive increases contrast
        effective_strength: Strength after guards
        guard_applied: True if any guard fired
        guard_type: First guard that fired
        guards: The guard that fired, empty when none did
    """

    delta: float = 0.0
    clamped_delta: float = 0.0
    amount: float = 0.0
    effective_strength: float = 0.0
    guard_applied: bool = False
    guard_type: ContrastGuard = ContrastGuard.NONE
    guards: tuple[ContrastGuard, ...] = ()


def compute_contrast(
    stats: LuminanceStats,
    classification: ImageClassification | None = None,
    params: ContrastParams | Mapping[str, float] | None = None,
) -> ContrastCorrectionResult:
    """Compute the S-curve amount for an image.

    :param stats: Luminance statistics
    :param classification: Scene flags, accepted for a uniform stage signature;
        guards read the thresholds in ``params`` directly
    :param params: Contrast parameters or partial overrides
    :returns: ContrastCorrectionResult
    """
    params = ContrastParams.resolve(params)
    strength = params.strength
    delta = params.target_range - stats.range

    if stats.range > params.high_contrast_threshold and delta > 0:
        logger.debug("[Contrast] range=%.3f already high, cancelling expansion", stats.range)
        return ContrastCorrectionResult(
            delta=delta,
            clamped_delta=0.0,
            amount=0.0,
            effective_strength=strength,
            guard_applied=True,
            guard_type=ContrastGuard.HIGH_CONTRAST,
            guards=(ContrastGuard.HIGH_CONTRAST,),
        )

    # First match wins
    guards = []
    if stats.p50 < params.low_key_p50 and stats.range < params.low_contrast_range:
        strength *= params.low_key_low_contrast_factor
        guards.append(ContrastGuard.LOW_KEY_LOW_CONTRAST)
    elif stats.p50 > params.high_key_p50:
        strength *= params.high_key_factor
        guards.append(ContrastGuard.HIGH_KEY)
    elif stats.mid_ratio < params.mid_ratio_threshold:
        strength *= params.low_mid_ratio_factor
        guards.append(ContrastGuard.LOW_MID_RATIO)

    clamped = params.max_range * math.tanh(delta / params.max_range)
    amount = clamped * strength

    logger.debug(
        "[Contrast] delta=%+.3f clamped=%+.3f strength=%.3f amount=%+.4f guards=%s",
        delta,
        clamped,
        strength,
        amount,
        [g.value for g in guards],
    )
    return ContrastCorrectionResult(
        delta=delta,
        clamped_delta=clamped,
        amount=amount,
        effective_strength=strength,
        guard_applied=bool(guards),
        guard_type=guards[0] if guards else ContrastGuard.NONE,
        guards=tuple(guards),
    )


@validate_range(3, 256, "point_count")
def contrast_to_curve(result: ContrastCorrectionResult, point_count: int = 7) -> Curve:
    """Symmetric S-curve with fixed endpoints.

    Interior point x moves by ``sin((x - 0.5) * pi) * amount``: shadows go
    down and highlights go up for positive amounts, the center stays put.

    :param result: Contrast result
    :param point_count: Number of evenly spaced points
    :returns: Curve (identity when the amount is negligible)
    """
    if abs(result.amount) < EPSILON:
        return Curve.identity(point_count)

    x = np.linspace(0.0, 1.0, point_count)
    y = np.clip(x + np.sin((x - 0.5) * math.pi) * result.amount, 0.0, 1.0)
    y[0] = 0.0
    y[-1] = 1.0
    return Curve.from_values(y)


def contrast_to_lut(result: ContrastCorrectionResult, point_count: int = 7) -> Lut1D:
    """Rasterize the contrast curve to a master Lut1D."""
    return Lut1D.from_master(contrast_to_curve(result, point_count).rasterize())
