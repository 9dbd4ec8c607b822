"""White balance correction from the median of near-gray pixels.

Red and blue gains bring the neutral median toward gray relative to green,
clamped to a narrow band and blended toward unity by the effective strength.
Green is never changed.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

import numpy as np

from autolut.config.params import WhiteBalanceParams
from autolut.constants import EPSILON, LUT1D_SIZE, MAX_LEVEL
from autolut.histogram.stats import LuminanceStats, NeutralConfidence, NeutralStats
from autolut.lut.lut1d import Lut1D

logger = logging.getLogger(__name__)


class WhiteBalanceGuard(str, Enum):
    NONE = "none"
    NO_NEUTRAL = "noNeutral"
    LOW_NEUTRAL_RATIO = "lowNeutralRatio"
    LOW_MID_RATIO = "lowMidRatio"
    EXTREME_KEY = "extremeKey"
    HIGH_CLIPPING = "highClipping"


@dataclass(frozen=True)
class WhiteBalanceCorrectionResult:
    """Outcome of a white balance computation.

    Attributes:
        raw_kr: G / R of the neutral median
        raw_kb: G / B of the neutral median
        clamped_kr: raw_kr clamped to [gain_min, gain_max]
        clamped_kb: raw_kb clamped to [gain_min, gain_max]
        gain_r, gain_g, gain_b: Final channel gains (gain_g is always 1)
        effective_strength: Strength after guards
        guard_applied: True if any guard fired
        guard_type: First guard that fired
        guards: Every guard that fired, in evaluation order
    """

    raw_kr: float = 1.0
    raw_kb: float = 1.0
    clamped_kr: float = 1.0
    clamped_kb: float = 1.0
    gain_r: float = 1.0
    gain_g: float = 1.0
    gain_b: float = 1.0
    effective_strength: float = 0.0
    guard_applied: bool = False
    guard_type: WhiteBalanceGuard = WhiteBalanceGuard.NONE
    guards: tuple[WhiteBalanceGuard, ...] = ()

    @property
    def gains(self) -> tuple[float, float, float]:
        return self.gain_r, self.gain_g, self.gain_b


def compute_white_balance(
    neutral: NeutralStats,
    luminance: LuminanceStats,
    params: WhiteBalanceParams | Mapping[str, float] | None = None,
) -> WhiteBalanceCorrectionResult:
    """Compute red and blue gains from the neutral estimate.

    :param neutral: Neutral candidate statistics
    :param luminance: Luminance statistics, used by the guards
    :param params: White balance parameters or partial overrides
    :returns: WhiteBalanceCorrectionResult

    Example:
        >>> neutral = NeutralStats(5000, 0.1, (0.3, 0.5, 0.7), NeutralConfidence.HIGH)
        >>> result = compute_white_balance(neutral, LuminanceStats(p50=0.5))
        >>> result.clamped_kr, result.clamped_kb
        (1.1, 0.9)
    """
    params = WhiteBalanceParams.resolve(params)

    if neutral.confidence == NeutralConfidence.NONE or neutral.count == 0:
        logger.debug("[WhiteBalance] No neutral pixels, bypassing")
        return WhiteBalanceCorrectionResult(
            effective_strength=0.0,
            guard_applied=True,
            guard_type=WhiteBalanceGuard.NO_NEUTRAL,
            guards=(WhiteBalanceGuard.NO_NEUTRAL,),
        )

    strength = params.strength
    guards = []
    if neutral.ratio < params.neutral_ratio_min:
        strength *= params.low_neutral_ratio_factor
        guards.append(WhiteBalanceGuard.LOW_NEUTRAL_RATIO)
    if luminance.mid_ratio < params.mid_ratio_min:
        strength *= params.low_mid_ratio_factor
        guards.append(WhiteBalanceGuard.LOW_MID_RATIO)
    if luminance.p50 < params.extreme_key_lo or luminance.p50 > params.extreme_key_hi:
        strength *= params.extreme_key_factor
        guards.append(WhiteBalanceGuard.EXTREME_KEY)
    if luminance.total_clip > params.clip_threshold:
        strength *= params.high_clipping_factor
        guards.append(WhiteBalanceGuard.HIGH_CLIPPING)

    med_r, med_g, med_b = neutral.median_rgb
    raw_kr = med_g / max(EPSILON, med_r)
    raw_kb = med_g / max(EPSILON, med_b)
    clamped_kr = min(params.gain_max, max(params.gain_min, raw_kr))
    clamped_kb = min(params.gain_max, max(params.gain_min, raw_kb))
    gain_r = 1.0 + (clamped_kr - 1.0) * strength
    gain_b = 1.0 + (clamped_kb - 1.0) * strength

    logger.debug(
        "[WhiteBalance] kr=%.3f->%.3f kb=%.3f->%.3f strength=%.3f gains=(%.4f, 1, %.4f)",
        raw_kr,
        clamped_kr,
        raw_kb,
        clamped_kb,
        strength,
        gain_r,
        gain_b,
    )
    return WhiteBalanceCorrectionResult(
        raw_kr=raw_kr,
        raw_kb=raw_kb,
        clamped_kr=clamped_kr,
        clamped_kb=clamped_kb,
        gain_r=gain_r,
        gain_g=1.0,
        gain_b=gain_b,
        effective_strength=strength,
        guard_applied=bool(guards),
        guard_type=guards[0] if guards else WhiteBalanceGuard.NONE,
        guards=tuple(guards),
    )


def white_balance_to_lut(result: WhiteBalanceCorrectionResult) -> Lut1D:
    """Scale each channel's identity curve by its gain, clamped to [0, 1]."""
    levels = np.arange(LUT1D_SIZE, dtype=np.float64) / MAX_LEVEL
    return Lut1D.create(
        np.clip(levels * result.gain_r, 0.0, 1.0),
        np.clip(levels * result.gain_g, 0.0, 1.0),
        np.clip(levels * result.gain_b, 0.0, 1.0),
    )
