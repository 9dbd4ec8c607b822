"""Saturation compression for over-saturated images.

Only compresses: when the 95th percentile of the ``max - min`` proxy is at
or below the target, nothing is done. The compression amount ramps in with
a smoothstep over ``sat_knee`` and is capped at ``max_compression``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

from autolut.config.params import SaturationParams
from autolut.constants import DEFAULT_GRID_SIZE, EPSILON
from autolut.histogram.stats import LuminanceStats, SaturationStats
from autolut.lut.kernels import clamp01, smoothstep
from autolut.lut.lut3d import Lut3D

logger = logging.getLogger(__name__)


class SaturationGuard(str, Enum):
    NONE = "none"
    NO_COMPRESSION = "noCompression"
    EXTREME_KEY = "extremeKey"
    HIGH_CLIPPING = "highClipping"
    LOW_MID_RATIO = "lowMidRatio"


@dataclass(frozen=True)
class SaturationCorrectionResult:
    """Outcome of a saturation computation.

    Attributes:
        delta: p95 proxy minus target
        normalized_delta: smoothstep of delta over the knee, in [0, 1]
        compression_base: Final compression amount in [0, max_compression]
        effective_strength: Strength after guards
        guard_applied: True if any guard fired
        guard_type: First guard that fired
        guards: Every guard that fired, in evaluation order
        pixel_sat_lo: Per-pixel proxy where compression starts
        pixel_sat_hi: Per-pixel proxy where compression is full
    """

    delta: float = 0.0
    normalized_delta: float = 0.0
    compression_base: float = 0.0
    effective_strength: float = 0.0
    guard_applied: bool = False
    guard_type: SaturationGuard = SaturationGuard.NONE
    guards: tuple[SaturationGuard, ...] = ()
    pixel_sat_lo: float = 0.10
    pixel_sat_hi: float = 0.30


def compute_saturation(
    saturation: SaturationStats,
    luminance: LuminanceStats,
    params: SaturationParams | Mapping[str, float] | None = None,
) -> SaturationCorrectionResult:
    """Compute the saturation compression amount.

    :param saturation: Saturation proxy statistics
    :param luminance: Luminance statistics, used by the guards
    :param params: Saturation parameters or partial overrides
    :returns: SaturationCorrectionResult
    """
    params = SaturationParams.resolve(params)
    strength = params.sat_strength
    delta = saturation.p95_proxy - params.target_sat95

    if delta <= 0:
        logger.debug("[Saturation] p95=%.3f within target, no compression", saturation.p95_proxy)
        return SaturationCorrectionResult(
            delta=delta,
            normalized_delta=0.0,
            compression_base=0.0,
            effective_strength=strength,
            guard_applied=True,
            guard_type=SaturationGuard.NO_COMPRESSION,
            guards=(SaturationGuard.NO_COMPRESSION,),
            pixel_sat_lo=params.pixel_sat_lo,
            pixel_sat_hi=params.pixel_sat_hi,
        )

    guards = []
    if luminance.p50 < params.extreme_key_lo or luminance.p50 > params.extreme_key_hi:
        strength *= params.extreme_key_factor
        guards.append(SaturationGuard.EXTREME_KEY)
    if luminance.total_clip > params.clip_threshold:
        strength *= params.high_clipping_factor
        guards.append(SaturationGuard.HIGH_CLIPPING)
    if luminance.mid_ratio < params.mid_ratio_threshold:
        strength *= params.low_mid_ratio_factor
        guards.append(SaturationGuard.LOW_MID_RATIO)

    normalized = smoothstep(0.0, 1.0, clamp01(delta / params.sat_knee))
    compression = min(normalized * strength, params.max_compression)

    logger.debug(
        "[Saturation] delta=%+.3f normalized=%.3f strength=%.3f compression=%.4f",
        delta,
        normalized,
        strength,
        compression,
    )
    return SaturationCorrectionResult(
        delta=delta,
        normalized_delta=normalized,
        compression_base=compression,
        effective_strength=strength,
        guard_applied=bool(guards),
        guard_type=guards[0] if guards else SaturationGuard.NONE,
        guards=tuple(guards),
        pixel_sat_lo=params.pixel_sat_lo,
        pixel_sat_hi=params.pixel_sat_hi,
    )


def saturation_to_lut3d(result: SaturationCorrectionResult, size: int = DEFAULT_GRID_SIZE) -> Lut3D:
    """Cube pulling saturated cells toward their luminance-matched gray.

    Identity when the compression is negligible.
    """
    if result.compression_base <= EPSILON:
        return Lut3D.identity(size)
    return Lut3D.saturation_compression(
        result.compression_base, result.pixel_sat_lo, result.pixel_sat_hi, size
    )
