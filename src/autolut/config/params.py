"""Parameter sets for the analyzer and the correction stages.

Every parameter set is a frozen dataclass with documented defaults. Callers
override a subset of fields with a mapping, which is merged field by field:

    >>> params = ContrastParams.resolve({"strength": 0.6})
    >>> params.target_range
    0.55
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from typing import Any, TypeVar

from autolut.config.operations import ParamSpec

P = TypeVar("P", bound="_ParamsBase")


def _param(default: float, min_value: float, max_value: float, description: str) -> Any:
    return field(
        default=default,
        metadata={"range": (min_value, max_value), "description": description},
    )


class _ParamsBase:
    """Merge and introspection helpers shared by all parameter sets."""

    @classmethod
    def describe(cls) -> tuple[ParamSpec, ...]:
        """Return a ParamSpec for every field, in declaration order.

        :returns: Tuple of ParamSpec
        """
        specs = []
        for f in fields(cls):
            lo, hi = f.metadata["range"]
            specs.append(ParamSpec(f.name, lo, hi, f.default, f.metadata["description"]))
        return tuple(specs)

    def merged(self: P, overrides: Mapping[str, float] | P | None = None) -> P:
        """Return a copy with the given fields overridden.

        Values are clamped into each field's documented range.

        :param overrides: Partial mapping of field name to value, or a full instance
        :returns: New parameter set
        :raises ValueError: If a key is unknown or a value is not a number
        """
        if overrides is None:
            return self
        if isinstance(overrides, type(self)):
            return overrides
        if not isinstance(overrides, Mapping):
            raise ValueError(
                f"{type(self).__name__}: overrides must be a mapping, got {type(overrides).__name__}"
            )

        specs = {spec.name: spec for spec in self.describe()}
        unknown = sorted(set(overrides) - set(specs))
        if unknown:
            raise ValueError(
                f"{type(self).__name__}: unknown parameter(s) {unknown}. "
                f"Valid names: {sorted(specs)}"
            )

        changes = {name: specs[name].validate(value) for name, value in overrides.items()}
        return replace(self, **changes)

    @classmethod
    def resolve(cls: type[P], overrides: Mapping[str, float] | P | None = None) -> P:
        """Build a parameter set from defaults plus optional overrides.

        :param overrides: None, a partial mapping, or an instance
        :returns: Parameter set
        """
        return cls().merged(overrides)


@dataclass(frozen=True)
class AnalysisParams(_ParamsBase):
    """Thresholds used when accumulating image statistics."""

    black_clip: float = _param(0.01, 0.0, 0.2, "Luminance at or below which a pixel counts as clipped black")
    white_clip: float = _param(0.99, 0.8, 1.0, "Luminance at or above which a pixel counts as clipped white")
    mid_lo: float = _param(0.30, 0.0, 1.0, "Lower luminance bound of the mid-tone band")
    mid_hi: float = _param(0.70, 0.0, 1.0, "Upper luminance bound of the mid-tone band")
    neutral_y_lo: float = _param(0.15, 0.0, 1.0, "Minimum luminance of a neutral candidate")
    neutral_y_hi: float = _param(0.85, 0.0, 1.0, "Maximum luminance of a neutral candidate")
    neutral_chroma_thresh: float = _param(
        0.08, 0.0, 1.0, "Saturation proxy (max-min) below which a pixel is a neutral candidate"
    )


@dataclass(frozen=True)
class ExposureParams(_ParamsBase):
    """Exposure correction parameters."""

    target_y50: float = _param(0.45, 0.05, 0.95, "Target median luminance")
    max_ev: float = _param(0.7, 0.0, 3.0, "Soft limit for the applied EV delta")
    strength: float = _param(0.6, 0.0, 1.0, "Blend factor between no change and full gain")
    key_strength_factor: float = _param(0.5, 0.0, 1.0, "Strength multiplier for low or high key scenes")
    key_max_ev: float = _param(0.3, 0.0, 3.0, "EV limit for low or high key scenes")
    clipping_strength_factor: float = _param(0.7, 0.0, 1.0, "Strength multiplier for clipped scenes")


@dataclass(frozen=True)
class ContrastParams(_ParamsBase):
    """Contrast correction parameters."""

    target_range: float = _param(0.55, 0.0, 1.0, "Target p90-p10 luminance range")
    max_range: float = _param(0.15, 0.001, 1.0, "Soft limit for the range delta")
    strength: float = _param(0.4, 0.0, 1.0, "Base S-curve strength")
    high_contrast_threshold: float = _param(
        0.75, 0.0, 1.0, "Range above which expansion is cancelled"
    )
    mid_ratio_threshold: float = _param(0.2, 0.0, 1.0, "Mid-tone ratio below which strength drops")
    low_key_p50: float = _param(0.3, 0.0, 1.0, "Median below which a dim flat scene is guarded")
    low_contrast_range: float = _param(0.3, 0.0, 1.0, "Range below which a dim scene counts as flat")
    high_key_p50: float = _param(0.7, 0.0, 1.0, "Median above which a scene is high key")
    low_key_low_contrast_factor: float = _param(0.3, 0.0, 1.0, "Strength multiplier for dim flat scenes")
    high_key_factor: float = _param(0.5, 0.0, 1.0, "Strength multiplier for high key scenes")
    low_mid_ratio_factor: float = _param(0.3, 0.0, 1.0, "Strength multiplier for few mid-tones")


@dataclass(frozen=True)
class WhiteBalanceParams(_ParamsBase):
    """White balance correction parameters."""

    strength: float = _param(0.4, 0.0, 1.0, "Blend factor from unity gain toward the clamped gain")
    gain_min: float = _param(0.90, 0.5, 1.0, "Lower clamp for channel gains")
    gain_max: float = _param(1.10, 1.0, 2.0, "Upper clamp for channel gains")
    neutral_ratio_min: float = _param(0.02, 0.0, 1.0, "Neutral ratio below which strength drops")
    mid_ratio_min: float = _param(0.20, 0.0, 1.0, "Mid-tone ratio below which strength drops")
    extreme_key_lo: float = _param(0.25, 0.0, 1.0, "Median below which a scene is extreme")
    extreme_key_hi: float = _param(0.75, 0.0, 1.0, "Median above which a scene is extreme")
    clip_threshold: float = _param(0.10, 0.0, 1.0, "Total clip ratio above which strength drops")
    low_neutral_ratio_factor: float = _param(0.2, 0.0, 1.0, "Strength multiplier for few neutrals")
    low_mid_ratio_factor: float = _param(0.3, 0.0, 1.0, "Strength multiplier for few mid-tones")
    extreme_key_factor: float = _param(0.5, 0.0, 1.0, "Strength multiplier for extreme key")
    high_clipping_factor: float = _param(0.5, 0.0, 1.0, "Strength multiplier for heavy clipping")


@dataclass(frozen=True)
class SaturationParams(_ParamsBase):
    """Saturation compression parameters."""

    target_sat95: float = _param(0.22, 0.0, 1.0, "Target 95th percentile of the saturation proxy")
    sat_knee: float = _param(0.10, 0.001, 1.0, "Excess over target at which compression saturates")
    sat_strength: float = _param(0.5, 0.0, 1.0, "Compression strength")
    max_compression: float = _param(0.35, 0.0, 1.0, "Upper bound of the compression amount")
    pixel_sat_lo: float = _param(0.10, 0.0, 1.0, "Per-pixel proxy where compression starts")
    pixel_sat_hi: float = _param(0.30, 0.0, 1.0, "Per-pixel proxy where compression is full")
    extreme_key_lo: float = _param(0.25, 0.0, 1.0, "Median below which a scene is extreme")
    extreme_key_hi: float = _param(0.75, 0.0, 1.0, "Median above which a scene is extreme")
    clip_threshold: float = _param(0.10, 0.0, 1.0, "Total clip ratio above which strength drops")
    mid_ratio_threshold: float = _param(0.20, 0.0, 1.0, "Mid-tone ratio below which strength drops")
    extreme_key_factor: float = _param(0.5, 0.0, 1.0, "Strength multiplier for extreme key")
    high_clipping_factor: float = _param(0.5, 0.0, 1.0, "Strength multiplier for heavy clipping")
    low_mid_ratio_factor: float = _param(0.3, 0.0, 1.0, "Strength multiplier for few mid-tones")
