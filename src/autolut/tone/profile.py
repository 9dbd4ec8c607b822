"""Tone profiles: black point, white point and gamma per channel.

A simple profile models each channel as
``out = black/255 + (in)^gamma * (white - black)/255``. A detailed profile
additionally keeps the channel's full cumulative distribution, which gives
exact histogram matching through ``create_detailed_transfer_lut``.

Example:
    >>> source = ToneProfile.extract(compute_histograms(photo))
    >>> target = ToneProfile.extract(compute_histograms(reference))
    >>> lut = create_transfer_lut(source, target)
    >>> matched = lut.apply(photo)
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike

from autolut.constants import LUT1D_SIZE, MAX_LEVEL
from autolut.correction.curve import ControlPoint
from autolut.histogram.stats import HistogramData, compute_histograms, first_level_exceeding
from autolut.lut.lut1d import Lut1D, interpolate_channel
from autolut.validators import validate_range

logger = logging.getLogger(__name__)

GAMMA_MIN = 0.2
GAMMA_MAX = 5.0

_LEVELS = np.arange(LUT1D_SIZE, dtype=np.float64)


# =============================================================================
# Simple profile
# =============================================================================


@dataclass(frozen=True)
class ChannelTone:
    """Tone model of one channel.

    Attributes:
        black_point: Darkest level (0-255)
        white_point: Brightest level (0-255)
        gamma: Midtone exponent, in [0.2, 5.0]
    """

    black_point: int = 0
    white_point: int = 255
    gamma: float = 1.0

    @classmethod
    def extract(cls, histogram: ArrayLike, percentile: float = 1.0) -> ChannelTone:
        """Derive black point, white point and gamma from a channel histogram.

        The black point is the first occupied bin where the running count
        exceeds ``percentile`` percent of the pixels; the white point is the
        same scan from the top. Gamma solves ``0.5 ** gamma = normalized mean``
        over the levels between them.
        """
        hist = np.asarray(histogram, dtype=np.float64).reshape(-1)
        threshold = hist.sum() * (percentile / 100.0)
        black = first_level_exceeding(hist, threshold, 0)
        white = first_level_exceeding(hist, threshold, LUT1D_SIZE - 1, reverse=True)

        span = hist[black : white + 1]
        count = span.sum()
        mean = float((_LEVELS[black : white + 1] * span).sum() / count) if count > 0 else 127.5
        level_range = white - black
        normalized = (mean - black) / level_range if level_range > 0 else 0.5

        gamma = math.log(normalized) / math.log(0.5) if 0.01 < normalized < 0.99 else 1.0
        gamma = max(GAMMA_MIN, min(GAMMA_MAX, gamma))
        return cls(black_point=int(black), white_point=int(white), gamma=gamma)

    def to_curve(self) -> np.ndarray:
        x = _LEVELS / MAX_LEVEL
        out = self.black_point / MAX_LEVEL + x**self.gamma * (self.white_point - self.black_point) / MAX_LEVEL
        return np.clip(out, 0.0, 1.0)

    def to_inverse_curve(self) -> np.ndarray:
        level_range = self.white_point - self.black_point
        if level_range <= 0:
            return _LEVELS / MAX_LEVEL
        normalized = np.clip((_LEVELS - self.black_point) / level_range, 0.0, 1.0)
        return np.clip(normalized ** (1.0 / self.gamma), 0.0, 1.0)


@dataclass(frozen=True)
class ToneProfile:
    """Per-channel tone models."""

    r: ChannelTone = ChannelTone()
    g: ChannelTone = ChannelTone()
    b: ChannelTone = ChannelTone()

    @classmethod
    def neutral(cls) -> ToneProfile:
        """Profile whose curves are identity: black 0, white 255, gamma 1."""
        return cls()

    @classmethod
    @validate_range(0.0, 50.0, "percentile", param_index=2)
    def extract(cls, histogram: HistogramData, percentile: float = 1.0) -> ToneProfile:
        """Extract a profile from channel histograms.

        :param histogram: Per-channel histograms
        :param percentile: Percent of pixels clipped at each end
        :returns: ToneProfile
        """
        return cls(
            r=ChannelTone.extract(histogram.r, percentile),
            g=ChannelTone.extract(histogram.g, percentile),
            b=ChannelTone.extract(histogram.b, percentile),
        )

    @classmethod
    def extract_from_pixels(cls, pixels: np.ndarray, percentile: float = 1.0) -> ToneProfile:
        return cls.extract(compute_histograms(pixels), percentile)

    @staticmethod
    def extract_detailed(
        histogram: HistogramData, percentile: float = 1.0, control_point_count: int = 7
    ) -> ToneProfileDetailed:
        """Shortcut for ``ToneProfileDetailed.extract``."""
        return ToneProfileDetailed.extract(histogram, percentile, control_point_count)

    @staticmethod
    def neutral_detailed(control_point_count: int = 5) -> ToneProfileDetailed:
        """Shortcut for ``ToneProfileDetailed.neutral``."""
        return ToneProfileDetailed.neutral(control_point_count)

    def to_lut(self) -> Lut1D:
        """Forward table applying the tone model."""
        return Lut1D.create(self.r.to_curve(), self.g.to_curve(), self.b.to_curve())

    def to_inverse_lut(self) -> Lut1D:
        """Table undoing the tone model, normalizing to a full-range linear response."""
        return Lut1D.create(self.r.to_inverse_curve(), self.g.to_inverse_curve(), self.b.to_inverse_curve())


def create_transfer_lut(source: ToneProfile, target: ToneProfile) -> Lut1D:
    """Table mapping the tones of ``source`` onto those of ``target``.

    Composes the inverse of ``source`` with the forward model of ``target``.
    """
    return Lut1D.compose(source.to_inverse_lut(), target.to_lut())


# =============================================================================
# Detailed profile
# =============================================================================


@dataclass(frozen=True, eq=False)
class ChannelToneDetailed:
    """Tone model of one channel plus its cumulative distribution.

    Attributes:
        tone: Simple black/white/gamma model
        cdf: Cumulative distribution [256], float32 in [0, 1]
        control_points: Evenly spaced samples of the CDF
    """

    tone: ChannelTone
    cdf: np.ndarray
    control_points: tuple[ControlPoint, ...]

    @classmethod
    def extract(cls, histogram: ArrayLike, percentile: float, control_point_count: int) -> ChannelToneDetailed:
        hist = np.asarray(histogram, dtype=np.float64).reshape(-1)
        total = hist.sum()
        if total > 0:
            cdf = (np.cumsum(hist) / total).astype(np.float32)
        else:
            cdf = (_LEVELS / MAX_LEVEL).astype(np.float32)
        cdf.flags.writeable = False
        return cls(
            tone=ChannelTone.extract(hist, percentile),
            cdf=cdf,
            control_points=_sample_control_points(cdf, control_point_count),
        )

    @classmethod
    def neutral(cls, control_point_count: int) -> ChannelToneDetailed:
        cdf = (_LEVELS / MAX_LEVEL).astype(np.float32)
        cdf.flags.writeable = False
        inputs = np.linspace(0.0, 1.0, control_point_count)
        points = tuple(ControlPoint(float(x), float(x)) for x in inputs)
        return cls(tone=ChannelTone(), cdf=cdf, control_points=points)

    def inverse_cdf(self) -> np.ndarray:
        """Numerically invert the CDF.

        For each output level, finds the first bin reaching it and
        interpolates linearly from the previous bin.
        """
        cdf = self.cdf.astype(np.float64)
        targets = _LEVELS / MAX_LEVEL
        hi = np.searchsorted(cdf, targets, side="left")
        hi = np.clip(hi, 0, LUT1D_SIZE - 1)
        lo = np.maximum(hi - 1, 0)
        c_lo = np.where(hi > 0, cdf[lo], 0.0)
        c_hi = cdf[hi]
        x_lo = np.where(hi > 0, lo.astype(np.float64), 0.0)
        span = c_hi - c_lo
        with np.errstate(divide="ignore", invalid="ignore"):
            frac = np.where(span > 1e-12, (targets - c_lo) / span, 0.0)
        x = np.where(hi > 0, x_lo + np.clip(frac, 0.0, 1.0) * (hi - x_lo), 0.0)
        return np.clip(x / MAX_LEVEL, 0.0, 1.0)


def _sample_control_points(cdf: np.ndarray, count: int) -> tuple[ControlPoint, ...]:
    inputs = np.linspace(0.0, 1.0, count)
    outputs = interpolate_channel(cdf, inputs)
    return tuple(ControlPoint(float(x), float(y)) for x, y in zip(inputs, outputs))


@dataclass(frozen=True, eq=False)
class ToneProfileDetailed:
    """Per-channel detailed tone models."""

    r: ChannelToneDetailed
    g: ChannelToneDetailed
    b: ChannelToneDetailed

    @classmethod
    @validate_range(2, LUT1D_SIZE, "control_point_count", param_index=1)
    def neutral(cls, control_point_count: int = 5) -> ToneProfileDetailed:
        """Profile with an identity CDF and identity control points."""
        channel = ChannelToneDetailed.neutral(control_point_count)
        return cls(channel, channel, channel)

    @classmethod
    @validate_range(0.0, 50.0, "percentile", param_index=2)
    @validate_range(2, LUT1D_SIZE, "control_point_count", param_index=3)
    def extract(
        cls,
        histogram: HistogramData,
        percentile: float = 1.0,
        control_point_count: int = 7,
    ) -> ToneProfileDetailed:
        """Extract CDFs, control points and simple tones from channel histograms.

        :param histogram: Per-channel histograms
        :param percentile: Percent clipped at each end for the simple tone
        :param control_point_count: Number of evenly spaced CDF samples
        :returns: ToneProfileDetailed
        """
        return cls(
            r=ChannelToneDetailed.extract(histogram.r, percentile, control_point_count),
            g=ChannelToneDetailed.extract(histogram.g, percentile, control_point_count),
            b=ChannelToneDetailed.extract(histogram.b, percentile, control_point_count),
        )

    @classmethod
    def extract_from_pixels(
        cls, pixels: np.ndarray, percentile: float = 1.0, control_point_count: int = 7
    ) -> ToneProfileDetailed:
        return cls.extract(compute_histograms(pixels), percentile, control_point_count)

    def to_simple(self) -> ToneProfile:
        return ToneProfile(self.r.tone, self.g.tone, self.b.tone)

    def to_lut(self) -> Lut1D:
        """Table mapping each level through its channel CDF (equalization)."""
        return Lut1D.create(self.r.cdf, self.g.cdf, self.b.cdf)

    def to_inverse_lut(self) -> Lut1D:
        """Table inverting each channel CDF."""
        return Lut1D.create(self.r.inverse_cdf(), self.g.inverse_cdf(), self.b.inverse_cdf())


def create_detailed_transfer_lut(source: ToneProfileDetailed, target: ToneProfileDetailed) -> Lut1D:
    """Histogram matching: equalize through ``source``'s CDF, then invert ``target``'s."""
    lut = Lut1D.compose(source.to_lut(), target.to_inverse_lut())
    logger.debug("[ToneProfile] Built detailed transfer table")
    return lut
