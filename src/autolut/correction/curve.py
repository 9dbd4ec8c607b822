"""Tone curves defined by evenly spaced control points.

Curves are rasterized with monotone piecewise cubic (PCHIP) interpolation,
so a monotone set of points never produces overshoot between them.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike
from scipy.interpolate import PchipInterpolator

from autolut.constants import LUT1D_SIZE, MAX_LEVEL
from autolut.validators import validate_range


@dataclass(frozen=True)
class ControlPoint:
    """A curve point; ``input`` and ``output`` are in [0, 1]."""

    input: float
    output: float


@dataclass(frozen=True)
class Curve:
    """Output values at evenly spaced inputs ``0, 1/(n-1), ..., 1``.

    Attributes:
        outputs: Curve outputs, at least two
    """

    outputs: tuple[float, ...]

    def __post_init__(self):
        values = tuple(float(v) for v in self.outputs)
        if len(values) < 2:
            raise ValueError(f"Curve needs at least 2 points, got {len(values)}")
        object.__setattr__(self, "outputs", values)

    @classmethod
    @validate_range(2, LUT1D_SIZE, "point_count")
    def identity(cls, point_count: int = 7) -> Curve:
        """Straight line through ``point_count`` points."""
        return cls(tuple(np.linspace(0.0, 1.0, point_count)))

    @classmethod
    def from_values(cls, outputs: ArrayLike) -> Curve:
        return cls(tuple(np.asarray(outputs, dtype=np.float64).reshape(-1)))

    @property
    def point_count(self) -> int:
        return len(self.outputs)

    @property
    def inputs(self) -> np.ndarray:
        return np.linspace(0.0, 1.0, self.point_count)

    @property
    def points(self) -> tuple[ControlPoint, ...]:
        return tuple(ControlPoint(float(x), y) for x, y in zip(self.inputs, self.outputs))

    def evaluate(self, x: ArrayLike) -> np.ndarray:
        """Evaluate the curve at inputs in [0, 1], output clamped to [0, 1]."""
        x = np.clip(np.asarray(x, dtype=np.float64), 0.0, 1.0)
        if self.point_count == 2:
            y = np.interp(x, self.inputs, self.outputs)
        else:
            y = PchipInterpolator(self.inputs, np.asarray(self.outputs))(x)
        return np.clip(y, 0.0, 1.0)

    def rasterize(self) -> np.ndarray:
        """Sample the curve at the 256 input levels.

        :returns: float32 array [256]
        """
        levels = np.arange(LUT1D_SIZE, dtype=np.float64) / MAX_LEVEL
        return self.evaluate(levels).astype(np.float32)

    def is_identity(self, atol: float = 1e-6) -> bool:
        return bool(np.allclose(self.outputs, self.inputs, atol=atol, rtol=0))
