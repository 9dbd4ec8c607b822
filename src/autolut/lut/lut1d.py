"""Per-channel 256-entry lookup table.

A Lut1D maps each 8-bit input level of R, G and B independently to a
normalized output in [0, 1]. Instances are immutable: every operation
returns a new table.

Example:
    >>> lut = Lut1D.compose(exposure_lut, contrast_lut)
    >>> corrected = lut.apply(pixels)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike

from autolut.constants import LUT1D_SIZE, MAX_LEVEL
from autolut.lut.buffer import as_pixel_rows, to_levels
from autolut.lut.kernels import apply_lut1d_numba

logger = logging.getLogger(__name__)

_LEVELS = np.arange(LUT1D_SIZE, dtype=np.float64)


def _channel(values: ArrayLike, name: str) -> np.ndarray:
    arr = np.asarray(values, dtype=np.float32).reshape(-1)
    if arr.shape[0] != LUT1D_SIZE:
        raise ValueError(f"Lut1D channel '{name}' must have {LUT1D_SIZE} entries, got {arr.shape[0]}")
    arr = np.clip(arr, 0.0, 1.0).astype(np.float32)
    arr.flags.writeable = False
    return arr


def interpolate_channel(table: np.ndarray, values: ArrayLike) -> np.ndarray:
    """Linearly interpolate a 256-entry table at normalized positions.

    :param table: Channel table [256]
    :param values: Positions in [0, 1] (clamped)
    :returns: Interpolated outputs as float32
    """
    x = np.clip(np.asarray(values, dtype=np.float64), 0.0, 1.0) * MAX_LEVEL
    return np.interp(x, _LEVELS, table).astype(np.float32)


@dataclass(frozen=True, eq=False)
class Lut1D:
    """Three independent 256-entry channel tables.

    Attributes:
        r: Red channel table [256], float32 in [0, 1]
        g: Green channel table [256]
        b: Blue channel table [256]
    """

    r: np.ndarray
    g: np.ndarray
    b: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "r", _channel(self.r, "r"))
        object.__setattr__(self, "g", _channel(self.g, "g"))
        object.__setattr__(self, "b", _channel(self.b, "b"))

    # ========================================================================
    # Construction
    # ========================================================================

    @classmethod
    def identity(cls) -> Lut1D:
        """Create the identity table, mapping level i to i/255."""
        ramp = (_LEVELS / MAX_LEVEL).astype(np.float32)
        return cls(ramp, ramp, ramp)

    @classmethod
    def create(cls, r: ArrayLike, g: ArrayLike, b: ArrayLike) -> Lut1D:
        """Create a table from three channel curves.

        :param r: Red curve [256]
        :param g: Green curve [256]
        :param b: Blue curve [256]
        :returns: New Lut1D (values clamped to [0, 1])
        """
        return cls(r, g, b)

    @classmethod
    def from_master(cls, master: ArrayLike) -> Lut1D:
        """Create a table applying the same curve to all three channels.

        :param master: Curve [256]
        :returns: New Lut1D
        """
        return cls(master, master, master)

    @classmethod
    def from_array(cls, table: ArrayLike) -> Lut1D:
        """Create a table from a [256, 3] array."""
        arr = np.asarray(table, dtype=np.float32)
        if arr.shape != (LUT1D_SIZE, 3):
            raise ValueError(f"Expected shape ({LUT1D_SIZE}, 3), got {arr.shape}")
        return cls(arr[:, 0], arr[:, 1], arr[:, 2])

    def to_array(self) -> np.ndarray:
        """Return the table as a [256, 3] float32 array."""
        return np.stack([self.r, self.g, self.b], axis=1)

    # ========================================================================
    # Evaluation
    # ========================================================================

    def lookup(self, r: float, g: float, b: float) -> tuple[float, float, float]:
        """Evaluate the table at normalized inputs with linear interpolation.

        :param r: Red input in [0, 1]
        :param g: Green input in [0, 1]
        :param b: Blue input in [0, 1]
        :returns: Mapped (r, g, b)
        """
        return (
            float(interpolate_channel(self.r, r)),
            float(interpolate_channel(self.g, g)),
            float(interpolate_channel(self.b, b)),
        )

    def apply(self, pixels: np.ndarray) -> np.ndarray:
        """Map an RGBA8 buffer through the table, leaving alpha untouched.

        :param pixels: uint8 array with last axis RGBA
        :returns: New buffer of the same shape
        """
        rows, shape = as_pixel_rows(pixels)
        out = np.empty_like(rows)
        apply_lut1d_numba(rows, self.to_levels(), out)
        return out.reshape(shape)

    def to_levels(self) -> np.ndarray:
        """Return the table rounded to output bytes, shape [256, 3]."""
        return np.ascontiguousarray(to_levels(self.to_array()))

    # ========================================================================
    # Composition
    # ========================================================================

    @staticmethod
    def compose_channel(first: ArrayLike, second: ArrayLike) -> np.ndarray:
        """Compose two channel curves, applying ``first`` then ``second``.

        :param first: Curve [256]
        :param second: Curve [256], sampled with interpolation
        :returns: Composed curve [256]
        """
        return interpolate_channel(np.asarray(second, dtype=np.float32), first)

    @staticmethod
    def compose(*luts: Lut1D) -> Lut1D:
        """Compose tables left to right into one equivalent table.

        For every input level the running output is fed, with interpolation,
        into the next table. Zero tables give identity.

        :param luts: Tables in application order
        :returns: Composed Lut1D
        """
        result = Lut1D.identity()
        for lut in luts:
            result = Lut1D(
                Lut1D.compose_channel(result.r, lut.r),
                Lut1D.compose_channel(result.g, lut.g),
                Lut1D.compose_channel(result.b, lut.b),
            )
        logger.debug("[Lut1D] Composed %d tables", len(luts))
        return result

    # ========================================================================
    # Comparison
    # ========================================================================

    def allclose(self, other: Lut1D, atol: float = 1e-5) -> bool:
        """Check whether two tables agree within ``atol`` on every entry."""
        return bool(
            np.allclose(self.r, other.r, atol=atol, rtol=0)
            and np.allclose(self.g, other.g, atol=atol, rtol=0)
            and np.allclose(self.b, other.b, atol=atol, rtol=0)
        )

    def is_identity(self, atol: float = 1e-5) -> bool:
        return self.allclose(Lut1D.identity(), atol=atol)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Lut1D):
            return NotImplemented
        return (
            np.array_equal(self.r, other.r)
            and np.array_equal(self.g, other.g)
            and np.array_equal(self.b, other.b)
        )

    # Compared by content, so not usable as a dict key
    __hash__ = None

    def __repr__(self) -> str:
        return (
            f"Lut1D(r=[{self.r[0]:.3f}..{self.r[-1]:.3f}], "
            f"g=[{self.g[0]:.3f}..{self.g[-1]:.3f}], "
            f"b=[{self.b[0]:.3f}..{self.b[-1]:.3f}])"
        )
