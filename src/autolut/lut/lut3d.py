"""3D lookup table over the RGB cube.

Data is a flat float32 array of ``size**3 * 3`` values indexed
``(r + g*N + b*N*N) * 3``, so red varies fastest. Values between grid points
are reconstructed with trilinear interpolation, which is exact at grid points.

Example:
    >>> lut = Lut3D.compose(Lut3D.from_lut1d(tone), Lut3D.saturation_adjust(-0.2))
    >>> texture = lut.to_texture_2d()
    >>> texture.width, texture.height
    (17, 289)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike

from autolut.constants import (
    DEFAULT_GRID_SIZE,
    LUT1D_SIZE,
    MAX_GRID_SIZE,
    MAX_LEVEL,
    MIN_GRID_SIZE,
    REC709_WEIGHTS,
)
from autolut.lut.buffer import as_pixel_rows, to_levels
from autolut.lut.kernels import (
    apply_lut3d_numba,
    hue_saturation_grid_numba,
    hue_shift_grid_numba,
    lookup_many_numba,
    saturation_compress_grid_numba,
)
from autolut.lut.lut1d import Lut1D
from autolut.validators import validate_positive, validate_range

logger = logging.getLogger(__name__)

_CHANNELS = {"r": 0, "g": 1, "b": 2}


@validate_range(MIN_GRID_SIZE, MAX_GRID_SIZE, "size", param_index=0)
def grid_coordinates(size: int) -> np.ndarray:
    """Normalized RGB coordinates of every grid cell in storage order.

    :param size: Grid size N
    :returns: Array [N**3, 3] of (r, g, b) in [0, 1]
    """
    axis = np.linspace(0.0, 1.0, size, dtype=np.float32)
    b, g, r = np.meshgrid(axis, axis, axis, indexing="ij")
    return np.stack([r, g, b], axis=-1).reshape(-1, 3)


@validate_range(MIN_GRID_SIZE, MAX_GRID_SIZE, "size", param_index=0)
def _empty_grid(size: int) -> np.ndarray:
    return np.empty(size * size * size * 3, dtype=np.float32)


@dataclass(frozen=True)
class Texture2D:
    """A Lut3D packed into a 2D RGBA8 image.

    Width is N and height is N*N. Row ``g + b*N`` holds the red ramp for that
    (g, b) pair, so B selects a block of N rows. Alpha is always 255.

    Attributes:
        width: Texture width (N)
        height: Texture height (N*N)
        data: uint8 array [height, width, 4]
    """

    width: int
    height: int
    data: np.ndarray


@dataclass(frozen=True, eq=False)
class Lut3D:
    """Trilinearly interpolated lookup table over the RGB cube.

    Attributes:
        size: Grid size N per axis
        data: Flat float32 array [N**3 * 3]
    """

    size: int
    data: np.ndarray

    def __post_init__(self):
        size = int(self.size)
        if size < MIN_GRID_SIZE or size > MAX_GRID_SIZE:
            raise ValueError(
                f"size={size} is outside valid range [{MIN_GRID_SIZE}, {MAX_GRID_SIZE}]."
            )
        data = np.asarray(self.data, dtype=np.float32).reshape(-1)
        expected = size * size * size * 3
        if data.shape[0] != expected:
            raise ValueError(f"Lut3D of size {size} needs {expected} values, got {data.shape[0]}")
        data = np.ascontiguousarray(data.copy())
        data.flags.writeable = False
        object.__setattr__(self, "size", size)
        object.__setattr__(self, "data", data)

    # ========================================================================
    # Construction
    # ========================================================================

    @classmethod
    def identity(cls, size: int = DEFAULT_GRID_SIZE) -> Lut3D:
        """Create the identity cube, mapping every grid point to itself."""
        return cls(size, grid_coordinates(size).reshape(-1))

    @classmethod
    def create(cls, size: int, data: ArrayLike) -> Lut3D:
        """Create a cube from flat data of length ``size**3 * 3``."""
        return cls(size, data)

    @classmethod
    def from_array(cls, table: ArrayLike) -> Lut3D:
        """Create a cube from an array [N, N, N, 3] indexed [b, g, r]."""
        arr = np.asarray(table, dtype=np.float32)
        if arr.ndim != 4 or arr.shape[-1] != 3 or not arr.shape[0] == arr.shape[1] == arr.shape[2]:
            raise ValueError(f"Expected shape (N, N, N, 3), got {arr.shape}")
        return cls(arr.shape[0], arr.reshape(-1))

    @classmethod
    def from_lut1d(cls, lut: Lut1D, size: int = DEFAULT_GRID_SIZE) -> Lut3D:
        """Extend a Lut1D over the cube, each channel mapped independently.

        Grid index k reads table entry ``round(k / (N-1) * 255)``.

        :param lut: Per-channel table
        :param size: Grid size
        :returns: New Lut3D
        """
        coords = grid_coordinates(size)
        idx = np.floor(coords.astype(np.float64) * MAX_LEVEL + 0.5).astype(np.int64)
        idx = np.clip(idx, 0, LUT1D_SIZE - 1)
        data = np.stack([lut.r[idx[:, 0]], lut.g[idx[:, 1]], lut.b[idx[:, 2]]], axis=1)
        return cls(size, data.reshape(-1))

    def to_array(self) -> np.ndarray:
        """Return the cube as [N, N, N, 3] indexed [b, g, r]."""
        n = self.size
        return self.data.reshape(n, n, n, 3)

    # ========================================================================
    # Evaluation
    # ========================================================================

    def lookup(self, r: float, g: float, b: float) -> tuple[float, float, float]:
        """Trilinear lookup of one color.

        :param r: Red in [0, 1]
        :param g: Green in [0, 1]
        :param b: Blue in [0, 1]
        :returns: Mapped (r, g, b)
        """
        out = self.lookup_many(np.array([[r, g, b]], dtype=np.float32))
        return float(out[0, 0]), float(out[0, 1]), float(out[0, 2])

    def lookup_many(self, rgb: ArrayLike) -> np.ndarray:
        """Trilinear lookup of many colors.

        :param rgb: Colors [n, 3] in [0, 1]
        :returns: Mapped colors [n, 3] as float32
        """
        rgb = np.ascontiguousarray(np.asarray(rgb, dtype=np.float32).reshape(-1, 3))
        out = np.empty_like(rgb)
        lookup_many_numba(rgb, self.data, self.size, out)
        return out

    def apply(self, pixels: np.ndarray) -> np.ndarray:
        """Map an RGBA8 buffer through the cube, leaving alpha untouched.

        :param pixels: uint8 array with last axis RGBA
        :returns: New buffer of the same shape
        """
        rows, shape = as_pixel_rows(pixels)
        out = np.empty_like(rows)
        apply_lut3d_numba(rows, self.data, self.size, out)
        return out.reshape(shape)

    # ========================================================================
    # Composition and conversion
    # ========================================================================

    @staticmethod
    def compose(*luts: Lut3D) -> Lut3D:
        """Compose cubes left to right into one equivalent cube.

        The result uses the first cube's grid. Each following cube is sampled
        trilinearly at the running output. Zero cubes give identity.

        :param luts: Cubes in application order
        :returns: Composed Lut3D
        """
        if not luts:
            return Lut3D.identity()

        result = luts[0]
        for lut in luts[1:]:
            mapped = lut.lookup_many(result.data.reshape(-1, 3))
            result = Lut3D(result.size, mapped.reshape(-1))
        logger.debug("[Lut3D] Composed %d cubes on a %d^3 grid", len(luts), result.size)
        return result

    def project_diagonal(self) -> Lut1D:
        """Sample the cube along its gray axis into a Lut1D.

        Channel c of level i is the c output of ``lookup(i/255, i/255, i/255)``.
        Cross-channel effects are lost.
        """
        ramp = np.arange(LUT1D_SIZE, dtype=np.float32) / np.float32(MAX_LEVEL)
        mapped = self.lookup_many(np.repeat(ramp[:, None], 3, axis=1))
        return Lut1D(mapped[:, 0], mapped[:, 1], mapped[:, 2])

    def to_texture_2d(self) -> Texture2D:
        """Pack the cube into an RGBA8 texture of width N and height N*N."""
        n = self.size
        rgb = to_levels(self.data).reshape(n * n, n, 3)
        alpha = np.full((n * n, n, 1), 255, dtype=np.uint8)
        return Texture2D(width=n, height=n * n, data=np.concatenate([rgb, alpha], axis=2))

    def allclose(self, other: Lut3D, atol: float = 1e-5) -> bool:
        """Check whether two cubes of equal size agree within ``atol``."""
        return self.size == other.size and bool(np.allclose(self.data, other.data, atol=atol, rtol=0))

    def is_identity(self, atol: float = 1e-5) -> bool:
        return self.allclose(Lut3D.identity(self.size), atol=atol)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Lut3D):
            return NotImplemented
        return self.size == other.size and np.array_equal(self.data, other.data)

    __hash__ = None

    def __repr__(self) -> str:
        return f"Lut3D(size={self.size}, cells={self.size ** 3})"

    # ========================================================================
    # Generators
    # ========================================================================

    @classmethod
    def channel_swap(cls, mapping: str | Sequence[str], size: int = DEFAULT_GRID_SIZE) -> Lut3D:
        """Route input channels to output channels.

        :param mapping: Source channel for output (r, g, b), e.g. "bgr"
        :param size: Grid size
        :returns: New Lut3D
        """
        names = list(mapping)
        if len(names) != 3 or any(name not in _CHANNELS for name in names):
            raise ValueError(f'mapping="{mapping}" is not valid. Use three of "r", "g", "b".')
        coords = grid_coordinates(size)
        order = [_CHANNELS[name] for name in names]
        return cls(size, coords[:, order].reshape(-1))

    @classmethod
    @validate_positive("hue_range", param_index=3)
    def hue_shift(
        cls,
        source_hue: float,
        target_hue: float,
        hue_range: float = 30.0,
        strength: float = 1.0,
        size: int = DEFAULT_GRID_SIZE,
    ) -> Lut3D:
        """Rotate hues within ``hue_range`` degrees of ``source_hue`` toward ``target_hue``.

        The rotation falls off linearly to zero at the edge of the range.
        """
        out = _empty_grid(size)
        hue_shift_grid_numba(size, float(source_hue), float(target_hue), float(hue_range), float(strength), out)
        return cls(size, out)

    @classmethod
    @validate_positive("hue_range", param_index=3)
    def hue_saturation(
        cls,
        hue: float,
        boost: float,
        hue_range: float = 30.0,
        size: int = DEFAULT_GRID_SIZE,
    ) -> Lut3D:
        """Add ``boost`` (-1 to 1) to the saturation of hues near ``hue``."""
        out = _empty_grid(size)
        hue_saturation_grid_numba(size, float(hue), float(boost), float(hue_range), out)
        return cls(size, out)

    @classmethod
    def saturation_adjust(cls, amount: float, size: int = DEFAULT_GRID_SIZE) -> Lut3D:
        """Scale chroma around Rec.709 gray. -1 gives grayscale, 0 is identity."""
        coords = grid_coordinates(size)
        gray = coords @ REC709_WEIGHTS
        out = gray[:, None] + (coords - gray[:, None]) * (1.0 + amount)
        return cls(size, np.clip(out, 0.0, 1.0).reshape(-1))

    @classmethod
    def contrast_adjust(cls, factor: float, size: int = DEFAULT_GRID_SIZE) -> Lut3D:
        """Scale every channel around 0.5 by ``factor``."""
        coords = grid_coordinates(size)
        out = (coords - 0.5) * factor + 0.5
        return cls(size, np.clip(out, 0.0, 1.0).reshape(-1))

    @classmethod
    def color_temperature(cls, shift: float, size: int = DEFAULT_GRID_SIZE) -> Lut3D:
        """Warm (negative shift) or cool (positive shift) the image.

        ``shift`` runs from -100 to 100 and scales red and blue by up to 20%
        in opposite directions. Black is unchanged.
        """
        t = float(np.clip(shift, -100.0, 100.0)) / 100.0
        gains = np.array([1.0 - 0.2 * t, 1.0, 1.0 + 0.2 * t], dtype=np.float32)
        out = grid_coordinates(size) * gains
        return cls(size, np.clip(out, 0.0, 1.0).reshape(-1))

    @classmethod
    def duotone(
        cls,
        shadow: Sequence[float],
        highlight: Sequence[float],
        strength: float = 1.0,
        size: int = DEFAULT_GRID_SIZE,
    ) -> Lut3D:
        """Map luminance onto a gradient from ``shadow`` to ``highlight``.

        :param shadow: RGB color for black
        :param highlight: RGB color for white
        :param strength: Blend between the original (0) and the duotone (1)
        :param size: Grid size
        """
        coords = grid_coordinates(size)
        lo = np.asarray(shadow, dtype=np.float32).reshape(3)
        hi = np.asarray(highlight, dtype=np.float32).reshape(3)
        y = np.clip(coords @ REC709_WEIGHTS, 0.0, 1.0)[:, None]
        tone = lo + (hi - lo) * y
        out = coords + (tone - coords) * strength
        return cls(size, np.clip(out, 0.0, 1.0).reshape(-1))

    @classmethod
    def color_matrix(cls, matrix: ArrayLike, size: int = DEFAULT_GRID_SIZE) -> Lut3D:
        """Apply a 3x3 color matrix (row-major, 9 values), clamping the output."""
        m = np.asarray(matrix, dtype=np.float32).reshape(3, 3)
        out = grid_coordinates(size) @ m.T
        return cls(size, np.clip(out, 0.0, 1.0).reshape(-1))

    @classmethod
    def saturation_compression(
        cls,
        compression: float,
        sat_lo: float,
        sat_hi: float,
        size: int = DEFAULT_GRID_SIZE,
    ) -> Lut3D:
        """Pull saturated colors toward their own luminance-matched gray.

        The pull ramps in from ``sat_lo`` to ``sat_hi`` of the max-min
        saturation proxy and is scaled by ``compression``.
        """
        out = _empty_grid(size)
        saturation_compress_grid_numba(size, float(compression), float(sat_lo), float(sat_hi), out)
        return cls(size, out)
