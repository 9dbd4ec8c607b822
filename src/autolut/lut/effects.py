"""Per-pixel effects applied after a LUT lookup.

The chain is stateless and always runs in the same order:
LUT, selective color, posterize, hue rotation, vibrance.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from autolut.constants import EPSILON
from autolut.lut.buffer import as_pixel_rows, to_levels
from autolut.lut.kernels import apply_effects_numba
from autolut.lut.lut1d import Lut1D
from autolut.lut.lut3d import Lut3D
from autolut.validators import validate_range

logger = logging.getLogger(__name__)

_NO_POSTERIZE = np.empty(0, dtype=np.uint8)


@dataclass(frozen=True)
class PixelEffects:
    """Settings for the post-LUT effect chain.

    Attributes:
        vibrance: Saturation boost weighted toward muted colors (0 = off)
        selective_color_enabled: Desaturate every hue outside the selected band
        selective_hue: Center of the kept hue band in degrees
        selective_range: Half-width of the kept band in degrees
        selective_desaturate: Saturation kept outside the band (0 = gray, 1 = unchanged)
        posterize_levels: Levels per channel, 2-255 active, 256 = off
        hue_rotation: Hue rotation in degrees (0 = off)
    """

    vibrance: float = 0.0
    selective_color_enabled: bool = False
    selective_hue: float = 0.0
    selective_range: float = 30.0
    selective_desaturate: float = 0.0
    posterize_levels: int = 256
    hue_rotation: float = 0.0

    def is_neutral(self) -> bool:
        """Check whether the chain leaves LUT output unchanged."""
        return (
            abs(self.vibrance) <= EPSILON
            and not self.selective_color_enabled
            and not 2 <= self.posterize_levels < 256
            and abs(self.hue_rotation) <= EPSILON
        )


@validate_range(2, 256, "levels", param_index=0)
def posterize_table(levels: int) -> np.ndarray:
    """Byte table quantizing 256 input levels to ``levels`` output levels.

    :param levels: Number of output levels (2-256, 256 is identity)
    :returns: uint8 table [256]
    """
    steps = levels - 1
    x = np.arange(256, dtype=np.float64) / 255.0
    quantized = np.floor(x * steps + 0.5) / steps
    return to_levels(quantized)


def apply_with_effects(
    pixels: np.ndarray,
    lut: Lut1D | Lut3D,
    effects: PixelEffects | None = None,
) -> np.ndarray:
    """Apply a LUT and then the effect chain to an RGBA8 buffer.

    :param pixels: uint8 array with last axis RGBA
    :param lut: Table applied first
    :param effects: Effect settings, None for LUT only
    :returns: New buffer of the same shape, alpha untouched

    Example:
        >>> out = apply_with_effects(pixels, lut, PixelEffects(vibrance=0.4, posterize_levels=8))
    """
    mapped = lut.apply(pixels)
    if effects is None or effects.is_neutral():
        return mapped

    rows, shape = as_pixel_rows(mapped)
    table = (
        posterize_table(effects.posterize_levels)
        if 2 <= effects.posterize_levels < 256
        else _NO_POSTERIZE
    )
    out = np.empty_like(rows)
    apply_effects_numba(
        rows,
        bool(effects.selective_color_enabled),
        float(effects.selective_hue),
        float(effects.selective_range),
        float(effects.selective_desaturate),
        table,
        float(effects.hue_rotation),
        float(effects.vibrance),
        out,
    )
    logger.debug("[Effects] Applied effect chain to %d pixels", rows.shape[0])
    return out.reshape(shape)
