"""Lookup table value types and their application kernels."""

from autolut.lut.effects import PixelEffects, apply_with_effects, posterize_table
from autolut.lut.lut1d import Lut1D
from autolut.lut.lut3d import Lut3D, Texture2D, grid_coordinates

__all__ = [
    "Lut1D",
    "Lut3D",
    "Texture2D",
    "PixelEffects",
    "apply_with_effects",
    "grid_coordinates",
    "posterize_table",
]
