"""RGBA8 pixel buffer helpers."""

from __future__ import annotations

import numpy as np


def as_pixel_rows(pixels: np.ndarray) -> tuple[np.ndarray, tuple[int, ...]]:
    """Flatten an RGBA8 buffer to contiguous ``[n_pixels, 4]`` rows.

    :param pixels: uint8 array whose last axis has length 4, e.g. (H, W, 4)
    :returns: Tuple of (rows, original shape)
    :raises TypeError: If the buffer is not uint8
    :raises ValueError: If the last axis is not RGBA
    """
    pixels = np.asarray(pixels)
    if pixels.dtype != np.uint8:
        raise TypeError(f"pixels must be uint8 RGBA, got dtype {pixels.dtype}")
    if pixels.ndim == 0 or pixels.shape[-1] != 4:
        raise ValueError(f"pixels must have a last axis of length 4 (RGBA), got shape {pixels.shape}")
    return np.ascontiguousarray(pixels.reshape(-1, 4)), pixels.shape


def to_levels(values: np.ndarray) -> np.ndarray:
    """Convert normalized values to 0-255 bytes, rounding half up.

    :param values: Array of floats in [0, 1]
    :returns: uint8 array of the same shape
    """
    scaled = np.floor(np.asarray(values, dtype=np.float64) * 255.0 + 0.5)
    return np.clip(scaled, 0, 255).astype(np.uint8)
