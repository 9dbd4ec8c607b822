"""Shared constants for LUT sizes, luminance weights and numeric floors."""

from __future__ import annotations

import numpy as np

# Entries in a Lut1D channel (one per 8-bit input level)
LUT1D_SIZE = 256
MAX_LEVEL = 255.0

# Lut3D grid sizes
DEFAULT_GRID_SIZE = 17
MIN_GRID_SIZE = 2
MAX_GRID_SIZE = 129

# Rec. 709 luminance weights
REC709_R = 0.2126
REC709_G = 0.7152
REC709_B = 0.0722
REC709_WEIGHTS = np.array([REC709_R, REC709_G, REC709_B], dtype=np.float32)

# Floor for divisions and the threshold below which a correction is a no-op
EPSILON = 1e-3
