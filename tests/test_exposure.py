"""Tests for exposure correction."""

import math

import numpy as np
import pytest

from autolut import (
    ExposureGuard,
    ImageClassification,
    LuminanceStats,
    compute_exposure,
    exposure_to_lut,
)


def normal_scene(p50: float) -> LuminanceStats:
    """Mid-range scene with the given median."""
    return LuminanceStats(p01=0.01, p10=0.1, p50=p50, p90=0.8, p99=0.95, range=0.7, mid_ratio=0.4)


class TestComputeExposure:
    """Test exposure gain computation."""

    def test_on_target_is_unity(self):
        """Test a median at the target gives gain 1."""
        result = compute_exposure(normal_scene(0.45))
        assert result.gain == pytest.approx(1.0)
        assert result.ev_delta == pytest.approx(0.0)
        assert not result.guard_applied

    def test_dark_image_brightens(self):
        """Test a dark median gives a positive EV and gain above 1."""
        result = compute_exposure(normal_scene(0.2))
        expected_ev = math.log2(0.45 / 0.2)
        applied = 0.7 * math.tanh(expected_ev / 0.7)
        assert result.ev_delta == pytest.approx(expected_ev)
        assert result.applied_ev_delta == pytest.approx(applied)
        assert result.gain == pytest.approx(1.0 + (2.0**applied - 1.0) * 0.6)
        assert result.gain > 1.0

    def test_bright_image_darkens(self):
        """Test a bright median gives a gain below 1."""
        result = compute_exposure(normal_scene(0.7))
        assert result.ev_delta < 0
        assert result.gain < 1.0

    def test_soft_limit(self):
        """Test the applied EV never exceeds max_ev."""
        result = compute_exposure(normal_scene(0.01))
        assert abs(result.applied_ev_delta) < 0.7

    def test_dark_input_guard(self):
        """Test an unmeasurably dark median skips the correction."""
        result = compute_exposure(normal_scene(0.0))
        assert result.gain == 1.0
        assert result.guard_type == ExposureGuard.DARK_INPUT

    def test_low_key_guard(self):
        """Test low key scenes get half strength and a 0.3 EV limit."""
        stats = LuminanceStats(p10=0.02, p50=0.15, p90=0.4, range=0.38, mid_ratio=0.3)
        result = compute_exposure(stats)
        assert result.guard_type == ExposureGuard.LOW_KEY
        assert result.effective_strength == pytest.approx(0.3)
        assert result.max_ev == pytest.approx(0.3)
        assert abs(result.applied_ev_delta) < 0.3

    def test_high_key_guard(self):
        """Test high key scenes are guarded."""
        stats = LuminanceStats(p10=0.5, p50=0.85, p90=0.95, range=0.45)
        result = compute_exposure(stats)
        assert ExposureGuard.HIGH_KEY in result.guards
        assert result.gain < 1.0

    def test_clipping_guard_stacks(self):
        """Test clipping multiplies into the key adjustment."""
        classification = ImageClassification(is_low_key=True, has_significant_clipping=True)
        result = compute_exposure(normal_scene(0.2), classification)
        assert result.guards == (ExposureGuard.LOW_KEY, ExposureGuard.SIGNIFICANT_CLIPPING)
        assert result.guard_type == ExposureGuard.LOW_KEY
        assert result.effective_strength == pytest.approx(0.6 * 0.5 * 0.7)

    def test_explicit_classification_overrides(self):
        """Test a supplied classification is used instead of deriving one."""
        result = compute_exposure(normal_scene(0.2), ImageClassification())
        assert not result.guard_applied

    def test_params_override(self):
        """Test strength 0 disables the correction."""
        result = compute_exposure(normal_scene(0.2), params={"strength": 0.0})
        assert result.gain == pytest.approx(1.0)


class TestExposureLut:
    """Test the exposure table."""

    def test_unity_gain_is_identity(self):
        """Test gain 1 gives the identity table."""
        assert exposure_to_lut(compute_exposure(normal_scene(0.45))).is_identity(atol=1e-6)

    def test_gain_scales_and_clamps(self):
        """Test the table is clamp(i/255 * gain)."""
        result = compute_exposure(normal_scene(0.2))
        lut = exposure_to_lut(result)
        levels = np.arange(256) / 255.0
        np.testing.assert_allclose(lut.r, np.clip(levels * result.gain, 0, 1), atol=1e-6)
        assert lut.r[-1] == 1.0
        np.testing.assert_array_equal(lut.r, lut.b)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
