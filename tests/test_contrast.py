"""Tests for contrast correction."""

import logging
import math

import numpy as np
import pytest

from autolut import (
    ContrastGuard,
    ImageClassification,
    LuminanceStats,
    compute_contrast,
    contrast_to_curve,
    contrast_to_lut,
)
from autolut.correction.contrast import ContrastCorrectionResult


class TestGuards:
    """Test contrast guards."""

    def test_high_contrast_cancels_expansion(self):
        """Test a wide range with an expanding target does nothing."""
        stats = LuminanceStats(p50=0.5, range=0.8)
        flags = ImageClassification(is_high_contrast=True)
        result = compute_contrast(stats, flags, {"target_range": 0.9})
        assert result.guard_applied
        assert result.guard_type == ContrastGuard.HIGH_CONTRAST
        assert result.amount == 0.0

    def test_high_contrast_allows_compression(self):
        """Test the same scene may still be compressed."""
        stats = LuminanceStats(p50=0.5, range=0.8)
        flags = ImageClassification(is_high_contrast=True)
        result = compute_contrast(stats, flags, {"target_range": 0.55})
        assert not result.guard_applied
        assert result.delta == pytest.approx(-0.25)
        assert result.amount < 0

    def test_low_key_low_contrast(self):
        """Test a dim flat scene runs at 0.3 of the base strength."""
        result = compute_contrast(LuminanceStats(p50=0.2, range=0.25))
        assert result.guard_type == ContrastGuard.LOW_KEY_LOW_CONTRAST
        assert result.effective_strength == pytest.approx(0.12)

    def test_high_key(self):
        """Test bright scenes run at half strength."""
        result = compute_contrast(LuminanceStats(p50=0.8, range=0.4))
        assert result.guards == (ContrastGuard.HIGH_KEY,)
        assert result.effective_strength == pytest.approx(0.2)

    def test_first_guard_wins(self):
        """Test a dim flat scene with few mid-tones only takes the first guard."""
        result = compute_contrast(LuminanceStats(p50=0.2, range=0.25, mid_ratio=0.1))
        assert result.guards == (ContrastGuard.LOW_KEY_LOW_CONTRAST,)
        assert result.guard_type == ContrastGuard.LOW_KEY_LOW_CONTRAST
        assert result.effective_strength == pytest.approx(0.12)

    def test_high_key_masks_low_mid_ratio(self):
        """Test a bright scene with few mid-tones runs at half strength only."""
        stats = LuminanceStats(p10=0.5, p50=0.8, p90=0.95, range=0.45, mid_ratio=0.1)
        result = compute_contrast(stats)
        assert result.guards == (ContrastGuard.HIGH_KEY,)
        assert result.effective_strength == pytest.approx(0.2)
        assert result.amount == pytest.approx(0.15 * math.tanh(0.1 / 0.15) * 0.2)

    def test_low_mid_ratio_alone(self):
        """Test few mid-tones in a mid-key scene runs at 0.3 of the base strength."""
        result = compute_contrast(LuminanceStats(p50=0.5, range=0.45, mid_ratio=0.1))
        assert result.guards == (ContrastGuard.LOW_MID_RATIO,)
        assert result.effective_strength == pytest.approx(0.12)

    def test_guards_only_reduce(self):
        """Test no guard raises strength above the base."""
        for p50 in np.linspace(0.05, 0.95, 10):
            for spread in np.linspace(0.05, 0.7, 8):
                result = compute_contrast(LuminanceStats(p50=float(p50), range=float(spread)))
                assert result.effective_strength <= 0.4 + 1e-12


class TestAmount:
    """Test the S-curve amount."""

    def test_on_target(self):
        """Test a range at the target gives no correction."""
        result = compute_contrast(LuminanceStats(p50=0.5, range=0.55))
        assert result.amount == pytest.approx(0.0)

    def test_tanh_soft_limit(self):
        """Test the delta is soft-limited to max_range."""
        result = compute_contrast(LuminanceStats(p50=0.5, range=0.35))
        assert result.clamped_delta == pytest.approx(0.15 * math.tanh(0.2 / 0.15))
        assert result.amount == pytest.approx(result.clamped_delta * 0.4)
        assert abs(result.clamped_delta) < 0.15

    def test_debug_log_is_lazy(self, caplog):
        """Test the debug line carries its values as arguments."""
        with caplog.at_level(logging.DEBUG, logger="autolut.correction.contrast"):
            compute_contrast(LuminanceStats(p50=0.5, range=0.35))
        record = caplog.records[-1]
        assert record.msg.startswith("[Contrast] delta=%+.3f")
        assert record.args
        assert "delta=+0.200" in record.getMessage()


class TestCurve:
    """Test the contrast curve and table."""

    def test_negligible_amount_is_identity(self):
        """Test tiny amounts give an identity curve."""
        curve = contrast_to_curve(ContrastCorrectionResult(amount=0.0005))
        assert curve.is_identity()

    def test_s_curve_shape(self):
        """Test positive amounts darken shadows and brighten highlights."""
        curve = contrast_to_curve(ContrastCorrectionResult(amount=0.1), point_count=5)
        outputs = curve.outputs
        assert outputs[0] == 0.0 and outputs[-1] == 1.0
        assert outputs[1] < 0.25
        assert outputs[2] == pytest.approx(0.5)
        assert outputs[3] > 0.75

    def test_negative_amount_flattens(self):
        """Test negative amounts lift shadows."""
        curve = contrast_to_curve(ContrastCorrectionResult(amount=-0.1), point_count=5)
        assert curve.outputs[1] > 0.25

    def test_point_count_validated(self):
        """Test fewer than 3 points are rejected."""
        with pytest.raises(ValueError, match="point_count=2"):
            contrast_to_curve(ContrastCorrectionResult(amount=0.1), point_count=2)

    def test_lut_is_monotone(self):
        """Test the rasterized table never decreases."""
        lut = contrast_to_lut(ContrastCorrectionResult(amount=0.15))
        assert np.all(np.diff(lut.g) >= -1e-7)
        assert lut.g[0] == 0.0
        assert lut.g[-1] == 1.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
