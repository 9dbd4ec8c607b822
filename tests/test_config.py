"""Tests for parameter sets and ParamSpec."""

import pytest

from autolut import (
    AnalysisParams,
    ContrastParams,
    ExposureParams,
    ParamSpec,
    SaturationParams,
    WhiteBalanceParams,
)

ALL_PARAMS = [AnalysisParams, ExposureParams, ContrastParams, WhiteBalanceParams, SaturationParams]


class TestParamSpec:
    """Test ParamSpec validation."""

    def test_clamps_values(self):
        """Test values are clamped into range."""
        spec = ParamSpec("strength", 0.0, 1.0, 0.5)
        assert spec.validate(1.5) == 1.0
        assert spec.validate(-0.2) == 0.0
        assert spec.validate(0.3) == 0.3

    def test_rejects_non_numbers(self):
        """Test strings and booleans are rejected."""
        spec = ParamSpec("strength", 0.0, 1.0, 0.5)
        with pytest.raises(ValueError, match="expected number"):
            spec.validate("high")
        with pytest.raises(ValueError, match="expected number"):
            spec.validate(True)

    def test_is_default(self):
        """Test default detection with tolerance."""
        spec = ParamSpec("strength", 0.0, 1.0, 0.5)
        assert spec.is_default(0.5)
        assert not spec.is_default(0.51)

    def test_repr(self):
        """Test repr shows range and default."""
        assert repr(ParamSpec("gain_min", 0.5, 1.0, 0.9)) == "ParamSpec(gain_min, range=[0.5, 1.0], default=0.9)"


class TestDefaults:
    """Test documented default values."""

    def test_exposure_defaults(self):
        """Test exposure defaults."""
        params = ExposureParams()
        assert (params.target_y50, params.max_ev, params.strength) == (0.45, 0.7, 0.6)

    def test_contrast_defaults(self):
        """Test contrast defaults."""
        params = ContrastParams()
        assert (params.target_range, params.max_range, params.strength) == (0.55, 0.15, 0.4)

    def test_white_balance_defaults(self):
        """Test white balance defaults."""
        params = WhiteBalanceParams()
        assert (params.strength, params.gain_min, params.gain_max) == (0.4, 0.9, 1.1)

    def test_saturation_defaults(self):
        """Test saturation defaults."""
        params = SaturationParams()
        assert (params.target_sat95, params.sat_knee, params.max_compression) == (0.22, 0.1, 0.35)

    def test_analysis_defaults(self):
        """Test analysis defaults."""
        params = AnalysisParams()
        assert (params.black_clip, params.white_clip) == (0.01, 0.99)

    @pytest.mark.parametrize("params_cls", ALL_PARAMS)
    def test_defaults_within_ranges(self, params_cls):
        """Test every default lies inside its documented range."""
        for spec in params_cls.describe():
            assert spec.min_value <= spec.default <= spec.max_value, spec.name
            assert spec.description


class TestMerge:
    """Test override merging."""

    def test_none_returns_defaults(self):
        """Test None resolves to the defaults."""
        assert ContrastParams.resolve(None) == ContrastParams()

    def test_partial_mapping(self):
        """Test a mapping overrides only the named fields."""
        params = ContrastParams.resolve({"strength": 0.6})
        assert params.strength == 0.6
        assert params.target_range == 0.55

    def test_instance_passthrough(self):
        """Test an instance is used as is."""
        custom = ExposureParams(strength=0.9)
        assert ExposureParams.resolve(custom) is custom

    def test_values_clamped(self):
        """Test overrides are clamped into range."""
        assert WhiteBalanceParams.resolve({"gain_max": 5.0}).gain_max == 2.0

    def test_unknown_key(self):
        """Test unknown keys raise with the valid names."""
        with pytest.raises(ValueError, match="unknown parameter") as exc:
            SaturationParams.resolve({"sat_strenght": 0.2})
        assert "sat_strength" in str(exc.value)

    def test_wrong_type(self):
        """Test non-mapping overrides raise."""
        with pytest.raises(ValueError, match="must be a mapping"):
            ExposureParams.resolve([("strength", 0.5)])

    def test_merged_keeps_original(self):
        """Test merging returns a new instance."""
        base = ExposureParams()
        merged = base.merged({"max_ev": 1.0})
        assert base.max_ev == 0.7
        assert merged.max_ev == 1.0

    def test_describe_order(self):
        """Test describe follows field declaration order."""
        names = [spec.name for spec in ExposureParams.describe()]
        assert names[:3] == ["target_y50", "max_ev", "strength"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
