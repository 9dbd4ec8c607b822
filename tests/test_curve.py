"""Tests for control-point tone curves."""

import numpy as np
import pytest

from autolut import ControlPoint, Curve


class TestCurve:
    """Test Curve construction and evaluation."""

    def test_identity(self):
        """Test the identity curve rasterizes to i/255."""
        curve = Curve.identity(7)
        assert curve.is_identity()
        np.testing.assert_allclose(curve.rasterize(), np.arange(256) / 255.0, atol=1e-6)

    def test_inputs_evenly_spaced(self):
        """Test inputs run from 0 to 1 in equal steps."""
        np.testing.assert_allclose(Curve.identity(5).inputs, [0, 0.25, 0.5, 0.75, 1.0])

    def test_points(self):
        """Test control points pair inputs with outputs."""
        points = Curve.from_values([0.0, 0.7, 1.0]).points
        assert points[1] == ControlPoint(0.5, 0.7)

    def test_too_few_points(self):
        """Test a single point is rejected."""
        with pytest.raises(ValueError, match="at least 2"):
            Curve((0.5,))

    def test_two_points_linear(self):
        """Test two points interpolate linearly."""
        curve = Curve.from_values([0.2, 0.8])
        assert float(curve.evaluate(0.5)) == pytest.approx(0.5)

    def test_passes_through_points(self):
        """Test evaluation is exact at control points."""
        outputs = [0.0, 0.1, 0.45, 0.9, 1.0]
        curve = Curve.from_values(outputs)
        np.testing.assert_allclose(curve.evaluate(curve.inputs), outputs, atol=1e-12)

    def test_monotone_without_overshoot(self):
        """Test a monotone set of points gives a monotone curve inside its bounds."""
        curve = Curve.from_values([0.0, 0.02, 0.05, 0.9, 0.95, 1.0])
        raster = curve.rasterize()
        assert np.all(np.diff(raster) >= -1e-7)
        assert raster.min() >= 0.0 and raster.max() <= 1.0

    def test_output_clamped(self):
        """Test outputs are clamped to [0, 1]."""
        curve = Curve.from_values([0.0, 1.4, 1.0])
        assert curve.rasterize().max() == 1.0

    def test_inputs_clamped(self):
        """Test inputs outside [0, 1] are clamped."""
        curve = Curve.from_values([0.1, 0.5, 0.9])
        assert float(curve.evaluate(-1.0)) == pytest.approx(0.1)
        assert float(curve.evaluate(2.0)) == pytest.approx(0.9)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
