"""Tests for the per-channel Lut1D."""

import numpy as np
import pytest

from autolut import Lut1D


@pytest.fixture
def sample_pixels():
    """Random RGBA8 image."""
    rng = np.random.default_rng(42)
    return rng.integers(0, 256, size=(32, 48, 4), dtype=np.uint8)


def gamma_lut(gamma: float) -> Lut1D:
    levels = np.arange(256) / 255.0
    return Lut1D.from_master(levels**gamma)


class TestConstruction:
    """Test Lut1D construction and validation."""

    def test_identity_values(self):
        """Test identity maps level i to i/255."""
        lut = Lut1D.identity()
        expected = np.arange(256, dtype=np.float32) / 255.0
        np.testing.assert_allclose(lut.r, expected, atol=1e-7)
        np.testing.assert_allclose(lut.g, expected, atol=1e-7)
        np.testing.assert_allclose(lut.b, expected, atol=1e-7)
        assert lut.is_identity()

    def test_values_are_clamped(self):
        """Test out-of-range values are clamped on creation."""
        curve = np.linspace(-0.5, 1.5, 256)
        lut = Lut1D.from_master(curve)
        assert lut.r.min() == 0.0
        assert lut.r.max() == 1.0

    def test_wrong_length_raises(self):
        """Test channels must have 256 entries."""
        with pytest.raises(ValueError, match="256 entries"):
            Lut1D.create(np.zeros(255), np.zeros(256), np.zeros(256))

    def test_arrays_are_read_only(self):
        """Test channel arrays cannot be modified in place."""
        lut = Lut1D.identity()
        with pytest.raises(ValueError):
            lut.r[0] = 0.5

    def test_array_round_trip(self):
        """Test from_array/to_array preserve the table."""
        rng = np.random.default_rng(42)
        table = rng.random((256, 3)).astype(np.float32)
        lut = Lut1D.from_array(table)
        np.testing.assert_array_equal(lut.to_array(), table)

    def test_from_array_shape_check(self):
        """Test from_array rejects wrong shapes."""
        with pytest.raises(ValueError, match="Expected shape"):
            Lut1D.from_array(np.zeros((256, 4)))

    def test_equality(self):
        """Test equality compares table contents."""
        assert Lut1D.identity() == Lut1D.identity()
        assert Lut1D.identity() != gamma_lut(2.0)

    def test_unhashable(self):
        """Test content equality leaves the table unhashable."""
        with pytest.raises(TypeError, match="unhashable"):
            hash(Lut1D.identity())
        with pytest.raises(TypeError):
            {Lut1D.identity(): "identity"}


class TestLookup:
    """Test Lut1D evaluation."""

    def test_identity_lookup(self):
        """Test identity lookup returns its input."""
        r, g, b = Lut1D.identity().lookup(0.25, 0.5, 0.75)
        assert r == pytest.approx(0.25, abs=1e-6)
        assert g == pytest.approx(0.5, abs=1e-6)
        assert b == pytest.approx(0.75, abs=1e-6)

    def test_lookup_interpolates(self):
        """Test lookup interpolates linearly between entries."""
        curve = np.zeros(256)
        curve[1] = 1.0
        lut = Lut1D.from_master(curve)
        r, _, _ = lut.lookup(0.5 / 255.0, 0.0, 0.0)
        assert r == pytest.approx(0.5, abs=1e-6)

    def test_lookup_clamps_input(self):
        """Test inputs outside [0, 1] are clamped."""
        r, g, _ = Lut1D.identity().lookup(-1.0, 2.0, 0.0)
        assert r == 0.0
        assert g == pytest.approx(1.0)

    def test_apply_identity(self, sample_pixels):
        """Test applying identity leaves pixels unchanged."""
        out = Lut1D.identity().apply(sample_pixels)
        np.testing.assert_array_equal(out, sample_pixels)

    def test_apply_preserves_alpha(self, sample_pixels):
        """Test alpha is never mapped."""
        out = Lut1D.from_master(np.zeros(256)).apply(sample_pixels)
        np.testing.assert_array_equal(out[..., 3], sample_pixels[..., 3])
        assert out[..., :3].max() == 0

    def test_apply_rounds_half_up(self):
        """Test outputs are rounded with floor(x * 255 + 0.5)."""
        lut = Lut1D.from_master(np.full(256, 0.5))
        pixels = np.array([[[10, 20, 30, 255]]], dtype=np.uint8)
        out = lut.apply(pixels)
        np.testing.assert_array_equal(out[0, 0, :3], [128, 128, 128])

    def test_apply_rejects_non_uint8(self):
        """Test float buffers are rejected."""
        with pytest.raises(TypeError, match="uint8"):
            Lut1D.identity().apply(np.zeros((2, 2, 4), dtype=np.float32))

    def test_apply_rejects_rgb(self):
        """Test buffers without alpha are rejected."""
        with pytest.raises(ValueError, match="RGBA"):
            Lut1D.identity().apply(np.zeros((2, 2, 3), dtype=np.uint8))

    def test_apply_flat_buffer(self, sample_pixels):
        """Test flat [n, 4] buffers keep their shape."""
        flat = sample_pixels.reshape(-1, 4)
        out = gamma_lut(0.5).apply(flat)
        assert out.shape == flat.shape


class TestCompose:
    """Test Lut1D composition."""

    def test_empty_compose_is_identity(self):
        """Test composing nothing gives identity."""
        assert Lut1D.compose().is_identity()

    def test_identity_is_neutral(self):
        """Test identity is a left and right unit."""
        lut = gamma_lut(2.2)
        assert Lut1D.compose(Lut1D.identity(), lut).allclose(lut, atol=1e-6)
        assert Lut1D.compose(lut, Lut1D.identity()).allclose(lut, atol=1e-6)

    def test_inverse_gammas_cancel(self):
        """Test gamma 2 followed by gamma 0.5 is close to identity."""
        composed = Lut1D.compose(gamma_lut(2.0), gamma_lut(0.5))
        assert composed.is_identity(atol=0.03)

    def test_compose_matches_sequential_apply(self, sample_pixels):
        """Test a composed table agrees with applying tables one after another."""
        a = Lut1D.from_master(np.clip(np.arange(256) / 255.0 * 1.2, 0, 1))
        b = gamma_lut(1.5)
        sequential = b.apply(a.apply(sample_pixels)).astype(np.int32)
        composed = Lut1D.compose(a, b).apply(sample_pixels).astype(np.int32)
        assert np.abs(sequential - composed).max() <= 2

    def test_compose_is_associative(self):
        """Test grouping does not change the result."""
        a, b, c = gamma_lut(1.4), gamma_lut(0.8), gamma_lut(1.1)
        left = Lut1D.compose(Lut1D.compose(a, b), c)
        right = Lut1D.compose(a, Lut1D.compose(b, c))
        assert left.allclose(right, atol=1e-3)

    def test_inversion_is_involution(self):
        """Test inverting twice gives identity."""
        invert = Lut1D.from_master(1.0 - np.arange(256) / 255.0)
        assert Lut1D.compose(invert, invert).is_identity(atol=1e-3)

    def test_channels_compose_independently(self):
        """Test each channel uses its own curve."""
        levels = np.arange(256) / 255.0
        swap = Lut1D.create(levels, np.zeros(256), np.ones(256))
        composed = Lut1D.compose(swap, Lut1D.identity())
        assert composed.g.max() == 0.0
        assert composed.b.min() == 1.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
