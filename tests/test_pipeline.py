"""Tests for the staged LUT pipeline."""

import numpy as np
import pytest

from autolut import Lut1D, Lut3D, Pipeline, Stage


def gamma_lut(gamma: float) -> Lut1D:
    levels = np.arange(256) / 255.0
    return Lut1D.from_master(levels**gamma)


def gain_lut(gain: float) -> Lut1D:
    return Lut1D.from_master(np.clip(np.arange(256) / 255.0 * gain, 0, 1))


@pytest.fixture
def pipeline():
    """Three-stage pipeline with a cube at the end."""
    return (
        Pipeline()
        .add(Stage("exposure", "Exposure", gain_lut(1.2)))
        .add(Stage("contrast", "Contrast", gamma_lut(1.3)))
        .add(Stage("saturation", "Saturation", Lut3D.saturation_adjust(-0.5, 9)))
    )


class TestStage:
    """Test stage intensity and enable handling."""

    def test_intensity_clamped(self):
        """Test intensity is clamped to [0, 1]."""
        assert Stage("a", "A", Lut1D.identity(), intensity=1.5).intensity == 1.0
        assert Stage("a", "A", Lut1D.identity(), intensity=-1.0).intensity == 0.0

    def test_half_intensity_blends(self):
        """Test intensity 0.5 lands halfway between identity and the table."""
        stage = Stage("g", "Gamma", gamma_lut(2.0), intensity=0.5)
        expected = 0.5 * (np.arange(256) / 255.0) + 0.5 * gamma_lut(2.0).r
        np.testing.assert_allclose(stage.effective_lut().r, expected, atol=1e-6)

    def test_disabled_is_identity(self):
        """Test disabled stages are identity."""
        stage = Stage("g", "Gamma", gamma_lut(2.0), enabled=False)
        assert stage.effective_lut().is_identity()

    def test_cube_intensity(self):
        """Test cubes blend toward identity of their own grid."""
        stage = Stage("s", "Sat", Lut3D.saturation_adjust(-1.0, 5), intensity=0.0)
        lut = stage.effective_lut()
        assert lut.size == 5
        assert lut.is_identity()
        assert stage.is_3d

    def test_stage_unhashable(self):
        """Test stages and pipelines are compared by value but never hashed."""
        stage = Stage("g", "Gamma", gamma_lut(2.0))
        assert stage == Stage("g", "Gamma", gamma_lut(2.0))
        with pytest.raises(TypeError, match="unhashable"):
            hash(stage)
        with pytest.raises(TypeError, match="unhashable"):
            hash(Pipeline().add(stage))


class TestEditing:
    """Test functional editing operations."""

    def test_add_and_order(self, pipeline):
        """Test stages keep insertion order."""
        assert pipeline.stage_ids == ("exposure", "contrast", "saturation")
        assert len(pipeline) == 3

    def test_add_at_index(self, pipeline):
        """Test insertion at a position."""
        out = pipeline.add(Stage("wb", "WB", Lut1D.identity()), index=1)
        assert out.stage_ids == ("exposure", "wb", "contrast", "saturation")

    def test_duplicate_id_raises(self, pipeline):
        """Test ids must be unique."""
        with pytest.raises(ValueError, match="already exists"):
            pipeline.add(Stage("contrast", "Again", Lut1D.identity()))

    def test_edits_do_not_mutate(self, pipeline):
        """Test every edit returns a new pipeline."""
        edited = pipeline.remove("contrast").set_enabled("exposure", False)
        assert pipeline.stage_ids == ("exposure", "contrast", "saturation")
        assert pipeline.get("exposure").enabled
        assert not edited.get("exposure").enabled

    def test_unknown_id_is_noop(self, pipeline):
        """Test edits naming a missing stage change nothing."""
        assert pipeline.remove("missing") is pipeline
        assert pipeline.move("missing", 0) is pipeline
        assert pipeline.set_intensity("missing", 0.5) is pipeline
        assert pipeline.get("missing") is None
        assert pipeline.index_of("missing") == -1

    def test_move_clamps(self, pipeline):
        """Test moves past either end are clamped."""
        assert pipeline.move("exposure", 10).stage_ids == ("contrast", "saturation", "exposure")
        assert pipeline.move("saturation", -3).stage_ids == ("saturation", "exposure", "contrast")

    def test_replace_lut(self, pipeline):
        """Test a stage's table can be swapped."""
        out = pipeline.replace_lut("contrast", Lut1D.identity())
        assert out.get("contrast").lut.is_identity()

    def test_set_intensity_clamps(self, pipeline):
        """Test intensity updates are clamped."""
        assert pipeline.set_intensity("contrast", 3.0).get("contrast").intensity == 1.0


class TestComposition:
    """Test pipeline composition."""

    def test_empty_is_identity(self):
        """Test an empty pipeline composes to identity."""
        assert Pipeline().compose().is_identity()

    def test_compose_order(self):
        """Test stages apply left to right."""
        a, b = gain_lut(1.5), gamma_lut(2.0)
        pipe = Pipeline().add(Stage("a", "A", a)).add(Stage("b", "B", b))
        assert pipe.compose().allclose(Lut1D.compose(a, b), atol=1e-6)
        assert not pipe.compose().allclose(Lut1D.compose(b, a), atol=1e-3)

    def test_compose_up_to(self, pipeline):
        """Test partial composition and the negative index."""
        assert pipeline.compose_up_to(-1).is_identity()
        assert pipeline.compose_up_to(0).allclose(gain_lut(1.2), atol=1e-6)

    def test_disabled_stage_skipped(self, pipeline):
        """Test disabling a stage removes its effect."""
        disabled = pipeline.set_enabled("contrast", False).set_enabled("saturation", False)
        assert disabled.compose().allclose(gain_lut(1.2), atol=1e-6)

    def test_cube_projected(self):
        """Test cube stages contribute their gray-axis response."""
        cube = Lut3D.from_lut1d(gamma_lut(1.5), 33)
        pipe = Pipeline().add(Stage("cube", "Cube", cube))
        assert pipe.compose().allclose(gamma_lut(1.5), atol=0.01)

    def test_intermediate_luts(self, pipeline):
        """Test one running table per stage, ending at the full composition."""
        steps = pipeline.get_intermediate_luts()
        assert len(steps) == 3
        assert steps[0].allclose(gain_lut(1.2), atol=1e-6)
        assert steps[-1].allclose(pipeline.compose(), atol=1e-6)

    def test_apply(self, pipeline):
        """Test apply uses the composed table."""
        rng = np.random.default_rng(42)
        pixels = rng.integers(0, 256, size=(8, 8, 4), dtype=np.uint8)
        np.testing.assert_array_equal(pipeline.apply(pixels), pipeline.compose().apply(pixels))

    def test_repr(self, pipeline):
        """Test the repr lists stages and their state."""
        text = repr(pipeline.set_enabled("contrast", False).set_intensity("exposure", 0.5))
        assert "exposure x0.50" in text
        assert "contrast (off)" in text


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
