"""Ordered, intensity-weighted LUT stages with functional composition.

Example:
    >>> pipe = (Pipeline()
    ...     .add(Stage("exposure", "Exposure", exposure_lut))
    ...     .add(Stage("contrast", "Contrast", contrast_lut, intensity=0.5))
    ...     .add(Stage("saturation", "Saturation", saturation_cube)))
    >>>
    >>> preview = pipe.compose_up_to(1)       # exposure + half contrast
    >>> net = pipe.set_enabled("contrast", False).compose()

Every method returns a new Pipeline; stages are never mutated in place.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

import numpy as np

from autolut.lut.lut1d import Lut1D
from autolut.lut.lut3d import Lut3D

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Stage:
    """A named LUT step.

    Attributes:
        id: Unique identifier within a pipeline
        name: Display name
        lut: 1D or 3D table
        enabled: Disabled stages compose as identity
        intensity: Blend between identity (0) and the full table (1)
    """

    id: str
    name: str
    lut: Lut1D | Lut3D
    enabled: bool = True
    intensity: float = 1.0

    # Holds an unhashable table
    __hash__ = None

    def __post_init__(self):
        object.__setattr__(self, "intensity", float(np.clip(self.intensity, 0.0, 1.0)))

    @property
    def is_3d(self) -> bool:
        return isinstance(self.lut, Lut3D)

    def effective_lut(self) -> Lut1D | Lut3D:
        """The table after applying ``enabled`` and ``intensity``.

        Values are linearly interpolated between identity and the table.
        """
        if isinstance(self.lut, Lut3D):
            identity = Lut3D.identity(self.lut.size)
            if not self.enabled or self.intensity <= 0.0:
                return identity
            if self.intensity >= 1.0:
                return self.lut
            blended = identity.data + (self.lut.data - identity.data) * self.intensity
            return Lut3D(self.lut.size, blended)

        identity = Lut1D.identity()
        if not self.enabled or self.intensity <= 0.0:
            return identity
        if self.intensity >= 1.0:
            return self.lut
        t = self.intensity
        return Lut1D(
            identity.r + (self.lut.r - identity.r) * t,
            identity.g + (self.lut.g - identity.g) * t,
            identity.b + (self.lut.b - identity.b) * t,
        )

    def effective_lut1d(self) -> Lut1D:
        """Effective table as a Lut1D, projecting cubes onto their gray axis."""
        lut = self.effective_lut()
        if isinstance(lut, Lut3D):
            return lut.project_diagonal()
        return lut


@dataclass(frozen=True)
class Pipeline:
    """Immutable ordered list of stages.

    Composition folds enabled stages left to right into one Lut1D. A Lut3D
    stage is projected onto its RGB diagonal first, so cross-channel effects
    (such as saturation compression) are only approximated in the result.
    Use ``Lut3D.compose`` when exact composition of cubes is required.
    """

    stages: tuple[Stage, ...] = ()

    __hash__ = None

    def __post_init__(self):
        object.__setattr__(self, "stages", tuple(self.stages))

    def __len__(self) -> int:
        return len(self.stages)

    def __iter__(self):
        return iter(self.stages)

    @property
    def stage_ids(self) -> tuple[str, ...]:
        return tuple(stage.id for stage in self.stages)

    def index_of(self, stage_id: str) -> int:
        """Position of a stage, or -1 if absent."""
        for i, stage in enumerate(self.stages):
            if stage.id == stage_id:
                return i
        return -1

    def get(self, stage_id: str) -> Stage | None:
        index = self.index_of(stage_id)
        return self.stages[index] if index >= 0 else None

    # ========================================================================
    # Editing
    # ========================================================================

    def add(self, stage: Stage, index: int | None = None) -> Pipeline:
        """Insert a stage at ``index`` (append when None).

        :raises ValueError: If a stage with the same id already exists
        """
        if self.index_of(stage.id) >= 0:
            raise ValueError(f"Stage id '{stage.id}' already exists in pipeline")
        stages = list(self.stages)
        if index is None:
            stages.append(stage)
        else:
            stages.insert(index, stage)
        return Pipeline(tuple(stages))

    def remove(self, stage_id: str) -> Pipeline:
        """Drop a stage; unknown ids leave the pipeline unchanged."""
        if self.index_of(stage_id) < 0:
            logger.debug("[Pipeline] remove: no stage %r", stage_id)
            return self
        return Pipeline(tuple(s for s in self.stages if s.id != stage_id))

    def move(self, stage_id: str, new_index: int) -> Pipeline:
        """Move a stage to ``new_index`` (clamped to the valid positions)."""
        index = self.index_of(stage_id)
        if index < 0:
            logger.debug("[Pipeline] move: no stage %r", stage_id)
            return self
        stages = list(self.stages)
        stage = stages.pop(index)
        new_index = max(0, min(len(stages), new_index))
        stages.insert(new_index, stage)
        return Pipeline(tuple(stages))

    def _update(self, stage_id: str, **changes) -> Pipeline:
        index = self.index_of(stage_id)
        if index < 0:
            logger.debug("[Pipeline] update: no stage %r", stage_id)
            return self
        stages = list(self.stages)
        stages[index] = replace(stages[index], **changes)
        return Pipeline(tuple(stages))

    def replace_lut(self, stage_id: str, lut: Lut1D | Lut3D) -> Pipeline:
        return self._update(stage_id, lut=lut)

    def set_enabled(self, stage_id: str, enabled: bool) -> Pipeline:
        return self._update(stage_id, enabled=enabled)

    def set_intensity(self, stage_id: str, intensity: float) -> Pipeline:
        """Set a stage's intensity, clamped to [0, 1]."""
        return self._update(stage_id, intensity=intensity)

    # ========================================================================
    # Composition
    # ========================================================================

    def compose(self) -> Lut1D:
        """Compose every enabled stage into one Lut1D."""
        return self.compose_up_to(len(self.stages) - 1)

    def compose_up_to(self, index: int) -> Lut1D:
        """Compose stages ``0..index`` inclusive; a negative index gives identity."""
        luts = [s.effective_lut1d() for s in self.stages[: max(0, index + 1)] if s.enabled]
        return Lut1D.compose(*luts)

    def get_intermediate_luts(self) -> list[Lut1D]:
        """Running composition after each stage, one entry per stage."""
        results = []
        current = Lut1D.identity()
        for stage in self.stages:
            if stage.enabled:
                current = Lut1D.compose(current, stage.effective_lut1d())
            results.append(current)
        return results

    def apply(self, pixels: np.ndarray) -> np.ndarray:
        """Apply the composed table to an RGBA8 buffer."""
        return self.compose().apply(pixels)

    def __repr__(self) -> str:
        parts = [
            f"{s.id}{'' if s.enabled else ' (off)'}"
            + (f" x{s.intensity:.2f}" if s.intensity < 1.0 else "")
            for s in self.stages
        ]
        return f"Pipeline([{', '.join(parts)}])"
