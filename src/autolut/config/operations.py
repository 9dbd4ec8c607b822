"""Parameter specifications for correction configuration.

This module defines the ParamSpec dataclass that describes the allowed range,
default and meaning of a single tunable correction parameter.
"""

from __future__ import annotations

import numbers
from dataclasses import dataclass


@dataclass(frozen=True)
class ParamSpec:
    """Specification for a correction parameter.

    Attributes:
        name: Parameter name (e.g., "target_range", "strength")
        min_value: Minimum allowed value
        max_value: Maximum allowed value
        default: Default value when not overridden
        description: Human-readable description
    """

    name: str
    min_value: float
    max_value: float
    default: float
    description: str = ""

    def validate(self, value: float) -> float:
        """Validate and clamp value to allowed range.

        :param value: Value to validate
        :returns: Clamped value within [min_value, max_value]
        :raises ValueError: If value is not a number
        """
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            raise ValueError(f"{self.name}: expected number, got {type(value).__name__}")

        return max(self.min_value, min(self.max_value, float(value)))

    def is_default(self, value: float, tolerance: float = 1e-9) -> bool:
        """Check if value equals the default.

        :param value: Value to check
        :param tolerance: Tolerance for floating point comparison
        :returns: True if value is within tolerance of default
        """
        return abs(value - self.default) < tolerance

    def __repr__(self) -> str:
        return (
            f"ParamSpec({self.name}, "
            f"range=[{self.min_value}, {self.max_value}], "
            f"default={self.default})"
        )
