"""Validation decorators for structural arguments.

Degenerate image data never raises; it is handled by correction guards.
These decorators only reject programmer errors such as a grid size of 1
or a control point count of 0, with a hint about sensible values.
"""

from __future__ import annotations

import functools
import numbers
from collections.abc import Callable
from typing import Any

_RANGE_SUGGESTIONS = {
    "size": "Use 17 for previews or 33 for export. Larger grids cost O(N^3) to build.",
    "grid_size": "Use 17 for previews or 33 for export. Larger grids cost O(N^3) to build.",
    "percentile": "Percentile is given in percent, 1.0 clips 1% at each end.",
    "point_count": "At least 2 points are needed to pin both endpoints.",
    "control_point_count": "At least 2 points are needed to pin both endpoints.",
    "levels": "Use 256 to disable posterization.",
}

_POSITIVE_SUGGESTIONS = {
    "gamma": "Use 1.0 for a linear response.",
    "strength": "Use a small value such as 0.1 for a subtle correction.",
    "hue_range": "Use 30 degrees to affect one color family.",
}


def _get_value(args: tuple, kwargs: dict, name: str, param_index: int) -> tuple[bool, Any]:
    if name in kwargs:
        return True, kwargs[name]
    if len(args) > param_index:
        return True, args[param_index]
    return False, None


def validate_range(
    min_value: float,
    max_value: float,
    name: str,
    param_index: int = 1,
) -> Callable:
    """Validate that a numeric argument lies in [min_value, max_value].

    :param min_value: Minimum allowed value (inclusive)
    :param max_value: Maximum allowed value (inclusive)
    :param name: Argument name, looked up in kwargs first
    :param param_index: Positional index used when passed positionally
    :returns: Decorator

    Example:
        >>> @validate_range(2, 129, "size", param_index=0)
        ... def grid(size: int) -> int:
        ...     return size
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            found, value = _get_value(args, kwargs, name, param_index)
            if found:
                if isinstance(value, bool) or not isinstance(value, numbers.Real):
                    raise TypeError(f"{name} must be a number, got {type(value).__name__}")
                if not min_value <= value <= max_value:
                    message = f"{name}={value} is outside valid range [{min_value}, {max_value}]."
                    hint = _RANGE_SUGGESTIONS.get(name)
                    if hint:
                        message = f"{message} {hint}"
                    raise ValueError(message)
            return func(*args, **kwargs)

        return wrapper

    return decorator


def validate_positive(name: str, param_index: int = 1) -> Callable:
    """Validate that a numeric argument is strictly positive.

    :param name: Argument name
    :param param_index: Positional index used when passed positionally
    :returns: Decorator
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            found, value = _get_value(args, kwargs, name, param_index)
            if found:
                if isinstance(value, bool) or not isinstance(value, numbers.Real):
                    raise TypeError(f"{name} must be a number, got {type(value).__name__}")
                if value <= 0:
                    message = f"{name}={value} must be positive."
                    hint = _POSITIVE_SUGGESTIONS.get(name)
                    if hint:
                        message = f"{message} {hint}"
                    raise ValueError(message)
            return func(*args, **kwargs)

        return wrapper

    return decorator

