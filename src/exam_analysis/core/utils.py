"""
Core numeric helpers shared across the analysis and detection engines.
"""

import numpy as np
from numpy.typing import NDArray


def clamp(value: float, lower: float, upper: float) -> float:
    """
    Clamp a value to a closed interval.

    NaN is mapped to ``lower`` so that undefined inputs never propagate
    into reported statistics.

    Args:
        value: Value to clamp.
        lower: Lower bound.
        upper: Upper bound.

    Returns:
        The clamped value as a Python float.
    """
    if np.isnan(value):
        return float(lower)
    return float(min(max(value, lower), upper))


def as_float_array(values: object) -> NDArray[np.float64]:
    """Convert a sequence of numbers to a 1D float64 array."""
    result: NDArray[np.float64] = np.asarray(values, dtype=np.float64)
    if result.ndim != 1:
        raise ValueError(f"expected a 1D sequence, got shape {result.shape}")
    return result


def safe_mean(values: NDArray[np.float64] | list[float]) -> float:
    """Arithmetic mean, defined as 0 for an empty input."""
    arr = np.asarray(values, dtype=np.float64)
    if arr.size == 0:
        return 0.0
    return float(np.mean(arr))
