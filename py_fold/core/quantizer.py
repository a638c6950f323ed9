"""
Adaptive threshold quantization.

Cut points are percentiles of the active (positive) cell weights, so the same
four visual levels stay meaningful across fold counts and grid sizes.
"""

from dataclasses import dataclass
from typing import Mapping, Union

import numpy as np

THRESHOLD_EPSILON = 0.01

WeightInput = Union[np.ndarray, Mapping[object, float]]


@dataclass(frozen=True)
class AdaptiveThresholds:
    """Strictly ascending level cut points."""

    t1: float
    t2: float
    t3: float
    t_extreme: float

    def to_dict(self):
        return {"t1": self.t1, "t2": self.t2, "t3": self.t3, "tExtreme": self.t_extreme}


DEFAULT_THRESHOLDS = AdaptiveThresholds(1.0, 2.0, 3.0, 999.0)


def _positive_weights(cell_weights: WeightInput) -> np.ndarray:
    if isinstance(cell_weights, Mapping):
        values = np.fromiter(cell_weights.values(), dtype=np.float64, count=len(cell_weights))
    else:
        values = np.asarray(cell_weights, dtype=np.float64).ravel()
    return np.sort(values[values > 0])


def _percentile(sorted_weights: np.ndarray, p: float) -> float:
    """Nearest-rank style: element at floor(n * p), clamped to the last one."""
    n = len(sorted_weights)
    return float(sorted_weights[min(int(n * p), n - 1)])


def calculate_adaptive_thresholds(cell_weights: WeightInput) -> AdaptiveThresholds:
    """
    Percentile thresholds for a weight field.

    Args:
        cell_weights: ``(rows, cols)`` array or a mapping of cell -> weight

    Returns:
        AdaptiveThresholds; DEFAULT_THRESHOLDS when no weight is positive
    """
    weights = _positive_weights(cell_weights)
    if weights.size == 0:
        return DEFAULT_THRESHOLDS

    p94 = _percentile(weights, 0.94)
    t1 = max(THRESHOLD_EPSILON, _percentile(weights, 0.7))
    t2 = max(t1 + THRESHOLD_EPSILON, p94)
    t3 = max(t2 + THRESHOLD_EPSILON, p94 + 1)
    t_extreme = max(t3 + THRESHOLD_EPSILON, _percentile(weights, 0.985))
    return AdaptiveThresholds(t1, t2, t3, t_extreme)


def level(weight: float, thresholds: AdaptiveThresholds) -> int:
    """Visual level 0-3 for one cell weight."""
    if weight <= 0:
        return 0
    if weight <= thresholds.t1:
        return 1
    if weight <= thresholds.t2:
        return 2
    return 3


def level_map(cell_weights: np.ndarray, thresholds: AdaptiveThresholds) -> np.ndarray:
    """Vectorized :func:`level` over a weight array (same shape, int8)."""
    weights = np.asarray(cell_weights, dtype=np.float64)
    levels = np.full(weights.shape, 3, dtype=np.int8)
    levels[weights <= thresholds.t2] = 2
    levels[weights <= thresholds.t1] = 1
    levels[weights <= 0] = 0
    return levels
