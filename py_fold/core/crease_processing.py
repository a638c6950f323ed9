"""
Intersection and weight processing.

Crossings of registered creases are accumulated into per-cell arrays shaped
``(rows, cols)`` and indexed ``[row, col]``. A soft saturation ceiling keeps
the total weight from running away at high fold counts.
"""

from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Sequence, Tuple

import numpy as np
import structlog

from .fold_simulator import Crease
from .geometry import Point, find_segment_intersections, segments_to_array
from .parameters import PaperProperties

logger = structlog.get_logger()

CEILING_PER_CELL = 0.5
OVERFLOW_KEPT = 0.3  # share of the excess above the ceiling that survives


class Intersection(NamedTuple):
    """Crossing of two creases."""
    point: Point
    weight: float
    gap: int
    depth1: int
    depth2: int


@dataclass
class CreaseField:
    """
    Per-cell accumulation of crease intersections.

    Attributes:
        intersections: Crossings that passed the paper threshold
        cell_weights: Summed intersection weight per cell
        cell_max_gap: Largest depth gap seen per cell
        cell_counts: Number of intersections per cell
        max_folds: Breathing cycle length of the simulation
        ceiling: Saturation ceiling for the grid
        compression: Factor applied to every weight (1.0 when under the ceiling)
    """

    intersections: List[Intersection]
    cell_weights: np.ndarray
    cell_max_gap: np.ndarray
    cell_counts: np.ndarray
    max_folds: Optional[int] = None
    ceiling: float = 0.0
    compression: float = 1.0

    @property
    def total_weight(self) -> float:
        return float(self.cell_weights.sum())

    @property
    def active_cells(self) -> int:
        return int(np.count_nonzero(self.cell_weights > 0))

    def accent_cells(self) -> List[Tuple[int, int]]:
        """(col, row) of every cell holding the largest depth gap."""
        if self.cell_max_gap.size == 0:
            return []
        max_gap = self.cell_max_gap.max()
        if max_gap <= 0:
            return []
        rows, cols = np.nonzero(self.cell_max_gap == max_gap)
        return [(int(c), int(r)) for r, c in zip(rows, cols)]


def find_intersections(creases: Sequence[Crease]) -> List[Intersection]:
    """All pairwise crease crossings, ordered by (i, j)."""
    hits = find_segment_intersections(segments_to_array([(c.p1, c.p2) for c in creases]))
    intersections = []
    for i, j, x, y in hits:
        first, second = creases[i], creases[j]
        intersections.append(Intersection(
            point=Point(x, y),
            weight=first.weight + second.weight,
            gap=abs(second.depth - first.depth),
            depth1=first.depth,
            depth2=second.depth,
        ))
    return intersections


def saturation_ceiling(cols: int, rows: int, paper: PaperProperties) -> float:
    return cols * rows * CEILING_PER_CELL * paper.ceiling_multiplier


def process_creases(creases: Sequence[Crease], cols: int, rows: int,
                    stride_x: float, stride_y: float,
                    max_folds: Optional[int] = None,
                    paper_properties: Optional[PaperProperties] = None) -> CreaseField:
    """
    Bucket crease intersections into grid cells.

    Args:
        creases: Registered creases
        cols: Grid columns
        rows: Grid rows
        stride_x: Column pitch (cell width plus gap)
        stride_y: Row pitch
        max_folds: Breathing cycle length, passed through
        paper_properties: Threshold and ceiling modifiers

    Returns:
        CreaseField with weights compressed above the saturation ceiling
    """
    paper = paper_properties or PaperProperties()
    intersections = [
        inter for inter in find_intersections(creases)
        if inter.weight >= paper.intersection_threshold
    ]

    cell_weights = np.zeros((rows, cols), dtype=np.float64)
    cell_max_gap = np.zeros((rows, cols), dtype=np.int64)
    cell_counts = np.zeros((rows, cols), dtype=np.int64)

    if intersections:
        xs = np.array([inter.point.x for inter in intersections])
        ys = np.array([inter.point.y for inter in intersections])
        weights = np.array([inter.weight for inter in intersections])
        gaps = np.array([inter.gap for inter in intersections], dtype=np.int64)

        col_idx = np.floor(xs / stride_x).astype(np.int64)
        row_idx = np.floor(ys / stride_y).astype(np.int64)
        inside = (col_idx >= 0) & (col_idx < cols) & (row_idx >= 0) & (row_idx < rows)

        r, c = row_idx[inside], col_idx[inside]
        # Unbuffered so repeated cells accumulate in intersection order
        np.add.at(cell_weights, (r, c), weights[inside])
        np.maximum.at(cell_max_gap, (r, c), gaps[inside])
        np.add.at(cell_counts, (r, c), 1)

        dropped = int(np.count_nonzero(~inside))
        if dropped:
            logger.debug("Intersections outside grid discarded", count=dropped)

    ceiling = saturation_ceiling(cols, rows, paper)
    total = cell_weights.sum()
    compression = 1.0
    if total > ceiling and total > 0:
        ratio = ceiling / total
        compression = ratio + (1 - ratio) * OVERFLOW_KEPT
        cell_weights *= compression

    return CreaseField(
        intersections=intersections,
        cell_weights=cell_weights,
        cell_max_gap=cell_max_gap,
        cell_counts=cell_counts,
        max_folds=max_folds,
        ceiling=ceiling,
        compression=compression,
    )
