"""
Grid layout solver.

Given a base cell size and the inner drawing area, chooses per-axis gap
ratios from a fixed power-of-two ladder and the cell counts that best fill the
area without overflowing it.
"""

import math
from dataclasses import dataclass
from typing import List, NamedTuple, Tuple

import structlog

from ..utils.random import RngChannel, channel_rng, weighted_random_index
from .lcg_prng import SeededRandom

logger = structlog.get_logger()

USE_GAPS_CHANCE = 0.4
EXTREME_RATIO_CHANCE = 0.5
CANDIDATE_DRAWS = 3
MAX_OVERLAP = 0.9  # overlap may not exceed 90% of the cell

# (ratio, weight, extreme). Negative ratios overlap neighbouring cells.
GAP_RATIO_LADDER: Tuple[Tuple[float, float, bool], ...] = (
    (-1.0, 0.02, True),
    (-1 / 2, 0.05, False),
    (-1 / 4, 0.08, False),
    (-1 / 8, 0.12, False),
    (-1 / 16, 0.15, False),
    (1 / 64, 0.20, False),
    (1 / 32, 0.18, False),
    (1 / 16, 0.14, False),
    (1 / 8, 0.10, False),
    (1 / 4, 0.06, False),
    (1 / 2, 0.04, False),
    (1.0, 0.03, True),
    (2.0, 0.02, True),
)

GAP_RATIO_LABELS: Tuple[Tuple[float, str], ...] = (
    (-1.0, "-1 (100% overlap)"),
    (-1 / 2, "-1/2 (50% overlap)"),
    (-1 / 4, "-1/4 (25% overlap)"),
    (-1 / 8, "-1/8 (12.5% overlap)"),
    (-1 / 16, "-1/16 (6.25% overlap)"),
    (1 / 64, "1/64"),
    (1 / 32, "1/32"),
    (1 / 16, "1/16"),
    (1 / 8, "1/8"),
    (1 / 4, "1/4"),
    (1 / 2, "1/2"),
    (1.0, "1x"),
    (2.0, "2x"),
)


class AxisLayout(NamedTuple):
    """Solved layout along one axis."""
    count: int
    cell_size: float
    gap: float
    ratio: float

    @property
    def stride(self) -> float:
        return self.cell_size + self.gap

    @property
    def extent(self) -> float:
        return realized_size(self.count, self.cell_size, self.gap)


@dataclass(frozen=True)
class Grid:
    """Cell grid inside the drawing area (reference units)."""

    cols: int
    rows: int
    cell_width: float
    cell_height: float
    col_gap: float
    row_gap: float
    stride_x: float
    stride_y: float
    offset_x: float
    offset_y: float
    actual_width: float
    actual_height: float
    col_gap_ratio: float = 0.0
    row_gap_ratio: float = 0.0

    @property
    def cell_count(self) -> int:
        return self.cols * self.rows

    @property
    def has_gaps(self) -> bool:
        return abs(self.col_gap_ratio) > 0.01 or abs(self.row_gap_ratio) > 0.01

    @property
    def has_overlap(self) -> bool:
        return self.col_gap_ratio < -0.01 or self.row_gap_ratio < -0.01

    def cell_at(self, x: float, y: float) -> Tuple[int, int]:
        """(col, row) of the cell containing a point, clamped to the grid."""
        col = max(0, min(self.cols - 1, math.floor(x / self.stride_x)))
        row = max(0, min(self.rows - 1, math.floor(y / self.stride_y)))
        return col, row


def realized_size(count: int, cell_size: float, gap: float) -> float:
    """Total extent of ``count`` cells separated by ``gap``."""
    return count * cell_size + (count - 1) * gap if count > 1 else count * cell_size


def max_cells(cell_size: float, gap: float, available: float) -> int:
    """Largest count whose realized size does not exceed ``available``."""
    stride = cell_size + gap
    count = math.floor((available + gap) / stride)
    # Floor division on floats can land one cell too far
    while count > 0 and realized_size(count, cell_size, gap) > available:
        count -= 1
    return max(count, 0)


def draw_gap_candidates(rng: SeededRandom) -> List[float]:
    """
    Weighted sample of gap ratios for one axis.

    Extreme ratios are only eligible after their own coin flip. Duplicates
    are dropped, draw order is kept.
    """
    eligible = []
    for ratio, weight, extreme in GAP_RATIO_LADDER:
        if extreme and rng.random() >= EXTREME_RATIO_CHANCE:
            continue
        eligible.append((ratio, weight))

    weights = [weight for _, weight in eligible]
    candidates: List[float] = []
    for _ in range(CANDIDATE_DRAWS):
        ratio = eligible[weighted_random_index(weights, rng)][0]
        if ratio not in candidates:
            candidates.append(ratio)
    return candidates


def solve_axis(cell_size: float, available: float, ratios: List[float]) -> AxisLayout:
    """
    Pick the ratio whose layout comes closest to ``available``.

    Ties keep the earlier ratio. An empty ratio list (or no usable ratio)
    lays cells out without gaps.
    """
    best = None
    best_deviation = math.inf

    for ratio in ratios:
        gap = cell_size * ratio
        stride = cell_size + gap
        if stride <= 0 or ratio < -MAX_OVERLAP:
            continue
        count = max_cells(cell_size, gap, available)
        if count < 1:
            continue
        deviation = abs(available - realized_size(count, cell_size, gap))
        if deviation < best_deviation:
            best = AxisLayout(count, cell_size, gap if count > 1 else 0.0, ratio)
            best_deviation = deviation

    if best is None:
        best = AxisLayout(max(1, max_cells(cell_size, 0.0, available)), cell_size, 0.0, 0.0)

    # A single cell takes the whole axis
    if best.count == 1 and best.cell_size != available:
        best = AxisLayout(1, available, 0.0, best.ratio)

    return best


def solve_grid(seed: int, cell_width: float, cell_height: float,
               inner_width: float, inner_height: float) -> Grid:
    """
    Solve the cell grid for a seed.

    40% of seeds use gaps; those put them on columns (33%), rows (33%) or
    both (34%). Each gapped axis searches its own candidate ratios.

    Args:
        seed: Artwork seed
        cell_width: Base cell width from the cell-size generator
        cell_height: Base cell height
        inner_width: Available width
        inner_height: Available height

    Returns:
        Grid that never overflows the inner area
    """
    rng = channel_rng(seed, RngChannel.GAP)

    use_col_gaps = False
    use_row_gaps = False
    if rng.random() < USE_GAPS_CHANCE:
        gap_type = rng.random()
        if gap_type < 0.33:
            use_col_gaps = True
        elif gap_type < 0.66:
            use_row_gaps = True
        else:
            use_col_gaps = True
            use_row_gaps = True

    col_ratios = draw_gap_candidates(rng) if use_col_gaps else [0.0]
    row_ratios = draw_gap_candidates(rng) if use_row_gaps else [0.0]

    cols = solve_axis(cell_width, inner_width, col_ratios)
    rows = solve_axis(cell_height, inner_height, row_ratios)

    if cell_width > inner_width or cell_height > inner_height:
        logger.warning(
            "Cell larger than drawing area, stretched to fit",
            cell_width=cell_width,
            cell_height=cell_height,
            inner_width=inner_width,
            inner_height=inner_height,
        )

    width_diff = inner_width - cols.extent
    height_diff = inner_height - rows.extent

    return Grid(
        cols=cols.count,
        rows=rows.count,
        cell_width=cols.cell_size,
        cell_height=rows.cell_size,
        col_gap=cols.gap,
        row_gap=rows.gap,
        stride_x=cols.stride,
        stride_y=rows.stride,
        offset_x=width_diff / 2 if width_diff > 0 else 0.0,
        offset_y=height_diff / 2 if height_diff > 0 else 0.0,
        actual_width=cols.extent,
        actual_height=rows.extent,
        col_gap_ratio=cols.ratio if cols.count > 1 else 0.0,
        row_gap_ratio=rows.ratio if rows.count > 1 else 0.0,
    )


def describe_gap_ratio(ratio: float) -> str:
    """Metadata label for a gap ratio."""
    if abs(ratio) < 0.01:
        return "none"
    # 1/64 sits within 0.01 of 1/32 too; the nearest ladder step wins
    value, label = min(GAP_RATIO_LABELS, key=lambda item: abs(item[0] - ratio))
    if abs(value - ratio) < 0.01:
        return label
    if ratio < 0:
        return f"{round(ratio * 100)}% overlap"
    return f"{round(ratio * 100)}%"
