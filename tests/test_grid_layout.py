"""Tests for the grid layout solver."""

import pytest

from py_fold.core.grid_layout import (
    GAP_RATIO_LADDER,
    Grid,
    describe_gap_ratio,
    draw_gap_candidates,
    max_cells,
    realized_size,
    solve_axis,
    solve_grid,
)
from py_fold.core.lcg_prng import SeededRandom
from py_fold.core.parameters import generate_cell_dimensions

INNER_WIDTH = 910
INNER_HEIGHT = 1407


class TestAxisSolver:
    """Test single-axis layout."""

    def test_realized_size(self):
        """Test that realized size counts gaps between cells only."""
        assert realized_size(0, 10, 2) == 0
        assert realized_size(1, 10, 2) == 10
        assert realized_size(3, 10, 2) == 34
        assert realized_size(3, 10, -5) == 20

    def test_max_cells_never_overflows(self):
        """Test that max_cells returns the largest count that fits."""
        for gap in (-5.0, 0.0, 0.15625, 2.5, 10.0, 20.0):
            count = max_cells(10, gap, 95)
            assert realized_size(count, 10, gap) <= 95
            assert realized_size(count + 1, 10, gap) > 95

    def test_picks_closest_fit(self):
        """Ratio 0 fills 90 of 95, ratio 1/4 only 85."""
        layout = solve_axis(10, 95, [0.25, 0.0])
        assert layout.ratio == 0.0
        assert layout.count == 9
        assert layout.gap == 0.0

    def test_ties_keep_first_ratio(self):
        """Test that equal deviations keep the earlier ratio."""
        layout = solve_axis(10, 100, [0.0, 0.0])
        assert layout.count == 10
        assert layout.extent == 100

    def test_unusable_ratio_falls_back_to_no_gap(self):
        """Test that an unusable ratio lays cells out without gaps."""
        layout = solve_axis(10, 95, [-1.0])
        assert layout.ratio == 0.0
        assert layout.count == 9

    def test_single_cell_stretches(self):
        """Test that a single cell stretches to the whole axis."""
        layout = solve_axis(300, 400, [0.0])
        assert layout.count == 1
        assert layout.cell_size == 400
        assert layout.extent == 400

    def test_cell_larger_than_area(self):
        """Test that a cell larger than the area is shrunk to fit."""
        layout = solve_axis(500, 400, [0.0])
        assert layout.count == 1
        assert layout.cell_size == 400


class TestGapCandidates:
    """Test the weighted ratio draw."""

    def test_candidates_from_ladder(self):
        """Test that candidates come from the ladder without duplicates."""
        ladder = {ratio for ratio, _, _ in GAP_RATIO_LADDER}
        for seed in range(100):
            candidates = draw_gap_candidates(SeededRandom(seed))
            assert 1 <= len(candidates) <= 3
            assert len(set(candidates)) == len(candidates)
            assert set(candidates) <= ladder


class TestSolveGrid:
    """Test whole-grid solving across seeds."""

    def test_grid_fits_inner_area(self):
        """Test that solved grids never overflow the inner area."""
        for seed in range(200):
            cells = generate_cell_dimensions(seed)
            grid = solve_grid(seed, cells.cell_w, cells.cell_h, INNER_WIDTH, INNER_HEIGHT)
            assert grid.cols >= 1 and grid.rows >= 1
            assert grid.actual_width <= INNER_WIDTH + 1e-9
            assert grid.actual_height <= INNER_HEIGHT + 1e-9
            assert grid.offset_x >= 0 and grid.offset_y >= 0
            assert grid.stride_x > 0 and grid.stride_y > 0

    def test_deterministic(self):
        """Test that the same seed solves the same grid."""
        assert solve_grid(7, 35, 67, INNER_WIDTH, INNER_HEIGHT) == solve_grid(7, 35, 67, INNER_WIDTH, INNER_HEIGHT)

    def test_some_seeds_use_gaps(self):
        """Test that some seeds use gaps and some do not."""
        gapped = [solve_grid(seed, 35, 67, INNER_WIDTH, INNER_HEIGHT).has_gaps for seed in range(200)]
        assert any(gapped)
        assert not all(gapped)

    def test_exact_divisor_without_gaps(self):
        """Test that an exact divisor grid reports no gaps or overlap."""
        grid = Grid(26, 21, 35, 67, 0, 0, 35, 67, 0, 0, 910, 1407)
        assert grid.cell_count == 546
        assert not grid.has_gaps
        assert not grid.has_overlap

    def test_cell_at_clamps(self):
        """Test that cell_at clamps points outside the grid."""
        grid = Grid(4, 3, 10, 10, 2, 2, 12, 12, 0, 0, 46, 34, 0.2, 0.2)
        assert grid.cell_at(0, 0) == (0, 0)
        assert grid.cell_at(13, 25) == (1, 2)
        assert grid.cell_at(-5, 500) == (0, 2)
        assert grid.cell_at(500, -1) == (3, 0)


class TestGapLabels:
    """Test metadata labels for gap ratios."""

    @pytest.mark.parametrize("ratio,label", [
        (0.0, "none"),
        (0.005, "none"),
        (1 / 64, "1/64"),
        (1 / 32, "1/32"),
        (-0.5, "-1/2 (50% overlap)"),
        (1.0, "1x"),
        (2.0, "2x"),
        (0.3, "30%"),
        (-0.3, "-30% overlap"),
    ])
    def test_labels(self, ratio, label):
        """Test that gap ratios map to their metadata labels."""
        assert describe_gap_ratio(ratio) == label
