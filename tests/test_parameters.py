"""Tests for the seeded parameter generators."""

import pytest

from py_fold.config.constants import (
    CELL_ASPECT_MAX,
    CELL_MAX,
    CELL_MIN,
    DRAWING_MARGIN,
    FALLBACK_CELL_HEIGHT,
    FALLBACK_CELL_WIDTH,
    REFERENCE_HEIGHT,
    REFERENCE_WIDTH,
)
from py_fold.core.colors import COLORS_BY_HEX
from py_fold.core.fold_strategies import (
    ClusteredStrategy,
    DiagonalStrategy,
    RadialStrategy,
    RandomStrategy,
    generate_fold_strategy,
    strategy_jitter,
    strategy_to_dict,
)
from py_fold.core.lcg_prng import SeededRandom
from py_fold.core.palette import generate_palette
from py_fold.core.parameters import (
    CellDimensions,
    PaperProperties,
    RenderMode,
    describe_paper,
    generate_cell_dimensions,
    generate_fold_count,
    generate_max_folds,
    generate_multi_color_enabled,
    generate_multi_color_palette,
    generate_paper_properties,
    generate_render_mode,
    generate_weight_range,
    get_divisors,
)
from py_fold.utils.random import RngChannel

SEEDS = range(0, 300)


class TestCellDimensions:
    """Test seeded cell sizes."""

    def test_divisors(self):
        """Test that divisors are listed in ascending order within range."""
        assert get_divisors(910, 20, 600) == [26, 35, 65, 70, 91, 130, 182, 455]
        assert get_divisors(7, 20, 600) == []

    def test_cells_divide_inner_area(self):
        """Test that chosen cells divide the inner area and meet the shape limits."""
        inner_w = REFERENCE_WIDTH - 2 * DRAWING_MARGIN
        inner_h = REFERENCE_HEIGHT - 2 * DRAWING_MARGIN
        for seed in SEEDS:
            cells = generate_cell_dimensions(seed)
            assert inner_w % cells.cell_w == 0
            assert inner_h % cells.cell_h == 0
            assert CELL_MIN <= cells.cell_w <= CELL_MAX
            assert CELL_MIN <= cells.cell_h <= CELL_MAX
            assert max(cells.cell_w / cells.cell_h, cells.cell_h / cells.cell_w) <= CELL_ASPECT_MAX

    def test_deterministic(self):
        """Test that the same seed picks the same cell size."""
        assert generate_cell_dimensions(42) == generate_cell_dimensions(42)

    def test_fallback_when_no_divisors(self):
        """Test the fallback for an area with no usable divisor."""
        cells = generate_cell_dimensions(1, width=2 * DRAWING_MARGIN + 7, height=2 * DRAWING_MARGIN + 7)
        assert cells == CellDimensions(FALLBACK_CELL_WIDTH, FALLBACK_CELL_HEIGHT)

    @pytest.mark.parametrize("seed", [1, 2, 99])
    def test_fallback_is_per_axis(self, seed):
        """Test that only the axis without divisors falls back while the other keeps its divisor."""
        # Inner area 30 x 7: widths divide 30, no height in range divides 7
        cells = generate_cell_dimensions(seed, width=2 * DRAWING_MARGIN + 30, height=2 * DRAWING_MARGIN + 7)
        assert cells == CellDimensions(30, FALLBACK_CELL_HEIGHT)

    def test_padding_changes_inner_area(self):
        """Test that padding shrinks the area the cells divide."""
        cells = generate_cell_dimensions(3, padding=10)
        assert (REFERENCE_WIDTH - 20 - 2 * DRAWING_MARGIN) % cells.cell_w == 0


class TestSimpleGenerators:
    """Test single-draw generators."""

    def test_render_mode(self):
        """Test that render modes come from the enum and normal occurs."""
        modes = {generate_render_mode(seed) for seed in SEEDS}
        assert modes <= set(RenderMode)
        assert RenderMode.NORMAL in modes
        assert RenderMode.INVERTED in modes

    def test_max_folds_range(self):
        """Test that the breathing cycle stays in [4, 70)."""
        for seed in SEEDS:
            assert 4 <= generate_max_folds(seed) < 70

    def test_max_folds_uses_own_channel(self):
        """Test that max folds come from their own channel."""
        seed = 1234
        expected = int(4 + SeededRandom(seed + RngChannel.MAX_FOLDS).random() * 66)
        assert generate_max_folds(seed) == expected

    def test_fold_count_range(self):
        """Test that seeded fold counts stay in [1, 500]."""
        for seed in SEEDS:
            assert 1 <= generate_fold_count(seed) <= 500

    def test_weight_range(self):
        """Test that weight ranges stay ordered and in bounds."""
        for seed in SEEDS:
            weights = generate_weight_range(seed)
            assert 0 < weights.min < weights.max <= 1.0

    def test_multi_color_rate(self):
        """Test that multi-color mode is enabled for about a quarter of seeds."""
        enabled = sum(generate_multi_color_enabled(seed) for seed in range(2000))
        assert 0.18 < enabled / 2000 < 0.32


class TestFoldStrategy:
    """Test strategy generation."""

    def test_all_strategies_appear(self):
        """Test that every fold strategy kind is reachable."""
        kinds = {generate_fold_strategy(seed).kind for seed in range(500)}
        assert kinds == {"horizontal", "vertical", "diagonal", "radial", "grid", "clustered", "random"}

    def test_payload_ranges(self):
        """Test that strategy payloads stay in their ranges."""
        for seed in range(500):
            strategy = generate_fold_strategy(seed)
            if isinstance(strategy, DiagonalStrategy):
                assert strategy.angle in (45, 135)
                assert 5 <= strategy.jitter < 20
            elif isinstance(strategy, RadialStrategy):
                assert 0.2 <= strategy.focal_x < 0.8
                assert 0.2 <= strategy.focal_y < 0.8
            elif isinstance(strategy, ClusteredStrategy):
                assert 0.15 <= strategy.cluster_x < 0.85
                assert 0.2 <= strategy.spread < 0.6

    def test_jitter_fraction(self):
        """Test that jitter is expressed as a fraction of 100."""
        assert strategy_jitter(RandomStrategy()) == 0
        assert strategy_jitter(DiagonalStrategy(angle=45, jitter=10)) == pytest.approx(0.1)

    def test_to_dict(self):
        """Test that strategies serialize with their type."""
        data = strategy_to_dict(RadialStrategy(focal_x=0.5, focal_y=0.25))
        assert data == {"type": "radial", "focal_x": 0.5, "focal_y": 0.25}


class TestPaperProperties:
    """Test paper material generation."""

    def test_ranges(self):
        """Test that seeded paper properties stay in range."""
        for seed in SEEDS:
            paper = generate_paper_properties(seed)
            assert 0.1 <= paper.absorbency < 0.9
            assert paper.intersection_threshold == 0.0
            assert 0.3 <= paper.ceiling_multiplier < 1.7
            if paper.angle_affinity is None:
                assert paper.affinity_strength == 0.0
            else:
                assert 0 <= paper.angle_affinity < 180
                assert 0.2 <= paper.affinity_strength < 0.8

    def test_describe(self):
        """Test that paper descriptions follow the absorbency and grain settings."""
        assert describe_paper(PaperProperties(absorbency=0.2)) == "Resistant/Fine/Uniform"
        assert describe_paper(PaperProperties(absorbency=0.5, angle_affinity=30.0)) == "Standard/Fine/Grain"
        assert describe_paper(PaperProperties(absorbency=0.8, intersection_threshold=0.5)) == "Absorbent/Coarse/Uniform"


class TestMultiColorPalette:
    """Test four-level color ramps."""

    def test_levels_from_table(self):
        """Test that multi-color levels come from the table."""
        for seed in range(200):
            palette = generate_palette(seed)
            levels = generate_multi_color_palette(seed, palette.bg, palette.text)
            assert len(levels) == 4
            assert all(color in COLORS_BY_HEX for color in levels)

    def test_deterministic(self):
        """Test that the same seed picks the same level colors."""
        palette = generate_palette(11)
        assert generate_multi_color_palette(11, palette.bg, palette.text) == \
            generate_multi_color_palette(11, palette.bg, palette.text)
