"""Tests for the fold simulation engine."""

import pytest

from py_fold.core.fold_simulator import (
    FoldSimulator,
    MIN_CREASE_WEIGHT,
    corner_point,
    edge_point,
    generate_reduction_multipliers,
    generate_relationship_bias,
    simulate_folds,
)
from py_fold.core.fold_strategies import (
    ClusteredStrategy,
    DiagonalStrategy,
    GridStrategy,
    HorizontalStrategy,
    RadialStrategy,
    RandomStrategy,
    VerticalStrategy,
)
from py_fold.core.geometry import Point, point_to_segment_distance
from py_fold.core.parameters import PaperProperties, WeightRange, generate_max_folds

WIDTH = 1100
HEIGHT = 1400

STRATEGIES = [
    HorizontalStrategy(jitter=8),
    VerticalStrategy(jitter=8),
    DiagonalStrategy(angle=45, jitter=10),
    DiagonalStrategy(angle=135, jitter=10),
    RadialStrategy(focal_x=0.3, focal_y=0.6),
    GridStrategy(jitter=5),
    ClusteredStrategy(cluster_x=0.7, cluster_y=0.3, spread=0.4),
    RandomStrategy(),
]


@pytest.fixture(scope="module")
def simulation():
    return simulate_folds(WIDTH, HEIGHT, 15, 42)


class TestEdgeMapping:
    """Test edge and corner coordinates."""

    def test_edge_points(self):
        """Test that edge points walk clockwise from the top edge."""
        assert edge_point(0, 0.25, 100, 200) == Point(25, 0)
        assert edge_point(1, 0.25, 100, 200) == Point(100, 50)
        assert edge_point(2, 0.25, 100, 200) == Point(75, 200)
        assert edge_point(3, 0.25, 100, 200) == Point(0, 150)

    def test_corners(self):
        """Test that corners are numbered clockwise from the top left."""
        assert corner_point(0, 100, 200) == Point(0, 0)
        assert corner_point(1, 100, 200) == Point(100, 0)
        assert corner_point(2, 100, 200) == Point(100, 200)
        assert corner_point(3, 100, 200) == Point(0, 200)


class TestSeededHelpers:
    """Test per-artwork simulation parameters."""

    def test_reduction_multipliers(self):
        """Test that reduction multipliers stay in their seeded range."""
        multipliers = generate_reduction_multipliers(5, 30)
        assert len(multipliers) == 30
        assert all(0.001 <= m < 0.251 for m in multipliers)

    def test_relationship_bias(self):
        """Test that relationship biases stay below 0.8."""
        for seed in range(50):
            bias = generate_relationship_bias(seed)
            assert 0 <= bias.parallel < 0.8
            assert 0 <= bias.perpendicular < 0.8


class TestSimulationBasics:
    """Test empty and degenerate inputs."""

    def test_zero_folds(self):
        """Test that zero folds register no creases and no targets."""
        result = simulate_folds(WIDTH, HEIGHT, 0, 42)
        assert result.creases == []
        assert result.first_fold_target is None
        assert result.last_fold_target is None
        assert result.max_folds == generate_max_folds(42)

    def test_non_positive_area(self):
        """Test that a degenerate sheet registers no creases."""
        result = simulate_folds(0, HEIGHT, 20, 42)
        assert result.creases == []
        result = simulate_folds(WIDTH, -5, 20, 42)
        assert result.creases == []

    def test_deterministic(self, simulation):
        """Test that the same seed replays the same creases."""
        again = simulate_folds(WIDTH, HEIGHT, 15, 42)
        assert len(again.creases) == len(simulation.creases)
        for a, b in zip(again.creases, simulation.creases):
            assert a.p1 == b.p1
            assert a.p2 == b.p2
            assert a.weight == b.weight
        assert again.first_fold_target == simulation.first_fold_target

    def test_attempts_are_accounted(self, simulation):
        """Test that every attempt is either registered or skipped."""
        assert len(simulation.creases) + simulation.skipped == 15


class TestCreaseProperties:
    """Test invariants of registered creases."""

    def test_depths_are_sequential(self, simulation):
        """Test that crease depths follow registration order."""
        assert [c.depth for c in simulation.creases] == list(range(len(simulation.creases)))

    @pytest.mark.parametrize("strategy", STRATEGIES, ids=lambda s: s.kind)
    def test_creases_stay_on_sheet(self, strategy):
        """Test that every strategy keeps creases on the sheet and above the minimum length."""
        result = simulate_folds(WIDTH, HEIGHT, 120, 7, WeightRange(0.2, 0.9), strategy)
        min_length = min(WIDTH, HEIGHT) * 0.1
        for crease in result.creases:
            for point in (crease.p1, crease.p2):
                assert -1e-6 <= point.x <= WIDTH + 1e-6
                assert -1e-6 <= point.y <= HEIGHT + 1e-6
            assert crease.length >= min_length
            assert crease.weight >= MIN_CREASE_WEIGHT
            assert 0 <= crease.cycle_position < result.max_folds

    def test_fold_targets_inside_margin(self, simulation):
        """Test that fold targets stay inside the 5% margin."""
        if simulation.first_fold_target is None:
            pytest.skip("no crease registered")
        margin = max(WIDTH, HEIGHT) * 0.05
        for target in (simulation.first_fold_target, simulation.last_fold_target):
            assert margin <= target.x <= WIDTH - margin
            assert margin <= target.y <= HEIGHT - margin

    def test_crossings_lie_on_both_creases(self):
        """Test that recorded crossings lie on both of their creases."""
        result = simulate_folds(WIDTH, HEIGHT, 60, 99, WeightRange(0.3, 0.8), RandomStrategy())
        for crossing in result.intersections:
            first = result.creases[crossing.crease1]
            second = result.creases[crossing.crease2]
            assert point_to_segment_distance(crossing.point, first.p1, first.p2) < 1e-6
            assert point_to_segment_distance(crossing.point, second.p1, second.p2) < 1e-6


class TestStrategies:
    """Test strategy-specific geometry and paper gates."""

    def test_horizontal_spans_width(self):
        """Test that unjittered horizontal folds span the full width."""
        result = simulate_folds(WIDTH, HEIGHT, 40, 3, WeightRange(0.5, 0.9), HorizontalStrategy(jitter=0))
        assert result.creases
        for crease in result.creases:
            assert {crease.p1.x, crease.p2.x} == {0, WIDTH}

    def test_vertical_spans_height(self):
        """Test that unjittered vertical folds span the full height."""
        result = simulate_folds(WIDTH, HEIGHT, 40, 3, WeightRange(0.5, 0.9), VerticalStrategy(jitter=0))
        assert result.creases
        for crease in result.creases:
            assert {crease.p1.y, crease.p2.y} == {0, HEIGHT}

    def test_zero_absorbency_registers_nothing(self):
        """Test that zero absorbency skips every fold."""
        paper = PaperProperties(absorbency=0.0)
        result = simulate_folds(WIDTH, HEIGHT, 50, 11, WeightRange(0.5, 0.9), RandomStrategy(), paper)
        assert result.creases == []
        assert result.skipped == 50

    def test_grain_across_folds_kills_weight(self):
        """Vertical creases on paper grained at 0 degrees lose all their weight."""
        paper = PaperProperties(angle_affinity=0.0, affinity_strength=1.0)
        result = simulate_folds(WIDTH, HEIGHT, 30, 11, WeightRange(0.5, 0.9), VerticalStrategy(jitter=0), paper)
        assert result.creases == []

    def test_decay_lowers_old_weights(self):
        """Test that older creases lose weight once the breathing cycle wraps."""
        strategy = HorizontalStrategy(jitter=5)
        weights = WeightRange(0.5, 0.9)
        cycle = generate_max_folds(21)
        before = simulate_folds(WIDTH, HEIGHT, cycle, 21, weights, strategy)
        after = simulate_folds(WIDTH, HEIGHT, cycle + 1, 21, weights, strategy)
        assert before.creases
        for crease in after.creases[:len(before.creases)]:
            assert crease.weight <= 0.9 * 0.251

    def test_first_anchor_on_boundary(self):
        """Test that the first anchor lies on an edge or corner."""
        for seed in range(30):
            simulator = FoldSimulator(WIDTH, HEIGHT, seed, fold_strategy=RandomStrategy())
            anchor = simulator.pick_anchor(0)
            assert anchor.type in ("edge", "corner")
            x, y = anchor.point
            assert x in (0, WIDTH) or y in (0, HEIGHT)
