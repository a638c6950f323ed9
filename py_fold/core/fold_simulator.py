"""
Fold simulation engine.

Each fold picks an anchor (canvas boundary early on, existing structure
later), then a terminus reachable from it, and registers the resulting crease
if it passes the length, absorbency and weight gates. Old creases "breathe":
at every new cycle of ``max_folds`` folds their weights decay.

Edges are numbered 0=top, 1=right, 2=bottom, 3=left and corners 0=top-left,
1=top-right, 2=bottom-right, 3=bottom-left. Positions along the bottom and
left edges run backwards so that opposite edges use mirrored parameters.
"""

import math
from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional, Sequence

import numpy as np
import structlog

from ..utils.random import RngChannel, channel_rng, weighted_random_index
from .fold_strategies import (
    ClusteredStrategy,
    DiagonalStrategy,
    FoldStrategy,
    GridStrategy,
    HorizontalStrategy,
    RadialStrategy,
    STRAIGHT_STRATEGIES,
    VerticalStrategy,
    generate_fold_strategy,
    strategy_jitter,
)
from .geometry import (
    Point,
    angle_difference,
    crease_angle,
    distance,
    find_crossings_with,
    find_segment_intersections,
    lerp,
    midpoint,
    point_to_segment_distance,
    segments_to_array,
)
from .parameters import PaperProperties, WeightRange, generate_max_folds

logger = structlog.get_logger()

EDGES = (0, 1, 2, 3)
HORIZONTAL_FOLD_EDGES = (1, 3)  # left/right anchors make horizontal creases
VERTICAL_FOLD_EDGES = (0, 2)

MIN_TERMINUS_RATIO = 0.15  # of min(width, height)
MIN_CREASE_RATIO = 0.10
TARGET_MARGIN_RATIO = 0.05  # of max(width, height)
MIN_CREASE_WEIGHT = 0.01
INTERSECTION_REFRESH_INTERVAL = 5

PARALLEL_ANGLE = 15
PERPENDICULAR_ANGLE = 75


@dataclass
class Crease:
    """A registered fold line. Only ``weight`` changes after creation."""

    p1: Point
    p2: Point
    weight: float
    depth: int
    cycle_position: int
    reduction_multiplier: float
    anchor_type: str
    terminus_type: str

    @property
    def angle(self) -> float:
        return crease_angle(self.p1, self.p2)

    @property
    def length(self) -> float:
        return distance(self.p1, self.p2)

    def point_at(self, t: float) -> Point:
        return lerp(self.p1, self.p2, t)


class CreaseCrossing(NamedTuple):
    """Known crossing of two creases, used as a structural anchor."""
    point: Point
    crease1: int
    crease2: int


class Anchor(NamedTuple):
    point: Point
    type: str  # edge | corner | intersection | crease
    edge: Optional[int] = None
    corner: Optional[int] = None
    t: Optional[float] = None
    crease_index: Optional[int] = None


class Terminus(NamedTuple):
    point: Point
    type: str  # edge | corner | crease


@dataclass
class _Candidate:
    point: Point
    type: str
    weight: float


@dataclass(frozen=True)
class RelationshipBias:
    """Per-artwork preference for parallel or perpendicular creases (0-0.8)."""
    parallel: float
    perpendicular: float


@dataclass
class FoldSimulation:
    """Result of a fold simulation."""

    creases: List[Crease]
    max_folds: int
    first_fold_target: Optional[Point] = None
    last_fold_target: Optional[Point] = None
    intersections: List[CreaseCrossing] = field(default_factory=list)
    skipped: int = 0


def edge_point(edge: int, t: float, w: float, h: float) -> Point:
    """Point at fraction ``t`` along a canvas edge."""
    if edge == 1:
        return Point(w, t * h)
    if edge == 2:
        return Point((1 - t) * w, h)
    if edge == 3:
        return Point(0, (1 - t) * h)
    return Point(t * w, 0)


def corner_point(corner: int, w: float, h: float) -> Point:
    if corner == 1:
        return Point(w, 0)
    if corner == 2:
        return Point(w, h)
    if corner == 3:
        return Point(0, h)
    return Point(0, 0)


def _clamp_t(t: float) -> float:
    return max(0.05, min(0.95, t))


def generate_relationship_bias(seed: int) -> RelationshipBias:
    rng = channel_rng(seed, RngChannel.RELATIONSHIP_BIAS)
    parallel = rng.random() * 0.8
    perpendicular = rng.random() * 0.8
    return RelationshipBias(parallel, perpendicular)


def generate_reduction_multipliers(seed: int, max_folds: int) -> List[float]:
    """Decay multiplier per cycle position, in [0.001, 0.251)."""
    rng = channel_rng(seed, RngChannel.CREASE_REDUCTION)
    return [0.001 + rng.random() * 0.25 for _ in range(max_folds)]


class FoldSimulator:
    """
    Runs the fold loop for one seed on a ``width`` x ``height`` drawing area.

    The anchor and terminus choices share the FOLD_PATH stream; absorbency
    and crease weight each have their own stream and are drawn on every
    iteration, so a skipped fold never shifts later rolls.
    """

    def __init__(self, width: float, height: float, seed: int,
                 weight_range: Optional[WeightRange] = None,
                 fold_strategy: Optional[FoldStrategy] = None,
                 paper_properties: Optional[PaperProperties] = None):
        self.width = width
        self.height = height
        self.seed = seed
        self.weight_range = weight_range or WeightRange(0.0, 1.0)
        self.strategy = fold_strategy or generate_fold_strategy(seed)
        self.paper = paper_properties or PaperProperties()
        self.max_folds = generate_max_folds(seed)

        self.min_terminus_length = min(width, height) * MIN_TERMINUS_RATIO
        self.min_crease_length = min(width, height) * MIN_CREASE_RATIO
        self.target_margin = max(width, height) * TARGET_MARGIN_RATIO

        self.path_rng = channel_rng(seed, RngChannel.FOLD_PATH)
        self.weight_rng = channel_rng(seed, RngChannel.CREASE_WEIGHT)
        self.absorbency_rng = channel_rng(seed, RngChannel.ABSORBENCY)
        self.reduction_multipliers = generate_reduction_multipliers(seed, self.max_folds)
        self.bias = generate_relationship_bias(seed)

        self.creases: List[Crease] = []
        self.known_intersections: List[CreaseCrossing] = []
        self._segments: List[tuple] = []
        self._angles = np.zeros(0, dtype=np.float64)

    # ============ ANCHOR ============

    def _strategy_edges(self, fold_index: int) -> Sequence[int]:
        strategy = self.strategy
        if isinstance(strategy, HorizontalStrategy):
            return HORIZONTAL_FOLD_EDGES
        if isinstance(strategy, VerticalStrategy):
            return VERTICAL_FOLD_EDGES
        if isinstance(strategy, GridStrategy):
            return HORIZONTAL_FOLD_EDGES if fold_index % 2 == 0 else VERTICAL_FOLD_EDGES
        return EDGES

    def _radial_anchor(self, fold_index: int) -> Optional[Anchor]:
        """Edge anchor near the focal point, or None to use the generic rules."""
        rng = self.path_rng
        w, h = self.width, self.height
        focal_x = self.strategy.focal_x * w
        focal_y = self.strategy.focal_y * h

        if not (fold_index < 10 or not self.creases or rng.random() < 0.6):
            return None

        by_distance = sorted(
            ((0, focal_y), (1, w - focal_x), (2, h - focal_y), (3, focal_x)),
            key=lambda item: item[1],
        )
        roll = rng.random()
        if roll < 0.5:
            edge = by_distance[0][0]
        elif roll < 0.8:
            edge = by_distance[1][0]
        else:
            edge = by_distance[int(rng.random() * 4)][0]

        if edge in (0, 2):
            t = 0.1 + (focal_x / w) * 0.8 + (rng.random() - 0.5) * 0.3
        else:
            t = 0.1 + (focal_y / h) * 0.8 + (rng.random() - 0.5) * 0.3
        t = _clamp_t(t)
        return Anchor(edge_point(edge, t, w, h), "edge", edge=edge, t=t)

    def _clustered_anchor(self, fold_index: int) -> Optional[Anchor]:
        """Edge anchor whose folds can pass through the cluster."""
        rng = self.path_rng
        w, h = self.width, self.height
        strategy = self.strategy
        cluster_x = strategy.cluster_x * w
        cluster_y = strategy.cluster_y * h

        if not (fold_index < 15 or rng.random() < 0.7):
            return None

        weights = [
            1 + (1 - abs(cluster_y / h)) * 2,
            1 + (cluster_x / w) * 2,
            1 + (cluster_y / h) * 2,
            1 + (1 - cluster_x / w) * 2,
        ]
        roll = rng.random() * sum(weights)
        edge = 0
        for candidate, weight in enumerate(weights):
            roll -= weight
            if roll <= 0:
                edge = candidate
                break

        if edge in (0, 2):
            t = cluster_x / w + (rng.random() - 0.5) * strategy.spread
        else:
            t = cluster_y / h + (rng.random() - 0.5) * strategy.spread
        t = _clamp_t(t)
        return Anchor(edge_point(edge, t, w, h), "edge", edge=edge, t=t)

    def pick_anchor(self, fold_index: int) -> Anchor:
        """
        Choose where the next crease starts.

        The edge probability falls from 1.0 by 0.015 per fold to a floor of
        0.2; the rest of the time the anchor sits on existing structure.
        """
        rng = self.path_rng
        w, h = self.width, self.height
        strategy = self.strategy
        edges = self._strategy_edges(fold_index)

        if isinstance(strategy, RadialStrategy):
            anchor = self._radial_anchor(fold_index)
            if anchor is not None:
                return anchor
        elif isinstance(strategy, ClusteredStrategy):
            anchor = self._clustered_anchor(fold_index)
            if anchor is not None:
                return anchor

        edge_probability = max(0.2, 1.0 - fold_index * 0.015)
        force_edge = isinstance(strategy, STRAIGHT_STRATEGIES)
        use_edge = (
            force_edge
            or rng.random() < edge_probability
            or (not self.creases and not self.known_intersections)
        )

        if use_edge:
            if force_edge:
                corner_chance = 0.0
            elif isinstance(strategy, DiagonalStrategy):
                corner_chance = 0.5
            else:
                corner_chance = 0.15

            if rng.random() < corner_chance:
                corner = int(rng.random() * 4)
                return Anchor(corner_point(corner, w, h), "corner", corner=corner)

            edge = edges[int(rng.random() * len(edges))]
            base_t = 0.05 + rng.random() * 0.9
            t = _clamp_t(base_t + (rng.random() - 0.5) * strategy_jitter(strategy))
            return Anchor(edge_point(edge, t, w, h), "edge", edge=edge, t=t)

        if self.known_intersections and rng.random() < 0.35:
            crossing = self.known_intersections[int(rng.random() * len(self.known_intersections))]
            return Anchor(crossing.point, "intersection")

        if self.creases:
            index = int(rng.random() * len(self.creases))
            t = 0.1 + rng.random() * 0.8
            return Anchor(self.creases[index].point_at(t), "crease", t=t, crease_index=index)

        edge = edges[int(rng.random() * len(edges))]
        t = 0.05 + rng.random() * 0.9
        return Anchor(edge_point(edge, t, w, h), "edge", edge=edge, t=t)

    # ============ TERMINUS ============

    def _straight_terminus(self, anchor: Anchor, fold_index: int) -> Optional[Terminus]:
        """Opposite-edge terminus for horizontal, vertical and grid folds."""
        if anchor.type != "edge":
            return None

        strategy = self.strategy
        want_horizontal = isinstance(strategy, HorizontalStrategy) or (
            isinstance(strategy, GridStrategy) and fold_index % 2 == 0
        )
        makes_horizontal = anchor.edge in HORIZONTAL_FOLD_EDGES
        if want_horizontal != makes_horizontal:
            return None

        base_t = anchor.t if anchor.t is not None else 0.5
        t = _clamp_t(base_t + (self.path_rng.random() - 0.5) * strategy_jitter(strategy))
        # Opposite edges run in opposite directions
        opposite = (anchor.edge + 2) % 4
        return Terminus(edge_point(opposite, 1 - t, self.width, self.height), "edge")

    def _diagonal_terminus(self, anchor: Anchor) -> Optional[Terminus]:
        """Opposite corner, or the farthest edge hit along the strategy angle."""
        if anchor.type == "corner":
            return Terminus(corner_point((anchor.corner + 2) % 4, self.width, self.height), "corner")
        if anchor.type != "edge":
            return None

        w, h = self.width, self.height
        jitter = (self.path_rng.random() - 0.5) * self.strategy.jitter
        angle = math.radians(self.strategy.angle + jitter)
        dx = math.cos(angle)
        dy = math.sin(angle)
        ax, ay = anchor.point

        best = None
        best_dist = 0.0
        hits = []
        if dy != 0:
            for edge_y in (0, h):
                t = (edge_y - ay) / dy
                x = ax + dx * t
                if t > 0 and 0 <= x <= w:
                    hits.append(Point(x, edge_y))
        if dx != 0:
            for edge_x in (0, w):
                t = (edge_x - ax) / dx
                y = ay + dy * t
                if t > 0 and 0 <= y <= h:
                    hits.append(Point(edge_x, y))

        for point in hits:
            dist = distance(anchor.point, point)
            if dist > best_dist and dist >= self.min_terminus_length:
                best = point
                best_dist = dist

        return Terminus(best, "edge") if best is not None else None

    def _radial_terminus(self, anchor: Anchor) -> Optional[Terminus]:
        """Continue the ray from the focal point through the anchor to the canvas edge."""
        w, h = self.width, self.height
        focal_x = self.strategy.focal_x * w
        focal_y = self.strategy.focal_y * h

        dx = anchor.point.x - focal_x
        dy = anchor.point.y - focal_y
        ray_length = math.sqrt(dx * dx + dy * dy)
        if ray_length <= 0:
            return None

        ndx = dx / ray_length
        ndy = dy / ray_length
        max_t = math.inf
        if ndx > 0:
            max_t = min(max_t, (w - anchor.point.x) / ndx)
        if ndx < 0:
            max_t = min(max_t, -anchor.point.x / ndx)
        if ndy > 0:
            max_t = min(max_t, (h - anchor.point.y) / ndy)
        if ndy < 0:
            max_t = min(max_t, -anchor.point.y / ndy)

        terminus = Point(
            max(0.0, min(w, anchor.point.x + ndx * max_t * 0.95)),
            max(0.0, min(h, anchor.point.y + ndy * max_t * 0.95)),
        )
        if distance(anchor.point, terminus) >= self.min_terminus_length:
            return Terminus(terminus, "edge")
        return None

    def _clustered_terminus(self, anchor: Anchor) -> Optional[Terminus]:
        """Edge points weighted by how close the fold passes to the cluster."""
        rng = self.path_rng
        w, h = self.width, self.height
        cluster = Point(self.strategy.cluster_x * w, self.strategy.cluster_y * h)
        max_dist = max(w, h) * 0.5

        candidates = []
        for edge in EDGES:
            for _ in range(3):
                point = edge_point(edge, 0.1 + rng.random() * 0.8, w, h)
                line_dist = point_to_segment_distance(cluster, anchor.point, point)
                weight = max(0.1, 1 - line_dist / max_dist) * 3
                candidates.append(_Candidate(point, "edge", weight))

        valid = [c for c in candidates if distance(anchor.point, c.point) >= self.min_terminus_length]
        if not valid:
            return None
        choice = valid[weighted_random_index([c.weight for c in valid], rng)]
        return Terminus(choice.point, choice.type)

    def _generic_candidates(self, anchor: Anchor, fold_index: int) -> List[_Candidate]:
        rng = self.path_rng
        w, h = self.width, self.height
        candidates: List[_Candidate] = []

        if anchor.type == "edge":
            opposite = (anchor.edge + 2) % 4
            adjacent1 = (anchor.edge + 1) % 4
            adjacent2 = (anchor.edge + 3) % 4
            opposite_weight = 3.0 if fold_index < 3 else 1.5
            for _ in range(3):
                t = 0.1 + rng.random() * 0.8
                candidates.append(_Candidate(edge_point(opposite, t, w, h), "edge", opposite_weight))
            for _ in range(2):
                t = 0.1 + rng.random() * 0.8
                candidates.append(_Candidate(edge_point(adjacent1, t, w, h), "edge", 1.0))
                candidates.append(_Candidate(edge_point(adjacent2, t, w, h), "edge", 1.0))

        elif anchor.type == "corner":
            candidates.append(_Candidate(corner_point((anchor.corner + 2) % 4, w, h), "corner", 2.0))
            for edge in EDGES:
                # Corner c touches edges c and c-1
                if edge in (anchor.corner, (anchor.corner + 3) % 4):
                    continue
                t = 0.2 + rng.random() * 0.6
                candidates.append(_Candidate(edge_point(edge, t, w, h), "edge", 1.5))

        else:
            for edge in EDGES:
                t = 0.1 + rng.random() * 0.8
                candidates.append(_Candidate(edge_point(edge, t, w, h), "edge", 1.0))

            if len(self.creases) > 1 and fold_index > 3:
                for _ in range(min(3, len(self.creases))):
                    index = int(rng.random() * len(self.creases))
                    if anchor.type == "crease" and anchor.crease_index == index:
                        continue
                    t = 0.15 + rng.random() * 0.7
                    candidates.append(_Candidate(self.creases[index].point_at(t), "crease", 0.6))

        return candidates

    def _biased_weights(self, anchor: Anchor, candidates: List[_Candidate]) -> List[float]:
        """
        Candidate weights after the relationship bias.

        Each existing crease within 15 degrees multiplies a candidate's weight
        by ``1 + parallel``, each one beyond 75 degrees by
        ``1 + perpendicular``. The products are taken in log space and scaled
        so the largest weight is 1, which leaves the selection proportions
        unchanged without overflowing on long runs.
        """
        weights = [c.weight for c in candidates]
        if not self.creases or not candidates:
            return weights

        log_weights = np.log(np.array(weights, dtype=np.float64))
        for k, candidate in enumerate(candidates):
            proposed = crease_angle(anchor.point, candidate.point)
            diff = np.abs(self._angles - proposed)
            diff = np.where(diff > 90, 180 - diff, diff)
            if self.bias.parallel > 0:
                log_weights[k] += np.count_nonzero(diff < PARALLEL_ANGLE) * math.log1p(self.bias.parallel)
            if self.bias.perpendicular > 0:
                log_weights[k] += np.count_nonzero(diff > PERPENDICULAR_ANGLE) * math.log1p(self.bias.perpendicular)

        return np.exp(log_weights - log_weights.max()).tolist()

    def pick_terminus(self, anchor: Anchor, fold_index: int) -> Terminus:
        """
        Choose where the crease ends.

        Strategy rules are tried first; when they decline, a weighted pick
        among generic candidates at least 15% of min(width, height) away.
        """
        strategy = self.strategy
        terminus = None
        if isinstance(strategy, STRAIGHT_STRATEGIES):
            terminus = self._straight_terminus(anchor, fold_index)
        elif isinstance(strategy, DiagonalStrategy):
            terminus = self._diagonal_terminus(anchor)
        elif isinstance(strategy, RadialStrategy):
            terminus = self._radial_terminus(anchor)
        elif isinstance(strategy, ClusteredStrategy):
            terminus = self._clustered_terminus(anchor)
        if terminus is not None:
            return terminus

        candidates = self._generic_candidates(anchor, fold_index)
        weights = self._biased_weights(anchor, candidates)

        valid = [
            (candidate, weight)
            for candidate, weight in zip(candidates, weights)
            if distance(anchor.point, candidate.point) >= self.min_terminus_length
        ]

        if not valid:
            for edge in EDGES:
                point = edge_point(edge, 0.5, self.width, self.height)
                if distance(anchor.point, point) >= self.min_terminus_length:
                    return Terminus(point, "edge")
            edge = (anchor.edge + 2) % 4 if anchor.type == "edge" else 0
            return Terminus(edge_point(edge, 0.5, self.width, self.height), "edge")

        index = weighted_random_index([weight for _, weight in valid], self.path_rng)
        choice = valid[index][0]
        return Terminus(choice.point, choice.type)

    # ============ REGISTRATION ============

    def _crease_weight(self, p1: Point, p2: Point, roll: float) -> float:
        """Base weight from the range, reduced by the paper's angle affinity."""
        weight = self.weight_range.min + roll * (self.weight_range.max - self.weight_range.min)
        if self.paper.angle_affinity is not None and self.paper.affinity_strength > 0:
            diff = angle_difference(crease_angle(p1, p2), self.paper.angle_affinity)
            weight *= 1.0 - (diff / 90) * self.paper.affinity_strength
        return weight

    def _refresh_intersections(self):
        self.known_intersections = [
            CreaseCrossing(Point(x, y), i, j)
            for i, j, x, y in find_segment_intersections(segments_to_array(self._segments))
        ]

    def _register(self, crease: Crease):
        """Add a crease and record its crossings with every earlier crease."""
        earlier = segments_to_array(self._segments)
        new_segment = np.array([crease.p1.x, crease.p1.y, crease.p2.x, crease.p2.y], dtype=np.float64)
        new_index = len(self.creases)
        for i, x, y in find_crossings_with(new_segment, earlier):
            self.known_intersections.append(CreaseCrossing(Point(x, y), i, new_index))

        self.creases.append(crease)
        self._segments.append((crease.p1, crease.p2))
        self._angles = np.append(self._angles, crease.angle)

    def _decay(self):
        for crease in self.creases:
            crease.weight = max(MIN_CREASE_WEIGHT, crease.weight * crease.reduction_multiplier)

    def _fold_target(self, crease: Crease) -> Point:
        mid = midpoint(crease.p1, crease.p2)
        margin = self.target_margin
        return Point(
            max(margin, min(self.width - margin, mid.x)),
            max(margin, min(self.height - margin, mid.y)),
        )

    def simulate(self, fold_count: int) -> FoldSimulation:
        """
        Run exactly ``fold_count`` fold iterations.

        Args:
            fold_count: Number of folds to attempt

        Returns:
            FoldSimulation with the registered creases in insertion order
        """
        skipped = 0
        first_target = None
        last_target = None

        for f in range(max(0, fold_count)):
            cycle_position = f % self.max_folds
            if cycle_position == 0 and f > 0:
                self._decay()

            if f % INTERSECTION_REFRESH_INTERVAL == 0 and len(self.creases) > 1:
                self._refresh_intersections()

            anchor = self.pick_anchor(f)
            terminus = self.pick_terminus(anchor, f)
            p1, p2 = anchor.point, terminus.point

            absorbency_roll = self.absorbency_rng.random()
            weight = self._crease_weight(p1, p2, self.weight_rng.random())

            if distance(p1, p2) < self.min_crease_length:
                skipped += 1
                continue
            if absorbency_roll >= self.paper.absorbency or weight <= MIN_CREASE_WEIGHT:
                skipped += 1
                continue

            crease = Crease(
                p1=p1,
                p2=p2,
                weight=weight,
                depth=len(self.creases),
                cycle_position=cycle_position,
                reduction_multiplier=self.reduction_multipliers[cycle_position],
                anchor_type=anchor.type,
                terminus_type=terminus.type,
            )
            self._register(crease)

            last_target = self._fold_target(crease)
            if first_target is None:
                first_target = last_target

        logger.debug(
            "Fold simulation complete",
            seed=self.seed,
            folds=fold_count,
            creases=len(self.creases),
            skipped=skipped,
            strategy=self.strategy.kind,
        )

        return FoldSimulation(
            creases=self.creases,
            max_folds=self.max_folds,
            first_fold_target=first_target,
            last_fold_target=last_target,
            intersections=list(self.known_intersections),
            skipped=skipped,
        )


def simulate_folds(width: float, height: float, fold_count: int, seed: int,
                   weight_range: Optional[WeightRange] = None,
                   fold_strategy: Optional[FoldStrategy] = None,
                   paper_properties: Optional[PaperProperties] = None) -> FoldSimulation:
    """
    Simulate folding a ``width`` x ``height`` sheet.

    Args:
        width: Drawing area width
        height: Drawing area height
        fold_count: Fold iterations to run
        seed: Artwork seed
        weight_range: Crease base weight range (0-1 when omitted)
        fold_strategy: Strategy override; seeded when omitted
        paper_properties: Paper override; fully absorbent plain paper when omitted

    Returns:
        FoldSimulation; an empty one for a non-positive area
    """
    if not width or not height or width <= 0 or height <= 0:
        logger.warning("Fold simulation needs a positive area", width=width, height=height, seed=seed)
        return FoldSimulation(creases=[], max_folds=generate_max_folds(seed))

    simulator = FoldSimulator(width, height, seed, weight_range, fold_strategy, paper_properties)
    return simulator.simulate(fold_count)
