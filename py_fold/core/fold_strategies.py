"""
Fold strategies.

Each strategy is its own frozen dataclass carrying only the parameters it
uses. The simulator dispatches on the class, so adding a strategy means
adding a class here and a branch in the simulator.
"""

from dataclasses import asdict, dataclass
from typing import ClassVar, Dict, Union

from ..utils.random import RngChannel, channel_rng


@dataclass(frozen=True)
class HorizontalStrategy:
    """Nearly straight creases between the left and right edges."""
    kind: ClassVar[str] = "horizontal"
    jitter: float


@dataclass(frozen=True)
class VerticalStrategy:
    """Nearly straight creases between the top and bottom edges."""
    kind: ClassVar[str] = "vertical"
    jitter: float


@dataclass(frozen=True)
class DiagonalStrategy:
    """Creases at a fixed 45 or 135 degree angle, corners preferred."""
    kind: ClassVar[str] = "diagonal"
    angle: float
    jitter: float


@dataclass(frozen=True)
class RadialStrategy:
    """Creases radiating from a focal point (relative coordinates)."""
    kind: ClassVar[str] = "radial"
    focal_x: float
    focal_y: float


@dataclass(frozen=True)
class GridStrategy:
    """Alternating horizontal and vertical straight creases."""
    kind: ClassVar[str] = "grid"
    jitter: float


@dataclass(frozen=True)
class ClusteredStrategy:
    """Creases passing near a cluster center (relative coordinates)."""
    kind: ClassVar[str] = "clustered"
    cluster_x: float
    cluster_y: float
    spread: float


@dataclass(frozen=True)
class RandomStrategy:
    """No directional preference."""
    kind: ClassVar[str] = "random"


FoldStrategy = Union[
    HorizontalStrategy,
    VerticalStrategy,
    DiagonalStrategy,
    RadialStrategy,
    GridStrategy,
    ClusteredStrategy,
    RandomStrategy,
]

# Strategies whose creases must run edge to edge in a straight line
STRAIGHT_STRATEGIES = (HorizontalStrategy, VerticalStrategy, GridStrategy)


def strategy_jitter(strategy) -> float:
    """Jitter as a fraction (percent / 100); 0 for strategies without it."""
    return getattr(strategy, "jitter", 0.0) / 100


def strategy_to_dict(strategy: FoldStrategy) -> Dict[str, object]:
    data = {"type": strategy.kind}
    data.update(asdict(strategy))
    return data


def generate_fold_strategy(seed: int) -> FoldStrategy:
    """
    Seeded fold strategy.

    horizontal 16%, vertical 16%, diagonal 12%, radial 12%, grid 12%,
    clustered 12%, random 20%.
    """
    rng = channel_rng(seed, RngChannel.FOLD_STRATEGY)
    roll = rng.random()

    if roll < 0.16:
        return HorizontalStrategy(jitter=3 + rng.random() * 12)
    if roll < 0.32:
        return VerticalStrategy(jitter=3 + rng.random() * 12)
    if roll < 0.44:
        angle = 45 if rng.random() < 0.5 else 135
        return DiagonalStrategy(angle=angle, jitter=5 + rng.random() * 15)
    if roll < 0.56:
        focal_x = 0.2 + rng.random() * 0.6
        focal_y = 0.2 + rng.random() * 0.6
        return RadialStrategy(focal_x=focal_x, focal_y=focal_y)
    if roll < 0.68:
        return GridStrategy(jitter=3 + rng.random() * 10)
    if roll < 0.80:
        cluster_x = 0.15 + rng.random() * 0.7
        cluster_y = 0.15 + rng.random() * 0.7
        spread = 0.2 + rng.random() * 0.4
        return ClusteredStrategy(cluster_x=cluster_x, cluster_y=cluster_y, spread=spread)
    return RandomStrategy()
