"""
Random number generation utilities.

Every generation decision draws from its own channel: a fresh
:class:`SeededRandom` built from ``seed + offset``. The offsets below are the
single source of truth for reproducibility; changing one changes the artwork
for every seed. Python's random and NumPy's random must not be used in
generation code.
"""

from enum import IntEnum
from typing import Mapping, Sequence, TypeVar

from ..core.lcg_prng import SeededRandom

T = TypeVar("T")


class RngChannel(IntEnum):
    """Per-purpose seed offsets."""

    PALETTE = 0
    FOLD_PATH = 1
    CREASE_REDUCTION = 1111
    MAX_FOLDS = 2222
    RELATIONSHIP_BIAS = 2223
    MULTI_COLOR_RAMP = 3333
    MULTI_COLOR_ENABLED = 4444
    RENDER_MODE = 5555
    SHOW_EMPTY_CELLS = 5556
    PAPER = 5557
    FOLD_STRATEGY = 6666
    ABSORBENCY = 6667
    WEIGHT_RANGE = 7777
    MARGIN = 7778
    CELL_OUTLINES = 7779
    CREASE_WEIGHT = 8888
    HIT_COUNTS = 8889
    CREASE_LINES = 9191
    ANALYTICS = 9393
    CELL_SIZE = 9999
    FOLD_COUNT = 10000
    OVERLAP = 11111
    GAP = 12345
    SHADOW = 22222
    CELL_OVERFLOW = 22223
    DRAW_DIRECTION = 33333


def channel_rng(seed: int, channel: RngChannel) -> SeededRandom:
    """
    Create the stream for one generation channel.

    Args:
        seed: Base artwork seed
        channel: Channel whose offset is added to the seed

    Returns:
        Fresh SeededRandom positioned at the start of the channel
    """
    return SeededRandom(int(seed) + int(channel))


def chance(rng: SeededRandom, probability: float) -> bool:
    """Single draw; True with the given probability."""
    return rng.random() < probability


def pick_random(rng: SeededRandom, items: Sequence[T]) -> T:
    """Uniform pick (one draw)."""
    return items[int(rng.random() * len(items))]


def pick_weighted(rng: SeededRandom, items: Sequence[T], weights: Mapping[str, float]) -> T:
    """
    Pick by cumulative roll against a name -> weight table.

    Items without a ``name`` entry in ``weights`` are never picked. The last
    item is returned if the weights sum to less than the roll.
    """
    roll = rng.random()
    cumulative = 0.0
    for item in items:
        cumulative += weights.get(item.name, 0.0)
        if roll < cumulative:
            return item
    return items[-1]


def weighted_random_index(weights: Sequence[float], rng: SeededRandom) -> int:
    """Index chosen proportionally to ``weights`` (one draw)."""
    total = sum(weights)
    if total <= 0:
        return 0
    r = rng.random() * total
    for i, weight in enumerate(weights):
        r -= weight
        if r <= 0:
            return i
    return len(weights) - 1
