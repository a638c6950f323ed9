"""
Seeded parameter generators.

Each generator is a pure function of the seed and reads only its own RNG
channel, so changing how one parameter consumes randomness never perturbs
another parameter for the same seed.
"""

import math
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Dict, List, Optional

import structlog

from ..config.constants import (
    CELL_ASPECT_MAX,
    CELL_MAX,
    CELL_MIN,
    CHAR_WIDTH_RATIO,
    DRAWING_MARGIN,
    FALLBACK_CELL_HEIGHT,
    FALLBACK_CELL_WIDTH,
    GLYPH_HEIGHT_RATIO,
    MAX_SEEDED_FOLDS,
    REFERENCE_HEIGHT,
    REFERENCE_WIDTH,
)
from ..utils.random import RngChannel, channel_rng, pick_random
from .colors import (
    PALETTE_BY_TEMPERATURE,
    Color,
    cube_diagonal_path,
    cube_neighbors,
    find_color,
    has_good_contrast,
)

logger = structlog.get_logger()


class RenderMode(str, Enum):
    """How quantized levels map to glyphs."""

    NORMAL = "normal"
    BINARY = "binary"
    INVERTED = "inverted"
    SPARSE = "sparse"
    DENSE = "dense"


@dataclass(frozen=True)
class CellDimensions:
    """Base cell size in reference units."""
    cell_w: int
    cell_h: int


@dataclass(frozen=True)
class WeightRange:
    """Range for per-crease base weights."""
    min: float
    max: float


@dataclass(frozen=True)
class PaperProperties:
    """
    Material modifiers for how folds register.

    Attributes:
        absorbency: Probability a crease leaves a mark (0.1-0.9 when seeded)
        intersection_threshold: Minimum intersection weight kept
        angle_affinity: Preferred crease angle in degrees, or None
        affinity_strength: Weight loss for creases 90 degrees off the affinity
        ceiling_multiplier: Scales the saturation ceiling (0.3-1.7)
    """
    absorbency: float = 1.0
    intersection_threshold: float = 0.0
    angle_affinity: Optional[float] = None
    affinity_strength: float = 0.0
    ceiling_multiplier: float = 1.0

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


# ============ CELL SIZE ============

def get_divisors(n: int, low: int, high: int) -> List[int]:
    """Divisors of ``n`` within [low, high]."""
    return [i for i in range(low, high + 1) if n % i == 0]


def _size_band_index(rng, count: int) -> int:
    """
    Index into area-sorted pairs.

    3% very small (bottom 10%), 7% small (10-25%), 35% medium (25-75%),
    50% large (75-90%), 5% very large (top 10%).
    """
    size_bias = rng.random()
    if size_bias < 0.03:
        end = max(1, math.ceil(count * 0.1))
        return int(rng.random() * end)
    if size_bias < 0.10:
        start = int(count * 0.1)
        end = int(count * 0.25)
        return start + int(rng.random() * max(1, end - start))
    if size_bias < 0.45:
        start = int(count * 0.25)
        end = int(count * 0.75)
        return start + int(rng.random() * (end - start))
    if size_bias < 0.95:
        start = int(count * 0.75)
        end = int(count * 0.9)
        return start + int(rng.random() * max(1, end - start))
    start = int(count * 0.9)
    return start + int(rng.random() * (count - start))


def generate_cell_dimensions(seed: int, padding: float = 0,
                             width: int = REFERENCE_WIDTH,
                             height: int = REFERENCE_HEIGHT) -> CellDimensions:
    """
    Seeded cell size.

    Cells exactly divide the inner drawing area of the reference canvas so a
    seed lays out the same grid at every output resolution.

    Args:
        seed: Artwork seed
        padding: Extra padding on each side, in reference units
        width: Canvas width in reference units
        height: Canvas height in reference units

    Returns:
        CellDimensions; an axis with no divisor uses 8 (width) or 12
        (height), and 8x12 is returned when no pair qualifies
    """
    inner_w = int(width - padding * 2 - DRAWING_MARGIN * 2)
    inner_h = int(height - padding * 2 - DRAWING_MARGIN * 2)

    valid_widths = get_divisors(inner_w, CELL_MIN, CELL_MAX) if inner_w > 0 else []
    valid_heights = get_divisors(inner_h, CELL_MIN, CELL_MAX) if inner_h > 0 else []

    # An axis without divisors falls back on its own; the other keeps its choices
    if not valid_widths:
        logger.warning("No cell width divides the drawing area", inner_width=inner_w, cell_w=FALLBACK_CELL_WIDTH)
        valid_widths = [FALLBACK_CELL_WIDTH]
    if not valid_heights:
        logger.warning("No cell height divides the drawing area", inner_height=inner_h, cell_h=FALLBACK_CELL_HEIGHT)
        valid_heights = [FALLBACK_CELL_HEIGHT]

    # Cell width must fit one glyph of the cell's font size
    min_width_ratio = CHAR_WIDTH_RATIO / GLYPH_HEIGHT_RATIO

    pairs = [
        (w, h)
        for w in valid_widths
        for h in valid_heights
        if max(w / h, h / w) <= CELL_ASPECT_MAX and w >= h * min_width_ratio
    ]

    if not pairs:
        logger.warning(
            "No valid cell divisor pairs, using fallback dimensions",
            inner_width=inner_w,
            inner_height=inner_h,
            cell_w=FALLBACK_CELL_WIDTH,
            cell_h=FALLBACK_CELL_HEIGHT,
        )
        return CellDimensions(FALLBACK_CELL_WIDTH, FALLBACK_CELL_HEIGHT)

    pairs.sort(key=lambda p: p[0] * p[1])
    rng = channel_rng(seed, RngChannel.CELL_SIZE)
    idx = min(_size_band_index(rng, len(pairs)), len(pairs) - 1)
    w, h = pairs[idx]
    return CellDimensions(w, h)


# ============ SIMPLE GENERATORS ============

# Cumulative: normal 35%, binary 5%, inverted 25%, sparse 17.5%, dense 17.5%
RENDER_MODE_THRESHOLDS = (
    (0.35, RenderMode.NORMAL),
    (0.40, RenderMode.BINARY),
    (0.65, RenderMode.INVERTED),
    (0.825, RenderMode.SPARSE),
    (1.0, RenderMode.DENSE),
)


def generate_render_mode(seed: int) -> RenderMode:
    roll = channel_rng(seed, RngChannel.RENDER_MODE).random()
    for threshold, mode in RENDER_MODE_THRESHOLDS:
        if roll < threshold:
            return mode
    return RenderMode.DENSE


def generate_weight_range(seed: int) -> WeightRange:
    """One of four range shapes: low band, high band, wide, mid-wide."""
    rng = channel_rng(seed, RngChannel.WEIGHT_RANGE)
    style = rng.random()

    if style < 0.25:
        base = 0.2 + rng.random() * 0.2
        return WeightRange(base, base + 0.1 + rng.random() * 0.2)
    if style < 0.5:
        base = 0.6 + rng.random() * 0.2
        return WeightRange(base, base + 0.1 + rng.random() * 0.1)
    if style < 0.75:
        low = 0.1 + rng.random() * 0.2
        return WeightRange(low, 0.7 + rng.random() * 0.3)
    low = 0.3 + rng.random() * 0.2
    return WeightRange(low, 0.5 + rng.random() * 0.5)


def generate_max_folds(seed: int) -> int:
    """Breathing cycle length, uniform in [4, 70)."""
    return int(4 + channel_rng(seed, RngChannel.MAX_FOLDS).random() * 66)


def generate_fold_count(seed: int) -> int:
    """Seeded fold count in [1, 500]."""
    return int(1 + channel_rng(seed, RngChannel.FOLD_COUNT).random() * MAX_SEEDED_FOLDS)


def generate_multi_color_enabled(seed: int) -> bool:
    return channel_rng(seed, RngChannel.MULTI_COLOR_ENABLED).random() < 0.25


# ============ PAPER ============

def generate_paper_properties(seed: int) -> PaperProperties:
    """
    Seeded paper material.

    40% of papers have a grain (angle affinity); the intersection threshold
    is currently always 0.
    """
    rng = channel_rng(seed, RngChannel.PAPER)

    absorbency = 0.1 + rng.random() * 0.8
    has_affinity = rng.random() < 0.4
    angle_affinity = rng.random() * 180 if has_affinity else None
    affinity_strength = 0.2 + rng.random() * 0.6 if has_affinity else 0.0
    ceiling_multiplier = 0.3 + rng.random() * 1.4

    return PaperProperties(
        absorbency=absorbency,
        intersection_threshold=0.0,
        angle_affinity=angle_affinity,
        affinity_strength=affinity_strength,
        ceiling_multiplier=ceiling_multiplier,
    )


def describe_paper(props: PaperProperties) -> str:
    """Short trait label such as ``Standard/Fine/Grain``."""
    if props.absorbency < 0.35:
        absorbency = "Resistant"
    elif props.absorbency < 0.65:
        absorbency = "Standard"
    else:
        absorbency = "Absorbent"

    if props.intersection_threshold < 0.15:
        threshold = "Fine"
    elif props.intersection_threshold < 0.35:
        threshold = "Medium"
    else:
        threshold = "Coarse"

    grain = "Grain" if props.angle_affinity is not None else "Uniform"
    return f"{absorbency}/{threshold}/{grain}"


# ============ MULTI-COLOR RAMPS ============

def _diagonal_ramp(bg: Color, text: Color) -> List[str]:
    """Straight path through the RGB cube from ground to mark."""
    path = cube_diagonal_path(bg, text, 6)
    return [path[0].hex, path[int(len(path) * 0.33)].hex, path[int(len(path) * 0.66)].hex, path[-1].hex]


def _neighbor_ramp(bg: Color, text: Color, rng) -> List[str]:
    """Colors near the mark that still read against the ground, weakest first."""
    neighbors = [c for c in cube_neighbors(text, 200) if c.name != bg.name and has_good_contrast(bg, c, 1.5)]
    neighbors.sort(key=lambda c: abs(c.luminance - bg.luminance))

    if len(neighbors) >= 3:
        levels = [neighbors[0], neighbors[1], pick_random(rng, neighbors[2:])]
    else:
        levels = (neighbors + [text, text, text])[:3]
    return [c.hex for c in levels] + [text.hex]


def _temperature_ramp(bg: Color, text: Color) -> List[str]:
    """Same-temperature levels with one opposite-temperature level for contrast."""
    is_light_bg = bg.luminance > 50

    def by_luminance(colors):
        return sorted(colors, key=lambda c: c.luminance, reverse=is_light_bg)

    text_temp = text.temperature
    # Neutral marks pair with warm colors
    opposite_temp = "cool" if text_temp == "warm" else "warm"

    same = by_luminance(c for c in PALETTE_BY_TEMPERATURE[text_temp] if has_good_contrast(bg, c, 2.0))
    opposite = by_luminance(c for c in PALETTE_BY_TEMPERATURE[opposite_temp] if has_good_contrast(bg, c, 2.0))

    colors: List[str] = []
    used = set()

    first = same[0] if same else text
    colors.append(first.hex)
    used.add(first.hex)

    mid_same = [c for c in same if c.hex not in used]
    if mid_same:
        pick = mid_same[int(len(mid_same) * 0.4)]
        colors.append(pick.hex)
        used.add(pick.hex)
    else:
        colors.append(text.hex)

    mid_opposite = [c for c in opposite if c.hex not in used]
    if mid_opposite:
        pick = mid_opposite[int(len(mid_opposite) * 0.5)]
        colors.append(pick.hex)
        used.add(pick.hex)
    else:
        colors.append(text.hex)

    remaining = by_luminance(c for c in same + opposite if c.hex not in used)
    colors.append(remaining[-1].hex if remaining else text.hex)
    return colors


def generate_multi_color_palette(seed: int, bg_color: str, text_color: str) -> List[str]:
    """
    Four level colors (level 0 closest to the ground, level 3 strongest).

    Strategy: 45% cube-diagonal interpolation, 30% neighbor leveling,
    25% temperature opposition.
    """
    rng = channel_rng(seed, RngChannel.MULTI_COLOR_RAMP)
    bg = find_color(bg_color)
    text = find_color(text_color)

    strategy = rng.random()
    if strategy < 0.45:
        return _diagonal_ramp(bg, text)
    if strategy < 0.75:
        return _neighbor_ramp(bg, text, rng)
    return _temperature_ramp(bg, text)
