"""
Seeded presentation traits.

These only describe how a renderer should draw the level map (glyph overlap,
drop shadows, fill direction, margins, rare debug overlays). Nothing here
draws.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from ..config.constants import DRAWING_MARGIN
from ..utils.random import RngChannel, channel_rng
from .colors import CGA_PALETTE, color_distance, find_color
from .lcg_prng import SeededRandom, hash_seed

RARE_FLAG_CHANCE = 0.008
SELECTION_SLOTS = 20

# Glyph width factors indexed by overlap step: 5%, 25%, 50%, 75%, 95% overlap
OVERLAP_FACTORS = (0.95, 0.75, 0.5, 0.25, 0.05)


class OverlapPattern(str, Enum):
    UNIFORM = "uniform"
    ROWS = "rows"
    COLS = "cols"
    CHECKERBOARD = "checkerboard"
    DIAGONAL = "diagonal"


class OverlapSubPattern(str, Enum):
    REGULAR = "regular"
    RANDOM = "random"
    IRREGULAR = "irregular"


class DrawDirection(str, Enum):
    LTR = "ltr"
    RTL = "rtl"
    CENTER = "center"
    ALTERNATE = "alternate"
    DIAGONAL = "diagonal"
    RANDOM_MID = "randomMid"
    CHECKERBOARD = "checkerboard"


def generate_show_empty_cells(seed: int) -> bool:
    """Faint fill in empty cells for binary, sparse and dense modes (30%)."""
    return channel_rng(seed, RngChannel.SHOW_EMPTY_CELLS).random() < 0.3


# ============ OVERLAP ============

@dataclass(frozen=True)
class OverlapInfo:
    """
    How far neighbouring glyphs overlap, and how that varies across the grid.

    ``factor(row, col)`` is the fraction of a glyph's width that advances the
    pen (1.0 means no overlap).
    """

    has_overlap: bool = False
    base_factor: float = 1.0
    pattern: OverlapPattern = OverlapPattern.UNIFORM
    sub_pattern: OverlapSubPattern = OverlapSubPattern.REGULAR
    variation: int = 1
    interval: int = 1
    row_selection: Tuple[bool, ...] = field(default=(False,) * SELECTION_SLOTS)
    col_selection: Tuple[bool, ...] = field(default=(False,) * SELECTION_SLOTS)
    diag_selection: Tuple[bool, ...] = field(default=(False,) * SELECTION_SLOTS)
    checkerboard_xor: bool = False
    inverted_single_char: bool = False

    @property
    def amount(self) -> str:
        if not self.has_overlap:
            return "none"
        return f"{round((1 - self.base_factor) * 100)}%"

    def _shifted(self, idx: int, steps: int) -> int:
        return (idx + steps * self.variation) % len(OVERLAP_FACTORS)

    def factor(self, row: int, col: int) -> float:
        if not self.has_overlap:
            return 1.0
        idx = OVERLAP_FACTORS.index(self.base_factor) if self.base_factor in OVERLAP_FACTORS else 0
        pattern = self.pattern
        sub = self.sub_pattern

        if pattern == OverlapPattern.ROWS:
            if sub == OverlapSubPattern.RANDOM:
                idx = self._shifted(idx, int(self.row_selection[row % SELECTION_SLOTS]))
            elif sub == OverlapSubPattern.IRREGULAR:
                idx = self._shifted(idx, row % 3)
            else:
                idx = self._shifted(idx, row // self.interval)
        elif pattern == OverlapPattern.COLS:
            if sub == OverlapSubPattern.RANDOM:
                idx = self._shifted(idx, int(self.col_selection[col % SELECTION_SLOTS]))
            elif sub == OverlapSubPattern.IRREGULAR:
                idx = self._shifted(idx, col % 3)
            else:
                idx = self._shifted(idx, col // self.interval)
        elif pattern == OverlapPattern.CHECKERBOARD:
            if sub == OverlapSubPattern.RANDOM:
                row_sel = self.row_selection[row % SELECTION_SLOTS]
                col_sel = self.col_selection[col % SELECTION_SLOTS]
                selected = (row_sel != col_sel) if self.checkerboard_xor else (row_sel or col_sel)
                idx = self._shifted(idx, int(selected))
            elif sub == OverlapSubPattern.IRREGULAR:
                idx = self._shifted(idx, (row + col) % 3)
            else:
                idx = self._shifted(idx, (row + col) % 2)
        elif pattern == OverlapPattern.DIAGONAL:
            if sub == OverlapSubPattern.RANDOM:
                idx = self._shifted(idx, int(self.diag_selection[(row + col) % SELECTION_SLOTS]))
            elif sub == OverlapSubPattern.IRREGULAR:
                idx = self._shifted(idx, (row + col) % 4)
            else:
                idx = self._shifted(idx, (row + col) // self.interval)

        return OVERLAP_FACTORS[idx]


def _base_overlap_factor(rng: SeededRandom) -> float:
    roll = rng.random()
    if roll < 0.1:
        return 0.95
    if roll < 0.2:
        return 0.75
    if roll < 0.3:
        return 0.65  # off the pattern ladder; patterns start from the first step
    if roll < 0.6:
        return 0.5
    if roll < 0.8:
        return 0.25
    return 0.05


def generate_overlap_info(seed: int) -> OverlapInfo:
    """35% of seeds overlap glyphs, with one of five grid patterns."""
    rng = channel_rng(seed, RngChannel.OVERLAP)
    if rng.random() < 0.65:
        return OverlapInfo()

    base_factor = _base_overlap_factor(rng)
    pattern = list(OverlapPattern)[int(rng.random() * 5)]
    variation = int(rng.random() * 3) + 1
    sub_pattern = list(OverlapSubPattern)[int(rng.random() * 3)]
    interval = int(rng.random() * 4) + 1

    row_prob = 0.3 + rng.random() * 0.4
    col_prob = 0.3 + rng.random() * 0.4
    diag_prob = 0.3 + rng.random() * 0.4
    rows, cols, diags = [], [], []
    for _ in range(SELECTION_SLOTS):
        rows.append(rng.random() < row_prob)
        cols.append(rng.random() < col_prob)
        diags.append(rng.random() < diag_prob)

    checkerboard_xor = int(rng.random() * 2) == 1
    inverted_single_char = rng.random() < 0.10

    return OverlapInfo(
        has_overlap=True,
        base_factor=base_factor,
        pattern=pattern,
        sub_pattern=sub_pattern,
        variation=variation,
        interval=interval,
        row_selection=tuple(rows),
        col_selection=tuple(cols),
        diag_selection=tuple(diags),
        checkerboard_xor=checkerboard_xor,
        inverted_single_char=inverted_single_char,
    )


# ============ SHADOW ============

@dataclass(frozen=True)
class ShadowEffect:
    """Offset copy of each glyph drawn behind it (reference pixels)."""

    seed: int
    enabled: bool
    offset_x: int
    offset_y: int
    alpha: float = 0.0
    color: Optional[str] = None

    def offsets(self, row: int, col: int) -> Tuple[int, int]:
        """Per-cell offset: horizontal only, vertical only, or both."""
        direction = int(SeededRandom(hash_seed(self.seed, f"shadow:{row},{col}")).random() * 3)
        return (
            self.offset_x if direction != 1 else 0,
            self.offset_y if direction != 0 else 0,
        )


def _shadow_color(rng: SeededRandom, bg: str, text: str, accent: Optional[str]) -> str:
    """Accent when distinct from the mark, else a table color far from the mark."""
    if accent and accent != text:
        return accent
    mark = find_color(text)
    candidates = [
        c for c in CGA_PALETTE
        if c.hex != text and c.hex != bg and color_distance(c, mark) > 100
    ]
    pick = int(rng.random() * len(candidates))
    return candidates[pick].hex if candidates else CGA_PALETTE[0].hex


def generate_shadow_effect(seed: int, bg: str, text: str, accent: Optional[str] = None) -> ShadowEffect:
    """25% of seeds draw a drop shadow."""
    rng = channel_rng(seed, RngChannel.SHADOW)
    enabled = rng.random() < 0.25
    offset_x = round(2 + rng.random() * 2)
    offset_y = round(1 + rng.random() * 2)
    if not enabled:
        return ShadowEffect(seed, False, offset_x, offset_y)

    alpha = 0.4 + rng.random() * 0.3
    return ShadowEffect(seed, True, offset_x, offset_y, alpha, _shadow_color(rng, bg, text, accent))


# ============ DIRECTION / OVERFLOW ============

@dataclass(frozen=True)
class DrawDirectionInfo:
    mode: DrawDirection
    alternate_starts_rtl: bool = False
    diagonal_start_col: int = 0
    diagonal_shift_right: bool = True


DRAW_DIRECTION_THRESHOLDS = (
    (0.22, DrawDirection.LTR),
    (0.44, DrawDirection.RTL),
    (0.65, DrawDirection.CENTER),
    (0.80, DrawDirection.ALTERNATE),
    (0.90, DrawDirection.DIAGONAL),
    (0.96, DrawDirection.RANDOM_MID),
    (1.00, DrawDirection.CHECKERBOARD),
)


def generate_draw_direction(seed: int, cols: int = 1) -> DrawDirectionInfo:
    """Order in which glyphs fill a row, plus the knobs some modes use."""
    rng = channel_rng(seed, RngChannel.DRAW_DIRECTION)
    roll = rng.random()
    mode = DrawDirection.CHECKERBOARD
    for threshold, candidate in DRAW_DIRECTION_THRESHOLDS:
        if roll < threshold:
            mode = candidate
            break

    alternate_starts_rtl = rng.random() < 0.5
    diagonal_start_col = int(rng.random() * max(1, cols))
    diagonal_shift_right = rng.random() < 0.5
    return DrawDirectionInfo(mode, alternate_starts_rtl, diagonal_start_col, diagonal_shift_right)


def generate_cell_overflow(seed: int) -> int:
    """Cells a glyph run may spill into: 0 (60%), 1 (20%), 2 (10%), 3 (7%), 5 (3%)."""
    roll = channel_rng(seed, RngChannel.CELL_OVERFLOW).random()
    if roll < 0.6:
        return 0
    if roll < 0.8:
        return 1
    if roll < 0.9:
        return 2
    if roll < 0.97:
        return 3
    return 5


# ============ RARE FLAGS / MARGIN ============

@dataclass(frozen=True)
class RareFlags:
    """Debug-style overlays, each on for 0.8% of seeds."""
    cell_outlines: bool = False
    hit_counts: bool = False
    crease_lines: bool = False
    analytics: bool = False

    @property
    def any(self) -> bool:
        return self.cell_outlines or self.hit_counts or self.crease_lines or self.analytics


def _rare(seed: int, channel: RngChannel) -> bool:
    return channel_rng(seed, channel).random() < RARE_FLAG_CHANCE


def generate_rare_flags(seed: int) -> RareFlags:
    return RareFlags(
        cell_outlines=_rare(seed, RngChannel.CELL_OUTLINES),
        hit_counts=_rare(seed, RngChannel.HIT_COUNTS),
        crease_lines=_rare(seed, RngChannel.CREASE_LINES),
        analytics=_rare(seed, RngChannel.ANALYTICS),
    )


@dataclass(frozen=True)
class MarginSize:
    name: str
    multiplier: float

    @property
    def value(self) -> int:
        """Margin in reference units."""
        return round(DRAWING_MARGIN * self.multiplier)


MARGIN_FULL = MarginSize("Full", 1.0)
MARGIN_HALF = MarginSize("Half", 0.5)
MARGIN_QUARTER = MarginSize("Quarter", 0.25)
MARGIN_BLEED = MarginSize("Bleed", 0.0)


def generate_margin_size(seed: int) -> MarginSize:
    """Full 50%, half 25%, quarter 20%, bleed 5%."""
    roll = channel_rng(seed, RngChannel.MARGIN).random() * 100
    if roll < 50:
        return MARGIN_FULL
    if roll < 75:
        return MARGIN_HALF
    if roll < 95:
        return MARGIN_QUARTER
    return MARGIN_BLEED
