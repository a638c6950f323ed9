"""
Palette derivation.

Ground first, contrast type second, then the mark is derived as the answer to
both. Only colors from the 13-entry table are used.
"""

from dataclasses import dataclass
from typing import Dict, List

import structlog

from ..utils.random import RngChannel, channel_rng, pick_random, pick_weighted
from .colors import (
    ACCENT_POOL,
    BLACK,
    CHROMATIC_POOL,
    GROUND_POOL,
    MARK_POOL,
    WHITE,
    YELLOW,
    Color,
    find_color,
)
from .lcg_prng import SeededRandom

logger = structlog.get_logger()

MIN_LUMINANCE_DIFF = 25

# Ground weights; black and white are the most common grounds
GROUND_WEIGHTS: Dict[str, float] = {
    "black": 0.20,
    "white": 0.15,
    "blue": 0.15,
    "red": 0.15,
    "magenta": 0.10,
    "yellow": 0.10,
    "lightCyan": 0.08,
    "lightGreen": 0.07,
}

# Cumulative thresholds: value 40%, temperature 28%, complement 22%, clash 10%
CONTRAST_TYPES = (
    (0.40, "value"),
    (0.68, "temperature"),
    (0.90, "complement"),
    (1.00, "clash"),
)

COMPLEMENT_PAIRS: Dict[str, tuple] = {
    "red": ("cyan", "lightCyan"),
    "magenta": ("green", "lightGreen"),
    "blue": ("yellow",),
    "lightRed": ("cyan", "lightCyan"),
    "lightMagenta": ("green", "lightGreen"),
    "lightBlue": ("yellow",),
    "cyan": ("red", "lightRed"),
    "lightCyan": ("red", "lightRed"),
    "green": ("magenta", "lightMagenta"),
    "lightGreen": ("magenta", "lightMagenta"),
    "yellow": ("blue", "lightBlue"),
    "black": ("white", "yellow", "lightCyan"),
    "white": ("black", "blue", "magenta"),
}

HIGH_ENERGY_ACCENTS = ("yellow", "lightCyan", "lightMagenta", "lightGreen")

MONOCHROME_CHANCE = 0.12
TWO_COLOR_CHANCE = 0.4
HIGH_ENERGY_CHANCE = 0.6


@dataclass(frozen=True)
class Palette:
    """Ground / mark / accent colors of one artwork."""

    bg: str
    text: str
    accent: str
    strategy: str
    color_count: int

    @property
    def ground(self) -> Color:
        return find_color(self.bg)

    @property
    def mark(self) -> Color:
        return find_color(self.text)

    @property
    def is_monochrome(self) -> bool:
        return self.strategy.startswith("monochrome/")

    def to_dict(self) -> Dict[str, object]:
        return {
            "bg": self.bg,
            "text": self.text,
            "accent": self.accent,
            "strategy": self.strategy,
            "colorCount": self.color_count,
        }


def fallback_palette(ground: Color, strategy: str, color_count: int) -> Palette:
    """Black/white/yellow palette used when the derived pair lacks contrast."""
    dark_ground = ground.luminance < 50
    return Palette(
        bg=BLACK.hex if dark_ground else WHITE.hex,
        text=WHITE.hex if dark_ground else BLACK.hex,
        accent=YELLOW.hex,
        strategy=strategy,
        color_count=color_count,
    )


def _value_candidates(ground: Color) -> List[Color]:
    needs_light = ground.luminance < 50
    return [c for c in MARK_POOL if (c.luminance > 60 if needs_light else c.luminance < 40)]


def derive_mark(ground: Color, contrast_type: str, rng: SeededRandom) -> Color:
    """
    Mark color answering the ground under one contrast type.

    Candidates are ordered by luminance distance from the ground (strongest
    first) and one is picked uniformly. Black or white is returned when the
    contrast type has no candidate.
    """
    if contrast_type == "value":
        candidates = _value_candidates(ground)
    elif contrast_type == "temperature":
        if ground.temperature == "neutral":
            candidates = [
                c for c in MARK_POOL
                if c.is_chromatic and abs(c.luminance - ground.luminance) > MIN_LUMINANCE_DIFF
            ]
        else:
            target = "cool" if ground.temperature == "warm" else "warm"
            candidates = [
                c for c in MARK_POOL
                if c.temperature == target and abs(c.luminance - ground.luminance) > MIN_LUMINANCE_DIFF
            ]
    elif contrast_type == "complement":
        complements = COMPLEMENT_PAIRS.get(ground.name, ())
        candidates = [c for c in MARK_POOL if c.name in complements]
        if not candidates:
            candidates = _value_candidates(ground)
    else:
        # clash: readable but wrong
        candidates = [
            c for c in MARK_POOL
            if c.name != ground.name and 20 < abs(c.luminance - ground.luminance) < 50
        ]

    candidates.sort(key=lambda c: abs(c.luminance - ground.luminance), reverse=True)
    if candidates:
        return pick_random(rng, candidates)
    return WHITE if ground.luminance < 50 else BLACK


def derive_accent(ground: Color, mark: Color, rng: SeededRandom) -> Color:
    """Optional third color; returns ``mark`` for two-color palettes."""
    if rng.random() < TWO_COLOR_CHANCE:
        return mark

    candidates = [
        c for c in ACCENT_POOL
        if c.name != ground.name and c.name != mark.name and abs(c.luminance - ground.luminance) > 20
    ]
    if not candidates:
        return mark

    hot = [c for c in candidates if c.name in HIGH_ENERGY_ACCENTS]
    if hot and rng.random() < HIGH_ENERGY_CHANCE:
        return pick_random(rng, hot)
    return pick_random(rng, candidates)


def generate_monochrome(rng: SeededRandom) -> Palette:
    """One chromatic key color on a black or white ground."""
    key = pick_random(rng, CHROMATIC_POOL)

    if key.luminance > 50:
        ground = BLACK
    elif key.luminance < 30:
        ground = BLACK if rng.random() < 0.75 else WHITE
    else:
        ground = BLACK if rng.random() < 0.6 else WHITE

    return Palette(
        bg=ground.hex,
        text=key.hex,
        accent=key.hex,
        strategy=f"monochrome/{key.name}",
        color_count=2,
    )


def pick_contrast_type(rng: SeededRandom) -> str:
    roll = rng.random()
    for threshold, name in CONTRAST_TYPES:
        if roll < threshold:
            return name
    return CONTRAST_TYPES[-1][1]


def generate_palette(seed: int) -> Palette:
    """
    Derive the palette for a seed.

    Args:
        seed: Artwork seed

    Returns:
        Palette whose ground and mark differ by at least 25 luminance, or the
        black/white fallback palette. Monochrome palettes keep their key color
        on a black or white ground whatever the gap.
    """
    rng = channel_rng(seed, RngChannel.PALETTE)

    if rng.random() < MONOCHROME_CHANCE:
        return generate_monochrome(rng)

    ground = pick_weighted(rng, GROUND_POOL, GROUND_WEIGHTS)
    contrast_type = pick_contrast_type(rng)
    mark = derive_mark(ground, contrast_type, rng)
    accent = derive_accent(ground, mark, rng)
    color_count = 2 if accent.hex == mark.hex else 3

    if abs(ground.luminance - mark.luminance) < MIN_LUMINANCE_DIFF:
        logger.debug("Palette contrast fallback", seed=seed, ground=ground.name, mark=mark.name)
        return fallback_palette(ground, contrast_type, color_count)

    return Palette(
        bg=ground.hex,
        text=mark.hex,
        accent=accent.hex,
        strategy=contrast_type,
        color_count=color_count,
    )
