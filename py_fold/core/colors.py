"""
CGA 13-color chromatic table and color utilities.

Brown and the grays are left out of the table: every color is either
value-committed (dark or light, valid as a ground) or a chromatic mid used
only for marks.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Tuple


def get_luminance(r: int, g: int, b: int) -> float:
    """Relative luminance (Rec. 709 weights) scaled to 0-100."""
    return (0.2126 * (r / 255) + 0.7152 * (g / 255) + 0.0722 * (b / 255)) * 100


def get_saturation_tier(r: int, g: int, b: int) -> str:
    """Bucket the HSL-style saturation of an RGB triple."""
    high = max(r, g, b)
    low = min(r, g, b)
    if high == low:
        return "none"
    spread = (high - low) / 255
    if spread > 0.6:
        return "high"
    if spread > 0.3:
        return "medium"
    return "low"


@dataclass(frozen=True)
class Color:
    """One entry of the fixed color table."""

    hex: str
    name: str
    luminance: float  # perceptual 0-100 value used for contrast decisions
    temperature: str  # warm | cool | neutral
    r: int
    g: int
    b: int

    @property
    def saturation(self) -> str:
        return get_saturation_tier(self.r, self.g, self.b)

    @property
    def is_chromatic(self) -> bool:
        return self.temperature != "neutral"

    @property
    def rgb(self) -> Tuple[int, int, int]:
        return (self.r, self.g, self.b)


CGA_PALETTE: Tuple[Color, ...] = (
    # Darks (valid grounds) - luminance < 30
    Color("#000000", "black", 0, "neutral", 0, 0, 0),
    Color("#0000AA", "blue", 10, "cool", 0, 0, 170),
    Color("#AA0000", "red", 20, "warm", 170, 0, 0),
    Color("#AA00AA", "magenta", 25, "warm", 170, 0, 170),
    # Lights (valid grounds) - luminance > 70
    Color("#FFFFFF", "white", 100, "neutral", 255, 255, 255),
    Color("#FFFF55", "yellow", 93, "warm", 255, 255, 85),
    Color("#55FFFF", "lightCyan", 85, "cool", 85, 255, 255),
    Color("#55FF55", "lightGreen", 77, "cool", 85, 255, 85),
    # Mids (marks only, never grounds) - luminance 30-70
    Color("#00AA00", "green", 30, "cool", 0, 170, 0),
    Color("#00AAAA", "cyan", 40, "cool", 0, 170, 170),
    Color("#5555FF", "lightBlue", 45, "cool", 85, 85, 255),
    Color("#FF5555", "lightRed", 45, "warm", 255, 85, 85),
    Color("#FF55FF", "lightMagenta", 60, "warm", 255, 85, 255),
)

COLORS_BY_NAME: Dict[str, Color] = {c.name: c for c in CGA_PALETTE}
COLORS_BY_HEX: Dict[str, Color] = {c.hex: c for c in CGA_PALETTE}

BLACK = COLORS_BY_NAME["black"]
WHITE = COLORS_BY_NAME["white"]
YELLOW = COLORS_BY_NAME["yellow"]

# Role pools
GROUND_POOL: Tuple[Color, ...] = tuple(c for c in CGA_PALETTE if c.luminance < 30 or c.luminance > 70)
MARK_POOL: Tuple[Color, ...] = CGA_PALETTE
ACCENT_POOL: Tuple[Color, ...] = tuple(c for c in CGA_PALETTE if c.is_chromatic)
CHROMATIC_POOL: Tuple[Color, ...] = ACCENT_POOL

PALETTE_BY_TEMPERATURE: Dict[str, Tuple[Color, ...]] = {
    temp: tuple(c for c in CGA_PALETTE if c.temperature == temp)
    for temp in ("warm", "cool", "neutral")
}


def find_color(hex_color: str) -> Color:
    """Table entry for a hex string; black when the color is not in the table."""
    return COLORS_BY_HEX.get(hex_color.upper(), CGA_PALETTE[0])


def color_distance(c1: Color, c2: Color) -> float:
    """Perceptually weighted RGB distance."""
    dr = c1.r - c2.r
    dg = c1.g - c2.g
    db = c1.b - c2.b
    return math.sqrt(dr * dr * 0.3 + dg * dg * 0.59 + db * db * 0.11)


def contrast_ratio(c1: Color, c2: Color) -> float:
    """WCAG-style contrast ratio from table luminance."""
    l1 = c1.luminance / 100
    l2 = c2.luminance / 100
    return (max(l1, l2) + 0.05) / (min(l1, l2) + 0.05)


def has_good_contrast(c1: Color, c2: Color, min_ratio: float = 4.5) -> bool:
    return contrast_ratio(c1, c2) >= min_ratio


def cube_diagonal_path(start: Color, end: Color, steps: int) -> List[Color]:
    """
    Walk the straight RGB-cube diagonal between two colors, snapping each step
    to the nearest table color.
    """
    path = []
    for i in range(steps):
        t = i / (steps - 1) if steps > 1 else 0.0
        target = Color(
            "", "", 0, "neutral",
            round(start.r + (end.r - start.r) * t),
            round(start.g + (end.g - start.g) * t),
            round(start.b + (end.b - start.b) * t),
        )
        path.append(min(CGA_PALETTE, key=lambda c: color_distance(c, target)))
    return path


def cube_neighbors(color: Color, max_distance: float) -> List[Color]:
    """Table colors within ``max_distance`` of ``color``, excluding itself."""
    return [c for c in CGA_PALETTE if c.name != color.name and color_distance(c, color) <= max_distance]
