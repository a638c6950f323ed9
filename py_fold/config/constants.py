"""
Fixed generation constants.

These values are part of the reproducibility contract: a seed only maps to
the same artwork as long as they stay unchanged, so they are not read from
the environment.
"""

# Reference canvas (A4 aspect ratio 1:sqrt(2)); layout is solved here and
# scaled to the output resolution by the renderer.
REFERENCE_WIDTH = 1200
REFERENCE_HEIGHT = 1697
DRAWING_MARGIN = 145  # ~12.1% of width

# Cell size bounds
CELL_MIN = 20
CELL_MAX = 600
CELL_ASPECT_MAX = 3

# Fallback used when no divisor pair satisfies the cell constraints
FALLBACK_CELL_WIDTH = 8
FALLBACK_CELL_HEIGHT = 12

# Glyph metrics relative to font size
CHAR_WIDTH_RATIO = 0.6
CHAR_TOP_OVERFLOW = 0.08
CHAR_BOTTOM_OVERFLOW_DARK = 0.06

# Cell height / font size for the tallest glyph
GLYPH_HEIGHT_RATIO = 1 + CHAR_TOP_OVERFLOW + CHAR_BOTTOM_OVERFLOW_DARK

# Shade glyphs by quantization level
SHADE_CHARS = (" ", "░", "▒", "▓")

# Upper bound for the seeded fold count
MAX_SEEDED_FOLDS = 500
