"""
Seeded linear congruential generator used for all fold artwork randomness.

The generator works on plain Python integers so the sequence is identical on
every platform and matches the 31-bit arithmetic of the on-chain renderer.
"""

LCG_MULT = 1103515245
LCG_INC = 12345
LCG_MASK = 0x7FFFFFFF
LCG_SCALE = 1.0 / 2**31  # maps the 31-bit state into [0, 1)


def _int32(n: int) -> int:
    """Wrap to a signed 32-bit integer."""
    n &= 0xFFFFFFFF
    return n - 0x100000000 if n & 0x80000000 else n


def normalize_seed(seed: int) -> int:
    """Seeds are used by absolute value, with 0 mapped to 1."""
    return abs(int(seed)) or 1


class SeededRandom:
    """
    LCG stream constructed from an integer seed.

    Two instances built from the same seed produce identical sequences.
    """

    def __init__(self, seed: int):
        """Initialize with an integer seed (any sign)."""
        self.seed = seed
        self.state = normalize_seed(seed)
        self.call_count = 0

    def random(self) -> float:
        """Generate next random number in [0, 1)."""
        self.call_count += 1
        self.state = (self.state * LCG_MULT + LCG_INC) & LCG_MASK
        return self.state * LCG_SCALE

    def __call__(self) -> float:
        return self.random()

    def choice(self, seq):
        """Choose a random element from a non-empty sequence."""
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        return seq[int(self.random() * len(seq))]


def hash_seed(seed: int, label: str) -> int:
    """
    Fold a string label into a seed.

    Characters are accumulated in order with 32-bit wraparound
    (``h = h * 31 + ord(c)``), so "ab" and "ba" give different seeds.

    Returns:
        Positive integer seed, never 0
    """
    h = _int32(int(seed))
    for char in label:
        h = _int32((h << 5) - h + ord(char))
    return abs(h) or 1
