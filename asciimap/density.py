"""Density tiers: which glyph a cell count gets, and the legend that explains it.

The glyph alphabet reserves index 0 for empty cells; indices 1..levels are
tiers of increasing density. ``tier_ceiling`` is the only place tier
boundaries are defined. ``density_index`` and ``build_legend`` both derive
from it, so the legend always describes the glyphs actually drawn.
"""

from typing import List, Sequence, Tuple


def tier_ceiling(tier: int, max_count: int, levels: int) -> int:
    """Largest cell count that belongs to ``tier`` (1-based).

    Tier t covers the counts c where ceil(c * levels / max_count) == t, i.e.
    up to floor(t * max_count / levels). When max_count is below levels some
    tiers cover no count at all and are left out of the legend. A single-point
    maximum is the exception: it always lands in tier 1.
    """
    if max_count == 1:
        return tier
    return tier * max_count // levels


def density_index(count: int, max_count: int, levels: int) -> int:
    """Glyph index for a cell holding ``count`` points; 0 means empty."""
    if count <= 0:
        return 0
    if max_count <= 1:
        return 1
    # ceil(count * levels / max_count) in integer arithmetic
    index = -(-count * levels // max_count)
    return max(1, min(levels, index))


def density_char(count: int, max_count: int, density_chars: Sequence[str]) -> str:
    """Character representing a cell's density."""
    return density_chars[density_index(count, max_count, len(density_chars) - 1)]


def tier_ranges(max_count: int, levels: int) -> List[Tuple[int, int, int]]:
    """``(tier, low, high)`` for every non-empty tier, covering 1..max_count."""
    ranges = []
    if levels <= 0 or max_count <= 0:
        return ranges
    previous = 0
    for tier in range(1, levels + 1):
        high = min(tier_ceiling(tier, max_count, levels), max_count)
        if high > previous:
            ranges.append((tier, previous + 1, high))
            previous = high
    return ranges


def build_legend(max_count: int, density_chars: Sequence[str]) -> List[str]:
    """Legend entries, e.g. ``["' ': 0", "'.': 1-3", "'#': 4"]``."""
    entries = [f"'{density_chars[0]}': 0"]
    for tier, low, high in tier_ranges(max_count, len(density_chars) - 1):
        if low == high:
            entries.append(f"'{density_chars[tier]}': {low}")
        else:
            entries.append(f"'{density_chars[tier]}': {low}-{high}")
    return entries
