"""
growth.py

Growth vectors: per-quantity growth between the two most recent comparable
observations in a filing, restated onto a per-quarter basis.

    growth    = 1 + (v_new - v_old) / |v_old|         (v_old == 0 -> divisor 1)
    quarters  = round(days / days_per_year * 4)
    quarterly = growth                                 if quarters <= 1
              = sign(growth) * |growth| ** (1/quarters) otherwise

The signed fractional power keeps the direction of a negative growth factor
(e.g. a profit turning into a loss).
"""

import math
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..data.data_structures import Fact, FilingSnapshot


DAYS_PER_YEAR = 365.569

GrowthVector = List[Optional[float]]


def quarters_between(new: Fact, old: Fact, days_per_year: float = DAYS_PER_YEAR) -> int:
    """Whole quarters separating two observations."""
    days = (new.end_date - old.end_date).days
    return int(round(days / days_per_year * 4))


def growth_factor(new_value: float, old_value: float) -> float:
    """Relative change as a multiplicative factor."""
    divisor = abs(old_value) if old_value != 0 else 1.0
    return 1.0 + (new_value - old_value) / divisor


def quarterly_growth(growth: float, quarters: int) -> float:
    """Restate a growth factor spanning `quarters` onto a single quarter."""
    if quarters <= 1:
        return growth
    return float(np.sign(growth) * math.pow(abs(growth), 1.0 / quarters))


def find_comparable_pair(facts: Sequence[Fact]) -> Optional[Tuple[Fact, Fact]]:
    """
    Locate the most recent pair of comparable observations.

    Facts are scanned by descending end date, then descending duration. The
    first fact that has a later-scanned partner with the same duration and a
    strictly earlier end date wins; its first such partner is the prior value.

    Returns:
        (newer, older) or None if no comparable pair exists
    """
    if len(facts) < 2:
        return None

    ordered = sorted(facts, key=lambda f: (f.end_date, f.duration), reverse=True)
    for i, newer in enumerate(ordered):
        for older in ordered[i + 1:]:
            if older.duration == newer.duration and older.end_date < newer.end_date:
                return newer, older
    return None


class GrowthVectorBuilder:
    """Builds growth vectors for a fixed, ordered list of quantities."""

    def __init__(self, quantities: Sequence[str], days_per_year: float = DAYS_PER_YEAR):
        self.quantities = list(quantities)
        self.days_per_year = days_per_year

    def __len__(self) -> int:
        return len(self.quantities)

    def growth(self, facts: Sequence[Fact]) -> Optional[float]:
        """Quarterly growth from a quantity's facts, or None if undefined."""
        pair = find_comparable_pair(facts)
        if pair is None:
            return None

        newer, older = pair
        factor = growth_factor(newer.value, older.value)
        quarters = quarters_between(newer, older, self.days_per_year)
        value = quarterly_growth(factor, quarters)
        return value if math.isfinite(value) else None

    def build(self, filing: FilingSnapshot) -> GrowthVector:
        """One slot per quantity; None where growth cannot be computed."""
        return [self.growth(filing.facts_for(name)) for name in self.quantities]


def missing_fraction(vector: Sequence[Optional[float]]) -> float:
    """Share of empty slots in a growth vector."""
    if not vector:
        return 0.0
    return sum(1 for v in vector if v is None) / len(vector)
