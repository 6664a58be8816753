"""
interpolation.py

Fill gaps in a growth vector from the entity's average deviation.

A filing that is missing some facts is assumed to have deviated from the
industry mean by the same number of standard deviations, on average, as it
did for the facts it did report. That average deviation is also kept as an
extra leading feature.
"""

import math
from typing import List, Optional, Sequence

from ..exceptions import DimensionMismatchError
from .statistic import RobustStatistic


class Interpolator:
    """Dense vectors from sparse growth vectors and column statistics."""

    def __init__(self, statistics: Sequence[RobustStatistic]):
        if not statistics:
            raise ValueError("Interpolator requires at least one column statistic")
        self.statistics = list(statistics)

    def __len__(self) -> int:
        return len(self.statistics)

    def average_deviation(self, vector: Sequence[Optional[float]]) -> float:
        """Mean normalized deviation across columns; gaps count as the mean."""
        self._check(vector)

        total = 0.0
        for value, stat in zip(vector, self.statistics):
            norm = stat.normalize(stat.mean if value is None else value)
            if not math.isnan(norm):
                total += norm
        return total / len(self.statistics)

    def interpolate(self, vector: Sequence[Optional[float]]) -> List[float]:
        """
        Returns:
            [avg, v_1, ..., v_n] where avg is the average deviation and each
            missing v_i is the value `avg` standard deviations from column i's
            mean. Present values pass through unchanged.
        """
        avg = self.average_deviation(vector)

        dense = [avg]
        for value, stat in zip(vector, self.statistics):
            dense.append(stat.denormalize(avg) if value is None else value)
        return dense

    def _check(self, vector: Sequence[Optional[float]]):
        if len(vector) != len(self.statistics):
            raise DimensionMismatchError(len(self.statistics), len(vector), "growth vector")
