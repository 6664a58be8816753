"""
statistic.py

Outlier-trimmed summary statistics for noisy financial ratios.

Growth rates computed from filings are heavy-tailed: a single restatement or
a near-zero prior value can produce growth of 50x. The statistic removes
values outside a widened Tukey fence before computing moments.
"""

import math
from typing import Iterable, Optional

import numpy as np

from ..exceptions import InsufficientSampleError


DEFAULT_TRIM_FACTOR = 1.8
STDEV_FLOOR = 1e-9


class RobustStatistic:
    """
    Trimmed mean / standard deviation of a sample.

    Values outside [Q1 - k*IQR, Q3 + k*IQR] are discarded, with quartiles taken
    at indices floor(n/4) and floor(3n/4) of the sorted sample. Moments are
    computed over the retained values only.

    Attributes:
        mean: Mean of the retained values
        stdev: Sample (ddof=1) standard deviation, never exactly zero
        n: Number of retained values
        skewness: Sample skewness of the retained values
        kurtosis: Kurtosis (not excess) of the retained values
        margin_of_error: 95% margin of error of the mean
    """

    def __init__(
        self,
        values: Iterable[float],
        trim_factor: float = DEFAULT_TRIM_FACTOR,
        name: Optional[str] = None
    ):
        self.name = name
        raw = np.asarray(list(values), dtype=float)

        if raw.size == 0:
            raise InsufficientSampleError(0, name)

        ordered = np.sort(raw)
        q1 = ordered[int(ordered.size / 4)]
        q3 = ordered[int(3 * ordered.size / 4)]
        iqr = q3 - q1

        lower = q1 - trim_factor * iqr
        upper = q3 + trim_factor * iqr
        sample = raw[(raw >= lower) & (raw <= upper)]

        self.n = int(sample.size)
        if self.n <= 1:
            raise InsufficientSampleError(self.n, name)

        self.q1 = float(q1)
        self.q3 = float(q3)
        self.retained = np.sort(sample)
        self.mean = float(np.mean(sample))

        stdev = float(np.std(sample, ddof=1))
        self.stdev = stdev if stdev > 0 else STDEV_FLOOR

        # Bias correction n/(n-1) on the third moment, as for the variance.
        bias = self.n / (self.n - 1)
        deviations = sample - self.mean
        self.skewness = float(np.mean(deviations ** 3) * bias / self.stdev ** 3)
        self.kurtosis = float(np.mean(deviations ** 4) / self.stdev ** 4)
        self.margin_of_error = 1.96 * self.stdev / math.sqrt(self.n)

    def normalize(self, value: float) -> float:
        """Number of standard deviations `value` lies from the mean."""
        return (value - self.mean) / self.stdev

    def denormalize(self, norm: float) -> float:
        """Raw value lying `norm` standard deviations from the mean."""
        return norm * self.stdev + self.mean

    def __repr__(self) -> str:
        label = f"{self.name}: " if self.name else ""
        return f"RobustStatistic({label}mean={self.mean:.6g}, stdev={self.stdev:.6g}, n={self.n})"
