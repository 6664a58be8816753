"""Unit tests for filing_forecast.forecast.statistic (RobustStatistic)."""

import math

import numpy as np
import pytest

from filing_forecast.exceptions import InsufficientSampleError
from filing_forecast.forecast.statistic import STDEV_FLOOR, RobustStatistic


class TestTrimming:

    def test_right_skewed_outlier_is_removed(self):
        stat = RobustStatistic([1, 2, 3, 4, 100])
        # Q1 = 2, Q3 = 4, IQR = 2 -> fence [-1.6, 7.6]
        assert stat.q1 == 2
        assert stat.q3 == 4
        assert stat.retained.tolist() == [1, 2, 3, 4]
        assert stat.n == 4
        assert stat.mean == pytest.approx(2.5)

    def test_stdev_is_sample_stdev_of_retained(self):
        stat = RobustStatistic([1, 2, 3, 4, 100])
        assert stat.stdev == pytest.approx(math.sqrt(5 / 3))

    def test_unsorted_input(self):
        stat = RobustStatistic([100, 3, 1, 4, 2])
        assert stat.retained.tolist() == [1, 2, 3, 4]

    def test_fence_is_wider_than_tukey(self):
        # Q1 = 10, Q3 = 20 -> 1.5x fence stops at 35, 1.8x at 38.
        values = [10, 10, 15, 20, 20, 37]
        assert 37 in RobustStatistic(values).retained.tolist()
        assert 37 not in RobustStatistic(values, trim_factor=1.5).retained.tolist()

    def test_two_values_are_enough(self):
        stat = RobustStatistic([1.0, 3.0])
        assert stat.n == 2
        assert stat.mean == pytest.approx(2.0)


class TestDegenerateSamples:

    def test_empty_sample_raises(self):
        with pytest.raises(InsufficientSampleError):
            RobustStatistic([])

    def test_single_value_raises(self):
        with pytest.raises(InsufficientSampleError) as excinfo:
            RobustStatistic([1.05], name="Revenues")
        assert excinfo.value.size == 1
        assert "Revenues" in str(excinfo.value)

    def test_is_a_value_error(self):
        with pytest.raises(ValueError):
            RobustStatistic([])

    def test_constant_sample_uses_stdev_floor(self):
        stat = RobustStatistic([1.0, 1.0, 1.0])
        assert stat.stdev == STDEV_FLOOR
        assert stat.normalize(1.0) == 0.0
        assert math.isfinite(stat.normalize(2.0))

    def test_outlier_against_constant_core(self):
        stat = RobustStatistic([5, 5, 5, 5, 1000])
        assert stat.n == 4
        assert stat.mean == 5
        assert stat.stdev == STDEV_FLOOR


class TestTransforms:

    @pytest.fixture
    def stat(self):
        rng = np.random.default_rng(3)
        return RobustStatistic(rng.normal(1.02, 0.05, size=200))

    def test_normalize(self):
        stat = RobustStatistic([1, 2, 3, 4, 100])
        assert stat.normalize(2.5) == 0.0
        assert stat.normalize(2.5 + stat.stdev) == pytest.approx(1.0)

    def test_denormalize(self):
        stat = RobustStatistic([1, 2, 3, 4, 100])
        assert stat.denormalize(0.0) == pytest.approx(2.5)
        assert stat.denormalize(-2.0) == pytest.approx(2.5 - 2 * stat.stdev)

    def test_round_trip_on_retained_values(self, stat):
        for x in stat.retained:
            assert stat.denormalize(stat.normalize(x)) == pytest.approx(x)


class TestDescriptiveMoments:

    def test_symmetric_sample_has_zero_skew(self):
        stat = RobustStatistic([1, 2, 3, 4, 5])
        assert stat.skewness == pytest.approx(0.0)

    def test_margin_of_error(self):
        stat = RobustStatistic([1, 2, 3, 4, 5])
        assert stat.margin_of_error == pytest.approx(1.96 * stat.stdev / math.sqrt(5))

    def test_kurtosis_positive(self):
        assert RobustStatistic([1, 2, 3, 4, 5]).kurtosis > 0
