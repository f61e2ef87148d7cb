"""
Tests for the Mean -> Variance -> Skewness -> Kurtosis chain.
"""
from __future__ import annotations

import math

import numpy as np
import pytest

from iterstats.estimators.mean import Mean
from iterstats.estimators.variance import Variance
from iterstats.estimators.skewness import Skewness
from iterstats.estimators.kurtosis import Kurtosis


SCENARIO = [1.0, 2.0, 3.0, 4.0, 5.0]


def reference_moments(values):
    """Two-pass mean and central moments of a stored sample."""
    x = np.asarray(values, dtype=np.float64)
    mean = x.mean()
    m2 = np.mean((x - mean) ** 2)
    m3 = np.mean((x - mean) ** 3)
    m4 = np.mean((x - mean) ** 4)
    return mean, m2, m3 / m2 ** 1.5, m4 / m2 ** 2 - 3.0


@pytest.fixture
def random_values():
    """A reproducible, skewed stream of values."""
    rng = np.random.default_rng(7)
    return rng.gamma(shape=2.0, scale=3.0, size=2000).tolist()


class TestMean:
    """Tests for Mean estimator."""

    def test_scenario(self):
        """Test mean of the five-value scenario."""
        mean = Mean.from_iter(SCENARIO)

        assert mean.mean() == 3.0
        assert len(mean) == 5
        assert mean.count == 5

    def test_empty_is_nan(self):
        """Test that an empty mean is undefined."""
        mean = Mean()

        assert mean.is_empty()
        assert math.isnan(mean.mean())

    def test_single_observation(self):
        """Test mean of a single observation."""
        assert Mean.from_iter([4.2]).mean() == 4.2

    def test_matches_naive(self, random_values):
        """Test running mean against sum/count."""
        mean = Mean.from_iter(random_values)

        assert mean.mean() == pytest.approx(sum(random_values) / len(random_values), rel=1e-9)

    def test_merge(self):
        """Test merging two partial means."""
        a = Mean.from_iter([1.0, 2.0])
        b = Mean.from_iter([3.0, 4.0, 5.0])

        a.merge(b)

        assert a.mean() == pytest.approx(3.0, abs=1e-12)
        assert len(a) == 5

    def test_nan_propagates(self):
        """Test that a NaN observation poisons the mean."""
        mean = Mean.from_iter([1.0, float('nan'), 3.0])

        assert math.isnan(mean.mean())


class TestVariance:
    """Tests for Variance estimator."""

    def test_scenario(self):
        """Test variance of the five-value scenario."""
        variance = Variance.from_iter(SCENARIO)

        assert variance.mean() == pytest.approx(3.0, abs=1e-12)
        assert variance.variance() == pytest.approx(2.0, abs=1e-12)
        assert variance.population_variance() == pytest.approx(2.0, abs=1e-12)
        assert variance.sample_variance() == pytest.approx(2.5, abs=1e-12)
        assert variance.error() == pytest.approx(math.sqrt(0.5), abs=1e-12)

    def test_scenario_partitioned(self):
        """Test that a partitioned scenario merges to the single-pass result."""
        whole = Variance.from_iter(SCENARIO)
        a = Variance.from_iter([1.0, 2.0])
        b = Variance.from_iter([3.0, 4.0, 5.0])

        a.merge(b)

        assert a.mean() == pytest.approx(whole.mean(), abs=1e-12)
        assert a.variance() == pytest.approx(whole.variance(), abs=1e-12)
        assert len(a) == 5

    def test_empty(self):
        """Test that every statistic of an empty variance is NaN."""
        variance = Variance()

        assert math.isnan(variance.mean())
        assert math.isnan(variance.variance())
        assert math.isnan(variance.sample_variance())
        assert math.isnan(variance.error())

    def test_single_observation(self):
        """Test that one observation has zero population variance and no sample variance."""
        variance = Variance.from_iter([7.0])

        assert variance.mean() == 7.0
        assert variance.variance() == 0.0
        assert math.isnan(variance.sample_variance())
        assert math.isnan(variance.error())

    def test_constant_stream(self):
        """Test that a constant stream has zero variance."""
        variance = Variance.from_iter([3.5] * 100)

        assert variance.variance() == 0.0
        assert variance.sample_variance() == 0.0

    def test_matches_naive(self, random_values):
        """Test running variance against the two-pass computation."""
        variance = Variance.from_iter(random_values)
        mean, m2, _, _ = reference_moments(random_values)

        assert variance.mean() == pytest.approx(mean, rel=1e-9)
        assert variance.variance() == pytest.approx(m2, rel=1e-9)
        assert variance.sample_variance() == pytest.approx(np.var(random_values, ddof=1), rel=1e-9)

    def test_large_offset(self):
        """Test that a large common offset does not destroy the variance."""
        values = [1e9 + 4.0, 1e9 + 7.0, 1e9 + 13.0, 1e9 + 16.0]
        variance = Variance.from_iter(values)

        assert variance.mean() == pytest.approx(1e9 + 10.0, rel=1e-15)
        assert variance.variance() == pytest.approx(22.5, rel=1e-9)
        assert variance.sample_variance() == pytest.approx(30.0, rel=1e-9)

    def test_merge_with_empty_is_identity(self, random_values):
        """Test merging with an empty estimator, on either side."""
        full = Variance.from_iter(random_values)

        left = full.copy()
        left.merge(Variance())
        right = Variance()
        right.merge(full)

        for merged in (left, right):
            assert len(merged) == len(full)
            assert merged.mean() == full.mean()
            assert merged.variance() == full.variance()

    def test_merge_type_mismatch(self):
        """Test that merging a different estimator kind is rejected."""
        with pytest.raises(TypeError):
            Variance.from_iter(SCENARIO).merge(Mean.from_iter(SCENARIO))


class TestSkewness:
    """Tests for Skewness estimator."""

    def test_symmetric_scenario(self):
        """Test that a symmetric sample has zero skewness."""
        skewness = Skewness.from_iter(SCENARIO)

        assert skewness.skewness() == pytest.approx(0.0, abs=1e-12)
        assert skewness.variance() == pytest.approx(2.0, abs=1e-12)

    def test_matches_naive(self, random_values):
        """Test running skewness against the two-pass computation."""
        skewness = Skewness.from_iter(random_values)
        _, _, skew, _ = reference_moments(random_values)

        assert skewness.skewness() == pytest.approx(skew, rel=1e-9)

    def test_undefined_without_spread(self):
        """Test that skewness is NaN when empty, for one value and for constant streams."""
        assert math.isnan(Skewness().skewness())
        assert math.isnan(Skewness.from_iter([1.0]).skewness())
        assert math.isnan(Skewness.from_iter([2.0, 2.0, 2.0]).skewness())

    def test_merge(self, random_values):
        """Test that merged skewness matches single-pass skewness."""
        whole = Skewness.from_iter(random_values)
        a = Skewness.from_iter(random_values[:300])
        b = Skewness.from_iter(random_values[300:])

        a.merge(b)

        assert a.skewness() == pytest.approx(whole.skewness(), rel=1e-9)
        assert a.mean() == pytest.approx(whole.mean(), rel=1e-12)


class TestKurtosis:
    """Tests for Kurtosis estimator."""

    def test_scenario(self):
        """Test excess kurtosis of the five-value scenario."""
        kurtosis = Kurtosis.from_iter(SCENARIO)

        assert kurtosis.kurtosis() == pytest.approx(-1.3, abs=1e-12)
        assert kurtosis.skewness() == pytest.approx(0.0, abs=1e-12)
        assert kurtosis.mean() == pytest.approx(3.0, abs=1e-12)

    def test_matches_naive(self, random_values):
        """Test running kurtosis against the two-pass computation."""
        kurtosis = Kurtosis.from_iter(random_values)
        mean, m2, skew, kurt = reference_moments(random_values)

        assert kurtosis.mean() == pytest.approx(mean, rel=1e-9)
        assert kurtosis.variance() == pytest.approx(m2, rel=1e-9)
        assert kurtosis.skewness() == pytest.approx(skew, rel=1e-9)
        assert kurtosis.kurtosis() == pytest.approx(kurt, rel=1e-9)

    def test_undefined_without_spread(self):
        """Test that kurtosis is NaN without spread."""
        assert math.isnan(Kurtosis().kurtosis())
        assert math.isnan(Kurtosis.from_iter([1.0]).kurtosis())

    @pytest.mark.parametrize("split", [1, 2, 500, 1999])
    def test_merge_any_partition(self, random_values, split):
        """Test that every partition boundary merges to the single-pass result."""
        whole = Kurtosis.from_iter(random_values)
        a = Kurtosis.from_iter(random_values[:split])
        b = Kurtosis.from_iter(random_values[split:])

        a.merge(b)

        assert len(a) == len(whole)
        assert a.mean() == pytest.approx(whole.mean(), rel=1e-12)
        assert a.variance() == pytest.approx(whole.variance(), rel=1e-9)
        assert a.skewness() == pytest.approx(whole.skewness(), rel=1e-9)
        assert a.kurtosis() == pytest.approx(whole.kurtosis(), rel=1e-9)

    def test_merge_commutative_and_associative(self, random_values):
        """Test merge order independence over three partitions."""
        parts = [random_values[:400], random_values[400:1100], random_values[1100:]]
        a, b, c = (Kurtosis.from_iter(part) for part in parts)

        ab_c = (a + b) + c
        a_bc = a + (b + c)
        cb_a = (c + b) + a

        for merged in (a_bc, cb_a):
            assert merged.mean() == pytest.approx(ab_c.mean(), rel=1e-12)
            assert merged.variance() == pytest.approx(ab_c.variance(), rel=1e-9)
            assert merged.skewness() == pytest.approx(ab_c.skewness(), rel=1e-9)
            assert merged.kurtosis() == pytest.approx(ab_c.kurtosis(), rel=1e-9)

    def test_add_operator_leaves_operands(self):
        """Test that + builds a new estimator without touching the operands."""
        a = Kurtosis.from_iter([1.0, 2.0])
        b = Kurtosis.from_iter([3.0, 4.0, 5.0])

        merged = a + b

        assert len(a) == 2
        assert len(b) == 3
        assert len(merged) == 5

    def test_dict_round_trip(self, random_values):
        """Test exporting and rebuilding the estimator state."""
        kurtosis = Kurtosis.from_iter(random_values)

        restored = Kurtosis.from_dict(kurtosis.to_dict())

        assert restored.summary() == kurtosis.summary()
        assert len(restored) == len(kurtosis)

    def test_summary(self):
        """Test that summary reports every statistic."""
        summary = Kurtosis.from_iter(SCENARIO).summary()

        assert set(summary) == {"kurtosis", "mean", "variance", "sample_variance", "error", "skewness"}
        assert summary["variance"] == pytest.approx(2.0)
