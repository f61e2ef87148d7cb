"""
Tests for the P-square Quantile estimator.
"""
from __future__ import annotations

import math

import numpy as np
import pytest

from iterstats.estimators.quantile import Quantile


@pytest.fixture
def uniform_values():
    rng = np.random.default_rng(5)
    return rng.uniform(0.0, 1.0, size=10000).tolist()


class TestQuantile:
    """Tests for Quantile estimator."""

    def test_invalid_probability(self):
        """Test that p outside [0, 1] is rejected at construction."""
        with pytest.raises(ValueError):
            Quantile(1.5)
        with pytest.raises(ValueError):
            Quantile(-0.1)

    def test_empty_is_nan(self):
        """Test that an empty quantile is undefined."""
        assert math.isnan(Quantile(0.5).quantile())

    def test_small_samples_are_exact(self):
        """Test exact interpolation while fewer than six values were seen."""
        assert Quantile.from_iter([3.0, 1.0, 2.0], 0.5).quantile() == 2.0
        assert Quantile.from_iter([7.0], 0.9).quantile() == 7.0
        assert Quantile.from_iter([5.0, 4.0, 3.0, 2.0, 1.0], 0.25).quantile() == 2.0
        assert Quantile.from_iter([1.0, 2.0], 0.5).quantile() == 1.5

    @pytest.mark.parametrize("p", [0.1, 0.5, 0.9])
    def test_uniform_stream(self, uniform_values, p):
        """Test the estimate on a large uniform stream."""
        quantile = Quantile.from_iter(uniform_values, p)

        assert quantile.quantile() == pytest.approx(p, abs=0.02)
        assert quantile.p() == p
        assert len(quantile) == len(uniform_values)

    def test_extremes_are_exact(self, uniform_values):
        """Test that p=0 and p=1 report the exact minimum and maximum."""
        assert Quantile.from_iter(uniform_values, 0.0).quantile() == min(uniform_values)
        assert Quantile.from_iter(uniform_values, 1.0).quantile() == max(uniform_values)

    def test_sorted_stream(self):
        """Test the estimate on a monotonically increasing stream."""
        quantile = Quantile.from_iter(range(1, 1002), 0.5)

        assert quantile.quantile() == pytest.approx(501.0, rel=0.01)

    def test_merge_small_other_replays(self):
        """Test that a merge with fewer than five values equals adding them."""
        merged = Quantile.from_iter(range(20), 0.5)
        merged.merge(Quantile.from_iter([100.0, 101.0], 0.5))
        direct = Quantile.from_iter(list(range(20)) + [100.0, 101.0], 0.5)

        assert merged.to_dict() == direct.to_dict()

    def test_merge_small_self_replays(self):
        """Test merging a large estimator into a small one."""
        small = Quantile.from_iter([100.0, 101.0], 0.5)
        small.merge(Quantile.from_iter(range(20), 0.5))

        assert len(small) == 22
        assert small.to_dict() == Quantile.from_iter(list(range(20)) + [100.0, 101.0], 0.5).to_dict()

    def test_merge_large_partitions(self, uniform_values):
        """Test the approximate merge of two large estimators."""
        a = Quantile.from_iter(uniform_values[:4000], 0.5)
        b = Quantile.from_iter(uniform_values[4000:], 0.5)

        merged = a + b

        assert len(merged) == len(uniform_values)
        assert merged.quantile() == pytest.approx(0.5, abs=0.03)
        assert merged.to_dict()['heights'][0] == min(uniform_values)
        assert merged.to_dict()['heights'][4] == max(uniform_values)

    def test_merge_commutative(self, uniform_values):
        """Test that the approximate merge does not depend on operand order."""
        a = Quantile.from_iter(uniform_values[:3000], 0.9)
        b = Quantile.from_iter(uniform_values[3000:], 0.9)

        assert (a + b).quantile() == pytest.approx((b + a).quantile())

    def test_merged_estimator_keeps_updating(self, uniform_values):
        """Test that a merged estimator still accepts observations."""
        merged = Quantile.from_iter(uniform_values[:5000], 0.5) + Quantile.from_iter(uniform_values[5000:9000], 0.5)
        merged.extend(uniform_values[9000:])

        assert len(merged) == len(uniform_values)
        assert merged.quantile() == pytest.approx(0.5, abs=0.03)

    def test_merge_with_empty_is_identity(self, uniform_values):
        """Test merging with an empty estimator on either side."""
        full = Quantile.from_iter(uniform_values[:100], 0.5)

        assert (full + Quantile(0.5)).to_dict() == full.to_dict()
        assert (Quantile(0.5) + full).to_dict() == full.to_dict()

    def test_merge_probability_mismatch(self):
        """Test that quantiles for different p cannot be merged."""
        with pytest.raises(ValueError):
            Quantile(0.5).merge(Quantile(0.9))

    def test_merge_small_operands_commutative(self):
        """Test that merging two small estimators does not depend on operand order."""
        a = Quantile.from_iter([10.0, 1.0, 7.0, 3.0], 0.5)
        b = Quantile.from_iter([2.0, 9.0, 4.0, 8.0], 0.5)

        assert (a + b).to_dict() == (b + a).to_dict()
        assert (a + b).quantile() == (b + a).quantile()
        assert len(a + b) == 8

    def test_merge_small_operands_stay_exact(self):
        """Test that up to five merged values are still interpolated exactly."""
        a = Quantile.from_iter([3.0, 1.0], 0.5)
        b = Quantile.from_iter([2.0], 0.5)

        assert (a + b).quantile() == (b + a).quantile() == 2.0
        assert (a + b).to_dict() == (b + a).to_dict()

    def test_merge_mixed_sizes_commutative(self, uniform_values):
        """Test that a small and a large estimator merge the same either way."""
        large = Quantile.from_iter(uniform_values[:100], 0.5)
        small = Quantile.from_iter([0.9, 0.1, 0.5], 0.5)

        assert (large + small).to_dict() == (small + large).to_dict()

    def test_failed_merge_leaves_state(self):
        """Test that a rejected merge does not change the receiver."""
        quantile = Quantile.from_iter([1.0, 2.0, 3.0], 0.5)
        before = quantile.to_dict()

        with pytest.raises(ValueError):
            quantile.merge(Quantile.from_iter([100.0], 0.9))

        assert quantile.to_dict() == before

    def test_dict_round_trip(self, uniform_values):
        """Test exporting and rebuilding the estimator state."""
        quantile = Quantile.from_iter(uniform_values[:50], 0.75)

        restored = Quantile.from_dict(quantile.to_dict())

        assert restored.quantile() == quantile.quantile()
        restored.add(0.5)
        quantile.add(0.5)
        assert restored.quantile() == quantile.quantile()
