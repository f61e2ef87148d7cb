"""
Kurtosis estimator, built on the running skewness.
"""
from __future__ import annotations

import logging
from typing import Any, Dict

from iterstats.base import Estimator, register_estimator
from iterstats.estimators.skewness import Skewness

logger = logging.getLogger(__name__)


@register_estimator
class Kurtosis(Estimator):
    """
    Running mean, variance, skewness and excess kurtosis.

    Adds the sum of fourth powers of deviations, ``M4``, to the state of
    Skewness. Kurtosis is reported as excess kurtosis, so a normal
    distribution gives 0.

    Statistics:
        - kurtosis: excess kurtosis ``n * M4 / M2^2 - 3``; NaN when empty
          or when all observations are equal
        - mean, variance, sample_variance, error, skewness: as for Skewness

    References:
        - Pébay, P. (2008). Formulas for robust, one-pass parallel
          computation of covariances and arbitrary-order statistical
          moments. Sandia Report SAND2008-6212.
    """
    estimator_id = "kurtosis"
    statistics = ("kurtosis", "mean", "variance", "sample_variance", "error", "skewness")

    def __init__(self) -> None:
        self._avg = Skewness()
        self._sum_4 = 0.0

    def _increment(self) -> None:
        self._avg._increment()

    def _add_inner(self, delta_n: float) -> None:
        n = len(self._avg)
        delta_n_sq = delta_n * delta_n
        sum_2 = self._avg._avg._sum_2
        sum_3 = self._avg._sum_3
        self._sum_4 += (
            delta_n_sq * delta_n_sq * n * (n - 1) * (n * n - 3 * n + 3)
            + 6.0 * delta_n_sq * sum_2
            - 4.0 * delta_n * sum_3
        )
        self._avg._add_inner(delta_n)

    def add(self, x: float) -> None:
        self._increment()
        self._add_inner((x - self._avg._avg._avg._avg) / len(self._avg))

    def merge(self, other: Kurtosis) -> None:
        self._check_mergeable(other)
        if other.is_empty():
            return
        if self.is_empty():
            self._sum_4 = other._sum_4
        else:
            n_a, n_b = len(self), len(other)
            n = n_a + n_b
            delta = other._avg._avg._avg._avg - self._avg._avg._avg._avg
            delta_sq = delta * delta
            sum_2_a, sum_2_b = self._avg._avg._sum_2, other._avg._avg._sum_2
            sum_3_a, sum_3_b = self._avg._sum_3, other._avg._sum_3
            self._sum_4 += (
                other._sum_4
                + delta_sq * delta_sq * n_a * n_b * (n_a * n_a - n_a * n_b + n_b * n_b) / (n * n * n)
                + 6.0 * delta_sq * (n_a * n_a * sum_2_b + n_b * n_b * sum_2_a) / (n * n)
                + 4.0 * delta * (n_a * sum_3_b - n_b * sum_3_a) / n
            )
        self._avg.merge(other._avg)

    def __len__(self) -> int:
        return len(self._avg)

    def mean(self) -> float:
        """Estimate of the mean of the population."""
        return self._avg.mean()

    def variance(self) -> float:
        """Population variance, normalized by ``n``."""
        return self._avg.variance()

    def population_variance(self) -> float:
        """Population variance, normalized by ``n``."""
        return self._avg.population_variance()

    def sample_variance(self) -> float:
        """Unbiased sample variance, normalized by ``n - 1``."""
        return self._avg.sample_variance()

    def error(self) -> float:
        """Standard error of the mean."""
        return self._avg.error()

    def skewness(self) -> float:
        """Population skewness, NaN if the variance is zero."""
        return self._avg.skewness()

    def kurtosis(self) -> float:
        """Excess kurtosis, NaN if the variance is zero."""
        sum_2 = self._avg._avg._sum_2
        denominator = sum_2 * sum_2
        if self.is_empty() or denominator == 0.0:
            return float('nan')
        return len(self) * self._sum_4 / denominator - 3.0

    def to_dict(self) -> Dict[str, Any]:
        data = self._avg.to_dict()
        data['sum_4'] = self._sum_4
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Kurtosis:
        estimator = cls()
        estimator._avg = Skewness.from_dict(data)
        estimator._sum_4 = float(data['sum_4'])
        return estimator
