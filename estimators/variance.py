"""
Variance estimator, built on the running mean.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Dict

from iterstats.base import Estimator, register_estimator
from iterstats.estimators.mean import Mean

logger = logging.getLogger(__name__)


@register_estimator
class Variance(Estimator):
    """
    Running mean and variance (Welford's algorithm).

    Keeps the sum of squared deviations from the current mean, ``M2``, and
    never the raw sum of squares, so the variance does not suffer from the
    cancellation of ``E[x^2] - E[x]^2``. Two estimators are combined with
    the pairwise formula of Chan, Golub and LeVeque.

    Statistics:
        - mean: NaN when empty
        - variance: population variance ``M2 / n``; NaN when empty, 0.0
          for a single observation
        - sample_variance: ``M2 / (n - 1)``; NaN for fewer than 2
          observations
        - error: standard error of the mean; NaN for fewer than 2
          observations

    References:
        - Welford, B. P. (1962). Note on a method for calculating corrected
          sums of squares and products. Technometrics, 4(3), 419-420.
        - Chan, T. F., Golub, G. H., LeVeque, R. J. (1979). Updating
          formulae and a pairwise algorithm for computing sample variances.
    """
    estimator_id = "variance"
    statistics = ("variance", "mean", "sample_variance", "error")

    def __init__(self) -> None:
        self._avg = Mean()
        self._sum_2 = 0.0

    def _increment(self) -> None:
        self._avg._increment()

    def _add_inner(self, delta_n: float) -> None:
        n = self._avg._n
        self._avg._add_inner(delta_n)
        self._sum_2 += delta_n * delta_n * n * (n - 1)

    def add(self, x: float) -> None:
        self._increment()
        self._add_inner((x - self._avg._avg) / self._avg._n)

    def merge(self, other: Variance) -> None:
        self._check_mergeable(other)
        if other.is_empty():
            return
        if self.is_empty():
            self._sum_2 = other._sum_2
        else:
            n_a, n_b = len(self), len(other)
            delta = other._avg._avg - self._avg._avg
            self._sum_2 += other._sum_2 + delta * delta * n_a * n_b / (n_a + n_b)
        self._avg.merge(other._avg)

    def __len__(self) -> int:
        return len(self._avg)

    def mean(self) -> float:
        """Estimate of the mean of the population."""
        return self._avg.mean()

    def sum_squared_deviations(self) -> float:
        """Sum of squared deviations from the mean, ``M2``."""
        return self._sum_2

    def population_variance(self) -> float:
        """Population variance, normalized by ``n``."""
        n = len(self)
        if n == 0:
            return float('nan')
        return self._sum_2 / n

    def variance(self) -> float:
        """Population variance, normalized by ``n``. Same as population_variance()."""
        return self.population_variance()

    def sample_variance(self) -> float:
        """Unbiased sample variance, normalized by ``n - 1``."""
        n = len(self)
        if n < 2:
            return float('nan')
        return self._sum_2 / (n - 1)

    def std(self) -> float:
        """Population standard deviation."""
        return math.sqrt(self.population_variance())

    def variance_of_mean(self) -> float:
        """Estimate of the variance of the mean."""
        n = len(self)
        if n < 2:
            return float('nan')
        return self.sample_variance() / n

    def error(self) -> float:
        """Standard error of the mean."""
        return math.sqrt(self.variance_of_mean())

    def to_dict(self) -> Dict[str, Any]:
        data = self._avg.to_dict()
        data['sum_2'] = self._sum_2
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Variance:
        estimator = cls()
        estimator._avg = Mean.from_dict(data)
        estimator._sum_2 = float(data['sum_2'])
        return estimator
