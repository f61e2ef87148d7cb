"""
Skewness estimator, built on the running variance.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Dict

from iterstats.base import Estimator, register_estimator
from iterstats.estimators.variance import Variance

logger = logging.getLogger(__name__)


@register_estimator
class Skewness(Estimator):
    """
    Running mean, variance and skewness.

    Adds the sum of cubed deviations, ``M3``, to the state of Variance.
    ``M3`` is updated before ``M2`` and the mean, since its recurrence uses
    their previous values.

    Statistics:
        - skewness: population skewness ``sqrt(n) * M3 / M2^1.5``; NaN when
          empty or when all observations are equal
        - mean, variance, sample_variance, error: as for Variance
    """
    estimator_id = "skewness"
    statistics = ("skewness", "mean", "variance", "sample_variance", "error")

    def __init__(self) -> None:
        self._avg = Variance()
        self._sum_3 = 0.0

    def _increment(self) -> None:
        self._avg._increment()

    def _add_inner(self, delta_n: float) -> None:
        n = len(self._avg)
        term = delta_n * delta_n * delta_n * n * (n - 1) * (n - 2)
        self._sum_3 += term - 3.0 * delta_n * self._avg._sum_2
        self._avg._add_inner(delta_n)

    def add(self, x: float) -> None:
        self._increment()
        self._add_inner((x - self._avg._avg._avg) / len(self._avg))

    def merge(self, other: Skewness) -> None:
        self._check_mergeable(other)
        if other.is_empty():
            return
        if self.is_empty():
            self._sum_3 = other._sum_3
        else:
            n_a, n_b = len(self), len(other)
            n = n_a + n_b
            delta = other._avg._avg._avg - self._avg._avg._avg
            sum_2_a, sum_2_b = self._avg._sum_2, other._avg._sum_2
            self._sum_3 += (
                other._sum_3
                + delta ** 3 * n_a * n_b * (n_a - n_b) / (n * n)
                + 3.0 * delta * (n_a * sum_2_b - n_b * sum_2_a) / n
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
        denominator = self._avg._sum_2 ** 1.5
        if self.is_empty() or denominator == 0.0:
            return float('nan')
        return math.sqrt(len(self)) * self._sum_3 / denominator

    def to_dict(self) -> Dict[str, Any]:
        data = self._avg.to_dict()
        data['sum_3'] = self._sum_3
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Skewness:
        estimator = cls()
        estimator._avg = Variance.from_dict(data)
        estimator._sum_3 = float(data['sum_3'])
        return estimator
