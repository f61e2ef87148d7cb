"""
Weighted mean estimators.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Dict

from iterstats.base import Estimator, register_estimator

logger = logging.getLogger(__name__)


@register_estimator
class WeightedMean(Estimator):
    """
    Running weighted arithmetic mean.

    Observations added without a weight count with weight 1, so a
    WeightedMean can sit in a composite next to unweighted estimators.
    Observations with weight 0 are counted but do not move the mean.

    Statistics:
        - weighted_mean: NaN when empty or when the weights sum to zero
        - sum_weights: total weight seen
    """
    estimator_id = "weighted_mean"
    statistics = ("weighted_mean", "sum_weights")

    def __init__(self) -> None:
        self._n = 0
        self._weight_sum = 0.0
        self._avg = 0.0

    def add(self, x: float, weight: float = 1.0) -> None:
        self._n += 1
        self._weight_sum += weight
        if self._weight_sum != 0.0:
            self._avg += (weight / self._weight_sum) * (x - self._avg)

    def merge(self, other: WeightedMean) -> None:
        self._check_mergeable(other)
        if other._n == 0:
            return
        if self._n == 0:
            self._n = other._n
            self._weight_sum = other._weight_sum
            self._avg = other._avg
            return
        total = self._weight_sum + other._weight_sum
        if total != 0.0:
            self._avg += (other._weight_sum / total) * (other._avg - self._avg)
        self._weight_sum = total
        self._n += other._n

    def __len__(self) -> int:
        return self._n

    def sum_weights(self) -> float:
        """Sum of the weights of all observations."""
        return self._weight_sum

    def weighted_mean(self) -> float:
        """Estimate of the weighted mean of the population."""
        if self._n == 0 or self._weight_sum == 0.0:
            return float('nan')
        return self._avg

    def to_dict(self) -> Dict[str, Any]:
        return {'count': self._n, 'sum_weights': self._weight_sum, 'weighted_mean': self._avg}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> WeightedMean:
        estimator = cls()
        estimator._n = int(data['count'])
        estimator._weight_sum = float(data['sum_weights'])
        estimator._avg = float(data['weighted_mean'])
        return estimator


@register_estimator
class WeightedMeanWithError(Estimator):
    """
    Running weighted mean with its variance and standard error.

    Keeps the weighted sum of squared deviations (West's algorithm), merged
    with the weighted form of the Chan, Golub and LeVeque formula. Weights
    are treated as reliability weights.

    Statistics:
        - weighted_mean: NaN when the weights sum to zero
        - sum_weights, sum_weights_sq: totals of the weights and their squares
        - effective_len: Kish's effective sample size
        - population_variance: weighted variance normalized by the total weight
        - sample_variance: unbiased for reliability weights
        - error: standard error of the weighted mean

    References:
        - West, D. H. D. (1979). Updating mean and variance estimates: an
          improved method. Communications of the ACM, 22(9), 532-535.
    """
    estimator_id = "weighted_mean_with_error"
    statistics = (
        "weighted_mean", "sum_weights", "sum_weights_sq", "effective_len",
        "population_variance", "sample_variance", "error",
    )

    def __init__(self) -> None:
        self._avg = WeightedMean()
        self._weight_sum_sq = 0.0
        self._sum_2 = 0.0

    def add(self, x: float, weight: float = 1.0) -> None:
        delta = x - self._avg._avg
        self._avg.add(x, weight)
        self._weight_sum_sq += weight * weight
        self._sum_2 += weight * delta * (x - self._avg._avg)

    def merge(self, other: WeightedMeanWithError) -> None:
        self._check_mergeable(other)
        if other.is_empty():
            return
        if self.is_empty():
            self._sum_2 = other._sum_2
        else:
            w_a, w_b = self._avg._weight_sum, other._avg._weight_sum
            total = w_a + w_b
            self._sum_2 += other._sum_2
            if total != 0.0:
                delta = other._avg._avg - self._avg._avg
                self._sum_2 += delta * delta * w_a * w_b / total
        self._weight_sum_sq += other._weight_sum_sq
        self._avg.merge(other._avg)

    def __len__(self) -> int:
        return len(self._avg)

    def weighted_mean(self) -> float:
        """Estimate of the weighted mean of the population."""
        return self._avg.weighted_mean()

    def sum_weights(self) -> float:
        """Sum of the weights of all observations."""
        return self._avg.sum_weights()

    def sum_weights_sq(self) -> float:
        """Sum of the squared weights of all observations."""
        return self._weight_sum_sq

    def effective_len(self) -> float:
        """Kish's effective sample size, ``sum_w^2 / sum_w_sq``."""
        if self._weight_sum_sq == 0.0:
            return float('nan')
        return self.sum_weights() ** 2 / self._weight_sum_sq

    def population_variance(self) -> float:
        """Weighted variance normalized by the sum of the weights."""
        weight_sum = self.sum_weights()
        if self.is_empty() or weight_sum == 0.0:
            return float('nan')
        return self._sum_2 / weight_sum

    def sample_variance(self) -> float:
        """Weighted variance, unbiased for reliability weights."""
        weight_sum = self.sum_weights()
        if len(self) < 2 or weight_sum == 0.0:
            return float('nan')
        denominator = weight_sum - self._weight_sum_sq / weight_sum
        if denominator == 0.0:
            return float('nan')
        return self._sum_2 / denominator

    def variance_of_weighted_mean(self) -> float:
        """Estimate of the variance of the weighted mean."""
        weight_sum = self.sum_weights()
        if len(self) < 2 or weight_sum == 0.0:
            return float('nan')
        return self.sample_variance() * self._weight_sum_sq / (weight_sum * weight_sum)

    def error(self) -> float:
        """Standard error of the weighted mean."""
        return math.sqrt(self.variance_of_weighted_mean())

    def to_dict(self) -> Dict[str, Any]:
        data = self._avg.to_dict()
        data['sum_weights_sq'] = self._weight_sum_sq
        data['sum_2'] = self._sum_2
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> WeightedMeanWithError:
        estimator = cls()
        estimator._avg = WeightedMean.from_dict(data)
        estimator._weight_sum_sq = float(data['sum_weights_sq'])
        estimator._sum_2 = float(data['sum_2'])
        return estimator
