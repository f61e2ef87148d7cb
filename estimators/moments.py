"""
Central moments of arbitrary order.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Dict, List

from iterstats.base import Estimator, register_estimator

logger = logging.getLogger(__name__)


@register_estimator
class Moments(Estimator):
    """
    Running central moments up to a fixed order.

    The state is the count, the mean and the sums of powered deviations
    ``M_p = sum((x_i - mean)^p)`` for ``p = 2..order``. Adding an
    observation is treated as merging with a one-sample set, so both paths
    use the same pairwise update:

        M_p = M_p,a + M_p,b
              + sum_{k=1}^{p-2} C(p, k) delta^k
                    [(-n_b/n)^k M_{p-k},a + (n_a/n)^k M_{p-k},b]
              + (n_a n_b delta / n)^p [1/n_b^(p-1) - (-1/n_a)^(p-1)]

    where ``delta = mean_b - mean_a``.

    Args:
        order: Highest central moment tracked, at least 1

    References:
        - Pébay, P. (2008). Formulas for robust, one-pass parallel
          computation of covariances and arbitrary-order statistical
          moments. Sandia Report SAND2008-6212.
    """
    estimator_id = "moments"
    statistics = ("central_moments", "mean", "variance", "sample_variance", "skewness", "kurtosis")

    def __init__(self, order: int = 4) -> None:
        if not isinstance(order, int) or order < 1:
            raise ValueError(f"Moment order must be an integer >= 1, got {order!r}")
        self._order = order
        self._n = 0
        self._avg = 0.0
        # _sums[i] holds M_(i + 2)
        self._sums: List[float] = [0.0] * (order - 1)

    @property
    def order(self) -> int:
        """Highest central moment tracked."""
        return self._order

    def _sum(self, p: int) -> float:
        if p == 0:
            return float(self._n)
        if p == 1:
            return 0.0
        return self._sums[p - 2]

    def add(self, x: float) -> None:
        n_a = self._n
        self._n += 1
        if n_a == 0:
            self._avg = x
            return
        n = self._n
        delta = x - self._avg
        delta_n = delta / n
        # Highest order first: each update reads the previous lower sums.
        for p in range(self._order, 1, -1):
            value = self._sums[p - 2]
            for k in range(1, p - 1):
                value += math.comb(p, k) * (-delta_n) ** k * self._sum(p - k)
            value += (n_a * delta_n) ** p * (1.0 - (-1.0 / n_a) ** (p - 1))
            self._sums[p - 2] = value
        self._avg += delta_n

    def _check_mergeable(self, other: Any) -> None:
        super()._check_mergeable(other)
        if other._order != self._order:
            raise ValueError(
                f"Cannot merge moments of order {self._order} with order {other._order}"
            )

    def merge(self, other: Moments) -> None:
        self._check_mergeable(other)
        if other._n == 0:
            return
        if self._n == 0:
            self._n = other._n
            self._avg = other._avg
            self._sums = list(other._sums)
            return
        n_a, n_b = self._n, other._n
        n = n_a + n_b
        delta = other._avg - self._avg
        sums = []
        for p in range(2, self._order + 1):
            value = self._sum(p) + other._sum(p)
            for k in range(1, p - 1):
                value += math.comb(p, k) * delta ** k * (
                    (-n_b / n) ** k * self._sum(p - k)
                    + (n_a / n) ** k * other._sum(p - k)
                )
            value += (n_a * n_b * delta / n) ** p * (
                1.0 / n_b ** (p - 1) - (-1.0 / n_a) ** (p - 1)
            )
            sums.append(value)
        self._sums = sums
        self._avg += delta * n_b / n
        self._n = n

    def __len__(self) -> int:
        return self._n

    def _check_order(self, p: int) -> None:
        if p < 0 or p > self._order:
            raise ValueError(f"Moment of order {p} is not tracked (order={self._order})")

    def mean(self) -> float:
        """Estimate of the mean of the population."""
        if self._n == 0:
            return float('nan')
        return self._avg

    def central_moment(self, p: int) -> float:
        """
        Central moment of order p, normalized by ``n``.

        Args:
            p: Order, between 0 and the tracked order

        Returns:
            ``M_p / n``; NaN when empty

        Raises:
            ValueError: If p is not tracked
        """
        self._check_order(p)
        if self._n == 0:
            return float('nan')
        if p == 0:
            return 1.0
        if p == 1:
            return 0.0
        return self._sums[p - 2] / self._n

    def central_moments(self) -> List[float]:
        """Central moments of order 2 up to the tracked order."""
        return [self.central_moment(p) for p in range(2, self._order + 1)]

    def standardized_moment(self, p: int) -> float:
        """
        Central moment of order p divided by the standard deviation to the power p.

        NaN when empty or when the variance is zero.
        """
        self._check_order(p)
        if self._n == 0:
            return float('nan')
        if p == 0:
            return 1.0
        if p == 1:
            return 0.0
        variance = self.central_moment(2)
        denominator = variance ** (p / 2)
        if denominator == 0.0:
            return float('nan')
        return self.central_moment(p) / denominator

    def variance(self) -> float:
        """Population variance, normalized by ``n``."""
        return self.central_moment(2)

    def sample_variance(self) -> float:
        """Unbiased sample variance, NaN for fewer than 2 observations."""
        self._check_order(2)
        if self._n < 2:
            return float('nan')
        return self._sums[0] / (self._n - 1)

    def skewness(self) -> float:
        """Population skewness."""
        return self.standardized_moment(3)

    def kurtosis(self) -> float:
        """Excess kurtosis."""
        return self.standardized_moment(4) - 3.0

    def sample_skewness(self) -> float:
        """Adjusted Fisher-Pearson skewness, NaN for fewer than 3 observations."""
        n = self._n
        if n < 3:
            return float('nan')
        return math.sqrt(n * (n - 1)) / (n - 2) * self.skewness()

    def sample_excess_kurtosis(self) -> float:
        """Bias-corrected excess kurtosis, NaN for fewer than 4 observations."""
        n = self._n
        if n < 4:
            return float('nan')
        return ((n + 1) * self.kurtosis() + 6.0) * (n - 1) / ((n - 2) * (n - 3))

    def summary(self) -> Dict[str, Any]:
        available = {
            "central_moments": 2,
            "mean": 1,
            "variance": 2,
            "sample_variance": 2,
            "skewness": 3,
            "kurtosis": 4,
        }
        return {
            name: getattr(self, name)()
            for name in self.statistics
            if available[name] <= self._order
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            'order': self._order,
            'count': self._n,
            'mean': self._avg,
            'sums': list(self._sums),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Moments:
        estimator = cls(int(data['order']))
        sums = [float(value) for value in data['sums']]
        if len(sums) != estimator._order - 1:
            raise ValueError(
                f"Expected {estimator._order - 1} moment sums for order {estimator._order}, got {len(sums)}"
            )
        estimator._n = int(data['count'])
        estimator._avg = float(data['mean'])
        estimator._sums = sums
        return estimator
