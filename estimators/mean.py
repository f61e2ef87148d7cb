"""
Arithmetic mean estimator.
"""
from __future__ import annotations

import logging
from typing import Any, Dict

from iterstats.base import Estimator, register_estimator

logger = logging.getLogger(__name__)


@register_estimator
class Mean(Estimator):
    """
    Running arithmetic mean.

    The mean is updated as ``mean += (x - mean) / n``, which avoids keeping
    a running sum that could lose precision or overflow on long streams.

    Statistics:
        - mean: NaN while no observation has been added
    """
    estimator_id = "mean"
    statistics = ("mean",)

    def __init__(self) -> None:
        self._n = 0
        self._avg = 0.0

    def _increment(self) -> None:
        self._n += 1

    def _add_inner(self, delta_n: float) -> None:
        # delta_n is (x - mean) / n, with n already incremented.
        self._avg += delta_n

    def add(self, x: float) -> None:
        self._increment()
        self._add_inner((x - self._avg) / self._n)

    def merge(self, other: Mean) -> None:
        self._check_mergeable(other)
        if other._n == 0:
            return
        if self._n == 0:
            self._n = other._n
            self._avg = other._avg
            return
        n = self._n + other._n
        self._avg += (other._avg - self._avg) * (other._n / n)
        self._n = n

    def __len__(self) -> int:
        return self._n

    def mean(self) -> float:
        """Estimate of the mean of the population."""
        if self._n == 0:
            return float('nan')
        return self._avg

    def to_dict(self) -> Dict[str, Any]:
        return {'count': self._n, 'mean': self._avg}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Mean:
        estimator = cls()
        estimator._n = int(data['count'])
        estimator._avg = float(data['mean'])
        return estimator
