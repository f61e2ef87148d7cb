"""
Minimum and maximum accumulators.
"""
from __future__ import annotations

import logging
from typing import Any, Dict

from iterstats.base import Estimator, register_estimator

logger = logging.getLogger(__name__)


@register_estimator
class Min(Estimator):
    """
    Running minimum.

    The first observation sets the minimum. A NaN observation is ignored
    by later comparisons, except as first observation, where it sticks.
    """
    estimator_id = "min"
    statistics = ("min",)

    def __init__(self) -> None:
        self._n = 0
        self._x = float('nan')

    @classmethod
    def from_value(cls, x: float) -> Min:
        """Create a minimum that has seen a single observation."""
        estimator = cls()
        estimator.add(x)
        return estimator

    def add(self, x: float) -> None:
        if self._n == 0 or x < self._x:
            self._x = x
        self._n += 1

    def merge(self, other: Min) -> None:
        self._check_mergeable(other)
        if other._n == 0:
            return
        if self._n == 0 or other._x < self._x:
            self._x = other._x
        self._n += other._n

    def __len__(self) -> int:
        return self._n

    def min(self) -> float:
        """Smallest observation, NaN when empty."""
        return self._x

    def to_dict(self) -> Dict[str, Any]:
        return {'count': self._n, 'min': self._x}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Min:
        estimator = cls()
        estimator._n = int(data['count'])
        estimator._x = float(data['min'])
        return estimator


@register_estimator
class Max(Estimator):
    """
    Running maximum.

    The first observation sets the maximum. A NaN observation is ignored
    by later comparisons, except as first observation, where it sticks.
    """
    estimator_id = "max"
    statistics = ("max",)

    def __init__(self) -> None:
        self._n = 0
        self._x = float('nan')

    @classmethod
    def from_value(cls, x: float) -> Max:
        """Create a maximum that has seen a single observation."""
        estimator = cls()
        estimator.add(x)
        return estimator

    def add(self, x: float) -> None:
        if self._n == 0 or x > self._x:
            self._x = x
        self._n += 1

    def merge(self, other: Max) -> None:
        self._check_mergeable(other)
        if other._n == 0:
            return
        if self._n == 0 or other._x > self._x:
            self._x = other._x
        self._n += other._n

    def __len__(self) -> int:
        return self._n

    def max(self) -> float:
        """Largest observation, NaN when empty."""
        return self._x

    def to_dict(self) -> Dict[str, Any]:
        return {'count': self._n, 'max': self._x}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Max:
        estimator = cls()
        estimator._n = int(data['count'])
        estimator._x = float(data['max'])
        return estimator
