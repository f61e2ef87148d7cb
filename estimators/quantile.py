"""
Quantile estimator using the P-square algorithm.
"""
from __future__ import annotations

import bisect
import logging
import math
from typing import Any, Dict, List, Sequence

from iterstats.base import Estimator, register_estimator

logger = logging.getLogger(__name__)

_MARKERS = 5


@register_estimator
class Quantile(Estimator):
    """
    Streaming estimate of the p-quantile in constant memory.

    The P-square algorithm tracks five markers: the minimum, the maximum,
    the p-quantile and two markers halfway between. Their heights are
    adjusted with a piecewise-parabolic prediction as observations arrive.
    Until five observations have been seen they are kept as they are and the
    quantile is interpolated exactly between the sorted values.

    Merging two estimators that each hold at least five observations is
    approximate: the extremes are exact, and the inner markers are read off
    the sum of both estimators' piecewise-linear marker distributions.

    Args:
        p: Target probability, in [0, 1]

    Raises:
        ValueError: If p is outside [0, 1]

    References:
        - Jain, R., Chlamtac, I. (1985). The P2 algorithm for dynamic
          calculation of quantiles and histograms without storing
          observations. Communications of the ACM, 28(10), 1076-1085.
    """
    estimator_id = "quantile"
    statistics = ("quantile", "p")

    def __init__(self, p: float = 0.5) -> None:
        if not 0.0 <= p <= 1.0:
            raise ValueError(f"Quantile probability must be in [0, 1], got {p}")
        self._p = float(p)
        self._n = 0
        # Marker heights, or the raw observations while fewer than five.
        self._q: List[float] = []
        # Actual marker positions, 1-based.
        self._pos: List[int] = [1, 2, 3, 4, 5]
        # Desired marker positions.
        self._desired: List[float] = self._initial_desired(self._p)

    @staticmethod
    def _initial_desired(p: float) -> List[float]:
        return [1.0, 1.0 + 2.0 * p, 1.0 + 4.0 * p, 3.0 + 2.0 * p, 5.0]

    def _increments(self) -> List[float]:
        p = self._p
        return [0.0, p / 2.0, p, (1.0 + p) / 2.0, 1.0]

    def p(self) -> float:
        """Target probability."""
        return self._p

    def add(self, x: float) -> None:
        if self._n < _MARKERS:
            self._q.append(x)
            self._n += 1
            if self._n == _MARKERS:
                self._q.sort()
            return
        self._n += 1
        q = self._q
        pos = self._pos

        if x < q[0]:
            q[0] = x
            k = 0
        elif x >= q[4]:
            q[4] = x
            k = 3
        else:
            k = bisect.bisect_right(q, x, 1, 4) - 1

        for i in range(k + 1, _MARKERS):
            pos[i] += 1
        for i, increment in enumerate(self._increments()):
            self._desired[i] += increment

        for i in range(1, _MARKERS - 1):
            d = self._desired[i] - pos[i]
            if (d >= 1.0 and pos[i + 1] - pos[i] > 1) or (d <= -1.0 and pos[i - 1] - pos[i] < -1):
                step = 1 if d > 0 else -1
                candidate = self._parabolic(i, step)
                if q[i - 1] < candidate < q[i + 1]:
                    q[i] = candidate
                else:
                    q[i] = self._linear(i, step)
                pos[i] += step

    def _parabolic(self, i: int, d: int) -> float:
        q, n = self._q, self._pos
        return q[i] + d / (n[i + 1] - n[i - 1]) * (
            (n[i] - n[i - 1] + d) * (q[i + 1] - q[i]) / (n[i + 1] - n[i])
            + (n[i + 1] - n[i] - d) * (q[i] - q[i - 1]) / (n[i] - n[i - 1])
        )

    def _linear(self, i: int, d: int) -> float:
        q, n = self._q, self._pos
        return q[i] + d * (q[i + d] - q[i]) / (n[i + d] - n[i])

    def _check_mergeable(self, other: Any) -> None:
        super()._check_mergeable(other)
        if other._p != self._p:
            raise ValueError(f"Cannot merge quantiles for p={self._p} and p={other._p}")

    def merge(self, other: Quantile) -> None:
        self._check_mergeable(other)
        if other._n == 0:
            return
        if self._n == 0:
            self._restore(other)
            return
        # Raw values are replayed in sorted order, whichever side holds them.
        if self._n < _MARKERS and other._n < _MARKERS:
            raw = sorted(self._q + other._q)
            self._n = 0
            self._q = []
            self.extend(raw)
            return
        if other._n < _MARKERS:
            self.extend(sorted(other._q))
            return
        if self._n < _MARKERS:
            raw = sorted(self._q)
            self._restore(other)
            self.extend(raw)
            return
        self._merge_markers(other)

    def _restore(self, other: Quantile) -> None:
        self._n = other._n
        self._q = list(other._q)
        self._pos = list(other._pos)
        self._desired = list(other._desired)

    @staticmethod
    def _rank(heights: Sequence[float], positions: Sequence[int], count: int, x: float) -> float:
        # Piecewise-linear approximation of the number of observations <= x.
        if x < heights[0]:
            return 0.0
        if x >= heights[-1]:
            return float(count)
        i = bisect.bisect_right(heights, x) - 1
        lo, hi = heights[i], heights[i + 1]
        if hi == lo:
            return float(positions[i + 1])
        return positions[i] + (positions[i + 1] - positions[i]) * (x - lo) / (hi - lo)

    def _merge_markers(self, other: Quantile) -> None:
        n = self._n + other._n
        candidates = sorted(set(self._q) | set(other._q))
        ranks = [
            self._rank(self._q, self._pos, self._n, h) + self._rank(other._q, other._pos, other._n, h)
            for h in candidates
        ]
        desired = [1.0 + (n - 1) * increment for increment in self._increments()]

        heights = [candidates[0]]
        for target in desired[1:-1]:
            heights.append(self._invert(candidates, ranks, target))
        heights.append(candidates[-1])

        positions = [1]
        for i in range(1, _MARKERS - 1):
            upper = n - (_MARKERS - 1 - i)
            positions.append(max(positions[-1] + 1, min(int(round(desired[i])), upper)))
        positions.append(n)

        self._n = n
        self._q = heights
        self._pos = positions
        self._desired = desired
        logger.debug(f"Merged P-square markers for p={self._p}: {heights}")

    @staticmethod
    def _invert(heights: Sequence[float], ranks: Sequence[float], target: float) -> float:
        if target <= ranks[0]:
            return heights[0]
        if target >= ranks[-1]:
            return heights[-1]
        i = bisect.bisect_left(ranks, target)
        lo, hi = ranks[i - 1], ranks[i]
        if hi == lo:
            return heights[i]
        return heights[i - 1] + (heights[i] - heights[i - 1]) * (target - lo) / (hi - lo)

    def __len__(self) -> int:
        return self._n

    def quantile(self) -> float:
        """Estimate of the p-quantile, NaN when empty."""
        if self._n == 0:
            return float('nan')
        if self._n <= _MARKERS:
            values = sorted(self._q)
            index = self._p * (len(values) - 1)
            lo = math.floor(index)
            hi = min(lo + 1, len(values) - 1)
            return values[lo] + (values[hi] - values[lo]) * (index - lo)
        # The outer markers are the exact extremes.
        if self._p == 0.0:
            return self._q[0]
        if self._p == 1.0:
            return self._q[4]
        return self._q[2]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'p': self._p,
            'count': self._n,
            'heights': list(self._q),
            'positions': list(self._pos),
            'desired': list(self._desired),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Quantile:
        estimator = cls(float(data['p']))
        estimator._n = int(data['count'])
        estimator._q = [float(h) for h in data['heights']]
        estimator._pos = [int(n) for n in data['positions']]
        estimator._desired = [float(d) for d in data['desired']]
        return estimator
