"""
Histogram with fixed bin edges.
"""
from __future__ import annotations

import bisect
import logging
import math
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from iterstats.base import Estimator, register_estimator

logger = logging.getLogger(__name__)


class InvalidRangeError(ValueError):
    """Raised when histogram bin edges are inconsistent."""


class SampleOutOfRangeError(ValueError):
    """Raised when a sample does not fall into any histogram bin."""

    def __init__(self, x: float, start: float, end: float) -> None:
        super().__init__(f"Sample {x} is outside the histogram range [{start}, {end})")
        self.x = x


def _validate_edges(edges: Sequence[float]) -> List[float]:
    edges = [float(edge) for edge in edges]
    if len(edges) < 2:
        raise InvalidRangeError(f"A histogram needs at least 2 bin edges, got {len(edges)}")
    for edge in edges:
        if not math.isfinite(edge):
            raise InvalidRangeError(f"Bin edges must be finite, got {edge}")
    for lower, upper in zip(edges, edges[1:]):
        if not lower < upper:
            raise InvalidRangeError(f"Bin edges must be strictly increasing, got {lower} before {upper}")
    return edges


@register_estimator
class Histogram(Estimator):
    """
    Counts of observations per bin.

    Bins are half-open intervals ``[edges[i], edges[i + 1])``. Samples below
    the first edge are counted as underflow; samples at or above the last
    edge, and NaN, are counted as overflow. Adding therefore never fails,
    and a histogram can be fed by a composite alongside other estimators.

    Args:
        edges: Strictly increasing, finite bin edges (at least two)

    Raises:
        InvalidRangeError: If the edges are inconsistent
    """
    estimator_id = "histogram"
    statistics = ("bins", "underflow", "overflow")

    def __init__(self, edges: Iterable[float]) -> None:
        self._edges = _validate_edges(list(edges))
        self._bins = [0] * (len(self._edges) - 1)
        self._underflow = 0
        self._overflow = 0

    @classmethod
    def with_const_width(cls, start: float, end: float, bins: int) -> Histogram:
        """
        Create a histogram with bins of equal width.

        Args:
            start: Lower edge of the first bin
            end: Upper edge of the last bin
            bins: Number of bins, at least 1

        Raises:
            InvalidRangeError: If start >= end or bins < 1
        """
        if not isinstance(bins, int) or bins < 1:
            raise InvalidRangeError(f"Number of bins must be a positive integer, got {bins!r}")
        if not start < end:
            raise InvalidRangeError(f"Histogram start must be below end, got [{start}, {end})")
        width = (end - start) / bins
        edges = [start + i * width for i in range(bins)]
        edges.append(end)
        return cls(edges)

    @classmethod
    def from_ranges(cls, edges: Iterable[float]) -> Histogram:
        """Create a histogram from explicit bin edges."""
        return cls(edges)

    @classmethod
    def from_config(cls, **options: Any) -> Histogram:
        """
        Create a histogram from configuration options.

        Either ``edges`` (list of bin edges) or ``min``, ``max`` and ``bins``
        must be given.

        Raises:
            InvalidRangeError: If the options do not describe a valid layout
        """
        edges: Optional[Sequence[float]] = options.get('edges')
        if edges is not None:
            if any(key in options for key in ('min', 'max', 'bins')):
                raise InvalidRangeError("Give either 'edges' or 'min'/'max'/'bins', not both")
            return cls(edges)
        missing = [key for key in ('min', 'max', 'bins') if key not in options]
        if missing:
            raise InvalidRangeError(f"Histogram configuration is missing {', '.join(missing)}")
        return cls.with_const_width(float(options['min']), float(options['max']), options['bins'])

    def find(self, x: float) -> int:
        """
        Index of the bin containing x.

        Raises:
            SampleOutOfRangeError: If x is outside all bins
        """
        if not self._edges[0] <= x < self._edges[-1]:
            raise SampleOutOfRangeError(x, self._edges[0], self._edges[-1])
        return bisect.bisect_right(self._edges, x) - 1

    def add(self, x: float) -> None:
        if x < self._edges[0]:
            self._underflow += 1
        elif not x < self._edges[-1]:
            self._overflow += 1
        else:
            self._bins[bisect.bisect_right(self._edges, x) - 1] += 1

    def _check_mergeable(self, other: Any) -> None:
        super()._check_mergeable(other)
        if other._edges != self._edges:
            raise ValueError("Cannot merge histograms with different bin edges")

    def merge(self, other: Histogram) -> None:
        self._check_mergeable(other)
        self._bins = [a + b for a, b in zip(self._bins, other._bins)]
        self._underflow += other._underflow
        self._overflow += other._overflow

    def __len__(self) -> int:
        return sum(self._bins) + self._underflow + self._overflow

    def in_range_count(self) -> int:
        """Number of observations that fell into a bin."""
        return sum(self._bins)

    def underflow(self) -> int:
        """Number of observations below the first edge."""
        return self._underflow

    def overflow(self) -> int:
        """Number of observations at or above the last edge, or NaN."""
        return self._overflow

    def _check_bin(self, i: int) -> None:
        if not 0 <= i < len(self._bins):
            raise IndexError(f"Bin index {i} out of range for {len(self._bins)} bins")

    def count_in_bin(self, i: int) -> int:
        """
        Number of observations in bin i.

        Raises:
            IndexError: If i is not a bin index
        """
        self._check_bin(i)
        return self._bins[i]

    def bins(self) -> List[int]:
        """Counts per bin."""
        return list(self._bins)

    def edges(self) -> List[float]:
        """Bin edges."""
        return list(self._edges)

    def ranges(self) -> List[Tuple[float, float]]:
        """Lower and upper edge of every bin."""
        return list(zip(self._edges, self._edges[1:]))

    def widths(self) -> List[float]:
        """Width of every bin."""
        return [upper - lower for lower, upper in self.ranges()]

    def centers(self) -> List[float]:
        """Midpoint of every bin."""
        return [0.5 * (lower + upper) for lower, upper in self.ranges()]

    def normalized_bins(self) -> List[float]:
        """
        Bin counts normalized to a probability density over the range.

        NaN for every bin while no observation fell into the range.
        """
        total = self.in_range_count()
        if total == 0:
            return [float('nan')] * len(self._bins)
        return [count / (total * width) for count, width in zip(self._bins, self.widths())]

    def variance(self, i: int) -> float:
        """Binomial variance of the count in bin i."""
        self._check_bin(i)
        total = self.in_range_count()
        if total == 0:
            return float('nan')
        count = self._bins[i]
        return count * (1.0 - count / total)

    def variances(self) -> List[float]:
        """Binomial variance of every bin count."""
        return [self.variance(i) for i in range(len(self._bins))]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'edges': list(self._edges),
            'bins': list(self._bins),
            'underflow': self._underflow,
            'overflow': self._overflow,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Histogram:
        estimator = cls(data['edges'])
        bins = [int(count) for count in data['bins']]
        if len(bins) != len(estimator._bins):
            raise ValueError(f"Expected {len(estimator._bins)} bin counts, got {len(bins)}")
        estimator._bins = bins
        estimator._underflow = int(data.get('underflow', 0))
        estimator._overflow = int(data.get('overflow', 0))
        return estimator
