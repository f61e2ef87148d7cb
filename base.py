"""
Base classes for incremental estimators.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
import copy
import logging
from typing import Any, Dict, Iterable, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

E = TypeVar('E', bound='Estimator')

# Estimator Registry
_ESTIMATOR_REGISTRY: Dict[str, Type['Estimator']] = {}


def register_estimator(cls: Type['Estimator']) -> Type['Estimator']:
    """
    Decorator to register an estimator class in the global registry.

    Usage:
        @register_estimator
        class MyEstimator(Estimator):
            estimator_id = "my_estimator"
            ...
    """
    if getattr(cls, 'estimator_id', ''):
        _ESTIMATOR_REGISTRY[cls.estimator_id] = cls
        logger.debug(f"Registered estimator: {cls.estimator_id}")
    else:
        logger.warning(f"Estimator {cls.__name__} missing 'estimator_id' attribute, not registered")
    return cls


def get_estimator_registry() -> Dict[str, Type['Estimator']]:
    """Get the global estimator registry."""
    return _ESTIMATOR_REGISTRY.copy()


class Estimator(ABC):
    """
    Base class for incremental estimators.

    An estimator absorbs observations one at a time, can be queried at any
    point without changing its state, and can be merged with another
    estimator of the same kind. The merged estimator is equivalent to one
    that saw both streams.

    Attributes:
        estimator_id: Registry key for this estimator kind
        statistics: Names of the accessors reported by summary()
    """
    estimator_id: str = ""
    statistics: Tuple[str, ...] = ()

    @abstractmethod
    def add(self, x: float) -> None:
        """
        Add an observation.

        Args:
            x: The observation. Non-finite values are not rejected, they
                propagate into the statistics.
        """

    @abstractmethod
    def merge(self: E, other: E) -> None:
        """
        Merge another estimator of the same kind into this one.

        Args:
            other: Estimator accumulated independently of this one

        Raises:
            TypeError: If other is a different kind of estimator
        """

    @abstractmethod
    def __len__(self) -> int:
        """Number of observations seen."""

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """Export the estimator state as a plain dictionary."""

    @classmethod
    @abstractmethod
    def from_dict(cls: Type[E], data: Dict[str, Any]) -> E:
        """Rebuild an estimator from the output of to_dict()."""

    @classmethod
    def from_config(cls: Type[E], **options: Any) -> E:
        """
        Create an estimator from configuration options.

        Args:
            **options: Constructor keyword arguments

        Returns:
            Empty estimator
        """
        return cls(**options)

    @classmethod
    def from_iter(cls: Type[E], values: Iterable[float], *args: Any, **kwargs: Any) -> E:
        """
        Create an estimator and add every value of the iterable.

        Extra arguments are passed to the constructor.
        """
        estimator = cls(*args, **kwargs)
        estimator.extend(values)
        return estimator

    def extend(self, values: Iterable[float]) -> None:
        """Add every value of the iterable, in order."""
        for x in values:
            self.add(x)

    @property
    def count(self) -> int:
        """Number of observations seen."""
        return len(self)

    def is_empty(self) -> bool:
        """Whether no observation has been seen yet."""
        return len(self) == 0

    def copy(self: E) -> E:
        """Return an independent copy of this estimator."""
        return copy.deepcopy(self)

    def summary(self) -> Dict[str, float]:
        """
        Read every reported statistic.

        Returns:
            Dictionary of statistic name to current value
        """
        return {name: getattr(self, name)() for name in self.statistics}

    def _check_mergeable(self, other: Any) -> None:
        """
        Raise if other cannot be merged into this estimator, without changing either.

        Raises:
            TypeError: If other is a different kind of estimator
            ValueError: If other has an incompatible shape
        """
        if type(other) is not type(self):
            raise TypeError(
                f"Cannot merge {type(self).__name__} with {type(other).__name__}"
            )

    def __add__(self: E, other: E) -> E:
        merged = self.copy()
        merged.merge(other)
        return merged

    def __iadd__(self: E, other: E) -> E:
        self.merge(other)
        return self

    def __repr__(self) -> str:
        return f"{type(self).__name__}(count={len(self)})"


def merge_all(estimators: Iterable[E]) -> E:
    """
    Merge a sequence of partial estimators into a new one.

    The inputs are left untouched.

    Args:
        estimators: Non-empty iterable of estimators of the same kind

    Returns:
        Estimator equivalent to one that saw every partition

    Raises:
        ValueError: If the iterable is empty
    """
    iterator = iter(estimators)
    try:
        merged = next(iterator).copy()
    except StopIteration:
        raise ValueError("merge_all() needs at least one estimator") from None
    for estimator in iterator:
        merged.merge(estimator)
    return merged
