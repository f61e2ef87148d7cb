"""
Concatenation of several estimators into one.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Sequence, Tuple, Type

from iterstats.base import Estimator
from iterstats.model import Report

logger = logging.getLogger(__name__)

Factory = Callable[[], Estimator]

# Accessor names a composite cannot generate without shadowing its own API.
_RESERVED = frozenset(
    name for name in dir(Estimator) if not name.startswith('_')
) | {'fields', 'get', 'names', 'report'}


def _parse_fields(owner: str, fields: Sequence[Tuple[Any, ...]]) -> List[Tuple[str, Factory, Tuple[str, ...]]]:
    entries = []
    field_names = set()
    accessors = set()
    for entry in fields:
        if not isinstance(entry, tuple) or len(entry) < 2:
            raise ValueError(f"{owner}: field entries are (name, factory, *statistics), got {entry!r}")
        name, factory, *statistics = entry
        if not isinstance(name, str) or not name.isidentifier():
            raise ValueError(f"{owner}: field name must be an identifier, got {name!r}")
        if name in field_names:
            raise ValueError(f"{owner}: duplicate field '{name}'")
        if not callable(factory):
            raise ValueError(f"{owner}: factory for field '{name}' is not callable")
        field_names.add(name)
        statistics = tuple(statistics) or (name,)
        for statistic in statistics:
            if statistic in _RESERVED:
                raise ValueError(f"{owner}: accessor '{statistic}' clashes with the estimator API")
            if statistic in accessors:
                raise ValueError(f"{owner}: duplicate accessor '{statistic}'")
            accessors.add(statistic)
        entries.append((name, factory, statistics))
    return entries


def _make_accessor(owner: str, name: str, factory: Factory, statistic: str) -> Callable[..., Any]:
    # Resolve the statistic on the sub-estimator's class once, when the
    # composite class is defined.
    probe = factory()
    if not isinstance(probe, Estimator):
        raise ValueError(f"{owner}: factory for field '{name}' did not return an Estimator")
    method = getattr(type(probe), statistic, None)
    if not callable(method):
        raise ValueError(f"{owner}: {type(probe).__name__} has no statistic '{statistic}'")

    def accessor(self: Composite, *args: Any) -> Any:
        return method(self._estimators[name], *args)

    accessor.__name__ = statistic
    accessor.__qualname__ = f"{owner}.{statistic}"
    accessor.__doc__ = f"{statistic} of the '{name}' estimator."
    return accessor


class Composite(Estimator):
    """
    Several independent estimators fed from one stream.

    Subclasses declare ``fields``, an ordered tuple of
    ``(name, factory, *statistics)`` entries. ``factory`` is an estimator
    class, or any callable returning an empty estimator. Each statistic
    becomes a method of the composite that forwards to the sub-estimator's
    method of the same name; without statistics the entry exposes one
    accessor named like the field.

    Example:
        class MinMax(Composite):
            fields = (
                ("min", Min),
                ("max", Max),
            )

        s = MinMax.from_iter([1.0, 2.0, 3.0])
        s.min()  # 1.0
        s.max()  # 3.0

    Adding a value adds it to every sub-estimator exactly once, in the
    declared order. Merging merges each pair of same-named sub-estimators.
    """
    fields: Tuple[Tuple[Any, ...], ...] = ()
    _entries: List[Tuple[str, Factory, Tuple[str, ...]]] = []

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._entries = _parse_fields(cls.__name__, cls.fields)
        statistics = []
        for name, factory, names in cls._entries:
            for statistic in names:
                setattr(cls, statistic, _make_accessor(cls.__name__, name, factory, statistic))
                statistics.append(statistic)
        cls.statistics = tuple(statistics)
        logger.debug(f"Defined composite estimator {cls.__name__}: {[name for name, _, _ in cls._entries]}")

    def __init__(self) -> None:
        self._n = 0
        self._estimators: Dict[str, Estimator] = {
            name: factory() for name, factory, _ in self._entries
        }

    def add(self, x: float) -> None:
        for estimator in self._estimators.values():
            estimator.add(x)
        self._n += 1

    def _check_mergeable(self, other: Any) -> None:
        if not isinstance(other, Composite):
            raise TypeError(f"Cannot merge {type(self).__name__} with {type(other).__name__}")
        shape = [(name, type(e)) for name, e in self._estimators.items()]
        other_shape = [(name, type(e)) for name, e in other._estimators.items()]
        if shape != other_shape:
            raise TypeError(
                f"Cannot merge {type(self).__name__} with {type(other).__name__}: different estimators"
            )
        # Every pair is checked before any sub-estimator changes.
        for name, estimator in self._estimators.items():
            estimator._check_mergeable(other._estimators[name])

    def merge(self, other: Composite) -> None:
        self._check_mergeable(other)
        for name, estimator in self._estimators.items():
            estimator.merge(other._estimators[name])
        self._n += other._n

    def __len__(self) -> int:
        return self._n

    def names(self) -> List[str]:
        """Field names, in declared order."""
        return list(self._estimators)

    def get(self, name: str) -> Estimator:
        """
        Get a sub-estimator by field name.

        Raises:
            KeyError: If there is no such field
        """
        return self._estimators[name]

    def report(self) -> Report:
        """Summaries of all sub-estimators, one category per field."""
        report = Report(count=self._n)
        for name, estimator in self._estimators.items():
            report.add_category(name, estimator.summary())
        return report

    def to_dict(self) -> Dict[str, Any]:
        return {
            'count': self._n,
            'estimators': {name: e.to_dict() for name, e in self._estimators.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Composite:
        composite = cls()
        states = data['estimators']
        if set(states) != set(composite._estimators):
            raise ValueError(
                f"{cls.__name__} expects estimators {composite.names()}, got {sorted(states)}"
            )
        for name, estimator in composite._estimators.items():
            composite._estimators[name] = type(estimator).from_dict(states[name])
        composite._n = int(data['count'])
        return composite

    def __repr__(self) -> str:
        return f"{type(self).__name__}(count={self._n}, fields={self.names()})"


def concatenate(name: str, fields: Iterable[Tuple[Any, ...]]) -> Type[Composite]:
    """
    Create a composite estimator class.

    Args:
        name: Name of the new class
        fields: ``(name, factory, *statistics)`` entries, see Composite

    Returns:
        Composite subclass

    Raises:
        ValueError: If the fields are malformed

    Example:
        MinMax = concatenate("MinMax", [("min", Min), ("max", Max)])
    """
    return type(name, (Composite,), {'fields': tuple(fields), '__module__': __name__})
