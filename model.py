"""
Data models for estimator results.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


StatValue = Union[int, float, List[Any], Dict[str, Any]]


@dataclass
class Report:
    """
    Snapshot of statistics read from one or more estimators.

    Statistics are organized into categories (one per estimator, e.g.
    'mean', 'histogram') with named values within each category.

    Attributes:
        categories: Category name -> statistic name -> value
        count: Number of observations the estimators had seen when the
            snapshot was taken
    """
    categories: Dict[str, Dict[str, StatValue]] = field(default_factory=dict)
    count: int = 0

    def add_value(self, category: str, name: str, value: StatValue) -> None:
        """Add a statistical value to a category."""
        if category not in self.categories:
            self.categories[category] = {}
        self.categories[category][name] = value

    def add_category(self, category: str, values: Dict[str, StatValue]) -> None:
        """Add every value of a dictionary to a category."""
        for name, value in values.items():
            self.add_value(category, name, value)

    def get_value(self, category: str, name: str, default: Optional[StatValue] = None) -> Optional[StatValue]:
        """Get a statistical value from a category."""
        return self.categories.get(category, {}).get(name, default)

    def get_category(self, category: str) -> Dict[str, StatValue]:
        """Get all values in a category."""
        return self.categories.get(category, {})

    def update(self, other: Report) -> None:
        """Copy the values of another Report into this one, overwriting names present in both."""
        for category, values in other.categories.items():
            if category not in self.categories:
                self.categories[category] = {}
            self.categories[category].update(values)

    def to_dict(self) -> Dict[str, Dict[str, StatValue]]:
        """Convert to a plain dictionary."""
        return {category: dict(values) for category, values in self.categories.items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Dict[str, StatValue]], count: int = 0) -> Report:
        """Create from a plain dictionary of categories."""
        return cls(categories={category: dict(values) for category, values in data.items()}, count=count)
