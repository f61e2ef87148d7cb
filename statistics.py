from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, Optional
import logging

from iterstats.app_hooks import AppHooks
from .pipeline import StatisticsConfig, StatisticsPipeline
from .model import Report

logger = logging.getLogger(__name__)


class Statistics:
    """
    High-level interface for computing statistics of a stream.

    This is a convenience wrapper around StatisticsPipeline that provides
    a simpler API for common use cases.

    Example:
        stats = Statistics(values=[1.0, 2.0, 3.0, 4.0, 5.0])
        stats.get_value('mean', 'mean')  # 3.0

        # With configuration
        stats = Statistics(
            values=samples,
            config_dict={'estimators': {'quantile': {'p': 0.9}}},
        )
    """

    def __init__(
        self,
        values: Optional[Iterable[float]] = None,
        config_dict: Optional[Dict[str, Any]] = None,
        config_file: Optional[Path] = None,
        app_hooks: Optional[AppHooks] = None
    ) -> None:
        """
        Initialize statistics collection.

        Args:
            values: Optional iterable of observations, fed immediately
            config_dict: Dictionary to configure estimators (e.g., {'estimators': {'mean': True}})
            config_file: Path to YAML config file
            app_hooks: Optional application hooks for progress reporting
        """
        self.app_hooks = app_hooks

        # Create configuration
        if config_dict:
            self.config = StatisticsConfig.from_dict(config_dict)
        elif config_file:
            self.config = StatisticsConfig(config_file=config_file)
        else:
            # Use defaults - min, max, mean and variance
            self.config = StatisticsConfig()

        # Create pipeline
        self.pipeline = StatisticsPipeline(config=self.config, app_hooks=app_hooks)

        self._results: Optional[Report] = None
        if values is not None:
            self._results = self.pipeline.run(values)

    @property
    def results(self) -> Optional[Report]:
        """Get the statistics results."""
        return self._results

    def analyze(self, values: Iterable[float]) -> Report:
        """
        Feed more observations and refresh the results.

        Observations accumulate: the results cover everything fed so far.

        Args:
            values: Iterable of observations

        Returns:
            Report with collected statistics
        """
        self._results = self.pipeline.run(values)
        return self._results

    def get_value(self, category: str, name: str, default=None):
        """
        Convenience method to get a specific statistic value.

        Args:
            category: Estimator id (e.g., 'mean', 'variance')
            name: Statistic name (e.g., 'sample_variance')
            default: Default value if not found

        Returns:
            The statistic value or default
        """
        if self._results:
            return self._results.get_value(category, name, default)
        return default

    def get_category(self, category: str) -> Dict[str, Any]:
        """
        Get all statistics of one estimator.

        Args:
            category: Estimator id (e.g., 'variance')

        Returns:
            Dictionary of statistic names to values
        """
        if self._results:
            return self._results.get_category(category)
        return {}

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """
        Export all statistics as a dictionary.

        Returns:
            Dictionary of categories to statistics
        """
        if self._results:
            return self._results.to_dict()
        return {}
