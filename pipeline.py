"""
Pipeline for feeding a stream to configured estimators.
"""
from __future__ import annotations

from collections.abc import Sized
from dataclasses import dataclass, field
import functools
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Type
import yaml

from iterstats.app_hooks import AppHooks
from iterstats.base import get_estimator_registry, merge_all
from iterstats.composite import Composite, concatenate
from iterstats.model import Report

logger = logging.getLogger(__name__)

DEFAULT_ESTIMATORS = ('min', 'max', 'mean', 'variance')
DEFAULT_PROGRESS_INTERVAL = 1000


def _normalize_settings(estimator_id: str, settings: Any) -> Dict[str, Any]:
    if settings is None:
        return {'enabled': True}
    if isinstance(settings, bool):
        return {'enabled': settings}
    if isinstance(settings, dict):
        return dict(settings)
    raise ValueError(f"Invalid settings for estimator '{estimator_id}': {settings!r}")


@dataclass
class StatisticsConfig:
    """
    Configuration of the estimators run by a pipeline.

    Attributes:
        estimators: Dict of estimator_id -> settings. Settings are a bool
            (enabled status) or a dict of constructor options with an
            optional 'enabled' key. An empty dict selects DEFAULT_ESTIMATORS.
        progress_interval: Number of observations between progress reports
        config_file: Path to YAML config file (optional)
    """
    estimators: Dict[str, Any] = field(default_factory=dict)
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL
    config_file: Optional[Path] = None

    def __post_init__(self) -> None:
        """Normalize settings and load configuration from file if config_file is specified."""
        self.estimators = {
            estimator_id: _normalize_settings(estimator_id, settings)
            for estimator_id, settings in self.estimators.items()
        }
        if self.config_file:
            if Path(self.config_file).exists():
                self._load_from_file()
            else:
                logger.warning(f"Statistics config file not found: {self.config_file}")
        if not isinstance(self.progress_interval, int) or self.progress_interval < 1:
            raise ValueError(f"progress_interval must be a positive integer, got {self.progress_interval!r}")

    def _load_from_file(self) -> None:
        """
        Load configuration from YAML file.

        Reads the 'statistics' section from the YAML file and extracts the
        estimator settings and progress interval.
        """
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load statistics config from {self.config_file}: {e}")
            return

        statistics_config = data.get('statistics', {}) if isinstance(data, dict) else None
        if not isinstance(statistics_config, dict):
            logger.warning(f"No 'statistics' section in {self.config_file}")
            return

        for estimator_id, settings in (statistics_config.get('estimators') or {}).items():
            try:
                self.estimators[estimator_id] = _normalize_settings(estimator_id, settings)
            except ValueError as e:
                logger.warning(f"Ignoring estimator settings in {self.config_file}: {e}")

        if 'progress_interval' in statistics_config:
            self.progress_interval = statistics_config['progress_interval']

        logger.info(f"Loaded statistics config from {self.config_file}")

    def is_enabled(self, estimator_id: str) -> bool:
        """
        Check if an estimator is enabled.

        Args:
            estimator_id: Identifier of the estimator to check

        Returns:
            True if listed and not disabled; without any listed estimators,
            True for the default estimators
        """
        if not self.estimators:
            return estimator_id in DEFAULT_ESTIMATORS
        settings = self.estimators.get(estimator_id)
        if settings is None:
            return False
        return bool(settings.get('enabled', True))

    def enabled_ids(self) -> List[str]:
        """Identifiers of the enabled estimators, in configuration order."""
        if not self.estimators:
            return list(DEFAULT_ESTIMATORS)
        return [estimator_id for estimator_id in self.estimators if self.is_enabled(estimator_id)]

    def options(self, estimator_id: str) -> Dict[str, Any]:
        """Constructor options of an estimator."""
        settings = self.estimators.get(estimator_id, {})
        return {key: value for key, value in settings.items() if key != 'enabled'}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> StatisticsConfig:
        """
        Create configuration from dictionary.

        Useful for testing and programmatic configuration.

        Args:
            data: Dictionary with 'estimators' key mapping estimator_id to
                settings, and an optional 'progress_interval'

        Returns:
            StatisticsConfig instance
        """
        return cls(
            estimators=data.get('estimators', {}),
            progress_interval=data.get('progress_interval', DEFAULT_PROGRESS_INTERVAL),
        )


@dataclass
class StatisticsPipeline:
    """
    Pipeline feeding a stream of observations to the configured estimators.

    The enabled estimators are bundled into one composite estimator, so
    every observation reaches each of them exactly once.

    Attributes:
        config: Configuration for the pipeline
        app_hooks: Optional application hooks for progress reporting
        composite_cls: Composite class built from the configuration
        estimator: The live composite estimator
    """
    config: StatisticsConfig = field(default_factory=StatisticsConfig)
    app_hooks: Optional[AppHooks] = field(default=None)
    composite_cls: Type[Composite] = field(init=False)
    estimator: Composite = field(init=False)

    def __post_init__(self) -> None:
        """
        Build the composite estimator from the registry.

        Raises:
            KeyError: If the configuration names an unknown estimator
            ValueError: If estimator options are invalid
        """
        self.composite_cls = self._build_composite_class()
        self.estimator = self.composite_cls()

    def _build_composite_class(self) -> Type[Composite]:
        """
        Create the composite class for the enabled estimators.

        Each estimator contributes one accessor, its first statistic whose
        name is not taken by an earlier estimator. Every statistic is still
        available through report().
        """
        registry = get_estimator_registry()
        fields = []
        taken = set()
        for estimator_id in self.config.enabled_ids():
            estimator_cls = registry.get(estimator_id)
            if estimator_cls is None:
                raise KeyError(f"Unknown estimator '{estimator_id}', known estimators: {sorted(registry)}")
            accessor = next((name for name in estimator_cls.statistics if name not in taken), None)
            if accessor is None:
                raise ValueError(f"Estimator '{estimator_id}' has no statistic left to expose")
            taken.add(accessor)
            factory = functools.partial(estimator_cls.from_config, **self.config.options(estimator_id))
            fields.append((estimator_id, factory, accessor))
            logger.debug(f"Loaded estimator: {estimator_id} (accessor={accessor})")

        try:
            return concatenate('ConfiguredStatistics', fields)
        except (TypeError, ValueError) as e:
            logger.error(f"Failed to build estimators from configuration: {e}")
            raise

    def run(self, values: Iterable[float]) -> Report:
        """
        Feed every value to the enabled estimators.

        Args:
            values: Iterable of observations

        Returns:
            Report with the statistics of every estimator
        """
        interval = self.config.progress_interval
        target = len(values) if isinstance(values, Sized) else None
        self._report_step(info="Feeding estimators", target=target, reset_counter=True, plus_step=0)

        pending = 0
        for x in values:
            self.estimator.add(x)
            pending += 1
            if pending == interval:
                self._report_step(plus_step=pending)
                pending = 0
                if self._stop_requested("Statistics run stopped by user"):
                    logger.info(f"Statistics stopped after {len(self.estimator)} observations")
                    break
        if pending:
            self._report_step(plus_step=pending)

        logger.info(f"Fed {len(self.estimator)} observations to {self.estimator.names()}")
        return self.report()

    def run_partitioned(self, partitions: Iterable[Iterable[float]]) -> Report:
        """
        Accumulate each partition independently, then merge the partial results.

        Args:
            partitions: Iterable of observation iterables

        Returns:
            Report with the statistics of every estimator
        """
        partials = []
        self._report_step(info="Accumulating partitions", reset_counter=True, plus_step=0)
        for idx, partition in enumerate(partitions):
            if self._stop_requested("Statistics run stopped by user"):
                logger.info(f"Statistics stopped after {idx} partitions")
                break
            partial = self.composite_cls.from_iter(partition)
            partials.append(partial)
            logger.debug(f"Partition {idx}: {len(partial)} observations")
            self._report_step(plus_step=len(partial))

        if partials:
            self.estimator.merge(merge_all(partials))
        return self.report()

    def merge(self, other: StatisticsPipeline) -> None:
        """Merge the estimators of another pipeline with the same configuration."""
        self.estimator.merge(other.estimator)

    def report(self) -> Report:
        """Current statistics of every estimator."""
        return self.estimator.report()

    def _report_step(self, info: str = "", target: Optional[int] = None, reset_counter: bool = False, plus_step: int = 0) -> None:
        """
        Report a step via app hooks if available. (Private method)

        Args:
            info (str): Information message.
            target (int): Target count for progress.
            reset_counter (bool): Whether to reset the counter.
            plus_step (int): Incremental step count.
        """
        if self.app_hooks and callable(getattr(self.app_hooks, "report_step", None)):
            self.app_hooks.report_step(info=info, target=target, reset_counter=reset_counter, plus_step=plus_step)
        elif info:
            logger.debug(info)

    def _stop_requested(self, logger_stop_message: str = "Stop requested by user") -> bool:
        """
        Check if stop has been requested via app hooks. (Private method)

        Returns:
            bool: True if stop requested, False otherwise.
        """
        if self.app_hooks and callable(getattr(self.app_hooks, "stop_requested", None)):
            if self.app_hooks.stop_requested():
                if logger_stop_message:
                    logger.info(logger_stop_message)
                return True
        return False
