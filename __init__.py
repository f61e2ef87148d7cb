"""iterstats package: Incremental estimators of descriptive statistics, with parallel merging."""

from iterstats.base import Estimator, get_estimator_registry, merge_all, register_estimator
from iterstats.composite import Composite, concatenate
from iterstats.estimators import (
    Histogram,
    InvalidRangeError,
    Kurtosis,
    Max,
    Mean,
    Min,
    Moments,
    Quantile,
    SampleOutOfRangeError,
    Skewness,
    Variance,
    WeightedMean,
    WeightedMeanWithError,
)
from iterstats.model import Report
from iterstats.pipeline import StatisticsConfig, StatisticsPipeline
from iterstats.statistics import Statistics

__all__ = [
    "Composite",
    "Estimator",
    "Histogram",
    "InvalidRangeError",
    "Kurtosis",
    "Max",
    "Mean",
    "Min",
    "Moments",
    "Quantile",
    "Report",
    "SampleOutOfRangeError",
    "Skewness",
    "Statistics",
    "StatisticsConfig",
    "StatisticsPipeline",
    "Variance",
    "WeightedMean",
    "WeightedMeanWithError",
    "concatenate",
    "get_estimator_registry",
    "merge_all",
    "register_estimator",
]
