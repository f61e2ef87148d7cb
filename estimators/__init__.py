"""
Built-in estimators.

Import estimators here to automatically register them.
"""

from iterstats.estimators.mean import Mean
from iterstats.estimators.variance import Variance
from iterstats.estimators.skewness import Skewness
from iterstats.estimators.kurtosis import Kurtosis
from iterstats.estimators.moments import Moments
from iterstats.estimators.minmax import Min, Max
from iterstats.estimators.weighted_mean import WeightedMean, WeightedMeanWithError
from iterstats.estimators.quantile import Quantile
from iterstats.estimators.histogram import Histogram, InvalidRangeError, SampleOutOfRangeError

__all__ = [
    'Mean',
    'Variance',
    'Skewness',
    'Kurtosis',
    'Moments',
    'Min',
    'Max',
    'WeightedMean',
    'WeightedMeanWithError',
    'Quantile',
    'Histogram',
    'InvalidRangeError',
    'SampleOutOfRangeError',
]
