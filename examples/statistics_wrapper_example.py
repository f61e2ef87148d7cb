"""
Example: Using the Statistics convenience wrapper and composite estimators.

This example shows how to use the high-level Statistics class, how to
declare a composite estimator, and how to merge partial results computed
on separate partitions of a stream.
"""

import random

from iterstats import Composite, Max, Mean, Min, Statistics, Variance, concatenate, merge_all


class MinMaxMean(Composite):
    fields = (
        ("min", Min),
        ("max", Max),
        ("mean", Mean),
    )


def example_basic_usage():
    """Basic usage of Statistics wrapper."""
    values = [1.0, 2.0, 3.0, 4.0, 5.0]

    # Create Statistics instance with the default estimators
    stats = Statistics(values=values)

    print("=== Basic Statistics ===")
    print(f"Min: {stats.get_value('min', 'min')}")
    print(f"Max: {stats.get_value('max', 'max')}")
    print(f"Mean: {stats.get_value('mean', 'mean')}")
    print(f"Variance: {stats.get_value('variance', 'variance')}")
    print(f"Sample variance: {stats.get_value('variance', 'sample_variance')}")

    # More observations accumulate
    stats.analyze([6.0, 7.0])
    print(f"Mean after more values: {stats.get_value('mean', 'mean')}")

    # Export to dictionary
    all_stats = stats.to_dict()
    print(f"\nTotal categories collected: {len(all_stats)}")


def example_with_config():
    """Example using Statistics with custom configuration."""
    rng = random.Random(1)
    values = [rng.gauss(10.0, 2.0) for _ in range(10000)]

    config = {
        'estimators': {
            'kurtosis': True,
            'quantile': {'p': 0.9},
            'histogram': {'min': 0.0, 'max': 20.0, 'bins': 10},
        }
    }

    stats = Statistics(values=values, config_dict=config)

    moments = stats.get_category('kurtosis')
    print(f"Mean: {moments['mean']:.3f} +/- {moments['error']:.3f}")
    print(f"Skewness: {moments['skewness']:.3f}, excess kurtosis: {moments['kurtosis']:.3f}")
    print(f"90th percentile: {stats.get_value('quantile', 'quantile'):.3f}")
    print(f"Histogram: {stats.get_value('histogram', 'bins')}")


def example_composite_and_merge():
    """Example declaring composites and merging partitions."""
    rng = random.Random(2)
    partitions = [[rng.uniform(-1.0, 1.0) for _ in range(1000)] for _ in range(4)]

    partials = [MinMaxMean.from_iter(partition) for partition in partitions]
    merged = merge_all(partials)
    print(f"min={merged.min():.4f} max={merged.max():.4f} mean={merged.mean():.4f} n={len(merged)}")

    MeanWithError = concatenate("MeanWithError", [
        ("avg", Variance, "mean", "error"),
    ])
    estimate = MeanWithError.from_iter(partitions[0]) + MeanWithError.from_iter(partitions[1])
    print(f"mean={estimate.mean():.4f} +/- {estimate.error():.4f}")


if __name__ == '__main__':
    print("=== Example 1: Basic Usage ===\n")
    example_basic_usage()

    print("\n\n=== Example 2: With Custom Config ===\n")
    example_with_config()

    print("\n\n=== Example 3: Composites and Merging ===\n")
    example_composite_and_merge()
