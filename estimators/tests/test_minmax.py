import math

import pytest

from iterstats.estimators.mean import Mean
from iterstats.estimators.minmax import Max, Min


def test_min_max_scenario():
    values = [3.0, 1.0, 5.0, 2.0, 4.0]
    assert Min.from_iter(values).min() == 1.0
    assert Max.from_iter(values).max() == 5.0


def test_empty_is_nan():
    assert math.isnan(Min().min())
    assert math.isnan(Max().max())
    assert Min().is_empty()


def test_single_observation():
    assert Min.from_value(-2.5).min() == -2.5
    assert Max.from_value(-2.5).max() == -2.5
    assert len(Min.from_value(1.0)) == 1


def test_negative_values():
    """The first observation sets the extremum, not a zero default."""
    assert Max.from_iter([-3.0, -7.0]).max() == -3.0
    assert Min.from_iter([3.0, 7.0]).min() == 3.0


def test_merge():
    a = Min.from_iter([4.0, 6.0])
    b = Min.from_iter([5.0, 2.0])
    a.merge(b)
    assert a.min() == 2.0
    assert len(a) == 4

    c = Max.from_iter([4.0, 6.0])
    c.merge(Max.from_iter([5.0, 2.0]))
    assert c.max() == 6.0


def test_merge_with_empty_is_identity():
    full = Min.from_iter([4.0, 6.0])
    left = full + Min()
    right = Min() + full
    assert left.min() == right.min() == 4.0
    assert len(left) == len(right) == 2

    assert (Max() + Max.from_value(9.0)).max() == 9.0


def test_merge_type_mismatch():
    with pytest.raises(TypeError):
        Min().merge(Max())
    with pytest.raises(TypeError):
        Max().merge(Mean())


def test_nan_after_first_is_ignored():
    assert Min.from_iter([2.0, float('nan'), 1.0]).min() == 1.0
    assert Max.from_iter([2.0, float('nan'), 1.0]).max() == 2.0


def test_infinity():
    assert Min.from_iter([1.0, float('-inf')]).min() == float('-inf')
    assert Max.from_iter([float('inf'), 1.0]).max() == float('inf')


def test_dict_round_trip():
    restored = Max.from_dict(Max.from_iter([1.0, 8.0]).to_dict())
    assert restored.max() == 8.0
    assert len(restored) == 2
