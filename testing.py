"""
Helpers for testing code that uses estimators.
"""


def assert_almost_eq(a: float, b: float, prec: float) -> None:
    """
    Assert that two numbers are almost equal to each other.

    Args:
        a: Left value
        b: Right value
        prec: Largest accepted absolute difference

    Raises:
        AssertionError: If ``abs(a - b) > prec``, or if the difference is NaN
    """
    diff = abs(a - b)
    if not diff <= prec:
        raise AssertionError(
            f"assertion failed: `abs(left - right) = {diff:.1e} < {prec:e}`, "
            f"(left: `{a}`, right: `{b}`)"
        )
