"""
Shared pytest fixtures for the numeric tower tests.

This module provides:
- Common precision policies
- An isolated Runtime per test (fresh caches, restored afterwards)
- A helper for comparing inexact results within a relative tolerance
"""

from fractions import Fraction
from typing import Any

import pytest

from numtower.math import PrecisionPolicy, Runtime, as_tower, set_runtime


@pytest.fixture
def policy10() -> PrecisionPolicy:
    """Ten significant digits, half-up rounding."""
    return PrecisionPolicy(10)


@pytest.fixture
def policy20() -> PrecisionPolicy:
    """Twenty significant digits, half-up rounding."""
    return PrecisionPolicy(20)


@pytest.fixture(autouse=True)
def runtime():
    """Install a fresh default Runtime for the test and restore the previous one."""
    fresh = Runtime()
    previous = set_runtime(fresh)
    yield fresh
    set_runtime(previous)


@pytest.fixture
def assert_close():
    """Helper to assert that a tower value is within a relative tolerance of an expected value."""
    def _assert_close(actual: Any, expected: Any, digits: int = 8) -> None:
        """
        Assert |actual - expected| <= |expected| * 10^-digits.

        Args:
            actual: Tower value (or Python number) under test
            expected: Expected value (tower value, int, Fraction or numeric string)
            digits: Number of matching significant digits required
        """
        left = as_tower(actual).to_fraction()
        right = as_tower(expected).to_fraction()
        tolerance = abs(right) * Fraction(1, 10 ** digits) if right else Fraction(1, 10 ** digits)
        assert abs(left - right) <= tolerance, f"{actual} is not within 1e-{digits} of {expected}"

    return _assert_close
