"""Tests for kernel convergence under every rounding rule and iteration limit."""

import logging
from decimal import Decimal

import pytest

from numtower.core.config import Settings
from numtower.core.errors import ConvergenceFailure
from numtower.math import (
    ComplexPolar,
    PrecisionPolicy,
    Real,
    RoundingRule,
    Runtime,
    exp,
    ln,
    nth_root,
)
from numtower.math.trig import cos


@pytest.fixture
def exhausted_runtime():
    """Runtime allowing a single iteration per loop."""
    return Runtime(Settings(MAX_ITERATIONS=1))


class TestRoundingRules:
    """Test that iterative methods settle whatever the caller's rounding rule."""

    @pytest.mark.parametrize("rule", list(RoundingRule))
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("1.5", "0.405465108108164382"),
            ("3", "1.098612288668109691"),
            ("50", "3.912023005428146059"),
        ],
    )
    def test_ln(self, rule, value, expected, assert_close):
        """Test ln on the Newton, series and decomposition branches."""
        policy = PrecisionPolicy(12, rule)
        result = ln(Real(value, policy), policy)
        assert_close(result, expected, digits=10)
        assert result.policy == policy

    @pytest.mark.parametrize("rule", list(RoundingRule))
    def test_exp(self, rule, assert_close):
        """Test e^1 under each rounding rule."""
        policy = PrecisionPolicy(12, rule)
        assert_close(exp(Real(1, policy), policy), "2.718281828459045235", digits=10)

    @pytest.mark.parametrize("rule", list(RoundingRule))
    def test_nth_root(self, rule, assert_close):
        """Test the Newton cube root of two under each rounding rule."""
        policy = PrecisionPolicy(12, rule)
        assert_close(nth_root(Real(2, policy), 3, policy), "1.259921049894873165", digits=10)

    @pytest.mark.parametrize("rule", list(RoundingRule))
    def test_polar_components(self, rule, assert_close):
        """Test cosine and sine of a polar angle under each rounding rule."""
        policy = PrecisionPolicy(12, rule)
        rect = ComplexPolar(1, Real("0.5", policy), policy).to_rect()
        assert_close(rect.real, "0.877582561890372716", digits=10)
        assert_close(rect.imaginary, "0.479425538604203000", digits=10)

    def test_caller_rule_applies_to_result(self):
        """Test that the final rounding follows the caller's rule."""
        down = ln(Real(3), PrecisionPolicy(6, RoundingRule.DOWN))
        up = ln(Real(3), PrecisionPolicy(6, RoundingRule.UP))
        assert down.scalar.magnitude == Decimal("1.09861")
        assert up.scalar.magnitude == Decimal("1.09862")


class TestIterationLimit:
    """Test that exhausted iteration limits raise ConvergenceFailure."""

    def test_ln(self, exhausted_runtime):
        """Test the Newton logarithm."""
        with pytest.raises(ConvergenceFailure):
            ln(Real("1.5"), PrecisionPolicy(12), exhausted_runtime)

    def test_exp(self, exhausted_runtime):
        """Test the exponential series."""
        with pytest.raises(ConvergenceFailure) as info:
            exp(Real(1), PrecisionPolicy(12), exhausted_runtime)
        assert info.value.iterations == 1
        assert info.value.details["method"] == "exp"

    def test_nth_root(self, exhausted_runtime):
        """Test the Newton root."""
        with pytest.raises(ConvergenceFailure) as info:
            nth_root(Real(2), 3, PrecisionPolicy(12), exhausted_runtime)
        assert info.value.details["method"] == "nth_root"

    def test_cos(self, exhausted_runtime):
        """Test the cosine series."""
        with pytest.raises(ConvergenceFailure) as info:
            cos(Decimal("0.5"), PrecisionPolicy(12), exhausted_runtime)
        assert info.value.details["method"] == "cos"

    def test_failure_logged_as_warning(self, exhausted_runtime, caplog):
        """Test that an exhausted limit is logged before the error is raised."""
        caplog.set_level(logging.WARNING, logger="numtower")
        with pytest.raises(ConvergenceFailure):
            cos(Decimal("0.5"), PrecisionPolicy(12), exhausted_runtime)
        records = [record for record in caplog.records if record.getMessage() == "Iteration budget exhausted"]
        assert len(records) == 1
        assert records[0].levelno == logging.WARNING
        assert records[0].extra_data["method"] == "cos"
        assert records[0].extra_data["iterations"] == 1
