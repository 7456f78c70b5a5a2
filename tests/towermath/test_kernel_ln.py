"""Tests for logarithms and scientific notation."""

import pytest

from numtower.core.errors import CoercionError, DomainError, PrecisionPolicyError
from numtower.math import (
    UNLIMITED,
    ComplexRect,
    Integer,
    PrecisionPolicy,
    Rational,
    Real,
    RealInfinity,
    Sign,
    exp,
    exponent,
    in_scientific_notation,
    ln,
    log,
    mantissa,
)


class TestLnSpecialValues:
    """Test the exact and domain cases of ln."""

    def test_ln_one(self):
        """Test that ln(1) is exactly zero, even without a finite policy."""
        result = ln(1)
        assert result == 0
        assert result.is_exact()
        assert ln(Real("1.000"), PrecisionPolicy(10)) == 0

    def test_ln_zero(self):
        """Test that ln(0) is negative infinity."""
        result = ln(Real(0), PrecisionPolicy(10))
        assert isinstance(result, RealInfinity)
        assert result.sign() is Sign.NEGATIVE

    def test_ln_negative(self):
        """Test that negative arguments are rejected."""
        with pytest.raises(DomainError):
            ln(Real("-1"), PrecisionPolicy(10))

    def test_ln_infinity(self):
        """Test ln of positive infinity."""
        assert ln(RealInfinity(), PrecisionPolicy(10)) == RealInfinity()

    def test_ln_needs_finite_policy(self):
        """Test that ln(2) has no exact result."""
        with pytest.raises(PrecisionPolicyError):
            ln(2, UNLIMITED)

    def test_ln_complex_argument(self):
        """Test that complex arguments must lie on the real axis."""
        assert ln(ComplexRect(1, 0), PrecisionPolicy(10)) == 0
        with pytest.raises(CoercionError):
            ln(ComplexRect(1, 1), PrecisionPolicy(10))


class TestLnValues:
    """Test ln across its three evaluation ranges."""

    def test_near_one(self, assert_close):
        """Test arguments in (0, 2)."""
        policy = PrecisionPolicy(15)
        assert_close(ln(Real("1.5"), policy), "0.405465108108164", digits=13)
        assert_close(ln(Real("0.5"), policy), "-0.693147180559945", digits=13)
        assert_close(ln(Real("1.000001"), policy), "9.99999500000333e-7", digits=12)

    def test_small_argument(self, assert_close):
        """Test arguments far below one."""
        assert_close(ln(Real("0.001"), PrecisionPolicy(15)), "-6.90775527898214", digits=13)

    def test_middle_range(self, assert_close):
        """Test arguments in [2, 10]."""
        policy = PrecisionPolicy(15)
        assert_close(ln(2, policy), "0.693147180559945", digits=13)
        assert_close(ln(10, policy), "2.30258509299405", digits=13)

    def test_large_argument(self, assert_close):
        """Test arguments above ten."""
        policy = PrecisionPolicy(15)
        assert_close(ln(100, policy), "4.60517018598809", digits=13)
        assert_close(ln(Real("1e50"), policy), "115.129254649702", digits=13)

    def test_exact_rational_argument(self, assert_close):
        """Test a rational argument with a non-terminating expansion."""
        assert_close(ln(Rational(1, 3), PrecisionPolicy(15)), "-1.09861228866811", digits=13)

    def test_irrational(self):
        """Test that results are flagged irrational."""
        assert ln(3, PrecisionPolicy(10)).irrational

    @pytest.mark.parametrize("value", ["0.25", "1.5", "7", "12345", "0.00001"])
    def test_exp_inverts_ln(self, value, assert_close):
        """Test exp(ln(x)) == x."""
        policy = PrecisionPolicy(20)
        assert_close(exp(ln(Real(value), policy), policy), value, digits=16)


class TestLog:
    """Test logarithms to other bases."""

    def test_log_base_two(self, assert_close):
        """Test a power of the base."""
        assert_close(log(8, 2, PrecisionPolicy(15)), 3, digits=13)

    def test_log_of_one(self):
        """Test that log(1) is zero in any base."""
        assert log(1, 10, PrecisionPolicy(10)) == 0

    def test_log_base_ten(self, assert_close):
        """Test a common logarithm."""
        assert_close(log(2, 10, PrecisionPolicy(15)), "0.301029995663981", digits=13)

    def test_invalid_bases(self):
        """Test that bases must be positive and not one."""
        with pytest.raises(DomainError):
            log(5, 1, PrecisionPolicy(10))
        with pytest.raises(DomainError):
            log(5, -2, PrecisionPolicy(10))
        with pytest.raises(DomainError):
            log(5, 0, PrecisionPolicy(10))


class TestScientificNotation:
    """Test mantissa and exponent decomposition."""

    def test_large_value(self):
        """Test a value above one."""
        assert exponent(Real("12345")) == 4
        assert mantissa(Real("12345")) == Real("1.2345")
        assert in_scientific_notation(Integer(12345)) == "1.2345E+4"

    def test_small_value(self):
        """Test a value below one."""
        assert exponent(Real("0.00125")) == -3
        assert in_scientific_notation(Real("0.00125")) == "1.25E-3"

    def test_negative_value(self):
        """Test that the mantissa keeps the sign."""
        assert mantissa(Real("-450")) == Real("-4.5")
        assert exponent(Real("-450")) == 2

    def test_zero(self):
        """Test the decomposition of zero."""
        assert exponent(Real(0)) == 0
        assert mantissa(Real(0)) == 0
