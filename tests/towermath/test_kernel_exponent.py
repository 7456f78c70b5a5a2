"""Tests for integer, real and generalized exponentiation."""

from fractions import Fraction

import pytest

from numtower.core.config import Settings
from numtower.core.errors import DivisionByZero, DomainError, PrecisionPolicyError, UnsupportedExponentKind
from numtower.math import (
    UNLIMITED,
    ComplexRect,
    Identity,
    ImaginaryUnit,
    Integer,
    Pi,
    PrecisionPolicy,
    Rational,
    Real,
    RealInfinity,
    Runtime,
    Zero,
    compute_integer_exponent,
    exp,
    generalized_exponent,
    ln,
)


class TestComputeIntegerExponent:
    """Test raising values to integer powers."""

    def test_real_cube(self):
        """Test a positive real power."""
        assert compute_integer_exponent(Real("3.0"), 3, PrecisionPolicy(5)) == 27

    def test_negative_exponent(self):
        """Test a negative power."""
        assert compute_integer_exponent(Real("2.0"), -2, PrecisionPolicy(5)) == Real("0.25")

    def test_negative_base(self):
        """Test that the sign survives odd powers only."""
        policy = PrecisionPolicy(5)
        assert compute_integer_exponent(Real("-2.0"), 3, policy) == -8
        assert compute_integer_exponent(Real("-2.0"), 2, policy) == 4

    def test_rounds_each_step(self):
        """Test that each multiplication is rounded to the policy."""
        result = compute_integer_exponent(Real("1.1"), 3, PrecisionPolicy(2))
        assert result == Real("1.3")

    def test_zero_exponent(self):
        """Test that x^0 is the canonical One."""
        result = compute_integer_exponent(Real("2.5"), 0)
        assert result == 1
        assert result.algebraic_identity is Identity.MULTIPLICATIVE

    def test_exact_kinds(self):
        """Test Integer and Rational bases stay exact."""
        assert compute_integer_exponent(Integer(2), 10) == Integer(1024)
        assert compute_integer_exponent(Integer(2), -2) == Rational(1, 4)
        assert compute_integer_exponent(Rational(2, 3), 2) == Rational(4, 9)
        assert compute_integer_exponent(Rational(2, 3), -2) == Rational(9, 4)

    def test_zero_to_negative_power(self):
        """Test that 0^-n is a division by zero."""
        with pytest.raises(DivisionByZero):
            compute_integer_exponent(Integer(0), -1)
        with pytest.raises(DivisionByZero):
            compute_integer_exponent(Real(0, PrecisionPolicy(5)), -2)

    def test_square_and_multiply(self):
        """Test exponents beyond the linear limit."""
        runtime = Runtime(Settings(LINEAR_EXPONENT_LIMIT=4))
        result = compute_integer_exponent(Real("1.5"), 10, PrecisionPolicy(20), runtime)
        assert result == Real("57.6650390625")

    def test_large_exponent(self, assert_close):
        """Test a long product stays close to the exact value."""
        result = compute_integer_exponent(Real("1.0001"), 2000, PrecisionPolicy(25))
        assert_close(result, Fraction(10001, 10000) ** 2000, digits=18)

    def test_complex_base(self):
        """Test complex powers by repeated squaring."""
        assert compute_integer_exponent(ComplexRect(1, 1), 2) == ComplexRect(0, 2)
        assert compute_integer_exponent(ComplexRect(1, 1), -1) == ComplexRect(Real("0.5"), Real("-0.5"))
        assert compute_integer_exponent(ImaginaryUnit.instance_for(), 4) == 1

    def test_infinity(self):
        """Test powers of infinity."""
        negative = RealInfinity(-1)
        assert compute_integer_exponent(negative, 2) == RealInfinity()
        assert compute_integer_exponent(negative, 3) == negative
        assert compute_integer_exponent(negative, -1) == 0


class TestExp:
    """Test the exponential function."""

    def test_zero(self):
        """Test e^0."""
        assert exp(0, PrecisionPolicy(10)) == 1

    def test_values(self, assert_close):
        """Test e^x against known values."""
        policy = PrecisionPolicy(15)
        assert_close(exp(1, policy), "2.71828182845905", digits=13)
        assert_close(exp(Real("-1"), policy), "0.367879441171442", digits=13)
        assert_close(exp(10, policy), "22026.4657948067", digits=13)
        assert_close(exp(Rational(1, 3), policy), "1.39561242508609", digits=13)

    def test_irrational(self):
        """Test that results are flagged irrational."""
        assert exp(1, PrecisionPolicy(10)).irrational

    def test_infinity(self):
        """Test e^inf and e^-inf."""
        assert exp(RealInfinity(), PrecisionPolicy(10)) == RealInfinity()
        assert exp(RealInfinity(-1), PrecisionPolicy(10)) == 0

    def test_unlimited_rejected(self):
        """Test that exp needs a finite policy."""
        with pytest.raises(PrecisionPolicyError):
            exp(1, UNLIMITED)


class TestGeneralizedExponent:
    """Test exponents of every real kind."""

    def test_zero_exponent(self):
        """Test that any base to the zero power is One."""
        assert generalized_exponent(Real("2.5"), Zero.instance_for()) == 1
        assert generalized_exponent(Real("2.5"), Real("0.0")) == 1

    def test_integer_exponent(self):
        """Test dispatch to integer exponentiation."""
        assert generalized_exponent(Real("1.5"), 2) == Real("2.25")
        assert generalized_exponent(Integer(3), Real("2.0")) == 9

    def test_rational_exponent_exact(self):
        """Test rational exponents with exact roots."""
        assert generalized_exponent(Integer(8), Rational(2, 3)) == 4
        assert generalized_exponent(Real("2.25"), Real("0.5")) == Real("1.5")
        assert generalized_exponent(Integer(-8), Rational(1, 3)) == -2

    def test_rational_exponent_inexact(self, assert_close):
        """Test rational exponents needing Newton roots."""
        result = generalized_exponent(Integer(2), Rational(1, 2), PrecisionPolicy(12))
        assert_close(result, "1.41421356237310", digits=11)
        assert result.irrational

    def test_rational_exponent_needs_finite_policy(self):
        """Test that inexact roots need a finite policy."""
        with pytest.raises(PrecisionPolicyError):
            generalized_exponent(Integer(2), Rational(1, 2))

    def test_even_root_of_negative(self):
        """Test that even roots of negative bases are rejected."""
        with pytest.raises(DomainError):
            generalized_exponent(Integer(-4), Rational(1, 2), PrecisionPolicy(10))

    def test_large_rational_exponent(self, assert_close):
        """Test rational exponents beyond the root limit."""
        result = generalized_exponent(Real(2), Rational(1, 1000), PrecisionPolicy(15))
        assert_close(result, "1.00069338746258", digits=13)

    def test_irrational_exponent(self, assert_close):
        """Test an irrational exponent through exp and ln."""
        policy = PrecisionPolicy(15)
        result = generalized_exponent(Real(2), Pi.instance_for(policy), PrecisionPolicy(12))
        assert_close(result, "8.82497782707629", digits=10)

    def test_irrational_exponent_of_zero_and_negative(self):
        """Test the edge cases of exp(y ln b)."""
        pi = Pi.instance_for(PrecisionPolicy(10))
        assert generalized_exponent(Real(0), pi, PrecisionPolicy(10)) == 0
        with pytest.raises(DivisionByZero):
            generalized_exponent(Real(0), -pi, PrecisionPolicy(10))
        with pytest.raises(DomainError):
            generalized_exponent(Real(-2), pi, PrecisionPolicy(10))

    def test_complex_exponent_rejected(self):
        """Test that complex exponents are unsupported."""
        with pytest.raises(UnsupportedExponentKind):
            generalized_exponent(Real(2), ComplexRect(1, 1))

    def test_complex_base_rational_exponent_rejected(self):
        """Test that complex bases only take integer exponents."""
        with pytest.raises(UnsupportedExponentKind):
            generalized_exponent(ImaginaryUnit.instance_for(), Rational(1, 2))

    def test_power_operator(self):
        """Test the ** operator."""
        assert Real(3, PrecisionPolicy(5)) ** 2 == 9
        assert 2 ** Integer(10) == 1024

    def test_exp_of_ln_roundtrip(self, assert_close):
        """Test that exponent and logarithm invert each other."""
        policy = PrecisionPolicy(20)
        value = Real("3.7")
        assert_close(exp(ln(value, policy), policy), value, digits=17)
