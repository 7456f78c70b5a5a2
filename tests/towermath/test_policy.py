"""Tests for precision policies and their reconciliation."""

import decimal

import pytest

from numtower.core.errors import PrecisionPolicyError
from numtower.math import Integer, Real
from numtower.math.policy import UNLIMITED, PrecisionPolicy, RoundingRule, infer_policy, reconcile


class TestRoundingRule:
    """Test rounding rule resolution."""

    def test_values_are_decimal_constants(self):
        """Test that rule values can be handed to the decimal module."""
        assert RoundingRule.HALF_EVEN.value == decimal.ROUND_HALF_EVEN
        assert RoundingRule.FLOOR.value == decimal.ROUND_FLOOR

    def test_parse_member(self):
        """Test parsing an existing member."""
        assert RoundingRule.parse(RoundingRule.UP) is RoundingRule.UP

    def test_parse_decimal_constant(self):
        """Test parsing decimal module constants."""
        assert RoundingRule.parse(decimal.ROUND_HALF_DOWN) is RoundingRule.HALF_DOWN

    def test_parse_names(self):
        """Test parsing names with and without prefix, any case."""
        assert RoundingRule.parse("half_even") is RoundingRule.HALF_EVEN
        assert RoundingRule.parse("ceiling") is RoundingRule.CEILING
        assert RoundingRule.parse("05UP") is RoundingRule.ZERO_FIVE_UP

    def test_parse_unknown(self):
        """Test that unknown rules are rejected."""
        with pytest.raises(PrecisionPolicyError):
            RoundingRule.parse("sideways")


class TestPrecisionPolicy:
    """Test policy construction and helpers."""

    def test_defaults(self):
        """Test that the default policy is unlimited with half-up rounding."""
        policy = PrecisionPolicy()
        assert policy.is_unlimited
        assert policy.rounding is RoundingRule.HALF_UP
        assert policy == UNLIMITED

    def test_finite_policy(self):
        """Test a finite policy."""
        policy = PrecisionPolicy(10, "half_even")
        assert policy.significant_digits == 10
        assert policy.rounding is RoundingRule.HALF_EVEN
        assert not policy.is_unlimited

    def test_negative_digits_rejected(self):
        """Test that negative digit counts are rejected."""
        with pytest.raises(PrecisionPolicyError):
            PrecisionPolicy(-1)

    def test_non_integer_digits_rejected(self):
        """Test that non-integral digit counts are rejected."""
        with pytest.raises(PrecisionPolicyError):
            PrecisionPolicy(2.5)
        with pytest.raises(PrecisionPolicyError):
            PrecisionPolicy(True)

    def test_value_semantics(self):
        """Test that equal policies compare and hash equal."""
        assert PrecisionPolicy(5) == PrecisionPolicy(5)
        assert hash(PrecisionPolicy(5)) == hash(PrecisionPolicy(5))
        assert PrecisionPolicy(5) != PrecisionPolicy(5, RoundingRule.FLOOR)

    def test_immutable(self):
        """Test that policies cannot be mutated."""
        policy = PrecisionPolicy(5)
        with pytest.raises(Exception):
            policy.significant_digits = 6

    def test_with_extra_digits(self):
        """Test guard digit widening."""
        widened = PrecisionPolicy(5, RoundingRule.DOWN).with_extra_digits(3)
        assert widened.significant_digits == 8
        assert widened.rounding is RoundingRule.DOWN
        assert UNLIMITED.with_extra_digits(3) is UNLIMITED

    def test_working(self):
        """Test the internal policy used by iterative methods."""
        work = PrecisionPolicy(5, RoundingRule.CEILING).working(3)
        assert work.significant_digits == 8
        assert work.rounding is RoundingRule.HALF_EVEN
        assert PrecisionPolicy(5, RoundingRule.UP).working(0) == PrecisionPolicy(5, RoundingRule.HALF_EVEN)
        assert UNLIMITED.working(3) is UNLIMITED

    def test_decimal_context(self):
        """Test the decimal context built from a policy."""
        context = PrecisionPolicy(4, RoundingRule.FLOOR).decimal_context()
        assert context.prec == 4
        assert context.rounding == decimal.ROUND_FLOOR
        assert context.divide(decimal.Decimal(2), decimal.Decimal(3)) == decimal.Decimal("0.6666")

    def test_require_finite(self):
        """Test that only the unlimited policy is rejected."""
        PrecisionPolicy(3).require_finite("ln")
        with pytest.raises(PrecisionPolicyError):
            UNLIMITED.require_finite("ln")

    def test_str(self):
        """Test string rendering."""
        assert str(UNLIMITED) == "unlimited"
        assert str(PrecisionPolicy(7)) == "7 digits, HALF_UP"


class TestReconcile:
    """Test policy reconciliation for binary operations."""

    def test_lower_precision_wins(self):
        """Test that the less precise policy is chosen."""
        assert reconcile(PrecisionPolicy(5), PrecisionPolicy(10)).significant_digits == 5
        assert reconcile(PrecisionPolicy(10), PrecisionPolicy(5)).significant_digits == 5

    def test_unlimited_is_most_precise(self):
        """Test that unlimited never wins against a finite policy."""
        assert reconcile(UNLIMITED, PrecisionPolicy(8)) == PrecisionPolicy(8)
        assert reconcile(PrecisionPolicy(8), UNLIMITED) == PrecisionPolicy(8)
        assert reconcile(UNLIMITED, UNLIMITED) is UNLIMITED

    def test_tie_keeps_first(self):
        """Test that ties keep the first operand's rounding rule."""
        first = PrecisionPolicy(5, RoundingRule.FLOOR)
        assert reconcile(first, PrecisionPolicy(5)) is first

    def test_infer_policy(self):
        """Test the minimum precision across a collection."""
        values = [Real("1.5", PrecisionPolicy(8)), Integer(3), PrecisionPolicy(6)]
        assert infer_policy(values).significant_digits == 6
        assert infer_policy([]) is UNLIMITED
