"""
Precision policies for tower arithmetic.

A PrecisionPolicy pairs a significant-digit budget with a rounding rule.
A digit count of zero means "unlimited": arithmetic is carried out exactly
and division must terminate. Binary operations on values with different
policies adopt the *less* precise policy, so results are never silently
refined beyond the least precise input.
"""

from __future__ import annotations

import decimal
from enum import Enum
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field

from ..core.errors import PrecisionPolicyError


class RoundingRule(str, Enum):
    """
    Standard decimal rounding modes.

    Values are the names used by the ``decimal`` module, so a rule can be
    handed to a ``decimal.Context`` directly.
    """

    HALF_UP = decimal.ROUND_HALF_UP
    HALF_EVEN = decimal.ROUND_HALF_EVEN
    HALF_DOWN = decimal.ROUND_HALF_DOWN
    UP = decimal.ROUND_UP
    DOWN = decimal.ROUND_DOWN
    CEILING = decimal.ROUND_CEILING
    FLOOR = decimal.ROUND_FLOOR
    ZERO_FIVE_UP = decimal.ROUND_05UP

    @classmethod
    def parse(cls, value: Any) -> RoundingRule:
        """
        Resolve a rounding rule from a member, a decimal constant or a name.

        Raises:
            PrecisionPolicyError: If the value names no known rounding mode
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            text = value.strip()
            try:
                return cls(text)
            except ValueError:
                pass
            name = text.upper()
            if name.startswith("ROUND_"):
                name = name[len("ROUND_"):]
            if name == "05UP":
                name = "ZERO_FIVE_UP"
            if name in cls.__members__:
                return cls[name]
        raise PrecisionPolicyError(f"Unknown rounding rule: {value!r}", rounding=str(value))


class PrecisionPolicy(BaseModel):
    """
    Significant digits plus a rounding rule.

    Immutable and hashable; caches key on the policy's value.

    Examples:
        >>> PrecisionPolicy(10)                    # 10 digits, round half up
        >>> PrecisionPolicy(5, RoundingRule.FLOOR)
        >>> PrecisionPolicy()                      # unlimited
    """

    model_config = ConfigDict(frozen=True)

    significant_digits: int = Field(default=0, description="Digit budget (0 = unlimited)")
    rounding: RoundingRule = Field(default=RoundingRule.HALF_UP, description="Rounding rule")

    def __init__(
        self,
        significant_digits: int = 0,
        rounding: RoundingRule | str = RoundingRule.HALF_UP,
        **kwargs,
    ):
        """
        Create a policy.

        Args:
            significant_digits: Number of significant digits, 0 for unlimited
            rounding: Rounding rule (member, decimal constant or name)

        Raises:
            PrecisionPolicyError: For negative or non-integral digit counts
                and unknown rounding rules
        """
        if isinstance(significant_digits, bool) or not isinstance(significant_digits, int):
            raise PrecisionPolicyError(
                f"Significant digits must be an integer, got {significant_digits!r}",
                significant_digits=str(significant_digits),
            )
        if significant_digits < 0:
            raise PrecisionPolicyError(
                f"Significant digits cannot be negative: {significant_digits}",
                significant_digits=significant_digits,
            )
        super().__init__(
            significant_digits=significant_digits,
            rounding=RoundingRule.parse(rounding),
            **kwargs,
        )

    @property
    def is_unlimited(self) -> bool:
        return self.significant_digits == 0

    def decimal_context(self, extra_digits: int = 0) -> decimal.Context:
        """
        Build a fresh decimal context implementing this policy.

        Unlimited policies use the largest precision the decimal module
        supports, which keeps addition and multiplication exact.
        """
        if self.is_unlimited:
            precision = decimal.MAX_PREC
        else:
            precision = self.significant_digits + extra_digits
        return decimal.Context(
            prec=precision,
            rounding=self.rounding.value,
            Emax=decimal.MAX_EMAX,
            Emin=decimal.MIN_EMIN,
            traps=[decimal.InvalidOperation, decimal.DivisionByZero, decimal.Overflow],
        )

    def with_extra_digits(self, digits: int) -> PrecisionPolicy:
        """Working policy with guard digits; unlimited stays unlimited."""
        if self.is_unlimited or digits == 0:
            return self
        return PrecisionPolicy(self.significant_digits + digits, self.rounding)

    def working(self, digits: int) -> PrecisionPolicy:
        """
        Internal policy for iterative methods: guard digits, rounding half even.

        Directed rounding (UP, CEILING) moves a sum by one unit for every
        tiny term, so series and Newton loops would never settle under it.
        The caller's rule is applied only when the result is rounded back.
        """
        if self.is_unlimited:
            return self
        return PrecisionPolicy(self.significant_digits + digits, RoundingRule.HALF_EVEN)

    def require_finite(self, operation: str) -> None:
        """
        Reject the unlimited policy for operations whose results never terminate.

        Raises:
            PrecisionPolicyError: If this policy is unlimited
        """
        if self.is_unlimited:
            raise PrecisionPolicyError(
                f"{operation} requires a finite precision policy",
                operation=operation,
            )

    def __str__(self) -> str:
        if self.is_unlimited:
            return "unlimited"
        return f"{self.significant_digits} digits, {self.rounding.name}"


UNLIMITED = PrecisionPolicy()


def reconcile(first: PrecisionPolicy, second: PrecisionPolicy) -> PrecisionPolicy:
    """
    Choose the policy for a binary operation.

    The lower finite precision wins; unlimited counts as infinitely precise.
    On a tie the first operand's policy (and rounding rule) is kept.

    Example:
        reconcile(PrecisionPolicy(5), PrecisionPolicy(10)) → PrecisionPolicy(5)
    """
    if first.is_unlimited:
        return second
    if second.is_unlimited:
        return first
    if second.significant_digits < first.significant_digits:
        return second
    return first


def infer_policy(values: Iterable[Any]) -> PrecisionPolicy:
    """
    Minimum finite precision across a collection.

    Accepts policies or anything exposing a ``policy`` attribute; returns
    UNLIMITED for an empty collection or when every entry is unlimited.
    """
    result = UNLIMITED
    for value in values:
        policy = value if isinstance(value, PrecisionPolicy) else getattr(value, "policy", None)
        if policy is not None:
            result = reconcile(result, policy)
    return result
