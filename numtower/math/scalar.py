"""
Arbitrary-precision scalar representation.

A Scalar wraps a ``decimal.Decimal`` magnitude together with an exactness
flag and the PrecisionPolicy it was produced under. All decimal arithmetic
in the tower goes through this type, which keeps the bookkeeping of
"was anything rounded away?" in one place.
"""

from __future__ import annotations

import decimal
from decimal import Decimal
from fractions import Fraction
from typing import Callable

from pydantic import BaseModel, ConfigDict, Field

from ..core.errors import DivisionByZero, InvalidLiteral, NonTerminatingExpansion
from .policy import UNLIMITED, PrecisionPolicy, reconcile


def terminating_decimal(numerator: int, denominator: int) -> Decimal:
    """
    Exact decimal value of numerator/denominator.

    Raises:
        NonTerminatingExpansion: If the denominator has prime factors other
            than 2 and 5
    """
    if denominator < 0:
        numerator, denominator = -numerator, -denominator
    remaining = denominator
    twos = fives = 0
    while remaining % 2 == 0:
        remaining //= 2
        twos += 1
    while remaining % 5 == 0:
        remaining //= 5
        fives += 1
    if remaining != 1:
        raise NonTerminatingExpansion(numerator, denominator)
    places = max(twos, fives)
    scaled = numerator * (10 ** places // denominator)
    return Decimal(scaled).scaleb(-places, context=UNLIMITED.decimal_context())


def _round(value: Decimal, policy: PrecisionPolicy) -> tuple[Decimal, bool]:
    """Apply a policy to a decimal; returns the result and whether it was exact."""
    context = policy.decimal_context()
    result = context.plus(value)
    return result, not context.flags[decimal.Inexact]


class Scalar(BaseModel):
    """
    Decimal magnitude with exactness and precision bookkeeping.

    Examples:
        >>> Scalar("3.25")                           # exact, unlimited
        >>> Scalar(7, PrecisionPolicy(3))            # exact, 3 digits
        >>> Scalar("3.14159", PrecisionPolicy(3))    # 3.14, inexact
    """

    model_config = ConfigDict(frozen=True)

    magnitude: Decimal = Field(description="The decimal value")
    exact: bool = Field(default=True, description="False once rounding has occurred")
    policy: PrecisionPolicy = Field(default=UNLIMITED, description="Precision policy")

    def __init__(
        self,
        value: str | int | Decimal | Scalar = 0,
        policy: PrecisionPolicy | None = None,
        exact: bool = True,
        **kwargs,
    ):
        """
        Create a scalar.

        Args:
            value: Decimal string literal, integer, Decimal or another Scalar
            policy: Precision policy (None = keep the source scalar's policy,
                or unlimited)
            exact: Pass False when the value is already known to be approximate

        Raises:
            InvalidLiteral: If the value is not a finite decimal number
        """
        if isinstance(value, Scalar):
            source = value.magnitude
            exact = exact and value.exact
            if policy is None:
                policy = value.policy
        elif isinstance(value, bool):
            source = Decimal(int(value))
        elif isinstance(value, int):
            source = Decimal(value)
        elif isinstance(value, Decimal):
            source = value
        elif isinstance(value, str):
            try:
                source = Decimal(value.strip().replace("_", ""))
            except decimal.InvalidOperation as e:
                raise InvalidLiteral(value, "decimal number") from e
        else:
            raise InvalidLiteral(value, "decimal number")

        if not source.is_finite():
            raise InvalidLiteral(value, "finite decimal number")

        policy = policy if policy is not None else UNLIMITED
        magnitude, unrounded = _round(source, policy)
        super().__init__(magnitude=magnitude, exact=exact and unrounded, policy=policy, **kwargs)

    @classmethod
    def from_fraction(cls, numerator: int, denominator: int, policy: PrecisionPolicy) -> Scalar:
        """
        Decimal value of numerator/denominator with a single rounding.

        Raises:
            DivisionByZero: If denominator is zero
            NonTerminatingExpansion: Under the unlimited policy, if the
                quotient does not terminate
        """
        if denominator == 0:
            raise DivisionByZero()
        if policy.is_unlimited:
            return cls(terminating_decimal(numerator, denominator), policy)
        context = policy.decimal_context()
        result = context.divide(Decimal(numerator), Decimal(denominator))
        return cls(result, policy, not context.flags[decimal.Inexact])

    # Arithmetic

    def _combine(
        self,
        other: Scalar,
        operation: Callable[[decimal.Context, Decimal, Decimal], Decimal],
    ) -> Scalar:
        policy = reconcile(self.policy, other.policy)
        context = policy.decimal_context()
        result = operation(context, self.magnitude, other.magnitude)
        exact = self.exact and other.exact and not context.flags[decimal.Inexact]
        return Scalar(result, policy, exact)

    def add(self, other: Scalar) -> Scalar:
        return self._combine(other, lambda ctx, a, b: ctx.add(a, b))

    def subtract(self, other: Scalar) -> Scalar:
        return self._combine(other, lambda ctx, a, b: ctx.subtract(a, b))

    def multiply(self, other: Scalar) -> Scalar:
        return self._combine(other, lambda ctx, a, b: ctx.multiply(a, b))

    def divide(self, other: Scalar) -> Scalar:
        """
        Divide under the reconciled policy.

        Under the unlimited policy the quotient must terminate.

        Raises:
            DivisionByZero: If other is zero
            NonTerminatingExpansion: If the exact quotient does not terminate
        """
        if other.is_zero():
            raise DivisionByZero()
        policy = reconcile(self.policy, other.policy)
        if policy.is_unlimited:
            quotient = self.to_fraction() / other.to_fraction()
            result = terminating_decimal(quotient.numerator, quotient.denominator)
            return Scalar(result, policy, self.exact and other.exact)
        return self._combine(other, lambda ctx, a, b: ctx.divide(a, b))

    def negate(self) -> Scalar:
        return Scalar(self.magnitude.copy_negate(), self.policy, self.exact)

    def abs(self) -> Scalar:
        return Scalar(self.magnitude.copy_abs(), self.policy, self.exact)

    def scaleb(self, places: int) -> Scalar:
        """Multiply by a power of ten; never rounds."""
        return Scalar(self.magnitude.scaleb(places, context=UNLIMITED.decimal_context()), self.policy, self.exact)

    def round_to(self, policy: PrecisionPolicy) -> Scalar:
        """Copy under a different policy, rounding if needed."""
        return Scalar(self, policy)

    def strip(self) -> Scalar:
        """Same value with trailing fractional zeros removed (1.500 → 1.5)."""
        if self.is_integral():
            stripped = self.magnitude.to_integral_value()
        else:
            stripped = self.magnitude.normalize(UNLIMITED.decimal_context())
        return Scalar(stripped, self.policy, self.exact)

    # Queries

    def compare(self, other: Scalar) -> int:
        if self.magnitude < other.magnitude:
            return -1
        if self.magnitude > other.magnitude:
            return 1
        return 0

    def sign(self) -> int:
        if self.magnitude.is_zero():
            return 0
        return -1 if self.magnitude.is_signed() else 1

    def is_zero(self) -> bool:
        return self.magnitude.is_zero()

    def is_integral(self) -> bool:
        return self.magnitude == self.magnitude.to_integral_value()

    def adjusted(self) -> int:
        """Exponent of the most significant digit."""
        return self.magnitude.adjusted()

    def to_fraction(self) -> Fraction:
        return Fraction(self.magnitude)

    def __str__(self) -> str:
        magnitude = self.magnitude.copy_abs() if self.is_zero() else self.magnitude
        if abs(magnitude.adjusted()) < 30:
            return format(magnitude, "f")
        return str(magnitude)
