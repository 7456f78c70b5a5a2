"""
Integer tower kind.

Integers are always exact: their arithmetic is Python's unbounded ``int``
arithmetic, and the precision policy they carry only takes effect when
they are coerced to Real or Complex.
"""

from __future__ import annotations

import math
from fractions import Fraction
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

from ..core.errors import CoercionError, DivisionByZero, DomainError, InvalidLiteral
from .policy import UNLIMITED, PrecisionPolicy
from .value import Sign, TowerKind, TowerValue


class Integer(TowerValue, BaseModel):
    """
    Exact integer value.

    Examples:
        >>> Integer(42)
        >>> Integer("-17")
        >>> Integer(7) / Integer(2)   # Rational(7/2)
    """

    model_config = ConfigDict(frozen=True)

    kind: ClassVar[TowerKind] = TowerKind.INTEGER

    value: int = Field(description="The integer value")
    policy: PrecisionPolicy = Field(default=UNLIMITED, description="Precision policy")

    def __init__(self, value: int | str = 0, policy: PrecisionPolicy | None = None, **kwargs):
        """
        Initialize an Integer.

        Args:
            value: Python int or a decimal integer literal
            policy: Policy applied when this value is coerced to Real or Complex
        """
        if isinstance(value, str):
            try:
                value = int(value.strip().replace("_", ""))
            except ValueError as e:
                raise InvalidLiteral(value, "integer") from e
        elif not isinstance(value, int):
            raise InvalidLiteral(value, "integer")
        super().__init__(value=int(value), policy=policy if policy is not None else UNLIMITED, **kwargs)

    def is_exact(self) -> bool:
        return True

    def with_policy(self, policy: PrecisionPolicy) -> Integer:
        if policy == self.policy:
            return self
        return Integer(self.value, policy)

    # Arithmetic

    def _add(self, other: Integer) -> Integer:
        return Integer(self.value + other.value, self.policy)

    def _subtract(self, other: Integer) -> Integer:
        return Integer(self.value - other.value, self.policy)

    def _multiply(self, other: Integer) -> Integer:
        return Integer(self.value * other.value, self.policy)

    def _divide(self, other: Integer) -> TowerValue:
        """Exact quotient: an Integer when it divides evenly, else a Rational."""
        if other.value == 0:
            raise DivisionByZero()
        quotient, remainder = divmod(self.value, other.value)
        if remainder == 0:
            return Integer(quotient, self.policy)

        from .rational import Rational

        return Rational(self.value, other.value, self.policy)

    def negate(self) -> Integer:
        return Integer(-self.value, self.policy)

    def invert(self) -> TowerValue:
        return Integer(1, self.policy)._divide(self)

    def magnitude(self) -> Integer:
        return Integer(abs(self.value), self.policy)

    def sign(self) -> Sign:
        return Sign.of(self.value)

    def sqrt(self) -> TowerValue:
        """
        Square root.

        Perfect squares stay Integer; anything else is computed as a Real
        (or Complex, for negative values) under this value's policy.
        """
        if self.is_perfect_square():
            return Integer(math.isqrt(self.value), self.policy)
        return self.coerce_to(TowerKind.REAL).sqrt()

    def pow(self, exponent: int) -> TowerValue:
        """
        Exact power.

        Negative exponents produce a Rational.

        Raises:
            DivisionByZero: For zero raised to a negative power
        """
        if exponent >= 0:
            return Integer(self.value ** exponent, self.policy)
        if self.value == 0:
            raise DivisionByZero("pow")

        from .rational import Rational

        return Rational(1, self.value ** -exponent, self.policy)

    def modulus(self, other: Any) -> Integer:
        divisor = other.value if isinstance(other, Integer) else int(other)
        if divisor == 0:
            raise DivisionByZero("modulus")
        return Integer(self.value % divisor, self.policy)

    def isqrt(self) -> Integer:
        """Integer square root (floor)."""
        if self.value < 0:
            raise DomainError("isqrt", "negative argument", value=self.value)
        return Integer(math.isqrt(self.value), self.policy)

    # Integer utilities

    def is_even(self) -> bool:
        return self.value % 2 == 0

    def is_odd(self) -> bool:
        return self.value % 2 != 0

    def is_perfect_square(self) -> bool:
        if self.value < 0:
            return False
        root = math.isqrt(self.value)
        return root * root == self.value

    def number_of_digits(self) -> int:
        """Count of decimal digits, ignoring sign (0 has one digit)."""
        return len(str(abs(self.value)))

    def digit_at(self, position: int) -> int:
        """
        Decimal digit at a position, counted from the units digit (position 0).

        Raises:
            IndexError: If position is outside the number
        """
        text = str(abs(self.value))
        if position < 0 or position >= len(text):
            raise IndexError(f"Digit position {position} out of range for {self.value}")
        return int(text[len(text) - 1 - position])

    def digits(self, radix: int = 10) -> list[int]:
        """Digits of the magnitude in the given radix, most significant first."""
        if radix < 2:
            raise DomainError("digits", "radix must be at least 2", radix=radix)
        remaining = abs(self.value)
        if remaining == 0:
            return [0]
        result = []
        while remaining:
            remaining, digit = divmod(remaining, radix)
            result.append(digit)
        result.reverse()
        return result

    # Coercion

    def coerce_to(self, kind: TowerKind) -> TowerValue:
        """Integers coerce to every kind."""
        if kind is TowerKind.INTEGER:
            return self
        if kind is TowerKind.RATIONAL:
            from .rational import Rational

            return Rational(self.value, 1, self.policy)
        if kind is TowerKind.REAL:
            from .real import Real

            return Real(self.value, self.policy)
        if kind is TowerKind.COMPLEX:
            from .complex import ComplexRect

            return ComplexRect(self.coerce_to(TowerKind.REAL), Integer(0, self.policy), self.policy)
        raise CoercionError(f"Unknown kind {kind!r}", source_kind=self.kind, target_kind=kind)

    def to_fraction(self) -> Fraction:
        return Fraction(self.value)

    def _ordering_key(self) -> Fraction:
        return Fraction(self.value)

    def is_zero(self) -> bool:
        return self.value == 0

    def to_string(self) -> str:
        return str(self.value)

    def __int__(self) -> int:
        return self.value

    def __index__(self) -> int:
        return self.value
