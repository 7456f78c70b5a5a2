"""
Rational tower kind.

Stores a numerator and denominator as integers, always reduced to lowest
terms with a positive denominator. Also provides RepeatingDecimal, which
describes the periodic decimal expansion of a rational value.
"""

from __future__ import annotations

import math
from decimal import Decimal
from fractions import Fraction
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field
from sympy import multiplicity, n_order

from ..core.errors import CoercionError, DivisionByZero, NonTerminatingExpansion
from .integer import Integer
from .policy import UNLIMITED, PrecisionPolicy
from .value import Sign, TowerKind, TowerValue


def gcd(a: int, b: int) -> int:
    """Greatest Common Divisor."""
    a, b = abs(a), abs(b)
    if a < b:
        a, b = b, a
    if b == 0:
        return a
    r = a % b
    while r != 0:
        a, b = b, r
        r = a % b
    return b


def lcm(a: int, b: int) -> int:
    """Least Common Multiple."""
    return (a // gcd(a, b)) * b


def reduce_fraction(num: int, den: int) -> tuple[int, int]:
    """
    Reduce fraction to lowest terms.

    Ensures denominator is positive.

    Raises:
        DivisionByZero: If den is zero
    """
    if den == 0:
        raise DivisionByZero("rational")
    if den < 0:
        num, den = -num, -den
    g = gcd(num, den)
    return (num // g, den // g)


class Rational(TowerValue, BaseModel):
    """
    Exact rational value numerator/denominator.

    Examples:
        >>> Rational(1, 2)   # 1/2
        >>> Rational(6, -4)  # -3/2
        >>> Rational(4, 2)   # 2/1 (still a Rational; coerce_to(INTEGER) gives 2)
    """

    model_config = ConfigDict(frozen=True)

    kind: ClassVar[TowerKind] = TowerKind.RATIONAL

    numerator: int = Field(description="The numerator")
    denominator: int = Field(description="The denominator (always positive)")
    policy: PrecisionPolicy = Field(default=UNLIMITED, description="Precision policy")

    def __init__(
        self,
        numerator: int,
        denominator: int = 1,
        policy: PrecisionPolicy | None = None,
        **kwargs,
    ):
        """
        Create a Rational in lowest terms.

        Args:
            numerator: Numerator
            denominator: Denominator (default 1, must be nonzero)
            policy: Policy applied when coerced to Real or Complex

        Raises:
            DivisionByZero: If denominator is zero
        """
        num, den = reduce_fraction(int(numerator), int(denominator))
        super().__init__(
            numerator=num,
            denominator=den,
            policy=policy if policy is not None else UNLIMITED,
            **kwargs,
        )

    def is_exact(self) -> bool:
        return True

    def with_policy(self, policy: PrecisionPolicy) -> Rational:
        if policy == self.policy:
            return self
        return Rational(self.numerator, self.denominator, policy)

    # Arithmetic

    def _add(self, other: Rational) -> Rational:
        den = lcm(self.denominator, other.denominator)
        num = self.numerator * (den // self.denominator) + other.numerator * (den // other.denominator)
        return Rational(num, den, self.policy)

    def _subtract(self, other: Rational) -> Rational:
        return self._add(other.negate())

    def _multiply(self, other: Rational) -> Rational:
        return Rational(
            self.numerator * other.numerator,
            self.denominator * other.denominator,
            self.policy,
        )

    def _divide(self, other: Rational) -> Rational:
        if other.numerator == 0:
            raise DivisionByZero()
        return Rational(
            self.numerator * other.denominator,
            self.denominator * other.numerator,
            self.policy,
        )

    def negate(self) -> Rational:
        return Rational(-self.numerator, self.denominator, self.policy)

    def invert(self) -> Rational:
        if self.numerator == 0:
            raise DivisionByZero("invert")
        return Rational(self.denominator, self.numerator, self.policy)

    def magnitude(self) -> Rational:
        return Rational(abs(self.numerator), self.denominator, self.policy)

    def sign(self) -> Sign:
        return Sign.of(self.numerator)

    def sqrt(self) -> TowerValue:
        """
        Square root.

        Exact when numerator and denominator are both perfect squares;
        otherwise computed as a Real under this value's policy.
        """
        if self.numerator >= 0:
            num_root = math.isqrt(self.numerator)
            den_root = math.isqrt(self.denominator)
            if num_root * num_root == self.numerator and den_root * den_root == self.denominator:
                return Rational(num_root, den_root, self.policy)
        return self.coerce_to(TowerKind.REAL).sqrt()

    # Coercion

    def coerce_to(self, kind: TowerKind) -> TowerValue:
        """
        Convert to another kind.

        Integer only when the denominator is 1. Real by decimal division
        under this value's policy; under the unlimited policy that requires
        a terminating expansion.

        Raises:
            CoercionError: If the value is not representable in kind
        """
        if kind is TowerKind.RATIONAL:
            return self
        if kind is TowerKind.INTEGER:
            if self.denominator != 1:
                raise CoercionError(
                    f"{self.to_string()} is not an integer",
                    source_kind=self.kind,
                    target_kind=kind,
                )
            return Integer(self.numerator, self.policy)
        if kind is TowerKind.REAL:
            from .real import Real
            from .scalar import Scalar

            try:
                quotient = Scalar.from_fraction(self.numerator, self.denominator, self.policy)
            except NonTerminatingExpansion as e:
                raise CoercionError(
                    f"{self.to_string()} has no exact decimal form under an unlimited policy",
                    source_kind=self.kind,
                    target_kind=kind,
                ) from e
            return Real(quotient)
        if kind is TowerKind.COMPLEX:
            from .complex import ComplexRect

            return ComplexRect(self.coerce_to(TowerKind.REAL), Integer(0, self.policy), self.policy)
        raise CoercionError(f"Unknown kind {kind!r}", source_kind=self.kind, target_kind=kind)

    def as_decimal(self) -> Decimal:
        """Decimal value under this value's policy (see coerce_to)."""
        return self.coerce_to(TowerKind.REAL).scalar.magnitude

    def repeating_decimal(self) -> RepeatingDecimal:
        return RepeatingDecimal.from_rational(self)

    def to_fraction(self) -> Fraction:
        return Fraction(self.numerator, self.denominator)

    def _ordering_key(self) -> Fraction:
        return Fraction(self.numerator, self.denominator)

    def is_zero(self) -> bool:
        return self.numerator == 0

    def to_string(self) -> str:
        if self.denominator == 1:
            return str(self.numerator)
        return f"{self.numerator}/{self.denominator}"


class RepeatingDecimal(BaseModel):
    """
    Decimal expansion of a rational number with its repeating cycle.

    The expansion is integer_part "." prefix cycle cycle cycle ..., where
    prefix has cycle_start digits and cycle has cycle_length digits
    (cycle_length is 0 for terminating expansions).

    Example:
        RepeatingDecimal.from_rational(Rational(1, 6))
        → integer_part=0, prefix="1", cycle="6", rendered "0.16̅"
    """

    model_config = ConfigDict(frozen=True)

    negative: bool = False
    integer_part: int
    prefix: str = ""
    cycle: str = ""

    @classmethod
    def from_rational(cls, value: Rational) -> RepeatingDecimal:
        num, den = abs(value.numerator), value.denominator
        integer_part, remainder = divmod(num, den)

        # Factors of 2 and 5 only delay the start of the cycle
        twos = multiplicity(2, den)
        fives = multiplicity(5, den)
        cycle_start = max(twos, fives)
        coprime = den // (2 ** twos * 5 ** fives)
        cycle_length = int(n_order(10, coprime)) if coprime > 1 else 0

        digits = []
        for _ in range(cycle_start + cycle_length):
            remainder *= 10
            digit, remainder = divmod(remainder, den)
            digits.append(str(digit))
        text = "".join(digits)

        return cls(
            negative=value.numerator < 0,
            integer_part=integer_part,
            prefix=text[:cycle_start],
            cycle=text[cycle_start:],
        )

    @property
    def cycle_start(self) -> int:
        """Digits after the decimal point before the cycle begins."""
        return len(self.prefix)

    @property
    def cycle_length(self) -> int:
        return len(self.cycle)

    @property
    def is_terminating(self) -> bool:
        return not self.cycle

    def to_string(self) -> str:
        """Render with a combining overline over the repeating digits."""
        sign = "-" if self.negative else ""
        fraction = self.prefix + "".join(f"{digit}\u0305" for digit in self.cycle)
        if not fraction:
            return f"{sign}{self.integer_part}"
        return f"{sign}{self.integer_part}.{fraction}"

    def __str__(self) -> str:
        return self.to_string()
