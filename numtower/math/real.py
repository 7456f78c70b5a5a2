"""
Real tower kind: Real and RealInfinity.

A Real wraps a Scalar and adds an ``irrational`` flag. Irrational values
are never exact and never coerce to Rational. RealInfinity is the signed
infinity produced by the logarithm of zero; arithmetic that would be
undefined on it raises DomainError instead of producing NaN.
"""

from __future__ import annotations

import math
from decimal import Decimal
from fractions import Fraction
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.errors import CoercionError, DivisionByZero, DomainError
from .integer import Integer
from .policy import UNLIMITED, PrecisionPolicy
from .scalar import Scalar
from .value import Sign, TowerKind, TowerValue


class Real(TowerValue, BaseModel):
    """
    Real number value backed by an arbitrary-precision decimal.

    Examples:
        >>> Real("2.5")                            # exact, unlimited
        >>> Real("3.14159", PrecisionPolicy(3))    # 3.14, inexact
        >>> Real(2, PrecisionPolicy(10)).sqrt()    # 1.414213562, irrational
    """

    model_config = ConfigDict(frozen=True)

    kind: ClassVar[TowerKind] = TowerKind.REAL

    scalar: Scalar = Field(description="Magnitude, exactness and policy")
    irrational: bool = Field(default=False, description="Known to be irrational")

    def __init__(
        self,
        value: str | int | Decimal | Scalar = 0,
        policy: PrecisionPolicy | None = None,
        irrational: bool = False,
        **kwargs,
    ):
        """
        Initialize a Real number.

        Args:
            value: Decimal literal, integer, Decimal or Scalar
            policy: Precision policy (None = keep the Scalar's, or unlimited)
            irrational: Mark the value as irrational (forces inexact)
        """
        if isinstance(value, Scalar):
            scalar = value if policy is None else value.round_to(policy)
        else:
            scalar = Scalar(value, policy)
        if irrational and scalar.exact:
            scalar = Scalar(scalar, exact=False)
        super().__init__(scalar=scalar, irrational=irrational, **kwargs)

    @property
    def policy(self) -> PrecisionPolicy:
        return self.scalar.policy

    def is_exact(self) -> bool:
        return self.scalar.exact and not self.irrational

    def with_policy(self, policy: PrecisionPolicy) -> Real:
        if policy == self.policy:
            return self
        return Real(self.scalar.round_to(policy), irrational=self.irrational)

    # Arithmetic

    def _add(self, other: TowerValue) -> TowerValue:
        if other.is_infinite:
            return other._add(self)
        return Real(self.scalar.add(other.scalar), irrational=self.irrational or other.irrational)

    def _subtract(self, other: TowerValue) -> TowerValue:
        if other.is_infinite:
            return other.negate()._add(self)
        return Real(self.scalar.subtract(other.scalar), irrational=self.irrational or other.irrational)

    def _multiply(self, other: TowerValue) -> TowerValue:
        if other.is_infinite:
            return other._multiply(self)
        return Real(self.scalar.multiply(other.scalar), irrational=self.irrational or other.irrational)

    def _divide(self, other: TowerValue) -> TowerValue:
        if other.is_infinite:
            return Real(0, self.policy)
        return Real(self.scalar.divide(other.scalar), irrational=self.irrational or other.irrational)

    def negate(self) -> Real:
        return Real(self.scalar.negate(), irrational=self.irrational)

    def invert(self) -> Real:
        if self.scalar.is_zero():
            raise DivisionByZero("invert")
        return Real(Scalar(1, self.policy).divide(self.scalar), irrational=self.irrational)

    def magnitude(self) -> Real:
        return Real(self.scalar.abs(), irrational=self.irrational)

    def sign(self) -> Sign:
        return Sign(self.scalar.sign())

    def sqrt(self) -> TowerValue:
        """
        Principal square root.

        Negative values have an imaginary root; everything else is the
        Newton square root from the kernel, exact for perfect squares.
        """
        # Import here to avoid circular imports
        from .kernel import nth_root

        if self.sign() is Sign.NEGATIVE:
            from .complex import ComplexRect

            return ComplexRect(Real(0, self.policy), nth_root(self.negate(), 2), self.policy)
        return nth_root(self, 2)

    def nth_roots(self, n: int) -> frozenset:
        """All n complex nth roots of this value."""
        return self.coerce_to(TowerKind.COMPLEX).nth_roots(n)

    # Coercion

    def coerce_to(self, kind: TowerKind) -> TowerValue:
        """
        Convert to another kind.

        Integer only when the decimal has no fractional part at this
        precision; Rational only when the value is not irrational.

        Raises:
            CoercionError: If the value is not representable in kind
        """
        if kind is TowerKind.REAL:
            return self
        if kind is TowerKind.INTEGER:
            if not self.scalar.is_integral():
                raise CoercionError(
                    f"{self.to_string()} has a fractional part",
                    source_kind=self.kind,
                    target_kind=kind,
                )
            return Integer(int(self.scalar.magnitude), self.policy)
        if kind is TowerKind.RATIONAL:
            if self.irrational:
                raise CoercionError(
                    f"{self.to_string()} is irrational",
                    source_kind=self.kind,
                    target_kind=kind,
                )
            from .rational import Rational

            fraction = self.scalar.to_fraction()
            return Rational(fraction.numerator, fraction.denominator, self.policy)
        if kind is TowerKind.COMPLEX:
            from .complex import ComplexRect

            return ComplexRect(self, Real(0, self.policy), self.policy)
        raise CoercionError(f"Unknown kind {kind!r}", source_kind=self.kind, target_kind=kind)

    def to_fraction(self) -> Fraction:
        return self.scalar.to_fraction()

    def _ordering_key(self) -> Fraction:
        return self.scalar.to_fraction()

    def is_zero(self) -> bool:
        return self.scalar.is_zero()

    def to_string(self) -> str:
        return str(self.scalar)

    def __float__(self) -> float:
        return float(self.scalar.magnitude)


class RealInfinity(TowerValue, BaseModel):
    """
    Signed infinity of the Real kind.

    Only the sign is meaningful; undefined forms (∞ − ∞, 0 · ∞, ∞ / ∞)
    raise DomainError.
    """

    model_config = ConfigDict(frozen=True)

    kind: ClassVar[TowerKind] = TowerKind.REAL

    direction: Sign = Field(default=Sign.POSITIVE, description="POSITIVE or NEGATIVE")
    policy: PrecisionPolicy = Field(default=UNLIMITED, description="Precision policy")

    def __init__(self, direction: Sign | int = Sign.POSITIVE, policy: PrecisionPolicy | None = None, **kwargs):
        super().__init__(
            direction=direction,
            policy=policy if policy is not None else UNLIMITED,
            **kwargs,
        )

    @field_validator("direction", mode="before")
    @classmethod
    def _validate_direction(cls, value: Any) -> Sign:
        direction = Sign.of(int(value))
        if direction is Sign.ZERO:
            raise ValueError("Infinity must be positive or negative")
        return direction

    @property
    def is_infinite(self) -> bool:
        return True

    def is_exact(self) -> bool:
        return True

    def with_policy(self, policy: PrecisionPolicy) -> RealInfinity:
        if policy == self.policy:
            return self
        return RealInfinity(self.direction, policy)

    def _add(self, other: TowerValue) -> TowerValue:
        if other.is_infinite and other.sign() is not self.direction:
            raise DomainError("add", "infinities of opposite sign do not sum")
        return self

    def _subtract(self, other: TowerValue) -> TowerValue:
        return self._add(other.negate())

    def _multiply(self, other: TowerValue) -> TowerValue:
        other_sign = other.sign()
        if other_sign is Sign.ZERO:
            raise DomainError("multiply", "zero times infinity is undefined")
        return RealInfinity(self.direction * other_sign, self.policy)

    def _divide(self, other: TowerValue) -> TowerValue:
        if other.is_infinite:
            raise DomainError("divide", "infinity divided by infinity is undefined")
        other_sign = other.sign()
        if other_sign is Sign.ZERO:
            raise DivisionByZero()
        return RealInfinity(self.direction * other_sign, self.policy)

    def negate(self) -> RealInfinity:
        return RealInfinity(-self.direction, self.policy)

    def invert(self) -> Real:
        return Real(0, self.policy)

    def magnitude(self) -> RealInfinity:
        return RealInfinity(Sign.POSITIVE, self.policy)

    def sign(self) -> Sign:
        return self.direction

    def sqrt(self) -> RealInfinity:
        if self.direction is Sign.NEGATIVE:
            raise DomainError("sqrt", "square root of negative infinity")
        return self

    def coerce_to(self, kind: TowerKind) -> TowerValue:
        if kind is TowerKind.REAL:
            return self
        raise CoercionError(
            f"{self.to_string()} has no {kind.name.lower()} representation",
            source_kind=self.kind,
            target_kind=kind,
        )

    def _ordering_key(self) -> float:
        return math.inf if self.direction is Sign.POSITIVE else -math.inf

    def is_zero(self) -> bool:
        return False

    def to_string(self) -> str:
        return "inf" if self.direction is Sign.POSITIVE else "-inf"
