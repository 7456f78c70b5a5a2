"""
Base TowerValue class for the numeric tower.

This module provides the foundation shared by every kind of tower value:
- The kind ranking (Integer < Rational < Real < Complex)
- Template arithmetic that resolves mixed kinds through the coercion resolver
- Identity short-circuits for the canonical Zero and One
- Operator overloading and conversion from Python numbers
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from enum import Enum, IntEnum
from fractions import Fraction
from typing import Any, ClassVar

from ..core.errors import CoercionError, InvalidLiteral, UnsupportedOperation
from .policy import PrecisionPolicy, reconcile


class TowerKind(IntEnum):
    """
    Promotion rank of the tower kinds.

    Lower kinds promote automatically to higher ones; the reverse direction
    is always an explicit, possibly failing, coercion.
    """

    INTEGER = 0
    RATIONAL = 1
    REAL = 2
    COMPLEX = 3


class Sign(IntEnum):
    NEGATIVE = -1
    ZERO = 0
    POSITIVE = 1

    @classmethod
    def of(cls, value: Any) -> Sign:
        if value < 0:
            return cls.NEGATIVE
        if value > 0:
            return cls.POSITIVE
        return cls.ZERO


class Identity(Enum):
    """Algebraic identity carried by the canonical Zero and One."""

    ADDITIVE = "additive"
    MULTIPLICATIVE = "multiplicative"


class TowerValue(ABC):
    """
    Base class for all tower values.

    Concrete kinds inherit from both TowerValue and pydantic's BaseModel,
    e.g. ``class Integer(TowerValue, BaseModel)``, with TowerValue first so
    that its value-based ``__eq__`` and ``__hash__`` take precedence.

    Every concrete kind exposes a ``policy`` (its PrecisionPolicy) and
    implements the homogeneous hooks ``_add``, ``_subtract``, ``_multiply``
    and ``_divide``; the public operations take care of kind promotion,
    policy reconciliation and identity short-circuits before calling them.
    """

    kind: ClassVar[TowerKind]
    algebraic_identity: ClassVar[Identity | None] = None

    # Homogeneous hooks: both operands share a kind and a policy

    @abstractmethod
    def _add(self, other: TowerValue) -> TowerValue:
        pass

    @abstractmethod
    def _subtract(self, other: TowerValue) -> TowerValue:
        pass

    @abstractmethod
    def _multiply(self, other: TowerValue) -> TowerValue:
        pass

    @abstractmethod
    def _divide(self, other: TowerValue) -> TowerValue:
        pass

    # Protocol operations implemented per kind

    @abstractmethod
    def negate(self) -> TowerValue:
        """Additive inverse."""

    @abstractmethod
    def invert(self) -> TowerValue:
        """
        Multiplicative inverse.

        Raises:
            DivisionByZero: If the value is zero
        """

    @abstractmethod
    def magnitude(self) -> TowerValue:
        """Absolute value (modulus for complex values)."""

    @abstractmethod
    def sign(self) -> Sign:
        """
        Sign of a value on the real line.

        Raises:
            UnsupportedOperation: For complex values
        """

    @abstractmethod
    def sqrt(self) -> TowerValue:
        """Principal square root."""

    @abstractmethod
    def is_exact(self) -> bool:
        """True if the value is known to be represented without rounding."""

    @abstractmethod
    def with_policy(self, policy: PrecisionPolicy) -> TowerValue:
        """Same value carried under another policy, rounded if needed."""

    @abstractmethod
    def coerce_to(self, kind: TowerKind) -> TowerValue:
        """
        Convert this value to another kind.

        Raises:
            CoercionError: If the value is not exactly representable in kind
        """

    @abstractmethod
    def to_string(self) -> str:
        pass

    @abstractmethod
    def _ordering_key(self) -> Any:
        """Exact position on the real line (a Fraction, or a float infinity)."""

    def _equality_key(self) -> Any:
        return self._ordering_key()

    @property
    def is_infinite(self) -> bool:
        return False

    def is_coercible_to(self, kind: TowerKind) -> bool:
        try:
            self.coerce_to(kind)
        except CoercionError:
            return False
        return True

    def is_zero(self) -> bool:
        return self._equality_key() == 0

    # Template arithmetic

    def add(self, other: Any) -> TowerValue:
        other = as_tower(other)
        policy = reconcile(self.policy, other.policy)
        if other.algebraic_identity is Identity.ADDITIVE:
            return self.with_policy(policy)
        if self.algebraic_identity is Identity.ADDITIVE:
            return other.with_policy(policy)
        left, right = _promote_pair(self, other)
        return left._add(right)

    def subtract(self, other: Any) -> TowerValue:
        other = as_tower(other)
        policy = reconcile(self.policy, other.policy)
        if other.algebraic_identity is Identity.ADDITIVE:
            return self.with_policy(policy)
        if self.algebraic_identity is Identity.ADDITIVE:
            return other.negate().with_policy(policy)
        left, right = _promote_pair(self, other)
        return left._subtract(right)

    def multiply(self, other: Any) -> TowerValue:
        other = as_tower(other)
        policy = reconcile(self.policy, other.policy)
        if other.algebraic_identity is Identity.MULTIPLICATIVE:
            return self.with_policy(policy)
        if self.algebraic_identity is Identity.MULTIPLICATIVE:
            return other.with_policy(policy)
        left, right = _promote_pair(self, other)
        return left._multiply(right)

    def divide(self, other: Any) -> TowerValue:
        other = as_tower(other)
        if other.algebraic_identity is Identity.MULTIPLICATIVE:
            return self.with_policy(reconcile(self.policy, other.policy))
        left, right = _promote_pair(self, other)
        return left._divide(right)

    def compare(self, other: Any) -> int:
        """
        Exact three-way comparison on the real line.

        Returns:
            -1, 0 or 1

        Raises:
            UnsupportedOperation: If either operand is complex
        """
        other = as_tower(other)
        for value in (self, other):
            if value.kind is TowerKind.COMPLEX:
                raise UnsupportedOperation("compare", TowerKind.COMPLEX)
        left, right = self._ordering_key(), other._ordering_key()
        if left < right:
            return -1
        if left > right:
            return 1
        return 0

    # Conversion helpers

    @classmethod
    def from_python(cls, value: Any, policy: PrecisionPolicy | None = None) -> TowerValue:
        """
        Convert a Python value to a tower value.

        Args:
            value: int, Fraction, Decimal, float, complex, a numeric string
                ("42", "-3/4", "2.50") or an existing tower value
            policy: Policy for the new value (None = unlimited)

        Returns:
            Integer, Rational, Real or ComplexRect instance
        """
        return as_tower(value, policy)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.to_string()})"

    # Operator overloading

    def __add__(self, other: Any) -> TowerValue:
        other = _operand(other)
        return NotImplemented if other is None else self.add(other)

    def __radd__(self, other: Any) -> TowerValue:
        other = _operand(other)
        return NotImplemented if other is None else other.add(self)

    def __sub__(self, other: Any) -> TowerValue:
        other = _operand(other)
        return NotImplemented if other is None else self.subtract(other)

    def __rsub__(self, other: Any) -> TowerValue:
        other = _operand(other)
        return NotImplemented if other is None else other.subtract(self)

    def __mul__(self, other: Any) -> TowerValue:
        other = _operand(other)
        return NotImplemented if other is None else self.multiply(other)

    def __rmul__(self, other: Any) -> TowerValue:
        other = _operand(other)
        return NotImplemented if other is None else other.multiply(self)

    def __truediv__(self, other: Any) -> TowerValue:
        other = _operand(other)
        return NotImplemented if other is None else self.divide(other)

    def __rtruediv__(self, other: Any) -> TowerValue:
        other = _operand(other)
        return NotImplemented if other is None else other.divide(self)

    def __pow__(self, other: Any) -> TowerValue:
        from .kernel import generalized_exponent

        other = _operand(other)
        return NotImplemented if other is None else generalized_exponent(self, other)

    def __rpow__(self, other: Any) -> TowerValue:
        from .kernel import generalized_exponent

        other = _operand(other)
        return NotImplemented if other is None else generalized_exponent(other, self)

    def __neg__(self) -> TowerValue:
        return self.negate()

    def __pos__(self) -> TowerValue:
        return self

    def __abs__(self) -> TowerValue:
        return self.magnitude()

    def __bool__(self) -> bool:
        return not self.is_zero()

    # Comparison

    def __eq__(self, other: Any) -> bool:
        """Exact value equality across kinds; exactness flags are ignored."""
        other = _operand(other)
        if other is None:
            return NotImplemented
        return self._equality_key() == other._equality_key()

    def __ne__(self, other: Any) -> bool:
        result = self.__eq__(other)
        return result if result is NotImplemented else not result

    def __hash__(self) -> int:
        return hash(self._equality_key())

    def __lt__(self, other: Any) -> bool:
        return self.compare(other) < 0

    def __le__(self, other: Any) -> bool:
        return self.compare(other) <= 0

    def __gt__(self, other: Any) -> bool:
        return self.compare(other) > 0

    def __ge__(self, other: Any) -> bool:
        return self.compare(other) >= 0


_NUMERIC_TYPES = (int, Fraction, Decimal, float, complex)


def _operand(value: Any) -> TowerValue | None:
    """Operand conversion for operators; None means NotImplemented."""
    if isinstance(value, TowerValue):
        return value
    if isinstance(value, _NUMERIC_TYPES):
        return as_tower(value)
    return None


def _promote_pair(first: TowerValue, second: TowerValue) -> tuple[TowerValue, TowerValue]:
    # Import here to avoid circular imports
    from .coercion import promote_pair

    return promote_pair(first, second)


def _parse_literal(text: str, policy: PrecisionPolicy | None) -> TowerValue:
    from .integer import Integer
    from .rational import Rational
    from .real import Real

    literal = text.strip().replace("_", "")
    if "/" in literal:
        numerator, _, denominator = literal.partition("/")
        try:
            return Rational(int(numerator), int(denominator), policy)
        except ValueError as e:
            raise InvalidLiteral(text, "rational number") from e
    try:
        return Integer(int(literal), policy)
    except ValueError:
        return Real(literal, policy)


def as_tower(value: Any, policy: PrecisionPolicy | None = None) -> TowerValue:
    """
    Convert a Python value to a tower value.

    Existing tower values are returned unchanged unless a policy is given.

    Raises:
        CoercionError: For types with no tower counterpart
        InvalidLiteral: For strings that are not numbers
    """
    # Import here to avoid circular imports
    from .complex import ComplexRect
    from .integer import Integer
    from .rational import Rational
    from .real import Real

    if isinstance(value, TowerValue):
        return value if policy is None else value.with_policy(policy)

    elif isinstance(value, bool):
        # bool is a subclass of int, so check first
        return Integer(int(value), policy)

    elif isinstance(value, int):
        return Integer(value, policy)

    elif isinstance(value, Fraction):
        return Rational(value.numerator, value.denominator, policy)

    elif isinstance(value, Decimal):
        return Real(value, policy)

    elif isinstance(value, float):
        # repr gives the shortest decimal that round-trips
        return Real(repr(value), policy)

    elif isinstance(value, complex):
        return ComplexRect(as_tower(value.real, policy), as_tower(value.imag, policy), policy)

    elif isinstance(value, str):
        return _parse_literal(value, policy)

    raise CoercionError(f"Cannot convert {type(value).__name__} to a tower value")
