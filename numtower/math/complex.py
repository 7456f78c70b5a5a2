"""
Complex tower kind in rectangular and polar form.

ComplexRect(real, imaginary) and ComplexPolar(modulus, angle) share the
COMPLEX kind. Products and quotients of two polar values stay polar;
every other operation goes through rectangular components.
"""

from __future__ import annotations

from abc import abstractmethod
from decimal import Decimal
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

from ..core.errors import CoercionError, DivisionByZero, DomainError, UnsupportedOperation
from .policy import PrecisionPolicy, reconcile
from .real import Real
from .scalar import Scalar
from .value import Sign, TowerKind, TowerValue, as_tower


def _component(value: Any) -> Real:
    """Convert a component to a finite Real."""
    value = as_tower(value)
    if value.kind is TowerKind.COMPLEX:
        raise CoercionError(
            "Complex components must be real",
            source_kind=value.kind,
            target_kind=TowerKind.REAL,
        )
    value = value.coerce_to(TowerKind.REAL)
    if value.is_infinite:
        raise DomainError("complex", "components must be finite")
    return value


def _trig_real(value: Decimal, policy: PrecisionPolicy) -> Real:
    return Real(Scalar(value, policy, exact=False), irrational=True)


class Complex(TowerValue):
    """
    Shared behaviour of both complex representations.

    Complex values have no order: ``sign`` and ``compare`` raise
    UnsupportedOperation. Coercion to the real line succeeds only when the
    imaginary part is exactly zero.
    """

    kind: ClassVar[TowerKind] = TowerKind.COMPLEX
    is_polar: ClassVar[bool] = False

    @abstractmethod
    def to_rect(self) -> ComplexRect:
        pass

    @abstractmethod
    def to_polar(self) -> ComplexPolar:
        pass

    @abstractmethod
    def modulus(self) -> Real:
        pass

    @abstractmethod
    def argument(self) -> Real:
        pass

    @abstractmethod
    def conjugate(self) -> Complex:
        pass

    @abstractmethod
    def _real_value(self) -> Real:
        """The value as a Real, if its imaginary part is exactly zero."""

    def real_part(self) -> Real:
        return self.to_rect().real

    def imaginary_part(self) -> Real:
        return self.to_rect().imaginary

    def magnitude(self) -> Real:
        return self.modulus()

    def sign(self) -> Sign:
        raise UnsupportedOperation("sign", TowerKind.COMPLEX)

    def _ordering_key(self) -> Any:
        raise UnsupportedOperation("compare", TowerKind.COMPLEX)

    def _equality_key(self) -> Any:
        rect = self.to_rect()
        if rect.imaginary.is_zero():
            return rect.real.to_fraction()
        return (rect.real.to_fraction(), rect.imaginary.to_fraction())

    def coerce_to(self, kind: TowerKind) -> TowerValue:
        """
        Convert to another kind.

        Raises:
            CoercionError: Unless the imaginary part is exactly zero and the
                real part is representable in kind
        """
        if kind is TowerKind.COMPLEX:
            return self
        return self._real_value().coerce_to(kind)

    def nth_roots(self, n: int) -> frozenset:
        """
        All n distinct nth roots: the principal root times each nth root of unity.

        Raises:
            DomainError: If n < 1
        """
        # Import here to avoid circular imports
        from .kernel import nth_root, roots_of_unity

        if n < 1:
            raise DomainError("nth_roots", "root index must be positive", n=n)
        polar = self.to_polar()
        policy = self.policy
        if polar.is_zero():
            return frozenset({ComplexPolar(Real(0, policy), Real(0, policy), policy)})
        principal = ComplexPolar(
            nth_root(polar.radius, n, policy),
            polar.argument().divide(n),
            policy,
        )
        return frozenset(principal.multiply(root) for root in roots_of_unity(n, policy))


class ComplexRect(Complex, BaseModel):
    """
    Complex number a + bi.

    Examples:
        >>> ComplexRect(3, 4)
        >>> ComplexRect(Real("1.5"), Real("-2"), PrecisionPolicy(10))
    """

    model_config = ConfigDict(frozen=True)

    real: Real = Field(description="Real part")
    imaginary: Real = Field(description="Imaginary part")

    def __init__(self, real: Any = 0, imaginary: Any = 0, policy: PrecisionPolicy | None = None, **kwargs):
        """
        Initialize a complex number from its components.

        Args:
            real: Real part (any real-line tower value or Python number)
            imaginary: Imaginary part
            policy: Policy for both parts (None = reconcile the parts' policies)
        """
        real = _component(real)
        imaginary = _component(imaginary)
        if policy is None:
            policy = reconcile(real.policy, imaginary.policy)
        super().__init__(real=real.with_policy(policy), imaginary=imaginary.with_policy(policy), **kwargs)

    @property
    def policy(self) -> PrecisionPolicy:
        return self.real.policy

    def is_exact(self) -> bool:
        return self.real.is_exact() and self.imaginary.is_exact()

    def with_policy(self, policy: PrecisionPolicy) -> ComplexRect:
        if policy == self.policy:
            return self
        return ComplexRect(self.real, self.imaginary, policy)

    # Arithmetic

    def _add(self, other: Complex) -> ComplexRect:
        other = other.to_rect()
        return ComplexRect(self.real.add(other.real), self.imaginary.add(other.imaginary), self.policy)

    def _subtract(self, other: Complex) -> ComplexRect:
        other = other.to_rect()
        return ComplexRect(
            self.real.subtract(other.real),
            self.imaginary.subtract(other.imaginary),
            self.policy,
        )

    def _multiply(self, other: Complex) -> ComplexRect:
        other = other.to_rect()
        a, b, c, d = self.real, self.imaginary, other.real, other.imaginary
        return ComplexRect(
            a.multiply(c).subtract(b.multiply(d)),
            a.multiply(d).add(b.multiply(c)),
            self.policy,
        )

    def _divide(self, other: Complex) -> ComplexRect:
        """Multiply by the conjugate over the squared modulus."""
        other = other.to_rect()
        a, b, c, d = self.real, self.imaginary, other.real, other.imaginary
        denominator = c.multiply(c).add(d.multiply(d))
        if denominator.is_zero():
            raise DivisionByZero()
        return ComplexRect(
            a.multiply(c).add(b.multiply(d)).divide(denominator),
            b.multiply(c).subtract(a.multiply(d)).divide(denominator),
            self.policy,
        )

    def negate(self) -> ComplexRect:
        return ComplexRect(self.real.negate(), self.imaginary.negate(), self.policy)

    def invert(self) -> ComplexRect:
        if self.is_zero():
            raise DivisionByZero("invert")
        return ComplexRect(Real(1, self.policy), Real(0, self.policy), self.policy)._divide(self)

    def conjugate(self) -> ComplexRect:
        return ComplexRect(self.real, self.imaginary.negate(), self.policy)

    def modulus(self) -> Real:
        """|a + bi| = √(a² + b²)"""
        if self.imaginary.is_zero():
            return self.real.magnitude()
        if self.real.is_zero():
            return self.imaginary.magnitude()
        return self.real.multiply(self.real).add(self.imaginary.multiply(self.imaginary)).sqrt()

    def argument(self) -> Real:
        """Angle in (−π, π] measured from the positive real axis."""
        from .trig import atan2, pi

        if self.imaginary.is_zero():
            if self.real.sign() is Sign.NEGATIVE:
                return _trig_real(pi(self.policy), self.policy)
            return Real(0, self.policy)
        angle = atan2(self.imaginary.scalar.magnitude, self.real.scalar.magnitude, self.policy)
        return _trig_real(angle, self.policy)

    def sqrt(self) -> ComplexRect:
        """
        Principal square root.

            √(a + bi) = √((|z| + a)/2) ± i·√((|z| − a)/2)

        with the sign of the imaginary part taken from b.
        """
        if self.imaginary.is_zero():
            if self.real.sign() is Sign.NEGATIVE:
                return ComplexRect(Real(0, self.policy), self.real.negate().sqrt(), self.policy)
            return ComplexRect(self.real.sqrt(), Real(0, self.policy), self.policy)
        modulus = self.modulus()
        real = modulus.add(self.real).divide(2).sqrt()
        imaginary = modulus.subtract(self.real).divide(2).sqrt()
        if self.imaginary.sign() is Sign.NEGATIVE:
            imaginary = imaginary.negate()
        return ComplexRect(real, imaginary, self.policy)

    def to_rect(self) -> ComplexRect:
        return self

    def to_polar(self) -> ComplexPolar:
        return ComplexPolar(self.modulus(), self.argument(), self.policy)

    def _real_value(self) -> Real:
        if not self.imaginary.is_zero():
            raise CoercionError(
                f"{self.to_string()} has a nonzero imaginary part",
                source_kind=self.kind,
                target_kind=TowerKind.REAL,
            )
        return self.real

    def is_zero(self) -> bool:
        return self.real.is_zero() and self.imaginary.is_zero()

    def to_string(self) -> str:
        if self.imaginary.sign() is Sign.NEGATIVE:
            return f"{self.real.to_string()} - {self.imaginary.negate().to_string()}i"
        return f"{self.real.to_string()} + {self.imaginary.to_string()}i"


class ComplexPolar(Complex, BaseModel):
    """
    Complex number r·e^(iθ).

    The angle is stored as given; ``argument()`` reports it reduced into
    (−π, π].

    Examples:
        >>> ComplexPolar(2, Real("1.5707963"), PrecisionPolicy(8))
    """

    model_config = ConfigDict(frozen=True)

    is_polar: ClassVar[bool] = True

    radius: Real = Field(description="Modulus (non-negative)")
    angle: Real = Field(description="Angle in radians")

    def __init__(self, modulus: Any = 0, angle: Any = 0, policy: PrecisionPolicy | None = None, **kwargs):
        """
        Initialize a complex number from its modulus and angle.

        Raises:
            DomainError: If modulus is negative
        """
        radius = _component(modulus)
        angle = _component(angle)
        if radius.sign() is Sign.NEGATIVE:
            raise DomainError("complex", "modulus cannot be negative", modulus=radius.to_string())
        if policy is None:
            policy = reconcile(radius.policy, angle.policy)
        super().__init__(radius=radius.with_policy(policy), angle=angle.with_policy(policy), **kwargs)

    @property
    def policy(self) -> PrecisionPolicy:
        return self.radius.policy

    def is_exact(self) -> bool:
        return self.radius.is_exact() and self.angle.is_exact()

    def with_policy(self, policy: PrecisionPolicy) -> ComplexPolar:
        if policy == self.policy:
            return self
        return ComplexPolar(self.radius, self.angle, policy)

    # Arithmetic

    def _add(self, other: Complex) -> ComplexRect:
        return self.to_rect()._add(other)

    def _subtract(self, other: Complex) -> ComplexRect:
        return self.to_rect()._subtract(other)

    def _multiply(self, other: Complex) -> Complex:
        if not other.is_polar:
            return self.to_rect()._multiply(other)
        return ComplexPolar(
            self.radius.multiply(other.radius),
            self.angle.add(other.angle),
            self.policy,
        )

    def _divide(self, other: Complex) -> Complex:
        if not other.is_polar:
            return self.to_rect()._divide(other)
        if other.radius.is_zero():
            raise DivisionByZero()
        return ComplexPolar(
            self.radius.divide(other.radius),
            self.angle.subtract(other.angle),
            self.policy,
        )

    def negate(self) -> ComplexPolar:
        from .trig import pi

        return ComplexPolar(self.radius, self.angle.add(_trig_real(pi(self.policy), self.policy)), self.policy)

    def invert(self) -> ComplexPolar:
        if self.radius.is_zero():
            raise DivisionByZero("invert")
        return ComplexPolar(self.radius.invert(), self.angle.negate(), self.policy)

    def conjugate(self) -> ComplexPolar:
        return ComplexPolar(self.radius, self.angle.negate(), self.policy)

    def modulus(self) -> Real:
        return self.radius

    def argument(self) -> Real:
        """The angle reduced into (−π, π]."""
        from .trig import normalize_angle

        if self.angle.is_zero():
            return self.angle
        reduced = normalize_angle(self.angle.scalar.magnitude, self.policy)
        return Real(Scalar(reduced, self.policy, exact=self.angle.is_exact()), irrational=self.angle.irrational)

    def sqrt(self) -> ComplexPolar:
        return ComplexPolar(self.radius.sqrt(), self.argument().divide(2), self.policy)

    def _axis_value(self) -> Real | None:
        """The signed radius when the normalized argument is 0 or π, else None."""
        from .trig import pi

        if self.radius.is_zero():
            return Real(0, self.policy)
        if self.angle.is_zero():
            return self.radius
        argument = self.argument()
        if argument.is_zero():
            return self.radius
        if argument.scalar.magnitude == pi(self.policy):
            return self.radius.negate()
        return None

    def to_rect(self) -> ComplexRect:
        from .trig import cos, sin

        on_axis = self._axis_value()
        if on_axis is not None:
            return ComplexRect(on_axis, Real(0, self.policy), self.policy)
        angle = self.argument().scalar.magnitude
        return ComplexRect(
            self.radius.multiply(_trig_real(cos(angle, self.policy), self.policy)),
            self.radius.multiply(_trig_real(sin(angle, self.policy), self.policy)),
            self.policy,
        )

    def to_polar(self) -> ComplexPolar:
        return self

    def _real_value(self) -> Real:
        on_axis = self._axis_value()
        if on_axis is not None:
            return on_axis
        raise CoercionError(
            f"{self.to_string()} is not on the real axis",
            source_kind=self.kind,
            target_kind=TowerKind.REAL,
        )

    def is_zero(self) -> bool:
        return self.radius.is_zero()

    def to_string(self) -> str:
        return f"{self.radius.to_string()}e^({self.angle.to_string()}i)"
