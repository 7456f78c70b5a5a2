"""
Canonical tower constants.

Zero, One and ImaginaryUnit are the algebraic identities the tower's
arithmetic short-circuits on; Pi and Euler are computed to the requested
precision. All of them are obtained through ``instance_for(policy)``,
which returns one shared instance per (class, policy) from the runtime's
constant cache.
"""

from __future__ import annotations

import decimal
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, ClassVar

from .complex import ComplexRect
from .integer import Integer
from .policy import UNLIMITED, PrecisionPolicy
from .real import Real
from .runtime import Runtime, get_runtime
from .scalar import Scalar
from .value import Identity


class HasCanonicalInstance(ABC):
    """Constants with one shared instance per precision policy."""

    @classmethod
    @abstractmethod
    def _construct(cls, policy: PrecisionPolicy, runtime: Runtime) -> Any:
        """Build a new instance; called at most once per policy and runtime."""

    @classmethod
    def instance_for(cls, policy: PrecisionPolicy | None = None, runtime: Runtime | None = None) -> Any:
        """
        Get the canonical instance for a policy.

        Args:
            policy: Precision policy (None = unlimited)
            runtime: Runtime holding the constant cache (None = process default)
        """
        policy = policy if policy is not None else UNLIMITED
        runtime = runtime or get_runtime()
        return runtime.constants.get_or_create(cls, policy, lambda: cls._construct(policy, runtime))


class Zero(HasCanonicalInstance, Integer):
    """Additive identity."""

    algebraic_identity: ClassVar[Identity] = Identity.ADDITIVE

    def __init__(self, policy: PrecisionPolicy | None = None, **kwargs):
        super().__init__(0, policy, **kwargs)

    @classmethod
    def _construct(cls, policy: PrecisionPolicy, runtime: Runtime) -> Zero:
        return cls(policy)

    def with_policy(self, policy: PrecisionPolicy) -> Zero:
        if policy == self.policy:
            return self
        return Zero.instance_for(policy)


class One(HasCanonicalInstance, Integer):
    """Multiplicative identity."""

    algebraic_identity: ClassVar[Identity] = Identity.MULTIPLICATIVE

    def __init__(self, policy: PrecisionPolicy | None = None, **kwargs):
        super().__init__(1, policy, **kwargs)

    @classmethod
    def _construct(cls, policy: PrecisionPolicy, runtime: Runtime) -> One:
        return cls(policy)

    def with_policy(self, policy: PrecisionPolicy) -> One:
        if policy == self.policy:
            return self
        return One.instance_for(policy)


class ImaginaryUnit(HasCanonicalInstance, ComplexRect):
    """The imaginary unit i = 0 + 1i."""

    def __init__(self, policy: PrecisionPolicy | None = None, **kwargs):
        policy = policy if policy is not None else UNLIMITED
        super().__init__(Real(0, policy), Real(1, policy), policy, **kwargs)

    @classmethod
    def _construct(cls, policy: PrecisionPolicy, runtime: Runtime) -> ImaginaryUnit:
        return cls(policy)

    def with_policy(self, policy: PrecisionPolicy) -> ImaginaryUnit:
        if policy == self.policy:
            return self
        return ImaginaryUnit.instance_for(policy)


class Pi(HasCanonicalInstance, Real):
    """
    π computed with the Bailey–Borwein–Plouffe series.

        π = Σ 16^-k (4/(8k+1) − 2/(8k+4) − 1/(8k+5) − 1/(8k+6))

    Each term contributes more than one decimal digit, so digits − 1 terms
    summed with a few guard digits give the requested precision.
    """

    GUARD_DIGITS: ClassVar[int] = 4

    def __init__(self, policy: PrecisionPolicy, **kwargs):
        policy.require_finite("pi")
        super().__init__(Scalar(self.bbp(policy), policy, exact=False), irrational=True, **kwargs)

    @classmethod
    def bbp(cls, policy: PrecisionPolicy) -> Decimal:
        digits = policy.significant_digits
        context = policy.decimal_context(extra_digits=cls.GUARD_DIGITS)
        with decimal.localcontext(context):
            total = Decimal(0)
            for k in range(max(digits - 1, 1) + 1):
                eight_k = 8 * k
                term = (
                    Decimal(4) / (eight_k + 1)
                    - Decimal(2) / (eight_k + 4)
                    - Decimal(1) / (eight_k + 5)
                    - Decimal(1) / (eight_k + 6)
                )
                total += term / (Decimal(16) ** k)
        return total

    @classmethod
    def _construct(cls, policy: PrecisionPolicy, runtime: Runtime) -> Pi:
        return cls(policy)

    def with_policy(self, policy: PrecisionPolicy) -> Real:
        if policy == self.policy:
            return self
        if policy.is_unlimited:
            return Real(self.scalar, policy, irrational=True)
        return Pi.instance_for(policy)


class Euler(HasCanonicalInstance, Real):
    """
    Euler's number e from Brothers' series.

        e = Σ (2k + 2) / (2k + 1)!

    Factorials come from the runtime's memoized factorial cache.
    """

    GUARD_DIGITS: ClassVar[int] = 4

    def __init__(self, policy: PrecisionPolicy, runtime: Runtime | None = None, **kwargs):
        policy.require_finite("e")
        value = self.brothers(policy, runtime or get_runtime())
        super().__init__(Scalar(value, policy, exact=False), irrational=True, **kwargs)

    @classmethod
    def brothers(cls, policy: PrecisionPolicy, runtime: Runtime) -> Decimal:
        from .kernel import factorial

        terms = policy.significant_digits // 2 + 2
        context = policy.decimal_context(extra_digits=cls.GUARD_DIGITS)
        with decimal.localcontext(context):
            total = Decimal(0)
            for k in range(terms + 1):
                denominator = factorial(2 * k + 1, runtime=runtime).value
                total += Decimal(2 * k + 2) / Decimal(denominator)
        return total

    @classmethod
    def _construct(cls, policy: PrecisionPolicy, runtime: Runtime) -> Euler:
        return cls(policy, runtime)

    def with_policy(self, policy: PrecisionPolicy) -> Real:
        if policy == self.policy:
            return self
        if policy.is_unlimited:
            return Real(self.scalar, policy, irrational=True)
        return Euler.instance_for(policy)

    def exp(self, exponent: Any) -> Real:
        """e raised to a real exponent at this constant's precision."""
        from .kernel import exp

        return exp(exponent, self.policy)
