"""
Precision-aware algorithmic kernel.

Factorial with memoization, integer and generalized exponentiation,
exponential, natural logarithm, nth roots and roots of unity, all built on
tower operations and parameterized by an explicit PrecisionPolicy.

Iterative methods run at the policy's precision plus guard digits, stop
once successive iterates agree to well below one unit in the last
requested digit, and give up with ConvergenceFailure after the configured
number of iterations. Domain violations raise DomainError rather than
returning a sentinel.

Example:
    >>> policy = PrecisionPolicy(20)
    >>> ln(Real(5), policy)
    >>> nth_root(Integer(2), 3, policy)
    >>> generalized_exponent(Real("2.5"), Rational(3, 2), policy)
"""

from __future__ import annotations

from fractions import Fraction
from typing import Any

from sympy import integer_nthroot

from ..core.errors import (
    CoercionError,
    ConvergenceFailure,
    DivisionByZero,
    DomainError,
    UnsupportedExponentKind,
)
from ..core.logging import get_context_logger
from .complex import ComplexPolar
from .constants import One, Pi
from .integer import Integer
from .policy import PrecisionPolicy, reconcile
from .rational import Rational
from .real import Real, RealInfinity
from .runtime import Runtime, get_runtime
from .scalar import Scalar
from .value import Identity, Sign, TowerKind, TowerValue, as_tower

logger = get_context_logger(__name__, component="kernel")

# Seed for the Newton logarithm on inputs far from 1
_LN10_ESTIMATE = "2.302585092994045684"


# Helpers

def _as_int(value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return as_tower(value).coerce_to(TowerKind.INTEGER).value


def _as_real(value: Any, policy: PrecisionPolicy) -> TowerValue:
    """Real (or RealInfinity) under a policy; complex values must lie on the real axis."""
    value = as_tower(value)
    if value.kind is TowerKind.COMPLEX:
        value = value.coerce_to(TowerKind.REAL)
    return value.with_policy(policy).coerce_to(TowerKind.REAL)


def _irrational(value: Real, policy: PrecisionPolicy) -> Real:
    return Real(value.scalar.round_to(policy), irrational=True)


def _converged(previous: Real, current: Real, digits: int) -> bool:
    """True once an iterate moves by less than a tenth of a unit in the last requested digit."""
    delta = abs(current.to_fraction() - previous.to_fraction())
    if delta == 0:
        return True
    return delta * 10 ** (digits + 1) <= abs(current.to_fraction())


def _not_converged(method: str, iterations: int) -> ConvergenceFailure:
    logger.warning("Iteration budget exhausted", extra_data={"method": method, "iterations": iterations})
    return ConvergenceFailure(method, iterations)


def _square_and_multiply(base: TowerValue, count: int) -> TowerValue:
    result = None
    power = base
    while count:
        if count & 1:
            result = power if result is None else result.multiply(power)
        count >>= 1
        if count:
            power = power.multiply(power)
    return result


# Factorial

def factorial(n: Any, runtime: Runtime | None = None) -> Integer:
    """
    n! with memoization.

    Seeds the product from the largest cached key below n and caches the
    result when the key is admissible. 0! and 1! never touch the cache.

    Raises:
        DomainError: If n is negative
    """
    n = _as_int(n)
    if n < 0:
        raise DomainError("factorial", "negative argument", n=n)
    if n < 2:
        return Integer(1)

    cache = (runtime or get_runtime()).factorials
    cached = cache.get(n)
    if cached is not None:
        return Integer(cached)

    seed = cache.max_key_below(n)
    start, accumulator = seed if seed is not None else (1, 1)
    for k in range(start + 1, n + 1):
        accumulator *= k
    cache.put(n, accumulator)

    logger.debug("Computed factorial", extra_data={"n": n, "seed": start})
    return Integer(accumulator)


# Exponentiation

def compute_integer_exponent(
    x: Any,
    n: Any,
    policy: PrecisionPolicy | None = None,
    runtime: Runtime | None = None,
) -> TowerValue:
    """
    x raised to an integer power.

    Integer and Rational bases give exact results. Real bases multiply
    |x| into an accumulator |n| times, rounding to the policy at every
    step (square-and-multiply once |n| exceeds LINEAR_EXPONENT_LIMIT), invert
    for negative n and reattach the sign only for odd n. Complex bases
    use square-and-multiply on the complex value itself.

    Raises:
        DivisionByZero: For zero raised to a negative power
    """
    x = as_tower(x)
    n = _as_int(n)
    policy = policy if policy is not None else x.policy
    runtime = runtime or get_runtime()

    if n == 0:
        return One.instance_for(policy, runtime)

    x = x.with_policy(policy)

    if x.kind is TowerKind.COMPLEX:
        result = _square_and_multiply(x, abs(n))
        return result.invert() if n < 0 else result

    if x.is_infinite:
        if n < 0:
            return Real(0, policy)
        return x.magnitude() if n % 2 == 0 else x

    if x.kind is TowerKind.INTEGER:
        return x.pow(n)
    if x.kind is TowerKind.RATIONAL:
        if n < 0:
            x, n = x.invert(), -n
        return Rational(x.numerator ** n, x.denominator ** n, policy)

    if n == 1:
        return x
    if n == -1:
        return x.invert()

    base = x.magnitude()
    count = abs(n)
    if count <= runtime.settings.LINEAR_EXPONENT_LIMIT:
        result = base
        for _ in range(count - 1):
            result = result.multiply(base)
    else:
        result = _square_and_multiply(base, count)

    if n < 0:
        result = result.invert()
    if x.sign() is Sign.NEGATIVE and n % 2 == 1:
        result = result.negate()
    return result


def exp(x: Any, policy: PrecisionPolicy | None = None, runtime: Runtime | None = None) -> TowerValue:
    """
    e raised to a real power.

    Halves the argument until |x| ≤ 1/2, sums the Taylor series and squares
    the result back up.

    Raises:
        PrecisionPolicyError: Under the unlimited policy
    """
    x = as_tower(x)
    policy = policy if policy is not None else x.policy
    policy.require_finite("exp")
    runtime = runtime or get_runtime()
    settings = runtime.settings

    x = _as_real(x, policy.working(settings.GUARD_DIGITS))
    if x.is_infinite:
        return RealInfinity(Sign.POSITIVE, policy) if x.sign() is Sign.POSITIVE else Real(0, policy)
    if x.is_zero():
        return Real(1, policy)

    halvings = 0
    bound = abs(x.to_fraction())
    while bound > Fraction(1, 2):
        bound /= 2
        halvings += 1

    work = policy.working(settings.GUARD_DIGITS + halvings // 3 + 1)
    reduced = x.with_policy(work).divide(Integer(2 ** halvings))

    term = Real(1, work)
    total = term
    for i in range(1, settings.MAX_ITERATIONS + 1):
        term = term.multiply(reduced).divide(i)
        updated = total.add(term)
        if updated == total:
            break
        total = updated
    else:
        raise _not_converged("exp", settings.MAX_ITERATIONS)

    for _ in range(halvings):
        total = total.multiply(total)
    return _irrational(total, policy)


def generalized_exponent(
    base: Any,
    exponent: Any,
    policy: PrecisionPolicy | None = None,
    runtime: Runtime | None = None,
) -> TowerValue:
    """
    base raised to an exponent of any real kind.

    Dispatches on the exponent's kind:
    - zero: the multiplicative identity One
    - Integer: compute_integer_exponent
    - Real: as an Integer when exactly integral, else as a Rational,
      else (irrational exponent) through exp(y·ln b)
    - Rational p/q: the qth root of base^p, or exp(y·ln b) when p or q
      exceeds RATIONAL_ROOT_LIMIT

    Raises:
        UnsupportedExponentKind: For complex exponents, and for non-integer
            exponents of a complex base
        DomainError: For even roots or non-integer powers of negative bases
    """
    base = as_tower(base)
    exponent = as_tower(exponent)
    policy = policy if policy is not None else reconcile(base.policy, exponent.policy)
    runtime = runtime or get_runtime()

    if exponent.algebraic_identity is Identity.ADDITIVE or exponent.is_zero():
        return One.instance_for(policy, runtime)

    kind = exponent.kind
    if kind is TowerKind.INTEGER:
        return compute_integer_exponent(base, exponent.value, policy, runtime)

    if kind is TowerKind.REAL:
        if exponent.is_infinite:
            raise DomainError("exponentiate", "infinite exponent")
        if exponent.is_coercible_to(TowerKind.INTEGER):
            return generalized_exponent(base, exponent.coerce_to(TowerKind.INTEGER), policy, runtime)
        try:
            rational = exponent.coerce_to(TowerKind.RATIONAL)
        except CoercionError:
            logger.debug("Irrational exponent", extra_data={"exponent": exponent.to_string()})
            return _exp_ln(base, exponent, policy, runtime)
        return generalized_exponent(base, rational, policy, runtime)

    if kind is TowerKind.RATIONAL:
        if exponent.denominator == 1:
            return compute_integer_exponent(base, exponent.numerator, policy, runtime)
        if base.kind is TowerKind.COMPLEX:
            raise UnsupportedExponentKind(kind, base.kind)
        limit = runtime.settings.RATIONAL_ROOT_LIMIT
        if abs(exponent.numerator) > limit or exponent.denominator > limit:
            logger.debug("Rational exponent beyond root limit", extra_data={"exponent": exponent.to_string()})
            return _exp_ln(base, exponent, policy, runtime)
        work = policy.working(runtime.settings.GUARD_DIGITS)
        powered = compute_integer_exponent(base, exponent.numerator, work, runtime)
        return nth_root(powered, exponent.denominator, policy, runtime)

    raise UnsupportedExponentKind(kind, base.kind)


def _exp_ln(base: TowerValue, exponent: TowerValue, policy: PrecisionPolicy, runtime: Runtime) -> TowerValue:
    """base^y = exp(y·ln(base)) for a non-negative real base."""
    if base.kind is TowerKind.COMPLEX:
        raise UnsupportedExponentKind(exponent.kind, base.kind)
    policy.require_finite("exponentiate")

    sign = base.sign()
    if sign is Sign.NEGATIVE:
        raise DomainError("exponentiate", "non-integer power of a negative number", base=base.to_string())
    if sign is Sign.ZERO:
        if exponent.sign() is Sign.POSITIVE:
            return Real(0, policy)
        raise DivisionByZero("exponentiate")

    work = policy.working(runtime.settings.GUARD_DIGITS + 2)
    product = _as_real(exponent, work).multiply(ln(base, work, runtime))
    return exp(product, policy, runtime)


# Logarithms

def ln(x: Any, policy: PrecisionPolicy | None = None, runtime: Runtime | None = None) -> TowerValue:
    """
    Natural logarithm.

    - ln(1) = 0 exactly; ln(0) = negative infinity
    - x in (0, 2): Newton iteration y ← y + 2(x − e^y)/(x + e^y)
    - x > 10: ln(m·10^k) = ln(m) + k·ln(10)
    - otherwise: the series Σ (1/n)((x − 1)/x)^n

    Raises:
        DomainError: For negative arguments
        PrecisionPolicyError: Under the unlimited policy (for x ≠ 0, 1)
    """
    x = as_tower(x)
    policy = policy if policy is not None else x.policy
    runtime = runtime or get_runtime()

    if x.kind is TowerKind.COMPLEX:
        x = x.coerce_to(TowerKind.REAL)
    if x.is_infinite:
        if x.sign() is Sign.POSITIVE:
            return RealInfinity(Sign.POSITIVE, policy)
        raise DomainError("ln", "logarithm of negative infinity")

    sign = x.sign()
    if sign is Sign.NEGATIVE:
        raise DomainError("ln", "logarithm of a negative number", value=x.to_string())
    if sign is Sign.ZERO:
        return RealInfinity(Sign.NEGATIVE, policy)
    if x == 1:
        return Real(0, policy)

    policy.require_finite("ln")
    return _ln(x, policy, runtime)


def _ln(x: TowerValue, policy: PrecisionPolicy, runtime: Runtime) -> Real:
    x = _as_real(x, policy.working(runtime.settings.GUARD_DIGITS))
    if x < 2:
        return _ln_newton(x, policy, runtime)
    if x > 10:
        return _ln_scientific(x, policy, runtime)
    return _ln_series(x, policy, runtime)


def _ln_newton(x: Real, policy: PrecisionPolicy, runtime: Runtime) -> Real:
    settings = runtime.settings
    # x - e^y cancels for x near 1, so carry its leading zeros as extra digits
    distance = x.subtract(1)
    leading_zeros = 0 if distance.is_zero() else max(0, -distance.scalar.adjusted())
    work = policy.working(settings.GUARD_DIGITS + leading_zeros)
    x = x.with_policy(work)

    places = x.scalar.adjusted()
    if places == 0:
        y = x.subtract(1)
    else:
        y = Real(_LN10_ESTIMATE, work).multiply(places)

    for iteration in range(1, settings.MAX_ITERATIONS + 1):
        power = exp(y, work, runtime)
        updated = y.add(x.subtract(power).multiply(2).divide(x.add(power)))
        if _converged(y, updated, policy.significant_digits):
            logger.debug("ln converged", extra_data={"branch": "newton", "iterations": iteration})
            return _irrational(updated, policy)
        y = updated
    raise _not_converged("ln (Newton)", settings.MAX_ITERATIONS)


def _ln_series(x: Real, policy: PrecisionPolicy, runtime: Runtime) -> Real:
    settings = runtime.settings
    nominal_terms = settings.LN_TERMS_PER_DIGIT * policy.significant_digits
    work = policy.working(settings.GUARD_DIGITS + len(str(nominal_terms)))
    x = x.with_policy(work)

    ratio = x.subtract(1).divide(x)
    power = ratio
    total = ratio
    budget = nominal_terms + settings.MAX_ITERATIONS
    for n in range(2, budget + 1):
        power = power.multiply(ratio)
        updated = total.add(power.divide(n))
        if updated == total:
            logger.debug("ln converged", extra_data={"branch": "series", "terms": n})
            return _irrational(total, policy)
        total = updated
    raise _not_converged("ln (series)", budget)


def _ln_scientific(x: Real, policy: PrecisionPolicy, runtime: Runtime) -> Real:
    places = x.scalar.adjusted()
    work = policy.working(runtime.settings.GUARD_DIGITS + len(str(places)))

    significand = Real(x.scalar.scaleb(-places), work)
    log_significand = Real(0, work) if significand == 1 else _ln(significand, work, runtime)
    log_ten = _ln_series(Real(10, work), work, runtime)

    logger.debug("ln by decomposition", extra_data={"exponent": places})
    return _irrational(log_significand.add(log_ten.multiply(places)), policy)


def log(x: Any, base: Any, policy: PrecisionPolicy | None = None, runtime: Runtime | None = None) -> TowerValue:
    """
    Logarithm of x to an arbitrary base, ln(x) / ln(base).

    Raises:
        DomainError: If base is not positive or equals 1
    """
    x = as_tower(x)
    base = as_tower(base)
    policy = policy if policy is not None else reconcile(x.policy, base.policy)
    runtime = runtime or get_runtime()

    if base.kind is TowerKind.COMPLEX or base.sign() is not Sign.POSITIVE or base == 1:
        raise DomainError("log", "base must be positive and different from 1", base=base.to_string())

    work = policy.working(runtime.settings.GUARD_DIGITS)
    result = ln(x, work, runtime).divide(ln(base, work, runtime))
    if result.is_infinite or result.is_zero():
        return result.with_policy(policy)
    return _irrational(result, policy)


# Scientific notation

def exponent(x: Any) -> Integer:
    """Power of ten of the most significant digit (0 for zero)."""
    x = _as_real(x, as_tower(x).policy)
    if x.is_zero():
        return Integer(0, x.policy)
    return Integer(x.scalar.adjusted(), x.policy)


def mantissa(x: Any) -> Real:
    """Significand m with 1 ≤ |m| < 10 and x = m · 10^exponent(x)."""
    x = _as_real(x, as_tower(x).policy)
    if x.is_zero():
        return x
    return Real(x.scalar.scaleb(-x.scalar.adjusted()), irrational=x.irrational)


def in_scientific_notation(x: Any) -> str:
    """Render x as mantissa × 10^exponent, e.g. 1.2345E+4."""
    power = exponent(x).value
    return f"{mantissa(x).to_string()}E{power:+d}"


# Roots

def nth_root(
    a: Any,
    n: Any,
    policy: PrecisionPolicy | None = None,
    runtime: Runtime | None = None,
) -> TowerValue:
    """
    Real nth root.

    nth_root(0, n) is 0 exactly. Exact values that are perfect nth powers
    of a rational give an exact result of the same kind (Integer and
    Rational inputs stay exact kinds); anything else is found by Newton
    iteration x ← ((n − 1)·x + a/x^(n − 1)) / n and flagged irrational.
    Odd roots of negative numbers are the negated root of the magnitude.

    Raises:
        DomainError: For n < 1, and even roots of negative numbers
    """
    a = as_tower(a)
    n = _as_int(n)
    policy = policy if policy is not None else a.policy
    runtime = runtime or get_runtime()

    if n < 1:
        raise DomainError("nth_root", "root index must be positive", n=n)
    if a.kind is TowerKind.COMPLEX:
        a = a.coerce_to(TowerKind.REAL)

    sign = a.sign()
    if sign is Sign.NEGATIVE and n % 2 == 0:
        raise DomainError("nth_root", "even root of a negative number", n=n, value=a.to_string())
    if a.is_infinite:
        return a.with_policy(policy)
    if sign is Sign.ZERO:
        return Real(0, policy)
    if sign is Sign.NEGATIVE:
        return nth_root(a.negate(), n, policy, runtime).negate()
    if n == 1:
        return _as_real(a, policy)

    if a.is_exact():
        fraction = a.to_fraction()
        numerator_root, numerator_exact = integer_nthroot(fraction.numerator, n)
        denominator_root, denominator_exact = integer_nthroot(fraction.denominator, n)
        if numerator_exact and denominator_exact:
            root = Rational(int(numerator_root), int(denominator_root), policy)
            if a.kind is TowerKind.REAL:
                return root.coerce_to(TowerKind.REAL)
            return root.coerce_to(TowerKind.INTEGER) if root.denominator == 1 else root

    policy.require_finite("nth_root")
    return _newton_root(a, n, policy, runtime)


def _newton_root(a: TowerValue, n: int, policy: PrecisionPolicy, runtime: Runtime) -> Real:
    settings = runtime.settings
    work = policy.working(settings.GUARD_DIGITS)
    a = _as_real(a, work)

    # a/n is used when it lies between 10^floor(e/n) and 10^ceil((e+1)/n),
    # which bracket the root; otherwise the upper bracket is the seed
    places = a.scalar.adjusted()
    upper = Real(Scalar(1).scaleb(-(-(places + 1) // n)), work)
    lower = Real(Scalar(1).scaleb(places // n), work)
    x = a.divide(n)
    if x > upper or x < lower:
        x = upper

    for iteration in range(1, settings.MAX_ITERATIONS + 1):
        power = compute_integer_exponent(x, n - 1, work, runtime)
        updated = x.multiply(n - 1).add(a.divide(power)).divide(n)
        if _converged(x, updated, policy.significant_digits):
            logger.debug("nth_root converged", extra_data={"n": n, "iterations": iteration})
            return _irrational(updated, policy)
        x = updated
    raise _not_converged("nth_root", settings.MAX_ITERATIONS)


def roots_of_unity(n: Any, policy: PrecisionPolicy, runtime: Runtime | None = None) -> frozenset:
    """
    The n complex nth roots of unity, in polar form.

    Each root has modulus 1 and angle 2πk/n for k = 1..n.

    Raises:
        DomainError: If n < 1
        PrecisionPolicyError: Under the unlimited policy
    """
    n = _as_int(n)
    if n < 1:
        raise DomainError("roots_of_unity", "count must be positive", n=n)
    policy.require_finite("roots_of_unity")
    runtime = runtime or get_runtime()

    turn = Pi.instance_for(policy, runtime).multiply(2)
    unit = Real(1, policy)
    return frozenset(
        ComplexPolar(unit, turn.multiply(Rational(k, n)), policy)
        for k in range(1, n + 1)
    )
