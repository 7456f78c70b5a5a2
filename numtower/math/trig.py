"""
Decimal trigonometry used by the complex kinds.

Polar values need cosine and sine to produce rectangular components, and
rectangular values need atan2 for their argument. These helpers work on
raw decimals at the policy's precision plus guard digits and round the
result back to the policy.
"""

from __future__ import annotations

import decimal
from decimal import Decimal

from .policy import PrecisionPolicy
from .runtime import Runtime, get_runtime


def _working(policy: PrecisionPolicy, runtime: Runtime) -> tuple[PrecisionPolicy, decimal.Context]:
    policy.require_finite("trigonometry")
    work = policy.working(runtime.settings.GUARD_DIGITS + 2)
    return work, work.decimal_context()


def pi(policy: PrecisionPolicy, runtime: Runtime | None = None) -> Decimal:
    """π at the policy's precision, from the canonical Pi instance."""
    from .constants import Pi

    return Pi.instance_for(policy, runtime).scalar.magnitude


def normalize_angle(angle: Decimal, policy: PrecisionPolicy, runtime: Runtime | None = None) -> Decimal:
    """
    Reduce an angle into (−π, π].

    The reduction subtracts whole turns of 2π computed at the policy's
    precision, so an angle of exactly 2π (at that precision) reduces to 0.
    """
    policy.require_finite("angle normalization")
    context = policy.decimal_context()
    half_turn = pi(policy, runtime)
    turn = context.multiply(2, half_turn)
    turns = context.divide(context.add(angle, half_turn), turn).to_integral_value(
        rounding=decimal.ROUND_FLOOR
    )
    result = context.subtract(angle, context.multiply(turns, turn))
    if result <= half_turn.copy_negate():
        result = context.add(result, turn)
    elif result > half_turn:
        result = context.subtract(result, turn)
    return result


def _taylor(x: Decimal, start: int, context: decimal.Context, limit: int, method: str) -> Decimal:
    """Alternating series x^start/start! - x^(start+2)/(start+2)! + ..."""
    with decimal.localcontext(context):
        index = start
        term = Decimal(1)
        for k in range(1, start + 1):
            term = term * x / k
        total = term
        square = x * x
        for _ in range(limit):
            term = -term * square / ((index + 1) * (index + 2))
            index += 2
            updated = total + term
            if updated == total:
                return total
            total = updated
    from .kernel import _not_converged

    raise _not_converged(method, limit)


def cos(x: Decimal, policy: PrecisionPolicy, runtime: Runtime | None = None) -> Decimal:
    runtime = runtime or get_runtime()
    work, context = _working(policy, runtime)
    reduced = normalize_angle(x, work, runtime)
    result = _taylor(reduced, 0, context, runtime.settings.MAX_ITERATIONS, "cos")
    return policy.decimal_context().plus(result)


def sin(x: Decimal, policy: PrecisionPolicy, runtime: Runtime | None = None) -> Decimal:
    runtime = runtime or get_runtime()
    work, context = _working(policy, runtime)
    reduced = normalize_angle(x, work, runtime)
    result = _taylor(reduced, 1, context, runtime.settings.MAX_ITERATIONS, "sin")
    return policy.decimal_context().plus(result)


def atan(x: Decimal, policy: PrecisionPolicy, runtime: Runtime | None = None) -> Decimal:
    """
    Arctangent by argument halving and the Gregory series.

    Uses atan(x) = 2·atan(x / (1 + √(1 + x²))) until |x| ≤ 0.1, and
    atan(x) = ±π/2 − atan(1/x) for |x| > 1.
    """
    runtime = runtime or get_runtime()
    work, context = _working(policy, runtime)
    limit = runtime.settings.MAX_ITERATIONS

    if x.is_zero():
        return Decimal(0)

    with decimal.localcontext(context):
        if abs(x) > 1:
            half_pi = pi(work, runtime) / 2
            complement = atan(1 / x, work, runtime)
            result = (half_pi if x > 0 else -half_pi) - complement
            return policy.decimal_context().plus(result)

        y = +x
        doublings = 0
        while abs(y) > Decimal("0.1"):
            y = y / (1 + (1 + y * y).sqrt())
            doublings += 1

        total = y
        power = y
        square = y * y
        for n in range(3, 2 * limit + 3, 2):
            power = -power * square
            updated = total + power / n
            if updated == total:
                break
            total = updated
        else:
            from .kernel import _not_converged

            raise _not_converged("atan", limit)

        result = total * (2 ** doublings)
    return policy.decimal_context().plus(result)


def atan2(y: Decimal, x: Decimal, policy: PrecisionPolicy, runtime: Runtime | None = None) -> Decimal:
    """Angle of the point (x, y) in (−π, π]; the origin maps to 0."""
    runtime = runtime or get_runtime()
    if x.is_zero():
        if y.is_zero():
            return Decimal(0)
        work, context = _working(policy, runtime)
        half_pi = context.divide(pi(work, runtime), 2)
        return policy.decimal_context().plus(half_pi if y > 0 else half_pi.copy_negate())

    work, context = _working(policy, runtime)
    base = atan(context.divide(y, x), work, runtime)
    if x > 0:
        result = base
    elif y.is_signed() and not y.is_zero():
        result = context.subtract(base, pi(work, runtime))
    else:
        result = context.add(base, pi(work, runtime))
    return policy.decimal_context().plus(result)
