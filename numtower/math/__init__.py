"""
towermath - numeric tower with precision-aware arithmetic

Value kinds ordered Integer < Rational < Real < Complex with:
- Automatic promotion of mixed-kind operands
- Explicit precision policies (significant digits + rounding rule)
- Canonical constants (Zero, One, i, π, e)
- A kernel of factorial, exponent, logarithm and root algorithms
"""

from .coercion import common_kind, promote, promote_pair
from .complex import Complex, ComplexPolar, ComplexRect
from .constants import Euler, ImaginaryUnit, One, Pi, Zero
from .integer import Integer
from .kernel import (
    compute_integer_exponent,
    exp,
    exponent,
    factorial,
    generalized_exponent,
    in_scientific_notation,
    ln,
    log,
    mantissa,
    nth_root,
    roots_of_unity,
)
from .policy import UNLIMITED, PrecisionPolicy, RoundingRule, infer_policy, reconcile
from .rational import Rational, RepeatingDecimal
from .real import Real, RealInfinity
from .runtime import ConstantCache, FactorialCache, Runtime, get_runtime, set_runtime
from .scalar import Scalar
from .value import Identity, Sign, TowerKind, TowerValue, as_tower

__all__ = [
    "TowerValue",
    "TowerKind",
    "Sign",
    "Identity",
    "as_tower",
    "PrecisionPolicy",
    "RoundingRule",
    "UNLIMITED",
    "reconcile",
    "infer_policy",
    "Scalar",
    "Integer",
    "Rational",
    "RepeatingDecimal",
    "Real",
    "RealInfinity",
    "Complex",
    "ComplexRect",
    "ComplexPolar",
    "Zero",
    "One",
    "ImaginaryUnit",
    "Pi",
    "Euler",
    "common_kind",
    "promote",
    "promote_pair",
    "Runtime",
    "FactorialCache",
    "ConstantCache",
    "get_runtime",
    "set_runtime",
    "factorial",
    "compute_integer_exponent",
    "exp",
    "ln",
    "log",
    "mantissa",
    "exponent",
    "in_scientific_notation",
    "nth_root",
    "generalized_exponent",
    "roots_of_unity",
]
