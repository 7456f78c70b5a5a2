"""
Coercion resolver for mixed-kind operations.

Given two tower values, brings both to the reconciled precision policy and
promotes the lower-ranked one up to the common kind. Promotion never goes
down the tower: a failed coercion surfaces as CoercionError instead of a
truncated value.
"""

from __future__ import annotations

from ..core.errors import CoercionError
from ..core.logging import get_logger
from .policy import PrecisionPolicy, reconcile
from .value import TowerKind, TowerValue

logger = get_logger(__name__)


def common_kind(first: TowerKind, second: TowerKind) -> TowerKind:
    """The higher-ranked of two kinds."""
    return max(first, second)


def promote(value: TowerValue, kind: TowerKind, policy: PrecisionPolicy) -> TowerValue:
    """
    Bring a value to a policy and then up to a kind.

    Raises:
        CoercionError: If kind ranks below the value's kind, or the value
            cannot be represented in kind
    """
    value = value.with_policy(policy)
    if value.kind is kind:
        return value
    if value.kind > kind:
        raise CoercionError(
            f"Automatic coercion only promotes: {value.kind.name} cannot be demoted to {kind.name}",
            source_kind=value.kind,
            target_kind=kind,
        )
    try:
        return value.coerce_to(kind)
    except CoercionError as e:
        logger.debug(
            "Promotion failed",
            extra={"extra_data": {"source_kind": value.kind.name, "target_kind": kind.name, "error": e.message}},
        )
        raise


def promote_pair(first: TowerValue, second: TowerValue) -> tuple[TowerValue, TowerValue]:
    """
    Promote two values to a common kind under the reconciled policy.

    Example:
        promote_pair(Integer(2), Real("0.5")) → (Real(2), Real(0.5))
    """
    policy = reconcile(first.policy, second.policy)
    kind = common_kind(first.kind, second.kind)
    return promote(first, kind, policy), promote(second, kind, policy)
