"""Core utilities package"""

from .config import settings, get_settings, Settings
from .logging import setup_logging, get_logger, get_context_logger
from .errors import (
    TowerError,
    CoercionError,
    InvalidLiteral,
    DomainError,
    DivisionByZero,
    NonTerminatingExpansion,
    UnsupportedOperation,
    UnsupportedExponentKind,
    PrecisionPolicyError,
    ConvergenceFailure,
)

__all__ = [
    "settings",
    "get_settings",
    "Settings",
    "setup_logging",
    "get_logger",
    "get_context_logger",
    "TowerError",
    "CoercionError",
    "InvalidLiteral",
    "DomainError",
    "DivisionByZero",
    "NonTerminatingExpansion",
    "UnsupportedOperation",
    "UnsupportedExponentKind",
    "PrecisionPolicyError",
    "ConvergenceFailure",
]
