"""
Numeric tower exceptions.

Defines the error taxonomy shared by the tower values, the coercion
resolver and the algorithmic kernel. Every error carries a message and a
``details`` mapping so callers can log or report it in a structured way.
"""

from typing import Any, Dict, Optional


class TowerError(Exception):
    """Base exception for numeric tower errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class CoercionError(TowerError, TypeError):
    """Raised when a value cannot be represented in the requested kind"""

    def __init__(self, message: str, source_kind: Any = None, target_kind: Any = None):
        details = {}
        if source_kind is not None:
            details["source_kind"] = getattr(source_kind, "name", str(source_kind))
        if target_kind is not None:
            details["target_kind"] = getattr(target_kind, "name", str(target_kind))
        super().__init__(message=message, details=details)
        self.source_kind = source_kind
        self.target_kind = target_kind


class InvalidLiteral(TowerError, ValueError):
    """Raised when a literal cannot be parsed as a number"""

    def __init__(self, literal: Any, expected: str = "number"):
        super().__init__(
            message=f"Cannot parse {literal!r} as a {expected}",
            details={"literal": str(literal), "expected": expected},
        )


class DomainError(TowerError, ArithmeticError):
    """Raised when an operation is undefined for its argument"""

    def __init__(self, operation: str, reason: str, **details: Any):
        super().__init__(
            message=f"{operation}: {reason}",
            details={"operation": operation, **details},
        )
        self.operation = operation


class DivisionByZero(DomainError, ZeroDivisionError):
    """Raised when dividing by the zero element"""

    def __init__(self, operation: str = "divide"):
        super().__init__(operation, "division by zero")


class NonTerminatingExpansion(DomainError):
    """Raised when an exact decimal is requested but the expansion never ends"""

    def __init__(self, numerator: int, denominator: int):
        super().__init__(
            "divide",
            f"{numerator}/{denominator} has no terminating decimal expansion",
            numerator=numerator,
            denominator=denominator,
        )


class UnsupportedOperation(TowerError, NotImplementedError):
    """Raised when a combination of kinds has no defined algorithm"""

    def __init__(self, operation: str, kind: Any = None, message: Optional[str] = None):
        details: Dict[str, Any] = {"operation": operation}
        if kind is not None:
            details["kind"] = getattr(kind, "name", str(kind))
        if message is None:
            suffix = f" for {details['kind']}" if "kind" in details else ""
            message = f"Unsupported operation '{operation}'{suffix}"
        super().__init__(message=message, details=details)


class UnsupportedExponentKind(UnsupportedOperation):
    """Raised when an exponent's kind has no exponentiation algorithm"""

    def __init__(self, kind: Any, base_kind: Any = None):
        name = getattr(kind, "name", str(kind))
        message = f"Exponents of kind {name} are not supported"
        if base_kind is not None:
            message += f" for a {getattr(base_kind, 'name', str(base_kind))} base"
        super().__init__("exponentiate", kind, message=message)


class PrecisionPolicyError(TowerError, ValueError):
    """Raised for unrepresentable or unusable precision policies"""

    def __init__(self, message: str, **details: Any):
        super().__init__(message=message, details=details)


class ConvergenceFailure(TowerError, ArithmeticError):
    """Raised when an iterative method exceeds its iteration budget"""

    def __init__(self, method: str, iterations: int):
        super().__init__(
            message=f"{method} did not converge within {iterations} iterations",
            details={"method": method, "iterations": iterations},
        )
        self.iterations = iterations
