"""
Shared caches for the numeric kernel.

A Runtime owns the factorial memoization cache and the canonical-constant
cache together with the Settings that tune the kernel. Hosts can build
one explicitly and pass it to kernel functions; ``get_runtime()`` returns
a lazily created process default for callers that do not care.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from ..core.config import Settings, get_settings
from ..core.logging import get_logger
from .policy import PrecisionPolicy

logger = get_logger(__name__)


class FactorialCache(BaseModel):
    """
    Memo table from n to n!.

    Grows monotonically and is never evicted. Only keys in
    ``[2, limit]`` are admitted. Writes are idempotent: storing a key that
    is already present is a no-op, so two threads racing to compute the
    same factorial cannot corrupt the table. The lock only guards the
    table itself, never a computation.
    """

    limit: int = Field(description="Largest admissible key")

    _entries: Dict[int, int] = PrivateAttr(default_factory=dict)
    _lock: Any = PrivateAttr(default_factory=threading.Lock)

    def admits(self, n: int) -> bool:
        return 2 <= n <= self.limit

    def get(self, n: int) -> Optional[int]:
        with self._lock:
            return self._entries.get(n)

    def max_key_below(self, n: int) -> Optional[Tuple[int, int]]:
        """Largest cached (key, value) with key < n, or None."""
        with self._lock:
            keys = [key for key in self._entries if key < n]
            if not keys:
                return None
            key = max(keys)
            return key, self._entries[key]

    def put(self, n: int, value: int) -> bool:
        """
        Store n! unless the key is refused or already present.

        Returns:
            True if the entry was inserted
        """
        if not self.admits(n):
            logger.debug("Factorial cache refused key", extra={"extra_data": {"key": n}})
            return False
        with self._lock:
            if n in self._entries:
                return False
            self._entries[n] = value
            return True

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, n: object) -> bool:
        with self._lock:
            return n in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class ConstantCache(BaseModel):
    """
    Canonical instances keyed by (class, policy).

    The whole check-else-construct-and-insert sequence runs under one
    re-entrant lock, so at most one instance per key is ever handed out.
    Re-entrancy lets a constant's construction request other constants.
    """

    _instances: Dict[Tuple[type, PrecisionPolicy], Any] = PrivateAttr(default_factory=dict)
    _lock: Any = PrivateAttr(default_factory=threading.RLock)

    def get_or_create(self, cls: type, policy: PrecisionPolicy, factory: Callable[[], Any]) -> Any:
        key = (cls, policy)
        with self._lock:
            instance = self._instances.get(key)
            if instance is None:
                instance = factory()
                self._instances[key] = instance
                logger.debug(
                    "Constructed canonical instance",
                    extra={"extra_data": {"constant": cls.__name__, "policy": str(policy)}},
                )
            return instance

    def clear(self) -> None:
        with self._lock:
            self._instances.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._instances)


class Runtime(BaseModel):
    """
    Kernel state: settings plus the shared caches.

    Example:
        >>> runtime = Runtime()
        >>> factorial(20, runtime=runtime)
        >>> Pi.instance_for(PrecisionPolicy(30), runtime)
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    settings: Settings
    factorials: FactorialCache
    constants: ConstantCache

    def __init__(self, settings: Optional[Settings] = None, **kwargs):
        settings = settings or get_settings()
        kwargs.setdefault("factorials", FactorialCache(limit=settings.FACTORIAL_CACHE_LIMIT))
        kwargs.setdefault("constants", ConstantCache())
        super().__init__(settings=settings, **kwargs)


_runtime_lock = threading.Lock()
_current_runtime: Optional[Runtime] = None


def get_runtime() -> Runtime:
    """
    Get the process default runtime.

    Returns:
        Current runtime (created on first use)
    """
    global _current_runtime

    with _runtime_lock:
        if _current_runtime is None:
            _current_runtime = Runtime()
        return _current_runtime


def set_runtime(runtime: Optional[Runtime]) -> Optional[Runtime]:
    """
    Replace the process default runtime.

    Args:
        runtime: New default (None = create a fresh one on next use)

    Returns:
        The previous default
    """
    global _current_runtime

    with _runtime_lock:
        previous = _current_runtime
        _current_runtime = runtime
        return previous
