"""numtower - numeric tower and precision-aware math kernel.

Subpackages:
- numtower.core: settings, logging and the error hierarchy
- numtower.math: tower value kinds, constants and the kernel algorithms
"""

__version__ = "0.1.0"

__all__ = []
