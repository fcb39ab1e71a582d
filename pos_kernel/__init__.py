"""
POS Kernel - shared foundation for the point-of-sale tax engine.

Provides:
- Structured JSON logging with request-scoped context
- Typed exceptions with machine-readable codes
- Immutable Money/Currency value objects with explicit rounding
"""

__version__ = "0.1.0"
