"""
Pure domain layer.

Value objects with NO dependencies on persistence, time or I/O.
All domain objects are immutable and deterministic.
"""

from pos_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from pos_kernel.domain.values import Currency, Money, is_discarded_number, to_decimal

__all__ = [
    "Currency",
    "CurrencyInfo",
    "CurrencyRegistry",
    "Money",
    "is_discarded_number",
    "to_decimal",
]
