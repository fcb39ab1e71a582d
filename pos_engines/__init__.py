"""
Module: pos_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    tax calculation engine. This is the canonical import surface for
    pos_services (billing, invoice views, GST report).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import pos_kernel (values, logging) and sibling engine modules.
    MUST NOT import pos_services or pos_config.

Invariants enforced:
    - Decimal-only arithmetic; floats are converted through ``str`` at the
      item boundary.
    - A single order of operations for every caller: per-item figures at
      full precision, accumulate, round once on output.
    - Determinism: identical inputs always produce identical outputs.
    - No ambient state: the seller's state is always an argument.

Audit relevance:
    Every engine invocation is traced via ``@traced_engine`` (see
    ``pos_engines.tracer``), emitting POS_ENGINE_TRACE log records with
    engine name, version, input fingerprint and duration.

Usage:
    from pos_engines import LineItem, compute_invoice_totals
    from pos_engines import ReturnedLineItem, apply_return_adjustment
"""

from pos_kernel.logging_config import get_logger

logger = get_logger("engines")

from pos_engines.amount_words import amount_in_words
from pos_engines.gst import (
    InvoiceTotals,
    LineAmounts,
    LineItem,
    RateBreakdown,
    compute_gst_breakdown_by_rate,
    compute_invoice_totals,
    compute_line_amounts,
    is_intra_state,
    normalize_state,
)
from pos_engines.returns import (
    ReturnedLineItem,
    apply_return_adjustment,
    clamp_return_quantities,
    compute_return_line_amounts,
    compute_return_totals,
    return_value,
    tax_inclusive_unit_price,
)
from pos_engines.tracer import traced_engine

__all__ = [
    "InvoiceTotals",
    "LineAmounts",
    "LineItem",
    "RateBreakdown",
    "ReturnedLineItem",
    "amount_in_words",
    "apply_return_adjustment",
    "clamp_return_quantities",
    "compute_gst_breakdown_by_rate",
    "compute_invoice_totals",
    "compute_line_amounts",
    "compute_return_line_amounts",
    "compute_return_totals",
    "is_intra_state",
    "normalize_state",
    "return_value",
    "tax_inclusive_unit_price",
    "traced_engine",
]
