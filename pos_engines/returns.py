"""
Returns Engine - Credit-note figures and effective invoice totals.

Returned goods are recorded against an existing invoice with a
tax-inclusive unit price, so their taxable value is back-calculated:

    price_after_discount = price - price * discount_percent / 100
    taxable              = price_after_discount / (1 + gst_rate_percent / 100)
    tax                  = price_after_discount - taxable

This is the inverse of the forward formula in ``pos_engines.gst``; the
two stay separate because sale lines are stored tax-exclusive and return
lines tax-inclusive.

A return never changes jurisdiction: the CGST/SGST versus IGST split
follows the original invoice's classification.

Effective totals are never clamped. An over-return shows up as negative
figures and a ``return_exceeds_invoice`` warning; callers decide how to
flag it.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from pos_engines.gst import (
    DEFAULT_CURRENCY,
    HUNDRED,
    InvoiceTotals,
    LineAmounts,
    LineItem,
    TaxAccumulator,
)
from pos_engines.tracer import traced_engine
from pos_kernel.domain.values import ZERO, Currency, Money, is_discarded_number, to_decimal
from pos_kernel.logging_config import get_logger

logger = get_logger("engines.returns")

ONE = Decimal("1")


@dataclass(frozen=True)
class ReturnedLineItem:
    """A returned quantity of an invoice line, priced tax-inclusive per unit."""

    price: Decimal
    quantity: Decimal
    discount_percent: Decimal = ZERO
    gst_rate_percent: Decimal = ZERO
    product_id: str | None = None
    name: str = ""
    coerced_fields: tuple[str, ...] = field(default=(), compare=False, repr=False)

    def __post_init__(self) -> None:
        coerced: list[str] = list(self.coerced_fields)
        for name in ("price", "quantity", "discount_percent", "gst_rate_percent"):
            raw = getattr(self, name)
            if is_discarded_number(raw):
                coerced.append(name)
            object.__setattr__(self, name, to_decimal(raw))
        object.__setattr__(self, "coerced_fields", tuple(dict.fromkeys(coerced)))

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> ReturnedLineItem:
        """Build from a persisted ``returnedItems`` entry."""
        return cls(
            price=record.get("price"),
            quantity=record.get("quantity"),
            discount_percent=record.get("discount"),
            gst_rate_percent=record.get("gst"),
            product_id=record.get("productId") or record.get("id"),
            name=record.get("name") or "",
        )


def compute_return_line_amounts(item: ReturnedLineItem) -> LineAmounts:
    """Inverse per-item figures, scaled to the returned quantity."""
    price = max(item.price, ZERO)
    quantity = max(item.quantity, ZERO)
    discount_percent = min(max(item.discount_percent, ZERO), HUNDRED)
    rate = max(item.gst_rate_percent, ZERO)
    if item.coerced_fields or (price, quantity, discount_percent, rate) != (
        item.price, item.quantity, item.discount_percent, item.gst_rate_percent
    ):
        logger.warning("returned_item_input_adjusted", extra={
            "product_id": item.product_id,
            "coerced_fields": list(item.coerced_fields),
        })

    unit_discount = price * discount_percent / HUNDRED
    price_after_discount = price - unit_discount
    unit_taxable = price_after_discount / (ONE + rate / HUNDRED)
    unit_tax = price_after_discount - unit_taxable
    return LineAmounts(
        gross=price * quantity,
        discount=unit_discount * quantity,
        taxable=unit_taxable * quantity,
        tax=unit_tax * quantity,
        line_total=price_after_discount * quantity,
    )


@traced_engine("returns.credit_note_totals", "1.0", fingerprint_fields=("returned_items", "is_intra_state"))
def compute_return_totals(
    returned_items: Sequence[ReturnedLineItem],
    is_intra_state: bool,
    currency: str | Currency = DEFAULT_CURRENCY,
) -> InvoiceTotals:
    """Totals of the returned goods alone (the credit note), rounded once."""
    acc = TaxAccumulator(is_intra_state)
    for item in returned_items:
        amounts = compute_return_line_amounts(item)
        acc.add(amounts.taxable, amounts.tax)
    return acc.to_totals(currency)


@traced_engine("returns.adjustment", "1.0", fingerprint_fields=("original", "returned_items", "is_intra_state"))
def apply_return_adjustment(
    original: InvoiceTotals,
    returned_items: Sequence[ReturnedLineItem],
    is_intra_state: bool,
) -> InvoiceTotals:
    """
    Effective invoice totals after subtracting returned goods.

    Args:
        original: Totals as issued.
        returned_items: Lines recorded against the invoice.
        is_intra_state: The original invoice's classification.

    Returns:
        ``original`` itself when nothing was returned, with its total as
        issued. Otherwise new InvoiceTotals whose ``total`` is the sum of
        the effective components; ``original`` is untouched.
    """
    if is_intra_state != original.is_intra_state:
        logger.warning("return_classification_mismatch", extra={
            "original_is_intra_state": original.is_intra_state,
            "requested_is_intra_state": is_intra_state,
        })

    if not returned_items:
        return original

    returned = compute_return_totals(returned_items, is_intra_state, original.currency)

    subtotal = original.subtotal - returned.subtotal
    cgst = original.cgst - returned.cgst
    sgst = original.sgst - returned.sgst
    igst = original.igst - returned.igst
    effective = InvoiceTotals(
        subtotal=subtotal,
        cgst=cgst,
        sgst=sgst,
        igst=igst,
        total=subtotal + cgst + sgst + igst,
        is_intra_state=is_intra_state,
    )

    logger.info("return_adjustment_applied", extra={
        "returned_item_count": len(returned_items),
        "returned_total": str(returned.total.amount),
        "effective_total": str(effective.total.amount),
    })
    if effective.is_negative:
        logger.warning("return_exceeds_invoice", extra={
            "original_total": str(original.total.amount),
            "returned_total": str(returned.total.amount),
            "effective_total": str(effective.total.amount),
        })
    return effective


def tax_inclusive_unit_price(item: LineItem) -> Decimal:
    """Per-unit price including GST, before discount, for a sale line."""
    rate = max(item.gst_rate_percent, ZERO)
    return max(item.unit_price, ZERO) * (ONE + rate / HUNDRED)


def clamp_return_quantities(
    original_items: Sequence[LineItem],
    requested: Mapping[str, Any],
) -> list[ReturnedLineItem]:
    """
    Build returned lines from an invoice and requested quantities.

    Each requested quantity (keyed by product_id) is clamped to
    ``[0, quantity sold of that product]``. A product sold on several
    lines is returned from the first line onwards until the request is
    used up; lines with nothing to return are dropped. Prices are
    converted to the tax-inclusive convention used by returns.
    """
    wanted = {pid: to_decimal(qty) for pid, qty in requested.items()}
    outstanding = {pid: max(qty, ZERO) for pid, qty in wanted.items()}

    returned: list[ReturnedLineItem] = []
    for item in original_items:
        if item.product_id is None or item.product_id not in outstanding:
            continue
        quantity = min(outstanding[item.product_id], max(item.quantity, ZERO))
        if quantity == ZERO:
            continue
        outstanding[item.product_id] -= quantity
        returned.append(
            ReturnedLineItem(
                price=tax_inclusive_unit_price(item),
                quantity=quantity,
                discount_percent=item.discount_percent,
                gst_rate_percent=item.gst_rate_percent,
                product_id=item.product_id,
                name=item.name,
            )
        )

    for pid, qty in wanted.items():
        assigned = max(qty, ZERO) - outstanding[pid]
        if assigned != qty:
            logger.info("return_quantity_clamped", extra={
                "product_id": pid,
                "requested": str(qty),
                "clamped_to": str(assigned),
            })
    return returned


def return_value(
    returned_items: Sequence[ReturnedLineItem],
    currency: str | Currency = DEFAULT_CURRENCY,
) -> Money:
    """Refund due to the customer: Σ price after discount × quantity."""
    total = ZERO
    for item in returned_items:
        total += compute_return_line_amounts(item).line_total
    return Money(amount=total, currency=currency).round()
