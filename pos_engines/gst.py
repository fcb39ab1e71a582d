"""
GST Engine - Invoice totals and rate-wise tax breakdown for POS sales.

Computes per-item taxable value and GST on a tax-exclusive cart, splits
the tax into CGST+SGST (buyer and seller in the same state) or IGST
(different states), and aggregates invoice totals. Pure functions with
no I/O; the seller's state is always passed in by the caller.

Order of operations (identical for every caller):
    1. Per item, at full precision:
         gross    = unit_price * quantity
         discount = gross * discount_percent / 100
         taxable  = gross - discount
         tax      = taxable * gst_rate_percent / 100
    2. Accumulate taxable into subtotal and tax into cgst/sgst (half
       each) or igst, still at full precision.
    3. total = subtotal + cgst + sgst + igst
    4. Round each figure once, half-up, to the currency's precision.

Usage:
    from decimal import Decimal
    from pos_engines.gst import LineItem, compute_invoice_totals

    items = [
        LineItem(unit_price=Decimal("250"), quantity=2, gst_rate_percent=5),
        LineItem(unit_price=Decimal("1999"), quantity=1,
                 discount_percent=10, gst_rate_percent=5),
    ]
    totals = compute_invoice_totals(items, "Assam", "Assam")
    print(totals.total)  # Money: 2414.06 INR
"""

from __future__ import annotations

import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from pos_engines.tracer import traced_engine
from pos_kernel.domain.values import ZERO, Currency, Money, is_discarded_number, to_decimal
from pos_kernel.logging_config import get_logger

logger = get_logger("engines.gst")

HUNDRED = Decimal("100")
TWO = Decimal("2")
DEFAULT_CURRENCY = "INR"


def normalize_state(state: str | None) -> str:
    """Lowercase and trim a free-text state name. None becomes ""."""
    if not state:
        return ""
    return str(state).strip().lower()


def is_intra_state(buyer_state: str | None, seller_state: str | None) -> bool:
    """
    True when the sale is taxed as CGST+SGST.

    A missing or blank buyer state defaults to the seller's state, so it
    is always intra-state.
    """
    buyer = normalize_state(buyer_state)
    if not buyer:
        return True
    return buyer == normalize_state(seller_state)


@dataclass(frozen=True)
class LineItem:
    """
    One product entry in a cart or invoice, priced tax-exclusive.

    Numeric fields accept int, str, float or Decimal and are coerced with
    ``to_decimal``; missing or non-finite values become zero. The names
    of coerced fields are kept in ``coerced_fields`` so the engine can
    report them.
    """

    unit_price: Decimal
    quantity: Decimal
    discount_percent: Decimal = ZERO
    gst_rate_percent: Decimal = ZERO
    name: str = ""
    product_id: str | None = None
    hsn: str | None = None
    unit: str | None = None
    coerced_fields: tuple[str, ...] = field(default=(), compare=False, repr=False)

    def __post_init__(self) -> None:
        coerced: list[str] = list(self.coerced_fields)
        for name in ("unit_price", "quantity", "discount_percent", "gst_rate_percent"):
            raw = getattr(self, name)
            if is_discarded_number(raw):
                coerced.append(name)
            object.__setattr__(self, name, to_decimal(raw))
        object.__setattr__(self, "coerced_fields", tuple(dict.fromkeys(coerced)))

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> LineItem:
        """Build a LineItem from a persisted sale line (price/quantity/discount/gst)."""
        return cls(
            unit_price=record.get("price"),
            quantity=record.get("quantity"),
            discount_percent=record.get("discount"),
            gst_rate_percent=record.get("gst"),
            name=record.get("name") or "",
            product_id=record.get("productId") or record.get("id"),
            hsn=record.get("hsn"),
            unit=record.get("unit"),
        )


@dataclass(frozen=True)
class LineAmounts:
    """Per-item figures at full precision. Renderers round for display."""

    gross: Decimal
    discount: Decimal
    taxable: Decimal
    tax: Decimal
    line_total: Decimal


@dataclass(frozen=True)
class InvoiceTotals:
    """
    Invoice-level totals, rounded once at the output boundary.

    Exactly one of (cgst + sgst) and igst is non-zero when there is tax.
    ``total`` is derived from the unrounded components, so it can differ
    from the sum of the rounded components by one minor unit.
    """

    subtotal: Money
    cgst: Money
    sgst: Money
    igst: Money
    total: Money
    is_intra_state: bool

    @classmethod
    def zero(cls, currency: str | Currency = DEFAULT_CURRENCY, is_intra_state: bool = True) -> InvoiceTotals:
        z = Money.zero(currency)
        return cls(subtotal=z, cgst=z, sgst=z, igst=z, total=z, is_intra_state=is_intra_state)

    @property
    def currency(self) -> Currency:
        return self.total.currency

    @property
    def tax_total(self) -> Money:
        return self.cgst + self.sgst + self.igst

    @property
    def is_negative(self) -> bool:
        """True when any figure went below zero (e.g. an over-return)."""
        return any(
            m.is_negative for m in (self.subtotal, self.cgst, self.sgst, self.igst, self.total)
        )

    def as_dict(self) -> dict[str, Any]:
        """Plain representation for persistence (amounts as Decimal)."""
        return {
            "subtotal": self.subtotal.amount,
            "cgst": self.cgst.amount,
            "sgst": self.sgst.amount,
            "igst": self.igst.amount,
            "total": self.total.amount,
            "is_intra_state": self.is_intra_state,
            "currency": self.currency.code,
        }


@dataclass(frozen=True)
class RateBreakdown:
    """Taxable value and tax split for one GST slab."""

    rate: Decimal
    taxable: Money
    cgst: Money
    sgst: Money
    igst: Money

    @property
    def tax_total(self) -> Money:
        return self.cgst + self.sgst + self.igst


class TaxAccumulator:
    """
    Full-precision running totals for one invoice, slab or credit note.

    Local to a single engine call; never shared.
    """

    def __init__(self, is_intra_state: bool):
        self.is_intra_state = is_intra_state
        self.subtotal = ZERO
        self.cgst = ZERO
        self.sgst = ZERO
        self.igst = ZERO

    def add(self, taxable: Decimal, tax: Decimal) -> None:
        self.subtotal += taxable
        if self.is_intra_state:
            half = tax / TWO
            self.cgst += half
            self.sgst += half
        else:
            self.igst += tax

    @property
    def total(self) -> Decimal:
        return self.subtotal + self.cgst + self.sgst + self.igst

    def to_totals(self, currency: str | Currency) -> InvoiceTotals:
        def rounded(value: Decimal) -> Money:
            return Money(amount=value, currency=currency).round()

        return InvoiceTotals(
            subtotal=rounded(self.subtotal),
            cgst=rounded(self.cgst),
            sgst=rounded(self.sgst),
            igst=rounded(self.igst),
            total=rounded(self.total),
            is_intra_state=self.is_intra_state,
        )


def _sanitized_inputs(item: LineItem) -> tuple[Decimal, Decimal, Decimal, Decimal]:
    """Apply the range rules; every adjustment is logged, none raises."""
    price = item.unit_price
    quantity = item.quantity
    discount = item.discount_percent
    rate = item.gst_rate_percent
    adjusted: dict[str, str] = {}

    if price < ZERO:
        adjusted["unit_price"] = str(price)
        price = ZERO
    if quantity < ZERO:
        adjusted["quantity"] = str(quantity)
        quantity = ZERO
    if discount < ZERO:
        adjusted["discount_percent"] = str(discount)
        discount = ZERO
    elif discount > HUNDRED:
        adjusted["discount_percent"] = str(discount)
        discount = HUNDRED
    if rate < ZERO:
        adjusted["gst_rate_percent"] = str(rate)
        rate = ZERO

    if adjusted or item.coerced_fields:
        logger.warning("line_item_input_adjusted", extra={
            "product_id": item.product_id,
            "coerced_fields": list(item.coerced_fields),
            "adjusted_fields": adjusted,
        })
    return price, quantity, discount, rate


def compute_line_amounts(item: LineItem) -> LineAmounts:
    """Forward per-item figures for a tax-exclusive line."""
    price, quantity, discount_percent, rate = _sanitized_inputs(item)
    gross = price * quantity
    discount = gross * discount_percent / HUNDRED
    taxable = gross - discount
    tax = taxable * rate / HUNDRED
    return LineAmounts(
        gross=gross,
        discount=discount,
        taxable=taxable,
        tax=tax,
        line_total=taxable + tax,
    )


@traced_engine("gst.invoice_totals", "1.0", fingerprint_fields=("items", "buyer_state", "seller_state"))
def compute_invoice_totals(
    items: Sequence[LineItem],
    buyer_state: str | None,
    seller_state: str | None,
    currency: str | Currency = DEFAULT_CURRENCY,
) -> InvoiceTotals:
    """
    Compute subtotal, CGST/SGST/IGST and total for a cart.

    Args:
        items: Cart lines, tax-exclusive. May be empty.
        buyer_state: Customer's state; blank means same as seller.
        seller_state: The shop's configured state.
        currency: Currency of the amounts.

    Returns:
        InvoiceTotals rounded to the currency's precision.
    """
    t0 = time.monotonic()
    intra = is_intra_state(buyer_state, seller_state)
    logger.debug("invoice_totals_started", extra={
        "item_count": len(items),
        "is_intra_state": intra,
    })

    acc = TaxAccumulator(intra)
    for item in items:
        amounts = compute_line_amounts(item)
        acc.add(amounts.taxable, amounts.tax)

    totals = acc.to_totals(currency)

    logger.info("invoice_totals_completed", extra={
        "item_count": len(items),
        "is_intra_state": intra,
        "subtotal": str(totals.subtotal.amount),
        "tax_total": str(totals.tax_total.amount),
        "total": str(totals.total.amount),
        "duration_ms": round((time.monotonic() - t0) * 1000, 2),
    })
    return totals


@traced_engine("gst.rate_breakdown", "1.0", fingerprint_fields=("items", "is_intra_state"))
def compute_gst_breakdown_by_rate(
    items: Sequence[LineItem],
    is_intra_state: bool,
    currency: str | Currency = DEFAULT_CURRENCY,
) -> dict[Decimal, RateBreakdown]:
    """
    Group taxable value and tax by GST slab.

    Items with numerically equal rates (5 and 5.0) share a group. The
    result is ordered by ascending rate.
    """
    groups: dict[Decimal, TaxAccumulator] = {}
    for item in items:
        amounts = compute_line_amounts(item)
        rate = max(item.gst_rate_percent, ZERO)
        acc = groups.get(rate)
        if acc is None:
            acc = groups[rate] = TaxAccumulator(is_intra_state)
        acc.add(amounts.taxable, amounts.tax)

    breakdown: dict[Decimal, RateBreakdown] = {}
    for rate in sorted(groups):
        totals = groups[rate].to_totals(currency)
        breakdown[rate] = RateBreakdown(
            rate=rate,
            taxable=totals.subtotal,
            cgst=totals.cgst,
            sgst=totals.sgst,
            igst=totals.igst,
        )

    logger.debug("rate_breakdown_completed", extra={
        "item_count": len(items),
        "slab_count": len(breakdown),
        "slabs": [str(r) for r in breakdown],
    })
    return breakdown
