"""
pos_services.invoice_view -- View models for the A4 invoice and the receipt.

Both renderers take their row amounts from ``compute_line_amounts`` and
their tax figures from the stored Sale totals or the engine, so what is
printed always matches what was persisted. Each build re-runs
``compute_invoice_totals`` on the sale lines and logs
``invoice_total_drift`` when the stored total disagrees.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from pos_config.schema import ShopSettings
from pos_engines.amount_words import amount_in_words
from pos_engines.gst import (
    InvoiceTotals,
    RateBreakdown,
    compute_gst_breakdown_by_rate,
    compute_invoice_totals,
    compute_line_amounts,
    is_intra_state,
)
from pos_kernel.domain.values import Money
from pos_kernel.logging_config import get_logger
from pos_services.sale import Party, Sale

logger = get_logger("services.invoice_view")


@dataclass(frozen=True)
class InvoiceRow:
    """One printed line: taxable amount after discount, before GST."""

    index: int
    name: str
    hsn: str | None
    quantity: Decimal
    unit: str | None
    rate: Money
    discount_percent: Decimal
    amount: Money


@dataclass(frozen=True)
class DetailedInvoice:
    """Full A4 tax invoice with seller, customer and per-rate summary."""

    invoice_number: str
    sale_date: datetime
    seller: ShopSettings
    customer: Party
    rows: tuple[InvoiceRow, ...]
    totals: InvoiceTotals
    breakdown: tuple[RateBreakdown, ...]
    has_tax: bool
    amount_in_words: str
    totals_match: bool


@dataclass(frozen=True)
class CompactReceipt:
    """Thermal receipt; the inapplicable tax side is shown as zero."""

    invoice_number: str
    sale_date: datetime
    rows: tuple[InvoiceRow, ...]
    subtotal: Money
    cgst: Money
    sgst: Money
    igst: Money
    total: Money
    totals_match: bool


def _rows(sale: Sale) -> tuple[InvoiceRow, ...]:
    currency = sale.totals.currency
    rows = []
    for index, item in enumerate(sale.items, start=1):
        amounts = compute_line_amounts(item)
        rows.append(
            InvoiceRow(
                index=index,
                name=item.name,
                hsn=item.hsn,
                quantity=item.quantity,
                unit=item.unit,
                rate=Money(amount=item.unit_price, currency=currency).round(),
                discount_percent=item.discount_percent,
                amount=Money(amount=amounts.taxable, currency=currency).round(),
            )
        )
    return tuple(rows)


def verify_stored_totals(sale: Sale, settings: ShopSettings) -> bool:
    """True when the stored total matches a fresh computation of the lines."""
    recomputed = compute_invoice_totals(
        sale.items, sale.customer.state, settings.company_state, sale.totals.currency
    )
    drift = abs(recomputed.total.amount - sale.totals.total.amount)
    if drift > sale.totals.currency.rounding_tolerance:
        logger.warning("invoice_total_drift", extra={
            "invoice_number": sale.invoice_number,
            "stored_total": str(sale.totals.total.amount),
            "recomputed_total": str(recomputed.total.amount),
            "drift": str(drift),
        })
        return False
    return True


def build_detailed_invoice(sale: Sale, settings: ShopSettings) -> DetailedInvoice:
    """A4 tax invoice: rows, stored totals, rate-wise summary, amount in words."""
    totals = sale.totals
    breakdown = compute_gst_breakdown_by_rate(
        sale.items, totals.is_intra_state, totals.currency
    )
    return DetailedInvoice(
        invoice_number=sale.invoice_number,
        sale_date=sale.sale_date,
        seller=settings,
        customer=sale.customer,
        rows=_rows(sale),
        totals=totals,
        breakdown=tuple(breakdown.values()),
        has_tax=totals.tax_total.is_positive,
        amount_in_words=amount_in_words(totals.total),
        totals_match=verify_stored_totals(sale, settings),
    )


def build_compact_receipt(sale: Sale, settings: ShopSettings) -> CompactReceipt:
    """
    Thermal receipt. The tax side that does not apply to the customer's
    state (per the shop's configured state) is shown as zero.
    """
    totals = sale.totals
    intra = is_intra_state(sale.customer.state, settings.company_state)
    zero = Money.zero(totals.currency)
    return CompactReceipt(
        invoice_number=sale.invoice_number,
        sale_date=sale.sale_date,
        rows=_rows(sale),
        subtotal=totals.subtotal,
        cgst=totals.cgst if intra else zero,
        sgst=totals.sgst if intra else zero,
        igst=zero if intra else totals.igst,
        total=totals.total,
        totals_match=verify_stored_totals(sale, settings),
    )
