"""
pos_services.billing -- POS checkout and sales returns.

Responsibility:
    Turn a cart into an immutable Sale using the shop's configured state
    as the seller jurisdiction, and record returns against an issued
    Sale. All tax figures come from pos_engines; nothing here re-derives
    a formula.

Architecture position:
    Services -- orchestration over engines. No persistence: callers store
    ``Sale.to_record()`` wherever they keep sales.

Failure modes:
    - EmptyCartError from checkout() when the cart has no lines.
    - Over-returns are not possible through record_return(): requested
      quantities are clamped to what was sold, less what was already
      returned.

Usage:
    settings = get_shop_settings()
    billing = BillingService(settings)
    sale = billing.checkout(cart, Party(name="Walk-in"), "INV-0001", now)
    result = billing.record_return(sale, {"sku-1": 1})
"""

from __future__ import annotations

import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Any

from pos_config.schema import ShopSettings
from pos_engines.gst import InvoiceTotals, LineItem, compute_invoice_totals
from pos_engines.returns import (
    ReturnedLineItem,
    clamp_return_quantities,
    compute_return_totals,
    return_value,
)
from pos_kernel.domain.values import ZERO, Money, to_decimal
from pos_kernel.exceptions import EmptyCartError
from pos_kernel.logging_config import LogContext, get_logger
from pos_services.sale import Party, Sale

logger = get_logger("services.billing")


@dataclass(frozen=True)
class ReturnResult:
    """Outcome of recording a return: updated sale plus credit-note figures."""

    sale: Sale
    returned_items: tuple[ReturnedLineItem, ...]
    credit_note: InvoiceTotals
    refund: Money


class BillingService:
    """POS billing for one shop."""

    def __init__(self, settings: ShopSettings):
        self._settings = settings

    @property
    def settings(self) -> ShopSettings:
        return self._settings

    def checkout(
        self,
        cart: Sequence[LineItem],
        customer: Party,
        invoice_number: str,
        sale_date: datetime,
        payment_mode: str = "cash",
        is_gst_invoice: bool = True,
    ) -> Sale:
        """Compute totals for ``cart`` and return the issued Sale."""
        with LogContext.bind(shop_id=self._settings.shop_id, invoice_number=invoice_number):
            if not cart:
                logger.warning("checkout_rejected_empty_cart", extra={})
                raise EmptyCartError(invoice_number)

            t0 = time.monotonic()
            totals = compute_invoice_totals(
                cart,
                customer.state,
                self._settings.company_state,
                self._settings.currency,
            )
            sale = Sale(
                invoice_number=invoice_number,
                sale_date=sale_date,
                customer=customer,
                items=tuple(cart),
                totals=totals,
                payment_mode=payment_mode,
                is_gst_invoice=is_gst_invoice,
            )

            logger.info("sale_checked_out", extra={
                "item_count": len(cart),
                "total": str(totals.total.amount),
                "is_intra_state": totals.is_intra_state,
                "payment_mode": payment_mode,
                "duration_ms": round((time.monotonic() - t0) * 1000, 2),
            })
            return sale

    def returnable_quantities(self, sale: Sale) -> dict[str, Decimal]:
        """Quantity still returnable per product_id."""
        already: dict[str, Decimal] = {}
        for item in sale.returned_items:
            if item.product_id is not None:
                already[item.product_id] = already.get(item.product_id, ZERO) + item.quantity

        remaining: dict[str, Decimal] = {}
        for item in sale.items:
            if item.product_id is None:
                continue
            sold = remaining.get(item.product_id, ZERO) + max(item.quantity, ZERO)
            remaining[item.product_id] = sold
        return {
            pid: max(qty - already.get(pid, ZERO), ZERO) for pid, qty in remaining.items()
        }

    def record_return(self, sale: Sale, requested: Mapping[str, Any]) -> ReturnResult:
        """
        Record returned quantities (keyed by product_id) against ``sale``.

        Quantities are clamped to what is still returnable. The credit note
        uses the sale's own intra/inter-state classification.
        """
        with LogContext.bind(shop_id=self._settings.shop_id, invoice_number=sale.invoice_number):
            remaining = self.returnable_quantities(sale)
            capped = {
                pid: min(to_decimal(qty), remaining.get(pid, ZERO))
                for pid, qty in requested.items()
            }
            returned = tuple(clamp_return_quantities(sale.items, capped))

            credit_note = compute_return_totals(
                returned, sale.totals.is_intra_state, sale.totals.currency
            )
            refund = return_value(returned, sale.totals.currency)
            updated = replace(sale, returned_items=sale.returned_items + returned)

            logger.info("sale_return_recorded", extra={
                "returned_line_count": len(returned),
                "credit_note_total": str(credit_note.total.amount),
                "refund": str(refund.amount),
            })
            return ReturnResult(
                sale=updated,
                returned_items=returned,
                credit_note=credit_note,
                refund=refund,
            )
