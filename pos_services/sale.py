"""
pos_services.sale -- Sale (invoice) record shared by the call sites.

A Sale is created once at checkout and is immutable afterwards. Returns
are recorded by producing a new Sale with more ``returned_items``; the
issued totals never change. ``from_record``/``to_record`` translate the
persisted document shape (``price``, ``discount``, ``gst``,
``returnedItems``, ...) without re-deriving any tax figures.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any

from pos_engines.gst import DEFAULT_CURRENCY, InvoiceTotals, LineItem, is_intra_state
from pos_engines.returns import ReturnedLineItem
from pos_kernel.domain.values import Money, to_decimal


@dataclass(frozen=True)
class Party:
    """Buyer or seller. ``state`` is free text compared case-insensitively."""

    name: str = ""
    state: str | None = None
    gstin: str | None = None
    address: str | None = None
    pin: str | None = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any] | None) -> Party:
        record = record or {}
        return cls(
            name=record.get("name") or "",
            state=record.get("state"),
            gstin=record.get("gstin") or None,
            address=record.get("address"),
            pin=record.get("pin"),
        )

    @property
    def is_registered(self) -> bool:
        """True for a GST-registered (B2B) customer."""
        return bool(self.gstin and self.gstin.strip())


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str):
        return datetime.fromisoformat(value.strip())
    raise ValueError(f"Cannot parse sale date from {value!r}")


@dataclass(frozen=True)
class Sale:
    invoice_number: str
    sale_date: datetime
    customer: Party
    items: tuple[LineItem, ...]
    totals: InvoiceTotals
    payment_mode: str = "cash"
    is_gst_invoice: bool = True
    returned_items: tuple[ReturnedLineItem, ...] = ()

    @property
    def has_returns(self) -> bool:
        return bool(self.returned_items)

    @classmethod
    def from_record(
        cls,
        record: Mapping[str, Any],
        seller_state: str,
        currency: str = DEFAULT_CURRENCY,
    ) -> Sale:
        """
        Rebuild a Sale from its persisted document.

        Stored totals are taken as issued. The intra/inter-state
        classification is not stored, so it is derived from the
        customer's state and the shop's configured ``seller_state``.
        """
        customer = Party.from_record(record.get("customer"))

        def money(key: str) -> Money:
            return Money(amount=to_decimal(record.get(key)), currency=currency)

        totals = InvoiceTotals(
            subtotal=money("subtotal"),
            cgst=money("cgst"),
            sgst=money("sgst"),
            igst=money("igst"),
            total=money("total"),
            is_intra_state=is_intra_state(customer.state, seller_state),
        )
        return cls(
            invoice_number=str(record.get("invoiceNumber") or ""),
            sale_date=_parse_datetime(record.get("date")),
            customer=customer,
            items=tuple(LineItem.from_record(r) for r in record.get("items") or ()),
            totals=totals,
            payment_mode=record.get("paymentMode") or "cash",
            is_gst_invoice=bool(record.get("isGstInvoice")),
            returned_items=tuple(
                ReturnedLineItem.from_record(r) for r in record.get("returnedItems") or ()
            ),
        )

    def to_record(self) -> dict[str, Any]:
        """Document shape for persistence; amounts as 2-place strings."""

        def amount(m: Money) -> str:
            return str(m.round().amount)

        return {
            "invoiceNumber": self.invoice_number,
            "date": self.sale_date.isoformat(),
            "customer": {
                "name": self.customer.name,
                "state": self.customer.state,
                "gstin": self.customer.gstin,
                "address": self.customer.address,
                "pin": self.customer.pin,
            },
            "items": [
                {
                    "productId": item.product_id,
                    "name": item.name,
                    "hsn": item.hsn,
                    "unit": item.unit,
                    "price": str(item.unit_price),
                    "quantity": str(item.quantity),
                    "discount": str(item.discount_percent),
                    "gst": str(item.gst_rate_percent),
                }
                for item in self.items
            ],
            "subtotal": amount(self.totals.subtotal),
            "cgst": amount(self.totals.cgst),
            "sgst": amount(self.totals.sgst),
            "igst": amount(self.totals.igst),
            "total": amount(self.totals.total),
            "paymentMode": self.payment_mode,
            "isGstInvoice": self.is_gst_invoice,
            "returnedItems": [
                {
                    "productId": item.product_id,
                    "name": item.name,
                    "price": str(item.price),
                    "quantity": str(item.quantity),
                    "discount": str(item.discount_percent),
                    "gst": str(item.gst_rate_percent),
                }
                for item in self.returned_items
            ],
        }
