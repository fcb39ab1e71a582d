"""
pos_services.gst_report -- Monthly invoice-wise GST report.

Responsibility:
    Select the GST invoices of one month, optionally only B2B (customer
    has a GSTIN) or B2C (no GSTIN), subtract each invoice's returned
    goods through ``apply_return_adjustment`` and aggregate the effective
    taxable value and CGST/SGST/IGST for the period.

Invariants enforced:
    - Returns are adjusted with the invoice's own classification.
    - Effective figures are never clamped; a row whose effective totals
      went negative carries ``has_integrity_warning``.

Failure modes:
    - InvalidReportPeriodError for a month outside 1..12 or year < 1.
"""

from __future__ import annotations

import time
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from pos_config.schema import ShopSettings
from pos_engines.returns import apply_return_adjustment
from pos_kernel.domain.values import Money
from pos_kernel.exceptions import InvalidReportPeriodError
from pos_kernel.logging_config import LogContext, get_logger
from pos_services.sale import Sale

logger = get_logger("services.gst_report")


class InvoiceType(str, Enum):
    """Which invoices a report includes."""

    ALL = "all"
    B2B = "b2b"  # customer has a GSTIN
    B2C = "b2c"  # unregistered customer


@dataclass(frozen=True)
class GstReportRow:
    invoice_date: datetime
    invoice_number: str
    customer_name: str
    customer_gstin: str | None
    taxable: Money
    cgst: Money
    sgst: Money
    igst: Money
    invoice_total: Money
    has_integrity_warning: bool = False

    @property
    def total_gst(self) -> Money:
        return self.cgst + self.sgst + self.igst


@dataclass(frozen=True)
class GstReportTotals:
    taxable_sales: Money
    cgst: Money
    sgst: Money
    igst: Money

    @property
    def total_gst(self) -> Money:
        return self.cgst + self.sgst + self.igst


@dataclass(frozen=True)
class GstReport:
    month: int
    year: int
    invoice_type: InvoiceType
    rows: tuple[GstReportRow, ...]
    totals: GstReportTotals

    @property
    def flagged_rows(self) -> tuple[GstReportRow, ...]:
        return tuple(r for r in self.rows if r.has_integrity_warning)


def _matches_type(sale: Sale, invoice_type: InvoiceType) -> bool:
    if invoice_type is InvoiceType.B2B:
        return sale.customer.is_registered
    if invoice_type is InvoiceType.B2C:
        return not sale.customer.is_registered
    return True


def select_sales(
    sales: Iterable[Sale],
    month: int,
    year: int,
    invoice_type: InvoiceType = InvoiceType.ALL,
) -> list[Sale]:
    """GST invoices dated in ``month``/``year`` of the requested type."""
    return [
        sale
        for sale in sales
        if sale.is_gst_invoice
        and sale.sale_date.year == year
        and sale.sale_date.month == month
        and _matches_type(sale, invoice_type)
    ]


def build_report_row(sale: Sale) -> GstReportRow:
    """Effective figures for one invoice after its returns."""
    effective = apply_return_adjustment(
        sale.totals, sale.returned_items, sale.totals.is_intra_state
    )
    return GstReportRow(
        invoice_date=sale.sale_date,
        invoice_number=sale.invoice_number,
        customer_name=sale.customer.name,
        customer_gstin=sale.customer.gstin,
        taxable=effective.subtotal,
        cgst=effective.cgst,
        sgst=effective.sgst,
        igst=effective.igst,
        invoice_total=effective.total,
        has_integrity_warning=effective.is_negative,
    )


def build_gst_report(
    sales: Iterable[Sale],
    settings: ShopSettings,
    month: int,
    year: int,
    invoice_type: InvoiceType = InvoiceType.ALL,
) -> GstReport:
    """
    Build the invoice-wise GST report for one month.

    Args:
        sales: Candidate sales (any period, any type).
        settings: Shop settings; supplies the report currency.
        month: 1..12.
        year: Calendar year.
        invoice_type: ALL, B2B or B2C.
    """
    if not 1 <= month <= 12 or year < 1:
        raise InvalidReportPeriodError(month, year)

    with LogContext.bind(shop_id=settings.shop_id):
        t0 = time.monotonic()
        selected = select_sales(sales, month, year, invoice_type)
        rows = tuple(build_report_row(sale) for sale in selected)

        zero = Money.zero(settings.currency)
        taxable, cgst, sgst, igst = zero, zero, zero, zero
        for row in rows:
            taxable += row.taxable
            cgst += row.cgst
            sgst += row.sgst
            igst += row.igst

        report = GstReport(
            month=month,
            year=year,
            invoice_type=invoice_type,
            rows=rows,
            totals=GstReportTotals(taxable_sales=taxable, cgst=cgst, sgst=sgst, igst=igst),
        )

        if report.flagged_rows:
            logger.warning("gst_report_integrity_warnings", extra={
                "invoice_numbers": [r.invoice_number for r in report.flagged_rows],
            })
        logger.info("gst_report_built", extra={
            "month": month,
            "year": year,
            "invoice_type": invoice_type.value,
            "invoice_count": len(rows),
            "total_gst": str(report.totals.total_gst.amount),
            "duration_ms": round((time.monotonic() - t0) * 1000, 2),
        })
        return report
