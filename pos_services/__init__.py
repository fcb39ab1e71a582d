"""
pos_services -- caller-side surfaces over the tax engine.

POS billing, the A4 invoice and compact receipt view models, and the
monthly GST report. Each one consumes ``pos_engines`` outputs and never
re-derives a tax formula.
"""

from pos_services.billing import BillingService, ReturnResult
from pos_services.gst_report import (
    GstReport,
    GstReportRow,
    GstReportTotals,
    InvoiceType,
    build_gst_report,
)
from pos_services.invoice_view import (
    CompactReceipt,
    DetailedInvoice,
    InvoiceRow,
    build_compact_receipt,
    build_detailed_invoice,
    verify_stored_totals,
)
from pos_services.sale import Party, Sale

__all__ = [
    "BillingService",
    "CompactReceipt",
    "DetailedInvoice",
    "GstReport",
    "GstReportRow",
    "GstReportTotals",
    "InvoiceRow",
    "InvoiceType",
    "Party",
    "ReturnResult",
    "Sale",
    "build_compact_receipt",
    "build_detailed_invoice",
    "build_gst_report",
    "verify_stored_totals",
]
