"""
Tests for the invoice and receipt view models.

Covers:
- Row amounts come from the forward line formula
- Stored totals are shown as issued, with a drift check
- Rate-wise summary and amount in words
- The compact receipt shows only the applicable tax side
"""

from decimal import Decimal

from pos_kernel.domain.values import Money
from pos_services.billing import BillingService
from pos_services.invoice_view import (
    build_compact_receipt,
    build_detailed_invoice,
    verify_stored_totals,
)
from pos_services.sale import Party, Sale


def inr(amount: str) -> Money:
    return Money.of(amount, "INR")


def _record(**overrides):
    record = {
        "invoiceNumber": "INV-0042",
        "date": "2024-05-14T11:30:00",
        "customer": {"name": "Walk-in", "state": "Assam"},
        "items": [
            {"productId": "tea-250", "name": "Masala Tea", "price": 250, "quantity": 2, "discount": 0, "gst": 5},
            {"productId": "cooker-5l", "name": "Cooker", "price": 1999, "quantity": 1, "discount": 10, "gst": 5},
        ],
        "subtotal": 2299.1,
        "cgst": 57.48,
        "sgst": 57.48,
        "igst": 0,
        "total": 2414.06,
    }
    record.update(overrides)
    return record


class TestDetailedInvoice:

    def test_rows_use_taxable_amount(self, shop_settings, sample_cart, sale_date):
        sale = BillingService(shop_settings).checkout(sample_cart, Party(name="A"), "INV-1", sale_date)

        invoice = build_detailed_invoice(sale, shop_settings)

        assert [row.index for row in invoice.rows] == [1, 2]
        assert invoice.rows[0].amount == inr("500.00")
        assert invoice.rows[1].amount == inr("1799.10")
        assert invoice.rows[1].rate == inr("1999.00")
        assert invoice.rows[1].discount_percent == Decimal("10")
        assert invoice.rows[0].hsn == "0902"

    def test_totals_and_words(self, shop_settings, sample_cart, sale_date):
        sale = BillingService(shop_settings).checkout(sample_cart, Party(name="A"), "INV-1", sale_date)

        invoice = build_detailed_invoice(sale, shop_settings)

        assert invoice.totals == sale.totals
        assert invoice.has_tax
        assert invoice.totals_match
        assert invoice.amount_in_words == "TWO THOUSAND FOUR HUNDRED AND FOURTEEN"
        assert invoice.seller.company_name == "Brahmaputra Traders"

    def test_rate_summary(self, shop_settings, sample_cart, sale_date):
        sale = BillingService(shop_settings).checkout(sample_cart, Party(name="A"), "INV-1", sale_date)

        invoice = build_detailed_invoice(sale, shop_settings)

        assert len(invoice.breakdown) == 1
        slab = invoice.breakdown[0]
        assert slab.rate == Decimal("5")
        assert slab.taxable == inr("2299.10")
        assert slab.cgst == inr("57.48")

    def test_zero_rated_invoice_has_no_tax(self, shop_settings):
        sale = Sale.from_record(
            _record(
                items=[{"productId": "rice", "price": 60, "quantity": 5, "gst": 0}],
                subtotal=300, cgst=0, sgst=0, igst=0, total=300,
            ),
            shop_settings.company_state,
        )

        invoice = build_detailed_invoice(sale, shop_settings)

        assert not invoice.has_tax
        assert invoice.amount_in_words == "THREE HUNDRED"

    def test_stored_total_drift_is_flagged(self, captured_logs, shop_settings):
        sale = Sale.from_record(_record(total=2500), shop_settings.company_state)

        invoice = build_detailed_invoice(sale, shop_settings)

        assert not invoice.totals_match
        assert invoice.totals.total == inr("2500")
        drift = [r for r in captured_logs() if r["message"] == "invoice_total_drift"]
        assert drift[0]["recomputed_total"] == "2414.06"


class TestCompactReceipt:

    def test_intra_state_receipt(self, shop_settings):
        sale = Sale.from_record(_record(), shop_settings.company_state)

        receipt = build_compact_receipt(sale, shop_settings)

        assert receipt.cgst == inr("57.48")
        assert receipt.sgst == inr("57.48")
        assert receipt.igst.is_zero
        assert receipt.total == inr("2414.06")
        assert receipt.totals_match

    def test_inapplicable_side_is_zeroed(self, shop_settings):
        """A record carrying both sides shows only the one that applies."""
        sale = Sale.from_record(
            _record(customer={"name": "B", "state": "Bihar"}, cgst=57.48, sgst=57.48, igst=114.96),
            shop_settings.company_state,
        )

        receipt = build_compact_receipt(sale, shop_settings)

        assert receipt.cgst.is_zero
        assert receipt.sgst.is_zero
        assert receipt.igst == inr("114.96")

    def test_blank_customer_state_is_local(self, shop_settings):
        sale = Sale.from_record(_record(customer={"name": "C", "state": ""}), shop_settings.company_state)

        receipt = build_compact_receipt(sale, shop_settings)

        assert receipt.cgst == inr("57.48")
        assert receipt.igst.is_zero


class TestVerifyStoredTotals:

    def test_within_tolerance(self, shop_settings):
        sale = Sale.from_record(_record(total=2414.05), shop_settings.company_state)

        assert verify_stored_totals(sale, shop_settings)

    def test_outside_tolerance(self, shop_settings):
        sale = Sale.from_record(_record(total=2414.00), shop_settings.company_state)

        assert not verify_stored_totals(sale, shop_settings)


class TestSaleRecord:

    def test_from_record_derives_classification(self, shop_settings):
        local = Sale.from_record(_record(), "Assam")
        remote = Sale.from_record(_record(customer={"name": "D", "state": "Odisha"}), "Assam")

        assert local.totals.is_intra_state
        assert not remote.totals.is_intra_state

    def test_from_record_fields(self):
        sale = Sale.from_record(
            _record(paymentMode="card", isGstInvoice=False, returnedItems=[{"productId": "tea-250", "price": 262.5, "quantity": 1, "gst": 5}]),
            "Assam",
        )

        assert sale.invoice_number == "INV-0042"
        assert sale.sale_date.month == 5
        assert sale.payment_mode == "card"
        assert not sale.is_gst_invoice
        assert sale.has_returns
        assert sale.returned_items[0].price == Decimal("262.5")
        assert sale.totals.subtotal == inr("2299.10")

    def test_missing_gst_flag_means_non_gst(self):
        assert not Sale.from_record(_record(), "Assam").is_gst_invoice
        assert Sale.from_record(_record(isGstInvoice=True), "Assam").is_gst_invoice

    def test_to_record_round_trip(self, shop_settings, sample_cart, sale_date):
        sale = BillingService(shop_settings).checkout(
            sample_cart, Party(name="E", state="Assam", gstin="18AAACB1234C1Z9"), "INV-9", sale_date
        )

        restored = Sale.from_record(sale.to_record(), shop_settings.company_state)

        assert restored.totals == sale.totals
        assert restored.items == sale.items
        assert restored.customer == sale.customer
        assert restored.sale_date == sale_date

    def test_party_registration(self):
        assert Party(gstin="18AAACB1234C1Z9").is_registered
        assert not Party(gstin="  ").is_registered
        assert not Party.from_record(None).is_registered
