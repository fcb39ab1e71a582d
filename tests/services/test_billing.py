"""
Tests for BillingService.

Covers:
- Checkout uses the configured shop state for the tax split
- Empty carts are rejected
- Returns are capped at what is still returnable and use the sale's
  original classification
"""

from decimal import Decimal

import pytest

from pos_engines.returns import apply_return_adjustment
from pos_kernel.domain.values import Money
from pos_kernel.exceptions import EmptyCartError
from pos_services.billing import BillingService
from pos_services.sale import Party


def inr(amount: str) -> Money:
    return Money.of(amount, "INR")


class TestCheckout:

    def test_local_customer(self, shop_settings, sample_cart, sale_date):
        billing = BillingService(shop_settings)

        sale = billing.checkout(sample_cart, Party(name="Walk-in", state="assam"), "INV-0001", sale_date)

        assert sale.invoice_number == "INV-0001"
        assert sale.totals.is_intra_state
        assert sale.totals.cgst == inr("57.48")
        assert sale.totals.total == inr("2414.06")
        assert sale.items == tuple(sample_cart)
        assert not sale.has_returns

    def test_out_of_state_customer(self, shop_settings, sample_cart, sale_date):
        billing = BillingService(shop_settings)

        sale = billing.checkout(sample_cart, Party(name="Kolkata Traders", state="West Bengal"), "INV-0002", sale_date)

        assert not sale.totals.is_intra_state
        assert sale.totals.igst == inr("114.96")

    def test_customer_without_state(self, shop_settings, sample_cart, sale_date):
        sale = BillingService(shop_settings).checkout(sample_cart, Party(), "INV-0003", sale_date)

        assert sale.totals.is_intra_state

    def test_empty_cart_raises(self, shop_settings, sale_date):
        with pytest.raises(EmptyCartError, match="INV-0004") as exc_info:
            BillingService(shop_settings).checkout([], Party(), "INV-0004", sale_date)

        assert exc_info.value.code == "EMPTY_CART"

    def test_checkout_is_logged_with_context(self, captured_logs, shop_settings, sample_cart, sale_date):
        BillingService(shop_settings).checkout(sample_cart, Party(), "INV-0005", sale_date, payment_mode="upi")

        records = [r for r in captured_logs() if r["message"] == "sale_checked_out"]
        assert records[0]["shop_id"] == "shop-1"
        assert records[0]["invoice_number"] == "INV-0005"
        assert records[0]["payment_mode"] == "upi"
        assert records[0]["total"] == "2414.06"


class TestRecordReturn:

    def setup_method(self):
        self.customer = Party(name="Kolkata Traders", state="West Bengal")

    def _sale(self, shop_settings, sample_cart, sale_date):
        self.billing = BillingService(shop_settings)
        return self.billing.checkout(sample_cart, self.customer, "INV-0100", sale_date)

    def test_partial_return(self, shop_settings, sample_cart, sale_date):
        sale = self._sale(shop_settings, sample_cart, sale_date)

        result = self.billing.record_return(sale, {"tea-250": 1})

        assert len(result.returned_items) == 1
        assert result.returned_items[0].price == Decimal("262.50")
        assert result.credit_note.subtotal == inr("250.00")
        assert result.credit_note.igst == inr("12.50")
        assert result.refund == inr("262.50")
        assert result.sale.returned_items == result.returned_items
        assert sale.returned_items == ()

    def test_return_keeps_original_classification(self, shop_settings, sample_cart, sale_date):
        sale = self._sale(shop_settings, sample_cart, sale_date)

        result = self.billing.record_return(sale, {"cooker-5l": 1})

        assert result.credit_note.cgst.is_zero
        assert result.credit_note.igst.is_positive

    def test_cannot_return_more_than_remaining(self, shop_settings, sample_cart, sale_date):
        sale = self._sale(shop_settings, sample_cart, sale_date)

        first = self.billing.record_return(sale, {"tea-250": 1})
        second = self.billing.record_return(first.sale, {"tea-250": 5})
        third = self.billing.record_return(second.sale, {"tea-250": 1})

        assert second.returned_items[0].quantity == Decimal("1")
        assert third.returned_items == ()
        assert third.refund.is_zero
        assert self.billing.returnable_quantities(third.sale) == {
            "tea-250": Decimal("0"),
            "cooker-5l": Decimal("1"),
        }

    def test_product_on_two_lines_returns_requested_units(self, shop_settings, sample_cart, sale_date):
        cart = [sample_cart[0], sample_cart[0], sample_cart[1]]
        sale = self._sale(shop_settings, cart, sale_date)

        result = self.billing.record_return(sale, {"tea-250": 2})

        assert sum(r.quantity for r in result.returned_items) == Decimal("2")
        assert result.refund == inr("525.00")
        assert self.billing.returnable_quantities(result.sale)["tea-250"] == Decimal("2")

    def test_full_return_zeroes_effective_totals(self, shop_settings, sample_cart, sale_date):
        sale = self._sale(shop_settings, sample_cart, sale_date)
        result = self.billing.record_return(sale, {"tea-250": 2, "cooker-5l": 1})

        effective = apply_return_adjustment(
            result.sale.totals, result.sale.returned_items, result.sale.totals.is_intra_state
        )
        assert effective.total.is_zero
        assert result.credit_note.total == sale.totals.total
