"""
Unit tests for Money and lenient numeric coercion.

Verifies:
- Half-up rounding to currency precision
- Currency-safe arithmetic
- to_decimal never raises and never returns non-finite values
"""

from decimal import Decimal

import pytest

from pos_kernel.domain.values import Money, is_discarded_number, to_decimal
from pos_kernel.exceptions import CurrencyMismatchError


class TestMoneyRounding:

    @pytest.mark.parametrize(
        "amount, expected",
        [
            ("57.4775", "57.48"),
            ("2414.055", "2414.06"),
            ("0.005", "0.01"),
            ("0.0049", "0.00"),
            ("-0.005", "-0.01"),
        ],
    )
    def test_half_up(self, amount, expected):
        assert Money.of(amount, "INR").round().amount == Decimal(expected)

    def test_zero_decimal_currency(self):
        assert Money.of("99.5", "JPY").round().amount == Decimal("100")

    def test_three_decimal_currency(self):
        assert Money.of("1.0005", "KWD").round().amount == Decimal("1.001")

    def test_round_does_not_mutate(self):
        money = Money.of("1.005", "INR")
        money.round()
        assert money.amount == Decimal("1.005")


class TestMoneyArithmetic:

    def test_add_and_subtract(self):
        a = Money.of("10.50", "INR")
        b = Money.of("2.25", "INR")

        assert a + b == Money.of("12.75", "INR")
        assert a - b == Money.of("8.25", "INR")

    def test_mixed_currencies_raise(self):
        with pytest.raises(CurrencyMismatchError, match="INR vs USD"):
            Money.of("1", "INR") + Money.of("1", "USD")

    def test_comparison_mixed_currencies_raise(self):
        with pytest.raises(CurrencyMismatchError):
            Money.of("1", "INR") < Money.of("1", "USD")

    def test_multiply(self):
        assert Money.of("2.50", "INR") * 3 == Money.of("7.50", "INR")
        assert 3 * Money.of("2.50", "INR") == Money.of("7.50", "INR")

    def test_negation_and_sign(self):
        money = -Money.of("5", "INR")

        assert money.is_negative
        assert abs(money) == Money.of("5", "INR")
        assert Money.zero("INR").is_zero

    def test_string_currency_is_converted(self):
        assert Money(amount=Decimal("1"), currency="inr").currency.code == "INR"

    def test_invalid_amount_raises(self):
        with pytest.raises(ValueError, match="Invalid amount"):
            Money(amount="lots", currency="INR")


class TestToDecimal:

    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, "0"),
            (float("nan"), "0"),
            (float("inf"), "0"),
            (float("-inf"), "0"),
            (Decimal("NaN"), "0"),
            (Decimal("Infinity"), "0"),
            ("abc", "0"),
            ("", "0"),
            ("nan", "0"),
            (True, "0"),
            (" 12.50 ", "12.50"),
            (0.1, "0.1"),
            (7, "7"),
            (Decimal("-3.25"), "-3.25"),
        ],
    )
    def test_coercion(self, value, expected):
        result = to_decimal(value)

        assert result == Decimal(expected)
        assert result.is_finite()


class TestIsDiscardedNumber:

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), "abc", "NaN", Decimal("-Infinity"), True])
    def test_discarded(self, value):
        assert is_discarded_number(value)

    @pytest.mark.parametrize("value", [None, 0, 12, "12.5", 1.5, Decimal("0")])
    def test_kept(self, value):
        assert not is_discarded_number(value)
