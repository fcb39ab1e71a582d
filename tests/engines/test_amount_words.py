"""Tests for amount_in_words (Indian numbering)."""

from decimal import Decimal

import pytest

from pos_engines.amount_words import amount_in_words
from pos_kernel.domain.values import Money


class TestAmountInWords:

    @pytest.mark.parametrize(
        "amount, expected",
        [
            (0, "ZERO"),
            (7, "SEVEN"),
            (19, "NINETEEN"),
            (40, "FORTY"),
            (99, "NINETY NINE"),
            (100, "ONE HUNDRED"),
            (105, "ONE HUNDRED AND FIVE"),
            (2414, "TWO THOUSAND FOUR HUNDRED AND FOURTEEN"),
            (100000, "ONE LAKH"),
            (250075, "TWO LAKH FIFTY THOUSAND AND SEVENTY FIVE"),
            (12345678, "ONE CRORE TWENTY THREE LAKH FORTY FIVE THOUSAND SIX HUNDRED AND SEVENTY EIGHT"),
            (999999999, "NINETY NINE CRORE NINETY NINE LAKH NINETY NINE THOUSAND NINE HUNDRED AND NINETY NINE"),
        ],
    )
    def test_indian_grouping(self, amount, expected):
        assert amount_in_words(amount) == expected

    def test_rounds_half_up_to_whole_units(self):
        assert amount_in_words(Decimal("2414.06")) == "TWO THOUSAND FOUR HUNDRED AND FOURTEEN"
        assert amount_in_words(Decimal("10.50")) == "ELEVEN"

    def test_accepts_money(self):
        assert amount_in_words(Money.of("118.00", "INR")) == "ONE HUNDRED AND EIGHTEEN"

    def test_overflow_past_nine_digits(self):
        assert amount_in_words(1_000_000_000) == "OVERFLOW"

    def test_negative_amount(self):
        assert amount_in_words(-25) == "MINUS TWENTY FIVE"

    def test_unparsable_is_zero(self):
        assert amount_in_words("n/a") == "ZERO"
