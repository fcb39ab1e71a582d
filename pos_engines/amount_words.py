"""
Amount in words, Indian numbering system.

Invoices print the grand total as words ("... RUPEES ONLY"), grouped the
Indian way: crore (10^7), lakh (10^5), thousand, hundred. Amounts are
rounded half-up to whole units first; anything past nine digits is
reported as "OVERFLOW".
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from pos_kernel.domain.values import Money, to_decimal

_ONES = (
    "", "one", "two", "three", "four", "five", "six", "seven", "eight", "nine",
    "ten", "eleven", "twelve", "thirteen", "fourteen", "fifteen", "sixteen",
    "seventeen", "eighteen", "nineteen",
)
_TENS = ("", "", "twenty", "thirty", "forty", "fifty", "sixty", "seventy", "eighty", "ninety")

# (divisor, label) from the most significant group down
_GROUPS = (
    (10_000_000, "crore"),
    (100_000, "lakh"),
    (1_000, "thousand"),
    (100, "hundred"),
)

MAX_DIGITS = 9


def _two_digits(n: int) -> str:
    if n < 20:
        return _ONES[n]
    tens, ones = divmod(n, 10)
    return f"{_TENS[tens]} {_ONES[ones]}".strip()


def amount_in_words(amount: Money | Decimal | int | float | str) -> str:
    """
    Spell a whole-rupee amount in upper-case words.

    >>> amount_in_words(Decimal("2414.06"))
    'TWO THOUSAND FOUR HUNDRED AND FOURTEEN'
    """
    value = amount.amount if isinstance(amount, Money) else to_decimal(amount)
    whole = int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    prefix = ""
    if whole < 0:
        prefix = "minus "
        whole = -whole
    if len(str(whole)) > MAX_DIGITS:
        return "OVERFLOW"
    if whole == 0:
        return "ZERO"

    parts: list[str] = []
    remainder = whole
    for divisor, label in _GROUPS:
        count, remainder = divmod(remainder, divisor)
        if count:
            parts.append(f"{_two_digits(count)} {label}")
    if remainder:
        if parts:
            parts.append("and")
        parts.append(_two_digits(remainder))

    return (prefix + " ".join(parts)).upper()
