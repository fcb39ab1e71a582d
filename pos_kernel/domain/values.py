"""
Values -- Immutable domain value objects and numeric coercion.

Responsibility:
    Provides Currency and Money, the value types every tax computation
    reports in, plus ``to_decimal``, the lenient numeric boundary used
    when reading cart and invoice line fields.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    No outward dependencies except pos_kernel.domain.currency.

Invariants enforced:
    - Monetary amounts are Decimal, never float.
    - Money pairs an amount with its Currency; arithmetic refuses to
      mix currencies.
    - Rounding precision is derived from the currency's decimal places.

Failure modes:
    - InvalidCurrencyError on construction with an unknown currency.
    - CurrencyMismatchError when arithmetic mixes currencies.
    - ``to_decimal`` never raises: None, NaN, infinities and unparsable
      values become Decimal("0").
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from pos_kernel.domain.currency import CurrencyRegistry
from pos_kernel.exceptions import CurrencyMismatchError, InvalidCurrencyError

ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    """
    Coerce a loosely-typed numeric field to a finite Decimal.

    Floats go through ``str`` so ``0.1`` becomes ``Decimal("0.1")``
    rather than its binary expansion. Anything that is missing,
    non-finite or unparsable becomes zero.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    if isinstance(value, float):
        if not math.isfinite(value):
            return ZERO
        return Decimal(str(value))
    if isinstance(value, int):
        return Decimal(value)
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return ZERO
    return result if result.is_finite() else ZERO


@dataclass(frozen=True, slots=True)
class Currency:
    """
    ISO 4217 currency code value object.

    Wraps a three-letter code, normalized (uppercased) and validated
    against CurrencyRegistry on construction.
    """

    code: str

    def __post_init__(self) -> None:
        try:
            normalized = CurrencyRegistry.validate(self.code)
        except ValueError as e:
            raise InvalidCurrencyError(self.code) from e
        object.__setattr__(self, "code", normalized)

    @property
    def decimal_places(self) -> int:
        return CurrencyRegistry.get_decimal_places(self.code)

    @property
    def rounding_tolerance(self) -> Decimal:
        return CurrencyRegistry.get_rounding_tolerance(self.code)

    @property
    def name(self) -> str:
        return CurrencyRegistry.get_info(self.code).name

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"Currency({self.code!r})"


@dataclass(frozen=True, slots=True)
class Money:
    """
    An amount in one currency.

    ``Money`` never rounds on its own: engines keep full precision and
    call ``round()`` once, where a figure leaves the engine. Arithmetic
    and ordering between different currencies raise
    ``CurrencyMismatchError``.
    """

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            try:
                object.__setattr__(self, "amount", Decimal(str(self.amount)))
            except (InvalidOperation, ValueError) as e:
                raise ValueError(f"Invalid amount: {self.amount}") from e

        if isinstance(self.currency, str):
            object.__setattr__(self, "currency", Currency(self.currency))
        elif not isinstance(self.currency, Currency):
            raise TypeError(f"currency must be Currency or str, got {type(self.currency)}")

    @classmethod
    def of(cls, amount: Decimal | str | int, currency: str | Currency) -> Money:
        if isinstance(amount, (str, int)):
            amount = Decimal(str(amount))
        return cls(amount=amount, currency=currency)

    @classmethod
    def zero(cls, currency: str | Currency) -> Money:
        return cls(amount=ZERO, currency=currency)

    @property
    def is_zero(self) -> bool:
        return self.amount == ZERO

    @property
    def is_positive(self) -> bool:
        return self.amount > ZERO

    @property
    def is_negative(self) -> bool:
        return self.amount < ZERO

    def round(self, rounding: str = ROUND_HALF_UP) -> Money:
        """Quantize to the currency's minor unit (half-up unless told otherwise)."""
        exponent = Decimal(1).scaleb(-self.currency.decimal_places)
        return self._with(self.amount.quantize(exponent, rounding=rounding))

    def _with(self, amount: Decimal) -> Money:
        return Money(amount=amount, currency=self.currency)

    def _other_amount(self, other: Money) -> Decimal:
        if self.currency != other.currency:
            raise CurrencyMismatchError(self.currency.code, other.currency.code)
        return other.amount

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return self._with(self.amount + self._other_amount(other))

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return self._with(self.amount - self._other_amount(other))

    def __neg__(self) -> Money:
        return self._with(-self.amount)

    def __abs__(self) -> Money:
        return self._with(abs(self.amount))

    def __mul__(self, factor: Decimal | int | str) -> Money:
        if isinstance(factor, (int, str)) and not isinstance(factor, bool):
            factor = Decimal(str(factor))
        if not isinstance(factor, Decimal):
            return NotImplemented
        return self._with(self.amount * factor)

    __rmul__ = __mul__

    def __lt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.amount < self._other_amount(other)

    def __le__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.amount <= self._other_amount(other)

    def __gt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.amount > self._other_amount(other)

    def __ge__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.amount >= self._other_amount(other)

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.code}"

    def __repr__(self) -> str:
        return f"Money({self.amount!r}, {self.currency!r})"


def is_discarded_number(raw: Any) -> bool:
    """True for a value that is present but that ``to_decimal`` turns into zero."""
    if raw is None:
        return False
    if isinstance(raw, bool):
        return True
    if isinstance(raw, int):
        return False
    if isinstance(raw, (Decimal, float)):
        return not Decimal(raw).is_finite()
    try:
        return not Decimal(str(raw).strip()).is_finite()
    except ArithmeticError:
        return True
