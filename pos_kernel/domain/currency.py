"""Currency -- ISO 4217 codes a shop may bill in, with their precision.

Rounding everywhere in the engine is derived from ``decimal_places``
here; there is no fixed two-decimal assumption outside this table.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, ClassVar


@dataclass(frozen=True)
class CurrencyInfo:
    code: str
    decimal_places: int
    name: str

    @property
    def rounding_tolerance(self) -> Decimal:
        """One minor unit: the largest drift two correct roundings can show."""
        return Decimal(1).scaleb(-self.decimal_places)


def _entries(decimal_places: int, *pairs: tuple[str, str]) -> dict[str, CurrencyInfo]:
    return {code: CurrencyInfo(code, decimal_places, name) for code, name in pairs}


class CurrencyRegistry:
    """Lookup of supported currencies by (case-insensitive) code."""

    _CURRENCIES: ClassVar[dict[str, CurrencyInfo]] = {
        **_entries(
            2,
            ("INR", "Indian Rupee"),
            ("NPR", "Nepalese Rupee"),
            ("BDT", "Bangladeshi Taka"),
            ("LKR", "Sri Lankan Rupee"),
            ("BTN", "Bhutanese Ngultrum"),
            ("AED", "UAE Dirham"),
            ("SGD", "Singapore Dollar"),
            ("USD", "US Dollar"),
            ("EUR", "Euro"),
            ("GBP", "Pound Sterling"),
        ),
        **_entries(0, ("JPY", "Japanese Yen"), ("KRW", "South Korean Won")),
        **_entries(3, ("BHD", "Bahraini Dinar"), ("KWD", "Kuwaiti Dinar"), ("OMR", "Omani Rial")),
    }

    DEFAULT_DECIMAL_PLACES: ClassVar[int] = 2

    @staticmethod
    def _normalize(code: Any) -> str:
        if not isinstance(code, str):
            return ""
        return code.strip().upper()

    @classmethod
    def get_info(cls, code: str) -> CurrencyInfo | None:
        return cls._CURRENCIES.get(cls._normalize(code))

    @classmethod
    def is_valid(cls, code: str) -> bool:
        return cls.get_info(code) is not None

    @classmethod
    def get_decimal_places(cls, code: str) -> int:
        info = cls.get_info(code)
        return info.decimal_places if info else cls.DEFAULT_DECIMAL_PLACES

    @classmethod
    def get_rounding_tolerance(cls, code: str) -> Decimal:
        info = cls.get_info(code) or CurrencyInfo("", cls.DEFAULT_DECIMAL_PLACES, "")
        return info.rounding_tolerance

    @classmethod
    def validate(cls, code: str) -> str:
        """Return the normalized code or raise ValueError."""
        normalized = cls._normalize(code)
        if len(normalized) != 3:
            raise ValueError(f"Currency code must be 3 characters: {code!r}")
        if normalized not in cls._CURRENCIES:
            raise ValueError(f"Unsupported currency code: {code!r}")
        return normalized

    @classmethod
    def all_codes(cls) -> frozenset[str]:
        return frozenset(cls._CURRENCIES)
