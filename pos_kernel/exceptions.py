"""
Typed Exception Hierarchy for the POS kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers (billing screen, invoice renderers, GST report) must react to
errors by type, never by parsing message strings. Every exception:
  1. Has a TYPED class (catch by type, not message)
  2. Has a CODE class attribute (machine-readable, API-safe)
  3. Carries structured DATA as attributes

Example:
    try:
        settings = get_shop_settings(path)
    except ShopStateNotConfiguredError as e:
        prompt_for_shop_state(e.shop_id)

Note that the tax engine itself never raises for bad numbers: malformed
numeric input degrades to a zero contribution and is logged. These
exceptions belong to the collaborators around the engine.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    PosKernelError (base)
    |
    +-- CurrencyError
    |   +-- InvalidCurrencyError
    |   +-- CurrencyMismatchError
    |
    +-- ConfigurationError
    |   +-- ShopStateNotConfiguredError
    |
    +-- BillingError
    |   +-- EmptyCartError
    |
    +-- ReportError
        +-- InvalidReportPeriodError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Currency        | INVALID_CURRENCY            | Unknown ISO 4217 code
                | CURRENCY_MISMATCH           | Mixed currencies in Money arithmetic
----------------|-----------------------------|-----------------------------------------
Configuration   | CONFIGURATION_ERROR         | Malformed shop settings
                | SHOP_STATE_NOT_CONFIGURED   | Shop has no company state
----------------|-----------------------------|-----------------------------------------
Billing         | EMPTY_CART                  | Checkout with no line items
----------------|-----------------------------|-----------------------------------------
Report          | INVALID_REPORT_PERIOD       | Month/year outside valid range
"""


class PosKernelError(Exception):
    """
    Base exception for all POS kernel errors.

    All subclasses must have a `code` class attribute for
    machine-readable error identification.
    """

    code: str = "POS_KERNEL_ERROR"


# Currency-related exceptions


class CurrencyError(PosKernelError):
    """Base exception for currency-related errors."""

    code: str = "CURRENCY_ERROR"


class InvalidCurrencyError(CurrencyError):
    """Invalid ISO 4217 currency code provided."""

    code: str = "INVALID_CURRENCY"

    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(f"Invalid ISO 4217 currency code: '{currency}'")


class CurrencyMismatchError(CurrencyError):
    """Attempted operation on mismatched currencies."""

    code: str = "CURRENCY_MISMATCH"

    def __init__(self, currency1: str, currency2: str):
        self.currency1 = currency1
        self.currency2 = currency2
        super().__init__(f"Currency mismatch: {currency1} vs {currency2}")


# Configuration exceptions


class ConfigurationError(PosKernelError):
    """Shop settings are missing or malformed."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, message: str, source: str | None = None):
        self.source = source
        super().__init__(message)


class ShopStateNotConfiguredError(ConfigurationError):
    """The shop has no company state, so tax jurisdiction is unknown."""

    code: str = "SHOP_STATE_NOT_CONFIGURED"

    def __init__(self, shop_id: str, source: str | None = None):
        self.shop_id = shop_id
        super().__init__(
            f"Shop '{shop_id}' has no company_state configured; "
            "GST cannot be split without the seller's state",
            source=source,
        )


# Billing exceptions


class BillingError(PosKernelError):
    """Base exception for POS billing errors."""

    code: str = "BILLING_ERROR"


class EmptyCartError(BillingError):
    """Checkout attempted with no line items."""

    code: str = "EMPTY_CART"

    def __init__(self, invoice_number: str):
        self.invoice_number = invoice_number
        super().__init__(f"Cannot check out invoice {invoice_number}: cart is empty")


# Report exceptions


class ReportError(PosKernelError):
    """Base exception for reporting errors."""

    code: str = "REPORT_ERROR"


class InvalidReportPeriodError(ReportError):
    """Requested report month/year is out of range."""

    code: str = "INVALID_REPORT_PERIOD"

    def __init__(self, month: int, year: int):
        self.month = month
        self.year = year
        super().__init__(f"Invalid report period: month={month}, year={year}")
