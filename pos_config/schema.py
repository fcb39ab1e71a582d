"""
Shop configuration schema.

Frozen dataclasses produced by ``pos_config.loader``. Declarative data
only; no executable logic beyond derived properties.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ShopSettings:
    """Per-shop settings the billing and reporting surfaces depend on.

    ``company_state`` is the seller's jurisdiction for the CGST/SGST
    versus IGST decision. It has no default.
    """

    shop_id: str
    company_name: str
    company_state: str
    company_gstin: str | None = None
    company_address: str | None = None
    currency: str = "INR"
    invoice_prefix: str = "INV-"

    @property
    def is_gst_registered(self) -> bool:
        return bool(self.company_gstin)
