"""
Pytest fixtures for the POS tax engine test suite.

Provides:
- Log context isolation between tests
- Structured log capture as parsed JSON dicts
- Shop settings and sample carts shared by engine and service tests
"""

import json
import logging
from datetime import datetime
from decimal import Decimal
from io import StringIO

import pytest

from pos_config.schema import ShopSettings
from pos_engines.gst import LineItem
from pos_kernel.logging_config import LogContext, StructuredFormatter


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture pos_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            compute_invoice_totals(items, "Assam", "Assam")
            logs = captured_logs()
            assert any(r["message"] == "invoice_totals_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("pos_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Domain fixtures
# =============================================================================


@pytest.fixture
def shop_settings() -> ShopSettings:
    return ShopSettings(
        shop_id="shop-1",
        company_name="Brahmaputra Traders",
        company_state="Assam",
        company_gstin="18ABCDE1234F1Z5",
        currency="INR",
    )


@pytest.fixture
def sample_cart() -> list[LineItem]:
    """Two 5% items: 2 x 250 and 1 x 1999 at 10% discount."""
    return [
        LineItem(
            unit_price=Decimal("250"),
            quantity=2,
            gst_rate_percent=Decimal("5"),
            name="Masala Tea 250g",
            product_id="tea-250",
            hsn="0902",
            unit="pcs",
        ),
        LineItem(
            unit_price=Decimal("1999"),
            quantity=1,
            discount_percent=Decimal("10"),
            gst_rate_percent=Decimal("5"),
            name="Pressure Cooker 5L",
            product_id="cooker-5l",
            hsn="7323",
            unit="pcs",
        ),
    ]


@pytest.fixture
def sale_date() -> datetime:
    return datetime(2024, 5, 14, 11, 30)
