"""
pos_config -- single public entrypoint for shop configuration.

Responsibility:
    Provides the one way to obtain shop settings at runtime through
    ``get_shop_settings()``. Services receive the resulting
    ``ShopSettings`` explicitly; nothing reads settings from globals.

Invariants enforced:
    - The seller state used for tax splitting always comes from here,
      never from a hardcoded default.

Failure modes:
    - ``FileNotFoundError`` -- settings file missing.
    - ``ConfigurationError`` / ``ShopStateNotConfiguredError`` /
      ``InvalidCurrencyError`` -- see ``pos_config.loader``.

Audit relevance:
    Every successful call emits a ``POS_CONFIG_TRACE`` log entry with the
    shop id, currency and settings checksum.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pos_config.loader import compute_checksum, load_yaml_file, parse_shop_settings
from pos_config.schema import ShopSettings

_logger = logging.getLogger("pos_kernel.config")

# Default settings directory
_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"
_DEFAULT_FILE_NAME = "shop.yaml"


def get_shop_settings(path: Path | str | None = None) -> ShopSettings:
    """Load and validate shop settings.

    Args:
        path: Settings YAML file. Defaults to ``pos_config/sets/shop.yaml``.

    Returns:
        Frozen ``ShopSettings``.
    """
    settings_path = Path(path) if path is not None else _DEFAULT_CONFIG_DIR / _DEFAULT_FILE_NAME
    data = load_yaml_file(settings_path)
    settings = parse_shop_settings(data, source=str(settings_path))

    _logger.info(
        "POS_CONFIG_TRACE",
        extra={
            "trace_type": "POS_CONFIG_TRACE",
            "shop_id": settings.shop_id,
            "currency": settings.currency,
            "checksum": compute_checksum(settings),
            "source": str(settings_path),
        },
    )
    return settings


__all__ = [
    "ShopSettings",
    "compute_checksum",
    "get_shop_settings",
    "parse_shop_settings",
]
