"""
Configuration Loader (``pos_config.loader``).

Responsibility
--------------
Loads a shop settings YAML file and parses it into the frozen
``pos_config.schema.ShopSettings`` dataclass.  Runtime callers go through
``pos_config.get_shop_settings()``; this module is the parsing layer.

Invariants enforced
-------------------
* ``company_state`` must be present and non-blank; there is no fallback
  jurisdiction.
* ``currency`` must be a registered ISO 4217 code.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the
  parsed settings for change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing/blank required keys -> ``ConfigurationError``.
* Blank ``company_state`` -> ``ShopStateNotConfiguredError``.
* Unknown currency -> ``InvalidCurrencyError``.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import asdict
from pathlib import Path
from typing import Any

import yaml

from pos_config.schema import ShopSettings
from pos_kernel.domain.currency import CurrencyRegistry
from pos_kernel.exceptions import (
    ConfigurationError,
    InvalidCurrencyError,
    ShopStateNotConfiguredError,
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ConfigurationError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Shop settings must be a mapping, got {type(data).__name__}",
            source=str(path),
        )
    return data


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_shop_settings(data: dict[str, Any], source: str | None = None) -> ShopSettings:
    """
    Parse ``ShopSettings`` from a dict (the ``shop:`` section or the root).

    Raises:
        ConfigurationError: missing ``shop_id`` or ``company_name``.
        ShopStateNotConfiguredError: blank ``company_state``.
        InvalidCurrencyError: unknown currency code.
    """
    section = data.get("shop", data)
    if not isinstance(section, dict):
        raise ConfigurationError("'shop' section must be a mapping", source=source)

    shop_id = _optional_str(section.get("shop_id"))
    if shop_id is None:
        raise ConfigurationError("shop_id is required", source=source)

    company_name = _optional_str(section.get("company_name"))
    if company_name is None:
        raise ConfigurationError(f"company_name is required for shop '{shop_id}'", source=source)

    company_state = _optional_str(section.get("company_state"))
    if company_state is None:
        raise ShopStateNotConfiguredError(shop_id, source=source)

    raw_currency = section.get("currency") or "INR"
    try:
        currency = CurrencyRegistry.validate(str(raw_currency))
    except ValueError as e:
        raise InvalidCurrencyError(str(raw_currency)) from e

    return ShopSettings(
        shop_id=shop_id,
        company_name=company_name,
        company_state=company_state,
        company_gstin=_optional_str(section.get("company_gstin")),
        company_address=_optional_str(section.get("company_address")),
        currency=currency,
        invoice_prefix=_optional_str(section.get("invoice_prefix")) or "INV-",
    )


def compute_checksum(settings: ShopSettings) -> str:
    """Deterministic SHA-256 of the parsed settings."""
    canonical = json.dumps(asdict(settings), sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
