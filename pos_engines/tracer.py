"""
pos_engines.tracer -- POS_ENGINE_TRACE records for engine calls.

``@traced_engine`` wraps a pure engine function and, after each call,
logs one ``POS_ENGINE_TRACE`` record with the engine name and version,
a fingerprint of the chosen inputs, the duration and the outcome. Two
calls with equal inputs share a fingerprint whether the arguments were
passed by position or by keyword, so a printed invoice can be matched
to the computation that produced it.

The decorator reads arguments and writes a log record; it never changes
inputs or results. Exceptions are logged with ``outcome="error"`` and
re-raised unchanged.

Usage:
    from pos_engines.tracer import traced_engine

    @traced_engine("gst.invoice_totals", "1.0", fingerprint_fields=("items",))
    def compute_invoice_totals(items, buyer_state, seller_state):
        ...
"""

from __future__ import annotations

import functools
import hashlib
import inspect
import logging
import time
from collections.abc import Callable, Mapping
from decimal import Decimal
from typing import Any

_logger = logging.getLogger("pos_kernel.engines.tracer")

TRACE_TYPE = "POS_ENGINE_TRACE"
FINGERPRINT_LENGTH = 16


def _canonicalize(value: Any) -> str:
    """Stable text form of an argument.

    Mappings are key-sorted; sequences keep their order. Decimals keep
    their exact digits, so ``Decimal("5")`` and ``Decimal("5.0")`` differ.
    Anything else (the engine's frozen dataclasses) uses ``str``.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float, Decimal)):
        return str(value)
    if isinstance(value, Mapping):
        pairs = sorted(value.items(), key=lambda kv: str(kv[0]))
        return "{" + ",".join(f"{k}:{_canonicalize(v)}" for k, v in pairs) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_canonicalize(v) for v in value) + "]"
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: Mapping[str, Any],
) -> str:
    """SHA-256 over ``name=value`` pairs, truncated to 16 hex characters.

    A field missing from ``arguments`` hashes the same as None.
    """
    canonical = "|".join(
        f"{name}={_canonicalize(arguments.get(name))}" for name in fingerprint_fields
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """Decorate an engine entry point with POS_ENGINE_TRACE logging.

    Args:
        engine_name: Dotted engine id, e.g. "gst.invoice_totals".
        engine_version: Engine version, e.g. "1.0".
        fingerprint_fields: Parameter names hashed into the fingerprint.
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fingerprint = ""
            if fingerprint_fields:
                bound = signature.bind_partial(*args, **kwargs)
                fingerprint = compute_input_fingerprint(fingerprint_fields, bound.arguments)

            outcome = "ok"
            started = time.monotonic()
            try:
                return func(*args, **kwargs)
            except Exception:
                outcome = "error"
                raise
            finally:
                _logger.info(TRACE_TYPE, extra={
                    "trace_type": TRACE_TYPE,
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": fingerprint,
                    "duration_ms": round((time.monotonic() - started) * 1000, 2),
                    "function": func.__qualname__,
                    "outcome": outcome,
                })

        return wrapper

    return decorator
