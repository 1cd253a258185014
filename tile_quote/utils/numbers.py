"""
Numeric coercion helpers.

Everything that reaches the pricing engine from outside (AI payloads,
form edits, stored documents) is untrusted. These helpers turn anything
that is not a finite number into 0 instead of letting NaN leak through.
"""

from __future__ import annotations

import logging
import math
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

logger = logging.getLogger(__name__)

_TWO_PLACES = Decimal("0.01")


def _preview(value: Any) -> str:
    # repr() of a huge int can itself raise, so only strings are echoed
    if isinstance(value, str):
        return repr(value[:40])
    return f"<{type(value).__name__}>"


def coerce_number(value: Any, field: str = "") -> float:
    """Return ``value`` as a finite float, or 0.0 when it is not one."""
    if value is None or value == "":
        return 0.0
    if isinstance(value, bool):
        return float(value)
    try:
        number = float(str(value).replace(",", "").strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError, OverflowError):
        logger.warning(f"Non-numeric value {_preview(value)} for '{field or 'value'}' treated as 0")
        return 0.0
    if not math.isfinite(number):
        logger.warning(f"Non-finite value {value!r} for '{field or 'value'}' treated as 0")
        return 0.0
    return number


def coerce_optional_number(value: Any, field: str = "") -> float | None:
    """Like coerce_number, but keeps ``None`` as ``None``."""
    if value is None:
        return None
    return coerce_number(value, field)


def finite_or_zero(value: float, field: str = "") -> float:
    """Result of arithmetic on coerced inputs; overflow to ±inf or NaN becomes 0."""
    if math.isfinite(value):
        return value
    logger.warning(f"'{field or 'value'}' overflowed to {value}; treated as 0")
    return 0.0


def coerce_flag(value: Any) -> bool | None:
    """Interpret a visibility flag; unrecognisable values mean "not set"."""
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "yes", "1", "on"):
            return True
        if lowered in ("false", "no", "0", "off"):
            return False
    return None


def round2(value: float) -> float:
    """Round half-up to 2 decimal places (display precision for areas)."""
    try:
        return float(Decimal(repr(value)).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))
    except InvalidOperation:
        return 0.0
