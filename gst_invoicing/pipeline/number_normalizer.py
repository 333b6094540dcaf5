"""Utilities for normalizing Indian-format amounts and rounding money."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
import re
from typing import Any

_CURRENCY_PATTERN = re.compile(r"(?i)\binr\b|\brs\.?|₹|/-")

ZERO = Decimal("0")
CENT = Decimal("0.01")


def normalize_indian_decimal(text: str) -> Decimal:
    """Normalize Indian numeric strings to Decimal.

    Rules:
    - Trim whitespace
    - Strip currency markers (INR, Rs, Rs., the rupee sign, trailing /-)
    - Remove comma digit grouping, both lakh style (1,23,456.78) and
      western style (123,456.78)
    - Support a leading '-' for negative amounts
    - Raise ValueError for invalid formats
    """
    if text is None:
        raise ValueError("Input text is None")

    raw = text.strip()
    if not raw:
        raise ValueError("Input text is empty")

    cleaned = _CURRENCY_PATTERN.sub("", raw)
    cleaned = re.sub(r"\s+", "", cleaned)

    negative = False
    if cleaned.startswith("-"):
        negative = True
        cleaned = cleaned[1:]

    if not cleaned:
        raise ValueError("Input text has no numeric content")

    if "," in cleaned:
        integer_part = cleaned.split(".", 1)[0]
        if not re.fullmatch(r"\d{1,3}(,\d{2})*,\d{3}|\d{1,3}(,\d{3})+", integer_part):
            raise ValueError(f"Invalid digit grouping: {text!r}")
        cleaned = cleaned.replace(",", "")

    if not re.fullmatch(r"\d+(\.\d+)?|\.\d+", cleaned):
        raise ValueError(f"Invalid numeric format: {text!r}")

    try:
        value = Decimal(cleaned)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid numeric format: {text!r}") from exc

    return -value if negative else value


def coerce_amount(value: Any, default: Decimal = ZERO) -> Decimal:
    """Coerce a form value to Decimal, falling back to ``default``.

    Emptied fields, None, unparseable strings and non-finite numbers all
    become ``default``; this never raises.
    """
    if value is None or isinstance(value, bool):
        return default

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(repr(value))
    elif isinstance(value, str):
        if not value.strip():
            return default
        try:
            result = normalize_indian_decimal(value)
        except ValueError:
            return default
    else:
        return default

    if not result.is_finite():
        return default
    return result


def round2(value: Decimal) -> Decimal:
    """Round to two decimal places, half away from zero."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)
