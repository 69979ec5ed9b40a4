"""
creditmemo.utils
~~~~~~~~~~~~~~~~
Lenient coercion helpers for model output.

The model is asked for strict JSON but does not always comply. These
helpers recover what they can and return ``None`` rather than guessing.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

_DATE_FORMATS = ("%Y-%m-%d", "%d.%m.%Y", "%d/%m/%Y", "%Y/%m/%d")


def clean_json_response(response: str) -> str:
    """
    Extract a JSON object from a model reply.

    Strips markdown fences and trailing commas, then returns the outermost
    ``{...}`` span. Returns ``"{}"`` when no object is present so callers
    can always ``json.loads()`` the result.
    """
    response = re.sub(r"```(?:json)?\s*", "", response)
    response = response.strip()

    match = re.search(r"\{.*\}", response, re.DOTALL)
    if not match:
        logger.warning("No JSON object found in model response.")
        return "{}"

    candidate = match.group(0)
    try:
        json.loads(candidate)
        return candidate
    except json.JSONDecodeError:
        pass

    # Only rewrite when the candidate is actually malformed, so commas
    # inside string values are never touched on the happy path.
    return re.sub(r",\s*([}\]])", r"\1", candidate)


def parse_decimal(value: Any) -> Optional[Decimal]:
    """Coerce ``value`` to ``Decimal``; thousands separators and symbols are stripped."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        try:
            number = Decimal(str(value))
        except InvalidOperation:
            return None
        return number if number.is_finite() else None
    text = str(value).strip()
    text = re.sub(r"[^\d.\-]", "", text)
    if not text:
        return None
    try:
        return Decimal(text)
    except (InvalidOperation, ValueError):
        return None


def parse_int(value: Any) -> Optional[int]:
    number = parse_decimal(value)
    if number is None:
        return None
    try:
        return int(number)
    except (ValueError, OverflowError):
        return None


def parse_date(value: Any) -> Optional[date]:
    """Parse an ISO date (or a common European format) to ``date``."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()[:10]
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def parse_str(value: Any) -> Optional[str]:
    """Return a stripped string, or ``None`` for empty / non-scalar values."""
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def format_amount(value: Optional[Decimal]) -> str:
    """Plain decimal notation: no thousands separators, no exponent."""
    if value is None:
        return ""
    return format(Decimal(value), "f")


__all__ = [
    "clean_json_response",
    "parse_decimal",
    "parse_int",
    "parse_date",
    "parse_str",
    "format_amount",
]
