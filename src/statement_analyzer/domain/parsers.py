"""Parsers for the French-formatted numbers and dates found in bank exports.

Both parsers are total: malformed input yields a default (``0.0`` or ``""``)
so a single bad cell never aborts ingestion of the row it belongs to.
"""

from __future__ import annotations

import math
import re
from datetime import datetime
from typing import Any

from dateutil import parser as date_parser

_WHITESPACE_RE = re.compile(r"\s+")
_DECIMAL_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
_THOUSANDS_TAIL_RE = re.compile(r"\.\d{3}$")

DATE_PATTERNS = ("%d/%m/%Y", "%d/%m/%y", "%Y-%m-%d")


def _normalize_amount_text(text: str) -> str:
    cleaned = _WHITESPACE_RE.sub("", text)
    if "," in cleaned:
        parts = cleaned.split(",")
        if len(parts) != 2:
            return cleaned
        integer_part, decimal_part = parts
        return f"{integer_part.replace('.', '')}.{decimal_part}"
    if _THOUSANDS_TAIL_RE.search(cleaned):
        return cleaned.replace(".", "")
    return cleaned


def parse_amount(value: Any) -> float:
    """``"5 926,24"`` -> 5926.24, ``"-41,80"`` -> -41.8, ``"1.234,56"`` -> 1234.56."""
    if not value or not isinstance(value, str):
        return 0.0

    cleaned = _normalize_amount_text(value)
    if not cleaned:
        return 0.0
    if not _DECIMAL_RE.match(cleaned):
        return 0.0
    try:
        result = float(cleaned)
    except ValueError:
        return 0.0
    return result if math.isfinite(result) else 0.0


def _parse_iso(text: str) -> datetime | None:
    try:
        return date_parser.isoparse(text)
    except (ValueError, OverflowError):
        return None


def _parse_patterns(text: str) -> datetime | None:
    # strptime accepts unpadded day/month, so these also cover d/M/yyyy and d/M/yy.
    for pattern in DATE_PATTERNS:
        try:
            return datetime.strptime(text, pattern)
        except ValueError:
            continue
    return None


def _parse_fallback(text: str) -> datetime | None:
    try:
        return date_parser.parse(text, dayfirst=True)
    except (ValueError, OverflowError):
        return None


def parse_date(value: Any) -> str:
    """Normalise a date to ``YYYY-MM-DD``; returns ``""`` when nothing matches."""
    if not value or not isinstance(value, str):
        return ""

    text = value.strip()
    if not text:
        return ""

    parsed = _parse_iso(text) or _parse_patterns(text) or _parse_fallback(text)
    if parsed is None:
        return ""
    return parsed.date().isoformat()
