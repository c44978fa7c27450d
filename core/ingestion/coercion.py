"""
Cell Coercion - Raw Strings to Typed Values

Converts raw CSV cells into dates, currency amounts and trimmed strings
according to a batch's column mapping. Coercion never raises: a bad cell
becomes None and is recorded on the record so validation can count it.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime
from types import MappingProxyType
from typing import Any, Final, Optional

from dateutil import parser as dateutil_parser

from core.ingestion.schema import (
    MONEY_TYPES,
    ColumnMapping,
    RawRow,
    SemanticType,
    TypedPropertyRecord,
)


# Explicit layouts tried before the generic parser, in this order
_MONTH_FIRST_SLASH = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_ISO = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_MONTH_FIRST_DASH = re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$")

# Missing components in the generic fallback come from here, never from today
_FALLBACK_DEFAULT: Final = datetime(2000, 1, 1)

_CURRENCY_NOISE = re.compile(r"[$,\s]")
_NON_NUMERIC = re.compile(r"[^\d.-]")
_LEADING_NUMBER = re.compile(r"^-?(?:\d+\.?\d*|\.\d+)")


def _clean(value: Optional[str]) -> Optional[str]:
    """Trim a raw cell; empty or absent -> None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_date(value: Optional[str]) -> Optional[date]:
    """
    Parse a sale date.

    Tries MM/DD/YYYY, YYYY-MM-DD and MM-DD-YYYY explicitly, then falls
    back to dateutil for anything else. A layout match with an impossible
    calendar date (e.g. 02/30/2024) is not retried with the fallback.

    Returns:
        datetime.date, or None if the value cannot be parsed
    """
    text = _clean(value)
    if text is None:
        return None

    match = _MONTH_FIRST_SLASH.match(text) or _MONTH_FIRST_DASH.match(text)
    if match:
        month, day, year = (int(g) for g in match.groups())
        return _safe_date(year, month, day)

    match = _ISO.match(text)
    if match:
        year, month, day = (int(g) for g in match.groups())
        return _safe_date(year, month, day)

    try:
        return dateutil_parser.parse(text, default=_FALLBACK_DEFAULT).date()
    except (ValueError, OverflowError):
        return None


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_money(value: Optional[str]) -> Optional[float]:
    """
    Parse a currency amount such as '$12,500.00'.

    Strips '$', commas and whitespace, drops any other character that is
    not a digit, dot or minus, then reads the leading number.

    Digit runs too long for a float (inf) are treated as unparseable.

    Returns:
        float, or None when no finite number remains
    """
    text = _clean(value)
    if text is None:
        return None

    cleaned = _NON_NUMERIC.sub("", _CURRENCY_NOISE.sub("", text))
    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        return None

    amount = float(match.group(0))
    if not math.isfinite(amount):
        return None
    return amount


def coerce_value(value: Optional[str], semantic: SemanticType) -> Any:
    """Coerce one cell according to its column's semantic type."""
    if semantic is SemanticType.POWER_TO_SALE_DATE:
        return parse_date(value)
    if semantic in MONEY_TYPES:
        return parse_money(value)
    return _clean(value)


def coerce(row: RawRow, mapping: ColumnMapping) -> TypedPropertyRecord:
    """
    Coerce a raw row into a TypedPropertyRecord.

    When several headers share a semantic type, the first one in column
    order fills the typed field and the rest are kept as extras.

    Args:
        row: Header -> raw value
        mapping: Column mapping built for the batch

    Returns:
        TypedPropertyRecord (never raises for bad cells)
    """
    fields: dict[str, Any] = {}
    extras: dict[str, Optional[str]] = {}
    failures: list[str] = []

    for header, raw in row.items():
        semantic = mapping.get(header, SemanticType.UNKNOWN)
        if semantic is SemanticType.UNKNOWN or semantic.field_name in fields:
            extras[header] = _clean(raw)
            continue

        value = coerce_value(raw, semantic)
        if value is None and _clean(raw) is not None:
            failures.append(semantic.value)
        fields[semantic.field_name] = value

    return TypedPropertyRecord(
        **fields,
        extras=MappingProxyType(extras),
        coercion_failures=tuple(failures),
    )
