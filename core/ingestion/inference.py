"""
Column Inference - Header and Content Based Semantic Detection

Assigns each uploaded header to at most one SemanticType. Header text is
checked against the synonym catalog first; if nothing matches, sampled
cell values are tested against date, money, street-address and long-text
patterns, in that order.

The mapping is built once per batch from the first SAMPLE_ROW_COUNT rows
and then applied unchanged to every row of the batch.
"""

from __future__ import annotations

import logging
import re
from typing import Final, Iterable, Optional, Sequence

from core.ingestion.schema import (
    COLUMN_SYNONYMS,
    SAMPLE_ROW_COUNT,
    ColumnMapping,
    RawRow,
    SemanticType,
    freeze_mapping,
)


logger = logging.getLogger(__name__)


# =============================================================================
# Content Patterns
# =============================================================================

DATE_PATTERNS: Final[tuple[re.Pattern, ...]] = (
    re.compile(r"^\d{1,2}/\d{1,2}/\d{4}$"),
    re.compile(r"^\d{4}-\d{2}-\d{2}$"),
    re.compile(r"^\d{1,2}-\d{1,2}-\d{4}$"),
)

MONEY_PATTERNS: Final[tuple[re.Pattern, ...]] = (
    re.compile(r"^\$?[\d,]+\.?\d*$"),
    re.compile(r"^\$?[\d,]+$"),
)

_STREET_TYPES = r"(street|st|avenue|ave|road|rd|drive|dr|lane|ln|way|blvd|boulevard)"

ADDRESS_PATTERNS: Final[tuple[re.Pattern, ...]] = (
    re.compile(r"\d+\s+\w+\s+" + _STREET_TYPES, re.IGNORECASE),
    re.compile(r"^\d+\s+.*\s+" + _STREET_TYPES, re.IGNORECASE),
)

DESCRIPTION_MIN_LENGTH: Final[int] = 50


def looks_like_date(values: Iterable[str]) -> bool:
    """True if any value matches a supported date layout."""
    return any(p.match(v) for v in values for p in DATE_PATTERNS)


def looks_like_money(values: Iterable[str]) -> bool:
    """True if any value is a plain or $-prefixed amount."""
    return any(p.match(v) for v in values for p in MONEY_PATTERNS)


def looks_like_address(values: Iterable[str]) -> bool:
    """True if any value is a house number followed by a street type."""
    return any(p.search(v) for v in values for p in ADDRESS_PATTERNS)


def looks_like_description(values: Iterable[str]) -> bool:
    """True if any value is long free text."""
    return any(len(v) > DESCRIPTION_MIN_LENGTH for v in values)


# Evaluated top-to-bottom, first match wins
CONTENT_RULES: Final = (
    (looks_like_date, SemanticType.POWER_TO_SALE_DATE),
    (looks_like_money, SemanticType.DELINQUENT_AMOUNT),
    (looks_like_address, SemanticType.ADDRESS),
    (looks_like_description, SemanticType.PROPERTY_DESCRIPTION),
)


# =============================================================================
# Detection
# =============================================================================


def match_header(header: str) -> Optional[SemanticType]:
    """
    Match a header against the synonym catalog.

    Returns:
        The first catalog type with a synonym contained in the header,
        or None when no synonym matches.
    """
    normalised = header.lower().strip()
    for semantic, synonyms in COLUMN_SYNONYMS:
        if any(synonym in normalised for synonym in synonyms):
            return semantic
    return None


def detect_column_type(header: str, samples: Sequence[str]) -> SemanticType:
    """
    Detect the semantic type of one column.

    Args:
        header: Column header text
        samples: Non-empty sampled values for the column

    Returns:
        Matched SemanticType, UNKNOWN if nothing matches
    """
    semantic = match_header(header)
    if semantic is not None:
        return semantic

    for predicate, content_type in CONTENT_RULES:
        if predicate(samples):
            return content_type

    return SemanticType.UNKNOWN


def column_samples(
    header: str,
    rows: Sequence[RawRow],
    limit: int = SAMPLE_ROW_COUNT,
) -> list[str]:
    """Collect up to `limit` non-empty values for a header."""
    samples: list[str] = []
    for row in rows:
        value = row.get(header)
        if value is None:
            continue
        value = value.strip()
        if value:
            samples.append(value)
        if len(samples) >= limit:
            break
    return samples


def infer(headers: Sequence[str], sample_rows: Sequence[RawRow]) -> ColumnMapping:
    """
    Build the column mapping for a batch.

    Only the first SAMPLE_ROW_COUNT rows of `sample_rows` are consulted,
    so callers may pass the whole batch.

    Args:
        headers: Column headers in file order
        sample_rows: Leading rows of the batch

    Returns:
        Read-only header -> SemanticType mapping in header order
    """
    head = list(sample_rows[:SAMPLE_ROW_COUNT])
    mapping: dict[str, SemanticType] = {}
    for header in headers:
        semantic = detect_column_type(header, column_samples(header, head))
        mapping[header] = semantic
        logger.debug("Column %r mapped to %s", header, semantic.value)

    logger.info(
        "Column mapping: %s",
        {header: semantic.value for header, semantic in mapping.items()},
    )
    return freeze_mapping(mapping)
