"""
CSV Reader - Uploaded Text to Raw Rows and Typed Records

Tokenizes an uploaded CSV into header -> raw value rows, then runs
column inference once over the head of the batch and coerces every row
with the resulting mapping.

A stream that cannot be tokenized is fatal for the whole batch and is
reported as CSVStructureError. Individual bad cells never are.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from typing import Any

from core.ingestion.coercion import coerce
from core.ingestion.inference import infer
from core.ingestion.schema import (
    ColumnMapping,
    RawRow,
    TypedPropertyRecord,
    mapping_to_dict,
)


logger = logging.getLogger(__name__)

_BOM = "\ufeff"


class CSVStructureError(ValueError):
    """Uploaded text could not be tokenized into CSV rows."""


@dataclass(frozen=True)
class RawTable:
    """Tokenized CSV: headers in file order and one mapping per data row."""

    headers: tuple[str, ...]
    rows: tuple[RawRow, ...]


@dataclass(frozen=True)
class ParsedCSV:
    """Result of inference and coercion over one uploaded file."""

    filename: str
    headers: tuple[str, ...]
    column_mapping: ColumnMapping
    records: tuple[TypedPropertyRecord, ...]

    @property
    def total_rows(self) -> int:
        return len(self.records)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "filename": self.filename,
            "headers": list(self.headers),
            "column_mapping": mapping_to_dict(self.column_mapping),
            "total_rows": self.total_rows,
            "data": [record.to_dict() for record in self.records],
        }


def read_rows(content: str) -> RawTable:
    """
    Tokenize CSV text.

    Args:
        content: Decoded CSV text, header row first

    Returns:
        RawTable (empty when the text has no header row)

    Raises:
        CSVStructureError: If the text is not well-formed CSV
    """
    if "\x00" in content:
        raise CSVStructureError("CSV content contains NUL bytes")
    if content.startswith(_BOM):
        content = content[len(_BOM):]

    reader = csv.DictReader(io.StringIO(content, newline=""), strict=True)
    rows: list[RawRow] = []
    try:
        headers = tuple(reader.fieldnames or ())
        for row in reader:
            overflow = row.pop(None, None)
            if overflow:
                logger.debug(
                    "Dropped %d cells beyond the header on line %d",
                    len(overflow),
                    reader.line_num,
                )
            rows.append(row)
    except csv.Error as exc:
        logger.warning("CSV parsing error on line %d: %s", reader.line_num, exc)
        raise CSVStructureError(f"Line {reader.line_num}: {exc}") from exc

    return RawTable(headers=headers, rows=tuple(rows))


def parse_csv(content: str, filename: str) -> ParsedCSV:
    """
    Parse an uploaded CSV with automatic column detection.

    The column mapping is inferred from the first rows before any row
    is coerced, and the same mapping is applied to every row.

    Args:
        content: Decoded CSV text
        filename: Original filename (informational)

    Returns:
        ParsedCSV with mapping and typed records in file order

    Raises:
        CSVStructureError: If the text is not well-formed CSV
    """
    table = read_rows(content)
    logger.info("Detected headers in %s: %s", filename, list(table.headers))

    mapping = infer(table.headers, table.rows)
    records = tuple(coerce(row, mapping) for row in table.rows)

    logger.info("Parsed %d rows from %s", len(records), filename)
    return ParsedCSV(
        filename=filename,
        headers=table.headers,
        column_mapping=mapping,
        records=records,
    )
