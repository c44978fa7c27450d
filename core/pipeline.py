"""
Upload Pipeline - One CSV Batch from Text to Scored Portfolio

Runs the full sequence for a single uploaded file:
1. Tokenize CSV text into raw rows
2. Infer the column mapping once from the head of the batch
3. Coerce every row with that mapping
4. Validate the batch (data-quality report)
5. Score every record
6. Aggregate portfolio statistics

The pipeline performs no I/O. Whether a low quality score rejects the
batch is decided by the caller via meets_quality_threshold().
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from core.ingestion import (
    ColumnMapping,
    TypedPropertyRecord,
    ValidationReport,
    mapping_to_dict,
    parse_csv,
    validate,
)
from core.scoring import AnalyzedProperty, InvestmentScorer, PortfolioStats, aggregate


logger = logging.getLogger(__name__)


# Historical upload rejection threshold (percent of valid rows)
QUALITY_THRESHOLD = 50.0


@dataclass(frozen=True)
class UploadResult:
    """Everything produced for one uploaded batch."""

    filename: str
    reference_date: date
    headers: tuple[str, ...]
    column_mapping: ColumnMapping
    records: tuple[TypedPropertyRecord, ...]
    validation: ValidationReport
    properties: tuple[AnalyzedProperty, ...]
    portfolio: PortfolioStats

    @property
    def total_properties(self) -> int:
        return len(self.properties)

    def to_dict(self, include_properties: bool = False) -> dict[str, Any]:
        """Convert to dictionary; property rows only on request."""
        data = {
            "filename": self.filename,
            "reference_date": self.reference_date.isoformat(),
            "total_properties": self.total_properties,
            "column_mapping": mapping_to_dict(self.column_mapping),
            "validation": self.validation.to_dict(),
            "portfolio_stats": self.portfolio.to_dict(),
        }
        if include_properties:
            data["properties"] = [p.to_dict() for p in self.properties]
        return data


def meets_quality_threshold(
    report: ValidationReport,
    threshold: float = QUALITY_THRESHOLD,
) -> bool:
    """True if the batch's quality score reaches the threshold."""
    return report.quality_score >= threshold


def process_upload(
    content: str,
    filename: str,
    reference_date: Optional[date] = None,
) -> UploadResult:
    """
    Parse, validate, score and aggregate one uploaded CSV.

    Args:
        content: Decoded CSV text
        filename: Original filename (informational)
        reference_date: "Today" for delinquency ages (default: date.today())

    Returns:
        UploadResult

    Raises:
        CSVStructureError: If the text is not well-formed CSV
    """
    reference_date = reference_date or date.today()
    logger.info("Processing CSV file: %s", filename)

    parsed = parse_csv(content, filename)
    validation = validate(parsed.records)

    scorer = InvestmentScorer(reference_date=reference_date)
    properties = tuple(scorer.analyze_batch(parsed.records))
    portfolio = aggregate(properties)

    logger.info(
        "Scored %d properties from %s (quality %.1f%%, average score %.1f)",
        len(properties),
        filename,
        validation.quality_score,
        portfolio.average_score,
    )

    return UploadResult(
        filename=filename,
        reference_date=reference_date,
        headers=parsed.headers,
        column_mapping=parsed.column_mapping,
        records=parsed.records,
        validation=validation,
        properties=properties,
        portfolio=portfolio,
    )
