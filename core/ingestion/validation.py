"""
Batch Validation - Data Quality Report for Coerced Records

Each failing condition on a row contributes its own issue message and
its own counter, so one row can be reported several times. Only the
first MAX_REPORTED_ISSUES messages are kept; the counters are exact.
"""

from __future__ import annotations

from typing import Sequence

from core.ingestion.schema import (
    MAX_REPORTED_ISSUES,
    SemanticType,
    TypedPropertyRecord,
    ValidationReport,
)


MISSING_PARCEL_ID = "Missing parcel ID"
INVALID_AMOUNT = "Missing or invalid delinquent amount"
INVALID_DATE = "Invalid date format"


def validate(records: Sequence[TypedPropertyRecord]) -> ValidationReport:
    """
    Validate a batch of typed records.

    A row is invalid when its parcel ID is missing, its delinquent amount
    is missing or not positive, or its sale date cell was present but
    could not be parsed.

    Args:
        records: Coerced records in upload order

    Returns:
        ValidationReport (well defined for an empty batch)
    """
    issues: list[str] = []
    valid_rows = 0
    missing_parcel_id = 0
    missing_amounts = 0
    invalid_dates = 0

    for index, record in enumerate(records, start=1):
        row_issues: list[str] = []

        if not record.parcel_id:
            missing_parcel_id += 1
            row_issues.append(MISSING_PARCEL_ID)

        if record.delinquent_amount is None or record.delinquent_amount <= 0:
            missing_amounts += 1
            row_issues.append(INVALID_AMOUNT)

        if record.has_coercion_failure(SemanticType.POWER_TO_SALE_DATE):
            invalid_dates += 1
            row_issues.append(INVALID_DATE)

        if not row_issues:
            valid_rows += 1
        issues.extend(f"Row {index}: {reason}" for reason in row_issues)

    return ValidationReport(
        total_rows=len(records),
        valid_rows=valid_rows,
        missing_parcel_id=missing_parcel_id,
        missing_amounts=missing_amounts,
        invalid_dates=invalid_dates,
        issues=tuple(issues[:MAX_REPORTED_ISSUES]),
    )
