"""
CSV export of analyzed properties.
"""

import csv
import io
from typing import Iterable, List, Optional

from core.scoring import AnalyzedProperty


EXPORT_HEADERS = [
    "Parcel ID",
    "Power to Sale Date",
    "Tax Area",
    "Location",
    "Delinquent Amount",
    "Land Value",
    "Improvement Value",
    "Property Description",
    "Address",
    "Property Type",
    "Equity Ratio",
    "Delinquency Age (days)",
    "Investment Score",
    "Estimated Redemption",
]


def _cell(value) -> str:
    return "" if value is None else str(value)


def export_row(prop: AnalyzedProperty) -> List[str]:
    """One export row in EXPORT_HEADERS order."""
    record = prop.record
    sale_date: Optional[str] = (
        record.power_to_sale_date.isoformat() if record.power_to_sale_date else None
    )
    return [
        _cell(record.parcel_id),
        _cell(sale_date),
        _cell(record.tax_area),
        _cell(record.location),
        _cell(record.delinquent_amount),
        _cell(record.land_value),
        _cell(record.improvement_value),
        _cell(record.property_description),
        _cell(record.address),
        prop.property_type.value,
        _cell(round(prop.equity_ratio, 2)),
        _cell(prop.delinquency_age_days),
        _cell(prop.investment_score),
        _cell(round(prop.estimated_redemption, 2)),
    ]


def export_csv(properties: Iterable[AnalyzedProperty], min_score: int = 0) -> str:
    """
    Export properties to CSV text, best score first.

    Args:
        properties: Analyzed properties
        min_score: Drop properties scoring below this

    Returns:
        CSV text with a header row
    """
    selected = [p for p in properties if p.investment_score >= min_score]
    selected.sort(key=lambda p: p.investment_score, reverse=True)

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_HEADERS)
    for prop in selected:
        writer.writerow(export_row(prop))
    return buffer.getvalue()
