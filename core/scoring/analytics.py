"""
Portfolio analytics - distribution and breakdown views for a batch.

Range buckets are listed highest first; each bucket is (label, lower bound)
and a value falls in the first bucket whose lower bound it reaches.
"""

from datetime import date, timedelta
from typing import Any, Dict, List, Sequence

from core.ingestion.schema import value_or_zero

from .models import AnalyzedProperty, RiskLevel
from .portfolio import HIGH_SCORE_BAND


SCORE_RANGES = (
    ("90-100", 90),
    ("80-89", 80),
    ("70-79", 70),
    ("60-69", 60),
    ("50-59", 50),
    ("0-49", float("-inf")),
)

EQUITY_RANGES = (
    ("10+", 10),
    ("5-9.9", 5),
    ("3-4.9", 3),
    ("2-2.9", 2),
    ("1-1.9", 1),
    ("0-0.9", float("-inf")),
)

AMOUNT_RANGES = (
    ("100k+", 100000),
    ("50k-99k", 50000),
    ("25k-49k", 25000),
    ("10k-24k", 10000),
    ("5k-9k", 5000),
    ("0-4k", float("-inf")),
)

RISK_ORDER = (RiskLevel.LOW, RiskLevel.MEDIUM, RiskLevel.HIGH)

APPROACHING_SALE_DAYS = 30


def _bucket(value: float, ranges) -> str:
    for label, lower in ranges:
        if value >= lower:
            return label
    return ranges[-1][0]


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def score_range_distribution(properties: Sequence[AnalyzedProperty]) -> List[Dict[str, Any]]:
    """Count of properties per score range, highest range first."""
    counts = {label: 0 for label, _ in SCORE_RANGES}
    for p in properties:
        counts[_bucket(p.investment_score, SCORE_RANGES)] += 1
    return [{"score_range": label, "count": n} for label, n in counts.items() if n]


def equity_range_distribution(properties: Sequence[AnalyzedProperty]) -> List[Dict[str, Any]]:
    """Count of properties per equity-ratio range, highest range first."""
    counts = {label: 0 for label, _ in EQUITY_RANGES}
    for p in properties:
        counts[_bucket(p.equity_ratio, EQUITY_RANGES)] += 1
    return [{"equity_range": label, "count": n} for label, n in counts.items() if n]


def amount_range_distribution(properties: Sequence[AnalyzedProperty]) -> List[Dict[str, Any]]:
    """Count and average score per delinquent-amount range."""
    scores: Dict[str, List[int]] = {label: [] for label, _ in AMOUNT_RANGES}
    for p in properties:
        label = _bucket(value_or_zero(p.delinquent_amount), AMOUNT_RANGES)
        scores[label].append(p.investment_score)
    return [
        {"amount_range": label, "count": len(s), "avg_score": _mean(s)}
        for label, s in scores.items()
        if s
    ]


def risk_distribution(properties: Sequence[AnalyzedProperty]) -> List[Dict[str, Any]]:
    """Count, average equity ratio and average age per risk level."""
    result = []
    for level in RISK_ORDER:
        members = [p for p in properties if p.risk_level is level]
        if not members:
            continue
        result.append({
            "risk_level": level.value,
            "count": len(members),
            "avg_equity_ratio": _mean([p.equity_ratio for p in members]),
            "avg_delinquency_age": _mean([p.delinquency_age_days for p in members]),
        })
    return result


def property_type_summary(properties: Sequence[AnalyzedProperty]) -> List[Dict[str, Any]]:
    """Count and average score per property class, most common first."""
    groups: Dict[str, List[int]] = {}
    for p in properties:
        groups.setdefault(p.property_type.value, []).append(p.investment_score)
    rows = [
        {"property_type": key, "count": len(s), "avg_score": _mean(s)}
        for key, s in groups.items()
    ]
    return sorted(rows, key=lambda r: r["count"], reverse=True)


def location_summary(properties: Sequence[AnalyzedProperty]) -> List[Dict[str, Any]]:
    """Per-location statistics, best average score first."""
    groups: Dict[str, List[AnalyzedProperty]] = {}
    for p in properties:
        if p.record.location:
            groups.setdefault(p.record.location, []).append(p)

    rows = []
    for location, members in groups.items():
        rows.append({
            "location": location,
            "property_count": len(members),
            "avg_score": _mean([p.investment_score for p in members]),
            "avg_equity_ratio": _mean([p.equity_ratio for p in members]),
            "total_delinquent": sum(value_or_zero(p.delinquent_amount) for p in members),
            "high_score_count": sum(
                1 for p in members if p.investment_score >= HIGH_SCORE_BAND
            ),
        })
    return sorted(rows, key=lambda r: r["avg_score"], reverse=True)


def approaching_sale(
    properties: Sequence[AnalyzedProperty],
    reference_date: date,
    within_days: int = APPROACHING_SALE_DAYS,
) -> List[AnalyzedProperty]:
    """
    Properties whose power-to-sale date falls on or before
    reference_date + within_days, earliest first.
    """
    cutoff = reference_date + timedelta(days=within_days)
    dated = [
        p for p in properties
        if p.record.power_to_sale_date is not None
        and p.record.power_to_sale_date <= cutoff
    ]
    return sorted(dated, key=lambda p: p.record.power_to_sale_date)


def build_analytics(
    properties: Sequence[AnalyzedProperty],
    reference_date: date,
) -> Dict[str, Any]:
    """All analytics views for a batch in one dictionary."""
    return {
        "score_distribution": score_range_distribution(properties),
        "equity_distribution": equity_range_distribution(properties),
        "amount_distribution": amount_range_distribution(properties),
        "risk_distribution": risk_distribution(properties),
        "property_types": property_type_summary(properties),
        "locations": location_summary(properties),
        "approaching_sale": [
            {
                "parcel_id": p.parcel_id,
                "power_to_sale_date": p.record.power_to_sale_date.isoformat(),
                "investment_score": p.investment_score,
                "delinquent_amount": p.delinquent_amount,
                "property_type": p.property_type.value,
                "location": p.record.location,
            }
            for p in approaching_sale(properties, reference_date)
        ],
    }


def score_scatter(properties: Sequence[AnalyzedProperty]) -> List[Dict[str, Any]]:
    """Score against equity ratio per property, best score first."""
    ordered = sorted(properties, key=lambda p: p.investment_score, reverse=True)
    return [
        {
            "equity_ratio": p.equity_ratio,
            "investment_score": p.investment_score,
            "delinquent_amount": p.delinquent_amount,
            "property_type": p.property_type.value,
        }
        for p in ordered
    ]


def build_trends(properties: Sequence[AnalyzedProperty]) -> Dict[str, Any]:
    """Scatter data plus the delinquent-amount breakdown."""
    return {
        "scatter_data": score_scatter(properties),
        "amount_distribution": amount_range_distribution(properties),
    }
