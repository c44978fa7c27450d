"""
Portfolio aggregation over one batch of analyzed properties.
"""

from collections import Counter
from typing import Sequence

from core.ingestion.schema import value_or_zero

from .models import AnalyzedProperty, PortfolioStats, ScoreDistribution, TopOpportunity


# Score bands for distribution (independent of risk thresholds)
HIGH_SCORE_BAND = 70
MEDIUM_SCORE_BAND = 50

TOP_OPPORTUNITY_COUNT = 10


def score_band(investment_score: int) -> str:
    """'high' (>= 70), 'medium' (50-69) or 'low' (< 50)."""
    if investment_score >= HIGH_SCORE_BAND:
        return "high"
    elif investment_score >= MEDIUM_SCORE_BAND:
        return "medium"
    return "low"


def top_opportunities(
    properties: Sequence[AnalyzedProperty],
    limit: int = TOP_OPPORTUNITY_COUNT,
) -> list[AnalyzedProperty]:
    """Highest scores first; ties keep input order."""
    return sorted(properties, key=lambda p: p.investment_score, reverse=True)[:limit]


def aggregate(properties: Sequence[AnalyzedProperty]) -> PortfolioStats:
    """
    Generate portfolio statistics for a batch.

    Args:
        properties: Analyzed properties in input order.

    Returns:
        PortfolioStats; all zero/empty for an empty batch.
    """
    if not properties:
        return PortfolioStats()

    count = len(properties)
    bands = Counter(score_band(p.investment_score) for p in properties)
    property_types = Counter(p.property_type.value for p in properties)

    return PortfolioStats(
        total_properties=count,
        average_score=sum(p.investment_score for p in properties) / count,
        score_distribution=ScoreDistribution(
            high=bands["high"],
            medium=bands["medium"],
            low=bands["low"],
        ),
        property_types=dict(property_types),
        total_value=sum(p.total_value for p in properties),
        total_delinquent=sum(value_or_zero(p.delinquent_amount) for p in properties),
        average_equity_ratio=sum(p.equity_ratio for p in properties) / count,
        top_opportunities=tuple(
            TopOpportunity(
                parcel_id=p.parcel_id,
                investment_score=p.investment_score,
                equity_ratio=p.equity_ratio,
                delinquent_amount=p.delinquent_amount,
            )
            for p in top_opportunities(properties)
        ),
    )
