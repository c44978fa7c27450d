"""
Scoring Engine

Derives equity, delinquency age, property class, location quality and
acreage for each typed record, combines them into a bounded 0-100
investment score with a risk tier and recommendations, and aggregates
batch-level portfolio statistics.
"""

from .models import (
    PropertyTypeClass,
    LocationQuality,
    RiskLevel,
    RecommendationType,
    Priority,
    Recommendation,
    AnalyzedProperty,
    TopOpportunity,
    ScoreDistribution,
    PortfolioStats,
)
from .engine import InvestmentScorer, analyze, analyze_batch
from .portfolio import aggregate, score_band, top_opportunities
from .analytics import build_analytics, build_trends, approaching_sale, score_scatter

__all__ = [
    # Models
    "PropertyTypeClass",
    "LocationQuality",
    "RiskLevel",
    "RecommendationType",
    "Priority",
    "Recommendation",
    "AnalyzedProperty",
    "TopOpportunity",
    "ScoreDistribution",
    "PortfolioStats",
    # Engine
    "InvestmentScorer",
    "analyze",
    "analyze_batch",
    # Portfolio
    "aggregate",
    "score_band",
    "top_opportunities",
    # Analytics
    "build_analytics",
    "build_trends",
    "approaching_sale",
    "score_scatter",
]
