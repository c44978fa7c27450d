"""
Data models for the Scoring Engine.

Defines the classification enums, the scored property record and the
batch-level portfolio statistics.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from core.ingestion.schema import TypedPropertyRecord


class PropertyTypeClass(Enum):
    """Property class inferred from the parcel description."""
    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    RAW_LAND = "raw_land"
    MULTI_FAMILY = "multi_family"
    UNKNOWN = "unknown"

    @classmethod
    def from_string(cls, value: str) -> Optional["PropertyTypeClass"]:
        """Convert string to PropertyTypeClass, case-insensitive."""
        normalised = value.lower().strip().replace("-", "_")
        for member in cls:
            if member.value == normalised:
                return member
        return None


class LocationQuality(Enum):
    """Location desirability inferred from location and address text."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    UNKNOWN = "unknown"


class RiskLevel(Enum):
    """
    Risk tier derived from the investment score.

    Low: score >= 80
    Medium: score >= 60
    High: below 60
    """
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RecommendationType(Enum):
    POSITIVE = "positive"
    WARNING = "warning"
    INFO = "info"
    ACTION = "action"


class Priority(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def from_string(cls, value: str) -> Optional["Priority"]:
        """Convert string to Priority, case-insensitive."""
        normalised = value.lower().strip()
        for member in cls:
            if member.value == normalised:
                return member
        return None


@dataclass(frozen=True)
class Recommendation:
    """One advisory note attached to a scored property."""
    type: RecommendationType
    message: str
    priority: Priority

    def to_dict(self) -> dict[str, str]:
        return {
            "type": self.type.value,
            "message": self.message,
            "priority": self.priority.value,
        }


@dataclass(frozen=True)
class AnalyzedProperty:
    """
    A typed property record plus every value derived by the Scoring Engine.

    Created once per record and never modified afterwards.
    """
    record: TypedPropertyRecord
    equity_ratio: float  # never negative
    delinquency_age_days: int  # negative when the sale date is in the future
    property_type: PropertyTypeClass
    location_quality: LocationQuality
    acreage: Optional[float]
    investment_score: int
    risk_level: RiskLevel
    estimated_redemption: float
    recommendations: tuple[Recommendation, ...] = field(default_factory=tuple)
    property_id: Optional[str] = None  # assigned when stored in a dataset

    def __post_init__(self) -> None:
        if not 0 <= self.investment_score <= 100:
            raise ValueError("investment_score must be between 0 and 100")

    @property
    def parcel_id(self) -> Optional[str]:
        return self.record.parcel_id

    @property
    def delinquent_amount(self) -> Optional[float]:
        return self.record.delinquent_amount

    @property
    def total_value(self) -> float:
        return self.record.total_value

    @property
    def delinquency_age_years(self) -> float:
        return self.delinquency_age_days / 365

    @property
    def potential_profit(self) -> float:
        """Total assessed value less the estimated redemption amount."""
        return self.total_value - self.estimated_redemption

    def to_dict(self) -> dict[str, Any]:
        """Flatten record and derived fields into one dictionary."""
        data = {"id": self.property_id}
        data.update(self.record.to_dict())
        data.update({
            "equity_ratio": self.equity_ratio,
            "delinquency_age": self.delinquency_age_days,
            "property_type": self.property_type.value,
            "location_quality": self.location_quality.value,
            "acreage": self.acreage,
            "investment_score": self.investment_score,
            "risk_level": self.risk_level.value,
            "estimated_redemption": self.estimated_redemption,
            "total_property_value": self.total_value,
            "potential_profit": self.potential_profit,
            "recommendations": [r.to_dict() for r in self.recommendations],
        })
        return data


@dataclass(frozen=True)
class TopOpportunity:
    """Projection of an AnalyzedProperty used in portfolio summaries."""
    parcel_id: Optional[str]
    investment_score: int
    equity_ratio: float
    delinquent_amount: Optional[float]

    def to_dict(self) -> dict[str, Any]:
        return {
            "parcel_id": self.parcel_id,
            "investment_score": self.investment_score,
            "equity_ratio": self.equity_ratio,
            "delinquent_amount": self.delinquent_amount,
        }


@dataclass(frozen=True)
class ScoreDistribution:
    """Counts per score band: high >= 70, medium 50-69, low < 50."""
    high: int = 0
    medium: int = 0
    low: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"high": self.high, "medium": self.medium, "low": self.low}


@dataclass(frozen=True)
class PortfolioStats:
    """Aggregate statistics over one batch of analyzed properties."""
    total_properties: int = 0
    average_score: float = 0.0
    score_distribution: ScoreDistribution = field(default_factory=ScoreDistribution)
    property_types: dict[str, int] = field(default_factory=dict)
    total_value: float = 0.0
    total_delinquent: float = 0.0
    average_equity_ratio: float = 0.0
    top_opportunities: tuple[TopOpportunity, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_properties": self.total_properties,
            "average_score": self.average_score,
            "score_distribution": self.score_distribution.to_dict(),
            "property_types": dict(self.property_types),
            "total_value": self.total_value,
            "total_delinquent": self.total_delinquent,
            "average_equity_ratio": self.average_equity_ratio,
            "top_opportunities": [o.to_dict() for o in self.top_opportunities],
        }
