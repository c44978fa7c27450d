"""
Investment scoring logic for tax-delinquent parcels.
"""

from datetime import date
from typing import List, Optional, Sequence

from core.ingestion.schema import TypedPropertyRecord

from .models import (
    AnalyzedProperty,
    LocationQuality,
    Priority,
    PropertyTypeClass,
    Recommendation,
    RecommendationType,
    RiskLevel,
)
from .rules import (
    LOCATION_POINTS,
    PROPERTY_TYPE_POINTS,
    acreage_points,
    age_points,
    assess_location_quality,
    calculate_delinquency_age,
    calculate_equity_ratio,
    calculate_estimated_redemption,
    classify_property_type,
    competition_points,
    equity_points,
    extract_acreage,
)


class InvestmentScorer:
    """
    Scores typed property records and produces AnalyzedProperty results.

    Scoring methodology (additive points, clamped to 0-100):
    - Equity ratio: up to 30
    - Delinquency age: up to 20
    - Property type: up to 15
    - Location quality: up to 15
    - Acreage: up to 10
    - Competition proxy: up to 10

    The scorer holds only its reference date; analyzing the same record
    twice always gives the same result.
    """

    # Score clamp
    MIN_SCORE = 0
    MAX_SCORE = 100

    # Risk thresholds
    RISK_LOW_SCORE = 80
    RISK_MEDIUM_SCORE = 60

    # Recommendation thresholds
    EXCELLENT_EQUITY_RATIO = 5
    LONG_DELINQUENCY_DAYS = 1095  # 3 years
    PRE_SALE_CONTACT_SCORE = 70
    MONITOR_SCORE = 50

    def __init__(self, reference_date: Optional[date] = None):
        """
        Initialize the scorer.

        Args:
            reference_date: "Today" for delinquency age (default: date.today())
        """
        self._reference_date = reference_date or date.today()

    @property
    def reference_date(self) -> date:
        return self._reference_date

    def analyze(self, record: TypedPropertyRecord) -> AnalyzedProperty:
        """
        Analyze a single record.

        Args:
            record: Coerced property record.

        Returns:
            AnalyzedProperty with sub-scores, score, risk and recommendations.
        """
        equity_ratio = calculate_equity_ratio(record)
        age_days = calculate_delinquency_age(record, self._reference_date)
        property_type = classify_property_type(record)
        location_quality = assess_location_quality(record)
        acreage = extract_acreage(record)

        investment_score = self._calculate_investment_score(
            record, equity_ratio, age_days, property_type, location_quality, acreage
        )

        recommendations = self._generate_recommendations(
            equity_ratio, age_days, property_type, location_quality, investment_score
        )

        return AnalyzedProperty(
            record=record,
            equity_ratio=equity_ratio,
            delinquency_age_days=age_days,
            property_type=property_type,
            location_quality=location_quality,
            acreage=acreage,
            investment_score=investment_score,
            risk_level=self._get_risk_level(investment_score),
            estimated_redemption=calculate_estimated_redemption(record, age_days),
            recommendations=tuple(recommendations),
        )

    def analyze_batch(
        self,
        records: Sequence[TypedPropertyRecord],
    ) -> List[AnalyzedProperty]:
        """
        Analyze multiple records.

        Returns:
            List of AnalyzedProperty in input order (one per record).
        """
        return [self.analyze(record) for record in records]

    def _calculate_investment_score(
        self,
        record: TypedPropertyRecord,
        equity_ratio: float,
        age_days: int,
        property_type: PropertyTypeClass,
        location_quality: LocationQuality,
        acreage: Optional[float],
    ) -> int:
        """Sum the independent point buckets and clamp to 0-100."""
        score = (
            equity_points(equity_ratio)
            + age_points(age_days)
            + PROPERTY_TYPE_POINTS[property_type]
            + LOCATION_POINTS[location_quality]
            + acreage_points(acreage)
            + competition_points(equity_ratio, record.delinquent_amount)
        )
        return min(max(score, self.MIN_SCORE), self.MAX_SCORE)

    def _get_risk_level(self, investment_score: int) -> RiskLevel:
        """Determine risk tier from the investment score."""
        if investment_score >= self.RISK_LOW_SCORE:
            return RiskLevel.LOW
        elif investment_score >= self.RISK_MEDIUM_SCORE:
            return RiskLevel.MEDIUM
        else:
            return RiskLevel.HIGH

    def _generate_recommendations(
        self,
        equity_ratio: float,
        age_days: int,
        property_type: PropertyTypeClass,
        location_quality: LocationQuality,
        investment_score: int,
    ) -> List[Recommendation]:
        """Generate advisory notes for the property."""
        recommendations = []

        if equity_ratio >= self.EXCELLENT_EQUITY_RATIO:
            recommendations.append(Recommendation(
                RecommendationType.POSITIVE,
                "Excellent equity ratio - strong potential for profit",
                Priority.HIGH,
            ))

        if age_days > self.LONG_DELINQUENCY_DAYS:
            recommendations.append(Recommendation(
                RecommendationType.WARNING,
                "Property has been delinquent for 3+ years - investigate why",
                Priority.HIGH,
            ))

        if property_type is PropertyTypeClass.RAW_LAND:
            recommendations.append(Recommendation(
                RecommendationType.INFO,
                "Raw land investment - consider development potential",
                Priority.MEDIUM,
            ))

        if location_quality is LocationQuality.HIGH:
            recommendations.append(Recommendation(
                RecommendationType.POSITIVE,
                "Prime location - high demand area",
                Priority.HIGH,
            ))

        # Investment strategy
        if investment_score >= self.PRE_SALE_CONTACT_SCORE:
            recommendations.append(Recommendation(
                RecommendationType.ACTION,
                "Consider pre-sale contact with property owner",
                Priority.HIGH,
            ))
        elif investment_score >= self.MONITOR_SCORE:
            recommendations.append(Recommendation(
                RecommendationType.ACTION,
                "Monitor for auction date and prepare to bid",
                Priority.MEDIUM,
            ))

        return recommendations


def analyze(
    record: TypedPropertyRecord,
    reference_date: Optional[date] = None,
) -> AnalyzedProperty:
    """Analyze one record with a throwaway scorer."""
    return InvestmentScorer(reference_date).analyze(record)


def analyze_batch(
    records: Sequence[TypedPropertyRecord],
    reference_date: Optional[date] = None,
) -> List[AnalyzedProperty]:
    """Analyze records in order with one shared reference date."""
    return InvestmentScorer(reference_date).analyze_batch(records)
