"""
Scoring rules - ordered rule tables and sub-score derivations.

Every function here is pure. Classification rules are evaluated
top-to-bottom and the first matching rule wins, so table order is part
of the behaviour: the raw-land rule fires on any description without
"building" or "structure", which is why the multi-family rule is only
reached for descriptions that mention one of those words.
"""

import math
import re
from datetime import date
from typing import Callable, Optional, Sequence, Tuple

from core.ingestion.schema import TypedPropertyRecord, value_or_zero

from .models import LocationQuality, PropertyTypeClass


# =============================================================================
# Configuration
# =============================================================================

DAYS_PER_YEAR = 365

# Redemption estimate
REDEMPTION_INTEREST_RATE = 0.12  # annual, typical for tax liens
REDEMPTION_FLAT_FEE = 100.0


def _contains_any(text: str, keywords: Sequence[str]) -> bool:
    return any(keyword in text for keyword in keywords)


def _starts_word(text: str, keywords: Sequence[str]) -> bool:
    return any(re.search(r"\b" + re.escape(keyword), text) for keyword in keywords)


# =============================================================================
# Property Type
# =============================================================================

COMMERCIAL_KEYWORDS = ("commercial", "retail", "office", "warehouse", "industrial")
RESIDENTIAL_KEYWORDS = ("residential", "single family", "house", "home", "dwelling")
RAW_LAND_KEYWORDS = ("vacant", "raw land", "undeveloped", "lot")
MULTI_FAMILY_KEYWORDS = ("apartment", "multi-family", "duplex", "condo")


def _is_raw_land(description: str) -> bool:
    if _contains_any(description, RAW_LAND_KEYWORDS):
        return True
    return "building" not in description and "structure" not in description


PROPERTY_TYPE_RULES: Tuple[Tuple[Callable[[str], bool], PropertyTypeClass], ...] = (
    (lambda d: _contains_any(d, COMMERCIAL_KEYWORDS), PropertyTypeClass.COMMERCIAL),
    (lambda d: _contains_any(d, RESIDENTIAL_KEYWORDS), PropertyTypeClass.RESIDENTIAL),
    (_is_raw_land, PropertyTypeClass.RAW_LAND),
    (lambda d: _contains_any(d, MULTI_FAMILY_KEYWORDS), PropertyTypeClass.MULTI_FAMILY),
)


def classify_property_type(record: TypedPropertyRecord) -> PropertyTypeClass:
    """Classify a parcel from its description text."""
    description = (record.property_description or "").lower()
    for predicate, property_type in PROPERTY_TYPE_RULES:
        if predicate(description):
            return property_type
    return PropertyTypeClass.UNKNOWN


# =============================================================================
# Location Quality
# =============================================================================

HIGH_LOCATION_KEYWORDS = ("city", "downtown", "metro")
HIGH_ADDRESS_KEYWORDS = ("main st", "downtown")
MEDIUM_LOCATION_KEYWORDS = ("suburb", "town", "village")
LOW_LOCATION_KEYWORDS = ("rural", "county", "unincorporated")

# Rules receive (location, address), both lower-cased.
# Keywords must start a word: "Anytown" is not a town.
LOCATION_RULES: Tuple[Tuple[Callable[[str, str], bool], LocationQuality], ...] = (
    (
        lambda loc, addr: _starts_word(loc, HIGH_LOCATION_KEYWORDS)
        or _starts_word(addr, HIGH_ADDRESS_KEYWORDS),
        LocationQuality.HIGH,
    ),
    (lambda loc, addr: _starts_word(loc, MEDIUM_LOCATION_KEYWORDS), LocationQuality.MEDIUM),
    (lambda loc, addr: _starts_word(loc, LOW_LOCATION_KEYWORDS), LocationQuality.LOW),
)


def assess_location_quality(record: TypedPropertyRecord) -> LocationQuality:
    """Grade the location from the location and address fields."""
    location = (record.location or "").lower()
    address = (record.address or "").lower()
    for predicate, quality in LOCATION_RULES:
        if predicate(location, address):
            return quality
    return LocationQuality.UNKNOWN


# =============================================================================
# Numeric Derivations
# =============================================================================

ACREAGE_PATTERNS = (
    re.compile(r"(\d+\.?\d*)\s*acres?"),
    re.compile(r"(\d+\.?\d*)\s*ac"),
    re.compile(r"(\d+\.?\d*)\s*a\."),
)


def extract_acreage(record: TypedPropertyRecord) -> Optional[float]:
    """Pull '<number> acres' / 'ac' / 'a.' out of the description."""
    description = (record.property_description or "").lower()
    for pattern in ACREAGE_PATTERNS:
        match = pattern.search(description)
        if match:
            acreage = float(match.group(1))
            return acreage if math.isfinite(acreage) else None
    return None


def calculate_equity_ratio(record: TypedPropertyRecord) -> float:
    """
    (land + improvement value) / delinquent amount.

    Never negative: 0 when nothing is owed, when the amount or the total
    value is negative, or when the division overflows.
    """
    delinquent = value_or_zero(record.delinquent_amount)
    if delinquent <= 0:
        return 0.0
    ratio = record.total_value / delinquent
    if ratio <= 0 or not math.isfinite(ratio):
        return 0.0
    return ratio


def calculate_delinquency_age(record: TypedPropertyRecord, reference_date: date) -> int:
    """
    Days elapsed since the power-to-sale date.

    Returns 0 when there is no sale date. Future sale dates give a
    negative age.
    """
    if record.power_to_sale_date is None:
        return 0
    return (reference_date - record.power_to_sale_date).days


def calculate_estimated_redemption(record: TypedPropertyRecord, age_days: int) -> float:
    """Delinquent amount plus simple annual interest and a flat fee."""
    base = value_or_zero(record.delinquent_amount)
    interest = base * REDEMPTION_INTEREST_RATE * (age_days / DAYS_PER_YEAR)
    return base + interest + REDEMPTION_FLAT_FEE


# =============================================================================
# Investment Score Buckets
# =============================================================================

PROPERTY_TYPE_POINTS = {
    PropertyTypeClass.RESIDENTIAL: 15,
    PropertyTypeClass.COMMERCIAL: 12,
    PropertyTypeClass.MULTI_FAMILY: 10,
    PropertyTypeClass.RAW_LAND: 5,
    PropertyTypeClass.UNKNOWN: 3,
}

LOCATION_POINTS = {
    LocationQuality.HIGH: 15,
    LocationQuality.MEDIUM: 10,
    LocationQuality.LOW: 5,
    LocationQuality.UNKNOWN: 3,
}


def equity_points(equity_ratio: float) -> int:
    if equity_ratio >= 5:
        return 30
    elif equity_ratio >= 3:
        return 20
    elif equity_ratio >= 2:
        return 10
    return 0


def age_points(age_days: int) -> int:
    years = age_days / DAYS_PER_YEAR
    if 1 <= years <= 3:
        return 20
    elif 0.5 <= years <= 5:
        return 15
    elif years >= 0.25:
        return 10
    return 0


def acreage_points(acreage: Optional[float]) -> int:
    if acreage is None:
        return 0
    if acreage >= 5:
        return 10
    elif acreage >= 1:
        return 5
    return 0


def competition_points(equity_ratio: float, delinquent_amount: Optional[float]) -> int:
    """
    Competition proxy.

    equity_ratio * delinquent_amount is the total assessed value; smaller
    parcels are assumed to draw fewer bidders.
    """
    amount = equity_ratio * value_or_zero(delinquent_amount)
    if amount < 10000:
        return 10
    elif amount < 50000:
        return 5
    return 0
