"""
Property Query - Filtering, Sorting and Pagination

In-memory counterpart of the dashboard's property listing: range filters
on score, equity ratio and delinquent amount, exact property class,
case-insensitive location search, a whitelisted sort column and
page/limit pagination.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Final, Optional, Sequence

from core.scoring import AnalyzedProperty


SORT_KEYS: Final[dict[str, Callable[[AnalyzedProperty], Any]]] = {
    "investment_score": lambda p: p.investment_score,
    "equity_ratio": lambda p: p.equity_ratio,
    "delinquent_amount": lambda p: p.delinquent_amount,
    "delinquency_age": lambda p: p.delinquency_age_days,
    "parcel_id": lambda p: p.parcel_id,
}

DEFAULT_SORT: Final = "investment_score"
DEFAULT_LIMIT: Final = 50


@dataclass(frozen=True)
class PropertyQuery:
    """Filter, sort and page parameters for a property listing."""

    min_score: float = 0
    max_score: float = 100
    min_equity_ratio: float = 0
    max_equity_ratio: float = 999999
    min_amount: float = 0
    max_amount: float = 999999999
    property_type: Optional[str] = None
    location: Optional[str] = None
    sort_by: str = DEFAULT_SORT
    sort_order: str = "desc"
    page: int = 1
    limit: int = DEFAULT_LIMIT

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError("page must be at least 1")
        if self.limit < 1:
            raise ValueError("limit must be at least 1")

    @property
    def sort_column(self) -> str:
        """Requested sort column, or the default if not whitelisted."""
        return self.sort_by if self.sort_by in SORT_KEYS else DEFAULT_SORT

    @property
    def descending(self) -> bool:
        return self.sort_order.lower() != "asc"

    def matches(self, prop: AnalyzedProperty) -> bool:
        """Apply every filter to one property."""
        if not _in_range(prop.investment_score, self.min_score, self.max_score):
            return False
        if not _in_range(prop.equity_ratio, self.min_equity_ratio, self.max_equity_ratio):
            return False
        if not _in_range(prop.delinquent_amount, self.min_amount, self.max_amount):
            return False
        if self.property_type and prop.property_type.value != self.property_type:
            return False
        if self.location:
            needle = self.location.lower()
            haystacks = (prop.record.location or "", prop.record.address or "")
            if not any(needle in h.lower() for h in haystacks):
                return False
        return True


def _in_range(value: Optional[float], low: float, high: float) -> bool:
    # A missing value never satisfies a numeric bound
    return value is not None and low <= value <= high


@dataclass(frozen=True)
class PropertyPage:
    """One page of query results. Items only need a to_dict() method."""

    items: tuple[Any, ...]
    page: int
    limit: int
    total: int
    pages: int = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "pages", math.ceil(self.total / self.limit))

    def to_dict(self) -> dict[str, Any]:
        return {
            "properties": [p.to_dict() for p in self.items],
            "pagination": {
                "page": self.page,
                "limit": self.limit,
                "total": self.total,
                "pages": self.pages,
            },
        }


def sort_properties(
    properties: Sequence[AnalyzedProperty],
    sort_by: str = DEFAULT_SORT,
    descending: bool = True,
) -> list[AnalyzedProperty]:
    """Stable sort on a whitelisted column; missing values always last."""
    key = SORT_KEYS.get(sort_by, SORT_KEYS[DEFAULT_SORT])
    present = [p for p in properties if key(p) is not None]
    missing = [p for p in properties if key(p) is None]
    return sorted(present, key=key, reverse=descending) + missing


def run_query(
    properties: Sequence[AnalyzedProperty],
    query: PropertyQuery,
) -> PropertyPage:
    """
    Filter, sort and paginate properties.

    Args:
        properties: Candidate properties
        query: Filter and page parameters

    Returns:
        PropertyPage with the requested slice and totals
    """
    matched = [p for p in properties if query.matches(p)]
    ordered = sort_properties(matched, query.sort_column, query.descending)
    return paginate(ordered, query.page, query.limit)


def paginate(items: Sequence[Any], page: int = 1, limit: int = DEFAULT_LIMIT) -> PropertyPage:
    """
    Slice an already ordered sequence into one page.

    Raises:
        ValueError: If page or limit is below 1
    """
    if page < 1 or limit < 1:
        raise ValueError("page and limit must be at least 1")
    offset = (page - 1) * limit
    return PropertyPage(
        items=tuple(items[offset:offset + limit]),
        page=page,
        limit=limit,
        total=len(items),
    )
