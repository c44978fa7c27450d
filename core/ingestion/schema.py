"""
Ingestion Schema - Semantic Column Catalog and Typed Records

Defines the fixed catalog of semantic field types that uploaded county
tax-delinquency columns are mapped onto, the typed record produced for
every row, and the per-batch data-quality report.

Catalog order is part of the contract: lexical matching walks the
catalog top-to-bottom and the first type whose synonym list matches wins.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from types import MappingProxyType
from typing import Any, Final, Mapping, Optional


class SemanticType(Enum):
    """Semantic meaning assigned to an uploaded column header."""

    PARCEL_ID = "parcelId"
    POWER_TO_SALE_DATE = "powerToSaleDate"
    TAX_AREA = "taxArea"
    LOCATION = "location"
    DELINQUENT_AMOUNT = "delinquentAmount"
    LAND_VALUE = "landValue"
    IMPROVEMENT_VALUE = "improvementValue"
    PROPERTY_DESCRIPTION = "propertyDescription"
    ADDRESS = "address"
    UNKNOWN = "unknown"

    @classmethod
    def from_string(cls, value: str) -> Optional["SemanticType"]:
        """Convert a catalog value (e.g. 'parcelId') to SemanticType."""
        normalised = value.strip()
        for member in cls:
            if member.value == normalised:
                return member
        return None

    @property
    def field_name(self) -> str:
        """Attribute name on TypedPropertyRecord for this type."""
        return SEMANTIC_FIELD_NAMES[self]


# =============================================================================
# Catalog
# =============================================================================

# Header synonyms, checked in this exact order. A header matches a type when
# its lower-cased, trimmed text contains any of the phrases.
COLUMN_SYNONYMS: Final[tuple[tuple[SemanticType, tuple[str, ...]], ...]] = (
    (
        SemanticType.PARCEL_ID,
        ("parcel", "parcel_id", "parcelid", "parcel number", "parcel no", "id"),
    ),
    (
        SemanticType.POWER_TO_SALE_DATE,
        (
            "power to sale",
            "power_to_sale",
            "power to sale date",
            "sale date",
            "tax sale date",
            "auction date",
        ),
    ),
    (
        SemanticType.TAX_AREA,
        ("tax area", "tax_area", "area", "district", "zone"),
    ),
    (
        SemanticType.LOCATION,
        ("location", "city", "municipality", "town"),
    ),
    (
        SemanticType.DELINQUENT_AMOUNT,
        (
            "delinquent",
            "delinquent amount",
            "delinquent_amount",
            "owed",
            "balance",
            "tax owed",
        ),
    ),
    (
        SemanticType.LAND_VALUE,
        ("land value", "land_value", "land", "land val", "land worth"),
    ),
    (
        SemanticType.IMPROVEMENT_VALUE,
        (
            "improvement",
            "improvement value",
            "improvement_value",
            "improvements",
            "building value",
            "structure value",
        ),
    ),
    (
        SemanticType.PROPERTY_DESCRIPTION,
        (
            "description",
            "property description",
            "property_description",
            "legal description",
            "legal",
        ),
    ),
    (
        SemanticType.ADDRESS,
        ("address", "street", "street address", "location address"),
    ),
)

SEMANTIC_FIELD_NAMES: Final[Mapping[SemanticType, str]] = MappingProxyType(
    {
        SemanticType.PARCEL_ID: "parcel_id",
        SemanticType.POWER_TO_SALE_DATE: "power_to_sale_date",
        SemanticType.TAX_AREA: "tax_area",
        SemanticType.LOCATION: "location",
        SemanticType.DELINQUENT_AMOUNT: "delinquent_amount",
        SemanticType.LAND_VALUE: "land_value",
        SemanticType.IMPROVEMENT_VALUE: "improvement_value",
        SemanticType.PROPERTY_DESCRIPTION: "property_description",
        SemanticType.ADDRESS: "address",
    }
)

MONEY_TYPES: Final[frozenset[SemanticType]] = frozenset(
    {
        SemanticType.DELINQUENT_AMOUNT,
        SemanticType.LAND_VALUE,
        SemanticType.IMPROVEMENT_VALUE,
    }
)

# Rows sampled from the head of a batch for column inference
SAMPLE_ROW_COUNT: Final[int] = 10

# Validation issue messages kept per batch
MAX_REPORTED_ISSUES: Final[int] = 50

# Header -> SemanticType, frozen once built for a batch
ColumnMapping = Mapping[str, SemanticType]

# Header -> raw cell value as produced by the CSV reader
RawRow = Mapping[str, Optional[str]]


def freeze_mapping(mapping: dict[str, SemanticType]) -> ColumnMapping:
    """Return a read-only view of a column mapping, preserving header order."""
    return MappingProxyType(dict(mapping))


def mapping_to_dict(mapping: ColumnMapping) -> dict[str, str]:
    """Serialise a column mapping to header -> catalog value."""
    return {header: semantic.value for header, semantic in mapping.items()}


# =============================================================================
# Typed Record
# =============================================================================


@dataclass(frozen=True)
class TypedPropertyRecord:
    """
    One uploaded row after type coercion.

    Invariants:
        - empty or absent raw values are always None, never 0 or ""
        - money fields are floats, the sale date is a datetime.date
        - headers mapped to 'unknown' are kept in extras as trimmed strings
        - coercion_failures names the fields whose non-empty raw value
          could not be coerced (the field itself is None)
    """

    parcel_id: Optional[str] = None
    power_to_sale_date: Optional[date] = None
    tax_area: Optional[str] = None
    location: Optional[str] = None
    delinquent_amount: Optional[float] = None
    land_value: Optional[float] = None
    improvement_value: Optional[float] = None
    property_description: Optional[str] = None
    address: Optional[str] = None
    extras: Mapping[str, Optional[str]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    coercion_failures: tuple[str, ...] = ()

    @property
    def total_value(self) -> float:
        """Land plus improvement value, treating missing values as zero."""
        return value_or_zero(self.land_value) + value_or_zero(self.improvement_value)

    def has_coercion_failure(self, semantic: SemanticType) -> bool:
        """True if a non-empty cell of this type failed to coerce."""
        return semantic.value in self.coercion_failures

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-safe dictionary."""
        return {
            "parcel_id": self.parcel_id,
            "power_to_sale_date": (
                self.power_to_sale_date.isoformat() if self.power_to_sale_date else None
            ),
            "tax_area": self.tax_area,
            "location": self.location,
            "delinquent_amount": self.delinquent_amount,
            "land_value": self.land_value,
            "improvement_value": self.improvement_value,
            "property_description": self.property_description,
            "address": self.address,
            "extras": dict(self.extras),
        }


def value_or_zero(value: Optional[float]) -> float:
    """Explicit zero default for missing numeric fields."""
    return value if value is not None else 0.0


# =============================================================================
# Validation Report
# =============================================================================


@dataclass(frozen=True)
class ValidationReport:
    """
    Per-batch data-quality report.

    Counts are never truncated; issues keep only the first
    MAX_REPORTED_ISSUES messages in row order.
    """

    total_rows: int
    valid_rows: int
    missing_parcel_id: int = 0
    missing_amounts: int = 0
    invalid_dates: int = 0
    issues: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        """Validate counts."""
        if self.total_rows < 0:
            raise ValueError("total_rows cannot be negative")
        if not 0 <= self.valid_rows <= self.total_rows:
            raise ValueError("valid_rows must be between 0 and total_rows")
        if len(self.issues) > MAX_REPORTED_ISSUES:
            raise ValueError(f"issues is capped at {MAX_REPORTED_ISSUES} entries")

    @property
    def quality_score(self) -> float:
        """Share of valid rows as a percentage; 0 for an empty batch."""
        if self.total_rows == 0:
            return 0.0
        return self.valid_rows / self.total_rows * 100

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "stats": {
                "total_rows": self.total_rows,
                "valid_rows": self.valid_rows,
                "missing_parcel_id": self.missing_parcel_id,
                "missing_amounts": self.missing_amounts,
                "invalid_dates": self.invalid_dates,
            },
            "issues": list(self.issues),
            "quality_score": round(self.quality_score, 2),
        }
