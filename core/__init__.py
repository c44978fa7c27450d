"""
Tax Lien Scout - Core Business Logic

This module provides the delinquent-property scoring pipeline:
1. Ingestion (column inference, coercion, validation)
2. Scoring (equity, age, class, location, acreage -> 0-100 score)
3. Portfolio aggregation and analytics
4. Query, export, dataset storage and the watchlist for the host surfaces
"""

# Ingestion Layer
from .ingestion import (
    SemanticType,
    ColumnMapping,
    TypedPropertyRecord,
    ValidationReport,
    CSVStructureError,
    ParsedCSV,
    infer,
    coerce,
    validate,
    parse_csv,
)

# Scoring Engine
from .scoring import (
    PropertyTypeClass,
    LocationQuality,
    RiskLevel,
    Recommendation,
    AnalyzedProperty,
    PortfolioStats,
    InvestmentScorer,
    analyze,
    analyze_batch,
    aggregate,
    build_analytics,
)

# Upload Pipeline
from .pipeline import (
    QUALITY_THRESHOLD,
    UploadResult,
    meets_quality_threshold,
    process_upload,
)

# Query / Export / Storage
from .query import PropertyQuery, PropertyPage, paginate, run_query
from .export import export_csv
from .repository import Dataset, DatasetRepository, get_dataset_repository
from .watchlist import (
    WatchlistEntry,
    PropertyDetail,
    WatchlistRepository,
    describe_property,
    watched_properties,
    get_watchlist_repository,
)

__all__ = [
    # Ingestion Layer
    "SemanticType",
    "ColumnMapping",
    "TypedPropertyRecord",
    "ValidationReport",
    "CSVStructureError",
    "ParsedCSV",
    "infer",
    "coerce",
    "validate",
    "parse_csv",
    # Scoring Engine
    "PropertyTypeClass",
    "LocationQuality",
    "RiskLevel",
    "Recommendation",
    "AnalyzedProperty",
    "PortfolioStats",
    "InvestmentScorer",
    "analyze",
    "analyze_batch",
    "aggregate",
    "build_analytics",
    # Upload Pipeline
    "QUALITY_THRESHOLD",
    "UploadResult",
    "meets_quality_threshold",
    "process_upload",
    # Query / Export / Storage
    "PropertyQuery",
    "PropertyPage",
    "paginate",
    "run_query",
    "export_csv",
    "Dataset",
    "DatasetRepository",
    "get_dataset_repository",
    "WatchlistEntry",
    "PropertyDetail",
    "WatchlistRepository",
    "describe_property",
    "watched_properties",
    "get_watchlist_repository",
]
