"""
Tax Lien Scout - Ingestion Layer

Column inference, cell coercion and data-quality validation for uploaded
county tax-delinquency CSV files.

Every uploaded batch flows through here before scoring: rows of untyped
strings in, TypedPropertyRecord plus a ValidationReport out.
"""

from core.ingestion.schema import (
    SemanticType,
    ColumnMapping,
    RawRow,
    TypedPropertyRecord,
    ValidationReport,
    COLUMN_SYNONYMS,
    SAMPLE_ROW_COUNT,
    MAX_REPORTED_ISSUES,
    mapping_to_dict,
    value_or_zero,
)
from core.ingestion.inference import infer, detect_column_type, match_header
from core.ingestion.coercion import coerce, parse_date, parse_money
from core.ingestion.validation import validate
from core.ingestion.reader import (
    CSVStructureError,
    ParsedCSV,
    RawTable,
    parse_csv,
    read_rows,
)

__all__ = [
    # Schema
    "SemanticType",
    "ColumnMapping",
    "RawRow",
    "TypedPropertyRecord",
    "ValidationReport",
    "COLUMN_SYNONYMS",
    "SAMPLE_ROW_COUNT",
    "MAX_REPORTED_ISSUES",
    "mapping_to_dict",
    "value_or_zero",
    # Inference
    "infer",
    "detect_column_type",
    "match_header",
    # Coercion
    "coerce",
    "parse_date",
    "parse_money",
    # Validation
    "validate",
    # Reader
    "CSVStructureError",
    "ParsedCSV",
    "RawTable",
    "parse_csv",
    "read_rows",
]
