"""
Tests for Cell Coercion

Tests cover:
- Currency parsing
- Date parsing (explicit layouts and generic fallback)
- Empty values become None, never 0 or ""
- Duplicate semantic headers and pass-through extras
- Coercion failures recorded on the record
- Hostile cells never raise and never produce non-finite numbers
"""

import math

import pytest
from datetime import date

from core.ingestion import SemanticType, coerce, parse_date, parse_money


@pytest.fixture
def mapping():
    return {
        "Parcel Number": SemanticType.PARCEL_ID,
        "Sale Date": SemanticType.POWER_TO_SALE_DATE,
        "Amount": SemanticType.DELINQUENT_AMOUNT,
        "Land": SemanticType.LAND_VALUE,
        "Owner": SemanticType.UNKNOWN,
    }


# =============================================================================
# Money
# =============================================================================


class TestParseMoney:
    """Currency amounts to floats."""

    @pytest.mark.parametrize("raw,expected", [
        ("$12,500.00", 12500.0),
        ("12500", 12500.0),
        ("  $ 1,000 ", 1000.0),
        ("0", 0.0),
        ("-250.50", -250.5),
        (".75", 0.75),
        ("USD 300", 300.0),
        ("1.2.3", 1.2),
    ])
    def test_parses(self, raw, expected):
        assert parse_money(raw) == pytest.approx(expected)

    @pytest.mark.parametrize("raw", [None, "", "   ", "N/A", "$", "-"])
    def test_unparseable_is_none(self, raw):
        assert parse_money(raw) is None

    @pytest.mark.parametrize("raw", [
        "9" * 400,
        "-" + "9" * 400,
        "$" + "9" * 400 + ".50",
    ])
    def test_too_large_for_float_is_none(self, raw):
        assert parse_money(raw) is None


# =============================================================================
# Dates
# =============================================================================


class TestParseDate:
    """Sale dates to datetime.date."""

    def test_month_first_slash(self):
        assert parse_date("03/04/2023") == date(2023, 3, 4)

    def test_iso(self):
        assert parse_date("2023-03-04") == date(2023, 3, 4)

    def test_month_first_dash(self):
        assert parse_date("3-4-2023") == date(2023, 3, 4)

    def test_generic_fallback(self):
        assert parse_date("March 4, 2023") == date(2023, 3, 4)

    def test_impossible_layout_date_is_none(self):
        assert parse_date("13/45/2023") is None
        assert parse_date("02/30/2024") is None

    @pytest.mark.parametrize("raw", [None, "", "  ", "not a date", "TBD"])
    def test_unparseable_is_none(self, raw):
        assert parse_date(raw) is None

    def test_fallback_does_not_depend_on_today(self):
        """Missing components come from a fixed default."""
        assert parse_date("March 2023") == date(2023, 3, 1)


# =============================================================================
# Row Coercion
# =============================================================================


class TestCoerce:
    """Raw rows to TypedPropertyRecord."""

    def test_typed_fields(self, mapping):
        record = coerce({
            "Parcel Number": " 123-456 ",
            "Sale Date": "06/01/2022",
            "Amount": "$12,500.00",
            "Land": "180000",
            "Owner": "Smith",
        }, mapping)

        assert record.parcel_id == "123-456"
        assert record.power_to_sale_date == date(2022, 6, 1)
        assert record.delinquent_amount == 12500.0
        assert record.land_value == 180000.0
        assert record.coercion_failures == ()

    def test_empty_cells_are_none(self, mapping):
        record = coerce({
            "Parcel Number": "",
            "Sale Date": "  ",
            "Amount": None,
            "Land": "",
            "Owner": "",
        }, mapping)

        assert record.parcel_id is None
        assert record.power_to_sale_date is None
        assert record.delinquent_amount is None
        assert record.land_value is None
        assert record.extras["Owner"] is None
        assert record.coercion_failures == ()

    def test_unknown_columns_kept_as_extras(self, mapping):
        record = coerce({"Parcel Number": "1", "Owner": "  Smith "}, mapping)
        assert dict(record.extras) == {"Owner": "Smith"}

    def test_unmapped_header_is_extra(self, mapping):
        record = coerce({"Parcel Number": "1", "Surprise": "x"}, mapping)
        assert record.extras["Surprise"] == "x"

    def test_missing_semantic_fields_are_none(self, mapping):
        record = coerce({"Parcel Number": "1"}, mapping)
        assert record.address is None
        assert record.improvement_value is None

    def test_bad_cells_recorded_as_failures(self, mapping):
        record = coerce({
            "Parcel Number": "1",
            "Sale Date": "someday",
            "Amount": "unknown",
        }, mapping)

        assert record.power_to_sale_date is None
        assert record.delinquent_amount is None
        assert record.has_coercion_failure(SemanticType.POWER_TO_SALE_DATE)
        assert record.has_coercion_failure(SemanticType.DELINQUENT_AMOUNT)
        assert not record.has_coercion_failure(SemanticType.PARCEL_ID)

    def test_duplicate_semantic_headers(self):
        """First header in column order fills the field; later ones are extras."""
        mapping = {
            "Parcel": SemanticType.PARCEL_ID,
            "Alt Parcel ID": SemanticType.PARCEL_ID,
        }
        record = coerce({"Parcel": "A-1", "Alt Parcel ID": " B-2 "}, mapping)
        assert record.parcel_id == "A-1"
        assert record.extras["Alt Parcel ID"] == "B-2"

    def test_record_is_immutable(self, mapping):
        record = coerce({"Parcel Number": "1"}, mapping)
        with pytest.raises(AttributeError):
            record.parcel_id = "2"

    def test_to_dict_is_json_safe(self, mapping):
        record = coerce({"Parcel Number": "1", "Sale Date": "2023-01-02"}, mapping)
        data = record.to_dict()
        assert data["power_to_sale_date"] == "2023-01-02"
        assert data["parcel_id"] == "1"

    def test_oversized_amount_recorded_as_failure(self, mapping):
        record = coerce({"Parcel Number": "1", "Amount": "9" * 400}, mapping)
        assert record.delinquent_amount is None
        assert record.has_coercion_failure(SemanticType.DELINQUENT_AMOUNT)


# =============================================================================
# Hostile Input
# =============================================================================

HOSTILE_CELLS = [
    "9" * 400,
    "-" + "9" * 400,
    "1" * 5000,
    "9" * 20,
    "1e309",
    "inf",
    "-Infinity",
    "NaN",
    "99/99/9999",
    "0000-00-00",
    "12/31/99999",
    "\x00\x01\x02",
    "\x1b[31m$5\x1b[0m",
    "\u202e$1,000",
    "$" + "," * 1000,
    "." * 500,
    "- - -",
]

STRING_FIELDS = ("parcel_id", "tax_area", "location", "property_description", "address")
MONEY_FIELDS = ("delinquent_amount", "land_value", "improvement_value")


class TestHostileCells:
    """Every cell resolves to a typed value or None, never an exception."""

    @pytest.fixture
    def full_mapping(self):
        return {member.value: member for member in SemanticType if member is not SemanticType.UNKNOWN}

    @pytest.mark.parametrize("cell", HOSTILE_CELLS)
    def test_every_field_typed_or_none(self, full_mapping, cell):
        record = coerce({header: cell for header in full_mapping}, full_mapping)

        for name in STRING_FIELDS:
            value = getattr(record, name)
            assert value is None or isinstance(value, str)

        for name in MONEY_FIELDS:
            value = getattr(record, name)
            assert value is None or (isinstance(value, float) and math.isfinite(value))

        assert record.power_to_sale_date is None or isinstance(record.power_to_sale_date, date)

    @pytest.mark.parametrize("cell", HOSTILE_CELLS)
    def test_parse_date_never_raises(self, cell):
        result = parse_date(cell)
        assert result is None or isinstance(result, date)

    @pytest.mark.parametrize("cell", HOSTILE_CELLS)
    def test_parse_money_finite_or_none(self, cell):
        result = parse_money(cell)
        assert result is None or math.isfinite(result)
