"""
Tests for the Upload Pipeline, Query, Export and Dataset Repository

Tests cover:
- Full CSV -> scored portfolio run
- Quality gate helper
- Filtering, sorting and pagination
- CSV export ordering and quoting
- In-memory dataset storage
"""

import csv
import io

import pytest

from core.ingestion import CSVStructureError, SemanticType
from core.pipeline import QUALITY_THRESHOLD, meets_quality_threshold, process_upload
from core.query import PropertyQuery, paginate, run_query
from core.export import EXPORT_HEADERS, export_csv
from core.repository import DatasetRepository, get_dataset_repository


@pytest.fixture
def upload(sample_csv, reference_date):
    return process_upload(sample_csv, "county.csv", reference_date)


# =============================================================================
# Pipeline
# =============================================================================


class TestProcessUpload:
    """End-to-end processing of one CSV."""

    def test_column_mapping(self, upload):
        mapping = upload.column_mapping
        assert mapping["Parcel Number"] == SemanticType.PARCEL_ID
        assert mapping["Power to Sale Date"] == SemanticType.POWER_TO_SALE_DATE
        assert mapping["Delinquent Amount"] == SemanticType.DELINQUENT_AMOUNT
        assert mapping["Address"] == SemanticType.ADDRESS

    def test_records_typed(self, upload):
        first = upload.records[0]
        assert first.parcel_id == "123-456"
        assert first.delinquent_amount == 12500.0
        assert first.location == "Anytown, CA"

    def test_validation(self, upload):
        report = upload.validation
        assert report.total_rows == 4
        assert report.valid_rows == 2
        assert report.missing_parcel_id == 1
        assert report.missing_amounts == 1
        assert report.invalid_dates == 1
        assert report.quality_score == 50.0
        assert report.issues == (
            "Row 3: Missing parcel ID",
            "Row 3: Missing or invalid delinquent amount",
            "Row 4: Invalid date format",
        )

    def test_scores(self, upload):
        assert [p.investment_score for p in upload.properties] == [68, 77, 45, 60]

    def test_every_row_scored(self, upload):
        """Invalid rows are still scored; validation only reports."""
        assert upload.total_properties == upload.validation.total_rows

    def test_portfolio(self, upload):
        stats = upload.portfolio
        assert stats.total_properties == 4
        assert stats.average_score == pytest.approx(62.5)
        assert stats.score_distribution.to_dict() == {"high": 1, "medium": 2, "low": 1}
        assert [o.parcel_id for o in stats.top_opportunities] == [
            "789-012", "123-456", "555-555", None,
        ]

    def test_empty_batch(self, reference_date):
        result = process_upload("Parcel,Amount\n", "empty.csv", reference_date)
        assert result.validation.quality_score == 0.0
        assert result.portfolio.total_properties == 0
        assert result.portfolio.top_opportunities == ()

    def test_structural_error_propagates(self, reference_date):
        with pytest.raises(CSVStructureError):
            process_upload('Parcel\n"unterminated\n', "bad.csv", reference_date)

    def test_to_dict(self, upload):
        data = upload.to_dict()
        assert data["filename"] == "county.csv"
        assert data["total_properties"] == 4
        assert data["column_mapping"]["Parcel Number"] == "parcelId"
        assert "properties" not in data
        assert len(upload.to_dict(include_properties=True)["properties"]) == 4


class TestQualityGate:

    def test_threshold_inclusive(self, upload):
        assert QUALITY_THRESHOLD == 50.0
        assert meets_quality_threshold(upload.validation)

    def test_custom_threshold(self, upload):
        assert not meets_quality_threshold(upload.validation, threshold=75.0)


# =============================================================================
# Query
# =============================================================================


class TestQuery:
    """Filtering, sorting and pagination."""

    def test_default_sort_by_score_desc(self, upload):
        page = run_query(upload.properties, PropertyQuery())
        assert [p.investment_score for p in page.items] == [77, 68, 60, 45]
        assert page.total == 4
        assert page.pages == 1

    def test_score_range(self, upload):
        page = run_query(upload.properties, PropertyQuery(min_score=60, max_score=70))
        assert sorted(p.investment_score for p in page.items) == [60, 68]

    def test_zero_amount_passes_default_bounds(self, upload):
        """The zero-amount row has equity 0 and amount 0, both within defaults."""
        page = run_query(upload.properties, PropertyQuery())
        assert any(p.parcel_id is None for p in page.items)

    def test_null_amount_fails_numeric_bound(self, reference_date):
        properties = process_upload(
            "Parcel,Amount\nA,\nB,$100\n", "t.csv", reference_date
        ).properties
        page = run_query(properties, PropertyQuery())
        assert [p.parcel_id for p in page.items] == ["B"]

    def test_property_type_filter(self, upload):
        page = run_query(upload.properties, PropertyQuery(property_type="commercial"))
        assert [p.parcel_id for p in page.items] == ["789-012"]

    def test_location_search_case_insensitive(self, upload):
        page = run_query(upload.properties, PropertyQuery(location="anytown"))
        assert [p.parcel_id for p in page.items] == ["123-456"]

    def test_location_search_matches_address(self, upload):
        page = run_query(upload.properties, PropertyQuery(location="main st"))
        assert [p.parcel_id for p in page.items] == ["789-012"]

    def test_sort_ascending(self, upload):
        page = run_query(upload.properties, PropertyQuery(sort_by="equity_ratio", sort_order="asc"))
        ratios = [p.equity_ratio for p in page.items]
        assert ratios == sorted(ratios)

    def test_unknown_sort_falls_back_to_score(self, upload):
        page = run_query(upload.properties, PropertyQuery(sort_by="owner; DROP TABLE"))
        assert [p.investment_score for p in page.items] == [77, 68, 60, 45]

    def test_nulls_sort_last(self, upload):
        for order in ("asc", "desc"):
            page = run_query(upload.properties, PropertyQuery(sort_by="parcel_id", sort_order=order))
            assert page.items[-1].parcel_id is None

    def test_pagination(self, upload):
        page = run_query(upload.properties, PropertyQuery(page=2, limit=3))
        assert [p.investment_score for p in page.items] == [45]
        assert page.pages == 2
        assert page.to_dict()["pagination"] == {"page": 2, "limit": 3, "total": 4, "pages": 2}

    def test_page_past_end_is_empty(self, upload):
        page = run_query(upload.properties, PropertyQuery(page=5, limit=3))
        assert page.items == ()
        assert page.total == 4

    @pytest.mark.parametrize("kwargs", [{"page": 0}, {"limit": 0}])
    def test_invalid_paging(self, kwargs):
        with pytest.raises(ValueError):
            PropertyQuery(**kwargs)

    def test_paginate_plain_sequence(self):
        page = paginate(["a", "b", "c", "d", "e"], page=3, limit=2)
        assert page.items == ("e",)
        assert page.total == 5
        assert page.pages == 3

    @pytest.mark.parametrize("page,limit", [(0, 10), (1, 0)])
    def test_paginate_rejects_bad_paging(self, page, limit):
        with pytest.raises(ValueError):
            paginate([], page=page, limit=limit)


# =============================================================================
# Export
# =============================================================================


class TestExport:
    """CSV export of scored properties."""

    def _rows(self, text):
        return list(csv.reader(io.StringIO(text)))

    def test_headers_and_order(self, upload):
        rows = self._rows(export_csv(upload.properties))
        assert rows[0] == EXPORT_HEADERS
        assert [r[12] for r in rows[1:]] == ["77", "68", "60", "45"]

    def test_min_score(self, upload):
        rows = self._rows(export_csv(upload.properties, min_score=65))
        assert [r[0] for r in rows[1:]] == ["789-012", "123-456"]

    def test_quoting_and_nulls(self, upload):
        rows = self._rows(export_csv(upload.properties))
        by_parcel = {r[0]: r for r in rows[1:]}

        assert by_parcel["123-456"][3] == "Anytown, CA"
        assert by_parcel["123-456"][1] == "2022-06-01"
        # Row with no parcel and no address exports empty cells
        assert by_parcel[""][8] == ""
        # Invalid sale date exports empty
        assert by_parcel["555-555"][1] == ""

    def test_empty_export_has_header(self):
        assert self._rows(export_csv([])) == [EXPORT_HEADERS]


# =============================================================================
# Repository
# =============================================================================


class TestDatasetRepository:
    """In-memory dataset storage."""

    def test_create_and_get(self, upload):
        repo = DatasetRepository()
        dataset = repo.create(upload)

        assert repo.get(dataset.dataset_id) is dataset
        assert dataset.filename == "county.csv"
        assert dataset.total_properties == 4
        assert repo.count() == 1

    def test_unknown_dataset(self):
        repo = DatasetRepository()
        assert repo.get("missing") is None
        assert repo.properties("missing") == []
        assert repo.delete("missing") is False

    def test_list_newest_first(self, upload):
        repo = DatasetRepository()
        first = repo.create(upload)
        second = repo.create(upload)
        assert [d.dataset_id for d in repo.list_all()] == [second.dataset_id, first.dataset_id]

    def test_properties_across_datasets(self, upload):
        repo = DatasetRepository()
        first = repo.create(upload)
        repo.create(upload)
        assert len(repo.properties()) == 8
        assert len(repo.properties(first.dataset_id)) == 4

    def test_delete(self, upload):
        repo = DatasetRepository()
        dataset = repo.create(upload)
        assert repo.delete(dataset.dataset_id) is True
        assert repo.count() == 0

    def test_summary(self, upload):
        summary = DatasetRepository().create(upload).summary()
        assert summary["total_properties"] == 4
        assert summary["quality_score"] == 50.0
        assert summary["high_score_count"] == 1

    def test_singleton(self):
        assert get_dataset_repository() is get_dataset_repository()

    def test_property_ids_assigned_in_row_order(self, upload):
        dataset = DatasetRepository().create(upload)
        assert [p.property_id for p in dataset.properties] == [
            f"{dataset.dataset_id}-{row}" for row in range(1, 5)
        ]
        # The pipeline result itself is left untouched
        assert all(p.property_id is None for p in upload.properties)

    def test_find_property(self, upload):
        repo = DatasetRepository()
        dataset = repo.create(upload)

        found_dataset, prop = repo.find_property(f"{dataset.dataset_id}-2")
        assert found_dataset is dataset
        assert prop.parcel_id == "789-012"
        assert repo.find_property("missing") is None

    def test_find_property_after_delete(self, upload):
        repo = DatasetRepository()
        dataset = repo.create(upload)
        repo.delete(dataset.dataset_id)
        assert repo.find_property(f"{dataset.dataset_id}-1") is None
