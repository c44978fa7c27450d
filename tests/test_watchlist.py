"""
Tests for the Watchlist

Tests cover:
- Add, update and remove entries
- Newest-first ordering after updates
- Detail views joining property, dataset and entry
- Entries for deleted datasets
"""

import pytest

from core.pipeline import process_upload
from core.repository import DatasetRepository
from core.scoring import Priority
from core.watchlist import (
    WatchlistEntry,
    WatchlistRepository,
    describe_property,
    get_watchlist_repository,
    watched_properties,
)


@pytest.fixture
def datasets():
    return DatasetRepository()


@pytest.fixture
def watchlist():
    return WatchlistRepository()


@pytest.fixture
def dataset(datasets, sample_csv, reference_date):
    return datasets.create(process_upload(sample_csv, "county.csv", reference_date))


@pytest.fixture
def ids(dataset):
    return [p.property_id for p in dataset.properties]


# =============================================================================
# Entries
# =============================================================================


class TestWatchlistRepository:

    def test_add_defaults(self, watchlist):
        entry = watchlist.add("abc-1")
        assert entry.priority is Priority.MEDIUM
        assert entry.notes is None
        assert watchlist.get("abc-1") is entry

    def test_update_replaces_entry(self, watchlist):
        watchlist.add("abc-1", notes="first look")
        entry = watchlist.add("abc-1", notes="drive by Friday", priority=Priority.HIGH)

        assert watchlist.count() == 1
        assert watchlist.get("abc-1") is entry
        assert entry.notes == "drive by Friday"

    def test_newest_first(self, watchlist):
        watchlist.add("a")
        watchlist.add("b")
        watchlist.add("c")
        watchlist.add("a")
        assert [e.property_id for e in watchlist.list_all()] == ["a", "c", "b"]

    def test_remove(self, watchlist):
        watchlist.add("a")
        assert watchlist.remove("a") is True
        assert watchlist.remove("a") is False
        assert watchlist.count() == 0

    def test_discard_many(self, watchlist):
        watchlist.add("a")
        watchlist.add("b")
        assert watchlist.discard_many(["a", "zzz"]) == 1
        assert [e.property_id for e in watchlist.list_all()] == ["b"]

    def test_entry_requires_property_id(self):
        with pytest.raises(ValueError):
            WatchlistEntry(property_id="")

    def test_entry_to_dict(self, watchlist):
        data = watchlist.add("a", notes="n", priority=Priority.LOW).to_dict()
        assert data["watchlist_notes"] == "n"
        assert data["watchlist_priority"] == "low"
        assert "T" in data["watchlist_date"]

    @pytest.mark.parametrize("raw,expected", [
        ("high", Priority.HIGH),
        (" Medium ", Priority.MEDIUM),
        ("LOW", Priority.LOW),
        ("urgent", None),
    ])
    def test_priority_from_string(self, raw, expected):
        assert Priority.from_string(raw) is expected

    def test_singleton(self):
        assert get_watchlist_repository() is get_watchlist_repository()


# =============================================================================
# Detail Views
# =============================================================================


class TestDetailViews:

    def test_describe_unwatched(self, datasets, watchlist, dataset, ids):
        detail = describe_property(datasets, watchlist, ids[0])
        data = detail.to_dict()

        assert detail.is_watchlisted is False
        assert data["id"] == ids[0]
        assert data["dataset_name"] == "county.csv"
        assert data["upload_date"] == dataset.uploaded_at.isoformat()
        assert data["total_property_value"] == 450000.0
        assert data["watchlist_priority"] is None

    def test_describe_watched(self, datasets, watchlist, ids):
        watchlist.add(ids[1], notes="corner lot", priority=Priority.HIGH)
        data = describe_property(datasets, watchlist, ids[1]).to_dict()

        assert data["is_watchlisted"] is True
        assert data["parcel_id"] == "789-012"
        assert data["watchlist_notes"] == "corner lot"
        assert data["watchlist_priority"] == "high"

    def test_watched_without_notes_still_watchlisted(self, datasets, watchlist, ids):
        watchlist.add(ids[0])
        assert describe_property(datasets, watchlist, ids[0]).is_watchlisted is True

    def test_describe_unknown(self, datasets, watchlist):
        assert describe_property(datasets, watchlist, "missing-1") is None

    def test_watched_properties_newest_first(self, datasets, watchlist, ids):
        watchlist.add(ids[2])
        watchlist.add(ids[0])
        details = watched_properties(datasets, watchlist)
        assert [d.analyzed.property_id for d in details] == [ids[0], ids[2]]

    def test_watched_properties_skip_deleted_datasets(self, datasets, watchlist, dataset, ids):
        watchlist.add(ids[0])
        datasets.delete(dataset.dataset_id)
        assert watched_properties(datasets, watchlist) == []
