"""
Watchlist - Saved Properties with Notes and Priority

Keeps the properties a user has flagged for follow-up, plus the detail
view that joins a stored property with its dataset and watchlist entry.
This is an in-memory implementation for development.
Production should use a persistent database.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Optional

from core.repository import Dataset, DatasetRepository
from core.scoring import AnalyzedProperty, Priority


logger = logging.getLogger(__name__)


# =============================================================================
# Models
# =============================================================================


@dataclass(frozen=True)
class WatchlistEntry:
    """One watched property."""

    property_id: str
    notes: Optional[str] = None
    priority: Priority = Priority.MEDIUM
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        if not self.property_id:
            raise ValueError("property_id is required")

    def to_dict(self) -> dict[str, Any]:
        return {
            "watchlist_notes": self.notes,
            "watchlist_priority": self.priority.value,
            "watchlist_date": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class PropertyDetail:
    """A stored property with its dataset and optional watchlist entry."""

    dataset: Dataset
    analyzed: AnalyzedProperty
    entry: Optional[WatchlistEntry] = None

    @property
    def is_watchlisted(self) -> bool:
        return self.entry is not None

    def to_dict(self) -> dict[str, Any]:
        data = self.analyzed.to_dict()
        data.update({
            "dataset_id": self.dataset.dataset_id,
            "dataset_name": self.dataset.filename,
            "upload_date": self.dataset.uploaded_at.isoformat(),
            "is_watchlisted": self.is_watchlisted,
            "watchlist_notes": None,
            "watchlist_priority": None,
            "watchlist_date": None,
        })
        if self.entry is not None:
            data.update(self.entry.to_dict())
        return data


# =============================================================================
# Repository
# =============================================================================


class WatchlistRepository:
    """
    Repository for watched properties.

    One entry per property. Adding a property that is already watched
    replaces its notes and priority and moves it to the top.
    """

    def __init__(self):
        self._entries: dict[str, WatchlistEntry] = {}

    def add(
        self,
        property_id: str,
        notes: Optional[str] = None,
        priority: Priority = Priority.MEDIUM,
    ) -> WatchlistEntry:
        """
        Watch a property, or update the entry if already watched.

        Args:
            property_id: Stored property ID
            notes: Free-text notes
            priority: Follow-up priority

        Returns:
            The new entry
        """
        entry = WatchlistEntry(property_id=property_id, notes=notes, priority=priority)
        # Re-insert so dict order stays oldest -> newest
        self._entries.pop(property_id, None)
        self._entries[property_id] = entry
        logger.info("Watching property %s (%s)", property_id, priority.value)
        return entry

    def remove(self, property_id: str) -> bool:
        """
        Stop watching a property.

        Returns:
            True if removed, False if it was not watched
        """
        if self._entries.pop(property_id, None) is None:
            return False
        logger.info("Unwatched property %s", property_id)
        return True

    def discard_many(self, property_ids: Iterable[str]) -> int:
        """Remove entries for properties that no longer exist."""
        removed = 0
        for property_id in property_ids:
            if self._entries.pop(property_id, None) is not None:
                removed += 1
        return removed

    def get(self, property_id: str) -> Optional[WatchlistEntry]:
        return self._entries.get(property_id)

    def list_all(self) -> list[WatchlistEntry]:
        """All entries, most recently added first."""
        return list(reversed(self._entries.values()))

    def count(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()


# =============================================================================
# Detail Views
# =============================================================================


def describe_property(
    datasets: DatasetRepository,
    watchlist: WatchlistRepository,
    property_id: str,
) -> Optional[PropertyDetail]:
    """Detail view for one stored property; None if it does not exist."""
    found = datasets.find_property(property_id)
    if found is None:
        return None
    dataset, prop = found
    return PropertyDetail(dataset=dataset, analyzed=prop, entry=watchlist.get(property_id))


def watched_properties(
    datasets: DatasetRepository,
    watchlist: WatchlistRepository,
) -> list[PropertyDetail]:
    """Detail views for every watched property that still exists, newest first."""
    result = []
    for entry in watchlist.list_all():
        found = datasets.find_property(entry.property_id)
        if found is not None:
            dataset, prop = found
            result.append(PropertyDetail(dataset=dataset, analyzed=prop, entry=entry))
    return result


# =============================================================================
# Singleton Instance
# =============================================================================

_watchlist_instance: Optional[WatchlistRepository] = None


def get_watchlist_repository() -> WatchlistRepository:
    """
    Get the watchlist repository singleton.

    Returns:
        WatchlistRepository instance
    """
    global _watchlist_instance
    if _watchlist_instance is None:
        _watchlist_instance = WatchlistRepository()
    return _watchlist_instance
