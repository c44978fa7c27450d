"""
Dataset Repository - In-Memory Storage for Processed Uploads

Keeps each processed CSV batch (validation report, column mapping,
scored properties, portfolio statistics) under a generated dataset id.
This is an in-memory implementation for development.
Production should use a persistent database.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any, Optional

from core.ingestion import ColumnMapping, ValidationReport, mapping_to_dict
from core.pipeline import UploadResult
from core.scoring import AnalyzedProperty, PortfolioStats


logger = logging.getLogger(__name__)


# =============================================================================
# Dataset
# =============================================================================


@dataclass(frozen=True)
class Dataset:
    """One stored upload."""

    dataset_id: str
    filename: str
    uploaded_at: datetime
    reference_date: date
    validation: ValidationReport
    column_mapping: ColumnMapping
    properties: tuple[AnalyzedProperty, ...]
    portfolio: PortfolioStats

    @classmethod
    def from_upload(cls, upload: UploadResult) -> "Dataset":
        """
        Wrap a pipeline result with a fresh id and timestamp.

        Each property gets an id of the form "<dataset_id>-<row number>".
        """
        dataset_id = uuid.uuid4().hex[:12]
        properties = tuple(
            replace(p, property_id=f"{dataset_id}-{row}")
            for row, p in enumerate(upload.properties, start=1)
        )
        return cls(
            dataset_id=dataset_id,
            filename=upload.filename,
            uploaded_at=datetime.now(),
            reference_date=upload.reference_date,
            validation=upload.validation,
            column_mapping=upload.column_mapping,
            properties=properties,
            portfolio=upload.portfolio,
        )

    @property
    def total_properties(self) -> int:
        return len(self.properties)

    def get_property(self, property_id: str) -> Optional[AnalyzedProperty]:
        for prop in self.properties:
            if prop.property_id == property_id:
                return prop
        return None

    def summary(self) -> dict[str, Any]:
        """Listing view without the property rows."""
        return {
            "dataset_id": self.dataset_id,
            "filename": self.filename,
            "uploaded_at": self.uploaded_at.isoformat(),
            "reference_date": self.reference_date.isoformat(),
            "total_properties": self.total_properties,
            "quality_score": round(self.validation.quality_score, 2),
            "average_score": round(self.portfolio.average_score, 2),
            "high_score_count": self.portfolio.score_distribution.high,
        }

    def to_dict(self) -> dict[str, Any]:
        data = self.summary()
        data.update({
            "column_mapping": mapping_to_dict(self.column_mapping),
            "validation": self.validation.to_dict(),
            "portfolio_stats": self.portfolio.to_dict(),
        })
        return data


# =============================================================================
# Repository
# =============================================================================


class DatasetRepository:
    """
    Repository for storing and retrieving processed datasets.

    Provides create, lookup, listing and deletion. Datasets are
    immutable once stored.
    """

    def __init__(self):
        self._datasets: dict[str, Dataset] = {}
        # property_id -> dataset_id
        self._property_index: dict[str, str] = {}

    # =========================================================================
    # CRUD Operations
    # =========================================================================

    def create(self, upload: UploadResult) -> Dataset:
        """
        Store a pipeline result as a new dataset.

        Args:
            upload: Result of process_upload()

        Returns:
            New Dataset
        """
        dataset = Dataset.from_upload(upload)
        self._datasets[dataset.dataset_id] = dataset
        for prop in dataset.properties:
            self._property_index[prop.property_id] = dataset.dataset_id
        logger.info(
            "Stored dataset %s (%s, %d properties)",
            dataset.dataset_id,
            dataset.filename,
            dataset.total_properties,
        )
        return dataset

    def get(self, dataset_id: str) -> Optional[Dataset]:
        """
        Get a dataset by ID.

        Args:
            dataset_id: Dataset ID

        Returns:
            Dataset if found, None otherwise
        """
        return self._datasets.get(dataset_id)

    def delete(self, dataset_id: str) -> bool:
        """
        Delete a dataset.

        Returns:
            True if deleted, False if not found
        """
        dataset = self._datasets.pop(dataset_id, None)
        if dataset is not None:
            for prop in dataset.properties:
                self._property_index.pop(prop.property_id, None)
            logger.info("Deleted dataset %s", dataset_id)
            return True
        return False

    # =========================================================================
    # Query Operations
    # =========================================================================

    def list_all(self) -> list[Dataset]:
        """All datasets, newest first."""
        # Insertion order is upload order
        return list(reversed(self._datasets.values()))

    def properties(self, dataset_id: Optional[str] = None) -> list[AnalyzedProperty]:
        """
        Analyzed properties of one dataset, or of every dataset.

        Args:
            dataset_id: Restrict to this dataset (None = all)

        Returns:
            Properties in upload order; empty if the dataset is unknown
        """
        if dataset_id is not None:
            dataset = self._datasets.get(dataset_id)
            return list(dataset.properties) if dataset else []

        result: list[AnalyzedProperty] = []
        for dataset in self._datasets.values():
            result.extend(dataset.properties)
        return result

    def find_property(
        self, property_id: str
    ) -> Optional[tuple[Dataset, AnalyzedProperty]]:
        """
        Look up a stored property by ID.

        Returns:
            (owning dataset, property), or None if not found
        """
        dataset_id = self._property_index.get(property_id)
        if dataset_id is None:
            return None
        dataset = self._datasets[dataset_id]
        return dataset, dataset.get_property(property_id)

    def count(self) -> int:
        """Get total number of datasets."""
        return len(self._datasets)

    def clear(self) -> None:
        """Remove every dataset."""
        self._datasets.clear()
        self._property_index.clear()


# =============================================================================
# Singleton Instance
# =============================================================================

_repository_instance: Optional[DatasetRepository] = None


def get_dataset_repository() -> DatasetRepository:
    """
    Get the dataset repository singleton.

    Returns:
        DatasetRepository instance
    """
    global _repository_instance
    if _repository_instance is None:
        _repository_instance = DatasetRepository()
    return _repository_instance
