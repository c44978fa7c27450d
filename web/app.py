"""
FastAPI application for the delinquency scoring engine.

Thin HTTP surface over core: upload a county CSV, list stored datasets,
query scored properties, keep a watchlist, read portfolio statistics,
analytics and trends, and export results as CSV. No authentication.
"""

import logging
import os
from datetime import date
from typing import Any, Optional

from fastapi import FastAPI, File, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from core.export import export_csv
from core.ingestion import CSVStructureError, mapping_to_dict
from core.pipeline import meets_quality_threshold, process_upload
from core.query import PropertyQuery, paginate, run_query
from core.repository import Dataset, DatasetRepository, get_dataset_repository
from core.scoring import Priority, build_analytics, build_trends
from core.watchlist import (
    WatchlistRepository,
    describe_property,
    get_watchlist_repository,
    watched_properties,
)
from utils.config import Config


logger = logging.getLogger(__name__)

# =============================================================================
# Environment Configuration
# =============================================================================

# CORS configuration - explicit origins only
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "").split(",") if os.getenv("ALLOWED_ORIGINS") else [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

EXPORT_FILENAME = "properties_export.csv"


# =============================================================================
# Request / Response Models
# =============================================================================


class ValidationStatsModel(BaseModel):
    """Row counts from the data-quality pass."""
    total_rows: int
    valid_rows: int
    missing_parcel_id: int
    missing_amounts: int
    invalid_dates: int


class ValidationModel(BaseModel):
    """Data-quality report for one upload."""
    stats: ValidationStatsModel
    issues: list[str]
    quality_score: float


class UploadResponse(BaseModel):
    """Response body for a stored upload."""
    success: bool
    dataset_id: str
    filename: str
    total_properties: int
    validation: ValidationModel
    column_mapping: dict[str, str]
    portfolio_stats: dict[str, Any]
    message: str


class WatchlistRequest(BaseModel):
    """Request body for adding or updating a watchlist entry."""
    notes: Optional[str] = None
    priority: str = "medium"


# =============================================================================
# Application
# =============================================================================


def create_app(
    config: Optional[Config] = None,
    repository: Optional[DatasetRepository] = None,
    watchlist: Optional[WatchlistRepository] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or Config.load()
    repo = repository or get_dataset_repository()
    watched = watchlist or get_watchlist_repository()

    app = FastAPI(
        title="Tax Lien Scout",
        description="Column inference and investment scoring for tax-delinquent properties",
        version="0.1.0",
        debug=config.debug,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["*"],
    )

    def _get_dataset(dataset_id: str) -> Dataset:
        dataset = repo.get(dataset_id)
        if dataset is None:
            raise HTTPException(status_code=404, detail="Dataset not found")
        return dataset

    @app.get("/health", include_in_schema=False)
    def health():
        """Health endpoint. No dependencies, no IO."""
        return {"status": "healthy"}

    # =========================================================================
    # Upload
    # =========================================================================

    @app.post("/api/upload", response_model=UploadResponse)
    async def upload_csv(
        file: UploadFile = File(...),
        reference_date: Optional[date] = Query(None, description="Override today (YYYY-MM-DD)"),
    ):
        """
        Upload a CSV file, score it and store it as a dataset.

        Rejects non-CSV files, oversized files, malformed CSV and batches
        below the quality threshold.
        """
        filename = file.filename or "upload.csv"
        if not (filename.lower().endswith(".csv") or file.content_type == "text/csv"):
            raise HTTPException(status_code=400, detail="Only CSV files are allowed")

        body = await file.read()
        if not body:
            raise HTTPException(status_code=400, detail="Uploaded file is empty")
        if len(body) > config.max_upload_mb * 1024 * 1024:
            raise HTTPException(
                status_code=413,
                detail=f"File exceeds {config.max_upload_mb}MB limit",
            )

        try:
            content = body.decode("utf-8")
        except UnicodeDecodeError:
            raise HTTPException(status_code=400, detail="CSV must be UTF-8 encoded")

        try:
            result = process_upload(content, filename, reference_date)
        except CSVStructureError as e:
            raise HTTPException(status_code=400, detail=f"Malformed CSV: {e}")

        if not meets_quality_threshold(result.validation, config.quality_threshold):
            logger.warning(
                "Rejected %s: quality score %.1f%% below threshold %.1f%%",
                filename,
                result.validation.quality_score,
                config.quality_threshold,
            )
            return JSONResponse(
                status_code=400,
                content={
                    "error": "Poor data quality detected",
                    "validation": result.validation.to_dict(),
                },
            )

        dataset = repo.create(result)
        return UploadResponse(
            success=True,
            dataset_id=dataset.dataset_id,
            filename=dataset.filename,
            total_properties=dataset.total_properties,
            validation=result.validation.to_dict(),
            column_mapping=mapping_to_dict(result.column_mapping),
            portfolio_stats=result.portfolio.to_dict(),
            message=f"Successfully processed {dataset.total_properties} properties",
        )

    # =========================================================================
    # Datasets
    # =========================================================================

    @app.get("/api/datasets")
    def list_datasets():
        """All stored datasets, newest first."""
        return {"datasets": [d.summary() for d in repo.list_all()]}

    @app.get("/api/datasets/{dataset_id}")
    def get_dataset(dataset_id: str):
        """One dataset with its mapping, validation and portfolio stats."""
        return _get_dataset(dataset_id).to_dict()

    @app.delete("/api/datasets/{dataset_id}")
    def delete_dataset(dataset_id: str):
        """Delete a dataset, its properties and their watchlist entries."""
        dataset = _get_dataset(dataset_id)
        repo.delete(dataset_id)
        watched.discard_many(p.property_id for p in dataset.properties)
        return {"message": "Dataset deleted successfully"}

    # =========================================================================
    # Properties
    # =========================================================================

    @app.get("/api/properties")
    def list_properties(
        dataset_id: Optional[str] = None,
        min_score: float = 0,
        max_score: float = 100,
        min_equity_ratio: float = 0,
        max_equity_ratio: float = 999999,
        min_amount: float = 0,
        max_amount: float = 999999999,
        property_type: Optional[str] = None,
        location: Optional[str] = None,
        sort_by: str = "investment_score",
        sort_order: str = "desc",
        page: int = Query(1, ge=1),
        limit: Optional[int] = Query(None, ge=1),
    ):
        """Filtered, sorted, paginated property listing."""
        if dataset_id is not None:
            _get_dataset(dataset_id)

        query = PropertyQuery(
            min_score=min_score,
            max_score=max_score,
            min_equity_ratio=min_equity_ratio,
            max_equity_ratio=max_equity_ratio,
            min_amount=min_amount,
            max_amount=max_amount,
            property_type=property_type,
            location=location,
            sort_by=sort_by,
            sort_order=sort_order,
            page=page,
            limit=min(limit or config.default_page_size, config.max_page_size),
        )
        return run_query(repo.properties(dataset_id), query).to_dict()

    @app.get("/api/properties/{property_id}")
    def get_property(property_id: str):
        """One property with dataset, value and watchlist details."""
        detail = describe_property(repo, watched, property_id)
        if detail is None:
            raise HTTPException(status_code=404, detail="Property not found")
        return detail.to_dict()

    # =========================================================================
    # Watchlist
    # =========================================================================

    @app.post("/api/properties/{property_id}/watchlist")
    def add_to_watchlist(property_id: str, body: WatchlistRequest):
        """Watch a property, or update its notes and priority."""
        if repo.find_property(property_id) is None:
            raise HTTPException(status_code=404, detail="Property not found")

        priority = Priority.from_string(body.priority)
        if priority is None:
            raise HTTPException(status_code=400, detail=f"Invalid priority: {body.priority}")

        watched.add(property_id, notes=body.notes, priority=priority)
        return {"success": True, "message": "Property added to watchlist"}

    @app.delete("/api/properties/{property_id}/watchlist")
    def remove_from_watchlist(property_id: str):
        """Stop watching a property. Removing an unwatched property is not an error."""
        watched.remove(property_id)
        return {"success": True, "message": "Property removed from watchlist"}

    @app.get("/api/watchlist")
    def list_watchlist(
        page: int = Query(1, ge=1),
        limit: Optional[int] = Query(None, ge=1),
    ):
        """Watched properties, most recently added first."""
        size = min(limit or config.default_page_size, config.max_page_size)
        return paginate(watched_properties(repo, watched), page, size).to_dict()

    # =========================================================================
    # Analysis / Export
    # =========================================================================

    @app.get("/api/portfolio/{dataset_id}")
    def get_portfolio(dataset_id: str):
        """Portfolio statistics for a dataset."""
        dataset = _get_dataset(dataset_id)
        return {
            "dataset_id": dataset.dataset_id,
            "portfolio_stats": dataset.portfolio.to_dict(),
        }

    @app.get("/api/analytics/{dataset_id}")
    def get_analytics(dataset_id: str):
        """Distribution and breakdown views for a dataset."""
        dataset = _get_dataset(dataset_id)
        analytics = build_analytics(dataset.properties, dataset.reference_date)
        analytics["dataset_id"] = dataset.dataset_id
        return analytics

    @app.get("/api/trends/{dataset_id}")
    def get_trends(dataset_id: str):
        """Score against equity scatter data and the amount breakdown."""
        dataset = _get_dataset(dataset_id)
        trends = build_trends(dataset.properties)
        trends["dataset_id"] = dataset.dataset_id
        return trends

    @app.get("/api/export/csv")
    def export_properties(
        dataset_id: Optional[str] = None,
        min_score: int = 0,
    ):
        """Download scored properties as CSV, best score first."""
        if dataset_id is not None:
            _get_dataset(dataset_id)

        content = export_csv(repo.properties(dataset_id), min_score=min_score)
        return Response(
            content=content,
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
        )

    return app


app = create_app()
