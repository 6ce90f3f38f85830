"""
Classification API Endpoints

REST API for the inventory analysis page: labeled items, quadrant buckets,
the ABC/XYZ strategy matrix and live snapshots from the reporting API.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
import structlog

from stock_insights.classification import InventoryClassifier, STRATEGY_TABLE
from stock_insights.classification.models import InvalidInput
from stock_insights.ingestion import SnapshotFetcher, parse_records

router = APIRouter()
logger = structlog.get_logger(__name__)


class ClassifyRequest(BaseModel):
    """Inventory records as returned by the reporting API"""
    items: Optional[List[Any]] = Field(default=None, description="Inventory records")


class ClassifyResponse(BaseModel):
    """Labeled snapshot"""
    items: List[Dict[str, Any]]
    summary: Dict[str, Any]
    classified_at: datetime
    duration_ms: float


class QuadrantResponse(BaseModel):
    """Items bucketed by rotation quadrant"""
    avg_turnover: float
    avg_days_since_sale: float
    counts: Dict[str, int]
    quadrants: Dict[str, List[Dict[str, Any]]]


class StrategyCell(BaseModel):
    """One cell of the ABC/XYZ strategy matrix"""
    code: str
    abc_class: str
    xyz_class: str
    recommended_strategy: str
    target_stock_level: str
    review_frequency: str
    management_priority: str


def get_classifier() -> InventoryClassifier:
    return InventoryClassifier()


def get_snapshot_fetcher(request: Request) -> Optional[SnapshotFetcher]:
    return getattr(request.app.state, "snapshot_fetcher", None)


def _classify_response(result) -> ClassifyResponse:
    return ClassifyResponse(
        items=result.to_records(),
        summary=result.summary().to_dict(),
        classified_at=result.classified_at,
        duration_ms=round(result.duration_seconds * 1000, 2),
    )


def _parse_body(body: ClassifyRequest):
    if body.items is None:
        raise InvalidInput("Inventory item list is missing")
    return parse_records(body.items)


@router.post("/classify", response_model=ClassifyResponse)
async def classify_items(
    body: ClassifyRequest,
    classifier: InventoryClassifier = Depends(get_classifier),
) -> ClassifyResponse:
    """
    Classify a snapshot posted by the caller.

    A missing or null `items` list is rejected with 422; an empty list
    returns an empty result.
    """
    result = classifier.classify(_parse_body(body))
    logger.info("Classified posted snapshot", items=len(result))
    return _classify_response(result)


@router.post("/quadrants", response_model=QuadrantResponse)
async def quadrant_buckets(
    body: ClassifyRequest,
    classifier: InventoryClassifier = Depends(get_classifier),
) -> QuadrantResponse:
    """Group posted items into the four rotation quadrants"""
    result = classifier.classify(_parse_body(body))
    buckets = result.by_quadrant()
    return QuadrantResponse(
        avg_turnover=round(result.metrics.avg_turnover, 4),
        avg_days_since_sale=round(result.metrics.avg_days_since_sale, 4),
        counts={label: len(items) for label, items in buckets.items()},
        quadrants=buckets,
    )


@router.get("/strategies", response_model=List[StrategyCell])
async def strategy_matrix() -> List[StrategyCell]:
    """The 3x3 ABC/XYZ strategy matrix"""
    return [
        StrategyCell(
            code=code,
            abc_class=code[0],
            xyz_class=code[1],
            recommended_strategy=record.recommended_strategy,
            target_stock_level=record.target_stock_level,
            review_frequency=record.review_frequency,
            management_priority=record.management_priority,
        )
        for code, record in STRATEGY_TABLE.items()
    ]


@router.get("/snapshot", response_model=ClassifyResponse)
async def classify_snapshot(
    category: Optional[str] = Query(default=None, description="Category code filter"),
    fetcher: Optional[SnapshotFetcher] = Depends(get_snapshot_fetcher),
    classifier: InventoryClassifier = Depends(get_classifier),
):
    """
    Fetch the current snapshot from the reporting API and classify it.

    Upstream failures surface as 502 with `retryable: true`.
    """
    if fetcher is None:
        return JSONResponse(
            status_code=503,
            content={"detail": "Snapshot fetcher is not available", "retryable": True},
        )

    snapshot = await fetcher.refresh(category=category)
    if snapshot is None:
        return JSONResponse(
            status_code=503,
            content={"detail": "Snapshot refresh was superseded", "retryable": True},
        )

    result = classifier.classify(snapshot.items)
    logger.info(
        "Classified reporting snapshot",
        items=len(result),
        generation=snapshot.generation,
        category=snapshot.category,
    )
    return _classify_response(result)
