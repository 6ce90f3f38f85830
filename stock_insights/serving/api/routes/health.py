"""
Health Check Endpoints

Provides health and readiness checks for orchestration systems.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Request, Response
from pydantic import BaseModel

from stock_insights.config import get_settings

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    environment: str
    timestamp: datetime
    checks: Dict[str, Any]


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """
    Comprehensive health check endpoint.

    Checks:
    - Application status
    - Snapshot fetcher and its last completed snapshot
    """
    settings = get_settings()
    checks: Dict[str, Any] = {
        "classification": {
            "status": "healthy",
            "abc_thresholds": [settings.classification.abc_a_threshold, settings.classification.abc_b_threshold],
            "xyz_thresholds": [settings.classification.xyz_x_threshold, settings.classification.xyz_y_threshold],
        },
    }
    overall_status = "healthy"

    fetcher = getattr(request.app.state, "snapshot_fetcher", None)
    if fetcher is None:
        checks["reporting_api"] = {"status": "unavailable"}
        overall_status = "degraded"
    else:
        snapshot = fetcher.current
        checks["reporting_api"] = {
            "status": "healthy",
            "url": settings.reporting_api.inventory_url,
            "last_snapshot_at": snapshot.fetched_at.isoformat() if snapshot else None,
            "last_snapshot_items": len(snapshot.items) if snapshot else 0,
        }

    return HealthResponse(
        status=overall_status,
        version=settings.version,
        environment=settings.app_env,
        timestamp=datetime.now(timezone.utc),
        checks=checks,
    )


@router.get("/health/live")
async def liveness_check() -> Dict[str, str]:
    """
    Kubernetes liveness probe endpoint.

    Returns 200 if the application is running.
    """
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_check(request: Request, response: Response) -> Dict[str, str]:
    """
    Kubernetes readiness probe endpoint.

    Returns 200 once the snapshot fetcher has been created.
    """
    if getattr(request.app.state, "snapshot_fetcher", None) is None:
        response.status_code = 503
        return {"status": "not_ready", "reason": "snapshot_fetcher_unavailable"}
    return {"status": "ready"}
