"""
FastAPI Production Application

Main entry point for the Inventory Classification API.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
import structlog

from stock_insights.classification.models import ClassificationError, InvalidInput
from stock_insights.config import get_settings
from stock_insights.config.logging import configure_logging
from stock_insights.ingestion import ReportingApiClient, ReportingApiError, SnapshotFetcher
from stock_insights.serving.api.middleware import RequestLoggingMiddleware
from stock_insights.serving.api.routes import classification_router, health_router

settings = get_settings()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    configure_logging()

    logger.info("Starting Inventory Classification API", environment=settings.app_env)

    fetcher = SnapshotFetcher(ReportingApiClient(settings.reporting_api))
    app.state.snapshot_fetcher = fetcher
    logger.info("Reporting API client initialized", url=settings.reporting_api.inventory_url)

    yield

    logger.info("Shutting down...")
    await fetcher.aclose()
    app.state.snapshot_fetcher = None


app = FastAPI(
    title="Inventory Classification API",
    description="Rotation quadrants, ABC/XYZ strategy and dead-stock risk for bookstore inventory",
    version=settings.version,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(RequestLoggingMiddleware)


@app.exception_handler(InvalidInput)
async def invalid_input_handler(request: Request, exc: InvalidInput) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc), "retryable": False})


@app.exception_handler(ReportingApiError)
async def reporting_api_error_handler(request: Request, exc: ReportingApiError) -> JSONResponse:
    logger.warning("Snapshot fetch failed", error=str(exc), status_code=exc.status_code)
    return JSONResponse(
        status_code=502,
        content={"detail": str(exc), "retryable": True, "upstream_status": exc.status_code},
    )


@app.exception_handler(ClassificationError)
async def classification_error_handler(request: Request, exc: ClassificationError) -> JSONResponse:
    logger.error("Classification failed", error=str(exc), path=request.url.path)
    return JSONResponse(status_code=500, content={"detail": str(exc), "retryable": False})


app.include_router(health_router, prefix="/api/v1", tags=["Health"])
app.include_router(classification_router, prefix="/api/v1/classification", tags=["Classification"])


@app.get("/api/v1/info")
async def api_info():
    """API information endpoint."""
    return {
        "name": settings.app_name,
        "version": settings.version,
        "environment": settings.app_env,
        "documentation": "/docs",
    }
