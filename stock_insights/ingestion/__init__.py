"""
Data Ingestion Module
"""
from stock_insights.classification.models import parse_records
from .reporting_client import ReportingApiClient, ReportingApiError, Snapshot, SnapshotFetcher
from .snapshot_loader import SnapshotFormatError, SnapshotLoader

__all__ = [
    "parse_records",
    "ReportingApiClient",
    "ReportingApiError",
    "Snapshot",
    "SnapshotFetcher",
    "SnapshotFormatError",
    "SnapshotLoader",
]
