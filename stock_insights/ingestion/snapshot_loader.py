"""
Snapshot File Loader

Reads exported inventory snapshots for offline classification runs.
Supports JSON (raw reporting payload), JSONL, CSV and Parquet.
"""

import json
from enum import Enum
from pathlib import Path
from typing import List, Union

import polars as pl
import structlog

from stock_insights.classification.models import ClassificationError, InventoryMetricItem, parse_records

logger = structlog.get_logger(__name__)


class SnapshotFormatError(ClassificationError):
    """Raised when a snapshot file cannot be read"""


class FileFormat(str, Enum):
    """Supported snapshot file formats"""
    CSV = "csv"
    JSON = "json"
    JSONL = "jsonl"
    PARQUET = "parquet"

    @classmethod
    def from_path(cls, path: Path) -> "FileFormat":
        suffix = path.suffix.lower().lstrip(".")
        if suffix == "ndjson":
            suffix = "jsonl"
        try:
            return cls(suffix)
        except ValueError:
            raise SnapshotFormatError(f"Unsupported snapshot format: {path.suffix or path.name}")


class SnapshotLoader:
    """
    Load inventory snapshot files into items.

    JSON files hold the reporting payload as returned by the API, so they go
    through the same payload parser. Tabular formats are read with polars,
    one row per record.
    """

    def load(self, path: Union[str, Path]) -> List[InventoryMetricItem]:
        """
        Load a snapshot file.

        Raises:
            SnapshotFormatError: Unsupported extension, missing or unreadable file
        """
        path = Path(path)
        file_format = FileFormat.from_path(path)

        if not path.exists():
            raise SnapshotFormatError(f"Snapshot file not found: {path}")

        try:
            if file_format == FileFormat.JSON:
                payload = json.loads(path.read_text(encoding="utf-8"))
                items = parse_records(payload)
            else:
                records = self._read_frame(path, file_format).to_dicts()
                items = parse_records(records)
        except (OSError, ValueError, pl.exceptions.PolarsError) as e:
            raise SnapshotFormatError(f"Failed to read snapshot {path}: {e}") from e

        logger.info("Snapshot loaded", path=str(path), format=file_format.value, items=len(items))
        return items

    @staticmethod
    def _read_frame(path: Path, file_format: FileFormat) -> pl.DataFrame:
        if file_format == FileFormat.CSV:
            return pl.read_csv(path, null_values=["", "NULL", "null", "None", "NA", "N/A"])
        if file_format == FileFormat.JSONL:
            return pl.read_ndjson(path)
        return pl.read_parquet(path)
