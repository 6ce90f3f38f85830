"""
Classification Pipeline

Runs the aggregator, quadrant classifier, ABC/XYZ classifier and risk &
urgency scorer over one snapshot and returns the labeled item set.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

import polars as pl
import structlog

from stock_insights.config import get_settings
from stock_insights.config.settings import ClassificationSettings
from stock_insights.quality.validators import DataValidator, create_snapshot_validator
from .abc_xyz import STRATEGY_FIELDS, add_abc_xyz
from .aggregator import PopulationMetrics, compute_population_metrics
from .models import FRAME_SCHEMA, InvalidInput, InventoryMetricItem, QuadrantLabel, parse_records
from .quadrant import add_quadrants
from .risk import add_risk_and_urgency
from .summary import ClassificationSummary, summarize

logger = structlog.get_logger(__name__)

OUTPUT_COLUMNS = [
    *FRAME_SCHEMA.keys(),
    "rank",
    "cumulative_pct",
    "quadrant",
    "abc_class",
    "xyz_class",
    "abc_xyz_code",
    "turnover_category",
    *STRATEGY_FIELDS,
    "risk_level",
    "recommended_action",
    "expected_recovery_value",
    "urgency_level",
    "below_reorder_point",
    "suggested_order_quantity",
]


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


@dataclass
class ClassificationResult:
    """Labeled snapshot, in input order"""
    frame: pl.DataFrame
    metrics: PopulationMetrics
    classified_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    duration_seconds: float = 0.0

    def __len__(self) -> int:
        return self.frame.height

    def to_records(self) -> List[Dict[str, Any]]:
        """Labeled items with camelCase keys for the presentation layer"""
        renamed = self.frame.rename({name: _camel(name) for name in self.frame.columns})
        return renamed.to_dicts()

    def by_quadrant(self) -> Dict[str, List[Dict[str, Any]]]:
        """Labeled items grouped by quadrant, every quadrant present"""
        buckets: Dict[str, List[Dict[str, Any]]] = {label.value: [] for label in QuadrantLabel}
        for record in self.to_records():
            buckets[record["quadrant"]].append(record)
        return buckets

    def summary(self) -> ClassificationSummary:
        return summarize(self.frame, self.metrics)


class InventoryClassifier:
    """
    Classification pipeline over an inventory snapshot.

    Pipeline:
    1. Compute population baselines and the contribution ranking
    2. Run snapshot quality checks (warnings only)
    3. Label ABC/XYZ, quadrant, risk and urgency
    4. Restore input order

    Example:
        classifier = InventoryClassifier()
        result = classifier.classify(items)
        records = result.to_records()
    """

    def __init__(
        self,
        settings: Optional[ClassificationSettings] = None,
        enable_validation: bool = True,
        validator: Optional[DataValidator] = None,
    ):
        self.settings = settings or get_settings().classification
        self.validator = validator or (create_snapshot_validator() if enable_validation else None)

    def classify(self, items: Optional[Iterable[InventoryMetricItem]]) -> ClassificationResult:
        """
        Classify every item of a snapshot.

        Raises:
            InvalidInput: If items is None
        """
        if items is None:
            raise InvalidInput("Inventory item list is missing")

        start_time = time.perf_counter()
        items = list(items)

        metrics = compute_population_metrics(items)
        ranked = metrics.ranked_frame

        if self.validator is not None and items:
            self.validator.validate(ranked)

        labeled = add_abc_xyz(ranked, self.settings)
        labeled = add_quadrants(labeled, metrics.avg_turnover, metrics.avg_days_since_sale)
        labeled = add_risk_and_urgency(labeled, self.settings)
        labeled = labeled.sort("position").select(OUTPUT_COLUMNS)

        duration = time.perf_counter() - start_time
        logger.info(
            "Inventory snapshot classified",
            items=len(items),
            avg_turnover=round(metrics.avg_turnover, 4),
            avg_days_since_sale=round(metrics.avg_days_since_sale, 4),
            duration_ms=round(duration * 1000, 2),
        )

        return ClassificationResult(frame=labeled, metrics=metrics, duration_seconds=duration)

    def classify_records(self, payload: Any) -> ClassificationResult:
        """Parse a reporting payload and classify it"""
        return self.classify(parse_records(payload))


def classify_inventory(
    items: Optional[Iterable[InventoryMetricItem]],
    settings: Optional[ClassificationSettings] = None,
) -> ClassificationResult:
    """Convenience function for one-off classification"""
    return InventoryClassifier(settings=settings).classify(items)
