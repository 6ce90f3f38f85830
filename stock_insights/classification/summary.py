"""
Classification Summary

Counts and totals over a labeled snapshot for quadrant cards, ABC/XYZ
matrices and the dead-stock panel.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Type

import polars as pl

from .aggregator import PopulationMetrics
from .models import ABCClass, QuadrantLabel, RiskLevel, UrgencyLevel, XYZClass
from .abc_xyz import STRATEGY_TABLE

RISK_SEVERITY = {RiskLevel.LOW.value: 0, RiskLevel.MEDIUM.value: 1, RiskLevel.HIGH.value: 2}


@dataclass
class CategorySummary:
    """Per-category rollup"""
    category_code: str
    item_count: int
    stock_value: float
    dead_stock_value: float
    dominant_risk_level: str


@dataclass
class ClassificationSummary:
    """Snapshot-level rollup of all labels"""
    total_items: int
    avg_turnover: float
    avg_days_since_sale: float
    total_revenue: float
    quadrant_counts: Dict[str, int]
    abc_counts: Dict[str, int]
    xyz_counts: Dict[str, int]
    abc_xyz_counts: Dict[str, int]
    risk_counts: Dict[str, int]
    urgency_counts: Dict[str, int]
    dead_stock_items: int
    dead_stock_value: float
    expected_recovery_value: float
    reorder_needed: int
    categories: List[CategorySummary] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _count(frame: pl.DataFrame, column: str, labels: Iterable[str]) -> Dict[str, int]:
    counts = dict(frame.group_by(column).len().iter_rows())
    return {label: int(counts.get(label, 0)) for label in labels}


def _values(enum_cls: Type[Enum]) -> List[str]:
    return [member.value for member in enum_cls]


def _category_rollup(frame: pl.DataFrame) -> List[CategorySummary]:
    if frame.is_empty():
        return []

    is_high = pl.col("risk_level") == RiskLevel.HIGH.value
    totals = frame.group_by("category_code").agg(
        pl.len().alias("item_count"),
        pl.col("stock_value").sum().alias("stock_value"),
        pl.col("stock_value").filter(is_high).sum().alias("dead_stock_value"),
    ).sort("category_code")

    # Most frequent risk level per category, ties go to the more severe level
    dominant: Dict[str, tuple] = {}
    for category, risk, count in frame.group_by(["category_code", "risk_level"]).len().iter_rows():
        key = (count, RISK_SEVERITY[risk])
        if category not in dominant or key > dominant[category][0]:
            dominant[category] = (key, risk)

    return [
        CategorySummary(
            category_code=row["category_code"],
            item_count=int(row["item_count"]),
            stock_value=round(float(row["stock_value"] or 0.0), 2),
            dead_stock_value=round(float(row["dead_stock_value"] or 0.0), 2),
            dominant_risk_level=dominant[row["category_code"]][1],
        )
        for row in totals.iter_rows(named=True)
    ]


def summarize(frame: pl.DataFrame, metrics: PopulationMetrics) -> ClassificationSummary:
    """
    Summarize a labeled frame.

    Every label appears in each count mapping, zero-filled when absent.
    """
    high_risk = frame.filter(pl.col("risk_level") == RiskLevel.HIGH.value)

    return ClassificationSummary(
        total_items=frame.height,
        avg_turnover=round(metrics.avg_turnover, 4),
        avg_days_since_sale=round(metrics.avg_days_since_sale, 4),
        total_revenue=round(metrics.total_revenue, 2),
        quadrant_counts=_count(frame, "quadrant", _values(QuadrantLabel)),
        abc_counts=_count(frame, "abc_class", _values(ABCClass)),
        xyz_counts=_count(frame, "xyz_class", _values(XYZClass)),
        abc_xyz_counts=_count(frame, "abc_xyz_code", STRATEGY_TABLE.keys()),
        risk_counts=_count(frame, "risk_level", _values(RiskLevel)),
        urgency_counts=_count(frame, "urgency_level", _values(UrgencyLevel)),
        dead_stock_items=high_risk.height,
        dead_stock_value=round(float(high_risk["stock_value"].sum() or 0.0), 2),
        expected_recovery_value=round(float(frame["expected_recovery_value"].sum() or 0.0), 2),
        reorder_needed=int(frame["below_reorder_point"].sum() or 0),
        categories=_category_rollup(frame),
    )
