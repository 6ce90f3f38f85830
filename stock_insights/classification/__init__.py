"""
Inventory Classification Module
"""
from .models import (
    ABCClass,
    ClassificationError,
    InvalidInput,
    InventoryMetricItem,
    QuadrantLabel,
    RecommendedAction,
    RiskLevel,
    TurnoverCategory,
    UrgencyLevel,
    XYZClass,
    parse_records,
)
from .aggregator import PopulationMetrics, RankedItem, compute_population_metrics
from .quadrant import classify_quadrant, group_by_quadrant
from .abc_xyz import STRATEGY_TABLE, StrategyRecord, abc_tier, classify_abc_xyz, lookup_strategy, xyz_tier
from .risk import RiskAssessment, score_item, score_items
from .pipeline import ClassificationResult, InventoryClassifier, classify_inventory

__all__ = [
    "ABCClass",
    "ClassificationError",
    "InvalidInput",
    "InventoryMetricItem",
    "QuadrantLabel",
    "RecommendedAction",
    "RiskLevel",
    "TurnoverCategory",
    "UrgencyLevel",
    "XYZClass",
    "parse_records",
    "PopulationMetrics",
    "RankedItem",
    "compute_population_metrics",
    "classify_quadrant",
    "group_by_quadrant",
    "STRATEGY_TABLE",
    "StrategyRecord",
    "abc_tier",
    "classify_abc_xyz",
    "lookup_strategy",
    "xyz_tier",
    "RiskAssessment",
    "score_item",
    "score_items",
    "ClassificationResult",
    "InventoryClassifier",
    "classify_inventory",
]
