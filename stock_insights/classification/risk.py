"""
Risk & Urgency Scorer

Item-local scoring with no population context:
- Dead-stock risk from days since last sale, with a recommended action
  scaled by stock value
- Reorder urgency from projected days until stockout
- Reorder suggestion from stock level versus reorder point
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

import polars as pl

from stock_insights.config import get_settings
from stock_insights.config.settings import ClassificationSettings
from .models import (
    InvalidInput,
    InventoryMetricItem,
    RecommendedAction,
    RiskLevel,
    UrgencyLevel,
    to_frame,
)

# Expected share of stock value recovered by each disposal action
RECOVERY_RATES: Dict[RecommendedAction, float] = {
    RecommendedAction.DISCOUNT_SALE: 0.75,
    RecommendedAction.BULK_SALE_OR_WRITE_OFF: 0.55,
}

DAYS_PER_YEAR = 365


@dataclass(frozen=True)
class RiskAssessment:
    """Risk and urgency for one item"""
    item_id: str
    risk_level: RiskLevel
    recommended_action: RecommendedAction
    expected_recovery_value: Optional[float]
    urgency_level: UrgencyLevel
    days_until_stockout: int
    below_reorder_point: bool
    suggested_order_quantity: int


def _settings(settings: Optional[ClassificationSettings]) -> ClassificationSettings:
    return settings or get_settings().classification


def risk_level_expr(days_since_sale: pl.Expr, settings: Optional[ClassificationSettings] = None) -> pl.Expr:
    cfg = _settings(settings)
    return (
        pl.when(days_since_sale >= cfg.dead_stock_high_days).then(pl.lit(RiskLevel.HIGH.value))
        .when(days_since_sale >= cfg.dead_stock_medium_days).then(pl.lit(RiskLevel.MEDIUM.value))
        .otherwise(pl.lit(RiskLevel.LOW.value))
    )


def recommended_action_expr(
    risk_level: pl.Expr,
    stock_value: pl.Expr,
    settings: Optional[ClassificationSettings] = None,
) -> pl.Expr:
    """High-value stale stock is discounted, low-value stale stock is cleared in bulk"""
    cfg = _settings(settings)
    high = risk_level == RiskLevel.HIGH.value
    return (
        pl.when(high & (stock_value >= cfg.high_value_threshold))
        .then(pl.lit(RecommendedAction.DISCOUNT_SALE.value))
        .when(high)
        .then(pl.lit(RecommendedAction.BULK_SALE_OR_WRITE_OFF.value))
        .when(risk_level == RiskLevel.MEDIUM.value)
        .then(pl.lit(RecommendedAction.PROMOTE.value))
        .otherwise(pl.lit(RecommendedAction.NO_ACTION.value))
    )


def recovery_value_expr(action: pl.Expr, stock_value: pl.Expr) -> pl.Expr:
    """Expected recovered value for disposal actions, null otherwise"""
    discount = RecommendedAction.DISCOUNT_SALE
    bulk = RecommendedAction.BULK_SALE_OR_WRITE_OFF
    return (
        pl.when(action == discount.value).then((stock_value * RECOVERY_RATES[discount]).round(2))
        .when(action == bulk.value).then((stock_value * RECOVERY_RATES[bulk]).round(2))
        .otherwise(pl.lit(None, dtype=pl.Float64))
    )


def days_until_stockout_expr(settings: Optional[ClassificationSettings] = None) -> pl.Expr:
    """
    Projected days until stockout.

    Uses the source's precomputed `days_until_stockout` when present.
    Otherwise divides stock on hand by average daily demand, estimated as
    annual turns times stock on hand over 365. No stock means 0 days; stock
    with no demand projects to the configured horizon.
    """
    cfg = _settings(settings)
    stock = pl.col("current_stock")
    daily_demand = pl.col("turnover_rate") * stock / DAYS_PER_YEAR

    derived = (
        pl.when(stock <= 0).then(pl.lit(0.0))
        .when(daily_demand > 0)
        .then((stock / daily_demand).floor().clip(upper_bound=cfg.stockout_horizon_days))
        .otherwise(pl.lit(float(cfg.stockout_horizon_days)))
    )

    supplied = pl.col("days_until_stockout")
    return (
        pl.when(supplied.is_not_null())
        .then(supplied.clip(lower_bound=0).cast(pl.Float64))
        .otherwise(derived)
        .cast(pl.Int64)
    )


def urgency_expr(days_until_stockout: pl.Expr, settings: Optional[ClassificationSettings] = None) -> pl.Expr:
    cfg = _settings(settings)
    return (
        pl.when(days_until_stockout <= cfg.urgency_high_days).then(pl.lit(UrgencyLevel.HIGH.value))
        .when(days_until_stockout <= cfg.urgency_medium_days).then(pl.lit(UrgencyLevel.MEDIUM.value))
        .otherwise(pl.lit(UrgencyLevel.LOW.value))
    )


def add_risk_and_urgency(df: pl.DataFrame, settings: Optional[ClassificationSettings] = None) -> pl.DataFrame:
    """Add risk, action, recovery, stockout, urgency and reorder columns"""
    below_reorder = pl.col("current_stock") <= pl.col("reorder_point")

    return (
        df.with_columns(
            risk_level_expr(pl.col("days_since_last_sale"), settings).alias("risk_level"),
            days_until_stockout_expr(settings).alias("days_until_stockout"),
            below_reorder.alias("below_reorder_point"),
            pl.when(below_reorder)
            .then(pl.col("reorder_quantity"))
            .otherwise(pl.lit(0, dtype=pl.Int64))
            .alias("suggested_order_quantity"),
        )
        .with_columns(
            recommended_action_expr(pl.col("risk_level"), pl.col("stock_value"), settings)
            .alias("recommended_action"),
            urgency_expr(pl.col("days_until_stockout"), settings).alias("urgency_level"),
        )
        .with_columns(
            recovery_value_expr(pl.col("recommended_action"), pl.col("stock_value"))
            .alias("expected_recovery_value"),
        )
    )


def _assessment(row: dict) -> RiskAssessment:
    return RiskAssessment(
        item_id=row["id"],
        risk_level=RiskLevel(row["risk_level"]),
        recommended_action=RecommendedAction(row["recommended_action"]),
        expected_recovery_value=row["expected_recovery_value"],
        urgency_level=UrgencyLevel(row["urgency_level"]),
        days_until_stockout=row["days_until_stockout"],
        below_reorder_point=row["below_reorder_point"],
        suggested_order_quantity=row["suggested_order_quantity"],
    )


def score_item(item: InventoryMetricItem, settings: Optional[ClassificationSettings] = None) -> RiskAssessment:
    """Risk and urgency for a single item"""
    if item is None:
        raise InvalidInput("Inventory item is missing")
    return score_items([item], settings)[0]


def score_items(
    items: Optional[Iterable[InventoryMetricItem]],
    settings: Optional[ClassificationSettings] = None,
) -> List[RiskAssessment]:
    """Risk and urgency for each item, in input order"""
    if items is None:
        raise InvalidInput("Inventory item list is missing")

    scored = add_risk_and_urgency(to_frame(items), settings)
    return [_assessment(row) for row in scored.iter_rows(named=True)]
