"""
ABC/XYZ Classifier

ABC tiers items by cumulative share of snapshot revenue (Pareto), XYZ tiers
them by demand variability. The pair resolves to one cell of a fixed 3x3
strategy table.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import polars as pl
import structlog

from stock_insights.config import get_settings
from stock_insights.config.settings import ClassificationSettings
from .aggregator import RankedItem
from .models import (
    ABCClass,
    ClassificationError,
    InvalidInput,
    TurnoverCategory,
    XYZClass,
    to_frame,
)

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StrategyRecord:
    """Management strategy for one ABC/XYZ cell"""
    recommended_strategy: str
    target_stock_level: str
    review_frequency: str
    management_priority: str


STRATEGY_TABLE: Dict[str, StrategyRecord] = {
    "AX": StrategyRecord(
        recommended_strategy="Intensive management and replenishment optimization",
        target_stock_level="High",
        review_frequency="Weekly",
        management_priority="Highest",
    ),
    "AY": StrategyRecord(
        recommended_strategy="Strengthen demand forecasting and hold a stock buffer",
        target_stock_level="Medium-high",
        review_frequency="Bi-weekly",
        management_priority="High",
    ),
    "AZ": StrategyRecord(
        recommended_strategy="Avoid lost sales by securing safety stock",
        target_stock_level="Safety stock",
        review_frequency="On demand",
        management_priority="High",
    ),
    "BX": StrategyRecord(
        recommended_strategy="Efficient periodic replenishment",
        target_stock_level="Optimal",
        review_frequency="Monthly",
        management_priority="Medium",
    ),
    "BY": StrategyRecord(
        recommended_strategy="Standard management with monthly review",
        target_stock_level="Standard",
        review_frequency="Monthly",
        management_priority="Medium",
    ),
    "BZ": StrategyRecord(
        recommended_strategy="Flexible response with quarterly review",
        target_stock_level="Demand-driven",
        review_frequency="Quarterly",
        management_priority="Medium",
    ),
    "CX": StrategyRecord(
        recommended_strategy="Minimal management, favour efficiency",
        target_stock_level="Minimum",
        review_frequency="Infrequent",
        management_priority="Low",
    ),
    "CY": StrategyRecord(
        recommended_strategy="Review assortment, replenish on demand",
        target_stock_level="Under review",
        review_frequency="On demand",
        management_priority="Low",
    ),
    "CZ": StrategyRecord(
        recommended_strategy="Discontinuation candidate, clear remaining stock",
        target_stock_level="No fixed target",
        review_frequency="On demand only",
        management_priority="Discontinue",
    ),
}

TURNOVER_CATEGORIES: Dict[str, TurnoverCategory] = {
    "AX": TurnoverCategory.FAST,
    "AY": TurnoverCategory.FAST,
    "BX": TurnoverCategory.MEDIUM,
    "BY": TurnoverCategory.MEDIUM,
    "CX": TurnoverCategory.SLOW,
    "CY": TurnoverCategory.SLOW,
    "AZ": TurnoverCategory.DEAD,
    "BZ": TurnoverCategory.DEAD,
    "CZ": TurnoverCategory.DEAD,
}

STRATEGY_FIELDS = (
    "recommended_strategy",
    "target_stock_level",
    "review_frequency",
    "management_priority",
)


@dataclass(frozen=True)
class AbcXyzClassification:
    """ABC/XYZ result for one item"""
    item_id: str
    abc_class: ABCClass
    xyz_class: XYZClass
    cumulative_pct: float
    strategy: StrategyRecord
    turnover_category: TurnoverCategory

    @property
    def code(self) -> str:
        return f"{self.abc_class.value}{self.xyz_class.value}"


def _settings(settings: Optional[ClassificationSettings]) -> ClassificationSettings:
    return settings or get_settings().classification


def abc_expr(cumulative_pct: pl.Expr, settings: Optional[ClassificationSettings] = None) -> pl.Expr:
    """ABC tier of a cumulative percentage, upper edges inclusive"""
    cfg = _settings(settings)
    return (
        pl.when(cumulative_pct <= cfg.abc_a_threshold).then(pl.lit(ABCClass.A.value))
        .when(cumulative_pct <= cfg.abc_b_threshold).then(pl.lit(ABCClass.B.value))
        .otherwise(pl.lit(ABCClass.C.value))
    )


def xyz_expr(variability: pl.Expr, settings: Optional[ClassificationSettings] = None) -> pl.Expr:
    """XYZ tier of a coefficient of variation, upper edges inclusive"""
    cfg = _settings(settings)
    return (
        pl.when(variability <= cfg.xyz_x_threshold).then(pl.lit(XYZClass.X.value))
        .when(variability <= cfg.xyz_y_threshold).then(pl.lit(XYZClass.Y.value))
        .otherwise(pl.lit(XYZClass.Z.value))
    )


def abc_tier(cumulative_pct: float, settings: Optional[ClassificationSettings] = None) -> ABCClass:
    """ABC tier for a single cumulative percentage"""
    value = pl.lit(float(cumulative_pct), dtype=pl.Float64)
    return ABCClass(pl.select(abc_expr(value, settings)).item())


def xyz_tier(variability: float, settings: Optional[ClassificationSettings] = None) -> XYZClass:
    """XYZ tier for a single variability figure"""
    value = pl.lit(float(variability), dtype=pl.Float64)
    return XYZClass(pl.select(xyz_expr(value, settings)).item())


def lookup_strategy(code: str) -> StrategyRecord:
    """
    Strategy record for a combined code such as "AX".

    Raises:
        ClassificationError: If the code is not one of the 9 cells
    """
    try:
        return STRATEGY_TABLE[code.upper()]
    except (KeyError, AttributeError):
        raise ClassificationError(f"Unknown ABC/XYZ code: {code!r}")


def turnover_category(code: str) -> TurnoverCategory:
    """Coarse turnover bucket for a combined code"""
    lookup_strategy(code)
    return TURNOVER_CATEGORIES[code.upper()]


def add_abc_xyz(ranked: pl.DataFrame, settings: Optional[ClassificationSettings] = None) -> pl.DataFrame:
    """
    Add ABC/XYZ labels and the strategy columns to a ranked frame.

    Expects the `cumulative_pct` column produced by rank_by_contribution.
    """
    df = ranked.with_columns(
        abc_expr(pl.col("cumulative_pct"), settings).alias("abc_class"),
        xyz_expr(pl.col("demand_variability"), settings).alias("xyz_class"),
    ).with_columns(
        pl.concat_str([pl.col("abc_class"), pl.col("xyz_class")]).alias("abc_xyz_code"),
    )

    code = pl.col("abc_xyz_code")
    return df.with_columns(
        code.replace_strict(
            {k: v.value for k, v in TURNOVER_CATEGORIES.items()},
            return_dtype=pl.Utf8,
        ).alias("turnover_category"),
        *[
            code.replace_strict(
                {k: getattr(record, name) for k, record in STRATEGY_TABLE.items()},
                return_dtype=pl.Utf8,
            ).alias(name)
            for name in STRATEGY_FIELDS
        ],
    )


def classify_abc_xyz(
    ranked: Optional[Sequence[RankedItem]],
    settings: Optional[ClassificationSettings] = None,
) -> List[AbcXyzClassification]:
    """
    Classify ranked items, returned in rank order.

    Args:
        ranked: Output of compute_population_metrics().ranked

    Raises:
        InvalidInput: If ranked is None
    """
    if ranked is None:
        raise InvalidInput("Ranked item list is missing")

    frame = to_frame([r.item for r in ranked]).with_columns(
        pl.Series("cumulative_pct", [r.cumulative_pct for r in ranked], dtype=pl.Float64),
    )
    labeled = add_abc_xyz(frame, settings)

    results = []
    for row in labeled.iter_rows(named=True):
        results.append(
            AbcXyzClassification(
                item_id=row["id"],
                abc_class=ABCClass(row["abc_class"]),
                xyz_class=XYZClass(row["xyz_class"]),
                cumulative_pct=row["cumulative_pct"],
                strategy=STRATEGY_TABLE[row["abc_xyz_code"]],
                turnover_category=TurnoverCategory(row["turnover_category"]),
            )
        )

    logger.debug("ABC/XYZ classification complete", items=len(results))
    return results
