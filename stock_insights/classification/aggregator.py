"""
Metrics Aggregator

Population-level baselines over an inventory snapshot:
- Mean turnover rate
- Mean days since last sale
- Total revenue and the contribution ranking with cumulative percentage
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple

import polars as pl
import structlog

from .models import InvalidInput, InventoryMetricItem, to_frame

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RankedItem:
    """Item at its contribution rank"""
    item: InventoryMetricItem
    rank: int  # 1 = largest contribution
    cumulative_pct: float  # Share of total revenue up to and including this rank


@dataclass(frozen=True)
class PopulationMetrics:
    """Baselines for one snapshot"""
    item_count: int
    avg_turnover: float
    avg_days_since_sale: float
    total_revenue: float
    ranked: Tuple[RankedItem, ...] = ()
    ranked_frame: Optional[pl.DataFrame] = field(default=None, repr=False, compare=False)


def population_baselines(df: pl.DataFrame) -> Tuple[float, float, float]:
    """
    Mean turnover, mean days since last sale, and total revenue of a frame.

    All three are 0.0 for an empty frame.
    """
    if df.is_empty():
        return 0.0, 0.0, 0.0

    stats = df.select(
        pl.col("turnover_rate").mean().alias("avg_turnover"),
        pl.col("days_since_last_sale").mean().alias("avg_days"),
        pl.col("revenue_contribution").sum().alias("total_revenue"),
    ).row(0, named=True)

    return (
        float(stats["avg_turnover"] or 0.0),
        float(stats["avg_days"] or 0.0),
        float(stats["total_revenue"] or 0.0),
    )


def rank_by_contribution(df: pl.DataFrame, total_revenue: float) -> pl.DataFrame:
    """
    Sort descending by revenue contribution and annotate rank and cumulative %.

    The sort is stable so ties keep input order. With zero total revenue
    every rank sits at 100% and falls into the lowest ABC tier.
    """
    ranked = df.sort("revenue_contribution", descending=True, maintain_order=True)

    if total_revenue > 0:
        cumulative = (pl.col("revenue_contribution").cum_sum() / total_revenue * 100).round(4)
    else:
        cumulative = pl.lit(100.0, dtype=pl.Float64)

    return (
        ranked
        .with_row_index("rank", offset=1)
        .with_columns(
            pl.col("rank").cast(pl.Int64),
            cumulative.alias("cumulative_pct"),
        )
    )


def compute_population_metrics(items: Optional[Iterable[InventoryMetricItem]]) -> PopulationMetrics:
    """
    Compute baselines and the contribution ranking for an item snapshot.

    Args:
        items: Snapshot items, possibly empty

    Returns:
        PopulationMetrics with baselines and ranked items

    Raises:
        InvalidInput: If items is None
    """
    if items is None:
        raise InvalidInput("Inventory item list is missing")

    items = list(items)
    df = to_frame(items)

    avg_turnover, avg_days, total_revenue = population_baselines(df)
    ranked_frame = rank_by_contribution(df, total_revenue)

    ranked = tuple(
        RankedItem(
            item=items[row["position"]],
            rank=row["rank"],
            cumulative_pct=row["cumulative_pct"],
        )
        for row in ranked_frame.select("position", "rank", "cumulative_pct").iter_rows(named=True)
    )

    logger.debug(
        "Population metrics computed",
        items=len(items),
        avg_turnover=round(avg_turnover, 4),
        avg_days_since_sale=round(avg_days, 4),
        total_revenue=round(total_revenue, 2),
    )

    return PopulationMetrics(
        item_count=len(items),
        avg_turnover=avg_turnover,
        avg_days_since_sale=avg_days,
        total_revenue=total_revenue,
        ranked=ranked,
        ranked_frame=ranked_frame,
    )
