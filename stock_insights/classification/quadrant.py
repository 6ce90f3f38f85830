"""
Rotation Quadrant Classifier

BCG-matrix style labeling of each title against the snapshot's mean turnover
and mean days since last sale. Baselines are explicit inputs, so the same item
can move quadrant when the surrounding filtered set changes.
"""

from typing import Dict, Iterable, List, Optional

import polars as pl

from .aggregator import population_baselines
from .models import InvalidInput, InventoryMetricItem, QuadrantLabel, to_frame


def quadrant_expr(avg_turnover: float, avg_days_since_sale: float) -> pl.Expr:
    """
    Quadrant expression over `turnover_rate` and `days_since_last_sale`.

    Turnover equal to the mean counts as high; days equal to the mean count
    as recent.
    """
    high_turnover = pl.col("turnover_rate") >= avg_turnover
    recent_sale = pl.col("days_since_last_sale") <= avg_days_since_sale

    return (
        pl.when(high_turnover & recent_sale).then(pl.lit(QuadrantLabel.STAR.value))
        .when(~high_turnover & recent_sale).then(pl.lit(QuadrantLabel.QUESTION.value))
        .when(high_turnover & ~recent_sale).then(pl.lit(QuadrantLabel.CASH_COW.value))
        .otherwise(pl.lit(QuadrantLabel.DOG.value))
        .alias("quadrant")
    )


def add_quadrants(df: pl.DataFrame, avg_turnover: float, avg_days_since_sale: float) -> pl.DataFrame:
    """Add the `quadrant` column"""
    return df.with_columns(quadrant_expr(avg_turnover, avg_days_since_sale))


def classify_quadrant(
    item: InventoryMetricItem,
    avg_turnover: float,
    avg_days_since_sale: float,
) -> QuadrantLabel:
    """Quadrant of a single item against given baselines"""
    label = to_frame([item]).select(quadrant_expr(avg_turnover, avg_days_since_sale)).item()
    return QuadrantLabel(label)


def group_by_quadrant(
    items: Optional[Iterable[InventoryMetricItem]],
) -> Dict[QuadrantLabel, List[InventoryMetricItem]]:
    """
    Bucket a snapshot into the four quadrants using its own baselines.

    Every label is present in the result, empty when no item falls into it.
    """
    if items is None:
        raise InvalidInput("Inventory item list is missing")

    items = list(items)
    df = to_frame(items)
    avg_turnover, avg_days, _ = population_baselines(df)
    labels = df.select(quadrant_expr(avg_turnover, avg_days)).to_series().to_list()

    buckets: Dict[QuadrantLabel, List[InventoryMetricItem]] = {label: [] for label in QuadrantLabel}
    for item, label in zip(items, labels):
        buckets[QuadrantLabel(label)].append(item)
    return buckets
