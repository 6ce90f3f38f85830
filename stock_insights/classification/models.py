"""
Classification Domain Models

Input snapshot item, derived label enums, and the polars frame schema shared
by the aggregator, classifiers and scorer.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import polars as pl
import structlog

from .variability import coefficient_of_variation

logger = structlog.get_logger(__name__)


# =============================================================================
# LABELS
# =============================================================================

class QuadrantLabel(str, Enum):
    """Rotation matrix quadrant"""
    STAR = "STAR"  # High turnover, recent sale
    QUESTION = "QUESTION"  # Low turnover, recent sale
    CASH_COW = "CASH_COW"  # High turnover, old sale
    DOG = "DOG"  # Low turnover, old sale


class ABCClass(str, Enum):
    """Revenue contribution tier"""
    A = "A"
    B = "B"
    C = "C"


class XYZClass(str, Enum):
    """Demand variability tier"""
    X = "X"  # Stable
    Y = "Y"  # Variable
    Z = "Z"  # Irregular


class RiskLevel(str, Enum):
    """Dead-stock risk tier"""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class UrgencyLevel(str, Enum):
    """Reorder urgency tier"""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class RecommendedAction(str, Enum):
    """Merchandising action for a risk tier"""
    DISCOUNT_SALE = "DISCOUNT_SALE"
    BULK_SALE_OR_WRITE_OFF = "BULK_SALE_OR_WRITE_OFF"
    PROMOTE = "PROMOTE"
    NO_ACTION = "NO_ACTION"


class TurnoverCategory(str, Enum):
    """Coarse turnover bucket derived from the ABC/XYZ code"""
    FAST = "FAST"
    MEDIUM = "MEDIUM"
    SLOW = "SLOW"
    DEAD = "DEAD"


# =============================================================================
# ERRORS
# =============================================================================

class ClassificationError(Exception):
    """Base error for the classification subsystem"""


class InvalidInput(ClassificationError):
    """Raised when the item list itself is missing"""


# =============================================================================
# INPUT
# =============================================================================

FRAME_SCHEMA: Dict[str, pl.DataType] = {
    "id": pl.Utf8,
    "title": pl.Utf8,
    "category_code": pl.Utf8,
    "current_stock": pl.Int64,
    "reorder_point": pl.Int64,
    "reorder_quantity": pl.Int64,
    "turnover_rate": pl.Float64,
    "days_since_last_sale": pl.Int64,
    "stock_value": pl.Float64,
    "revenue_contribution": pl.Float64,
    "demand_variability": pl.Float64,
    "days_until_stockout": pl.Int64,
}

# Accepted source keys per field, first match wins
FIELD_ALIASES: Dict[str, Sequence[str]] = {
    "id": ("id", "bookId", "book_id"),
    "title": ("title", "bookTitle", "book_title"),
    "category_code": ("categoryCode", "category_code", "category"),
    "current_stock": ("currentStock", "current_stock"),
    "reorder_point": ("reorderPoint", "reorder_point"),
    "reorder_quantity": ("reorderQuantity", "reorder_quantity"),
    "turnover_rate": ("turnoverRate", "turnover_rate"),
    "days_since_last_sale": ("daysSinceLastSale", "days_since_last_sale"),
    "stock_value": ("stockValue", "stock_value"),
    "revenue_contribution": (
        "revenueContribution",
        "revenue_contribution",
        "annualRevenue",
        "salesContribution",
        "salesValue",
    ),
    "demand_variability": ("demandVariability", "demand_variability", "variationCoefficient"),
    "days_until_stockout": ("daysUntilStockout", "days_until_stockout"),
}

DEMAND_HISTORY_KEYS = ("monthlyDemand", "monthly_demand", "demandHistory")


def _lookup(record: Mapping[str, Any], field_name: str) -> Any:
    for key in FIELD_ALIASES[field_name]:
        if record.get(key) is not None:
            return record[key]
    return None


def _to_float(value: Any) -> float:
    """Coerce to a non-negative finite float, 0.0 when missing or invalid"""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number) or number < 0:
        return 0.0
    return number


def _to_int(value: Any) -> int:
    return int(_to_float(value))


def _to_optional_int(value: Any) -> Optional[int]:
    """Like _to_int, but None when missing or invalid"""
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return max(int(number), 0)


INT_FIELDS = ("current_stock", "reorder_point", "reorder_quantity", "days_since_last_sale")
FLOAT_FIELDS = ("turnover_rate", "stock_value", "revenue_contribution", "demand_variability")


@dataclass(frozen=True)
class InventoryMetricItem:
    """Per-title inventory metrics, immutable for a classification run"""
    id: str
    title: str = ""
    category_code: str = ""
    current_stock: int = 0
    reorder_point: int = 0
    reorder_quantity: int = 0
    turnover_rate: float = 0.0  # Annualized stock turns
    days_since_last_sale: int = 0
    stock_value: float = 0.0
    revenue_contribution: float = 0.0  # Raw revenue in the analysis window
    demand_variability: float = 0.0  # Coefficient of variation
    days_until_stockout: Optional[int] = None  # Precomputed by the source, if any

    def __post_init__(self):
        # Missing or invalid numbers count as 0 however the item was built
        for name in INT_FIELDS:
            object.__setattr__(self, name, _to_int(getattr(self, name)))
        for name in FLOAT_FIELDS:
            object.__setattr__(self, name, _to_float(getattr(self, name)))
        object.__setattr__(self, "days_until_stockout", _to_optional_int(self.days_until_stockout))

    @classmethod
    def from_record(
        cls,
        record: Mapping[str, Any],
        default_id: Optional[str] = None,
    ) -> "InventoryMetricItem":
        """
        Build an item from a reporting API or snapshot file record.

        Accepts camelCase and snake_case keys plus the aliases in
        FIELD_ALIASES. Missing or invalid numbers become 0; a missing
        variability is computed from a monthly demand history when present.
        """
        raw_id = _lookup(record, "id")
        item_id = str(raw_id) if raw_id is not None else (default_id or "")

        variability = _lookup(record, "demand_variability")
        if variability is None:
            history = next(
                (record[k] for k in DEMAND_HISTORY_KEYS if isinstance(record.get(k), (list, tuple))),
                None,
            )
            variability = (
                coefficient_of_variation([_to_float(v) for v in history])
                if history is not None else 0.0
            )

        return cls(
            id=item_id,
            title=str(_lookup(record, "title") or ""),
            category_code=str(_lookup(record, "category_code") or ""),
            current_stock=_to_int(_lookup(record, "current_stock")),
            reorder_point=_to_int(_lookup(record, "reorder_point")),
            reorder_quantity=_to_int(_lookup(record, "reorder_quantity")),
            turnover_rate=_to_float(_lookup(record, "turnover_rate")),
            days_since_last_sale=_to_int(_lookup(record, "days_since_last_sale")),
            stock_value=_to_float(_lookup(record, "stock_value")),
            revenue_contribution=_to_float(_lookup(record, "revenue_contribution")),
            demand_variability=_to_float(variability),
            days_until_stockout=_to_optional_int(_lookup(record, "days_until_stockout")),
        )

    def as_row(self) -> Dict[str, Any]:
        """Snake-case mapping in FRAME_SCHEMA column order"""
        return {name: getattr(self, name) for name in FRAME_SCHEMA}


def to_frame(items: Iterable[InventoryMetricItem]) -> pl.DataFrame:
    """
    Build the snapshot frame with a `position` column holding input order.

    An empty iterable yields an empty frame that still carries the schema.
    """
    rows = [item.as_row() for item in items]
    columns = {name: [row[name] for row in rows] for name in FRAME_SCHEMA}
    return pl.DataFrame(columns, schema=FRAME_SCHEMA).with_row_index("position")


def parse_records(payload: Any) -> List[InventoryMetricItem]:
    """
    Parse a reporting payload into items.

    The payload may be a list of records or an object wrapping the list under
    `items`, `turnoverAnalysis`, `data` or `content`. Entries that are not
    objects are skipped with a warning rather than rejecting the page.

    Raises:
        InvalidInput: If the payload is None or holds no record list
    """
    if payload is None:
        raise InvalidInput("Inventory payload is missing")

    records = payload
    if isinstance(payload, Mapping):
        records = next(
            (payload[k] for k in ("items", "turnoverAnalysis", "data", "content")
             if isinstance(payload.get(k), list)),
            None,
        )
        if records is None:
            raise InvalidInput("Inventory payload does not contain a record list")

    if not isinstance(records, (list, tuple)):
        raise InvalidInput(f"Expected a list of records, got {type(records).__name__}")

    items = []
    skipped = 0
    for index, record in enumerate(records):
        if not isinstance(record, Mapping):
            skipped += 1
            continue
        items.append(InventoryMetricItem.from_record(record, default_id=str(index)))

    if skipped:
        logger.warning("Skipped non-object inventory records", skipped=skipped, parsed=len(items))

    return items
