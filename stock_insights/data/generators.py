"""
Synthetic Snapshot Generator

Generates realistic bookstore inventory snapshots for testing and development.
Includes:
- Titles across technology categories
- Stock, reorder and value figures
- Twelve months of demand history per title
- Fast-moving, seasonal, slow and stale title profiles
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np
import polars as pl
import structlog
from faker import Faker

from stock_insights.classification.models import InventoryMetricItem, parse_records

logger = structlog.get_logger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

CATEGORIES = [
    ("JAVA", ["Spring", "Concurrency", "JVM Internals"]),
    ("PYTHON", ["Data Analysis", "Web Development", "Automation"]),
    ("JAVASCRIPT", ["React", "Node.js", "TypeScript"]),
    ("AI_ML", ["Deep Learning", "LLM Applications", "Statistics"]),
    ("DATABASE", ["SQL", "PostgreSQL", "NoSQL"]),
    ("CLOUD", ["AWS", "Kubernetes", "DevOps"]),
]

# Profile weights and parameter ranges: annual turns, days since sale,
# monthly demand mean, demand noise (coefficient of variation)
PROFILES = {
    "bestseller": (0.20, (12.0, 30.0), (0, 14), (80, 200), (0.1, 0.4)),
    "steady": (0.35, (4.0, 12.0), (5, 45), (20, 80), (0.2, 0.7)),
    "seasonal": (0.20, (2.0, 8.0), (20, 90), (5, 40), (0.8, 1.6)),
    "stale": (0.25, (0.1, 2.0), (60, 240), (0, 6), (1.0, 2.5)),
}


# =============================================================================
# GENERATORS
# =============================================================================

class InventorySnapshotGenerator:
    """
    Generate reporting-API-shaped inventory records.

    Records use the reporting API's camelCase keys. Seeded generators make
    snapshots reproducible.
    """

    def __init__(self, seed: Optional[int] = 42):
        self.fake = Faker()
        if seed is not None:
            self.fake.seed_instance(seed)
        self.rng = np.random.default_rng(seed)

    def _monthly_demand(self, mean: float, noise: float) -> List[int]:
        if mean <= 0:
            return [0] * 12
        # Gamma keeps demand non-negative with the requested dispersion
        shape = 1.0 / max(noise, 0.05) ** 2
        values = self.rng.gamma(shape, mean / shape, size=12)
        return [int(v) for v in np.round(values)]

    def generate_record(self, index: int) -> Dict[str, Any]:
        """Generate one inventory record"""
        names = list(PROFILES)
        weights = np.array([PROFILES[n][0] for n in names])
        profile = names[self.rng.choice(len(names), p=weights / weights.sum())]
        _, turns, days, demand, noise = PROFILES[profile]

        category, topics = CATEGORIES[self.rng.integers(len(CATEGORIES))]
        topic = topics[self.rng.integers(len(topics))]

        unit_price = round(float(self.rng.uniform(18, 65)), 2)
        current_stock = int(self.rng.integers(0, 400))
        monthly_demand = self._monthly_demand(
            float(self.rng.uniform(*demand)),
            float(self.rng.uniform(*noise)),
        )
        annual_units = sum(monthly_demand)

        return {
            "id": f"BK-{index + 1:05d}",
            "title": f"{topic}: {self.fake.catch_phrase()}",
            "categoryCode": category,
            "currentStock": current_stock,
            "reorderPoint": int(self.rng.integers(10, 60)),
            "reorderQuantity": int(self.rng.integers(20, 200)),
            "turnoverRate": round(float(self.rng.uniform(*turns)), 2),
            "daysSinceLastSale": int(self.rng.integers(days[0], days[1] + 1)),
            "stockValue": round(current_stock * unit_price, 2),
            "revenueContribution": round(annual_units * unit_price, 2),
            "monthlyDemand": monthly_demand,
        }

    def generate(self, n: int = 500) -> List[Dict[str, Any]]:
        """Generate n inventory records"""
        return [self.generate_record(i) for i in range(n)]

    def generate_frame(self, n: int = 500) -> pl.DataFrame:
        return pl.DataFrame(self.generate(n))

    def save(self, records: List[Dict[str, Any]], output_dir: str) -> Dict[str, Path]:
        """Write records as a reporting JSON payload and a Parquet file"""
        out = Path(output_dir)
        out.mkdir(parents=True, exist_ok=True)

        json_path = out / "inventory_snapshot.json"
        json_path.write_text(json.dumps({"items": records}, indent=2), encoding="utf-8")

        parquet_path = out / "inventory_snapshot.parquet"
        pl.DataFrame(records).write_parquet(parquet_path)

        logger.info("Snapshot written", items=len(records), json=str(json_path), parquet=str(parquet_path))
        return {"json": json_path, "parquet": parquet_path}


def generate_items(n: int = 500, seed: Optional[int] = 42) -> List[InventoryMetricItem]:
    """Generate parsed inventory items"""
    return parse_records(InventorySnapshotGenerator(seed=seed).generate(n))
