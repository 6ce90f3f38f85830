"""
Test Suite Configuration
"""
import pytest
from typing import Any, Dict, List

from stock_insights.classification import InventoryMetricItem
from stock_insights.config import Settings
from stock_insights.config.settings import ClassificationSettings
from stock_insights.data import InventorySnapshotGenerator


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(
        app_env="testing",
        debug=True,
    )


@pytest.fixture
def classification_settings() -> ClassificationSettings:
    """Default classification thresholds"""
    return ClassificationSettings()


def make_item(item_id: str, **fields: Any) -> InventoryMetricItem:
    """Item with defaults for every field not given"""
    return InventoryMetricItem(id=item_id, title=fields.pop("title", f"Title {item_id}"), **fields)


@pytest.fixture
def quadrant_items() -> List[InventoryMetricItem]:
    """Four titles, one per quadrant: avg turnover 5, avg days 102.5"""
    return [
        make_item("A", turnover_rate=8, days_since_last_sale=5),
        make_item("B", turnover_rate=2, days_since_last_sale=5),
        make_item("C", turnover_rate=8, days_since_last_sale=200),
        make_item("D", turnover_rate=2, days_since_last_sale=200),
    ]


@pytest.fixture
def revenue_items() -> List[InventoryMetricItem]:
    """Seven titles: six at 15 and one at 10, total revenue 100"""
    return [make_item("r10", revenue_contribution=10)] + [
        make_item(f"r15{suffix}", revenue_contribution=15) for suffix in "abcdef"
    ]


@pytest.fixture
def item_factory():
    """Factory for items with defaults"""
    return make_item


@pytest.fixture
def sample_records() -> List[Dict[str, Any]]:
    """Reporting API records in camelCase"""
    return [
        {
            "bookId": 101,
            "bookTitle": "Effective Java",
            "categoryCode": "JAVA",
            "currentStock": 40,
            "reorderPoint": 20,
            "reorderQuantity": 60,
            "turnoverRate": 12.5,
            "daysSinceLastSale": 3,
            "stockValue": 1800.0,
            "revenueContribution": 52000.0,
            "demandVariability": 0.3,
        },
        {
            "id": "102",
            "title": "Fluent Python",
            "categoryCode": "PYTHON",
            "currentStock": 5,
            "reorderPoint": 10,
            "reorderQuantity": 30,
            "turnoverRate": 18.0,
            "daysSinceLastSale": 1,
            "stockValue": 240.0,
            "annualRevenue": 31000.0,
            "monthlyDemand": [10, 12, 8, 11, 9, 10, 13, 7, 10, 12, 9, 9],
        },
        {
            "id": "103",
            "title": "Legacy CGI Programming",
            "categoryCode": "WEB",
            "currentStock": 900,
            "reorderPoint": 10,
            "reorderQuantity": 20,
            "turnoverRate": 0.2,
            "daysSinceLastSale": 210,
            "stockValue": 27000.0,
            "revenueContribution": 400.0,
            "demandVariability": 1.8,
        },
        {
            "id": "104",
            "title": "Intro to Perl",
            "categoryCode": "WEB",
            "currentStock": 120,
            "turnoverRate": None,
            "daysSinceLastSale": 75,
            "stockValue": "n/a",
        },
    ]


@pytest.fixture
def snapshot_generator() -> InventorySnapshotGenerator:
    """Seeded synthetic snapshot generator"""
    return InventorySnapshotGenerator(seed=7)
