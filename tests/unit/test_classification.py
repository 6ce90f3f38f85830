"""
Unit Tests - Classification Components
"""
import pytest

from stock_insights.classification import (
    ABCClass,
    ClassificationError,
    InvalidInput,
    QuadrantLabel,
    RecommendedAction,
    RiskLevel,
    STRATEGY_TABLE,
    TurnoverCategory,
    UrgencyLevel,
    XYZClass,
    abc_tier,
    classify_abc_xyz,
    classify_quadrant,
    compute_population_metrics,
    group_by_quadrant,
    lookup_strategy,
    parse_records,
    score_item,
    score_items,
    xyz_tier,
)
from stock_insights.classification.abc_xyz import turnover_category
from stock_insights.config.settings import ClassificationSettings


class TestPopulationMetrics:
    """Tests for the metrics aggregator"""

    def test_baselines(self, quadrant_items):
        """Test mean turnover and mean days since sale"""
        metrics = compute_population_metrics(quadrant_items)

        assert metrics.item_count == 4
        assert metrics.avg_turnover == pytest.approx(5.0)
        assert metrics.avg_days_since_sale == pytest.approx(102.5)

    def test_ranking_descending_and_stable(self, revenue_items):
        """Test ranking by contribution keeps input order on ties"""
        metrics = compute_population_metrics(revenue_items)

        ids = [r.item.id for r in metrics.ranked]
        assert ids == ["r15a", "r15b", "r15c", "r15d", "r15e", "r15f", "r10"]
        assert [r.rank for r in metrics.ranked] == [1, 2, 3, 4, 5, 6, 7]

    def test_cumulative_percentage(self, revenue_items):
        """Test cumulative share of total revenue"""
        metrics = compute_population_metrics(revenue_items)

        assert metrics.total_revenue == pytest.approx(100.0)
        cumulative = [r.cumulative_pct for r in metrics.ranked]
        assert cumulative == pytest.approx([15.0, 30.0, 45.0, 60.0, 75.0, 90.0, 100.0])

    def test_zero_revenue(self, quadrant_items):
        """Test every item sits at 100% when there is no revenue"""
        metrics = compute_population_metrics(quadrant_items)

        assert metrics.total_revenue == 0.0
        assert all(r.cumulative_pct == 100.0 for r in metrics.ranked)

    def test_empty_input(self):
        """Test empty snapshot yields zero baselines"""
        metrics = compute_population_metrics([])

        assert metrics.item_count == 0
        assert metrics.avg_turnover == 0.0
        assert metrics.avg_days_since_sale == 0.0
        assert metrics.ranked == ()

    def test_missing_fields_count_as_zero(self, item_factory):
        """Test an item with a missing turnover still pulls the mean down"""
        metrics = compute_population_metrics([
            item_factory("a", turnover_rate=4.0),
            item_factory("b", turnover_rate=None),
        ])

        assert metrics.avg_turnover == pytest.approx(2.0)

    def test_none_input(self):
        """Test missing item list is rejected"""
        with pytest.raises(InvalidInput):
            compute_population_metrics(None)


class TestQuadrantClassifier:
    """Tests for the rotation quadrant classifier"""

    def test_one_item_per_quadrant(self, quadrant_items):
        """Test the four archetypes land in their quadrants"""
        buckets = group_by_quadrant(quadrant_items)

        assert [i.id for i in buckets[QuadrantLabel.STAR]] == ["A"]
        assert [i.id for i in buckets[QuadrantLabel.QUESTION]] == ["B"]
        assert [i.id for i in buckets[QuadrantLabel.CASH_COW]] == ["C"]
        assert [i.id for i in buckets[QuadrantLabel.DOG]] == ["D"]

    def test_counts_sum_to_item_count(self, snapshot_generator):
        """Test every item lands in exactly one quadrant"""
        items = parse_records(snapshot_generator.generate(120))
        buckets = group_by_quadrant(items)

        assert sum(len(b) for b in buckets.values()) == 120
        ids = [i.id for b in buckets.values() for i in b]
        assert len(ids) == len(set(ids))

    def test_ties_count_as_high_and_recent(self, item_factory):
        """Test turnover equal to the mean is high and days equal to the mean is recent"""
        item = item_factory("tie", turnover_rate=5.0, days_since_last_sale=100)

        assert classify_quadrant(item, 5.0, 100.0) == QuadrantLabel.STAR

    def test_identical_items_are_stars(self, item_factory):
        """Test two identical items both sit on the baselines"""
        items = [
            item_factory("x", turnover_rate=3.0, days_since_last_sale=40),
            item_factory("y", turnover_rate=3.0, days_since_last_sale=40),
        ]
        buckets = group_by_quadrant(items)

        assert len(buckets[QuadrantLabel.STAR]) == 2

    def test_missing_days_means_sold_today(self, item_factory):
        """Test a missing days since sale is read as 0 days"""
        items = [
            item_factory("today", turnover_rate=4.0, days_since_last_sale=None),
            item_factory("old", turnover_rate=4.0, days_since_last_sale=100),
        ]
        buckets = group_by_quadrant(items)

        assert [i.id for i in buckets[QuadrantLabel.STAR]] == ["today"]
        assert [i.id for i in buckets[QuadrantLabel.CASH_COW]] == ["old"]

    def test_invalid_numbers_coerced(self, item_factory):
        """Test directly built items coerce invalid and negative numbers"""
        item = item_factory("c", current_stock="n/a", turnover_rate=-2.0, stock_value=float("nan"))

        assert item.current_stock == 0
        assert item.turnover_rate == 0.0
        assert item.stock_value == 0.0
        assert item.days_until_stockout is None

    def test_baselines_are_explicit(self, item_factory):
        """Test the same item moves quadrant with different baselines"""
        item = item_factory("m", turnover_rate=4.0, days_since_last_sale=30)

        assert classify_quadrant(item, 3.0, 60.0) == QuadrantLabel.STAR
        assert classify_quadrant(item, 6.0, 20.0) == QuadrantLabel.DOG

    def test_empty_input(self):
        """Test empty snapshot yields all four empty buckets"""
        buckets = group_by_quadrant([])

        assert set(buckets) == set(QuadrantLabel)
        assert all(b == [] for b in buckets.values())

    def test_none_input(self):
        """Test missing item list is rejected"""
        with pytest.raises(InvalidInput):
            group_by_quadrant(None)


class TestAbcXyzClassifier:
    """Tests for ABC/XYZ tiers and the strategy table"""

    @pytest.mark.parametrize("cumulative,expected", [
        (15.0, ABCClass.A),
        (20.0, ABCClass.A),
        (55.0, ABCClass.B),
        (80.0, ABCClass.B),
        (80.01, ABCClass.C),
        (95.0, ABCClass.C),
    ])
    def test_abc_tier(self, classification_settings, cumulative, expected):
        """Test ABC tiers with inclusive upper edges"""
        assert abc_tier(cumulative, classification_settings) == expected

    @pytest.mark.parametrize("variability,expected", [
        (0.0, XYZClass.X),
        (0.5, XYZClass.X),
        (0.75, XYZClass.Y),
        (1.0, XYZClass.Y),
        (1.01, XYZClass.Z),
    ])
    def test_xyz_tier(self, classification_settings, variability, expected):
        """Test XYZ tiers with inclusive upper edges"""
        assert xyz_tier(variability, classification_settings) == expected

    def test_custom_thresholds(self):
        """Test thresholds come from settings"""
        settings = ClassificationSettings(abc_a_threshold=50.0, abc_b_threshold=90.0)

        assert abc_tier(45.0, settings) == ABCClass.A
        assert abc_tier(85.0, settings) == ABCClass.B

    def test_classify_ranked(self, revenue_items, classification_settings):
        """Test ABC classes follow cumulative share in rank order"""
        metrics = compute_population_metrics(revenue_items)
        results = classify_abc_xyz(metrics.ranked, classification_settings)

        assert [r.abc_class for r in results] == [
            ABCClass.A, ABCClass.B, ABCClass.B, ABCClass.B, ABCClass.B, ABCClass.C, ABCClass.C,
        ]
        assert all(r.xyz_class == XYZClass.X for r in results)
        assert results[0].code == "AX"
        assert results[0].strategy == STRATEGY_TABLE["AX"]
        assert results[0].turnover_category == TurnoverCategory.FAST

    def test_zero_revenue_is_class_c(self, quadrant_items, classification_settings):
        """Test a snapshot without revenue puts every item in C"""
        metrics = compute_population_metrics(quadrant_items)
        results = classify_abc_xyz(metrics.ranked, classification_settings)

        assert {r.abc_class for r in results} == {ABCClass.C}

    def test_strategy_table_complete(self):
        """Test all nine cells are present"""
        assert sorted(STRATEGY_TABLE) == sorted(a + x for a in "ABC" for x in "XYZ")

    def test_lookup_strategy(self):
        """Test strategy lookup is case-insensitive"""
        record = lookup_strategy("ax")

        assert record.management_priority == "Highest"
        assert record.review_frequency == "Weekly"
        assert lookup_strategy("CZ").management_priority == "Discontinue"

    def test_lookup_unknown_code(self):
        """Test unknown codes raise"""
        with pytest.raises(ClassificationError):
            lookup_strategy("DX")

    @pytest.mark.parametrize("code,expected", [
        ("AX", TurnoverCategory.FAST),
        ("BY", TurnoverCategory.MEDIUM),
        ("CX", TurnoverCategory.SLOW),
        ("AZ", TurnoverCategory.DEAD),
        ("CZ", TurnoverCategory.DEAD),
    ])
    def test_turnover_category(self, code, expected):
        """Test turnover category derived from the combined code"""
        assert turnover_category(code) == expected

    def test_empty_and_none(self, classification_settings):
        """Test empty ranking and missing ranking"""
        assert classify_abc_xyz([], classification_settings) == []
        with pytest.raises(InvalidInput):
            classify_abc_xyz(None, classification_settings)


class TestRiskAndUrgency:
    """Tests for the risk & urgency scorer"""

    def test_high_value_dead_stock_discounted(self, item_factory, classification_settings):
        """Test stale high-value stock gets a discount sale"""
        item = item_factory("d", days_since_last_sale=150, stock_value=30000.0)
        result = score_item(item, classification_settings)

        assert result.risk_level == RiskLevel.HIGH
        assert result.recommended_action == RecommendedAction.DISCOUNT_SALE
        assert result.expected_recovery_value == pytest.approx(22500.0)

    def test_low_value_dead_stock_cleared(self, item_factory, classification_settings):
        """Test stale low-value stock is cleared in bulk"""
        item = item_factory("d", days_since_last_sale=150, stock_value=5000.0)
        result = score_item(item, classification_settings)

        assert result.recommended_action == RecommendedAction.BULK_SALE_OR_WRITE_OFF
        assert result.expected_recovery_value == pytest.approx(2750.0)

    @pytest.mark.parametrize("days,level,action", [
        (120, RiskLevel.HIGH, RecommendedAction.BULK_SALE_OR_WRITE_OFF),
        (119, RiskLevel.MEDIUM, RecommendedAction.PROMOTE),
        (60, RiskLevel.MEDIUM, RecommendedAction.PROMOTE),
        (59, RiskLevel.LOW, RecommendedAction.NO_ACTION),
        (0, RiskLevel.LOW, RecommendedAction.NO_ACTION),
    ])
    def test_risk_boundaries(self, item_factory, classification_settings, days, level, action):
        """Test risk tiers at the day boundaries"""
        result = score_item(item_factory("r", days_since_last_sale=days), classification_settings)

        assert result.risk_level == level
        assert result.recommended_action == action

    def test_no_recovery_without_disposal(self, item_factory, classification_settings):
        """Test recovery value is only set for disposal actions"""
        item = item_factory("p", days_since_last_sale=90, stock_value=50000.0)

        assert score_item(item, classification_settings).expected_recovery_value is None

    @pytest.mark.parametrize("supplied,level", [
        (0, UrgencyLevel.HIGH),
        (7, UrgencyLevel.HIGH),
        (8, UrgencyLevel.MEDIUM),
        (21, UrgencyLevel.MEDIUM),
        (22, UrgencyLevel.LOW),
    ])
    def test_urgency_from_supplied_days(self, item_factory, classification_settings, supplied, level):
        """Test urgency tiers from a precomputed days until stockout"""
        item = item_factory("u", current_stock=100, turnover_rate=1.0, days_until_stockout=supplied)
        result = score_item(item, classification_settings)

        assert result.days_until_stockout == supplied
        assert result.urgency_level == level

    def test_urgency_derived_from_turnover(self, item_factory, classification_settings):
        """Test days until stockout derived from annual turns"""
        item = item_factory("u", current_stock=100, turnover_rate=36.5)
        result = score_item(item, classification_settings)

        assert result.days_until_stockout == 10
        assert result.urgency_level == UrgencyLevel.MEDIUM

    def test_out_of_stock_is_urgent(self, item_factory, classification_settings):
        """Test zero stock means stockout now"""
        result = score_item(item_factory("o", current_stock=0, turnover_rate=4.0), classification_settings)

        assert result.days_until_stockout == 0
        assert result.urgency_level == UrgencyLevel.HIGH

    def test_no_demand_uses_horizon(self, item_factory, classification_settings):
        """Test stock with no demand projects to the horizon"""
        result = score_item(item_factory("n", current_stock=50, turnover_rate=0.0), classification_settings)

        assert result.days_until_stockout == classification_settings.stockout_horizon_days
        assert result.urgency_level == UrgencyLevel.LOW

    def test_reorder_suggestion(self, item_factory, classification_settings):
        """Test reorder quantity is suggested at or below the reorder point"""
        at_point = item_factory("a", current_stock=10, reorder_point=10, reorder_quantity=50)
        above = item_factory("b", current_stock=11, reorder_point=10, reorder_quantity=50)
        results = score_items([at_point, above], classification_settings)

        assert results[0].below_reorder_point is True
        assert results[0].suggested_order_quantity == 50
        assert results[1].below_reorder_point is False
        assert results[1].suggested_order_quantity == 0

    def test_empty_and_none(self, classification_settings):
        """Test empty list and missing inputs"""
        assert score_items([], classification_settings) == []
        with pytest.raises(InvalidInput):
            score_items(None, classification_settings)
        with pytest.raises(InvalidInput):
            score_item(None, classification_settings)
