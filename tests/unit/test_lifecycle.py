"""
Unit Tests - Lifecycle Reports
"""
from datetime import datetime, timedelta

from retail_insights.analytics.lifecycle import discontinue_candidates, new_design_analytics
from retail_insights.analytics.windows import DiscontinuePeriod


class TestNewDesignAnalytics:
    """Tests for the new design report"""

    def test_single_restocked_design(self, make_product, make_restock):
        """Test only the requested design year is reported"""
        products = [
            make_product("N1", isNewDesign=True, designYear=2024),
            make_product("N2", isNewDesign=True, designYear=2023),
            make_product("OLD"),
        ]
        logs = [make_restock("N1", 10), make_restock("N1", 20), make_restock("OLD", 5)]

        report = new_design_analytics(products, [], logs, 2024)

        assert report.total_new_designs == 1
        assert report.new_designs_restocked == 1
        assert report.total_restocks_for_new_designs == 2
        assert report.total_units_restocked_for_new_designs == 30

    def test_lifetime_units_sold(self, make_order, make_product, item, now):
        """Test units sold over the whole ledger"""
        products = [make_product("N1", isNewDesign=True, designYear=2025)]
        orders = [
            make_order(when=now - timedelta(days=300), items=[item("N1", 4)]),
            make_order(when=now, items=[item("N1", 1)]),
            make_order(when=now, status="Refunded", items=[item("N1", 7)]),
        ]

        report = new_design_analytics(products, orders, [], 2025)

        assert report.all_new_designs[0].units_sold == 5
        assert report.new_designs_restocked == 0

    def test_top_restocked_tie_break(self, make_product, make_restock):
        """Test restock count ties break on units"""
        products = [make_product(pid, isNewDesign=True, designYear=2025) for pid in ("A", "B", "C")]
        logs = [
            make_restock("A", 5), make_restock("A", 5),
            make_restock("B", 20), make_restock("B", 1),
            make_restock("C", 50),
        ]

        report = new_design_analytics(products, [], logs, 2025)

        assert [d.product_id for d in report.top_restocked_new_designs] == ["B", "A", "C"]


class TestDiscontinueCandidates:
    """Tests for discontinue candidate detection"""

    def test_candidates(self, make_order, make_product, make_restock, item, now):
        """Test unsold stocked products become candidates"""
        products = [
            make_product("idle", stocks=(20,), created_at=now - timedelta(days=200)),
            make_product("selling", stocks=(20,)),
            make_product("low", stocks=(2,)),
            make_product("older", stocks=(20,), created_at=now - timedelta(days=400)),
        ]
        orders = [
            make_order(when=now - timedelta(days=3), items=[item("selling", 1)]),
            make_order(when=now - timedelta(days=45), items=[item("idle", 2)]),
        ]
        logs = [make_restock("idle", 5, when=now - timedelta(days=10))]

        result = discontinue_candidates(products, orders, logs, DiscontinuePeriod.LAST_30_DAYS, now=now)

        assert result.total_candidates == 2
        assert [c.product_id for c in result.candidates] == ["older", "idle"]
        idle = result.candidates[1]
        assert idle.last_sold_at == now - timedelta(days=45)
        assert idle.restock_count_this_year == 1
        assert idle.days_in_stock == 200
        assert idle.units_sold_in_period == 0

    def test_never_includes_sold_or_understocked(self, make_order, make_product, item, now):
        """Test sold or understocked products are excluded"""
        products = [make_product("sold", stocks=(50,)), make_product("few", stocks=(4,))]
        orders = [make_order(when=now - timedelta(days=80), items=[item("sold", 1)])]

        result = discontinue_candidates(products, orders, [], DiscontinuePeriod.LAST_90_DAYS, min_stock=5, now=now)

        assert result.candidates == []
        assert result.total_candidates == 0

    def test_refunded_sales_do_not_count(self, make_order, make_product, item, now):
        """Test refunded orders are not sales"""
        products = [make_product("A", stocks=(10,))]
        orders = [make_order(when=now, status="Refunded", items=[item("A", 3)])]

        result = discontinue_candidates(products, orders, [], DiscontinuePeriod.YEAR_TO_DATE, now=now)

        assert result.total_candidates == 1
        assert result.candidates[0].last_sold_at is None

    def test_limit_keeps_total(self, make_product, now):
        """Test truncation keeps the full candidate count"""
        products = [make_product(str(i), stocks=(10 + i,)) for i in range(6)]

        result = discontinue_candidates(products, [], [], DiscontinuePeriod.LAST_30_DAYS, limit=2, now=now)

        assert result.total_candidates == 6
        assert [c.current_stock for c in result.candidates] == [15, 14]

    def test_year_period_restocks_before_year_start(self, make_product, make_restock, now):
        """Test restocks before January 1 are not this year's"""
        products = [make_product("A", stocks=(10,))]
        logs = [make_restock("A", 5, when=datetime(2024, 12, 31, 23))]

        result = discontinue_candidates(products, [], logs, DiscontinuePeriod.YEAR_TO_DATE, now=now)

        assert result.candidates[0].restock_count_this_year == 0
