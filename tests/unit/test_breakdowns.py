"""
Unit Tests - KPIs and Breakdowns
"""
import pytest

from retail_insights.analytics.breakdowns import (
    OTHERS,
    carrier_breakdown,
    count_breakdown,
    location_breakdown,
    platform_breakdown,
    revenue_by_source,
    status_breakdown,
    top_add_ons,
)
from retail_insights.analytics.kpis import kpi, percent_change, round_half_up, share_percentage


class TestPercentChange:
    """Tests for the comparison rule"""

    @pytest.mark.parametrize("current,previous,expected", [
        (0, 0, 0),
        (5, 0, 100),
        (150, 100, 50),
        (50, 100, -50),
        (0, 100, -100),
    ])
    def test_percent_change(self, current, previous, expected):
        """Test percent change including the zero baseline rule"""
        assert percent_change(current, previous) == expected

    def test_kpi(self):
        """Test KPI metric pairs value with its change"""
        metric = kpi(12, 8)

        assert metric.value == 12
        assert metric.percent_change == 50

    def test_round_half_up(self):
        """Test halves round towards positive infinity"""
        assert round_half_up(2.5) == 3
        assert round_half_up(0.5) == 1
        assert round_half_up(2.4999) == 2

    def test_share_percentage_empty_total(self):
        """Test share of an empty total is zero"""
        assert share_percentage(0, 0) == 0


class TestLocationBreakdown:
    """Tests for the location breakdown and Others rollup"""

    def test_others_rollup(self, make_order):
        """Test locations beyond the top N roll into Others"""
        states = ["Lagos"] * 4 + ["Abuja"] * 3 + ["Oyo"] * 2 + ["Kano", "Delta", "Enugu", "Kaduna"]
        orders = [make_order(deliveryState=s) for s in states]

        entries = location_breakdown(orders)

        assert [e.label for e in entries][:3] == ["Lagos", "Abuja", "Oyo"]
        assert len(entries) == 6
        others = entries[-1]
        assert others.label == OTHERS
        assert others.value == len(orders) - sum(e.value for e in entries[:-1])
        assert others.value > 0
        assert sum(e.percentage for e in entries) in (99, 100, 101)

    def test_no_others_when_few_locations(self, make_order):
        """Test no Others entry when every location fits"""
        orders = [make_order(deliveryState=s) for s in ["Lagos", "Lagos", "Abuja"]]

        entries = location_breakdown(orders)

        assert [e.label for e in entries] == ["Lagos", "Abuja"]
        assert [e.percentage for e in entries] == [67, 33]

    def test_missing_location_is_unknown(self, make_order):
        """Test orders without a state count as Unknown"""
        orders = [make_order(deliveryState=""), make_order()]

        entries = location_breakdown(orders)

        assert entries[0].label == "Unknown"
        assert entries[0].value == 2

    def test_ties_keep_first_appearance(self, make_order):
        """Test equal counts keep first-appearance order"""
        orders = [make_order(deliveryState=s) for s in ["Oyo", "Lagos", "Lagos", "Oyo", "Abuja"]]

        entries = location_breakdown(orders)

        assert [e.label for e in entries] == ["Oyo", "Lagos", "Abuja"]

    def test_empty(self):
        """Test no orders gives no entries"""
        assert location_breakdown([]) == []


class TestPlatformAndCarrier:
    """Tests for platform, carrier and status groupings"""

    def test_platform_has_no_rollup(self, make_order):
        """Test platforms are all listed without Others"""
        sources = ["A", "B", "C", "D", "E", "F", "G"]
        orders = [make_order(source=s) for s in sources]

        entries = platform_breakdown(orders)

        assert len(entries) == 7
        assert OTHERS not in [e.label for e in entries]

    def test_count_breakdown_by_source(self, make_order):
        """Test generic count breakdown on the source key"""
        orders = [make_order(source="WhatsApp"), make_order(source="Website"), make_order(source="WhatsApp")]

        entries = count_breakdown(orders, "source")

        assert entries[0].label == "WhatsApp"
        assert entries[0].value == 2

    def test_carrier_on_time_rate(self, make_order):
        """Test delivered share per carrier"""
        orders = [
            make_order(status="Delivered", logistics={"carrierName": "DHL"}),
            make_order(status="Delivered", logistics={"carrierName": "DHL"}),
            make_order(status="Processing", logistics={"carrierName": "DHL"}),
            make_order(status="Delivered", logistics={"carrierName": "Kwik"}),
            make_order(status="Processing"),
        ]

        entries = carrier_breakdown(orders)

        dhl = entries[0]
        assert dhl.label == "DHL"
        assert dhl.orders_shipped == 3
        assert dhl.on_time_rate == 67
        assert {e.label: e.on_time_rate for e in entries} == {"DHL": 67, "Kwik": 100, "Unknown": 0}

    def test_status_breakdown_defaults_pending(self, make_order):
        """Test blank statuses count as Pending"""
        orders = [make_order(status=""), make_order(status="Delivered"), make_order(status="")]

        entries = status_breakdown(orders)

        assert entries[0].label == "Pending"
        assert entries[0].value == 2

    def test_revenue_by_source(self, make_order):
        """Test revenue summed per source"""
        orders = [
            make_order(source="Website", total=300),
            make_order(source="WhatsApp", total=100),
        ]

        entries = revenue_by_source(orders)

        assert [(e.label, e.value, e.percentage) for e in entries] == [
            ("Website", 300, 75),
            ("WhatsApp", 100, 25),
        ]

    def test_top_add_ons(self, make_order):
        """Test add-on services ranked by revenue"""
        orders = [
            make_order(services=[{"name": "Gift Wrap", "price": 1500}]),
            make_order(services=[{"name": "Lens Coating", "price": 5000}, {"name": "Gift Wrap", "price": 1500}]),
        ]

        add_ons = top_add_ons(orders)

        assert add_ons[0].name == "Lens Coating"
        assert add_ons[1].revenue == 3000
        assert add_ons[1].count == 2
