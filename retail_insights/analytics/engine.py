"""
Analytics Engine

Orchestrates the aggregation components into the dashboard bundles:
- Sales, orders and customers
- Inventory and restocking
- New design and discontinue candidate reports

Every call reads an immutable snapshot and returns a fresh, read-only
result; nothing is cached between calls.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, List, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator

from retail_insights.config import Settings, get_settings
from retail_insights.data.models import DELIVERED_STATUS, Order, Snapshot
from . import breakdowns, customers, inventory, lifecycle, performance, series
from .breakdowns import BreakdownEntry, CarrierBreakdownEntry, TopAddOn
from .customers import ReturningVsNew, TopCustomer
from .filters import filter_orders, filter_restock_logs, paid_orders
from .inventory import InventoryOverview, LowStockOverride, RestockInsights, StockAlert
from .kpis import KpiMetric, kpi, percent_change
from .lifecycle import DiscontinueCandidatesResult, NewDesignAnalytics
from .performance import ProductPerformance
from .refunds import refund_stats
from .series import ChartDataPoint
from .windows import DiscontinuePeriod, TimeRange, resolve_now, resolve_windows, today_window

logger = structlog.get_logger(__name__)

PROCESSING_STATUSES = ("Processing", "Lab Processing", "Quality Check")


class AnalyticsRequest(BaseModel):
    """Parameters for one analytics call; unset limits fall back to settings"""

    model_config = ConfigDict(frozen=True)

    time_range: TimeRange = TimeRange.LAST_7_DAYS
    now: Optional[datetime] = None
    low_stock_override: Optional[LowStockOverride] = None
    discontinue_period: DiscontinuePeriod = DiscontinuePeriod.LAST_30_DAYS
    discontinue_min_stock: Optional[int] = Field(default=None, ge=0)
    discontinue_limit: Optional[int] = Field(default=None, ge=1)
    design_year: Optional[int] = None
    top_n: Optional[int] = Field(default=None, ge=1)

    @field_validator("time_range", mode="before")
    @classmethod
    def parse_time_range(cls, v: Any) -> Any:
        """Accept range aliases such as ``last-30-days``"""
        return TimeRange(v) if isinstance(v, str) else v

    @field_validator("discontinue_period", mode="before")
    @classmethod
    def parse_discontinue_period(cls, v: Any) -> Any:
        return DiscontinuePeriod(v) if isinstance(v, str) else v


@dataclass(frozen=True)
class TodayStats:
    sales: float
    orders: int
    units: int
    customers: int
    refunds: int
    refunds_amount: float


@dataclass(frozen=True)
class SalesKpis:
    sales: KpiMetric
    customers: KpiMetric
    orders: KpiMetric
    refunds: KpiMetric


@dataclass(frozen=True)
class SalesAnalytics:
    """Sales, orders and customers bundle"""
    # Core metrics
    total_sales: float
    total_orders: int
    total_units: int
    new_customers: int
    refunds_count: int
    refunds_amount: float
    net_revenue: float

    # Today
    today: TodayStats
    hourly_trend: List[float]

    # Charts and comparison
    sales_by_period: List[ChartDataPoint]
    orders_by_period: List[ChartDataPoint]
    previous_period_sales: float
    sales_change: float

    # Breakdowns
    location_breakdown: List[BreakdownEntry]
    platform_breakdown: List[BreakdownEntry]
    logistics_breakdown: List[CarrierBreakdownEntry]

    kpi_metrics: SalesKpis

    # Sales
    average_order_value: float
    top_add_ons: List[TopAddOn]
    revenue_by_source: List[BreakdownEntry]

    # Orders
    status_breakdown: List[BreakdownEntry]
    cancellations_count: int
    processing_orders: int
    delivered_orders: int

    # Customers
    returning_customers: int
    returning_vs_new: ReturningVsNew
    top_customers: List[TopCustomer]
    customers_by_location: List[BreakdownEntry]
    customers_by_platform: List[BreakdownEntry]


@dataclass(frozen=True)
class InventoryKpis:
    restocks: KpiMetric
    units_restocked: KpiMetric


@dataclass(frozen=True)
class InventoryAnalytics:
    """Inventory and restocking bundle"""
    overview: InventoryOverview
    restock_insights: RestockInsights
    best_selling_products: List[ProductPerformance]
    top_products_by_revenue: List[ProductPerformance]
    slow_movers: List[ProductPerformance]
    restocks_over_time: List[ChartDataPoint]
    kpi_metrics: InventoryKpis
    low_stock_list: List[StockAlert]
    out_of_stock_list: List[StockAlert]
    new_designs: NewDesignAnalytics


class AnalyticsEngine:
    """
    Computes dashboard bundles from record snapshots.

    Calendar days follow the zone in the engine's settings; load snapshots
    with the same zone so record timestamps line up with the windows.

    Example:
        engine = AnalyticsEngine()
        snapshot = load_snapshot(payload, tz=engine.tz)
        sales = engine.sales_analytics(snapshot, AnalyticsRequest(time_range="30d"))
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = (settings or get_settings()).analytics
        self.tz = self.settings.tzinfo

    def _top_n(self, request: AnalyticsRequest) -> int:
        return request.top_n or self.settings.top_n

    def _override(self, request: AnalyticsRequest) -> LowStockOverride:
        if request.low_stock_override is not None:
            return request.low_stock_override
        return LowStockOverride(
            enabled=self.settings.global_low_stock_enabled,
            value=self.settings.global_low_stock_threshold,
        )

    def sales_analytics(self, snapshot: Snapshot, request: Optional[AnalyticsRequest] = None) -> SalesAnalytics:
        """
        Build the sales, orders and customers bundle.

        Args:
            snapshot: Records to aggregate
            request: Range and limits; defaults to the last 7 days

        Returns:
            SalesAnalytics bundle
        """
        request = request or AnalyticsRequest()
        started_at = datetime.now()
        now = resolve_now(request.now, self.tz)
        current, previous = resolve_windows(request.time_range, now, self.tz)
        granularity = request.time_range.granularity
        top_n = self._top_n(request)
        orders = snapshot.orders

        logger.debug(
            "Resolved windows",
            time_range=request.time_range.value,
            start=current.start.isoformat(),
            end=current.end.isoformat(),
            previous_start=previous.start.isoformat(),
        )

        current_orders = filter_orders(orders, current)
        previous_orders = filter_orders(orders, previous)
        all_in_range = filter_orders(orders, current, exclude_refunded=False)
        all_in_previous = filter_orders(orders, previous, exclude_refunded=False)

        current_refunds = refund_stats(all_in_range)
        previous_refunds = refund_stats(all_in_previous)

        total_sales = sum(o.total_amount for o in current_orders)
        total_orders = len(current_orders)
        previous_sales = sum(o.total_amount for o in previous_orders)
        current_customers = customers.count_unique_customers(current_orders)
        previous_customers = customers.count_unique_customers(previous_orders)
        sales_change = percent_change(total_sales, previous_sales)

        returning_vs_new = customers.returning_vs_new(current_orders, orders, current.start)

        result = SalesAnalytics(
            total_sales=total_sales,
            total_orders=total_orders,
            total_units=_total_units(current_orders),
            new_customers=customers.count_new_customers(orders, current.start),
            refunds_count=current_refunds.count,
            refunds_amount=current_refunds.total,
            net_revenue=max(0.0, total_sales - current_refunds.total),
            today=self.today_stats(snapshot, now),
            hourly_trend=series.hourly_sales_trend(orders, now, self.tz),
            sales_by_period=series.sales_series(current_orders, current, granularity),
            orders_by_period=series.order_count_series(all_in_range, current, granularity),
            previous_period_sales=previous_sales,
            sales_change=sales_change,
            location_breakdown=breakdowns.location_breakdown(current_orders, self.settings.location_top_n),
            platform_breakdown=breakdowns.platform_breakdown(current_orders),
            logistics_breakdown=breakdowns.carrier_breakdown(current_orders),
            kpi_metrics=SalesKpis(
                sales=KpiMetric(value=total_sales, percent_change=sales_change),
                customers=kpi(current_customers, previous_customers),
                orders=kpi(total_orders, len(previous_orders)),
                refunds=kpi(current_refunds.count, previous_refunds.count),
            ),
            average_order_value=total_sales / total_orders if total_orders > 0 else 0.0,
            top_add_ons=breakdowns.top_add_ons(current_orders, top_n),
            revenue_by_source=breakdowns.revenue_by_source(current_orders),
            status_breakdown=breakdowns.status_breakdown(all_in_range),
            cancellations_count=current_refunds.count,
            processing_orders=sum(1 for o in all_in_range if o.status in PROCESSING_STATUSES),
            delivered_orders=sum(1 for o in all_in_range if o.status == DELIVERED_STATUS),
            returning_customers=returning_vs_new.returning,
            returning_vs_new=returning_vs_new,
            top_customers=customers.top_customers(current_orders, top_n),
            customers_by_location=customers.customers_by_location(
                current_orders, self.settings.customer_location_top_n
            ),
            customers_by_platform=customers.customers_by_platform(current_orders),
        )

        logger.info(
            "Sales analytics computed",
            time_range=request.time_range.value,
            orders=total_orders,
            total_sales=total_sales,
            duration_seconds=(datetime.now() - started_at).total_seconds(),
        )
        return result

    def today_stats(self, snapshot: Snapshot, now: Optional[datetime] = None) -> TodayStats:
        """Totals for orders placed since midnight"""
        window = today_window(now, self.tz)
        todays = [o for o in snapshot.orders if o.effective_date >= window.start]
        paid = paid_orders(todays)
        refunds = refund_stats(todays)

        return TodayStats(
            sales=sum(o.total_amount for o in paid),
            orders=len(paid),
            units=_total_units(paid),
            customers=customers.count_unique_customers(paid),
            refunds=refunds.count,
            refunds_amount=refunds.total,
        )

    def inventory_analytics(
        self,
        snapshot: Snapshot,
        request: Optional[AnalyticsRequest] = None,
    ) -> InventoryAnalytics:
        """
        Build the inventory and restocking bundle.

        Stock figures describe the snapshot as it is now; sales rankings and
        restock activity use the requested range.
        """
        request = request or AnalyticsRequest()
        started_at = datetime.now()
        now = resolve_now(request.now, self.tz)
        current, previous = resolve_windows(request.time_range, now, self.tz)
        top_n = self._top_n(request)
        override = self._override(request)
        default_threshold = self.settings.default_low_stock_threshold
        products = snapshot.products

        orders_in_range = filter_orders(snapshot.orders, current)
        restocks_in_range = filter_restock_logs(snapshot.restock_logs, current)
        restocks_in_previous = filter_restock_logs(snapshot.restock_logs, previous)

        insights = inventory.restock_insights(restocks_in_range, products, top_n)
        previous_insights = inventory.restock_insights(restocks_in_previous, products, top_n)

        best = performance.with_stock_cover(
            performance.best_sellers(orders_in_range, products, top_n),
            products,
            snapshot.orders,
            now,
            self.settings.stock_cover_days,
        )

        result = InventoryAnalytics(
            overview=inventory.inventory_overview(products, override, default_threshold),
            restock_insights=insights,
            best_selling_products=best,
            top_products_by_revenue=performance.top_by_revenue(orders_in_range, products, top_n),
            slow_movers=performance.slow_movers(orders_in_range, products, top_n),
            restocks_over_time=series.restock_series(restocks_in_range, current, request.time_range.granularity),
            kpi_metrics=InventoryKpis(
                restocks=kpi(insights.total_restocks, previous_insights.total_restocks),
                units_restocked=kpi(insights.total_units_restocked, previous_insights.total_units_restocked),
            ),
            low_stock_list=inventory.low_stock_list(products, override, default_threshold),
            out_of_stock_list=inventory.out_of_stock_list(products, override, default_threshold),
            new_designs=lifecycle.new_design_analytics(
                products,
                snapshot.orders,
                snapshot.restock_logs,
                request.design_year or now.year,
                top_n,
            ),
        )

        logger.info(
            "Inventory analytics computed",
            time_range=request.time_range.value,
            products=len(products),
            low_stock=result.overview.low_stock_items,
            out_of_stock=result.overview.out_of_stock_items,
            duration_seconds=(datetime.now() - started_at).total_seconds(),
        )
        return result

    def discontinue_candidates(
        self,
        snapshot: Snapshot,
        request: Optional[AnalyticsRequest] = None,
    ) -> DiscontinueCandidatesResult:
        """Stocked products with no sales in the requested lookback period"""
        request = request or AnalyticsRequest()
        min_stock = request.discontinue_min_stock
        if min_stock is None:
            min_stock = self.settings.discontinue_min_stock

        result = lifecycle.discontinue_candidates(
            snapshot.products,
            snapshot.orders,
            snapshot.restock_logs,
            request.discontinue_period,
            min_stock=min_stock,
            limit=request.discontinue_limit or self.settings.discontinue_limit,
            now=request.now,
            tz=self.tz,
        )

        logger.info(
            "Discontinue candidates computed",
            period=request.discontinue_period.value,
            total_candidates=result.total_candidates,
        )
        return result

    def new_design_analytics(
        self,
        snapshot: Snapshot,
        request: Optional[AnalyticsRequest] = None,
    ) -> NewDesignAnalytics:
        """New design report for the requested year, or the current one"""
        request = request or AnalyticsRequest()
        design_year = request.design_year or resolve_now(request.now, self.tz).year

        return lifecycle.new_design_analytics(
            snapshot.products,
            snapshot.orders,
            snapshot.restock_logs,
            design_year,
            self._top_n(request),
        )


def _total_units(orders: Iterable[Order]) -> int:
    return sum(item.quantity for order in orders for item in order.items)
