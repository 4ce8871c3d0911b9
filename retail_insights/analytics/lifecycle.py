"""
Lifecycle Analyzers

Two catalog lifecycle reports:
- New design performance for products tagged as new in a design year
- Discontinue candidates: stocked products with no sales in a lookback period
"""

from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Dict, Iterable, List, Optional, Sequence

import structlog

from retail_insights.data.models import Order, Product, RestockLog
from .inventory import restock_totals
from .performance import product_sales
from .windows import ONE_DAY, DiscontinuePeriod, discontinue_window, resolve_now, start_of_year

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class NewDesignPerformance:
    product_id: str
    product_name: str
    design_year: int
    stock_remaining: int
    units_sold: int
    restock_count: int
    units_restocked: int


@dataclass(frozen=True)
class NewDesignAnalytics:
    """New design report for one design year"""
    total_new_designs: int
    new_designs_restocked: int
    total_restocks_for_new_designs: int
    total_units_restocked_for_new_designs: int
    top_restocked_new_designs: List[NewDesignPerformance]
    all_new_designs: List[NewDesignPerformance]


@dataclass(frozen=True)
class DiscontinueCandidate:
    product_id: str
    product_name: str
    current_stock: int
    units_sold_in_period: int
    last_sold_at: Optional[datetime]
    restock_count_this_year: int
    days_in_stock: int
    is_discontinued: bool


@dataclass(frozen=True)
class DiscontinueCandidatesResult:
    candidates: List[DiscontinueCandidate]
    total_candidates: int


def new_design_analytics(
    products: Iterable[Product],
    orders: Sequence[Order],
    restock_logs: Sequence[RestockLog],
    design_year: int,
    limit: int = 5,
) -> NewDesignAnalytics:
    """
    Lifetime sales and restock activity of a year's new designs.

    Sales and restocks are counted over the whole ledger, not a window.

    Args:
        products: Catalog products
        orders: Order ledger
        restock_logs: Restock events
        design_year: Design year to report on
        limit: Size of the top restocked list
    """
    designs = [p for p in products if p.is_new_design and p.design_year == design_year]
    sales = product_sales(orders)
    restocks = restock_totals(restock_logs)

    all_designs = []
    for product in designs:
        restock_count, units_restocked = restocks.get(product.id, (0, 0))
        all_designs.append(NewDesignPerformance(
            product_id=product.id,
            product_name=product.name,
            design_year=product.design_year or design_year,
            stock_remaining=product.total_stock,
            units_sold=sales.get(product.id, (0, 0.0))[0],
            restock_count=restock_count,
            units_restocked=units_restocked,
        ))

    top = sorted(all_designs, key=lambda d: (d.restock_count, d.units_restocked), reverse=True)

    return NewDesignAnalytics(
        total_new_designs=len(designs),
        new_designs_restocked=sum(1 for d in all_designs if d.restock_count > 0),
        total_restocks_for_new_designs=sum(d.restock_count for d in all_designs),
        total_units_restocked_for_new_designs=sum(d.units_restocked for d in all_designs),
        top_restocked_new_designs=top[:limit],
        all_new_designs=all_designs,
    )


def last_sold_dates(orders: Iterable[Order]) -> Dict[str, datetime]:
    """Latest effective date each product appeared on a non-refunded order"""
    last_sold: Dict[str, datetime] = {}

    for order in orders:
        if order.is_refunded:
            continue
        for item in order.items:
            current = last_sold.get(item.product_id)
            if current is None or order.effective_date > current:
                last_sold[item.product_id] = order.effective_date

    return last_sold


def discontinue_candidates(
    products: Iterable[Product],
    orders: Sequence[Order],
    restock_logs: Sequence[RestockLog],
    period: DiscontinuePeriod,
    min_stock: int = 5,
    limit: int = 50,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> DiscontinueCandidatesResult:
    """
    Stocked products that sold nothing during the lookback period.

    Args:
        products: Catalog products
        orders: Order ledger
        restock_logs: Restock events
        period: Lookback period
        min_stock: Minimum total stock to qualify
        limit: Maximum candidates returned
        now: Reference time; defaults to wall-clock
        tz: Zone for an aware or missing ``now``; defaults to the configured zone

    Returns:
        Candidates by stock then days in stock, both descending, with the
        count before truncation
    """
    now = resolve_now(now, tz)
    window = discontinue_window(period, now)

    period_sales = product_sales(orders, window)
    last_sold = last_sold_dates(orders)
    restocks_this_year = restock_totals(restock_logs, since=start_of_year(now))

    candidates = []
    for product in products:
        stock = product.total_stock
        units = period_sales.get(product.id, (0, 0.0))[0]
        if stock < min_stock or units != 0:
            continue

        candidates.append(DiscontinueCandidate(
            product_id=product.id,
            product_name=product.name,
            current_stock=stock,
            units_sold_in_period=units,
            last_sold_at=last_sold.get(product.id),
            restock_count_this_year=restocks_this_year.get(product.id, (0, 0))[0],
            days_in_stock=(now - product.created_at) // ONE_DAY,
            is_discontinued=product.is_discontinued,
        ))

    candidates.sort(key=lambda c: (c.current_stock, c.days_in_stock), reverse=True)

    logger.debug(
        "Discontinue candidates resolved",
        period=period.value,
        window_start=window.start.isoformat(),
        candidates=len(candidates),
    )
    return DiscontinueCandidatesResult(candidates=candidates[:limit], total_candidates=len(candidates))
