"""
Product Performance Ranker

Best sellers, top revenue and slow movers over a set of orders, plus a
stock cover estimate for best sellers. Refunded orders never count as
sales.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import polars as pl

from retail_insights.data.models import Order, Product
from retail_insights.transformation.frames import line_items_frame
from .inventory import UNKNOWN_PRODUCT
from .kpis import round_half_up
from .windows import DateWindow


@dataclass(frozen=True)
class ProductPerformance:
    product_id: str
    product_name: str
    units_sold: int
    revenue: float
    stock_remaining: int
    stock_cover_days: Optional[int] = None


def product_sales(
    orders: Iterable[Order],
    window: Optional[DateWindow] = None,
) -> Dict[str, Tuple[int, float]]:
    """
    Units sold and revenue per product from non-refunded line items.

    Args:
        orders: Orders to aggregate
        window: Restrict to orders dated inside this window

    Returns:
        ``{product_id: (units, revenue)}`` in first-sold order
    """
    frame = line_items_frame(orders).filter(~pl.col("is_refunded"))
    if window is not None:
        frame = frame.filter(pl.col("effective_date").is_between(window.start, window.end, closed="both"))

    grouped = (
        frame.group_by("product_id", maintain_order=True)
        .agg(
            pl.col("quantity").sum().alias("units"),
            pl.col("revenue").sum().alias("revenue"),
        )
    )
    return {
        row["product_id"]: (row["units"], row["revenue"])
        for row in grouped.iter_rows(named=True)
    }


def _performance(
    sales: Dict[str, Tuple[int, float]],
    products: Sequence[Product],
) -> List[ProductPerformance]:
    catalog = {product.id: product for product in products}
    rows = []

    for product_id, (units, revenue) in sales.items():
        product = catalog.get(product_id)
        rows.append(ProductPerformance(
            product_id=product_id,
            product_name=(product.name if product else None) or UNKNOWN_PRODUCT,
            units_sold=units,
            revenue=revenue,
            stock_remaining=product.total_stock if product else 0,
        ))

    return rows


def best_sellers(orders: Iterable[Order], products: Sequence[Product], limit: int = 5) -> List[ProductPerformance]:
    """Products by units sold, descending"""
    rows = _performance(product_sales(orders), products)
    return sorted(rows, key=lambda row: row.units_sold, reverse=True)[:limit]


def top_by_revenue(orders: Iterable[Order], products: Sequence[Product], limit: int = 5) -> List[ProductPerformance]:
    """Products by revenue, descending"""
    rows = _performance(product_sales(orders), products)
    return sorted(rows, key=lambda row: row.revenue, reverse=True)[:limit]


def slow_movers(orders: Iterable[Order], products: Sequence[Product], limit: int = 5) -> List[ProductPerformance]:
    """
    Stocked products by units sold, ascending.

    Every product with stock is ranked, including those that sold nothing.
    Products without stock are left out even when they sold.
    """
    sales = product_sales(orders)
    rows = []

    for product in products:
        stock = product.total_stock
        if stock <= 0:
            continue
        units, revenue = sales.get(product.id, (0, 0.0))
        rows.append(ProductPerformance(
            product_id=product.id,
            product_name=product.name or UNKNOWN_PRODUCT,
            units_sold=units,
            revenue=revenue,
            stock_remaining=stock,
        ))

    return sorted(rows, key=lambda row: row.units_sold)[:limit]


def trailing_units_sold(product_id: str, orders: Iterable[Order], now: datetime, days: int = 30) -> int:
    """Units of a product sold from ``now - days`` onwards"""
    cutoff = now - timedelta(days=days)
    frame = line_items_frame(orders).filter(
        ~pl.col("is_refunded")
        & (pl.col("product_id") == product_id)
        & (pl.col("effective_date") >= cutoff)
    )
    return int(frame["quantity"].sum())


def stock_cover_days(
    product: Optional[Product],
    orders: Iterable[Order],
    now: datetime,
    days: int = 30,
) -> Optional[int]:
    """
    Days the current stock lasts at the trailing average daily sales rate.

    Args:
        product: Product to estimate; None when the id is not in the catalog
        orders: Order ledger
        now: Reference time
        days: Trailing days used for the average

    Returns:
        Rounded days of cover; 0 without stock; None when nothing sold in
        the trailing window or the product is unknown
    """
    if product is None:
        return None

    stock = product.total_stock
    if stock == 0:
        return 0

    units = trailing_units_sold(product.id, orders, now, days)
    if units == 0:
        return None

    return round_half_up(stock / (units / days))


def with_stock_cover(
    rows: Iterable[ProductPerformance],
    products: Sequence[Product],
    orders: Sequence[Order],
    now: datetime,
    days: int = 30,
) -> List[ProductPerformance]:
    """Attach stock cover estimates to ranked products"""
    catalog = {product.id: product for product in products}
    return [
        replace(row, stock_cover_days=stock_cover_days(catalog.get(row.product_id), orders, now, days))
        for row in rows
    ]
