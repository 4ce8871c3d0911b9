"""
Customer Metrics

Customers are identified by email when one is present, otherwise by their
lower-cased name.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional

import polars as pl

from retail_insights.data.models import Order
from retail_insights.transformation.frames import UNKNOWN
from .breakdowns import BreakdownEntry
from .kpis import share_percentage

CUSTOMER_SCHEMA = {
    "customer_key": pl.Utf8,
    "delivery_state": pl.Utf8,
    "source": pl.Utf8,
}


@dataclass(frozen=True)
class ReturningVsNew:
    """Split of in-range customers by whether they ordered before the range"""
    returning: int
    new: int
    returning_percentage: int


@dataclass(frozen=True)
class TopCustomer:
    name: str
    email: Optional[str]
    total_spent: float
    order_count: int


def customer_key(order: Order) -> str:
    """Deduplication key for the customer on an order"""
    return order.customer_email or order.customer_name.lower()


def count_unique_customers(orders: Iterable[Order]) -> int:
    return len({customer_key(order) for order in orders})


def first_order_dates(orders: Iterable[Order]) -> Dict[str, datetime]:
    """Earliest effective order date per customer"""
    first_dates: Dict[str, datetime] = {}

    for order in orders:
        key = customer_key(order)
        existing = first_dates.get(key)
        if existing is None or order.effective_date < existing:
            first_dates[key] = order.effective_date

    return first_dates


def count_new_customers(all_orders: Iterable[Order], range_start: datetime) -> int:
    """Customers whose first-ever order falls on or after range_start"""
    return sum(1 for first_date in first_order_dates(all_orders).values() if first_date >= range_start)


def returning_vs_new(
    orders_in_range: Iterable[Order],
    all_orders: Iterable[Order],
    range_start: datetime,
) -> ReturningVsNew:
    """
    Classify the customers ordering inside a range.

    Args:
        orders_in_range: Orders placed in the range
        all_orders: Full ledger used to find each customer's first order
        range_start: Start of the range
    """
    first_dates = first_order_dates(all_orders)
    in_range = {customer_key(order) for order in orders_in_range}

    new = 0
    returning = 0
    for key in in_range:
        first_date = first_dates.get(key)
        if first_date is not None and first_date >= range_start:
            new += 1
        else:
            returning += 1

    return ReturningVsNew(
        returning=returning,
        new=new,
        returning_percentage=share_percentage(returning, new + returning),
    )


def top_customers(orders: Iterable[Order], limit: int = 5) -> List[TopCustomer]:
    """Customers by total spent, descending"""
    totals: Dict[str, dict] = {}

    for order in orders:
        key = customer_key(order)
        entry = totals.setdefault(key, {
            "name": order.customer_name,
            "email": order.customer_email,
            "total_spent": 0.0,
            "order_count": 0,
        })
        entry["total_spent"] += order.total_amount
        entry["order_count"] += 1

        if order.customer_email and not entry["email"]:
            entry["email"] = order.customer_email
        # keyed by name: keep the latest spelling
        if order.customer_name and entry["name"].lower() == key:
            entry["name"] = order.customer_name

    ranked = sorted(totals.values(), key=lambda entry: entry["total_spent"], reverse=True)
    return [TopCustomer(**entry) for entry in ranked[:limit]]


def _customers_frame(orders: Iterable[Order]) -> pl.DataFrame:
    data = {name: [] for name in CUSTOMER_SCHEMA}
    for order in orders:
        data["customer_key"].append(customer_key(order))
        data["delivery_state"].append(order.delivery_state or UNKNOWN)
        data["source"].append(order.source or UNKNOWN)
    return pl.DataFrame(data, schema=CUSTOMER_SCHEMA)


def _unique_customers_by(orders: Iterable[Order], key: str) -> List[BreakdownEntry]:
    frame = _customers_frame(orders)
    total = frame["customer_key"].n_unique()
    ranked = (
        frame.group_by(key, maintain_order=True)
        .agg(pl.col("customer_key").n_unique().alias("value"))
        .sort("value", descending=True, maintain_order=True)
    )
    return [
        BreakdownEntry(label=row[key], value=row["value"], percentage=share_percentage(row["value"], total))
        for row in ranked.iter_rows(named=True)
    ]


def customers_by_location(orders: Iterable[Order], limit: int = 6) -> List[BreakdownEntry]:
    """Unique customers per delivery region, top regions only"""
    return _unique_customers_by(orders, "delivery_state")[:limit]


def customers_by_platform(orders: Iterable[Order]) -> List[BreakdownEntry]:
    """Unique customers per sales platform"""
    return _unique_customers_by(orders, "source")
