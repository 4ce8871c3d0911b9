"""
Breakdown & Ranking Engine

Categorical groupings of orders with counts and rounded percentages.
Ties keep the order in which keys first appear in the ledger.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Union

import polars as pl

from retail_insights.data.models import DELIVERED_STATUS, Order
from retail_insights.transformation.frames import orders_frame
from .kpis import round_half_up, share_percentage

OTHERS = "Others"
DEFAULT_STATUS = "Pending"


@dataclass(frozen=True)
class BreakdownEntry:
    """Share of one categorical key"""
    label: str
    value: Union[int, float]
    percentage: int


@dataclass(frozen=True)
class CarrierBreakdownEntry:
    """Orders handed to a carrier and the share delivered"""
    label: str
    orders_shipped: int
    on_time_rate: int


@dataclass(frozen=True)
class TopAddOn:
    """Add-on service revenue"""
    name: str
    revenue: float
    count: int


def _ranked(frame: pl.DataFrame, key: str, value_expr: pl.Expr) -> pl.DataFrame:
    """Group by key in first-appearance order, then sort descending (stable)"""
    return (
        frame.group_by(key, maintain_order=True)
        .agg(value_expr.alias("value"))
        .sort("value", descending=True, maintain_order=True)
    )


def _entries(ranked: pl.DataFrame, key: str, total: Union[int, float]) -> List[BreakdownEntry]:
    return [
        BreakdownEntry(label=row[key], value=row["value"], percentage=share_percentage(row["value"], total))
        for row in ranked.iter_rows(named=True)
    ]


def count_breakdown(orders: Iterable[Order], key: str) -> List[BreakdownEntry]:
    """
    Order counts per distinct key, descending.

    Args:
        orders: Orders to group
        key: ``delivery_state``, ``source`` or ``carrier``; blanks are "Unknown"
    """
    frame = orders_frame(orders)
    return _entries(_ranked(frame, key, pl.len()), key, frame.height)


def location_breakdown(orders: Iterable[Order], top_n: int = 5) -> List[BreakdownEntry]:
    """Top regions, with every remaining order rolled into "Others" """
    frame = orders_frame(orders)
    total = frame.height
    top = _ranked(frame, "delivery_state", pl.len()).head(top_n)

    entries = _entries(top, "delivery_state", total)
    others = total - sum(entry.value for entry in entries)
    if others > 0:
        entries.append(BreakdownEntry(label=OTHERS, value=others, percentage=share_percentage(others, total)))

    return entries


def platform_breakdown(orders: Iterable[Order]) -> List[BreakdownEntry]:
    """Order counts per sales platform, no rollup"""
    return count_breakdown(orders, "source")


def carrier_breakdown(orders: Iterable[Order]) -> List[CarrierBreakdownEntry]:
    """Orders per carrier with the rounded delivered rate"""
    ranked = (
        orders_frame(orders)
        .group_by("carrier", maintain_order=True)
        .agg(
            pl.len().alias("shipped"),
            (pl.col("status") == DELIVERED_STATUS).sum().alias("delivered"),
        )
        .sort("shipped", descending=True, maintain_order=True)
    )

    return [
        CarrierBreakdownEntry(
            label=row["carrier"],
            orders_shipped=row["shipped"],
            on_time_rate=round_half_up(row["delivered"] / row["shipped"] * 100) if row["shipped"] else 0,
        )
        for row in ranked.iter_rows(named=True)
    ]


def status_breakdown(orders: Iterable[Order]) -> List[BreakdownEntry]:
    """Order counts per lifecycle status; blank statuses count as Pending"""
    frame = orders_frame(orders).with_columns(
        pl.when(pl.col("status") == "")
        .then(pl.lit(DEFAULT_STATUS))
        .otherwise(pl.col("status"))
        .alias("status")
    )
    return _entries(_ranked(frame, "status", pl.len()), "status", frame.height)


def revenue_by_source(orders: Iterable[Order]) -> List[BreakdownEntry]:
    """Order revenue per sales platform as a share of total revenue"""
    frame = orders_frame(orders)
    total = frame["total_amount"].sum()
    return _entries(_ranked(frame, "source", pl.col("total_amount").sum()), "source", total)


def top_add_ons(orders: Iterable[Order], limit: int = 5) -> List[TopAddOn]:
    """Add-on services by revenue"""
    totals: Dict[str, List[float]] = {}

    for order in orders:
        for service in order.services:
            revenue_count = totals.setdefault(service.name, [0.0, 0])
            revenue_count[0] += service.price
            revenue_count[1] += 1

    ranked = sorted(totals.items(), key=lambda item: item[1][0], reverse=True)
    return [
        TopAddOn(name=name, revenue=revenue, count=count)
        for name, (revenue, count) in ranked[:limit]
    ]
