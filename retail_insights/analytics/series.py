"""
Series Bucketizer

Groups a filtered record frame into an ordered chart series spanning a
window. Buckets are zero-initialized, so empty days, weeks or months are
still reported:

- Daily: one bucket per calendar day, labeled by weekday
- Weekly: ``ceil(window_days / 7)`` buckets labeled ``W1..Wn``
- Monthly: twelve fixed buckets ``Jan..Dec`` by calendar month, any year
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from typing import Any, Dict, Iterable, List, Optional, Union

import polars as pl

from retail_insights.data.models import REFUNDED_STATUS, Order, RestockLog
from retail_insights.transformation.frames import orders_frame, restocks_frame
from .windows import DateWindow, Granularity, today_window

WEEKDAY_LABELS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
MONTH_LABELS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
HOURLY_BUCKETS = 12


@dataclass(frozen=True)
class ChartDataPoint:
    """One chart bucket"""
    label: str
    value: Union[int, float]


def _bucket_totals(
    frame: pl.DataFrame,
    bucket_expr: pl.Expr,
    value_column: Optional[str],
) -> Dict[Any, Union[int, float]]:
    """Sum value_column (or count rows) per bucket key"""
    value_expr = pl.col(value_column).sum() if value_column else pl.len()
    grouped = (
        frame.with_columns(bucket_expr.alias("bucket"))
        .group_by("bucket")
        .agg(value_expr.alias("value"))
    )
    return dict(zip(grouped["bucket"].to_list(), grouped["value"].to_list()))


def week_count(window: DateWindow) -> int:
    return max(1, math.ceil(window.days / 7))


def bucketize(
    frame: pl.DataFrame,
    window: DateWindow,
    granularity: Granularity,
    date_column: str,
    value_column: Optional[str] = None,
) -> List[ChartDataPoint]:
    """
    Build a chart series from a record frame.

    Args:
        frame: Records to accumulate
        window: Window the series spans; rows outside it are ignored
        granularity: Bucket unit
        date_column: Datetime column used for bucket assignment
        value_column: Column summed per bucket; rows are counted when omitted

    Returns:
        Ordered chart points
    """
    frame = frame.filter(pl.col(date_column).is_between(window.start, window.end, closed="both"))
    date = pl.col(date_column)

    if granularity == Granularity.DAY:
        totals = _bucket_totals(frame, date.dt.date(), value_column)
        points = []
        day = window.start.date()
        while day <= window.end.date():
            points.append(ChartDataPoint(label=WEEKDAY_LABELS[day.weekday()], value=totals.get(day, 0)))
            day += timedelta(days=1)
        return points

    if granularity == Granularity.WEEK:
        n_weeks = week_count(window)
        days_since_start = (date - pl.lit(window.start)).dt.total_days()
        bucket = (days_since_start // 7 + 1).clip(upper_bound=n_weeks)
        totals = _bucket_totals(frame, bucket, value_column)
        return [
            ChartDataPoint(label=f"W{week}", value=totals.get(week, 0))
            for week in range(1, n_weeks + 1)
        ]

    totals = _bucket_totals(frame, date.dt.month(), value_column)
    return [
        ChartDataPoint(label=label, value=totals.get(month, 0))
        for month, label in enumerate(MONTH_LABELS, start=1)
    ]


def sales_series(orders: Iterable[Order], window: DateWindow, granularity: Granularity) -> List[ChartDataPoint]:
    """Order totals per bucket"""
    return bucketize(orders_frame(orders), window, granularity, "effective_date", "total_amount")


def order_count_series(orders: Iterable[Order], window: DateWindow, granularity: Granularity) -> List[ChartDataPoint]:
    """Order counts per bucket"""
    return bucketize(orders_frame(orders), window, granularity, "effective_date")


def restock_series(
    restock_logs: Iterable[RestockLog],
    window: DateWindow,
    granularity: Granularity,
) -> List[ChartDataPoint]:
    """Units restocked per bucket"""
    return bucketize(restocks_frame(restock_logs), window, granularity, "timestamp", "quantity_added")


def hourly_sales_trend(
    orders: Iterable[Order],
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> List[float]:
    """Today's non-refunded sales in two-hour buckets"""
    window = today_window(now, tz)
    frame = orders_frame(orders).filter(
        (pl.col("effective_date") >= window.start) & (pl.col("status") != REFUNDED_STATUS)
    )
    bucket = (pl.col("effective_date").dt.hour() // 2).clip(upper_bound=HOURLY_BUCKETS - 1)
    totals = _bucket_totals(frame, bucket, "total_amount")
    return [float(totals.get(i, 0.0)) for i in range(HOURLY_BUCKETS)]
