"""
Time Window Resolver

Maps named ranges to concrete ``[start, end]`` windows in local wall-clock
time, together with the equal-length window immediately before them.
"""

import math
from dataclasses import dataclass
from datetime import datetime, time, timedelta, tzinfo
from enum import Enum
from typing import Optional, Tuple

from retail_insights.data.models import local_now, localize

TICK = timedelta(microseconds=1)
ONE_DAY = timedelta(days=1)


class Granularity(str, Enum):
    """Chart bucket unit"""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class TimeRange(str, Enum):
    """Dashboard range selector"""
    LAST_7_DAYS = "7d"
    LAST_30_DAYS = "30d"
    YEAR_TO_DATE = "year"

    @classmethod
    def _missing_(cls, value):
        return _TIME_RANGE_ALIASES.get(str(value).strip().lower())

    @property
    def granularity(self) -> Granularity:
        return {
            TimeRange.LAST_7_DAYS: Granularity.DAY,
            TimeRange.LAST_30_DAYS: Granularity.WEEK,
            TimeRange.YEAR_TO_DATE: Granularity.MONTH,
        }[self]


_TIME_RANGE_ALIASES = {
    "last-7-days": TimeRange.LAST_7_DAYS,
    "7-day": TimeRange.LAST_7_DAYS,
    "last-30-days": TimeRange.LAST_30_DAYS,
    "30-day": TimeRange.LAST_30_DAYS,
    "year-to-date": TimeRange.YEAR_TO_DATE,
    "ytd": TimeRange.YEAR_TO_DATE,
}


class DiscontinuePeriod(str, Enum):
    """Lookback used for discontinue candidates"""
    LAST_30_DAYS = "30d"
    LAST_90_DAYS = "90d"
    YEAR_TO_DATE = "year"

    @classmethod
    def _missing_(cls, value):
        return _DISCONTINUE_ALIASES.get(str(value).strip().lower())


_DISCONTINUE_ALIASES = {
    "last-30-days": DiscontinuePeriod.LAST_30_DAYS,
    "last-90-days": DiscontinuePeriod.LAST_90_DAYS,
    "year-to-date": DiscontinuePeriod.YEAR_TO_DATE,
    "ytd": DiscontinuePeriod.YEAR_TO_DATE,
}


@dataclass(frozen=True)
class DateWindow:
    """Inclusive timestamp range"""
    start: datetime
    end: datetime

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def days(self) -> int:
        """Length in days, rounded up"""
        return math.ceil(self.duration / ONE_DAY)

    def contains(self, value: datetime) -> bool:
        return self.start <= value <= self.end


def resolve_now(now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> datetime:
    """Caller-supplied or wall-clock now, as naive local time in ``tz``"""
    return localize(now, tz) if now is not None else local_now(tz)


def start_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.min)


def end_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.max)


def start_of_year(value: datetime) -> datetime:
    return datetime(value.year, 1, 1)


def resolve_window(
    time_range: TimeRange,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> DateWindow:
    """
    Resolve a range selector to its current window.

    Args:
        time_range: Range selector
        now: Reference time; defaults to wall-clock
        tz: Zone that defines calendar days; defaults to the configured zone

    Returns:
        Window from the first day's midnight to the last tick of today
    """
    now = resolve_now(now, tz)
    end = end_of_day(now)

    if time_range == TimeRange.LAST_7_DAYS:
        start = start_of_day(now - timedelta(days=6))
    elif time_range == TimeRange.LAST_30_DAYS:
        start = start_of_day(now - timedelta(days=29))
    else:
        start = start_of_year(now)

    return DateWindow(start=start, end=end)


def comparison_window(window: DateWindow) -> DateWindow:
    """Equal-length window ending one tick before ``window`` starts"""
    end = window.start - TICK
    return DateWindow(start=end - window.duration, end=end)


def resolve_windows(
    time_range: TimeRange,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> Tuple[DateWindow, DateWindow]:
    """Current window and its comparison window"""
    current = resolve_window(time_range, now, tz)
    return current, comparison_window(current)


def today_window(now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> DateWindow:
    """From today's midnight onwards, with no upper bound"""
    return DateWindow(start=start_of_day(resolve_now(now, tz)), end=datetime.max)


def discontinue_window(
    period: DiscontinuePeriod,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> DateWindow:
    """
    Lookback window for discontinue candidates.

    Day-based periods reach back from the current time of day; the
    year-to-date period starts at January 1 midnight. Both end at ``now``.
    """
    now = resolve_now(now, tz)

    if period == DiscontinuePeriod.LAST_30_DAYS:
        start = now - timedelta(days=30)
    elif period == DiscontinuePeriod.LAST_90_DAYS:
        start = now - timedelta(days=90)
    else:
        start = start_of_year(now)

    return DateWindow(start=start, end=now)
