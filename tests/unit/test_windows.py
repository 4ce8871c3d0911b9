"""
Unit Tests - Time Windows
"""
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from retail_insights.analytics.series import week_count
from retail_insights.analytics.windows import (
    TICK,
    DateWindow,
    DiscontinuePeriod,
    Granularity,
    TimeRange,
    comparison_window,
    discontinue_window,
    resolve_now,
    resolve_window,
    resolve_windows,
    today_window,
)


class TestTimeRange:
    """Tests for range selector parsing"""

    @pytest.mark.parametrize("value,expected", [
        ("7d", TimeRange.LAST_7_DAYS),
        ("last-7-days", TimeRange.LAST_7_DAYS),
        ("30d", TimeRange.LAST_30_DAYS),
        ("last-30-days", TimeRange.LAST_30_DAYS),
        ("year", TimeRange.YEAR_TO_DATE),
        ("year-to-date", TimeRange.YEAR_TO_DATE),
    ])
    def test_aliases_parse(self, value, expected):
        """Test canonical identifiers and aliases"""
        assert TimeRange(value) is expected

    def test_unknown_range_rejected(self):
        """Test unknown identifiers raise at the boundary"""
        with pytest.raises(ValueError):
            TimeRange("last-week")

    def test_granularity(self):
        """Test each range's bucket unit"""
        assert TimeRange.LAST_7_DAYS.granularity == Granularity.DAY
        assert TimeRange.LAST_30_DAYS.granularity == Granularity.WEEK
        assert TimeRange.YEAR_TO_DATE.granularity == Granularity.MONTH

    def test_discontinue_period_aliases(self):
        """Test discontinue period aliases"""
        assert DiscontinuePeriod("last-90-days") is DiscontinuePeriod.LAST_90_DAYS
        with pytest.raises(ValueError):
            DiscontinuePeriod("60d")


class TestResolveWindow:
    """Tests for window resolution"""

    def test_seven_days(self, now):
        """Test seven calendar days ending today"""
        window = resolve_window(TimeRange.LAST_7_DAYS, now)

        assert window.start == datetime(2025, 6, 12)
        assert window.end == datetime(2025, 6, 18, 23, 59, 59, 999999)

    def test_thirty_days(self, now):
        """Test thirty calendar days ending today"""
        window = resolve_window(TimeRange.LAST_30_DAYS, now)

        assert window.start == datetime(2025, 5, 20)
        assert window.days == 30
        assert week_count(window) == 5

    def test_year_to_date(self, now):
        """Test January 1 through today"""
        window = resolve_window(TimeRange.YEAR_TO_DATE, now)

        assert window.start == datetime(2025, 1, 1)
        assert window.end.date() == now.date()

    @pytest.mark.parametrize("time_range", list(TimeRange))
    def test_comparison_window_is_contiguous(self, now, time_range):
        """Test the comparison window ends one tick before the current one"""
        current, previous = resolve_windows(time_range, now)

        assert previous.end + TICK == current.start
        assert previous.duration == current.duration
        assert current.end >= current.start

    def test_seven_day_comparison_bounds(self, now):
        """Test previous seven-day window bounds"""
        previous = comparison_window(resolve_window(TimeRange.LAST_7_DAYS, now))

        assert previous.start == datetime(2025, 6, 5)
        assert previous.end == datetime(2025, 6, 11, 23, 59, 59, 999999)

    def test_aware_now_is_localized(self):
        """Test aware timestamps convert to the analytics zone"""
        aware = datetime(2025, 6, 18, 15, 30, tzinfo=timezone(timedelta(hours=1)))

        assert resolve_now(aware) == datetime(2025, 6, 18, 14, 30)

    def test_zone_defines_calendar_days(self):
        """Test an explicit zone decides which day an aware now falls on"""
        aware = datetime(2025, 6, 18, 23, 30, tzinfo=timezone.utc)

        window = resolve_window(TimeRange.LAST_7_DAYS, aware, ZoneInfo("Pacific/Kiritimati"))

        assert window.start == datetime(2025, 6, 13)
        assert window.end == datetime(2025, 6, 19, 23, 59, 59, 999999)
        assert today_window(aware, ZoneInfo("Pacific/Kiritimati")).start == datetime(2025, 6, 19)

    def test_contains_is_inclusive(self, now):
        """Test both window edges are contained"""
        window = resolve_window(TimeRange.LAST_7_DAYS, now)

        assert window.contains(window.start)
        assert window.contains(window.end)
        assert not window.contains(window.start - TICK)


class TestOtherWindows:
    """Tests for today and discontinue lookback windows"""

    def test_today_window_is_open_ended(self, now):
        """Test today's window has no upper bound"""
        window = today_window(now)

        assert window.start == datetime(2025, 6, 18)
        assert window.contains(now + timedelta(days=3))

    @pytest.mark.parametrize("period,start", [
        (DiscontinuePeriod.LAST_30_DAYS, datetime(2025, 5, 19, 15, 30)),
        (DiscontinuePeriod.LAST_90_DAYS, datetime(2025, 3, 20, 15, 30)),
        (DiscontinuePeriod.YEAR_TO_DATE, datetime(2025, 1, 1)),
    ])
    def test_discontinue_window(self, now, period, start):
        """Test lookback start for each period"""
        window = discontinue_window(period, now)

        assert window == DateWindow(start=start, end=now)
