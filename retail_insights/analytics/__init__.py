"""
Analytics Aggregation Module
"""
from .engine import (
    AnalyticsEngine,
    AnalyticsRequest,
    InventoryAnalytics,
    SalesAnalytics,
    TodayStats,
)
from .inventory import LowStockOverride
from .kpis import KpiMetric, percent_change
from .lifecycle import DiscontinueCandidatesResult, NewDesignAnalytics
from .series import ChartDataPoint
from .windows import DateWindow, DiscontinuePeriod, Granularity, TimeRange

__all__ = [
    "AnalyticsEngine",
    "AnalyticsRequest",
    "InventoryAnalytics",
    "SalesAnalytics",
    "TodayStats",
    "LowStockOverride",
    "KpiMetric",
    "percent_change",
    "DiscontinueCandidatesResult",
    "NewDesignAnalytics",
    "ChartDataPoint",
    "DateWindow",
    "DiscontinuePeriod",
    "Granularity",
    "TimeRange",
]
