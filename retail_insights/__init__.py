"""
Retail Insights Analytics Engine

Aggregates order, catalog and restock snapshots into dashboard KPIs,
breakdowns, chart series and ranked product lists.
"""
from .analytics import AnalyticsEngine, AnalyticsRequest, DiscontinuePeriod, TimeRange
from .data import Snapshot
from .ingestion import load_snapshot, load_snapshot_file

__version__ = "1.0.0"

__all__ = [
    "AnalyticsEngine",
    "AnalyticsRequest",
    "DiscontinuePeriod",
    "TimeRange",
    "Snapshot",
    "load_snapshot",
    "load_snapshot_file",
]
