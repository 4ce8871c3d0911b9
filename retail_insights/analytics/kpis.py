"""
KPI & Comparison Calculator
"""

import math
from dataclasses import dataclass
from typing import Union

Number = Union[int, float]


@dataclass(frozen=True)
class KpiMetric:
    """Current-period value with change versus the comparison window"""
    value: Number
    percent_change: float


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up"""
    return math.floor(value + 0.5)


def percent_change(current: Number, previous: Number) -> float:
    """
    Percent change from ``previous`` to ``current``.

    A zero baseline reports 100 for any positive current value and 0
    otherwise, instead of an undefined ratio.
    """
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return (current - previous) / previous * 100


def kpi(current: Number, previous: Number) -> KpiMetric:
    return KpiMetric(value=current, percent_change=percent_change(current, previous))


def share_percentage(value: Number, total: Number) -> int:
    """Rounded share of total; an empty total counts as 1"""
    return round_half_up(value / (total or 1) * 100)
