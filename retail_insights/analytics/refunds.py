"""
Refund Resolver

Totals the refund entries normalized at load time. Entries from every
legacy shape are summed.
"""

from dataclasses import dataclass
from typing import Iterable

from retail_insights.data.models import Order


@dataclass(frozen=True)
class RefundStats:
    """Orders with any refund and their refunded total"""
    count: int
    total: float


def refunded_amount(order: Order) -> float:
    """Total refunded on an order across all refund shapes"""
    return sum((entry.amount for entry in order.refund_entries), 0.0)


def has_refund(order: Order) -> bool:
    return refunded_amount(order) > 0


def refund_stats(orders: Iterable[Order]) -> RefundStats:
    """Count and total of orders carrying any refund"""
    count = 0
    total = 0.0

    for order in orders:
        amount = refunded_amount(order)
        if amount > 0:
            count += 1
            total += amount

    return RefundStats(count=count, total=total)
