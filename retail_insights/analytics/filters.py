"""
Record Filter
"""

from typing import Iterable, List

from retail_insights.data.models import Order, RestockLog
from .windows import DateWindow


def filter_orders(
    orders: Iterable[Order],
    window: DateWindow,
    exclude_refunded: bool = True,
) -> List[Order]:
    """
    Orders whose effective date falls inside the window.

    Args:
        orders: Order ledger
        window: Inclusive window
        exclude_refunded: Drop orders with status "Refunded"
    """
    return [
        order for order in orders
        if window.contains(order.effective_date)
        and not (exclude_refunded and order.is_refunded)
    ]


def paid_orders(orders: Iterable[Order]) -> List[Order]:
    """Orders not marked refunded"""
    return [order for order in orders if not order.is_refunded]


def filter_restock_logs(restock_logs: Iterable[RestockLog], window: DateWindow) -> List[RestockLog]:
    return [log for log in restock_logs if window.contains(log.timestamp)]
