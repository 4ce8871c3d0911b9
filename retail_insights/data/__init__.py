"""
Record Models Module
"""
from .models import (
    LogisticsInfo,
    Order,
    OrderItem,
    OrderService,
    Product,
    RestockLog,
    Snapshot,
    Variant,
)
from .refunds import RefundEntry, RefundShape, extract_refund_entries

__all__ = [
    "LogisticsInfo",
    "Order",
    "OrderItem",
    "OrderService",
    "Product",
    "RestockLog",
    "Snapshot",
    "Variant",
    "RefundEntry",
    "RefundShape",
    "extract_refund_entries",
]
