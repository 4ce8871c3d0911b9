"""
Data Transformation Module
"""
from .frames import (
    UNKNOWN,
    line_items_frame,
    orders_frame,
    restocks_frame,
    variants_frame,
)

__all__ = [
    "UNKNOWN",
    "line_items_frame",
    "orders_frame",
    "restocks_frame",
    "variants_frame",
]
