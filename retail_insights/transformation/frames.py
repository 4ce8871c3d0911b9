"""
Record Frames

Flattens snapshot records into Polars DataFrames for aggregation.
Handles:
- Effective order dates (order date, falling back to creation time)
- Categorical cleanup (blank region/source/carrier become "Unknown")
- Line item explosion with per-line revenue
- Variant rows with resolved low stock thresholds
"""

from typing import Callable, Dict, Iterable, List, Optional

import polars as pl

from retail_insights.data.models import Order, Product, RestockLog

UNKNOWN = "Unknown"

ORDER_SCHEMA = {
    "order_id": pl.Utf8,
    "effective_date": pl.Datetime("us"),
    "status": pl.Utf8,
    "total_amount": pl.Float64,
    "delivery_state": pl.Utf8,
    "source": pl.Utf8,
    "carrier": pl.Utf8,
}

LINE_ITEM_SCHEMA = {
    "order_id": pl.Utf8,
    "effective_date": pl.Datetime("us"),
    "is_refunded": pl.Boolean,
    "product_id": pl.Utf8,
    "variant_id": pl.Utf8,
    "quantity": pl.Int64,
    "revenue": pl.Float64,
}

RESTOCK_SCHEMA = {
    "restock_id": pl.Utf8,
    "product_id": pl.Utf8,
    "variant_id": pl.Utf8,
    "quantity_added": pl.Int64,
    "timestamp": pl.Datetime("us"),
}

VARIANT_SCHEMA = {
    "product_id": pl.Utf8,
    "product_name": pl.Utf8,
    "variant_id": pl.Utf8,
    "variant_name": pl.Utf8,
    "stock": pl.Int64,
    "selling_price": pl.Float64,
    "threshold": pl.Int64,
}


def _columns(schema: Dict[str, pl.DataType]) -> Dict[str, List]:
    return {name: [] for name in schema}


def _category(value: Optional[str]) -> str:
    return value or UNKNOWN


def orders_frame(orders: Iterable[Order]) -> pl.DataFrame:
    """One row per order"""
    data = _columns(ORDER_SCHEMA)
    for order in orders:
        data["order_id"].append(order.id)
        data["effective_date"].append(order.effective_date)
        data["status"].append(order.status)
        data["total_amount"].append(float(order.total_amount))
        data["delivery_state"].append(_category(order.delivery_state))
        data["source"].append(_category(order.source))
        data["carrier"].append(_category(order.carrier_name))
    return pl.DataFrame(data, schema=ORDER_SCHEMA)


def line_items_frame(orders: Iterable[Order]) -> pl.DataFrame:
    """One row per order line item, in ledger order"""
    data = _columns(LINE_ITEM_SCHEMA)
    for order in orders:
        for item in order.items:
            data["order_id"].append(order.id)
            data["effective_date"].append(order.effective_date)
            data["is_refunded"].append(order.is_refunded)
            data["product_id"].append(item.product_id)
            data["variant_id"].append(item.variant_id)
            data["quantity"].append(int(item.quantity))
            data["revenue"].append(float(item.line_total))
    return pl.DataFrame(data, schema=LINE_ITEM_SCHEMA)


def restocks_frame(restock_logs: Iterable[RestockLog]) -> pl.DataFrame:
    """One row per restock event"""
    data = _columns(RESTOCK_SCHEMA)
    for log in restock_logs:
        data["restock_id"].append(log.id)
        data["product_id"].append(log.product_id)
        data["variant_id"].append(log.variant_id)
        data["quantity_added"].append(int(log.quantity_added))
        data["timestamp"].append(log.timestamp)
    return pl.DataFrame(data, schema=RESTOCK_SCHEMA)


def variants_frame(
    products: Iterable[Product],
    threshold_for: Callable[[Product], int],
) -> pl.DataFrame:
    """
    One row per variant with its product's effective low stock threshold.

    Args:
        products: Catalog products
        threshold_for: Resolves the threshold that applies to a product
    """
    data = _columns(VARIANT_SCHEMA)
    for product in products:
        threshold = threshold_for(product)
        for variant in product.variants:
            data["product_id"].append(product.id)
            data["product_name"].append(product.name)
            data["variant_id"].append(variant.id)
            data["variant_name"].append(variant.display_name)
            data["stock"].append(int(variant.stock))
            data["selling_price"].append(float(variant.selling_price))
            data["threshold"].append(int(threshold))
    return pl.DataFrame(data, schema=VARIANT_SCHEMA)
