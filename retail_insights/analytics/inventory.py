"""
Inventory State Aggregator

Present-moment stock totals and low/out-of-stock classification, plus
restock activity rankings. A variant is out of stock at zero units and low
on stock when at or below its product's effective threshold.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

import polars as pl
from pydantic import BaseModel, ConfigDict, Field

from retail_insights.data.models import Product, RestockLog
from retail_insights.transformation.frames import restocks_frame, variants_frame

UNKNOWN_PRODUCT = "Unknown Product"
DEFAULT_LOW_STOCK_THRESHOLD = 5


class LowStockOverride(BaseModel):
    """Global low stock threshold applied in place of per-product thresholds"""

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    value: int = Field(default=DEFAULT_LOW_STOCK_THRESHOLD, ge=0)


@dataclass(frozen=True)
class InventoryOverview:
    total_products: int
    total_variants: int
    total_units_in_stock: int
    total_inventory_value: float
    low_stock_items: int
    out_of_stock_items: int


@dataclass(frozen=True)
class StockAlert:
    """Variant flagged as low or out of stock"""
    product_id: str
    product_name: str
    variant_id: str
    variant_name: str
    stock: int
    threshold: int


@dataclass(frozen=True)
class RestockRank:
    product_id: str
    product_name: str
    restock_count: int
    total_units: int


@dataclass(frozen=True)
class RestockInsights:
    """Restock activity over a set of logs"""
    total_restocks: int
    total_units_restocked: int
    most_restocked_products: List[RestockRank]
    most_restocked_by_units: List[RestockRank]


def resolve_threshold(
    product: Product,
    override: Optional[LowStockOverride] = None,
    default: int = DEFAULT_LOW_STOCK_THRESHOLD,
) -> int:
    """Effective low stock threshold for a product"""
    if override is not None and override.enabled:
        return override.value
    if product.low_stock_threshold is not None:
        return product.low_stock_threshold
    return default


def _stock_frame(
    products: Iterable[Product],
    override: Optional[LowStockOverride],
    default: int,
) -> pl.DataFrame:
    return variants_frame(products, lambda product: resolve_threshold(product, override, default)).with_columns(
        (pl.col("stock") == 0).alias("out_of_stock"),
        ((pl.col("stock") > 0) & (pl.col("stock") <= pl.col("threshold"))).alias("low_stock"),
    )


def inventory_overview(
    products: Iterable[Product],
    override: Optional[LowStockOverride] = None,
    default: int = DEFAULT_LOW_STOCK_THRESHOLD,
) -> InventoryOverview:
    """
    Stock totals across the catalog.

    Args:
        products: Catalog products
        override: Optional global threshold
        default: Threshold for products without one
    """
    products = list(products)
    frame = _stock_frame(products, override, default)

    return InventoryOverview(
        total_products=len(products),
        total_variants=frame.height,
        total_units_in_stock=int(frame["stock"].sum()),
        total_inventory_value=float((frame["stock"] * frame["selling_price"]).sum()),
        low_stock_items=int(frame["low_stock"].sum()),
        out_of_stock_items=int(frame["out_of_stock"].sum()),
    )


def _alerts(frame: pl.DataFrame) -> List[StockAlert]:
    return [
        StockAlert(
            product_id=row["product_id"],
            product_name=row["product_name"],
            variant_id=row["variant_id"],
            variant_name=row["variant_name"],
            stock=row["stock"],
            threshold=row["threshold"],
        )
        for row in frame.iter_rows(named=True)
    ]


def low_stock_list(
    products: Iterable[Product],
    override: Optional[LowStockOverride] = None,
    default: int = DEFAULT_LOW_STOCK_THRESHOLD,
) -> List[StockAlert]:
    """Low stock variants, fewest units first"""
    frame = _stock_frame(products, override, default).filter(pl.col("low_stock"))
    return _alerts(frame.sort("stock", maintain_order=True))


def out_of_stock_list(
    products: Iterable[Product],
    override: Optional[LowStockOverride] = None,
    default: int = DEFAULT_LOW_STOCK_THRESHOLD,
) -> List[StockAlert]:
    """Variants with no units left, in catalog order"""
    return _alerts(_stock_frame(products, override, default).filter(pl.col("out_of_stock")))


def restock_totals(
    restock_logs: Iterable[RestockLog],
    since: Optional[datetime] = None,
) -> Dict[str, Tuple[int, int]]:
    """
    Restock count and units per product, in first-logged order.

    Args:
        restock_logs: Restock events
        since: Only count events at or after this time
    """
    frame = restocks_frame(restock_logs)
    if since is not None:
        frame = frame.filter(pl.col("timestamp") >= since)

    grouped = (
        frame.group_by("product_id", maintain_order=True)
        .agg(
            pl.len().alias("restock_count"),
            pl.col("quantity_added").sum().alias("total_units"),
        )
    )
    return {
        row["product_id"]: (row["restock_count"], row["total_units"])
        for row in grouped.iter_rows(named=True)
    }


def restock_insights(
    restock_logs: Iterable[RestockLog],
    products: Iterable[Product],
    limit: int = 5,
) -> RestockInsights:
    """Restock totals and the most restocked products by event count and by units"""
    restock_logs = list(restock_logs)
    names = {product.id: product.name for product in products}

    ranks = [
        RestockRank(
            product_id=product_id,
            product_name=names.get(product_id) or UNKNOWN_PRODUCT,
            restock_count=count,
            total_units=units,
        )
        for product_id, (count, units) in restock_totals(restock_logs).items()
    ]

    return RestockInsights(
        total_restocks=len(restock_logs),
        total_units_restocked=sum(log.quantity_added for log in restock_logs),
        most_restocked_products=sorted(ranks, key=lambda rank: rank.restock_count, reverse=True)[:limit],
        most_restocked_by_units=sorted(ranks, key=lambda rank: rank.total_units, reverse=True)[:limit],
    )
