"""
Record Models

Immutable snapshot models for the records the analytics engine reads:
orders (with line items, add-on services and logistics), products with
variants, and restock events. Payloads use the order service's camelCase
field names; snake_case names are accepted as well.
"""

from datetime import datetime, tzinfo
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator
from pydantic.alias_generators import to_camel

from retail_insights.config import get_settings
from .refunds import RefundEntry, extract_refund_entries

REFUNDED_STATUS = "Refunded"
DELIVERED_STATUS = "Delivered"


def localize(value: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Convert an aware timestamp to naive wall-clock time in ``tz`` (default: configured zone)"""
    if value.tzinfo is None:
        return value
    return value.astimezone(tz or get_settings().analytics.tzinfo).replace(tzinfo=None)


def local_now(tz: Optional[tzinfo] = None) -> datetime:
    """Current naive wall-clock time in ``tz`` (default: configured zone)"""
    return datetime.now(tz or get_settings().analytics.tzinfo).replace(tzinfo=None)


def _context_tz(info: ValidationInfo) -> Optional[tzinfo]:
    """Zone passed by the loader through the validation context"""
    return (info.context or {}).get("tz")


class RecordModel(BaseModel):
    """Base for snapshot records"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class OrderItem(RecordModel):
    """Order line item"""
    product_id: str
    variant_id: Optional[str] = None
    quantity: int = 0
    unit_price: float = 0.0

    @property
    def line_total(self) -> float:
        return self.quantity * self.unit_price


class OrderService(RecordModel):
    """Add-on service sold with an order"""
    service_id: Optional[str] = None
    name: str
    price: float = 0.0


class LogisticsInfo(RecordModel):
    """Fulfillment details"""
    carrier_id: Optional[str] = None
    carrier_name: Optional[str] = None
    tracking_number: Optional[str] = None
    dispatch_date: Optional[str] = None


class Order(RecordModel):
    """Order ledger entry"""
    id: str
    order_number: Optional[str] = None
    customer_id: Optional[str] = None
    customer_name: str = ""
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    delivery_state: Optional[str] = None
    source: Optional[str] = None
    items: Tuple[OrderItem, ...] = ()
    services: Tuple[OrderService, ...] = ()
    subtotal: float = 0.0
    total_amount: float = 0.0
    status: str = ""
    logistics: Optional[LogisticsInfo] = None
    refund_entries: Tuple[RefundEntry, ...] = ()
    order_date: Optional[datetime] = None
    created_at: datetime

    @model_validator(mode="before")
    @classmethod
    def normalize_refunds(cls, data: Any) -> Any:
        """Collapse the legacy refund shapes into refund_entries"""
        if isinstance(data, dict) and "refund_entries" not in data and "refundEntries" not in data:
            data = dict(data)
            data["refund_entries"] = tuple(extract_refund_entries(data))
        return data

    @field_validator("order_date", mode="before")
    @classmethod
    def blank_order_date(cls, v: Any) -> Any:
        if v == "":
            return None
        return v

    @field_validator("status", mode="before")
    @classmethod
    def missing_status(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("order_date", "created_at")
    @classmethod
    def localize_timestamps(cls, v: Optional[datetime], info: ValidationInfo) -> Optional[datetime]:
        return localize(v, _context_tz(info)) if v is not None else None

    @property
    def effective_date(self) -> datetime:
        """Order date, falling back to creation time"""
        return self.order_date or self.created_at

    @property
    def is_refunded(self) -> bool:
        return self.status == REFUNDED_STATUS

    @property
    def carrier_name(self) -> Optional[str]:
        return self.logistics.carrier_name if self.logistics else None


class Variant(RecordModel):
    """Sellable product variant"""
    id: str
    sku: Optional[str] = None
    variable_values: Dict[str, str] = Field(default_factory=dict)
    stock: int = 0
    selling_price: float = 0.0

    @property
    def display_name(self) -> str:
        return " / ".join(self.variable_values.values()) or "Default"


class Product(RecordModel):
    """Catalog product"""
    id: str
    name: str
    low_stock_threshold: Optional[int] = None
    created_at: datetime
    variants: Tuple[Variant, ...] = ()
    is_new_design: bool = False
    design_year: Optional[int] = None
    is_discontinued: bool = False

    @field_validator("created_at")
    @classmethod
    def localize_created_at(cls, v: datetime, info: ValidationInfo) -> datetime:
        return localize(v, _context_tz(info))

    @property
    def total_stock(self) -> int:
        return sum(variant.stock for variant in self.variants)


class RestockLog(RecordModel):
    """Stock replenishment event"""
    id: str
    product_id: str
    variant_id: Optional[str] = None
    quantity_added: int = 0
    previous_stock: Optional[int] = None
    new_stock: Optional[int] = None
    timestamp: datetime
    performed_by: Optional[str] = None

    @field_validator("timestamp")
    @classmethod
    def localize_timestamp(cls, v: datetime, info: ValidationInfo) -> datetime:
        return localize(v, _context_tz(info))


class Snapshot(RecordModel):
    """Immutable input set for one analytics call"""
    orders: Tuple[Order, ...] = ()
    products: Tuple[Product, ...] = ()
    restock_logs: Tuple[RestockLog, ...] = ()
