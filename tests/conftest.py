"""
Test Suite Configuration
"""
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

import pytest

from retail_insights.config import Settings, get_settings
from retail_insights.data.generators import SnapshotGenerator
from retail_insights.data.models import Order, Product, RestockLog, Snapshot

# Wednesday afternoon
NOW = datetime(2025, 6, 18, 15, 30)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached per process; start every test from the environment"""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(APP_ENV="testing", DEBUG=True)


@pytest.fixture
def make_order() -> Callable[..., Order]:
    """Build an order from camelCase payload fields"""
    counter = {"n": 0}

    def factory(
        when: datetime = NOW,
        total: float = 1000.0,
        status: str = "Paid",
        items: Optional[list] = None,
        **fields: Any,
    ) -> Order:
        counter["n"] += 1
        payload: Dict[str, Any] = {
            "id": f"ord-{counter['n']}",
            "customerName": f"Customer {counter['n']}",
            "totalAmount": total,
            "subtotal": total,
            "status": status,
            "items": items or [],
            "createdAt": when.isoformat(),
        }
        payload.update(fields)
        return Order.model_validate(payload)

    return factory


@pytest.fixture
def make_product() -> Callable[..., Product]:
    """Build a product whose variants hold the given stock levels"""

    def factory(
        product_id: str,
        stocks: tuple = (10,),
        price: float = 100.0,
        threshold: Optional[int] = 5,
        created_at: datetime = NOW - timedelta(days=100),
        **fields: Any,
    ) -> Product:
        payload: Dict[str, Any] = {
            "id": product_id,
            "name": f"Product {product_id}",
            "lowStockThreshold": threshold,
            "createdAt": created_at.isoformat(),
            "variants": [
                {
                    "id": f"{product_id}-v{i}",
                    "variableValues": {"Color": f"Color {i}"},
                    "stock": stock,
                    "sellingPrice": price,
                }
                for i, stock in enumerate(stocks)
            ],
        }
        payload.update(fields)
        return Product.model_validate(payload)

    return factory


@pytest.fixture
def make_restock() -> Callable[..., RestockLog]:
    counter = {"n": 0}

    def factory(product_id: str, quantity: int, when: datetime = NOW - timedelta(days=1)) -> RestockLog:
        counter["n"] += 1
        return RestockLog.model_validate({
            "id": f"rst-{counter['n']}",
            "productId": product_id,
            "variantId": f"{product_id}-v0",
            "quantityAdded": quantity,
            "timestamp": when.isoformat(),
        })

    return factory


def line(product_id: str, quantity: int, unit_price: float = 100.0) -> Dict[str, Any]:
    return {"productId": product_id, "variantId": f"{product_id}-v0", "quantity": quantity, "unitPrice": unit_price}


@pytest.fixture
def item() -> Callable[..., Dict[str, Any]]:
    """Build a line item payload"""
    return line


@pytest.fixture(scope="session")
def generated_snapshot() -> Snapshot:
    """Seeded synthetic snapshot that went through the loader"""
    return SnapshotGenerator(seed=7, now=NOW).generate(n_products=30, n_orders=300, n_restocks=80)
