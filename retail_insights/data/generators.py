"""
Synthetic Snapshot Generator

Generates realistic store data for testing and development.
Includes:
- Products with variants, new-design and discontinued flags
- Orders with line items, add-ons, logistics and legacy refund shapes
- Restock events

Records are produced as raw camelCase payloads, the same shape the order
service writes, so they go through the regular ingestion boundary.
"""

import uuid
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import numpy as np
from faker import Faker

from retail_insights.data.models import Snapshot, local_now
from retail_insights.ingestion.snapshot_loader import load_snapshot


# =============================================================================
# CONFIGURATION
# =============================================================================

STATES = ["Lagos", "Abuja", "Rivers", "Oyo", "Kano", "Enugu", "Delta", "Kaduna"]
SOURCES = ["WhatsApp", "Instagram", "Website", "Walk-in", "TikTok"]
CARRIERS = ["GIG Logistics", "DHL", "Kwik", "Sendbox"]
SERVICES = [("Lens Coating", 5000.0), ("Gift Wrap", 1500.0), ("Express Fitting", 3000.0)]
COLORS = ["Gold", "Silver", "Matte Black", "Tortoise", "Clear"]

ORDER_STATUSES = [
    ("Processing", 0.15),
    ("Lab Processing", 0.05),
    ("Quality Check", 0.05),
    ("Ready for Pickup", 0.05),
    ("Delivered", 0.60),
    ("Refunded", 0.05),
    ("Pending", 0.05),
]


# =============================================================================
# GENERATORS
# =============================================================================

class ProductGenerator:
    """Generate a product catalog"""

    def __init__(self, fake: Faker, rng: np.random.Generator, now: datetime):
        self.fake = fake
        self.rng = rng
        self.now = now

    def generate(self, n: int = 40) -> List[Dict[str, Any]]:
        """Generate n products"""
        products = []

        for _ in range(n):
            n_variants = int(self.rng.choice([1, 2, 3], p=[0.5, 0.3, 0.2]))
            base_price = float(self.rng.integers(5, 80)) * 1000
            variants = []
            for color in self.rng.choice(COLORS, size=n_variants, replace=False):
                # A fifth of variants sit at zero or near the threshold
                stock = int(self.rng.choice([0, int(self.rng.integers(1, 6)), int(self.rng.integers(6, 120))],
                                            p=[0.1, 0.1, 0.8]))
                variants.append({
                    "id": str(uuid.uuid4()),
                    "sku": f"SKU-{self.fake.unique.random_number(digits=8)}",
                    "variableValues": {"Color": str(color)},
                    "stock": stock,
                    "sellingPrice": base_price,
                })

            is_new_design = bool(self.rng.random() < 0.25)
            products.append({
                "id": str(uuid.uuid4()),
                "name": f"{self.fake.word().title()} Frame",
                "lowStockThreshold": int(self.rng.choice([3, 5, 10])),
                "createdAt": (self.now - timedelta(days=int(self.rng.integers(1, 720)))).isoformat(),
                "variants": variants,
                "isNewDesign": is_new_design,
                "designYear": self.now.year if is_new_design else None,
                "isDiscontinued": bool(self.rng.random() < 0.05),
            })

        return products


class OrderGenerator:
    """Generate orders against a product catalog"""

    def __init__(
        self,
        fake: Faker,
        rng: np.random.Generator,
        products: List[Dict[str, Any]],
        n_customers: int = 60,
    ):
        self.fake = fake
        self.rng = rng
        self.products = products
        self.customers = [
            {"name": fake.name(), "email": fake.email() if rng.random() > 0.2 else ""}
            for _ in range(n_customers)
        ]

    def _refund_fields(self, total: float) -> Dict[str, Any]:
        """Pick one or more legacy refund shapes"""
        fields: Dict[str, Any] = {}
        amount = round(total * float(self.rng.uniform(0.1, 1.0)), 2)
        shape = self.rng.integers(0, 4)
        if shape == 0:
            fields["refund"] = {"id": str(uuid.uuid4()), "amount": amount, "reason": "Damaged"}
        elif shape == 1:
            fields["refundedAmount"] = amount
        elif shape == 2:
            fields["partialRefunds"] = [round(amount / 2, 2), {"amount": round(amount / 2, 2)}]
        else:
            fields["refunds"] = [{"id": str(uuid.uuid4()), "amount": amount}]
        return fields

    def generate(
        self,
        n: int = 400,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """Generate n orders"""
        end_date = end_date or local_now()
        start_date = start_date or end_date - timedelta(days=365)

        statuses = [s[0] for s in ORDER_STATUSES]
        weights = [s[1] for s in ORDER_STATUSES]
        orders = []

        for _ in range(n):
            created_at = self.fake.date_time_between(start_date=start_date, end_date=end_date)
            customer = self.customers[int(self.rng.integers(0, len(self.customers)))]

            num_items = int(self.rng.choice([1, 2, 3], p=[0.6, 0.3, 0.1]))
            items = []
            subtotal = 0.0
            for _ in range(num_items):
                product = self.products[int(self.rng.integers(0, len(self.products)))]
                variant = product["variants"][int(self.rng.integers(0, len(product["variants"])))]
                quantity = int(self.rng.choice([1, 2, 3], p=[0.7, 0.2, 0.1]))
                items.append({
                    "productId": product["id"],
                    "variantId": variant["id"],
                    "quantity": quantity,
                    "unitPrice": variant["sellingPrice"],
                })
                subtotal += quantity * variant["sellingPrice"]

            services = []
            if self.rng.random() < 0.3:
                name, price = SERVICES[int(self.rng.integers(0, len(SERVICES)))]
                services.append({"serviceId": str(uuid.uuid4()), "name": name, "price": price})

            status = str(self.rng.choice(statuses, p=weights))
            total = subtotal + sum(s["price"] for s in services)

            order = {
                "id": str(uuid.uuid4()),
                "orderNumber": f"ORD-{self.fake.unique.random_number(digits=8)}",
                "customerName": customer["name"],
                "customerEmail": customer["email"],
                "deliveryState": str(self.rng.choice(STATES)) if self.rng.random() > 0.05 else "",
                "source": str(self.rng.choice(SOURCES)),
                "items": items,
                "services": services,
                "subtotal": subtotal,
                "totalAmount": total,
                "status": status,
                "createdAt": created_at.isoformat(),
            }
            if self.rng.random() < 0.5:
                order["orderDate"] = created_at.isoformat()
            if status in ("Delivered", "Ready for Pickup") or self.rng.random() < 0.2:
                order["logistics"] = {
                    "carrierId": str(uuid.uuid4()),
                    "carrierName": str(self.rng.choice(CARRIERS)),
                    "trackingNumber": self.fake.bothify("TRK-########"),
                    "dispatchDate": created_at.date().isoformat(),
                }
            if status == "Refunded" or self.rng.random() < 0.03:
                order.update(self._refund_fields(total))

            orders.append(order)

        return orders


class RestockGenerator:
    """Generate restock events"""

    def __init__(self, fake: Faker, rng: np.random.Generator, products: List[Dict[str, Any]]):
        self.fake = fake
        self.rng = rng
        self.products = products

    def generate(
        self,
        n: int = 120,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """Generate n restock events"""
        end_date = end_date or local_now()
        start_date = start_date or end_date - timedelta(days=365)

        logs = []
        for _ in range(n):
            product = self.products[int(self.rng.integers(0, len(self.products)))]
            variant = product["variants"][int(self.rng.integers(0, len(product["variants"])))]
            quantity = int(self.rng.integers(1, 50))
            logs.append({
                "id": str(uuid.uuid4()),
                "productId": product["id"],
                "variantId": variant["id"],
                "quantityAdded": quantity,
                "previousStock": variant["stock"],
                "newStock": variant["stock"] + quantity,
                "timestamp": self.fake.date_time_between(start_date=start_date, end_date=end_date).isoformat(),
                "performedBy": self.fake.first_name(),
            })

        return logs


# =============================================================================
# MAIN GENERATOR
# =============================================================================

class SnapshotGenerator:
    """Main snapshot generator orchestrator"""

    def __init__(self, seed: int = 42, now: Optional[datetime] = None):
        self.now = now or local_now()
        self.fake = Faker()
        self.fake.seed_instance(seed)
        self.rng = np.random.default_rng(seed)

    def generate_payload(
        self,
        n_products: int = 40,
        n_orders: int = 400,
        n_restocks: int = 120,
    ) -> Dict[str, List[Dict[str, Any]]]:
        """Generate raw record payloads"""
        products = ProductGenerator(self.fake, self.rng, self.now).generate(n_products)
        orders = OrderGenerator(self.fake, self.rng, products).generate(n_orders, end_date=self.now)
        restock_logs = RestockGenerator(self.fake, self.rng, products).generate(n_restocks, end_date=self.now)

        return {
            "products": products,
            "orders": orders,
            "restockLogs": restock_logs,
        }

    def generate(
        self,
        n_products: int = 40,
        n_orders: int = 400,
        n_restocks: int = 120,
    ) -> Snapshot:
        """Generate a loaded snapshot"""
        return load_snapshot(self.generate_payload(n_products, n_orders, n_restocks))
