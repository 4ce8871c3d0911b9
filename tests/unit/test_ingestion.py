"""
Unit Tests - Ingestion and Snapshot Quality
"""
import json
from datetime import datetime
from zoneinfo import ZoneInfo

import polars as pl
import pytest
from pydantic import ValidationError

from retail_insights.analytics.breakdowns import status_breakdown
from retail_insights.data.models import Order, Variant
from retail_insights.ingestion import SnapshotLoader, load_snapshot, load_snapshot_file
from retail_insights.quality import (
    DataValidator,
    SnapshotValidationError,
    SnapshotValidator,
    ValidationStatus,
)


def _payload(**overrides):
    payload = {
        "products": [{
            "id": "p1",
            "name": "Aviator",
            "lowStockThreshold": 5,
            "createdAt": "2025-01-10T08:00:00",
            "variants": [{"id": "v1", "variableValues": {"Color": "Gold"}, "stock": 4, "sellingPrice": 25000}],
        }],
        "orders": [{
            "id": "o1",
            "customerName": "Ada",
            "totalAmount": 50000,
            "status": "Delivered",
            "items": [{"productId": "p1", "variantId": "v1", "quantity": 2, "unitPrice": 25000}],
            "refund": {"amount": 500},
            "refundedAmount": 200,
            "createdAt": "2025-06-01T10:00:00Z",
        }],
        "restockLogs": [{
            "id": "r1",
            "productId": "p1",
            "variantId": "v1",
            "quantityAdded": 10,
            "timestamp": "2025-05-01T09:00:00+01:00",
        }],
    }
    payload.update(overrides)
    return payload


class TestRecordModels:
    """Tests for payload parsing"""

    def test_order_refunds_normalized(self):
        """Test legacy refund fields collapse into entries"""
        order = Order.model_validate(_payload()["orders"][0])

        assert sum(e.amount for e in order.refund_entries) == 700

    def test_aware_timestamps_localized(self):
        """Test aware timestamps become naive local time"""
        order = Order.model_validate(_payload()["orders"][0])

        assert order.created_at == datetime(2025, 6, 1, 10, 0)
        assert order.created_at.tzinfo is None

    def test_blank_order_date_falls_back(self):
        """Test an empty order date uses creation time"""
        order = Order.model_validate({**_payload()["orders"][0], "orderDate": ""})

        assert order.effective_date == order.created_at

    def test_null_status_counts_as_pending(self):
        """Test a null status loads and is reported as Pending"""
        payload = _payload()
        payload["orders"][0]["status"] = None

        snapshot = load_snapshot(payload)

        assert snapshot.orders[0].status == ""
        assert [(e.label, e.value) for e in status_breakdown(snapshot.orders)] == [("Pending", 1)]

    def test_snake_case_accepted(self):
        """Test snake_case field names parse"""
        order = Order.model_validate({"id": "o2", "customer_name": "Bola", "created_at": "2025-06-01T10:00:00"})

        assert order.customer_name == "Bola"

    def test_variant_display_name(self):
        """Test variant name from its variable values"""
        assert Variant(id="v", variable_values={"Color": "Gold", "Size": "M"}).display_name == "Gold / M"
        assert Variant(id="v").display_name == "Default"

    def test_records_are_frozen(self):
        """Test records cannot be mutated"""
        order = Order.model_validate(_payload()["orders"][0])

        with pytest.raises(ValidationError):
            order.status = "Refunded"


class TestSnapshotLoader:
    """Tests for the ingestion boundary"""

    def test_load(self):
        """Test a payload loads into a snapshot"""
        snapshot = load_snapshot(_payload())

        assert len(snapshot.orders) == 1
        assert len(snapshot.products) == 1
        assert snapshot.restock_logs[0].timestamp == datetime(2025, 5, 1, 8, 0)

    def test_malformed_record_raises(self):
        """Test a record missing required fields raises"""
        with pytest.raises(ValidationError):
            load_snapshot(_payload(orders=[{"id": "o1"}]))

    def test_negative_stock_rejected(self):
        """Test negative stock fails the quality gate"""
        payload = _payload()
        payload["products"][0]["variants"][0]["stock"] = -1

        with pytest.raises(SnapshotValidationError) as exc_info:
            load_snapshot(payload)

        assert not exc_info.value.result.passed

    def test_duplicate_order_ids_rejected(self):
        """Test duplicate order ids fail the quality gate"""
        payload = _payload()
        payload["orders"] = payload["orders"] * 2

        with pytest.raises(SnapshotValidationError):
            load_snapshot(payload)

    def test_validation_can_be_disabled(self):
        """Test the quality gate can be switched off"""
        payload = _payload()
        payload["products"][0]["variants"][0]["stock"] = -1

        snapshot = SnapshotLoader(enable_validation=False).load(payload)

        assert snapshot.products[0].total_stock == -1

    def test_load_file(self, tmp_path):
        """Test loading a JSON export"""
        path = tmp_path / "snapshot.json"
        path.write_text(json.dumps(_payload()), encoding="utf-8")

        snapshot = load_snapshot_file(path)

        assert snapshot.orders[0].id == "o1"

    def test_zone_applies_to_aware_timestamps(self):
        """Test the loader localizes aware timestamps into the given zone"""
        snapshot = load_snapshot(_payload(), tz=ZoneInfo("Pacific/Kiritimati"))

        assert snapshot.orders[0].created_at == datetime(2025, 6, 2, 0, 0)
        assert snapshot.restock_logs[0].timestamp == datetime(2025, 5, 1, 22, 0)

    def test_missing_file(self, tmp_path):
        """Test a missing export raises FileNotFoundError"""
        with pytest.raises(FileNotFoundError):
            load_snapshot_file(tmp_path / "missing.json")


class TestSnapshotValidator:
    """Tests for snapshot contract checks"""

    def test_clean_snapshot_passes(self):
        """Test a clean snapshot passes every check"""
        result = SnapshotValidator().validate(load_snapshot(_payload(), enable_validation=False))

        assert result.status == ValidationStatus.PASSED
        assert result.success_rate == 100.0

    def test_unknown_product_is_warning(self):
        """Test unknown product references only warn"""
        payload = _payload()
        payload["restockLogs"][0]["productId"] = "ghost"

        result = SnapshotValidator().validate(load_snapshot(payload, enable_validation=False))

        assert result.status == ValidationStatus.PARTIAL
        assert result.passed
        assert result.warning_count == 1

    def test_generated_snapshot_passes(self, generated_snapshot):
        """Test generated snapshots pass the gate"""
        assert SnapshotValidator().validate(generated_snapshot).passed


class TestDataValidator:
    """Tests for DataValidator"""

    def test_not_null_check_fails(self):
        """Test not null check with null values"""
        df = pl.DataFrame({"id": [1, None, 3]})

        result = DataValidator().add_not_null_check("id").validate(df)

        assert result.status == ValidationStatus.FAILED
        assert result.failed_checks == 1

    def test_unique_check_fails(self):
        """Test unique check with duplicates"""
        df = pl.DataFrame({"id": [1, 2, 1]})

        result = DataValidator().add_unique_check("id").validate(df)

        assert result.status == ValidationStatus.FAILED

    def test_range_check(self):
        """Test range check counts rows on both sides"""
        df = pl.DataFrame({"price": [10.0, 50.0, -5.0, 200.0]})

        result = DataValidator().add_range_check("price", min_value=0, max_value=100).validate(df)

        assert result.status == ValidationStatus.FAILED
        assert result.checks[0].failed_rows == 2

    def test_strict_mode_fails_on_warning(self):
        """Test strict mode turns warnings into failure"""
        df = pl.DataFrame({"product_id": ["a", "b"]}, schema={"product_id": pl.Utf8})

        result = (
            DataValidator(strict_mode=True)
            .add_referential_integrity_check("product_id", ["a"])
            .validate(df)
        )

        assert result.status == ValidationStatus.FAILED

    def test_merge_keeps_strict_mode(self):
        """Test a merged result still fails on warnings when one side was strict"""
        df = pl.DataFrame({"product_id": ["a", "b"]}, schema={"product_id": pl.Utf8})
        lenient = DataValidator().add_not_null_check("product_id").validate(df)
        strict = (
            DataValidator(strict_mode=True)
            .add_referential_integrity_check("product_id", ["a"])
            .validate(df)
        )

        merged = lenient.merge(strict)

        assert merged.status == ValidationStatus.FAILED
        assert merged.warning_count == 1
        assert merged.total_checks == 2
