"""
Snapshot Validation Module

Rule-based contract checks run at the ingestion boundary, before any
analytics are computed. The engine assumes these hold and does not defend
against them.

Features:
- Null checks
- Uniqueness checks
- Range/boundary checks (non-negative stock and quantities)
- Referential integrity checks (reported as warnings)
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import polars as pl
import structlog

from retail_insights.data.models import Product, Snapshot
from retail_insights.transformation.frames import (
    line_items_frame,
    orders_frame,
    restocks_frame,
    variants_frame,
)

logger = structlog.get_logger(__name__)


class ValidationSeverity(str, Enum):
    """Severity levels for validation failures"""
    ERROR = "error"  # Rejects the snapshot
    WARNING = "warning"  # Logged, snapshot accepted
    INFO = "info"


class ValidationStatus(str, Enum):
    """Overall validation status"""
    PASSED = "passed"
    FAILED = "failed"
    PARTIAL = "partial"


@dataclass
class ValidationCheck:
    """Single validation check result"""
    name: str
    passed: bool
    severity: ValidationSeverity
    message: str
    details: Optional[Dict[str, Any]] = None
    failed_rows: int = 0
    total_rows: int = 0


@dataclass
class ValidationResult:
    """Complete validation suite result"""
    status: ValidationStatus
    total_checks: int
    passed_checks: int
    failed_checks: int
    warning_count: int
    checks: List[ValidationCheck] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None
    strict_mode: bool = False

    @property
    def passed(self) -> bool:
        return self.status != ValidationStatus.FAILED

    @property
    def success_rate(self) -> float:
        """Percentage of passed checks"""
        if self.total_checks == 0:
            return 100.0
        return (self.passed_checks / self.total_checks) * 100

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        """Combine two results into one; strict if either side was strict"""
        checks = self.checks + other.checks
        return _summarize(checks, self.started_at, other.completed_at, self.strict_mode or other.strict_mode)


class SnapshotValidationError(ValueError):
    """Raised when a snapshot breaks a data contract"""

    def __init__(self, result: ValidationResult):
        self.result = result
        failed = [c.message for c in result.checks if not c.passed and c.severity == ValidationSeverity.ERROR]
        super().__init__(f"Snapshot validation failed: {failed}")


def _summarize(
    checks: List[ValidationCheck],
    started_at: datetime,
    completed_at: Optional[datetime],
    strict_mode: bool = False,
) -> ValidationResult:
    passed_checks = sum(1 for c in checks if c.passed)
    failed_checks = sum(1 for c in checks if not c.passed and c.severity == ValidationSeverity.ERROR)
    warning_count = sum(1 for c in checks if not c.passed and c.severity == ValidationSeverity.WARNING)

    if failed_checks > 0:
        status = ValidationStatus.FAILED
    elif warning_count > 0 and strict_mode:
        status = ValidationStatus.FAILED
    elif warning_count > 0:
        status = ValidationStatus.PARTIAL
    else:
        status = ValidationStatus.PASSED

    return ValidationResult(
        status=status,
        total_checks=len(checks),
        passed_checks=passed_checks,
        failed_checks=failed_checks,
        warning_count=warning_count,
        checks=checks,
        started_at=started_at,
        completed_at=completed_at,
        strict_mode=strict_mode,
    )


class DataValidator:
    """
    Frame validator with a chainable check suite.

    Example:
        validator = DataValidator()
        validator.add_not_null_check("product_id")
        validator.add_range_check("stock", min_value=0)
        result = validator.validate(df)
    """

    def __init__(self, name: str = "frame", strict_mode: bool = False):
        self.name = name
        self.strict_mode = strict_mode  # Fail on any warning
        self._checks: List[Callable[[pl.DataFrame], ValidationCheck]] = []

    @staticmethod
    def _missing_column(name: str, column: str, severity: ValidationSeverity) -> ValidationCheck:
        return ValidationCheck(
            name=name,
            passed=False,
            severity=severity,
            message=f"Column '{column}' not found",
        )

    def add_not_null_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for null values in column"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"{self.name}.not_null_{column}"
            if column not in df.columns:
                return self._missing_column(name, column, severity)

            null_count = df[column].null_count()
            total = len(df)
            passed = null_count == 0

            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {null_count} null values" if not passed else f"Column '{column}' has no null values",
                details={"null_count": null_count},
                failed_rows=null_count,
                total_rows=total,
            )

        self._checks.append(check)
        return self

    def add_unique_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for uniqueness of column values"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"{self.name}.unique_{column}"
            if column not in df.columns:
                return self._missing_column(name, column, severity)

            total = len(df)
            unique_count = df[column].n_unique()
            duplicate_count = total - unique_count
            passed = duplicate_count == 0

            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {duplicate_count} duplicate values" if not passed else f"Column '{column}' values are unique",
                details={"unique_count": unique_count, "duplicate_count": duplicate_count},
                failed_rows=duplicate_count,
                total_rows=total,
            )

        self._checks.append(check)
        return self

    def add_range_check(
        self,
        column: str,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for values within specified range"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"{self.name}.range_{column}"
            if column not in df.columns:
                return self._missing_column(name, column, severity)

            conditions = []
            if min_value is not None:
                conditions.append(pl.col(column) < min_value)
            if max_value is not None:
                conditions.append(pl.col(column) > max_value)

            if not conditions:
                return ValidationCheck(
                    name=name,
                    passed=True,
                    severity=severity,
                    message="No range specified",
                )

            combined = conditions[0]
            for cond in conditions[1:]:
                combined = combined | cond

            out_of_range = df.filter(combined).height
            total = len(df)
            passed = out_of_range == 0

            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {out_of_range} values outside range [{min_value}, {max_value}]" if not passed else "All values in range",
                details={"min": min_value, "max": max_value, "out_of_range_count": out_of_range},
                failed_rows=out_of_range,
                total_rows=total,
            )

        self._checks.append(check)
        return self

    def add_non_negative_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for values >= 0"""
        return self.add_range_check(column, min_value=0, severity=severity)

    def add_referential_integrity_check(
        self,
        column: str,
        reference_values: List[Any],
        severity: ValidationSeverity = ValidationSeverity.WARNING,
    ) -> "DataValidator":
        """Add referential integrity check"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"{self.name}.ref_integrity_{column}"
            if column not in df.columns:
                return self._missing_column(name, column, severity)

            references = pl.Series("reference", reference_values, dtype=df.schema[column])
            orphans = df.filter(
                ~pl.col(column).is_in(references) & pl.col(column).is_not_null()
            ).height
            total = len(df)
            passed = orphans == 0

            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {orphans} orphan records" if not passed else "Referential integrity maintained",
                details={"orphan_count": orphans},
                failed_rows=orphans,
                total_rows=total,
            )

        self._checks.append(check)
        return self

    def validate(self, df: pl.DataFrame) -> ValidationResult:
        """
        Run all validation checks on DataFrame.

        Args:
            df: DataFrame to validate

        Returns:
            ValidationResult with all check results
        """
        started_at = datetime.now(timezone.utc)
        results = []

        for check_func in self._checks:
            result = check_func(df)
            results.append(result)

            if not result.passed:
                logger.warning(
                    "Validation check failed",
                    check=result.name,
                    message=result.message,
                    severity=result.severity.value,
                )

        return _summarize(results, started_at, datetime.now(timezone.utc), self.strict_mode)


def _stored_threshold(product: Product) -> int:
    return product.low_stock_threshold if product.low_stock_threshold is not None else 0


class SnapshotValidator:
    """
    Contract checks for a whole snapshot.

    Negative stock or quantities and duplicate identifiers are errors.
    Line items and restock events pointing at products missing from the
    catalog are warnings; the engine reports them as unknown products.
    """

    def validate(self, snapshot: Snapshot) -> ValidationResult:
        """Validate every record set in the snapshot"""
        product_ids = [p.id for p in snapshot.products]

        variants = variants_frame(snapshot.products, _stored_threshold)
        products_result = (
            DataValidator("variants")
            .add_not_null_check("variant_id")
            .add_non_negative_check("stock")
            .add_non_negative_check("threshold")
            .validate(variants)
        )
        catalog_result = (
            DataValidator("products")
            .add_unique_check("product_id")
            .validate(pl.DataFrame({"product_id": product_ids}, schema={"product_id": pl.Utf8}))
        )
        orders_result = (
            DataValidator("orders")
            .add_unique_check("order_id")
            .add_not_null_check("effective_date")
            .validate(orders_frame(snapshot.orders))
        )
        line_items_result = (
            DataValidator("line_items")
            .add_non_negative_check("quantity")
            .add_referential_integrity_check("product_id", product_ids)
            .validate(line_items_frame(snapshot.orders))
        )
        restocks_result = (
            DataValidator("restock_logs")
            .add_unique_check("restock_id")
            .add_non_negative_check("quantity_added")
            .add_referential_integrity_check("product_id", product_ids)
            .validate(restocks_frame(snapshot.restock_logs))
        )

        result = products_result
        for other in (catalog_result, orders_result, line_items_result, restocks_result):
            result = result.merge(other)

        logger.info(
            "Snapshot validation complete",
            status=result.status.value,
            passed=result.passed_checks,
            failed=result.failed_checks,
            warnings=result.warning_count,
        )
        return result
