"""
Data Quality Module
"""
from .validators import (
    DataValidator,
    SnapshotValidationError,
    SnapshotValidator,
    ValidationResult,
    ValidationSeverity,
    ValidationStatus,
)

__all__ = [
    "DataValidator",
    "SnapshotValidationError",
    "SnapshotValidator",
    "ValidationResult",
    "ValidationSeverity",
    "ValidationStatus",
]
