"""
Snapshot Loader

Ingestion boundary between the record store and the analytics engine.
Turns raw record payloads (camelCase mappings as exported by the store, or a
JSON file holding them) into an immutable ``Snapshot``:
- Record parsing and type coercion
- Legacy refund shape normalization
- Timestamp localization
- Contract checks before any analytics run
"""

import json
from datetime import datetime, tzinfo
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence, Union

import structlog
from pydantic import ValidationError

from retail_insights.config import get_settings
from retail_insights.data.models import Order, Product, RestockLog, Snapshot
from retail_insights.quality.validators import SnapshotValidationError, SnapshotValidator

logger = structlog.get_logger(__name__)


class SnapshotLoader:
    """
    Builds snapshots from raw payloads.

    Example:
        loader = SnapshotLoader()
        snapshot = loader.load({"orders": [...], "products": [...], "restockLogs": [...]})
    """

    def __init__(self, enable_validation: Optional[bool] = None, tz: Optional[tzinfo] = None):
        settings = get_settings()
        self.tz = tz or settings.analytics.tzinfo
        if enable_validation is None:
            enable_validation = settings.quality.enable_snapshot_validation
        self.enable_validation = enable_validation
        self.validator = SnapshotValidator()

    @staticmethod
    def _records(payload: Mapping[str, Any], *keys: str) -> Sequence[Any]:
        for key in keys:
            if payload.get(key) is not None:
                return payload[key]
        return ()

    def load(self, payload: Mapping[str, Any]) -> Snapshot:
        """
        Parse and check a raw payload.

        Args:
            payload: Mapping with ``orders``, ``products`` and
                ``restockLogs`` (or ``restock_logs``) record lists

        Returns:
            Immutable snapshot

        Raises:
            pydantic.ValidationError: A record is malformed
            SnapshotValidationError: The snapshot breaks a data contract
        """
        started_at = datetime.now()
        context = {"tz": self.tz}

        try:
            snapshot = Snapshot(
                orders=tuple(Order.model_validate(o, context=context) for o in self._records(payload, "orders")),
                products=tuple(Product.model_validate(p, context=context) for p in self._records(payload, "products")),
                restock_logs=tuple(
                    RestockLog.model_validate(r, context=context)
                    for r in self._records(payload, "restockLogs", "restock_logs")
                ),
            )
        except ValidationError as e:
            logger.error("Snapshot parsing failed", error_count=e.error_count())
            raise

        if self.enable_validation:
            result = self.validator.validate(snapshot)
            if not result.passed:
                logger.warning(
                    "Snapshot failed contract checks",
                    failed_checks=[c.name for c in result.checks if not c.passed],
                )
                raise SnapshotValidationError(result)

        logger.info(
            "Snapshot loaded",
            orders=len(snapshot.orders),
            products=len(snapshot.products),
            restock_logs=len(snapshot.restock_logs),
            duration_seconds=(datetime.now() - started_at).total_seconds(),
        )
        return snapshot

    def load_file(self, file_path: Union[str, Path]) -> Snapshot:
        """Load a snapshot from a JSON export"""
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        with open(path, "r", encoding="utf-8") as fh:
            payload = json.load(fh)

        logger.debug("Snapshot file read", path=str(path))
        return self.load(payload)


def load_snapshot(
    payload: Mapping[str, Any],
    enable_validation: Optional[bool] = None,
    tz: Optional[tzinfo] = None,
) -> Snapshot:
    """Convenience wrapper around SnapshotLoader.load"""
    return SnapshotLoader(enable_validation=enable_validation, tz=tz).load(payload)


def load_snapshot_file(
    file_path: Union[str, Path],
    enable_validation: Optional[bool] = None,
    tz: Optional[tzinfo] = None,
) -> Snapshot:
    """Convenience wrapper around SnapshotLoader.load_file"""
    return SnapshotLoader(enable_validation=enable_validation, tz=tz).load_file(file_path)
