"""
Legacy Refund Shapes

Orders written by older versions of the order service carry refund data in
one of four shapes, and any subset of them may be present on the same
record:

- ``refund``: a single refund object with an ``amount``
- ``refundedAmount``: a flat number
- ``partialRefunds``: a list of numbers or ``{"amount": ...}`` objects
- ``refunds``: a list of refund transactions, same entry shapes

Each shape is read independently and normalized into ``RefundEntry`` values
when a record is loaded. All shapes are additive.
"""

from dataclasses import dataclass
from enum import Enum
from numbers import Real
from typing import Any, List, Mapping, Optional


class RefundShape(str, Enum):
    """Known refund representations, keyed by their payload field"""
    SINGLE = "refund"
    FLAT = "refundedAmount"
    PARTIAL = "partialRefunds"
    TRANSACTIONS = "refunds"


@dataclass(frozen=True)
class RefundEntry:
    """One refunded amount and the shape it was read from"""
    shape: RefundShape
    amount: float


def _as_number(value: Any) -> Optional[float]:
    """Return value as float when it is a real number (bools excluded)"""
    if isinstance(value, bool) or not isinstance(value, Real):
        return None
    return float(value)


def _entry_amount(entry: Any) -> Optional[float]:
    if isinstance(entry, Mapping):
        return _as_number(entry.get("amount"))
    return _as_number(entry)


def _collection_entries(shape: RefundShape, value: Any) -> List[RefundEntry]:
    if not isinstance(value, (list, tuple)):
        return []
    entries = []
    for item in value:
        amount = _entry_amount(item)
        if amount is not None:
            entries.append(RefundEntry(shape=shape, amount=amount))
    return entries


def extract_refund_entries(payload: Mapping[str, Any]) -> List[RefundEntry]:
    """
    Read every known refund shape from a raw order payload.

    Absent or wrong-typed fields contribute nothing. The single-object and
    flat shapes only count positive amounts; list entries are taken as-is.

    Args:
        payload: Raw order mapping as written by the order service

    Returns:
        Refund entries in shape order
    """
    entries: List[RefundEntry] = []

    single = payload.get(RefundShape.SINGLE.value)
    if isinstance(single, Mapping):
        amount = _as_number(single.get("amount"))
        if amount is not None and amount > 0:
            entries.append(RefundEntry(shape=RefundShape.SINGLE, amount=amount))

    flat = _as_number(payload.get(RefundShape.FLAT.value))
    if flat is not None and flat > 0:
        entries.append(RefundEntry(shape=RefundShape.FLAT, amount=flat))

    entries.extend(_collection_entries(RefundShape.PARTIAL, payload.get(RefundShape.PARTIAL.value)))
    entries.extend(_collection_entries(RefundShape.TRANSACTIONS, payload.get(RefundShape.TRANSACTIONS.value)))

    return entries
