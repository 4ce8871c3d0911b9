"""
Data Ingestion Module
"""
from .snapshot_loader import SnapshotLoader, load_snapshot, load_snapshot_file

__all__ = [
    "SnapshotLoader",
    "load_snapshot",
    "load_snapshot_file",
]
