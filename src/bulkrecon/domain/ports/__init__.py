"""Domain port definitions for adapters."""

from __future__ import annotations

from .queue import FailureOutcome, ManifestQueue, ReconcileOutcome
from .snapshots import SnapshotReader

__all__ = [
    "FailureOutcome",
    "ManifestQueue",
    "ReconcileOutcome",
    "SnapshotReader",
]
