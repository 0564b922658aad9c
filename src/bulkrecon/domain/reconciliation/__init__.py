"""Reconciliation of creation manifests against published snapshots.

Layered flow of one pass:
1) load and index the latest snapshot once (``snapshot``)
2) match each pending manifest by scoped natural keys (``engine``)
3) route the manifest to reconciled, failed or leave it pending (``pending``)
"""

from __future__ import annotations

from .contracts import (
    AdGroupMatch,
    CampaignMatch,
    KeywordMatch,
    KindCounts,
    MatchCounts,
    ProductAdMatch,
    ReconcileResult,
)
from .engine import ReconcileEngine, validate_manifest_identity
from .pending import ManifestOutcome, PassSummary, reconcile_pending, reconcile_single
from .snapshot import RECONCILE_ENTITY_KINDS, SnapshotRepository, SnapshotView

__all__ = [
    "RECONCILE_ENTITY_KINDS",
    "AdGroupMatch",
    "CampaignMatch",
    "KeywordMatch",
    "KindCounts",
    "ManifestOutcome",
    "MatchCounts",
    "PassSummary",
    "ProductAdMatch",
    "ReconcileEngine",
    "ReconcileResult",
    "SnapshotRepository",
    "SnapshotView",
    "reconcile_pending",
    "reconcile_single",
    "validate_manifest_identity",
]
