"""Error taxonomy for reconciliation and current-state lookups.

Ambiguous natural-key matches never raise. They are reported as
``MatchReason.AMBIGUOUS`` on the match row and leave the manifest pending.
"""

from __future__ import annotations

from datetime import date


class ReconciliationError(RuntimeError):
    """Base class for errors surfaced to the operator."""


class StructuralManifestError(ReconciliationError):
    """Raised when a manifest does not have the required shape.

    Fatal to that one manifest: the pass routes it to the failed location with
    the message captured verbatim and never retries it automatically.
    """


class NoSnapshotAvailable(ReconciliationError):
    """Raised when the account has no published snapshot (or not the requested one)."""

    def __init__(self, account_id: str, *, snapshot_date: date | None = None) -> None:
        if snapshot_date is None:
            message = f"No bulk snapshots found for account_id={account_id}"
        else:
            message = (
                f"No bulk snapshot found for account_id={account_id} "
                f"snapshot_date={snapshot_date.isoformat()}"
            )
        super().__init__(message)
        self.account_id = account_id
        self.snapshot_date = snapshot_date


class LookupBatchError(ReconciliationError):
    """Raised when the snapshot backend fails while fetching rows.

    No partial result is returned for the failing batch.
    """

    def __init__(self, message: str, *, resource: str | None = None) -> None:
        super().__init__(message)
        self.resource = resource
