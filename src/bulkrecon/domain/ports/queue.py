"""Ports for the durable creation-manifest queue."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import date, datetime

    from bulkrecon.domain.model import CreationManifest, QueueItem, QueueState
    from bulkrecon.domain.reconciliation.contracts import ReconcileResult


@dataclass(frozen=True, slots=True)
class ReconcileOutcome:
    """Sidecar content written next to a reconciled manifest."""

    run_id: str
    account_id: str
    snapshot_date: date
    matched_at: datetime
    matches: ReconcileResult


@dataclass(frozen=True, slots=True)
class FailureOutcome:
    """Sidecar content written next to a failed manifest."""

    error: str
    stack: str | None = None


@runtime_checkable
class ManifestQueue(Protocol):
    """Three disjoint storage locations a manifest moves between exactly once.

    ``mark_*`` claim the pending manifest first, then write the outcome sidecar
    at the destination and move the manifest next to it. They return ``None``
    when the pending item is already gone (claimed by a concurrent pass).
    ``load`` raises ``FileNotFoundError`` in that case.
    """

    def list_pending(self) -> list[QueueItem]: ...

    def list_items(self, state: QueueState) -> list[QueueItem]: ...

    def load(self, item: QueueItem) -> CreationManifest: ...

    def mark_reconciled(self, item: QueueItem, outcome: ReconcileOutcome) -> QueueItem | None: ...

    def mark_failed(self, item: QueueItem, outcome: FailureOutcome) -> QueueItem | None: ...
