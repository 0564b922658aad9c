"""Reconciliation passes over the pending manifest queue.

State machine per manifest:
- pending -> reconciled when every expected entity matched
- pending -> failed on ``StructuralManifestError``
- pending -> pending otherwise (the platform may not have propagated yet)

The snapshot is loaded once, before the queue is touched, so a missing
snapshot or a backend failure moves nothing. Each transition is independent:
an interrupted pass leaves already-moved manifests in their new state and the
rest still pending.
"""

from __future__ import annotations

import logging
import traceback
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from bulkrecon.domain.errors import StructuralManifestError
from bulkrecon.domain.model import QueueState
from bulkrecon.domain.ports import FailureOutcome, ReconcileOutcome

from .engine import ReconcileEngine

if TYPE_CHECKING:
    from datetime import date

    from bulkrecon.domain.model import CreationManifest, QueueItem
    from bulkrecon.domain.ports import ManifestQueue

    from .contracts import ReconcileResult
    from .snapshot import SnapshotRepository, SnapshotView

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class ManifestOutcome:
    """What a pass decided for one manifest file."""

    name: str
    state: QueueState
    matched: int = 0
    expected: int = 0
    error: str | None = None
    moved: bool = False


@dataclass(slots=True, kw_only=True)
class PassSummary:
    """Per-manifest counts reported by a reconciliation pass."""

    snapshot_date: date
    processed: int = 0
    reconciled: int = 0
    pending: int = 0
    failed: int = 0
    skipped: int = 0
    dry_run: bool = False
    outcomes: list[ManifestOutcome] = field(default_factory=list[ManifestOutcome])

    def record(self, outcome: ManifestOutcome) -> None:
        self.outcomes.append(outcome)
        if outcome.state is QueueState.RECONCILED:
            self.reconciled += 1
        elif outcome.state is QueueState.FAILED:
            self.failed += 1
        else:
            self.pending += 1


def reconcile_pending(
    *,
    queue: ManifestQueue,
    snapshots: SnapshotRepository,
    engine: ReconcileEngine | None = None,
    snapshot_date: date | None = None,
    dry_run: bool = False,
    max_manifests: int | None = None,
) -> PassSummary:
    """Run one reconciliation pass over every pending manifest."""

    if max_manifests is not None and max_manifests < 1:
        raise ValueError(f"max_manifests must be >= 1, got {max_manifests}")

    view = snapshots.load_latest(snapshot_date=snapshot_date)
    effective_engine = engine or ReconcileEngine()

    items = queue.list_pending()
    if max_manifests is not None:
        items = items[:max_manifests]

    summary = PassSummary(snapshot_date=view.snapshot_date, dry_run=dry_run)
    log.info(
        "Starting reconciliation pass: account_id=%s snapshot_date=%s pending=%s dry_run=%s",
        view.account_id,
        view.snapshot_date.isoformat(),
        len(items),
        dry_run,
    )

    for item in items:
        outcome = _process_item(
            item,
            queue=queue,
            view=view,
            engine=effective_engine,
            dry_run=dry_run,
        )
        if outcome is None:
            summary.skipped += 1
            log.info("SKIPPED %s (already claimed by another pass)", item.name)
            continue
        summary.processed += 1
        summary.record(outcome)

    log.info(
        "Finished reconciliation pass: processed=%s reconciled=%s pending=%s failed=%s "
        "skipped=%s",
        summary.processed,
        summary.reconciled,
        summary.pending,
        summary.failed,
        summary.skipped,
    )
    return summary


def _process_item(
    item: QueueItem,
    *,
    queue: ManifestQueue,
    view: SnapshotView,
    engine: ReconcileEngine,
    dry_run: bool,
) -> ManifestOutcome | None:
    try:
        manifest = queue.load(item)
        result = engine.reconcile(manifest, view)
    except FileNotFoundError:
        return None
    except StructuralManifestError as exc:
        return _fail(item, exc, queue=queue, dry_run=dry_run)

    if result.all_matched:
        return _reconcile(item, manifest, result, queue=queue, view=view, dry_run=dry_run)

    log.info(
        "PENDING %s (%s/%s)",
        item.name,
        result.counts.matched,
        result.counts.expected,
    )
    return ManifestOutcome(
        name=item.name,
        state=QueueState.PENDING,
        matched=result.counts.matched,
        expected=result.counts.expected,
    )


def _reconcile(
    item: QueueItem,
    manifest: CreationManifest,
    result: ReconcileResult,
    *,
    queue: ManifestQueue,
    view: SnapshotView,
    dry_run: bool,
) -> ManifestOutcome | None:
    outcome = ManifestOutcome(
        name=item.name,
        state=QueueState.RECONCILED,
        matched=result.counts.matched,
        expected=result.counts.expected,
        moved=not dry_run,
    )
    if not dry_run:
        record = ReconcileOutcome(
            run_id=manifest.run_id,
            account_id=view.account_id,
            snapshot_date=view.snapshot_date,
            matched_at=result.matched_at,
            matches=result,
        )
        if queue.mark_reconciled(item, record) is None:
            return None
    log.info("RECONCILED %s (%s/%s)", item.name, outcome.matched, outcome.expected)
    return outcome


def _fail(
    item: QueueItem,
    exc: StructuralManifestError,
    *,
    queue: ManifestQueue,
    dry_run: bool,
) -> ManifestOutcome | None:
    message = str(exc)
    if not dry_run:
        stack = "".join(traceback.format_exception(exc))
        if queue.mark_failed(item, FailureOutcome(error=message, stack=stack)) is None:
            return None
    log.warning("FAILED %s: %s", item.name, message)
    return ManifestOutcome(
        name=item.name,
        state=QueueState.FAILED,
        error=message,
        moved=not dry_run,
    )


def reconcile_single(
    manifest: CreationManifest,
    *,
    snapshots: SnapshotRepository,
    engine: ReconcileEngine | None = None,
    snapshot_date: date | None = None,
) -> tuple[SnapshotView, ReconcileResult]:
    """Reconcile one manifest without any queue transition."""

    view = snapshots.load_latest(snapshot_date=snapshot_date)
    result = (engine or ReconcileEngine()).reconcile(manifest, view)
    return view, result
