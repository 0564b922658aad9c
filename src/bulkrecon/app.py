"""Application orchestration entry points."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from bulkrecon.adapters.filesystem import (
    FileSystemManifestQueue,
    load_changes_file,
    read_manifest_file,
)
from bulkrecon.adapters.postgrest import PostgrestSnapshotReader
from bulkrecon.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from bulkrecon.config import get_queue_dir, get_reconcile_config, get_snapshot_api_config
from bulkrecon.domain.current_state import ActionReview, CurrentStateResolver, review_actions
from bulkrecon.domain.ports import ReconcileOutcome
from bulkrecon.domain.reconciliation import (
    PassSummary,
    ReconcileEngine,
    SnapshotRepository,
    reconcile_pending,
    reconcile_single,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from contextlib import AbstractContextManager
    from datetime import date
    from pathlib import Path

    from bulkrecon.domain.model import CurrentEntitySnapshot
    from bulkrecon.domain.ports import SnapshotReader

log = getLogger(__name__)


class SnapshotBackend(StrEnum):
    SQL = "sql"
    REST = "rest"


type ReaderScope = Callable[[], AbstractContextManager[SnapshotReader]]


@contextmanager
def _sql_reader() -> Iterator[SnapshotReader]:
    if not is_started():
        startup()
    with SqlAlchemyUnitOfWork(read_only=True) as uow:
        yield uow.snapshots


@contextmanager
def _rest_reader() -> Iterator[SnapshotReader]:
    yield PostgrestSnapshotReader(config=get_snapshot_api_config())


def snapshot_reader_scope(backend: SnapshotBackend = SnapshotBackend.SQL) -> ReaderScope:
    """Return a factory opening a snapshot reader for the chosen backend."""

    if backend is SnapshotBackend.REST:
        return _rest_reader
    return _sql_reader


def reconcile_pending_manifests(  # noqa: PLR0913
    *,
    account_id: str,
    queue_dir: Path | None = None,
    backend: SnapshotBackend = SnapshotBackend.SQL,
    reader_scope: ReaderScope | None = None,
    snapshot_date: date | None = None,
    dry_run: bool = False,
    max_manifests: int | None = None,
    engine: ReconcileEngine | None = None,
) -> PassSummary:
    """Run one reconciliation pass over the pending manifests of a queue directory."""

    queue = FileSystemManifestQueue.at(queue_dir or get_queue_dir())
    if not dry_run:
        queue.ensure_directories()
    effective_max = max_manifests or get_reconcile_config().max_manifests
    log.info(
        "Reconciling pending manifests: account_id=%s pending_dir=%s backend=%s",
        account_id,
        queue.layout.pending_dir,
        backend,
    )

    with (reader_scope or snapshot_reader_scope(backend))() as reader:
        return reconcile_pending(
            queue=queue,
            snapshots=SnapshotRepository(reader, account_id),
            engine=engine,
            snapshot_date=snapshot_date,
            dry_run=dry_run,
            max_manifests=effective_max,
        )


def reconcile_manifest_file(
    *,
    account_id: str,
    manifest_path: Path,
    backend: SnapshotBackend = SnapshotBackend.SQL,
    reader_scope: ReaderScope | None = None,
    snapshot_date: date | None = None,
) -> ReconcileOutcome:
    """Reconcile a single manifest file without moving it."""

    manifest = read_manifest_file(manifest_path)
    with (reader_scope or snapshot_reader_scope(backend))() as reader:
        view, result = reconcile_single(
            manifest,
            snapshots=SnapshotRepository(reader, account_id),
            snapshot_date=snapshot_date,
        )
    log.info(
        "Reconciled %s against snapshot %s: %s/%s matched",
        manifest_path.name,
        view.snapshot_date.isoformat(),
        result.counts.matched,
        result.counts.expected,
    )
    return ReconcileOutcome(
        run_id=manifest.run_id,
        account_id=account_id,
        snapshot_date=view.snapshot_date,
        matched_at=result.matched_at,
        matches=result,
    )


@dataclass(frozen=True, slots=True)
class CurrentStateReport:
    current: CurrentEntitySnapshot
    reviews: list[ActionReview]


def resolve_current_state(
    *,
    account_id: str,
    changes_path: Path,
    backend: SnapshotBackend = SnapshotBackend.SQL,
    reader_scope: ReaderScope | None = None,
    snapshot_date: date | None = None,
    page_size: int | None = None,
) -> CurrentStateReport:
    """Look up current values for every entity a changes file touches."""

    actions = load_changes_file(changes_path)
    effective_page_size = page_size or get_reconcile_config().lookup_page_size
    with (reader_scope or snapshot_reader_scope(backend))() as reader:
        resolver = CurrentStateResolver(reader, account_id, page_size=effective_page_size)
        current = resolver.resolve(actions, snapshot_date=snapshot_date)
    reviews = review_actions(actions, current)
    log.info(
        "Resolved current state for %s actions against snapshot %s: %s not found, %s flagged",
        len(actions),
        current.snapshot_date.isoformat(),
        sum(1 for review in reviews if not review.found),
        sum(1 for review in reviews if review.found and review.problem is not None),
    )
    return CurrentStateReport(current=current, reviews=reviews)
