from __future__ import annotations

import json
from contextlib import contextmanager
from typing import TYPE_CHECKING

import pytest

from bulkrecon.adapters.filesystem import FileSystemManifestQueue
from bulkrecon.app import (
    SnapshotBackend,
    reconcile_manifest_file,
    reconcile_pending_manifests,
    resolve_current_state,
    snapshot_reader_scope,
)
from bulkrecon.domain.errors import NoSnapshotAvailable
from bulkrecon.domain.model import QueueState
from tests.helpers.manifests import manifest_payload, matching_rows, write_pending
from tests.helpers.snapshots import (
    ACCOUNT_ID,
    SNAPSHOT_DATE,
    SnapshotRows,
    ad_group,
    campaign,
    target,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path

    from bulkrecon.adapters.sqlalchemy import SqlAlchemyUnitOfWork
    from bulkrecon.app import ReaderScope
    from bulkrecon.domain.ports import SnapshotReader
    from tests.helpers.snapshots import FakeSnapshotReader


@pytest.fixture
def reader_scope(fake_reader: FakeSnapshotReader) -> ReaderScope:
    @contextmanager
    def scope() -> Iterator[SnapshotReader]:
        yield fake_reader

    return scope


def test_pending_pass_over_queue_directory(
    tmp_path: Path, fake_reader: FakeSnapshotReader, reader_scope: ReaderScope
) -> None:
    fake_reader.publish(matching_rows())
    write_pending(tmp_path, "run-1.json", manifest_payload("run-1"))
    write_pending(tmp_path, "run-2.json", manifest_payload("run-2", campaign_name="Later"))

    summary = reconcile_pending_manifests(
        account_id=ACCOUNT_ID, queue_dir=tmp_path, reader_scope=reader_scope
    )

    assert (summary.reconciled, summary.pending) == (1, 1)
    queue = FileSystemManifestQueue.at(tmp_path)
    assert [item.name for item in queue.list_items(QueueState.RECONCILED)] == ["run-1.json"]
    assert queue.layout.failed_dir.is_dir()


def test_pending_pass_accepts_the_pending_directory_itself(
    tmp_path: Path, fake_reader: FakeSnapshotReader, reader_scope: ReaderScope
) -> None:
    fake_reader.publish(matching_rows())
    pending_file = write_pending(tmp_path, "run-1.json", manifest_payload("run-1"))

    reconcile_pending_manifests(
        account_id=ACCOUNT_ID, queue_dir=pending_file.parent, reader_scope=reader_scope
    )

    assert (tmp_path / "_RECONCILED" / "run-1.json").exists()


def test_pending_pass_uses_configured_manifest_limit(
    tmp_path: Path,
    fake_reader: FakeSnapshotReader,
    reader_scope: ReaderScope,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("BULKRECON_MAX_MANIFESTS", "1")
    fake_reader.publish(matching_rows())
    write_pending(tmp_path, "a.json", manifest_payload("a"))
    write_pending(tmp_path, "b.json", manifest_payload("b"))

    summary = reconcile_pending_manifests(
        account_id=ACCOUNT_ID, queue_dir=tmp_path, reader_scope=reader_scope
    )

    assert summary.processed == 1


def test_dry_run_creates_no_directories(
    tmp_path: Path, fake_reader: FakeSnapshotReader, reader_scope: ReaderScope
) -> None:
    fake_reader.publish(matching_rows())
    write_pending(tmp_path, "run-1.json", manifest_payload("run-1"))

    summary = reconcile_pending_manifests(
        account_id=ACCOUNT_ID, queue_dir=tmp_path, reader_scope=reader_scope, dry_run=True
    )

    assert summary.reconciled == 1
    assert not (tmp_path / "_RECONCILED").exists()
    assert not (tmp_path / "_FAILED").exists()


def test_reconcile_manifest_file_leaves_file_in_place(
    tmp_path: Path, fake_reader: FakeSnapshotReader, reader_scope: ReaderScope
) -> None:
    fake_reader.publish(matching_rows())
    path = tmp_path / "run-1.json"
    path.write_text(json.dumps(manifest_payload("run-1")), encoding="utf-8")

    outcome = reconcile_manifest_file(
        account_id=ACCOUNT_ID, manifest_path=path, reader_scope=reader_scope
    )

    assert outcome.run_id == "run-1"
    assert outcome.snapshot_date == SNAPSHOT_DATE
    assert outcome.matches.all_matched
    assert path.exists()


def test_resolve_current_state_reviews_changes_file(
    tmp_path: Path, fake_reader: FakeSnapshotReader, reader_scope: ReaderScope
) -> None:
    fake_reader.publish(
        SnapshotRows(
            campaigns=[campaign("C1", "Brand", daily_budget=50.0)],
            ad_groups=[ad_group("A1", "C1", "Group")],
            targets=[target("T1", "A1", "C1", "blue widget", bid=0.5)],
        )
    )
    changes = tmp_path / "changes.json"
    changes.write_text(
        json.dumps(
            {
                "actions": [
                    {"type": "update_target_bid", "target_id": "T1", "new_bid": 0.7},
                    {"type": "update_campaign_budget", "campaign_id": "C404", "new_budget": 10},
                ]
            }
        ),
        encoding="utf-8",
    )

    report = resolve_current_state(
        account_id=ACCOUNT_ID, changes_path=changes, reader_scope=reader_scope, page_size=1
    )

    assert set(report.current.campaigns_by_id) == {"C1"}
    assert [review.found for review in report.reviews] == [True, False]
    assert report.reviews[0].delta == pytest.approx(0.2)
    assert fake_reader.calls_for("campaigns") == [("C404",), ("C1",)]


def test_sql_backend_scope_reads_committed_snapshot(
    tmp_path: Path, sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork]
) -> None:
    rows = matching_rows()
    with sqlite_unit_of_work() as uow:
        uow.snapshots.add_snapshot(
            ACCOUNT_ID,
            SNAPSHOT_DATE,
            campaigns=rows.campaigns,
            ad_groups=rows.ad_groups,
            targets=rows.targets,
        )
        uow.commit()
    write_pending(tmp_path, "run-1.json", manifest_payload("run-1"))

    summary = reconcile_pending_manifests(
        account_id=ACCOUNT_ID,
        queue_dir=tmp_path,
        reader_scope=snapshot_reader_scope(SnapshotBackend.SQL),
    )

    assert summary.reconciled == 1


def test_missing_snapshot_surfaces_to_caller(
    tmp_path: Path, reader_scope: ReaderScope
) -> None:
    write_pending(tmp_path, "run-1.json", manifest_payload("run-1"))

    with pytest.raises(NoSnapshotAvailable):
        reconcile_pending_manifests(
            account_id=ACCOUNT_ID, queue_dir=tmp_path, reader_scope=reader_scope
        )

    assert (tmp_path / "_PENDING_RECONCILE" / "run-1.json").exists()
