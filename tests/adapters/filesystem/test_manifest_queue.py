from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from bulkrecon.adapters.filesystem import (
    FAILED_DIRNAME,
    PENDING_DIRNAME,
    RECONCILED_DIRNAME,
    FileSystemManifestQueue,
    resolve_queue_layout,
)
from bulkrecon.adapters.filesystem import queue as queue_module
from bulkrecon.domain.model import QueueState
from bulkrecon.domain.ports import FailureOutcome, ManifestQueue, ReconcileOutcome
from bulkrecon.domain.reconciliation import KindCounts, MatchCounts, ReconcileResult
from tests.helpers.manifests import manifest_payload, write_pending
from tests.helpers.snapshots import ACCOUNT_ID, SNAPSHOT_DATE

if TYPE_CHECKING:
    from pathlib import Path


def _outcome(run_id: str = "run-1") -> ReconcileOutcome:
    empty = KindCounts(expected=0, matched=0)
    matched_at = datetime(2026, 3, 2, 9, 30, tzinfo=UTC)
    result = ReconcileResult(
        run_id=run_id,
        generator="test-generator",
        matched_at=matched_at,
        campaign_matches=(),
        ad_group_matches=(),
        keyword_matches=(),
        product_ad_matches=(),
        counts=MatchCounts(campaigns=empty, ad_groups=empty, keywords=empty, product_ads=empty),
    )
    return ReconcileOutcome(
        run_id=run_id,
        account_id=ACCOUNT_ID,
        snapshot_date=SNAPSHOT_DATE,
        matched_at=matched_at,
        matches=result,
    )


def test_queue_satisfies_the_port(queue: FileSystemManifestQueue) -> None:
    assert isinstance(queue, ManifestQueue)


def test_layout_from_base_directory(tmp_path: Path) -> None:
    (tmp_path / PENDING_DIRNAME).mkdir()

    layout = resolve_queue_layout(tmp_path)

    assert layout.base_dir == tmp_path.resolve()
    assert layout.pending_dir == tmp_path.resolve() / PENDING_DIRNAME
    assert layout.reconciled_dir == tmp_path.resolve() / RECONCILED_DIRNAME
    assert layout.failed_dir == tmp_path.resolve() / FAILED_DIRNAME


def test_layout_from_pending_directory(tmp_path: Path) -> None:
    pending = tmp_path / PENDING_DIRNAME
    pending.mkdir()

    layout = resolve_queue_layout(pending)

    assert layout.pending_dir == pending.resolve()
    assert layout.reconciled_dir == tmp_path.resolve() / RECONCILED_DIRNAME


def test_layout_from_directory_without_pending_child(tmp_path: Path) -> None:
    inbox = tmp_path / "inbox"
    inbox.mkdir()

    layout = resolve_queue_layout(inbox)

    assert layout.base_dir == tmp_path.resolve()
    assert layout.pending_dir == inbox.resolve()
    assert layout.failed_dir == tmp_path.resolve() / FAILED_DIRNAME


def test_layout_of_inbox_is_stable_after_creating_directories(tmp_path: Path) -> None:
    inbox = tmp_path / "inbox"
    inbox.mkdir()
    queue = FileSystemManifestQueue.at(inbox)

    queue.ensure_directories()

    assert list(inbox.iterdir()) == []
    assert resolve_queue_layout(inbox) == queue.layout
    assert (tmp_path / RECONCILED_DIRNAME).is_dir()
    assert (tmp_path / FAILED_DIRNAME).is_dir()


def test_layout_does_not_depend_on_pending_contents(tmp_path: Path) -> None:
    inbox = tmp_path / "inbox"
    inbox.mkdir()
    empty_layout = resolve_queue_layout(inbox)
    (inbox / "run-1.json").write_text("{}", encoding="utf-8")

    assert resolve_queue_layout(inbox) == empty_layout


def test_list_pending_skips_sidecars_hidden_and_foreign_files(
    queue: FileSystemManifestQueue,
) -> None:
    pending = queue.layout.pending_dir
    for name in ("b.json", "a.json", ".a.json.tmp", ".hidden.json", "notes.txt"):
        (pending / name).write_text("{}", encoding="utf-8")
    (pending / "a.reconcile_result.json").write_text("{}", encoding="utf-8")
    (pending / "nested.json").mkdir()

    assert [item.name for item in queue.list_pending()] == ["a.json", "b.json"]


def test_list_items_of_missing_directory_is_empty(tmp_path: Path) -> None:
    assert FileSystemManifestQueue.at(tmp_path / "missing").list_pending() == []


def test_load_parses_manifest(tmp_path: Path, queue: FileSystemManifestQueue) -> None:
    write_pending(tmp_path, "run-1.json", manifest_payload("run-1"))
    (item,) = queue.list_pending()

    manifest = queue.load(item)

    assert manifest.run_id == "run-1"
    assert manifest.expected_count == 4


def test_mark_reconciled_writes_sidecar_then_moves(
    tmp_path: Path, queue: FileSystemManifestQueue
) -> None:
    write_pending(tmp_path, "run-1.json", manifest_payload("run-1"))
    (item,) = queue.list_pending()

    moved = queue.mark_reconciled(item, _outcome())

    assert moved is not None
    assert moved.state is QueueState.RECONCILED
    assert moved.is_terminal
    assert not item.path.exists()
    assert moved.path.exists()
    sidecar = queue.read_sidecar(moved)
    assert sidecar is not None
    assert sidecar["account_id"] == ACCOUNT_ID
    assert sidecar["matches"]["all_matched"] is False
    reconciled = queue.layout.reconciled_dir
    assert [path for path in reconciled.iterdir() if path.name.startswith(".")] == []


def test_mark_failed_writes_failure_sidecar(
    tmp_path: Path, queue: FileSystemManifestQueue
) -> None:
    write_pending(tmp_path, "bad.json", {"run_id": ""})
    (item,) = queue.list_pending()

    moved = queue.mark_failed(item, FailureOutcome(error="boom", stack="trace"))

    assert moved is not None
    assert queue.list_items(QueueState.FAILED) == [moved]
    payload = json.loads((queue.layout.failed_dir / "bad.fail.json").read_text("utf-8"))
    assert payload == {"error": "boom", "stack": "trace"}


def test_transition_of_vanished_item_returns_none(
    tmp_path: Path, queue: FileSystemManifestQueue
) -> None:
    write_pending(tmp_path, "run-1.json", manifest_payload("run-1"))
    (item,) = queue.list_pending()
    item.path.unlink()

    assert queue.mark_reconciled(item, _outcome()) is None
    assert list(queue.layout.reconciled_dir.iterdir()) == []


def test_transition_leaves_no_claim_file_behind(
    tmp_path: Path, queue: FileSystemManifestQueue
) -> None:
    write_pending(tmp_path, "run-1.json", manifest_payload("run-1"))
    (item,) = queue.list_pending()

    assert queue.mark_failed(item, FailureOutcome(error="boom")) is not None
    assert list(queue.layout.pending_dir.iterdir()) == []
    assert sorted(path.name for path in queue.layout.failed_dir.iterdir()) == [
        "run-1.fail.json",
        "run-1.json",
    ]


def test_failed_sidecar_write_returns_manifest_to_pending(
    tmp_path: Path, queue: FileSystemManifestQueue, monkeypatch: pytest.MonkeyPatch
) -> None:
    write_pending(tmp_path, "run-1.json", manifest_payload("run-1"))
    (item,) = queue.list_pending()

    def _disk_full(path: Path, text: str) -> None:
        raise OSError("No space left on device")

    monkeypatch.setattr(queue_module, "_atomic_write_text", _disk_full)

    with pytest.raises(OSError, match="No space left"):
        queue.mark_reconciled(item, _outcome())

    assert queue.list_pending() == [item]
    assert list(queue.layout.pending_dir.iterdir()) == [item.path]
    assert list(queue.layout.reconciled_dir.iterdir()) == []


def test_only_pending_items_transition(tmp_path: Path, queue: FileSystemManifestQueue) -> None:
    write_pending(tmp_path, "run-1.json", manifest_payload("run-1"))
    (item,) = queue.list_pending()
    moved = queue.mark_reconciled(item, _outcome())
    assert moved is not None

    with pytest.raises(ValueError, match="Only pending manifests"):
        queue.mark_failed(moved, FailureOutcome(error="late"))


def test_enqueue_copies_manifest_into_pending(
    tmp_path: Path, queue: FileSystemManifestQueue
) -> None:
    source = tmp_path / "outbox" / "run-9.json"
    source.parent.mkdir()
    source.write_text(json.dumps(manifest_payload("run-9")), encoding="utf-8")

    item = queue.enqueue(source)

    assert item.state is QueueState.PENDING
    assert source.exists()
    assert [entry.name for entry in queue.list_pending()] == ["run-9.json"]


def test_read_sidecar_of_pending_item_is_none(
    tmp_path: Path, queue: FileSystemManifestQueue
) -> None:
    write_pending(tmp_path, "run-1.json", manifest_payload("run-1"))
    (item,) = queue.list_pending()

    assert queue.read_sidecar(item) is None
