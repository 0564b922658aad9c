"""Filesystem-backed manifest queue: three directories as three states.

A manifest moves out of the pending directory exactly once. A transition first
claims the manifest by renaming it to a hidden claim file in the pending
directory. Only the pass whose rename succeeds writes the outcome sidecar (temp
file plus ``os.replace``) and moves the claim file to the destination. When two
passes race for the same file, the loser's claim fails with ``FileNotFoundError``
and the transition reports ``None`` without touching the destination.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Final

from bulkrecon.domain.errors import StructuralManifestError
from bulkrecon.domain.model import QueueItem, QueueState

from .translator import failure_sidecar, parse_manifest, reconcile_sidecar

if TYPE_CHECKING:
    from pydantic import BaseModel

    from bulkrecon.domain.model import CreationManifest
    from bulkrecon.domain.ports import FailureOutcome, ReconcileOutcome

log = logging.getLogger(__name__)

PENDING_DIRNAME: Final[str] = "_PENDING_RECONCILE"
RECONCILED_DIRNAME: Final[str] = "_RECONCILED"
FAILED_DIRNAME: Final[str] = "_FAILED"
RECONCILE_SIDECAR_SUFFIX: Final[str] = ".reconcile_result.json"
FAILURE_SIDECAR_SUFFIX: Final[str] = ".fail.json"
_SIDECAR_SUFFIXES: Final[tuple[str, ...]] = (RECONCILE_SIDECAR_SUFFIX, FAILURE_SIDECAR_SUFFIX)


@dataclass(frozen=True, slots=True)
class QueueLayout:
    base_dir: Path
    pending_dir: Path
    reconciled_dir: Path
    failed_dir: Path

    def directory(self, state: QueueState) -> Path:
        if state is QueueState.PENDING:
            return self.pending_dir
        if state is QueueState.RECONCILED:
            return self.reconciled_dir
        return self.failed_dir


def resolve_queue_layout(path: Path | str) -> QueueLayout:
    """Accept either the queue base directory or the pending directory itself.

    A path with a ``_PENDING_RECONCILE`` child directory is the base. Any other
    path is the pending directory, with ``_RECONCILED``/``_FAILED`` as siblings.
    """

    given = Path(path).expanduser().resolve()
    candidate = given / PENDING_DIRNAME
    if candidate.is_dir():
        return QueueLayout(
            base_dir=given,
            pending_dir=candidate,
            reconciled_dir=given / RECONCILED_DIRNAME,
            failed_dir=given / FAILED_DIRNAME,
        )
    base = given.parent
    return QueueLayout(
        base_dir=base,
        pending_dir=given,
        reconciled_dir=base / RECONCILED_DIRNAME,
        failed_dir=base / FAILED_DIRNAME,
    )


def read_manifest_file(path: Path) -> CreationManifest:
    """Read and validate one manifest file; any decoding problem is structural."""

    try:
        raw = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise StructuralManifestError(f"Manifest is not valid UTF-8: {exc}") from exc
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise StructuralManifestError(f"Manifest is not valid JSON: {exc}") from exc
    return parse_manifest(payload)


def sidecar_name(item: QueueItem) -> str | None:
    if item.state is QueueState.RECONCILED:
        return f"{item.stem}{RECONCILE_SIDECAR_SUFFIX}"
    if item.state is QueueState.FAILED:
        return f"{item.stem}{FAILURE_SIDECAR_SUFFIX}"
    return None


def _is_manifest_file(path: Path) -> bool:
    name = path.name.lower()
    if not path.is_file() or not name.endswith(".json") or name.startswith("."):
        return False
    return not name.endswith(_SIDECAR_SUFFIXES)


class FileSystemManifestQueue:
    """Durable manifest queue stored as ``pending``/``reconciled``/``failed`` directories."""

    def __init__(self, layout: QueueLayout) -> None:
        self.layout = layout

    @classmethod
    def at(cls, path: Path | str) -> FileSystemManifestQueue:
        return cls(resolve_queue_layout(path))

    def ensure_directories(self) -> None:
        for state in QueueState:
            self.layout.directory(state).mkdir(parents=True, exist_ok=True)

    def list_pending(self) -> list[QueueItem]:
        return self.list_items(QueueState.PENDING)

    def list_items(self, state: QueueState) -> list[QueueItem]:
        directory = self.layout.directory(state)
        if not directory.is_dir():
            return []
        paths = sorted(path for path in directory.iterdir() if _is_manifest_file(path))
        return [QueueItem(name=path.name, path=path, state=state) for path in paths]

    def enqueue(self, manifest_path: Path) -> QueueItem:
        """Copy a generator-written manifest file into the pending directory."""

        self.layout.pending_dir.mkdir(parents=True, exist_ok=True)
        destination = self.layout.pending_dir / manifest_path.name
        _atomic_write_text(destination, manifest_path.read_text(encoding="utf-8"))
        return QueueItem(name=destination.name, path=destination, state=QueueState.PENDING)

    def load(self, item: QueueItem) -> CreationManifest:
        return read_manifest_file(item.path)

    def mark_reconciled(self, item: QueueItem, outcome: ReconcileOutcome) -> QueueItem | None:
        return self._transition(item, QueueState.RECONCILED, reconcile_sidecar(outcome))

    def mark_failed(self, item: QueueItem, outcome: FailureOutcome) -> QueueItem | None:
        return self._transition(item, QueueState.FAILED, failure_sidecar(outcome))

    def read_sidecar(self, item: QueueItem) -> dict[str, object] | None:
        name = sidecar_name(item)
        if name is None:
            return None
        path = self.layout.directory(item.state) / name
        if not path.exists():
            return None
        return json.loads(path.read_text(encoding="utf-8"))

    def _transition(
        self,
        item: QueueItem,
        state: QueueState,
        sidecar: BaseModel,
    ) -> QueueItem | None:
        if item.state is not QueueState.PENDING:
            raise ValueError(f"Only pending manifests can transition, got {item.state}")
        destination_dir = self.layout.directory(state)
        moved = QueueItem(name=item.name, path=destination_dir / item.name, state=state)
        sidecar_file = sidecar_name(moved)
        if sidecar_file is None:
            raise ValueError(f"No sidecar defined for state {state}")

        claimed = item.path.with_name(f".{item.name}.claim-{uuid.uuid4().hex}")
        try:
            os.replace(item.path, claimed)
        except FileNotFoundError:
            log.debug("Manifest %s was claimed by another pass", item.name)
            return None

        try:
            destination_dir.mkdir(parents=True, exist_ok=True)
            _atomic_write_text(
                destination_dir / sidecar_file,
                sidecar.model_dump_json(indent=2) + "\n",
            )
            os.replace(claimed, moved.path)
        except BaseException:
            os.replace(claimed, item.path)
            raise
        return moved


def _atomic_write_text(path: Path, text: str) -> None:
    handle, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    temp_path = Path(temp_name)
    try:
        with os.fdopen(handle, "w", encoding="utf-8") as temp_file:
            temp_file.write(text)
        os.replace(temp_path, path)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise
