"""Filesystem adapters: manifest queue directories and JSON payload files."""

from __future__ import annotations

from .changes import load_changes_file, parse_changes
from .queue import (
    FAILED_DIRNAME,
    PENDING_DIRNAME,
    RECONCILED_DIRNAME,
    FileSystemManifestQueue,
    QueueLayout,
    read_manifest_file,
    resolve_queue_layout,
)
from .translator import parse_manifest, reconcile_sidecar, result_payload

__all__ = [
    "FAILED_DIRNAME",
    "PENDING_DIRNAME",
    "RECONCILED_DIRNAME",
    "FileSystemManifestQueue",
    "QueueLayout",
    "load_changes_file",
    "parse_changes",
    "parse_manifest",
    "read_manifest_file",
    "reconcile_sidecar",
    "resolve_queue_layout",
    "result_payload",
]
