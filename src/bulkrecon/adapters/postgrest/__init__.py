"""PostgREST adapter for reading published snapshot tables over HTTP."""

from __future__ import annotations

from .reader import PostgrestSnapshotReader, in_filter

__all__ = ["PostgrestSnapshotReader", "in_filter"]
