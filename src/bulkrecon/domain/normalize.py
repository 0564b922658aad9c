"""Name normalization shared by manifest matching and snapshot indexing."""

from __future__ import annotations

import re

_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_name(raw: str | None) -> str:
    """Return the comparison key for an entity name.

    Lowercases, trims and collapses each run of whitespace into one space.
    ``None`` normalizes to the empty string.
    """

    if raw is None:
        return ""
    return _WHITESPACE_RUN.sub(" ", str(raw).strip().lower())


def placement_key(campaign_id: str, placement_code: str) -> str:
    """Composite key for a campaign placement modifier."""

    return f"{campaign_id}::{normalize_name(placement_code)}"
