"""Reconciliation pass settings read from the environment."""

from __future__ import annotations

from dataclasses import dataclass

from bulkrecon.domain.current_state import DEFAULT_LOOKUP_PAGE_SIZE

from .env import optional_positive_int

LOOKUP_PAGE_SIZE_VAR = "BULKRECON_LOOKUP_PAGE_SIZE"
MAX_MANIFESTS_VAR = "BULKRECON_MAX_MANIFESTS"


@dataclass(frozen=True, slots=True)
class ReconcileConfig:
    lookup_page_size: int = DEFAULT_LOOKUP_PAGE_SIZE
    max_manifests: int | None = None


def get_reconcile_config() -> ReconcileConfig:
    page_size = optional_positive_int(LOOKUP_PAGE_SIZE_VAR)
    return ReconcileConfig(
        lookup_page_size=page_size or DEFAULT_LOOKUP_PAGE_SIZE,
        max_manifests=optional_positive_int(MAX_MANIFESTS_VAR),
    )
