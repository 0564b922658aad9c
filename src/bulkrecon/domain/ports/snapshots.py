"""Ports for reading published snapshot exports."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import date

    from bulkrecon.domain.model import AdGroupRow, CampaignRow, PlacementRow, TargetRow


@runtime_checkable
class SnapshotReader(Protocol):
    """Read-only access to snapshot rows of one account.

    ``ids=None`` loads every row of the snapshot date; a sequence restricts the
    result to those identifiers. Implementations raise ``LookupBatchError`` on
    backend failures and never return partial results for a call.
    """

    def latest_snapshot_date(self, account_id: str) -> date | None: ...

    def has_snapshot(self, account_id: str, snapshot_date: date) -> bool: ...

    def campaigns(
        self,
        account_id: str,
        snapshot_date: date,
        *,
        ids: Sequence[str] | None = None,
    ) -> list[CampaignRow]: ...

    def ad_groups(
        self,
        account_id: str,
        snapshot_date: date,
        *,
        ids: Sequence[str] | None = None,
    ) -> list[AdGroupRow]: ...

    def targets(
        self,
        account_id: str,
        snapshot_date: date,
        *,
        ids: Sequence[str] | None = None,
    ) -> list[TargetRow]: ...

    def placements(
        self,
        account_id: str,
        snapshot_date: date,
        *,
        campaign_ids: Sequence[str] | None = None,
    ) -> list[PlacementRow]: ...
