"""Point-in-time snapshot views and their lookup indices.

Responsibilities of this stage:
- resolve which snapshot date a pass reads (latest published, or an explicit one)
- load rows for the requested entity kinds from that single date
- index rows by scoped natural key and by platform identifier

A view is immutable for the lifetime of a pass. Parent/child resolution
(ad group -> campaign, target -> ad group) must never straddle two dates.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Hashable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from bulkrecon.domain.errors import NoSnapshotAvailable
from bulkrecon.domain.model import (
    AdGroupRow,
    CampaignRow,
    EntityKind,
    PlacementRow,
    TargetRow,
)
from bulkrecon.domain.normalize import normalize_name

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from datetime import date

    from bulkrecon.domain.ports import SnapshotReader

log = logging.getLogger(__name__)

RECONCILE_ENTITY_KINDS: frozenset[EntityKind] = frozenset(
    {EntityKind.CAMPAIGN, EntityKind.AD_GROUP, EntityKind.TARGET}
)

type CampaignKey = str
type AdGroupKey = tuple[str, str]
type TargetKey = tuple[str, str, str]


class NaturalKeyIndex[K: Hashable, R]:
    """Multi-map from a natural key to every row carrying it.

    Lookups return all candidates so callers can tell "absent" from "ambiguous".
    """

    __slots__ = ("_rows",)

    def __init__(self, rows: Iterable[R] = (), *, key: Callable[[R], K | None]) -> None:
        self._rows: dict[K, list[R]] = defaultdict(list)
        for row in rows:
            row_key = key(row)
            if row_key is None:
                continue
            self._rows[row_key].append(row)

    def candidates(self, key: K) -> tuple[R, ...]:
        return tuple(self._rows.get(key, ()))

    def ambiguous_keys(self) -> list[K]:
        return [key for key, rows in self._rows.items() if len(rows) > 1]

    def __len__(self) -> int:
        return len(self._rows)


def _ad_group_key(row: AdGroupRow) -> AdGroupKey:
    return (row.campaign_id, row.ad_group_name_norm)


def _target_key(row: TargetRow) -> TargetKey | None:
    if row.is_negative or row.ad_group_id is None:
        return None
    return (row.ad_group_id, row.expression_norm, row.match_type_norm)


@dataclass(slots=True, kw_only=True)
class SnapshotView:
    """Indexed, read-only rows of one account at one snapshot date."""

    account_id: str
    snapshot_date: date
    entity_kinds: frozenset[EntityKind]
    campaigns: tuple[CampaignRow, ...] = ()
    ad_groups: tuple[AdGroupRow, ...] = ()
    targets: tuple[TargetRow, ...] = ()
    placements: tuple[PlacementRow, ...] = ()
    _campaigns_by_name: NaturalKeyIndex[CampaignKey, CampaignRow] = field(init=False)
    _ad_groups_by_key: NaturalKeyIndex[AdGroupKey, AdGroupRow] = field(init=False)
    _targets_by_key: NaturalKeyIndex[TargetKey, TargetRow] = field(init=False)
    _campaigns_by_id: dict[str, CampaignRow] = field(init=False)
    _ad_groups_by_id: dict[str, AdGroupRow] = field(init=False)
    _targets_by_id: dict[str, TargetRow] = field(init=False)

    def __post_init__(self) -> None:
        self._campaigns_by_name = NaturalKeyIndex(
            self.campaigns, key=lambda row: row.campaign_name_norm
        )
        self._ad_groups_by_key = NaturalKeyIndex(self.ad_groups, key=_ad_group_key)
        self._targets_by_key = NaturalKeyIndex(self.targets, key=_target_key)
        self._campaigns_by_id = {row.campaign_id: row for row in self.campaigns}
        self._ad_groups_by_id = {row.ad_group_id: row for row in self.ad_groups}
        self._targets_by_id = {row.target_id: row for row in self.targets}

    def find_campaigns(self, name: str) -> tuple[CampaignRow, ...]:
        return self._campaigns_by_name.candidates(normalize_name(name))

    def find_ad_groups(self, campaign_id: str, name: str) -> tuple[AdGroupRow, ...]:
        return self._ad_groups_by_key.candidates((campaign_id, normalize_name(name)))

    def find_targets(
        self,
        ad_group_id: str,
        expression: str,
        match_type: str,
    ) -> tuple[TargetRow, ...]:
        return self._targets_by_key.candidates(
            (ad_group_id, normalize_name(expression), normalize_name(match_type))
        )

    def campaign(self, campaign_id: str) -> CampaignRow | None:
        return self._campaigns_by_id.get(campaign_id)

    def ad_group(self, ad_group_id: str) -> AdGroupRow | None:
        return self._ad_groups_by_id.get(ad_group_id)

    def target(self, target_id: str) -> TargetRow | None:
        return self._targets_by_id.get(target_id)

    def ambiguous_campaign_names(self) -> list[CampaignKey]:
        return self._campaigns_by_name.ambiguous_keys()


@dataclass(slots=True)
class SnapshotRepository:
    """Load the snapshot a reconciliation pass works against."""

    reader: SnapshotReader
    account_id: str

    def resolve_snapshot_date(self, snapshot_date: date | None = None) -> date:
        if snapshot_date is not None:
            if not self.reader.has_snapshot(self.account_id, snapshot_date):
                raise NoSnapshotAvailable(self.account_id, snapshot_date=snapshot_date)
            return snapshot_date
        latest = self.reader.latest_snapshot_date(self.account_id)
        if latest is None:
            raise NoSnapshotAvailable(self.account_id)
        return latest

    def load_latest(
        self,
        entity_kinds: Iterable[EntityKind] = RECONCILE_ENTITY_KINDS,
        *,
        snapshot_date: date | None = None,
    ) -> SnapshotView:
        """Load an indexed view of the newest snapshot (or ``snapshot_date``)."""

        kinds = frozenset(entity_kinds)
        resolved_date = self.resolve_snapshot_date(snapshot_date)
        reader = self.reader
        account_id = self.account_id

        campaigns = (
            reader.campaigns(account_id, resolved_date)
            if EntityKind.CAMPAIGN in kinds
            else []
        )
        ad_groups = (
            reader.ad_groups(account_id, resolved_date)
            if EntityKind.AD_GROUP in kinds
            else []
        )
        targets = (
            reader.targets(account_id, resolved_date) if EntityKind.TARGET in kinds else []
        )
        placements = (
            reader.placements(account_id, resolved_date)
            if EntityKind.PLACEMENT in kinds
            else []
        )

        view = SnapshotView(
            account_id=account_id,
            snapshot_date=resolved_date,
            entity_kinds=kinds,
            campaigns=tuple(campaigns),
            ad_groups=tuple(ad_groups),
            targets=tuple(targets),
            placements=tuple(placements),
        )
        log.info(
            "Loaded snapshot account_id=%s snapshot_date=%s campaigns=%s ad_groups=%s "
            "targets=%s placements=%s",
            account_id,
            resolved_date.isoformat(),
            len(campaigns),
            len(ad_groups),
            len(targets),
            len(placements),
        )
        ambiguous = view.ambiguous_campaign_names()
        if ambiguous:
            log.warning(
                "Snapshot %s has %s campaign names shared by several campaigns; "
                "manifest campaigns with these names will not match",
                resolved_date.isoformat(),
                len(ambiguous),
            )
        return view
