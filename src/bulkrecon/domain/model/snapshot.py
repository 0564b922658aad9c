"""Rows of a dated full-state export, one dataclass per entity kind.

Normalized names are derived with ``normalize_name`` so the snapshot side of a
match is always produced by the same function as the manifest side.
"""

from __future__ import annotations

from dataclasses import dataclass

from bulkrecon.domain.normalize import normalize_name, placement_key


@dataclass(frozen=True, slots=True, kw_only=True)
class CampaignRow:
    campaign_id: str
    campaign_name_raw: str
    state: str | None = None
    daily_budget: float | None = None
    bidding_strategy: str | None = None
    portfolio_id: str | None = None

    @property
    def campaign_name_norm(self) -> str:
        return normalize_name(self.campaign_name_raw)


@dataclass(frozen=True, slots=True, kw_only=True)
class AdGroupRow:
    ad_group_id: str
    campaign_id: str
    ad_group_name_raw: str
    state: str | None = None
    default_bid: float | None = None

    @property
    def ad_group_name_norm(self) -> str:
        return normalize_name(self.ad_group_name_raw)


@dataclass(frozen=True, slots=True, kw_only=True)
class TargetRow:
    target_id: str
    ad_group_id: str | None
    campaign_id: str | None
    expression_raw: str
    match_type: str
    is_negative: bool = False
    state: str | None = None
    bid: float | None = None

    @property
    def expression_norm(self) -> str:
        return normalize_name(self.expression_raw)

    @property
    def match_type_norm(self) -> str:
        return normalize_name(self.match_type)


@dataclass(frozen=True, slots=True, kw_only=True)
class PlacementRow:
    campaign_id: str
    placement_raw: str
    placement_code: str
    percentage: float

    @property
    def key(self) -> str:
        return placement_key(self.campaign_id, self.placement_code)


type SnapshotRow = CampaignRow | AdGroupRow | TargetRow | PlacementRow
