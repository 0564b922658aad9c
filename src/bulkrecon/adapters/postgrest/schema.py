"""Row schemas returned by the PostgREST snapshot resources."""

from __future__ import annotations

from datetime import date  # noqa: TC003
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator


class SnapshotResource(StrEnum):
    SNAPSHOTS = "bulk_snapshots"
    CAMPAIGNS = "bulk_campaigns"
    AD_GROUPS = "bulk_ad_groups"
    TARGETS = "bulk_targets"
    PLACEMENTS = "bulk_placements"


def _id_to_text(value: object) -> object:
    # PostgREST renders bigint identifiers as JSON numbers.
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


class SnapshotBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class SnapshotDateRow(SnapshotBaseModel):
    snapshot_date: date


class CampaignRecord(SnapshotBaseModel):
    campaign_id: str
    campaign_name_raw: str
    state: str | None = None
    daily_budget: float | None = None
    bidding_strategy: str | None = None
    portfolio_id: str | None = None

    _ids = field_validator("campaign_id", "portfolio_id", mode="before")(_id_to_text)


class AdGroupRecord(SnapshotBaseModel):
    ad_group_id: str
    campaign_id: str
    ad_group_name_raw: str
    state: str | None = None
    default_bid: float | None = None

    _ids = field_validator("ad_group_id", "campaign_id", mode="before")(_id_to_text)


class TargetRecord(SnapshotBaseModel):
    target_id: str
    ad_group_id: str | None = None
    campaign_id: str | None = None
    expression_raw: str
    match_type: str
    is_negative: bool = False
    state: str | None = None
    bid: float | None = None

    _ids = field_validator("target_id", "ad_group_id", "campaign_id", mode="before")(
        _id_to_text
    )


class PlacementRecord(SnapshotBaseModel):
    campaign_id: str
    placement_raw: str
    placement_code: str
    percentage: float

    _ids = field_validator("campaign_id", mode="before")(_id_to_text)
