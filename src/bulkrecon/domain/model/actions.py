"""Pending mutation actions addressing existing platform entities by identifier."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from .enums import MutationActionType


@dataclass(frozen=True, slots=True)
class CampaignAction:
    campaign_id: str


@dataclass(frozen=True, slots=True)
class AdGroupAction:
    ad_group_id: str


@dataclass(frozen=True, slots=True)
class TargetAction:
    target_id: str


@dataclass(frozen=True, slots=True)
class UpdateCampaignBudget(CampaignAction):
    type: ClassVar[MutationActionType] = MutationActionType.UPDATE_CAMPAIGN_BUDGET
    new_budget: float


@dataclass(frozen=True, slots=True)
class UpdateCampaignState(CampaignAction):
    type: ClassVar[MutationActionType] = MutationActionType.UPDATE_CAMPAIGN_STATE
    new_state: str


@dataclass(frozen=True, slots=True)
class UpdateCampaignBiddingStrategy(CampaignAction):
    type: ClassVar[MutationActionType] = MutationActionType.UPDATE_CAMPAIGN_BIDDING_STRATEGY
    new_strategy: str


@dataclass(frozen=True, slots=True)
class UpdateAdGroupState(AdGroupAction):
    type: ClassVar[MutationActionType] = MutationActionType.UPDATE_AD_GROUP_STATE
    new_state: str


@dataclass(frozen=True, slots=True)
class UpdateAdGroupDefaultBid(AdGroupAction):
    type: ClassVar[MutationActionType] = MutationActionType.UPDATE_AD_GROUP_DEFAULT_BID
    new_bid: float


@dataclass(frozen=True, slots=True)
class UpdateTargetBid(TargetAction):
    type: ClassVar[MutationActionType] = MutationActionType.UPDATE_TARGET_BID
    new_bid: float


@dataclass(frozen=True, slots=True)
class UpdateTargetState(TargetAction):
    type: ClassVar[MutationActionType] = MutationActionType.UPDATE_TARGET_STATE
    new_state: str


@dataclass(frozen=True, slots=True)
class UpdatePlacementModifier:
    type: ClassVar[MutationActionType] = MutationActionType.UPDATE_PLACEMENT_MODIFIER
    campaign_id: str
    placement_code: str
    new_pct: float


type MutationAction = (
    UpdateCampaignBudget
    | UpdateCampaignState
    | UpdateCampaignBiddingStrategy
    | UpdateAdGroupState
    | UpdateAdGroupDefaultBid
    | UpdateTargetBid
    | UpdateTargetState
    | UpdatePlacementModifier
)
