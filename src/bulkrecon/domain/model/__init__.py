"""Public domain model surface."""

from __future__ import annotations

from bulkrecon.domain.model.actions import (
    AdGroupAction,
    CampaignAction,
    MutationAction,
    TargetAction,
    UpdateAdGroupDefaultBid,
    UpdateAdGroupState,
    UpdateCampaignBiddingStrategy,
    UpdateCampaignBudget,
    UpdateCampaignState,
    UpdatePlacementModifier,
    UpdateTargetBid,
    UpdateTargetState,
)
from bulkrecon.domain.model.current import CurrentEntitySnapshot
from bulkrecon.domain.model.enums import (
    ConfirmationTier,
    EntityKind,
    MatchReason,
    MutationActionType,
    QueueState,
)
from bulkrecon.domain.model.manifest import (
    CreationManifest,
    ManifestAdGroup,
    ManifestCampaign,
    ManifestKeyword,
    ManifestProductAd,
)
from bulkrecon.domain.model.queue import QueueItem
from bulkrecon.domain.model.snapshot import (
    AdGroupRow,
    CampaignRow,
    PlacementRow,
    SnapshotRow,
    TargetRow,
)

__all__ = [
    "AdGroupAction",
    "AdGroupRow",
    "CampaignAction",
    "CampaignRow",
    "ConfirmationTier",
    "CreationManifest",
    "CurrentEntitySnapshot",
    "EntityKind",
    "ManifestAdGroup",
    "ManifestCampaign",
    "ManifestKeyword",
    "ManifestProductAd",
    "MatchReason",
    "MutationAction",
    "MutationActionType",
    "PlacementRow",
    "QueueItem",
    "QueueState",
    "SnapshotRow",
    "TargetAction",
    "TargetRow",
    "UpdateAdGroupDefaultBid",
    "UpdateAdGroupState",
    "UpdateCampaignBiddingStrategy",
    "UpdateCampaignBudget",
    "UpdateCampaignState",
    "UpdatePlacementModifier",
    "UpdateTargetBid",
    "UpdateTargetState",
]
