"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityKind(StrEnum):
    """Snapshot entity kinds that can be loaded and indexed."""

    CAMPAIGN = "campaign"
    AD_GROUP = "ad_group"
    TARGET = "target"
    PLACEMENT = "placement"


class QueueState(StrEnum):
    """Storage location of a creation manifest."""

    PENDING = "pending"
    RECONCILED = "reconciled"
    FAILED = "failed"


class MatchReason(StrEnum):
    """Why a manifest entity did or did not bind to a snapshot row."""

    EXACT = "exact_match"
    NOT_FOUND = "no_match"
    AMBIGUOUS = "multiple_matches"
    PARENT_UNMATCHED = "parent_unmatched"


class ConfirmationTier(StrEnum):
    """Strength of a positive match."""

    IDENTIFIER = "identifier"
    PARENT_ONLY = "parent_only"


class MutationActionType(StrEnum):
    UPDATE_CAMPAIGN_BUDGET = "update_campaign_budget"
    UPDATE_CAMPAIGN_STATE = "update_campaign_state"
    UPDATE_CAMPAIGN_BIDDING_STRATEGY = "update_campaign_bidding_strategy"
    UPDATE_AD_GROUP_STATE = "update_ad_group_state"
    UPDATE_AD_GROUP_DEFAULT_BID = "update_ad_group_default_bid"
    UPDATE_TARGET_BID = "update_target_bid"
    UPDATE_TARGET_STATE = "update_target_state"
    UPDATE_PLACEMENT_MODIFIER = "update_placement_modifier"
