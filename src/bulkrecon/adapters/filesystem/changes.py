"""Changes files: pending mutation actions exported for review before upload."""

from __future__ import annotations

import json
from datetime import datetime  # noqa: TC003
from typing import TYPE_CHECKING, Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from bulkrecon.domain.model import (
    UpdateAdGroupDefaultBid,
    UpdateAdGroupState,
    UpdateCampaignBiddingStrategy,
    UpdateCampaignBudget,
    UpdateCampaignState,
    UpdatePlacementModifier,
    UpdateTargetBid,
    UpdateTargetState,
)

if TYPE_CHECKING:
    from pathlib import Path

    from bulkrecon.domain.model import MutationAction


def _strip_id(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped
    if isinstance(value, int):
        return str(value)
    return value


class ActionBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class UpdateCampaignBudgetPayload(ActionBaseModel):
    type: Literal["update_campaign_budget"]
    campaign_id: str
    new_budget: float

    _clean_ids = field_validator("campaign_id", mode="before")(_strip_id)


class UpdateCampaignStatePayload(ActionBaseModel):
    type: Literal["update_campaign_state"]
    campaign_id: str
    new_state: str

    _clean_ids = field_validator("campaign_id", mode="before")(_strip_id)


class UpdateCampaignBiddingStrategyPayload(ActionBaseModel):
    type: Literal["update_campaign_bidding_strategy"]
    campaign_id: str
    new_strategy: str

    _clean_ids = field_validator("campaign_id", mode="before")(_strip_id)


class UpdateAdGroupStatePayload(ActionBaseModel):
    type: Literal["update_ad_group_state"]
    ad_group_id: str
    new_state: str

    _clean_ids = field_validator("ad_group_id", mode="before")(_strip_id)


class UpdateAdGroupDefaultBidPayload(ActionBaseModel):
    type: Literal["update_ad_group_default_bid"]
    ad_group_id: str
    new_bid: float

    _clean_ids = field_validator("ad_group_id", mode="before")(_strip_id)


class UpdateTargetBidPayload(ActionBaseModel):
    type: Literal["update_target_bid"]
    target_id: str
    new_bid: float

    _clean_ids = field_validator("target_id", mode="before")(_strip_id)


class UpdateTargetStatePayload(ActionBaseModel):
    type: Literal["update_target_state"]
    target_id: str
    new_state: str

    _clean_ids = field_validator("target_id", mode="before")(_strip_id)


class UpdatePlacementModifierPayload(ActionBaseModel):
    type: Literal["update_placement_modifier"]
    campaign_id: str
    placement_code: str
    new_pct: float

    _clean_ids = field_validator("campaign_id", "placement_code", mode="before")(_strip_id)


ActionPayload = Annotated[
    UpdateCampaignBudgetPayload
    | UpdateCampaignStatePayload
    | UpdateCampaignBiddingStrategyPayload
    | UpdateAdGroupStatePayload
    | UpdateAdGroupDefaultBidPayload
    | UpdateTargetBidPayload
    | UpdateTargetStatePayload
    | UpdatePlacementModifierPayload,
    Field(discriminator="type"),
]


class ChangesFilePayload(ActionBaseModel):
    exported_at: datetime | None = None
    notes: str | None = None
    actions: list[ActionPayload]


def _to_action(payload: ActionPayload) -> MutationAction:  # noqa: PLR0911
    match payload:
        case UpdateCampaignBudgetPayload():
            return UpdateCampaignBudget(payload.campaign_id, payload.new_budget)
        case UpdateCampaignStatePayload():
            return UpdateCampaignState(payload.campaign_id, payload.new_state)
        case UpdateCampaignBiddingStrategyPayload():
            return UpdateCampaignBiddingStrategy(payload.campaign_id, payload.new_strategy)
        case UpdateAdGroupStatePayload():
            return UpdateAdGroupState(payload.ad_group_id, payload.new_state)
        case UpdateAdGroupDefaultBidPayload():
            return UpdateAdGroupDefaultBid(payload.ad_group_id, payload.new_bid)
        case UpdateTargetBidPayload():
            return UpdateTargetBid(payload.target_id, payload.new_bid)
        case UpdateTargetStatePayload():
            return UpdateTargetState(payload.target_id, payload.new_state)
        case UpdatePlacementModifierPayload():
            return UpdatePlacementModifier(
                payload.campaign_id, payload.placement_code, payload.new_pct
            )


def parse_changes(payload: object) -> list[MutationAction]:
    """Validate a decoded changes file and return its domain actions."""

    try:
        model = ChangesFilePayload.model_validate(payload)
    except ValidationError as exc:
        raise ValueError(f"Invalid changes file: {exc}") from exc
    return [_to_action(action) for action in model.actions]


def load_changes_file(path: Path) -> list[MutationAction]:
    with path.open(encoding="utf-8") as handle:
        try:
            payload = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid changes file: {exc}") from exc
    return parse_changes(payload)
