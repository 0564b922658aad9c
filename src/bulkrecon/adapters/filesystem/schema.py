"""Pydantic models describing manifest files and their outcome sidecars."""

from __future__ import annotations

from datetime import date, datetime  # noqa: TC003

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bulkrecon.domain.model import ConfirmationTier, MatchReason  # noqa: TC001


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _require_text(value: object) -> object:
    if isinstance(value, str) and not value.strip():
        raise ValueError("must not be blank")
    return value


class ManifestBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class CampaignPayload(ManifestBaseModel):
    name: str
    temp_id: str | None = None
    portfolio_id: str | None = None

    _check_name = field_validator("name", mode="before")(_require_text)
    _normalize_optional = field_validator("temp_id", "portfolio_id", mode="before")(
        _blank_to_none
    )


class AdGroupPayload(ManifestBaseModel):
    campaign_name: str
    ad_group_name: str
    temp_id: str | None = None

    _check_names = field_validator("campaign_name", "ad_group_name", mode="before")(
        _require_text
    )
    _normalize_optional = field_validator("temp_id", mode="before")(_blank_to_none)


class ProductAdPayload(ManifestBaseModel):
    campaign_name: str
    ad_group_name: str
    sku: str | None = None
    asin: str | None = None

    _check_names = field_validator("campaign_name", "ad_group_name", mode="before")(
        _require_text
    )
    _normalize_optional = field_validator("sku", "asin", mode="before")(_blank_to_none)


class KeywordPayload(ManifestBaseModel):
    campaign_name: str
    ad_group_name: str
    keyword_text: str
    match_type: str
    bid: float | None = None

    _check_names = field_validator(
        "campaign_name", "ad_group_name", "keyword_text", "match_type", mode="before"
    )(_require_text)


class ManifestPayload(ManifestBaseModel):
    run_id: str
    generator: str
    created_at: datetime | None = None
    campaigns: list[CampaignPayload] = Field(default_factory=list[CampaignPayload])
    ad_groups: list[AdGroupPayload] = Field(default_factory=list[AdGroupPayload])
    product_ads: list[ProductAdPayload] = Field(default_factory=list[ProductAdPayload])
    keywords: list[KeywordPayload] = Field(default_factory=list[KeywordPayload])

    _check_identity = field_validator("run_id", "generator", mode="before")(_require_text)


# Sidecars --------------------------------------------------------------------


class CampaignMatchPayload(ManifestBaseModel):
    campaign_name: str
    campaign_id: str | None
    matched: bool
    reason: MatchReason


class AdGroupMatchPayload(ManifestBaseModel):
    campaign_name: str
    ad_group_name: str
    campaign_id: str | None
    ad_group_id: str | None
    matched: bool
    reason: MatchReason


class KeywordMatchPayload(ManifestBaseModel):
    campaign_name: str
    ad_group_name: str
    keyword_text: str
    match_type: str
    ad_group_id: str | None
    target_id: str | None
    matched: bool
    reason: MatchReason


class ProductAdMatchPayload(ManifestBaseModel):
    campaign_name: str
    ad_group_name: str
    sku: str | None = None
    asin: str | None = None
    ad_group_id: str | None
    ad_id: None = None
    matched: bool
    note: str
    reason: MatchReason
    confirmation: ConfirmationTier


class KindCountsPayload(ManifestBaseModel):
    expected: int
    matched: int


class CountsPayload(ManifestBaseModel):
    expected: int
    matched: int
    campaigns: KindCountsPayload
    ad_groups: KindCountsPayload
    keywords: KindCountsPayload
    product_ads: KindCountsPayload


class ReconcileResultPayload(ManifestBaseModel):
    run_id: str
    generator: str
    matched_at: datetime
    campaign_matches: list[CampaignMatchPayload]
    ad_group_matches: list[AdGroupMatchPayload]
    keyword_matches: list[KeywordMatchPayload]
    product_ad_matches: list[ProductAdMatchPayload]
    counts: CountsPayload
    all_matched: bool


class ReconcileSidecar(ManifestBaseModel):
    run_id: str
    account_id: str
    snapshot_date: date
    matched_at: datetime
    matches: ReconcileResultPayload


class FailureSidecar(ManifestBaseModel):
    error: str
    stack: str | None = None
