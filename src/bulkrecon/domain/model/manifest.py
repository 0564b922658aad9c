"""Creation manifests: batches of entities a generator asked the platform to create.

Manifest entities carry natural keys only. Platform identifiers become known
once a later snapshot confirms the entities exist.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(frozen=True, slots=True)
class ManifestCampaign:
    name: str
    temp_id: str | None = None
    portfolio_id: str | None = None


@dataclass(frozen=True, slots=True)
class ManifestAdGroup:
    campaign_name: str
    ad_group_name: str
    temp_id: str | None = None


@dataclass(frozen=True, slots=True)
class ManifestProductAd:
    campaign_name: str
    ad_group_name: str
    sku: str | None = None
    asin: str | None = None


@dataclass(frozen=True, slots=True)
class ManifestKeyword:
    campaign_name: str
    ad_group_name: str
    keyword_text: str
    match_type: str
    bid: float | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class CreationManifest:
    """One batch submission, read-only after the generator wrote it."""

    run_id: str
    generator: str
    created_at: datetime | None = None
    campaigns: tuple[ManifestCampaign, ...] = field(default_factory=tuple)
    ad_groups: tuple[ManifestAdGroup, ...] = field(default_factory=tuple)
    product_ads: tuple[ManifestProductAd, ...] = field(default_factory=tuple)
    keywords: tuple[ManifestKeyword, ...] = field(default_factory=tuple)

    @property
    def expected_count(self) -> int:
        return (
            len(self.campaigns) + len(self.ad_groups) + len(self.product_ads) + len(self.keywords)
        )
