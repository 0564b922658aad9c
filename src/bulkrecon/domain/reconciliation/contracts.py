"""Result types produced by one reconciliation attempt of one manifest.

A ``ReconcileResult`` is created fresh on every attempt and is only persisted
as the sidecar of a terminal queue transition.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from bulkrecon.domain.model import ConfirmationTier, MatchReason

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

PRODUCT_AD_ID_UNAVAILABLE = "ad_id_unavailable"
PRODUCT_AD_MISSING_PARENT = "missing_campaign_or_ad_group"


@dataclass(frozen=True, slots=True, kw_only=True)
class CampaignMatch:
    campaign_name: str
    campaign_id: str | None
    matched: bool
    reason: MatchReason


@dataclass(frozen=True, slots=True, kw_only=True)
class AdGroupMatch:
    campaign_name: str
    ad_group_name: str
    ad_group_id: str | None
    matched: bool
    reason: MatchReason
    campaign_id: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class KeywordMatch:
    campaign_name: str
    ad_group_name: str
    keyword_text: str
    match_type: str
    target_id: str | None
    matched: bool
    reason: MatchReason
    ad_group_id: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ProductAdMatch:
    """Product ads are confirmed through their parent ad group only.

    The snapshot channel never exposes a stable product-ad identifier, so a
    match here always has ``ad_id=None`` and ``confirmation=PARENT_ONLY``.
    """

    campaign_name: str
    ad_group_name: str
    sku: str | None
    asin: str | None
    matched: bool
    note: str
    reason: MatchReason
    ad_id: None = None
    ad_group_id: str | None = None
    confirmation: ConfirmationTier = ConfirmationTier.PARENT_ONLY


type EntityMatch = CampaignMatch | AdGroupMatch | KeywordMatch | ProductAdMatch


@dataclass(frozen=True, slots=True)
class KindCounts:
    expected: int
    matched: int

    @classmethod
    def of(cls, rows: Sequence[EntityMatch]) -> KindCounts:
        return cls(expected=len(rows), matched=sum(1 for row in rows if row.matched))


@dataclass(frozen=True, slots=True, kw_only=True)
class MatchCounts:
    campaigns: KindCounts
    ad_groups: KindCounts
    keywords: KindCounts
    product_ads: KindCounts

    @property
    def expected(self) -> int:
        return sum(kind.expected for kind in self._kinds())

    @property
    def matched(self) -> int:
        return sum(kind.matched for kind in self._kinds())

    def _kinds(self) -> tuple[KindCounts, ...]:
        return (self.campaigns, self.ad_groups, self.keywords, self.product_ads)


@dataclass(frozen=True, slots=True, kw_only=True)
class ReconcileResult:
    run_id: str
    generator: str
    matched_at: datetime
    campaign_matches: tuple[CampaignMatch, ...]
    ad_group_matches: tuple[AdGroupMatch, ...]
    keyword_matches: tuple[KeywordMatch, ...]
    product_ad_matches: tuple[ProductAdMatch, ...]
    counts: MatchCounts

    @property
    def all_matched(self) -> bool:
        """True only when something was expected and everything expected matched."""

        return self.counts.expected > 0 and self.counts.expected == self.counts.matched
