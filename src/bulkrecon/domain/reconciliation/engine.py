"""Natural-key matching of creation manifests against a snapshot view.

Matching order is campaigns, ad groups, keywords, product ads: every child is
scoped by the identifier its parent resolved to. There is no fallback scan
across parents, and a key with more than one candidate never binds.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from bulkrecon.domain.errors import StructuralManifestError
from bulkrecon.domain.model import MatchReason
from bulkrecon.domain.normalize import normalize_name

from .contracts import (
    PRODUCT_AD_ID_UNAVAILABLE,
    PRODUCT_AD_MISSING_PARENT,
    AdGroupMatch,
    CampaignMatch,
    KeywordMatch,
    KindCounts,
    MatchCounts,
    ProductAdMatch,
    ReconcileResult,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from bulkrecon.domain.model import (
        CreationManifest,
        ManifestAdGroup,
        ManifestCampaign,
        ManifestKeyword,
        ManifestProductAd,
    )

    from .snapshot import SnapshotView


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class _Binding:
    """Outcome of applying the zero/one/many rule to a candidate set."""

    identifier: str | None
    reason: MatchReason

    @property
    def matched(self) -> bool:
        return self.identifier is not None


_PARENT_UNMATCHED = _Binding(None, MatchReason.PARENT_UNMATCHED)


def _bind[R](candidates: tuple[R, ...], identifier: Callable[[R], str]) -> _Binding:
    if not candidates:
        return _Binding(None, MatchReason.NOT_FOUND)
    if len(candidates) > 1:
        return _Binding(None, MatchReason.AMBIGUOUS)
    return _Binding(identifier(candidates[0]), MatchReason.EXACT)


def validate_manifest_identity(manifest: CreationManifest) -> None:
    """Raise ``StructuralManifestError`` when ``run_id`` or ``generator`` is blank."""

    missing = [
        name
        for name, value in (("run_id", manifest.run_id), ("generator", manifest.generator))
        if not value or not str(value).strip()
    ]
    if missing:
        raise StructuralManifestError(
            f"Manifest missing required fields: {' and '.join(missing)}."
        )


@dataclass(slots=True)
class ReconcileEngine:
    """Stateless matcher; every call starts from the manifest and the view."""

    clock: Callable[[], datetime] = field(default=_utcnow)

    def reconcile(self, manifest: CreationManifest, snapshot: SnapshotView) -> ReconcileResult:
        validate_manifest_identity(manifest)

        campaign_bindings: dict[str, _Binding] = {}

        def campaign_binding(name: str) -> _Binding:
            key = normalize_name(name)
            if key not in campaign_bindings:
                campaign_bindings[key] = _bind(
                    snapshot.find_campaigns(name), lambda row: row.campaign_id
                )
            return campaign_bindings[key]

        ad_group_bindings: dict[tuple[str, str], _Binding] = {}

        def ad_group_binding(campaign_name: str, ad_group_name: str) -> _Binding:
            parent = campaign_binding(campaign_name)
            if parent.identifier is None:
                return _PARENT_UNMATCHED
            key = (parent.identifier, normalize_name(ad_group_name))
            if key not in ad_group_bindings:
                ad_group_bindings[key] = _bind(
                    snapshot.find_ad_groups(parent.identifier, ad_group_name),
                    lambda row: row.ad_group_id,
                )
            return ad_group_bindings[key]

        campaign_matches = tuple(
            self._match_campaign(campaign, campaign_binding(campaign.name))
            for campaign in manifest.campaigns
        )
        ad_group_matches = tuple(
            self._match_ad_group(
                ad_group,
                campaign_binding(ad_group.campaign_name),
                ad_group_binding(ad_group.campaign_name, ad_group.ad_group_name),
            )
            for ad_group in manifest.ad_groups
        )
        keyword_matches = tuple(
            self._match_keyword(
                keyword,
                ad_group_binding(keyword.campaign_name, keyword.ad_group_name),
                snapshot,
            )
            for keyword in manifest.keywords
        )
        product_ad_matches = tuple(
            self._match_product_ad(
                product_ad,
                ad_group_binding(product_ad.campaign_name, product_ad.ad_group_name),
            )
            for product_ad in manifest.product_ads
        )

        counts = MatchCounts(
            campaigns=KindCounts.of(campaign_matches),
            ad_groups=KindCounts.of(ad_group_matches),
            keywords=KindCounts.of(keyword_matches),
            product_ads=KindCounts.of(product_ad_matches),
        )
        return ReconcileResult(
            run_id=manifest.run_id,
            generator=manifest.generator,
            matched_at=self.clock(),
            campaign_matches=campaign_matches,
            ad_group_matches=ad_group_matches,
            keyword_matches=keyword_matches,
            product_ad_matches=product_ad_matches,
            counts=counts,
        )

    @staticmethod
    def _match_campaign(campaign: ManifestCampaign, binding: _Binding) -> CampaignMatch:
        return CampaignMatch(
            campaign_name=campaign.name,
            campaign_id=binding.identifier,
            matched=binding.matched,
            reason=binding.reason,
        )

    @staticmethod
    def _match_ad_group(
        ad_group: ManifestAdGroup,
        parent: _Binding,
        binding: _Binding,
    ) -> AdGroupMatch:
        return AdGroupMatch(
            campaign_name=ad_group.campaign_name,
            ad_group_name=ad_group.ad_group_name,
            campaign_id=parent.identifier,
            ad_group_id=binding.identifier,
            matched=binding.matched,
            reason=binding.reason,
        )

    @staticmethod
    def _match_keyword(
        keyword: ManifestKeyword,
        parent: _Binding,
        snapshot: SnapshotView,
    ) -> KeywordMatch:
        if parent.identifier is None:
            binding = _PARENT_UNMATCHED
        else:
            binding = _bind(
                snapshot.find_targets(parent.identifier, keyword.keyword_text, keyword.match_type),
                lambda row: row.target_id,
            )
        return KeywordMatch(
            campaign_name=keyword.campaign_name,
            ad_group_name=keyword.ad_group_name,
            keyword_text=keyword.keyword_text,
            match_type=keyword.match_type,
            ad_group_id=parent.identifier,
            target_id=binding.identifier,
            matched=binding.matched,
            reason=binding.reason,
        )

    @staticmethod
    def _match_product_ad(product_ad: ManifestProductAd, parent: _Binding) -> ProductAdMatch:
        matched = parent.matched
        return ProductAdMatch(
            campaign_name=product_ad.campaign_name,
            ad_group_name=product_ad.ad_group_name,
            sku=product_ad.sku,
            asin=product_ad.asin,
            ad_group_id=parent.identifier,
            matched=matched,
            note=PRODUCT_AD_ID_UNAVAILABLE if matched else PRODUCT_AD_MISSING_PARENT,
            reason=MatchReason.EXACT if matched else MatchReason.PARENT_UNMATCHED,
        )
