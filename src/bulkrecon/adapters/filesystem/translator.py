"""Translate between manifest/sidecar JSON payloads and domain objects."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import ValidationError

from bulkrecon.domain.errors import StructuralManifestError
from bulkrecon.domain.model import (
    CreationManifest,
    ManifestAdGroup,
    ManifestCampaign,
    ManifestKeyword,
    ManifestProductAd,
)

from .schema import (
    AdGroupMatchPayload,
    CampaignMatchPayload,
    CountsPayload,
    FailureSidecar,
    KeywordMatchPayload,
    KindCountsPayload,
    ManifestPayload,
    ProductAdMatchPayload,
    ReconcileResultPayload,
    ReconcileSidecar,
)

if TYPE_CHECKING:
    from bulkrecon.domain.ports import FailureOutcome, ReconcileOutcome
    from bulkrecon.domain.reconciliation import KindCounts, ReconcileResult


def _describe_validation_error(exc: ValidationError) -> str:
    problems: list[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "<root>"
        problems.append(f"{location}: {error['msg']}")
    return "; ".join(problems)


def parse_manifest(payload: object) -> CreationManifest:
    """Validate a decoded manifest payload and build the domain manifest.

    Raises ``StructuralManifestError`` naming every offending field.
    """

    if not isinstance(payload, dict):
        raise StructuralManifestError(
            f"Invalid manifest: expected a JSON object, got {type(payload).__name__}"
        )
    try:
        model = ManifestPayload.model_validate(payload)
    except ValidationError as exc:
        missing = [
            str(error["loc"][0])
            for error in exc.errors()
            if len(error["loc"]) == 1 and error["loc"][0] in {"run_id", "generator"}
        ]
        if missing:
            raise StructuralManifestError(
                f"Manifest missing required fields: {' and '.join(missing)}. "
                f"({_describe_validation_error(exc)})"
            ) from exc
        raise StructuralManifestError(
            f"Invalid manifest: {_describe_validation_error(exc)}"
        ) from exc
    return manifest_from_payload(model)


def manifest_from_payload(model: ManifestPayload) -> CreationManifest:
    return CreationManifest(
        run_id=model.run_id.strip(),
        generator=model.generator.strip(),
        created_at=model.created_at,
        campaigns=tuple(
            ManifestCampaign(
                name=campaign.name,
                temp_id=campaign.temp_id,
                portfolio_id=campaign.portfolio_id,
            )
            for campaign in model.campaigns
        ),
        ad_groups=tuple(
            ManifestAdGroup(
                campaign_name=ad_group.campaign_name,
                ad_group_name=ad_group.ad_group_name,
                temp_id=ad_group.temp_id,
            )
            for ad_group in model.ad_groups
        ),
        product_ads=tuple(
            ManifestProductAd(
                campaign_name=product_ad.campaign_name,
                ad_group_name=product_ad.ad_group_name,
                sku=product_ad.sku,
                asin=product_ad.asin,
            )
            for product_ad in model.product_ads
        ),
        keywords=tuple(
            ManifestKeyword(
                campaign_name=keyword.campaign_name,
                ad_group_name=keyword.ad_group_name,
                keyword_text=keyword.keyword_text,
                match_type=keyword.match_type,
                bid=keyword.bid,
            )
            for keyword in model.keywords
        ),
    )


def _counts_payload(counts: KindCounts) -> KindCountsPayload:
    return KindCountsPayload(expected=counts.expected, matched=counts.matched)


def result_payload(result: ReconcileResult) -> ReconcileResultPayload:
    counts = result.counts
    return ReconcileResultPayload(
        run_id=result.run_id,
        generator=result.generator,
        matched_at=result.matched_at,
        campaign_matches=[
            CampaignMatchPayload(
                campaign_name=row.campaign_name,
                campaign_id=row.campaign_id,
                matched=row.matched,
                reason=row.reason,
            )
            for row in result.campaign_matches
        ],
        ad_group_matches=[
            AdGroupMatchPayload(
                campaign_name=row.campaign_name,
                ad_group_name=row.ad_group_name,
                campaign_id=row.campaign_id,
                ad_group_id=row.ad_group_id,
                matched=row.matched,
                reason=row.reason,
            )
            for row in result.ad_group_matches
        ],
        keyword_matches=[
            KeywordMatchPayload(
                campaign_name=row.campaign_name,
                ad_group_name=row.ad_group_name,
                keyword_text=row.keyword_text,
                match_type=row.match_type,
                ad_group_id=row.ad_group_id,
                target_id=row.target_id,
                matched=row.matched,
                reason=row.reason,
            )
            for row in result.keyword_matches
        ],
        product_ad_matches=[
            ProductAdMatchPayload(
                campaign_name=row.campaign_name,
                ad_group_name=row.ad_group_name,
                sku=row.sku,
                asin=row.asin,
                ad_group_id=row.ad_group_id,
                ad_id=row.ad_id,
                matched=row.matched,
                note=row.note,
                reason=row.reason,
                confirmation=row.confirmation,
            )
            for row in result.product_ad_matches
        ],
        counts=CountsPayload(
            expected=counts.expected,
            matched=counts.matched,
            campaigns=_counts_payload(counts.campaigns),
            ad_groups=_counts_payload(counts.ad_groups),
            keywords=_counts_payload(counts.keywords),
            product_ads=_counts_payload(counts.product_ads),
        ),
        all_matched=result.all_matched,
    )


def reconcile_sidecar(outcome: ReconcileOutcome) -> ReconcileSidecar:
    return ReconcileSidecar(
        run_id=outcome.run_id,
        account_id=outcome.account_id,
        snapshot_date=outcome.snapshot_date,
        matched_at=outcome.matched_at,
        matches=result_payload(outcome.matches),
    )


def failure_sidecar(outcome: FailureOutcome) -> FailureSidecar:
    return FailureSidecar(error=outcome.error, stack=outcome.stack)
