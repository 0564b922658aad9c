"""Manifest payload builders shared by queue, pass and CLI tests."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from bulkrecon.adapters.filesystem import PENDING_DIRNAME
from bulkrecon.domain.model import (
    CreationManifest,
    ManifestAdGroup,
    ManifestCampaign,
    ManifestKeyword,
    ManifestProductAd,
)

from .snapshots import SnapshotRows, ad_group, campaign, target

if TYPE_CHECKING:
    from pathlib import Path

type ManifestPayload = dict[str, object]


def manifest_payload(
    run_id: str = "run-1",
    *,
    campaign_name: str = "Widgets | Exact",
    ad_group_name: str = "Blue Widgets",
    keywords: tuple[tuple[str, str], ...] = (("blue widget", "exact"),),
    sku: str | None = "SKU-1",
) -> ManifestPayload:
    """One campaign, one ad group, its keywords and (optionally) one product ad."""

    return {
        "run_id": run_id,
        "generator": "test-generator",
        "created_at": "2026-03-01T12:00:00Z",
        "campaigns": [{"name": campaign_name, "temp_id": "tmp-c1"}],
        "ad_groups": [
            {"campaign_name": campaign_name, "ad_group_name": ad_group_name, "temp_id": "tmp-a1"}
        ],
        "product_ads": (
            [{"campaign_name": campaign_name, "ad_group_name": ad_group_name, "sku": sku}]
            if sku
            else []
        ),
        "keywords": [
            {
                "campaign_name": campaign_name,
                "ad_group_name": ad_group_name,
                "keyword_text": text,
                "match_type": match_type,
                "bid": 0.75,
            }
            for text, match_type in keywords
        ],
    }


def matching_rows() -> SnapshotRows:
    """Snapshot rows that confirm every entity of the default ``manifest_payload``."""

    return SnapshotRows(
        campaigns=[campaign("C1", "  widgets |  EXACT ")],
        ad_groups=[ad_group("A1", "C1", "blue widgets")],
        targets=[target("T1", "A1", "C1", "Blue  Widget", "EXACT")],
    )


def manifest(
    run_id: str = "run-1",
    *,
    campaigns: tuple[ManifestCampaign, ...] = (),
    ad_groups: tuple[ManifestAdGroup, ...] = (),
    keywords: tuple[ManifestKeyword, ...] = (),
    product_ads: tuple[ManifestProductAd, ...] = (),
) -> CreationManifest:
    return CreationManifest(
        run_id=run_id,
        generator="test-generator",
        campaigns=campaigns,
        ad_groups=ad_groups,
        keywords=keywords,
        product_ads=product_ads,
    )


def write_pending(base_dir: Path, name: str, payload: object) -> Path:
    """Write a manifest (or any JSON value) into ``<base>/_PENDING_RECONCILE``."""

    pending_dir = base_dir / PENDING_DIRNAME
    pending_dir.mkdir(parents=True, exist_ok=True)
    path = pending_dir / name
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path
