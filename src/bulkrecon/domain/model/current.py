"""Current platform state for entities referenced by mutation actions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from bulkrecon.domain.normalize import placement_key

if TYPE_CHECKING:
    from datetime import date

    from .snapshot import AdGroupRow, CampaignRow, PlacementRow, TargetRow


@dataclass(slots=True, kw_only=True)
class CurrentEntitySnapshot:
    """Identifier-keyed current values, scoped to one snapshot date.

    Built fresh for every resolve call. An identifier missing from a map means
    the entity was not found in the snapshot (for example it was deleted).
    """

    snapshot_date: date
    campaigns_by_id: dict[str, CampaignRow] = field(default_factory=dict[str, "CampaignRow"])
    ad_groups_by_id: dict[str, AdGroupRow] = field(default_factory=dict[str, "AdGroupRow"])
    targets_by_id: dict[str, TargetRow] = field(default_factory=dict[str, "TargetRow"])
    placements_by_key: dict[str, PlacementRow] = field(default_factory=dict[str, "PlacementRow"])

    def campaign(self, campaign_id: str) -> CampaignRow | None:
        return self.campaigns_by_id.get(campaign_id)

    def ad_group(self, ad_group_id: str) -> AdGroupRow | None:
        return self.ad_groups_by_id.get(ad_group_id)

    def target(self, target_id: str) -> TargetRow | None:
        return self.targets_by_id.get(target_id)

    def placement(self, campaign_id: str, placement_code: str) -> PlacementRow | None:
        return self.placements_by_key.get(placement_key(campaign_id, placement_code))
