"""Current-state lookups for pending mutation actions.

Actions address existing entities by platform identifier. The resolver
collects the referenced identifiers, expands them upward (target -> ad group ->
campaign) so callers always get the full ancestry, and fetches every distinct
identifier exactly once in pages of ``page_size``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from bulkrecon.domain.model import (
    AdGroupAction,
    CampaignAction,
    CurrentEntitySnapshot,
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
from bulkrecon.domain.reconciliation.snapshot import SnapshotRepository

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator, Sequence
    from datetime import date

    from bulkrecon.domain.model import MutationAction, MutationActionType
    from bulkrecon.domain.ports import SnapshotReader

log = logging.getLogger(__name__)

DEFAULT_LOOKUP_PAGE_SIZE = 1000


def chunked[T](items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    if size <= 0:
        raise ValueError("chunk size must be > 0")
    for start in range(0, len(items), size):
        yield items[start : start + size]


def _add_unique(ordered: list[str], seen: set[str], value: str | None) -> None:
    if value is None or value in seen:
        return
    seen.add(value)
    ordered.append(value)


@dataclass(slots=True)
class ActionIds:
    """Distinct identifiers referenced by a batch of actions, in first-seen order."""

    campaign_ids: list[str] = field(default_factory=list[str])
    ad_group_ids: list[str] = field(default_factory=list[str])
    target_ids: list[str] = field(default_factory=list[str])
    placement_campaign_ids: list[str] = field(default_factory=list[str])


def collect_action_ids(actions: Iterable[MutationAction]) -> ActionIds:
    ids = ActionIds()
    seen: dict[str, set[str]] = {"campaign": set(), "ad_group": set(), "target": set()}
    seen_placement: set[str] = set()
    for action in actions:
        if isinstance(action, CampaignAction):
            _add_unique(ids.campaign_ids, seen["campaign"], action.campaign_id)
        elif isinstance(action, AdGroupAction):
            _add_unique(ids.ad_group_ids, seen["ad_group"], action.ad_group_id)
        elif isinstance(action, TargetAction):
            _add_unique(ids.target_ids, seen["target"], action.target_id)
        elif isinstance(action, UpdatePlacementModifier):
            _add_unique(ids.placement_campaign_ids, seen_placement, action.campaign_id)
    return ids


@dataclass(slots=True)
class CurrentStateResolver:
    """Resolve authoritative current values for entities referenced by actions."""

    reader: SnapshotReader
    account_id: str
    page_size: int = DEFAULT_LOOKUP_PAGE_SIZE

    def resolve(
        self,
        actions: Iterable[MutationAction],
        *,
        snapshot_date: date | None = None,
    ) -> CurrentEntitySnapshot:
        snapshots = SnapshotRepository(self.reader, self.account_id)
        resolved_date = snapshots.resolve_snapshot_date(snapshot_date)
        ids = collect_action_ids(actions)

        targets = self._fetch(self.reader.targets, resolved_date, ids.target_ids)

        ad_group_ids = list(ids.ad_group_ids)
        seen_ad_groups = set(ad_group_ids)
        campaign_ids = list(ids.campaign_ids)
        seen_campaigns = set(campaign_ids)
        for target in targets:
            _add_unique(ad_group_ids, seen_ad_groups, target.ad_group_id)
            _add_unique(campaign_ids, seen_campaigns, target.campaign_id)

        ad_groups = self._fetch(self.reader.ad_groups, resolved_date, ad_group_ids)
        for ad_group in ad_groups:
            _add_unique(campaign_ids, seen_campaigns, ad_group.campaign_id)
        for campaign_id in ids.placement_campaign_ids:
            _add_unique(campaign_ids, seen_campaigns, campaign_id)

        campaigns = self._fetch(self.reader.campaigns, resolved_date, campaign_ids)
        placements = [
            row
            for chunk in chunked(ids.placement_campaign_ids, self.page_size)
            for row in self.reader.placements(self.account_id, resolved_date, campaign_ids=chunk)
        ]

        log.debug(
            "Resolved current state snapshot_date=%s campaigns=%s/%s ad_groups=%s/%s "
            "targets=%s/%s placements=%s",
            resolved_date.isoformat(),
            len(campaigns),
            len(campaign_ids),
            len(ad_groups),
            len(ad_group_ids),
            len(targets),
            len(ids.target_ids),
            len(placements),
        )
        return CurrentEntitySnapshot(
            snapshot_date=resolved_date,
            campaigns_by_id={row.campaign_id: row for row in campaigns},
            ad_groups_by_id={row.ad_group_id: row for row in ad_groups},
            targets_by_id={row.target_id: row for row in targets},
            placements_by_key={row.key: row for row in placements},
        )

    def _fetch[R](
        self,
        fetch: Callable[..., list[R]],
        snapshot_date: date,
        ids: Sequence[str],
    ) -> list[R]:
        rows: list[R] = []
        for chunk in chunked(ids, self.page_size):
            rows.extend(fetch(self.account_id, snapshot_date, ids=chunk))
        return rows


# Review ----------------------------------------------------------------------


@dataclass(frozen=True, slots=True, kw_only=True)
class ActionReview:
    """Before/after view of one action against current state."""

    action_type: MutationActionType
    entity_id: str
    found: bool
    current_value: str | float | None = None
    new_value: str | float | None = None
    delta: float | None = None
    problem: str | None = None

    @property
    def ok(self) -> bool:
        return self.found and self.problem is None


def _numeric_delta(current: float | None, new: float) -> float | None:
    return None if current is None else new - current


def review_actions(
    actions: Iterable[MutationAction],
    current: CurrentEntitySnapshot,
) -> list[ActionReview]:
    """Compare each action with the entity's current values.

    An entity missing from ``current`` yields ``found=False`` rather than an error.
    """

    return [_review(action, current) for action in actions]


def _review(  # noqa: PLR0911
    action: MutationAction, current: CurrentEntitySnapshot
) -> ActionReview:
    match action:
        case UpdateCampaignBudget(campaign_id=campaign_id, new_budget=new_budget):
            campaign = current.campaign(campaign_id)
            before = campaign.daily_budget if campaign else None
            return _reviewed(
                action,
                campaign_id,
                found=campaign is not None,
                before=before,
                after=new_budget,
                delta=_numeric_delta(before, new_budget),
                problem=_negative_problem("new_budget", new_budget),
            )
        case UpdateCampaignState(campaign_id=campaign_id, new_state=new_state):
            campaign = current.campaign(campaign_id)
            return _reviewed(
                action,
                campaign_id,
                found=campaign is not None,
                before=campaign.state if campaign else None,
                after=new_state,
            )
        case UpdateCampaignBiddingStrategy(campaign_id=campaign_id, new_strategy=new_strategy):
            campaign = current.campaign(campaign_id)
            return _reviewed(
                action,
                campaign_id,
                found=campaign is not None,
                before=campaign.bidding_strategy if campaign else None,
                after=new_strategy,
            )
        case UpdateAdGroupState(ad_group_id=ad_group_id, new_state=new_state):
            ad_group = current.ad_group(ad_group_id)
            return _reviewed(
                action,
                ad_group_id,
                found=ad_group is not None,
                before=ad_group.state if ad_group else None,
                after=new_state,
            )
        case UpdateAdGroupDefaultBid(ad_group_id=ad_group_id, new_bid=new_bid):
            ad_group = current.ad_group(ad_group_id)
            before = ad_group.default_bid if ad_group else None
            return _reviewed(
                action,
                ad_group_id,
                found=ad_group is not None,
                before=before,
                after=new_bid,
                delta=_numeric_delta(before, new_bid),
                problem=_negative_problem("new_bid", new_bid),
            )
        case UpdateTargetBid(target_id=target_id, new_bid=new_bid):
            target = current.target(target_id)
            before = target.bid if target else None
            problem = _negative_problem("new_bid", new_bid)
            if target is not None and target.is_negative:
                problem = "cannot update bid for negative target"
            return _reviewed(
                action,
                target_id,
                found=target is not None,
                before=before,
                after=new_bid,
                delta=_numeric_delta(before, new_bid),
                problem=problem,
            )
        case UpdateTargetState(target_id=target_id, new_state=new_state):
            target = current.target(target_id)
            return _reviewed(
                action,
                target_id,
                found=target is not None,
                before=target.state if target else None,
                after=new_state,
            )
        case UpdatePlacementModifier(
            campaign_id=campaign_id, placement_code=placement_code, new_pct=new_pct
        ):
            placement = current.placement(campaign_id, placement_code)
            before = placement.percentage if placement else None
            return _reviewed(
                action,
                f"{campaign_id}::{placement_code}",
                found=placement is not None,
                before=before,
                after=new_pct,
                delta=_numeric_delta(before, new_pct),
                problem=_negative_problem("new_pct", new_pct),
            )


def _negative_problem(label: str, value: float) -> str | None:
    return f"{label} must be non-negative, got {value}" if value < 0 else None


def _reviewed(
    action: MutationAction,
    entity_id: str,
    *,
    found: bool,
    before: str | float | None,
    after: str | float,
    delta: float | None = None,
    problem: str | None = None,
) -> ActionReview:
    return ActionReview(
        action_type=action.type,
        entity_id=entity_id,
        found=found,
        current_value=before,
        new_value=after,
        delta=delta,
        problem=problem if found else problem or "entity not found in snapshot",
    )
