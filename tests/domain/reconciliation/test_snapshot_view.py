from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

import pytest

from bulkrecon.domain.errors import LookupBatchError, NoSnapshotAvailable
from bulkrecon.domain.model import EntityKind
from tests.helpers.snapshots import (
    ACCOUNT_ID,
    SNAPSHOT_DATE,
    SnapshotRows,
    ad_group,
    campaign,
    placement,
    target,
)

if TYPE_CHECKING:
    from bulkrecon.domain.reconciliation import SnapshotRepository
    from tests.helpers.snapshots import FakeSnapshotReader


def test_load_latest_uses_newest_snapshot_date(
    fake_reader: FakeSnapshotReader, snapshot_repository: SnapshotRepository
) -> None:
    older = date(2026, 1, 1)
    fake_reader.publish(SnapshotRows(campaigns=[campaign("OLD", "Old")]), snapshot_date=older)
    fake_reader.publish(SnapshotRows(campaigns=[campaign("NEW", "New")]))

    view = snapshot_repository.load_latest()

    assert view.snapshot_date == SNAPSHOT_DATE
    assert [row.campaign_id for row in view.campaigns] == ["NEW"]


def test_load_latest_honours_explicit_snapshot_date(
    fake_reader: FakeSnapshotReader, snapshot_repository: SnapshotRepository
) -> None:
    older = date(2026, 1, 1)
    fake_reader.publish(SnapshotRows(campaigns=[campaign("OLD", "Old")]), snapshot_date=older)
    fake_reader.publish(SnapshotRows(campaigns=[campaign("NEW", "New")]))

    view = snapshot_repository.load_latest(snapshot_date=older)

    assert view.snapshot_date == older
    assert view.campaign("OLD") is not None
    assert view.campaign("NEW") is None


def test_load_latest_without_snapshot_raises(snapshot_repository: SnapshotRepository) -> None:
    with pytest.raises(NoSnapshotAvailable, match=f"account_id={ACCOUNT_ID}"):
        snapshot_repository.load_latest()


def test_load_latest_with_unknown_explicit_date_raises(
    fake_reader: FakeSnapshotReader, snapshot_repository: SnapshotRepository
) -> None:
    fake_reader.publish(SnapshotRows())

    with pytest.raises(NoSnapshotAvailable, match="snapshot_date=2025-12-31"):
        snapshot_repository.load_latest(snapshot_date=date(2025, 12, 31))


def test_load_latest_reads_only_requested_kinds(
    fake_reader: FakeSnapshotReader, snapshot_repository: SnapshotRepository
) -> None:
    fake_reader.publish(
        SnapshotRows(
            campaigns=[campaign("C1", "One")],
            placements=[placement("C1", "placement_top", 50.0)],
        )
    )

    view = snapshot_repository.load_latest({EntityKind.CAMPAIGN})

    assert [name for name, _ in fake_reader.calls] == ["campaigns"]
    assert view.entity_kinds == frozenset({EntityKind.CAMPAIGN})
    assert view.ad_groups == ()


def test_load_latest_propagates_backend_failure(
    fake_reader: FakeSnapshotReader, snapshot_repository: SnapshotRepository
) -> None:
    fake_reader.publish(SnapshotRows())
    fake_reader.fail_on.add("targets")

    with pytest.raises(LookupBatchError):
        snapshot_repository.load_latest()


def test_indices_return_every_candidate_for_shared_names(
    fake_reader: FakeSnapshotReader, snapshot_repository: SnapshotRepository
) -> None:
    fake_reader.publish(
        SnapshotRows(
            campaigns=[
                campaign("C1", "Brand"),
                campaign("C2", " BRAND "),
                campaign("C3", "Other"),
            ],
            ad_groups=[ad_group("A1", "C1", "Group"), ad_group("A2", "C2", "group")],
        )
    )

    view = snapshot_repository.load_latest()

    assert {row.campaign_id for row in view.find_campaigns("brand")} == {"C1", "C2"}
    assert view.ambiguous_campaign_names() == ["brand"]
    assert [row.ad_group_id for row in view.find_ad_groups("C2", "GROUP")] == ["A2"]
    assert view.find_ad_groups("C3", "group") == ()


def test_target_index_is_scoped_by_ad_group_and_match_type(
    fake_reader: FakeSnapshotReader, snapshot_repository: SnapshotRepository
) -> None:
    fake_reader.publish(
        SnapshotRows(
            targets=[
                target("T1", "A1", "C1", "blue widget", "exact"),
                target("T2", "A1", "C1", "blue widget", "phrase"),
                target("T3", "A2", "C1", "blue widget", "exact"),
                target("T4", "A1", "C1", "red widget", "exact", is_negative=True),
            ]
        )
    )

    view = snapshot_repository.load_latest()

    assert [row.target_id for row in view.find_targets("A1", " Blue  Widget", "EXACT")] == ["T1"]
    assert [row.target_id for row in view.find_targets("A1", "blue widget", "Phrase")] == ["T2"]
    assert view.find_targets("A1", "red widget", "exact") == ()
    assert view.target("T4") is not None
