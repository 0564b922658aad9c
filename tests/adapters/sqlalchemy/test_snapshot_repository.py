"""Tests for the SQLAlchemy snapshot repository."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import insert, select
from sqlalchemy.exc import OperationalError

from bulkrecon.adapters.sqlalchemy.mappings import campaign_table, snapshot_table
from bulkrecon.domain.errors import LookupBatchError
from bulkrecon.domain.ports import SnapshotReader
from bulkrecon.domain.reconciliation import SnapshotRepository
from tests.helpers.snapshots import (
    ACCOUNT_ID,
    SNAPSHOT_DATE,
    ad_group,
    campaign,
    placement,
    target,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from bulkrecon.adapters.sqlalchemy import SqlAlchemySnapshotRepository


def _seed(repository: SqlAlchemySnapshotRepository, session: Session) -> None:
    repository.add_snapshot(
        ACCOUNT_ID,
        SNAPSHOT_DATE,
        campaigns=[
            campaign("C2", "Generic", daily_budget=20.0),
            campaign("C1", "  Brand  ", daily_budget=50.0, bidding_strategy="fixed"),
        ],
        ad_groups=[ad_group("A1", "C1", "Group", default_bid=0.8)],
        targets=[
            target("T1", "A1", "C1", "Blue Widget", "EXACT", bid=0.5),
            target("N1", "A1", "C1", "cheap", is_negative=True),
        ],
        placements=[placement("C1", "placement_top", 25.0)],
    )
    session.commit()


def test_repository_satisfies_the_reader_port(
    sql_snapshots: SqlAlchemySnapshotRepository,
) -> None:
    assert isinstance(sql_snapshots, SnapshotReader)


def test_add_snapshot_round_trips_rows(
    sql_snapshots: SqlAlchemySnapshotRepository, sqlite_session: Session
) -> None:
    _seed(sql_snapshots, sqlite_session)

    campaigns = sql_snapshots.campaigns(ACCOUNT_ID, SNAPSHOT_DATE)
    targets = sql_snapshots.targets(ACCOUNT_ID, SNAPSHOT_DATE)

    assert [row.campaign_id for row in campaigns] == ["C1", "C2"]
    assert campaigns[0].campaign_name_raw == "  Brand  "
    assert campaigns[0].bidding_strategy == "fixed"
    assert {row.target_id: row.is_negative for row in targets} == {"N1": True, "T1": False}
    (placement_row,) = sql_snapshots.placements(ACCOUNT_ID, SNAPSHOT_DATE)
    assert placement_row.key == "C1::placement_top"
    assert placement_row.percentage == 25.0


def test_add_snapshot_stores_normalized_names(
    sql_snapshots: SqlAlchemySnapshotRepository, sqlite_session: Session
) -> None:
    _seed(sql_snapshots, sqlite_session)

    stmt = select(campaign_table.c.campaign_name_norm).where(campaign_table.c.campaign_id == "C1")

    assert sqlite_session.execute(stmt).scalar_one() == "brand"


def test_reads_filter_by_identifier(
    sql_snapshots: SqlAlchemySnapshotRepository, sqlite_session: Session
) -> None:
    _seed(sql_snapshots, sqlite_session)

    filtered = sql_snapshots.campaigns(ACCOUNT_ID, SNAPSHOT_DATE, ids=["C2", "X"])

    assert [row.campaign_id for row in filtered] == ["C2"]
    assert sql_snapshots.ad_groups(ACCOUNT_ID, SNAPSHOT_DATE, ids=[]) == []
    assert sql_snapshots.placements(ACCOUNT_ID, SNAPSHOT_DATE, campaign_ids=["C2"]) == []


def test_reads_are_scoped_to_account_and_date(
    sql_snapshots: SqlAlchemySnapshotRepository, sqlite_session: Session
) -> None:
    _seed(sql_snapshots, sqlite_session)

    assert sql_snapshots.campaigns("OTHER", SNAPSHOT_DATE) == []
    assert sql_snapshots.campaigns(ACCOUNT_ID, date(2026, 1, 1)) == []


def test_latest_snapshot_date_and_has_snapshot(
    sql_snapshots: SqlAlchemySnapshotRepository, sqlite_session: Session
) -> None:
    assert sql_snapshots.latest_snapshot_date(ACCOUNT_ID) is None

    sql_snapshots.add_snapshot(ACCOUNT_ID, date(2026, 2, 1))
    sql_snapshots.add_snapshot(ACCOUNT_ID, SNAPSHOT_DATE)
    sql_snapshots.add_snapshot("OTHER", date(2026, 4, 1))
    sqlite_session.commit()

    assert sql_snapshots.latest_snapshot_date(ACCOUNT_ID) == SNAPSHOT_DATE
    assert sql_snapshots.has_snapshot(ACCOUNT_ID, date(2026, 2, 1))
    assert not sql_snapshots.has_snapshot(ACCOUNT_ID, date(2026, 4, 1))


def test_only_bulk_snapshots_are_considered(
    sql_snapshots: SqlAlchemySnapshotRepository, sqlite_session: Session
) -> None:
    sqlite_session.execute(
        insert(snapshot_table).values(
            account_id=ACCOUNT_ID, snapshot_date=SNAPSHOT_DATE, source_type="report"
        )
    )
    sqlite_session.commit()

    assert sql_snapshots.latest_snapshot_date(ACCOUNT_ID) is None
    assert not sql_snapshots.has_snapshot(ACCOUNT_ID, SNAPSHOT_DATE)


def test_add_snapshot_replaces_existing_rows(
    sql_snapshots: SqlAlchemySnapshotRepository, sqlite_session: Session
) -> None:
    _seed(sql_snapshots, sqlite_session)

    sql_snapshots.add_snapshot(ACCOUNT_ID, SNAPSHOT_DATE, campaigns=[campaign("C9", "Fresh")])
    sqlite_session.commit()

    campaigns = sql_snapshots.campaigns(ACCOUNT_ID, SNAPSHOT_DATE)
    assert [row.campaign_id for row in campaigns] == ["C9"]
    assert sql_snapshots.targets(ACCOUNT_ID, SNAPSHOT_DATE) == []


def test_backend_errors_become_lookup_batch_errors(
    sql_snapshots: SqlAlchemySnapshotRepository,
    sqlite_session: Session,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def broken_execute(*_args: object, **_kwargs: object) -> None:
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(sqlite_session, "execute", broken_execute)

    with pytest.raises(LookupBatchError) as excinfo:
        sql_snapshots.targets(ACCOUNT_ID, SNAPSHOT_DATE)

    assert excinfo.value.resource == "bulk_targets"


def test_snapshot_view_over_sql_backend_matches_names(
    sql_snapshots: SqlAlchemySnapshotRepository, sqlite_session: Session
) -> None:
    _seed(sql_snapshots, sqlite_session)

    view = SnapshotRepository(sql_snapshots, ACCOUNT_ID).load_latest()

    assert [row.campaign_id for row in view.find_campaigns("BRAND")] == ["C1"]
    assert [row.target_id for row in view.find_targets("A1", "blue widget", "exact")] == ["T1"]
