"""Snapshot reader and writer backed by SQLAlchemy sessions."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import SQLAlchemyError

from bulkrecon.adapters.sqlalchemy.mappings import (
    BULK_SOURCE_TYPE,
    ad_group_table,
    campaign_table,
    placement_table,
    snapshot_table,
    target_table,
)
from bulkrecon.domain.errors import LookupBatchError
from bulkrecon.domain.model import AdGroupRow, CampaignRow, PlacementRow, TargetRow
from bulkrecon.domain.normalize import normalize_name

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import date

    from sqlalchemy import Select, Table
    from sqlalchemy.orm import Session

# The first column of each tuple is the one id filters apply to.
_CAMPAIGN_COLUMNS = (
    "campaign_id",
    "campaign_name_raw",
    "state",
    "daily_budget",
    "bidding_strategy",
    "portfolio_id",
)
_AD_GROUP_COLUMNS = ("ad_group_id", "campaign_id", "ad_group_name_raw", "state", "default_bid")
_TARGET_COLUMNS = (
    "target_id",
    "ad_group_id",
    "campaign_id",
    "expression_raw",
    "match_type",
    "is_negative",
    "state",
    "bid",
)
_PLACEMENT_COLUMNS = ("campaign_id", "placement_raw", "placement_code", "percentage")


class SqlAlchemySnapshotRepository:
    """Read snapshot rows of one date; write whole snapshots for the ingester and tests."""

    def __init__(self, session: Session) -> None:
        self.session = session

    # Reads -------------------------------------------------------------------

    def latest_snapshot_date(self, account_id: str) -> date | None:
        stmt = (
            select(snapshot_table.c.snapshot_date)
            .where(snapshot_table.c.account_id == account_id)
            .where(snapshot_table.c.source_type == BULK_SOURCE_TYPE)
            .order_by(snapshot_table.c.snapshot_date.desc())
            .limit(1)
        )
        try:
            return self.session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise LookupBatchError(
                f"Failed to read latest snapshot date: {exc}", resource=snapshot_table.name
            ) from exc

    def has_snapshot(self, account_id: str, snapshot_date: date) -> bool:
        stmt = (
            select(snapshot_table.c.snapshot_date)
            .where(snapshot_table.c.account_id == account_id)
            .where(snapshot_table.c.snapshot_date == snapshot_date)
            .where(snapshot_table.c.source_type == BULK_SOURCE_TYPE)
            .limit(1)
        )
        try:
            return self.session.execute(stmt).first() is not None
        except SQLAlchemyError as exc:
            raise LookupBatchError(
                f"Failed to check snapshot {snapshot_date.isoformat()}: {exc}",
                resource=snapshot_table.name,
            ) from exc

    def campaigns(
        self,
        account_id: str,
        snapshot_date: date,
        *,
        ids: Sequence[str] | None = None,
    ) -> list[CampaignRow]:
        rows = self._rows(campaign_table, _CAMPAIGN_COLUMNS, account_id, snapshot_date, ids)
        return [CampaignRow(**row) for row in rows]

    def ad_groups(
        self,
        account_id: str,
        snapshot_date: date,
        *,
        ids: Sequence[str] | None = None,
    ) -> list[AdGroupRow]:
        rows = self._rows(ad_group_table, _AD_GROUP_COLUMNS, account_id, snapshot_date, ids)
        return [AdGroupRow(**row) for row in rows]

    def targets(
        self,
        account_id: str,
        snapshot_date: date,
        *,
        ids: Sequence[str] | None = None,
    ) -> list[TargetRow]:
        rows = self._rows(target_table, _TARGET_COLUMNS, account_id, snapshot_date, ids)
        return [TargetRow(**row) for row in rows]

    def placements(
        self,
        account_id: str,
        snapshot_date: date,
        *,
        campaign_ids: Sequence[str] | None = None,
    ) -> list[PlacementRow]:
        rows = self._rows(
            placement_table, _PLACEMENT_COLUMNS, account_id, snapshot_date, campaign_ids
        )
        return [PlacementRow(**row) for row in rows]

    def _rows(
        self,
        table: Table,
        columns: Sequence[str],
        account_id: str,
        snapshot_date: date,
        ids: Sequence[str] | None,
    ) -> list[dict[str, Any]]:
        if ids is not None and not ids:
            return []
        stmt: Select[Any] = (
            select(*(table.c[name] for name in columns))
            .where(table.c.account_id == account_id)
            .where(table.c.snapshot_date == snapshot_date)
            .order_by(table.c[columns[0]])
        )
        if ids is not None:
            stmt = stmt.where(table.c[columns[0]].in_(list(ids)))
        try:
            result = self.session.execute(stmt).mappings().all()
        except SQLAlchemyError as exc:
            raise LookupBatchError(
                f"Failed to read {table.name} for account_id={account_id} "
                f"snapshot_date={snapshot_date.isoformat()}: {exc}",
                resource=table.name,
            ) from exc
        return [dict(row) for row in result]

    # Writes ------------------------------------------------------------------

    def add_snapshot(  # noqa: PLR0913
        self,
        account_id: str,
        snapshot_date: date,
        *,
        campaigns: Iterable[CampaignRow] = (),
        ad_groups: Iterable[AdGroupRow] = (),
        targets: Iterable[TargetRow] = (),
        placements: Iterable[PlacementRow] = (),
        published_at: datetime | None = None,
    ) -> None:
        """Replace all rows of ``(account_id, snapshot_date)`` and publish the snapshot.

        The ``bulk_snapshots`` row is inserted last, so readers never see a
        published date whose entity rows are still missing.
        """

        key = {"account_id": account_id, "snapshot_date": snapshot_date}
        tables = (snapshot_table, campaign_table, ad_group_table, target_table, placement_table)
        for table in tables:
            self.session.execute(
                delete(table)
                .where(table.c.account_id == account_id)
                .where(table.c.snapshot_date == snapshot_date)
            )

        self._insert_many(
            campaign_table,
            [
                {
                    **key,
                    "campaign_id": row.campaign_id,
                    "campaign_name_raw": row.campaign_name_raw,
                    "campaign_name_norm": normalize_name(row.campaign_name_raw),
                    "state": row.state,
                    "daily_budget": row.daily_budget,
                    "bidding_strategy": row.bidding_strategy,
                    "portfolio_id": row.portfolio_id,
                }
                for row in campaigns
            ],
        )
        self._insert_many(
            ad_group_table,
            [
                {
                    **key,
                    "ad_group_id": row.ad_group_id,
                    "campaign_id": row.campaign_id,
                    "ad_group_name_raw": row.ad_group_name_raw,
                    "ad_group_name_norm": normalize_name(row.ad_group_name_raw),
                    "state": row.state,
                    "default_bid": row.default_bid,
                }
                for row in ad_groups
            ],
        )
        self._insert_many(
            target_table,
            [
                {
                    **key,
                    "target_id": row.target_id,
                    "ad_group_id": row.ad_group_id,
                    "campaign_id": row.campaign_id,
                    "expression_raw": row.expression_raw,
                    "expression_norm": normalize_name(row.expression_raw),
                    "match_type": row.match_type,
                    "is_negative": row.is_negative,
                    "state": row.state,
                    "bid": row.bid,
                }
                for row in targets
            ],
        )
        self._insert_many(
            placement_table,
            [
                {
                    **key,
                    "campaign_id": row.campaign_id,
                    "placement_code": row.placement_code,
                    "placement_raw": row.placement_raw,
                    "percentage": row.percentage,
                }
                for row in placements
            ],
        )
        self.session.execute(
            insert(snapshot_table).values(
                **key,
                source_type=BULK_SOURCE_TYPE,
                published_at=published_at or datetime.now(tz=UTC),
            )
        )

    def _insert_many(self, table: Table, rows: list[dict[str, object]]) -> None:
        if rows:
            self.session.execute(insert(table), rows)


if TYPE_CHECKING:
    from bulkrecon.domain.ports import SnapshotReader

    _session_stub = cast("Session", object())
    _reader_check: SnapshotReader = SqlAlchemySnapshotRepository(_session_stub)
