"""SQLAlchemy Core tables for published bulk snapshots.

Snapshot rows are read into immutable domain dataclasses, so the tables are
queried through Core rather than mapped imperatively. The ``*_norm`` columns
are written by ``add_snapshot`` with the same normalizer the matcher uses and
exist for ad-hoc SQL inspection; the domain always re-derives them.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Final

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Dialect,
    Float,
    Index,
    MetaData,
    String,
    Table,
    TypeDecorator,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

BULK_SOURCE_TYPE: Final[str] = "bulk"


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

# Core tables -----------------------------------------------------------------

snapshot_table = Table(
    "bulk_snapshots",
    metadata,
    Column("account_id", String, primary_key=True),
    Column("snapshot_date", Date, primary_key=True),
    Column("source_type", String, primary_key=True, default=BULK_SOURCE_TYPE),
    Column("published_at", UTCDateTime(), nullable=True),
)

campaign_table = Table(
    "bulk_campaigns",
    metadata,
    Column("account_id", String, primary_key=True),
    Column("snapshot_date", Date, primary_key=True),
    Column("campaign_id", String, primary_key=True),
    Column("campaign_name_raw", String, nullable=False),
    Column("campaign_name_norm", String, nullable=False),
    Column("state", String, nullable=True),
    Column("daily_budget", Float, nullable=True),
    Column("bidding_strategy", String, nullable=True),
    Column("portfolio_id", String, nullable=True),
    Index("ix_bulk_campaigns_name_norm", "account_id", "snapshot_date", "campaign_name_norm"),
)

ad_group_table = Table(
    "bulk_ad_groups",
    metadata,
    Column("account_id", String, primary_key=True),
    Column("snapshot_date", Date, primary_key=True),
    Column("ad_group_id", String, primary_key=True),
    Column("campaign_id", String, nullable=False),
    Column("ad_group_name_raw", String, nullable=False),
    Column("ad_group_name_norm", String, nullable=False),
    Column("state", String, nullable=True),
    Column("default_bid", Float, nullable=True),
    Index("ix_bulk_ad_groups_campaign", "account_id", "snapshot_date", "campaign_id"),
)

target_table = Table(
    "bulk_targets",
    metadata,
    Column("account_id", String, primary_key=True),
    Column("snapshot_date", Date, primary_key=True),
    Column("target_id", String, primary_key=True),
    Column("ad_group_id", String, nullable=True),
    Column("campaign_id", String, nullable=True),
    Column("expression_raw", String, nullable=False),
    Column("expression_norm", String, nullable=False),
    Column("match_type", String, nullable=False),
    Column("is_negative", Boolean, nullable=False, default=False),
    Column("state", String, nullable=True),
    Column("bid", Float, nullable=True),
    Index("ix_bulk_targets_ad_group", "account_id", "snapshot_date", "ad_group_id"),
)

placement_table = Table(
    "bulk_placements",
    metadata,
    Column("account_id", String, primary_key=True),
    Column("snapshot_date", Date, primary_key=True),
    Column("campaign_id", String, primary_key=True),
    Column("placement_code", String, primary_key=True),
    Column("placement_raw", String, nullable=False),
    Column("percentage", Float, nullable=False),
)


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the snapshot metadata."""

    log.info("Creating all tables")
    metadata.create_all(engine)
