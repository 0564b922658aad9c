"""Create bulk snapshot tables.

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

from bulkrecon.adapters.sqlalchemy.mappings import UTCDateTime

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "bulk_snapshots",
        sa.Column("account_id", sa.String(), nullable=False),
        sa.Column("snapshot_date", sa.Date(), nullable=False),
        sa.Column("source_type", sa.String(), nullable=False),
        sa.Column("published_at", UTCDateTime(), nullable=True),
        sa.PrimaryKeyConstraint(
            "account_id", "snapshot_date", "source_type", name=op.f("pk_bulk_snapshots")
        ),
    )
    op.create_table(
        "bulk_campaigns",
        sa.Column("account_id", sa.String(), nullable=False),
        sa.Column("snapshot_date", sa.Date(), nullable=False),
        sa.Column("campaign_id", sa.String(), nullable=False),
        sa.Column("campaign_name_raw", sa.String(), nullable=False),
        sa.Column("campaign_name_norm", sa.String(), nullable=False),
        sa.Column("state", sa.String(), nullable=True),
        sa.Column("daily_budget", sa.Float(), nullable=True),
        sa.Column("bidding_strategy", sa.String(), nullable=True),
        sa.Column("portfolio_id", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint(
            "account_id", "snapshot_date", "campaign_id", name=op.f("pk_bulk_campaigns")
        ),
    )
    op.create_index(
        "ix_bulk_campaigns_name_norm",
        "bulk_campaigns",
        ["account_id", "snapshot_date", "campaign_name_norm"],
    )
    op.create_table(
        "bulk_ad_groups",
        sa.Column("account_id", sa.String(), nullable=False),
        sa.Column("snapshot_date", sa.Date(), nullable=False),
        sa.Column("ad_group_id", sa.String(), nullable=False),
        sa.Column("campaign_id", sa.String(), nullable=False),
        sa.Column("ad_group_name_raw", sa.String(), nullable=False),
        sa.Column("ad_group_name_norm", sa.String(), nullable=False),
        sa.Column("state", sa.String(), nullable=True),
        sa.Column("default_bid", sa.Float(), nullable=True),
        sa.PrimaryKeyConstraint(
            "account_id", "snapshot_date", "ad_group_id", name=op.f("pk_bulk_ad_groups")
        ),
    )
    op.create_index(
        "ix_bulk_ad_groups_campaign",
        "bulk_ad_groups",
        ["account_id", "snapshot_date", "campaign_id"],
    )
    op.create_table(
        "bulk_targets",
        sa.Column("account_id", sa.String(), nullable=False),
        sa.Column("snapshot_date", sa.Date(), nullable=False),
        sa.Column("target_id", sa.String(), nullable=False),
        sa.Column("ad_group_id", sa.String(), nullable=True),
        sa.Column("campaign_id", sa.String(), nullable=True),
        sa.Column("expression_raw", sa.String(), nullable=False),
        sa.Column("expression_norm", sa.String(), nullable=False),
        sa.Column("match_type", sa.String(), nullable=False),
        sa.Column("is_negative", sa.Boolean(), nullable=False),
        sa.Column("state", sa.String(), nullable=True),
        sa.Column("bid", sa.Float(), nullable=True),
        sa.PrimaryKeyConstraint(
            "account_id", "snapshot_date", "target_id", name=op.f("pk_bulk_targets")
        ),
    )
    op.create_index(
        "ix_bulk_targets_ad_group",
        "bulk_targets",
        ["account_id", "snapshot_date", "ad_group_id"],
    )
    op.create_table(
        "bulk_placements",
        sa.Column("account_id", sa.String(), nullable=False),
        sa.Column("snapshot_date", sa.Date(), nullable=False),
        sa.Column("campaign_id", sa.String(), nullable=False),
        sa.Column("placement_code", sa.String(), nullable=False),
        sa.Column("placement_raw", sa.String(), nullable=False),
        sa.Column("percentage", sa.Float(), nullable=False),
        sa.PrimaryKeyConstraint(
            "account_id",
            "snapshot_date",
            "campaign_id",
            "placement_code",
            name=op.f("pk_bulk_placements"),
        ),
    )


def downgrade() -> None:
    op.drop_table("bulk_placements")
    op.drop_index("ix_bulk_targets_ad_group", table_name="bulk_targets")
    op.drop_table("bulk_targets")
    op.drop_index("ix_bulk_ad_groups_campaign", table_name="bulk_ad_groups")
    op.drop_table("bulk_ad_groups")
    op.drop_index("ix_bulk_campaigns_name_norm", table_name="bulk_campaigns")
    op.drop_table("bulk_campaigns")
    op.drop_table("bulk_snapshots")
