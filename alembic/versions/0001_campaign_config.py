"""campaign configuration tables

Revision ID: 0001_campaign_config
Revises:
Create Date: 2025-11-03 10:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001_campaign_config"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ID_TYPE = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def upgrade() -> None:
    op.create_table(
        "campaigns",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("slug", sa.String(length=100), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("timezone", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="campaigns_pkey"),
        sa.UniqueConstraint("slug", name="campaigns_slug_key"),
    )
    op.create_table(
        "campaign_rewards",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("campaign_id", ID_TYPE, nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("code", sa.String(length=64), nullable=False),
        sa.Column("label", sa.String(length=255), nullable=False),
        sa.ForeignKeyConstraint(
            ["campaign_id"],
            ["campaigns.id"],
            name="campaign_rewards_campaign_id_fkey",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="campaign_rewards_pkey"),
        sa.UniqueConstraint("campaign_id", "code", name="campaign_rewards_code_key"),
        sa.UniqueConstraint(
            "campaign_id", "position", name="campaign_rewards_position_key"
        ),
    )
    op.create_index(
        "ix_campaign_rewards_campaign_id", "campaign_rewards", ["campaign_id"]
    )
    op.create_table(
        "campaign_range_rules",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("campaign_id", ID_TYPE, nullable=False),
        sa.Column("date_key", sa.String(length=10), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("lower_bound", sa.Integer(), nullable=False),
        sa.Column("upper_bound", sa.Integer(), nullable=False),
        sa.Column("reward_code", sa.String(length=64), nullable=False),
        sa.CheckConstraint(
            "lower_bound <= upper_bound",
            name="campaign_range_rules_bounds_ordered_check",
        ),
        sa.ForeignKeyConstraint(
            ["campaign_id"],
            ["campaigns.id"],
            name="campaign_range_rules_campaign_id_fkey",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="campaign_range_rules_pkey"),
        sa.UniqueConstraint(
            "campaign_id",
            "date_key",
            "position",
            name="campaign_range_rules_position_key",
        ),
    )
    op.create_index(
        "ix_campaign_range_rules_campaign_id", "campaign_range_rules", ["campaign_id"]
    )


def downgrade() -> None:
    op.drop_index("ix_campaign_range_rules_campaign_id", table_name="campaign_range_rules")
    op.drop_table("campaign_range_rules")
    op.drop_index("ix_campaign_rewards_campaign_id", table_name="campaign_rewards")
    op.drop_table("campaign_rewards")
    op.drop_table("campaigns")
