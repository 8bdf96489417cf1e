"""init

Revision ID: 0001_init
Revises: 
Create Date: 2026-10-18

"""
from alembic import op
import sqlalchemy as sa

revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None

MONEY = sa.Numeric(14, 2)

def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
    ]

def upgrade():
    op.create_table(
        "project",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=256), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("budget", MONEY, nullable=False),
        sa.Column("currency", sa.String(length=8), nullable=False, server_default="USD"),
        *_timestamps(),
    )

    op.create_table(
        "wbs_item",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("project_id", sa.Integer(), sa.ForeignKey("project.id", ondelete="CASCADE"), nullable=False),
        sa.Column("parent_id", sa.Integer(), sa.ForeignKey("wbs_item.id", ondelete="CASCADE"), nullable=True),
        sa.Column("name", sa.String(length=512), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("level", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("code", sa.String(length=128), nullable=False),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("is_top_level", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("budgeted_cost", MONEY, nullable=False, server_default="0"),
        sa.Column("actual_cost", MONEY, nullable=False, server_default="0"),
        sa.Column("percent_complete", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("duration", sa.Integer(), nullable=True),
        sa.Column("actual_start_date", sa.Date(), nullable=True),
        sa.Column("actual_end_date", sa.Date(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("project_id", "code", name="uq_wbs_item_project_code"),
    )
    op.create_index("ix_wbs_item_project_id", "wbs_item", ["project_id"])
    op.create_index("ix_wbs_item_parent_id", "wbs_item", ["parent_id"])
    op.create_index("ix_wbs_item_code", "wbs_item", ["code"])

    op.create_table(
        "dependency",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("predecessor_id", sa.Integer(), sa.ForeignKey("wbs_item.id", ondelete="CASCADE"), nullable=False),
        sa.Column("successor_id", sa.Integer(), sa.ForeignKey("wbs_item.id", ondelete="CASCADE"), nullable=False),
        sa.Column("type", sa.String(length=2), nullable=False, server_default="FS"),
        sa.Column("lag", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.UniqueConstraint("predecessor_id", "successor_id", name="uq_dependency_pair"),
    )
    op.create_index("ix_dependency_predecessor_id", "dependency", ["predecessor_id"])
    op.create_index("ix_dependency_successor_id", "dependency", ["successor_id"])

    op.create_table(
        "cost_entry",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("wbs_item_id", sa.Integer(), sa.ForeignKey("wbs_item.id", ondelete="CASCADE"), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("entry_date", sa.Date(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_cost_entry_wbs_item_id", "cost_entry", ["wbs_item_id"])

def downgrade():
    op.drop_table("cost_entry")
    op.drop_table("dependency")
    op.drop_table("wbs_item")
    op.drop_table("project")
