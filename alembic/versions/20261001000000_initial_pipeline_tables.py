"""Initial pipeline tables: posts, firmware_issues, risk_assessments, scan_results.

Revision ID: 20261001000000
Revises:
Create Date: 2026-10-01

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261001000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "posts",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("body", sa.Text(), nullable=False, server_default=""),
        sa.Column("author", sa.String(length=100), nullable=True),
        sa.Column("created_utc", sa.BigInteger(), nullable=False),
        sa.Column("score", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("num_comments", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("url", sa.Text(), nullable=True),
        sa.Column("permalink", sa.Text(), nullable=True),
        sa.Column("subreddit", sa.String(length=50), nullable=False, server_default="UNIFI"),
        sa.Column(
            "fetched_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("processed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_posts_created_utc"), "posts", ["created_utc"], unique=False)
    op.create_index(op.f("ix_posts_processed"), "posts", ["processed"], unique=False)

    op.create_table(
        "firmware_issues",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("post_id", sa.String(length=32), nullable=False),
        sa.Column("equipment_type", sa.String(length=50), nullable=False),
        sa.Column("firmware_version", sa.String(length=50), nullable=False, server_default="unknown"),
        sa.Column("issue_type", sa.String(length=50), nullable=False),
        sa.Column("severity", sa.String(length=10), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("extracted_from", sa.Text(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.CheckConstraint("severity IN ('low', 'medium', 'high')", name="ck_firmware_issues_severity"),
        sa.ForeignKeyConstraint(["post_id"], ["posts.id"], name="fk_firmware_issues_post_id_posts"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "post_id",
            "issue_type",
            "firmware_version",
            name="uq_firmware_issues_post_type_version",
        ),
    )
    op.create_index(op.f("ix_firmware_issues_post_id"), "firmware_issues", ["post_id"], unique=False)
    op.create_index(
        op.f("ix_firmware_issues_equipment_type"),
        "firmware_issues",
        ["equipment_type"],
        unique=False,
    )
    op.create_index(op.f("ix_firmware_issues_severity"), "firmware_issues", ["severity"], unique=False)
    op.create_index(op.f("ix_firmware_issues_created_at"), "firmware_issues", ["created_at"], unique=False)

    op.create_table(
        "risk_assessments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("equipment_type", sa.String(length=50), nullable=False),
        sa.Column("firmware_version", sa.String(length=50), nullable=False),
        sa.Column("risk_percentage", sa.Integer(), nullable=False),
        sa.Column("severity", sa.String(length=10), nullable=False),
        sa.Column("issue_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "last_updated",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.CheckConstraint(
            "risk_percentage >= 0 AND risk_percentage <= 100",
            name="ck_risk_assessments_percentage",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "equipment_type",
            "firmware_version",
            name="uq_risk_assessments_equipment_version",
        ),
    )
    op.create_index(
        op.f("ix_risk_assessments_equipment_type"),
        "risk_assessments",
        ["equipment_type"],
        unique=False,
    )

    op.create_table(
        "scan_results",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("posts_scanned", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("new_posts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("issues_found", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("duration_ms", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("success", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("trigger", sa.String(length=16), nullable=False, server_default="manual"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_scan_results_started_at"), "scan_results", ["started_at"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_scan_results_started_at"), table_name="scan_results")
    op.drop_table("scan_results")
    op.drop_index(op.f("ix_risk_assessments_equipment_type"), table_name="risk_assessments")
    op.drop_table("risk_assessments")
    op.drop_index(op.f("ix_firmware_issues_created_at"), table_name="firmware_issues")
    op.drop_index(op.f("ix_firmware_issues_severity"), table_name="firmware_issues")
    op.drop_index(op.f("ix_firmware_issues_equipment_type"), table_name="firmware_issues")
    op.drop_index(op.f("ix_firmware_issues_post_id"), table_name="firmware_issues")
    op.drop_table("firmware_issues")
    op.drop_index(op.f("ix_posts_processed"), table_name="posts")
    op.drop_index(op.f("ix_posts_created_utc"), table_name="posts")
    op.drop_table("posts")
