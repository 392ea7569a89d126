"""Initial schema — routing configuration, capacity ledger and history.

Revision ID: 001
Revises: None
Create Date: 2026-10-18
"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Ticket categories
    op.create_table(
        "ticket_categories",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), unique=True, nullable=False),
        sa.Column("slug", sa.String(120), unique=True, nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("auto_assign", sa.Boolean, nullable=False, server_default="true"),
        sa.Column(
            "crisis_detection_enabled", sa.Boolean, nullable=False, server_default="true"
        ),
        sa.Column("sla_response_hours", sa.Integer, nullable=False, server_default="24"),
        sa.Column("max_priority_level", sa.Integer, nullable=False, server_default="3"),
    )

    # Counselors (identity mirror of the user directory)
    op.create_table(
        "counselors",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="counselor"),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
    )

    # Counselor specializations
    op.create_table(
        "counselor_specializations",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "counselor_id",
            sa.Integer,
            sa.ForeignKey("counselors.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "category_id",
            sa.Integer,
            sa.ForeignKey("ticket_categories.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("priority_level", sa.String(20), nullable=False, server_default="primary"),
        sa.Column("max_workload", sa.Integer, nullable=False, server_default="10"),
        sa.Column("current_workload", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_available", sa.Boolean, nullable=False, server_default="true"),
        sa.Column(
            "expertise_rating", sa.Numeric(3, 2), nullable=False, server_default="5.00"
        ),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column(
            "assigned_by",
            sa.Integer,
            sa.ForeignKey("counselors.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("counselor_id", "category_id", name="uq_cs_counselor_category"),
        sa.CheckConstraint("current_workload >= 0", name="ck_cs_workload_non_negative"),
    )
    op.create_index(
        "cs_cat_avail_priority_idx",
        "counselor_specializations",
        ["category_id", "is_available", "priority_level"],
    )
    op.create_index(
        "cs_user_available_idx",
        "counselor_specializations",
        ["counselor_id", "is_available"],
    )

    # Crisis rules
    op.create_table(
        "crisis_rules",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("keyword", sa.String(255), nullable=False),
        sa.Column("severity_level", sa.String(20), nullable=False),
        sa.Column("match_mode", sa.String(20), nullable=False, server_default="partial"),
        sa.Column("case_sensitive", sa.Boolean, nullable=False, server_default="false"),
        sa.Column(
            "category_id",
            sa.Integer,
            sa.ForeignKey("ticket_categories.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("trigger_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("last_triggered_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at", sa.DateTime, nullable=False, server_default=sa.func.now()
        ),
    )
    op.create_index(
        "idx_crisis_rules_active_category", "crisis_rules", ["is_active", "category_id"]
    )

    # Assignment history
    op.create_table(
        "ticket_assignment_history",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("ticket_id", sa.Integer, nullable=False),
        sa.Column(
            "assigned_from",
            sa.Integer,
            sa.ForeignKey("counselors.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "assigned_to",
            sa.Integer,
            sa.ForeignKey("counselors.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("assigned_by", sa.Integer, nullable=True),
        sa.Column("assignment_type", sa.String(20), nullable=False),
        sa.Column("reason", sa.Text, nullable=True),
        sa.Column("assignment_criteria", sa.JSON, nullable=True),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "tah_ticket_assigned_idx", "ticket_assignment_history", ["ticket_id", "assigned_at"]
    )
    op.create_index(
        "tah_assignee_type_idx",
        "ticket_assignment_history",
        ["assigned_to", "assignment_type"],
    )


def downgrade() -> None:
    op.drop_table("ticket_assignment_history")
    op.drop_table("crisis_rules")
    op.drop_table("counselor_specializations")
    op.drop_table("counselors")
    op.drop_table("ticket_categories")
