"""create_invitation_tables

Revision ID: 3f9c2a7d41b0
Revises:
Create Date: 2026-05-01 09:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "3f9c2a7d41b0"
down_revision = None
branch_labels = None
depends_on = None

CHOICE_ENUM = sa.Enum("YES", "NO", "MAYBE", name="choice_enum")
STATUS_ENUM = sa.Enum("OPEN", "CLOSED", name="invitation_status_enum")
CLOSURE_CAUSE_ENUM = sa.Enum("EXPIRED", "FULL", name="closure_cause_enum")
VERDICT_ENUM = sa.Enum("SUCCESS", "FAILURE", name="verdict_enum")
LOG_TYPE_ENUM = sa.Enum(
    "invitation_created",
    "first_view",
    "response_created",
    "response_modified",
    "invitation_closed",
    name="log_type_enum",
)


def upgrade() -> None:
    op.create_table(
        "invitations",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("title", sa.String(length=40), nullable=False),
        sa.Column("event_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("event_has_time", sa.Boolean(), nullable=False),
        sa.Column("confirm_by", sa.DateTime(timezone=True), nullable=True),
        sa.Column("capacity_min", sa.Integer(), nullable=False),
        sa.Column("capacity_max", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", STATUS_ENUM, nullable=False),
        sa.Column("closed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("closure_cause", CLOSURE_CAUSE_ENUM, nullable=True),
        sa.Column("verdict", VERDICT_ENUM, nullable=True),
        sa.Column("view_count_unique", sa.Integer(), nullable=False),
        sa.Column("yes_count", sa.Integer(), nullable=False),
        sa.Column("no_count", sa.Integer(), nullable=False),
        sa.Column("maybe_count", sa.Integer(), nullable=False),
        sa.Column("first_view_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("first_response_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("response_time_delta_ms", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "responses",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("invitation_id", sa.String(length=32), nullable=False),
        sa.Column("device_id", sa.String(length=128), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("choice", CHOICE_ENUM, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_responses_invitation_id", "responses", ["invitation_id"])
    op.create_index("ix_responses_device_id", "responses", ["device_id"])

    op.create_table(
        "views",
        sa.Column("row_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("invitation_id", sa.String(length=32), nullable=False),
        sa.Column("device_id", sa.String(length=128), nullable=False),
        sa.Column("first_seen_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("row_id"),
    )
    op.create_index("ix_views_invitation_id", "views", ["invitation_id"])

    op.create_table(
        "logs",
        sa.Column("row_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("type", LOG_TYPE_ENUM, nullable=False),
        sa.Column("invitation_id", sa.String(length=32), nullable=False),
        sa.Column("device_id", sa.String(length=128), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("row_id"),
    )
    op.create_index("ix_logs_type", "logs", ["type"])


def downgrade() -> None:
    op.drop_index("ix_logs_type", table_name="logs")
    op.drop_table("logs")
    op.drop_index("ix_views_invitation_id", table_name="views")
    op.drop_table("views")
    op.drop_index("ix_responses_device_id", table_name="responses")
    op.drop_index("ix_responses_invitation_id", table_name="responses")
    op.drop_table("responses")
    op.drop_table("invitations")

    bind = op.get_bind()
    for enum in [LOG_TYPE_ENUM, VERDICT_ENUM, CLOSURE_CAUSE_ENUM, STATUS_ENUM, CHOICE_ENUM]:
        enum.drop(bind, checkfirst=True)
