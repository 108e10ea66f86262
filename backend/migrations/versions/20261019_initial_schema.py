"""initial schema: staff directory, approval requests, sales entries, notifications

Revision ID: 20261019_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _request_envelope_columns():
    return [
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("requested_by_uid", sa.String(length=64), nullable=False),
        sa.Column("requested_by_name", sa.String(length=255), nullable=False),
        sa.Column("requested_by_role", sa.String(length=16), nullable=False),
        sa.Column("target_staff_id", sa.String(length=6), nullable=False),
        sa.Column("target_user_name", sa.String(length=255), nullable=False),
        sa.Column("target_user_role", sa.String(length=16), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("request_timestamp", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("processed_by_uid", sa.String(length=64), nullable=True),
        sa.Column("processed_by_name", sa.String(length=255), nullable=True),
        sa.Column("processed_timestamp", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reason_for_request", sa.Text(), nullable=True),
        sa.Column("manager_feedback", sa.Text(), nullable=True),
    ]


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("staff_id", sa.String(length=6), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=16), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("staff_id", name="uq_users_staff_id"),
    )
    with op.batch_alter_table("users", schema=None) as batch_op:
        batch_op.create_index("ix_users_role", ["role"], unique=False)

    op.create_table(
        "login_credentials",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email", name="uq_login_credentials_email"),
    )

    op.create_table(
        "deletion_requests",
        *_request_envelope_columns(),
        sa.Column("target_user_uid", sa.String(length=64), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("deletion_requests", schema=None) as batch_op:
        batch_op.create_index("ix_deletion_requests_requested_by_uid", ["requested_by_uid"], unique=False)
        batch_op.create_index("ix_deletion_requests_status", ["status"], unique=False)
        batch_op.create_index("ix_deletion_requests_target_user_uid", ["target_user_uid"], unique=False)
        batch_op.create_index("ix_deletion_requests_status_ts", ["status", "request_timestamp"], unique=False)

    op.create_table(
        "add_staff_requests",
        *_request_envelope_columns(),
        sa.Column("initial_password", sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("add_staff_requests", schema=None) as batch_op:
        batch_op.create_index("ix_add_staff_requests_requested_by_uid", ["requested_by_uid"], unique=False)
        batch_op.create_index("ix_add_staff_requests_status", ["status"], unique=False)
        batch_op.create_index("ix_add_staff_requests_status_ts", ["status", "request_timestamp"], unique=False)

    op.create_table(
        "sales_entries",
        sa.Column("id", sa.String(length=96), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("staff_id", sa.String(length=6), nullable=False),
        sa.Column("entry_date", sa.String(length=10), nullable=False),
        sa.Column("collected", sa.JSON(), nullable=False),
        sa.Column("sold_cash", sa.JSON(), nullable=False),
        sa.Column("sold_transfer", sa.JSON(), nullable=False),
        sa.Column("sold_card", sa.JSON(), nullable=False),
        sa.Column("returned", sa.JSON(), nullable=False),
        sa.Column("damages", sa.JSON(), nullable=False),
        sa.Column("is_finalized", sa.Boolean(), nullable=False),
        sa.Column("finalized_by_uid", sa.String(length=64), nullable=True),
        sa.Column("finalized_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("version_id", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "entry_date", name="uq_sales_entries_user_date"),
    )
    with op.batch_alter_table("sales_entries", schema=None) as batch_op:
        batch_op.create_index("ix_sales_entries_user_id", ["user_id"], unique=False)
        batch_op.create_index("ix_sales_entries_date", ["entry_date"], unique=False)

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("sender_id", sa.String(length=64), nullable=False),
        sa.Column("sender_name", sa.String(length=255), nullable=False),
        sa.Column("sender_role", sa.String(length=16), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("recipient_uid", sa.String(length=64), nullable=True),
        sa.Column("recipient_role", sa.String(length=16), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("notifications", schema=None) as batch_op:
        batch_op.create_index("ix_notifications_recipient_uid", ["recipient_uid"], unique=False)
        batch_op.create_index("ix_notifications_recipient_role", ["recipient_role"], unique=False)
        batch_op.create_index("ix_notifications_timestamp", ["timestamp"], unique=False)


def downgrade():
    with op.batch_alter_table("notifications", schema=None) as batch_op:
        batch_op.drop_index("ix_notifications_timestamp")
        batch_op.drop_index("ix_notifications_recipient_role")
        batch_op.drop_index("ix_notifications_recipient_uid")
    op.drop_table("notifications")

    with op.batch_alter_table("sales_entries", schema=None) as batch_op:
        batch_op.drop_index("ix_sales_entries_date")
        batch_op.drop_index("ix_sales_entries_user_id")
    op.drop_table("sales_entries")

    with op.batch_alter_table("add_staff_requests", schema=None) as batch_op:
        batch_op.drop_index("ix_add_staff_requests_status_ts")
        batch_op.drop_index("ix_add_staff_requests_status")
        batch_op.drop_index("ix_add_staff_requests_requested_by_uid")
    op.drop_table("add_staff_requests")

    with op.batch_alter_table("deletion_requests", schema=None) as batch_op:
        batch_op.drop_index("ix_deletion_requests_status_ts")
        batch_op.drop_index("ix_deletion_requests_target_user_uid")
        batch_op.drop_index("ix_deletion_requests_status")
        batch_op.drop_index("ix_deletion_requests_requested_by_uid")
    op.drop_table("deletion_requests")

    op.drop_table("login_credentials")

    with op.batch_alter_table("users", schema=None) as batch_op:
        batch_op.drop_index("ix_users_role")
    op.drop_table("users")
