"""initial_survey_gems_schema

Revision ID: 5c1e9a7d2b40
Revises:
Create Date: 2026-10-17 10:00:00.000000
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "5c1e9a7d2b40"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None

# SQLite only autoincrements INTEGER PRIMARY KEY columns.
ID_TYPE = sa.BigInteger().with_variant(sa.Integer(), "sqlite")
JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    op.create_table(
        "sessions",
        sa.Column("sid", sa.String(64), nullable=False),
        sa.Column("sess", JSON_TYPE, nullable=False),
        sa.Column("expire", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("sid", name="pk_sessions"),
    )
    op.create_index("idx_sessions_expire", "sessions", ["expire"])

    op.create_table(
        "users",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("first_name", sa.Text(), nullable=True),
        sa.Column("last_name", sa.Text(), nullable=True),
        sa.Column("profile_image_url", sa.Text(), nullable=True),
        sa.Column("gem_balance", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("verification_code", sa.String(32), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default=sa.text("'active'")),
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("status IN ('active','banned','suspended')", name="ck_users_status"),
        sa.CheckConstraint("gem_balance >= 0", name="ck_users_gem_balance_non_negative"),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_index("idx_users_created_at", "users", ["created_at"])

    op.create_table(
        "surveys",
        sa.Column("id", ID_TYPE, sa.Identity(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("reward", sa.Integer(), nullable=False),
        sa.Column("questions", JSON_TYPE, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("participant_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("reward > 0", name="ck_surveys_reward_positive"),
        sa.CheckConstraint("duration > 0", name="ck_surveys_duration_positive"),
        sa.CheckConstraint("participant_count >= 0", name="ck_surveys_participant_count_non_negative"),
        sa.PrimaryKeyConstraint("id", name="pk_surveys"),
    )
    op.create_index("idx_surveys_active_created", "surveys", ["is_active", "created_at"])

    op.create_table(
        "survey_responses",
        sa.Column("id", ID_TYPE, sa.Identity(), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("survey_id", sa.BigInteger(), nullable=False),
        sa.Column("responses", JSON_TYPE, nullable=False),
        sa.Column("gem_awarded", sa.Integer(), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_survey_responses_user_id_users"),
        sa.ForeignKeyConstraint(["survey_id"], ["surveys.id"], name="fk_survey_responses_survey_id_surveys"),
        sa.PrimaryKeyConstraint("id", name="pk_survey_responses"),
        sa.UniqueConstraint("user_id", "survey_id", name="uq_survey_responses_user_survey"),
    )
    op.create_index(
        "idx_survey_responses_user_completed",
        "survey_responses",
        ["user_id", "completed_at"],
    )

    op.create_table(
        "withdrawal_requests",
        sa.Column("id", ID_TYPE, sa.Identity(), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("wallet_address", sa.String(255), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("admin_notes", sa.Text(), nullable=True),
        sa.Column("requested_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("processed_by", sa.String(64), nullable=True),
        sa.CheckConstraint("amount > 0", name="ck_withdrawal_requests_amount_positive"),
        sa.CheckConstraint(
            "status IN ('pending','approved','rejected')",
            name="ck_withdrawal_requests_status",
        ),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_withdrawal_requests_user_id_users"),
        sa.ForeignKeyConstraint(
            ["processed_by"],
            ["users.id"],
            name="fk_withdrawal_requests_processed_by_users",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_withdrawal_requests"),
    )
    op.create_index(
        "idx_withdrawal_requests_status_requested",
        "withdrawal_requests",
        ["status", "requested_at"],
    )
    op.create_index(
        "uq_withdrawal_requests_pending_user",
        "withdrawal_requests",
        ["user_id"],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
        sqlite_where=sa.text("status = 'pending'"),
    )

    op.create_table(
        "transactions",
        sa.Column("id", ID_TYPE, sa.Identity(), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("survey_id", sa.BigInteger(), nullable=True),
        sa.Column("withdrawal_id", sa.BigInteger(), nullable=True),
        sa.Column("offerwall_provider", sa.String(32), nullable=True),
        sa.Column("offerwall_offer_id", sa.String(128), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "type IN ('survey_reward','offerwall_reward','withdrawal_request',"
            "'withdrawal_approved','withdrawal_rejected')",
            name="ck_transactions_type",
        ),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_transactions_user_id_users"),
        sa.ForeignKeyConstraint(["survey_id"], ["surveys.id"], name="fk_transactions_survey_id_surveys"),
        sa.ForeignKeyConstraint(
            ["withdrawal_id"],
            ["withdrawal_requests.id"],
            name="fk_transactions_withdrawal_id_withdrawal_requests",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_transactions"),
    )
    op.create_index("idx_transactions_user_created", "transactions", ["user_id", "created_at"])
    op.create_index("idx_transactions_withdrawal", "transactions", ["withdrawal_id"])

    op.create_table(
        "security_logs",
        sa.Column("id", ID_TYPE, sa.Identity(), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=True),
        sa.Column("action", sa.String(64), nullable=False),
        sa.Column("details", JSON_TYPE, nullable=True),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_security_logs_user_id_users"),
        sa.PrimaryKeyConstraint("id", name="pk_security_logs"),
    )
    op.create_index("idx_security_logs_user_created", "security_logs", ["user_id", "created_at"])
    op.create_index("idx_security_logs_action", "security_logs", ["action"])


def downgrade() -> None:
    op.drop_index("idx_security_logs_action", table_name="security_logs")
    op.drop_index("idx_security_logs_user_created", table_name="security_logs")
    op.drop_table("security_logs")
    op.drop_index("idx_transactions_withdrawal", table_name="transactions")
    op.drop_index("idx_transactions_user_created", table_name="transactions")
    op.drop_table("transactions")
    op.drop_index("uq_withdrawal_requests_pending_user", table_name="withdrawal_requests")
    op.drop_index("idx_withdrawal_requests_status_requested", table_name="withdrawal_requests")
    op.drop_table("withdrawal_requests")
    op.drop_index("idx_survey_responses_user_completed", table_name="survey_responses")
    op.drop_table("survey_responses")
    op.drop_index("idx_surveys_active_created", table_name="surveys")
    op.drop_table("surveys")
    op.drop_index("idx_users_created_at", table_name="users")
    op.drop_table("users")
    op.drop_index("idx_sessions_expire", table_name="sessions")
    op.drop_table("sessions")
