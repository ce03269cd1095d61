"""init all tables

Revision ID: 0001_init
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def _base_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.text("false")),
    ]


def upgrade() -> None:
    # Applications table
    op.create_table(
        "applications",
        *_base_columns(),
        sa.Column("owner_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("api_key", sa.String(length=128), nullable=False),
        sa.Column("version", sa.String(length=50), nullable=False, server_default="1.0.0"),
        sa.Column("hwid_lock_enabled", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("login_success_message", sa.String(), nullable=True),
        sa.Column("login_failed_message", sa.String(), nullable=True),
        sa.Column("account_disabled_message", sa.String(), nullable=True),
        sa.Column("account_expired_message", sa.String(), nullable=True),
        sa.Column("version_mismatch_message", sa.String(), nullable=True),
        sa.Column("hwid_mismatch_message", sa.String(), nullable=True),
    )
    op.create_index("ix_applications_owner_id", "applications", ["owner_id"])
    op.create_index("ix_applications_api_key", "applications", ["api_key"], unique=True)

    # License keys table
    op.create_table(
        "license_keys",
        *_base_columns(),
        sa.Column("application_id", sa.String(), nullable=False),
        sa.Column("license_key", sa.String(length=255), nullable=False),
        sa.Column("max_users", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("current_users", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("validity_days", sa.Integer(), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("description", sa.String(), nullable=True),
        sa.CheckConstraint("max_users >= 1", name="ck_license_keys_max_users"),
        sa.CheckConstraint(
            "current_users >= 0 AND current_users <= max_users",
            name="ck_license_keys_current_users",
        ),
    )
    op.create_index("ix_license_keys_application_id", "license_keys", ["application_id"])
    op.create_index("ix_license_keys_license_key", "license_keys", ["license_key"], unique=True)

    # App users table
    op.create_table(
        "app_users",
        *_base_columns(),
        sa.Column("application_id", sa.String(), nullable=False),
        sa.Column("license_key_id", sa.String(), nullable=True),
        sa.Column("username", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("is_paused", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("hwid", sa.String(length=255), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("login_attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_login_attempt", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_login_ip", sa.String(length=64), nullable=True),
        sa.UniqueConstraint("application_id", "username", name="uq_app_users_application_username"),
        sa.UniqueConstraint("application_id", "email", name="uq_app_users_application_email"),
        sa.CheckConstraint("login_attempts >= 0", name="ck_app_users_login_attempts"),
    )
    op.create_index("ix_app_users_application_id", "app_users", ["application_id"])
    op.create_index("ix_app_users_license_key_id", "app_users", ["license_key_id"])

    # Active sessions table
    op.create_table(
        "active_sessions",
        *_base_columns(),
        sa.Column("application_id", sa.String(), nullable=False),
        sa.Column("app_user_id", sa.String(), nullable=False),
        sa.Column("session_token", sa.String(length=255), nullable=False),
        sa.Column("last_activity", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ip_address", sa.String(length=64), nullable=True),
        sa.Column("user_agent", sa.String(), nullable=True),
        sa.Column("hwid", sa.String(length=255), nullable=True),
    )
    op.create_index("ix_active_sessions_application_id", "active_sessions", ["application_id"])
    op.create_index("ix_active_sessions_app_user_id", "active_sessions", ["app_user_id"])
    op.create_index("ix_active_sessions_session_token", "active_sessions", ["session_token"], unique=True)

    # Blacklist entries table
    op.create_table(
        "blacklist_entries",
        *_base_columns(),
        sa.Column("application_id", sa.String(), nullable=True),
        sa.Column("created_by", sa.String(), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("value", sa.String(length=255), nullable=False),
        sa.Column("reason", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
    )
    op.create_index("ix_blacklist_entries_application_id", "blacklist_entries", ["application_id"])
    op.create_index("ix_blacklist_entries_created_by", "blacklist_entries", ["created_by"])
    op.create_index(
        "ix_blacklist_entries_lookup", "blacklist_entries", ["type", "value", "application_id"]
    )

    # Webhooks table
    op.create_table(
        "webhooks",
        *_base_columns(),
        sa.Column("owner_id", sa.String(), nullable=False),
        sa.Column("url", sa.String(length=2048), nullable=False),
        sa.Column("secret", sa.String(length=255), nullable=True),
        sa.Column("events", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
    )
    op.create_index("ix_webhooks_owner_id", "webhooks", ["owner_id"])

    # Activity logs table
    op.create_table(
        "activity_logs",
        *_base_columns(),
        sa.Column("application_id", sa.String(), nullable=False),
        sa.Column("app_user_id", sa.String(), nullable=True),
        sa.Column("event", sa.String(length=50), nullable=False),
        sa.Column("ip_address", sa.String(length=64), nullable=True),
        sa.Column("hwid", sa.String(length=255), nullable=True),
        sa.Column("user_agent", sa.String(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("success", sa.Boolean(), nullable=False),
        sa.Column("error_message", sa.String(), nullable=True),
    )
    op.create_index("ix_activity_logs_application_id", "activity_logs", ["application_id"])
    op.create_index("ix_activity_logs_app_user_id", "activity_logs", ["app_user_id"])
    op.create_index(
        "ix_activity_logs_application_created", "activity_logs", ["application_id", "created_at"]
    )


def downgrade() -> None:
    op.drop_table("activity_logs")
    op.drop_table("webhooks")
    op.drop_table("blacklist_entries")
    op.drop_table("active_sessions")
    op.drop_table("app_users")
    op.drop_table("license_keys")
    op.drop_table("applications")
