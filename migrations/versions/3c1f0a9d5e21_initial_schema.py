"""initial_schema

Create the identity schema:
- Users (one row per identity record, grouped by group_id)
- User Identities (OAuth provider accounts: Google, GitHub)
- Activity Events (append-only security log)

Revision ID: 3c1f0a9d5e21
Revises:
Create Date: 2026-10-18 10:12:44.208311

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "3c1f0a9d5e21"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _string_array_column(name: str) -> sa.Column:
    return sa.Column(
        name,
        postgresql.ARRAY(sa.String()),
        nullable=False,
        server_default=sa.text("'{}'::varchar[]"),
    )


def _timestamp_column(name: str, nullable: bool = False) -> sa.Column:
    if nullable:
        return sa.Column(name, sa.TIMESTAMP(timezone=True), nullable=True)
    return sa.Column(
        name,
        sa.TIMESTAMP(timezone=True),
        nullable=False,
        server_default=sa.text("NOW()"),
    )


def upgrade() -> None:
    """Upgrade schema."""
    # Enable required extensions
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # ========================================================================
    # USERS table
    # ========================================================================
    op.create_table(
        "users",
        sa.Column(
            "id",
            sa.UUID(),
            server_default=sa.text("uuid_generate_v4()"),
            nullable=False,
        ),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone_number", sa.String(32), nullable=True),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("image", sa.Text(), nullable=True),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column("register_source", sa.String(20), nullable=False),
        sa.Column(
            "two_factor_enabled", sa.Boolean(), nullable=False, server_default="false"
        ),
        sa.Column("two_factor_secret", sa.String(64), nullable=True),
        _string_array_column("backup_codes"),
        _string_array_column("linked_emails"),
        _string_array_column("linked_phones"),
        _string_array_column("linked_providers"),
        _string_array_column("verified_emails"),
        _string_array_column("verified_phones"),
        sa.Column("group_id", sa.UUID(), nullable=True),
        sa.Column("is_master", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column(
            "account_status", sa.String(20), nullable=False, server_default="active"
        ),
        sa.Column("version", sa.Integer(), nullable=False, server_default="0"),
        _timestamp_column("created_at"),
        _timestamp_column("updated_at"),
        _timestamp_column("last_sign_in", nullable=True),
        _timestamp_column("last_merge_at", nullable=True),
        _timestamp_column("deactivated_at", nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "account_status IN ('active', 'deactivated')", name="ck_users_status"
        ),
    )

    # Email and phone are unique among active records only, so a deactivated
    # record never blocks re-registration
    op.create_index(
        "uq_users_active_email",
        "users",
        [sa.text("lower(email)")],
        unique=True,
        postgresql_where=sa.text("account_status = 'active' AND email IS NOT NULL"),
    )
    op.create_index(
        "uq_users_active_phone",
        "users",
        ["phone_number"],
        unique=True,
        postgresql_where=sa.text(
            "account_status = 'active' AND phone_number IS NOT NULL"
        ),
    )
    op.create_index("idx_users_group_id", "users", ["group_id"])
    op.create_index("idx_users_lower_name", "users", [sa.text("lower(name)")])

    # ========================================================================
    # USER_IDENTITIES table (OAuth provider accounts)
    # ========================================================================
    op.create_table(
        "user_identities",
        sa.Column(
            "id",
            sa.UUID(),
            server_default=sa.text("uuid_generate_v4()"),
            nullable=False,
        ),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("provider", sa.String(50), nullable=False),  # 'google', 'github'
        sa.Column("provider_account_id", sa.String(255), nullable=False),
        sa.Column("provider_email", sa.String(255), nullable=True),
        _timestamp_column("created_at"),
        _timestamp_column("updated_at"),
        _timestamp_column("last_login_at", nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "provider", "provider_account_id", name="uq_provider_identity"
        ),
    )
    op.create_index("idx_user_identities_user_id", "user_identities", ["user_id"])

    # ========================================================================
    # ACTIVITY_EVENTS table (append-only)
    # ========================================================================
    op.create_table(
        "activity_events",
        sa.Column(
            "id",
            sa.UUID(),
            server_default=sa.text("uuid_generate_v4()"),
            nullable=False,
        ),
        sa.Column("subject_id", sa.String(255), nullable=False),
        sa.Column("event_type", sa.String(50), nullable=False),
        _timestamp_column("timestamp"),
        sa.Column(
            "metadata",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_activity_events_subject",
        "activity_events",
        ["subject_id", sa.text("timestamp DESC")],
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("idx_activity_events_subject", table_name="activity_events")
    op.drop_table("activity_events")

    op.drop_index("idx_user_identities_user_id", table_name="user_identities")
    op.drop_table("user_identities")

    op.drop_index("idx_users_lower_name", table_name="users")
    op.drop_index("idx_users_group_id", table_name="users")
    op.drop_index("uq_users_active_phone", table_name="users")
    op.drop_index("uq_users_active_email", table_name="users")
    op.drop_table("users")
