"""SQLAlchemy table definitions for idlink.

These table definitions are used with SQLAlchemy Core.
They match the schema defined in Alembic migrations.
"""

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, TIMESTAMP, UUID

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# USERS TABLE (one row per identity record)
# ============================================================================
users_table = Table(
    "users",
    metadata,
    Column("id", UUID, primary_key=True, server_default="uuid_generate_v4()"),
    Column("email", String(255), nullable=True),  # Lower-cased
    Column("phone_number", String(32), nullable=True),  # E.164
    Column("name", String(255), nullable=True),
    Column("image", Text, nullable=True),
    Column("password_hash", String(255), nullable=True),
    Column("register_source", String(20), nullable=False),
    Column("two_factor_enabled", Boolean, nullable=False, server_default="false"),
    Column("two_factor_secret", String(64), nullable=True),
    Column("backup_codes", ARRAY(String), nullable=False, server_default="{}"),
    Column("linked_emails", ARRAY(String), nullable=False, server_default="{}"),
    Column("linked_phones", ARRAY(String), nullable=False, server_default="{}"),
    Column("linked_providers", ARRAY(String), nullable=False, server_default="{}"),
    Column("verified_emails", ARRAY(String), nullable=False, server_default="{}"),
    Column("verified_phones", ARRAY(String), nullable=False, server_default="{}"),
    Column("group_id", UUID, nullable=True),
    Column("is_master", Boolean, nullable=False, server_default="false"),
    Column("account_status", String(20), nullable=False, server_default="active"),
    Column("version", Integer, nullable=False, server_default="0"),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column("last_sign_in", TIMESTAMP(timezone=True), nullable=True),
    Column("last_merge_at", TIMESTAMP(timezone=True), nullable=True),
    Column("deactivated_at", TIMESTAMP(timezone=True), nullable=True),
)

# Email and phone are unique among active records only
Index(
    "uq_users_active_email",
    func.lower(users_table.c.email),
    unique=True,
    postgresql_where=text("account_status = 'active' AND email IS NOT NULL"),
)
Index(
    "uq_users_active_phone",
    users_table.c.phone_number,
    unique=True,
    postgresql_where=text("account_status = 'active' AND phone_number IS NOT NULL"),
)
Index("idx_users_group_id", users_table.c.group_id)
Index("idx_users_lower_name", func.lower(users_table.c.name))

# ============================================================================
# USER IDENTITIES TABLE (OAuth provider accounts)
# ============================================================================
user_identities_table = Table(
    "user_identities",
    metadata,
    Column("id", UUID, primary_key=True, server_default="uuid_generate_v4()"),
    Column("user_id", UUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("provider", String(50), nullable=False),  # 'google', 'github'
    Column("provider_account_id", String(255), nullable=False),
    Column("provider_email", String(255), nullable=True),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column("last_login_at", TIMESTAMP(timezone=True), nullable=True),
    UniqueConstraint("provider", "provider_account_id", name="uq_provider_identity"),
)

Index("idx_user_identities_user_id", user_identities_table.c.user_id)

# ============================================================================
# ACTIVITY EVENTS TABLE (append-only)
# ============================================================================
activity_events_table = Table(
    "activity_events",
    metadata,
    Column("id", UUID, primary_key=True, server_default="uuid_generate_v4()"),
    Column("subject_id", String(255), nullable=False),  # User id, email or phone
    Column("event_type", String(50), nullable=False),
    Column(
        "timestamp", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column("metadata", JSONB, nullable=False, server_default="{}"),
)

Index(
    "idx_activity_events_subject",
    activity_events_table.c.subject_id,
    activity_events_table.c.timestamp.desc(),
)
