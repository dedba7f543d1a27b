"""SQLAlchemy table definitions for authhost.

They match the schema defined in Alembic migrations.
"""

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID

# Metadata object for all tables
metadata = MetaData()

# Constraint names the repositories map IntegrityErrors by
UQ_USERS_USERNAME = "uq_users_username"
UQ_EXTERNAL_IDENTITY = "uq_external_identity"

# ============================================================================
# USERS TABLE
# ============================================================================
users_table = Table(
    "users",
    metadata,
    Column("id", UUID, primary_key=True),
    Column("username", String(255), nullable=True),  # Lowercase, credential users only
    Column("email", String(255), nullable=True),
    Column("display_name", String(255), nullable=True),
    Column("password_hash", Text, nullable=True),  # pbkdf2_sha256$...
    Column("digest_ha1_hash", String(32), nullable=True),  # MD5 hex
    Column("profile", JSONB, nullable=False, server_default="{}"),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    UniqueConstraint("username", name=UQ_USERS_USERNAME),
)

Index("idx_users_email", users_table.c.email)

# ============================================================================
# EXTERNAL IDENTITIES TABLE
# ============================================================================
external_identities_table = Table(
    "external_identities",
    metadata,
    Column("id", UUID, primary_key=True),
    Column("user_id", UUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("provider", String(20), nullable=False),  # 'twitter', 'github', ...
    Column("external_id", String(255), nullable=False),  # Permanent ID on the provider
    Column("access_token", Text, nullable=True),
    Column("refresh_token", Text, nullable=True),
    Column("token_expires_at", TIMESTAMP(timezone=True), nullable=True),
    Column("claims", JSONB, nullable=False, server_default="{}"),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column("last_login_at", TIMESTAMP(timezone=True), nullable=True),
    UniqueConstraint("provider", "external_id", name=UQ_EXTERNAL_IDENTITY),
)

Index("idx_external_identities_user_id", external_identities_table.c.user_id)

# ============================================================================
# USER ROLES TABLE
# ============================================================================
user_roles_table = Table(
    "user_roles",
    metadata,
    Column("user_id", UUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("role", String(100), nullable=False),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    PrimaryKeyConstraint("user_id", "role", name="pk_user_roles"),
)

# ============================================================================
# SESSIONS TABLE
# ============================================================================
sessions_table = Table(
    "sessions",
    metadata,
    Column("id", String(64), primary_key=True),  # Opaque token
    Column("user_id", UUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("provider", String(20), nullable=False),
    Column("created_at", TIMESTAMP(timezone=True), nullable=False),
    Column("expires_at", TIMESTAMP(timezone=True), nullable=False),
    Column("last_seen_at", TIMESTAMP(timezone=True), nullable=False),
    Column("ttl_seconds", Integer, nullable=False),
    Column("rolling", Boolean, nullable=False, server_default="false"),
    Column("revoked_at", TIMESTAMP(timezone=True), nullable=True),
)

Index("idx_sessions_user_id", sessions_table.c.user_id)
Index("idx_sessions_expires_at", sessions_table.c.expires_at)

# ============================================================================
# LOGIN ATTEMPTS TABLE (lockout counters)
# ============================================================================
login_attempts_table = Table(
    "login_attempts",
    metadata,
    Column("username", String(255), primary_key=True),
    Column("attempts", Integer, nullable=False, server_default="0"),
    Column("window_started_at", TIMESTAMP(timezone=True), nullable=False),
)
