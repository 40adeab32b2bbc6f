"""initial_schema

Revision ID: 3c5a9e1f7b20
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the six AgroMonitor tables, their PostgreSQL enum types and indexes,
including the partial unique index that keeps at most one Active crop record
per (user, crop, location) key.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3c5a9e1f7b20"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

# ── Enum type names (PostgreSQL CREATE TYPE) ────────────────────────────────
ENUM_USER_ROLE = postgresql.ENUM(
    "farmer", "scientist", name="user_role", create_type=False
)
ENUM_CROP_STATUS = postgresql.ENUM(
    "Active", "Harvested", "Abandoned", name="crop_status", create_type=False
)
ENUM_ACTION_TYPE = postgresql.ENUM(
    "sowing",
    "watering",
    "fertilization",
    "harvest",
    "pruning",
    "other",
    name="action_type",
    create_type=False,
)
ENUM_ALERT_TYPE = postgresql.ENUM(
    "info", "warning", "success", "error", name="alert_type", create_type=False
)
ENUM_PRIORITY = postgresql.ENUM(
    "low", "medium", "high", name="priority_level", create_type=False
)
ENUM_RECOMMENDATION_STATUS = postgresql.ENUM(
    "pending", "read", "completed", name="recommendation_status", create_type=False
)


def _uuid_pk() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        server_default=sa.text("uuid_generate_v4()"),
        nullable=False,
    )


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def _user_fk(name: str) -> sa.Column:
    return sa.Column(
        name,
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )


def upgrade() -> None:
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # ── 1. Create enum types ────────────────────────────────────────────
    ENUM_USER_ROLE.create(op.get_bind(), checkfirst=True)
    ENUM_CROP_STATUS.create(op.get_bind(), checkfirst=True)
    ENUM_ACTION_TYPE.create(op.get_bind(), checkfirst=True)
    ENUM_ALERT_TYPE.create(op.get_bind(), checkfirst=True)
    ENUM_PRIORITY.create(op.get_bind(), checkfirst=True)
    ENUM_RECOMMENDATION_STATUS.create(op.get_bind(), checkfirst=True)

    # ── 2. Identity ─────────────────────────────────────────────────────
    op.create_table(
        "users",
        _uuid_pk(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("hashed_password", sa.String(128), nullable=False),
        sa.Column(
            "role",
            ENUM_USER_ROLE,
            server_default=sa.text("'farmer'"),
            nullable=False,
        ),
        sa.Column("crop", sa.String(255), server_default=sa.text("''"), nullable=False),
        sa.Column("location", sa.String(255), server_default=sa.text("''"), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("ix_users_email", "users", ["email"])

    # ── 3. Crop records ─────────────────────────────────────────────────
    op.create_table(
        "crop_records",
        _uuid_pk(),
        _user_fk("user_id"),
        sa.Column("crop", sa.String(255), nullable=False),
        sa.Column("location", sa.String(255), nullable=False),
        sa.Column("crop_key", sa.String(255), nullable=False),
        sa.Column("location_key", sa.String(255), nullable=False),
        sa.Column(
            "status",
            ENUM_CROP_STATUS,
            server_default=sa.text("'Active'"),
            nullable=False,
        ),
        sa.Column("humidity", sa.Float(), nullable=True),
        sa.Column("bio_fertilizer", sa.String(255), server_default=sa.text("''"), nullable=False),
        sa.Column(
            "sowing_date",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("observations", sa.String(4000), server_default=sa.text("''"), nullable=False),
        sa.Column("recommendations", sa.String(4000), server_default=sa.text("''"), nullable=False),
        sa.Column(
            "history",
            postgresql.JSONB(),
            server_default=sa.text("'[]'::jsonb"),
            nullable=False,
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "uq_crop_records_active_key",
        "crop_records",
        ["user_id", "crop_key", "location_key"],
        unique=True,
        postgresql_where=sa.text("status = 'Active'"),
    )
    op.create_index("ix_crop_records_user_created", "crop_records", ["user_id", "created_at"])

    # ── 4. Activity ─────────────────────────────────────────────────────
    op.create_table(
        "agricultural_actions",
        _uuid_pk(),
        _user_fk("user_id"),
        sa.Column("type", ENUM_ACTION_TYPE, nullable=False),
        sa.Column("seed", sa.String(255), nullable=True),
        sa.Column("sowing_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("bio_fertilizer", sa.String(255), nullable=True),
        sa.Column("observations", sa.String(4000), nullable=True),
        sa.Column(
            "date",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("crop", sa.String(255), nullable=True),
        sa.Column("synced", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_agricultural_actions_user_date", "agricultural_actions", ["user_id", "date"]
    )

    op.create_table(
        "alerts",
        _uuid_pk(),
        _user_fk("user_id"),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.String(4000), nullable=False),
        sa.Column("type", ENUM_ALERT_TYPE, server_default=sa.text("'info'"), nullable=False),
        sa.Column("sender", sa.String(255), nullable=False),
        sa.Column(
            "date",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("read", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("priority", ENUM_PRIORITY, server_default=sa.text("'medium'"), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_alerts_user_date", "alerts", ["user_id", "date"])

    # ── 5. Sensor readings (time-series) ────────────────────────────────
    op.create_table(
        "sensor_readings",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        _user_fk("user_id"),
        sa.Column("moisture", sa.Float(), nullable=False),
        sa.Column("temperature", sa.Float(), nullable=False),
        sa.Column("humidity", sa.Float(), nullable=True),
        sa.Column("ph", sa.Float(), nullable=True),
        sa.Column(
            "date",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("crop", sa.String(255), nullable=True),
        sa.Column(
            "ingested_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_sensor_readings_user_date", "sensor_readings", ["user_id", "date"])

    # ── 6. Recommendations ──────────────────────────────────────────────
    op.create_table(
        "recommendations",
        _uuid_pk(),
        _user_fk("farmer_id"),
        sa.Column(
            "crop_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("crop_records.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("text", sa.String(4000), nullable=False),
        sa.Column("priority", ENUM_PRIORITY, server_default=sa.text("'medium'"), nullable=False),
        _user_fk("scientist_id"),
        sa.Column("scientist_name", sa.String(255), nullable=False),
        sa.Column(
            "status",
            ENUM_RECOMMENDATION_STATUS,
            server_default=sa.text("'pending'"),
            nullable=False,
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_recommendations_farmer_created", "recommendations", ["farmer_id", "created_at"]
    )


def downgrade() -> None:
    # ── Drop tables in reverse dependency order ─────────────────────────
    op.drop_table("recommendations")
    op.drop_table("sensor_readings")
    op.drop_table("alerts")
    op.drop_table("agricultural_actions")
    op.drop_table("crop_records")
    op.drop_table("users")

    # ── Drop enum types ─────────────────────────────────────────────────
    ENUM_RECOMMENDATION_STATUS.drop(op.get_bind(), checkfirst=True)
    ENUM_PRIORITY.drop(op.get_bind(), checkfirst=True)
    ENUM_ALERT_TYPE.drop(op.get_bind(), checkfirst=True)
    ENUM_ACTION_TYPE.drop(op.get_bind(), checkfirst=True)
    ENUM_CROP_STATUS.drop(op.get_bind(), checkfirst=True)
    ENUM_USER_ROLE.drop(op.get_bind(), checkfirst=True)
