"""CropRecord ORM model, one row per growing cycle.

``history`` (JSONB) is the cycle's embedded action log, newest entry first:

    [
        {
            "id": "6f1c…",
            "date": "2026-03-02T08:15:00+00:00",
            "type": "watering",
            "seed": "",
            "action": "Watering applied",
            "bio_fertilizer": "",
            "observations": "",
            "synced": true
        },
        ...
    ]

The row owns its history outright; entries are only ever prepended by the
upsert statement or removed one at a time by id.

``crop_key`` / ``location_key`` hold the trimmed, lower-cased match keys.
The partial unique index over them guarantees at most one Active record per
(user, crop, location) and is the arbiter of the upsert's ON CONFLICT clause.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Float, ForeignKey, Index, String, func, text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, pg_enum
from app.models.enums import CropStatusEnum

ACTIVE_KEY_COLUMNS = ("user_id", "crop_key", "location_key")
ACTIVE_KEY_PREDICATE = "status = 'Active'"


class CropRecord(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Growing cycle of one crop at one location for one user."""

    __tablename__ = "crop_records"
    __table_args__ = (
        Index(
            "uq_crop_records_active_key",
            *ACTIVE_KEY_COLUMNS,
            unique=True,
            postgresql_where=text(ACTIVE_KEY_PREDICATE),
        ),
        Index("ix_crop_records_user_created", "user_id", "created_at"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    crop: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    crop_key: Mapped[str] = mapped_column(String(255), nullable=False)
    location_key: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[CropStatusEnum] = mapped_column(
        pg_enum(CropStatusEnum, "crop_status"),
        nullable=False,
        default=CropStatusEnum.active,
        server_default=CropStatusEnum.active.value,
    )
    humidity: Mapped[float | None] = mapped_column(Float, nullable=True)
    bio_fertilizer: Mapped[str] = mapped_column(
        String(255), nullable=False, default="", server_default=""
    )
    sowing_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    observations: Mapped[str] = mapped_column(
        String(4000), nullable=False, default="", server_default=""
    )
    recommendations: Mapped[str] = mapped_column(
        String(4000), nullable=False, default="", server_default=""
    )
    history: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONB, nullable=False, default=list, server_default=text("'[]'::jsonb")
    )

    def __repr__(self) -> str:
        return (
            f"<CropRecord id={self.id} crop={self.crop!r} "
            f"location={self.location!r} status={self.status}>"
        )
