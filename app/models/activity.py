"""Flat per-user activity tables: the action log and alerts."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, func, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, pg_enum
from app.models.enums import ActionTypeEnum, AlertTypeEnum, PriorityEnum


class ActionLogEntry(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Field action submitted outside any crop record (activity feed)."""

    __tablename__ = "agricultural_actions"
    __table_args__ = (
        Index("ix_agricultural_actions_user_date", "user_id", "date"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    type: Mapped[ActionTypeEnum] = mapped_column(
        pg_enum(ActionTypeEnum, "action_type"), nullable=False
    )
    seed: Mapped[str | None] = mapped_column(String(255), nullable=True)
    sowing_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    bio_fertilizer: Mapped[str | None] = mapped_column(String(255), nullable=True)
    observations: Mapped[str | None] = mapped_column(String(4000), nullable=True)
    date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    crop: Mapped[str | None] = mapped_column(String(255), nullable=True)
    synced: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=text("true")
    )

    def __repr__(self) -> str:
        return f"<ActionLogEntry id={self.id} user={self.user_id} type={self.type}>"


class Alert(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Notification addressed to one user."""

    __tablename__ = "alerts"
    __table_args__ = (
        Index("ix_alerts_user_date", "user_id", "date"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(String(4000), nullable=False)
    type: Mapped[AlertTypeEnum] = mapped_column(
        pg_enum(AlertTypeEnum, "alert_type"),
        nullable=False,
        default=AlertTypeEnum.info,
        server_default=AlertTypeEnum.info.value,
    )
    sender: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    read: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    priority: Mapped[PriorityEnum] = mapped_column(
        pg_enum(PriorityEnum, "priority_level"),
        nullable=False,
        default=PriorityEnum.medium,
        server_default=PriorityEnum.medium.value,
    )

    def __repr__(self) -> str:
        return f"<Alert id={self.id} user={self.user_id} read={self.read}>"
