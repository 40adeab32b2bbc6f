"""Scientist-to-farmer advisory messages."""

from __future__ import annotations

import uuid

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, pg_enum
from app.models.enums import PriorityEnum, RecommendationStatusEnum


class Recommendation(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "recommendations"
    __table_args__ = (
        Index("ix_recommendations_farmer_created", "farmer_id", "created_at"),
    )

    farmer_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    crop_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("crop_records.id", ondelete="SET NULL"),
        nullable=True,
    )
    text: Mapped[str] = mapped_column(String(4000), nullable=False)
    priority: Mapped[PriorityEnum] = mapped_column(
        pg_enum(PriorityEnum, "priority_level"),
        nullable=False,
        default=PriorityEnum.medium,
        server_default=PriorityEnum.medium.value,
    )
    scientist_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    scientist_name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[RecommendationStatusEnum] = mapped_column(
        pg_enum(RecommendationStatusEnum, "recommendation_status"),
        nullable=False,
        default=RecommendationStatusEnum.pending,
        server_default=RecommendationStatusEnum.pending.value,
    )

    def __repr__(self) -> str:
        return (
            f"<Recommendation id={self.id} farmer={self.farmer_id} "
            f"status={self.status}>"
        )
