"""Sensor reading ORM model.

Readings are append-only and queried by (user, time range), hence the
BIGSERIAL key from ``TimeSeriesMixin`` and the composite (user_id, date) index.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Index, String, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimeSeriesMixin


class SensorReading(Base, TimeSeriesMixin):
    """Environmental measurement: moisture, temperature, humidity and pH."""

    __tablename__ = "sensor_readings"
    __table_args__ = (
        Index("ix_sensor_readings_user_date", "user_id", "date"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    moisture: Mapped[float] = mapped_column(Float, nullable=False)
    temperature: Mapped[float] = mapped_column(Float, nullable=False)
    humidity: Mapped[float | None] = mapped_column(Float, nullable=True)
    ph: Mapped[float | None] = mapped_column(Float, nullable=True)
    date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    crop: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<SensorReading id={self.id} user={self.user_id} "
            f"ts={self.date}>"
        )
