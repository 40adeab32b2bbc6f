"""Sensor reading ingestion and time-range reads."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.errors import NotFoundError, ValidationError
from app.models.sensors import SensorReading
from app.models.users import User
from app.schemas.sensors import SensorReadingIn

logger = structlog.get_logger("agromonitor.sensors")


class SensorService:
	def __init__(self, db: AsyncSession):
		self.db = db

	async def ingest(self, payload: SensorReadingIn) -> SensorReading:
		owner = await self.db.execute(select(User.id).where(User.id == payload.user_id))
		if owner.scalar_one_or_none() is None:
			raise NotFoundError(f"User {payload.user_id} not found")

		settings = get_settings()
		reading = SensorReading(
			user_id=payload.user_id,
			moisture=payload.moisture,
			temperature=payload.temperature,
			humidity=payload.humidity if payload.humidity is not None else settings.sensor_default_humidity,
			ph=payload.ph if payload.ph is not None else settings.sensor_default_ph,
			location=payload.location or settings.sensor_default_location,
			crop=payload.crop or settings.sensor_default_crop,
			date=datetime.now(UTC),
		)
		self.db.add(reading)
		await self.db.flush()
		await self.db.refresh(reading)
		logger.info(
			"sensor_reading_stored",
			user_id=str(payload.user_id),
			reading_id=reading.id,
			moisture=payload.moisture,
			temperature=payload.temperature,
		)
		return reading

	async def list_readings(
		self,
		user_id: uuid.UUID,
		limit: int | None = None,
		start_date: datetime | None = None,
		end_date: datetime | None = None,
	) -> list[SensorReading]:
		if start_date and end_date and start_date > end_date:
			raise ValidationError("start_date must not be after end_date")

		stmt = select(SensorReading).where(SensorReading.user_id == user_id)
		if start_date is not None:
			stmt = stmt.where(SensorReading.date >= start_date)
		if end_date is not None:
			stmt = stmt.where(SensorReading.date <= end_date)
		stmt = stmt.order_by(SensorReading.date.desc())
		if limit:
			stmt = stmt.limit(limit)
		rows = await self.db.execute(stmt)
		return list(rows.scalars().all())

	async def latest_reading(self, user_id: uuid.UUID) -> SensorReading | None:
		readings = await self.list_readings(user_id, limit=1)
		return readings[0] if readings else None
