"""Cross-farmer reads, statistics and recommendation issuing for scientists."""

from __future__ import annotations

import math
import uuid
from collections.abc import Sequence
from datetime import UTC, datetime

import structlog
from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.errors import NotFoundError
from app.models.crops import CropRecord
from app.models.enums import CropStatusEnum, UserRoleEnum
from app.models.recommendations import Recommendation
from app.models.sensors import SensorReading
from app.models.users import User
from app.schemas.scientist import (
	BiofertilizerStat,
	FarmerCropStats,
	FarmerProfileStats,
	FarmerRankingItem,
	FarmerSensorStats,
	FarmerStats,
	GeneralTotals,
	GlobalStats,
	RecommendationCreate,
	SimpleBiofertilizerItem,
	SimpleRankingItem,
	SimpleStats,
)

logger = structlog.get_logger("agromonitor.scientist")


def round_one(value: float) -> float:
	"""Round half up to one decimal place."""
	return math.floor(value * 10 + 0.5) / 10


def average(values: Sequence[float | None]) -> float:
	if not values:
		return 0.0
	return round_one(sum(value or 0.0 for value in values) / len(values))


def count_dry_readings(moistures: Sequence[float | None], threshold: float) -> int:
	return sum(1 for value in moistures if value is not None and value < threshold)


class ScientistService:
	def __init__(self, db: AsyncSession):
		self.db = db
		self.settings = get_settings()

	# ── Farmers ─────────────────────────────────────────────────────────────

	async def list_farmers(self) -> list[User]:
		stmt = (
			select(User)
			.where(User.role == UserRoleEnum.farmer)
			.order_by(User.created_at.desc())
		)
		rows = await self.db.execute(stmt)
		return list(rows.scalars().all())

	async def get_farmer(self, farmer_id: uuid.UUID) -> User:
		row = await self.db.execute(
			select(User).where(User.id == farmer_id, User.role == UserRoleEnum.farmer)
		)
		farmer = row.scalar_one_or_none()
		if farmer is None:
			raise NotFoundError(f"Farmer {farmer_id} not found")
		return farmer

	async def list_farmer_crops(self, farmer_id: uuid.UUID) -> list[CropRecord]:
		stmt = (
			select(CropRecord)
			.where(CropRecord.user_id == farmer_id)
			.order_by(CropRecord.created_at.desc())
		)
		rows = await self.db.execute(stmt)
		return list(rows.scalars().all())

	async def list_farmer_readings(self, farmer_id: uuid.UUID, limit: int) -> list[SensorReading]:
		stmt = (
			select(SensorReading)
			.where(SensorReading.user_id == farmer_id)
			.order_by(SensorReading.date.desc())
			.limit(limit)
		)
		rows = await self.db.execute(stmt)
		return list(rows.scalars().all())

	async def recent_readings(self, limit: int) -> list[tuple[SensorReading, User]]:
		stmt = (
			select(SensorReading, User)
			.join(User, User.id == SensorReading.user_id)
			.order_by(SensorReading.date.desc())
			.limit(limit)
		)
		rows = await self.db.execute(stmt)
		return [(reading, owner) for reading, owner in rows.all()]

	async def get_crop_with_owner(self, crop_id: uuid.UUID) -> tuple[CropRecord, User]:
		stmt = (
			select(CropRecord, User)
			.join(User, User.id == CropRecord.user_id)
			.where(CropRecord.id == crop_id)
		)
		row = (await self.db.execute(stmt)).first()
		if row is None:
			raise NotFoundError(f"Crop {crop_id} not found")
		return row[0], row[1]

	# ── Statistics ──────────────────────────────────────────────────────────

	async def global_stats(self) -> GlobalStats:
		total_farmers = await self._count_farmers()
		total_crops = await self._scalar(select(func.count(CropRecord.id)))
		total_readings = await self._scalar(select(func.count(SensorReading.id)))
		moistures, temperatures = await self._recent_samples(None)

		return GlobalStats(
			total_farmers=total_farmers,
			total_crops=total_crops,
			total_sensor_data=total_readings,
			avg_moisture=average(moistures),
			avg_temperature=average(temperatures),
			last_updated=datetime.now(UTC),
		)

	async def farmer_ranking(self, limit: int | None = None) -> list[FarmerRankingItem]:
		total_projects = func.count(CropRecord.id).label("total_projects")
		stmt = (
			select(
				User.id,
				User.name,
				User.email,
				User.location,
				total_projects,
				func.count(func.distinct(CropRecord.crop_key)).label("unique_crops"),
			)
			.join(CropRecord, CropRecord.user_id == User.id)
			.group_by(User.id)
			.order_by(desc(total_projects), User.name)
			.limit(limit or self.settings.stats_ranking_limit)
		)
		rows = await self.db.execute(stmt)
		return [
			FarmerRankingItem(
				farmer_id=row.id,
				name=row.name,
				email=row.email,
				location=row.location,
				total_projects=row.total_projects,
				unique_crops=row.unique_crops,
			)
			for row in rows.all()
		]

	async def biofertilizer_stats(self) -> list[BiofertilizerStat]:
		total_projects = func.count(CropRecord.id).label("total_projects")
		stmt = (
			select(
				CropRecord.bio_fertilizer,
				total_projects,
				func.count(func.distinct(CropRecord.user_id)).label("total_farmers"),
			)
			.where(CropRecord.bio_fertilizer != "")
			.group_by(CropRecord.bio_fertilizer)
			.order_by(desc(total_projects), CropRecord.bio_fertilizer)
		)
		rows = await self.db.execute(stmt)
		return [
			BiofertilizerStat(
				biofertilizer=row.bio_fertilizer,
				total_projects=row.total_projects,
				total_farmers=row.total_farmers,
			)
			for row in rows.all()
		]

	async def simple_stats(self) -> SimpleStats:
		ranking = await self.farmer_ranking(self.settings.stats_simple_ranking_limit)
		biofertilizers = await self.biofertilizer_stats()
		total_farmers = await self._count_farmers()
		total_crops = await self._scalar(select(func.count(CropRecord.id)))

		return SimpleStats(
			farmer_ranking=[
				SimpleRankingItem(
					farmer_id=item.farmer_id,
					name=item.name,
					total_projects=item.total_projects,
				)
				for item in ranking
			],
			biofertilizers=[
				SimpleBiofertilizerItem(
					biofertilizer=item.biofertilizer,
					total_projects=item.total_projects,
				)
				for item in biofertilizers
			],
			general=GeneralTotals(
				total_farmers=total_farmers,
				total_projects=total_crops,
				total_biofertilizers=len(biofertilizers),
			),
			generated_at=datetime.now(UTC),
		)

	async def farmer_stats(self, farmer_id: uuid.UUID) -> FarmerStats:
		farmer = await self.get_farmer(farmer_id)

		rows = await self.db.execute(
			select(CropRecord.status, func.count(CropRecord.id))
			.where(CropRecord.user_id == farmer_id)
			.group_by(CropRecord.status)
		)
		by_status = {status: count for status, count in rows.all()}
		moistures, temperatures = await self._recent_samples(farmer_id)

		return FarmerStats(
			farmer=FarmerProfileStats(
				name=farmer.name,
				location=farmer.location,
				main_crop=farmer.crop,
			),
			crops=FarmerCropStats(
				total=sum(by_status.values()),
				active=by_status.get(CropStatusEnum.active, 0),
				harvested=by_status.get(CropStatusEnum.harvested, 0),
			),
			sensor_data=FarmerSensorStats(
				total=len(moistures),
				avg_moisture=average(moistures),
				avg_temperature=average(temperatures),
				needs_water=count_dry_readings(
					moistures, self.settings.dry_soil_moisture_threshold
				),
			),
			last_updated=datetime.now(UTC),
		)

	# ── Recommendations ─────────────────────────────────────────────────────

	async def create_recommendation(
		self,
		scientist: User,
		payload: RecommendationCreate,
	) -> Recommendation:
		row = await self.db.execute(select(User).where(User.id == payload.farmer_id))
		farmer = row.scalar_one_or_none()
		if farmer is None:
			raise NotFoundError(f"Farmer {payload.farmer_id} not found")

		if payload.crop_id is not None:
			crop_row = await self.db.execute(
				select(CropRecord.id).where(
					CropRecord.id == payload.crop_id,
					CropRecord.user_id == payload.farmer_id,
				)
			)
			if crop_row.scalar_one_or_none() is None:
				raise NotFoundError(f"Crop {payload.crop_id} not found")

		recommendation = Recommendation(
			farmer_id=payload.farmer_id,
			crop_id=payload.crop_id,
			text=payload.recommendation.strip(),
			priority=payload.priority,
			scientist_id=scientist.id,
			scientist_name=scientist.name,
		)
		self.db.add(recommendation)
		await self.db.flush()
		await self.db.refresh(recommendation)
		logger.info(
			"recommendation_sent",
			farmer_id=str(payload.farmer_id),
			scientist_id=str(scientist.id),
			priority=payload.priority.value,
		)
		return recommendation

	async def list_recommendations(self, farmer_id: uuid.UUID) -> list[Recommendation]:
		stmt = (
			select(Recommendation)
			.where(Recommendation.farmer_id == farmer_id)
			.order_by(Recommendation.created_at.desc())
			.limit(self.settings.recommendation_history_limit)
		)
		rows = await self.db.execute(stmt)
		return list(rows.scalars().all())

	# ── Helpers ─────────────────────────────────────────────────────────────

	async def _scalar(self, stmt: object) -> int:
		row = await self.db.execute(stmt)  # type: ignore[arg-type]
		return int(row.scalar_one() or 0)

	async def _count_farmers(self) -> int:
		return await self._scalar(
			select(func.count(User.id)).where(User.role == UserRoleEnum.farmer)
		)

	async def _recent_samples(
		self,
		user_id: uuid.UUID | None,
	) -> tuple[list[float | None], list[float | None]]:
		stmt = select(SensorReading.moisture, SensorReading.temperature)
		if user_id is not None:
			stmt = stmt.where(SensorReading.user_id == user_id)
		stmt = stmt.order_by(SensorReading.date.desc()).limit(self.settings.stats_sample_size)
		rows = (await self.db.execute(stmt)).all()
		return [row.moisture for row in rows], [row.temperature for row in rows]
