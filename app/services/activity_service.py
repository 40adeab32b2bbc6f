"""Action log, alerts and the farmer side of recommendations."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import NotFoundError
from app.models.activity import ActionLogEntry, Alert
from app.models.enums import ActionTypeEnum, RecommendationStatusEnum
from app.models.recommendations import Recommendation
from app.schemas.activity import ActionCreate

logger = structlog.get_logger("agromonitor.activity")


class ActivityService:
	def __init__(self, db: AsyncSession):
		self.db = db

	async def list_actions(
		self,
		user_id: uuid.UUID,
		action_type: ActionTypeEnum | None = None,
		limit: int | None = None,
	) -> list[ActionLogEntry]:
		stmt = select(ActionLogEntry).where(ActionLogEntry.user_id == user_id)
		if action_type is not None:
			stmt = stmt.where(ActionLogEntry.type == action_type)
		stmt = stmt.order_by(ActionLogEntry.date.desc())
		if limit:
			stmt = stmt.limit(limit)
		rows = await self.db.execute(stmt)
		return list(rows.scalars().all())

	async def create_action(self, user_id: uuid.UUID, payload: ActionCreate) -> ActionLogEntry:
		entry = ActionLogEntry(
			user_id=user_id,
			type=payload.type,
			seed=payload.seed,
			sowing_date=payload.sowing_date,
			bio_fertilizer=payload.bio_fertilizer,
			observations=payload.observations,
			location=payload.location,
			crop=payload.crop,
			date=datetime.now(UTC),
			synced=True,
		)
		self.db.add(entry)
		await self.db.flush()
		await self.db.refresh(entry)
		logger.info("action_logged", user_id=str(user_id), action_type=entry.type.value)
		return entry

	async def list_alerts(self, user_id: uuid.UUID, unread_only: bool = False) -> list[Alert]:
		stmt = select(Alert).where(Alert.user_id == user_id)
		if unread_only:
			stmt = stmt.where(Alert.read.is_(False))
		rows = await self.db.execute(stmt.order_by(Alert.date.desc()))
		return list(rows.scalars().all())

	async def mark_alert_read(self, user_id: uuid.UUID, alert_id: uuid.UUID) -> Alert:
		row = await self.db.execute(
			select(Alert).where(Alert.id == alert_id, Alert.user_id == user_id)
		)
		alert = row.scalar_one_or_none()
		if alert is None:
			raise NotFoundError(f"Alert {alert_id} not found")
		alert.read = True
		await self.db.flush()
		await self.db.refresh(alert)
		return alert

	async def list_recommendations(self, farmer_id: uuid.UUID) -> list[Recommendation]:
		stmt = (
			select(Recommendation)
			.where(Recommendation.farmer_id == farmer_id)
			.order_by(Recommendation.created_at.desc())
		)
		rows = await self.db.execute(stmt)
		return list(rows.scalars().all())

	async def set_recommendation_status(
		self,
		farmer_id: uuid.UUID,
		recommendation_id: uuid.UUID,
		status: RecommendationStatusEnum,
	) -> Recommendation:
		row = await self.db.execute(
			select(Recommendation).where(
				Recommendation.id == recommendation_id,
				Recommendation.farmer_id == farmer_id,
			)
		)
		recommendation = row.scalar_one_or_none()
		if recommendation is None:
			raise NotFoundError(f"Recommendation {recommendation_id} not found")
		recommendation.status = status
		await self.db.flush()
		await self.db.refresh(recommendation)
		return recommendation
