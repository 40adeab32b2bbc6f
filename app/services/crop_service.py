"""Crop records: upsert-or-append merge logic plus owner-scoped CRUD.

A submission names a crop and a location. When the caller already has an
Active record whose normalized (crop, location) key matches, the action is
prepended to that record's history; otherwise a new Active record is created
with the action as its first entry. Both branches are a single
``INSERT ... ON CONFLICT DO UPDATE`` arbitrated by the partial unique index
``uq_crop_records_active_key``, so two concurrent first submissions for the
same key can never produce two Active records.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import structlog
from sqlalchemy import func, literal, literal_column, select, text
from sqlalchemy.dialects.postgresql import JSONB, insert as pg_insert
from sqlalchemy.dialects.postgresql.dml import Insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import NotFoundError, ValidationError
from app.models.crops import ACTIVE_KEY_COLUMNS, ACTIVE_KEY_PREDICATE, CropRecord
from app.models.enums import ActionTypeEnum, CropStatusEnum
from app.schemas.crops import CropSubmission, CropUpdate, MergeOutcome

logger = structlog.get_logger("agromonitor.crops")

OUTCOME_APPENDED: MergeOutcome = "accion_agregada"
OUTCOME_CREATED: MergeOutcome = "nuevo_cultivo"

_FIXED_DESCRIPTIONS: dict[ActionTypeEnum, str] = {
	ActionTypeEnum.watering: "Watering applied",
	ActionTypeEnum.harvest: "Harvest performed",
	ActionTypeEnum.pruning: "Pruning performed",
}


@dataclass(slots=True)
class MergeResult:
	outcome: MergeOutcome
	crop: CropRecord
	entry: dict[str, Any]

	@property
	def created(self) -> bool:
		return self.outcome == OUTCOME_CREATED


def normalize_key(value: str) -> str:
	return value.strip().lower()


def describe_action(
	action_type: ActionTypeEnum | str | None,
	seed: str | None = None,
	bio_fertilizer: str | None = None,
) -> str:
	"""Human-readable description; depends only on its arguments."""
	if action_type == ActionTypeEnum.sowing:
		return f"Sowing of {seed or 'cultivo'}"
	if action_type == ActionTypeEnum.fertilization:
		return f"Application of {bio_fertilizer or 'biofertilizante'}"
	try:
		return _FIXED_DESCRIPTIONS.get(ActionTypeEnum(action_type), "Action performed")
	except ValueError:
		return "Action performed"


def build_history_entry(
	submission: CropSubmission,
	default_type: ActionTypeEnum,
	entry_id: str,
	now: datetime,
) -> dict[str, Any]:
	action_type = submission.action_type or default_type
	return {
		"id": entry_id,
		"date": now.isoformat(),
		"type": action_type.value,
		"seed": submission.seed or "",
		"action": describe_action(action_type, submission.seed, submission.bio_fertilizer),
		"bio_fertilizer": submission.bio_fertilizer or "",
		"observations": submission.observations or "",
		"synced": True,
	}


def _require_text(value: str, field: str) -> str:
	cleaned = value.strip()
	if not cleaned:
		raise ValidationError(f"{field} is required")
	return cleaned


def build_upsert_statement(
	user_id: uuid.UUID,
	submission: CropSubmission,
	now: datetime,
	entry_id: str | None = None,
) -> tuple[Insert, dict[str, Any], dict[str, Any]]:
	"""Return (statement, entry if created, entry if appended).

	The two entries share id and timestamp and differ only in their default
	action type, so whichever branch the database takes persists exactly one.
	"""
	crop = _require_text(submission.crop, "crop")
	location = _require_text(submission.location, "location")
	entry_id = entry_id or str(uuid.uuid4())

	created_entry = build_history_entry(submission, ActionTypeEnum.sowing, entry_id, now)
	appended_entry = build_history_entry(submission, ActionTypeEnum.other, entry_id, now)

	stmt = pg_insert(CropRecord).values(
		id=uuid.uuid4(),
		user_id=user_id,
		crop=crop,
		location=location,
		crop_key=normalize_key(crop),
		location_key=normalize_key(location),
		status=CropStatusEnum.active,
		humidity=submission.humidity,
		bio_fertilizer=submission.bio_fertilizer or "",
		sowing_date=now,
		observations=submission.observations or "",
		recommendations=submission.recommendations or "",
		history=[created_entry],
	)

	updates: dict[str, Any] = {
		"history": literal([appended_entry], JSONB).op("||")(CropRecord.history),
		"updated_at": func.now(),
	}
	if submission.humidity is not None:
		updates["humidity"] = stmt.excluded.humidity
	if submission.bio_fertilizer:
		updates["bio_fertilizer"] = stmt.excluded.bio_fertilizer
	if submission.observations:
		updates["observations"] = stmt.excluded.observations
	if submission.recommendations:
		updates["recommendations"] = stmt.excluded.recommendations
	if submission.status is not None:
		updates["status"] = submission.status
	if submission.action_type == ActionTypeEnum.sowing:
		updates["sowing_date"] = stmt.excluded.sowing_date

	stmt = stmt.on_conflict_do_update(
		index_elements=list(ACTIVE_KEY_COLUMNS),
		index_where=text(ACTIVE_KEY_PREDICATE),
		set_=updates,
	).returning(
		CropRecord.id,
		literal_column("(xmax = 0)").label("inserted"),
	)
	return stmt, created_entry, appended_entry


class CropService:
	"""Owner-scoped crop record operations."""

	def __init__(self, db: AsyncSession):
		self.db = db

	async def upsert_crop(self, user_id: uuid.UUID, submission: CropSubmission) -> MergeResult:
		now = datetime.now(UTC)
		stmt, created_entry, appended_entry = build_upsert_statement(user_id, submission, now)

		row = (await self.db.execute(stmt)).one()
		crop = await self._load(row.id, populate_existing=True)

		if row.inserted:
			logger.info("crop_created", user_id=str(user_id), crop_id=str(crop.id), crop=crop.crop)
			return MergeResult(outcome=OUTCOME_CREATED, crop=crop, entry=created_entry)

		logger.info(
			"crop_action_appended",
			user_id=str(user_id),
			crop_id=str(crop.id),
			action_type=appended_entry["type"],
			history_size=len(crop.history),
		)
		return MergeResult(outcome=OUTCOME_APPENDED, crop=crop, entry=appended_entry)

	async def list_crops(self, user_id: uuid.UUID) -> list[CropRecord]:
		stmt = (
			select(CropRecord)
			.where(CropRecord.user_id == user_id)
			.order_by(CropRecord.created_at.desc())
		)
		rows = await self.db.execute(stmt)
		return list(rows.scalars().all())

	async def get_crop(self, user_id: uuid.UUID, crop_id: uuid.UUID) -> CropRecord:
		stmt = select(CropRecord).where(CropRecord.id == crop_id, CropRecord.user_id == user_id)
		row = await self.db.execute(stmt)
		crop = row.scalar_one_or_none()
		if crop is None:
			raise NotFoundError(f"Crop {crop_id} not found")
		return crop

	async def update_crop(
		self,
		user_id: uuid.UUID,
		crop_id: uuid.UUID,
		payload: CropUpdate,
	) -> CropRecord:
		crop = await self.get_crop(user_id, crop_id)
		for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
			setattr(crop, field, value)
		try:
			await self.db.flush()
		except IntegrityError as exc:
			raise ValidationError(
				"Another active crop record already exists for this crop and location"
			) from exc
		await self.db.refresh(crop)
		return crop

	async def delete_crop(self, user_id: uuid.UUID, crop_id: uuid.UUID) -> None:
		crop = await self.get_crop(user_id, crop_id)
		await self.db.delete(crop)
		await self.db.flush()
		logger.info("crop_deleted", user_id=str(user_id), crop_id=str(crop_id))

	async def delete_history_entry(
		self,
		user_id: uuid.UUID,
		crop_id: uuid.UUID,
		action_id: str,
	) -> CropRecord:
		"""Remove one history entry by id under a row lock."""
		stmt = (
			select(CropRecord)
			.where(CropRecord.id == crop_id, CropRecord.user_id == user_id)
			.with_for_update()
		)
		row = await self.db.execute(stmt)
		crop = row.scalar_one_or_none()
		if crop is None:
			raise NotFoundError(f"Crop {crop_id} not found")

		remaining = [entry for entry in crop.history if entry.get("id") != action_id]
		if len(remaining) == len(crop.history):
			raise NotFoundError(f"Action {action_id} not found in crop {crop_id}")

		crop.history = remaining
		await self.db.flush()
		await self.db.refresh(crop)
		logger.info(
			"crop_action_deleted",
			user_id=str(user_id),
			crop_id=str(crop_id),
			action_id=action_id,
		)
		return crop

	async def _load(self, crop_id: uuid.UUID, populate_existing: bool = False) -> CropRecord:
		stmt = select(CropRecord).where(CropRecord.id == crop_id)
		if populate_existing:
			stmt = stmt.execution_options(populate_existing=True)
		row = await self.db.execute(stmt)
		crop = row.scalar_one_or_none()
		if crop is None:
			raise NotFoundError(f"Crop {crop_id} not found")
		return crop
