"""Farmer routes, all scoped to the calling user."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import require_role
from app.database import get_db
from app.errors import to_http_exception
from app.models.enums import ActionTypeEnum, UserRoleEnum
from app.models.users import User
from app.schemas.activity import (
	ActionCreate,
	ActionCreateResponse,
	ActionRead,
	AlertRead,
	RecommendationRead,
	RecommendationStatusUpdate,
)
from app.schemas.crops import (
	CropMergeResponse,
	CropMutationResponse,
	CropRead,
	CropSubmission,
	CropUpdate,
	HistoryEntryRead,
	SyncResponse,
	SyncSummary,
)
from app.schemas.sensors import SensorReadingRead
from app.services.activity_service import ActivityService
from app.services.crop_service import CropService
from app.services.sensor_service import SensorService

router = APIRouter(prefix="/farmer", tags=["farmer"])

_farmer_access = require_role(UserRoleEnum.farmer, UserRoleEnum.scientist)

_MERGE_MESSAGES = {
	"accion_agregada": "Action added to existing crop",
	"nuevo_cultivo": "New crop created",
}


def _map_error(exc: Exception) -> HTTPException:
	return to_http_exception(exc, "Unexpected farmer service failure")


def _parse_action_filter(value: str | None) -> ActionTypeEnum | None:
	if value is None or value == "all":
		return None
	try:
		return ActionTypeEnum(value)
	except ValueError as exc:
		raise HTTPException(
			status_code=status.HTTP_400_BAD_REQUEST,
			detail=f"Unknown action type: {value}",
		) from exc


# ── Crops ───────────────────────────────────────────────────────────────────


@router.get("/crops", response_model=list[CropRead])
async def list_crops(
	db: AsyncSession = Depends(get_db),
	current_user: User = Depends(_farmer_access),
) -> list[CropRead]:
	try:
		crops = await CropService(db).list_crops(current_user.id)
	except Exception as exc:
		raise _map_error(exc) from exc
	return [CropRead.model_validate(crop) for crop in crops]


@router.get("/crops/{crop_id}", response_model=CropRead)
async def get_crop(
	crop_id: uuid.UUID,
	db: AsyncSession = Depends(get_db),
	current_user: User = Depends(_farmer_access),
) -> CropRead:
	try:
		crop = await CropService(db).get_crop(current_user.id, crop_id)
	except Exception as exc:
		raise _map_error(exc) from exc
	return CropRead.model_validate(crop)


@router.post("/crops", response_model=CropMergeResponse)
async def submit_crop_action(
	payload: CropSubmission,
	db: AsyncSession = Depends(get_db),
	current_user: User = Depends(_farmer_access),
) -> CropMergeResponse:
	try:
		result = await CropService(db).upsert_crop(current_user.id, payload)
	except Exception as exc:
		raise _map_error(exc) from exc
	return CropMergeResponse(
		result=result.outcome,
		message=_MERGE_MESSAGES[result.outcome],
		crop=CropRead.model_validate(result.crop),
		action=HistoryEntryRead.model_validate(result.entry),
	)


@router.put("/crops/{crop_id}", response_model=CropMutationResponse)
async def update_crop(
	crop_id: uuid.UUID,
	payload: CropUpdate,
	db: AsyncSession = Depends(get_db),
	current_user: User = Depends(_farmer_access),
) -> CropMutationResponse:
	try:
		crop = await CropService(db).update_crop(current_user.id, crop_id, payload)
	except Exception as exc:
		raise _map_error(exc) from exc
	return CropMutationResponse(message="Crop updated", crop=CropRead.model_validate(crop))


@router.delete("/crops/{crop_id}", response_model=CropMutationResponse)
async def delete_crop(
	crop_id: uuid.UUID,
	db: AsyncSession = Depends(get_db),
	current_user: User = Depends(_farmer_access),
) -> CropMutationResponse:
	try:
		await CropService(db).delete_crop(current_user.id, crop_id)
	except Exception as exc:
		raise _map_error(exc) from exc
	return CropMutationResponse(message="Crop deleted")


@router.delete("/crops/{crop_id}/history/{action_id}", response_model=CropMutationResponse)
async def delete_history_entry(
	crop_id: uuid.UUID,
	action_id: str,
	db: AsyncSession = Depends(get_db),
	current_user: User = Depends(_farmer_access),
) -> CropMutationResponse:
	try:
		crop = await CropService(db).delete_history_entry(current_user.id, crop_id, action_id)
	except Exception as exc:
		raise _map_error(exc) from exc
	return CropMutationResponse(message="Action deleted", crop=CropRead.model_validate(crop))


@router.get("/sync-all-data", response_model=SyncResponse)
async def sync_all_data(
	db: AsyncSession = Depends(get_db),
	current_user: User = Depends(_farmer_access),
) -> SyncResponse:
	try:
		crops = await CropService(db).list_crops(current_user.id)
	except Exception as exc:
		raise _map_error(exc) from exc
	return SyncResponse(
		message="Data synchronized",
		data=[CropRead.model_validate(crop) for crop in crops],
		summary=SyncSummary(total=len(crops), last_synced_at=datetime.now(UTC)),
	)


# ── Action log ──────────────────────────────────────────────────────────────


@router.get("/actions", response_model=list[ActionRead])
async def list_actions(
	limit: int | None = Query(default=None, ge=1, le=1000),
	type: str | None = Query(default=None),
	db: AsyncSession = Depends(get_db),
	current_user: User = Depends(_farmer_access),
) -> list[ActionRead]:
	action_type = _parse_action_filter(type)
	try:
		actions = await ActivityService(db).list_actions(current_user.id, action_type, limit)
	except Exception as exc:
		raise _map_error(exc) from exc
	return [ActionRead.model_validate(action) for action in actions]


@router.post("/actions", response_model=ActionCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_action(
	payload: ActionCreate,
	db: AsyncSession = Depends(get_db),
	current_user: User = Depends(_farmer_access),
) -> ActionCreateResponse:
	try:
		action = await ActivityService(db).create_action(current_user.id, payload)
	except Exception as exc:
		raise _map_error(exc) from exc
	return ActionCreateResponse(message="Action recorded", action=ActionRead.model_validate(action))


# ── Alerts & recommendations ────────────────────────────────────────────────


@router.get("/alerts", response_model=list[AlertRead], response_model_by_alias=True)
async def list_alerts(
	unread_only: bool = Query(default=False),
	db: AsyncSession = Depends(get_db),
	current_user: User = Depends(_farmer_access),
) -> list[AlertRead]:
	try:
		alerts = await ActivityService(db).list_alerts(current_user.id, unread_only)
	except Exception as exc:
		raise _map_error(exc) from exc
	return [AlertRead.model_validate(alert) for alert in alerts]


@router.post("/alerts/{alert_id}/read", response_model=AlertRead, response_model_by_alias=True)
async def mark_alert_read(
	alert_id: uuid.UUID,
	db: AsyncSession = Depends(get_db),
	current_user: User = Depends(_farmer_access),
) -> AlertRead:
	try:
		alert = await ActivityService(db).mark_alert_read(current_user.id, alert_id)
	except Exception as exc:
		raise _map_error(exc) from exc
	return AlertRead.model_validate(alert)


@router.get("/recommendations", response_model=list[RecommendationRead])
async def list_recommendations(
	db: AsyncSession = Depends(get_db),
	current_user: User = Depends(_farmer_access),
) -> list[RecommendationRead]:
	try:
		items = await ActivityService(db).list_recommendations(current_user.id)
	except Exception as exc:
		raise _map_error(exc) from exc
	return [RecommendationRead.model_validate(item) for item in items]


@router.put("/recommendations/{recommendation_id}/status", response_model=RecommendationRead)
async def set_recommendation_status(
	recommendation_id: uuid.UUID,
	payload: RecommendationStatusUpdate,
	db: AsyncSession = Depends(get_db),
	current_user: User = Depends(_farmer_access),
) -> RecommendationRead:
	try:
		item = await ActivityService(db).set_recommendation_status(
			current_user.id, recommendation_id, payload.status
		)
	except Exception as exc:
		raise _map_error(exc) from exc
	return RecommendationRead.model_validate(item)


# ── Sensor readings ─────────────────────────────────────────────────────────


@router.get("/sensor-data", response_model=list[SensorReadingRead])
async def list_sensor_data(
	limit: int | None = Query(default=None, ge=1, le=5000),
	start_date: datetime | None = Query(default=None),
	end_date: datetime | None = Query(default=None),
	db: AsyncSession = Depends(get_db),
	current_user: User = Depends(_farmer_access),
) -> list[SensorReadingRead]:
	try:
		readings = await SensorService(db).list_readings(
			current_user.id, limit, start_date, end_date
		)
	except Exception as exc:
		raise _map_error(exc) from exc
	return [SensorReadingRead.model_validate(reading) for reading in readings]


@router.get("/sensor-data/latest", response_model=SensorReadingRead | None)
async def latest_sensor_data(
	db: AsyncSession = Depends(get_db),
	current_user: User = Depends(_farmer_access),
) -> SensorReadingRead | None:
	try:
		reading = await SensorService(db).latest_reading(current_user.id)
	except Exception as exc:
		raise _map_error(exc) from exc
	return SensorReadingRead.model_validate(reading) if reading is not None else None
