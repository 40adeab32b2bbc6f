"""Scientist routes: cross-farmer reads, statistics and recommendations."""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import require_role
from app.config import get_settings
from app.database import get_db
from app.errors import to_http_exception
from app.models.enums import UserRoleEnum
from app.models.users import User
from app.schemas.activity import RecommendationRead
from app.schemas.crops import CropRead
from app.schemas.scientist import (
	BiofertilizerStat,
	FarmerRankingItem,
	FarmerStats,
	FarmerSummary,
	GlobalStats,
	OwnerSummary,
	RecommendationCreate,
	RecommendationCreateResponse,
	ScientistCropRead,
	SensorReadingWithOwner,
	SimpleStats,
)
from app.schemas.sensors import SensorReadingRead
from app.services.scientist_service import ScientistService

router = APIRouter(prefix="/scientist", tags=["scientist"])

_scientist_only = require_role(UserRoleEnum.scientist)


def _map_error(exc: Exception) -> HTTPException:
	return to_http_exception(exc, "Unexpected scientist service failure")


def _owner(user: Any) -> OwnerSummary:
	return OwnerSummary(id=user.id, name=user.name, email=user.email, location=user.location)


# ── Farmers ─────────────────────────────────────────────────────────────────


@router.get("/farmers", response_model=list[FarmerSummary])
async def list_farmers(
	db: AsyncSession = Depends(get_db),
	_user: User = Depends(_scientist_only),
) -> list[FarmerSummary]:
	try:
		farmers = await ScientistService(db).list_farmers()
	except Exception as exc:
		raise _map_error(exc) from exc
	return [FarmerSummary.model_validate(farmer) for farmer in farmers]


@router.get("/farmers/{farmer_id}", response_model=FarmerSummary)
async def get_farmer(
	farmer_id: uuid.UUID,
	db: AsyncSession = Depends(get_db),
	_user: User = Depends(_scientist_only),
) -> FarmerSummary:
	try:
		farmer = await ScientistService(db).get_farmer(farmer_id)
	except Exception as exc:
		raise _map_error(exc) from exc
	return FarmerSummary.model_validate(farmer)


@router.get("/farmers/{farmer_id}/crops", response_model=list[CropRead])
async def list_farmer_crops(
	farmer_id: uuid.UUID,
	db: AsyncSession = Depends(get_db),
	_user: User = Depends(_scientist_only),
) -> list[CropRead]:
	try:
		crops = await ScientistService(db).list_farmer_crops(farmer_id)
	except Exception as exc:
		raise _map_error(exc) from exc
	return [CropRead.model_validate(crop) for crop in crops]


@router.get("/farmers/{farmer_id}/sensor-data", response_model=list[SensorReadingRead])
async def list_farmer_sensor_data(
	farmer_id: uuid.UUID,
	limit: int | None = Query(default=None, ge=1, le=5000),
	db: AsyncSession = Depends(get_db),
	_user: User = Depends(_scientist_only),
) -> list[SensorReadingRead]:
	try:
		readings = await ScientistService(db).list_farmer_readings(
			farmer_id, limit or get_settings().scientist_sensor_default_limit
		)
	except Exception as exc:
		raise _map_error(exc) from exc
	return [SensorReadingRead.model_validate(reading) for reading in readings]


@router.get("/recent-sensor-data", response_model=list[SensorReadingWithOwner])
async def recent_sensor_data(
	limit: int | None = Query(default=None, ge=1, le=5000),
	db: AsyncSession = Depends(get_db),
	_user: User = Depends(_scientist_only),
) -> list[SensorReadingWithOwner]:
	try:
		rows = await ScientistService(db).recent_readings(
			limit or get_settings().scientist_sensor_default_limit
		)
	except Exception as exc:
		raise _map_error(exc) from exc
	return [
		SensorReadingWithOwner(
			**SensorReadingRead.model_validate(reading).model_dump(),
			owner=_owner(owner),
		)
		for reading, owner in rows
	]


@router.get("/crops/{crop_id}", response_model=ScientistCropRead)
async def get_crop(
	crop_id: uuid.UUID,
	db: AsyncSession = Depends(get_db),
	_user: User = Depends(_scientist_only),
) -> ScientistCropRead:
	try:
		crop, owner = await ScientistService(db).get_crop_with_owner(crop_id)
	except Exception as exc:
		raise _map_error(exc) from exc
	return ScientistCropRead(**CropRead.model_validate(crop).model_dump(), owner=_owner(owner))


# ── Statistics ──────────────────────────────────────────────────────────────
# Literal /stats/... paths stay above /stats/{farmer_id}.


@router.get("/stats", response_model=GlobalStats)
async def global_stats(
	db: AsyncSession = Depends(get_db),
	_user: User = Depends(_scientist_only),
) -> GlobalStats:
	try:
		return await ScientistService(db).global_stats()
	except Exception as exc:
		raise _map_error(exc) from exc


@router.get("/stats/simple", response_model=SimpleStats)
async def simple_stats(
	db: AsyncSession = Depends(get_db),
	_user: User = Depends(_scientist_only),
) -> SimpleStats:
	try:
		return await ScientistService(db).simple_stats()
	except Exception as exc:
		raise _map_error(exc) from exc


@router.get("/stats/farmers/ranking", response_model=list[FarmerRankingItem])
async def farmer_ranking(
	db: AsyncSession = Depends(get_db),
	_user: User = Depends(_scientist_only),
) -> list[FarmerRankingItem]:
	try:
		return await ScientistService(db).farmer_ranking()
	except Exception as exc:
		raise _map_error(exc) from exc


@router.get("/stats/biofertilizers", response_model=list[BiofertilizerStat])
async def biofertilizer_stats(
	db: AsyncSession = Depends(get_db),
	_user: User = Depends(_scientist_only),
) -> list[BiofertilizerStat]:
	try:
		return await ScientistService(db).biofertilizer_stats()
	except Exception as exc:
		raise _map_error(exc) from exc


@router.get("/stats/{farmer_id}", response_model=FarmerStats)
async def farmer_stats(
	farmer_id: uuid.UUID,
	db: AsyncSession = Depends(get_db),
	_user: User = Depends(_scientist_only),
) -> FarmerStats:
	try:
		return await ScientistService(db).farmer_stats(farmer_id)
	except Exception as exc:
		raise _map_error(exc) from exc


# ── Recommendations ─────────────────────────────────────────────────────────


@router.post(
	"/recommendations",
	response_model=RecommendationCreateResponse,
	status_code=status.HTTP_201_CREATED,
)
async def send_recommendation(
	payload: RecommendationCreate,
	db: AsyncSession = Depends(get_db),
	current_user: User = Depends(_scientist_only),
) -> RecommendationCreateResponse:
	try:
		item = await ScientistService(db).create_recommendation(current_user, payload)
	except Exception as exc:
		raise _map_error(exc) from exc
	return RecommendationCreateResponse(
		message="Recommendation sent",
		recommendation=RecommendationRead.model_validate(item),
	)


@router.get("/recommendations/{farmer_id}", response_model=list[RecommendationRead])
async def list_recommendations(
	farmer_id: uuid.UUID,
	db: AsyncSession = Depends(get_db),
	_user: User = Depends(_scientist_only),
) -> list[RecommendationRead]:
	try:
		items = await ScientistService(db).list_recommendations(farmer_id)
	except Exception as exc:
		raise _map_error(exc) from exc
	return [RecommendationRead.model_validate(item) for item in items]
