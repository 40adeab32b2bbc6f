"""Pydantic schemas for scientist views, statistics and recommendations."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import PriorityEnum
from app.schemas.activity import RecommendationRead
from app.schemas.crops import CropRead
from app.schemas.sensors import SensorReadingRead


class FarmerSummary(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: uuid.UUID
	name: str
	email: str
	crop: str
	location: str
	created_at: datetime


class OwnerSummary(BaseModel):
	id: uuid.UUID
	name: str
	email: str
	location: str = ""


class ScientistCropRead(CropRead):
	owner: OwnerSummary | None = None


class SensorReadingWithOwner(SensorReadingRead):
	owner: OwnerSummary | None = None


class GlobalStats(BaseModel):
	total_farmers: int
	total_crops: int
	total_sensor_data: int
	avg_moisture: float
	avg_temperature: float
	last_updated: datetime


class FarmerRankingItem(BaseModel):
	farmer_id: uuid.UUID
	name: str
	email: str
	location: str
	total_projects: int
	unique_crops: int


class BiofertilizerStat(BaseModel):
	biofertilizer: str
	total_projects: int
	total_farmers: int


class SimpleRankingItem(BaseModel):
	farmer_id: uuid.UUID
	name: str
	total_projects: int


class SimpleBiofertilizerItem(BaseModel):
	biofertilizer: str
	total_projects: int


class GeneralTotals(BaseModel):
	total_farmers: int
	total_projects: int
	total_biofertilizers: int


class SimpleStats(BaseModel):
	farmer_ranking: list[SimpleRankingItem]
	biofertilizers: list[SimpleBiofertilizerItem]
	general: GeneralTotals
	generated_at: datetime


class FarmerProfileStats(BaseModel):
	name: str
	location: str
	main_crop: str


class FarmerCropStats(BaseModel):
	total: int
	active: int
	harvested: int


class FarmerSensorStats(BaseModel):
	total: int
	avg_moisture: float
	avg_temperature: float
	needs_water: int


class FarmerStats(BaseModel):
	farmer: FarmerProfileStats
	crops: FarmerCropStats
	sensor_data: FarmerSensorStats
	last_updated: datetime


class RecommendationCreate(BaseModel):
	farmer_id: uuid.UUID
	crop_id: uuid.UUID | None = None
	recommendation: str = Field(min_length=1, max_length=4000)
	priority: PriorityEnum = PriorityEnum.medium


class RecommendationCreateResponse(BaseModel):
	success: bool = True
	message: str
	recommendation: RecommendationRead
