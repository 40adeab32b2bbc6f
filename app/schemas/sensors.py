"""Pydantic schemas for sensor ingestion and reads."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SensorReadingIn(BaseModel):
	user_id: uuid.UUID
	moisture: float
	temperature: float
	humidity: float | None = None
	ph: float | None = None
	location: str | None = Field(default=None, max_length=255)
	crop: str | None = Field(default=None, max_length=255)


class SensorReadingRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: int
	user_id: uuid.UUID
	moisture: float
	temperature: float
	humidity: float | None = None
	ph: float | None = None
	date: datetime
	location: str | None = None
	crop: str | None = None


class SensorIngestData(BaseModel):
	id: int
	moisture: float
	temperature: float
	timestamp: datetime


class SensorIngestReceipt(BaseModel):
	success: bool = True
	message: str
	data: SensorIngestData
