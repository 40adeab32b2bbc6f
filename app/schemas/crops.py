"""Pydantic schemas for crop records and their embedded history."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import ActionTypeEnum, CropStatusEnum

MergeOutcome = Literal["accion_agregada", "nuevo_cultivo"]


class CropSubmission(BaseModel):
	"""One field action on a named crop at a named location."""

	crop: str = Field(default="", max_length=255)
	location: str = Field(default="", max_length=255)
	action_type: ActionTypeEnum | None = None
	seed: str | None = Field(default=None, max_length=255)
	bio_fertilizer: str | None = Field(default=None, max_length=255)
	observations: str | None = Field(default=None, max_length=4000)
	recommendations: str | None = Field(default=None, max_length=4000)
	humidity: float | None = None
	status: CropStatusEnum | None = None


class CropUpdate(BaseModel):
	status: CropStatusEnum | None = None
	observations: str | None = Field(default=None, max_length=4000)
	recommendations: str | None = Field(default=None, max_length=4000)
	humidity: float | None = None
	bio_fertilizer: str | None = Field(default=None, max_length=255)


class HistoryEntryRead(BaseModel):
	id: str
	date: datetime
	type: ActionTypeEnum
	seed: str = ""
	action: str
	bio_fertilizer: str = ""
	observations: str = ""
	synced: bool = True


class CropRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: uuid.UUID
	user_id: uuid.UUID
	crop: str
	location: str
	status: CropStatusEnum
	humidity: float | None = None
	bio_fertilizer: str = ""
	sowing_date: datetime
	observations: str = ""
	recommendations: str = ""
	history: list[HistoryEntryRead] = Field(default_factory=list)
	created_at: datetime
	updated_at: datetime


class CropMergeResponse(BaseModel):
	result: MergeOutcome
	message: str
	crop: CropRead
	action: HistoryEntryRead


class CropMutationResponse(BaseModel):
	message: str
	crop: CropRead | None = None


class SyncSummary(BaseModel):
	total: int
	last_synced_at: datetime


class SyncResponse(BaseModel):
	message: str
	data: list[CropRead]
	summary: SyncSummary
