"""Pydantic schemas for the action log, alerts and farmer-side recommendations."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from app.models.enums import (
	ActionTypeEnum,
	AlertTypeEnum,
	PriorityEnum,
	RecommendationStatusEnum,
)


class ActionCreate(BaseModel):
	type: ActionTypeEnum
	seed: str | None = Field(default=None, max_length=255)
	sowing_date: datetime | None = None
	bio_fertilizer: str | None = Field(default=None, max_length=255)
	observations: str | None = Field(default=None, max_length=4000)
	location: str | None = Field(default=None, max_length=255)
	crop: str | None = Field(default=None, max_length=255)


class ActionRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: uuid.UUID
	user_id: uuid.UUID
	type: ActionTypeEnum
	seed: str | None = None
	sowing_date: datetime | None = None
	bio_fertilizer: str | None = None
	observations: str | None = None
	date: datetime
	location: str | None = None
	crop: str | None = None
	synced: bool = True


class ActionCreateResponse(BaseModel):
	message: str
	action: ActionRead


class AlertRead(BaseModel):
	model_config = ConfigDict(from_attributes=True, populate_by_name=True)

	id: uuid.UUID
	user_id: uuid.UUID
	title: str
	message: str
	type: AlertTypeEnum
	sender: str = Field(validation_alias=AliasChoices("sender", "from"), serialization_alias="from")
	date: datetime
	read: bool
	priority: PriorityEnum


class RecommendationRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: uuid.UUID
	farmer_id: uuid.UUID
	crop_id: uuid.UUID | None = None
	text: str
	priority: PriorityEnum
	scientist_id: uuid.UUID
	scientist_name: str
	status: RecommendationStatusEnum
	created_at: datetime


class RecommendationStatusUpdate(BaseModel):
	status: RecommendationStatusEnum
