"""Pydantic request/response schemas for accounts."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import UserRoleEnum


class LoginRequest(BaseModel):
	email: str = Field(min_length=1, max_length=320)
	password: str = Field(min_length=1)


class RegisterRequest(BaseModel):
	name: str = Field(min_length=1, max_length=255)
	email: str = Field(min_length=3, max_length=320)
	password: str = Field(min_length=1)
	role: str | None = None
	crop: str = Field(default="", max_length=255)
	location: str = Field(default="", max_length=255)


class ProfileUpdate(BaseModel):
	name: str | None = Field(default=None, min_length=1, max_length=255)
	crop: str | None = Field(default=None, max_length=255)
	location: str | None = Field(default=None, max_length=255)


class UserRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: uuid.UUID
	name: str
	email: str
	role: UserRoleEnum
	crop: str
	location: str
	created_at: datetime


class AuthResponse(BaseModel):
	message: str
	user: UserRead
	token: str


class ProfileResponse(BaseModel):
	message: str
	user: UserRead
