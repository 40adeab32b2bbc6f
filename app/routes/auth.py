"""Account routes: login, registration and profile read/update."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.credentials import get_credential_verifier
from app.auth.dependencies import get_current_user
from app.database import get_db
from app.errors import to_http_exception
from app.models.users import User
from app.schemas.auth import (
	AuthResponse,
	LoginRequest,
	ProfileResponse,
	ProfileUpdate,
	RegisterRequest,
	UserRead,
)
from app.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


def _map_error(exc: Exception) -> HTTPException:
	return to_http_exception(exc, "Unexpected account service failure")


@router.post("/login", response_model=AuthResponse)
async def login(payload: LoginRequest, db: AsyncSession = Depends(get_db)) -> AuthResponse:
	try:
		user = await AuthService(db).login(payload)
		token = get_credential_verifier().issue_token(user)
	except Exception as exc:
		raise _map_error(exc) from exc
	return AuthResponse(message="Login successful", user=UserRead.model_validate(user), token=token)


@router.post("/registro", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, db: AsyncSession = Depends(get_db)) -> AuthResponse:
	try:
		user = await AuthService(db).register(payload)
		token = get_credential_verifier().issue_token(user)
	except Exception as exc:
		raise _map_error(exc) from exc
	return AuthResponse(
		message="User registered successfully",
		user=UserRead.model_validate(user),
		token=token,
	)


@router.get("/user/{user_id}", response_model=UserRead)
async def get_profile(
	user_id: uuid.UUID,
	db: AsyncSession = Depends(get_db),
	current_user: User = Depends(get_current_user),
) -> UserRead:
	try:
		user = await AuthService(db).get_profile(current_user, user_id)
	except Exception as exc:
		raise _map_error(exc) from exc
	return UserRead.model_validate(user)


@router.put("/user/{user_id}", response_model=ProfileResponse)
async def update_profile(
	user_id: uuid.UUID,
	payload: ProfileUpdate,
	db: AsyncSession = Depends(get_db),
	current_user: User = Depends(get_current_user),
) -> ProfileResponse:
	try:
		user = await AuthService(db).update_profile(current_user, user_id, payload)
	except Exception as exc:
		raise _map_error(exc) from exc
	return ProfileResponse(message="Profile updated", user=UserRead.model_validate(user))
