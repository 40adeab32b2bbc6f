"""Account registration, login and profile management."""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.passwords import hash_password, verify_password
from app.errors import AuthorizationError, NotFoundError, ValidationError
from app.models.enums import UserRoleEnum
from app.models.users import User
from app.schemas.auth import LoginRequest, ProfileUpdate, RegisterRequest

logger = structlog.get_logger("agromonitor.auth")


def resolve_role(requested: str | None) -> UserRoleEnum:
	"""Unknown or missing roles fall back to farmer."""
	try:
		return UserRoleEnum((requested or "").strip().lower())
	except ValueError:
		return UserRoleEnum.farmer


class AuthService:
	def __init__(self, db: AsyncSession):
		self.db = db

	async def register(self, payload: RegisterRequest) -> User:
		email = payload.email.strip().lower()
		if await self._find_by_email(email) is not None:
			raise ValidationError("User already exists")

		user = User(
			name=payload.name.strip(),
			email=email,
			hashed_password=hash_password(payload.password),
			role=resolve_role(payload.role),
			crop=payload.crop,
			location=payload.location,
		)
		self.db.add(user)
		try:
			await self.db.flush()
		except IntegrityError as exc:
			raise ValidationError("User already exists") from exc
		await self.db.refresh(user)
		logger.info("user_registered", user_id=str(user.id), role=user.role.value)
		return user

	async def login(self, payload: LoginRequest) -> User:
		user = await self._find_by_email(payload.email.strip().lower())
		if user is None:
			raise ValidationError("User not found")
		if not verify_password(payload.password, user.hashed_password):
			raise ValidationError("Incorrect password")
		logger.info("user_logged_in", user_id=str(user.id))
		return user

	async def get_user(self, user_id: uuid.UUID) -> User:
		row = await self.db.execute(select(User).where(User.id == user_id))
		user = row.scalar_one_or_none()
		if user is None:
			raise NotFoundError("User not found")
		return user

	async def get_profile(self, caller: User, user_id: uuid.UUID) -> User:
		if caller.id != user_id and caller.role != UserRoleEnum.scientist:
			raise AuthorizationError("Cannot read another user's profile")
		return await self.get_user(user_id)

	async def update_profile(self, caller: User, user_id: uuid.UUID, payload: ProfileUpdate) -> User:
		if caller.id != user_id:
			raise AuthorizationError("Cannot edit another user's profile")
		user = await self.get_user(user_id)
		for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
			setattr(user, field, value)
		await self.db.flush()
		await self.db.refresh(user)
		return user

	async def _find_by_email(self, email: str) -> User | None:
		row = await self.db.execute(select(User).where(User.email == email))
		return row.scalar_one_or_none()
