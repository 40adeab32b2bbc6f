"""Credential verification: turns an ``Authorization`` value into a User.

Two interchangeable schemes sit behind :class:`CredentialVerifier`:

``identifier``
    Trust-on-possession. The credential *is* the user's id (or, failing the
    UUID shape, their email). Anyone holding the value acts as that user.

``jwt``
    HS256 access token whose ``sub`` claim carries the user id.

Routes only ever depend on the protocol, so switching ``AUTH_SCHEME`` does not
touch route code.
"""

from __future__ import annotations

import uuid
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.jwt import create_access_token, decode_token
from app.config import AuthScheme, get_settings
from app.errors import AuthenticationError
from app.models.users import User


class CredentialVerifier(Protocol):
	async def resolve(self, db: AsyncSession, credential: str) -> User: ...

	def issue_token(self, user: User) -> str: ...


def parse_authorization(header: str | None) -> str | None:
	"""Accept both ``<value>`` and ``Bearer <value>``; blank means absent."""
	if header is None:
		return None
	value = header.strip()
	scheme, _, rest = value.partition(" ")
	if scheme.lower() == "bearer":
		value = rest.strip()
	return value or None


def parse_user_id(value: str) -> uuid.UUID | None:
	try:
		return uuid.UUID(value)
	except ValueError:
		return None


async def _load_user(db: AsyncSession, user_id: uuid.UUID) -> User | None:
	row = await db.execute(select(User).where(User.id == user_id))
	return row.scalar_one_or_none()


class IdentifierCredentialVerifier:
	async def resolve(self, db: AsyncSession, credential: str) -> User:
		user_id = parse_user_id(credential)
		if user_id is not None:
			user = await _load_user(db, user_id)
		else:
			row = await db.execute(select(User).where(User.email == credential.lower()))
			user = row.scalar_one_or_none()
		if user is None:
			raise AuthenticationError("Invalid user credential")
		return user

	def issue_token(self, user: User) -> str:
		return str(user.id)


class SignedTokenVerifier:
	async def resolve(self, db: AsyncSession, credential: str) -> User:
		payload = decode_token(credential)
		user_id = parse_user_id(str(payload["sub"]))
		if user_id is None:
			raise AuthenticationError("Token subject is invalid")
		user = await _load_user(db, user_id)
		if user is None:
			raise AuthenticationError("Invalid user credential")
		return user

	def issue_token(self, user: User) -> str:
		return create_access_token(str(user.id))


def get_credential_verifier() -> CredentialVerifier:
	if get_settings().auth_scheme == AuthScheme.jwt:
		return SignedTokenVerifier()
	return IdentifierCredentialVerifier()
