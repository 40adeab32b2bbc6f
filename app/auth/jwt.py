"""Signed access tokens for the ``jwt`` credential scheme."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from app.config import get_settings
from app.errors import AuthenticationError

TOKEN_TYPE = "access"


def _settings() -> Any:
	return get_settings()


def create_access_token(subject: str, expires_minutes: int | None = None) -> str:
	settings = _settings()
	ttl = expires_minutes or settings.jwt_access_token_expire_minutes
	now = datetime.now(UTC)
	claims: dict[str, Any] = {
		"sub": subject,
		"typ": TOKEN_TYPE,
		"iat": int(now.timestamp()),
		"exp": int((now + timedelta(minutes=ttl)).timestamp()),
	}
	return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict[str, Any]:
	settings = _settings()
	try:
		payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
	except JWTError as exc:
		raise AuthenticationError("Invalid authentication token") from exc

	subject = payload.get("sub")
	if not isinstance(subject, str) or not subject:
		raise AuthenticationError("Token subject is missing")

	if payload.get("typ") != TOKEN_TYPE:
		raise AuthenticationError(f"Expected {TOKEN_TYPE} token")

	exp_raw = payload.get("exp")
	if not isinstance(exp_raw, int):
		raise AuthenticationError("Token expiration is missing")
	if datetime.now(UTC).timestamp() >= exp_raw:
		raise AuthenticationError("Authentication token has expired")

	return payload
