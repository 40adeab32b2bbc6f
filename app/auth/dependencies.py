"""FastAPI dependencies for user credentials, roles and the device key."""

from __future__ import annotations

import hashlib
import hmac
from typing import Callable

import structlog
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.credentials import get_credential_verifier, parse_authorization
from app.config import get_settings
from app.database import get_db
from app.errors import AuthenticationError, ServiceError
from app.models.enums import UserRoleEnum
from app.models.users import User

logger = structlog.get_logger("agromonitor.auth")

DEVICE_PATH_MARKER = "/sensor/"


def _raise_auth(exc: ServiceError) -> HTTPException:
	return HTTPException(status_code=exc.status_code, detail=exc.detail)


def credential_digest(credential: str) -> str:
	return hashlib.sha256(credential.encode("utf-8")).hexdigest()


def extract_identity_hint(request: Request) -> tuple[str, str] | None:
	"""Rate-limit identity: (``device`` | ``user``, credential digest)."""
	credential = parse_authorization(request.headers.get("authorization"))
	if credential is None:
		return None
	kind = "device" if DEVICE_PATH_MARKER in request.url.path else "user"
	return kind, credential_digest(credential)[:32]


async def get_current_user(
	request: Request,
	db: AsyncSession = Depends(get_db),
) -> User:
	credential = parse_authorization(request.headers.get("authorization"))
	if credential is None:
		raise _raise_auth(AuthenticationError("Authorization token is required"))

	try:
		return await get_credential_verifier().resolve(db, credential)
	except AuthenticationError as exc:
		logger.info("credential_rejected", path=request.url.path, reason=exc.detail)
		raise _raise_auth(exc) from exc


def require_role(*allowed: UserRoleEnum) -> Callable[[User], User]:
	allowed_set = set(allowed)

	async def dependency(current_user: User = Depends(get_current_user)) -> User:
		if current_user.role not in allowed_set:
			raise HTTPException(
				status_code=status.HTTP_403_FORBIDDEN,
				detail=f"Access denied: requires role {' or '.join(sorted(allowed_set))}",
			)
		return current_user

	return dependency


async def require_device_key(request: Request) -> None:
	"""Static shared-secret check for device ingestion."""
	presented = parse_authorization(request.headers.get("authorization"))
	if presented is None:
		raise _raise_auth(AuthenticationError("Device API key is required"))

	expected = get_settings().sensor_api_key
	if not hmac.compare_digest(presented.encode("utf-8"), expected.encode("utf-8")):
		logger.warning("device_key_rejected", key_digest=credential_digest(presented)[:12])
		raise _raise_auth(AuthenticationError("Invalid device API key"))
