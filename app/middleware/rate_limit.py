"""Redis-backed per-credential rate limiting."""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.auth.dependencies import extract_identity_hint
from app.config import get_settings

_BYPASS_PREFIXES = ("/docs", "/redoc", "/openapi", "/health")


def bucket_key(kind: str, digest: str, now: datetime | None = None) -> str:
	minute = (now or datetime.now(UTC)).strftime("%Y%m%d%H%M")
	return f"ratelimit:{kind}:{digest}:{minute}"


class RateLimitMiddleware(BaseHTTPMiddleware):
	"""Per-minute quota keyed by the digest of the presented credential.

	Device ingestion and user traffic have separate quotas. Anonymous requests
	and requests arriving while Redis is unavailable pass through unlimited.
	"""

	async def dispatch(self, request: Request, call_next):  # type: ignore[override]
		settings = get_settings()
		if not settings.rate_limit_enabled or self._is_bypass_path(request.url.path):
			return await call_next(request)

		identity = extract_identity_hint(request)
		if identity is None:
			return await call_next(request)

		redis_client = getattr(request.app.state, "redis", None)
		if redis_client is None:
			return await call_next(request)

		kind, digest = identity
		quota = (
			settings.rate_limit_device_per_minute
			if kind == "device"
			else settings.rate_limit_user_per_minute
		)

		key = bucket_key(kind, digest)
		current = await redis_client.incr(key)
		if current == 1:
			await redis_client.expire(key, 65)

		if current > quota:
			return JSONResponse(
				status_code=status.HTTP_429_TOO_MANY_REQUESTS,
				content={"error": "Rate limit exceeded"},
				headers={"retry-after": "60"},
			)

		return await call_next(request)

	@staticmethod
	def _is_bypass_path(path: str) -> bool:
		return path.startswith(_BYPASS_PREFIXES)
