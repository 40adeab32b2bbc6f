"""Service error taxonomy and its mapping onto HTTP responses.

Services raise these; routes convert them with :func:`to_http_exception` and
the application handlers in ``app.main`` render every error body as
``{"error": "<message>"}``.
"""

from __future__ import annotations

import structlog
from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

logger = structlog.get_logger("agromonitor.errors")


class ServiceError(Exception):
	"""Base class for failures with a fixed HTTP mapping."""

	status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

	def __init__(self, detail: str) -> None:
		super().__init__(detail)
		self.detail = detail


class ValidationError(ServiceError, ValueError):
	status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(ServiceError):
	status_code = status.HTTP_401_UNAUTHORIZED


class AuthorizationError(ServiceError):
	status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(ServiceError, LookupError):
	status_code = status.HTTP_404_NOT_FOUND


class StoreError(ServiceError):
	status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def to_http_exception(exc: Exception, fallback: str) -> HTTPException:
	if isinstance(exc, HTTPException):
		return exc
	if isinstance(exc, SQLAlchemyError):
		logger.error("datastore_failure", error=str(exc), fallback=fallback)
		exc = StoreError(fallback)
	if isinstance(exc, ServiceError):
		return HTTPException(status_code=exc.status_code, detail=exc.detail)
	logger.exception("unexpected_failure", error=str(exc), fallback=fallback)
	return HTTPException(
		status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
		detail=fallback,
	)
