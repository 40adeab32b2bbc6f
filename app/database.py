"""Async engine / session lifecycle.

The engine and session factory are created by the application lifespan and
kept on ``app.state``; request handlers reach them through :func:`get_db`.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
	AsyncEngine,
	AsyncSession,
	async_sessionmaker,
	create_async_engine,
)

from app.config import Settings


def create_engine(settings: Settings) -> AsyncEngine:
	return create_async_engine(
		settings.database_url,
		echo=settings.database_echo,
		pool_pre_ping=True,
	)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
	return async_sessionmaker(engine, expire_on_commit=False)


async def ping(engine: AsyncEngine) -> bool:
	"""Return True when a trivial query round-trips."""
	async with engine.connect() as connection:
		await connection.execute(text("SELECT 1"))
	return True


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
	"""Request-scoped session: commit on success, roll back on failure."""
	session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
	async with session_factory() as session:
		try:
			yield session
			await session.commit()
		except Exception:
			await session.rollback()
			raise
