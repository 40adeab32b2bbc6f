"""Shared pytest fixtures: async test clients, a fake DB session and fake Redis."""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator, Iterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from app.auth.dependencies import get_current_user
from app.database import get_db
from app.main import app
from app.models.enums import UserRoleEnum


class FakeAsyncSession:
	def __init__(self) -> None:
		self.commit = AsyncMock()
		self.rollback = AsyncMock()
		self.close = AsyncMock()
		self.execute = AsyncMock()
		self.flush = AsyncMock()
		self.refresh = AsyncMock()
		self.delete = AsyncMock()
		self.add = MagicMock()


class FakeRedis:
	def __init__(self) -> None:
		self._counter: dict[str, int] = {}
		self.incr = AsyncMock(side_effect=self._incr)
		self.expire = AsyncMock(return_value=True)
		self.ping = AsyncMock(return_value=True)

	async def _incr(self, key: str) -> int:
		value = self._counter.get(key, 0) + 1
		self._counter[key] = value
		return value

	def reset_counters(self) -> None:
		self._counter.clear()


def make_result(
	scalar: Any = None,
	scalars: list[Any] | None = None,
	one: Any = None,
	rows: list[Any] | None = None,
) -> MagicMock:
	"""Stand-in for a SQLAlchemy ``Result`` returned by ``session.execute``."""
	result = MagicMock()
	result.scalar_one_or_none.return_value = scalar
	result.scalar_one.return_value = scalar
	result.scalars.return_value.all.return_value = scalars or []
	result.one.return_value = one
	result.all.return_value = rows or []
	result.first.return_value = (rows or [None])[0]
	return result


def make_user(role: UserRoleEnum = UserRoleEnum.farmer, **overrides: Any) -> SimpleNamespace:
	now = datetime.now(UTC)
	fields: dict[str, Any] = {
		"id": uuid.uuid4(),
		"name": "Ana Farmer" if role == UserRoleEnum.farmer else "Dr. Rui Scientist",
		"email": f"{role.value}@test.local",
		"hashed_password": "not-a-real-hash",
		"role": role,
		"crop": "Maize",
		"location": "North Field",
		"created_at": now,
		"updated_at": now,
	}
	fields.update(overrides)
	return SimpleNamespace(**fields)


@pytest.fixture
def fake_db_session() -> FakeAsyncSession:
	"""A lightweight async-session stub for dependency overrides in API tests."""
	return FakeAsyncSession()


@pytest.fixture
def fake_redis() -> FakeRedis:
	return FakeRedis()


@pytest.fixture
def farmer_user() -> SimpleNamespace:
	return make_user(UserRoleEnum.farmer)


@pytest.fixture
def scientist_user() -> SimpleNamespace:
	return make_user(UserRoleEnum.scientist)


@pytest.fixture
def now_utc() -> datetime:
	return datetime.now(UTC)


@asynccontextmanager
async def _client_for(
	fake_db_session: FakeAsyncSession,
	user: Any | None,
) -> AsyncGenerator[AsyncClient, None]:
	async def override_get_db() -> AsyncGenerator[Any, None]:
		yield fake_db_session

	async def override_current_user() -> Any:
		return user

	app.dependency_overrides[get_db] = override_get_db
	if user is not None:
		app.dependency_overrides[get_current_user] = override_current_user
	original_lifespan = app.router.lifespan_context

	@asynccontextmanager
	async def noop_lifespan(_: Any) -> AsyncGenerator[None, None]:
		yield

	app.router.lifespan_context = noop_lifespan
	app.state.redis = None

	transport = ASGITransport(app=app)
	try:
		async with AsyncClient(transport=transport, base_url="http://test") as test_client:
			yield test_client
	finally:
		app.router.lifespan_context = original_lifespan
		app.dependency_overrides.clear()
		app.state.redis = None


@pytest.fixture
async def client(
	fake_db_session: FakeAsyncSession,
	farmer_user: SimpleNamespace,
) -> AsyncGenerator[AsyncClient, None]:
	"""HTTPX async client acting as a farmer, lifespan disabled and DB mocked."""
	async with _client_for(fake_db_session, farmer_user) as test_client:
		yield test_client


@pytest.fixture
async def scientist_client(
	fake_db_session: FakeAsyncSession,
	scientist_user: SimpleNamespace,
) -> AsyncGenerator[AsyncClient, None]:
	async with _client_for(fake_db_session, scientist_user) as test_client:
		yield test_client


@pytest.fixture
async def auth_client(fake_db_session: FakeAsyncSession) -> AsyncGenerator[AsyncClient, None]:
	"""HTTPX async client with DB override only (real auth dependencies active)."""
	async with _client_for(fake_db_session, None) as test_client:
		yield test_client


@pytest.fixture
def sensor_key(monkeypatch: pytest.MonkeyPatch) -> Iterator[str]:
	from app.config import get_settings

	key = "test-device-key"
	monkeypatch.setattr(get_settings(), "sensor_api_key", key)
	yield key


@pytest.fixture
def result_factory() -> Any:
	return make_result


@pytest.fixture
def user_factory() -> Any:
	return make_user
