"""Crop merge against a real PostgreSQL database.

Runs only when ``TEST_DATABASE_URL`` points at a disposable asyncpg database;
every table is dropped and recreated per test.
"""

from __future__ import annotations

import asyncio
import os
import uuid
from collections.abc import AsyncGenerator

import pytest
from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.models import Base, CropRecord, User
from app.models.enums import CropStatusEnum, UserRoleEnum
from app.schemas.crops import CropRead, CropSubmission, CropUpdate
from app.services.crop_service import OUTCOME_APPENDED, OUTCOME_CREATED, CropService, MergeResult

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL")

pytestmark = pytest.mark.skipif(
	not TEST_DATABASE_URL,
	reason="TEST_DATABASE_URL not set",
)


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
	engine = create_async_engine(TEST_DATABASE_URL or "")
	async with engine.begin() as connection:
		await connection.execute(text('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"'))
		await connection.run_sync(Base.metadata.drop_all)
		await connection.run_sync(Base.metadata.create_all)
	try:
		yield async_sessionmaker(engine, expire_on_commit=False)
	finally:
		await engine.dispose()


@pytest.fixture
async def farmer_id(session_factory: async_sessionmaker[AsyncSession]) -> uuid.UUID:
	async with session_factory() as session:
		user = User(
			name="Ana",
			email=f"ana-{uuid.uuid4().hex[:8]}@test.local",
			hashed_password="x",
			role=UserRoleEnum.farmer,
		)
		session.add(user)
		await session.commit()
		return user.id


async def _submit(
	session_factory: async_sessionmaker[AsyncSession],
	user_id: uuid.UUID,
	**fields: object,
) -> MergeResult:
	async with session_factory() as session:
		result = await CropService(session).upsert_crop(user_id, CropSubmission(**fields))
		await session.commit()
		return result


@pytest.mark.asyncio
async def test_sow_water_then_delete_entry(
	session_factory: async_sessionmaker[AsyncSession],
	farmer_id: uuid.UUID,
) -> None:
	sown = await _submit(session_factory, farmer_id, crop="Corn", location="North Field", action_type="sowing")
	assert sown.outcome == OUTCOME_CREATED
	assert [entry["action"] for entry in sown.crop.history] == ["Sowing of cultivo"]

	watered = await _submit(
		session_factory, farmer_id, crop="corn ", location=" north field", action_type="watering"
	)
	assert watered.outcome == OUTCOME_APPENDED
	assert watered.crop.id == sown.crop.id
	assert [entry["action"] for entry in watered.crop.history] == [
		"Watering applied",
		"Sowing of cultivo",
	]
	assert watered.crop.crop == "Corn"
	assert watered.crop.history[1]["id"] == sown.entry["id"]
	assert watered.crop.history[1]["date"] == sown.entry["date"]

	async with session_factory() as session:
		crop = await CropService(session).delete_history_entry(
			farmer_id, sown.crop.id, watered.entry["id"]
		)
		payload = CropRead.model_validate(crop)
		await session.commit()
	assert [entry.id for entry in payload.history] == [sown.entry["id"]]
	assert payload.updated_at is not None

	async with session_factory() as session:
		reloaded = await CropService(session).get_crop(farmer_id, sown.crop.id)
	assert [entry["id"] for entry in reloaded.history] == [sown.entry["id"]]


@pytest.mark.asyncio
async def test_append_keeps_unsupplied_fields(
	session_factory: async_sessionmaker[AsyncSession],
	farmer_id: uuid.UUID,
) -> None:
	await _submit(
		session_factory,
		farmer_id,
		crop="Beans",
		location="Plot 4",
		humidity=40.0,
		bio_fertilizer="Compost tea",
	)
	appended = await _submit(session_factory, farmer_id, crop="Beans", location="Plot 4", action_type="pruning")

	assert appended.crop.humidity == 40.0
	assert appended.crop.bio_fertilizer == "Compost tea"
	assert appended.crop.history[0]["action"] == "Pruning performed"


@pytest.mark.asyncio
async def test_harvested_record_does_not_absorb_new_submissions(
	session_factory: async_sessionmaker[AsyncSession],
	farmer_id: uuid.UUID,
) -> None:
	first = await _submit(session_factory, farmer_id, crop="Corn", location="North Field")
	async with session_factory() as session:
		await CropService(session).update_crop(
			farmer_id, first.crop.id, CropUpdate(status=CropStatusEnum.harvested)
		)
		await session.commit()

	second = await _submit(session_factory, farmer_id, crop="Corn", location="North Field")

	assert second.outcome == OUTCOME_CREATED
	assert second.crop.id != first.crop.id


@pytest.mark.asyncio
async def test_concurrent_first_submissions_share_one_record(
	session_factory: async_sessionmaker[AsyncSession],
	farmer_id: uuid.UUID,
) -> None:
	results = await asyncio.gather(
		*(
			_submit(session_factory, farmer_id, crop="Sorghum", location="East Field", action_type="watering")
			for _ in range(5)
		)
	)

	assert [result.outcome for result in results].count(OUTCOME_CREATED) == 1
	assert len({result.crop.id for result in results}) == 1

	async with session_factory() as session:
		active = await session.execute(
			select(func.count(CropRecord.id)).where(
				CropRecord.user_id == farmer_id,
				CropRecord.crop_key == "sorghum",
				CropRecord.status == CropStatusEnum.active,
			)
		)
		crops = await CropService(session).list_crops(farmer_id)
	assert active.scalar_one() == 1
	assert len(crops[0].history) == 5
