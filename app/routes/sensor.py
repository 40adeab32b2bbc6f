"""Device ingestion route, guarded by the static sensor API key."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import require_device_key
from app.database import get_db
from app.errors import to_http_exception
from app.schemas.sensors import SensorIngestData, SensorIngestReceipt, SensorReadingIn
from app.services.sensor_service import SensorService

router = APIRouter(prefix="/sensor", tags=["sensor"])


def _map_error(exc: Exception) -> HTTPException:
	return to_http_exception(exc, "Unexpected sensor ingestion failure")


@router.post(
	"/sensor-data",
	response_model=SensorIngestReceipt,
	status_code=status.HTTP_201_CREATED,
	dependencies=[Depends(require_device_key)],
)
async def ingest_sensor_data(
	payload: SensorReadingIn,
	db: AsyncSession = Depends(get_db),
) -> SensorIngestReceipt:
	try:
		reading = await SensorService(db).ingest(payload)
	except Exception as exc:
		raise _map_error(exc) from exc
	return SensorIngestReceipt(
		message="Sensor reading stored",
		data=SensorIngestData(
			id=reading.id,
			moisture=reading.moisture,
			temperature=reading.temperature,
			timestamp=reading.date,
		),
	)
