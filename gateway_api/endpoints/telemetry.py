"""Telemetry read endpoints: last reading, device status, serial log."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ..dependencies import get_repository, require_token
from ..errors import StorageError
from ..liveness import evaluate_liveness
from ..persistence.repository import MAX_SERIAL_MESSAGES, TelemetryRepository
from ..schemas import DeviceStatusOut, SensorReadingOut, SerialMessageOut

router = APIRouter(tags=["telemetry"], dependencies=[Depends(require_token)])


@router.get("/get-sensor-data", response_model=SensorReadingOut)
async def get_sensor_data(repository: TelemetryRepository = Depends(get_repository)):
    """Most recent sensor reading."""
    try:
        reading = await repository.last_reading()
    except StorageError:
        raise HTTPException(status_code=500, detail="Internal Server Error")

    if reading is None:
        raise HTTPException(status_code=404, detail="No records found")
    return SensorReadingOut.from_record(reading)


@router.get("/check-device-status", response_model=DeviceStatusOut)
async def check_device_status(repository: TelemetryRepository = Depends(get_repository)):
    """Online if the last reading is at most 30 seconds old."""
    try:
        reading = await repository.last_reading()
    except StorageError:
        raise HTTPException(status_code=500, detail="Internal Server Error")

    return DeviceStatusOut.from_status(evaluate_liveness(reading))


@router.get("/latest-serial-messages", response_model=List[SerialMessageOut])
async def latest_serial_messages(repository: TelemetryRepository = Depends(get_repository)):
    try:
        messages = await repository.latest_serial_messages(MAX_SERIAL_MESSAGES)
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to fetch latest serial messages")

    return [SerialMessageOut.from_record(m) for m in messages]
