from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .liveness import DeviceStatus
from .persistence.records import SensorReading, SerialMessage


class SensorReadingOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    fan_state: Optional[int] = Field(default=None, alias="fanState")
    heater_state: Optional[int] = Field(default=None, alias="heaterState")
    device_id: Optional[str] = Field(default=None, alias="deviceID")
    firmware_version: Optional[str] = Field(default=None, alias="firmwareVersion")
    timestamp: datetime

    @classmethod
    def from_record(cls, reading: SensorReading) -> "SensorReadingOut":
        return cls(
            id=reading.id,
            temperature=reading.temperature,
            humidity=reading.humidity,
            fan_state=reading.fan_state,
            heater_state=reading.heater_state,
            device_id=reading.device_id,
            firmware_version=reading.firmware_version,
            timestamp=reading.timestamp,
        )


class DeviceStatusOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str
    last_seen: Union[datetime, str] = Field(..., alias="lastSeen")

    @classmethod
    def from_status(cls, status: DeviceStatus) -> "DeviceStatusOut":
        return cls(status=status.status.value, last_seen=status.last_seen)


class SerialMessageOut(BaseModel):
    id: int
    message: str

    @classmethod
    def from_record(cls, record: SerialMessage) -> "SerialMessageOut":
        return cls(id=record.id, message=record.message)


class MessageOut(BaseModel):
    message: str


class StableFirmwareOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    firmware_version: str = Field(..., alias="firmwareVersion")


class CredentialsIn(BaseModel):
    # Optional so that missing fields get the 400 validation messages, not a 422.
    username: Optional[str] = None
    password: Optional[str] = None


class TokenOut(BaseModel):
    token: str


class HealthOut(BaseModel):
    status: str
    mqtt: Dict[str, Any]
