from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional


def parse_db_timestamp(value: Any) -> datetime:
    """SQLite hands back CURRENT_TIMESTAMP as 'YYYY-MM-DD HH:MM:SS' text in UTC."""
    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(str(value))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _optional_int(value: Any) -> Optional[int]:
    return int(value) if value is not None else None


def _optional_float(value: Any) -> Optional[float]:
    return float(value) if value is not None else None


@dataclass(frozen=True)
class SensorReading:
    id: int
    temperature: Optional[float]
    humidity: Optional[float]
    fan_state: Optional[int]
    heater_state: Optional[int]
    device_id: Optional[str]
    firmware_version: Optional[str]
    timestamp: datetime

    @classmethod
    def from_row(cls, row) -> "SensorReading":
        return cls(
            id=int(row.id),
            temperature=_optional_float(row.temperature),
            humidity=_optional_float(row.humidity),
            fan_state=_optional_int(row.fanState),
            heater_state=_optional_int(row.heaterState),
            device_id=row.deviceID,
            firmware_version=row.firmwareVersion,
            timestamp=parse_db_timestamp(row.timestamp),
        )


@dataclass(frozen=True)
class SerialMessage:
    id: int
    message: str

    @classmethod
    def from_row(cls, row) -> "SerialMessage":
        return cls(id=int(row.id), message=str(row.message))


@dataclass(frozen=True)
class StableFirmwarePointer:
    id: int
    firmware_version: Optional[str]
    timestamp: datetime

    @classmethod
    def from_row(cls, row) -> "StableFirmwarePointer":
        return cls(
            id=int(row.id),
            firmware_version=row.firmwareVersion,
            timestamp=parse_db_timestamp(row.timestamp),
        )


@dataclass(frozen=True)
class Credential:
    id: int
    username: str
    password_hash: str

    @classmethod
    def from_row(cls, row) -> "Credential":
        return cls(id=int(row.id), username=str(row.username), password_hash=str(row.password))
