"""Online/Offline status derived from the age of the last sensor reading."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union

from .persistence.records import SensorReading

DEVICE_ONLINE_THRESHOLD_SECONDS = 30
NOT_SEEN = "N/A"


class DeviceState(str, Enum):
    ONLINE = "Online"
    OFFLINE = "Offline"


@dataclass(frozen=True)
class DeviceStatus:
    status: DeviceState
    last_seen: Union[datetime, str]
    age_seconds: Optional[int] = None


def evaluate_liveness(reading: Optional[SensorReading], now: Optional[datetime] = None) -> DeviceStatus:
    """Compare the stored insert time of ``reading`` against ``now`` (UTC)."""
    if reading is None:
        return DeviceStatus(status=DeviceState.OFFLINE, last_seen=NOT_SEEN)

    if now is None:
        now = datetime.now(timezone.utc)

    age = int((now - reading.timestamp).total_seconds())
    if age <= DEVICE_ONLINE_THRESHOLD_SECONDS:
        return DeviceStatus(status=DeviceState.ONLINE, last_seen=reading.timestamp, age_seconds=age)
    return DeviceStatus(status=DeviceState.OFFLINE, last_seen=reading.timestamp, age_seconds=age)
