"""Validadores de payloads MQTT.

Valida los mensajes que publican los dispositivos en el topic del gateway.

Formato "data":
{
    "messageType": "data",
    "temperature": 21.5,
    "humidity": 40,
    "heaterState": "ON",
    "deviceID": "d1",
    "version": "1.0.0"
}

Formato "serial":
{
    "messageType": "serial",
    "serialMessage": "boot ok"
}
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

_TRUE_FLAGS = {"on", "true", "1"}
_FALSE_FLAGS = {"off", "false", "0"}


def coerce_state_flag(value: Any) -> Optional[int]:
    """Normaliza ON/OFF, booleanos y 0/1 a un flag entero.

    Valores no reconocidos se guardan como NULL.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        if value in (0, 1):
            return int(value)
        return None
    if isinstance(value, str):
        v = value.strip().lower()
        if v in _TRUE_FLAGS:
            return 1
        if v in _FALSE_FLAGS:
            return 0
    return None


class DataMessage(BaseModel):
    """Lectura de sensores. El esquema del dispositivo no trae estado del ventilador."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    temperature: Optional[float] = None
    humidity: Optional[float] = None
    heater_state: Optional[int] = Field(default=None, alias="heaterState")
    device_id: Optional[str] = Field(default=None, alias="deviceID")
    firmware_version: Optional[str] = Field(default=None, alias="version")

    @field_validator("heater_state", mode="before")
    @classmethod
    def validate_heater_state(cls, v):
        flag = coerce_state_flag(v)
        if v is not None and flag is None:
            logger.warning("[MQTT_VALIDATOR] Unrecognised heaterState=%r, storing NULL", v)
        return flag

    @field_validator("device_id", "firmware_version", mode="before")
    @classmethod
    def validate_text(cls, v):
        if v is None:
            return None
        return str(v)


class SerialPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    serial_message: str = Field(..., alias="serialMessage", min_length=1)
