"""Dispatcher de mensajes MQTT.

Parsea el payload, lo clasifica por ``messageType`` y lo enruta a la capa de
persistencia:

  "data"   → TelemetryRepository.insert_reading (fanState siempre 0)
  "serial" → TelemetryRepository.insert_serial_message
  otro     → log y descarte

Ningún error sale de aquí hacia el transporte: JSON inválido, payloads que no
validan y fallos de BD se registran en el log y en las estadísticas.
"""

from __future__ import annotations

import json
import logging
import time
from enum import Enum
from typing import Any, Optional

from pydantic import ValidationError as PayloadValidationError

from ..errors import StorageError, ValidationError
from ..persistence.repository import TelemetryRepository
from .receiver_stats import DispatcherStats
from .validators import DataMessage, SerialPayload

logger = logging.getLogger(__name__)

DATA_MESSAGE = "data"
SERIAL_MESSAGE = "serial"

# The device payload has no fan field; readings are stored with the fan off.
DEFAULT_FAN_STATE = 0


class DispatchOutcome(str, Enum):
    STORED = "stored"
    INVALID = "invalid"
    UNKNOWN = "unknown"
    FAILED = "failed"


class MessageDispatcher:
    """Clasifica mensajes entrantes y los persiste."""

    def __init__(self, repository: TelemetryRepository):
        self._repository = repository
        self._stats = DispatcherStats()

    @property
    def stats(self) -> DispatcherStats:
        return self._stats

    async def handle_message(self, topic: str, payload: Any) -> DispatchOutcome:
        self._stats.received += 1
        self._stats.last_message_at = time.time()

        data = self._parse_json(payload, topic)
        if data is None:
            self._stats.invalid += 1
            return DispatchOutcome.INVALID

        message_type = data.get("messageType")
        if message_type == DATA_MESSAGE:
            outcome = await self._handle_data(data)
        elif message_type == SERIAL_MESSAGE:
            outcome = await self._handle_serial(data)
        else:
            logger.info("[DISPATCH] Unknown message type: %r (topic=%s)", message_type, topic)
            outcome = DispatchOutcome.UNKNOWN

        self._count(outcome)
        if outcome is DispatchOutcome.STORED and self._stats.stored % 100 == 0:
            logger.info("[DISPATCH] %s", self._stats)
        return outcome

    def _count(self, outcome: DispatchOutcome) -> None:
        if outcome is DispatchOutcome.STORED:
            self._stats.stored += 1
        elif outcome is DispatchOutcome.INVALID:
            self._stats.invalid += 1
        elif outcome is DispatchOutcome.UNKNOWN:
            self._stats.unknown += 1
        else:
            self._stats.failed += 1

    def _parse_json(self, payload: Any, topic: str) -> Optional[dict]:
        try:
            if isinstance(payload, (bytes, bytearray)):
                payload = payload.decode("utf-8")
            data = json.loads(payload)
        except (UnicodeDecodeError, TypeError, ValueError) as e:
            logger.warning("[DISPATCH] Failed to parse incoming message: %s (topic=%s)", e, topic)
            return None

        if not isinstance(data, dict):
            logger.warning("[DISPATCH] Payload is not a JSON object (topic=%s)", topic)
            return None
        return data

    async def _handle_data(self, data: dict) -> DispatchOutcome:
        try:
            message = DataMessage.model_validate(data)
        except PayloadValidationError as e:
            logger.warning("[DISPATCH] Invalid data message: %s", e)
            return DispatchOutcome.INVALID

        logger.debug(
            "[DISPATCH] Data message device=%s temperature=%s humidity=%s heater=%s version=%s",
            message.device_id,
            message.temperature,
            message.humidity,
            message.heater_state,
            message.firmware_version,
        )

        try:
            await self._repository.insert_reading(
                temperature=message.temperature,
                humidity=message.humidity,
                fan_state=DEFAULT_FAN_STATE,
                heater_state=message.heater_state,
                device_id=message.device_id,
                firmware_version=message.firmware_version,
            )
        except StorageError as e:
            logger.error("[DISPATCH] Reading not stored: %s", e)
            return DispatchOutcome.FAILED
        return DispatchOutcome.STORED

    async def _handle_serial(self, data: dict) -> DispatchOutcome:
        try:
            message = SerialPayload.model_validate(data)
        except PayloadValidationError as e:
            logger.warning("[DISPATCH] Invalid serial message: %s", e)
            return DispatchOutcome.INVALID

        logger.debug("[DISPATCH] Serial message: %s", message.serial_message)

        try:
            await self._repository.insert_serial_message(message.serial_message)
        except ValidationError as e:
            logger.warning("[DISPATCH] Serial message rejected: %s", e)
            return DispatchOutcome.INVALID
        except StorageError as e:
            logger.error("[DISPATCH] Serial message not stored: %s", e)
            return DispatchOutcome.FAILED
        return DispatchOutcome.STORED
