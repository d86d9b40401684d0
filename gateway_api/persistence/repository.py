"""Typed reads and writes over the gateway tables.

Every method runs a single statement in its own transaction, so each insert is
all-or-nothing and no operation spans more than one entity. SQLAlchemy errors
are translated into the gateway error taxonomy at this boundary.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from ..errors import ConflictError, StorageError, ValidationError
from ..firmware.versions import validate_firmware_version
from .records import Credential, SensorReading, SerialMessage, StableFirmwarePointer

logger = logging.getLogger(__name__)

MAX_SERIAL_MESSAGES = 10


class TelemetryRepository:
    """Persistence layer for readings, serial lines, stable pointer and users."""

    def __init__(self, engine: AsyncEngine):
        self._engine = engine

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    # ------------------------------------------------------------------
    # SensorData
    # ------------------------------------------------------------------

    async def insert_reading(
        self,
        temperature: Optional[float],
        humidity: Optional[float],
        fan_state: Optional[int],
        heater_state: Optional[int],
        device_id: Optional[str],
        firmware_version: Optional[str],
    ) -> None:
        try:
            async with self._engine.begin() as conn:
                await conn.execute(
                    text(
                        """
                        INSERT INTO SensorData (temperature, humidity, fanState, heaterState, deviceID, firmwareVersion)
                        VALUES (:temperature, :humidity, :fan_state, :heater_state, :device_id, :firmware_version)
                        """
                    ),
                    {
                        "temperature": temperature,
                        "humidity": humidity,
                        "fan_state": None if fan_state is None else int(fan_state),
                        "heater_state": heater_state,
                        "device_id": device_id,
                        "firmware_version": firmware_version,
                    },
                )
        except SQLAlchemyError as e:
            logger.error("[DB] Failed to insert sensor data: %s", e)
            raise StorageError("insert_reading", e) from e

    async def last_reading(self) -> Optional[SensorReading]:
        try:
            async with self._engine.connect() as conn:
                row = (
                    await conn.execute(
                        text(
                            """
                            SELECT id, temperature, humidity, fanState, heaterState,
                                   deviceID, firmwareVersion, timestamp
                            FROM SensorData
                            ORDER BY id DESC
                            LIMIT 1
                            """
                        )
                    )
                ).fetchone()
        except SQLAlchemyError as e:
            logger.error("[DB] Failed to fetch last sensor record: %s", e)
            raise StorageError("last_reading", e) from e

        if not row:
            return None
        return SensorReading.from_row(row)

    # ------------------------------------------------------------------
    # SerialMessages
    # ------------------------------------------------------------------

    async def insert_serial_message(self, message: Optional[str]) -> None:
        if not isinstance(message, str) or not message:
            raise ValidationError("Serial message must be a non-empty string")

        try:
            async with self._engine.begin() as conn:
                await conn.execute(
                    text("INSERT INTO SerialMessages (message) VALUES (:message)"),
                    {"message": message},
                )
        except SQLAlchemyError as e:
            logger.error("[DB] Failed to insert serial message: %s", e)
            raise StorageError("insert_serial_message", e) from e

    async def latest_serial_messages(self, limit: int = MAX_SERIAL_MESSAGES) -> List[SerialMessage]:
        limit = max(0, min(int(limit), MAX_SERIAL_MESSAGES))
        try:
            async with self._engine.connect() as conn:
                rows = (
                    await conn.execute(
                        text(
                            """
                            SELECT id, message
                            FROM SerialMessages
                            ORDER BY id DESC
                            LIMIT :limit
                            """
                        ),
                        {"limit": limit},
                    )
                ).fetchall()
        except SQLAlchemyError as e:
            logger.error("[DB] Failed to fetch serial messages: %s", e)
            raise StorageError("latest_serial_messages", e) from e

        return [SerialMessage.from_row(r) for r in rows]

    # ------------------------------------------------------------------
    # LatestStableFirmware
    # ------------------------------------------------------------------

    async def set_stable_firmware_version(self, version: str) -> None:
        # Callers validate too; nothing malformed may reach the table.
        validate_firmware_version(version)

        try:
            async with self._engine.begin() as conn:
                await conn.execute(
                    text(
                        """
                        INSERT INTO LatestStableFirmware (firmwareVersion, timestamp)
                        VALUES (:version, CURRENT_TIMESTAMP)
                        """
                    ),
                    {"version": version},
                )
        except SQLAlchemyError as e:
            logger.error("[DB] Failed to set latest stable firmware version: %s", e)
            raise StorageError("set_stable_firmware_version", e) from e

        logger.info("[DB] Latest stable firmware version set to %s", version)

    async def latest_stable_firmware_version(self) -> Optional[StableFirmwarePointer]:
        try:
            async with self._engine.connect() as conn:
                row = (
                    await conn.execute(
                        text(
                            """
                            SELECT id, firmwareVersion, timestamp
                            FROM LatestStableFirmware
                            ORDER BY timestamp DESC, id DESC
                            LIMIT 1
                            """
                        )
                    )
                ).fetchone()
        except SQLAlchemyError as e:
            logger.error("[DB] Failed to fetch latest stable firmware version: %s", e)
            raise StorageError("latest_stable_firmware_version", e) from e

        if not row:
            return None
        return StableFirmwarePointer.from_row(row)

    # ------------------------------------------------------------------
    # users
    # ------------------------------------------------------------------

    async def create_user(self, username: str, password_hash: str) -> None:
        try:
            async with self._engine.begin() as conn:
                await conn.execute(
                    text("INSERT INTO users (username, password) VALUES (:username, :password)"),
                    {"username": username, "password": password_hash},
                )
        except IntegrityError as e:
            logger.info("[DB] Username already exists: %s", username)
            raise ConflictError("Username already exists") from e
        except SQLAlchemyError as e:
            logger.error("[DB] Failed to create user: %s", e)
            raise StorageError("create_user", e) from e

    async def find_user_by_username(self, username: str) -> Optional[Credential]:
        try:
            async with self._engine.connect() as conn:
                row = (
                    await conn.execute(
                        text("SELECT id, username, password FROM users WHERE username = :username"),
                        {"username": username},
                    )
                ).fetchone()
        except SQLAlchemyError as e:
            logger.error("[DB] Failed to look up user: %s", e)
            raise StorageError("find_user_by_username", e) from e

        if not row:
            return None
        return Credential.from_row(row)

    async def count_users(self) -> int:
        try:
            async with self._engine.connect() as conn:
                return int((await conn.execute(text("SELECT COUNT(*) FROM users"))).scalar_one())
        except SQLAlchemyError as e:
            raise StorageError("count_users", e) from e
