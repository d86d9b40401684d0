"""SQLite schema setup.

Creates the four gateway tables if they don't exist. Safe to call multiple
times. Each table is created in its own transaction so one failure does not
keep the others from becoming available.
"""

from __future__ import annotations

import logging
from typing import Dict

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)


SENSOR_DATA_TABLE = "SensorData"
SERIAL_MESSAGES_TABLE = "SerialMessages"
STABLE_FIRMWARE_TABLE = "LatestStableFirmware"
USERS_TABLE = "users"


TABLE_DDL: Dict[str, str] = {
    SENSOR_DATA_TABLE: """
        CREATE TABLE IF NOT EXISTS SensorData (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            temperature REAL,
            humidity REAL,
            fanState INTEGER,
            heaterState INTEGER,
            deviceID TEXT,
            firmwareVersion TEXT,
            timestamp DATETIME DEFAULT CURRENT_TIMESTAMP
        )
    """,
    SERIAL_MESSAGES_TABLE: """
        CREATE TABLE IF NOT EXISTS SerialMessages (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            message TEXT NOT NULL CHECK (length(message) > 0)
        )
    """,
    STABLE_FIRMWARE_TABLE: """
        CREATE TABLE IF NOT EXISTS LatestStableFirmware (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            firmwareVersion TEXT,
            timestamp DATETIME DEFAULT CURRENT_TIMESTAMP
        )
    """,
    USERS_TABLE: """
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            username TEXT UNIQUE,
            password TEXT
        )
    """,
}


async def ensure_schema(engine: AsyncEngine) -> Dict[str, bool]:
    """Create every table that is missing.

    Returns:
        Map table name -> True if the table is available after the call.
    """
    logger.info("[SCHEMA] Ensuring schema exists")

    results: Dict[str, bool] = {}
    for table_name, ddl in TABLE_DDL.items():
        try:
            async with engine.begin() as conn:
                await conn.execute(text(ddl))
            results[table_name] = True
            logger.info("[SCHEMA] %s table created successfully or already exists", table_name)
        except Exception:
            results[table_name] = False
            logger.exception("[SCHEMA] Failed to create %s table", table_name)

    return results
