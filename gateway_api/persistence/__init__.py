"""Relational persistence for the gateway.

- schema_store.py: table creation on startup
- records.py: typed rows
- repository.py: reads and writes
"""

from .records import Credential, SensorReading, SerialMessage, StableFirmwarePointer
from .repository import MAX_SERIAL_MESSAGES, TelemetryRepository
from .schema_store import TABLE_DDL, ensure_schema

__all__ = [
    "Credential",
    "SensorReading",
    "SerialMessage",
    "StableFirmwarePointer",
    "MAX_SERIAL_MESSAGES",
    "TelemetryRepository",
    "TABLE_DDL",
    "ensure_schema",
]
