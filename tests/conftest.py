from __future__ import annotations

import contextlib
import dataclasses
from pathlib import Path

import httpx
import pytest
from sqlalchemy import text

from common.config import Settings
from common.db import create_engine
from gateway_api.firmware.object_storage import InMemoryObjectStorage
from gateway_api.main import create_app
from gateway_api.persistence.repository import TelemetryRepository
from gateway_api.persistence.schema_store import ensure_schema
from gateway_api.services import build_services


# =============================================================================
# SETTINGS
# =============================================================================

def make_settings(db_path: Path, **overrides) -> Settings:
    base = Settings(
        database_url=f"sqlite+aiosqlite:///{db_path}",
        mqtt_host=None,
        mqtt_port=1883,
        mqtt_protocol="mqtt",
        mqtt_username=None,
        mqtt_password=None,
        mqtt_topic="esp32",
        mqtt_client_id="gateway-tests",
        firmware_storage_backend="memory",
        firmware_storage_dir=str(db_path.parent / "firmware_store"),
        firebase_storage_bucket=None,
        firebase_credentials=None,
        jwt_secret="test-secret",
        jwt_expires_seconds=60,
        auth_required=False,
        port=3002,
        log_level="DEBUG",
    )
    return dataclasses.replace(base, **overrides)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return make_settings(tmp_path / "gateway.db")


# =============================================================================
# STORAGE
# =============================================================================

@pytest.fixture
async def bare_engine(settings):
    """Engine over an empty database file (no tables)."""
    engine = create_engine(settings)
    yield engine
    await engine.dispose()


@pytest.fixture
async def engine(bare_engine):
    await ensure_schema(bare_engine)
    return bare_engine


@pytest.fixture
def repository(engine) -> TelemetryRepository:
    return TelemetryRepository(engine)


@pytest.fixture
def storage() -> InMemoryObjectStorage:
    return InMemoryObjectStorage()


async def count_rows(engine, table: str) -> int:
    async with engine.connect() as conn:
        return int((await conn.execute(text(f"SELECT COUNT(*) FROM {table}"))).scalar_one())


async def insert_reading_aged(engine, seconds_ago: int, device_id: str = "d1") -> None:
    """Insert a reading whose stored timestamp lies ``seconds_ago`` in the past."""
    async with engine.begin() as conn:
        await conn.execute(
            text(
                """
                INSERT INTO SensorData (temperature, humidity, fanState, heaterState, deviceID, firmwareVersion, timestamp)
                VALUES (20.0, 50.0, 0, 0, :device_id, '1.0.0', datetime('now', :offset))
                """
            ),
            {"device_id": device_id, "offset": f"-{int(seconds_ago)} seconds"},
        )


async def insert_stable_pointer(engine, version) -> None:
    """Insert a stable-pointer row as-is, bypassing version validation."""
    async with engine.begin() as conn:
        await conn.execute(
            text("INSERT INTO LatestStableFirmware (firmwareVersion) VALUES (:version)"),
            {"version": version},
        )


# =============================================================================
# HTTP
# =============================================================================

@pytest.fixture
def services(settings, engine, storage):
    return build_services(settings, engine=engine, storage=storage)


@pytest.fixture
def app(settings, services):
    return create_app(settings, services)


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://gateway.test") as c:
        yield c


@pytest.fixture
def client_for(engine, storage):
    """Build a client over the shared engine with different settings."""

    @contextlib.asynccontextmanager
    async def _client_for(custom_settings: Settings):
        custom_app = create_app(
            custom_settings,
            build_services(custom_settings, engine=engine, storage=storage),
        )
        transport = httpx.ASGITransport(app=custom_app)
        async with httpx.AsyncClient(transport=transport, base_url="http://gateway.test") as c:
            yield c

    return _client_for
