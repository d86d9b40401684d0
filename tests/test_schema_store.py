"""
Tests for the SQLite schema bootstrap.

Run: pytest tests/test_schema_store.py -v
"""

from sqlalchemy import text

from gateway_api.persistence import schema_store
from gateway_api.persistence.schema_store import TABLE_DDL, ensure_schema


async def _tables(engine) -> set:
    async with engine.connect() as conn:
        rows = (await conn.execute(text("SELECT name FROM sqlite_master WHERE type = 'table'"))).fetchall()
    return {r[0] for r in rows}


class TestEnsureSchema:
    async def test_creates_every_table(self, bare_engine):
        results = await ensure_schema(bare_engine)

        assert results == {name: True for name in TABLE_DDL}
        assert set(TABLE_DDL) <= await _tables(bare_engine)

    async def test_is_idempotent(self, bare_engine):
        await ensure_schema(bare_engine)
        second = await ensure_schema(bare_engine)

        assert all(second.values())

    async def test_existing_rows_survive_second_run(self, bare_engine):
        await ensure_schema(bare_engine)
        async with bare_engine.begin() as conn:
            await conn.execute(text("INSERT INTO SerialMessages (message) VALUES ('kept')"))

        await ensure_schema(bare_engine)

        async with bare_engine.connect() as conn:
            count = (await conn.execute(text("SELECT COUNT(*) FROM SerialMessages"))).scalar_one()
        assert count == 1

    async def test_one_failure_does_not_block_the_others(self, bare_engine, monkeypatch):
        monkeypatch.setitem(schema_store.TABLE_DDL, "SerialMessages", "CREATE TABLE broken (")

        results = await ensure_schema(bare_engine)

        assert results["SerialMessages"] is False
        assert results["SensorData"] is True
        assert results["LatestStableFirmware"] is True
        assert results["users"] is True

        tables = await _tables(bare_engine)
        assert "SerialMessages" not in tables
        assert {"SensorData", "LatestStableFirmware", "users"} <= tables
