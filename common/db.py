from __future__ import annotations

import logging

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from .config import Settings


logger = logging.getLogger(__name__)


def create_engine(settings: Settings) -> AsyncEngine:
    """Build the single storage handle owned by the process composition root."""
    url = make_url(settings.database_url)

    # Log básico de parámetros de conexión (sin contraseña)
    logger.info(
        "[DB] Creating engine driver=%s database=%s",
        url.drivername,
        url.database,
    )

    return create_async_engine(url, pool_pre_ping=True)


async def check_connection(engine: AsyncEngine) -> bool:
    """Run a trivial query so the logs show whether the store is reachable."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("[DB] Connection test OK")
        return True
    except Exception:
        logger.exception("[DB] Connection test FAILED")
        return False
