from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from common.config import Settings, get_settings
from .endpoints import auth_router, firmware_router, health_router, telemetry_router
from .services import GatewayServices, build_services, start_services, stop_services

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    services: Optional[GatewayServices] = None,
) -> FastAPI:
    """Build the ASGI app.

    When ``services`` is given the caller owns their lifecycle; otherwise they
    are built, started and stopped by the app lifespan.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "services", None) is not None:
            yield
            return

        app.state.services = build_services(settings or get_settings())
        await start_services(app.state.services)
        logger.info("[API] Gateway started")
        try:
            yield
        finally:
            await stop_services(app.state.services)
            logger.info("[API] Gateway stopped")

    app = FastAPI(title="IoT Telemetry Gateway", version="0.1.0", lifespan=lifespan)
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(telemetry_router)
    app.include_router(firmware_router)
    return app


app = create_app()
