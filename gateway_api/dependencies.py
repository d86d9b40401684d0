"""FastAPI dependencies backed by the services held on ``app.state``."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import jwt
from fastapi import Depends, Header, HTTPException, Request

from .auth.tokens import decode_token
from .firmware.workflow import FirmwareWorkflow
from .persistence.repository import TelemetryRepository
from .services import GatewayServices

logger = logging.getLogger(__name__)


def get_services(request: Request) -> GatewayServices:
    return request.app.state.services


def get_repository(services: GatewayServices = Depends(get_services)) -> TelemetryRepository:
    return services.repository


def get_firmware(services: GatewayServices = Depends(get_services)) -> FirmwareWorkflow:
    return services.firmware


def require_token(
    authorization: Optional[str] = Header(default=None),
    services: GatewayServices = Depends(get_services),
) -> Optional[Dict[str, Any]]:
    """Bearer JWT guard, enforced only when GATEWAY_AUTH_REQUIRED is on."""
    settings = services.settings
    if not settings.auth_required:
        return None

    if not authorization:
        raise HTTPException(status_code=401, detail="Access denied")

    if not settings.jwt_secret:
        logger.error("[AUTH] GATEWAY_AUTH_REQUIRED is on but JWT_SECRET is not set")
        raise HTTPException(status_code=500, detail="Server misconfiguration")

    token = authorization.removeprefix("Bearer ").strip()
    try:
        return decode_token(token, settings.jwt_secret)
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=400, detail="Invalid token")
