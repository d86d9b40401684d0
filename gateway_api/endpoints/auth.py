"""User registration and login."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ..auth.passwords import hash_password, verify_password
from ..auth.tokens import issue_token
from ..auth.validators import (
    INVALID_PASSWORD_MESSAGE,
    INVALID_USERNAME_MESSAGE,
    validate_password,
    validate_username,
)
from ..dependencies import get_services
from ..errors import ConflictError, StorageError
from ..schemas import CredentialsIn, MessageOut, TokenOut
from ..services import GatewayServices

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
async def register(payload: CredentialsIn, services: GatewayServices = Depends(get_services)):
    logger.info("[AUTH] Registering user %s", payload.username)

    if not validate_username(payload.username):
        raise HTTPException(status_code=400, detail=INVALID_USERNAME_MESSAGE)
    if not validate_password(payload.password):
        raise HTTPException(status_code=400, detail=INVALID_PASSWORD_MESSAGE)

    try:
        await services.repository.create_user(payload.username, hash_password(payload.password))
    except ConflictError:
        raise HTTPException(status_code=400, detail="Username already exists")
    except StorageError:
        raise HTTPException(status_code=500, detail="Internal Server Error")

    return MessageOut(message="User registered successfully")


@router.post("/login", response_model=TokenOut)
async def login(payload: CredentialsIn, services: GatewayServices = Depends(get_services)):
    if not payload.username or not payload.password:
        raise HTTPException(status_code=400, detail="Invalid credentials")

    try:
        user = await services.repository.find_user_by_username(payload.username)
    except StorageError:
        raise HTTPException(status_code=500, detail="Internal Server Error")

    if user is None or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=400, detail="Invalid credentials")

    secret = services.settings.jwt_secret
    if not secret:
        logger.error("[AUTH] JWT_SECRET not configured - cannot issue tokens")
        raise HTTPException(status_code=500, detail="Server misconfiguration")

    return TokenOut(token=issue_token(user, secret, services.settings.jwt_expires_seconds))
