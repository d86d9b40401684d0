"""JWT access tokens (HS256, PyJWT)."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt

from ..persistence.records import Credential

ALGORITHM = "HS256"


def issue_token(credential: Credential, secret: str, expires_seconds: int) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        "id": credential.id,
        "username": credential.username,
        "iat": now,
        "exp": now + timedelta(seconds=expires_seconds),
    }
    return jwt.encode(claims, secret, algorithm=ALGORITHM)


def decode_token(token: str, secret: str) -> Dict[str, Any]:
    """Raises jwt.InvalidTokenError (expired, bad signature, malformed)."""
    return jwt.decode(token, secret, algorithms=[ALGORITHM])
