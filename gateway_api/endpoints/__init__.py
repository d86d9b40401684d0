"""Módulo de endpoints HTTP.

Contiene todos los endpoints de la API del gateway organizados por función.
"""

from .auth import router as auth_router
from .firmware import router as firmware_router
from .health import router as health_router
from .telemetry import router as telemetry_router

__all__ = [
    "auth_router",
    "firmware_router",
    "health_router",
    "telemetry_router",
]
