"""Health and smoke-test endpoints."""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from ..dependencies import get_services
from ..schemas import HealthOut
from ..services import GatewayServices

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthOut)
def health(services: GatewayServices = Depends(get_services)):
    """Process liveness plus the MQTT subscriber state."""
    subscriber = services.subscriber
    mqtt = subscriber.health_check() if subscriber is not None else {"enabled": False}
    return HealthOut(status="ok", mqtt=mqtt)


@router.get("/test", response_class=PlainTextResponse)
def test_endpoint():
    return "Hello, this is a test endpoint!"
