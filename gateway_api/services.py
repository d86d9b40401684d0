"""Composition root.

Builds every long-lived handle (storage engine, repository, object storage,
dispatcher, MQTT subscriber) once and passes them explicitly to the components
that need them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from common.config import Settings
from common.db import check_connection, create_engine
from .firmware.object_storage import ObjectStorage, build_object_storage
from .firmware.workflow import FirmwareWorkflow
from .mqtt.dispatcher import MessageDispatcher
from .mqtt.subscriber import MQTTSubscriber
from .persistence.repository import TelemetryRepository
from .persistence.schema_store import ensure_schema

logger = logging.getLogger(__name__)


@dataclass
class GatewayServices:
    settings: Settings
    engine: AsyncEngine
    repository: TelemetryRepository
    storage: ObjectStorage
    firmware: FirmwareWorkflow
    dispatcher: MessageDispatcher
    subscriber: Optional[MQTTSubscriber] = None


def build_services(
    settings: Settings,
    *,
    engine: Optional[AsyncEngine] = None,
    storage: Optional[ObjectStorage] = None,
) -> GatewayServices:
    engine = engine or create_engine(settings)
    storage = storage or build_object_storage(settings)

    repository = TelemetryRepository(engine)
    dispatcher = MessageDispatcher(repository)

    subscriber = None
    if settings.mqtt_enabled:
        subscriber = MQTTSubscriber(settings, dispatcher)
    else:
        logger.warning("[MQTT] MQTT_BROKER_URL not set - telemetry ingestion disabled")

    return GatewayServices(
        settings=settings,
        engine=engine,
        repository=repository,
        storage=storage,
        firmware=FirmwareWorkflow(repository, storage),
        dispatcher=dispatcher,
        subscriber=subscriber,
    )


async def start_services(services: GatewayServices) -> None:
    """Schema first, then the subscriber: nothing is ingested before the tables exist."""
    await check_connection(services.engine)
    await ensure_schema(services.engine)
    if services.subscriber is not None:
        services.subscriber.start()


async def stop_services(services: GatewayServices) -> None:
    if services.subscriber is not None:
        await services.subscriber.stop()
    await services.engine.dispose()
    logger.info("[DB] Engine disposed")
