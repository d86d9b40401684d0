"""Suscriptor MQTT del gateway.

Usa aiomqtt (sobre paho-mqtt) para escuchar un único topic y entrega cada
mensaje al MessageDispatcher.

Estados:
  UNSUBSCRIBED → inicial, tras un fallo de conexión/suscripción o desconexión
  SUBSCRIBED   → tras el SUBACK del broker

No hay política de reconexión: un fallo se registra y el suscriptor queda en
UNSUBSCRIBED hasta que el proceso se reinicie.
"""

from __future__ import annotations

import asyncio
import logging
import ssl
from enum import Enum
from typing import Iterable, Optional, Tuple

import aiomqtt

from common.config import Settings
from .dispatcher import MessageDispatcher

logger = logging.getLogger(__name__)

TLS_PROTOCOLS = {"mqtts", "ssl", "tls", "wss"}
WEBSOCKET_PROTOCOLS = {"ws", "wss"}


def connection_options(protocol: str) -> Tuple[str, Optional[ssl.SSLContext]]:
    """Transport name and TLS context for an MQTT_BROKER_PROTOCOL value."""
    tls_context = ssl.create_default_context() if protocol in TLS_PROTOCOLS else None
    transport = "websockets" if protocol in WEBSOCKET_PROTOCOLS else "tcp"
    return transport, tls_context


class SubscriptionState(str, Enum):
    UNSUBSCRIBED = "unsubscribed"
    SUBSCRIBED = "subscribed"


def _subscription_refused(granted: Iterable) -> bool:
    """SUBACK return codes >= 0x80 mean the broker refused the subscription."""
    for code in granted:
        value = getattr(code, "value", code)
        try:
            if int(value) >= 0x80:
                return True
        except (TypeError, ValueError):
            return True
    return False


class MQTTSubscriber:
    """Suscriptor de un solo topic con dos estados."""

    def __init__(
        self,
        settings: Settings,
        dispatcher: MessageDispatcher,
        qos: int = 1,
    ):
        self.broker_host = settings.mqtt_host
        self.broker_port = settings.mqtt_port
        self.protocol = settings.mqtt_protocol
        self.username = settings.mqtt_username
        self.password = settings.mqtt_password
        self.topic = settings.mqtt_topic
        self.client_id = settings.mqtt_client_id
        self.qos = qos

        self._dispatcher = dispatcher
        self._state = SubscriptionState.UNSUBSCRIBED
        self._task: Optional[asyncio.Task] = None

    @property
    def state(self) -> SubscriptionState:
        return self._state

    @property
    def is_subscribed(self) -> bool:
        return self._state is SubscriptionState.SUBSCRIBED

    def _build_client(self) -> aiomqtt.Client:
        transport, tls_context = connection_options(self.protocol)
        return aiomqtt.Client(
            hostname=self.broker_host,
            port=self.broker_port,
            username=self.username,
            password=self.password,
            identifier=self.client_id,
            transport=transport,
            tls_context=tls_context,
        )

    def start(self) -> asyncio.Task:
        """Lanza el bucle de recepción como tarea del event loop actual."""
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run(), name="mqtt-subscriber")
        return self._task

    async def stop(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        self._state = SubscriptionState.UNSUBSCRIBED
        logger.info("[MQTT] Stopped. %s", self._dispatcher.stats)

    async def run(self) -> None:
        """Conecta, se suscribe y procesa mensajes hasta desconexión o cancelación."""
        logger.info(
            "[MQTT] Connecting to %s:%d protocol=%s",
            self.broker_host,
            self.broker_port,
            self.protocol,
        )
        try:
            async with self._build_client() as client:
                logger.info("[MQTT] Connected to MQTT broker")

                granted = await client.subscribe(self.topic, qos=self.qos)
                if _subscription_refused(granted):
                    logger.error("[MQTT] Failed to subscribe to topic %s: %s", self.topic, granted)
                    return

                self._state = SubscriptionState.SUBSCRIBED
                logger.info("[MQTT] Subscribed to topic: %s", self.topic)

                async for message in client.messages:
                    try:
                        await self._dispatcher.handle_message(message.topic.value, message.payload)
                    except Exception as e:
                        logger.exception("[MQTT] Processing error: %s", e)
        except aiomqtt.MqttError as e:
            logger.error("[MQTT] Client error: %s", e)
        finally:
            if self._state is SubscriptionState.SUBSCRIBED:
                logger.warning("[MQTT] Client disconnected")
            self._state = SubscriptionState.UNSUBSCRIBED

    def health_check(self) -> dict:
        return {
            "enabled": True,
            "state": self._state.value,
            "broker": f"{self.broker_host}:{self.broker_port}",
            "topic": self.topic,
            "stats": self._dispatcher.stats.to_dict(),
        }
