"""Simulador de dispositivo: publica lecturas aleatorias en el topic del gateway.

Uso:
    python scripts/device_simulator.py --interval 5 --device-id device123
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import random

import aiomqtt

from common.config import Settings, get_settings
from gateway_api.mqtt.subscriber import connection_options

logger = logging.getLogger(__name__)


def build_data_message(device_id: str, version: str) -> dict:
    return {
        "messageType": "data",
        "temperature": round(random.uniform(15, 45), 2),
        "humidity": round(random.uniform(30, 80), 2),
        "heaterState": random.choice(["ON", "OFF"]),
        "deviceID": device_id,
        "version": version,
    }


def build_client(settings: Settings) -> aiomqtt.Client:
    transport, tls_context = connection_options(settings.mqtt_protocol)
    return aiomqtt.Client(
        hostname=settings.mqtt_host,
        port=settings.mqtt_port,
        username=settings.mqtt_username,
        password=settings.mqtt_password,
        transport=transport,
        tls_context=tls_context,
    )


async def run(args: argparse.Namespace) -> None:
    settings = get_settings()
    if not settings.mqtt_host:
        raise SystemExit("MQTT_BROKER_URL is not set")

    async with build_client(settings) as client:
        logger.info("Connected to MQTT broker, publishing to %s", settings.mqtt_topic)

        if args.boot_message:
            await client.publish(
                settings.mqtt_topic,
                json.dumps({"messageType": "serial", "serialMessage": args.boot_message}),
                qos=1,
            )

        sent = 0
        while args.count <= 0 or sent < args.count:
            message = build_data_message(args.device_id, args.version)
            await client.publish(settings.mqtt_topic, json.dumps(message), qos=1)
            sent += 1
            logger.info("Published %s", message)
            await asyncio.sleep(args.interval)


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )

    p = argparse.ArgumentParser(description="Publish simulated device telemetry over MQTT")
    p.add_argument("--device-id", default="device123")
    p.add_argument("--version", default="1.0.0")
    p.add_argument("--interval", type=float, default=5.0)
    p.add_argument("--count", type=int, default=0, help="messages to send (0 = forever)")
    p.add_argument("--boot-message", default=None, help="publish one serial line first")
    args = p.parse_args()

    try:
        asyncio.run(run(args))
    except aiomqtt.MqttError as e:
        logger.error("MQTT client error: %s", e)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
