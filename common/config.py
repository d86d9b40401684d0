from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def _default_env_file() -> str:
    return str(Path.cwd() / ".env")


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    database_url: str

    mqtt_host: Optional[str]
    mqtt_port: int
    mqtt_protocol: str
    mqtt_username: Optional[str]
    mqtt_password: Optional[str]
    mqtt_topic: str
    mqtt_client_id: str

    firmware_storage_backend: str
    firmware_storage_dir: str
    firebase_storage_bucket: Optional[str]
    firebase_credentials: Optional[str]

    jwt_secret: Optional[str]
    jwt_expires_seconds: int
    auth_required: bool

    port: int
    log_level: str

    @property
    def mqtt_enabled(self) -> bool:
        return bool(self.mqtt_host)


def get_settings() -> Settings:
    # Load env file (if present) but still allow overriding via real environment variables.
    env_file = os.getenv("GATEWAY_ENV_FILE", _default_env_file())
    if env_file and Path(env_file).exists():
        load_dotenv(env_file, override=False)

    return Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite+aiosqlite:///data.db"),
        mqtt_host=os.getenv("MQTT_BROKER_URL") or None,
        mqtt_port=int(os.getenv("MQTT_BROKER_PORT", "8883")),
        mqtt_protocol=os.getenv("MQTT_BROKER_PROTOCOL", "mqtts").strip().lower(),
        mqtt_username=os.getenv("MQTT_USERNAME") or None,
        mqtt_password=os.getenv("MQTT_PASSWORD") or None,
        mqtt_topic=os.getenv("MQTT_TOPIC", "esp32"),
        mqtt_client_id=os.getenv("MQTT_CLIENT_ID", "telemetry-gateway"),
        firmware_storage_backend=os.getenv("FIRMWARE_STORAGE_BACKEND", "local").strip().lower(),
        firmware_storage_dir=os.getenv("FIRMWARE_STORAGE_DIR", "firmware_store"),
        firebase_storage_bucket=os.getenv("FIREBASE_STORAGE_BUCKET") or None,
        firebase_credentials=os.getenv("FIREBASE_CREDENTIALS") or None,
        jwt_secret=os.getenv("JWT_SECRET") or None,
        jwt_expires_seconds=int(os.getenv("JWT_EXPIRES_SECONDS", "60")),
        auth_required=_env_flag("GATEWAY_AUTH_REQUIRED"),
        port=int(os.getenv("PORT", "3002")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
