"""IoT telemetry gateway: MQTT ingestion, SQLite persistence and HTTP API."""
