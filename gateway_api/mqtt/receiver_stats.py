"""Statistics for the MQTT message dispatcher."""

from __future__ import annotations


class DispatcherStats:
    """Contadores del dispatcher MQTT."""

    def __init__(self):
        self.received = 0
        self.stored = 0
        self.invalid = 0
        self.unknown = 0
        self.failed = 0
        self.last_message_at: float = 0

    def __str__(self) -> str:
        return (
            f"Stats: received={self.received} stored={self.stored} "
            f"invalid={self.invalid} unknown={self.unknown} failed={self.failed}"
        )

    def to_dict(self) -> dict:
        """Convert stats to dictionary."""
        return {
            "received": self.received,
            "stored": self.stored,
            "invalid": self.invalid,
            "unknown": self.unknown,
            "failed": self.failed,
            "last_message_at": self.last_message_at,
        }
