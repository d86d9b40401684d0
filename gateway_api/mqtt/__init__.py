"""Ingesta MQTT del gateway.

Estructura:
- validators.py: esquemas de los payloads de dispositivo
- dispatcher.py: parseo, clasificación y persistencia
- subscriber.py: cliente aiomqtt de un solo topic
- receiver_stats.py: contadores
"""

from .dispatcher import DispatchOutcome, MessageDispatcher
from .receiver_stats import DispatcherStats
from .subscriber import MQTTSubscriber, SubscriptionState

__all__ = [
    "DispatchOutcome",
    "MessageDispatcher",
    "DispatcherStats",
    "MQTTSubscriber",
    "SubscriptionState",
]
