"""MQTT broadcaster for queue entry lifecycle events.

Each successful queue mutation is published as JSON on a per-job subtopic,
``<topic>/<job_reference>``, so subscribers can follow one job
(``print-queue/events/job-1``) or the whole queue (``print-queue/events/+``).
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from typing_extensions import override

import paho.mqtt.client as mqtt

from .schemas import QueueEntry, QueueStatus
from .store import now_ms

logger = logging.getLogger(__name__)


class QueueEvent(str, Enum):
    """Event types published for queue entries."""

    queued = "queued"
    in_progress = "in-progress"
    completed = "completed"
    failed = "failed"

    @classmethod
    def for_status(cls, status: QueueStatus) -> QueueEvent:
        """Event announcing that an entry reached ``status``."""
        if status is QueueStatus.pending:
            return cls.queued
        return cls(status.value)


def entry_event_payload(event: QueueEvent, entry: QueueEntry) -> dict[str, Any]:
    """Build the JSON-serializable payload for a queue entry event."""
    return {
        "job_reference": entry.job_reference,
        "event_type": event.value,
        "timestamp": now_ms(),
        "position": entry.position,
        "status": entry.status.value,
        "updated_at": entry.updated_at,
    }


@runtime_checkable
class QueueEventBroadcaster(Protocol):
    """Publishes queue entry events; failures are reported, never raised."""

    def connect(self) -> bool: ...

    def disconnect(self) -> None: ...

    def publish_entry_event(self, event: QueueEvent, entry: QueueEntry) -> bool: ...


class MQTTBroadcaster(QueueEventBroadcaster):
    """Queue event broadcaster backed by a paho MQTT client."""

    def __init__(self, broker: str, port: int, topic: str, qos: int = 1):
        self.broker: str = broker
        self.port: int = port
        self.topic: str = topic.rstrip("/")
        self.qos: int = qos
        self.client: mqtt.Client | None = None
        self.connected: bool = False

    def topic_for(self, job_reference: str) -> str:
        return f"{self.topic}/{job_reference}"

    @override
    def connect(self) -> bool:
        try:
            self.client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2)
            self.client.on_connect = self._on_connect
            self.client.on_disconnect = self._on_disconnect
            _ = self.client.connect(self.broker, self.port, keepalive=60)
            _ = self.client.loop_start()
            self.connected = True
            logger.info(f"Publishing queue events to {self.broker}:{self.port}/{self.topic}")
            return True
        except Exception as e:
            logger.warning(f"Failed to connect to MQTT broker: {e}")
            return False

    @override
    def disconnect(self) -> None:
        if self.client:
            _ = self.client.loop_stop()
            _ = self.client.disconnect()
            self.connected = False

    @override
    def publish_entry_event(self, event: QueueEvent, entry: QueueEntry) -> bool:
        if not self.connected or not self.client:
            return False
        try:
            payload = json.dumps(entry_event_payload(event, entry))
            result = self.client.publish(self.topic_for(entry.job_reference), payload, qos=self.qos)
            return result.rc == mqtt.MQTT_ERR_SUCCESS
        except Exception as e:
            logger.error(f"Error publishing {event.value} event for job {entry.job_reference}: {e}")
            return False

    def _on_connect(
        self,
        client: mqtt.Client,
        userdata: Any,
        flags: Any,
        reason_code: Any,
        properties: Any = None,
    ) -> None:
        self.connected = reason_code == 0

    def _on_disconnect(
        self,
        client: mqtt.Client,
        userdata: Any,
        flags: Any,
        reason_code: Any,
        properties: Any = None,
    ) -> None:
        self.connected = False


class NoOpBroadcaster(QueueEventBroadcaster):
    """Broadcaster used when events are disabled; accepts and drops every event."""

    @override
    def connect(self) -> bool:
        return True

    @override
    def disconnect(self) -> None:
        pass

    @override
    def publish_entry_event(self, event: QueueEvent, entry: QueueEntry) -> bool:
        return True


_broadcaster: QueueEventBroadcaster | None = None


def get_broadcaster(broadcast_type: str, broker: str, port: int, topic: str) -> QueueEventBroadcaster:
    """Get or create the process-global broadcaster."""
    global _broadcaster
    if _broadcaster is not None:
        return _broadcaster

    if broadcast_type == "mqtt":
        _broadcaster = MQTTBroadcaster(broker, port, topic)
    else:
        _broadcaster = NoOpBroadcaster()
    _ = _broadcaster.connect()

    return _broadcaster


def shutdown_broadcaster() -> None:
    """Disconnect and forget the process-global broadcaster."""
    global _broadcaster
    if _broadcaster:
        _broadcaster.disconnect()
        _broadcaster = None
