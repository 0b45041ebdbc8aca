"""
Fire-and-forget audit event publishing for Gateway.

Events are advisory: nothing here may block or fail a client response.
Callers hand a message to :meth:`EventPublisher.publish`, which only
enqueues it. A single background worker owns the Kafka producer and
drains the queue; when the queue is full the message is dropped.
"""

import asyncio
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Set

from kafka import KafkaProducer
from kafka.admin import KafkaAdminClient, NewTopic
from kafka.errors import KafkaError, TopicAlreadyExistsError

from shared.logging import get_logger
from shared.metrics import MetricsCollector


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class EventMessage:
    """A single event owned by the publisher until its send attempt ends."""
    topic: str
    payload: Dict[str, Any]
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class EventPublisher:
    """Publishes gateway events to Kafka from a background worker."""

    def __init__(
        self,
        bootstrap_servers: str,
        enabled: bool = True,
        max_queue_size: int = 1000,
        send_timeout: float = 10.0,
        shutdown_grace: float = 5.0,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.bootstrap_servers = bootstrap_servers
        self.enabled = enabled
        self.send_timeout = send_timeout
        self.shutdown_grace = shutdown_grace
        self.metrics = metrics
        self.logger = get_logger("gateway.events.publisher")

        self.queue: "asyncio.Queue[EventMessage]" = asyncio.Queue(maxsize=max_queue_size)
        self.producer: Optional[KafkaProducer] = None
        self._declared_topics: Set[str] = set()
        self._worker_task: Optional[asyncio.Task] = None
        self._inflight: Optional[asyncio.Future] = None
        self.stats = {"published": 0, "failed": 0, "dropped": 0}

    @property
    def running(self) -> bool:
        return self._worker_task is not None and not self._worker_task.done()

    async def start(self):
        """Start the background publish worker."""
        if not self.enabled:
            self.logger.info("Event publishing disabled")
            return
        if self.running:
            return
        self._worker_task = asyncio.create_task(self._publish_worker())
        self.logger.info("Event publisher started", bootstrap_servers=self.bootstrap_servers)

    async def stop(self):
        """Drain what fits in the grace period, then stop the worker and close the producer."""
        if self._worker_task:
            try:
                await asyncio.wait_for(self.queue.join(), timeout=self.shutdown_grace)
            except asyncio.TimeoutError:
                self.logger.warning("Event queue not drained before shutdown", pending=self.queue.qsize())

            self._worker_task.cancel()
            try:
                await self._worker_task
            except asyncio.CancelledError:
                pass
            self._worker_task = None

        # The send thread outlives the cancelled worker and may still create a producer
        if self._inflight is not None:
            await self._wait_inflight()

        await asyncio.get_running_loop().run_in_executor(None, self._close_producer)
        self.logger.info("Event publisher stopped", **self.stats)

    def publish(self, topic: str, payload: Dict[str, Any]) -> None:
        """Queue an event for publishing. Never blocks and never raises."""
        if not self.enabled:
            return

        message = EventMessage(topic=topic, payload=payload)
        try:
            self.queue.put_nowait(message)
        except asyncio.QueueFull:
            self.stats["dropped"] += 1
            self.logger.warning("Event queue full, dropping event", topic=topic)
            if self.metrics:
                self.metrics.increment_counter("events_dropped_total", topic=topic)

    def status(self) -> str:
        """Dependency status for the health endpoint."""
        if not self.enabled:
            return "disabled"
        return "ok" if self.running else "error"

    async def _publish_worker(self):
        """Background worker sending queued events one at a time."""
        loop = asyncio.get_running_loop()
        while True:
            message = await self.queue.get()
            try:
                self._inflight = loop.run_in_executor(None, self._send, message)
                await asyncio.shield(self._inflight)
                self._inflight = None
                self.stats["published"] += 1
                self._record(message.topic, "success")
                self.logger.debug("Event published", topic=message.topic)
            except Exception as e:
                self.stats["failed"] += 1
                self._record(message.topic, "failure")
                self._inflight = None
                self.logger.error("Failed to publish event", topic=message.topic, error=str(e))
                await loop.run_in_executor(None, self._close_producer)
            finally:
                self.queue.task_done()

    async def _wait_inflight(self) -> None:
        inflight, self._inflight = self._inflight, None
        done, _ = await asyncio.wait([inflight], timeout=self.send_timeout)
        if not done:
            self.logger.warning("In-flight event send still running at shutdown")
        elif inflight.exception() is not None:
            self.logger.error("In-flight event send failed at shutdown", error=str(inflight.exception()))

    def _send(self, message: EventMessage) -> None:
        """Blocking send of one message; runs in a worker thread."""
        if self.producer is None:
            self.producer = self._create_producer()

        self._declare_topic(message.topic)

        future = self.producer.send(
            topic=message.topic,
            value=message.payload,
            timestamp_ms=int(message.timestamp.timestamp() * 1000),
        )
        future.get(timeout=self.send_timeout)

    def _create_producer(self) -> KafkaProducer:
        return KafkaProducer(
            bootstrap_servers=self.bootstrap_servers,
            value_serializer=lambda x: json.dumps(x).encode('utf-8'),
            acks=1,
            retries=0,
            linger_ms=10,
        )

    def _declare_topic(self, topic: str) -> None:
        """Create the topic once per process; an existing topic is fine."""
        if topic in self._declared_topics:
            return

        admin = KafkaAdminClient(bootstrap_servers=self.bootstrap_servers)
        try:
            admin.create_topics([NewTopic(name=topic, num_partitions=1, replication_factor=1)])
        except TopicAlreadyExistsError:
            pass
        finally:
            admin.close()
        self._declared_topics.add(topic)

    def _close_producer(self) -> None:
        if self.producer is None:
            return
        producer, self.producer = self.producer, None
        try:
            producer.close(timeout=self.send_timeout)
        except KafkaError as e:
            self.logger.warning("Error closing Kafka producer", error=str(e))

    def _record(self, topic: str, outcome: str) -> None:
        if self.metrics:
            self.metrics.increment_counter("events_published_total", topic=topic, outcome=outcome)
